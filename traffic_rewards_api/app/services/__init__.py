"""
Service layer.

Each service encapsulates the business logic of one entity kind and
works against the counters and stores of an ``AppContext``, so API
handlers never touch storage directly.
"""
