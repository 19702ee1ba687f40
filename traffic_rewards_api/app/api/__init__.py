"""
API package containing versioned routes and shared dependencies.

``deps`` holds the FastAPI dependencies that build services from the
application context and translate service errors into HTTP errors.
"""
