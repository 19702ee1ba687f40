"""
Core infrastructure: configuration, logging, durable storage and the
error taxonomy shared by every layer.
"""
