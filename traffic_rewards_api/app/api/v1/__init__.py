"""
Version 1 of the Traffic Rewards API.

Breaking changes to the HTTP surface belong in a new version
subpackage (e.g. ``v2``) so existing clients keep working.
"""
