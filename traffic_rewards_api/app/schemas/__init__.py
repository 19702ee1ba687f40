"""
Pydantic schema definitions.

The stored record models double as API responses; each module also
declares the binary codec used to persist its record kind.
"""
