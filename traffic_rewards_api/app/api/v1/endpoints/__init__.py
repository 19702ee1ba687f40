"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one domain (reports, profiles,
info); ``router.py`` at the package level aggregates them.
"""
