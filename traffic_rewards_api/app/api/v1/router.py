"""
Top-level router for version 1 of the API.

Aggregates the domain routers (reports, profiles, info) under one
router that ``main.create_app`` mounts at ``/api/v1``.
"""

from fastapi import APIRouter

from .endpoints import info, profiles, reports

router = APIRouter()

router.include_router(reports.router, prefix="/reports", tags=["reports"])
router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
router.include_router(info.router, prefix="/info", tags=["info"])
