"""
Shared FastAPI dependencies and error translation for the endpoints.
"""

from fastapi import Depends, HTTPException, status

from ..core.config import settings
from ..core.context import AppContext, get_context
from ..core.errors import AlreadyExists, AppError, NotFound
from ..services.profile_service import ProfileService
from ..services.report_service import ReportService


def get_profile_service(context: AppContext = Depends(get_context)) -> ProfileService:
    return ProfileService(context)


def get_report_service(
    context: AppContext = Depends(get_context),
    profiles: ProfileService = Depends(get_profile_service),
) -> ReportService:
    return ReportService(context, profiles)


def get_reporter_id() -> int:
    """Identity of the caller submitting a report.

    Authentication is not wired in; every report is attributed to the
    configured default reporter.
    """
    return settings.default_reporter_id


def http_error(error: AppError) -> HTTPException:
    """Translate a service error into an HTTP error with a typed body."""
    if isinstance(error, NotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, AlreadyExists):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail=error.to_dict())
