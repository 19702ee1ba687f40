"""
API endpoints for traffic reports.

Submitting a report credits the reporter with reward points.  Reading,
updating and deleting address a report by its numeric ID; an unknown
ID yields 404 with ``{"error": "NotFound", ...}`` as detail.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from traffic_rewards_api.app.api.deps import get_report_service, get_reporter_id, http_error
from traffic_rewards_api.app.core.codec import U64_MAX
from traffic_rewards_api.app.core.errors import AppError
from traffic_rewards_api.app.schemas.report import (
    TrafficReport,
    TrafficReportCreate,
    TrafficReportUpdate,
)
from traffic_rewards_api.app.services.report_service import ReportService


router = APIRouter()

ReportId = Annotated[int, Path(ge=0, le=U64_MAX, description="Report identifier")]


@router.post(
    "/",
    response_model=TrafficReport,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a traffic report",
)
async def add_traffic_report(
    data: TrafficReportCreate,
    reporter_id: int = Depends(get_reporter_id),
    service: ReportService = Depends(get_report_service),
) -> TrafficReport:
    """Create a report and reward the reporter.

    If the reward cannot be stored the report is still kept and a 500
    error is returned.
    """
    try:
        return await service.create_report(
            description=data.description,
            location=data.location,
            severity=data.severity,
            reporter_id=reporter_id,
        )
    except AppError as e:
        raise http_error(e)


@router.get("/{report_id}", response_model=TrafficReport, summary="Get a traffic report")
async def get_traffic_report(
    report_id: ReportId,
    service: ReportService = Depends(get_report_service),
) -> TrafficReport:
    try:
        return await service.get_report(report_id)
    except AppError as e:
        raise http_error(e)


@router.patch("/{report_id}", response_model=TrafficReport, summary="Update a traffic report")
async def update_traffic_report(
    data: TrafficReportUpdate,
    report_id: ReportId,
    service: ReportService = Depends(get_report_service),
) -> TrafficReport:
    """Change description, location and/or severity.  Omitted fields are kept."""
    try:
        return await service.update_report(
            report_id,
            description=data.description,
            location=data.location,
            severity=data.severity,
        )
    except AppError as e:
        raise http_error(e)


@router.delete("/{report_id}", response_model=TrafficReport, summary="Delete a traffic report")
async def delete_traffic_report(
    report_id: ReportId,
    service: ReportService = Depends(get_report_service),
) -> TrafficReport:
    """Delete a report and return it.  The reporter keeps the points earned."""
    try:
        return await service.delete_report(report_id)
    except AppError as e:
        raise http_error(e)
