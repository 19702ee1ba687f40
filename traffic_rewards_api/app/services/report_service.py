"""
Business logic for traffic reports.

Creating a report stores it under a freshly issued ID and then rewards
the reporter through ``ProfileService.accrue``.  The two writes go to
different stores and are not atomic as a unit: the report is persisted
first and is not rolled back if the accrual fails.  The failure is
logged and re-raised so the caller learns about it, but the report
remains readable under its ID.
"""

import logging
import time
from typing import Optional

from ..core.config import settings
from ..core.context import AppContext
from ..core.errors import REPORT, AppError, NotFound
from ..schemas.report import TrafficReport
from .profile_service import ProfileService

logger = logging.getLogger(__name__)


class ReportService:
    """Service for creating, reading, updating and deleting reports."""

    def __init__(
        self,
        context: AppContext,
        profiles: ProfileService,
        reward_points: Optional[int] = None,
    ) -> None:
        self.counter = context.report_counter
        self.store = context.reports
        self.profiles = profiles
        if reward_points is None:
            reward_points = settings.report_reward_points
        if reward_points < 0:
            raise ValueError(f"Report reward must not be negative, got {reward_points}")
        self.reward_points = reward_points

    async def create_report(
        self,
        description: str,
        location: str,
        severity: int,
        reporter_id: int,
    ) -> TrafficReport:
        """Store a new report and reward its reporter.

        Field bounds are validated before an ID is issued, so a rejected
        report does not consume an ID.
        """
        draft = TrafficReport(
            id=0,
            reporter_id=reporter_id,
            description=description,
            location=location,
            timestamp=time.time_ns(),
            severity=severity,
            resolved=False,
        )
        report = draft.model_copy(update={"id": self.counter.next()})
        self.store.insert(report.id, report)
        logger.info("User %s submitted report %s", reporter_id, report.id)

        try:
            await self.profiles.accrue(reporter_id, self.reward_points)
        except AppError as e:
            logger.warning(
                "Report %s stored but rewarding user %s failed: %s",
                report.id, reporter_id, e,
            )
            raise
        return report

    async def get_report(self, report_id: int) -> TrafficReport:
        report = self.store.get(report_id)
        if report is None:
            raise NotFound(REPORT, report_id)
        return report

    async def update_report(
        self,
        report_id: int,
        description: Optional[str] = None,
        location: Optional[str] = None,
        severity: Optional[int] = None,
    ) -> TrafficReport:
        """Change the supplied fields of a report and return it.

        ``id``, ``reporter_id``, ``timestamp`` and ``resolved`` are never
        touched.
        """
        report = self.store.get(report_id)
        if report is None:
            raise NotFound(REPORT, report_id)
        changes = {}
        if description is not None:
            changes["description"] = description
        if location is not None:
            changes["location"] = location
        if severity is not None:
            changes["severity"] = severity
        # Re-validate so the text bounds hold for the stored record.
        report = TrafficReport(**{**report.model_dump(), **changes})
        self.store.insert(report_id, report)
        logger.info("Report %s updated (%s)", report_id, ", ".join(changes) or "no changes")
        return report

    async def delete_report(self, report_id: int) -> TrafficReport:
        """Remove a report and return it.  Accrued points are kept."""
        report = self.store.remove(report_id)
        if report is None:
            raise NotFound(REPORT, report_id)
        logger.info("Report %s deleted", report_id)
        return report
