"""
Information endpoint for API v1.

Returns the service name and version together with storage
bookkeeping: the last issued report ID and how many reports and
profiles are currently stored.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from traffic_rewards_api.app.core.config import settings
from traffic_rewards_api.app.core.context import AppContext, get_context

router = APIRouter()


@router.get("/", response_model=Dict[str, Any])
async def get_info(context: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return {
        "name": settings.project_name,
        "version": settings.api_version,
        "last_report_id": context.report_counter.get(),
        "reports": len(context.reports),
        "profiles": len(context.profiles),
    }
