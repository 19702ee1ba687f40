"""
API endpoints for user profiles.

``POST /profiles/{user_id}/points`` creates the profile on first use;
``GET`` never does and answers 404 for users that have not earned
anything yet.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from traffic_rewards_api.app.api.deps import get_profile_service, http_error
from traffic_rewards_api.app.core.codec import U64_MAX
from traffic_rewards_api.app.core.errors import AppError
from traffic_rewards_api.app.schemas.profile import PointsAccrual, UserProfile
from traffic_rewards_api.app.services.profile_service import ProfileService


router = APIRouter()

UserId = Annotated[int, Path(ge=0, le=U64_MAX, description="User identifier")]


@router.post("/{user_id}/points", response_model=UserProfile, summary="Credit points to a user")
async def update_user_profile(
    data: PointsAccrual,
    user_id: UserId,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Add points and one contribution, creating the profile if needed."""
    try:
        return await service.accrue(user_id, data.points)
    except AppError as e:
        raise http_error(e)


@router.get("/{user_id}", response_model=UserProfile, summary="Get a user profile")
async def get_user_profile(
    user_id: UserId,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    try:
        return await service.get_profile(user_id)
    except AppError as e:
        raise http_error(e)


@router.delete("/{user_id}", response_model=UserProfile, summary="Delete a user profile")
async def delete_user_profile(
    user_id: UserId,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    try:
        return await service.delete_profile(user_id)
    except AppError as e:
        raise http_error(e)
