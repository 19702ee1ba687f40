"""
Pydantic schemas for user profiles.

A profile tracks the rewards a user has earned by submitting reports.
Its ``id`` is the user's external identifier rather than a counter
value.  ``route_tokens`` is part of the stored layout but no operation
changes it yet.
"""

from pydantic import BaseModel, Field, field_validator

from ..core.codec import U64_MAX, RecordCodec

PROFILE_MAX_SIZE = 512
USERNAME_MAX_BYTES = 64


class UserProfile(BaseModel):
    """A stored user profile."""

    id: int = Field(..., ge=0, le=U64_MAX)
    username: str = Field(..., examples=["User42"])
    points: int = Field(0, ge=0, le=U64_MAX)
    contributions: int = Field(0, ge=0, le=U64_MAX, description="Number of accruals, one per report")
    route_tokens: int = Field(0, ge=0, le=U64_MAX)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        if len(v.encode("utf-8")) > USERNAME_MAX_BYTES:
            raise ValueError(f"username must be {USERNAME_MAX_BYTES} bytes or fewer when UTF-8 encoded")
        return v

    @classmethod
    def default_for(cls, user_id: int) -> "UserProfile":
        """Profile materialised the first time a user earns points."""
        return cls(id=user_id, username=f"User{user_id}")


class PointsAccrual(BaseModel):
    """Schema for crediting points to a user."""

    points: int = Field(..., ge=0, le=U64_MAX, examples=[10])


PROFILE_CODEC = RecordCodec(
    UserProfile,
    fixed_fields=[
        ("id", "Q"),
        ("points", "Q"),
        ("contributions", "Q"),
        ("route_tokens", "Q"),
    ],
    text_fields=["username"],
    max_size=PROFILE_MAX_SIZE,
)
