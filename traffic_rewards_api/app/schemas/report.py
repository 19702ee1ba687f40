"""
Pydantic schemas for traffic reports.

``TrafficReport`` is both the stored record and the API response.
``TrafficReportCreate`` and ``TrafficReportUpdate`` are request bodies.
Text fields are bounded by UTF-8 byte length so that every report fits
its 1024-byte storage slot.  ``severity`` is declared on a 1 to 5 scale
but, like the rest of the service, only its one-byte storage bound is
enforced here.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..core.codec import U64_MAX, RecordCodec

REPORT_MAX_SIZE = 1024
DESCRIPTION_MAX_BYTES = 768
LOCATION_MAX_BYTES = 192


def _check_bytes(value: Optional[str], limit: int, name: str) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > limit:
        raise ValueError(f"{name} must be {limit} bytes or fewer when UTF-8 encoded")
    return value


class TrafficReportBase(BaseModel):
    description: str = Field(..., examples=["Accident blocking the left lane"])
    location: str = Field(..., examples=["Ring road, exit 12"])
    severity: int = Field(..., ge=0, le=255, examples=[3], description="Severity on a 1 to 5 scale")

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        return _check_bytes(v, DESCRIPTION_MAX_BYTES, "description")

    @field_validator("location")
    @classmethod
    def check_location(cls, v: str) -> str:
        return _check_bytes(v, LOCATION_MAX_BYTES, "location")


class TrafficReportCreate(TrafficReportBase):
    """Schema for submitting a report.  The reporter comes from the caller's identity."""


class TrafficReportUpdate(BaseModel):
    """Schema for a partial update.  Omitted fields keep their value."""

    description: Optional[str] = None
    location: Optional[str] = None
    severity: Optional[int] = Field(None, ge=0, le=255)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_bytes(v, DESCRIPTION_MAX_BYTES, "description")

    @field_validator("location")
    @classmethod
    def check_location(cls, v: Optional[str]) -> Optional[str]:
        return _check_bytes(v, LOCATION_MAX_BYTES, "location")


class TrafficReport(TrafficReportBase):
    """A stored traffic report."""

    id: int = Field(..., ge=0, le=U64_MAX)
    reporter_id: int = Field(..., ge=0, le=U64_MAX)
    timestamp: int = Field(..., ge=0, le=U64_MAX, description="Creation time, ns since epoch")
    resolved: bool = False


REPORT_CODEC = RecordCodec(
    TrafficReport,
    fixed_fields=[
        ("id", "Q"),
        ("reporter_id", "Q"),
        ("timestamp", "Q"),
        ("severity", "B"),
        ("resolved", "?"),
    ],
    text_fields=["description", "location"],
    max_size=REPORT_MAX_SIZE,
)
