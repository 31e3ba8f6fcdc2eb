"""
Postboard Backend — Shared Response Schemas
=============================================

What:  Error and health payloads shared by every router, plus the datetime
       normalizer used by every response that carries a date.
Why:   Listed in each route's `responses=` so the OpenAPI docs show the
       exact error shapes clients have to handle.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def as_utc(value: datetime) -> datetime:
    """
    SQLite hands back naive datetimes; Postgres hands back aware ones.
    Naive values are stored UTC, so both come out as UTC-aware.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ErrorDetail(BaseModel):
    msg: str = Field(description="Human-readable error description")
    param: Optional[str] = Field(default=None, description="Offending field, if any")
    location: Optional[str] = Field(default=None, description="Where the field was read from")


class ValidationErrorResponse(BaseModel):
    """
    400 body for input validation and credential failures.

    Example:
        {"errors": [{"msg": "Invalid Credentials"}]}
    """
    errors: List[ErrorDetail]


class ErrorResponse(BaseModel):
    """
    Body of every other error (401, 404, 409, 500).

    Example:
        {"msg": "Post already liked"}
    """
    msg: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
