"""
Postboard Backend — Auth & User Schemas
=========================================

What:  Pydantic models for login, registration, tokens, and the user profile.
Why:   Request bodies are validated here so every service receives input that
       already passed the presence/format checks.
How:   Field validators raise ValueError with the user-facing message; the
       RequestValidationError handler in main.py unwraps that message into
       {"errors": [{"msg", "param", "location"}]}.

Fields default to "" and use validate_default=True so a missing field and an
empty one produce the same message.
"""

import uuid
from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator

from postboard.schemas.common import as_utc


def _normalize_email(value: str) -> str:
    try:
        result = validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please include a valid email")
    return result.normalized.lower()


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(BaseModel):
    """
    What:  Body of POST /api/auth.
    Rules: email must be syntactically valid; password must be non-empty.
           Nothing else is checked before the credential lookup.
    """
    email: str = Field(default="", validate_default=True)
    password: str = Field(default="", validate_default=True)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegisterRequest(BaseModel):
    """Body of POST /api/users."""
    name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    password: str = Field(default="", validate_default=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Please enter a password with 6 or more characters")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TokenResponse(BaseModel):
    """Returned by login and registration."""
    token: str = Field(description="Signed identity token, sent back in the x-auth-token header")


class UserResponse(BaseModel):
    """
    What:  Public view of a user.
    Why:   Built from the ORM object with from_attributes; password_hash is
           not a field here, so it can never leak into a response.
    """
    id: uuid.UUID
    name: str
    email: str
    avatar_url: Optional[str] = None
    date: datetime

    model_config = {"from_attributes": True}

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


# ══════════════════════════════════════════════════════════════════════════
# Request Context
# ══════════════════════════════════════════════════════════════════════════


class Identity(BaseModel):
    """
    The authenticated user attached to a request by the auth guard.
    Decoded from the token's {"user": {"id": ...}} claim.
    """
    id: uuid.UUID

    model_config = {"frozen": True}
