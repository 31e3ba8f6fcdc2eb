"""
Postboard Backend — Auth Route Handlers
=========================================

What:  GET /api/auth (who am I) and POST /api/auth (login).
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.dependencies import get_current_identity, require_body
from postboard.schemas.auth import Identity, LoginRequest, TokenResponse, UserResponse
from postboard.schemas.common import ErrorResponse, ValidationErrorResponse
from postboard.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.get(
    "",
    response_model=UserResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get the authenticated user",
)
async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await auth_service.get_current_user(db, identity)


@router.post(
    "",
    response_model=TokenResponse,
    responses={
        400: {"description": "Validation failed or invalid credentials",
              "model": ValidationErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Log in and get a token",
    description=(
        "Checks email and password and returns a signed token valid for 100 hours. "
        "An unknown email and a wrong password produce the same 400 response."
    ),
)
async def login(
    credentials: Optional[LoginRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    credentials = require_body(LoginRequest, credentials)
    return await auth_service.login(db, credentials)
