"""
Postboard Backend — User Registration Route
=============================================

What:  POST /api/users creates an account and logs it in.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.dependencies import require_body
from postboard.schemas.auth import RegisterRequest, TokenResponse
from postboard.schemas.common import ErrorResponse, ValidationErrorResponse
from postboard.services.auth_service import auth_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    response_model=TokenResponse,
    responses={
        400: {"description": "Validation failed or email taken", "model": ValidationErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a user",
)
async def register(
    data: Optional[RegisterRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    data = require_body(RegisterRequest, data)
    return await auth_service.register(db, data)
