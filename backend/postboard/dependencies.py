"""
Postboard Backend — Route Dependencies
========================================

What:  FastAPI dependency that authenticates a request from its token header.
Why:   Every protected route declares `identity: Identity = Depends(get_current_identity)`
       and receives a verified identity, or the request never reaches it.
How:   Reads `x-auth-token` (or `Authorization: Bearer <token>`), verifies it
       with the TokenService, stores the identity on request.state.user.

Failure modes (both → 401):
    no token supplied  → "No token, authorization denied"
    token rejected     → "Token is not valid"

require_body() gives request bodies a uniform shape for missing input.
"""

import logging
from typing import Optional, Type, TypeVar

import pydantic
from fastapi import Depends, Header, Request
from fastapi.exceptions import RequestValidationError

from postboard.exceptions import InvalidTokenError, UnauthorizedError
from postboard.schemas.auth import Identity
from postboard.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"

BodyT = TypeVar("BodyT", bound=pydantic.BaseModel)


def get_token_service() -> TokenService:
    """Dependency hook for the token service; tests override it."""
    return token_service


def extract_token(x_auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if x_auth_token:
        return x_auth_token.strip()
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


async def get_current_identity(
    request: Request,
    x_auth_token: Optional[str] = Header(default=None, alias=TOKEN_HEADER),
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    token = extract_token(x_auth_token, authorization)
    if not token:
        raise UnauthorizedError()

    try:
        identity = tokens.verify(token)
    except InvalidTokenError as e:
        logger.info("Rejected token on %s %s: %s", request.method, request.url.path,
                    e.context.get("reason", "invalid"))
        raise UnauthorizedError(message="Token is not valid", context=e.context)

    request.state.user = identity
    return identity


def require_body(model: Type[BodyT], body: Optional[BodyT]) -> BodyT:
    """
    Validate a missing or null JSON body as `{}`.

    Routes declare their body as optional and pass it through here, so an
    empty request reports each field ("Password is required", ...) instead
    of a single "Field required" for the body as a whole.
    """
    if body is not None:
        return body
    try:
        return model.model_validate({})
    except pydantic.ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        )
