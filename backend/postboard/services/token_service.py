"""
Postboard Backend — Token Service
===================================

What:  Issues and verifies signed, time-limited identity tokens (JWT).
Why:   Lets clients prove who they are on every request without resending
       the password.
How:   PyJWT with an HMAC secret. Payload: {"user": {"id": "<uuid>"}, "iat", "exp"}.

The secret, algorithm and lifetime are constructor arguments. The module-level
`token_service` is built once from settings at import; tests build their own
instances with their own secret.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import pydantic

from postboard.config import Settings, settings
from postboard.exceptions import InvalidTokenError
from postboard.schemas.auth import Identity



class TokenService:
    """
    Signs and verifies identity tokens.

    Attributes:
        secret:     HMAC signing key
        algorithm:  JWT algorithm, HS256 by default
        expires_in: token lifetime in seconds (default 100 hours)
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: int = 360_000):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenService":
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            expires_in=config.jwt_expires_in,
        )

    def issue(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> str:
        """
        Produce a token for `user_id`, valid for `expires_in` seconds from `now`.

        `now` exists so tests can mint already-expired tokens.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user": {"id": str(user_id)},
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expires_in),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Decode and validate a token.

        Returns:
            Identity of the user embedded in the token

        Raises:
            InvalidTokenError: missing, malformed, expired, wrongly signed, or
                               lacking a well-formed user id claim
        """
        if not token:
            raise InvalidTokenError(context={"reason": "missing"})

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(context={"reason": "expired"})
        except jwt.PyJWTError as e:
            raise InvalidTokenError(context={"reason": type(e).__name__})

        user = payload.get("user")
        if not isinstance(user, dict):
            raise InvalidTokenError(context={"reason": "missing user claim"})

        try:
            return Identity(id=user.get("id"))
        except pydantic.ValidationError:
            raise InvalidTokenError(context={"reason": "malformed user id"})


# Built once at import; see module docstring
token_service = TokenService.from_settings(settings)
