"""
Postboard Backend — Auth Service
==================================

What:  Login, registration, and current-user lookup.
Why:   Keeps credential handling (bcrypt, token issuance, the rule that
       "unknown email" and "wrong password" look identical) out of the routes.
How:   bcrypt runs in a worker thread via asyncio.to_thread so hashing does
       not block the event loop; tokens come from an injected TokenService.

Login Flow:
    LoginRequest (already validated)
      → SELECT user WHERE email = :email
      → bcrypt.checkpw(password, user.password_hash)
      → TokenService.issue(user.id)

    Unknown email still runs one bcrypt comparison against a dummy hash, so
    response timing does not reveal whether the account exists.
"""

import asyncio
import hashlib
import logging
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.config import settings
from postboard.exceptions import (
    DatabaseError,
    InvalidCredentialsError,
    UserExistsError,
)
from postboard.models.user import User
from postboard.schemas.auth import (
    Identity,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from postboard.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)


# ── Password Hashing ──────────────────────────────────────────────────────

def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def gravatar_url(email: str) -> str:
    """Default avatar for a new account: Gravatar, falling back to the mystery-man image."""
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?s=200&r=pg&d=mm"


class AuthService:
    """
    Authentication workflows.

    Holds only its collaborators (token service, bcrypt cost) and a cached
    dummy hash, so a single instance serves all requests.
    """

    def __init__(self, tokens: TokenService, bcrypt_rounds: int = 10):
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash: Optional[str] = None

    def dummy_hash(self) -> str:
        """
        Hash compared against when the email is unknown. Built lazily with the
        same cost as real password hashes; blocking, so call it off the loop.
        """
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("postboard-timing-equalizer", self.bcrypt_rounds)
        return self._dummy_hash

    def _check_against_dummy(self, password: str) -> bool:
        return check_password(password, self.dummy_hash())

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def get_current_user(self, db: AsyncSession, identity: Identity) -> UserResponse:
        """
        Return the authenticated user's profile, without the password hash.

        Raises:
            DatabaseError: the token is valid but its user no longer exists
                           (reported as a server error, 500)
        """
        try:
            user = await db.get(User, identity.id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", identity.id, str(e))
            raise DatabaseError(context={"user_id": str(identity.id)})

        if user is None:
            logger.error("Token for user %s is valid but the user does not exist", identity.id)
            raise DatabaseError(context={"user_id": str(identity.id), "reason": "user missing"})

        return UserResponse.model_validate(user)

    async def login(self, db: AsyncSession, credentials: LoginRequest) -> TokenResponse:
        """
        Exchange email + password for a token.

        Raises:
            InvalidCredentialsError: unknown email or wrong password; the two
                                     cases are indistinguishable to the caller
            DatabaseError: lookup failed
        """
        user = await self._find_by_email(db, credentials.email)

        if user is None:
            await asyncio.to_thread(self._check_against_dummy, credentials.password)
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        matches = await asyncio.to_thread(check_password, credentials.password, user.password_hash)
        if not matches:
            logger.info("Login failed for user %s: password mismatch", user.id)
            raise InvalidCredentialsError()

        logger.info("User %s logged in", user.id)
        return TokenResponse(token=self.tokens.issue(user.id))

    async def register(self, db: AsyncSession, data: RegisterRequest) -> TokenResponse:
        """
        Create an account and return a token for it.

        Raises:
            UserExistsError: the email is already registered
            DatabaseError: insert failed for any other reason
        """
        if await self._find_by_email(db, data.email) is not None:
            raise UserExistsError()

        password_hash = await asyncio.to_thread(hash_password, data.password, self.bcrypt_rounds)
        user = User(
            name=data.name,
            email=data.email,
            password_hash=password_hash,
            avatar_url=gravatar_url(data.email),
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Another request registered the same email between lookup and insert
            await db.rollback()
            raise UserExistsError()
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Registered user %s", user.id)
        return TokenResponse(token=self.tokens.issue(user.id))


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService(tokens=token_service, bcrypt_rounds=settings.bcrypt_rounds)
