"""
Postboard Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
Why:   Credential store for login and the source of the author name/avatar
       copied onto posts and comments.
Who:   Read by AuthService and PostService; written only by registration.

Table Design Rationale:
    - UUID primary key: non-sequential, safe to embed in tokens
    - email: unique, stored lower-cased so lookups are case-insensitive
    - password_hash: bcrypt output (salt embedded), never serialized
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base


class User(Base):
    """A registered account. Immutable once created, as far as this API is concerned."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    # bcrypt hash, 60 chars; the column is wider in case the scheme changes
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    avatar_url: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
        default=None,
    )

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
