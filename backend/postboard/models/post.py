"""
Postboard Backend — Post SQLAlchemy Model
===========================================

What:  ORM model representing the `posts` table.
Why:   A post is stored as one document: its likes and comments are embedded
       JSON lists on the row instead of child tables, so every handler reads
       and writes a post as a whole.
Who:   Used exclusively by PostService.

Embedded list shapes (validated by LikeEntry / CommentEntry in schemas.post):
    likes:    [{"user_id": "<uuid>"}, ...]                     newest first
    comments: [{"id", "text", "author_name", "author_avatar",
                "author_id", "date"}, ...]                       newest first

Concurrency:
    Like/comment handlers do read → modify list → write row. `version` is a
    SQLAlchemy version counter: the UPDATE only matches the row version that
    was read, so a concurrent writer raises StaleDataError instead of
    overwriting the other request's change.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base


class Post(Base):
    """
    A user's post.

    Invariants:
        - author_id never changes after creation
        - likes holds at most one entry per user_id
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Denormalized author fields ────────────────────────────────────────
    # Copied from the user at creation time; not refreshed if the user changes
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_avatar: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # No foreign key: users are never deleted through this API
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    likes: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    comments: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # ListPosts sorts newest first
    __table_args__ = (
        Index("idx_posts_date", date.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, author_id={self.author_id}, "
            f"likes={len(self.likes or [])}, comments={len(self.comments or [])})>"
        )
