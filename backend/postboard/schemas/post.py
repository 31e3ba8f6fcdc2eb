"""
Postboard Backend — Post Schemas
==================================

What:  Pydantic models for post bodies, the embedded like/comment entries,
       and every response shape of the posts API.
Why:   Post rows embed likes and comments as JSON lists. LikeEntry and
       CommentEntry fix the shape of those entries: PostService builds them
       before writing and validates them when reading, so a malformed entry
       never reaches a client.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from postboard.schemas.common import as_utc


class TextRequest(BaseModel):
    """
    Body of POST /api/posts and POST /api/posts/comment/{id}.
    Whitespace-only text counts as empty.
    """
    text: str = Field(default="", validate_default=True)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Text is required")
        return v


class LikeEntry(BaseModel):
    user_id: uuid.UUID


class CommentEntry(BaseModel):
    id: uuid.UUID
    text: str
    author_name: str
    author_avatar: Optional[str] = None
    author_id: uuid.UUID
    date: datetime

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class PostResponse(BaseModel):
    """
    What:  Full representation of a post, likes and comments included.
    Who:   Returned by create, list, and get.
    """
    id: uuid.UUID
    text: str
    author_name: str
    author_avatar: Optional[str] = None
    author_id: uuid.UUID
    date: datetime
    likes: List[LikeEntry] = Field(default_factory=list)
    comments: List[CommentEntry] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class MessageResponse(BaseModel):
    """Plain confirmation body, e.g. {"msg": "Post removed"}."""
    msg: str
