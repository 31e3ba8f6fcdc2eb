"""
Postboard Backend — Post Route Handlers
=========================================

What:  Post CRUD, likes and comments. Every route requires a token.
How:   The router-level dependency runs the auth guard before any handler;
       handlers that need the identity declare it again (FastAPI caches the
       dependency per request, so the token is verified once).

Path ids are plain strings; PostService parses them so a malformed id is
reported as 404 "Not a valid ID" rather than a 422.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.dependencies import get_current_identity, require_body
from postboard.schemas.auth import Identity
from postboard.schemas.common import ErrorResponse, ValidationErrorResponse
from postboard.schemas.post import (
    CommentEntry,
    LikeEntry,
    MessageResponse,
    PostResponse,
    TextRequest,
)
from postboard.services.post_service import post_service

router = APIRouter(
    prefix="/api/posts",
    tags=["Posts"],
    dependencies=[Depends(get_current_identity)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)

_NOT_FOUND = {404: {"description": "Post not found or not a valid ID", "model": ErrorResponse}}
_CONFLICT = {409: {"description": "Post modified concurrently", "model": ErrorResponse}}


@router.post(
    "",
    response_model=PostResponse,
    responses={400: {"description": "Text is required", "model": ValidationErrorResponse}},
    summary="Create a post",
)
async def create_post(
    data: Optional[TextRequest] = Body(default=None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    data = require_body(TextRequest, data)
    return await post_service.create_post(db, identity, data)


@router.get("", response_model=List[PostResponse], summary="List all posts, newest first")
async def list_posts(db: AsyncSession = Depends(get_db_session)) -> List[PostResponse]:
    return await post_service.list_posts(db)


@router.get("/{post_id}", response_model=PostResponse, responses=_NOT_FOUND, summary="Get a post")
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.get_post(db, post_id)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete your own post",
)
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await post_service.delete_post(db, identity, post_id)


@router.put(
    "/like/{post_id}",
    response_model=List[LikeEntry],
    responses={400: {"description": "Post already liked", "model": ErrorResponse},
               **_NOT_FOUND, **_CONFLICT},
    summary="Like a post",
)
async def like_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeEntry]:
    return await post_service.like_post(db, identity, post_id)


@router.put(
    "/unlike/{post_id}",
    response_model=List[LikeEntry],
    responses={400: {"description": "Post has not yet been liked", "model": ErrorResponse},
               **_NOT_FOUND, **_CONFLICT},
    summary="Remove your like from a post",
)
async def unlike_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeEntry]:
    return await post_service.unlike_post(db, identity, post_id)


@router.post(
    "/comment/{post_id}",
    response_model=List[CommentEntry],
    responses={400: {"description": "Text is required", "model": ValidationErrorResponse},
               **_NOT_FOUND, **_CONFLICT},
    summary="Comment on a post",
)
async def add_comment(
    post_id: str,
    data: Optional[TextRequest] = Body(default=None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentEntry]:
    data = require_body(TextRequest, data)
    return await post_service.add_comment(db, identity, post_id, data)


@router.delete(
    "/comment/{post_id}/{comment_id}",
    response_model=List[CommentEntry],
    responses={404: {"description": "Post or comment not found", "model": ErrorResponse},
               **_CONFLICT},
    summary="Delete your own comment",
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentEntry]:
    return await post_service.delete_comment(db, identity, post_id, comment_id)
