"""
Postboard Backend — Post Service
==================================

What:  Create/list/get/delete posts, like/unlike, add/delete comments.
Why:   Every ownership and existence rule of the posts API lives here, testable
       without HTTP.
How:   Each operation is one linear flow: parse id → fetch → check → mutate →
       flush. Likes and comments are embedded JSON lists on the post row; they
       are read into LikeEntry/CommentEntry models, changed as Python lists,
       and written back as a whole new list.

Identifiers:
    Path ids are parsed here, not by FastAPI, so a malformed post id becomes
    InvalidIdError (404 "Not a valid ID") instead of a 422 validation error.

Concurrent writes:
    Post rows are versioned (see models.post). Flushing a post that another
    request changed since we read it raises StaleDataError, reported to the
    client as ConflictError (409).
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from postboard.exceptions import (
    AlreadyLikedError,
    ConflictError,
    DatabaseError,
    ForbiddenError,
    InvalidIdError,
    NotFoundError,
    NotLikedError,
)
from postboard.models.post import Post
from postboard.models.user import User
from postboard.schemas.auth import Identity
from postboard.schemas.post import (
    CommentEntry,
    LikeEntry,
    MessageResponse,
    PostResponse,
    TextRequest,
)

logger = logging.getLogger(__name__)


def parse_id(value: str) -> uuid.UUID:
    """Parse a path id; anything that is not a UUID raises InvalidIdError."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidIdError(value)


class PostService:
    """
    Business logic for posts.

    Error Handling Strategy:
        Domain failures raise their own exception types and pass straight
        through. SQLAlchemy errors are logged with context and wrapped in
        DatabaseError so no SQL detail reaches the client.
    """

    # ── Store helpers ─────────────────────────────────────────────────────

    async def _get_post(self, db: AsyncSession, post_id: str) -> Post:
        pid = parse_id(post_id)
        try:
            post = await db.get(Post, pid)
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": post_id})
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id, message="Post not found")
        return post

    async def _get_author(self, db: AsyncSession, identity: Identity) -> User:
        try:
            user = await db.get(User, identity.id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", identity.id, str(e))
            raise DatabaseError(context={"user_id": str(identity.id)})
        if user is None:
            # Valid token for an account that no longer exists
            logger.error("User %s from token does not exist", identity.id)
            raise DatabaseError(context={"user_id": str(identity.id), "reason": "user missing"})
        return user

    async def _flush(self, db: AsyncSession, post: Post) -> None:
        # A failed flush rolls the session back and expires `post`; its
        # attributes cannot be loaded again until the rollback completes.
        post_id = str(post.id)
        try:
            await db.flush()
        except StaleDataError:
            logger.warning("Concurrent modification of post %s", post_id)
            raise ConflictError(context={"post_id": post_id})
        except SQLAlchemyError as e:
            logger.error("Database error saving post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": post_id})

    @staticmethod
    def _likes(post: Post) -> List[LikeEntry]:
        return [LikeEntry.model_validate(entry) for entry in post.likes or []]

    @staticmethod
    def _comments(post: Post) -> List[CommentEntry]:
        return [CommentEntry.model_validate(entry) for entry in post.comments or []]

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create_post(
        self, db: AsyncSession, identity: Identity, data: TextRequest
    ) -> PostResponse:
        """
        Create a post owned by `identity`, copying the author's name and
        avatar onto it.
        """
        author = await self._get_author(db, identity)
        post = Post(
            id=uuid.uuid4(),
            text=data.text,
            author_name=author.name,
            author_avatar=author.avatar_url,
            author_id=identity.id,
            date=datetime.now(timezone.utc),
            likes=[],
            comments=[],
        )
        db.add(post)
        await self._flush(db, post)
        logger.info("User %s created post %s", identity.id, post.id)
        return PostResponse.model_validate(post)

    async def list_posts(self, db: AsyncSession) -> List[PostResponse]:
        """All posts, newest first. No pagination."""
        try:
            result = await db.execute(select(Post).order_by(Post.date.desc()))
            posts = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})
        return [PostResponse.model_validate(post) for post in posts]

    async def get_post(self, db: AsyncSession, post_id: str) -> PostResponse:
        """
        Raises:
            InvalidIdError: post_id is not a well-formed id (→ 404)
            NotFoundError: no post with that id (→ 404)
        """
        post = await self._get_post(db, post_id)
        return PostResponse.model_validate(post)

    async def delete_post(
        self, db: AsyncSession, identity: Identity, post_id: str
    ) -> MessageResponse:
        """
        Delete a post. Only its author may do so.

        Raises:
            InvalidIdError / NotFoundError: as get_post
            ForbiddenError: identity is not the author; the post is left untouched
        """
        post = await self._get_post(db, post_id)
        if post.author_id != identity.id:
            logger.warning("User %s tried to delete post %s owned by %s",
                           identity.id, post.id, post.author_id)
            raise ForbiddenError()

        await db.delete(post)
        await self._flush(db, post)
        logger.info("User %s deleted post %s", identity.id, post.id)
        return MessageResponse(msg="Post removed")

    # ── Likes ─────────────────────────────────────────────────────────────

    async def like_post(
        self, db: AsyncSession, identity: Identity, post_id: str
    ) -> List[LikeEntry]:
        """
        Add identity's like at the front of the list.

        Raises:
            AlreadyLikedError: identity already likes this post
        """
        post = await self._get_post(db, post_id)
        likes = self._likes(post)
        if any(like.user_id == identity.id for like in likes):
            raise AlreadyLikedError(context={"post_id": post_id})

        likes.insert(0, LikeEntry(user_id=identity.id))
        post.likes = [like.model_dump(mode="json") for like in likes]
        await self._flush(db, post)
        return likes

    async def unlike_post(
        self, db: AsyncSession, identity: Identity, post_id: str
    ) -> List[LikeEntry]:
        """
        Remove identity's like (the first matching entry).

        Raises:
            NotLikedError: identity has not liked this post
        """
        post = await self._get_post(db, post_id)
        likes = self._likes(post)
        index = next((i for i, like in enumerate(likes) if like.user_id == identity.id), None)
        if index is None:
            raise NotLikedError(context={"post_id": post_id})

        del likes[index]
        post.likes = [like.model_dump(mode="json") for like in likes]
        await self._flush(db, post)
        return likes

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self, db: AsyncSession, identity: Identity, post_id: str, data: TextRequest
    ) -> List[CommentEntry]:
        """Prepend a new comment by identity and return the post's comments."""
        post = await self._get_post(db, post_id)
        author = await self._get_author(db, identity)

        comments = self._comments(post)
        comments.insert(0, CommentEntry(
            id=uuid.uuid4(),
            text=data.text,
            author_name=author.name,
            author_avatar=author.avatar_url,
            author_id=identity.id,
            date=datetime.now(timezone.utc),
        ))
        post.comments = [comment.model_dump(mode="json") for comment in comments]
        await self._flush(db, post)
        return comments

    async def delete_comment(
        self, db: AsyncSession, identity: Identity, post_id: str, comment_id: str
    ) -> List[CommentEntry]:
        """
        Delete exactly the comment `comment_id`. Other comments, including
        other comments by the same author, are kept.

        Raises:
            InvalidIdError / NotFoundError: post lookup, as get_post
            NotFoundError: no comment with that id on this post (a malformed
                           comment id cannot match, so it lands here too)
            ForbiddenError: identity did not write the comment
        """
        post = await self._get_post(db, post_id)
        comments = self._comments(post)

        try:
            cid = uuid.UUID(str(comment_id))
        except ValueError:
            cid = None
        index = next((i for i, c in enumerate(comments) if c.id == cid), None)
        if index is None:
            raise NotFoundError(
                resource="Comment",
                resource_id=comment_id,
                message="Comment does not exist",
            )

        if comments[index].author_id != identity.id:
            logger.warning("User %s tried to delete comment %s owned by %s",
                           identity.id, comment_id, comments[index].author_id)
            raise ForbiddenError()

        del comments[index]
        post.comments = [comment.model_dump(mode="json") for comment in comments]
        await self._flush(db, post)
        return comments


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
