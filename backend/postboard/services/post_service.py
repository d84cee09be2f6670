"""
Postboard Backend — Post Service (Business Logic)
===================================================

What:  The five post operations: create, list, get, update, delete.
How:   Each method receives the request's AsyncSession, performs one
       statement against the posts table (plus a COUNT for list), and
       converts failures into application exceptions.
Who:   Called by routes/posts.py.

Ownership:
    Update and delete filter on id AND creator in a single statement.
    A zero row count means "no post with this id belongs to you"; whether
    the id exists at all is not revealed (NotAuthorizedError, 401).

Upload / Write Ordering:
    ┌──────────┐    ┌──────────────┐    ┌──────────┐
    │  Auth    │───▶│ Store image  │───▶│ DB write │
    │ (route)  │    │ (FileService)│    │          │
    └──────────┘    └──────────────┘    └──────────┘
    The write is committed inside the service, so a failed INSERT, UPDATE
    or COMMIT, or an update that matches no row, deletes the image stored
    for this request again.

Ordering:
    Lists are sorted by created_at, then id, so page windows are stable
    between requests.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import asc, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.exceptions import (
    DatabaseError,
    NotAuthorizedError,
    NotFoundError,
)
from postboard.models.post import Post
from postboard.schemas.post import PostListResponse, PostResponse
from postboard.services.file_service import ImageUpload, file_service

logger = logging.getLogger(__name__)


def parse_post_id(raw_id: str) -> Optional[uuid.UUID]:
    """Return the UUID for a path id, or None if it is not a valid UUID."""
    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        return None


def to_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        image_path=post.image_path,
        creator=post.creator,
    )


class PostService:
    """
    Business logic layer for post operations.

    Error Handling Strategy:
        Application exceptions (ValidationError, NotFoundError, ...) propagate
        unchanged. Anything else raised while talking to the database is
        logged with its traceback and re-raised as DatabaseError carrying the
        operation's fixed client message.
    """

    async def create_post(
        self,
        db: AsyncSession,
        title: str,
        content: str,
        creator: str,
        image: Optional[ImageUpload] = None,
        base_url: str = "",
    ) -> PostResponse:
        """
        Store the optional image, then insert the post.

        Args:
            creator:  User id from the verified token. Never from the body.
            image:    Uploaded image, or None for a text-only post.
            base_url: scheme://host of this server, for the image URL.

        Raises:
            ValidationError: Unsupported image type or size (nothing stored)
            FileStorageError: Image could not be written
            DatabaseError: Insert or commit failed (stored image is removed)
        """
        absolute_path: Optional[str] = None
        image_path: Optional[str] = None

        if image is not None:
            absolute_path, filename = await file_service.validate_and_store(image)
            image_path = file_service.public_url(base_url, filename)

        try:
            post = Post(
                title=title,
                content=content,
                image_path=image_path,
                creator=creator,
            )
            db.add(post)
            await db.flush()  # Assigns id/created_at
            await db.commit()
        except Exception as e:
            if absolute_path:
                await file_service.cleanup_file(absolute_path)
            logger.error("Error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Creating a post failed",
                context={"error_type": type(e).__name__},
            )

        logger.info("Post created: %s by %s", post.id, creator)
        return to_post_response(post)

    async def list_posts(
        self,
        db: AsyncSession,
        page_size: Optional[int] = None,
        current_page: Optional[int] = None,
    ) -> PostListResponse:
        """
        List posts, paginated when both page_size and current_page are truthy.

        Query plan:
            SELECT * FROM posts ORDER BY created_at, id
                [OFFSET page_size * (current_page - 1) LIMIT page_size]
            SELECT count(id) FROM posts

        Returns:
            PostListResponse whose max_posts counts the whole table,
            independent of the page window.
        """
        try:
            query = select(Post).order_by(asc(Post.created_at), asc(Post.id))
            if page_size and current_page:
                query = query.offset(page_size * (current_page - 1)).limit(page_size)

            result = await db.execute(query)
            posts = list(result.scalars().all())

            count_result = await db.execute(select(func.count(Post.id)))
            total_count = count_result.scalar() or 0

        except Exception as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Fetching posts failed",
                context={"error_type": type(e).__name__},
            )

        return PostListResponse(
            posts=[to_post_response(post) for post in posts],
            max_posts=total_count,
        )

    async def get_post(self, db: AsyncSession, post_id: str) -> PostResponse:
        """
        Fetch one post. Any caller may read any post.

        Raises:
            NotFoundError: No post with this id, or the id is not a UUID (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        parsed_id = parse_post_id(post_id)
        if parsed_id is None:
            raise NotFoundError(resource_id=post_id)

        try:
            result = await db.execute(select(Post).where(Post.id == parsed_id))
            post = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Fetching post failed",
                context={"post_id": post_id},
            )

        if post is None:
            raise NotFoundError(resource_id=post_id)
        return to_post_response(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        creator: str,
        title: str,
        content: str,
        image_path: Optional[str] = None,
        image: Optional[ImageUpload] = None,
        base_url: str = "",
    ) -> None:
        """
        Replace title, content and image path of a post owned by `creator`.

        A newly uploaded image supersedes `image_path`. Without either, the
        post's image is cleared, matching a wholesale replacement.

        Raises:
            NotAuthorizedError: No row matched id AND creator (→ 401)
            DatabaseError: Update failed (→ 500)
        """
        absolute_path: Optional[str] = None
        if image is not None:
            absolute_path, filename = await file_service.validate_and_store(image)
            image_path = file_service.public_url(base_url, filename)

        parsed_id = parse_post_id(post_id)
        matched = 0
        try:
            if parsed_id is not None:
                result = await db.execute(
                    update(Post)
                    .where(Post.id == parsed_id, Post.creator == creator)
                    .values(title=title, content=content, image_path=image_path)
                )
                matched = result.rowcount
                await db.commit()
        except Exception as e:
            if absolute_path:
                await file_service.cleanup_file(absolute_path)
            logger.error("Database error updating post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Editing a post failed",
                context={"post_id": post_id},
            )

        if not matched:
            if absolute_path:
                await file_service.cleanup_file(absolute_path)
            logger.warning("Update of post %s refused for user %s", post_id, creator)
            raise NotAuthorizedError(context={"post_id": post_id, "user_id": creator})

        logger.info("Post updated: %s by %s", post_id, creator)

    async def delete_post(self, db: AsyncSession, post_id: str, creator: str) -> None:
        """
        Delete a post owned by `creator`.

        Raises:
            NotAuthorizedError: No row matched id AND creator (→ 401).
                Deleting the same id twice lands here the second time.
            DatabaseError: Delete failed (→ 500)
        """
        parsed_id = parse_post_id(post_id)
        if parsed_id is None:
            raise NotAuthorizedError(context={"post_id": post_id, "user_id": creator})

        try:
            result = await db.execute(
                delete(Post).where(Post.id == parsed_id, Post.creator == creator)
            )
            deleted = result.rowcount
            await db.commit()
        except Exception as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Deleting a post failed",
                context={"post_id": post_id},
            )

        if not deleted:
            logger.warning("Delete of post %s refused for user %s", post_id, creator)
            raise NotAuthorizedError(context={"post_id": post_id, "user_id": creator})

        logger.info("Post deleted: %s by %s", post_id, creator)


class LegacyPostService:
    """
    Behavior of the old inline handlers: no ownership, no images, no paging.

    Only reachable when settings.legacy_routes_enabled is true.
    """

    async def create_post(self, db: AsyncSession, title: str, content: str) -> uuid.UUID:
        try:
            post = Post(title=title, content=content)
            db.add(post)
            await db.flush()
        except Exception as e:
            logger.error("Legacy create failed: %s", str(e), exc_info=True)
            raise DatabaseError(message="Creating a post failed")
        logger.info("Post created via legacy handler: %s", post.id)
        return post.id

    async def list_posts(self, db: AsyncSession) -> List[PostResponse]:
        try:
            result = await db.execute(
                select(Post).order_by(asc(Post.created_at), asc(Post.id))
            )
            return [to_post_response(post) for post in result.scalars().all()]
        except Exception as e:
            logger.error("Legacy list failed: %s", str(e), exc_info=True)
            raise DatabaseError(message="Fetching posts failed")

    async def update_post(
        self, db: AsyncSession, post_id: str, title: str, content: str
    ) -> int:
        """Replace title and content of any post with this id. Returns rows matched."""
        parsed_id = parse_post_id(post_id)
        if parsed_id is None:
            return 0
        try:
            result = await db.execute(
                update(Post)
                .where(Post.id == parsed_id)
                .values(title=title, content=content)
            )
        except Exception as e:
            logger.error("Legacy update failed: %s", str(e), exc_info=True)
            raise DatabaseError(message="Editing a post failed")
        return result.rowcount

    async def delete_post(self, db: AsyncSession, post_id: str) -> int:
        """Delete any post with this id. Returns rows deleted."""
        parsed_id = parse_post_id(post_id)
        if parsed_id is None:
            return 0
        try:
            result = await db.execute(delete(Post).where(Post.id == parsed_id))
        except Exception as e:
            logger.error("Legacy delete failed: %s", str(e), exc_info=True)
            raise DatabaseError(message="Deleting a post failed")
        return result.rowcount


# ── Singleton Instances ───────────────────────────────────────────────────
post_service = PostService()
legacy_post_service = LegacyPostService()
