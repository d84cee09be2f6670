"""
Postboard Backend — Legacy Inline Post Handlers
=================================================

What:  The original unauthenticated handlers for /api/posts.
When:  Mounted only if settings.legacy_routes_enabled is true. They are then
       registered before routes.posts, so they take precedence over the
       authenticated create/list/update/delete handlers. GET /api/posts/{id}
       has no legacy counterpart and always reaches routes.posts.

Differences from routes.posts:
    - no bearer token check, no ownership filter
    - no image upload, no pagination, no maxPosts
    - update and delete answer 200 whether or not a post matched
"""

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.routes.posts import read_post_form
from postboard.schemas.post import (
    LegacyPostCreatedResponse,
    LegacyPostListResponse,
    MessageResponse,
    PostForm,
)
from postboard.services.file_service import ImageUpload
from postboard.services.post_service import legacy_post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Legacy"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LegacyPostCreatedResponse)
async def legacy_create_post(
    body: Tuple[PostForm, Optional[ImageUpload]] = Depends(read_post_form),
    db: AsyncSession = Depends(get_db_session),
) -> LegacyPostCreatedResponse:
    form, _ = body
    post_id = await legacy_post_service.create_post(db=db, title=form.title, content=form.content)
    return LegacyPostCreatedResponse(message="Post added correctly", post_id=post_id)


@router.get("", response_model=LegacyPostListResponse)
async def legacy_list_posts(
    db: AsyncSession = Depends(get_db_session),
) -> LegacyPostListResponse:
    posts = await legacy_post_service.list_posts(db=db)
    return LegacyPostListResponse(message="Posts fetched successfully", posts=posts)


@router.put("/{post_id}", response_model=MessageResponse)
async def legacy_update_post(
    post_id: str,
    body: Tuple[PostForm, Optional[ImageUpload]] = Depends(read_post_form),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    form, _ = body
    matched = await legacy_post_service.update_post(
        db=db, post_id=post_id, title=form.title, content=form.content
    )
    logger.info("Legacy update of post %s matched %d row(s)", post_id, matched)
    return MessageResponse(message="Update successful!")


@router.delete("/{post_id}", response_model=MessageResponse)
async def legacy_delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    deleted = await legacy_post_service.delete_post(db=db, post_id=post_id)
    logger.info("Legacy delete of post %s removed %d row(s)", post_id, deleted)
    return MessageResponse(message="Post deleted")
