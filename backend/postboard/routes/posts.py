"""
Postboard Backend — Posts Route Handlers
==========================================

What:  The /api/posts resource: create, list, get, update, delete.
How:   Extracts path/query/body data, delegates to PostService, returns JSON.
Who:   Called by the frontend post list, post detail and post editor.

Request Bodies (create and update):
    multipart/form-data                fields + optional `image` file part
    application/x-www-form-urlencoded  fields only
    application/json                   fields only (update without new image)

Auth:
    Create, update and delete depend on get_current_user. It is declared
    before the body dependency, so a request without a valid token is
    rejected before the upload is read.
"""

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from postboard.database import get_db_session
from postboard.exceptions import ValidationError
from postboard.middleware.auth import AuthData, get_current_user
from postboard.schemas.post import (
    ErrorResponse,
    MessageResponse,
    PostCreatedResponse,
    PostForm,
    PostListResponse,
    PostResponse,
)
from postboard.services.file_service import ImageUpload
from postboard.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])


# ── Body Parsing ──────────────────────────────────────────────────────────

async def read_post_form(request: Request) -> Tuple[PostForm, Optional[ImageUpload]]:
    """
    Dependency: parse the text fields and optional image of a create/update body.

    Raises:
        ValidationError: unreadable body or missing/empty title/content (→ 400)
    """
    content_type = request.headers.get("content-type", "")
    image: Optional[ImageUpload] = None

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        upload = form.get("image")
        # Browsers send an empty, unnamed file part when nothing was chosen
        if isinstance(upload, UploadFile) and upload.filename:
            image = ImageUpload(
                filename=upload.filename,
                content_type=upload.content_type or "",
                content=await upload.read(),
            )
            await upload.close()
    else:
        try:
            fields = await request.json()
        except ValueError:
            raise ValidationError(message="Request body must be JSON or form data")
        if not isinstance(fields, dict):
            raise ValidationError(message="Request body must be a JSON object")

    try:
        form_data = PostForm.model_validate(fields)
    except PydanticValidationError as e:
        invalid = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise ValidationError(
            message="Title and content are required",
            context={"fields": invalid},
        )

    return form_data, image


def server_base_url(request: Request) -> str:
    """scheme://host[:port] of this server as the client addressed it."""
    return str(request.base_url).rstrip("/")


# ── Routes ────────────────────────────────────────────────────────────────

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PostCreatedResponse,
    responses={
        400: {"description": "Invalid fields or image type", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        500: {"description": "Creating a post failed", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    request: Request,
    auth: AuthData = Depends(get_current_user),
    body: Tuple[PostForm, Optional[ImageUpload]] = Depends(read_post_form),
    db: AsyncSession = Depends(get_db_session),
) -> PostCreatedResponse:
    """
    Create a post owned by the caller, with an optional png/jpeg image.

    The creator is always the token's userId; a `creator` field in the body
    is ignored.
    """
    form, image = body
    post = await post_service.create_post(
        db=db,
        title=form.title,
        content=form.content,
        creator=auth.user_id,
        image=image,
        base_url=server_base_url(request),
    )
    return PostCreatedResponse(message="Post added correctly", post=post)


@router.get(
    "",
    response_model=PostListResponse,
    responses={500: {"description": "Fetching posts failed", "model": ErrorResponse}},
    summary="List posts, optionally paginated",
)
async def list_posts(
    pagesize: Optional[int] = Query(
        default=None, ge=0, description="Posts per page. Paging applies only with `page`.",
    ),
    page: Optional[int] = Query(
        default=None, ge=0, description="1-based page number. Paging applies only with `pagesize`.",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> PostListResponse:
    """
    Example:
        GET /api/posts?pagesize=2&page=2  → posts 3-4, maxPosts = total
        GET /api/posts                    → every post, maxPosts = total
    """
    return await post_service.list_posts(db=db, page_size=pagesize, current_page=page)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        404: {"description": "Post not found", "model": ErrorResponse},
        500: {"description": "Fetching post failed", "model": ErrorResponse},
    },
    summary="Get a single post by ID",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.get_post(db=db, post_id=post_id)


@router.put(
    "/{post_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid fields or image type", "model": ErrorResponse},
        401: {"description": "Not authenticated, or not the post's creator", "model": ErrorResponse},
        500: {"description": "Editing a post failed", "model": ErrorResponse},
    },
    summary="Replace a post owned by the caller",
)
async def update_post(
    post_id: str,
    request: Request,
    auth: AuthData = Depends(get_current_user),
    body: Tuple[PostForm, Optional[ImageUpload]] = Depends(read_post_form),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Replace title, content and image of the caller's post.

    An uploaded `image` replaces `imagePath` from the body. The body `id`
    is ignored; the path id selects the post.
    """
    form, image = body
    await post_service.update_post(
        db=db,
        post_id=post_id,
        creator=auth.user_id,
        title=form.title,
        content=form.content,
        image_path=form.image_path,
        image=image,
        base_url=server_base_url(request),
    )
    return MessageResponse(message="Update successful!")


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={
        401: {"description": "Not authenticated, or not the post's creator", "model": ErrorResponse},
        500: {"description": "Deleting a post failed", "model": ErrorResponse},
    },
    summary="Delete a post owned by the caller",
)
async def delete_post(
    post_id: str,
    auth: AuthData = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_post(db=db, post_id=post_id, creator=auth.user_id)
    return MessageResponse(message="Deletion successful!")
