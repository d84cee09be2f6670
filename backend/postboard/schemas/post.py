"""
Postboard Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract with the frontend.
How:   FastAPI serializes responses through these models (by alias, so the
       wire format keeps the camelCase names the frontend expects:
       `imagePath`, `maxPosts`, `postId`) and generates OpenAPI docs from them.
       Field names stay snake_case in Python; `populate_by_name` lets code
       construct models with either spelling.
"""

import uuid
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(BaseModel):
    """
    What:  Full representation of a post.
    Who:   Returned by GET /api/posts/{id}, inside the create and list responses.
    """
    id: uuid.UUID = Field(description="Unique post identifier")
    title: str = Field(description="Post title")
    content: str = Field(description="Post body")
    image_path: Optional[str] = Field(
        default=None,
        alias="imagePath",
        description="Absolute URL of the uploaded image",
    )
    creator: Optional[str] = Field(
        default=None,
        description="User id of the author",
    )

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class PostCreatedResponse(BaseModel):
    """Returned by POST /api/posts with HTTP 201 Created."""
    message: str = Field(default="Post added correctly")
    post: PostResponse


class PostListResponse(BaseModel):
    """
    What:  Page of posts plus the size of the whole collection.
    Who:   Returned by GET /api/posts.

    max_posts is counted independently of the page window, so a client can
    compute the number of pages as ceil(maxPosts / pagesize).
    """
    message: str = Field(default="Posts fetched successfully")
    posts: List[PostResponse] = Field(description="Posts in the requested window")
    max_posts: int = Field(alias="maxPosts", description="Total number of posts")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by update and delete."""
    message: str


class LegacyPostCreatedResponse(BaseModel):
    """Returned by the legacy POST /api/posts handler."""
    message: str = Field(default="Post added correctly")
    post_id: uuid.UUID = Field(alias="postId")

    model_config = ConfigDict(populate_by_name=True)


class LegacyPostListResponse(BaseModel):
    """Returned by the legacy GET /api/posts handler (no count, no paging)."""
    message: str = Field(default="Posts fetched successfully")
    posts: List[PostResponse]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostForm(BaseModel):
    """
    What:  Text fields of a create or update request.
    How:   Built from multipart form fields, url-encoded fields or a JSON body
           by routes.posts.read_post_form.

    Fields:
        id:          Sent by the frontend on update. Ignored: the path id wins.
        title:       Required, non-empty.
        content:     Required, non-empty.
        image_path:  Existing image URL to keep on update when no new file is sent.

    Unknown fields (including any client-supplied `creator`) are dropped.
    """
    id: Optional[str] = None
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    image_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("imagePath", "image_path"),
    )


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_authorized",
            "message": "Not authorised!",
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
