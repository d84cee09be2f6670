"""
Postboard Backend — Post SQLAlchemy Model
============================================

What:  ORM model representing the `posts` table.
Who:   Used by PostService for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key generated on insert, never reassigned
    - image_path: absolute public URL of the uploaded image (may be NULL)
    - creator: user id taken from the verified bearer token. It is the
      ownership key for update/delete and is never rewritten after insert.
      NULL only for rows written through the legacy handlers.
    - created_at: insertion time, the pagination sort key
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base


class Post(Base):
    """
    A single post.

    Lifecycle:
        1. Created by POST /api/posts (id generated, creator = caller)
        2. Replaced by PUT /api/posts/{id} when id AND creator match the caller
        3. Removed by DELETE /api/posts/{id} when id AND creator match the caller

    Query Patterns:
        - List: ORDER BY created_at, id [OFFSET .. LIMIT ..]
        - Ownership-filtered writes: WHERE id = :id AND creator = :creator
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    image_path: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        comment="Absolute URL of the uploaded image",
    )

    creator: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="User id of the author, from the verified bearer token",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_posts_created_at", "created_at"),
        Index("idx_posts_creator", "creator"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, creator='{self.creator}', title='{self.title}')>"
