"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `posts` table with its creator and created_at indexes.
Rollback: downgrade() drops the table and every post in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "image_path",
            sa.String(1024),
            nullable=True,
            comment="Absolute URL of the uploaded image",
        ),
        sa.Column(
            "creator",
            sa.String(255),
            nullable=True,
            comment="User id of the author, from the verified bearer token",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Pagination sorts by created_at; ownership-filtered writes look up creator
    op.create_index("idx_posts_created_at", "posts", ["created_at"])
    op.create_index("idx_posts_creator", "posts", ["creator"])


def downgrade() -> None:
    op.drop_index("idx_posts_creator", table_name="posts")
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_table("posts")
