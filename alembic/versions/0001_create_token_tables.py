"""create users, posts and meta tables

Revision ID: 0001_create_token_tables
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_create_token_tables"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TOKEN_ROWS = sa.text("meta_key = 'flow_rand_tok'")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
    ]


def _create_meta_table(table: str, owner_table: str, owner_column: str) -> None:
    op.create_table(
        table,
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(owner_column, sa.Integer(), nullable=False),
        sa.Column("meta_key", sa.String(length=255), nullable=False),
        sa.Column("meta_value", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint([owner_column], [f"{owner_table}.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(owner_column, "meta_key", name=f"uq_{table}_{owner_table[:-1]}_key"),
    )
    op.create_index(f"ix_{table}_{owner_column}", table, [owner_column])
    op.create_index(f"ix_{table}_key_value", table, ["meta_key", "meta_value"])
    # Token values are unique within the table; other meta keys may repeat
    op.create_index(
        f"uq_{table}_access_token",
        table,
        ["meta_value"],
        unique=True,
        sqlite_where=TOKEN_ROWS,
        postgresql_where=TOKEN_ROWS,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, comment="User email address"),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_type", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_post_type", "posts", ["post_type"])

    _create_meta_table("user_meta", "users", "user_id")
    _create_meta_table("post_meta", "posts", "post_id")


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("post_meta")
    op.drop_table("user_meta")
    op.drop_index("ix_posts_post_type", table_name="posts")
    op.drop_table("posts")
    op.drop_table("users")
