"""SQLAlchemy models for the user_meta and post_meta tables.

Meta rows are (entity_id, meta_key, meta_value) triples. Each entity has at
most one row per key, and access token values are unique within a table
through a partial unique index on the token key.
"""

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowtokens.domain.entities.access_token import TOKEN_META_KEY
from flowtokens.infrastructure.persistence.database import Base

_TOKEN_ROWS = text(f"meta_key = '{TOKEN_META_KEY}'")


class UserMetaModel(Base):
    """Key/value attributes attached to a user."""

    __tablename__ = "user_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meta_key: Mapped[str] = mapped_column(String(255), nullable=False)
    meta_value: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user = relationship("UserModel", back_populates="meta")

    __table_args__ = (
        UniqueConstraint("user_id", "meta_key", name="uq_user_meta_user_key"),
        Index("ix_user_meta_key_value", "meta_key", "meta_value"),
        Index(
            "uq_user_meta_access_token",
            "meta_value",
            unique=True,
            sqlite_where=_TOKEN_ROWS,
            postgresql_where=_TOKEN_ROWS,
        ),
    )

    def __repr__(self) -> str:
        return f"<UserMeta(user_id={self.user_id}, meta_key={self.meta_key})>"


class PostMetaModel(Base):
    """Key/value attributes attached to a post."""

    __tablename__ = "post_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meta_key: Mapped[str] = mapped_column(String(255), nullable=False)
    meta_value: Mapped[str | None] = mapped_column(String(255), nullable=True)

    post = relationship("PostModel", back_populates="meta")

    __table_args__ = (
        UniqueConstraint("post_id", "meta_key", name="uq_post_meta_post_key"),
        Index("ix_post_meta_key_value", "meta_key", "meta_value"),
        Index(
            "uq_post_meta_access_token",
            "meta_value",
            unique=True,
            sqlite_where=_TOKEN_ROWS,
            postgresql_where=_TOKEN_ROWS,
        ),
    )

    def __repr__(self) -> str:
        return f"<PostMeta(post_id={self.post_id}, meta_key={self.meta_key})>"
