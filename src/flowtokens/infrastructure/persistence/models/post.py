"""SQLAlchemy model for the posts table.

Posts are typed content records. Only some post types (job sheets and
acts by default) carry an access token.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowtokens.infrastructure.persistence.database import Base


class PostModel(Base):
    """SQLAlchemy model for the posts table.

    Attributes:
        id: Primary key (auto-incrementing integer).
        post_type: Content type, e.g. "job_sheet", "act" or "page".
        title: Post title.
        content: Post body.
        status: Publication status ("draft" or "publish").
        created_at: Timestamp of the first save.
        updated_at: Timestamp of the latest save.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_type: Mapped[str] = mapped_column(String(20), nullable=False, default="post")
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    meta: Mapped[list["PostMetaModel"]] = relationship(  # noqa: F821
        "PostMetaModel",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_posts_post_type", "post_type"),)

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, post_type={self.post_type})>"
