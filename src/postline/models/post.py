# src/postline/models/post.py
"""SQLAlchemy model for posts and their attachment reference."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from postline.db.session import Base
from postline.db.time import utcnow


class Post(Base):
    """Primary content entity produced by users.

    ``owner_id`` is a plain reference: the owning account may disappear
    without the post being removed, so readers must tolerate a dangling value.
    ``image_key`` is the storage key of the attachment and is unique among
    live posts.
    """

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    owner_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
