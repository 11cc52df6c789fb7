# src/postline/models/user.py
"""SQLAlchemy model for user accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, Text
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column

from postline.db.session import Base
from postline.db.time import utcnow

DEFAULT_STATUS = "I am new!"


class User(Base):
    """Account that authors posts.

    ``email`` is stored lower-cased so the unique constraint is case-insensitive.
    ``post_ids`` is the ordered set of posts this user owns; only the post
    lifecycle manager appends to or removes from it.
    """

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_STATUS)
    post_ids: Mapped[list[int]] = mapped_column(
        MutableList.as_mutable(JSON()),
        nullable=False,
        default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def add_post_id(self, post_id: int) -> None:
        """Append ``post_id`` unless it is already recorded."""
        if post_id not in self.post_ids:
            self.post_ids.append(post_id)

    def remove_post_id(self, post_id: int) -> None:
        """Drop ``post_id``; absent ids are ignored."""
        if post_id in self.post_ids:
            self.post_ids.remove(post_id)
