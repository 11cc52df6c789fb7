"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from postline.models.post import Post
from postline.models.user import User

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_with_owner(self, post_id: int) -> tuple[Post, User | None] | None:
        """Return a post together with its owner, or None when the post is absent."""
        row = self.session.execute(
            select(Post, User)
            .outerjoin(User, User.id == Post.owner_id)
            .where(Post.id == post_id)
        ).first()
        if row is None:
            return None
        return row[0], row[1]

    def count(self) -> int:
        """Return the number of live posts."""
        return int(self.session.scalar(select(func.count()).select_from(Post)) or 0)

    def list_page(self, *, offset: int, limit: int) -> list[tuple[Post, User | None]]:
        """Return posts newest first, each paired with its owner if it still exists.

        Posts created at the same instant are ordered by descending id so that
        consecutive pages never overlap or skip a row.
        """
        rows = self.session.execute(
            select(Post, User)
            .outerjoin(User, User.id == Post.owner_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return [(row[0], row[1]) for row in rows]

    def create(self, *, title: str, content: str, image_key: str, owner_id: int) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        post = Post(title=title, content=content, image_key=image_key, owner_id=owner_id)
        self.session.add(post)
        self.session.flush()
        return post

    def delete(self, post: Post) -> None:
        self.session.delete(post)
        self.session.flush()
