"""Data access helpers for working with user accounts."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from postline.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for accounts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: int | None) -> User | None:
        if user_id is None:
            return None
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        """Return the account registered under ``email`` (already normalized)."""
        return self.session.scalars(select(User).where(User.email == email)).first()

    def create(self, *, email: str, name: str, password_hash: str) -> User:
        user = User(email=email, name=name, password_hash=password_hash, post_ids=[])
        self.session.add(user)
        self.session.flush()
        return user
