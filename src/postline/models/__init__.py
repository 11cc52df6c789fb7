# src/postline/models/__init__.py
"""SQLAlchemy models for the Postline application."""

from .post import Post
from .user import User

__all__ = ["Post", "User"]
