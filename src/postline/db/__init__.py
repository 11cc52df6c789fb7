# src/postline/db/__init__.py
"""Engine, session factory and declarative base for the post store."""

from .session import Base, SessionLocal, create_tables, engine, get_db

__all__ = ["Base", "SessionLocal", "create_tables", "engine", "get_db"]
