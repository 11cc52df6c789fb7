# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from collections.abc import Generator, Iterator
from typing import Any

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-postline")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="postline-media-"))
os.environ.setdefault("POSTS_PER_PAGE", "2")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from postline.core.security import hash_password
from postline.db.session import Base
from postline.db.session import get_db as app_get_session
from postline.main import app as fastapi_app
from postline.models import Post, User
from postline.services.auth import TokenSigner
from postline.services.broadcast import MutationBroadcaster
from postline.services.post_service import PostLifecycleManager
from postline.services.storage import AttachmentJanitor, FilesystemObjectStorage

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def storage(tmp_path: Any) -> FilesystemObjectStorage:
    """Attachment storage rooted in a per-test directory."""
    return FilesystemObjectStorage(tmp_path / "media")


@pytest.fixture()
def janitor(storage: FilesystemObjectStorage) -> AttachmentJanitor:
    return AttachmentJanitor(storage)


@pytest.fixture()
def broadcaster() -> MutationBroadcaster:
    return MutationBroadcaster(queue_size=10)


@pytest.fixture()
def manager(
    db_session: Session,
    janitor: AttachmentJanitor,
    broadcaster: MutationBroadcaster,
) -> PostLifecycleManager:
    return PostLifecycleManager(db_session, janitor, broadcaster)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_app_state(
    app: FastAPI,
    db_session: Session,
    storage: FilesystemObjectStorage,
    broadcaster: MutationBroadcaster,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    previous_storage = app.state.storage
    previous_broadcaster = app.state.broadcaster
    app.dependency_overrides[app_get_session] = _get_session_override
    app.state.storage = storage
    app.state.broadcaster = broadcaster
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.state.storage = previous_storage
        app.state.broadcaster = previous_broadcaster


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def signer() -> TokenSigner:
    return TokenSigner()


def _create_user(db_session: Session, email: str, name: str) -> User:
    user = User(
        email=email,
        name=name,
        password_hash=hash_password(TEST_PASSWORD),
        post_ids=[],
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return _create_user(db_session, "alice@postline.io", "Alice")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return _create_user(db_session, "bob@postline.io", "Bob")


@pytest.fixture()
def auth_token(test_user: User, signer: TokenSigner) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {signer.sign(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User, signer: TokenSigner) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {signer.sign(other_user.id)}"}


@pytest.fixture()
def test_post(
    db_session: Session,
    test_user: User,
    storage: FilesystemObjectStorage,
) -> Post:
    """Create a baseline post, with a stored image, owned by ``test_user``."""
    image_key = storage.put(PNG_BYTES, "image/png")
    post = Post(
        title="First post",
        content="Test post content",
        image_key=image_key,
        owner_id=test_user.id,
    )
    db_session.add(post)
    db_session.flush()
    test_user.add_post_id(post.id)
    db_session.commit()
    db_session.refresh(post)
    return post


def image_file(name: str = "photo.png", data: bytes = PNG_BYTES) -> dict[str, Any]:
    """Return a ``files=`` mapping for a multipart image upload."""
    return {"image": (name, data, "image/png")}
