# src/postline/api/v1/endpoints/posts.py
"""Post-related endpoints for the Postline API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from postline.api.v1.dependencies import (
    FeedDep,
    IdentityDep,
    PostManagerDep,
    StorageDep,
)
from postline.core.errors import StorageUnavailable
from postline.core.settings import settings
from postline.schemas.post import FeedPage, MessageResponse, PostEnvelope
from postline.services.auth import Identity
from postline.services.post_service import UNCHANGED, Unchanged
from postline.services.storage import ObjectStorage, StorageError
from postline.services.validation import Violation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

ImageUpload = Annotated[UploadFile | None, File(description="Image attachment")]


def _store_upload(
    identity: Identity,
    upload: UploadFile,
    storage: ObjectStorage,
) -> tuple[str | None, list[Violation]]:
    """Persist an uploaded image and return its storage key.

    A file that is not an acceptable image is not stored; the problems are
    returned instead so they can be reported alongside the other fields.
    Nothing is written for anonymous callers, who are rejected later by the
    lifecycle manager.
    """
    if not identity.is_authenticated:
        return None, []

    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        return None, [Violation("image", "Only image uploads are accepted.")]

    data = upload.file.read(settings.max_image_bytes + 1)
    if len(data) > settings.max_image_bytes:
        limit_kb = settings.max_image_bytes // 1024
        return None, [Violation("image", f"Image should be {limit_kb}KB or less.")]

    try:
        return storage.put(data, content_type), []
    except StorageError as exc:
        logger.error("Could not store upload: %s", exc, exc_info=True)
        raise StorageUnavailable("Could not store image.") from exc


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


@router.get("", response_model=FeedPage)
def list_posts(
    feed: FeedDep,
    page: str | None = Query(None, description="1-based page number; anything else means 1"),
) -> FeedPage:
    """List posts newest first, a fixed number per page."""
    return feed.list(page)


@router.get("/{post_id}", response_model=PostEnvelope)
def get_post(post_id: int, posts: PostManagerDep) -> PostEnvelope:
    """Get a specific post by ID."""
    return PostEnvelope(message="Post fetched successfully", post=posts.get_post(post_id))


@router.post("", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
def create_post(
    identity: IdentityDep,
    posts: PostManagerDep,
    storage: StorageDep,
    image: ImageUpload = None,
    title: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
) -> PostEnvelope:
    """Create a new post with an image attachment.

    Raises:
        NotAuthenticated: If no valid bearer token was supplied.
        ValidationFailed: If the image is missing or invalid, or the text is too short.
    """
    image_key: str | None = None
    image_violations: list[Violation] = []
    if _has_file(image):
        image_key, image_violations = _store_upload(identity, image, storage)
    post = posts.create_post(
        identity,
        title=title,
        content=content,
        image_key=image_key,
        image_violations=image_violations,
    )
    return PostEnvelope(message="Post created successfully", post=post)


@router.put("/{post_id}", response_model=PostEnvelope)
def update_post(
    post_id: int,
    identity: IdentityDep,
    posts: PostManagerDep,
    storage: StorageDep,
    image: ImageUpload = None,
    title: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
) -> PostEnvelope:
    """Replace a post's title and content; a new image replaces the old one."""
    image_key: str | Unchanged | None = UNCHANGED
    image_violations: list[Violation] = []
    if _has_file(image):
        image_key, image_violations = _store_upload(identity, image, storage)
    post = posts.update_post(
        identity,
        post_id,
        title=title,
        content=content,
        image_key=image_key,
        image_violations=image_violations,
    )
    return PostEnvelope(message="Post updated", post=post)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(post_id: int, identity: IdentityDep, posts: PostManagerDep) -> MessageResponse:
    """Delete a post owned by the caller together with its image."""
    posts.delete_post(identity, post_id)
    return MessageResponse(message="Post deleted")
