# src/postline/api/v1/endpoints/media.py
"""Authenticated access to stored post images."""

from __future__ import annotations

from fastapi import APIRouter, Response

from postline.api.v1.dependencies import IdentityDep, StorageDep
from postline.core.errors import NotAuthenticated, NotFound, StorageUnavailable
from postline.services.storage import ObjectNotFoundError, StorageError

router = APIRouter(prefix="/media", tags=["media"])

CACHE_CONTROL = "max-age=100000"


@router.get("/{key}")
def get_media(key: str, identity: IdentityDep, storage: StorageDep) -> Response:
    """Return the bytes of a stored image to an authenticated caller."""
    if not identity.is_authenticated:
        raise NotAuthenticated("Not authorized to access image.")
    try:
        stored = storage.get(key)
    except ObjectNotFoundError as exc:
        raise NotFound("Image not found.") from exc
    except StorageError as exc:
        raise StorageUnavailable("Could not read image.") from exc
    return Response(
        content=stored.body,
        media_type=stored.content_type,
        headers={"Cache-Control": CACHE_CONTROL},
    )
