"""Attachment storage backends and best-effort cleanup of orphaned files.

Two backends share one small interface: ``put`` stores bytes under a freshly
generated key, ``get`` returns them, and ``delete`` removes them. Deleting a
key that does not exist is reported as ``DeleteOutcome.NOT_FOUND`` rather than
as an error, so repeated deletes are safe.
"""

from __future__ import annotations

import logging
import mimetypes
import re
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from postline.core.settings import Settings

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageError(RuntimeError):
    """Raised when the storage backend cannot complete an operation."""


class ObjectNotFoundError(StorageError):
    """Raised by ``get`` when no object exists under the key."""


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class StoredObject:
    body: bytes
    content_type: str


class ObjectStorage(Protocol):
    def put(self, data: bytes, content_type: str) -> str: ...

    def get(self, key: str) -> StoredObject: ...

    def delete(self, key: str) -> DeleteOutcome: ...


def generate_key(content_type: str) -> str:
    """Return a unique key: millisecond timestamp, a uuid4 and an extension."""
    extension = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ""
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}{extension}"


def is_valid_key(key: str | None) -> bool:
    return bool(key) and ".." not in key and bool(_KEY_PATTERN.match(key))  # type: ignore[arg-type]


def _guess_content_type(key: str) -> str:
    return mimetypes.guess_type(key)[0] or "application/octet-stream"


class FilesystemObjectStorage:
    """Store attachments as files below a single directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not is_valid_key(key):
            raise ObjectNotFoundError(f"Invalid storage key: {key!r}")
        return self.root / key

    def put(self, data: bytes, content_type: str) -> str:
        key = generate_key(content_type)
        try:
            self._path(key).write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Could not store {key}: {exc}") from exc
        return key

    def get(self, key: str) -> StoredObject:
        path = self._path(key)
        try:
            body = path.read_bytes()
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(key) from exc
        except OSError as exc:
            raise StorageError(f"Could not read {key}: {exc}") from exc
        return StoredObject(body=body, content_type=_guess_content_type(key))

    def delete(self, key: str) -> DeleteOutcome:
        try:
            path = self._path(key)
        except ObjectNotFoundError:
            return DeleteOutcome.NOT_FOUND
        try:
            path.unlink()
        except FileNotFoundError:
            return DeleteOutcome.NOT_FOUND
        except OSError as exc:
            raise StorageError(f"Could not delete {key}: {exc}") from exc
        return DeleteOutcome.DELETED

    def exists(self, key: str) -> bool:
        return is_valid_key(key) and (self.root / key).is_file()


class S3ObjectStorage:
    """Store attachments as objects in a single S3 bucket."""

    def __init__(self, bucket: str, client: Any | None = None, **client_kwargs: Any) -> None:
        self.bucket = bucket
        self.client = client or boto3.client("s3", **client_kwargs)

    def put(self, data: bytes, content_type: str) -> str:
        key = generate_key(content_type)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not store {key}: {exc}") from exc
        return key

    def get(self, key: str) -> StoredObject:
        if not is_valid_key(key):
            raise ObjectNotFoundError(key)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                raise ObjectNotFoundError(key) from exc
            raise StorageError(f"Could not read {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Could not read {key}: {exc}") from exc
        return StoredObject(
            body=response["Body"].read(),
            content_type=response.get("ContentType") or _guess_content_type(key),
        )

    def delete(self, key: str) -> DeleteOutcome:
        if not is_valid_key(key):
            return DeleteOutcome.NOT_FOUND
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return DeleteOutcome.NOT_FOUND
            raise StorageError(f"Could not delete {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Could not delete {key}: {exc}") from exc
        return DeleteOutcome.DELETED


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def build_object_storage(config: Settings) -> ObjectStorage:
    """Create the backend selected by ``config.storage_backend``."""
    backend = config.storage_backend.lower()
    if backend == "s3":
        if not config.bucket_name:
            raise ValueError("BUCKET_NAME is required when STORAGE_BACKEND is 's3'")
        client_kwargs: dict[str, Any] = {}
        if config.aws_region:
            client_kwargs["region_name"] = config.aws_region
        if config.s3_endpoint_url:
            client_kwargs["endpoint_url"] = config.s3_endpoint_url
        return S3ObjectStorage(config.bucket_name, **client_kwargs)
    if backend == "local":
        return FilesystemObjectStorage(config.media_root)
    raise ValueError(f"Unknown storage backend: {config.storage_backend!r}")


class AttachmentJanitor:
    """Delete attachments that no live post references any more.

    A single attempt is made per key. A missing object counts as success;
    any other failure is logged and reported as ``False`` but never raised,
    so cleanup cannot change the outcome of the operation that triggered it.
    """

    def __init__(self, storage: ObjectStorage) -> None:
        self.storage = storage

    def discard(self, key: str | None) -> bool:
        if not key:
            return True
        try:
            outcome = self.storage.delete(key)
        except Exception:
            logger.warning("Failed to delete attachment %s", key, exc_info=True)
            return False
        if outcome is DeleteOutcome.NOT_FOUND:
            logger.debug("Attachment %s already absent", key)
        else:
            logger.info("Deleted attachment %s", key)
        return True
