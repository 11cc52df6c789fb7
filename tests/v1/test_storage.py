# mypy: ignore-errors
# tests/v1/test_storage.py
"""Tests for attachment storage backends and the janitor."""

import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from postline.services.storage import (
    AttachmentJanitor,
    DeleteOutcome,
    FilesystemObjectStorage,
    ObjectNotFoundError,
    S3ObjectStorage,
    StorageError,
    build_object_storage,
    generate_key,
    is_valid_key,
)


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestKeys:
    def test_generated_keys_are_unique_and_valid(self) -> None:
        keys = {generate_key("image/png") for _ in range(50)}
        assert len(keys) == 50
        assert all(is_valid_key(key) for key in keys)
        assert all(key.endswith(".png") for key in keys)

    @pytest.mark.parametrize("key", ["", None, "../etc/passwd", "a/b.png", ".hidden", "a..b"])
    def test_rejects_unsafe_keys(self, key) -> None:
        assert not is_valid_key(key)


class TestFilesystemObjectStorage:
    def test_put_get_delete(self, storage) -> None:
        """Test the basic object lifecycle on disk."""
        key = storage.put(b"image-bytes", "image/png")
        stored = storage.get(key)
        assert stored.body == b"image-bytes"
        assert stored.content_type == "image/png"
        assert storage.delete(key) is DeleteOutcome.DELETED
        assert not storage.exists(key)

    def test_delete_missing_is_not_found(self, storage) -> None:
        assert storage.delete("1700000000000-missing.png") is DeleteOutcome.NOT_FOUND

    def test_get_missing_raises(self, storage) -> None:
        with pytest.raises(ObjectNotFoundError):
            storage.get("1700000000000-missing.png")

    def test_get_rejects_path_traversal(self, storage) -> None:
        with pytest.raises(ObjectNotFoundError):
            storage.get("../secret.png")


class TestS3ObjectStorage:
    def test_put_uploads_with_content_type(self) -> None:
        client = MagicMock()
        key = S3ObjectStorage("media", client=client).put(b"data", "image/jpeg")
        client.put_object.assert_called_once_with(
            Bucket="media", Key=key, Body=b"data", ContentType="image/jpeg"
        )

    def test_get_returns_body(self) -> None:
        client = MagicMock()
        client.get_object.return_value = {"Body": io.BytesIO(b"data"), "ContentType": "image/png"}
        stored = S3ObjectStorage("media", client=client).get("1-abc.png")
        assert stored.body == b"data"
        assert stored.content_type == "image/png"

    def test_get_missing_key(self) -> None:
        client = MagicMock()
        client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")
        with pytest.raises(ObjectNotFoundError):
            S3ObjectStorage("media", client=client).get("1-abc.png")

    def test_delete_missing_is_not_found(self) -> None:
        client = MagicMock()
        client.delete_object.side_effect = _client_error("404", "DeleteObject")
        assert S3ObjectStorage("media", client=client).delete("1-abc.png") is DeleteOutcome.NOT_FOUND

    def test_delete_access_denied_raises(self) -> None:
        client = MagicMock()
        client.delete_object.side_effect = _client_error("AccessDenied", "DeleteObject")
        with pytest.raises(StorageError):
            S3ObjectStorage("media", client=client).delete("1-abc.png")


def test_build_local_backend(tmp_path) -> None:
    config = MagicMock(storage_backend="local", media_root=str(tmp_path / "images"))
    assert isinstance(build_object_storage(config), FilesystemObjectStorage)


def test_build_s3_backend_requires_bucket() -> None:
    config = MagicMock(storage_backend="s3", bucket_name=None)
    with pytest.raises(ValueError):
        build_object_storage(config)


def test_build_unknown_backend() -> None:
    with pytest.raises(ValueError):
        build_object_storage(MagicMock(storage_backend="ftp"))


class TestAttachmentJanitor:
    def test_discard_deletes_object(self, storage, janitor) -> None:
        key = storage.put(b"x", "image/png")
        assert janitor.discard(key) is True
        assert not storage.exists(key)

    def test_discard_is_idempotent(self, storage, janitor) -> None:
        """Test that discarding an already-missing key still succeeds."""
        key = storage.put(b"x", "image/png")
        assert janitor.discard(key) is True
        assert janitor.discard(key) is True

    def test_discard_empty_key(self, janitor) -> None:
        assert janitor.discard(None) is True
        assert janitor.discard("") is True

    def test_discard_swallows_backend_failures(self) -> None:
        """Test that storage errors are reported, not raised."""
        failing = MagicMock()
        failing.delete.side_effect = StorageError("disk on fire")
        assert AttachmentJanitor(failing).discard("1-abc.png") is False
        failing.delete.assert_called_once_with("1-abc.png")
