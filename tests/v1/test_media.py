# mypy: ignore-errors
# tests/v1/test_media.py
"""Tests for serving stored images."""

from fastapi import status

from tests.conftest import PNG_BYTES


def test_get_media(client, test_post, auth_token) -> None:
    response = client.get(f"/api/v1/media/{test_post.image_key}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.content == PNG_BYTES
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "max-age=100000"


def test_get_media_requires_authentication(client, test_post) -> None:
    response = client.get(f"/api/v1/media/{test_post.image_key}")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Not authorized to access image."


def test_get_missing_media(client, auth_token) -> None:
    response = client.get("/api/v1/media/1700000000000-missing.png", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Image not found."
