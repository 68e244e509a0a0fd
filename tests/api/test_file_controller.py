"""
API tests for the file upload controller and static file serving.
"""

from unittest.mock import patch

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select

from models import File

UPLOAD_URL = "/api/v1.0/files/posts"


class TestFileUploadController:
    @pytest.mark.asyncio
    async def test_upload_png(self, client: AsyncClient, user_headers, storage, png_bytes):
        response = await client.post(
            UPLOAD_URL, files={"file": ("photo.png", png_bytes, "image/png")}, headers=user_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "File uploaded"
        assert data["data"]["file_type"] == "image/png"
        assert storage.post_file_path(data["data"]["filename"]).exists()

    @pytest.mark.asyncio
    async def test_client_extension_is_ignored(self, client: AsyncClient, user_headers, jpeg_bytes):
        response = await client.post(
            UPLOAD_URL, files={"file": ("photo.png", jpeg_bytes, "image/png")}, headers=user_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["file_type"] == "image/jpeg"
        assert response.json()["data"]["filename"].endswith(".jpg")

    @pytest.mark.asyncio
    async def test_rejects_unsupported_content(
        self, client: AsyncClient, user_headers, test_db, storage, text_bytes
    ):
        response = await client.post(
            UPLOAD_URL, files={"file": ("photo.png", text_bytes, "image/png")}, headers=user_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["status"] == "error"
        assert data["message"] == "Only PNG and JPEG images are supported"
        assert data["path"] == UPLOAD_URL

        count = await test_db.execute(select(func.count()).select_from(File))
        assert count.scalar() == 0
        assert list(storage.post_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_rejects_large_upload(self, client: AsyncClient, user_headers, png_bytes):
        with patch("app.domains.file.controller.settings.max_image_size", len(png_bytes) - 1):
            response = await client.post(
                UPLOAD_URL, files={"file": ("photo.png", png_bytes, "image/png")}, headers=user_headers
            )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "File is too large"

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient, png_bytes):
        response = await client.post(UPLOAD_URL, files={"file": ("photo.png", png_bytes, "image/png")})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Incorrect credentials"

    @pytest.mark.asyncio
    async def test_error_message_follows_accept_language(self, client: AsyncClient, png_bytes):
        response = await client.post(
            UPLOAD_URL,
            files={"file": ("photo.png", png_bytes, "image/png")},
            headers={"Accept-Language": "pl-PL,pl;q=0.9"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] != "Incorrect credentials"


class TestServingFiles:
    @pytest.mark.asyncio
    async def test_unknown_file_returns_404(self, client: AsyncClient):
        response = await client.get("/posts/missing.png")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_route_is_translated(self, client: AsyncClient):
        response = await client.get("/api/v1.0/nothing-here")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Route not found"

    @pytest.mark.asyncio
    async def test_serves_stored_post_file(self, client: AsyncClient, png_bytes):
        from app.main import app

        path = app.state.upload_storage.post_file_path("served.png")
        path.write_bytes(png_bytes)
        try:
            response = await client.get("/posts/served.png")
        finally:
            path.unlink()

        assert response.status_code == status.HTTP_200_OK
        assert response.content == png_bytes
        assert "max-age" in response.headers["cache-control"]
