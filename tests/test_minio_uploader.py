"""Tests for collaborators/minio_uploader.py with the MinIO client mocked out."""
from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from collaborators.minio_uploader import MinioImageUploader


@pytest.fixture
def mock_minio_client():
    with patch("collaborators.minio_uploader.Minio") as mock_minio:
        client = MagicMock()
        mock_minio.return_value = client
        yield client


def make_uploader(**kwargs) -> MinioImageUploader:
    return MinioImageUploader(
        endpoint="localhost:9000",
        access_key="minio",
        secret_key="minio123",
        bucket="garments",
        **kwargs,
    )


class TestEnsureBucket:
    def test_creates_missing_bucket(self, mock_minio_client):
        mock_minio_client.bucket_exists.return_value = False
        uploader = make_uploader()

        uploader.ensure_bucket()

        mock_minio_client.make_bucket.assert_called_once_with("garments")
        assert uploader.initialized

    def test_existing_bucket_checked_once(self, mock_minio_client):
        mock_minio_client.bucket_exists.return_value = True
        uploader = make_uploader()

        uploader.ensure_bucket()
        uploader.ensure_bucket()

        mock_minio_client.make_bucket.assert_not_called()
        assert mock_minio_client.bucket_exists.call_count == 1


@pytest.mark.asyncio
class TestUploadImage:
    async def test_public_url(self, mock_minio_client):
        mock_minio_client.bucket_exists.return_value = True
        uploader = make_uploader(public_base_url="https://cdn.test/")

        url = await uploader.upload_image(b"jpeg-bytes", "processed/1-a.jpg", "image/jpeg")

        assert url == "https://cdn.test/garments/processed/1-a.jpg"
        args, kwargs = mock_minio_client.put_object.call_args
        assert args[0] == "garments"
        assert args[1] == "processed/1-a.jpg"
        assert args[2].read() == b"jpeg-bytes"
        assert kwargs["length"] == len(b"jpeg-bytes")
        assert kwargs["content_type"] == "image/jpeg"

    async def test_presigned_url_without_public_base(self, mock_minio_client):
        mock_minio_client.bucket_exists.return_value = True
        mock_minio_client.presigned_get_object.return_value = "https://minio.test/signed"
        uploader = make_uploader(url_expiry=timedelta(hours=2))

        url = await uploader.upload_image(b"x", "processed/1-a.jpg", "image/jpeg")

        assert url == "https://minio.test/signed"
        mock_minio_client.presigned_get_object.assert_called_once_with(
            "garments", "processed/1-a.jpg", expires=timedelta(hours=2),
        )

    async def test_client_error_propagates(self, mock_minio_client):
        mock_minio_client.bucket_exists.return_value = True
        mock_minio_client.put_object.side_effect = ConnectionError("minio down")
        uploader = make_uploader()

        with pytest.raises(ConnectionError):
            await uploader.upload_image(b"x", "processed/1-a.jpg", "image/jpeg")
