"""Signature storage tests (GCS client is a MagicMock)"""

import base64
from unittest.mock import MagicMock

import pytest
from dokpedisi.adapters.cloud_storage import (
    GCSSignatureStorage,
    InlineSignatureStorage,
    decode_data_url,
)
from dokpedisi.domain.errors import SignatureUploadError, ValidationError

_PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
_PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(_PNG_BYTES).decode()


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    blob = client.bucket.return_value.blob.return_value
    blob.public_url = "https://storage.googleapis.com/sig-bucket/signatures/x.png"
    return client


class TestDecodeDataUrl:
    def test_png(self):
        decoded = decode_data_url(_PNG_DATA_URL)

        assert decoded.content_type == "image/png"
        assert decoded.extension == "png"
        assert decoded.content == _PNG_BYTES

    def test_jpeg_extension(self):
        decoded = decode_data_url("data:image/jpeg;base64," + base64.b64encode(b"x").decode())
        assert decoded.extension == "jpg"

    @pytest.mark.parametrize(
        "image",
        ["", "not a data url", "data:text/plain;base64,aGk=", "data:image/png;base64,"],
    )
    def test_malformed(self, image):
        with pytest.raises(ValidationError) as exc_info:
            decode_data_url(image)
        assert exc_info.value.field == "image"


class TestGCSSignatureStorage:
    """GCSSignatureStorage tests"""

    def test_uploads_and_returns_public_url(self, mock_client):
        storage = GCSSignatureStorage("sig-bucket", client=mock_client)

        url = storage.store(_PNG_DATA_URL)

        mock_client.bucket.assert_called_once_with("sig-bucket")
        blob_path = mock_client.bucket.return_value.blob.call_args[0][0]
        assert blob_path.startswith("signatures/")
        assert blob_path.endswith(".png")
        blob = mock_client.bucket.return_value.blob.return_value
        blob.upload_from_string.assert_called_once_with(_PNG_BYTES, content_type="image/png")
        assert url == "https://storage.googleapis.com/sig-bucket/signatures/x.png"

    def test_upload_failure(self, mock_client):
        blob = mock_client.bucket.return_value.blob.return_value
        blob.upload_from_string.side_effect = RuntimeError("403 Forbidden")
        storage = GCSSignatureStorage("sig-bucket", client=mock_client)

        with pytest.raises(SignatureUploadError, match="403"):
            storage.store(_PNG_DATA_URL)

    def test_malformed_image_is_not_uploaded(self, mock_client):
        storage = GCSSignatureStorage("sig-bucket", client=mock_client)

        with pytest.raises(ValidationError):
            storage.store("garbage")

        mock_client.bucket.return_value.blob.assert_not_called()


class TestInlineSignatureStorage:
    def test_returns_data_url(self):
        assert InlineSignatureStorage().store(_PNG_DATA_URL) == _PNG_DATA_URL

    def test_rejects_malformed(self):
        with pytest.raises(ValidationError):
            InlineSignatureStorage().store("garbage")
