"""Cloud Storage Adapter

SignatureStorage implementations. Signatures arrive as data URLs
("data:image/png;base64,...") captured on the client.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import uuid
from dataclasses import dataclass

from google.cloud import storage

from dokpedisi.domain.errors import SignatureUploadError, ValidationError
from dokpedisi.domain.ports import SignatureStorage

logger = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>image/[a-zA-Z0-9.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$"
)

# MIME subtype -> file extension
_EXTENSIONS = {
    "png": "png",
    "jpeg": "jpg",
    "jpg": "jpg",
    "webp": "webp",
    "gif": "gif",
    "svg+xml": "svg",
}


@dataclass(frozen=True)
class DecodedImage:
    content_type: str
    extension: str
    content: bytes


def decode_data_url(image: str) -> DecodedImage:
    """
    Decode a base64 image data URL.

    Raises:
        ValidationError: not a base64 image data URL, or empty payload
    """
    match = _DATA_URL_PATTERN.match((image or "").strip())
    if not match:
        raise ValidationError("image must be a base64 image data URL", field="image")

    mime = match.group("mime").lower()
    try:
        content = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("image payload is not valid base64", field="image") from e
    if not content:
        raise ValidationError("image payload is empty", field="image")

    subtype = mime.split("/", 1)[1]
    return DecodedImage(
        content_type=mime,
        extension=_EXTENSIONS.get(subtype, "bin"),
        content=content,
    )


class GCSSignatureStorage(SignatureStorage):
    """
    Google Cloud Storage based SignatureStorage.

    Path convention: {prefix}/{uuid}.{ext}
    The returned reference is the public URL of the blob; the bucket must
    allow public reads for it to be viewable.
    """

    def __init__(
        self,
        bucket_name: str,
        client: storage.Client | None = None,
        prefix: str = "signatures",
    ) -> None:
        """
        Args:
            bucket_name: GCS bucket name
            client: initialized GCS client (default: ADC)
            prefix: blob path prefix
        """
        if not bucket_name:
            raise ValueError("bucket_name is required")
        self._client = client or storage.Client()
        self._bucket = self._client.bucket(bucket_name)
        self._bucket_name = bucket_name
        self._prefix = prefix.strip("/")

    def store(self, image: str) -> str:
        """
        Upload a signature image.

        Args:
            image: base64 data URL

        Returns:
            Public URL of the uploaded blob

        Raises:
            ValidationError: malformed data URL
            SignatureUploadError: upload failed
        """
        decoded = decode_data_url(image)
        blob_path = f"{self._prefix}/{uuid.uuid4().hex}.{decoded.extension}"
        blob = self._bucket.blob(blob_path)
        try:
            blob.upload_from_string(decoded.content, content_type=decoded.content_type)
        except Exception as e:
            logger.exception(
                "Failed to upload signature: bucket=%s, path=%s",
                self._bucket_name,
                blob_path,
            )
            raise SignatureUploadError(f"Failed to upload signature: {e}") from e

        logger.info(
            "Uploaded signature: bucket=%s, path=%s, size=%d bytes",
            self._bucket_name,
            blob_path,
            len(decoded.content),
        )
        return blob.public_url


class InlineSignatureStorage(SignatureStorage):
    """Keeps the data URL itself as the signature reference (no bucket configured)"""

    def store(self, image: str) -> str:
        decode_data_url(image)
        return image.strip()
