"""Image codec - converts between raw bytes, data URLs and remote image references."""

import base64
import binascii
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

import httpx

from models.image_generation import DATA_URL_PREFIX, ImagePayload
from services.errors import CodecError, FetchError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def detect_image_mime(data: bytes) -> str:
    """Detect image MIME type from magic bytes."""
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:2] == b"BM":
        return "image/bmp"
    return DEFAULT_MIME_TYPE


def encode_bytes(data: bytes, mime_hint: Optional[str] = None) -> ImagePayload:
    """Encode raw image bytes into an embedded data URL payload.

    The same input always yields the same string.

    Args:
        data: Raw image bytes
        mime_hint: Declared MIME type; sniffed from the bytes when omitted

    Returns:
        Embedded ImagePayload

    Raises:
        CodecError: If the input is not binary data
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise CodecError(f"Expected binary image data, got {type(data).__name__}")
    raw = bytes(data)
    mime_type = mime_hint or detect_image_mime(raw)
    return ImagePayload.embedded(mime_type, raw)


def encode_file(path: Union[str, Path], mime_hint: Optional[str] = None) -> ImagePayload:
    """Read a local image file and encode it as an embedded payload."""
    file_path = Path(path)
    try:
        raw = file_path.read_bytes()
    except OSError as e:
        raise CodecError(f"Failed to read image file {file_path}: {e}") from e

    if not mime_hint:
        guessed, _ = mimetypes.guess_type(file_path.name)
        if guessed and guessed.startswith("image/"):
            mime_hint = guessed
    return encode_bytes(raw, mime_hint)


def decode_data_url(payload: ImagePayload) -> tuple[str, bytes]:
    """Split an embedded payload back into (mime_type, raw bytes).

    Raises:
        CodecError: If the payload is remote or not a valid base64 data URL
    """
    if not payload.is_embedded:
        raise CodecError("Cannot decode a remote image reference; materialize it first")

    header, sep, encoded = payload.data[len(DATA_URL_PREFIX):].partition(",")
    if not sep or not header.endswith(";base64"):
        raise CodecError(f"Malformed image data URL: {payload.preview(60)}")

    mime_type = header[: -len(";base64")] or DEFAULT_MIME_TYPE
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError(f"Invalid base64 image data: {e}") from e
    return mime_type, raw


class ImageCodec:
    """Materializes remote image references into embedded payloads."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0):
        """Initialize the codec.

        Args:
            client: Shared HTTP client; a private one is created when omitted.
            timeout: Timeout in seconds for the private client.
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def materialize(self, payload: ImagePayload) -> ImagePayload:
        """Return the payload in embedded form, fetching it once if remote.

        Raises:
            FetchError: If the remote server answers outside the 2xx range
        """
        if payload.is_embedded:
            return payload

        url = payload.data
        logger.debug(f"Fetching remote image {url}")
        response = await self.client.get(url)
        if not response.is_success:
            raise FetchError(response.status_code, response.reason_phrase)

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip()
        if not content_type.startswith("image/"):
            guessed, _ = mimetypes.guess_type(httpx.URL(url).path)
            content_type = guessed if guessed and guessed.startswith("image/") else ""

        result = encode_bytes(response.content, content_type or None)
        logger.debug(f"Materialized {url} as {result.mime_type} ({len(response.content)} bytes)")
        return result

    async def close(self) -> None:
        """Close the HTTP client if this codec created it."""
        if self._owns_client:
            await self.client.aclose()
