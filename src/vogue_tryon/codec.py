from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, UnidentifiedImageError

from .errors import MalformedDataUrlError, UnreadableFileError
from .types import EncodedImage

logger = logging.getLogger(__name__)

RawFile = Union[bytes, bytearray, str, Path, BinaryIO]

_DATA_PREFIX = "data:"
_BASE64_MARKER = ";base64"


def _read_bytes(raw_file: RawFile) -> bytes:
    if isinstance(raw_file, (bytes, bytearray)):
        return bytes(raw_file)
    if isinstance(raw_file, (str, Path)):
        file_path = Path(raw_file).expanduser()
        try:
            return file_path.read_bytes()
        except OSError as exc:
            raise UnreadableFileError(f"Image file could not be read: {file_path}") from exc
    try:
        if hasattr(raw_file, "seek"):
            raw_file.seek(0)
        data = raw_file.read()
    except (OSError, ValueError) as exc:
        raise UnreadableFileError(f"Image stream could not be read: {exc}") from exc
    if not isinstance(data, (bytes, bytearray)):
        raise UnreadableFileError("Image stream must be opened in binary mode.")
    return bytes(data)


def _sniff_mime_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError) as exc:
        raise UnreadableFileError("Selected file is not a recognizable image.") from exc

    mime_type = Image.MIME.get(image_format or "")
    if not mime_type:
        raise UnreadableFileError(f"No media type known for image format '{image_format}'.")
    return mime_type


def encode(raw_file: RawFile, mime_type: str | None = None) -> EncodedImage:
    """
    Read an image and return it base64-encoded with its media type.

    Parameters
    ----------
    raw_file:
        Raw bytes, a filesystem path, or a binary file-like object.
    mime_type:
        Declared content type. When omitted the type is detected from the
        image header.

    Raises
    ------
    UnreadableFileError
        If the bytes cannot be read, the stream is empty, or no type can be
        determined.
    """
    data = _read_bytes(raw_file)
    if not data:
        raise UnreadableFileError("Image file is empty.")

    resolved_type = (mime_type or "").strip() or _sniff_mime_type(data)
    logger.debug("Encoded %d bytes as %s", len(data), resolved_type)
    return EncodedImage(
        base64_payload=base64.b64encode(data).decode("ascii"),
        mime_type=resolved_type,
    )


def to_data_url(image: EncodedImage) -> str:
    return f"{_DATA_PREFIX}{image.mime_type}{_BASE64_MARKER},{image.base64_payload}"


def from_data_url(url: str) -> EncodedImage:
    """Split a ``data:<mime>;base64,<payload>`` URL into an :class:`EncodedImage`."""
    if not url.startswith(_DATA_PREFIX):
        raise MalformedDataUrlError("Data URL must start with 'data:'.")

    header, separator, payload = url.partition(",")
    if not separator:
        raise MalformedDataUrlError("Data URL is missing the ',' payload separator.")
    if not header.endswith(_BASE64_MARKER):
        raise MalformedDataUrlError("Data URL is not base64-encoded.")

    mime_type = header[len(_DATA_PREFIX) : -len(_BASE64_MARKER)]
    if not mime_type:
        raise MalformedDataUrlError("Data URL does not declare a media type.")
    return EncodedImage(base64_payload=payload, mime_type=mime_type)


def decode_bytes(image: EncodedImage) -> bytes:
    """Return the raw image bytes held by ``image``."""
    return base64.b64decode(image.base64_payload)
