"""
Exceptions raised by the try-on library.

Transport, HTTP status and authentication failures from the remote model are
not wrapped: they reach callers as ``httpx.HTTPError`` subclasses.
"""
from __future__ import annotations


class TryOnError(Exception):
    """Base class for library errors."""


class UnreadableFileError(TryOnError):
    """The selected image could not be read or identified."""


class MalformedDataUrlError(TryOnError):
    """A string is not a ``data:<mime>;base64,<payload>`` URL."""


class ValidationError(TryOnError):
    """A required image or instruction is missing before dispatch."""


class GenerationFailedError(TryOnError):
    """The model answered but returned no image."""

    def __init__(self, message: str = "Model failed to generate an image.") -> None:
        super().__init__(message)
