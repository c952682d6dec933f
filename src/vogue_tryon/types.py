from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """A binary image held as base64 text plus its media type."""

    base64_payload: str
    mime_type: str


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Image returned by the model, as a data URL, with optional caption."""

    image_url: str
    caption_text: str | None = None


@dataclass(frozen=True, slots=True)
class InlineImagePart:
    data: str
    mime_type: str


@dataclass(frozen=True, slots=True)
class TextPart:
    text: str


Part = Union[InlineImagePart, TextPart]


@dataclass(frozen=True, slots=True)
class ApplicationState:
    """Snapshot of a single try-on session."""

    person_image: EncodedImage | None = None
    outfit_image: EncodedImage | None = None
    instruction: str = ""
    result: GenerationResult | None = None
    busy: bool = False
    error_message: str | None = None


EMPTY_STATE = ApplicationState()
