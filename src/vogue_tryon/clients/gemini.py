from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Sequence

import httpx

from ..codec import to_data_url
from ..config import GeminiConfig
from ..errors import GenerationFailedError, ValidationError
from ..prompts import build_edit_prompt, build_try_on_prompt
from ..types import EncodedImage, GenerationResult, InlineImagePart, Part, TextPart

logger = logging.getLogger(__name__)


def inline_part(image: EncodedImage) -> InlineImagePart:
    return InlineImagePart(data=image.base64_payload, mime_type=image.mime_type)


def serialize_part(part: Part) -> Dict[str, Any]:
    if isinstance(part, InlineImagePart):
        return {"inlineData": {"mimeType": part.mime_type, "data": part.data}}
    return {"text": part.text}


def decode_part(raw: Dict[str, Any]) -> Part | None:
    """Map one REST response part onto the tagged variant, or ``None`` if it is neither kind."""
    inline = raw.get("inlineData") or raw.get("inline_data")
    if inline and inline.get("data"):
        mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
        return InlineImagePart(data=inline["data"], mime_type=mime_type)
    text = raw.get("text")
    if isinstance(text, str) and text:
        return TextPart(text=text)
    return None


def extract_result(parts: Iterable[Part], *, with_caption: bool = True) -> GenerationResult:
    """
    Fold decoded parts into a result: the first image wins, the first text
    becomes the caption. Anything after those is ignored.
    """
    image: InlineImagePart | None = None
    caption: str | None = None
    for part in parts:
        if isinstance(part, InlineImagePart):
            if image is None:
                image = part
        elif with_caption and caption is None:
            caption = part.text

    if image is None:
        raise GenerationFailedError()

    image_url = to_data_url(EncodedImage(base64_payload=image.data, mime_type=image.mime_type))
    return GenerationResult(image_url=image_url, caption_text=caption)


class GeminiImageClient:
    """Client for the Gemini ``generateContent`` endpoint with image output."""

    def __init__(
        self,
        config: GeminiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._session = httpx.AsyncClient(
            base_url=config.api_url.rstrip("/"),
            headers={
                "x-goog-api-key": config.api_key,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )
        self._generate_path = f"/models/{config.model}:generateContent"

    @property
    def model(self) -> str:
        return self._config.model

    async def aclose(self) -> None:
        await self._session.aclose()

    async def generate(self, parts: Sequence[Part]) -> List[Part]:
        """
        Send one request and return the first candidate's decoded output parts.

        HTTP, transport and authentication failures propagate as ``httpx.HTTPError``.
        """
        payload = {
            "contents": [{"role": "user", "parts": [serialize_part(part) for part in parts]}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }
        logger.info("Calling %s with %d input parts", self.model, len(parts))
        response = await self._session.post(self._generate_path, json=payload)
        response.raise_for_status()

        data: Dict[str, Any] = response.json()
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            logger.warning(
                "Response contained no candidates (block reason: %s)",
                feedback.get("blockReason", "unknown"),
            )
            return []

        content = candidates[0].get("content") or {}
        decoded = [decode_part(raw) for raw in content.get("parts") or []]
        output = [part for part in decoded if part is not None]
        logger.debug("Decoded %d output parts", len(output))
        return output

    async def compose_try_on(
        self,
        person_image: EncodedImage,
        outfit_image: EncodedImage,
        instruction: str | None = None,
    ) -> GenerationResult:
        """Render the person from the first image wearing the garment from the second."""
        if person_image is None or outfit_image is None:
            raise ValidationError("Both a person image and an outfit image are required.")

        parts: List[Part] = [
            inline_part(person_image),
            inline_part(outfit_image),
            TextPart(text=build_try_on_prompt(instruction)),
        ]
        return extract_result(await self.generate(parts), with_caption=True)

    async def edit_with_instruction(
        self,
        source_image: EncodedImage,
        instruction: str,
    ) -> GenerationResult:
        if not instruction or not instruction.strip():
            raise ValidationError("An edit instruction is required.")

        parts: List[Part] = [
            inline_part(source_image),
            TextPart(text=build_edit_prompt(instruction)),
        ]
        return extract_result(await self.generate(parts), with_caption=False)

    async def __aenter__(self) -> "GeminiImageClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()
