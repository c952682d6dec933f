from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Protocol

import httpx

from .codec import RawFile, encode, from_data_url
from .errors import TryOnError, UnreadableFileError, ValidationError
from .types import EMPTY_STATE, ApplicationState, EncodedImage, GenerationResult

logger = logging.getLogger(__name__)

MISSING_IMAGES_MESSAGE = "Please upload both your photo and an outfit photo."
MISSING_EDIT_SOURCE_MESSAGE = (
    "Please provide an image to edit (upload your photo or generate a try-on first)."
)
MISSING_INSTRUCTION_MESSAGE = "Please enter an edit instruction (e.g., 'Add a retro filter')."
TRY_ON_FALLBACK_MESSAGE = "Something went wrong during generation."
EDIT_FALLBACK_MESSAGE = "Failed to edit image."


class GenerationClient(Protocol):
    async def compose_try_on(
        self,
        person_image: EncodedImage,
        outfit_image: EncodedImage,
        instruction: str | None = None,
    ) -> GenerationResult: ...

    async def edit_with_instruction(
        self, source_image: EncodedImage, instruction: str
    ) -> GenerationResult: ...


# ---------------------------------------------------------------------- #
# Pure state transitions
# ---------------------------------------------------------------------- #
def select_person_image(state: ApplicationState, image: EncodedImage | None) -> ApplicationState:
    return replace(state, person_image=image)


def select_outfit_image(state: ApplicationState, image: EncodedImage | None) -> ApplicationState:
    return replace(state, outfit_image=image)


def set_instruction(state: ApplicationState, instruction: str) -> ApplicationState:
    return replace(state, instruction=instruction)


def clear_all(state: ApplicationState) -> ApplicationState:  # noqa: ARG001
    return EMPTY_STATE


def with_result(state: ApplicationState, result: GenerationResult) -> ApplicationState:
    """Store a fresh result; the instruction that produced it is consumed."""
    return replace(state, result=result, instruction="", error_message=None)


def with_error(state: ApplicationState, message: str) -> ApplicationState:
    return replace(state, error_message=message)


def try_on_inputs(state: ApplicationState) -> tuple[EncodedImage, EncodedImage]:
    if state.person_image is None or state.outfit_image is None:
        raise ValidationError(MISSING_IMAGES_MESSAGE)
    return state.person_image, state.outfit_image


def edit_inputs(state: ApplicationState) -> tuple[EncodedImage, str]:
    """
    Resolve the edit source and instruction.

    The most recent result is edited when there is one, otherwise the
    uploaded person photo.
    """
    if state.result is None and state.person_image is None:
        raise ValidationError(MISSING_EDIT_SOURCE_MESSAGE)
    if not state.instruction.strip():
        raise ValidationError(MISSING_INSTRUCTION_MESSAGE)

    if state.result is not None:
        source = from_data_url(state.result.image_url)
    else:
        source = state.person_image
    return source, state.instruction


class TryOnController:
    """
    Owns the state of one try-on session and dispatches generation calls.

    At most one generation runs per session; ``busy`` reflects whether that
    call is still outstanding. ``clear_all`` starts a new session: a call
    still running for the old one is left to finish and its outcome dropped.
    """

    def __init__(self, client: GenerationClient, state: ApplicationState = EMPTY_STATE) -> None:
        self._client = client
        self._state = replace(state, busy=False)
        self._pending: asyncio.Future[GenerationResult] | None = None
        self._session = 0

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def state(self) -> ApplicationState:
        return replace(self._state, busy=self.busy)

    # ------------------------------------------------------------------ #
    # Selection actions
    # ------------------------------------------------------------------ #
    def select_person_image(self, raw_file: RawFile | None, mime_type: str | None = None) -> None:
        image = self._encode_selection(raw_file, mime_type)
        if image is not None or raw_file is None:
            self._state = select_person_image(self._state, image)

    def select_outfit_image(self, raw_file: RawFile | None, mime_type: str | None = None) -> None:
        image = self._encode_selection(raw_file, mime_type)
        if image is not None or raw_file is None:
            self._state = select_outfit_image(self._state, image)

    def set_instruction(self, instruction: str) -> None:
        self._state = set_instruction(self._state, instruction)

    def clear_all(self) -> None:
        self._state = clear_all(self._state)
        self._session += 1
        self._pending = None
        logger.debug("Session state cleared")

    # ------------------------------------------------------------------ #
    # Generation actions
    # ------------------------------------------------------------------ #
    async def run_try_on(self) -> None:
        if self._refuse_while_busy("try-on"):
            return
        try:
            person_image, outfit_image = try_on_inputs(self._state)
        except ValidationError as exc:
            self._state = with_error(self._state, str(exc))
            return

        logger.info("Dispatching try-on")
        await self._dispatch(
            self._client.compose_try_on(person_image, outfit_image, self._state.instruction),
            TRY_ON_FALLBACK_MESSAGE,
        )

    async def run_edit(self) -> None:
        if self._refuse_while_busy("edit"):
            return
        try:
            source_image, instruction = edit_inputs(self._state)
        except TryOnError as exc:
            self._state = with_error(self._state, str(exc))
            return

        logger.info("Dispatching edit")
        await self._dispatch(
            self._client.edit_with_instruction(source_image, instruction),
            EDIT_FALLBACK_MESSAGE,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _encode_selection(
        self, raw_file: RawFile | None, mime_type: str | None
    ) -> EncodedImage | None:
        if raw_file is None:
            return None
        try:
            return encode(raw_file, mime_type)
        except UnreadableFileError as exc:
            logger.warning("Image selection rejected: %s", exc)
            self._state = with_error(self._state, str(exc))
            return None

    def _refuse_while_busy(self, action: str) -> bool:
        if self.busy:
            logger.warning("Ignoring %s request while a generation is in flight", action)
            return True
        return False

    async def _dispatch(self, call: Awaitable[GenerationResult], fallback_message: str) -> None:
        self._state = replace(self._state, error_message=None)
        session = self._session
        pending = self._pending = asyncio.ensure_future(call)
        try:
            result = await pending
            if session != self._session:
                logger.info("Dropping result for a cleared session")
                return
        except (TryOnError, httpx.HTTPError) as exc:
            logger.warning("Generation failed: %s", exc)
            if session != self._session:
                return
            self._state = with_error(self._state, str(exc) or fallback_message)
        except Exception as exc:
            logger.exception("Unexpected generation failure")
            if session != self._session:
                return
            self._state = with_error(self._state, str(exc) or fallback_message)
        else:
            logger.info("Generation succeeded")
            self._state = with_result(self._state, result)
        finally:
            if self._pending is pending:
                self._pending = None
