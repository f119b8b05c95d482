"""
Purpose:
- Owns the transient UI state of one browser session.
- State changes only through select_file / generate / copy / reset.

Notes:
- generate() flips is_loading before its only await, so a second call on the
  same event loop sees the flag and is refused without reaching the service.
- The copied indicator is time-based: it reads True for COPY_FEEDBACK_SECONDS
  after copy() and then reverts on its own.
"""

from __future__ import annotations
import time
from typing import Callable, Optional, Protocol

from loguru import logger

from ..core.errors import GenerationInProgressError, PromptServiceError
from ..vlm.captioner import PromptService
from .images import SelectedImage, is_allowed_mime_type, make_preview_url
from .state import Outcome, Phase, PromptState, PromptStateView

COPY_FEEDBACK_SECONDS = 2.0

INVALID_TYPE_MESSAGE = "Invalid file type. Please upload a PNG, JPG, or WEBP image."
NO_IMAGE_MESSAGE = "Please select an image first."
GENERATION_FAILED_MESSAGE = "Failed to generate prompt. Please check your API key and try again."


class Clipboard(Protocol):
    def write_text(self, text: str) -> None: ...


class HandoffClipboard:
    """
    Keeps the last copied text so the HTTP layer can hand it to the browser,
    which owns the real system clipboard.
    """

    def __init__(self) -> None:
        self.text: Optional[str] = None

    def write_text(self, text: str) -> None:
        self.text = text


class PromptController:
    def __init__(
        self,
        service: PromptService,
        *,
        max_upload_bytes: Optional[int] = None,
        clipboard: Optional[Clipboard] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.service = service
        self.max_upload_bytes = max_upload_bytes
        self.clipboard = clipboard if clipboard is not None else HandoffClipboard()
        self._clock = clock
        self.state = PromptState()

    # ---- derived flags ----
    @property
    def is_copied(self) -> bool:
        at = self.state.copied_at
        return at is not None and (self._clock() - at) < COPY_FEEDBACK_SECONDS

    @property
    def phase(self) -> Phase:
        s = self.state
        if s.is_loading:
            return Phase.GENERATING
        if s.prompt:
            return Phase.DISPLAYING
        if s.image is None:
            return Phase.IDLE
        return Phase.ERRORED if s.error else Phase.SELECTING

    @property
    def outcome(self) -> Optional[Outcome]:
        """Where the last generate stands; None before the first one or after a new pick."""
        s = self.state
        if s.is_loading:
            return Outcome.pending()
        if s.prompt:
            return Outcome.success(s.prompt)
        if s.image is not None and s.error:
            return Outcome.failure(s.error)
        return None

    @property
    def can_generate(self) -> bool:
        return self.state.image is not None and not self.state.is_loading

    def _ensure_idle(self, action: str) -> None:
        if self.state.is_loading:
            raise GenerationInProgressError(
                f"Cannot {action} while a prompt is being generated.",
                data={"action": action},
            )

    # ---- transitions ----
    def select_file(self, data: bytes, mime_type: str, filename: str = "") -> bool:
        """
        Validate and store a newly picked file. Returns False when it is rejected;
        a rejected pick also drops the previous selection so nothing can be generated from it.
        """
        self._ensure_idle("select a file")
        s = self.state

        rejection = None
        if not is_allowed_mime_type(mime_type):
            rejection = INVALID_TYPE_MESSAGE
        elif self.max_upload_bytes is not None and len(data) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            rejection = f"Image is too large. Please upload a file under {limit_mb} MB."

        if rejection:
            logger.info("Rejected upload {!r} ({}, {} bytes)", filename, mime_type, len(data))
            s.image = None
            s.preview_url = None
            s.prompt = ""
            s.error = rejection
            return False

        image = SelectedImage(data=data, mime_type=mime_type.lower(), filename=filename)
        s.error = None
        s.prompt = ""
        s.image = image
        s.preview_url = make_preview_url(image)
        return True

    async def generate(self) -> Outcome:
        self._ensure_idle("generate")
        s = self.state
        if s.image is None:
            s.error = NO_IMAGE_MESSAGE
            return Outcome.failure(NO_IMAGE_MESSAGE)

        image = s.image
        s.is_loading = True
        s.error = None
        s.prompt = ""
        try:
            text = (await self.service.generate_prompt(image.encode(), image.mime_type)).strip()
            if not text:
                raise PromptServiceError("The prompt service returned no text.")
        except PromptServiceError as e:
            logger.opt(exception=e).error("Prompt generation failed for {!r}", image.filename)
            s.error = GENERATION_FAILED_MESSAGE
            return Outcome.failure(GENERATION_FAILED_MESSAGE)
        finally:
            s.is_loading = False

        s.prompt = text
        return Outcome.success(s.prompt)

    def copy(self) -> Optional[str]:
        """Write the prompt to the clipboard; None when there is nothing to copy."""
        if not self.state.prompt:
            return None
        self.clipboard.write_text(self.state.prompt)
        self.state.copied_at = self._clock()
        return self.state.prompt

    def reset(self) -> None:
        self._ensure_idle("start over")
        self.state = PromptState()

    # ---- rendering ----
    def view(self) -> PromptStateView:
        s = self.state
        idle = not s.is_loading
        return PromptStateView(
            phase=self.phase,
            filename=s.image.filename if s.image else None,
            mime_type=s.image.mime_type if s.image else None,
            preview_url=s.preview_url,
            prompt=s.prompt,
            is_loading=s.is_loading,
            error=s.error,
            is_copied=self.is_copied,
            can_generate=self.can_generate,
            can_reset=s.image is not None and idle,
            can_copy=bool(s.prompt) and idle,
        )
