"""
Gemini-backed prompt generator:
- One generate_content call per request, via the async SDK client
- Instruction text first, inline image second
- Empty text counts as a failure
- Every failure is logged in full, then collapsed into one PromptServiceError
"""

from __future__ import annotations
import base64
from typing import Any, Optional

from google import genai
from google.genai import types
from loguru import logger

from ..core.errors import MissingCredentialError, PromptServiceError
from ..core.settings import settings
from .captioner import PROMPT_INSTRUCTION, SERVICE_FAILURE_MESSAGE, PromptService


class GeminiPromptClient(PromptService):
    """PromptService backed by the Google Gemini API."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", client: Optional[Any] = None):
        if not api_key and client is None:
            raise MissingCredentialError("API_KEY is not defined in environment variables")
        self.model = model
        self._client = client if client is not None else genai.Client(api_key=api_key)

    async def generate_prompt(self, base64_image: str, mime_type: str) -> str:
        try:
            image_part = types.Part.from_bytes(
                data=base64.b64decode(base64_image, validate=True),
                mime_type=mime_type,
            )
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=[PROMPT_INSTRUCTION, image_part],
            )
            text = (response.text or "").strip()
            if not text:
                raise ValueError("The API returned an empty response.")
            return text
        except Exception as e:
            logger.opt(exception=e).error("Error generating prompt from image ({}): {!r}", mime_type, e)
            raise PromptServiceError(SERVICE_FAILURE_MESSAGE) from e


def get_prompt_client(api_key: Optional[str] = None, model: Optional[str] = None) -> GeminiPromptClient:
    """
    Build the Gemini client from settings; explicit arguments win.
    """
    return GeminiPromptClient(
        api_key=api_key if api_key is not None else (settings.api_key or ""),
        model=model or settings.gemini_model,
    )
