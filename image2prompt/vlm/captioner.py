"""
Purpose:
- Small interface for image -> prompt generation.
- The Gemini client implements it; tests swap in fakes without touching the controller.

Notes:
- Callers hand over the base64 payload plus its MIME type and get trimmed text back.
"""

from __future__ import annotations
from abc import ABC, abstractmethod

PROMPT_INSTRUCTION = (
    "Analyze this image and generate a highly detailed and creative descriptive prompt "
    "that an AI image generator could use to create a similar image. Focus on visual "
    "elements like subject, setting, composition, lighting, colors, and overall mood. "
    "Do not include any introductory text, just the prompt itself."
)

SERVICE_FAILURE_MESSAGE = "Failed to communicate with the Gemini API. Please try again later."


class PromptService(ABC):
    """Turns one encoded image into one descriptive prompt."""

    @abstractmethod
    async def generate_prompt(self, base64_image: str, mime_type: str) -> str:
        """
        Send the image with PROMPT_INSTRUCTION and return the trimmed text.
        Raises PromptServiceError on any failure.
        """
        ...
