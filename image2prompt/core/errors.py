"""
Purpose:
- Error types shared by the client, the controller and the API layer.
- Each error carries a machine-readable code; to_dict() is what the API returns.
"""

from __future__ import annotations
from typing import Any, Dict, Optional


class Image2PromptError(Exception):
    """Base class for all structured errors raised by the app."""

    code: str = "IMAGE2PROMPT_ERROR"

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class MissingCredentialError(Image2PromptError):
    code = "MISSING_CREDENTIAL"


class PromptServiceError(Image2PromptError):
    """The inference service could not produce a prompt. The cause stays on __cause__."""

    code = "PROMPT_SERVICE_ERROR"


class GenerationInProgressError(Image2PromptError):
    code = "GENERATION_IN_PROGRESS"
