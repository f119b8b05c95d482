"""
Purpose:
- Explicit state record for one browser session and the view the page renders.
- Outcome is the tri-state result of one generate action.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from pydantic import BaseModel

from .images import SelectedImage

class Phase(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    GENERATING = "generating"
    DISPLAYING = "displaying"
    ERRORED = "errored"

class OutcomeStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"

@dataclass(frozen=True)
class Outcome:
    status: OutcomeStatus
    text: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def pending(cls) -> "Outcome":
        return cls(OutcomeStatus.PENDING)

    @classmethod
    def success(cls, text: str) -> "Outcome":
        return cls(OutcomeStatus.SUCCESS, text=text)

    @classmethod
    def failure(cls, message: str) -> "Outcome":
        return cls(OutcomeStatus.FAILURE, message=message)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

@dataclass
class PromptState:
    image: Optional[SelectedImage] = None
    preview_url: Optional[str] = None
    prompt: str = ""
    is_loading: bool = False
    error: Optional[str] = None
    copied_at: Optional[float] = None   # clock() reading of the last copy

class PromptStateView(BaseModel):
    phase: Phase
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    preview_url: Optional[str] = None
    prompt: str = ""
    is_loading: bool = False
    error: Optional[str] = None
    is_copied: bool = False
    can_generate: bool = False
    can_reset: bool = False
    can_copy: bool = False
