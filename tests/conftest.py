from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image

from image2prompt.core.errors import PromptServiceError
from image2prompt.core.settings import Settings
from image2prompt.vlm.captioner import PromptService

FOX_PROMPT = "A red fox in a snowy forest, soft morning light."


class FakePromptService(PromptService):
    """Records every call; returns `reply` or raises `error`."""

    model = "fake-model"

    def __init__(self, reply: str = FOX_PROMPT, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate_prompt(self, base64_image: str, mime_type: str) -> str:
        self.calls.append((base64_image, mime_type))
        if self.error is not None:
            raise self.error
        return self.reply


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def image_bytes(fmt: str = "JPEG", size: tuple[int, int] = (32, 24)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, (200, 40, 20)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def fake_service() -> FakePromptService:
    return FakePromptService()


@pytest.fixture
def failing_service() -> FakePromptService:
    return FakePromptService(error=PromptServiceError("Failed to communicate with the Gemini API."))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes("JPEG")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, api_key="test-key", max_upload_mb=1, max_sessions=4)
