import asyncio
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from conftest import FOX_PROMPT, image_bytes
from image2prompt.core.errors import MissingCredentialError
from image2prompt.core.settings import Settings
from image2prompt.main import create_app
from image2prompt.ui.controller import (
    GENERATION_FAILED_MESSAGE,
    INVALID_TYPE_MESSAGE,
    NO_IMAGE_MESSAGE,
)


@pytest.fixture
def client(test_settings, fake_service) -> TestClient:
    return TestClient(create_app(settings=test_settings, service=fake_service))


def _upload(client: TestClient, data: bytes, mime_type: str, name: str = "fox.jpg"):
    return client.post("/api/v1/prompt/image", files={"image": (name, data, mime_type)})


def _controller(client: TestClient, test_settings):
    sid = client.cookies.get(test_settings.session_cookie_name)
    _, ctrl = client.app.state.sessions.get_or_create(sid)
    return ctrl


def test_missing_credential_aborts_startup(fake_service) -> None:
    with pytest.raises(MissingCredentialError):
        create_app(settings=Settings(_env_file=None, api_key=None), service=fake_service)


def test_index_page_is_served(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "Image to Prompt Generator" in response.text


def test_initial_state_sets_session_cookie(client, test_settings) -> None:
    response = client.get("/api/v1/prompt/state")

    assert response.status_code == 200
    assert response.json()["phase"] == "idle"
    assert test_settings.session_cookie_name in response.cookies


def test_full_flow(client, fake_service, jpeg_bytes) -> None:
    selected = _upload(client, jpeg_bytes, "image/jpeg")
    assert selected.status_code == 200
    assert selected.json()["can_generate"] is True
    assert selected.json()["preview_url"].startswith("data:image/png;base64,")

    generated = client.post("/api/v1/prompt/generate")
    assert generated.status_code == 200
    body = generated.json()
    assert body["prompt"] == FOX_PROMPT
    assert body["phase"] == "displaying"
    assert len(fake_service.calls) == 1

    copied = client.post("/api/v1/prompt/copy")
    assert copied.json()["text"] == FOX_PROMPT
    assert copied.json()["state"]["is_copied"] is True

    reset = client.post("/api/v1/prompt/reset")
    assert reset.json() == client.get("/api/v1/prompt/state").json()
    assert reset.json()["phase"] == "idle"
    assert reset.json()["preview_url"] is None
    assert reset.json()["prompt"] == ""
    assert reset.json()["is_copied"] is False


def test_invalid_type_is_rejected(client, fake_service) -> None:
    response = _upload(client, b"GIF89a", "image/gif", "anim.gif")

    assert response.status_code == 400
    assert response.json()["error"] == INVALID_TYPE_MESSAGE
    assert response.json()["can_generate"] is False
    assert client.post("/api/v1/prompt/generate").status_code == 400
    assert fake_service.calls == []


def test_oversized_upload_is_rejected(client) -> None:
    response = _upload(client, b"\0" * (1024 * 1024 + 1), "image/png", "huge.png")

    assert response.status_code == 400
    assert "too large" in response.json()["error"]


def test_generate_without_image(client, fake_service) -> None:
    response = client.post("/api/v1/prompt/generate")

    assert response.status_code == 400
    assert response.json()["error"] == NO_IMAGE_MESSAGE
    assert fake_service.calls == []


def test_service_failure_hides_detail(test_settings, failing_service, jpeg_bytes) -> None:
    client = TestClient(create_app(settings=test_settings, service=failing_service))
    _upload(client, jpeg_bytes, "image/jpeg")

    response = client.post("/api/v1/prompt/generate")

    assert response.status_code == 502
    assert response.json()["error"] == GENERATION_FAILED_MESSAGE
    assert response.json()["prompt"] == ""


def test_actions_refused_while_pending(client, fake_service, test_settings, jpeg_bytes) -> None:
    _upload(client, jpeg_bytes, "image/jpeg")
    ctrl = _controller(client, test_settings)
    ctrl.state.is_loading = True

    generate = client.post("/api/v1/prompt/generate")
    reset = client.post("/api/v1/prompt/reset")

    assert generate.status_code == 409
    assert generate.json()["code"] == "GENERATION_IN_PROGRESS"
    assert reset.status_code == 409
    assert fake_service.calls == []


def test_sessions_are_isolated(test_settings, fake_service, jpeg_bytes) -> None:
    app = create_app(settings=test_settings, service=fake_service)
    alice, bob = TestClient(app), TestClient(app)

    _upload(alice, jpeg_bytes, "image/jpeg")

    assert alice.get("/api/v1/prompt/state").json()["can_generate"] is True
    assert bob.get("/api/v1/prompt/state").json()["can_generate"] is False


def test_healthz_reports_key_presence_only(client) -> None:
    body = client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["config"]["env_keys_present"] == {"API_KEY": True}
    assert body["config"]["model"] == "fake-model"
    assert "test-key" not in str(body)


def test_new_png_upload_clears_previous_prompt(client, jpeg_bytes) -> None:
    _upload(client, jpeg_bytes, "image/jpeg")
    client.post("/api/v1/prompt/generate")

    response = _upload(client, image_bytes("PNG"), "image/png", "next.png")

    assert response.json()["prompt"] == ""
    assert response.json()["error"] is None
    assert response.json()["filename"] == "next.png"


def test_huge_dimension_png_is_accepted(client) -> None:
    buf = BytesIO()
    Image.new("1", (20000, 10000)).save(buf, format="PNG")

    response = _upload(client, buf.getvalue(), "image/png", "wide.png")

    assert response.status_code == 200
    assert response.json()["can_generate"] is True


def test_sessions_are_resolved_on_the_event_loop(client) -> None:
    registry = client.app.state.sessions
    original = registry.get_or_create
    on_loop = []

    def recording(session_id):
        try:
            asyncio.get_running_loop()
            on_loop.append(True)
        except RuntimeError:
            on_loop.append(False)
        return original(session_id)

    registry.get_or_create = recording

    client.get("/api/v1/prompt/state")
    client.post("/api/v1/prompt/generate")
    client.post("/api/v1/prompt/copy")
    client.post("/api/v1/prompt/reset")

    assert on_loop == [True, True, True, True]
