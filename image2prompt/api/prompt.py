"""
Purpose:
- JSON endpoints behind the single-page UI: state, upload, generate, copy, reset.
- Each browser gets its own PromptController, keyed by a session cookie.
- Every endpoint answers with the state view so the page re-renders from one source.
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from pydantic import BaseModel

from ..ui.controller import PromptController
from ..ui.sessions import SessionRegistry
from ..ui.state import OutcomeStatus, PromptStateView

router = APIRouter(prefix="/api/v1/prompt", tags=["prompt"])

class CopyResponse(BaseModel):
    text: Optional[str] = None
    state: PromptStateView

async def session_controller(request: Request, response: Response) -> PromptController:
    registry: SessionRegistry = request.app.state.sessions
    cookie = request.app.state.settings.session_cookie_name
    incoming = request.cookies.get(cookie)
    sid, ctrl = registry.get_or_create(incoming)
    if sid != incoming:
        response.set_cookie(cookie, sid, httponly=True, samesite="lax")
    return ctrl

@router.get("/state", response_model=PromptStateView)
async def get_state(ctrl: PromptController = Depends(session_controller)):
    return ctrl.view()

@router.post("/image", response_model=PromptStateView)
async def select_image(
    response: Response,
    image: UploadFile = File(...),
    ctrl: PromptController = Depends(session_controller),
):
    """
    Store the picked file. 400 (with the error in the state) when the type or size is rejected.
    """
    # read one byte past the limit so oversize files are caught without buffering them whole
    limit = ctrl.max_upload_bytes
    raw = await image.read(limit + 1) if limit is not None else await image.read()
    if not ctrl.select_file(raw, image.content_type or "", image.filename or ""):
        response.status_code = 400
    return ctrl.view()

@router.post("/generate", response_model=PromptStateView)
async def generate(response: Response, ctrl: PromptController = Depends(session_controller)):
    """
    One outbound request per call. 409 while a request is pending, 400 without an image,
    502 when the service failed (the state carries the generic message only).
    """
    outcome = await ctrl.generate()
    if outcome.status is OutcomeStatus.FAILURE:
        response.status_code = 400 if ctrl.state.image is None else 502
    return ctrl.view()

@router.post("/copy", response_model=CopyResponse)
async def copy_prompt(ctrl: PromptController = Depends(session_controller)):
    text = ctrl.copy()
    return CopyResponse(text=text, state=ctrl.view())

@router.post("/reset", response_model=PromptStateView)
async def reset(ctrl: PromptController = Depends(session_controller)):
    ctrl.reset()
    return ctrl.view()
