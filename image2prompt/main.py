"""
Purpose:
- FastAPI application factory and router mounts.
- Adds CORS for local dev, serves the single-page UI from ./static.
- Refuses to start without the Gemini credential (API_KEY).
- Uvicorn will serve this on 0.0.0.0:8000 by default.
"""

from pathlib import Path
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from .core.errors import GenerationInProgressError, MissingCredentialError
from .core.logging import setup_logger
from .core.settings import Settings, settings as default_settings
from .api.health import router as health_router
from .api.prompt import router as prompt_router
from .ui.controller import PromptController
from .ui.sessions import SessionRegistry
from .vlm.captioner import PromptService
from .vlm.prompt_client import get_prompt_client

STATIC_DIR = Path(__file__).parent / "static"

def create_app(settings: Optional[Settings] = None, service: Optional[PromptService] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logger(settings.log_level)

    if not settings.api_key:
        logger.critical("API_KEY is not set; refusing to start")
        raise MissingCredentialError("API_KEY is not defined in environment variables")
    if service is None:
        service = get_prompt_client(api_key=settings.api_key, model=settings.gemini_model)

    app = FastAPI(title="Image to Prompt Generator", version="0.1.0")
    app.state.settings = settings
    app.state.prompt_service = service
    app.state.sessions = SessionRegistry(
        factory=lambda: PromptController(service, max_upload_bytes=settings.max_upload_bytes),
        max_sessions=settings.max_sessions,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GenerationInProgressError)
    async def _busy(request: Request, exc: GenerationInProgressError):
        return JSONResponse(status_code=409, content=exc.to_dict())

    app.include_router(health_router)
    app.include_router(prompt_router)
    # Mounted last so the API routes win over the catch-all static mount
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
    logger.info("Image to Prompt ready (model={})", getattr(service, "model", settings.gemini_model))
    return app

def run() -> None:
    import uvicorn
    uvicorn.run(create_app(), host=default_settings.host, port=default_settings.port)
