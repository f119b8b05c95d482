"""
Purpose:
- Liveness check for the prompt service.
- Reports installed library versions, the configured Gemini model and session usage.
- Says only whether API_KEY is set, never what it is.
"""

from fastapi import APIRouter, Request
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except ImportError:
        return "not-installed"

@router.get("/healthz")
async def healthz(request: Request):
    settings = request.app.state.settings
    service = request.app.state.prompt_service
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic_settings": _ver("pydantic_settings"),
            "google.genai": _ver("google.genai"),
            "PIL": _ver("PIL"),
            "loguru": _ver("loguru"),
        },
        "config": {
            "model": getattr(service, "model", settings.gemini_model),
            "max_upload_mb": settings.max_upload_mb,
            "env_keys_present": {"API_KEY": bool(settings.api_key)},
        },
        "sessions": {
            "active": len(request.app.state.sessions),
            "max": settings.max_sessions,
        },
    }
