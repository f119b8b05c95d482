"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- The Gemini credential comes from API_KEY; the app refuses to start without it.
"""

from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",          # <-- prevents crashes if extra env vars exist
    )

    # API host/port
    host: str = Field(default="0.0.0.0", description="Bind address for FastAPI/Uvicorn")
    port: int = Field(default=8000, description="Port for FastAPI/Uvicorn")

    # CORS
    cors_allow_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed origins for browser apps"
    )

    # ---- Gemini ----
    # Read from API_KEY (env matching is case-insensitive)
    api_key: Optional[str] = Field(default=None, description="Gemini API credential")
    gemini_model: str = Field(default="gemini-2.5-flash", description="Multimodal model used for prompts")

    # ---- Logging ----
    log_level: str = Field(default="INFO", description="Root log level for Loguru")

    # ---- Uploads / sessions ----
    max_upload_mb: int = Field(default=20, ge=1, description="Largest image accepted, in MB")
    max_sessions: int = Field(default=256, ge=1, description="Browser sessions kept in memory")
    session_cookie_name: str = Field(default="image2prompt_session")

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

settings = Settings()
