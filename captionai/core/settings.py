"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- Keeps API keys, endpoints and retry knobs tunable without code changes.
"""

# --- Purpose: robust settings with env-file support and safe handling of extra keys.
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GEMINI_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.0-flash-exp:generateContent"
)

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
    cors_allow_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed origins for browser apps"
    )

    # ---- Gemini (caption generation) ----
    # GEMINI_API_KEY comes from env (.env or shell); missing key fails on first use, not at startup
    gemini_api_url: str = Field(default=GEMINI_ENDPOINT, description="generateContent endpoint")
    gemini_api_key: Optional[str] = None
    gemini_temperature: float = Field(default=0.8)
    gemini_timeout_s: float = Field(default=30.0, description="Per-request transport timeout")

    # ---- Retry / backoff ----
    caption_max_attempts: int = Field(default=3, ge=1)
    caption_backoff_base_s: float = Field(default=1.0)     # wait = base * 2^attempt + jitter
    caption_backoff_jitter_s: float = Field(default=1.0)   # jitter drawn from [0, this)

    # ---- Upload limits ----
    upload_max_bytes: int = Field(default=4 * 1024 * 1024)
    upload_allowed_mime_types: List[str] = Field(
        default=["image/jpeg", "image/png", "image/webp"],
    )

    # ---- Supabase (auth + caption history) ----
    # SUPABASE_URL, SUPABASE_ANON_KEY; when unset, history and auth routes answer 503
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_captions_table: str = Field(default="captions")
    supabase_timeout_s: float = Field(default=10.0)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@dataclass(frozen=True)
class GatewayConfig:
    api_url: str
    api_key: Optional[str]
    temperature: float = 0.8
    max_attempts: int = 3
    backoff_base_s: float = 1.0
    backoff_jitter_s: float = 1.0
    timeout_s: float = 30.0


def gateway_config_from_settings(s: Settings) -> GatewayConfig:
    """Snapshot the gateway knobs so the gateway never reads global settings."""
    return GatewayConfig(
        api_url=s.gemini_api_url,
        api_key=s.gemini_api_key,
        temperature=s.gemini_temperature,
        max_attempts=s.caption_max_attempts,
        backoff_base_s=s.caption_backoff_base_s,
        backoff_jitter_s=s.caption_backoff_jitter_s,
        timeout_s=s.gemini_timeout_s,
    )

settings = Settings()
