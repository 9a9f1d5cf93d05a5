# Common language: Environment/ops probe that surfaces version pins, config presence, and upstream targets.
# Use this before/after upgrades to confirm no silent drift.

from fastapi import APIRouter, Depends
from ..core.settings import Settings
from .deps import get_settings
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except ImportError:
        return "not-installed"

@router.get("/healthz")
def healthz(cfg: Settings = Depends(get_settings)):
    # Only report whether secrets are present, never their values.
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic": _ver("pydantic"),
            "pydantic_settings": _ver("pydantic_settings"),
            "httpx": _ver("httpx"),
            "PIL": _ver("PIL"),
        },
        "gateway": {
            "endpoint": cfg.gemini_api_url,
            "max_attempts": cfg.caption_max_attempts,
            "temperature": cfg.gemini_temperature,
        },
        "env_keys_present": {
            "GEMINI_API_KEY": bool(cfg.gemini_api_key),
            "SUPABASE_URL": bool(cfg.supabase_url),
            "SUPABASE_ANON_KEY": bool(cfg.supabase_anon_key),
        },
        "history_enabled": cfg.supabase_configured,
    }
