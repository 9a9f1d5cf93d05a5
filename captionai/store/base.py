"""
Purpose:
- Shared plumbing for talking to Supabase over plain REST (PostgREST + GoTrue).

Notes:
- Every call carries the anon key as `apikey`; user calls add `Authorization: Bearer <token>`.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional
import httpx

from ..core.settings import Settings


@dataclass(frozen=True)
class SupabaseConfig:
    url: str
    anon_key: str
    captions_table: str = "captions"
    timeout_s: float = 10.0


def supabase_config_from_settings(s: Settings) -> Optional[SupabaseConfig]:
    if not s.supabase_configured:
        return None
    return SupabaseConfig(
        url=s.supabase_url.rstrip("/"),  # type: ignore[union-attr]
        anon_key=s.supabase_anon_key,  # type: ignore[arg-type]
        captions_table=s.supabase_captions_table,
        timeout_s=s.supabase_timeout_s,
    )


class SupabaseBase:
    def __init__(self, cfg: SupabaseConfig, client: httpx.AsyncClient):
        self.cfg = cfg
        self._client = client

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.cfg.anon_key}
        # PostgREST falls back to the anon role when no user token is given
        headers["Authorization"] = f"Bearer {access_token or self.cfg.anon_key}"
        return headers


def error_message(resp: httpx.Response) -> str:
    """Pull the human-readable message out of a PostgREST/GoTrue error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {resp.status_code}"
