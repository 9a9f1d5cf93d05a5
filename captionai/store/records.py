"""
Purpose:
- Persist generated captions per user and read back a user's history.
- Backed by the Supabase `captions` table through PostgREST.

Notes:
- Row-level security on the table scopes reads/writes to the caller's token;
  we still filter by user_id so a misconfigured policy can't leak other rows.
"""

from __future__ import annotations
import logging
from typing import List, Protocol
import httpx

from ..gateway.schema import GenerationRequest, GenerationResult
from .base import SupabaseBase, error_message
from .schema import CaptionRecord

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class RecordStore(Protocol):
    async def save(self, user_id: str, request: GenerationRequest, result: GenerationResult,
                   access_token: str) -> CaptionRecord: ...

    async def list_for_user(self, user_id: str, access_token: str) -> List[CaptionRecord]: ...


def _enum_value(v):
    return getattr(v, "value", v)


def record_row(user_id: str, request: GenerationRequest, result: GenerationResult) -> dict:
    """Column layout of the captions table (parameters stored as the labels the user picked)."""
    return {
        "user_id": user_id,
        "captions": result.as_list(),
        "platform": _enum_value(request.platform) or "",
        "tone": _enum_value(request.tone) or "",
        "language": _enum_value(request.language) or "",
        "additional_info": request.context or "",
    }


class SupabaseRecordStore(SupabaseBase):
    @property
    def _table_url(self) -> str:
        return f"{self.cfg.url}/rest/v1/{self.cfg.captions_table}"

    async def save(self, user_id: str, request: GenerationRequest, result: GenerationResult,
                   access_token: str) -> CaptionRecord:
        headers = self._headers(access_token)
        headers["Prefer"] = "return=representation"
        row = record_row(user_id, request, result)
        try:
            r = await self._client.post(self._table_url, headers=headers, json=row)
        except httpx.HTTPError as e:
            raise StoreError(f"insert failed: {e!r}") from e
        if not r.is_success:
            raise StoreError(f"insert failed: {error_message(r)}", r.status_code)

        try:
            rows = r.json() or []
            saved = CaptionRecord.model_validate(rows[0]) if rows else CaptionRecord.model_validate(row)
        except ValueError as e:
            # JSONDecodeError and pydantic ValidationError are both ValueErrors
            raise StoreError(f"insert returned an unreadable row: {e}", r.status_code) from e
        logger.info("Saved %d caption(s) for user %s (record %s)", len(result), user_id, saved.id)
        return saved

    async def list_for_user(self, user_id: str, access_token: str) -> List[CaptionRecord]:
        params = {
            "select": "*",
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc",
        }
        try:
            r = await self._client.get(self._table_url, headers=self._headers(access_token), params=params)
        except httpx.HTTPError as e:
            raise StoreError(f"select failed: {e!r}") from e
        if not r.is_success:
            raise StoreError(f"select failed: {error_message(r)}", r.status_code)
        try:
            return [CaptionRecord.model_validate(it) for it in (r.json() or [])]
        except ValueError as e:
            raise StoreError(f"select returned unreadable rows: {e}", r.status_code) from e
