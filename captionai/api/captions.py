"""
Purpose:
- /api/v1/captions/generate: validate upload -> gateway -> (signed in) save to history.
- /api/v1/captions/history: the caller's past generations, newest first.
- /api/v1/captions/options: choices + limits for the front-end selects.

Notes:
- Gateway failures keep their kind in the response `code`; the UI may still show one generic message.
- A failed history save never fails the generation; it is logged and reported as saved=false.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import List, Optional, Type, TypeVar
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from ..core.settings import Settings
from ..gateway.client import CaptionGenerator
from ..gateway.errors import (
    ConfigurationError,
    EmptyResponseError,
    EncodingError,
    GatewayError,
    HttpStatusError,
    TransportError,
)
from ..gateway.schema import GenerationRequest, Language, MAX_CONTEXT_CHARS, Platform, Tone
from ..services.uploads import UploadRejected, validate_upload
from ..store.records import RecordStore, StoreError
from ..store.schema import CaptionRecord
from .deps import Session, get_gateway, get_record_store, get_settings, optional_session, require_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/captions", tags=["captions"])

E = TypeVar("E", bound=Enum)


class CaptionResponse(BaseModel):
    ok: bool = True
    captions: List[str] = []
    platform: Optional[Platform] = None
    tone: Optional[Tone] = None
    language: Optional[Language] = None
    saved: bool = False
    record_id: Optional[str] = None
    filename: Optional[str] = None


class HistoryResponse(BaseModel):
    ok: bool = True
    count: int = 0
    records: List[CaptionRecord] = []


class OptionsResponse(BaseModel):
    platforms: List[str]
    tones: List[str]
    languages: List[str]
    max_context_chars: int
    max_upload_bytes: int
    allowed_mime_types: List[str]


def _choice(enum_cls: Type[E], raw: Optional[str], field: str) -> Optional[E]:
    # selects post "" for "no preference"
    if raw is None or not raw.strip():
        return None
    try:
        return enum_cls(raw.strip())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_CHOICE", "message": f"{field} must be one of: {allowed}"},
        )


def gateway_http_error(e: GatewayError) -> HTTPException:
    if isinstance(e, EncodingError):
        status, code = 400, "INVALID_IMAGE"
    elif isinstance(e, HttpStatusError) and e.status == 429:
        status, code = 429, "RATE_LIMITED"
    elif isinstance(e, HttpStatusError):
        status, code = 502, "UPSTREAM_STATUS"
    elif isinstance(e, TransportError):
        status, code = 504, "UPSTREAM_UNREACHABLE"
    elif isinstance(e, EmptyResponseError):
        status, code = 502, "NO_CAPTIONS"
    elif isinstance(e, ConfigurationError):
        status, code = 503, "NOT_CONFIGURED"
    else:
        status, code = 500, "CAPTION_FAILED"
    return HTTPException(status_code=status, detail={"code": code, "message": str(e)})


@router.get("/options", response_model=OptionsResponse)
def caption_options(cfg: Settings = Depends(get_settings)):
    return OptionsResponse(
        platforms=[p.value for p in Platform],
        tones=[t.value for t in Tone],
        languages=[lang.value for lang in Language],
        max_context_chars=MAX_CONTEXT_CHARS,
        max_upload_bytes=cfg.upload_max_bytes,
        allowed_mime_types=list(cfg.upload_allowed_mime_types),
    )


@router.post("/generate", response_model=CaptionResponse)
async def generate_captions(
    image: UploadFile = File(...),
    platform: Optional[str] = Form(default=None),
    tone: Optional[str] = Form(default=None),
    language: Optional[str] = Form(default=None),
    context: Optional[str] = Form(default=None, max_length=MAX_CONTEXT_CHARS),
    cfg: Settings = Depends(get_settings),
    gateway: CaptionGenerator = Depends(get_gateway),
    store: Optional[RecordStore] = Depends(get_record_store),
    session: Optional[Session] = Depends(optional_session),
):
    raw = await image.read()
    try:
        mime = validate_upload(raw, image.content_type, cfg.upload_max_bytes, cfg.upload_allowed_mime_types)
    except UploadRejected as e:
        status = 413 if e.code == "FILE_TOO_LARGE" else 400
        logger.info("Rejected upload %r: %s", image.filename, e.code)
        raise HTTPException(status_code=status, detail={"code": e.code, "message": e.message})

    req = GenerationRequest.from_upload(
        raw,
        mime,
        platform=_choice(Platform, platform, "platform"),
        tone=_choice(Tone, tone, "tone"),
        language=_choice(Language, language, "language"),
        context=context,
    )

    try:
        result = await gateway.generate(req)
    except GatewayError as e:
        logger.error("Caption generation failed (%s): %s", type(e).__name__, e)
        raise gateway_http_error(e) from e

    saved, record_id = False, None
    if session is not None and store is not None:
        try:
            record = await store.save(session.user.id, req, result, session.token)
            saved, record_id = True, record.id
        except StoreError as e:
            logger.error("Error saving captions for user %s: %s", session.user.id, e)

    return CaptionResponse(
        captions=result.as_list(),
        platform=req.platform,
        tone=req.tone,
        language=req.language,
        saved=saved,
        record_id=record_id,
        filename=image.filename,
    )


@router.get("/history", response_model=HistoryResponse)
async def caption_history(
    session: Session = Depends(require_session),
    store: Optional[RecordStore] = Depends(get_record_store),
):
    if store is None:
        raise HTTPException(status_code=503, detail={"code": "NOT_CONFIGURED", "message": "History is not enabled"})
    try:
        records = await store.list_for_user(session.user.id, session.token)
    except StoreError as e:
        logger.error("Error loading captions for user %s: %s", session.user.id, e)
        raise HTTPException(status_code=502, detail={"code": "STORE_FAILED", "message": str(e)}) from e
    return HistoryResponse(count=len(records), records=records)
