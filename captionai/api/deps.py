"""
Purpose:
- FastAPI dependency getters for the collaborators built in the app lifespan.
- Resolve an optional `Authorization: Bearer <token>` header into a signed-in user.

Notes:
- Tests swap any of these via app.dependency_overrides.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request

from ..core.settings import Settings
from ..gateway.client import CaptionGenerator
from ..store.auth import AuthError, SupabaseAuthClient
from ..store.records import RecordStore
from ..store.schema import SessionUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    user: SessionUser
    token: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> CaptionGenerator:
    return request.app.state.gateway


def get_record_store(request: Request) -> Optional[RecordStore]:
    return getattr(request.app.state, "record_store", None)


def get_auth_client(request: Request) -> Optional[SupabaseAuthClient]:
    return getattr(request.app.state, "auth_client", None)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def optional_session(
    authorization: Optional[str] = Header(default=None),
    auth: Optional[SupabaseAuthClient] = Depends(get_auth_client),
) -> Optional[Session]:
    """Anonymous use is allowed; a stale or bad token just means 'not signed in'."""
    token = bearer_token(authorization)
    if not token or auth is None:
        return None
    try:
        user = await auth.get_user(token)
    except AuthError as e:
        logger.warning("Ignoring bearer token that did not resolve to a user: %s", e.message)
        return None
    return Session(user=user, token=token)


async def require_session(
    authorization: Optional[str] = Header(default=None),
    auth: Optional[SupabaseAuthClient] = Depends(get_auth_client),
) -> Session:
    if auth is None:
        raise HTTPException(status_code=503, detail={"code": "NOT_CONFIGURED", "message": "Accounts are not enabled"})
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "Sign in required"})
    try:
        user = await auth.get_user(token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": e.message}) from e
    return Session(user=user, token=token)
