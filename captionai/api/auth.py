"""
Purpose:
- Thin proxy over Supabase Auth so the browser only ever talks to this API.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional

from ..store.auth import AuthError, SupabaseAuthClient
from ..store.schema import AuthSession, SessionUser
from .deps import Session, get_auth_client, require_session

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class Credentials(BaseModel):
    email: str = Field(default="", description="Account email")
    password: str = Field(default="", description="Account password")


class SignUpResponse(BaseModel):
    ok: bool = True
    user: Optional[SessionUser] = None
    notes: str = "Check your email for confirmation link!"


def _auth_or_503(auth: Optional[SupabaseAuthClient]) -> SupabaseAuthClient:
    if auth is None:
        raise HTTPException(status_code=503, detail={"code": "NOT_CONFIGURED", "message": "Accounts are not enabled"})
    return auth


def _http_error(e: AuthError) -> HTTPException:
    return HTTPException(status_code=e.status, detail={"code": "AUTH_FAILED", "message": e.message})


@router.post("/signup", response_model=SignUpResponse)
async def sign_up(payload: Credentials, auth: Optional[SupabaseAuthClient] = Depends(get_auth_client)):
    client = _auth_or_503(auth)
    try:
        user = await client.sign_up(payload.email, payload.password)
    except AuthError as e:
        raise _http_error(e) from e
    return SignUpResponse(user=user)


@router.post("/signin", response_model=AuthSession)
async def sign_in(payload: Credentials, auth: Optional[SupabaseAuthClient] = Depends(get_auth_client)):
    client = _auth_or_503(auth)
    try:
        return await client.sign_in(payload.email, payload.password)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/signout")
async def sign_out(session: Session = Depends(require_session),
                   auth: Optional[SupabaseAuthClient] = Depends(get_auth_client)):
    try:
        await _auth_or_503(auth).sign_out(session.token)
    except AuthError as e:
        raise _http_error(e) from e
    return {"ok": True}


@router.get("/me", response_model=SessionUser)
async def me(session: Session = Depends(require_session)):
    return session.user
