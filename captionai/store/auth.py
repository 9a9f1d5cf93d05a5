"""
Purpose:
- Email/password sessions via Supabase Auth (GoTrue REST): sign up, sign in, sign out, who-am-I.
- Translate the common GoTrue errors into messages fit for end users.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Optional
import httpx

from .base import SupabaseBase, error_message
from .schema import AuthSession, SessionUser

logger = logging.getLogger(__name__)

MIN_PASSWORD_CHARS = 6

_FRIENDLY = {
    "Email not confirmed": "Please check your email and click the confirmation link before signing in.",
    "Invalid login credentials": "Invalid email or password. Please try again.",
}


class AuthError(RuntimeError):
    def __init__(self, message: str, status: int = 400):
        self.message = message
        self.status = status
        super().__init__(message)


def friendly_message(raw: str) -> str:
    for needle, msg in _FRIENDLY.items():
        if needle in raw:
            return msg
    return raw


def _require_credentials(email: str, password: str) -> str:
    email = (email or "").strip()
    if not email or not password:
        raise AuthError("Please enter both email and password")
    return email


class SupabaseAuthClient(SupabaseBase):
    def _url(self, path: str) -> str:
        return f"{self.cfg.url}/auth/v1/{path}"

    async def _call(self, method: str, path: str, *, token: Optional[str] = None,
                    params: Optional[Dict[str, str]] = None, json: Any = None) -> httpx.Response:
        headers = {"apikey": self.cfg.anon_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            r = await self._client.request(method, self._url(path), headers=headers, params=params, json=json)
        except httpx.HTTPError as e:
            raise AuthError(f"auth service unreachable: {e!r}", status=503) from e
        if not r.is_success:
            raise AuthError(friendly_message(error_message(r)), status=r.status_code)
        return r

    async def sign_up(self, email: str, password: str) -> Optional[SessionUser]:
        """
        Register a user. With email confirmation on, GoTrue returns the bare user and no session.
        """
        email = _require_credentials(email, password)
        if len(password) < MIN_PASSWORD_CHARS:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_CHARS} characters")
        r = await self._call("POST", "signup", json={"email": email, "password": password})
        body = r.json() or {}
        user = body.get("user") if isinstance(body.get("user"), dict) else body
        logger.info("Sign-up requested for %s", email)
        return SessionUser.model_validate(user) if user and user.get("id") else None

    async def sign_in(self, email: str, password: str) -> AuthSession:
        email = _require_credentials(email, password)
        r = await self._call(
            "POST", "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return AuthSession.model_validate(r.json())

    async def sign_out(self, token: str) -> None:
        await self._call("POST", "logout", token=token)

    async def get_user(self, token: str) -> SessionUser:
        r = await self._call("GET", "user", token=token)
        return SessionUser.model_validate(r.json())
