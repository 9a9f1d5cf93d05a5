"""Shared pytest fixtures for CaptionAI tests."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Callable, Dict, List, Optional

import pytest
from PIL import Image

from captionai.core.settings import GatewayConfig, Settings
from captionai.gateway.errors import GatewayError
from captionai.gateway.schema import GenerationRequest, GenerationResult
from captionai.store.auth import AuthError
from captionai.store.records import StoreError, record_row
from captionai.store.schema import AuthSession, CaptionRecord, SessionUser


def _encode(fmt: str) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (8, 8), color=(200, 120, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return _encode("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _encode("JPEG")


@pytest.fixture
def webp_bytes() -> bytes:
    return _encode("WEBP")


@pytest.fixture
def gateway_config() -> GatewayConfig:
    """Gateway config pointed at a fake endpoint."""
    return GatewayConfig(
        api_url="https://gemini.test/v1beta/models/test:generateContent",
        api_key="test-key",
        temperature=0.8,
        max_attempts=3,
        backoff_base_s=1.0,
        backoff_jitter_s=1.0,
    )


@pytest.fixture
def gemini_body() -> Callable[[str], Dict[str, Any]]:
    """Build a generateContent response carrying the given text."""

    def _body(text: str) -> Dict[str, Any]:
        return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}

    return _body


@pytest.fixture
def sample_request(png_bytes: bytes) -> GenerationRequest:
    return GenerationRequest.from_upload(png_bytes, "image/png")


class SleepRecorder:
    """Stands in for asyncio.sleep; records requested delays without waiting."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


# ---------------------------------------------------------------------------
# Collaborator fakes for API tests.
# ---------------------------------------------------------------------------


class FakeGenerator:
    def __init__(self, captions: Optional[List[str]] = None, error: Optional[GatewayError] = None):
        self.captions = captions if captions is not None else ["First caption here", "Second caption here"]
        self.error = error
        self.requests: List[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return GenerationResult(captions=tuple(self.captions))


class FakeRecordStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: List[CaptionRecord] = []

    async def save(self, user_id, request, result, access_token) -> CaptionRecord:
        if self.fail:
            raise StoreError("insert failed: boom", 500)
        rec = CaptionRecord(id=f"rec-{len(self.records) + 1}", **record_row(user_id, request, result))
        self.records.insert(0, rec)
        return rec

    async def list_for_user(self, user_id, access_token) -> List[CaptionRecord]:
        if self.fail:
            raise StoreError("select failed: boom", 500)
        return [r for r in self.records if r.user_id == user_id]


GOOD_TOKEN = "good-token"


class FakeAuthClient:
    def __init__(self) -> None:
        self.user = SessionUser(id="user-1", email="ada@example.com")
        self.signed_out: List[str] = []

    async def get_user(self, token: str) -> SessionUser:
        if token != GOOD_TOKEN:
            raise AuthError("invalid JWT", status=401)
        return self.user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        if password != "hunter22":
            raise AuthError("Invalid email or password. Please try again.", status=400)
        return AuthSession(access_token=GOOD_TOKEN, refresh_token="r", expires_in=3600, user=self.user)

    async def sign_up(self, email: str, password: str) -> Optional[SessionUser]:
        if len(password) < 6:
            raise AuthError("Password must be at least 6 characters")
        return SessionUser(id="user-2", email=email)

    async def sign_out(self, token: str) -> None:
        self.signed_out.append(token)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def fake_auth() -> FakeAuthClient:
    return FakeAuthClient()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, gemini_api_key="test-key", upload_max_bytes=4 * 1024 * 1024)


@pytest.fixture
def make_generator() -> Callable[..., FakeGenerator]:
    """Factory for generators with custom captions or a forced error."""
    return FakeGenerator


@pytest.fixture
def good_token() -> str:
    return GOOD_TOKEN


@pytest.fixture
def make_store() -> Callable[..., FakeRecordStore]:
    return FakeRecordStore
