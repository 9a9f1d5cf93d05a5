"""
Purpose:
- Call the Gemini generateContent endpoint for one GenerationRequest.
- Bounded retry: 429 backs off exponentially with jitter, transport errors retry at once,
  any other non-2xx status is terminal.
- Translate every failure into the gateway error taxonomy (see errors.py).

Notes:
- API key travels as the ?key= query parameter.
- Stateless across calls; sleep/jitter/http client are injected so tests never wait or hit the network.
- No logging here: callers decide what to surface.
"""

from __future__ import annotations
import asyncio
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Protocol
import httpx

from ..core.settings import GatewayConfig
from .codec import build_payload, decode_result
from .errors import (
    ConfigurationError,
    EmptyResponseError,
    HttpStatusError,
    TransportError,
)
from .schema import GenerationRequest, GenerationResult

RATE_LIMITED = 429


class CaptionGenerator(Protocol):
    async def generate(self, request: GenerationRequest) -> GenerationResult: ...


class Outcome(str, Enum):
    success = "success"
    retry = "retry"
    failed = "failed"


@dataclass(frozen=True)
class Attempt:
    index: int                               # 0-based
    outcome: Outcome
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None
    delay_s: float = 0.0                     # wait before the next attempt (retry only)


def backoff_delay(attempt_index: int, base_s: float, jitter_s: float,
                  rand: Callable[[], float] = random.random) -> float:
    """base * 2^attempt + jitter in [0, jitter_s)."""
    return base_s * (2 ** attempt_index) + rand() * jitter_s


def classify_response(resp: httpx.Response, attempt_index: int, max_attempts: int) -> Attempt:
    if resp.is_success:
        return Attempt(attempt_index, Outcome.success, response=resp)
    has_more = attempt_index < max_attempts - 1
    if resp.status_code == RATE_LIMITED and has_more:
        return Attempt(attempt_index, Outcome.retry, response=resp)
    return Attempt(
        attempt_index,
        Outcome.failed,
        response=resp,
        error=HttpStatusError(resp.status_code, resp.text[:500]),
    )


def classify_transport_error(exc: httpx.TransportError, attempt_index: int, max_attempts: int) -> Attempt:
    if attempt_index < max_attempts - 1:
        return Attempt(attempt_index, Outcome.retry, error=exc)
    return Attempt(attempt_index, Outcome.failed, error=TransportError(exc, attempt_index + 1))


class GeminiCaptionGateway:
    def __init__(
        self,
        cfg: GatewayConfig,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ):
        self.cfg = cfg
        self._client = client
        self._sleep = sleep
        self._rand = rand

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        if not self.cfg.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        payload = build_payload(request, self.cfg.temperature)

        if self._client is not None:
            return await self._run(self._client, payload)
        async with httpx.AsyncClient(timeout=self.cfg.timeout_s) as client:
            return await self._run(client, payload)

    async def _run(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> GenerationResult:
        last: Optional[Attempt] = None
        async for attempt in self.attempts(client, payload):
            last = attempt
        if last is None or last.outcome is Outcome.retry:
            raise RuntimeError("attempt sequence ended without a terminal outcome")
        if last.outcome is Outcome.failed:
            raise last.error  # type: ignore[misc]
        try:
            body = last.response.json()  # type: ignore[union-attr]
        except ValueError as e:
            raise EmptyResponseError(f"Response body is not JSON: {e}") from e
        return decode_result(body)

    async def attempts(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> AsyncIterator[Attempt]:
        """
        Yield one Attempt per HTTP call; the last one yielded is success or failed.
        Backoff waits happen between yields, so cancelling mid-wait stops before the next call.
        """
        max_attempts = max(1, self.cfg.max_attempts)
        for i in range(max_attempts):
            try:
                resp = await client.post(self.cfg.api_url, params={"key": self.cfg.api_key}, json=payload)
            except httpx.TransportError as e:
                attempt = classify_transport_error(e, i, max_attempts)
            else:
                attempt = classify_response(resp, i, max_attempts)
                if attempt.outcome is Outcome.retry:
                    delay = backoff_delay(i, self.cfg.backoff_base_s, self.cfg.backoff_jitter_s, self._rand)
                    attempt = replace(attempt, delay_s=delay)

            yield attempt
            if attempt.outcome is not Outcome.retry:
                return
            if attempt.delay_s > 0:
                await self._sleep(attempt.delay_s)

