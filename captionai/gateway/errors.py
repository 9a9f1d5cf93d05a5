"""
Purpose:
- Closed error taxonomy for the caption gateway.
- Every failure of one generate() call surfaces as exactly one of these.
"""

from __future__ import annotations
from typing import Optional


class GatewayError(Exception):
    """Base class; callers that don't care about the kind catch this."""


class EncodingError(GatewayError):
    """The image Data-URL could not be split into a MIME type and a payload."""


class ConfigurationError(GatewayError):
    """Gateway was built without an API key (reported on first use)."""


class HttpStatusError(GatewayError):
    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"API call failed with status: {status}")


class TransportError(GatewayError):
    def __init__(self, cause: Optional[BaseException], attempts: int):
        self.cause = cause
        self.attempts = attempts
        super().__init__(f"transport failure after {attempts} attempt(s): {cause!r}")


class EmptyResponseError(GatewayError):
    """Response parsed but carried no candidates[0].content.parts[0].text."""

    def __init__(self, message: str = "No captions generated"):
        super().__init__(message)
