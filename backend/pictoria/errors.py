"""Typed failures raised by request steps and the HTTP status each maps to."""

from __future__ import annotations

from enum import Enum

import httpx


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHENTICITY = "authenticity"
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"


class PictoriaError(Exception):
    """Base class for failures a route can translate into a response."""

    kind: ErrorKind = ErrorKind.UPSTREAM
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(PictoriaError):
    kind = ErrorKind.UNAUTHORIZED
    status_code = 401


class RequestValidationFailure(PictoriaError):
    kind = ErrorKind.VALIDATION
    status_code = 400


class NotFoundError(PictoriaError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class SignatureMismatch(PictoriaError):
    kind = ErrorKind.AUTHENTICITY
    status_code = 401


class ConfigurationError(PictoriaError):
    kind = ErrorKind.CONFIGURATION
    status_code = 500


class UpstreamError(PictoriaError):
    """An external dependency (provider API, storage, email, database) failed.

    ``step`` names the operation, e.g. ``replicate.create_training``.
    ``retryable`` is true for failures a later attempt may not hit again:
    timeouts, transport errors, rate limiting and 5xx responses.
    """

    kind = ErrorKind.UPSTREAM
    status_code = 500

    def __init__(
        self,
        step: str,
        message: str = "",
        *,
        retryable: bool = False,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message or f"{step} failed")
        self.step = step
        self.retryable = retryable
        self.upstream_status = upstream_status

    @classmethod
    def from_httpx(cls, step: str, exc: httpx.HTTPError) -> "UpstreamError":
        """Classify an httpx failure."""
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            detail = _response_detail(exc.response)
            return cls(
                step,
                f"{step} returned {status}: {detail}" if detail else f"{step} returned {status}",
                retryable=status >= 500 or status == 429,
                upstream_status=status,
            )
        return cls(step, f"{step} failed: {exc}", retryable=True)


def _response_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        for key in ("detail", "message", "error", "msg"):
            if payload.get(key):
                return str(payload[key])
    return ""
