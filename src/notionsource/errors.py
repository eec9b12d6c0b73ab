"""Error hierarchy for notionsource.

Every error carries a machine-readable ``code`` (an :class:`ErrorCode`), a
``message``, a structured ``context`` dict and an optional ``cause``.

Two families matter to callers:

* :class:`NotionSourceAPIError` and its subclasses describe a failed request
  or an unusable response.  The block tree fetcher absorbs them: the
  pagination loop stops, the pages already read are kept and a diagnostic
  is recorded.
* Everything else (malformed objects, runaway nesting, an incomplete fetch
  under ``fail_on_truncation``) propagates and aborts the build.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    API_ERROR = "API_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    NETWORK_ERROR = "NETWORK_ERROR"
    RESPONSE_ERROR = "RESPONSE_ERROR"
    MALFORMED_OBJECT = "MALFORMED_OBJECT"
    MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"
    INCOMPLETE_FETCH = "INCOMPLETE_FETCH"


class NotionSourceError(Exception):
    """Base exception for all notionsource errors.

    Subclasses fix their ``code`` through :attr:`default_code`, so they are
    raised as ``SomeError(message, context=..., cause=...)``.

    Parameters
    ----------
    message:
        What went wrong, for humans.
    context:
        Structured detail.  Each subclass documents its keys.
    cause:
        The exception being wrapped.  Also set as ``__cause__``.
    code:
        Overrides :attr:`default_code`.
    """

    default_code: ClassVar[str] = ErrorCode.API_ERROR

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code: str = code if code is not None else self.default_code
        self.message = message
        self.context: dict[str, Any] = context or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Request / response failures (absorbed by the fetcher)
# ---------------------------------------------------------------------------

class NotionSourceAPIError(NotionSourceError):
    """A Notion request failed or its response could not be used."""


class NotionSourceValidationError(NotionSourceAPIError):
    """Notion rejected the request with 400 or another non-retryable 4xx.

    Context keys: ``status_code``, ``notion_code``, ``body``.
    """

    default_code = ErrorCode.VALIDATION_ERROR


class NotionSourceAuthError(NotionSourceAPIError):
    """401: the integration token is invalid or revoked."""

    default_code = ErrorCode.AUTH_ERROR


class NotionSourcePermissionError(NotionSourceAPIError):
    """403: the database or block is not shared with the integration.

    Context keys: ``status_code``, ``notion_code``, ``operation``.
    """

    default_code = ErrorCode.PERMISSION_ERROR


class NotionSourceNotFoundError(NotionSourceAPIError):
    """404: the database or block does not exist.

    Context keys: ``status_code``, ``notion_code``, ``path``.
    """

    default_code = ErrorCode.NOT_FOUND


class NotionSourceRetryExhaustedError(NotionSourceAPIError):
    """A retryable failure persisted through every attempt.

    Context keys: ``attempts``, ``last_status_code``.
    """

    default_code = ErrorCode.RETRY_EXHAUSTED


class NotionSourceNetworkError(NotionSourceAPIError):
    """DNS failure, connection reset or timeout on the final attempt.

    Context keys: ``url``, ``attempt``.
    """

    default_code = ErrorCode.NETWORK_ERROR


class NotionSourceResponseError(NotionSourceAPIError):
    """A response that cannot be read as a listing page.

    Raised for non-JSON bodies, a missing ``results`` array and
    ``has_more`` without ``next_cursor``.

    Context keys: ``path``, plus ``status_code`` or ``resource``.
    """

    default_code = ErrorCode.RESPONSE_ERROR


# ---------------------------------------------------------------------------
# Build failures (always propagate)
# ---------------------------------------------------------------------------

class NotionSourceMalformedError(NotionSourceError):
    """A page, block or property lacks a field the pipeline needs.

    Context keys: ``object``, ``field``, ``id``.
    """

    default_code = ErrorCode.MALFORMED_OBJECT


class NotionSourceDepthError(NotionSourceError):
    """A block tree is nested deeper than ``config.max_depth``.

    Context keys: ``depth``, ``max_depth`` and, from the fetcher,
    ``block_id``.
    """

    default_code = ErrorCode.MAX_DEPTH_EXCEEDED


class NotionSourceIncompleteError(NotionSourceError):
    """A fetch was truncated while ``fail_on_truncation`` is enabled.

    Context keys: ``records``, ``diagnostics`` (list of dicts).
    """

    default_code = ErrorCode.INCOMPLETE_FETCH
