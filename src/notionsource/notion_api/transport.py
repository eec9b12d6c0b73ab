"""Sync and async HTTP transports for the Notion API.

Each transport handles the request lifecycle:

1. Send the HTTP request with auth, version and content-type headers.
2. On ``2xx`` -- return the parsed JSON body (non-JSON raises
   :class:`NotionSourceResponseError`).
3. On ``429`` / ``5xx`` / network error -- back off and retry.
4. On any other ``4xx`` -- raise the matching typed error immediately.
5. When attempts run out -- raise :class:`NotionSourceRetryExhaustedError`.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from notionsource.config import NotionSourceConfig
from notionsource.errors import (
    NotionSourceAuthError,
    NotionSourceNetworkError,
    NotionSourceNotFoundError,
    NotionSourcePermissionError,
    NotionSourceResponseError,
    NotionSourceRetryExhaustedError,
    NotionSourceValidationError,
)
from notionsource.observability import NoopMetricsHook, get_logger

from .retries import RETRYABLE_STATUSES, RetryPolicy

log = get_logger("notionsource.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the typed error for a 4xx status that must not be retried."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    notion_message = body.get("message", response.text[:500])
    context = {"status_code": status, "notion_code": body.get("code", "")}

    if status == 401:
        raise NotionSourceAuthError(
            message=f"Authentication failed on {method} {path}: {notion_message}",
            context=context,
        )
    if status == 403:
        raise NotionSourcePermissionError(
            message=f"Permission denied on {method} {path}: {notion_message}",
            context={**context, "operation": f"{method} {path}"},
        )
    if status == 404:
        raise NotionSourceNotFoundError(
            message=f"Resource not found on {method} {path}: {notion_message}",
            context={**context, "path": path},
        )
    raise NotionSourceValidationError(
        message=f"Client error {status} on {method} {path}: {notion_message}",
        context={**context, "body": body},
    )


def _parse_body(response: httpx.Response, method: str, path: str) -> dict:
    """Decode a 2xx response body as a JSON object."""
    if response.status_code == 204 or not response.content:
        return {}
    try:
        body = response.json()
    except ValueError as exc:
        raise NotionSourceResponseError(
            message=f"Non-JSON response on {method} {path}",
            context={"path": path, "status_code": response.status_code},
            cause=exc,
        ) from exc
    if not isinstance(body, dict):
        raise NotionSourceResponseError(
            message=f"Expected a JSON object on {method} {path}, got {type(body).__name__}",
            context={"path": path, "status_code": response.status_code},
        )
    return body


class _Attempt:
    """Bookkeeping shared by the sync and async request loops."""

    def __init__(self, policy: RetryPolicy, metrics: Any, method: str, path: str) -> None:
        self.policy = policy
        self.metrics = metrics
        self.method = method
        self.path = path
        self.last_status: int | None = None
        self.last_exception: Exception | None = None

    def _tags(self, **extra: str) -> dict[str, str]:
        return {"method": self.method, "path": self.path, **extra}

    def on_network_error(self, exc: Exception, attempt: int) -> float:
        """Return the delay before retrying, or raise when out of attempts."""
        self.last_exception = exc
        self.last_status = None
        self.metrics.increment("notionsource.requests_total", tags=self._tags(status="error"))
        log.warning(
            "Request network error",
            extra={
                "extra_fields": {
                    "op": "request",
                    "method": self.method,
                    "path": self.path,
                    "attempt": attempt + 1,
                    "error": str(exc),
                }
            },
        )
        if not self.policy.should_retry(attempt, exception=exc):
            raise NotionSourceNetworkError(
                message=f"Network error on {self.method} {self.path}: {exc}",
                context={"url": self.path, "attempt": attempt + 1},
                cause=exc,
            ) from exc
        return self._backoff(attempt, "network_error")

    def on_response(self, response: httpx.Response, attempt: int, elapsed_ms: float) -> float | None:
        """Classify *response*.

        Returns ``None`` on success, the retry delay for a retryable status,
        and raises for non-retryable statuses or an exhausted budget.
        """
        status = response.status_code
        self.last_status = status
        self.last_exception = None
        self.metrics.increment("notionsource.requests_total", tags=self._tags(status=str(status)))
        self.metrics.timing(
            "notionsource.request_duration_ms", elapsed_ms, tags=self._tags(status=str(status))
        )

        if 200 <= status < 300:
            return None
        if status not in RETRYABLE_STATUSES:
            _raise_for_status(response, self.method, self.path)
        if not self.policy.should_retry(attempt, status_code=status):
            raise self.exhausted_error()

        retry_after = None
        reason = "server_error"
        if status == 429:
            retry_after = _parse_retry_after(response)
            reason = "rate_limited"
            log.warning(
                "Rate limited by Notion API",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": self.method,
                        "path": self.path,
                        "retry_after": retry_after,
                        "attempt": attempt + 1,
                    }
                },
            )
        return self._backoff(attempt, reason, retry_after)

    def _backoff(self, attempt: int, reason: str, retry_after: float | None = None) -> float:
        self.metrics.increment("notionsource.retries_total", tags=self._tags(reason=reason))
        return self.policy.delay(attempt, retry_after)

    def exhausted_error(self) -> NotionSourceRetryExhaustedError:
        attempts = self.policy.max_attempts
        ctx: dict[str, Any] = {"attempts": attempts, "last_status_code": self.last_status}
        detail = (
            f"last error: {self.last_exception}"
            if self.last_exception is not None
            else f"last status: {self.last_status}"
        )
        return NotionSourceRetryExhaustedError(
            message=f"All {attempts} attempts exhausted for {self.method} {self.path} ({detail})",
            context=ctx,
            cause=self.last_exception,
        )


def _client_kwargs(config: NotionSourceConfig) -> dict[str, Any]:
    return {
        "base_url": config.base_url,
        "headers": {
            "Authorization": f"Bearer {config.token}",
            "Notion-Version": config.notion_version,
            "Content-Type": "application/json",
        },
        "timeout": httpx.Timeout(config.timeout_seconds),
        "proxy": config.http_proxy,
    }


# ---------------------------------------------------------------------------
# Sync transport
# ---------------------------------------------------------------------------

class NotionTransport:
    """Synchronous HTTP transport with auth headers and retries.

    Parameters
    ----------
    config:
        A :class:`NotionSourceConfig` controlling all transport behaviour.
    """

    def __init__(self, config: NotionSourceConfig) -> None:
        self._policy = RetryPolicy.from_config(config)
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = httpx.Client(**_client_kwargs(config))

    def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Execute an HTTP request against the Notion API.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``).
        path:
            API path relative to ``base_url`` (e.g. ``/blocks/{id}/children``).
        **kwargs:
            Forwarded to :meth:`httpx.Client.request` (``json=``, ``params=``).

        Returns
        -------
        dict
            Parsed JSON response body.

        Raises
        ------
        NotionSourceAPIError
            A subclass matching the failure: auth, permission, not-found,
            validation, response, network or retry-exhausted.
        """
        state = _Attempt(self._policy, self._metrics, method, path)

        for attempt in range(self._policy.max_attempts):
            t0 = time.monotonic()
            try:
                response = self._client.request(method, path, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                time.sleep(state.on_network_error(exc, attempt))
                continue

            delay = state.on_response(response, attempt, (time.monotonic() - t0) * 1000)
            if delay is None:
                return _parse_body(response, method, path)
            time.sleep(delay)

        raise state.exhausted_error()

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> NotionTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncNotionTransport:
    """Asynchronous HTTP transport with auth headers and retries.

    Mirrors :class:`NotionTransport` using ``httpx.AsyncClient`` and
    ``asyncio.sleep``.
    """

    def __init__(self, config: NotionSourceConfig) -> None:
        self._policy = RetryPolicy.from_config(config)
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = httpx.AsyncClient(**_client_kwargs(config))

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Execute an HTTP request against the Notion API (async).

        See :meth:`NotionTransport.request` for full documentation.
        """
        state = _Attempt(self._policy, self._metrics, method, path)

        for attempt in range(self._policy.max_attempts):
            t0 = time.monotonic()
            try:
                response = await self._client.request(method, path, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                await asyncio.sleep(state.on_network_error(exc, attempt))
                continue

            delay = state.on_response(response, attempt, (time.monotonic() - t0) * 1000)
            if delay is None:
                return _parse_body(response, method, path)
            await asyncio.sleep(delay)

        raise state.exhausted_error()

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
