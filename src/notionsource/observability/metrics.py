"""Counters and timings emitted while loading a database.

Pass any object with ``increment`` and ``timing`` methods as
``NotionSourceConfig(metrics=...)`` to forward them to StatsD, Prometheus or
similar.  Without one, :class:`NoopMetricsHook` drops everything.

Names and tags:

=====================================  ========  ========================
name                                   kind      tags
=====================================  ========  ========================
``notionsource.requests_total``        counter   method, path, status
``notionsource.request_duration_ms``   timing    method, path, status
``notionsource.retries_total``         counter   method, path, reason
``notionsource.pages_fetched_total``   counter   resource
``notionsource.fetch_truncated_total`` counter   resource
``notionsource.documents_built_total`` counter
=====================================  ========  ========================
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

Tags = dict[str, str]


@runtime_checkable
class MetricsHook(Protocol):
    """What notionsource needs from a metrics backend."""

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        ...

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        ...


class NoopMetricsHook:
    """Metrics backend that records nothing."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        return None
