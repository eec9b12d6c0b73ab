"""Tests for the notionsource error hierarchy."""

from __future__ import annotations

import pytest

from notionsource.errors import (
    ErrorCode,
    NotionSourceAPIError,
    NotionSourceAuthError,
    NotionSourceDepthError,
    NotionSourceError,
    NotionSourceIncompleteError,
    NotionSourceMalformedError,
    NotionSourceNetworkError,
    NotionSourceNotFoundError,
    NotionSourcePermissionError,
    NotionSourceResponseError,
    NotionSourceRetryExhaustedError,
    NotionSourceValidationError,
)


@pytest.mark.parametrize(
    ("cls", "code"),
    [
        (NotionSourceAPIError, ErrorCode.API_ERROR),
        (NotionSourceValidationError, ErrorCode.VALIDATION_ERROR),
        (NotionSourceAuthError, ErrorCode.AUTH_ERROR),
        (NotionSourcePermissionError, ErrorCode.PERMISSION_ERROR),
        (NotionSourceNotFoundError, ErrorCode.NOT_FOUND),
        (NotionSourceRetryExhaustedError, ErrorCode.RETRY_EXHAUSTED),
        (NotionSourceNetworkError, ErrorCode.NETWORK_ERROR),
        (NotionSourceResponseError, ErrorCode.RESPONSE_ERROR),
        (NotionSourceMalformedError, ErrorCode.MALFORMED_OBJECT),
        (NotionSourceDepthError, ErrorCode.MAX_DEPTH_EXCEEDED),
        (NotionSourceIncompleteError, ErrorCode.INCOMPLETE_FETCH),
    ],
)
def test_each_class_carries_its_code(cls, code):
    err = cls("boom")
    assert err.code == code
    assert err.message == "boom"
    assert err.context == {}
    assert str(err) == "boom"


def test_request_failures_share_the_api_base():
    for cls in (NotionSourceNotFoundError, NotionSourceNetworkError, NotionSourceResponseError):
        assert issubclass(cls, NotionSourceAPIError)


def test_build_failures_are_not_api_errors():
    for cls in (NotionSourceMalformedError, NotionSourceDepthError, NotionSourceIncompleteError):
        assert issubclass(cls, NotionSourceError)
        assert not issubclass(cls, NotionSourceAPIError)


def test_cause_is_chained():
    root = ConnectionError("reset")
    err = NotionSourceNetworkError("network down", {"attempt": 3}, cause=root)
    assert err.cause is root
    assert err.__cause__ is root
    assert err.context == {"attempt": 3}


def test_explicit_code_overrides_default():
    assert NotionSourceAPIError("x", code="CUSTOM").code == "CUSTOM"


def test_repr_includes_context_only_when_present():
    assert "context" not in repr(NotionSourceDepthError("deep"))
    assert "'depth': 9" in repr(NotionSourceDepthError("deep", {"depth": 9}))
