"""Shared test fixtures for the notionsource test suite."""

from __future__ import annotations

import pytest

from notionsource.config import NotionSourceConfig
from notionsource.converter.document import DocumentAssembler
from notionsource.converter.markdown import MarkdownEmitter


@pytest.fixture
def config() -> NotionSourceConfig:
    """Default test configuration with a dummy token."""
    return NotionSourceConfig(token="test_token_1234", database_id="db-1")


@pytest.fixture
def emitter(config: NotionSourceConfig) -> MarkdownEmitter:
    """Markdown emitter using the default test config."""
    return MarkdownEmitter(config)


@pytest.fixture
def assembler(config: NotionSourceConfig) -> DocumentAssembler:
    """Document assembler using the default test config."""
    return DocumentAssembler(config)
