"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from gql_extract.core.ast import parse_source
from gql_extract.core.syntax import SyntaxTree
from gql_extract.models import Diagnostic
from gql_extract.store import InMemoryComponentStore, InMemoryResultCache

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class RecordingReporter:
    """Collects diagnostics handed to the reporter callback."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def error_ids(self) -> list[str]:
        return [d.error_id for d in self.diagnostics]


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def javascript_parser() -> Parser:
    """Return a tree-sitter parser for JavaScript."""
    return get_parser("javascript")


@pytest.fixture
def in_memory_store() -> InMemoryComponentStore:
    return InMemoryComponentStore()


@pytest.fixture
def result_cache() -> InMemoryResultCache:
    return InMemoryResultCache()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], str]:
    """Write a component file below ``tmp_path`` and return its path."""

    def _write(name: str, text: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def make_tree() -> Callable[..., SyntaxTree]:
    """Parse source text as if it were the component file at ``file_path``."""

    def _make(source: str, file_path: str = "/site/src/pages/index.js") -> SyntaxTree:
        return parse_source(source, file_path)

    return _make
