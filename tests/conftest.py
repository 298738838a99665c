"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

from gql_harvest.config import ExtractorSettings
from gql_harvest.core.cache import InMemoryDocumentCache
from gql_harvest.core.diagnostics import DiagnosticsCollector
from gql_harvest.core.file_parser import FileParser
from gql_harvest.core.parser import ParsedSource, parse_text
from gql_harvest.core.scope import FileScope, build_scope

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
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> ExtractorSettings:
    return ExtractorSettings()


@pytest.fixture
def collector() -> DiagnosticsCollector:
    return DiagnosticsCollector()


@pytest.fixture
def cache() -> InMemoryDocumentCache:
    return InMemoryDocumentCache()


@pytest.fixture
def file_parser(
    settings: ExtractorSettings, cache: InMemoryDocumentCache, collector: DiagnosticsCollector
) -> FileParser:
    return FileParser(settings=settings, cache=cache, sink=collector)


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented source file under ``tmp_path`` and return its path."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def parse_js() -> Callable[..., ParsedSource]:
    """Parse a dedented snippet, failing the test if it has syntax errors."""

    def _parse(source: str, dialect: str = "javascript") -> ParsedSource:
        parsed = parse_text(dedent(source), (dialect,))
        assert parsed is not None, "fixture source must parse cleanly"
        return parsed

    return _parse


@pytest.fixture
def scope_for(parse_js: Callable[..., ParsedSource]) -> Callable[[str], tuple[ParsedSource, FileScope]]:
    def _scope(source: str) -> tuple[ParsedSource, FileScope]:
        parsed = parse_js(source)
        return parsed, build_scope(parsed)

    return _scope
