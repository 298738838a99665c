"""Unit tests for FileParser: scenarios, caching and the fast path."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from graphql import print_ast

from gql_harvest.config import ExtractorSettings
from gql_harvest.core import file_parser as file_parser_module
from gql_harvest.core.cache import InMemoryDocumentCache, compute_content_key
from gql_harvest.core.diagnostics import UNKNOWN_QUERY_VARIABLE, DiagnosticsCollector
from gql_harvest.core.file_parser import FileParser
from gql_harvest.models import ExtractionStatus, FailureReason, FragmentKind

WriteSource = Callable[[str, str], Path]

INLINE_STATIC_QUERY = """
    import React from "react"
    import { StaticQuery, graphql } from "gatsby"

    export default () => (
      <StaticQuery
        query={graphql`
          query {
            site {
              siteMetadata {
                title
              }
            }
          }
        `}
        render={data => <h1>{data.site.siteMetadata.title}</h1>}
      />
    )
"""

VARIABLE_STATIC_QUERY = """
    import React from "react"
    import { StaticQuery, graphql } from "gatsby"

    const HeaderQuery = graphql`
      query HeaderQuery {
        site {
          siteMetadata {
            title
          }
        }
      }
    `

    export default () => (
      <StaticQuery query={HeaderQuery} render={data => <h1>{data.site.siteMetadata.title}</h1>} />
    )
"""

MISSING_VARIABLE_STATIC_QUERY = """
    import React from "react"
    import { StaticQuery, graphql } from "gatsby"

    export default () => <StaticQuery query={Missing} render={() => null} />
"""

HOOK_AND_PAGE_QUERY = """
    import React from "react"
    import { graphql, useStaticQuery } from "gatsby"

    const Header = () => {
      const data = useStaticQuery(graphql`
        query HeaderQuery {
          site {
            siteMetadata {
              title
            }
          }
        }
      `)
      return <h1>{data.site.siteMetadata.title}</h1>
    }

    export default Header

    export const query = graphql`
      query PageQuery {
        site {
          id
        }
      }
    `
"""

INVALID_PAGE_QUERY = """
    import { graphql } from "gatsby"

    export const query = graphql`
      query { site {
    `
"""

IDENTICAL_TEXT_CALL_SITES = """
    import { graphql, useStaticQuery } from "gatsby"

    function First() {
      const data = useStaticQuery(graphql`{ site { id } }`)
      return data
    }

    function Second() {
      const data = useStaticQuery(graphql`{ site { id } }`)
      return data
    }
"""


class _CountingFinder:
    """Wraps find_graphql_tags to count full traversals."""

    def __init__(self) -> None:
        self.calls = 0
        self._wrapped = file_parser_module.find_graphql_tags

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.calls += 1
        return self._wrapped(*args, **kwargs)


@pytest.fixture
def counting_finder(monkeypatch: pytest.MonkeyPatch) -> _CountingFinder:
    finder = _CountingFinder()
    monkeypatch.setattr("gql_harvest.core.file_parser.find_graphql_tags", finder)
    return finder


class TestScenarios:
    @pytest.mark.asyncio
    async def test_inline_static_query_gets_generated_name(
        self, file_parser: FileParser, write_source: WriteSource
    ) -> None:
        path = write_source("src/components/site_title.js", INLINE_STATIC_QUERY)

        document = await file_parser.parse_file(path)

        assert document is not None
        assert document.kind == "Document"
        assert len(document.definitions) == 1
        fragment = document.definitions[0]
        assert fragment.kind is FragmentKind.COMPONENT_QUERY
        assert fragment.is_static_query is True
        assert fragment.is_hook is False
        assert "sitetitlejs" in fragment.name.lower()
        assert fragment.name.endswith(fragment.content_hash)
        assert fragment.definition.name.value == fragment.name
        assert f"query {fragment.name}" in print_ast(document.to_graphql())

    @pytest.mark.asyncio
    async def test_static_query_resolves_variable(self, file_parser: FileParser, write_source: WriteSource) -> None:
        path = write_source("header.js", VARIABLE_STATIC_QUERY)

        document = await file_parser.parse_file(path)

        assert document is not None
        assert [(f.kind, f.name) for f in document.definitions] == [(FragmentKind.COMPONENT_QUERY, "HeaderQuery")]

    @pytest.mark.asyncio
    async def test_missing_variable_warns_and_yields_nothing(
        self, file_parser: FileParser, collector: DiagnosticsCollector, write_source: WriteSource
    ) -> None:
        path = write_source("broken.js", MISSING_VARIABLE_STATIC_QUERY)

        result = await file_parser.extract(path)

        assert result.document is None
        assert result.status is ExtractionStatus.NO_FRAGMENTS
        assert len(collector.warnings) == 1
        warning = collector.warnings[0]
        assert warning.code == UNKNOWN_QUERY_VARIABLE
        assert warning.variable_name == "Missing"
        assert warning.usage_context == "<StaticQuery>"
        assert warning.file_path == str(path)
        assert "Missing" in warning.message

    @pytest.mark.asyncio
    async def test_hook_and_page_query_in_pass_order(self, file_parser: FileParser, write_source: WriteSource) -> None:
        path = write_source("pages/index.js", HOOK_AND_PAGE_QUERY)

        document = await file_parser.parse_file(path)

        assert document is not None
        assert [(f.kind, f.name) for f in document.definitions] == [
            (FragmentKind.HOOK_QUERY, "HeaderQuery"),
            (FragmentKind.PAGE_QUERY, "PageQuery"),
        ]
        assert document.definitions[0].is_hook is True
        assert document.definitions[1].is_static_query is False

    @pytest.mark.asyncio
    async def test_identical_text_at_two_call_sites_is_kept_twice(
        self, file_parser: FileParser, write_source: WriteSource
    ) -> None:
        path = write_source("twice.js", IDENTICAL_TEXT_CALL_SITES)

        document = await file_parser.parse_file(path)

        assert document is not None
        assert len(document.definitions) == 2
        first, second = document.definitions
        assert first.source_text == second.source_text
        assert first.content_hash == second.content_hash
        assert first.location_key != second.location_key


class TestFastPath:
    @pytest.mark.asyncio
    async def test_file_without_tag_is_never_parsed(
        self, file_parser: FileParser, write_source: WriteSource, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        parse_mock = AsyncMock()
        monkeypatch.setattr("gql_harvest.core.file_parser.parse_source", parse_mock)
        path = write_source("plain.js", "export const answer = 42\n")

        result = await file_parser.extract(path)

        assert result.status is ExtractionStatus.NOT_QUERY_FILE
        assert await file_parser.parse_file(path) is None
        parse_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_tag_name_controls_fast_path(
        self, cache: InMemoryDocumentCache, collector: DiagnosticsCollector, write_source: WriteSource
    ) -> None:
        parser = FileParser(settings=ExtractorSettings(tag_name="gql"), cache=cache, sink=collector)
        path = write_source("uses_graphql.js", INLINE_STATIC_QUERY)

        result = await parser.extract(path)

        assert result.status is ExtractionStatus.NOT_QUERY_FILE


class TestCaching:
    @pytest.mark.asyncio
    async def test_unchanged_file_is_served_from_cache(
        self,
        file_parser: FileParser,
        cache: InMemoryDocumentCache,
        write_source: WriteSource,
        counting_finder: _CountingFinder,
    ) -> None:
        path = write_source("header.js", VARIABLE_STATIC_QUERY)

        first = await file_parser.extract(path)
        second = await file_parser.extract(path)

        assert counting_finder.calls == 1
        assert first.cached is False
        assert second.cached is True
        assert cache.hits == 1
        assert first.document is not None and second.document is not None
        assert [f.model_dump() for f in first.document.definitions] == [
            f.model_dump() for f in second.document.definitions
        ]

    @pytest.mark.asyncio
    async def test_changed_content_is_re_extracted(
        self, file_parser: FileParser, write_source: WriteSource, counting_finder: _CountingFinder
    ) -> None:
        path = write_source("header.js", VARIABLE_STATIC_QUERY)
        original = path.read_text(encoding="utf-8")

        await file_parser.parse_file(path)
        path.write_text(original + " ", encoding="utf-8")
        await file_parser.parse_file(path)

        assert counting_finder.calls == 2
        assert compute_content_key(str(path), original) != compute_content_key(str(path), original + " ")

    @pytest.mark.asyncio
    async def test_files_without_fragments_are_cached_too(
        self, file_parser: FileParser, cache: InMemoryDocumentCache, write_source: WriteSource
    ) -> None:
        path = write_source("broken.js", MISSING_VARIABLE_STATIC_QUERY)

        await file_parser.parse_file(path)
        result = await file_parser.extract(path)

        assert len(cache) == 1
        assert result.cached is True
        assert result.status is ExtractionStatus.NO_FRAGMENTS

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_traversal(
        self, file_parser: FileParser, write_source: WriteSource, counting_finder: _CountingFinder
    ) -> None:
        path = write_source("header.js", VARIABLE_STATIC_QUERY)

        documents = await asyncio.gather(file_parser.parse_file(path), file_parser.parse_file(path))

        assert counting_finder.calls == 1
        assert all(document is not None for document in documents)

    @pytest.mark.asyncio
    async def test_generated_names_are_stable_across_parsers(self, write_source: WriteSource) -> None:
        path = write_source("site_title.js", INLINE_STATIC_QUERY)

        first = await FileParser(settings=ExtractorSettings(), cache=InMemoryDocumentCache()).parse_file(path)
        second = await FileParser(settings=ExtractorSettings(), cache=InMemoryDocumentCache()).parse_file(path)

        assert first is not None and second is not None
        assert first.names() == second.names()


class TestFailures:
    @pytest.mark.asyncio
    async def test_unreadable_file_reports_and_returns_none(
        self, file_parser: FileParser, collector: DiagnosticsCollector, tmp_path: Path
    ) -> None:
        path = tmp_path / "missing.js"

        result = await file_parser.extract(path)

        assert result.status is ExtractionStatus.READ_ERROR
        assert collector.failed == [(str(path), FailureReason.READ)]
        assert collector.is_stale(str(path))
        assert len(collector.errors) == 1

    @pytest.mark.asyncio
    async def test_syntax_error_is_reported_and_cached(
        self,
        file_parser: FileParser,
        collector: DiagnosticsCollector,
        write_source: WriteSource,
        counting_finder: _CountingFinder,
    ) -> None:
        path = write_source("bad.js", "// graphql\nconst = ;\n")

        first = await file_parser.extract(path)
        second = await file_parser.extract(path)

        assert first.status is ExtractionStatus.PARSE_ERROR
        assert second.status is ExtractionStatus.PARSE_ERROR
        assert second.cached is True
        assert counting_finder.calls == 0
        assert collector.failed == [(str(path), FailureReason.PARSE)]
        assert "may indicate a syntax error" in collector.errors[0].message

    @pytest.mark.asyncio
    async def test_interpolated_query_is_a_query_error(
        self, file_parser: FileParser, collector: DiagnosticsCollector, write_source: WriteSource
    ) -> None:
        path = write_source(
            "interpolated.js",
            """
            import { graphql } from "gatsby"

            const field = "id"

            export const query = graphql`
              query { site { ${field} } }
            `
            """,
        )

        result = await file_parser.extract(path)

        assert result.status is ExtractionStatus.QUERY_ERROR
        assert collector.failed == [(str(path), FailureReason.QUERY)]
        assert "String interpolations are not allowed" in collector.errors[0].message

    @pytest.mark.asyncio
    async def test_invalid_graphql_is_a_query_error(self, file_parser: FileParser, write_source: WriteSource) -> None:
        path = write_source("invalid.js", INVALID_PAGE_QUERY)

        result = await file_parser.extract(path)

        assert result.status is ExtractionStatus.QUERY_ERROR
        assert result.document is None

    @pytest.mark.asyncio
    async def test_concurrent_requests_report_a_query_error_once(
        self, file_parser: FileParser, collector: DiagnosticsCollector, write_source: WriteSource
    ) -> None:
        path = write_source("invalid.js", INVALID_PAGE_QUERY)

        results = await asyncio.gather(file_parser.extract(path), file_parser.extract(path))

        assert [r.status for r in results] == [ExtractionStatus.QUERY_ERROR, ExtractionStatus.QUERY_ERROR]
        assert len(collector.errors) == 1
        assert collector.failed == [(str(path), FailureReason.QUERY)]

    @pytest.mark.asyncio
    async def test_query_errors_are_not_cached(
        self,
        file_parser: FileParser,
        cache: InMemoryDocumentCache,
        collector: DiagnosticsCollector,
        write_source: WriteSource,
    ) -> None:
        path = write_source("invalid.js", INVALID_PAGE_QUERY)

        await file_parser.extract(path)
        second = await file_parser.extract(path)

        assert second.cached is False
        assert len(cache) == 0
        assert len(collector.errors) == 2

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_not_reported_as_query_errors(
        self,
        file_parser: FileParser,
        collector: DiagnosticsCollector,
        write_source: WriteSource,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def broken_finder(*args: Any, **kwargs: Any) -> Any:
            raise TypeError("cannot assign to field 'name'")

        monkeypatch.setattr("gql_harvest.core.file_parser.find_graphql_tags", broken_finder)
        header = write_source("header.js", VARIABLE_STATIC_QUERY)

        with pytest.raises(TypeError):
            await file_parser.extract(header)
        assert collector.errors == []

        assert await file_parser.parse_files([header]) == {}

    @pytest.mark.asyncio
    async def test_success_clears_stale_marker(
        self, file_parser: FileParser, collector: DiagnosticsCollector, write_source: WriteSource
    ) -> None:
        path = write_source("header.js", "// graphql\nconst = ;\n")
        await file_parser.parse_file(path)
        assert collector.is_stale(str(path))

        write_source("header.js", VARIABLE_STATIC_QUERY)
        await file_parser.parse_file(path)

        assert not collector.is_stale(str(path))
        assert collector.succeeded == [str(path)]


class TestParseFiles:
    @pytest.mark.asyncio
    async def test_returns_only_files_with_documents(
        self, file_parser: FileParser, write_source: WriteSource, tmp_path: Path
    ) -> None:
        header = write_source("header.js", VARIABLE_STATIC_QUERY)
        plain = write_source("plain.js", "export const answer = 42\n")
        broken = write_source("broken.js", "// graphql\nconst = ;\n")
        page = write_source("pages/index.js", HOOK_AND_PAGE_QUERY)
        missing = tmp_path / "missing.js"

        documents = await file_parser.parse_files([header, plain, broken, missing, page])

        assert list(documents) == [str(header), str(page)]
        assert documents[str(page)].names() == ["HeaderQuery", "PageQuery"]

    @pytest.mark.asyncio
    async def test_empty_batch(self, file_parser: FileParser) -> None:
        assert await file_parser.parse_files([]) == {}
