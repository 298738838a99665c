import asyncio
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from gql_harvest.config import ExtractorSettings
from gql_harvest.core import diagnostics
from gql_harvest.core.cache import CacheEntry, InMemoryDocumentCache, compute_content_key
from gql_harvest.core.dedupe import dedupe
from gql_harvest.core.diagnostics import DiagnosticsCollector
from gql_harvest.core.errors import QueryExtractionError
from gql_harvest.core.locator import TagLocator
from gql_harvest.core.normalizer import FragmentNormalizer
from gql_harvest.core.parser import ParsedSource, parse_source
from gql_harvest.core.ports.cache import DocumentCache
from gql_harvest.core.ports.diagnostics import DiagnosticsSink
from gql_harvest.core.ports.preprocessor import SourcePreprocessor
from gql_harvest.core.scope import build_scope
from gql_harvest.core.tags import TagMatcher
from gql_harvest.models import Document, ExtractionResult, ExtractionStatus, FailureReason, Fragment

logger = logging.getLogger(__name__)


def find_graphql_tags(
    file_path: str, parsed: ParsedSource, settings: ExtractorSettings, sink: DiagnosticsSink
) -> list[Fragment]:
    """Run the locate, normalize and dedupe stages over one parsed file."""
    scope = build_scope(parsed)
    matcher = TagMatcher(settings, scope)
    finds = TagLocator(settings, scope, matcher, file_path, sink).locate(parsed.tree.root_node)
    fragments = FragmentNormalizer(settings, matcher, file_path, sink).normalize_all(finds)
    return dedupe(fragments)


class FileParser:
    """Extracts query documents from component source files.

    Results are cached by a hash of path and contents, so re-extracting an
    unchanged file costs one read and one hash.
    """

    def __init__(
        self,
        settings: ExtractorSettings | None = None,
        cache: DocumentCache | None = None,
        sink: DiagnosticsSink | None = None,
        preprocessors: Sequence[SourcePreprocessor] = (),
    ) -> None:
        self.settings = settings if settings is not None else ExtractorSettings.from_env()
        self.cache: DocumentCache = cache if cache is not None else InMemoryDocumentCache()
        self.sink: DiagnosticsSink = sink if sink is not None else DiagnosticsCollector()
        self.preprocessors = list(preprocessors)
        self._in_flight: dict[str, asyncio.Task[CacheEntry]] = {}

    async def extract(self, file_path: str | Path) -> ExtractionResult:
        path = str(file_path)
        try:
            text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            self.sink.report(diagnostics.read_failed(path, err))
            self.sink.extraction_failed(path, FailureReason.READ, err)
            return ExtractionResult(file_path=path, status=ExtractionStatus.READ_ERROR)

        if self.settings.tag_name not in text:
            return ExtractionResult(file_path=path, status=ExtractionStatus.NOT_QUERY_FILE)

        key = compute_content_key(path, text)
        entry = await self.cache.get(key)
        cached = entry is not None
        if entry is None:
            entry = await self._extract_once(key, path, text)

        if entry.fragments:
            self.sink.extraction_succeeded(path)
            return ExtractionResult(
                file_path=path,
                status=ExtractionStatus.EXTRACTED,
                document=Document(definitions=list(entry.fragments)),
                cached=cached,
            )
        return ExtractionResult(file_path=path, status=entry.status, cached=cached)

    async def parse_file(self, file_path: str | Path) -> Document | None:
        result = await self.extract(file_path)
        return result.document

    async def parse_files(self, files: Iterable[str | Path]) -> dict[str, Document]:
        paths = [str(f) for f in files]
        results = await asyncio.gather(*(self.extract(path) for path in paths), return_exceptions=True)

        documents: dict[str, Document] = {}
        for path, result in zip(paths, results, strict=True):
            if isinstance(result, BaseException):
                logger.error("Extraction of %s failed: %s", path, result)
                continue
            if result.document is not None:
                documents[path] = result.document
        return documents

    async def _extract_once(self, key: str, path: str, text: str) -> CacheEntry:
        if not self.settings.coalesce_in_flight:
            return await self._extract_and_store(key, path, text)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._extract_and_store(key, path, text))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    async def _extract_and_store(self, key: str, path: str, text: str) -> CacheEntry:
        parsed = await parse_source(path, text, self.preprocessors, self.sink)
        if parsed is None:
            entry = CacheEntry(fragments=(), status=ExtractionStatus.PARSE_ERROR)
        else:
            try:
                fragments = find_graphql_tags(path, parsed, self.settings, self.sink)
            except QueryExtractionError as err:
                # Not cached, so the next request retries.
                self.sink.report(diagnostics.query_invalid(path, err))
                self.sink.extraction_failed(path, FailureReason.QUERY, err)
                return CacheEntry(fragments=(), status=ExtractionStatus.QUERY_ERROR)
            status = ExtractionStatus.EXTRACTED if fragments else ExtractionStatus.NO_FRAGMENTS
            entry = CacheEntry(fragments=tuple(fragments), status=status)
        await self.cache.put(key, entry)
        return entry
