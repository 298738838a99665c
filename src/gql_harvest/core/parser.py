import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import cast

from tree_sitter import Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from gql_harvest.core import diagnostics
from gql_harvest.core.languages import dialects_for_path
from gql_harvest.core.ports.diagnostics import DiagnosticsSink
from gql_harvest.core.ports.preprocessor import SourcePreprocessor
from gql_harvest.models import FailureReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedSource:
    tree: Tree
    source: bytes
    dialect: str

    @property
    def text(self) -> str:
        return self.source.decode("utf-8")


def parse_text(text: str, dialects: Sequence[str]) -> ParsedSource | None:
    """Parse ``text`` with the first grammar that yields a tree free of syntax errors."""
    source = text.encode("utf-8")
    for dialect in dialects:
        parser = get_parser(cast(SupportedLanguage, dialect))
        tree = parser.parse(source)
        if not tree.root_node.has_error:
            return ParsedSource(tree=tree, source=source, dialect=dialect)
        logger.debug("Syntax errors parsing as %s", dialect)
    return None


async def run_preprocessors(
    file_path: str, contents: str, preprocessors: Sequence[SourcePreprocessor]
) -> list[str]:
    candidates: list[str] = []
    for preprocess in preprocessors:
        result = preprocess(file_path, contents)
        if inspect.isawaitable(result):
            result = await result
        if result:
            candidates.extend(cast(Sequence[str], result))
    return candidates


async def parse_source(
    file_path: str,
    text: str,
    preprocessors: Sequence[SourcePreprocessor],
    sink: DiagnosticsSink,
) -> ParsedSource | None:
    """Turn file text into a syntax tree, reporting failures to ``sink``.

    When preprocessors produce candidate texts they are tried in order and the
    raw text is never parsed; otherwise the raw text is parsed directly.
    Returns ``None`` when nothing parses.
    """
    dialects = dialects_for_path(file_path)

    try:
        candidates = await run_preprocessors(file_path, text, preprocessors)
    except Exception as err:
        logger.exception("Preprocessing %s failed", file_path)
        sink.report(diagnostics.preprocessed_failed(file_path))
        sink.extraction_failed(file_path, FailureReason.PARSE, err)
        return None

    if candidates:
        for index, candidate in enumerate(candidates):
            parsed = parse_text(candidate, dialects)
            if parsed is not None:
                return parsed
            sink.report(diagnostics.preprocessed_candidate_failed(file_path, dialects, index))
            sink.extraction_failed(file_path, FailureReason.PARSE)
        sink.report(diagnostics.preprocessed_failed(file_path))
        sink.extraction_failed(file_path, FailureReason.PARSE)
        return None

    parsed = parse_text(text, dialects)
    if parsed is None:
        sink.report(diagnostics.parse_failed(file_path))
        sink.extraction_failed(file_path, FailureReason.PARSE)
    return parsed
