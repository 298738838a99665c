import re
from collections.abc import Iterable

from graphql import DefinitionNode, NameNode

from gql_harvest.config import ExtractorSettings
from gql_harvest.core import diagnostics
from gql_harvest.core.locator import RawFragmentFind
from gql_harvest.core.ports.diagnostics import DiagnosticsSink
from gql_harvest.core.tags import TagMatcher
from gql_harvest.models import Fragment

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def camel_case(value: str) -> str:
    """``src/pages/blog-post.js`` -> ``srcPagesBlogPostJs``."""
    words = _WORD_RE.findall(value)
    if not words:
        return ""
    first, *rest = words
    return first.lower() + "".join(word.capitalize() for word in rest)


def generate_query_name(file_path: str, fragment_hash: str) -> str:
    return f"{camel_case(file_path)}{fragment_hash}"


def location_key(enclosing_start: int, definition_start: int) -> str:
    return f"{enclosing_start}-{definition_start}"


def with_name(definition: DefinitionNode, name: NameNode) -> DefinitionNode:
    """Copy of ``definition`` carrying ``name``; parsed nodes are left untouched."""
    fields = {key: getattr(definition, key) for key in definition.keys if key != "name"}
    return type(definition)(**fields, name=name)


class FragmentNormalizer:
    def __init__(
        self, settings: ExtractorSettings, matcher: TagMatcher, file_path: str, sink: DiagnosticsSink
    ) -> None:
        self._settings = settings
        self._matcher = matcher
        self._file_path = file_path
        self._sink = sink
        self._warned_global: set[int] = set()

    def normalize(self, find: RawFragmentFind) -> list[Fragment]:
        tag = self._matcher.extract(find.template, self._file_path)
        if tag.is_global and find.enclosing_start not in self._warned_global:
            self._warned_global.add(find.enclosing_start)
            self._sink.report(
                diagnostics.global_tag(self._file_path, self._settings.tag_name, self._settings.module_name)
            )

        row, column = find.template.node.start_point
        fragments: list[Fragment] = []
        for definition in tag.document.definitions:
            name_node = getattr(definition, "name", None)
            if name_node is None or not name_node.value:
                name_node = NameNode(value=generate_query_name(self._file_path, tag.hash))
                definition = with_name(definition, name_node)
            start = definition.loc.start if definition.loc is not None else 0
            fragments.append(
                Fragment(
                    name=name_node.value,
                    source_text=tag.raw_text,
                    content_hash=tag.hash,
                    kind=find.kind,
                    location_key=location_key(find.enclosing_start, start),
                    file_path=self._file_path,
                    line=row + 1,
                    column=column + 1,
                    definition=definition,
                )
            )
        return fragments

    def normalize_all(self, finds: Iterable[RawFragmentFind]) -> list[Fragment]:
        fragments: list[Fragment] = []
        for find in finds:
            fragments.extend(self.normalize(find))
        return fragments
