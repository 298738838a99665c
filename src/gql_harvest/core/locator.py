"""Finds query tags in the three places they may be declared.

Passes run in a fixed order (component, hook, page) so diagnostics and the
order of results are reproducible. A pass may visit the same template more
than once; duplicates are removed later by location key.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

from gql_harvest.config import ExtractorSettings
from gql_harvest.core import diagnostics
from gql_harvest.core.ports.diagnostics import DiagnosticsSink
from gql_harvest.core.scope import FileScope
from gql_harvest.core.syntax import (
    Attribute,
    Call,
    Element,
    ExportDeclaration,
    Identifier,
    TaggedTemplate,
    node_text,
    walk,
    walk_until,
)
from gql_harvest.core.tags import TagMatcher
from gql_harvest.models import FragmentKind


@dataclass(frozen=True)
class RawFragmentFind:
    kind: FragmentKind
    template: TaggedTemplate

    @property
    def enclosing_start(self) -> int:
        return self.template.start


class TagLocator:
    def __init__(
        self,
        settings: ExtractorSettings,
        scope: FileScope,
        matcher: TagMatcher,
        file_path: str,
        sink: DiagnosticsSink,
    ) -> None:
        self._settings = settings
        self._scope = scope
        self._matcher = matcher
        self._file_path = file_path
        self._sink = sink

    def locate(self, root: Node) -> list[RawFragmentFind]:
        finds: list[RawFragmentFind] = []
        finds.extend(self.component_queries(root))
        finds.extend(self.hook_queries(root))
        finds.extend(self.page_queries(root))
        return finds

    def component_queries(self, root: Node) -> Iterator[RawFragmentFind]:
        component = self._settings.static_query_component
        for item in walk(root):
            match item:
                case Element(name=name) if name == component:
                    yield from self._element_queries(item)
                case _:
                    continue

    def _element_queries(self, element: Element) -> Iterator[RawFragmentFind]:
        usage = f"<{self._settings.static_query_component}>"
        for item in walk(element.node):
            match item:
                case Attribute(name=name, value=value) if (
                    name == self._settings.query_attribute and value is not None
                ):
                    yield from self._resolve(
                        value,
                        FragmentKind.COMPONENT_QUERY,
                        usage,
                        ignored=frozenset({self._settings.tag_name}),
                    )
                case _:
                    continue

    def hook_queries(self, root: Node) -> Iterator[RawFragmentFind]:
        hook = self._settings.hook_name
        for item in walk(root):
            match item:
                case Call(callee=callee) if (
                    callee.type == "identifier"
                    and node_text(callee) == hook
                    and self._matcher.references_module(hook)
                ):
                    yield from self._resolve(
                        item.node,
                        FragmentKind.HOOK_QUERY,
                        hook,
                        ignored=frozenset({self._settings.tag_name, hook}),
                    )
                case _:
                    continue

    def page_queries(self, root: Node) -> Iterator[RawFragmentFind]:
        for item in walk(root):
            match item:
                case ExportDeclaration(is_default=False):
                    for inner in walk(item.node):
                        if isinstance(inner, TaggedTemplate) and self._matcher.is_query_tag(inner):
                            yield RawFragmentFind(FragmentKind.PAGE_QUERY, inner)
                case _:
                    continue

    def _resolve(
        self, subtree: Node, kind: FragmentKind, usage: str, ignored: frozenset[str]
    ) -> Iterator[RawFragmentFind]:
        """Collect inline query tags under ``subtree`` and follow identifiers to their declarations."""
        for item in walk_until(subtree, stop_at=(TaggedTemplate,)):
            match item:
                case TaggedTemplate():
                    if self._matcher.is_query_tag(item):
                        yield RawFragmentFind(kind, item)
                case Identifier(name=name) if name not in ignored:
                    templates = [t for t in self._scope.templates_for(name) if self._matcher.is_query_tag(t)]
                    if not templates:
                        self._sink.report(diagnostics.unknown_query_variable(name, self._file_path, usage))
                    for template in templates:
                        yield RawFragmentFind(kind, template)
                case _:
                    continue
