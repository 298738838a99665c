import hashlib
from dataclasses import dataclass

from graphql import DocumentNode, GraphQLError, parse
from graphql.utilities import strip_ignored_characters

from gql_harvest.config import ExtractorSettings
from gql_harvest.core.errors import EmptyGraphQLTagError, GraphQLSyntaxError, StringInterpolationNotAllowedError
from gql_harvest.core.scope import NAMESPACE, FileScope
from gql_harvest.core.syntax import TaggedTemplate, node_text


@dataclass(frozen=True)
class GraphQLTag:
    template: TaggedTemplate
    document: DocumentNode
    raw_text: str
    text: str
    hash: str
    is_global: bool


def content_hash(text: str) -> str:
    """Stable 32-bit hash of a query text, rendered in decimal."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return str(int(digest[:8], 16))


class TagMatcher:
    def __init__(self, settings: ExtractorSettings, scope: FileScope) -> None:
        self._settings = settings
        self._scope = scope

    def is_global(self, template: TaggedTemplate) -> bool:
        tag = template.tag
        if tag.type != "identifier":
            return False
        name = node_text(tag)
        return (
            name == self._settings.tag_name
            and name not in self._scope.bindings
            and name not in self._scope.declared_names
        )

    def is_query_tag(self, template: TaggedTemplate) -> bool:
        tag = template.tag
        if tag.type == "identifier":
            if self.is_global(template):
                return True
            binding = self._scope.bindings.get(node_text(tag))
            return (
                binding is not None
                and binding.source == self._settings.module_name
                and binding.imported == self._settings.tag_name
            )
        if tag.type == "member_expression":
            obj = tag.child_by_field_name("object")
            prop = tag.child_by_field_name("property")
            if obj is None or prop is None or obj.type != "identifier":
                return False
            binding = self._scope.bindings.get(node_text(obj))
            return (
                binding is not None
                and binding.source == self._settings.module_name
                and binding.imported == NAMESPACE
                and node_text(prop) == self._settings.tag_name
            )
        return False

    def references_module(self, callee_name: str) -> bool:
        binding = self._scope.bindings.get(callee_name)
        return binding is not None and binding.kind == "import" and binding.source == self._settings.module_name

    def extract(self, template: TaggedTemplate, file_path: str) -> GraphQLTag:
        """Parse the GraphQL held by a query tag.

        Raises a ``QueryExtractionError`` subclass when the template uses
        interpolation, does not parse, or holds no definitions.
        """
        if template.has_substitutions:
            raise StringInterpolationNotAllowedError(file_path, template.start)

        raw_text = template.raw_text()
        if not raw_text.strip():
            raise EmptyGraphQLTagError(file_path, template.start)
        try:
            document = parse(raw_text)
            text = strip_ignored_characters(raw_text)
        except GraphQLError as err:
            raise GraphQLSyntaxError(raw_text, err, file_path, template.start) from err
        if not document.definitions:
            raise EmptyGraphQLTagError(file_path, template.start)

        return GraphQLTag(
            template=template,
            document=document,
            raw_text=raw_text,
            text=text,
            hash=content_hash(text),
            is_global=self.is_global(template),
        )
