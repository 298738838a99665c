"""Per-file declaration index.

Built once per parsed file with a single tree-sitter query, so identifier
lookups during the extraction passes never re-walk the tree.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Literal, cast

from tree_sitter import Node, Query, QueryCursor
from tree_sitter_language_pack import SupportedLanguage, get_language

from gql_harvest.core.parser import ParsedSource
from gql_harvest.core.syntax import TaggedTemplate, classify, node_text, string_value

BindingKind = Literal["import", "require"]

NAMESPACE = "*"
DEFAULT = "default"


@lru_cache(maxsize=None)
def _load_query(dialect: str, query_type: str = "declarations") -> Query:
    queries_dir = Path(__file__).parent.parent / "queries"
    query_path = queries_dir / f"{query_type}.scm"
    if not query_path.exists():
        raise FileNotFoundError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    return Query(get_language(cast(SupportedLanguage, dialect)), query_text)


@dataclass(frozen=True)
class ModuleBinding:
    local: str
    source: str
    imported: str
    kind: BindingKind


@dataclass
class FileScope:
    bindings: dict[str, ModuleBinding] = field(default_factory=dict)
    declared_names: set[str] = field(default_factory=set)
    templates_by_name: dict[str, list[TaggedTemplate]] = field(default_factory=lambda: defaultdict(list))

    def bind(self, binding: ModuleBinding) -> None:
        self.bindings.setdefault(binding.local, binding)

    def templates_for(self, name: str) -> list[TaggedTemplate]:
        return self.templates_by_name.get(name, [])


def _import_bindings(node: Node) -> list[ModuleBinding]:
    source_node = node.child_by_field_name("source")
    if source_node is None:
        return []
    source = string_value(source_node)
    clause = next((child for child in node.named_children if child.type == "import_clause"), None)
    if clause is None:
        return []

    found: list[ModuleBinding] = []
    for child in clause.named_children:
        if child.type == "identifier":
            found.append(ModuleBinding(node_text(child), source, DEFAULT, "import"))
        elif child.type == "namespace_import":
            local = next((c for c in child.named_children if c.type == "identifier"), None)
            if local is not None:
                found.append(ModuleBinding(node_text(local), source, NAMESPACE, "import"))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                if name is None:
                    continue
                imported = string_value(name) if name.type == "string" else node_text(name)
                local = node_text(alias) if alias is not None else imported
                found.append(ModuleBinding(local, source, imported, "import"))
    return found


def _require_bindings(target: Node, source: str) -> list[ModuleBinding]:
    if target.type == "identifier":
        return [ModuleBinding(node_text(target), source, NAMESPACE, "require")]
    if target.type != "object_pattern":
        return []

    found: list[ModuleBinding] = []
    for child in target.named_children:
        if child.type == "shorthand_property_identifier_pattern":
            name = node_text(child)
            found.append(ModuleBinding(name, source, name, "require"))
        elif child.type == "pair_pattern":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if key is not None and value is not None and value.type == "identifier":
                found.append(ModuleBinding(node_text(value), source, node_text(key), "require"))
    return found


def build_scope(parsed: ParsedSource) -> FileScope:
    scope = FileScope()
    cursor = QueryCursor(_load_query(parsed.dialect))
    matches = cursor.matches(parsed.tree.root_node)

    templates: list[tuple[int, str, TaggedTemplate]] = []
    for _, captures in matches:
        if "import" in captures:
            for node in captures["import"]:
                for binding in _import_bindings(node):
                    scope.bind(binding)
        if "require.callee" in captures:
            callee = captures["require.callee"][0]
            if node_text(callee) == "require":
                source = string_value(captures["require.source"][0])
                for binding in _require_bindings(captures["require.target"][0], source):
                    scope.bind(binding)
        if "declarator.name" in captures:
            name = node_text(captures["declarator.name"][0])
            item = classify(captures["declarator.template"][0])
            if isinstance(item, TaggedTemplate):
                templates.append((item.start, name, item))
        if "declared.name" in captures:
            scope.declared_names.add(node_text(captures["declared.name"][0]))

    for _, name, template in sorted(templates, key=lambda entry: entry[0]):
        scope.templates_by_name[name].append(template)
    return scope
