"""Typed views over the tree-sitter nodes the extraction passes care about.

``classify`` maps a raw node onto exactly one of the variants below, so the
passes can ``match`` on node kinds instead of comparing type strings.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

_ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element"})


@dataclass(frozen=True)
class Element:
    node: Node
    name: str | None


@dataclass(frozen=True)
class Attribute:
    node: Node
    name: str
    value: Node | None


@dataclass(frozen=True)
class TaggedTemplate:
    node: Node
    tag: Node
    template: Node

    @property
    def start(self) -> int:
        return self.node.start_byte

    @property
    def has_substitutions(self) -> bool:
        return any(child.type == "template_substitution" for child in self.template.named_children)

    def raw_text(self) -> str:
        text = node_text(self.template)
        return text[1:-1]


@dataclass(frozen=True)
class Call:
    node: Node
    callee: Node


@dataclass(frozen=True)
class Identifier:
    node: Node
    name: str


@dataclass(frozen=True)
class VariableDeclarator:
    node: Node
    name: str | None
    value: Node | None


@dataclass(frozen=True)
class ExportDeclaration:
    node: Node
    is_default: bool


@dataclass(frozen=True)
class Other:
    node: Node


SyntaxNode = Element | Attribute | TaggedTemplate | Call | Identifier | VariableDeclarator | ExportDeclaration | Other


def node_text(node: Node) -> str:
    text = node.text
    return text.decode("utf-8") if text is not None else ""


def string_value(node: Node) -> str:
    return node_text(node)[1:-1]


def _element_name(node: Node) -> str | None:
    opening = node.child_by_field_name("open_tag") if node.type == "jsx_element" else node
    if opening is None:
        return None
    name = opening.child_by_field_name("name")
    if name is None or name.type != "identifier":
        return None
    return node_text(name)


def classify(node: Node) -> SyntaxNode:
    node_type = node.type
    if node_type in _ELEMENT_TYPES:
        return Element(node=node, name=_element_name(node))
    if node_type == "jsx_attribute":
        named = node.named_children
        if not named:
            return Other(node=node)
        value = named[1] if len(named) > 1 else None
        return Attribute(node=node, name=node_text(named[0]), value=value)
    if node_type == "call_expression":
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee is None:
            return Other(node=node)
        if arguments is not None and arguments.type == "template_string":
            return TaggedTemplate(node=node, tag=callee, template=arguments)
        return Call(node=node, callee=callee)
    if node_type == "identifier":
        return Identifier(node=node, name=node_text(node))
    if node_type == "variable_declarator":
        name = node.child_by_field_name("name")
        return VariableDeclarator(
            node=node,
            name=node_text(name) if name is not None and name.type == "identifier" else None,
            value=node.child_by_field_name("value"),
        )
    if node_type == "export_statement":
        return ExportDeclaration(node=node, is_default=any(child.type == "default" for child in node.children))
    return Other(node=node)


def walk(root: Node) -> Iterator[SyntaxNode]:
    """Depth-first, pre-order traversal in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield classify(node)
        stack.extend(reversed(node.children))


def walk_until(root: Node, *, stop_at: tuple[type, ...]) -> Iterator[SyntaxNode]:
    """Like ``walk``, but does not descend into nodes of the ``stop_at`` kinds."""
    stack = [root]
    while stack:
        node = stack.pop()
        item = classify(node)
        yield item
        if not isinstance(item, stop_at):
            stack.extend(reversed(node.children))
