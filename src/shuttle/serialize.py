"""HTML serialization for Shuttle document trees."""

from __future__ import annotations

from .constants import VOID_ELEMENTS
from .entities import escape_attribute, escape_text
from .node import Document, Element, Node, Property, PropertyKind, Text


def serialize_property(prop: Property) -> str:
    if prop.kind is PropertyKind.BOOLEAN:
        return f" {prop.name}"
    return f' {prop.name}="{escape_attribute(prop.value or "")}"'


def serialize_start_tag(element: Element) -> str:
    parts: list[str] = ["<", element.name]
    for prop in element.properties:
        parts.append(serialize_property(prop))
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def _serialize_node(node: Node, parts: list[str]) -> None:
    if isinstance(node, Text):
        parts.append(escape_text(node.data))
        return
    if not isinstance(node, Element):
        raise TypeError(f"Cannot serialize {type(node).__name__}; expected Element or Text")

    parts.append(serialize_start_tag(node))
    if node.name in VOID_ELEMENTS:
        return
    for child in node.content:
        _serialize_node(child, parts)
    parts.append(serialize_end_tag(node.name))


def to_html(node: Node) -> str:
    """Serialize a single node (and its descendants) to HTML."""
    parts: list[str] = []
    _serialize_node(node, parts)
    return "".join(parts)


def serialize(document: Document) -> str:
    """Serialize a document to HTML.

    Properties keep their source order and values are always double-quoted.
    Void elements get no closing tag. No whitespace is added between nodes.
    """
    parts: list[str] = []
    for node in document:
        _serialize_node(node, parts)
    return "".join(parts)
