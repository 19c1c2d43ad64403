"""Shuttle document tree.

A document is a forest of ``Element`` and ``Text`` nodes. Nodes are immutable
once constructed and own their children outright (no parent pointers), so a
tree can be shared between threads without locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import overload

from .constants import VOID_ELEMENTS, is_valid_name


class _Frozen:
    __slots__ = ()

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")


class PropertyKind(Enum):
    VALUE = "value"
    BOOLEAN = "boolean"
    EMPTY_STRING = "empty-string"


class Property(_Frozen):
    """A name/value pair attached to an element.

    ``kind`` is inferred when omitted: no value means a boolean property,
    ``""`` an empty-string property, anything else a plain value.
    """

    __slots__ = ("kind", "name", "value")

    name: str
    kind: PropertyKind
    value: str | None

    def __init__(self, name: str, value: str | None = None, kind: PropertyKind | None = None) -> None:
        if not is_valid_name(name):
            raise ValueError(f"Invalid property name: {name!r}")
        if kind is None:
            if value is None:
                kind = PropertyKind.BOOLEAN
            elif value == "":
                kind = PropertyKind.EMPTY_STRING
            else:
                kind = PropertyKind.VALUE
        if kind is PropertyKind.BOOLEAN:
            value = None
        elif kind is PropertyKind.EMPTY_STRING:
            value = ""
        elif value is None:
            raise ValueError(f"Property {name!r} of kind VALUE needs a value")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Property):
            return NotImplemented
        return self.name == other.name and self.kind is other.kind and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.name, self.kind, self.value))

    def __repr__(self) -> str:
        if self.kind is PropertyKind.BOOLEAN:
            return f"Property({self.name!r})"
        return f"Property({self.name!r}, {self.value!r})"


class Text(_Frozen):
    __slots__ = ("data",)

    data: str

    def __init__(self, data: str) -> None:
        if not isinstance(data, str):
            raise TypeError(f"Text data must be str, not {type(data).__name__}")
        object.__setattr__(self, "data", data)

    def text(self) -> str:
        return self.data

    def to_html(self) -> str:
        from .serialize import to_html

        return to_html(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Text):
            return NotImplemented
        return self.data == other.data

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"Text({self.data!r})"


class Element(_Frozen):
    """An element with a tag name, ordered properties and ordered content.

    Construction validates the tree invariants: names follow the name grammar,
    content holds only ``Element``/``Text`` nodes, and void elements are empty.
    """

    __slots__ = ("content", "name", "properties")

    name: str
    properties: tuple[Property, ...]
    content: tuple[Node, ...]

    def __init__(
        self,
        name: str,
        properties: Iterable[Property] = (),
        content: Iterable[Node] = (),
    ) -> None:
        if not is_valid_name(name):
            raise ValueError(f"Invalid tag name: {name!r}")
        properties = tuple(properties)
        content = tuple(content)
        for prop in properties:
            if not isinstance(prop, Property):
                raise TypeError(f"Expected Property, got {type(prop).__name__}")
        for child in content:
            if not isinstance(child, (Element, Text)):
                raise TypeError(f"Expected Element or Text, got {type(child).__name__}")
        if content and name in VOID_ELEMENTS:
            raise ValueError(f"Void element <{name}> cannot have content")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "properties", properties)
        object.__setattr__(self, "content", content)

    @property
    def is_void(self) -> bool:
        return self.name in VOID_ELEMENTS

    def get(self, name: str) -> Property | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def text(self) -> str:
        """Concatenated text of all descendant Text nodes."""
        return "".join(child.text() for child in self.content)

    def to_html(self) -> str:
        from .serialize import to_html

        return to_html(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self.name == other.name and self.properties == other.properties and self.content == other.content

    def __hash__(self) -> int:
        return hash((self.name, self.properties, self.content))

    def __repr__(self) -> str:
        return f"Element({self.name!r}, properties={list(self.properties)!r}, content={list(self.content)!r})"


Node = Element | Text


class Document(_Frozen):
    """Ordered forest of top-level nodes produced by one parse."""

    __slots__ = ("nodes",)

    nodes: tuple[Node, ...]

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        nodes = tuple(nodes)
        for node in nodes:
            if not isinstance(node, (Element, Text)):
                raise TypeError(f"Expected Element or Text, got {type(node).__name__}")
        object.__setattr__(self, "nodes", nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    @overload
    def __getitem__(self, index: int) -> Node: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Node, ...]: ...

    def __getitem__(self, index: int | slice) -> Node | tuple[Node, ...]:
        return self.nodes[index]

    def text(self) -> str:
        return "".join(node.text() for node in self.nodes)

    def to_html(self) -> str:
        from .serialize import serialize

        return serialize(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.nodes == other.nodes

    def __hash__(self) -> int:
        return hash(self.nodes)

    def __repr__(self) -> str:
        return f"Document({list(self.nodes)!r})"
