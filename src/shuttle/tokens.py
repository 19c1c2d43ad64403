from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    UNMATCHED_PARENTHESIS = "unmatched-parenthesis"
    EMPTY_ELEMENT = "empty-element"
    INVALID_TAG_NAME = "invalid-tag-name"
    INVALID_PROPERTY_NAME = "invalid-property-name"
    UNTERMINATED_QUOTED_VALUE = "unterminated-quoted-value"
    CONTENT_IN_VOID_ELEMENT = "content-in-void-element"
    INVALID_ENTITY_REFERENCE = "invalid-entity-reference"
    UNTERMINATED_COMMENT = "unterminated-comment"
    DUPLICATE_PROPERTY = "duplicate-property"
    NESTING_TOO_DEEP = "nesting-too-deep"

    def __str__(self) -> str:
        return self.value


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("_source", "column", "kind", "line", "message", "offset")

    kind: ErrorKind
    offset: int | None
    line: int | None
    column: int | None
    message: str
    _source: str | None

    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(
        self,
        kind: ErrorKind | str,
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
        message: str | None = None,
        source: str | None = None,
    ) -> None:
        self.kind = ErrorKind(kind)
        self.offset = offset
        self.line = line
        self.column = column
        self.message = message or self.kind.value
        self._source = source

    @property
    def code(self) -> str:
        return self.kind.value

    def __repr__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self) -> str:
        if self.line is not None and self.column is not None:
            if self.message != self.code:
                return f"({self.line},{self.column}): {self.code} - {self.message}"
            return f"({self.line},{self.column}): {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.kind == other.kind and self.line == other.line and self.column == other.column

    def as_exception(self) -> SyntaxError:
        """Convert to a SyntaxError pointing at the error in the Shuttle source.

        Python's traceback display uses ``lineno``/``offset``/``text`` to draw
        a caret under the offending character.
        """
        exc = SyntaxError(self.message)
        exc.msg = self.message
        if self.line is None or self.column is None or self._source is None:
            return exc

        lines = self._source.split("\n")
        if self.line < 1 or self.line > len(lines):
            return exc

        exc.filename = "<shuttle>"
        exc.lineno = self.line
        exc.offset = self.column
        exc.text = lines[self.line - 1]
        exc.end_lineno = self.line
        exc.end_offset = self.column + 1
        return exc
