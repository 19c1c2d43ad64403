"""Recursive-descent parser turning Shuttle source into a document tree."""

from __future__ import annotations

import sys
from enum import Enum
from typing import NamedTuple

from .constants import (
    COMMENT_CLOSE,
    COMMENT_OPEN,
    DEFAULT_MAX_DEPTH,
    DELIMITERS,
    NAME_START_CHARS,
    TOKEN_TERMINATORS,
    VOID_ELEMENTS,
    is_valid_name,
)
from .entities import decode_entities
from .errors import generate_error_message
from .node import Document, Element, Node, Property, Text
from .scanner import Scanner
from .serialize import serialize
from .tokens import ErrorKind, ParseError

# Characters ending the name part of a possible "name=value" token
_PROPERTY_NAME_TERMINATORS = TOKEN_TERMINATORS | frozenset('=&"')


class RecoveryMode(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"


class ParserOpts:
    __slots__ = ("debug", "max_depth", "recovery")

    recovery: RecoveryMode
    max_depth: int
    debug: bool

    def __init__(
        self,
        recovery: RecoveryMode | str = RecoveryMode.LENIENT,
        max_depth: int = DEFAULT_MAX_DEPTH,
        debug: bool = False,
    ) -> None:
        self.recovery = RecoveryMode(recovery)
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth
        self.debug = bool(debug)


class ParseResult(NamedTuple):
    document: Document
    errors: list[ParseError]


class StrictModeError(SyntaxError):
    """Raised by ``Shuttle.raise_on_error`` for the first collected parse error.

    Inherits from SyntaxError so tracebacks point at the Shuttle source line.
    """

    error: ParseError

    def __init__(self, error: ParseError) -> None:
        self.error = error
        exc = error.as_exception()
        super().__init__(exc.msg)
        self.filename = exc.filename
        self.lineno = exc.lineno
        self.offset = exc.offset
        self.text = exc.text
        self.end_lineno = getattr(exc, "end_lineno", None)
        self.end_offset = getattr(exc, "end_offset", None)


class Parser:
    """Single-use parser over one source string.

    Grammar problems never raise; they are appended to ``errors``. In strict
    mode the first error sets ``halted`` and every open element is finalized
    with whatever it holds so far.
    """

    __slots__ = ("errors", "halted", "opts", "scanner")

    errors: list[ParseError]
    halted: bool
    opts: ParserOpts
    scanner: Scanner

    def __init__(self, text: str, opts: ParserOpts | None = None) -> None:
        self.scanner = Scanner(text)
        self.opts = opts or ParserOpts()
        self.errors = []
        self.halted = False

    @property
    def strict(self) -> bool:
        return self.opts.recovery is RecoveryMode.STRICT

    def debug(self, message: str, indent: int = 4) -> None:
        if self.opts.debug:
            print(f"{' ' * indent}{message}", file=sys.stderr)

    def run(self) -> ParseResult:
        scanner = self.scanner
        nodes: list[Node] = []
        while not self.halted:
            self._skip_whitespace_and_comments()
            if self.halted or scanner.at_end():
                break
            char = scanner.peek()
            if char == "(":
                self._parse_element_into(nodes, 1)
            elif char == ")":
                self._error(ErrorKind.UNMATCHED_PARENTHESIS, scanner.pos)
                scanner.advance()
            else:
                self._append_text(nodes, self._parse_text())
        self.debug(f"done: {len(nodes)} top-level nodes, {len(self.errors)} errors", indent=0)
        return ParseResult(Document(nodes), self.errors)

    # Diagnostics

    def _error(self, kind: ErrorKind, offset: int, detail: str | None = None) -> None:
        if self.halted:
            return
        line, column = self.scanner.location(offset)
        self.errors.append(
            ParseError(
                kind,
                offset=offset,
                line=line,
                column=column,
                message=generate_error_message(kind, detail),
                source=self.scanner.text,
            )
        )
        self.debug(f"error {kind.value} at ({line},{column})", indent=0)
        if self.strict:
            self.halted = True

    # Whitespace and comments

    def _skip_whitespace_and_comments(self) -> None:
        scanner = self.scanner
        while True:
            scanner.skip_whitespace()
            if not scanner.startswith(COMMENT_OPEN):
                return
            self._skip_comment()
            if self.halted:
                return

    def _skip_comment(self) -> None:
        scanner = self.scanner
        start = scanner.pos
        end = scanner.find(COMMENT_CLOSE, start + len(COMMENT_OPEN))
        if end == -1:
            self._error(ErrorKind.UNTERMINATED_COMMENT, start)
            scanner.pos = scanner.length
            return
        scanner.pos = end + len(COMMENT_CLOSE)

    def _skip_balanced(self) -> None:
        """Skip an element's source span, from its "(" to the matching ")"."""
        scanner = self.scanner
        level = 0
        while not scanner.at_end():
            if scanner.startswith(COMMENT_OPEN):
                end = scanner.find(COMMENT_CLOSE, scanner.pos + len(COMMENT_OPEN))
                scanner.pos = scanner.length if end == -1 else end + len(COMMENT_CLOSE)
                continue
            char = scanner.advance()
            if char == "=" and scanner.peek() == '"':
                # A quoted value may hold parens; an unterminated one ends at ")".
                end = scanner.find('"', scanner.pos + 1)
                if end == -1:
                    end = scanner.find(")", scanner.pos + 1)
                    scanner.pos = scanner.length if end == -1 else end
                else:
                    scanner.pos = end + 1
            elif char == "(":
                level += 1
            elif char == ")":
                level -= 1
                if level == 0:
                    return

    # Elements

    def _parse_element_into(self, items: list[Node], depth: int) -> None:
        """Parse the element starting at "(" and append the result to ``items``.

        Nothing is appended for skipped elements; the content of an element
        with an empty or invalid name is spliced into ``items``.
        """
        scanner = self.scanner
        start = scanner.pos
        if depth > self.opts.max_depth:
            self._error(ErrorKind.NESTING_TOO_DEEP, start, str(self.opts.max_depth))
            self._skip_balanced()
            return

        scanner.advance()
        self._skip_whitespace_and_comments()
        name_offset = scanner.pos
        name = scanner.consume_until(TOKEN_TERMINATORS)
        valid = True
        if not name:
            self._error(ErrorKind.EMPTY_ELEMENT, start)
            valid = False
        elif not is_valid_name(name):
            self._error(ErrorKind.INVALID_TAG_NAME, name_offset, name)
            valid = False
        if self.halted:
            return
        if self.opts.debug:
            self.debug(f"open ({name}", indent=depth * 2)

        properties: list[Property] = []
        seen: set[str] = set()
        content: list[Node] = []
        content_mode = False
        first_content_offset = start
        closed = False

        while not self.halted:
            self._skip_whitespace_and_comments()
            if self.halted or scanner.at_end():
                break
            item_offset = scanner.pos
            char = scanner.peek()
            if char == ")":
                scanner.advance()
                closed = True
                break
            if char == "(":
                self._parse_element_into(content, depth + 1)
            elif not content_mode and self._at_property():
                prop = self._parse_property()
                if prop.name in seen:
                    self._error(ErrorKind.DUPLICATE_PROPERTY, item_offset, prop.name)
                else:
                    seen.add(prop.name)
                    properties.append(prop)
            elif self.halted:
                # _at_property() rejected a malformed property name.
                break
            else:
                self._append_text(content, self._parse_text())

            if content and not content_mode:
                content_mode = True
                first_content_offset = item_offset

        if not closed:
            self._error(ErrorKind.UNMATCHED_PARENTHESIS, start, name or None)

        if not valid:
            if self.opts.debug:
                self.debug(f"unwrap ({name}: {len(content)} items moved to parent", indent=depth * 2)
            for node in content:
                if isinstance(node, Text):
                    self._append_text(items, node.data)
                else:
                    items.append(node)
            return

        if content and name in VOID_ELEMENTS:
            self._error(ErrorKind.CONTENT_IN_VOID_ELEMENT, first_content_offset, name)
            content = []

        items.append(Element(name, properties, content))
        if self.opts.debug:
            self.debug(f"close ({name}", indent=depth * 2)

    # Properties

    def _at_property(self) -> bool:
        """Check whether the upcoming token reads as ``name=...``.

        A token whose name part starts like a name but breaks the name
        grammar is reported and treated as text.
        """
        scanner = self.scanner
        text = scanner.text
        end = scanner.pos
        while end < scanner.length and text[end] not in _PROPERTY_NAME_TERMINATORS:
            end += 1
        if end >= scanner.length or text[end] != "=" or end == scanner.pos:
            return False
        candidate = text[scanner.pos : end]
        if is_valid_name(candidate):
            return True
        if candidate[0] in NAME_START_CHARS:
            self._error(ErrorKind.INVALID_PROPERTY_NAME, scanner.pos, candidate)
        return False

    def _parse_property(self) -> Property:
        scanner = self.scanner
        name = scanner.consume_until("=")
        scanner.advance()
        char = scanner.peek()
        if not char or char in TOKEN_TERMINATORS:
            return Property(name)
        if char == '"':
            return Property(name, self._parse_quoted_value(name))
        return Property(name, scanner.consume_until(TOKEN_TERMINATORS))

    def _parse_quoted_value(self, name: str) -> str:
        scanner = self.scanner
        quote_offset = scanner.pos
        start = quote_offset + 1
        end = scanner.find('"', start)
        if end == -1:
            self._error(ErrorKind.UNTERMINATED_QUOTED_VALUE, quote_offset, name)
            end = scanner.find(")", start)
            if end == -1:
                end = scanner.length
            scanner.pos = end
        else:
            scanner.pos = end + 1
        return self._decode(scanner.text[start:end], start)

    # Text

    def _parse_text(self) -> str:
        scanner = self.scanner
        start = scanner.pos
        return self._decode(scanner.consume_until(DELIMITERS), start)

    def _decode(self, raw: str, base_offset: int) -> str:
        decoded, failures = decode_entities(raw)
        for offset, literal in failures:
            self._error(ErrorKind.INVALID_ENTITY_REFERENCE, base_offset + offset, literal)
        return decoded

    @staticmethod
    def _append_text(items: list[Node], data: str) -> None:
        if items and isinstance(items[-1], Text):
            items[-1] = Text(items[-1].data + data)
        else:
            items.append(Text(data))


def parse(
    text: str | None,
    *,
    recovery: RecoveryMode | str = RecoveryMode.LENIENT,
    max_depth: int = DEFAULT_MAX_DEPTH,
    debug: bool = False,
    opts: ParserOpts | None = None,
) -> ParseResult:
    """Parse Shuttle source into a document and the list of parse errors.

    Never raises for malformed input: every problem becomes a ``ParseError``.
    ``recovery="strict"`` stops at the first error and returns the partial
    tree; ``"lenient"`` recovers and keeps going.
    """
    opts = opts or ParserOpts(recovery=recovery, max_depth=max_depth, debug=debug)
    return Parser(text or "", opts).run()


class Shuttle:
    __slots__ = ("errors", "opts", "root", "source")

    errors: list[ParseError]
    opts: ParserOpts
    root: Document
    source: str

    def __init__(
        self,
        text: str | None,
        *,
        strict: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        debug: bool = False,
        opts: ParserOpts | None = None,
    ) -> None:
        self.source = text or ""
        self.opts = opts or ParserOpts(
            recovery=RecoveryMode.STRICT if strict else RecoveryMode.LENIENT,
            max_depth=max_depth,
            debug=debug,
        )
        self.root, self.errors = Parser(self.source, self.opts).run()

    def raise_on_error(self) -> None:
        if self.errors:
            raise StrictModeError(self.errors[0])

    def to_html(self) -> str:
        """Serialize the document to HTML."""
        return serialize(self.root)
