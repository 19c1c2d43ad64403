from .entities import resolve
from .node import Document, Element, Node, Property, PropertyKind, Text
from .parser import ParseResult, Parser, ParserOpts, RecoveryMode, Shuttle, StrictModeError, parse
from .serialize import serialize, to_html
from .tokens import ErrorKind, ParseError

__all__ = [
    "Document",
    "Element",
    "ErrorKind",
    "Node",
    "ParseError",
    "ParseResult",
    "Parser",
    "ParserOpts",
    "Property",
    "PropertyKind",
    "RecoveryMode",
    "Shuttle",
    "StrictModeError",
    "Text",
    "parse",
    "resolve",
    "serialize",
    "to_html",
]
