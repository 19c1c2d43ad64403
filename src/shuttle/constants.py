"""Shared constants for the Shuttle parser and serializer."""

from __future__ import annotations

import re

# HTML void elements (no content, no closing tag)
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

# Tag and property names
NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_.:-]*\Z")
NAME_START_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")

WHITESPACE = frozenset(" \t\n\r")
DELIMITERS = frozenset("()")

# Characters ending an unquoted token (tag name, unquoted property value)
TOKEN_TERMINATORS = WHITESPACE | DELIMITERS

COMMENT_OPEN = "(!"
COMMENT_CLOSE = "!)"

# Longest entity body (between "&" and ";") scanned before giving up.
# The longest HTML named reference is "CounterClockwiseContourIntegral".
MAX_ENTITY_LENGTH = 32

DEFAULT_MAX_DEPTH = 256


def is_valid_name(name: str) -> bool:
    return bool(name) and NAME_PATTERN.match(name) is not None
