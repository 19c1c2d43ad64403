"""Character reference resolution and escaping.

Shuttle uses HTML character references: named (``&amp;``, ``&nbsp;``),
decimal (``&#65;``) and hexadecimal (``&#x41;``). Every reference must be
terminated by a semicolon; there is no legacy semicolon-less form.
"""

from __future__ import annotations

import html.entities
import re
from types import MappingProxyType

from .constants import MAX_ENTITY_LENGTH

# Python's complete HTML5 entity list. Keys carry the trailing semicolon
# (e.g. "amp;"); the semicolon-less legacy aliases are left out.
NAMED_ENTITIES = MappingProxyType(
    {key[:-1]: value for key, value in html.entities.html5.items() if key.endswith(";")}
)

# "&" followed by a reference body and ";". The body is validated by resolve().
_REFERENCE_PATTERN = re.compile(rf"&([^\s;&()\"]{{1,{MAX_ENTITY_LENGTH}}});")
_NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9]*\Z")
_DECIMAL_PATTERN = re.compile(r"[0-9]+\Z")
_HEX_PATTERN = re.compile(r"[0-9A-Fa-f]+\Z")


def decode_numeric_entity(text: str, is_hex: bool = False) -> str | None:
    """Decode the numeric part of ``&#60;`` or ``&#x3C;``.

    Returns None for malformed digits, NUL, surrogates and values beyond
    U+10FFFF.
    """
    pattern = _HEX_PATTERN if is_hex else _DECIMAL_PATTERN
    if not pattern.match(text):
        return None
    codepoint = int(text, 16 if is_hex else 10)
    if codepoint == 0 or codepoint > 0x10FFFF:
        return None
    if 0xD800 <= codepoint <= 0xDFFF:
        return None
    return chr(codepoint)


def resolve(raw: str) -> str | None:
    """Resolve the body of a character reference (text between ``&`` and ``;``).

    Returns the replacement text, or None when ``raw`` names no character.
    """
    if raw.startswith("#"):
        digits = raw[1:]
        if digits[:1] in ("x", "X"):
            return decode_numeric_entity(digits[1:], is_hex=True)
        return decode_numeric_entity(digits)
    if _NAME_PATTERN.match(raw):
        return NAMED_ENTITIES.get(raw)
    return None


def decode_entities(text: str) -> tuple[str, list[tuple[int, str]]]:
    """Decode every character reference in ``text``.

    Unresolvable references are kept literally. Returns the decoded text and a
    list of ``(offset, literal)`` pairs, one per reference that failed, with
    offsets relative to ``text``. A lone ``&`` counts as a failed reference.
    """
    if "&" not in text:
        return text, []

    result: list[str] = []
    failures: list[tuple[int, str]] = []
    i = 0
    length = len(text)
    while i < length:
        next_amp = text.find("&", i)
        if next_amp == -1:
            result.append(text[i:])
            break
        if next_amp > i:
            result.append(text[i:next_amp])

        match = _REFERENCE_PATTERN.match(text, next_amp)
        if match is None:
            failures.append((next_amp, "&"))
            result.append("&")
            i = next_amp + 1
            continue

        decoded = resolve(match.group(1))
        if decoded is None:
            failures.append((next_amp, match.group(0)))
            result.append(match.group(0))
        else:
            result.append(decoded)
        i = match.end()

    return "".join(result), failures


def escape_text(text: str) -> str:
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_attribute(value: str) -> str:
    if not value:
        return ""
    return escape_text(value).replace('"', "&quot;")
