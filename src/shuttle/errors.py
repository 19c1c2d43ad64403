"""Human-readable messages for Shuttle parse error kinds."""

from __future__ import annotations

from .tokens import ErrorKind


def generate_error_message(kind: ErrorKind, detail: str | None = None) -> str:
    """Generate a human-readable message for an error kind.

    Args:
        kind: The error kind
        detail: Optional offending text (a tag name, property name or
            reference) to include in the message

    Returns:
        Human-readable error message string
    """
    messages = {
        ErrorKind.UNMATCHED_PARENTHESIS: (
            f"Element ({detail} is never closed" if detail else "Unmatched parenthesis"
        ),
        ErrorKind.EMPTY_ELEMENT: "Element has no tag name",
        ErrorKind.INVALID_TAG_NAME: f"Invalid tag name {detail!r}",
        ErrorKind.INVALID_PROPERTY_NAME: f"Invalid property name {detail!r}",
        ErrorKind.UNTERMINATED_QUOTED_VALUE: f"Quoted value of property {detail!r} is never closed",
        ErrorKind.CONTENT_IN_VOID_ELEMENT: f"Void element ({detail}) cannot have content",
        ErrorKind.INVALID_ENTITY_REFERENCE: f"Invalid character reference {detail!r}",
        ErrorKind.UNTERMINATED_COMMENT: "Comment is never closed with !)",
        ErrorKind.DUPLICATE_PROPERTY: f"Duplicate property {detail!r}",
        ErrorKind.NESTING_TOO_DEEP: f"Elements nested deeper than {detail} levels",
    }

    if detail is None and kind not in (
        ErrorKind.UNMATCHED_PARENTHESIS,
        ErrorKind.EMPTY_ELEMENT,
        ErrorKind.UNTERMINATED_COMMENT,
    ):
        return kind.value
    return messages[kind]
