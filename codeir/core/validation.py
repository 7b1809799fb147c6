"""Precondition checks shared by the value model and the converters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from codeir.core.exceptions import ConversionError, InvalidArgumentError

T = TypeVar("T")


def require_non_empty(value: str | None, field_name: str) -> str:
    """Return ``value`` unchanged, or raise if it is None, empty or whitespace."""
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{field_name} cannot be null or empty", field_name)
    return value


def require_non_null(value: T | None, field_name: str) -> T:
    """Return ``value`` unchanged, or raise if it is None."""
    if value is None:
        raise InvalidArgumentError(f"{field_name} cannot be null", field_name)
    return value


def require_instance(value: Any, expected: type[T], field_name: str) -> T:
    """Like :func:`require_non_null`, but also checks the value's type."""
    require_non_null(value, field_name)
    if not isinstance(value, expected):
        raise InvalidArgumentError(
            f"{field_name} must be a {expected.__name__}, got {type(value).__name__}",
            field_name,
        )
    return value


def is_valid_identifier(name: str | None) -> bool:
    """Check whether ``name`` looks like an identifier in most languages.

    The first character must be a letter or underscore; the rest letters,
    digits or underscores. Converters use this as a sanity check before
    trusting an extracted name; the value model does not enforce it.
    """
    if not name:
        return False

    first = name[0]
    if not (first.isalpha() or first == "_"):
        return False

    return all(c.isalpha() or c.isdecimal() or c == "_" for c in name[1:])


def safe_execute(operation: Callable[[], T | None], context: str) -> T:
    """Run ``operation`` and unwrap its optional result.

    Both a missing result and an unexpected exception surface as a
    :class:`ConversionError` carrying ``context``; the original exception,
    if any, is chained.
    """
    try:
        result = operation()
    except Exception as e:
        raise ConversionError(f"{context}: {e}") from e

    if result is None:
        raise ConversionError(context)
    return result
