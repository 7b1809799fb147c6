"""Tests for the shared precondition helpers."""

import pytest

from codeir.core.exceptions import ConversionError, InvalidArgumentError
from codeir.core.validation import (
    is_valid_identifier,
    require_instance,
    require_non_empty,
    require_non_null,
    safe_execute,
)


class TestRequireNonEmpty:
    """Tests for require_non_empty."""

    def test_returns_value(self) -> None:
        """Test that a valid value passes through unchanged."""
        assert require_non_empty("  name ", "name") == "  name "

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_rejects_blank(self, value: str | None) -> None:
        """Test that null, empty and whitespace-only strings are rejected."""
        with pytest.raises(InvalidArgumentError, match="name cannot be null or empty") as exc_info:
            require_non_empty(value, "name")
        assert exc_info.value.field_name == "name"


class TestRequireNonNull:
    """Tests for require_non_null and require_instance."""

    def test_returns_value(self) -> None:
        """Test that falsy but non-null values are accepted."""
        assert require_non_null(0, "count") == 0
        assert require_non_null("", "text") == ""

    def test_rejects_none(self) -> None:
        """Test that None is rejected with the field name in the message."""
        with pytest.raises(InvalidArgumentError, match="parser cannot be null"):
            require_non_null(None, "parser")

    def test_instance_type_mismatch(self) -> None:
        """Test that a value of the wrong type is rejected."""
        with pytest.raises(InvalidArgumentError, match="must be a int"):
            require_instance("1", int, "line")

    def test_invalid_argument_is_value_error(self) -> None:
        """Test that callers can catch validation failures as ValueError."""
        with pytest.raises(ValueError):
            require_non_null(None, "x")


class TestIsValidIdentifier:
    """Tests for is_valid_identifier."""

    @pytest.mark.parametrize("name", ["foo", "_bar", "Baz9", "x", "__init__", "naïve"])
    def test_valid(self, name: str) -> None:
        """Test identifiers made of letters, digits and underscores."""
        assert is_valid_identifier(name)

    @pytest.mark.parametrize("name", [None, "", "9lives", "has-dash", "with space", "a.b", "$x"])
    def test_invalid(self, name: str | None) -> None:
        """Test that empty names and disallowed characters are rejected."""
        assert not is_valid_identifier(name)


class TestSafeExecute:
    """Tests for safe_execute."""

    def test_returns_result(self) -> None:
        """Test that a present result is returned."""
        assert safe_execute(lambda: "value", "lookup") == "value"

    def test_none_result(self) -> None:
        """Test that a missing result becomes a ConversionError with the context."""
        with pytest.raises(ConversionError, match="^Missing name$"):
            safe_execute(lambda: None, "Missing name")

    def test_wraps_exception(self) -> None:
        """Test that exceptions are wrapped as 'context: message' and chained."""

        def boom() -> str:
            raise KeyError("gone")

        with pytest.raises(ConversionError) as exc_info:
            safe_execute(boom, "Reading field")

        assert str(exc_info.value) == "Reading field: 'gone'"
        assert isinstance(exc_info.value.__cause__, KeyError)
