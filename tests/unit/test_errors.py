"""Tests for error handling paths."""

import tempfile
from pathlib import Path

import pytest

from codeir.core.exceptions import (
    CodeIRError,
    ConversionError,
    InvalidArgumentError,
    ParseError,
    SourceReadError,
)
from codeir.core.models import CodeUnit, UnitType
from codeir.languages.analyzer import Analyzer
from codeir.languages.java import JavaAnalyzer
from codeir.languages.models import ParseResult
from codeir.languages.python import PythonAnalyzer, PythonConverter, PythonParser
from codeir.languages.source import SourceText


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


class StubParser:
    """Parser returning a fixed result."""

    def __init__(self, result: ParseResult) -> None:
        self.result = result

    def parse(self, file: Path) -> ParseResult:
        return self.result

    def parse_text(self, source: str, path: Path | None = None) -> ParseResult:
        return self.result


class FailingConverter:
    """Converter raising the given exception."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    def convert(self, parsed: ParseResult) -> CodeUnit:
        raise self.error


class TestExceptionHierarchy:
    """Tests for the exception types."""

    def test_common_base(self) -> None:
        """Test that every error derives from CodeIRError."""
        for error_type in (InvalidArgumentError, ParseError, ConversionError, SourceReadError):
            assert issubclass(error_type, CodeIRError)

    def test_builtin_bases(self) -> None:
        """Test the builtin categories callers may catch."""
        assert issubclass(InvalidArgumentError, ValueError)
        assert issubclass(SourceReadError, OSError)

    def test_parse_error_problems(self) -> None:
        """Test that ParseError keeps its problems as a tuple."""
        error = ParseError("Failed", ["Syntax error at line 1, column 1"])
        assert error.problems == ("Syntax error at line 1, column 1",)
        assert ParseError("Failed").problems == ()


class TestParserErrors:
    """Tests for parser error handling."""

    def test_parse_syntax_error(self, temp_dir: Path) -> None:
        """Test that syntax errors produce a failed parse result."""
        bad_code = """
def broken(
    # Missing closing paren and colon
"""
        file_path = temp_dir / "bad_syntax.py"
        file_path.write_text(bad_code)

        result = PythonParser().parse(file_path)

        assert not result.successful
        assert result.tree is None
        assert "Syntax error" in result.problems[0]

    def test_parse_encoding_error(self, temp_dir: Path) -> None:
        """Test that undecodable files produce a failed parse result."""
        file_path = temp_dir / "bad_encoding.py"
        # Write invalid UTF-8 bytes
        file_path.write_bytes(b"\xff\xfe invalid utf-8 \x80\x81")

        result = PythonParser().parse(file_path)

        assert not result.successful
        assert "Cannot decode" in result.problems[0]

    def test_parse_missing_file(self, temp_dir: Path) -> None:
        """Test that an unreadable file raises SourceReadError."""
        with pytest.raises(SourceReadError, match="Cannot read"):
            PythonParser().parse(temp_dir / "missing.py")

    def test_parse_empty_file(self, temp_dir: Path) -> None:
        """Test that empty files parse without error."""
        file_path = temp_dir / "empty.py"
        file_path.write_text("")

        unit = PythonAnalyzer().parse_file(file_path)

        assert unit.definitions == ()
        assert unit.documentation is None


class TestConverterErrors:
    """Tests for converter error handling."""

    def test_failed_parse_raises_parse_error(self) -> None:
        """Test that converting a failed parse raises ParseError with the problems."""
        parsed = ParseResult(path=Path("bad.py"), source=b"", tree=None, problems=("Syntax error at line 2, column 1: x",))

        with pytest.raises(ParseError) as exc_info:
            PythonConverter().convert(parsed)

        assert "bad.py" in str(exc_info.value)
        assert exc_info.value.problems == parsed.problems

    def test_unexpected_tree_wrapped(self) -> None:
        """Test that an unexpected tree surfaces as ConversionError, chained."""
        parsed = ParseResult(path=Path("odd.py"), source=b"x = 1\n", tree=object())

        with pytest.raises(ConversionError, match="Failed to convert odd.py") as exc_info:
            PythonConverter().convert(parsed)

        assert exc_info.value.__cause__ is not None

    def test_missing_source_range(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a declaration without a source span fails the whole conversion."""
        file_path = temp_dir / "A.java"
        file_path.write_text("public class A {}\n")
        monkeypatch.setattr(SourceText, "span", lambda self, start, end: None)

        units = []
        with pytest.raises(ConversionError, match="Missing source range for class_declaration at line 1"):
            units.append(JavaAnalyzer().parse_file(file_path))

        assert units == []

    def test_null_parse_result(self) -> None:
        """Test that a null parse result is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            PythonConverter().convert(None)  # type: ignore[arg-type]


class TestAnalyzerErrors:
    """Tests for error propagation through the analyzer facade."""

    def test_propagates_conversion_error(self, temp_dir: Path) -> None:
        """Test that converter failures reach the caller unchanged."""
        error = ConversionError("Missing name for class_declaration at line 1")
        analyzer = Analyzer(
            StubParser(ParseResult(path=None, source=b"", tree=object())),
            FailingConverter(error),
        )

        with pytest.raises(ConversionError) as exc_info:
            analyzer.parse_file(temp_dir / "A.java")

        assert exc_info.value is error

    def test_requires_collaborators(self) -> None:
        """Test that the facade needs both a parser and a converter."""
        with pytest.raises(InvalidArgumentError):
            Analyzer(None, PythonConverter())  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            Analyzer(PythonParser(), None)  # type: ignore[arg-type]

    def test_documentation_absent(self) -> None:
        """Test that a unit without documentation yields an empty list."""
        analyzer = PythonAnalyzer()
        unit = CodeUnit("a.py", UnitType.MODULE)

        assert analyzer.extract_documentation(unit) == []
        assert analyzer.extract_definitions(unit) == []
