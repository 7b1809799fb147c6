"""Java support: tree-sitter parser, Javadoc parsing and the IR converter."""

from codeir.languages.java.analyzer import JavaAnalyzer
from codeir.languages.java.converter import JavaConverter
from codeir.languages.java.javadoc import parse_javadoc
from codeir.languages.java.parser import JavaParser

__all__ = ["JavaAnalyzer", "JavaConverter", "JavaParser", "parse_javadoc"]
