"""
codeir: A language-agnostic intermediate representation of source code.

codeir parses source files and converts them into immutable IR values, so
tools can ask the same questions of any language:
- Which types, functions and variables does a file define?
- Where does each definition start and end, and how visible is it?
- What does it extend, implement or use, and how is it documented?

Usage:
    from pathlib import Path
    from codeir.languages import default_registry

    analyzer = default_registry().resolve(Path("src/Example.java"))
    unit = analyzer.parse_file(Path("src/Example.java"))
    for definition in analyzer.extract_definitions(unit):
        print(definition.kind.value, definition.name)
"""

__version__ = "0.1.0"
