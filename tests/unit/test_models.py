"""Tests for the IR value model and its builders."""

import pytest

from codeir.core.exceptions import InvalidArgumentError
from codeir.core.models import (
    CodeUnit,
    Definition,
    DefinitionKind,
    Documentation,
    DocumentationFormat,
    DocumentationTag,
    Position,
    Reference,
    ReferenceKind,
    Scope,
    ScopeLevel,
    UnitType,
)


def make_scope(start_line: int = 1, end_line: int = 10, level: ScopeLevel = ScopeLevel.GLOBAL) -> Scope:
    return Scope(level=level, start=Position(start_line, 1), end=Position(end_line, 1))


def make_definition(name: str = "Example", **kwargs) -> Definition:
    return Definition(
        name=name,
        kind=kwargs.pop("kind", DefinitionKind.TYPE),
        scope=kwargs.pop("scope", make_scope()),
        position=kwargs.pop("position", Position(1, 1)),
        **kwargs,
    )


class TestPosition:
    """Tests for Position."""

    def test_valid_position(self) -> None:
        """Test that a 1-based position is accepted."""
        pos = Position(line=3, column=5, offset=20)
        assert (pos.line, pos.column, pos.offset) == (3, 5, 20)

    @pytest.mark.parametrize(
        ("line", "column", "offset", "message"),
        [
            (0, 1, 0, "Line number must be positive"),
            (1, 0, 0, "Column number must be positive"),
            (1, 1, -1, "Offset must be non-negative"),
        ],
    )
    def test_out_of_range(self, line: int, column: int, offset: int, message: str) -> None:
        """Test that out-of-range values are rejected with the documented message."""
        with pytest.raises(InvalidArgumentError, match=message):
            Position(line, column, offset)

    def test_null_field(self) -> None:
        """Test that a missing coordinate is rejected."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            Position(None, 1)  # type: ignore[arg-type]
        assert exc_info.value.field_name == "line"

    def test_zero_based_conversion(self) -> None:
        """Test conversion to and from 0-based coordinates."""
        pos = Position.from_zero_based(0, 4, 4)
        assert pos == Position(1, 5, 4)
        assert pos.to_zero_based() == (0, 4)

    def test_ordering_ignores_offset(self) -> None:
        """Test is_before/is_after compare line, then column."""
        early = Position(2, 10, offset=500)
        late = Position(3, 1, offset=0)
        assert early.is_before(late)
        assert late.is_after(early)
        assert not Position(2, 3, 7).is_before(Position(2, 3, 99))

    def test_builder(self) -> None:
        """Test that the builder produces an equal value."""
        assert Position.builder().line(4).column(2).offset(9).build() == Position(4, 2, 9)

    def test_builder_validates(self) -> None:
        """Test that building an invalid position fails."""
        with pytest.raises(InvalidArgumentError):
            Position.builder().line(0).column(1).build()


class TestScope:
    """Tests for Scope."""

    def test_start_after_end(self) -> None:
        """Test that an inverted span is rejected."""
        with pytest.raises(InvalidArgumentError):
            Scope(ScopeLevel.TYPE, start=Position(5, 1), end=Position(4, 1))

    def test_children_inside_parent(self) -> None:
        """Test that nested child scopes are kept in order."""
        inner = make_scope(2, 3, ScopeLevel.FUNCTION)
        outer = Scope.builder().level(ScopeLevel.TYPE).start(Position(1, 1)).end(Position(5, 1)).add_child(inner).build()
        assert outer.children == (inner,)
        assert outer.contains(inner)

    def test_child_outside_parent(self) -> None:
        """Test that a child scope escaping its parent is rejected."""
        with pytest.raises(InvalidArgumentError, match="within its parent"):
            Scope(ScopeLevel.TYPE, Position(1, 1), Position(5, 1), children=[make_scope(4, 9)])

    def test_children_are_immutable(self) -> None:
        """Test that the children list given to the constructor is copied."""
        children = [make_scope(2, 3)]
        scope = Scope(ScopeLevel.TYPE, Position(1, 1), Position(5, 1), children=children)
        children.append(make_scope(2, 4))
        assert len(scope.children) == 1
        assert isinstance(scope.children, tuple)

    def test_builder_requires_level(self) -> None:
        """Test that a scope without a level cannot be built."""
        with pytest.raises(InvalidArgumentError):
            Scope.builder().start(Position(1, 1)).end(Position(1, 1)).build()


class TestReference:
    """Tests for Reference."""

    def test_blank_target(self) -> None:
        """Test that a blank target name is rejected."""
        with pytest.raises(InvalidArgumentError, match="target_name"):
            Reference(ReferenceKind.USE, "   ")

    def test_builder_metadata(self) -> None:
        """Test that metadata is frozen and readable."""
        ref = Reference.builder().kind(ReferenceKind.EXTEND).target_name("Base").add_metadata("x", [1, 2]).build()
        assert ref.metadata["x"] == (1, 2)
        with pytest.raises(TypeError):
            ref.metadata["y"] = 1  # type: ignore[index]

    def test_structural_equality(self) -> None:
        """Test that references compare by value."""
        assert Reference(ReferenceKind.USE, "Foo") == Reference(ReferenceKind.USE, "Foo")


class TestDocumentation:
    """Tests for Documentation and DocumentationTag."""

    def test_tag_defaults(self) -> None:
        """Test that a tag without a value gets an empty string."""
        tag = DocumentationTag("deprecated", None)  # type: ignore[arg-type]
        assert tag.value == ""
        assert dict(tag.attributes) == {}

    def test_tag_requires_name(self) -> None:
        """Test that an empty tag name is rejected."""
        with pytest.raises(InvalidArgumentError):
            DocumentationTag.builder().value("x").build()

    def test_tags_named(self) -> None:
        """Test lookup of tags by name keeps source order."""
        doc = (
            Documentation.builder()
            .format(DocumentationFormat.JAVADOC)
            .description("Adds numbers.")
            .add_tag(DocumentationTag.builder().name("param").value("first").add_attribute("name", "a").build())
            .add_tag(DocumentationTag("return", "the sum"))
            .add_tag(DocumentationTag("param", "second", {"name": "b"}))
            .build()
        )
        assert [t.attributes["name"] for t in doc.tags_named("param")] == ["a", "b"]
        assert doc.tags_named("throws") == []

    def test_requires_format(self) -> None:
        """Test that documentation without a format cannot be built."""
        with pytest.raises(InvalidArgumentError):
            Documentation.builder().description("text").build()


class TestDefinition:
    """Tests for Definition."""

    def test_generated_id(self) -> None:
        """Test that a missing or blank id is replaced by a fresh one."""
        first = make_definition()
        second = make_definition(id="  ")
        assert first.id
        assert second.id.strip()
        assert first.id != second.id

    def test_identity_equality(self) -> None:
        """Test that definitions compare by id only."""
        a = make_definition("Same")
        b = make_definition("Same")
        assert a != b
        assert a == make_definition("Other", id=a.id)
        assert len({a, b, make_definition("Other", id=a.id)}) == 2

    @pytest.mark.parametrize("missing", ["name", "kind", "scope", "position"])
    def test_required_fields(self, missing: str) -> None:
        """Test that each required field is enforced by the builder."""
        builder = Definition.builder()
        values = {
            "name": "Example",
            "kind": DefinitionKind.FUNCTION,
            "scope": make_scope(),
            "position": Position(1, 1),
        }
        for field_name, value in values.items():
            if field_name != missing:
                getattr(builder, field_name)(value)
        with pytest.raises(InvalidArgumentError) as exc_info:
            builder.build()
        assert exc_info.value.field_name == missing

    def test_references_of(self) -> None:
        """Test filtering references by kind."""
        definition = (
            Definition.builder()
            .name("Child")
            .kind(DefinitionKind.TYPE)
            .scope(make_scope())
            .position(Position(1, 1))
            .add_references(
                [
                    Reference(ReferenceKind.EXTEND, "Base"),
                    Reference(ReferenceKind.IMPLEMENT, "Runnable"),
                    Reference(ReferenceKind.IMPLEMENT, "Closeable"),
                ]
            )
            .build()
        )
        assert [r.target_name for r in definition.references_of(ReferenceKind.IMPLEMENT)] == [
            "Runnable",
            "Closeable",
        ]

    def test_frozen(self) -> None:
        """Test that a definition cannot be mutated after construction."""
        definition = make_definition()
        with pytest.raises(AttributeError):
            definition.name = "Changed"  # type: ignore[misc]

    def test_metadata_copied(self) -> None:
        """Test that later changes to the source mapping do not leak in."""
        metadata = {"interfaces": ["A"]}
        definition = make_definition(metadata=metadata)
        metadata["interfaces"].append("B")
        assert definition.metadata["interfaces"] == ("A",)


class TestCodeUnit:
    """Tests for CodeUnit."""

    def test_builder(self) -> None:
        """Test building a unit with definitions and a dependency."""
        dependency = CodeUnit("Base.java", UnitType.FILE)
        definition = make_definition()
        unit = (
            CodeUnit.builder()
            .name("Child.java")
            .type(UnitType.FILE)
            .add_definition(definition)
            .add_dependency(dependency)
            .add_metadata("packageName", "com.example")
            .build()
        )
        assert unit.definitions == (definition,)
        assert unit.dependencies == (dependency,)
        assert unit.metadata["packageName"] == "com.example"
        assert unit.documentation is None

    def test_requires_name_and_type(self) -> None:
        """Test that name and type are mandatory."""
        with pytest.raises(InvalidArgumentError):
            CodeUnit.builder().type(UnitType.FILE).build()
        with pytest.raises(InvalidArgumentError):
            CodeUnit.builder().name("A.java").build()

    def test_rejects_foreign_definitions(self) -> None:
        """Test that definitions must be Definition values."""
        with pytest.raises(InvalidArgumentError):
            CodeUnit("A.java", UnitType.FILE, definitions=["not a definition"])  # type: ignore[list-item]

    def test_definitions_of(self) -> None:
        """Test filtering definitions by kind."""
        fn = make_definition("run", kind=DefinitionKind.FUNCTION)
        unit = CodeUnit("A.java", UnitType.FILE, definitions=[make_definition(), fn])
        assert unit.definitions_of(DefinitionKind.FUNCTION) == [fn]


class TestEnumerations:
    """Tests for the closed-set enumerations."""

    def test_lowercase_values(self) -> None:
        """Test that members serialize as lowercase strings."""
        assert ScopeLevel.GLOBAL.value == "global"
        assert DefinitionKind.INTERFACE.value == "interface"
        assert ReferenceKind.IMPLEMENT.value == "implement"
        assert DocumentationFormat.JAVADOC.value == "javadoc"
        assert UnitType.FILE.value == "file"


class TestValueHashing:
    """Tests that structurally compared entities are usable in sets and as keys."""

    def test_reference(self) -> None:
        """Test that equal references hash equally, metadata included."""
        first = Reference(ReferenceKind.USE, "Override", metadata={"annotation": True, "args": ["a"]})
        second = Reference(ReferenceKind.USE, "Override", metadata={"args": ["a"], "annotation": True})

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_documentation(self) -> None:
        """Test documentation with tags carrying attributes."""
        tag = DocumentationTag("param", "the name", {"name": "name"})
        first = Documentation(DocumentationFormat.JAVADOC, "Doc.", tags=[tag], metadata={"nested": {"a": 1}})
        second = Documentation(DocumentationFormat.JAVADOC, "Doc.", tags=(tag,), metadata={"nested": {"a": 1}})

        assert hash(tag) == hash(DocumentationTag("param", "the name", {"name": "name"}))
        assert {first: "doc"}[second] == "doc"

    def test_scope(self) -> None:
        """Test scopes with children and metadata."""
        child = make_scope(2, 3, ScopeLevel.TYPE)
        first = Scope(ScopeLevel.GLOBAL, Position(1, 1), Position(10, 1), [child], {"depth": 0})
        second = Scope(ScopeLevel.GLOBAL, Position(1, 1), Position(10, 1), (child,), {"depth": 0})

        assert hash(first) == hash(second)
        assert first in {second}
