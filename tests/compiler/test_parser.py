# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the hgen recursive-descent parser."""

import pytest

from hgen.compiler.lexer import tokenize
from hgen.compiler.parser import (
    DuplicateDeclarationError,
    GenericArityError,
    ParseError,
    UnexpectedEndOfInputError,
    UnexpectedTokenError,
    parse,
    parse_shape,
    parse_tokens,
)
from hgen.model.entities import AliasDef, EnumDef, ExternalDef, StructDef
from hgen.model.types import (
    ListShape,
    MapShape,
    NullableShape,
    Primitive,
    PrimitiveShape,
    ReferenceShape,
    SetShape,
    format_shape,
    primitive,
    reference,
)

# ###############
# Empty Input
# ###############


class TestEmptyInput:
    def test_empty_string_returns_empty_schema(self) -> None:
        schema = parse("")
        assert schema.imports == []
        assert len(schema.models) == 0
        assert len(schema.services) == 0

    def test_comment_only(self) -> None:
        assert len(parse("// a schema with nothing in it\n").models) == 0


# ###############
# Use Statements
# ###############


class TestUse:
    def test_single_use(self) -> None:
        assert parse("use shared;").imports == ["shared"]

    def test_uses_keep_order(self) -> None:
        assert parse("use b; use a; use c;").imports == ["b", "a", "c"]

    def test_missing_semicolon(self) -> None:
        with pytest.raises(UnexpectedEndOfInputError):
            parse("use shared")


# ###############
# Structs
# ###############


class TestStructs:
    def test_point(self) -> None:
        schema = parse("struct Point { x: Int32, y: Int32, }")
        point = schema.models["Point"]
        assert isinstance(point, StructDef)
        assert list(point.fields) == ["x", "y"]
        assert point.fields["x"].shape == primitive(Primitive.INT32)

    def test_empty_struct(self) -> None:
        point = parse("struct Empty {}").models["Empty"]
        assert isinstance(point, StructDef)
        assert len(point.fields) == 0

    def test_field_order_is_declaration_order(self) -> None:
        struct = parse("struct S { c: Bool, a: Bool, b: Bool, }").models["S"]
        assert isinstance(struct, StructDef)
        assert list(struct.fields) == ["c", "a", "b"]

    def test_field_may_be_named_like_a_keyword(self) -> None:
        struct = parse("struct S { use: String, }").models["S"]
        assert isinstance(struct, StructDef)
        assert list(struct.fields) == ["use"]

    def test_missing_trailing_comma_is_an_error(self) -> None:
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse("struct Point { x: Int32 }")
        assert exc_info.value.expected == "','"
        assert exc_info.value.token.value == "}"

    def test_duplicate_field(self) -> None:
        with pytest.raises(DuplicateDeclarationError, match="Duplicate field 'x'"):
            parse("struct P { x: Int32, x: Int64, }")

    def test_unclosed_struct(self) -> None:
        with pytest.raises(UnexpectedEndOfInputError):
            parse("struct Point { x: Int32,")

    def test_struct_name_must_be_identifier(self) -> None:
        with pytest.raises(UnexpectedTokenError):
            parse("struct { }")

    def test_forward_reference_is_kept_by_name(self) -> None:
        schema = parse("struct A { b: B, } struct B { }")
        a = schema.models["A"]
        assert isinstance(a, StructDef)
        assert a.fields["b"].shape == reference("B")
        assert schema.resolve("B") is not None


# ###############
# Enums, Aliases, Externals
# ###############


class TestEnums:
    def test_color(self) -> None:
        color = parse("enum Color { Red, Green, Blue, }").models["Color"]
        assert isinstance(color, EnumDef)
        assert color.values == ["Red", "Green", "Blue"]

    def test_duplicate_variant(self) -> None:
        with pytest.raises(DuplicateDeclarationError):
            parse("enum Color { Red, Red, }")


class TestAliases:
    def test_alias(self) -> None:
        alias = parse("alias UserId = String;").models["UserId"]
        assert isinstance(alias, AliasDef)
        assert alias.definition.shape == primitive(Primitive.STRING)

    def test_alias_with_metadata(self) -> None:
        alias = parse('alias UserId = String &{ format: "uuid", };').models["UserId"]
        assert isinstance(alias, AliasDef)
        assert dict(alias.definition.data) == {"format": "uuid"}

    def test_alias_requires_equals(self) -> None:
        with pytest.raises(UnexpectedTokenError):
            parse("alias UserId String;")

    def test_extern_alias(self) -> None:
        external = parse("extern alias Instant = String;").models["Instant"]
        assert isinstance(external, ExternalDef)
        assert external.definition.shape == primitive(Primitive.STRING)

    def test_extern_requires_alias_keyword(self) -> None:
        with pytest.raises(UnexpectedTokenError):
            parse("extern Instant = String;")


class TestDuplicates:
    def test_duplicate_model(self) -> None:
        with pytest.raises(DuplicateDeclarationError) as exc_info:
            parse("struct A {}\nenum A { X, }")
        assert exc_info.value.line == 2

    def test_duplicate_service(self) -> None:
        with pytest.raises(DuplicateDeclarationError):
            parse("service S {} service S {}")


# ###############
# Shapes
# ###############


class TestShapes:
    def _field(self, shape_source: str):
        struct = parse(f"struct S {{ f: {shape_source}, }}").models["S"]
        assert isinstance(struct, StructDef)
        return struct.fields["f"]

    @pytest.mark.parametrize("name", [p.value for p in Primitive])
    def test_primitives(self, name: str) -> None:
        assert self._field(name).shape == PrimitiveShape(primitive=Primitive(name))

    def test_list(self) -> None:
        assert self._field("List<String>").shape == ListShape(element=primitive(Primitive.STRING))

    def test_set(self) -> None:
        assert self._field("Set<Int8>").shape == SetShape(element=primitive(Primitive.INT8))

    def test_map(self) -> None:
        assert self._field("Map<String, User>").shape == MapShape(
            key=primitive(Primitive.STRING), value=reference("User")
        )

    def test_optional_is_nullable(self) -> None:
        assert self._field("Optional<Bool>").shape == NullableShape(inner=primitive(Primitive.BOOL))

    def test_trailing_question_mark(self) -> None:
        assert self._field("User?").shape == NullableShape(inner=reference("User"))

    def test_nullable_wraps_whole_map(self) -> None:
        shape = self._field("Map<String, Int32>?").shape
        assert shape == NullableShape(
            inner=MapShape(key=primitive(Primitive.STRING), value=primitive(Primitive.INT32))
        )

    def test_nested_generics(self) -> None:
        assert self._field("List<List<Int32>>").shape == ListShape(
            element=ListShape(element=primitive(Primitive.INT32))
        )

    def test_nullable_generic_argument(self) -> None:
        assert self._field("Map<String, User?>").shape == MapShape(
            key=primitive(Primitive.STRING), value=NullableShape(inner=reference("User"))
        )

    def test_metadata_before_question_mark(self) -> None:
        field = self._field('String &{ format: "email", max: 255, }?')
        assert field.shape == NullableShape(inner=primitive(Primitive.STRING))
        assert list(field.data.items()) == [("format", "email"), ("max", "255")]

    def test_duplicate_metadata_key(self) -> None:
        with pytest.raises(DuplicateDeclarationError):
            self._field("String &{ a: x, a: y, }")


class TestGenericArity:
    @pytest.mark.parametrize(
        "source",
        [
            "List<String, String>",
            "Set<>",
            "Map<String>",
            "Optional<A, B>",
            "List",
            "Map",
            "Int32<String>",
            "User<String>",
        ],
    )
    def test_wrong_arity(self, source: str) -> None:
        with pytest.raises(ParseError):
            parse(f"struct S {{ f: {source}, }}")

    def test_arity_error_type_and_position(self) -> None:
        with pytest.raises(GenericArityError) as exc_info:
            parse("struct S {\n  f: Map<String>,\n}")
        assert (exc_info.value.line, exc_info.value.column) == (2, 6)


# ###############
# Services
# ###############


class TestServices:
    def test_method_with_output(self) -> None:
        schema = parse("service Todos { create(title: String) -> Todo, }")
        service = schema.services["Todos"]
        method = service.methods[0]
        assert method.name == "create"
        assert list(method.inputs) == ["title"]
        assert method.output.shape == reference("Todo")

    def test_parameters_with_and_without_commas(self) -> None:
        method = parse("service S { m(a: Int32, b: Int32 c: Int32,) -> Bool, }").services["S"].methods[0]
        assert list(method.inputs) == ["a", "b", "c"]

    def test_method_without_output_returns_unit(self) -> None:
        method = parse("service S { ping(), }").services["S"].methods[0]
        assert method.output.shape == primitive(Primitive.UNIT)
        assert len(method.inputs) == 0

    def test_method_metadata(self) -> None:
        method = parse("service S { list() &{ http: GET, } -> List<Todo>, }").services["S"].methods[0]
        assert dict(method.data) == {"http": "GET"}
        assert method.output.shape == ListShape(element=reference("Todo"))

    def test_methods_keep_order(self) -> None:
        service = parse("service S { b(), a(), c(), }").services["S"]
        assert [m.name for m in service.methods] == ["b", "a", "c"]

    def test_duplicate_method(self) -> None:
        with pytest.raises(DuplicateDeclarationError):
            parse("service S { a(), a(), }")

    def test_duplicate_parameter(self) -> None:
        with pytest.raises(DuplicateDeclarationError):
            parse("service S { a(x: Int32, x: Int32), }")

    def test_incomplete_arrow(self) -> None:
        with pytest.raises(UnexpectedTokenError):
            parse("service S { a() - Int32, }")

    def test_method_requires_trailing_comma(self) -> None:
        with pytest.raises(UnexpectedTokenError):
            parse("service S { a() }")


# ###############
# Top Level Errors & Diagnostics
# ###############


class TestErrors:
    def test_unknown_declaration(self) -> None:
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse("record Point {}")
        assert exc_info.value.expected == "a declaration"
        assert exc_info.value.token.value == "record"

    def test_error_message_names_position(self) -> None:
        with pytest.raises(ParseError, match=r"^Line 1, column 8:"):
            parse("struct {")

    def test_unterminated_literal_surfaces_as_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse('alias A = String &{ format: "uuid, };')

    def test_diagnostic_printed_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(ParseError):
            parse("struct Point { x Int32, }")
        captured = capsys.readouterr()
        assert captured.out == ""
        for token in ["struct", "Point", "{", "x", "Int32", ",", "}", "<eof>"]:
            assert token in captured.err

    def test_parse_tokens_matches_parse(self) -> None:
        source = "struct A { b: List<B>, } enum B { X, }"
        assert parse_tokens(tokenize(source)) == parse(source)


# ###############
# Round Trip
# ###############


class TestShapeRoundTrip:
    @pytest.mark.parametrize(
        "shape",
        [
            primitive(Primitive.UNIT),
            primitive(Primitive.FLOAT64),
            reference("User"),
            NullableShape(inner=reference("User")),
            NullableShape(inner=NullableShape(inner=primitive(Primitive.INT32))),
            ListShape(element=NullableShape(inner=primitive(Primitive.STRING))),
            SetShape(element=ListShape(element=reference("Tag"))),
            MapShape(key=primitive(Primitive.STRING), value=MapShape(key=reference("K"), value=reference("V"))),
            NullableShape(
                inner=MapShape(key=primitive(Primitive.STRING), value=NullableShape(inner=primitive(Primitive.INT32)))
            ),
        ],
        ids=format_shape,
    )
    def test_parse_of_format_is_identity(self, shape) -> None:
        assert parse_shape(format_shape(shape)) == shape

    def test_parse_shape_rejects_trailing_tokens(self) -> None:
        with pytest.raises(UnexpectedTokenError):
            parse_shape("Int32 Int32")
