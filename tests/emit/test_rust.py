# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the Rust target."""

from pathlib import Path

import pytest

from hgen.compiler.build import compile_schema
from hgen.compiler.parser import parse
from hgen.emit import UnresolvedReferenceError, UnsupportedConstructError, to_snake_case
from hgen.emit.rust import emit_schema, rust_identifier

DATA_DIR = Path(__file__).parent.parent / "data"


def _emit(source: str, module_name: str = "api") -> str:
    return emit_schema(module_name, parse(source))


# ###############
# Naming
# ###############


class TestNaming:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("x", "x"),
            ("createdAt", "created_at"),
            ("CreatedAt", "created_at"),
            ("userID", "user_i_d"),
            ("already_snake", "already_snake"),
            ("a1B2", "a1_b2"),
        ],
    )
    def test_to_snake_case(self, name: str, expected: str) -> None:
        assert to_snake_case(name) == expected

    def test_keyword_becomes_raw_identifier(self) -> None:
        assert rust_identifier("type") == "r#type"

    def test_self_gets_underscore(self) -> None:
        assert rust_identifier("self") == "self_"


# ###############
# Models
# ###############


class TestModels:
    def test_point(self) -> None:
        assert _emit("struct Point { x: Int32, y: Int32, }") == (
            "// AUTOGENERATED FILE - DO NOT EDIT\n"
            "\n"
            "use serde::{Deserialize, Serialize};\n"
            "\n"
            "#[derive(Debug, Clone, PartialEq, Serialize, Deserialize)]\n"
            "pub struct Point {\n"
            "    pub x: i32,\n"
            "    pub y: i32,\n"
            "}\n"
        )

    def test_renamed_field_keeps_wire_name(self) -> None:
        output = _emit("struct Todo { createdAt: Int64, }")
        assert '    #[serde(rename = "createdAt")]\n    pub created_at: i64,' in output

    def test_keyword_field_needs_no_rename(self) -> None:
        output = _emit("struct Token { type: String, }")
        assert "    pub r#type: String," in output
        assert "rename" not in output

    def test_enum(self) -> None:
        output = _emit("enum Color { Red, Green, Blue, }")
        assert (
            "#[derive(Debug, Clone, PartialEq, Eq, Hash, Serialize, Deserialize)]\n"
            "pub enum Color {\n"
            "    Red,\n"
            "    Green,\n"
            "    Blue,\n"
            "}\n"
        ) in output

    def test_alias(self) -> None:
        output = _emit("alias UserId = String; struct User { id: UserId, }")
        assert "pub type UserId = String;\n" in output
        assert "    pub id: UserId," in output

    def test_external_is_reexported(self) -> None:
        output = _emit("extern alias Instant = String;", module_name="todo")
        assert "pub use super::todo_external::Instant;\n" in output

    def test_module_name_is_sanitised(self) -> None:
        output = _emit("extern alias Instant = String;", module_name="my-api")
        assert "pub use super::my_api_external::Instant;" in output

    def test_shapes(self) -> None:
        output = _emit(
            "struct S { a: Unit, b: Bool, c: Int8, d: Int16, e: Int64, f: Int128,"
            " g: Float32, h: Float64, i: List<String?>, j: Set<Int32>, k: Map<String, List<Int8>>, }"
        )
        for line in [
            "pub a: (),",
            "pub b: bool,",
            "pub c: i8,",
            "pub d: i16,",
            "pub e: i64,",
            "pub f: i128,",
            "pub g: f32,",
            "pub h: f64,",
            "pub i: Vec<Option<String>>,",
            "pub j: HashSet<i32>,",
            "pub k: HashMap<String, Vec<i8>>,",
        ]:
            assert line in output
        assert "use std::collections::{HashMap, HashSet};\n" in output

    def test_single_collection_import(self) -> None:
        output = _emit("struct S { m: Map<String, Int32>, }")
        assert "use std::collections::HashMap;\n" in output
        assert "HashSet" not in output

    def test_no_collection_import_when_unused(self) -> None:
        assert "std::collections" not in _emit("struct S { m: List<Int32>, }")

    def test_field_order_is_declaration_order(self) -> None:
        output = _emit("struct S { c: Bool, a: Bool, b: Bool, }")
        assert output.index("pub c") < output.index("pub a") < output.index("pub b")

    def test_unresolved_reference(self) -> None:
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            _emit("struct S { owner: Nobody, }")
        assert exc_info.value.name == "Nobody"


# ###############
# Set elements and map keys
# ###############


class TestHashableKeys:
    @pytest.mark.parametrize(
        "source",
        [
            "enum Color { Red, } struct S { colors: Set<Color>, }",
            "enum Color { Red, } struct S { m: Map<Color, Float64>, }",
            "alias Id = String; struct S { m: Map<Id, Int32>, }",
            "struct S { ids: Set<Int64?>, flags: Set<Bool>, big: Set<Int128>, }",
        ],
    )
    def test_accepted(self, source: str) -> None:
        assert "use std::collections::" in _emit(source)

    def test_enum_set_renders_hash_set(self) -> None:
        output = _emit("enum Color { Red, } struct S { colors: Set<Color>, }")
        assert "    pub colors: HashSet<Color>," in output
        assert "#[derive(Debug, Clone, PartialEq, Eq, Hash, Serialize, Deserialize)]\npub enum Color {" in output

    @pytest.mark.parametrize(
        ("source", "fragment"),
        [
            ("struct S { xs: Set<Float32>, }", "set element 'Float32'"),
            ("struct S { m: Map<Float64, String>, }", "map key 'Float64'"),
            ("struct K { } struct S { m: Map<K, Int32>, }", "map key 'K'"),
            ("struct S { xs: Set<List<Int32>>, }", "set element 'List<Int32>'"),
            ("struct S { xs: Set<Set<Int32>>, }", "set element 'Set<Int32>'"),
            ("struct S { m: Map<Map<String, Int32>, Int32>, }", "map key 'Map<String, Int32>'"),
            ("alias Ratio = Float64; struct S { xs: Set<Ratio>, }", "set element 'Ratio'"),
            ("struct S { xs: Set<Float32?>, }", "set element 'Float32'"),
            ("extern alias Instant = String; struct S { m: Map<Instant, Int32>, }", "map key 'Instant'"),
            ("service S { tally(xs: Set<Float64>), }", "set element 'Float64'"),
            ("alias A = A?; struct S { xs: Set<A>, }", "recursive alias 'A'"),
        ],
    )
    def test_rejected(self, source: str, fragment: str) -> None:
        with pytest.raises(UnsupportedConstructError) as exc_info:
            _emit(source)
        assert exc_info.value.target == "Rust"
        assert fragment in str(exc_info.value)


# ###############
# Services
# ###############


class TestServices:
    def test_provider_trait(self) -> None:
        output = _emit(
            "struct Todo { } service TodoService { create(title: String, dueAt: Int64?) -> Todo, remove(id: String), }"
        )
        assert (
            "pub trait TodoServiceProvider {\n"
            "    fn create(&self, title: String, due_at: Option<i64>) -> Todo;\n"
            "    fn remove(&self, id: String);\n"
            "}\n"
        ) in output


# ###############
# Whole project
# ###############


class TestSampleProject:
    def test_sample_project(self) -> None:
        schema = compile_schema(DATA_DIR / "todo" / "todo.hgen")
        output = emit_schema("todo", schema)
        assert "pub struct Todo {" in output
        assert "    pub id: TodoId," in output
        assert "    pub checked_at: Option<Instant>," in output
        assert "pub use super::todo_external::Instant;" in output
        assert "    fn check(&self, id: TodoId, checked: bool) -> Option<Todo>;" in output

    def test_emission_is_idempotent(self) -> None:
        schema = compile_schema(DATA_DIR / "todo" / "todo.hgen")
        snapshot = schema.model_dump()
        assert emit_schema("todo", schema) == emit_schema("todo", schema)
        assert schema.model_dump() == snapshot
