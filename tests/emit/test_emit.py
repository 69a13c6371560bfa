# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for strategy lookup and emitter dispatch."""

from pathlib import Path, PurePath

import pytest

from hgen.compiler.build import compile_schema
from hgen.compiler.parser import parse
from hgen.emit import Strategy, UnknownStrategyError, emit

DATA_DIR = Path(__file__).parent.parent / "data"


class TestStrategyLookup:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("rust", Strategy.RUST),
            ("Rust", Strategy.RUST),
            ("rs", Strategy.RUST),
            (".rs", Strategy.RUST),
            ("typescript", Strategy.TYPESCRIPT),
            ("ts", Strategy.TYPESCRIPT),
            ("DART", Strategy.DART),
            ("json", Strategy.JSON),
            ("ron", Strategy.RON),
        ],
    )
    def test_from_name(self, text: str, expected: Strategy) -> None:
        assert Strategy.from_name(text) is expected

    def test_unknown_name(self) -> None:
        with pytest.raises(UnknownStrategyError, match="Unknown strategy 'cobol'"):
            Strategy.from_name("cobol")

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("out/api.rs", Strategy.RUST),
            ("web/api.ts", Strategy.TYPESCRIPT),
            ("app/lib/api.dart", Strategy.DART),
            ("api.json", Strategy.JSON),
            ("api.RON", Strategy.RON),
        ],
    )
    def test_from_path(self, path: str, expected: Strategy) -> None:
        assert Strategy.from_path(PurePath(path)) is expected

    def test_path_without_extension(self) -> None:
        with pytest.raises(UnknownStrategyError, match="no extension"):
            Strategy.from_path(PurePath("out/api"))

    def test_path_with_unknown_extension(self) -> None:
        with pytest.raises(UnknownStrategyError, match="'.py'"):
            Strategy.from_path(PurePath("api.py"))

    def test_labels(self) -> None:
        assert [s.label for s in Strategy] == ["Rust", "TypeScript", "Dart", "JSON", "RON"]


class TestDispatch:
    @pytest.mark.parametrize(
        ("strategy", "marker"),
        [
            (Strategy.RUST, "pub struct Point {"),
            (Strategy.TYPESCRIPT, "export class Point {"),
            (Strategy.DART, "class Point {"),
            (Strategy.JSON, '"Point":{"type":"Struct"'),
            (Strategy.RON, '"Point": Struct(('),
        ],
    )
    def test_dispatches_to_target(self, strategy: Strategy, marker: str) -> None:
        assert marker in emit(strategy, "api", parse("struct Point { x: Int32, }"))

    @pytest.mark.parametrize("strategy", [Strategy.TYPESCRIPT, Strategy.DART])
    def test_reflection_flag_is_forwarded(self, strategy: Strategy) -> None:
        schema = parse("struct Point { x: Int32, }")
        assert "$schema" in emit(strategy, "api", schema)
        assert "$schema" not in emit(strategy, "api", schema, reflection=False)

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_every_target_is_deterministic_and_pure(self, strategy: Strategy) -> None:
        schema = compile_schema(DATA_DIR / "todo" / "todo.hgen")
        snapshot = schema.model_dump()
        assert emit(strategy, "todo", schema) == emit(strategy, "todo", schema)
        assert schema.model_dump() == snapshot

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_every_target_keeps_declaration_order(self, strategy: Strategy) -> None:
        output = emit(strategy, "api", parse("struct Zebra { } struct Apple { } struct Mango { }"))
        assert output.index("Zebra") < output.index("Apple") < output.index("Mango")
