# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Dart target.

Every struct becomes an immutable class with a named-argument constructor,
JSON conversion (``fromJson``/``toJson``), a binary codec (``$hWrite`` and
``$hRead``) built on the ``Writer``/``Reader`` types of the
``hgen_runtime`` package, and an optional ``$hSchema`` reflection table.

Binary encoding rules:

* primitives are written with the matching ``write<Primitive>`` call;
* a nullable value writes a presence flag, then the value if present;
* lists, sets and maps write their length, then each element (key before
  value for maps);
* enums are written by variant name;
* struct references delegate to the referenced class;
* aliases are encoded as the shape they stand for;
* externals delegate to ``$hWrite<Name>``/``$hRead<Name>``, which the
  hand-written external module must provide.

Decoding reads the same sequence back, field by field in declaration order.
"""

from __future__ import annotations

from typing import Any

from hgen.emit.common import (
    GENERATED_HEADER,
    UnsupportedConstructError,
    reflect_model,
    reflect_schema,
    resolve_model,
)
from hgen.emit.templating import TEMPLATE_DIR, TemplateEngine
from hgen.model.entities import AliasDef, EnumDef, ExternalDef, Method, Model, Schema, StructDef
from hgen.model.types import (
    ListShape,
    MapShape,
    NullableShape,
    Primitive,
    PrimitiveShape,
    ReferenceShape,
    SetShape,
    Shape,
    format_shape,
)

# ###############
# Public Interface
# ###############

TARGET = "Dart"
RUNTIME_IMPORT = "import 'package:hgen_runtime/hgen_runtime.dart';"


def emit_schema(module_name: str, schema: Schema, *, reflection: bool = True) -> str:
    """Render *schema* as a Dart library.

    Args:
        module_name: Name of the generated library. Externals are imported
            from ``<module_name>.external.dart``.
        schema: The schema to render; it is not modified.
        reflection: Whether to render ``$hSchema`` members and the top-level
            ``$schema`` constant.

    Raises:
        UnresolvedReferenceError: If a shape references an undefined model.
        UnsupportedConstructError: For ``Int128``, ``Unit`` anywhere but a
            method output, map keys that are not strings, integers or
            enums, recursive aliases, and empty enums.
    """
    return _DartEmitter(module_name, schema, reflection).emit()


def dart_literal(value: Any) -> str:
    """Render plain data (dicts, lists, strings) as a Dart literal."""
    if isinstance(value, dict):
        return "{" + ", ".join(f"{dart_literal(key)}: {dart_literal(item)}" for key, item in value.items()) + "}"
    if isinstance(value, list):
        return "[" + ", ".join(dart_literal(item) for item in value) + "]"
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'").replace("$", "\\$").replace("\n", "\\n")
    return f"'{escaped}'"


# ################
# Implementation
# ################

_PRIMITIVE_TYPES: dict[Primitive, str] = {
    Primitive.BOOL: "bool",
    Primitive.STRING: "String",
    Primitive.INT8: "int",
    Primitive.INT16: "int",
    Primitive.INT32: "int",
    Primitive.INT64: "int",
    Primitive.FLOAT32: "double",
    Primitive.FLOAT64: "double",
}

_INTEGER_PRIMITIVES = frozenset({Primitive.INT8, Primitive.INT16, Primitive.INT32, Primitive.INT64})

_RESERVED_WORDS = frozenset(
    {
        "assert", "break", "case", "catch", "class", "const", "continue", "default", "do", "else",
        "enum", "extends", "false", "final", "finally", "for", "if", "in", "is", "new", "null",
        "rethrow", "return", "super", "switch", "this", "throw", "true", "try", "var", "void",
        "while", "with",
    }
)  # fmt: skip


def _identifier(name: str) -> str:
    return name + "_" if name in _RESERVED_WORDS else name


def _indent(lines: list[str], levels: int = 1) -> list[str]:
    prefix = "  " * levels
    return [prefix + line if line else line for line in lines]


def _is_nullable(shape: Shape) -> bool:
    return isinstance(shape, NullableShape)


def _is_unit(shape: Shape) -> bool:
    return isinstance(shape, PrimitiveShape) and shape.primitive == Primitive.UNIT


class _DartEmitter:
    def __init__(self, module_name: str, schema: Schema, reflection: bool) -> None:
        self._module = module_name
        self._schema = schema
        self._reflection = reflection
        self._counter = 0

    def emit(self) -> str:
        for model in self._schema.models.values():
            if isinstance(model, AliasDef):
                self._check_alias(model.definition.shape, [model.name])
            elif isinstance(model, EnumDef) and not model.values:
                raise UnsupportedConstructError(TARGET, f"empty enum '{model.name}'")

        models = list(self._schema.models.values())
        return _ENGINE.render_template(
            "library.dart.j2",
            {
                "header": GENERATED_HEADER,
                "runtime_import": RUNTIME_IMPORT,
                "module": self._module,
                "externals": [model for model in models if isinstance(model, ExternalDef)],
                "declarations": [model for model in models if not isinstance(model, ExternalDef)],
                "services": list(self._schema.services.values()),
                "reflection": dart_literal(reflect_schema(self._schema)) if self._reflection else "",
                "reflect_model": reflect_model,
                "dart_type": self._type,
                "from_json": self._from_json,
                "to_json": self._to_json,
                "write": self._write,
                "read": self._read,
                "signature": self._signature,
                "is_nullable": _is_nullable,
                "is_unit": _is_unit,
            },
        )

    def _fresh(self, prefix: str) -> str:
        """Return a local variable name unique within the generated library."""
        self._counter += 1
        return f"{prefix}{self._counter}"

    # ------------------------------------------------------------------
    # Alias handling
    # ------------------------------------------------------------------

    def _check_alias(self, shape: Shape, stack: list[str]) -> None:
        """Raise if an alias refers back to itself through any chain of aliases."""
        if isinstance(shape, NullableShape):
            self._check_alias(shape.inner, stack)
        elif isinstance(shape, (ListShape, SetShape)):
            self._check_alias(shape.element, stack)
        elif isinstance(shape, MapShape):
            self._check_alias(shape.key, stack)
            self._check_alias(shape.value, stack)
        elif isinstance(shape, ReferenceShape):
            model = resolve_model(self._schema, shape.name)
            if isinstance(model, AliasDef):
                if model.name in stack:
                    cycle = " -> ".join([*stack, model.name])
                    raise UnsupportedConstructError(TARGET, f"recursive alias ({cycle})")
                self._check_alias(model.definition.shape, [*stack, model.name])

    def _unalias(self, shape: Shape) -> Shape | Model:
        """Follow alias references; return the underlying shape or non-alias model."""
        while isinstance(shape, ReferenceShape):
            model = resolve_model(self._schema, shape.name)
            if not isinstance(model, AliasDef):
                return model
            shape = model.definition.shape
        return shape

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _type(self, shape: Shape, *, output: bool = False) -> str:
        if isinstance(shape, PrimitiveShape):
            if shape.primitive == Primitive.UNIT and output:
                return "void"
            return _PRIMITIVE_TYPES[self._check_primitive(shape.primitive)]
        if isinstance(shape, NullableShape):
            inner = self._type(shape.inner)
            return inner if inner.endswith("?") else inner + "?"
        if isinstance(shape, ListShape):
            return f"List<{self._type(shape.element)}>"
        if isinstance(shape, SetShape):
            return f"Set<{self._type(shape.element)}>"
        if isinstance(shape, MapShape):
            self._check_map_key(shape.key)
            return f"Map<{self._type(shape.key)}, {self._type(shape.value)}>"
        assert isinstance(shape, ReferenceShape)
        return resolve_model(self._schema, shape.name).name

    def _check_primitive(self, primitive: Primitive) -> Primitive:
        if primitive == Primitive.INT128:
            raise UnsupportedConstructError(TARGET, "Int128")
        if primitive == Primitive.UNIT:
            raise UnsupportedConstructError(TARGET, "Unit outside of a method output")
        return primitive

    def _check_map_key(self, key: Shape) -> None:
        target = self._unalias(key)
        if isinstance(target, PrimitiveShape) and (
            target.primitive == Primitive.STRING or target.primitive in _INTEGER_PRIMITIVES
        ):
            return
        if isinstance(target, EnumDef):
            return
        raise UnsupportedConstructError(TARGET, f"map key '{format_shape(key)}'")

    # ------------------------------------------------------------------
    # JSON conversion
    # ------------------------------------------------------------------

    def _from_json(self, expr: str, shape: Shape) -> str:
        """Return a Dart expression converting decoded JSON *expr* to *shape*."""
        target = self._unalias(shape)
        if isinstance(target, PrimitiveShape):
            primitive = self._check_primitive(target.primitive)
            if primitive in (Primitive.FLOAT32, Primitive.FLOAT64):
                return f"({expr} as num).toDouble()"
            return f"{expr} as {_PRIMITIVE_TYPES[primitive]}"
        if isinstance(target, NullableShape):
            return f"{expr} == null ? null : {self._from_json(expr, target.inner)}"
        if isinstance(target, (ListShape, SetShape)):
            item = self._fresh("e")
            collect = "toList" if isinstance(target, ListShape) else "toSet"
            converted = self._from_json(item, target.element)
            return f"({expr} as List<dynamic>).map(({item}) => {converted}).{collect}()"
        if isinstance(target, MapShape):
            self._check_map_key(target.key)
            key, value = self._fresh("k"), self._fresh("v")
            converted_key = self._key_from_json(key, target.key)
            converted_value = self._from_json(value, target.value)
            entry = f"MapEntry({converted_key}, {converted_value})"
            return f"({expr} as Map<String, dynamic>).map(({key}, {value}) => {entry})"
        if isinstance(target, StructDef):
            return f"{target.name}.fromJson({expr} as Map<String, dynamic>)"
        if isinstance(target, EnumDef):
            return f"{target.name}.values.byName({expr} as String)"
        assert isinstance(target, ExternalDef)
        return f"$fromJson{target.name}({expr})"

    def _to_json(self, expr: str, shape: Shape) -> str:
        """Return a Dart expression converting *expr* of *shape* to JSON data."""
        target = self._unalias(shape)
        if isinstance(target, PrimitiveShape):
            self._check_primitive(target.primitive)
            return expr
        if isinstance(target, NullableShape):
            inner = self._to_json(f"{expr}!", target.inner)
            return expr if inner == f"{expr}!" else f"{expr} == null ? null : {inner}"
        if isinstance(target, (ListShape, SetShape)):
            item = self._fresh("e")
            converted = self._to_json(item, target.element)
            if converted == item:
                return expr if isinstance(target, ListShape) else f"{expr}.toList()"
            return f"{expr}.map(({item}) => {converted}).toList()"
        if isinstance(target, MapShape):
            self._check_map_key(target.key)
            key, value = self._fresh("k"), self._fresh("v")
            converted_key = self._key_to_json(key, target.key)
            converted_value = self._to_json(value, target.value)
            if converted_key == key and converted_value == value:
                return expr
            return f"{expr}.map(({key}, {value}) => MapEntry({converted_key}, {converted_value}))"
        if isinstance(target, StructDef):
            return f"{expr}.toJson()"
        if isinstance(target, EnumDef):
            return f"{expr}.name"
        assert isinstance(target, ExternalDef)
        return f"$toJson{target.name}({expr})"

    def _key_from_json(self, expr: str, key: Shape) -> str:
        target = self._unalias(key)
        if isinstance(target, EnumDef):
            return f"{target.name}.values.byName({expr})"
        assert isinstance(target, PrimitiveShape)
        return expr if target.primitive == Primitive.STRING else f"int.parse({expr})"

    def _key_to_json(self, expr: str, key: Shape) -> str:
        target = self._unalias(key)
        if isinstance(target, EnumDef):
            return f"{expr}.name"
        assert isinstance(target, PrimitiveShape)
        return expr if target.primitive == Primitive.STRING else f"{expr}.toString()"

    # ------------------------------------------------------------------
    # Binary codec
    # ------------------------------------------------------------------

    def _write(self, expr: str, shape: Shape) -> list[str]:
        """Return the statements that encode *expr* of *shape*."""
        target = self._unalias(shape)
        if isinstance(target, PrimitiveShape):
            return [f"writer.write{self._check_primitive(target.primitive).value}({expr});"]
        if isinstance(target, NullableShape):
            local = self._fresh("v")
            return [
                f"final {local} = {expr};",
                f"writer.writeBool({local} != null);",
                f"if ({local} != null) {{",
                *_indent(self._write(local, target.inner)),
                "}",
            ]
        if isinstance(target, (ListShape, SetShape)):
            item = self._fresh("e")
            return [
                f"writer.writeLength({expr}.length);",
                f"for (final {item} in {expr}) {{",
                *_indent(self._write(item, target.element)),
                "}",
            ]
        if isinstance(target, MapShape):
            self._check_map_key(target.key)
            entry = self._fresh("entry")
            return [
                f"writer.writeLength({expr}.length);",
                f"for (final {entry} in {expr}.entries) {{",
                *_indent(self._write(f"{entry}.key", target.key)),
                *_indent(self._write(f"{entry}.value", target.value)),
                "}",
            ]
        if isinstance(target, StructDef):
            return [f"{target.name}.$hWrite(writer, {expr});"]
        if isinstance(target, EnumDef):
            return [f"writer.writeString({expr}.name);"]
        assert isinstance(target, ExternalDef)
        return [f"$hWrite{target.name}(writer, {expr});"]

    def _read(self, shape: Shape) -> str:
        """Return an expression that decodes one value of *shape*."""
        target = self._unalias(shape)
        if isinstance(target, PrimitiveShape):
            return f"reader.read{self._check_primitive(target.primitive).value}()"
        if isinstance(target, NullableShape):
            return f"(reader.readBool() ? {self._read(target.inner)} : null)"
        if isinstance(target, (ListShape, SetShape, MapShape)):
            counter = self._fresh("i")
            loop = f"for (var {counter} = reader.readLength(); {counter} > 0; {counter}--)"
            if isinstance(target, ListShape):
                return f"<{self._type(target.element)}>[{loop} {self._read(target.element)}]"
            if isinstance(target, SetShape):
                return f"<{self._type(target.element)}>{{{loop} {self._read(target.element)}}}"
            self._check_map_key(target.key)
            types = f"{self._type(target.key)}, {self._type(target.value)}"
            return f"<{types}>{{{loop} {self._read(target.key)}: {self._read(target.value)}}}"
        if isinstance(target, StructDef):
            return f"{target.name}.$hRead(reader)"
        if isinstance(target, EnumDef):
            return f"{target.name}.values.byName(reader.readString())"
        assert isinstance(target, ExternalDef)
        return f"$hRead{target.name}(reader)"

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def _signature(self, method: Method) -> str:
        params = ", ".join(
            f"{self._type(param.shape)} {_identifier(name)}" for name, param in method.inputs.items()
        )
        return f"Future<{self._type(method.output.shape, output=True)}> {_identifier(method.name)}({params})"


_ENGINE = TemplateEngine(TEMPLATE_DIR / "dart", filters={"dart_literal": dart_literal, "dart_identifier": _identifier})
