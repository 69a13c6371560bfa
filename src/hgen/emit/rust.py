# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rust target.

Structs and enums derive serde's ``Serialize``/``Deserialize`` so that no
hand-written codec is needed. Field names are converted to snake_case; the
original name is kept on the wire with ``#[serde(rename = ...)]``. Services
become provider traits.

Sets render as ``HashSet`` and maps as ``HashMap``, so set elements and map
keys must be ``Eq + Hash``: strings, booleans, integers, enums, and
nullable or aliased forms of those.
"""

from __future__ import annotations

import re

from hgen.emit.common import (
    GENERATED_HEADER,
    UnsupportedConstructError,
    contains_shape,
    resolve_model,
    to_snake_case,
)
from hgen.emit.templating import TEMPLATE_DIR, TemplateEngine
from hgen.model.entities import AliasDef, EnumDef, Model, Schema, StructDef
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

TARGET = "Rust"
DERIVE_LINE = "#[derive(Debug, Clone, PartialEq, Serialize, Deserialize)]"
ENUM_DERIVE_LINE = "#[derive(Debug, Clone, PartialEq, Eq, Hash, Serialize, Deserialize)]"


def emit_schema(module_name: str, schema: Schema) -> str:
    """Render *schema* as a Rust module.

    Args:
        module_name: Name of the generated module. Externals are re-exported
            from the sibling module ``<module_name>_external``.
        schema: The schema to render; it is not modified.

    Raises:
        UnresolvedReferenceError: If a shape references an undefined model.
        UnsupportedConstructError: If a set element or map key is a float,
            a struct, a collection or an external type.
    """
    return _RustEmitter(module_name, schema).emit()


def rust_identifier(name: str) -> str:
    """Turn a declared field or parameter name into a Rust identifier.

    The name is converted to snake_case. Keywords become raw identifiers
    (``type`` -> ``r#type``); the few keywords that cannot be raw get a
    trailing underscore.
    """
    snake = to_snake_case(name)
    if snake in _NON_RAW_KEYWORDS:
        return snake + "_"
    if snake in _KEYWORDS:
        return "r#" + snake
    return snake


# ################
# Implementation
# ################

_PRIMITIVE_TYPES: dict[Primitive, str] = {
    Primitive.UNIT: "()",
    Primitive.BOOL: "bool",
    Primitive.STRING: "String",
    Primitive.INT8: "i8",
    Primitive.INT16: "i16",
    Primitive.INT32: "i32",
    Primitive.INT64: "i64",
    Primitive.INT128: "i128",
    Primitive.FLOAT32: "f32",
    Primitive.FLOAT64: "f64",
}

_FLOAT_PRIMITIVES = frozenset({Primitive.FLOAT32, Primitive.FLOAT64})

_COLLECTIONS: list[tuple[str, type]] = [("HashMap", MapShape), ("HashSet", SetShape)]

_KEYWORDS = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "dyn", "else", "enum", "extern",
        "false", "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut",
        "pub", "ref", "return", "static", "struct", "trait", "true", "type", "unsafe", "use",
        "where", "while", "abstract", "become", "box", "do", "final", "gen", "macro", "override",
        "priv", "try", "typeof", "unsized", "virtual", "yield",
    }
)  # fmt: skip

_NON_RAW_KEYWORDS = frozenset({"self", "super", "crate", "_"})


class _RustEmitter:
    def __init__(self, module_name: str, schema: Schema) -> None:
        self._module = re.sub(r"\W", "_", module_name)
        self._schema = schema

    def emit(self) -> str:
        return _ENGINE.render_template(
            "module.rs.j2",
            {
                "header": GENERATED_HEADER,
                "module": self._module,
                "collections": self._collections_import(),
                "models": list(self._schema.models.values()),
                "services": list(self._schema.services.values()),
                "struct_derive": DERIVE_LINE,
                "enum_derive": ENUM_DERIVE_LINE,
                "rust_type": self._shape,
                "is_unit": _is_unit,
            },
        )

    def _collections_import(self) -> str:
        """Return what follows ``use std::collections::``, or "" if nothing is needed."""
        shapes: list[Shape] = []
        for model in self._schema.models.values():
            if isinstance(model, StructDef):
                shapes.extend(field.shape for field in model.fields.values())
            elif isinstance(model, AliasDef):
                shapes.append(model.definition.shape)
        for service in self._schema.services.values():
            for method in service.methods:
                shapes.extend(param.shape for param in method.inputs.values())
                shapes.append(method.output.shape)

        used = [name for name, kind in _COLLECTIONS if any(contains_shape(shape, kind) for shape in shapes)]
        if len(used) > 1:
            return "{" + ", ".join(used) + "}"
        return "".join(used)

    def _shape(self, shape: Shape) -> str:
        if isinstance(shape, PrimitiveShape):
            return _PRIMITIVE_TYPES[shape.primitive]
        if isinstance(shape, NullableShape):
            return f"Option<{self._shape(shape.inner)}>"
        if isinstance(shape, ListShape):
            return f"Vec<{self._shape(shape.element)}>"
        if isinstance(shape, SetShape):
            self._check_hashable(shape.element, "set element")
            return f"HashSet<{self._shape(shape.element)}>"
        if isinstance(shape, MapShape):
            self._check_hashable(shape.key, "map key")
            return f"HashMap<{self._shape(shape.key)}, {self._shape(shape.value)}>"
        assert isinstance(shape, ReferenceShape)
        return resolve_model(self._schema, shape.name).name

    def _check_hashable(self, shape: Shape, role: str, seen: frozenset[str] = frozenset()) -> None:
        """Raise unless *shape* renders to a type implementing ``Eq`` and ``Hash``.

        Aliases are followed. Floats have no ``Eq``. Generated structs derive
        neither trait, and external types are unknown.
        """
        target: Shape | Model = shape
        while isinstance(target, ReferenceShape):
            if target.name in seen:
                raise UnsupportedConstructError(TARGET, f"recursive alias '{target.name}'")
            seen = seen | {target.name}
            model = resolve_model(self._schema, target.name)
            target = model.definition.shape if isinstance(model, AliasDef) else model

        if isinstance(target, NullableShape):
            self._check_hashable(target.inner, role, seen)
            return
        if isinstance(target, EnumDef):
            return
        if isinstance(target, PrimitiveShape) and target.primitive not in _FLOAT_PRIMITIVES:
            return
        raise UnsupportedConstructError(TARGET, f"{role} '{format_shape(shape)}'")


def _is_unit(shape: Shape) -> bool:
    return isinstance(shape, PrimitiveShape) and shape.primitive == Primitive.UNIT


_ENGINE = TemplateEngine(TEMPLATE_DIR / "rust", filters={"rust_identifier": rust_identifier})
