# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""TypeScript target.

Renders one class per struct, string-valued enums, type aliases, consumer
classes and provider interfaces for services, and a ``$schema`` reflection
constant describing every model and service for runtime serializers.

TypeScript has no hashable structural values, so ``Set<T>`` is rejected.
"""

from __future__ import annotations

import functools
import re
from typing import Any

from hgen.emit.common import (
    GENERATED_HEADER,
    UnsupportedConstructError,
    contains_shape,
    iter_annotated,
    reflect_schema,
    resolve_model,
)
from hgen.emit.templating import TEMPLATE_DIR, TemplateEngine
from hgen.model.entities import ExternalDef, Method, Schema
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

TARGET = "TypeScript"


def emit_schema(module_name: str, schema: Schema, *, reflection: bool = True) -> str:
    """Render *schema* as a TypeScript module.

    Args:
        module_name: Name of the generated module. Externals are imported from
            ``./<module_name>.external``.
        schema: The schema to render; it is not modified.
        reflection: Whether to append the ``$schema`` reflection constant.

    Raises:
        UnresolvedReferenceError: If a shape references an undefined model.
        UnsupportedConstructError: If the schema uses ``Set<T>``.
    """
    _reject_sets(schema)
    return _ENGINE.render_template(
        "module.ts.j2",
        {
            "header": GENERATED_HEADER,
            "module": module_name,
            "externals": [model for model in schema.models.values() if isinstance(model, ExternalDef)],
            "declarations": [model for model in schema.models.values() if not isinstance(model, ExternalDef)],
            "services": list(schema.services.values()),
            "reflection": ts_literal(reflect_schema(schema)) if reflection else "",
            "ts_type": functools.partial(_shape, schema),
            "signature": functools.partial(_signature, schema),
        },
    )


def ts_literal(value: Any) -> str:
    """Render plain data as a compact TypeScript object literal.

    Keys that are valid identifiers are written bare, strings use single
    quotes.
    """
    if isinstance(value, dict):
        members = ",".join(f"{_ts_key(key)}:{ts_literal(item)}" for key, item in value.items())
        return "{" + members + "}"
    if isinstance(value, list):
        return "[" + ",".join(ts_literal(item) for item in value) + "]"
    return _ts_string(str(value))


# ################
# Implementation
# ################

_PRIMITIVE_TYPES: dict[Primitive, str] = {
    Primitive.UNIT: "void",
    Primitive.BOOL: "boolean",
    Primitive.STRING: "string",
    Primitive.INT8: "number",
    Primitive.INT16: "number",
    Primitive.INT32: "number",
    Primitive.INT64: "bigint",
    Primitive.INT128: "bigint",
    Primitive.FLOAT32: "number",
    Primitive.FLOAT64: "number",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _reject_sets(schema: Schema) -> None:
    for location, annotated in iter_annotated(schema):
        if contains_shape(annotated.shape, SetShape):
            raise UnsupportedConstructError(TARGET, f"'{format_shape(annotated.shape)}' (used by {location})")


def _ts_key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else _ts_string(key)


def _ts_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def _signature(schema: Schema, method: Method) -> str:
    params = ", ".join(f"{name}: {_shape(schema, param.shape)}" for name, param in method.inputs.items())
    return f"{method.name}({params}): Promise<{_shape(schema, method.output.shape)}>"


def _shape(schema: Schema, shape: Shape) -> str:
    if isinstance(shape, PrimitiveShape):
        return _PRIMITIVE_TYPES[shape.primitive]
    if isinstance(shape, NullableShape):
        return f"{_shape(schema, shape.inner)} | null"
    if isinstance(shape, ListShape):
        element = _shape(schema, shape.element)
        if isinstance(shape.element, NullableShape):
            element = f"({element})"
        return f"({element}[])"
    if isinstance(shape, MapShape):
        return f"Map<{_shape(schema, shape.key)}, {_shape(schema, shape.value)}>"
    if isinstance(shape, SetShape):
        raise UnsupportedConstructError(TARGET, f"'{format_shape(shape)}'")
    assert isinstance(shape, ReferenceShape)
    return resolve_model(schema, shape.name).name


_ENGINE = TemplateEngine(TEMPLATE_DIR / "typescript", filters={"ts_string": _ts_string})
