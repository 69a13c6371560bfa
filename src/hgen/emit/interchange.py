# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""JSON and RON dumps of a schema.

Both dumps describe the schema exactly as written: references are kept by
name and are not checked. Checking them is the caller's job; the CLI runs
``hgen.compiler.semantic_analysis.analyze`` on every schema before any
target is emitted, so a dump never names an undefined model there.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from hgen.model.entities import AliasDef, EnumDef, ExternalDef, Method, Model, Schema, Service, StructDef
from hgen.model.types import (
    AnnotatedShape,
    ListShape,
    MapShape,
    NullableShape,
    PrimitiveShape,
    ReferenceShape,
    SetShape,
    Shape,
)

# ###############
# Public Interface
# ###############


def emit_json(module_name: str, schema: Schema) -> str:
    """Serialize *schema* to a compact JSON string.

    The top-level object has a ``models`` and a ``services`` member, each
    keyed by name in declaration order.
    """
    document = {
        "models": {name: _model_to_dict(model) for name, model in schema.models.items()},
        "services": {name: _service_to_dict(service) for name, service in schema.services.items()},
    }
    return json.dumps(document, separators=(",", ":"))


def emit_ron(module_name: str, schema: Schema) -> str:
    """Serialize *schema* to pretty-printed RON (Rusty Object Notation)."""
    return _render_ron(_schema_to_ron(schema), 0) + "\n"


# ################
# Implementation
# ################

# ------------------------------------------------------------------
# JSON
# ------------------------------------------------------------------


def _shape_to_dict(shape: Shape) -> dict[str, Any]:
    if isinstance(shape, PrimitiveShape):
        return {"type": shape.primitive.value}
    if isinstance(shape, NullableShape):
        return {"type": "Nullable", "inner": _shape_to_dict(shape.inner)}
    if isinstance(shape, ListShape):
        return {"type": "List", "inner": _shape_to_dict(shape.element)}
    if isinstance(shape, SetShape):
        return {"type": "Set", "inner": _shape_to_dict(shape.element)}
    if isinstance(shape, MapShape):
        return {"type": "Map", "key": _shape_to_dict(shape.key), "value": _shape_to_dict(shape.value)}
    assert isinstance(shape, ReferenceShape)
    return {"type": "Reference", "name": shape.name}


def _annotated_to_dict(annotated: AnnotatedShape) -> dict[str, Any]:
    return {**_shape_to_dict(annotated.shape), "data": dict(annotated.data)}


def _model_to_dict(model: Model) -> dict[str, Any]:
    if isinstance(model, StructDef):
        return {
            "type": "Struct",
            "fields": {name: _annotated_to_dict(field) for name, field in model.fields.items()},
        }
    if isinstance(model, EnumDef):
        return {"type": "Enum", "fields": list(model.values)}
    if isinstance(model, AliasDef):
        return {"type": "Alias", "inner": _annotated_to_dict(model.definition)}
    assert isinstance(model, ExternalDef)
    return {"type": "External", "inner": _annotated_to_dict(model.definition)}


def _method_to_dict(method: Method) -> dict[str, Any]:
    return {
        "inputs": {name: _annotated_to_dict(param) for name, param in method.inputs.items()},
        "output": _annotated_to_dict(method.output),
        "data": dict(method.data),
    }


def _service_to_dict(service: Service) -> dict[str, Any]:
    return {
        "type": "Service",
        "methods": {method.name: _method_to_dict(method) for method in service.methods},
    }


# ------------------------------------------------------------------
# RON
# ------------------------------------------------------------------

_INDENT = "    "


@dataclass(frozen=True)
class _RonStruct:
    """A named-field struct, rendered ``(key: value, ...)``."""

    fields: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class _RonVariant:
    """An enum variant, rendered ``Name`` or ``Name(arg, ...)``."""

    name: str
    args: tuple[Any, ...] = ()


def _schema_to_ron(schema: Schema) -> _RonStruct:
    return _RonStruct(
        (
            ("imports", list(schema.imports)),
            ("models", {name: _model_to_ron(model) for name, model in schema.models.items()}),
            ("services", {name: _service_to_ron(service) for name, service in schema.services.items()}),
        )
    )


def _shape_to_ron(shape: Shape) -> _RonVariant:
    if isinstance(shape, PrimitiveShape):
        return _RonVariant("Primitive", (_RonVariant(shape.primitive.value),))
    if isinstance(shape, NullableShape):
        return _RonVariant("Nullable", (_shape_to_ron(shape.inner),))
    if isinstance(shape, ListShape):
        return _RonVariant("List", (_shape_to_ron(shape.element),))
    if isinstance(shape, SetShape):
        return _RonVariant("Set", (_shape_to_ron(shape.element),))
    if isinstance(shape, MapShape):
        return _RonVariant("Map", (_shape_to_ron(shape.key), _shape_to_ron(shape.value)))
    assert isinstance(shape, ReferenceShape)
    return _RonVariant("Reference", (shape.name,))


def _annotated_to_ron(annotated: AnnotatedShape) -> _RonStruct:
    return _RonStruct((("shape", _shape_to_ron(annotated.shape)), ("data", dict(annotated.data))))


def _model_to_ron(model: Model) -> _RonVariant:
    if isinstance(model, StructDef):
        fields = {name: _annotated_to_ron(field) for name, field in model.fields.items()}
        return _RonVariant("Struct", (_RonStruct((("name", model.name), ("fields", fields))),))
    if isinstance(model, EnumDef):
        return _RonVariant("Enum", (_RonStruct((("name", model.name), ("values", list(model.values)))),))
    variant = "Alias" if isinstance(model, AliasDef) else "External"
    definition = _annotated_to_ron(model.definition)
    return _RonVariant(variant, (_RonStruct((("name", model.name), ("definition", definition))),))


def _service_to_ron(service: Service) -> _RonStruct:
    methods = [
        _RonStruct(
            (
                ("name", method.name),
                ("inputs", {name: _annotated_to_ron(param) for name, param in method.inputs.items()}),
                ("output", _annotated_to_ron(method.output)),
                ("data", dict(method.data)),
            )
        )
        for method in service.methods
    ]
    return _RonStruct((("name", service.name), ("methods", methods)))


def _render_ron(value: Any, depth: int) -> str:
    """Render *value* with its closing bracket at *depth* indentation."""
    inner = _INDENT * (depth + 1)
    outer = _INDENT * depth
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, _RonVariant):
        if not value.args:
            return value.name
        return f"{value.name}({', '.join(_render_ron(arg, depth) for arg in value.args)})"
    if isinstance(value, _RonStruct):
        if not value.fields:
            return "()"
        lines = [f"{inner}{key}: {_render_ron(item, depth + 1)}," for key, item in value.fields]
        return "(\n" + "\n".join(lines) + f"\n{outer})"
    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = [f"{inner}{json.dumps(key)}: {_render_ron(item, depth + 1)}," for key, item in value.items()]
        return "{\n" + "\n".join(lines) + f"\n{outer}}}"
    assert isinstance(value, list)
    if not value:
        return "[]"
    lines = [f"{inner}{_render_ron(item, depth + 1)}," for item in value]
    return "[\n" + "\n".join(lines) + f"\n{outer}]"
