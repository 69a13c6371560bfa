# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Helpers shared by every emitter: errors, naming, and schema reflection."""

from __future__ import annotations

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

GENERATED_HEADER = "// AUTOGENERATED FILE - DO NOT EDIT"


class EmitError(Exception):
    """Base class for errors raised while rendering a schema."""


class UnresolvedReferenceError(EmitError):
    """Raised when a reference names no model in the schema.

    Attributes:
        name: The unresolved name.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Unresolved reference '{name}'")
        self.name = name


class UnsupportedConstructError(EmitError):
    """Raised when a target cannot express a shape or model.

    Attributes:
        target: Display name of the target, e.g. ``TypeScript``.
        construct: Description of the offending construct.
    """

    def __init__(self, target: str, construct: str) -> None:
        super().__init__(f"The {target} target does not support {construct}")
        self.target = target
        self.construct = construct


def to_snake_case(name: str) -> str:
    """Convert a camelCase or PascalCase identifier to snake_case.

    A separator is inserted before every uppercase letter except the first
    character, and the letter is lowercased. Other characters are kept.

    Examples:
        >>> to_snake_case("createdAt")
        'created_at'
        >>> to_snake_case("URL")
        'u_r_l'
    """
    chars: list[str] = []
    for index, ch in enumerate(name):
        if ch.isupper():
            if index > 0:
                chars.append("_")
            chars.append(ch.lower())
        else:
            chars.append(ch)
    return "".join(chars)


def resolve_model(schema: Schema, name: str) -> Model:
    """Look up *name* in *schema*, raising UnresolvedReferenceError if absent."""
    model = schema.resolve(name)
    if model is None:
        raise UnresolvedReferenceError(name)
    return model


def reflect_shape(shape: Shape) -> dict[str, Any]:
    """Describe *shape* as plain data for reflection tables.

    Type tags are lower-case, e.g. ``{"type": "list", "inner": {"type": "int32"}}``.
    """
    if isinstance(shape, PrimitiveShape):
        return {"type": shape.primitive.value.lower()}
    if isinstance(shape, NullableShape):
        return {"type": "nullable", "inner": reflect_shape(shape.inner)}
    if isinstance(shape, ListShape):
        return {"type": "list", "inner": reflect_shape(shape.element)}
    if isinstance(shape, SetShape):
        return {"type": "set", "inner": reflect_shape(shape.element)}
    if isinstance(shape, MapShape):
        return {"type": "map", "key": reflect_shape(shape.key), "value": reflect_shape(shape.value)}
    assert isinstance(shape, ReferenceShape)
    return {"type": "reference", "name": shape.name}


def reflect_annotated(annotated: AnnotatedShape) -> dict[str, Any]:
    """Like :func:`reflect_shape`, with the shape's metadata under ``data``."""
    return {**reflect_shape(annotated.shape), "data": dict(annotated.data)}


def reflect_model(model: Model) -> dict[str, Any]:
    """Describe a model definition for reflection tables."""
    if isinstance(model, StructDef):
        return {
            "type": "struct",
            "fields": {name: reflect_annotated(field) for name, field in model.fields.items()},
        }
    if isinstance(model, EnumDef):
        return {"type": "enum", "fields": {value: "" for value in model.values}}
    if isinstance(model, AliasDef):
        return {"type": "alias", "inner": reflect_annotated(model.definition)}
    assert isinstance(model, ExternalDef)
    return {"type": "external", "inner": reflect_annotated(model.definition)}


def reflect_method(method: Method) -> dict[str, Any]:
    return {
        "inputs": {name: reflect_annotated(param) for name, param in method.inputs.items()},
        "output": reflect_annotated(method.output),
        "data": dict(method.data),
    }


def reflect_service(service: Service) -> dict[str, Any]:
    return {
        "type": "service",
        "methods": {method.name: reflect_method(method) for method in service.methods},
    }


def reflect_schema(schema: Schema) -> dict[str, Any]:
    """Describe every model and service of *schema*, in declaration order."""
    return {
        "models": {name: reflect_model(model) for name, model in schema.models.items()},
        "services": {name: reflect_service(service) for name, service in schema.services.items()},
    }


def iter_annotated(schema: Schema) -> list[tuple[str, AnnotatedShape]]:
    """Return every annotated shape in *schema* paired with a location label.

    Locations read like ``User.owner``, ``UserId``, ``Todos.create(title)``
    and ``Todos.create output``.
    """
    found: list[tuple[str, AnnotatedShape]] = []
    for model in schema.models.values():
        if isinstance(model, StructDef):
            found.extend((f"{model.name}.{name}", field) for name, field in model.fields.items())
        elif isinstance(model, (AliasDef, ExternalDef)):
            found.append((model.name, model.definition))
    for service in schema.services.values():
        for method in service.methods:
            found.extend((f"{service.name}.{method.name}({name})", param) for name, param in method.inputs.items())
            found.append((f"{service.name}.{method.name} output", method.output))
    return found


def contains_shape(shape: Shape, kind: type) -> bool:
    """Return True if *shape* or any shape nested in it is an instance of *kind*."""
    if isinstance(shape, kind):
        return True
    if isinstance(shape, NullableShape):
        return contains_shape(shape.inner, kind)
    if isinstance(shape, (ListShape, SetShape)):
        return contains_shape(shape.element, kind)
    if isinstance(shape, MapShape):
        return contains_shape(shape.key, kind) or contains_shape(shape.value, kind)
    return False
