# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reference checking for compiled schemas.

References are bound by name only when code is emitted. This pass reports
every name that would fail to bind, so that ``hgen check`` and the CLI can
fail with all problems at once instead of on the first emitter lookup.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from hgen.model.entities import AliasDef, ExternalDef, Schema, StructDef
from hgen.model.types import (
    ListShape,
    MapShape,
    NullableShape,
    ReferenceShape,
    SetShape,
    Shape,
)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class SemanticError:
    """An unresolved reference found during analysis.

    Attributes:
        message: Human-readable description of the error.
        name: The name that could not be resolved.
        location: Where the reference occurs, e.g. ``User.owner``.
    """

    message: str
    name: str
    location: str


def analyze(schema: Schema) -> list[SemanticError]:
    """Report every reference in *schema* that does not name a model.

    Shapes in struct fields, alias and external definitions, method inputs
    and method outputs are checked, in declaration order.

    Args:
        schema: The merged schema to analyze.

    Returns:
        A list of errors; empty when every reference resolves.
    """
    errors: list[SemanticError] = []
    for location, shape in _iter_shapes(schema):
        for name in _referenced_names(shape):
            if schema.resolve(name) is None:
                errors.append(
                    SemanticError(
                        message=f"'{name}' referenced by {location} is not defined",
                        name=name,
                        location=location,
                    )
                )
    return errors


# ################
# Implementation
# ################


def _iter_shapes(schema: Schema) -> Iterator[tuple[str, Shape]]:
    for model in schema.models.values():
        if isinstance(model, StructDef):
            for field_name, field in model.fields.items():
                yield f"{model.name}.{field_name}", field.shape
        elif isinstance(model, (AliasDef, ExternalDef)):
            yield model.name, model.definition.shape
    for service in schema.services.values():
        for method in service.methods:
            for param_name, param in method.inputs.items():
                yield f"{service.name}.{method.name}({param_name})", param.shape
            yield f"{service.name}.{method.name} output", method.output.shape


def _referenced_names(shape: Shape) -> Iterator[str]:
    if isinstance(shape, ReferenceShape):
        yield shape.name
    elif isinstance(shape, NullableShape):
        yield from _referenced_names(shape.inner)
    elif isinstance(shape, (ListShape, SetShape)):
        yield from _referenced_names(shape.element)
    elif isinstance(shape, MapShape):
        yield from _referenced_names(shape.key)
        yield from _referenced_names(shape.value)
