# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shape representations for the hgen schema model."""

from __future__ import annotations

from enum import Enum
from typing import Annotated as _Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import Field as _Field

from hgen.model.ordered_map import OrderedMap

# ###############
# Public Interface
# ###############


class Primitive(Enum):
    """Scalar types built into the hgen language."""

    UNIT = "Unit"
    BOOL = "Bool"
    STRING = "String"
    INT8 = "Int8"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    INT128 = "Int128"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"


class PrimitiveShape(BaseModel):
    """A built-in scalar."""

    kind: Literal["primitive"] = "primitive"
    primitive: Primitive


class NullableShape(BaseModel):
    """A value that may be absent."""

    kind: Literal["nullable"] = "nullable"
    inner: Shape


class ListShape(BaseModel):
    """An ordered sequence, written ``List<T>``."""

    kind: Literal["list"] = "list"
    element: Shape


class SetShape(BaseModel):
    """An unordered collection of unique values, written ``Set<T>``."""

    kind: Literal["set"] = "set"
    element: Shape


class MapShape(BaseModel):
    """A key/value dictionary, written ``Map<K, V>``."""

    kind: Literal["map"] = "map"
    key: Shape
    value: Shape


class ReferenceShape(BaseModel):
    """A reference to a model by name, resolved only when emitting."""

    kind: Literal["reference"] = "reference"
    name: str


# The `kind` discriminator keeps validation of nested shapes unambiguous.
Shape = _Annotated[
    PrimitiveShape | NullableShape | ListShape | SetShape | MapShape | ReferenceShape,
    _Field(discriminator="kind"),
]


class AnnotatedShape(BaseModel):
    """A shape paired with the ``&{ key: value, }`` metadata written after it.

    The metadata is opaque to the parser; emitters decide how to render it.
    """

    shape: Shape
    data: OrderedMap[str] = _Field(default_factory=OrderedMap)


def describe_shape(shape: Shape) -> str:
    """Return a compact description of *shape* for diagnostics.

    Example: ``Map(Primitive(String), Reference(User))``.
    """
    if isinstance(shape, PrimitiveShape):
        return f"Primitive({shape.primitive.value})"
    if isinstance(shape, NullableShape):
        return f"Nullable({describe_shape(shape.inner)})"
    if isinstance(shape, ListShape):
        return f"List({describe_shape(shape.element)})"
    if isinstance(shape, SetShape):
        return f"Set({describe_shape(shape.element)})"
    if isinstance(shape, MapShape):
        return f"Map({describe_shape(shape.key)}, {describe_shape(shape.value)})"
    assert isinstance(shape, ReferenceShape)
    return f"Reference({shape.name})"


def format_shape(shape: Shape) -> str:
    """Render *shape* in hgen source syntax.

    The output parses back to an equal shape. A nullable whose inner shape
    is itself nullable is written with ``Optional<...>`` since ``??`` is not
    part of the grammar.
    """
    if isinstance(shape, PrimitiveShape):
        return shape.primitive.value
    if isinstance(shape, NullableShape):
        if isinstance(shape.inner, NullableShape):
            return f"Optional<{format_shape(shape.inner)}>"
        return f"{format_shape(shape.inner)}?"
    if isinstance(shape, ListShape):
        return f"List<{format_shape(shape.element)}>"
    if isinstance(shape, SetShape):
        return f"Set<{format_shape(shape.element)}>"
    if isinstance(shape, MapShape):
        return f"Map<{format_shape(shape.key)}, {format_shape(shape.value)}>"
    assert isinstance(shape, ReferenceShape)
    return shape.name


def primitive(value: Primitive) -> PrimitiveShape:
    """Shorthand for ``PrimitiveShape(primitive=value)``."""
    return PrimitiveShape(primitive=value)


def reference(name: str) -> ReferenceShape:
    """Shorthand for ``ReferenceShape(name=name)``."""
    return ReferenceShape(name=name)


# Resolve forward references for the recursive shapes.
NullableShape.model_rebuild()
ListShape.model_rebuild()
SetShape.model_rebuild()
MapShape.model_rebuild()
AnnotatedShape.model_rebuild()
