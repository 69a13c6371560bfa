# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema model for hgen (models, services, shapes)."""

from hgen.model.entities import (
    AliasDef,
    DuplicateDefinitionError,
    EnumDef,
    ExternalDef,
    Method,
    Model,
    Schema,
    Service,
    StructDef,
)
from hgen.model.ordered_map import OrderedMap
from hgen.model.types import (
    AnnotatedShape,
    ListShape,
    MapShape,
    NullableShape,
    Primitive,
    PrimitiveShape,
    ReferenceShape,
    SetShape,
    Shape,
    describe_shape,
    format_shape,
    primitive,
    reference,
)

__all__ = [
    # Containers
    "OrderedMap",
    # Shapes
    "Primitive",
    "PrimitiveShape",
    "NullableShape",
    "ListShape",
    "SetShape",
    "MapShape",
    "ReferenceShape",
    "Shape",
    "AnnotatedShape",
    "describe_shape",
    "format_shape",
    "primitive",
    "reference",
    # Entities
    "StructDef",
    "EnumDef",
    "AliasDef",
    "ExternalDef",
    "Model",
    "Method",
    "Service",
    "Schema",
    "DuplicateDefinitionError",
]
