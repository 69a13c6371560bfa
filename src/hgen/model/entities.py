# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Top-level definitions of the hgen schema model."""

from __future__ import annotations

from typing import Annotated as _Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import Field as _Field

from hgen.model.ordered_map import OrderedMap
from hgen.model.types import AnnotatedShape, Primitive, PrimitiveShape

# ###############
# Public Interface
# ###############


class DuplicateDefinitionError(Exception):
    """Raised when a name is defined twice within the same namespace.

    Attributes:
        name: The duplicated name.
    """

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name


class StructDef(BaseModel):
    """A named record; field order is the declaration order."""

    kind: Literal["struct"] = "struct"
    name: str
    fields: OrderedMap[AnnotatedShape] = _Field(default_factory=OrderedMap)


class EnumDef(BaseModel):
    """A C-style enumeration whose variants carry no data."""

    kind: Literal["enum"] = "enum"
    name: str
    values: list[str] = _Field(default_factory=list)


class AliasDef(BaseModel):
    """A name bound to another shape."""

    kind: Literal["alias"] = "alias"
    name: str
    definition: AnnotatedShape


class ExternalDef(BaseModel):
    """A type implemented by hand outside the generated code.

    The shape describes the type for reflection purposes only.
    """

    kind: Literal["external"] = "external"
    name: str
    definition: AnnotatedShape


Model = _Annotated[
    StructDef | EnumDef | AliasDef | ExternalDef,
    _Field(discriminator="kind"),
]


def _unit() -> AnnotatedShape:
    return AnnotatedShape(shape=PrimitiveShape(primitive=Primitive.UNIT))


class Method(BaseModel):
    """A service method.

    ``data`` holds the metadata attached to the method itself; a method
    declared without ``-> shape`` returns ``Unit``.
    """

    name: str
    inputs: OrderedMap[AnnotatedShape] = _Field(default_factory=OrderedMap)
    output: AnnotatedShape = _Field(default_factory=_unit)
    data: OrderedMap[str] = _Field(default_factory=OrderedMap)


class Service(BaseModel):
    """A named group of RPC-style methods."""

    name: str
    methods: list[Method] = _Field(default_factory=list)


class Schema(BaseModel):
    """A compilation unit: everything parsed from one file and its imports.

    ``imports`` lists the names from ``use`` statements and only matters
    while files are being loaded. ``models`` doubles as the name index used
    by :meth:`resolve`.
    """

    imports: list[str] = _Field(default_factory=list)
    models: OrderedMap[Model] = _Field(default_factory=OrderedMap)
    services: OrderedMap[Service] = _Field(default_factory=OrderedMap)

    def resolve(self, name: str) -> Model | None:
        """Return the model called *name*, or None if it is not defined."""
        return self.models.get(name)

    def add_model(self, model: Model) -> None:
        """Register *model*.

        Raises:
            DuplicateDefinitionError: If a model with the same name exists.
        """
        if model.name in self.models:
            raise DuplicateDefinitionError(f"Duplicate definition of model '{model.name}'", model.name)
        self.models.insert(model.name, model)

    def add_service(self, service: Service) -> None:
        """Register *service*.

        Raises:
            DuplicateDefinitionError: If a service with the same name exists.
        """
        if service.name in self.services:
            raise DuplicateDefinitionError(f"Duplicate definition of service '{service.name}'", service.name)
        self.services.insert(service.name, service)

    def merge(self, other: Schema) -> None:
        """Append the imports, models and services of *other* to this schema.

        Entries already present keep their position; *other*'s entries follow
        in their own order.

        Raises:
            DuplicateDefinitionError: If *other* defines a name already present.
        """
        self.imports.extend(other.imports)
        for model in other.models.values():
            self.add_model(model)
        for service in other.services.values():
            self.add_service(service)


Method.model_rebuild()
Service.model_rebuild()
Schema.model_rebuild()
