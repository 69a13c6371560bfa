# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Insertion-ordered string-keyed mapping used throughout the schema model.

Emission order must follow declaration order, so models, fields, services,
parameters and annotation data are all stored in an :class:`OrderedMap`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Generic, TypeVar, get_args

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

V = TypeVar("V")

# ###############
# Public Interface
# ###############


class OrderedMap(Mapping[str, V], Generic[V]):
    """A mapping from names to values that iterates in first-insertion order.

    Re-inserting an existing key replaces its value but keeps the key at the
    position where it was first inserted.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, V] | Iterable[tuple[str, V]] | None = None) -> None:
        self._entries: dict[str, V] = {}
        if entries is not None:
            self.extend(entries)

    def insert(self, key: str, value: V) -> bool:
        """Insert or update *key*.

        Returns:
            True if *key* was not present before.
        """
        is_new = key not in self._entries
        # dict assignment on an existing key keeps its slot.
        self._entries[key] = value
        return is_new

    def extend(self, entries: Mapping[str, V] | Iterable[tuple[str, V]]) -> None:
        """Insert every entry of *entries* in its iteration order."""
        items = entries.items() if isinstance(entries, Mapping) else entries
        for key, value in items:
            self.insert(key, value)

    def index(self, key: str) -> int:
        """Return the ordinal position of *key*.

        Raises:
            KeyError: If *key* is not present.
        """
        for position, existing in enumerate(self._entries):
            if existing == key:
                return position
        raise KeyError(key)

    def copy(self) -> OrderedMap[V]:
        return OrderedMap(self._entries)

    def __getitem__(self, key: str) -> V:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return list(self.items()) == list(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{key!r}: {value!r}" for key, value in self._entries.items())
        return f"OrderedMap({{{body}}})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        args = get_args(source_type)
        value_schema = handler.generate_schema(args[0]) if args else core_schema.any_schema()
        dict_schema = core_schema.dict_schema(core_schema.str_schema(), value_schema)
        from_dict = core_schema.no_info_after_validator_function(cls, dict_schema)
        return core_schema.json_or_python_schema(
            json_schema=from_dict,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_dict]),
            serialization=core_schema.plain_serializer_function_ser_schema(
                dict,
                return_schema=dict_schema,
            ),
        )
