# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Code generation targets for hgen schemas.

Every target is a pure function of ``(module_name, schema)``: it does not
modify the schema and returns the same text for the same input.
"""

from __future__ import annotations

import enum
from pathlib import PurePath

from hgen.emit import dart, interchange, rust, typescript
from hgen.emit.common import (
    EmitError,
    UnresolvedReferenceError,
    UnsupportedConstructError,
    to_snake_case,
)
from hgen.model.entities import Schema

# ###############
# Public Interface
# ###############


class UnknownStrategyError(EmitError):
    """Raised when a strategy name or file extension maps to no target."""


class Strategy(enum.Enum):
    """The available output targets."""

    RUST = "rust"
    TYPESCRIPT = "typescript"
    DART = "dart"
    JSON = "json"
    RON = "ron"

    @property
    def label(self) -> str:
        """Display name used in progress output, e.g. ``TypeScript``."""
        return _LABELS[self]

    @classmethod
    def from_name(cls, text: str) -> Strategy:
        """Look up a strategy by name, alias (``rs``, ``ts``) or extension (``.rs``).

        Matching is case-insensitive.

        Raises:
            UnknownStrategyError: If *text* names no strategy.
        """
        key = text.strip().lower().removeprefix(".")
        try:
            return _ALIASES.get(key) or cls(key)
        except ValueError:
            raise UnknownStrategyError(f"Unknown strategy '{text}'") from None

    @classmethod
    def from_path(cls, path: PurePath) -> Strategy:
        """Infer the strategy from the extension of an output *path*.

        Raises:
            UnknownStrategyError: If the path has no recognised extension.
        """
        if not path.suffix:
            raise UnknownStrategyError(f"Cannot infer a strategy for '{path}': the file has no extension")
        try:
            return cls.from_name(path.suffix)
        except UnknownStrategyError:
            raise UnknownStrategyError(f"Cannot infer a strategy for '{path}' from '{path.suffix}'") from None


def emit(strategy: Strategy, module_name: str, schema: Schema, *, reflection: bool = True) -> str:
    """Render *schema* for *strategy*.

    Args:
        strategy: The output target.
        module_name: Name of the generated module, typically the output file
            stem. Targets use it to locate the hand-written external module.
        schema: The compiled schema.
        reflection: Whether targets that support it emit reflection tables.

    Raises:
        EmitError: If the schema cannot be rendered for the target.
    """
    if strategy is Strategy.RUST:
        return rust.emit_schema(module_name, schema)
    if strategy is Strategy.TYPESCRIPT:
        return typescript.emit_schema(module_name, schema, reflection=reflection)
    if strategy is Strategy.DART:
        return dart.emit_schema(module_name, schema, reflection=reflection)
    if strategy is Strategy.JSON:
        return interchange.emit_json(module_name, schema)
    assert strategy is Strategy.RON
    return interchange.emit_ron(module_name, schema)


__all__ = [
    "Strategy",
    "emit",
    "to_snake_case",
    "EmitError",
    "UnresolvedReferenceError",
    "UnsupportedConstructError",
    "UnknownStrategyError",
]


# ################
# Implementation
# ################

_LABELS: dict[Strategy, str] = {
    Strategy.RUST: "Rust",
    Strategy.TYPESCRIPT: "TypeScript",
    Strategy.DART: "Dart",
    Strategy.JSON: "JSON",
    Strategy.RON: "RON",
}

_ALIASES: dict[str, Strategy] = {
    "rs": Strategy.RUST,
    "ts": Strategy.TYPESCRIPT,
}
