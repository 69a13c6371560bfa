# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Cross-file compilation of .hgen schemas.

A schema file may pull in sibling files with ``use NAME;``. Starting from the
entry file, every import is resolved to a file in the same directory with the
same suffix as the importing file, parsed, and merged into one root Schema.

Files are visited depth-first with an explicit stack: the most recently
discovered import is processed next. Each resolved path is parsed at most
once, so diamond-shaped and cyclic import graphs terminate. Models and
services keep first-seen order: the entry file's declarations come first,
followed by those of each imported file in traversal order.
"""

from __future__ import annotations

from pathlib import Path

from hgen.compiler.parser import ParseError, parse
from hgen.model.entities import DuplicateDefinitionError, Schema

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Raised when a schema and its imports cannot be compiled.

    Covers unreadable files, missing imports, parse errors, and names defined
    in more than one file. The underlying exception, if any, is chained.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


def resolve_import_path(name: str, importer: Path) -> Path:
    """Return the file that ``use <name>;`` inside *importer* refers to.

    The import is a sibling of *importer* carrying the same suffix. A name
    that already ends with that suffix is used as is.

    Examples:
        >>> resolve_import_path("shared", Path("api/main.hgen"))
        PosixPath('api/shared.hgen')
    """
    suffix = importer.suffix
    filename = name if suffix and name.endswith(suffix) else name + suffix
    return importer.parent / filename


def compile_schema(entry: Path) -> Schema:
    """Parse *entry* and every file it transitively imports into one Schema.

    Args:
        entry: Path to the entry .hgen file.

    Returns:
        The merged Schema. Its ``imports`` list holds every ``use`` name in
        the order the files were visited.

    Raises:
        CompilerError: On any failure; the message names the offending file.
    """
    root = Schema()
    visited: set[Path] = set()
    stack: list[Path] = [entry.resolve()]
    while stack:
        path = stack.pop()
        if path in visited:
            continue
        visited.add(path)

        schema = _load(path)
        try:
            root.merge(schema)
        except DuplicateDefinitionError as exc:
            raise CompilerError(f"Duplicate definition in '{path}': '{exc.name}' is already defined") from exc

        for name in schema.imports:
            dependency = resolve_import_path(name, path).resolve()
            if dependency in visited:
                continue
            if not dependency.is_file():
                raise CompilerError(f"Import '{name}' of '{path}' not found (expected '{dependency}')")
            stack.append(dependency)
    return root


# ################
# Implementation
# ################


def _load(path: Path) -> Schema:
    """Read and parse a single schema file."""
    try:
        source_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CompilerError(f"Cannot read source file '{path}': {exc}") from exc

    try:
        return parse(source_text)
    except ParseError as exc:
        raise CompilerError(f"Parse error in '{path}': {exc}") from exc
