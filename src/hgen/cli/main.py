# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the hgen command-line interface."""

import argparse
import os
import sys
import tempfile
import time
from pathlib import Path

from yachalk import chalk

from hgen import __version__
from hgen.compiler.build import CompilerError, compile_schema
from hgen.compiler.semantic_analysis import analyze
from hgen.emit import EmitError, Strategy, UnknownStrategyError, emit
from hgen.model.entities import Schema
from hgen.project.config import PROJECT_FILE_NAME, ProjectConfigError, load_project_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the hgen CLI."""
    parser = argparse.ArgumentParser(
        prog="hgen",
        description="hgen - schema compiler for Rust, TypeScript and Dart",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate code from a schema file",
        description="Compile a schema and write one artifact per output path.",
    )
    generate_parser.add_argument(
        "-i",
        "--input",
        required=True,
        help="Entry schema file (.hgen)",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        action="append",
        required=True,
        help="Output file; may be repeated. The target is inferred from the extension.",
    )
    generate_parser.add_argument(
        "--strategy",
        help="Target for every output (rust, typescript, dart, json, ron), overriding the extension",
    )
    generate_parser.add_argument(
        "--no-reflection",
        dest="reflection",
        action="store_false",
        help="Do not emit reflection tables",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check a schema for errors",
        description="Parse a schema and its imports and report unresolved references.",
    )
    check_parser.add_argument("input", help="Entry schema file (.hgen)")

    # build subcommand
    build_parser = subparsers.add_parser(
        "build",
        help=f"Generate every output configured in {PROJECT_FILE_NAME}",
        description=f"Read {PROJECT_FILE_NAME} from a project directory and generate its outputs.",
    )
    build_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help=f"Directory containing {PROJECT_FILE_NAME} (default: current directory)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "build":
        return _cmd_build(args)
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    try:
        forced = Strategy.from_name(args.strategy) if args.strategy else None
        outputs = [(Path(out), forced or Strategy.from_path(Path(out))) for out in args.output]
    except UnknownStrategyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return _generate(Path(args.input), outputs, reflection=args.reflection)


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    schema = _compile(Path(args.input))
    if schema is None:
        return 1
    print(f"Checked {len(schema.models)} model(s) and {len(schema.services)} service(s).")
    print("No issues found.")
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    """Handle the build subcommand."""
    directory = Path(args.directory).resolve()
    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    try:
        config = load_project_config(directory / PROJECT_FILE_NAME)
        outputs = [(directory / spec.path, spec.resolve_strategy()) for spec in config.outputs]
    except (ProjectConfigError, UnknownStrategyError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    return _generate(directory / config.input, outputs, reflection=config.reflection)


def _compile(entry: Path) -> Schema | None:
    """Compile *entry* and check references, printing errors. Returns None on failure."""
    try:
        schema = compile_schema(entry)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None

    errors = analyze(schema)
    for error in errors:
        print(f"Error: {error.message}", file=sys.stderr)
    if errors:
        return None
    return schema


def _generate(entry: Path, outputs: list[tuple[Path, Strategy]], *, reflection: bool) -> int:
    """Compile *entry*, render every output, then write them all."""
    started = time.perf_counter()

    print(chalk.dim("[1/2] Parsing schema..."))
    schema = _compile(entry)
    if schema is None:
        return 1

    rendered: list[tuple[Path, str]] = []
    for path, strategy in outputs:
        print(chalk.dim(f"[2/2] Emitting {strategy.label} code..."))
        try:
            rendered.append((path, emit(strategy, path.stem, schema, reflection=reflection)))
        except EmitError as exc:
            print(f"Error: cannot generate '{path}': {exc}", file=sys.stderr)
            return 1

    try:
        _write_all(rendered)
    except OSError as exc:
        print(f"Error: cannot write output: {exc}", file=sys.stderr)
        return 1

    for path, _ in rendered:
        print(f"Wrote {path}")
    elapsed_ms = (time.perf_counter() - started) * 1000
    print(chalk.green(f"done in {elapsed_ms:.0f} ms"))
    return 0


def _write_all(artifacts: list[tuple[Path, str]]) -> None:
    """Write every artifact through a temporary file in its target directory.

    All temporary files are written before any target is replaced, so a
    failure while writing leaves the existing outputs untouched. If a
    replace fails, the targets replaced so far get their previous content
    back (or are removed when they did not exist) before the error is
    raised again.
    """
    staged: list[tuple[str, Path]] = []
    replaced: list[tuple[Path, bytes | None]] = []
    try:
        for path, text in artifacts:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            staged.append((temp_name, path))
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(text)
        while staged:
            temp_name, path = staged[0]
            previous = path.read_bytes() if path.is_file() else None
            os.replace(temp_name, path)
            staged.pop(0)
            replaced.append((path, previous))
    except OSError:
        for path, previous in reversed(replaced):
            if previous is None:
                path.unlink(missing_ok=True)
            else:
                path.write_bytes(previous)
        raise
    finally:
        for temp_name, _ in staged:
            Path(temp_name).unlink(missing_ok=True)
