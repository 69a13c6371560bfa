# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for .hgen files: scanning, parsing, import resolution and reference checks."""

from hgen.compiler.build import CompilerError, compile_schema, resolve_import_path
from hgen.compiler.lexer import Token, TokenType, tokenize
from hgen.compiler.parser import (
    DuplicateDeclarationError,
    GenericArityError,
    ParseError,
    UnexpectedEndOfInputError,
    UnexpectedTokenError,
    parse,
    parse_shape,
    parse_tokens,
)
from hgen.compiler.semantic_analysis import SemanticError, analyze

__all__ = [
    "tokenize",
    "Token",
    "TokenType",
    "parse",
    "parse_tokens",
    "parse_shape",
    "ParseError",
    "UnexpectedEndOfInputError",
    "UnexpectedTokenError",
    "GenericArityError",
    "DuplicateDeclarationError",
    "compile_schema",
    "resolve_import_path",
    "CompilerError",
    "analyze",
    "SemanticError",
]
