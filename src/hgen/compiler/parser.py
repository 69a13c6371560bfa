# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for .hgen files.

Converts a token stream produced by the lexer into a Schema. References
between models are kept by name and are not resolved here, so declarations
may refer to models defined later in the file or in imported files.
"""

import sys

from yachalk import chalk

from hgen.compiler.lexer import KEYWORDS, Token, TokenType, tokenize
from hgen.model.entities import (
    AliasDef,
    DuplicateDefinitionError,
    EnumDef,
    ExternalDef,
    Method,
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
)

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


class UnexpectedEndOfInputError(ParseError):
    """Raised when a token is required but the input is exhausted.

    Attributes:
        expected: Description of what was expected.
    """

    def __init__(self, expected: str, line: int, column: int) -> None:
        super().__init__(f"Unexpected end of input, expected {expected}", line, column)
        self.expected = expected


class UnexpectedTokenError(ParseError):
    """Raised when a token of the wrong kind or value is found.

    Attributes:
        expected: Description of what was expected.
        token: The offending token.
    """

    def __init__(self, expected: str, token: Token) -> None:
        super().__init__(f"Expected {expected}, got {str(token)!r}", token.line, token.column)
        self.expected = expected
        self.token = token


class GenericArityError(ParseError):
    """Raised when a container receives the wrong number of type arguments."""


class DuplicateDeclarationError(ParseError):
    """Raised when a name is declared twice in the same scope of one file."""


def parse(source: str) -> Schema:
    """Parse hgen source text into a Schema.

    Args:
        source: The full text of an .hgen file.

    Returns:
        A Schema with the file's models, services and ``use`` imports.

    Raises:
        ParseError: If the source is syntactically invalid. Before raising,
            the whole token stream is printed to stderr with the offending
            token highlighted.
    """
    return parse_tokens(tokenize(source))


def parse_tokens(tokens: list[Token]) -> Schema:
    """Parse an already tokenized stream. See :func:`parse`."""
    try:
        return _Parser(tokens).parse()
    except ParseError as exc:
        _print_parse_debug(tokens, exc.line, exc.column)
        raise


def parse_shape(source: str) -> Shape:
    """Parse a single shape such as ``Map<String, Int32>?``.

    Metadata suffixes are accepted and discarded.

    Raises:
        ParseError: If *source* is not exactly one shape.
    """
    tokens = tokenize(source)
    parser = _Parser(tokens)
    try:
        annotated = parser.parse_annotated_shape()
        parser.expect_end()
    except ParseError as exc:
        _print_parse_debug(tokens, exc.line, exc.column)
        raise
    return annotated.shape


# ################
# Implementation
# ################

_PRIMITIVES: dict[str, Primitive] = {p.value: p for p in Primitive}

# Container name -> number of type arguments.
_CONTAINER_ARITY: dict[str, int] = {
    "Optional": 1,
    "List": 1,
    "Set": 1,
    "Map": 2,
}

_NAME_TYPES: tuple[TokenType, ...] = (TokenType.IDENTIFIER, *KEYWORDS)


def _print_parse_debug(tokens: list[Token], line: int, column: int) -> None:
    """Print the token stream with the token at (line, column) highlighted."""
    rendered = [
        chalk.red(str(tok)) if (tok.line, tok.column) == (line, column) else chalk.dim(str(tok)) for tok in tokens
    ]
    print(" ".join(rendered), file=sys.stderr)


class _Parser:
    """Recursive-descent parser for hgen token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> Schema:
        """Parse the full token stream and return a Schema."""
        schema = Schema()
        while not self._at_end():
            self._parse_top_level(schema)
        return schema

    def parse_annotated_shape(self) -> AnnotatedShape:
        """Parse: shape [metadata] ['?']

        The nullable marker is applied last, so ``Map<K, V> &{...}?`` is a
        nullable map.
        """
        shape = self._parse_shape()
        data = self._parse_metadata() if self._check(TokenType.AMPERSAND) else OrderedMap()
        if self._match(TokenType.QUESTION):
            shape = NullableShape(inner=shape)
        return AnnotatedShape(shape=shape, data=data)

    def expect_end(self) -> None:
        """Raise UnexpectedTokenError unless the whole stream was consumed."""
        if not self._at_end():
            raise UnexpectedTokenError("end of input", self._current())

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without
        consuming).
        """
        return self._current().type in types

    def _match(self, token_type: TokenType) -> bool:
        """Consume the current token if it has the given type."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _expect(self, *types: TokenType, expected: str | None = None) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises UnexpectedEndOfInputError at EOF and UnexpectedTokenError for
        any other mismatch.
        """
        tok = self._current()
        if tok.type in types:
            return self._advance()
        if expected is None:
            expected = " or ".join(_describe(t) for t in types)
        if tok.type == TokenType.EOF:
            raise UnexpectedEndOfInputError(expected, tok.line, tok.column)
        raise UnexpectedTokenError(expected, tok)

    def _expect_name(self) -> Token:
        """Consume a field, parameter or metadata name.

        Keywords are accepted in these positions (e.g. a field named 'use').
        """
        return self._expect(*_NAME_TYPES, expected="identifier")

    # ------------------------------------------------------------------
    # Top-level declarations
    # ------------------------------------------------------------------

    def _parse_top_level(self, schema: Schema) -> None:
        """Parse one top-level declaration and add it to the schema."""
        tok = self._current()
        if tok.type == TokenType.USE:
            schema.imports.append(self._parse_use())
        elif tok.type == TokenType.STRUCT:
            self._add_model(schema, tok, self._parse_struct())
        elif tok.type == TokenType.ENUM:
            self._add_model(schema, tok, self._parse_enum())
        elif tok.type == TokenType.ALIAS:
            self._add_model(schema, tok, self._parse_alias())
        elif tok.type == TokenType.EXTERN:
            self._add_model(schema, tok, self._parse_extern())
        elif tok.type == TokenType.SERVICE:
            service = self._parse_service()
            try:
                schema.add_service(service)
            except DuplicateDefinitionError as exc:
                raise DuplicateDeclarationError(str(exc), tok.line, tok.column) from exc
        else:
            raise UnexpectedTokenError("a declaration", tok)

    def _add_model(self, schema: Schema, tok: Token, model: StructDef | EnumDef | AliasDef | ExternalDef) -> None:
        try:
            schema.add_model(model)
        except DuplicateDefinitionError as exc:
            raise DuplicateDeclarationError(str(exc), tok.line, tok.column) from exc

    def _parse_use(self) -> str:
        """Parse: use <name> ;"""
        self._expect(TokenType.USE)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.SEMICOLON)
        return name_tok.value

    def _parse_struct(self) -> StructDef:
        """Parse: struct <Name> { (<field> : <shape> ,)* }"""
        self._expect(TokenType.STRUCT)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.LBRACE)
        struct = StructDef(name=name_tok.value)
        while not self._match(TokenType.RBRACE):
            field_tok = self._expect_name()
            self._expect(TokenType.COLON)
            shape = self.parse_annotated_shape()
            self._expect(TokenType.COMMA)
            if not struct.fields.insert(field_tok.value, shape):
                raise DuplicateDeclarationError(
                    f"Duplicate field '{field_tok.value}' in struct '{struct.name}'",
                    field_tok.line,
                    field_tok.column,
                )
        return struct

    def _parse_enum(self) -> EnumDef:
        """Parse: enum <Name> { (<Variant> ,)* }"""
        self._expect(TokenType.ENUM)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.LBRACE)
        enum_def = EnumDef(name=name_tok.value)
        while not self._match(TokenType.RBRACE):
            value_tok = self._expect(TokenType.IDENTIFIER)
            self._expect(TokenType.COMMA)
            if value_tok.value in enum_def.values:
                raise DuplicateDeclarationError(
                    f"Duplicate variant '{value_tok.value}' in enum '{enum_def.name}'",
                    value_tok.line,
                    value_tok.column,
                )
            enum_def.values.append(value_tok.value)
        return enum_def

    def _parse_alias(self) -> AliasDef:
        """Parse: alias <Name> = <shape> ;"""
        self._expect(TokenType.ALIAS)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.EQUALS)
        definition = self.parse_annotated_shape()
        self._expect(TokenType.SEMICOLON)
        return AliasDef(name=name_tok.value, definition=definition)

    def _parse_extern(self) -> ExternalDef:
        """Parse: extern alias <Name> = <shape> ;"""
        self._expect(TokenType.EXTERN)
        self._expect(TokenType.ALIAS)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.EQUALS)
        definition = self.parse_annotated_shape()
        self._expect(TokenType.SEMICOLON)
        return ExternalDef(name=name_tok.value, definition=definition)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def _parse_service(self) -> Service:
        """Parse: service <Name> { <method>* }"""
        self._expect(TokenType.SERVICE)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.LBRACE)
        service = Service(name=name_tok.value)
        seen: set[str] = set()
        while not self._match(TokenType.RBRACE):
            method_tok = self._current()
            method = self._parse_method()
            if method.name in seen:
                raise DuplicateDeclarationError(
                    f"Duplicate method '{method.name}' in service '{service.name}'",
                    method_tok.line,
                    method_tok.column,
                )
            seen.add(method.name)
            service.methods.append(method)
        return service

    def _parse_method(self) -> Method:
        """Parse: <name> ( (<param> : <shape> [,])* ) [metadata] [-> <shape>] ,"""
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.LPAREN)
        method = Method(name=name_tok.value)
        while not self._match(TokenType.RPAREN):
            param_tok = self._expect_name()
            self._expect(TokenType.COLON)
            shape = self.parse_annotated_shape()
            self._match(TokenType.COMMA)
            if not method.inputs.insert(param_tok.value, shape):
                raise DuplicateDeclarationError(
                    f"Duplicate parameter '{param_tok.value}' in method '{method.name}'",
                    param_tok.line,
                    param_tok.column,
                )
        if self._check(TokenType.AMPERSAND):
            method.data = self._parse_metadata()
        if self._match(TokenType.DASH):
            self._expect(TokenType.RANGLE, expected="'>' after '-'")
            method.output = self.parse_annotated_shape()
        self._expect(TokenType.COMMA)
        return method

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def _parse_shape(self) -> Shape:
        """Parse: <Name> [ '<' <argument> (',' <argument>)* '>' ]"""
        name_tok = self._expect(TokenType.IDENTIFIER, expected="type name")
        arguments: list[Shape] = []
        if self._match(TokenType.LANGLE):
            arguments.append(self._parse_generic_argument())
            while self._match(TokenType.COMMA):
                arguments.append(self._parse_generic_argument())
            self._expect(TokenType.RANGLE)
        return self._build_shape(name_tok, arguments)

    def _parse_generic_argument(self) -> Shape:
        """Parse a type argument: <shape> ['?']"""
        shape = self._parse_shape()
        if self._match(TokenType.QUESTION):
            shape = NullableShape(inner=shape)
        return shape

    def _build_shape(self, name_tok: Token, arguments: list[Shape]) -> Shape:
        name = name_tok.value
        expected_arity = _CONTAINER_ARITY.get(name, 0)
        if len(arguments) != expected_arity:
            raise GenericArityError(
                f"'{name}' expects {expected_arity} type argument(s) but got {len(arguments)}",
                name_tok.line,
                name_tok.column,
            )
        if name in _PRIMITIVES:
            return PrimitiveShape(primitive=_PRIMITIVES[name])
        if name == "Optional":
            return NullableShape(inner=arguments[0])
        if name == "List":
            return ListShape(element=arguments[0])
        if name == "Set":
            return SetShape(element=arguments[0])
        if name == "Map":
            return MapShape(key=arguments[0], value=arguments[1])
        return ReferenceShape(name=name)

    def _parse_metadata(self) -> OrderedMap[str]:
        """Parse: & { (<key> : <value> ,)* }"""
        self._expect(TokenType.AMPERSAND)
        self._expect(TokenType.LBRACE)
        data: OrderedMap[str] = OrderedMap()
        while not self._match(TokenType.RBRACE):
            key_tok = self._expect_name()
            self._expect(TokenType.COLON)
            value_tok = self._expect(TokenType.STRING, *_NAME_TYPES, expected="metadata value")
            self._expect(TokenType.COMMA)
            if not data.insert(key_tok.value, value_tok.value):
                raise DuplicateDeclarationError(
                    f"Duplicate metadata key '{key_tok.value}'",
                    key_tok.line,
                    key_tok.column,
                )
        return data


def _describe(token_type: TokenType) -> str:
    if token_type == TokenType.IDENTIFIER:
        return "identifier"
    if token_type == TokenType.STRING:
        return "string literal"
    return repr(token_type.value)
