# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for .hgen files.

Converts raw source text into a flat sequence of tokens for the parser. The
scanner never fails: malformed input simply yields a token sequence that the
parser rejects.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the hgen lexer."""

    # Keywords
    ALIAS = "alias"
    STRUCT = "struct"
    ENUM = "enum"
    EXTERN = "extern"
    SERVICE = "service"
    USE = "use"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    COLON = ":"
    SEMICOLON = ";"
    QUESTION = "?"
    AMPERSAND = "&"
    LANGLE = "<"
    RANGLE = ">"
    COMMA = ","
    EQUALS = "="
    DASH = "-"

    # Literals
    STRING = "STRING"

    # Identifiers
    IDENTIFIER = "IDENTIFIER"

    # End of file
    EOF = "EOF"


KEYWORDS: frozenset[TokenType] = frozenset(
    {
        TokenType.ALIAS,
        TokenType.STRUCT,
        TokenType.ENUM,
        TokenType.EXTERN,
        TokenType.SERVICE,
        TokenType.USE,
    }
)


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (the unquoted content for STRING tokens).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int

    @property
    def is_keyword(self) -> bool:
        return self.type in KEYWORDS

    def __str__(self) -> str:
        if self.type == TokenType.STRING:
            return f'"{self.value}"'
        if self.type == TokenType.EOF:
            return "<eof>"
        return self.value


def tokenize(source: str) -> list[Token]:
    """Tokenize hgen source text into a sequence of tokens.

    Whitespace and ``//`` comments separate tokens and are not included in
    the output. An unterminated string literal is dropped.

    Args:
        source: The full text of an .hgen file.

    Returns:
        A list of Token objects ending with a single EOF token.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_KEYWORD_TABLE: dict[str, TokenType] = {t.value: t for t in KEYWORDS}

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    "?": TokenType.QUESTION,
    "&": TokenType.AMPERSAND,
    "<": TokenType.LANGLE,
    ">": TokenType.RANGLE,
    ",": TokenType.COMMA,
    "=": TokenType.EQUALS,
    "-": TokenType.DASH,
}


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []
        self._buffer: list[str] = []
        self._buffer_line = 1
        self._buffer_column = 1

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._scan_char()
        self._flush()
        self._tokens.append(Token(TokenType.EOF, "", self._line, self._column))
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self) -> str:
        """Return the character one position ahead, or '' at end of input."""
        if self._pos + 1 < len(self._source):
            return self._source[self._pos + 1]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan_char(self) -> None:
        """Dispatch on the current character."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch == '"':
            self._flush()
            self._scan_string(line, col)
        elif ch == "/" and self._peek() == "/":
            self._flush()
            self._skip_line_comment()
        elif ch in _SINGLE_CHAR_TOKENS:
            self._flush()
            self._advance()
            self._tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col))
        elif ch.isspace():
            self._flush()
            self._advance()
        else:
            if not self._buffer:
                self._buffer_line = line
                self._buffer_column = col
            self._buffer.append(self._advance())

    def _flush(self) -> None:
        """Turn the pending word into a keyword or identifier token."""
        if not self._buffer:
            return
        word = "".join(self._buffer)
        self._buffer = []
        token_type = _KEYWORD_TABLE.get(word, TokenType.IDENTIFIER)
        self._tokens.append(Token(token_type, word, self._buffer_line, self._buffer_column))

    def _skip_line_comment(self) -> None:
        """Consume from '//' through end-of-line (exclusive of the newline itself)."""
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()

    def _scan_string(self, line: int, col: int) -> None:
        """Scan a double-quoted literal verbatim; there are no escape sequences."""
        self._advance()  # opening "
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._advance()
            if ch == '"':
                self._tokens.append(Token(TokenType.STRING, "".join(chars), line, col))
                return
            chars.append(ch)
        # Unterminated literal: nothing is emitted.
