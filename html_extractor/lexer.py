"""
Tokenizer for the extraction specification language.

Produces a flat list of Token objects ending with an EOF token. Every token
carries the 1-based line and column where it starts so parse errors can
point at the offending text.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .exceptions import SpecSyntaxError

IDENT = "IDENT"
STRING = "STRING"
INT = "INT"
PUNCT = "PUNCT"
EOF = "EOF"

PUNCTUATION = set("{}()[]<>,:=#.;")

# Escapes decoded inside ordinary (non-raw) strings. Any other backslash
# sequence is kept as written so regex classes like \d reach the regex engine.
STRING_ESCAPES = {'"': '"', "'": "'", "\\": "\\", "n": "\n", "t": "\t"}

_WHITESPACE = re.compile(r"[ \t\r\n]+")
_LINE_COMMENT = re.compile(r"//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int

    def is_punct(self, char: str) -> bool:
        return self.kind == PUNCT and self.value == char

    def is_ident(self, word: str) -> bool:
        return self.kind == IDENT and self.value == word

    def describe(self) -> str:
        """Human-readable form for error messages."""
        if self.kind == EOF:
            return "end of input"
        if self.kind == STRING:
            return f'"{self.value}"'
        return f"`{self.value}`"


class Lexer:
    """Splits specification text into tokens."""

    def __init__(self, text: str, source_name: Optional[str] = None):
        self.text = text
        self.source_name = source_name
        self.pos = 0
        self.line = 1
        self.column = 1

    def _advance(self, length: int) -> None:
        chunk = self.text[self.pos:self.pos + length]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(chunk) - chunk.rfind("\n")
        else:
            self.column += length
        self.pos += length

    def _error(self, message: str, token: Optional[str] = None) -> SpecSyntaxError:
        return SpecSyntaxError(message, self.line, self.column, self.source_name, token)

    def tokenize(self) -> list[Token]:
        tokens = []
        text = self.text

        while self.pos < len(text):
            for skip in (_WHITESPACE, _LINE_COMMENT, _BLOCK_COMMENT):
                m = skip.match(text, self.pos)
                if m:
                    self._advance(m.end() - self.pos)
                    break
            else:
                tokens.append(self._next_token())

        tokens.append(Token(EOF, "", self.line, self.column))
        return tokens

    def _next_token(self) -> Token:
        text = self.text
        char = text[self.pos]
        line, column = self.line, self.column

        if text.startswith("/*", self.pos):
            raise self._error("unterminated block comment")

        # r"..." raw strings, checked before identifiers so `r` is not a name
        if char == "r" and self.pos + 1 < len(text) and text[self.pos + 1] in "\"'":
            self._advance(1)
            value = self._read_string(raw=True)
            return Token(STRING, value, line, column)

        if char in "\"'":
            value = self._read_string(raw=False)
            return Token(STRING, value, line, column)

        m = _IDENT.match(text, self.pos)
        if m:
            self._advance(m.end() - self.pos)
            return Token(IDENT, m.group(), line, column)

        m = _INT.match(text, self.pos)
        if m:
            self._advance(m.end() - self.pos)
            return Token(INT, m.group(), line, column)

        if char in PUNCTUATION:
            self._advance(1)
            return Token(PUNCT, char, line, column)

        raise self._error(f"unexpected character `{char}`", token=char)

    def _read_string(self, raw: bool) -> str:
        text = self.text
        quote = text[self.pos]
        start_line, start_column = self.line, self.column
        self._advance(1)

        chars = []
        while True:
            if self.pos >= len(text):
                raise SpecSyntaxError("unterminated string literal", start_line, start_column,
                                      self.source_name)
            char = text[self.pos]
            if char == quote:
                self._advance(1)
                return "".join(chars)
            if char == "\\" and self.pos + 1 < len(text):
                following = text[self.pos + 1]
                if raw:
                    # Raw strings still cannot end on an escaped quote
                    chars.append(char + following)
                elif following in STRING_ESCAPES:
                    chars.append(STRING_ESCAPES[following])
                else:
                    chars.append(char + following)
                self._advance(2)
                continue
            chars.append(char)
            self._advance(1)


def tokenize(text: str, source_name: Optional[str] = None) -> list[Token]:
    """Convenience function to tokenize specification text."""
    return Lexer(text, source_name).tokenize()


class TokenStream:
    """Cursor over a token list with expect-style helpers."""

    def __init__(self, tokens: list[Token], source_name: Optional[str] = None):
        self.tokens = tokens
        self.source_name = source_name
        self.index = 0

    def peek(self, offset: int = 0) -> Token:
        index = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def next(self) -> Token:
        token = self.peek()
        if token.kind != EOF:
            self.index += 1
        return token

    def is_finished(self) -> bool:
        return self.peek().kind == EOF

    def error(self, expected: str, token: Optional[Token] = None) -> SpecSyntaxError:
        """Build an `expected X, found Y` error at `token` (default: the next token)."""
        token = token or self.peek()
        return SpecSyntaxError(
            f"expected {expected}, found {token.describe()}",
            token.line, token.column, self.source_name, token.value
        )

    def expect_punct(self, char: str) -> Token:
        token = self.peek()
        if not token.is_punct(char):
            raise self.error(f"`{char}`")
        return self.next()

    def expect_ident(self, expected: str = "identifier", word: Optional[str] = None) -> Token:
        token = self.peek()
        if token.kind != IDENT or (word is not None and token.value != word):
            raise self.error(expected if word is None else f"`{word}`")
        return self.next()

    def expect_string(self, expected: str = "string literal") -> Token:
        token = self.peek()
        if token.kind != STRING:
            raise self.error(expected)
        return self.next()

    def accept_punct(self, char: str) -> bool:
        """Consume the next token if it is `char`."""
        if self.peek().is_punct(char):
            self.next()
            return True
        return False
