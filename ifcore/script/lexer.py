"""
Lexer for the expression language.

Converts source text into a list of tokens for the parser.
Supports:
- Identifiers, including ``$``-prefixed capture names
- Integer and float literals
- Single- and double-quoted strings with escape sequences
- The keyword literals true/false/null/undefined and ``this``
- JavaScript-style operators, including the ``=>`` match operator
"""

from __future__ import annotations

from ifcore.errors import ExpressionSyntaxError
from ifcore.script.tokens import (
    KEYWORD_LITERALS,
    OPERATORS,
    PUNCTUATION,
    Token,
    TokenType,
)

ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class Lexer:
    """
    Tokenizer for expression source text.

    Usage:
        tokens = Lexer("write(apple.name)").tokenize()
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def _peek(self, offset: int = 0) -> str:
        """Look at the character at current position + offset."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return "\0"
        return self.source[idx]

    def _advance(self) -> str:
        ch = self._peek()
        self.pos += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def tokenize(self) -> list[Token]:
        """Scan the whole source, ending with an EOF token."""
        tokens = []
        while True:
            token = self._next_token()
            tokens.append(token)
            if token.type is TokenType.EOF:
                return tokens

    def _next_token(self) -> Token:
        while not self._is_at_end() and self._peek().isspace():
            self.pos += 1

        start = self.pos
        if self._is_at_end():
            return Token(TokenType.EOF, "", start)

        ch = self._peek()
        if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
            return self._scan_number()
        if ch in "\"'":
            return self._scan_string()
        if _is_identifier_start(ch):
            return self._scan_identifier()
        if ch in PUNCTUATION:
            self.pos += 1
            return Token(PUNCTUATION[ch], ch, start)
        for op in OPERATORS:
            if self.source.startswith(op, start):
                self.pos += len(op)
                return Token(TokenType.OPERATOR, op, start)

        raise ExpressionSyntaxError(f"Unexpected character {ch!r}", start)

    def _scan_number(self) -> Token:
        start = self.pos
        while self._peek().isdigit():
            self._advance()
        is_float = False
        if self._peek() == "." and self._peek(1).isdigit():
            is_float = True
            self._advance()
            while self._peek().isdigit():
                self._advance()
        if self._peek() in "eE" and (
            self._peek(1).isdigit()
            or (self._peek(1) in "+-" and self._peek(2).isdigit())
        ):
            is_float = True
            self._advance()
            if self._peek() in "+-":
                self._advance()
            while self._peek().isdigit():
                self._advance()
        if _is_identifier_start(self._peek()):
            raise ExpressionSyntaxError(
                f"Variable names cannot start with a number ({self.source[start:self.pos + 1]})",
                start,
            )

        lexeme = self.source[start:self.pos]
        value = float(lexeme) if is_float else int(lexeme)
        return Token(TokenType.NUMBER, lexeme, start, value)

    def _scan_string(self) -> Token:
        start = self.pos
        quote = self._advance()
        chars = []
        while True:
            if self._is_at_end():
                raise ExpressionSyntaxError(
                    f'Unclosed quote after "{"".join(chars)}"', start
                )
            ch = self._advance()
            if ch == quote:
                break
            if ch == "\\":
                escaped = self._advance()
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(ch)
        return Token(TokenType.STRING, self.source[start:self.pos], start, "".join(chars))

    def _scan_identifier(self) -> Token:
        start = self.pos
        while _is_identifier_part(self._peek()):
            self._advance()
        lexeme = self.source[start:self.pos]

        if lexeme in KEYWORD_LITERALS:
            return Token(TokenType.KEYWORD_LITERAL, lexeme, start, KEYWORD_LITERALS[lexeme])
        if lexeme == "this":
            return Token(TokenType.THIS, lexeme, start)
        return Token(TokenType.IDENTIFIER, lexeme, start)
