"""
Token types for the expression lexer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Literals ---
    NUMBER = auto()  # 42, 3.14
    STRING = auto()  # "hello", 'hello'
    KEYWORD_LITERAL = auto()  # true, false, null, undefined

    # --- Names ---
    IDENTIFIER = auto()  # apple, $item, __args__
    THIS = auto()  # this

    # --- Operators ---
    OPERATOR = auto()  # + - == => += ...

    # --- Punctuation ---
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    DOT = auto()  # .
    COMMA = auto()  # ,
    SEMICOLON = auto()  # ;

    EOF = auto()


KEYWORD_LITERALS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}

PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}

# Longest first, so that '>>>=' wins over '>>' and '=>' over '='
OPERATORS: tuple[str, ...] = tuple(
    sorted(
        [
            ">>>=", ">>>", "===", "!==", "**=", "<<=", ">>=",
            "=>", "==", "!=", ">=", "<=", "&&", "||", "<<", ">>", "**",
            "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=",
            "+", "-", "*", "/", "%", "<", ">", "!", "~", "&", "|", "^", "=",
        ],
        key=len,
        reverse=True,
    )
)


@dataclass(frozen=True)
class Token:
    """A lexical token.

    Attributes:
        type: The kind of token
        lexeme: The exact source text of the token
        position: Character offset of the token in the source
        value: Decoded literal value for NUMBER, STRING and keyword literals
    """

    type: TokenType
    lexeme: str
    position: int
    value: Any = None

    def __str__(self) -> str:
        return f"{self.type.name}({self.lexeme!r})"
