"""
Parser for the expression language.

Builds an AST from the token stream using precedence climbing for binary
operators. Besides the usual JavaScript-style operators the language has a
``=>`` operator with the lowest precedence of all, which separates a match
expression from the command it triggers::

    eat($food) => write(food)

Example:
    >>> tree = parse_expression("a * (b + 3)")
    >>> tree.operator
    '*'
"""

from __future__ import annotations

from ifcore.errors import CompileError, ExpressionSyntaxError, rethrow_compile_error
from ifcore.engine.path import PossiblePath, path_to_string
from ifcore.script.ast import (
    ArrayExpression,
    AssignmentExpression,
    BinaryExpression,
    CallExpression,
    Compound,
    Expression,
    Identifier,
    Literal,
    MemberExpression,
    ThisExpression,
    UnaryExpression,
)
from ifcore.script.lexer import Lexer
from ifcore.script.tokens import Token, TokenType

MATCH_OPERATOR = "=>"

ASSIGNMENT_OPERATORS = frozenset(
    {"=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", ">>=", ">>>=", "&=", "^=", "|="}
)

UNARY_OPERATORS = frozenset({"-", "!", "~", "+"})


class Parser:
    """Recursive descent parser producing an AST for one expression."""

    # Binary operator precedence (higher binds tighter)
    PRECEDENCE = {
        MATCH_OPERATOR: 1,
        **{op: 2 for op in ASSIGNMENT_OPERATORS},
        "||": 3,
        "&&": 4,
        "|": 5,
        "^": 6,
        "&": 7,
        "==": 8,
        "!=": 8,
        "===": 8,
        "!==": 8,
        "<": 9,
        ">": 9,
        "<=": 9,
        ">=": 9,
        "<<": 10,
        ">>": 10,
        ">>>": 10,
        "+": 11,
        "-": 11,
        "*": 12,
        "/": 12,
        "%": 12,
        "**": 13,
    }

    RIGHT_ASSOCIATIVE = ASSIGNMENT_OPERATORS

    def __init__(self, source: str):
        self.source = source
        self.tokens = Lexer(source).tokenize()
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type is token_type

    def _match(self, token_type: TokenType) -> bool:
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, what: str) -> Token:
        if not self._check(token_type):
            token = self._current()
            found = token.lexeme or "end of expression"
            raise ExpressionSyntaxError(f"Expected {what} but found {found!r}", token.position)
        return self._advance()

    def _error(self, message: str) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(message, self._current().position)

    # =========================================================================
    # Grammar
    # =========================================================================

    def parse(self) -> Expression:
        """Parse the whole source as a single (possibly compound) expression."""
        body = []
        while not self._check(TokenType.EOF):
            if self._match(TokenType.SEMICOLON):
                continue
            body.append(self._parse_binary_expr(1))
            if not self._check(TokenType.EOF) and not self._check(TokenType.SEMICOLON):
                token = self._current()
                raise ExpressionSyntaxError(f"Unexpected {token.lexeme!r}", token.position)

        if not body:
            raise ExpressionSyntaxError("Empty expression", 0)
        if len(body) == 1:
            return body[0]
        return Compound(tuple(body))

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        left = self._parse_unary_expr()

        while True:
            op_token = self._current()
            if op_token.type is not TokenType.OPERATOR:
                break
            precedence = self.PRECEDENCE.get(op_token.lexeme)
            if precedence is None or precedence < min_precedence:
                break

            self._advance()
            operator = op_token.lexeme
            next_precedence = precedence if operator in self.RIGHT_ASSOCIATIVE else precedence + 1
            right = self._parse_binary_expr(next_precedence)

            if operator in ASSIGNMENT_OPERATORS:
                if not isinstance(left, (Identifier, MemberExpression)):
                    raise ExpressionSyntaxError(
                        "Invalid left-hand side in assignment", op_token.position
                    )
                left = AssignmentExpression(operator, left, right)
            else:
                left = BinaryExpression(operator, left, right)

        return left

    def _parse_unary_expr(self) -> Expression:
        token = self._current()
        if token.type is TokenType.OPERATOR and token.lexeme in UNARY_OPERATORS:
            self._advance()
            return UnaryExpression(token.lexeme, self._parse_unary_expr())
        return self._parse_postfix_expr()

    def _parse_postfix_expr(self) -> Expression:
        """Parse calls, member access and computed member access."""
        expr = self._parse_primary_expr()

        while True:
            if self._match(TokenType.LPAREN):
                args = self._parse_arguments(TokenType.RPAREN, "')'")
                expr = CallExpression(expr, args)
            elif self._match(TokenType.DOT):
                name = self._expect(TokenType.IDENTIFIER, "a property name")
                expr = MemberExpression(expr, Identifier(name.lexeme), computed=False)
            elif self._match(TokenType.LBRACKET):
                prop = self._parse_binary_expr(1)
                self._expect(TokenType.RBRACKET, "']'")
                expr = MemberExpression(expr, prop, computed=True)
            else:
                return expr

    def _parse_arguments(self, closing: TokenType, what: str) -> tuple[Expression, ...]:
        args = []
        if self._match(closing):
            return ()
        while True:
            args.append(self._parse_binary_expr(1))
            if self._match(closing):
                return tuple(args)
            self._expect(TokenType.COMMA, f"',' or {what}")

    def _parse_primary_expr(self) -> Expression:
        token = self._current()

        if token.type in (TokenType.NUMBER, TokenType.STRING, TokenType.KEYWORD_LITERAL):
            self._advance()
            return Literal(token.value, token.lexeme)
        if token.type is TokenType.IDENTIFIER:
            self._advance()
            return Identifier(token.lexeme)
        if token.type is TokenType.THIS:
            self._advance()
            return ThisExpression()
        if self._match(TokenType.LPAREN):
            expr = self._parse_binary_expr(1)
            self._expect(TokenType.RPAREN, "')'")
            return expr
        if self._match(TokenType.LBRACKET):
            return ArrayExpression(self._parse_arguments(TokenType.RBRACKET, "']'"))

        if token.type is TokenType.EOF:
            raise self._error("Unexpected end of expression")
        raise self._error(f"Unexpected {token.lexeme!r}")


def parse_expression(source: str) -> Expression:
    """Parse source text into an AST, raising ExpressionSyntaxError."""
    return Parser(source).parse()


def parse_to_tree(source: str, path: PossiblePath = None) -> Expression:
    """Parse source text, annotating syntax errors with the source and path."""
    try:
        return parse_expression(source)
    except CompileError as e:
        rethrow_compile_error(source, e, path_to_string(path) or None)
