"""Operator-precedence (Pratt) parser for Dux source text."""

from enum import IntEnum
import logging
from typing import Callable, Dict, List, Tuple

from dux.dux_ast import (
    DuxArrayLiteral, DuxBlockStatement, DuxBooleanLiteral, DuxCallExpression, DuxExpression,
    DuxExpressionStatement, DuxFunctionLiteral, DuxHashLiteral, DuxIdentifier, DuxIfExpression,
    DuxIndexExpression, DuxInfixExpression, DuxIntegerLiteral, DuxLetStatement, DuxPrefixExpression,
    DuxProgram, DuxReturnStatement, DuxStatement, DuxStringLiteral
)
from dux.dux_lexer import DuxLexer
from dux.dux_token import DuxToken, DuxTokenType


INT64_MAX = 2**63 - 1

# Deepest expression nesting accepted before parsing is abandoned
MAX_NESTING_DEPTH = 100


class DuxPrecedence(IntEnum):
    """Binding power of operators, lowest first."""
    LOWEST = 1
    EQUALS = 2
    LESSGREATER = 3
    SUM = 4
    PRODUCT = 5
    PREFIX = 6
    CALL = 7


PRECEDENCES: Dict[DuxTokenType, DuxPrecedence] = {
    DuxTokenType.EQ: DuxPrecedence.EQUALS,
    DuxTokenType.NOT_EQ: DuxPrecedence.EQUALS,
    DuxTokenType.LT: DuxPrecedence.LESSGREATER,
    DuxTokenType.GT: DuxPrecedence.LESSGREATER,
    DuxTokenType.PLUS: DuxPrecedence.SUM,
    DuxTokenType.MINUS: DuxPrecedence.SUM,
    DuxTokenType.ASTERISK: DuxPrecedence.PRODUCT,
    DuxTokenType.SLASH: DuxPrecedence.PRODUCT,
    DuxTokenType.LPAREN: DuxPrecedence.CALL,
    DuxTokenType.LBRACKET: DuxPrecedence.CALL,
}


PrefixParseFn = Callable[[], DuxExpression | None]
InfixParseFn = Callable[[DuxExpression], DuxExpression | None]


class DuxParser:
    """
    Parses a token stream into a DuxProgram.

    The parser never raises on malformed input.  Each failure appends a message to
    `errors` and the statement being parsed is dropped; parsing then carries on with
    the next token, so a single pass reports as many problems as it can find.
    """

    def __init__(self, lexer: DuxLexer) -> None:
        """
        Initialize the parser and prime the current and peek tokens.

        Args:
            lexer: Lexer supplying the tokens to parse
        """
        self._lexer = lexer
        self._logger = logging.getLogger("DuxParser")
        self.errors: List[str] = []
        self._nesting_depth = 0
        self._nesting_exceeded = False

        self._prefix_parse_fns: Dict[DuxTokenType, PrefixParseFn] = {
            DuxTokenType.IDENT: self._parse_identifier,
            DuxTokenType.INT: self._parse_integer_literal,
            DuxTokenType.STRING: self._parse_string_literal,
            DuxTokenType.TRUE: self._parse_boolean,
            DuxTokenType.FALSE: self._parse_boolean,
            DuxTokenType.BANG: self._parse_prefix_expression,
            DuxTokenType.MINUS: self._parse_prefix_expression,
            DuxTokenType.LPAREN: self._parse_grouped_expression,
            DuxTokenType.IF: self._parse_if_expression,
            DuxTokenType.FUNCTION: self._parse_function_literal,
            DuxTokenType.LBRACKET: self._parse_array_literal,
            DuxTokenType.LBRACE: self._parse_hash_literal,
        }

        self._infix_parse_fns: Dict[DuxTokenType, InfixParseFn] = {
            DuxTokenType.PLUS: self._parse_infix_expression,
            DuxTokenType.MINUS: self._parse_infix_expression,
            DuxTokenType.ASTERISK: self._parse_infix_expression,
            DuxTokenType.SLASH: self._parse_infix_expression,
            DuxTokenType.EQ: self._parse_infix_expression,
            DuxTokenType.NOT_EQ: self._parse_infix_expression,
            DuxTokenType.LT: self._parse_infix_expression,
            DuxTokenType.GT: self._parse_infix_expression,
            DuxTokenType.LPAREN: self._parse_call_expression,
            DuxTokenType.LBRACKET: self._parse_index_expression,
        }

        self.current_token: DuxToken = lexer.next_token()
        self.peek_token: DuxToken = lexer.next_token()

    def parse_program(self) -> DuxProgram:
        """
        Parse the whole token stream.

        Returns:
            The program built from every statement that parsed successfully
        """
        first_token = self.current_token
        statements: List[DuxStatement] = []

        while self.current_token.type != DuxTokenType.EOF:
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)

            self._next_token()

        if self.errors:
            self._logger.debug("Parsed %d statements with %d errors", len(statements), len(self.errors))

        return DuxProgram(first_token, tuple(statements))

    def _next_token(self) -> None:
        self.current_token = self.peek_token
        self.peek_token = self._lexer.next_token()

    def _current_token_is(self, token_type: DuxTokenType) -> bool:
        return self.current_token.type == token_type

    def _peek_token_is(self, token_type: DuxTokenType) -> bool:
        return self.peek_token.type == token_type

    def _expect_peek(self, token_type: DuxTokenType) -> bool:
        """
        Advance if the peek token has the expected type, otherwise record an error.

        The parser does not move past an unexpected token.

        Args:
            token_type: The token type that must come next

        Returns:
            True if the token matched and was consumed
        """
        if self._peek_token_is(token_type):
            self._next_token()
            return True

        self._peek_error(token_type)
        return False

    def _peek_error(self, token_type: DuxTokenType) -> None:
        # Input was skipped after a nesting failure, so a missing delimiter is expected
        if self._nesting_exceeded:
            return

        self.errors.append(
            f"expected next token to be {token_type.value}, got {self.peek_token.type.value} instead"
        )

    def _no_prefix_parse_fn_error(self, token_type: DuxTokenType) -> None:
        self.errors.append(f"no prefix parse function for {token_type.value} found")

    def _peek_precedence(self) -> DuxPrecedence:
        return PRECEDENCES.get(self.peek_token.type, DuxPrecedence.LOWEST)

    def _current_precedence(self) -> DuxPrecedence:
        return PRECEDENCES.get(self.current_token.type, DuxPrecedence.LOWEST)

    def _skip_semicolons(self) -> None:
        while self._peek_token_is(DuxTokenType.SEMICOLON):
            self._next_token()

    def _parse_statement(self) -> DuxStatement | None:
        if self.current_token.type == DuxTokenType.LET:
            return self._parse_let_statement()

        if self.current_token.type == DuxTokenType.RETURN:
            return self._parse_return_statement()

        return self._parse_expression_statement()

    def _parse_let_statement(self) -> DuxLetStatement | None:
        """Parse `let <identifier> = <expression>;`."""
        token = self.current_token

        if not self._expect_peek(DuxTokenType.IDENT):
            return None

        name = DuxIdentifier(self.current_token, self.current_token.literal)

        if not self._expect_peek(DuxTokenType.ASSIGN):
            return None

        self._next_token()
        value = self._parse_expression(DuxPrecedence.LOWEST)
        if value is None:
            return None

        self._skip_semicolons()
        return DuxLetStatement(token, name, value)

    def _parse_return_statement(self) -> DuxReturnStatement | None:
        """Parse `return <expression>;`."""
        token = self.current_token
        self._next_token()

        return_value = self._parse_expression(DuxPrecedence.LOWEST)
        if return_value is None:
            return None

        self._skip_semicolons()
        return DuxReturnStatement(token, return_value)

    def _parse_expression_statement(self) -> DuxExpressionStatement | None:
        token = self.current_token

        expression = self._parse_expression(DuxPrecedence.LOWEST)
        if expression is None:
            return None

        if self._peek_token_is(DuxTokenType.SEMICOLON):
            self._next_token()

        return DuxExpressionStatement(token, expression)

    def _parse_expression(self, precedence: DuxPrecedence) -> DuxExpression | None:
        """
        Parse an expression whose operators all bind tighter than `precedence`.

        Parses one prefix expression, then keeps folding infix continuations onto it
        while the next operator binds tighter than the threshold.  Operators of equal
        precedence therefore associate to the left.

        Args:
            precedence: Minimum binding power an infix operator needs to be consumed

        Returns:
            The parsed expression, or None if parsing failed
        """
        if self._nesting_depth >= MAX_NESTING_DEPTH:
            self._abandon_nesting()
            return None

        prefix = self._prefix_parse_fns.get(self.current_token.type)
        if prefix is None:
            self._no_prefix_parse_fn_error(self.current_token.type)
            return None

        self._nesting_depth += 1
        try:
            left = prefix()

            while left is not None and not self._peek_token_is(DuxTokenType.SEMICOLON) \
                    and precedence < self._peek_precedence():
                infix = self._infix_parse_fns.get(self.peek_token.type)
                if infix is None:
                    return left

                self._next_token()
                left = infix(left)

            return left

        finally:
            self._nesting_depth -= 1

    def _abandon_nesting(self) -> None:
        """
        Give up on input nested deeper than MAX_NESTING_DEPTH.

        One error is recorded and the rest of the input is skipped, so every enclosing
        parse function unwinds at EOF without reporting anything further.
        """
        if not self._nesting_exceeded:
            self._nesting_exceeded = True
            self.errors.append("expression nested too deeply")
            self._logger.debug("Abandoned parsing at nesting depth %d", self._nesting_depth)

        while not self._current_token_is(DuxTokenType.EOF):
            self._next_token()

    def _parse_identifier(self) -> DuxExpression:
        return DuxIdentifier(self.current_token, self.current_token.literal)

    def _parse_integer_literal(self) -> DuxExpression | None:
        token = self.current_token
        value = int(token.literal)
        if value > INT64_MAX:
            self.errors.append(f'could not parse "{token.literal}" as integer')
            return None

        return DuxIntegerLiteral(token, value)

    def _parse_string_literal(self) -> DuxExpression:
        return DuxStringLiteral(self.current_token, self.current_token.literal)

    def _parse_boolean(self) -> DuxExpression:
        return DuxBooleanLiteral(self.current_token, self._current_token_is(DuxTokenType.TRUE))

    def _parse_prefix_expression(self) -> DuxExpression | None:
        token = self.current_token
        self._next_token()

        right = self._parse_expression(DuxPrecedence.PREFIX)
        if right is None:
            return None

        return DuxPrefixExpression(token, token.literal, right)

    def _parse_infix_expression(self, left: DuxExpression) -> DuxExpression | None:
        token = self.current_token
        precedence = self._current_precedence()
        self._next_token()

        right = self._parse_expression(precedence)
        if right is None:
            return None

        return DuxInfixExpression(token, left, token.literal, right)

    def _parse_grouped_expression(self) -> DuxExpression | None:
        self._next_token()

        expression = self._parse_expression(DuxPrecedence.LOWEST)
        if expression is None:
            return None

        if not self._expect_peek(DuxTokenType.RPAREN):
            return None

        return expression

    def _parse_if_expression(self) -> DuxExpression | None:
        """Parse `if (<condition>) { ... }` with an optional `else { ... }`."""
        token = self.current_token

        if not self._expect_peek(DuxTokenType.LPAREN):
            return None

        self._next_token()
        condition = self._parse_expression(DuxPrecedence.LOWEST)
        if condition is None:
            return None

        if not self._expect_peek(DuxTokenType.RPAREN):
            return None

        if not self._expect_peek(DuxTokenType.LBRACE):
            return None

        consequence = self._parse_block_statement()

        alternative = None
        if self._peek_token_is(DuxTokenType.ELSE):
            self._next_token()

            if not self._expect_peek(DuxTokenType.LBRACE):
                return None

            alternative = self._parse_block_statement()

        return DuxIfExpression(token, condition, consequence, alternative)

    def _parse_block_statement(self) -> DuxBlockStatement:
        """
        Parse statements up to the closing brace.

        The current token is the opening brace on entry and the closing brace (or EOF)
        on exit.
        """
        token = self.current_token
        statements: List[DuxStatement] = []

        self._next_token()

        while not self._current_token_is(DuxTokenType.RBRACE) and not self._current_token_is(DuxTokenType.EOF):
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)

            self._next_token()

        if self._current_token_is(DuxTokenType.EOF) and not self._nesting_exceeded:
            self.errors.append(
                f"expected next token to be {DuxTokenType.RBRACE.value}, got {DuxTokenType.EOF.value} instead"
            )

        return DuxBlockStatement(token, tuple(statements))

    def _parse_function_literal(self) -> DuxExpression | None:
        """Parse `fn(<parameters>) { ... }`."""
        token = self.current_token

        if not self._expect_peek(DuxTokenType.LPAREN):
            return None

        parameters = self._parse_function_parameters()
        if parameters is None:
            return None

        if not self._expect_peek(DuxTokenType.LBRACE):
            return None

        body = self._parse_block_statement()
        return DuxFunctionLiteral(token, parameters, body)

    def _parse_function_parameters(self) -> Tuple[DuxIdentifier, ...] | None:
        parameters: List[DuxIdentifier] = []

        if self._peek_token_is(DuxTokenType.RPAREN):
            self._next_token()
            return ()

        if not self._expect_peek(DuxTokenType.IDENT):
            return None

        parameters.append(DuxIdentifier(self.current_token, self.current_token.literal))

        while self._peek_token_is(DuxTokenType.COMMA):
            self._next_token()
            if not self._expect_peek(DuxTokenType.IDENT):
                return None

            parameters.append(DuxIdentifier(self.current_token, self.current_token.literal))

        if not self._expect_peek(DuxTokenType.RPAREN):
            return None

        return tuple(parameters)

    def _parse_expression_list(self, end: DuxTokenType) -> Tuple[DuxExpression, ...] | None:
        """
        Parse a comma-separated list of expressions terminated by `end`.

        Args:
            end: The closing delimiter token type

        Returns:
            The parsed expressions, or None if any element failed to parse
        """
        if self._peek_token_is(end):
            self._next_token()
            return ()

        expressions: List[DuxExpression] = []

        self._next_token()
        expression = self._parse_expression(DuxPrecedence.LOWEST)
        if expression is None:
            return None

        expressions.append(expression)

        while self._peek_token_is(DuxTokenType.COMMA):
            self._next_token()
            self._next_token()
            expression = self._parse_expression(DuxPrecedence.LOWEST)
            if expression is None:
                return None

            expressions.append(expression)

        if not self._expect_peek(end):
            return None

        return tuple(expressions)

    def _parse_call_expression(self, function: DuxExpression) -> DuxExpression | None:
        token = self.current_token
        arguments = self._parse_expression_list(DuxTokenType.RPAREN)
        if arguments is None:
            return None

        return DuxCallExpression(token, function, arguments)

    def _parse_array_literal(self) -> DuxExpression | None:
        token = self.current_token
        elements = self._parse_expression_list(DuxTokenType.RBRACKET)
        if elements is None:
            return None

        return DuxArrayLiteral(token, elements)

    def _parse_index_expression(self, left: DuxExpression) -> DuxExpression | None:
        token = self.current_token
        self._next_token()

        index = self._parse_expression(DuxPrecedence.LOWEST)
        if index is None:
            return None

        if not self._expect_peek(DuxTokenType.RBRACKET):
            return None

        return DuxIndexExpression(token, left, index)

    def _parse_hash_literal(self) -> DuxExpression | None:
        """Parse `{<key>: <value>, ...}`."""
        token = self.current_token
        pairs: List[Tuple[DuxExpression, DuxExpression]] = []

        while not self._peek_token_is(DuxTokenType.RBRACE):
            self._next_token()
            key = self._parse_expression(DuxPrecedence.LOWEST)
            if key is None:
                return None

            if not self._expect_peek(DuxTokenType.COLON):
                return None

            self._next_token()
            value = self._parse_expression(DuxPrecedence.LOWEST)
            if value is None:
                return None

            pairs.append((key, value))

            if not self._peek_token_is(DuxTokenType.RBRACE) and not self._expect_peek(DuxTokenType.COMMA):
                return None

        if not self._expect_peek(DuxTokenType.RBRACE):
            return None

        return DuxHashLiteral(token, tuple(pairs))


def parse(source: str) -> Tuple[DuxProgram, List[str]]:
    """
    Parse source text into a program plus the syntax errors found along the way.

    Args:
        source: Dux source text

    Returns:
        Tuple of (program, error messages); the list is empty when parsing succeeded
    """
    parser = DuxParser(DuxLexer(source))
    program = parser.parse_program()
    return program, parser.errors
