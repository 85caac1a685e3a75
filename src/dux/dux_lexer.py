"""Lexer for Dux source text."""

from typing import Callable, ClassVar, Dict, Iterator, Set

from dux.dux_token import DuxToken, DuxTokenType, lookup_identifier


class DuxLexer:
    """
    Scans Dux source text one character at a time, producing tokens on demand.

    The lexer never raises: characters that cannot start a token produce ILLEGAL
    tokens, and once the input is exhausted every call returns an EOF token.
    To scan the same text again, construct a new lexer.
    """

    _WHITESPACE_CHARS: ClassVar[Set[str]] = set(" \t\n\r")
    _LETTER_CHARS: ClassVar[Set[str]] = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_?")
    _DIGIT_CHARS: ClassVar[Set[str]] = set("0123456789")

    _SINGLE_CHAR_TOKENS: ClassVar[Dict[str, DuxTokenType]] = {
        ';': DuxTokenType.SEMICOLON,
        ':': DuxTokenType.COLON,
        ',': DuxTokenType.COMMA,
        '(': DuxTokenType.LPAREN,
        ')': DuxTokenType.RPAREN,
        '{': DuxTokenType.LBRACE,
        '}': DuxTokenType.RBRACE,
        '[': DuxTokenType.LBRACKET,
        ']': DuxTokenType.RBRACKET,
        '+': DuxTokenType.PLUS,
        '-': DuxTokenType.MINUS,
        '/': DuxTokenType.SLASH,
        '*': DuxTokenType.ASTERISK,
        '<': DuxTokenType.LT,
        '>': DuxTokenType.GT,
    }

    def __init__(self, source: str) -> None:
        """
        Initialize the lexer over a complete piece of source text.

        Args:
            source: The text to scan
        """
        self._input = source
        self._input_len = len(source)
        self._position = 0

        self._lexing_functions: Dict[str, Callable[[int], DuxToken]] = {
            '=': self._read_equals,
            '!': self._read_bang,
            '"': self._read_string,
        }

    def __iter__(self) -> Iterator[DuxToken]:
        """Yield the remaining tokens, stopping before EOF."""
        while True:
            token = self.next_token()
            if token.type == DuxTokenType.EOF:
                return

            yield token

    def next_token(self) -> DuxToken:
        """
        Scan and return the next token, advancing past it.

        Returns:
            The next token; EOF once the input is exhausted
        """
        self._skip_whitespace()

        start = self._position
        if start >= self._input_len:
            return DuxToken(DuxTokenType.EOF, "", start)

        ch = self._input[start]

        token_type = self._SINGLE_CHAR_TOKENS.get(ch)
        if token_type is not None:
            self._position += 1
            return DuxToken(token_type, ch, start)

        lexing_function = self._lexing_functions.get(ch)
        if lexing_function is not None:
            return lexing_function(start)

        if ch in self._LETTER_CHARS:
            literal = self._read_run(self._LETTER_CHARS)
            return DuxToken(lookup_identifier(literal), literal, start)

        if ch in self._DIGIT_CHARS:
            literal = self._read_run(self._DIGIT_CHARS)
            return DuxToken(DuxTokenType.INT, literal, start)

        self._position += 1
        return DuxToken(DuxTokenType.ILLEGAL, ch, start)

    def _skip_whitespace(self) -> None:
        while self._position < self._input_len and self._input[self._position] in self._WHITESPACE_CHARS:
            self._position += 1

    def _peek_char(self) -> str:
        """Return the character after the current one, or an empty string at end of input."""
        next_position = self._position + 1
        if next_position >= self._input_len:
            return ""

        return self._input[next_position]

    def _read_run(self, allowed: Set[str]) -> str:
        """Consume the longest run of characters drawn from the allowed set."""
        start = self._position
        while self._position < self._input_len and self._input[self._position] in allowed:
            self._position += 1

        return self._input[start:self._position]

    def _read_equals(self, start: int) -> DuxToken:
        if self._peek_char() == '=':
            self._position += 2
            return DuxToken(DuxTokenType.EQ, "==", start)

        self._position += 1
        return DuxToken(DuxTokenType.ASSIGN, "=", start)

    def _read_bang(self, start: int) -> DuxToken:
        if self._peek_char() == '=':
            self._position += 2
            return DuxToken(DuxTokenType.NOT_EQ, "!=", start)

        self._position += 1
        return DuxToken(DuxTokenType.BANG, "!", start)

    def _read_string(self, start: int) -> DuxToken:
        """
        Read a double-quoted string literal.

        The literal is the raw text between the quotes.  An unterminated string runs
        to the end of the input.
        """
        self._position += 1
        content_start = self._position
        while self._position < self._input_len and self._input[self._position] != '"':
            self._position += 1

        literal = self._input[content_start:self._position]

        # Step over the closing quote if there is one
        if self._position < self._input_len:
            self._position += 1

        return DuxToken(DuxTokenType.STRING, literal, start)
