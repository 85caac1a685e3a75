"""Token types and token representation for Dux source text."""

from dataclasses import dataclass
from enum import Enum


class DuxTokenType(Enum):
    """Token types for Dux source text.

    The enum values are the names used when a token category appears in a syntax error.
    """
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    SLASH = "/"
    ASTERISK = "*"
    BANG = "!"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"
    TRUE = "TRUE"
    FALSE = "FALSE"


KEYWORDS = {
    "fn": DuxTokenType.FUNCTION,
    "let": DuxTokenType.LET,
    "if": DuxTokenType.IF,
    "else": DuxTokenType.ELSE,
    "return": DuxTokenType.RETURN,
    "true": DuxTokenType.TRUE,
    "false": DuxTokenType.FALSE,
}


def lookup_identifier(identifier: str) -> DuxTokenType:
    """
    Classify an identifier run as a keyword or a plain identifier.

    Args:
        identifier: The identifier text

    Returns:
        The keyword token type, or IDENT if the text is not a keyword
    """
    return KEYWORDS.get(identifier, DuxTokenType.IDENT)


@dataclass(frozen=True)
class DuxToken:
    """Represents a single token in Dux source text."""
    type: DuxTokenType
    literal: str
    position: int = 0

    def __repr__(self) -> str:
        return f"DuxToken({self.type.name}, {self.literal!r}, pos={self.position})"
