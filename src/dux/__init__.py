"""Dux - a small dynamically typed scripting language with a tree-walking interpreter."""

# Main API
from dux.dux import Dux

# Exceptions (for hosts)
from dux.dux_error import DuxError, DuxParseError, DuxEvalError

# Value types
from dux.dux_value import (
    DuxValue, DuxInteger, DuxBoolean, DuxNil, DuxString, DuxArray, DuxHash, DuxHashKey, DuxHashPair,
    DuxFunction, DuxBuiltin, DuxReturnValue, DuxErrorValue, NIL, TRUE, FALSE
)

# Lower-level components (for advanced usage)
from dux.dux_token import DuxToken, DuxTokenType
from dux.dux_lexer import DuxLexer
from dux.dux_parser import DuxParser, parse
from dux.dux_evaluator import DuxEvaluator, is_truthy
from dux.dux_environment import DuxEnvironment
from dux.dux_builtins import DuxBuiltinFunctions


__all__ = [
    # Main API
    "Dux",

    # Exceptions
    "DuxError", "DuxParseError", "DuxEvalError",

    # Value types
    "DuxValue", "DuxInteger", "DuxBoolean", "DuxNil", "DuxString", "DuxArray", "DuxHash", "DuxHashKey",
    "DuxHashPair", "DuxFunction", "DuxBuiltin", "DuxReturnValue", "DuxErrorValue", "NIL", "TRUE", "FALSE",

    # Lower-level components
    "DuxToken", "DuxTokenType", "DuxLexer", "DuxParser", "parse", "DuxEvaluator", "is_truthy",
    "DuxEnvironment", "DuxBuiltinFunctions"
]
