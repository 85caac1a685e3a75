"""Main Dux interpreter class."""

import logging
from typing import Any, List, TextIO, Tuple

from dux.dux_ast import DuxProgram
from dux.dux_builtins import DuxBuiltinFunctions
from dux.dux_environment import DuxEnvironment
from dux.dux_error import DuxEvalError, DuxParseError
from dux.dux_evaluator import DuxEvaluator
from dux.dux_parser import parse
from dux.dux_value import DuxErrorValue, DuxValue


class Dux:
    """
    Dux interpreter.

    Keeps one global environment across calls, so `let` bindings made by one call to
    `evaluate` are visible to the next, the way a REPL session behaves.
    """

    def __init__(self, max_depth: int = 100, output: TextIO | None = None):
        """
        Initialize the interpreter.

        Args:
            max_depth: Maximum depth of nested function calls
            output: Stream that `puts` writes to; standard output if None
        """
        self.max_depth = max_depth
        self._logger = logging.getLogger("Dux")
        builtins = DuxBuiltinFunctions(output).create_builtin_objects()
        self.evaluator = DuxEvaluator(max_depth=max_depth, builtins=builtins)
        self.environment = DuxEnvironment()

    def reset(self) -> None:
        """Discard all global bindings."""
        self.environment = DuxEnvironment()

    def parse(self, source: str) -> Tuple[DuxProgram, List[str]]:
        """
        Parse source text without evaluating it.

        Args:
            source: Dux source text

        Returns:
            Tuple of (program, syntax error messages)
        """
        return parse(source)

    def run(self, source: str) -> DuxValue:
        """
        Parse and evaluate source text in the persistent environment.

        Args:
            source: Dux source text

        Returns:
            The final value, which is a DuxErrorValue if evaluation failed

        Raises:
            DuxParseError: If the source contains syntax errors, including nesting
                deeper than the parser accepts
        """
        program, errors = parse(source)
        if errors:
            raise DuxParseError(errors)

        return self.evaluator.evaluate(program, self.environment)

    def evaluate(self, source: str) -> Any:
        """
        Evaluate Dux source text and convert the result to a Python value.

        Args:
            source: Dux source text

        Returns:
            The result converted to Python types (int, bool, None, str, list, dict)

        Raises:
            DuxParseError: If the source contains syntax errors
            DuxEvalError: If evaluation produced a runtime error
        """
        result = self.run(source)
        if isinstance(result, DuxErrorValue):
            self._logger.debug("Evaluation failed: %s", result.message)
            raise DuxEvalError(result.message)

        return result.to_python()

    def evaluate_and_format(self, source: str) -> str:
        """
        Evaluate Dux source text and return the display rendering of the result.

        Runtime errors are rendered like any other value, as `ERROR <message>`.

        Args:
            source: Dux source text

        Returns:
            Display rendering of the final value

        Raises:
            DuxParseError: If the source contains syntax errors
        """
        return self.run(source).inspect()
