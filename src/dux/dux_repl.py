"""Interactive read-eval-print loop for Dux."""

import logging
from typing import TextIO

from dux.dux import Dux
from dux.dux_ast import DuxLetStatement
from dux.dux_lexer import DuxLexer
from dux.dux_value import DuxErrorValue


PROMPT = ">> "


class DuxRepl:
    """
    Reads one line at a time, evaluates it, and writes the result.

    All lines share a single interpreter, so bindings persist for the whole session.
    """

    def __init__(
        self,
        input_stream: TextIO,
        output_stream: TextIO,
        max_depth: int = 100,
        show_tokens: bool = False
    ) -> None:
        """
        Initialize the REPL.

        Args:
            input_stream: Where lines are read from
            output_stream: Where prompts, results and `puts` output are written
            max_depth: Maximum depth of nested function calls
            show_tokens: If True, print each line's tokens instead of evaluating it
        """
        self._input = input_stream
        self._output = output_stream
        self._show_tokens = show_tokens
        self._logger = logging.getLogger("DuxRepl")
        self.dux = Dux(max_depth=max_depth, output=output_stream)

    def start(self) -> None:
        """Run the loop until the input is exhausted."""
        while True:
            self._output.write(PROMPT)
            self._output.flush()

            line = self._input.readline()
            if not line:
                self._output.write("\n")
                return

            self._logger.debug("Read line: %r", line)

            if self._show_tokens:
                self._print_tokens(line)
                continue

            self.process_line(line)

    def process_line(self, line: str) -> None:
        """
        Parse and evaluate one line, writing the result or the syntax errors.

        Args:
            line: Source text to evaluate
        """
        program, errors = self.dux.parse(line)
        if errors:
            self._print_parser_errors(errors)
            return

        result = self.dux.evaluator.evaluate(program, self.dux.environment)

        # A line that ends by binding a name has nothing worth echoing, unless it failed
        if not isinstance(result, DuxErrorValue) and (
            not program.statements or isinstance(program.statements[-1], DuxLetStatement)
        ):
            return

        self._output.write(result.inspect() + "\n")

    def _print_tokens(self, line: str) -> None:
        for token in DuxLexer(line):
            self._output.write(f"{token!r}\n")

    def _print_parser_errors(self, errors: list[str]) -> None:
        for message in errors:
            self._output.write(f"\t{message}\n")
