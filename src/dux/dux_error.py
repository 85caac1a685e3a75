"""Exception classes for Dux hosts.

Inside the evaluator a runtime failure is an ordinary value (DuxErrorValue) that
propagates to the top of the evaluation.  These exceptions are raised only at the
boundary where a host asks for a Python result.
"""

from typing import List


class DuxError(Exception):
    """Base exception for Dux errors with optional context information."""

    def __init__(self, message: str, context: str | None = None, suggestion: str | None = None):
        """
        Initialize the error.

        Args:
            message: Core error description
            context: Additional context information
            suggestion: Suggestion for fixing the error
        """
        self.message = message
        self.context = context
        self.suggestion = suggestion

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        """Format the error message with all available details."""
        parts = [f"Error: {self.message}"]

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")

        return "\n".join(parts)


class DuxParseError(DuxError):
    """Source text contained syntax errors; every message the parser recorded is kept."""

    def __init__(self, errors: List[str]):
        """
        Initialize the parse error.

        Args:
            errors: The parser's error messages, in the order they were found
        """
        self.errors = list(errors)
        plural = "error" if len(self.errors) == 1 else "errors"
        super().__init__(
            message=f"{len(self.errors)} syntax {plural}",
            context="\n".join(self.errors)
        )


class DuxEvalError(DuxError):
    """Evaluation finished with a runtime error, or the host failed while evaluating."""
