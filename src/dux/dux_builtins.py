"""Built-in functions for Dux."""

import sys
from typing import Callable, Dict, List, TextIO

from dux.dux_value import (
    NIL, DuxArray, DuxBuiltin, DuxErrorValue, DuxInteger, DuxString, DuxValue
)


class DuxBuiltinFunctions:
    """
    The fixed table of Dux built-in functions.

    Built-ins never raise.  Misuse (wrong argument count, unsupported argument type)
    produces an error value that propagates like any other runtime error.
    """

    def __init__(self, output: TextIO | None = None) -> None:
        """
        Initialize the built-in functions.

        Args:
            output: Stream that `puts` writes to; defaults to standard output at call time
        """
        self._output = output

    def get_functions(self) -> Dict[str, Callable[[List[DuxValue]], DuxValue]]:
        """Return dictionary of built-in function implementations."""
        return {
            'len': self._builtin_len,
            'first': self._builtin_first,
            'last': self._builtin_last,
            'head': self._builtin_head,
            'tail': self._builtin_tail,
            'push': self._builtin_push,
            'puts': self._builtin_puts,
        }

    def create_builtin_objects(self) -> Dict[str, DuxBuiltin]:
        """Create first-class function values for every built-in."""
        return {name: DuxBuiltin(name, impl) for name, impl in self.get_functions().items()}

    @staticmethod
    def _wrong_argument_count(args: List[DuxValue], expected: int) -> DuxErrorValue | None:
        if len(args) != expected:
            return DuxErrorValue(f"wrong number of arguments. got={len(args)}, want={expected}")

        return None

    def _builtin_len(self, args: List[DuxValue]) -> DuxValue:
        """
        Implement len: the length of a string or an array.

        Strings are measured in characters, the unit `first` and `last` take, so a
        character outside ASCII counts once however many bytes it encodes to.
        """
        error = self._wrong_argument_count(args, 1)
        if error is not None:
            return error

        arg = args[0]
        if isinstance(arg, DuxString):
            return DuxInteger(len(arg.value))

        if isinstance(arg, DuxArray):
            return DuxInteger(len(arg.elements))

        return DuxErrorValue(f"argument to `len` not supported, got {arg.type_name()}")

    def _builtin_first(self, args: List[DuxValue]) -> DuxValue:
        """Implement first: the first element of an array or first character of a string."""
        error = self._wrong_argument_count(args, 1)
        if error is not None:
            return error

        arg = args[0]
        if isinstance(arg, DuxArray):
            return arg.elements[0] if arg.elements else NIL

        if isinstance(arg, DuxString):
            return DuxString(arg.value[0]) if arg.value else NIL

        return DuxErrorValue(f"argument to `first` must be ARRAY or STRING, got {arg.type_name()}")

    def _builtin_last(self, args: List[DuxValue]) -> DuxValue:
        """Implement last: the last element of an array or last character of a string."""
        error = self._wrong_argument_count(args, 1)
        if error is not None:
            return error

        arg = args[0]
        if isinstance(arg, DuxArray):
            return arg.elements[-1] if arg.elements else NIL

        if isinstance(arg, DuxString):
            return DuxString(arg.value[-1]) if arg.value else NIL

        return DuxErrorValue(f"argument to `last` must be ARRAY or STRING, got {arg.type_name()}")

    def _builtin_head(self, args: List[DuxValue]) -> DuxValue:
        """Implement head: a new array holding all but the last element."""
        error = self._wrong_argument_count(args, 1)
        if error is not None:
            return error

        arg = args[0]
        if not isinstance(arg, DuxArray):
            return DuxErrorValue(f"argument to `head` must be ARRAY, got {arg.type_name()}")

        if not arg.elements:
            return NIL

        return DuxArray(arg.elements[:-1])

    def _builtin_tail(self, args: List[DuxValue]) -> DuxValue:
        """Implement tail: a new array holding all but the first element."""
        error = self._wrong_argument_count(args, 1)
        if error is not None:
            return error

        arg = args[0]
        if not isinstance(arg, DuxArray):
            return DuxErrorValue(f"argument to `tail` must be ARRAY, got {arg.type_name()}")

        if not arg.elements:
            return NIL

        return DuxArray(arg.elements[1:])

    def _builtin_push(self, args: List[DuxValue]) -> DuxValue:
        """Implement push: a new array with one extra element at the end."""
        error = self._wrong_argument_count(args, 2)
        if error is not None:
            return error

        arg = args[0]
        if not isinstance(arg, DuxArray):
            return DuxErrorValue(f"argument to `push` must be ARRAY, got {arg.type_name()}")

        return DuxArray(arg.elements + (args[1],))

    def _builtin_puts(self, args: List[DuxValue]) -> DuxValue:
        """Implement puts: write each argument's rendering on its own line."""
        output = self._output if self._output is not None else sys.stdout
        for arg in args:
            output.write(arg.inspect() + "\n")

        return NIL
