"""Dux value hierarchy - the runtime representation of everything a program computes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Tuple

from dux.dux_ast import DuxBlockStatement, DuxIdentifier

if TYPE_CHECKING:
    from dux.dux_environment import DuxEnvironment


INT64_MASK = 0xFFFFFFFFFFFFFFFF
INT64_SIGN_BIT = 0x8000000000000000

FNV_OFFSET_BASIS_64 = 0xcbf29ce484222325
FNV_PRIME_64 = 0x100000001b3


def wrap_int64(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    value &= INT64_MASK
    if value & INT64_SIGN_BIT:
        return value - (1 << 64)

    return value


def fnv1a_64(data: bytes) -> int:
    """Compute the 64-bit FNV-1a hash of a byte string."""
    result = FNV_OFFSET_BASIS_64
    for byte in data:
        result ^= byte
        result = (result * FNV_PRIME_64) & INT64_MASK

    return result


@dataclass(frozen=True)
class DuxHashKey:
    """
    Key used to store a value in a hash.

    The type name is part of the key, so values of different types never collide
    even when their 64-bit key values are equal.
    """
    type_name: str
    value: int


class DuxValue(ABC):
    """Abstract base class for all Dux runtime values."""

    @abstractmethod
    def type_name(self) -> str:
        """Return the Dux type name used in error messages."""

    @abstractmethod
    def inspect(self) -> str:
        """Return the display rendering of the value."""

    @abstractmethod
    def to_python(self) -> Any:
        """Convert to a Python value."""


class DuxHashable(ABC):
    """Mixin for values that can be used as hash keys."""

    @abstractmethod
    def hash_key(self) -> DuxHashKey:
        """Return the content-derived key for this value."""


@dataclass(frozen=True)
class DuxInteger(DuxValue, DuxHashable):
    """Represents a signed 64-bit integer."""
    value: int

    def type_name(self) -> str:
        return "INTEGER"

    def inspect(self) -> str:
        return str(self.value)

    def to_python(self) -> int:
        return self.value

    def hash_key(self) -> DuxHashKey:
        return DuxHashKey(self.type_name(), self.value & INT64_MASK)


@dataclass(frozen=True)
class DuxBoolean(DuxValue, DuxHashable):
    """Represents `true` or `false`."""
    value: bool

    def type_name(self) -> str:
        return "BOOLEAN"

    def inspect(self) -> str:
        return "true" if self.value else "false"

    def to_python(self) -> bool:
        return self.value

    def hash_key(self) -> DuxHashKey:
        return DuxHashKey(self.type_name(), 1 if self.value else 0)


@dataclass(frozen=True)
class DuxNil(DuxValue):
    """Represents the absence of a value."""

    def type_name(self) -> str:
        return "NIL"

    def inspect(self) -> str:
        return "nil"

    def to_python(self) -> None:
        return None


@dataclass(frozen=True)
class DuxString(DuxValue, DuxHashable):
    """Represents string values."""
    value: str

    def type_name(self) -> str:
        return "STRING"

    def inspect(self) -> str:
        return f'"{self.value}"'

    def to_python(self) -> str:
        return self.value

    def hash_key(self) -> DuxHashKey:
        return DuxHashKey(self.type_name(), fnv1a_64(self.value.encode("utf-8")))


@dataclass(frozen=True, eq=False)
class DuxArray(DuxValue):
    """Represents an ordered sequence of values.  Arrays are never modified in place."""
    elements: Tuple[DuxValue, ...] = ()

    def type_name(self) -> str:
        return "ARRAY"

    def inspect(self) -> str:
        return "[" + ", ".join(element.inspect() for element in self.elements) + "]"

    def to_python(self) -> List[Any]:
        return [element.to_python() for element in self.elements]


@dataclass(frozen=True)
class DuxHashPair:
    """The original key value and the value stored against it."""
    key: DuxValue
    value: DuxValue


@dataclass(frozen=True, eq=False)
class DuxHash(DuxValue):
    """Represents a mapping from hashable values to values."""
    pairs: Dict[DuxHashKey, DuxHashPair] = field(default_factory=dict)

    def type_name(self) -> str:
        return "HASH"

    def inspect(self) -> str:
        return "{" + ", ".join(f"{pair.key.inspect()}: {pair.value.inspect()}" for pair in self.pairs.values()) + "}"

    def to_python(self) -> Dict[Any, Any]:
        return {pair.key.to_python(): pair.value.to_python() for pair in self.pairs.values()}

    def get(self, key: DuxHashKey) -> DuxValue | None:
        """Look up the value stored against a key, or None if there isn't one."""
        pair = self.pairs.get(key)
        if pair is None:
            return None

        return pair.value


@dataclass(frozen=True, eq=False)
class DuxFunction(DuxValue):
    """
    Represents a user-defined function (closure).

    The environment is shared, not copied: bindings made in the defining scope after
    the function was created are visible when it runs.
    """
    parameters: Tuple[DuxIdentifier, ...]
    body: DuxBlockStatement
    env: 'DuxEnvironment'  # Annotation only, the environment module imports this one

    def type_name(self) -> str:
        return "FUNCTION"

    def inspect(self) -> str:
        params = ", ".join(str(parameter) for parameter in self.parameters)
        return f"fn({params}) {{ {self.body} }}"

    def to_python(self) -> 'DuxFunction':
        """Functions return themselves as Python values."""
        return self


@dataclass(frozen=True, eq=False)
class DuxBuiltin(DuxValue):
    """Represents a native function supplied by the interpreter."""
    name: str
    native_impl: Callable[[List[DuxValue]], DuxValue]

    def type_name(self) -> str:
        return "BUILTIN"

    def inspect(self) -> str:
        return "builtin function"

    def to_python(self) -> str:
        return self.name


@dataclass(frozen=True)
class DuxReturnValue(DuxValue):
    """Wraps the value of a `return` statement while it unwinds to the enclosing call."""
    value: DuxValue

    def type_name(self) -> str:
        return "RETURN_VALUE"

    def inspect(self) -> str:
        return self.value.inspect()

    def to_python(self) -> Any:
        return self.value.to_python()


@dataclass(frozen=True)
class DuxErrorValue(DuxValue):
    """A runtime error propagating to the top of the evaluation."""
    message: str

    def type_name(self) -> str:
        return "ERROR"

    def inspect(self) -> str:
        return f"ERROR {self.message}"

    def to_python(self) -> str:
        return self.message


NIL = DuxNil()
TRUE = DuxBoolean(True)
FALSE = DuxBoolean(False)


def native_bool_to_boolean(value: bool) -> DuxBoolean:
    """Convert a Python bool to the corresponding Dux boolean."""
    return TRUE if value else FALSE
