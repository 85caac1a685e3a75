"""Environment management for Dux variable scoping."""

from dataclasses import dataclass, field
from typing import Dict

from dux.dux_value import DuxValue


@dataclass(eq=False)
class DuxEnvironment:
    """
    Mutable environment for variable bindings with lexical scoping.

    Lookups walk outward through the chain of enclosing environments.  Bindings are
    only ever made in the environment itself, so an inner `let` shadows an outer
    binding of the same name without changing it.

    Environments are ordinary Python objects: every function value and every
    enclosed environment holds a reference to its outer environment, so it stays
    alive for as long as anything can still reach it.
    """
    store: Dict[str, DuxValue] = field(default_factory=dict)
    outer: 'DuxEnvironment | None' = None

    @classmethod
    def new_enclosed(cls, outer: 'DuxEnvironment') -> 'DuxEnvironment':
        """
        Create an empty environment enclosed by `outer`.

        Args:
            outer: The environment that lookups fall back to

        Returns:
            The new environment
        """
        return cls(outer=outer)

    def get(self, name: str) -> DuxValue | None:
        """
        Look up a variable in this environment or any enclosing one.

        Args:
            name: Variable name

        Returns:
            The bound value, or None if no environment in the chain binds the name
        """
        env: DuxEnvironment | None = self
        while env is not None:
            value = env.store.get(name)
            if value is not None:
                return value

            env = env.outer

        return None

    def set(self, name: str, value: DuxValue) -> DuxValue:
        """
        Bind a variable in this environment, replacing any local binding of the same name.

        Args:
            name: Variable name
            value: Value to bind

        Returns:
            The bound value
        """
        self.store[name] = value
        return value

    def __repr__(self) -> str:
        scope = "enclosed" if self.outer is not None else "global"
        return f"DuxEnvironment({scope}: {list(self.store.keys())})"
