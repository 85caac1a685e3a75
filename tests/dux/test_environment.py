"""Tests for environment scoping."""

from dux.dux_environment import DuxEnvironment
from dux.dux_value import DuxInteger, DuxString


class TestEnvironment:
    """Test bindings and the enclosing chain."""

    def test_get_and_set(self):
        """Test binding and reading a name."""
        env = DuxEnvironment()
        result = env.set("x", DuxInteger(5))

        assert result == DuxInteger(5)
        assert env.get("x") == DuxInteger(5)

    def test_missing_name(self):
        """Test that an unbound name is reported as None."""
        env = DuxEnvironment()
        assert env.get("missing") is None

    def test_lookup_walks_outward(self):
        """Test that enclosed environments see outer bindings."""
        outer = DuxEnvironment()
        outer.set("x", DuxInteger(1))

        inner = DuxEnvironment.new_enclosed(outer)
        middle_free = DuxEnvironment.new_enclosed(inner)

        assert inner.get("x") == DuxInteger(1)
        assert middle_free.get("x") == DuxInteger(1)

    def test_set_shadows_without_mutating_outer(self):
        """Test that binding in an inner scope leaves the outer binding alone."""
        outer = DuxEnvironment()
        outer.set("x", DuxInteger(1))

        inner = DuxEnvironment.new_enclosed(outer)
        inner.set("x", DuxInteger(2))

        assert inner.get("x") == DuxInteger(2)
        assert outer.get("x") == DuxInteger(1)

    def test_set_overwrites_local_binding(self):
        """Test rebinding a name in the same environment."""
        env = DuxEnvironment()
        env.set("x", DuxInteger(1))
        env.set("x", DuxString("one"))
        assert env.get("x") == DuxString("one")

    def test_outer_changes_are_visible(self):
        """Test that the enclosing environment is shared, not copied."""
        outer = DuxEnvironment()
        inner = DuxEnvironment.new_enclosed(outer)

        outer.set("late", DuxInteger(9))
        assert inner.get("late") == DuxInteger(9)

    def test_repr(self):
        """Test the debugging representation."""
        outer = DuxEnvironment()
        inner = DuxEnvironment.new_enclosed(outer)
        inner.set("x", DuxInteger(1))

        assert repr(outer) == "DuxEnvironment(global: [])"
        assert repr(inner) == "DuxEnvironment(enclosed: ['x'])"
