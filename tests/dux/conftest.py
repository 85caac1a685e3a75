"""Shared fixtures and utilities for Dux tests."""

import io
from typing import Any, List

import pytest

from dux import Dux
from dux.dux_ast import DuxProgram
from dux.dux_parser import parse


@pytest.fixture
def dux():
    """Create a fresh Dux instance for each test."""
    return Dux()


@pytest.fixture
def dux_with_output():
    """Create a Dux instance whose `puts` output is captured in a StringIO."""
    output = io.StringIO()
    return Dux(output=output), output


@pytest.fixture
def dux_custom():
    """Factory for Dux instances with custom configuration."""
    def _create_dux(max_depth: int = 100) -> Dux:
        return Dux(max_depth=max_depth)
    return _create_dux


class DuxTestHelpers:
    """Helper utilities for Dux testing."""

    @staticmethod
    def assert_evaluates_to(dux: Dux, source: str, expected: str) -> None:
        """Assert that source evaluates to the expected display rendering."""
        result = dux.evaluate_and_format(source)
        assert result == expected, f"Expected '{expected}' for {source!r}, got '{result}'"

    @staticmethod
    def assert_python_result(dux: Dux, source: str, expected: Any) -> None:
        """Assert that source evaluates to the expected Python object."""
        result = dux.evaluate(source)
        assert result == expected, f"Expected Python result {expected!r}, got {result!r}"

    @staticmethod
    def parse_cleanly(source: str) -> DuxProgram:
        """Parse source text, failing the test if the parser reported errors."""
        program, errors = parse(source)
        assert errors == [], f"Unexpected parser errors for {source!r}: {errors}"
        return program

    @staticmethod
    def parse_errors(source: str) -> List[str]:
        """Parse source text and return only the error messages."""
        _, errors = parse(source)
        return errors


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return DuxTestHelpers
