"""Shared fixtures and utilities for BCalc tests."""

import math

import pytest

from bcalc import BCalc, BCalcEnvironment, BCalcParser, BCalcTokenizer
from bcalc.bcalc_ast import BCalcExpression


@pytest.fixture
def bcalc():
    """Create a fresh BCalc session for each test."""
    return BCalc()


@pytest.fixture
def bcalc_custom():
    """Factory for BCalc sessions with custom configuration."""
    def _create_bcalc(max_depth: int = 100) -> BCalc:
        return BCalc(max_depth=max_depth)
    return _create_bcalc


@pytest.fixture
def env():
    """Create a fresh environment with the native functions bound."""
    return BCalcEnvironment.with_defaults()


FIBONACCI_SOURCE = (
    "define fib(n) { "
    "if (n == 1) { return 1; } "
    "else if (n == 2) { return 1; } "
    "else { return fib(n - 1) + fib(n - 2); }; "
    "}"
)


@pytest.fixture
def fibonacci_source():
    """Source of a recursive Fibonacci definition."""
    return FIBONACCI_SOURCE


class BCalcTestHelpers:
    """Helper utilities for BCalc testing."""

    @staticmethod
    def parse(source: str) -> BCalcExpression:
        """Parse source that must hold exactly one construct."""
        return BCalcParser(BCalcTokenizer().tokenize(source), source).parse()

    @staticmethod
    def assert_evaluates_to(bcalc: BCalc, source: str, expected: float) -> None:
        """Assert that source evaluates to expected (NaN matches NaN)."""
        result = bcalc.evaluate(source)
        if math.isnan(expected):
            assert math.isnan(result), f"Expected nan, got {result!r}"
            return

        assert result == expected, f"Expected {expected!r}, got {result!r}"

    @staticmethod
    def build_nested_expression(depth: int, base_value: str = "1") -> str:
        """Build a deeply parenthesised sum for nesting tests."""
        if depth <= 0:
            return base_value

        inner = BCalcTestHelpers.build_nested_expression(depth - 1, base_value)
        return f"({base_value} + {inner})"


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return BCalcTestHelpers
