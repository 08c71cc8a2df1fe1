"""Floating-point arithmetic and native math functions for BCalc.

Python raises on several operations that IEEE 754 defines (division by zero,
pow overflow and domain errors).  BCalc keeps the IEEE results instead, so
these helpers map each of those cases back to the infinity or NaN the
hardware would produce.
"""

import math
from typing import Callable, Dict


def format_number(value: float) -> str:
    """Format a number for display, dropping the fraction of integral values."""
    if math.isnan(value):
        return "nan"

    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))

    return repr(value)


def _is_odd_integer(value: float) -> bool:
    return value.is_integer() and int(value) % 2 == 1


def divide(dividend: float, divisor: float) -> float:
    """Divide with IEEE semantics: x/0 is a signed infinity, 0/0 is NaN."""
    if divisor == 0.0:
        if dividend == 0.0 or math.isnan(dividend):
            return math.nan

        return math.copysign(math.inf, dividend) * math.copysign(1.0, divisor)

    return dividend / divisor


def power(base: float, exponent: float) -> float:
    """Raise base to exponent with IEEE pow semantics."""
    try:
        return math.pow(base, exponent)

    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf

        return math.inf

    except ValueError:
        # math.pow reports 0 ** negative and negative ** fraction as domain errors
        if base == 0.0:
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)

            return math.inf

        return math.nan


class BCalcMathFunctions:
    """Single-argument native functions pre-bound in every new environment."""

    def get_functions(self) -> Dict[str, Callable[[float], float]]:
        """Return dictionary of native function implementations."""
        return {
            'sqrt': self._native_sqrt,
            'abs': abs,
            'exp': self._native_exp,
            'ln': self._native_ln,
            'sin': self._native_sin,
            'cos': self._native_cos,
            'tan': self._native_tan,
            'floor': self._native_floor,
            'ceil': self._native_ceil,
        }

    def _native_sqrt(self, value: float) -> float:
        if value < 0:
            return math.nan

        return math.sqrt(value)

    def _native_exp(self, value: float) -> float:
        try:
            return math.exp(value)

        except OverflowError:
            return math.inf

    def _native_ln(self, value: float) -> float:
        if value == 0.0:
            return -math.inf

        if value < 0 or math.isnan(value):
            return math.nan

        return math.log(value)

    def _native_sin(self, value: float) -> float:
        if math.isinf(value):
            return math.nan

        return math.sin(value)

    def _native_cos(self, value: float) -> float:
        if math.isinf(value):
            return math.nan

        return math.cos(value)

    def _native_tan(self, value: float) -> float:
        if math.isinf(value):
            return math.nan

        return math.tan(value)

    def _native_floor(self, value: float) -> float:
        # math.floor returns an int and raises on inf/nan
        if not math.isfinite(value):
            return value

        return float(math.floor(value))

    def _native_ceil(self, value: float) -> float:
        if not math.isfinite(value):
            return value

        return float(math.ceil(value))
