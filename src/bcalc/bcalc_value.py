"""Values that can be bound to a name in a BCalc environment."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Tuple

from bcalc.bcalc_ast import BCalcExpression


class BCalcValue(ABC):
    """
    Abstract base class for all bound values.

    The set of subclasses is closed: a computed number, a user-defined
    function, or a host-supplied native function.
    """

    @abstractmethod
    def type_name(self) -> str:
        """Return the value kind for error messages."""


@dataclass(frozen=True)
class BCalcComputed(BCalcValue):
    """A number produced by evaluating a `let`."""
    value: float

    def type_name(self) -> str:
        return "number"


@dataclass(frozen=True)
class BCalcFunction(BCalcValue):
    """A user-defined function: parameter names and a body sequence."""
    parameters: Tuple[str, ...]
    body: Tuple[BCalcExpression, ...]

    def type_name(self) -> str:
        return "function"

    @property
    def arity(self) -> int:
        """Number of declared parameters."""
        return len(self.parameters)


class BCalcNativeFunction(BCalcValue):
    """
    Represents a built-in single-argument numeric function supplied by the host.
    """

    def __init__(self, name: str, native_impl: Callable[[float], float]):
        """
        Initialize a native function.

        Args:
            name: Function name for display and error messages
            native_impl: Python callable that implements the function
        """
        self.name = name
        self.native_impl = native_impl

    def __call__(self, value: float) -> float:
        return self.native_impl(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BCalcNativeFunction):
            return NotImplemented

        return self.name == other.name and self.native_impl == other.native_impl

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"BCalcNativeFunction({self.name!r})"

    def type_name(self) -> str:
        return "native function"
