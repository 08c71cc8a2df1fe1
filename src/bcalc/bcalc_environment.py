"""Environment management for BCalc variable and function bindings."""

from typing import Dict, List

from bcalc.bcalc_math import BCalcMathFunctions
from bcalc.bcalc_value import BCalcValue, BCalcNativeFunction


class BCalcEnvironment:
    """
    Mutable mapping from names to bound values.

    There is a single flat scope: rebinding a name overwrites it.  Function
    calls and conditional bodies run in a fork, which is a full copy of the
    mapping, so nothing they bind is visible to the environment they were
    forked from.
    """

    def __init__(self, bindings: Dict[str, BCalcValue] | None = None, name: str = "session"):
        """
        Initialize environment.

        Args:
            bindings: Initial bindings (copied, never aliased)
            name: Label used in debugging output
        """
        self.bindings: Dict[str, BCalcValue] = dict(bindings) if bindings else {}
        self.name = name

    @classmethod
    def with_defaults(cls, name: str = "session") -> 'BCalcEnvironment':
        """Create an environment with the native functions pre-bound."""
        env = cls(name=name)
        for function_name, impl in BCalcMathFunctions().get_functions().items():
            env.bind(function_name, BCalcNativeFunction(function_name, impl))

        return env

    def get(self, name: str) -> BCalcValue | None:
        """Look up a name, returning None if it is unbound."""
        return self.bindings.get(name)

    def bind(self, name: str, value: BCalcValue) -> 'BCalcEnvironment':
        """
        Bind a name in place, overwriting any previous value.

        Args:
            name: Name to bind
            value: Value to bind it to

        Returns:
            This environment, so binds can be chained
        """
        self.bindings[name] = value
        return self

    def fork(self, name: str | None = None) -> 'BCalcEnvironment':
        """Return an independent copy of this environment."""
        return BCalcEnvironment(self.bindings, name or f"{self.name}-fork")

    def contains(self, name: str) -> bool:
        """Check if a name is bound."""
        return name in self.bindings

    def names(self) -> List[str]:
        """Get all bound names."""
        return list(self.bindings.keys())

    def get_local_bindings(self) -> Dict[str, BCalcValue]:
        """Get a copy of the bindings."""
        return self.bindings.copy()

    def __contains__(self, name: object) -> bool:
        return name in self.bindings

    def __len__(self) -> int:
        return len(self.bindings)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"BCalcEnvironment({self.name}: {self.names()})"
