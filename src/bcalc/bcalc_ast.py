"""BCalc expression tree - the immutable output of the parser.

Every node is a frozen dataclass whose children are other nodes or tuples of
nodes, so a tree is finite, has no back-references and can be shared freely.
Source positions are carried as keyword-only metadata and take no part in
equality, which lets tests compare parsed trees against hand-built ones.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from bcalc.bcalc_math import format_number


@dataclass(frozen=True)
class BCalcExpression(ABC):
    """Abstract base class for all BCalc expression nodes."""
    position: int | None = field(default=None, kw_only=True, compare=False)

    @abstractmethod
    def describe(self) -> str:
        """Render the node back to BCalc source text."""


def describe_block(body: Tuple[BCalcExpression, ...]) -> str:
    """Render a statement sequence as a `{ ...; }` block."""
    if not body:
        return "{ }"

    statements = " ".join(f"{statement.describe()};" for statement in body)
    return f"{{ {statements} }}"


@dataclass(frozen=True)
class BCalcNumber(BCalcExpression):
    """Numeric literal."""
    value: float

    def describe(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True)
class BCalcVariable(BCalcExpression):
    """Reference to a bound number by name."""
    name: str

    def describe(self) -> str:
        return self.name


class BCalcOperator(Enum):
    """Binary arithmetic operators."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


@dataclass(frozen=True)
class BCalcBinaryOp(BCalcExpression):
    """Binary arithmetic operation on two sub-expressions."""
    operator: BCalcOperator
    left: BCalcExpression
    right: BCalcExpression

    def describe(self) -> str:
        return f"{self._describe_operand(self.left)} {self.operator.value} {self._describe_operand(self.right)}"

    @staticmethod
    def _describe_operand(operand: BCalcExpression) -> str:
        # Nested operations are always parenthesised so the text re-parses to the same tree
        if isinstance(operand, BCalcBinaryOp):
            return f"({operand.describe()})"

        return operand.describe()


@dataclass(frozen=True)
class BCalcLet(BCalcExpression):
    """`let name = value`."""
    name: str
    value: BCalcExpression

    def describe(self) -> str:
        return f"let {self.name} = {self.value.describe()}"


@dataclass(frozen=True)
class BCalcDefine(BCalcExpression):
    """`define name(params) { body }`."""
    name: str
    parameters: Tuple[str, ...]
    body: Tuple[BCalcExpression, ...]

    def describe(self) -> str:
        return f"define {self.name}({', '.join(self.parameters)}) {describe_block(self.body)}"


@dataclass(frozen=True)
class BCalcCall(BCalcExpression):
    """`name(arg, ...)`."""
    name: str
    arguments: Tuple[BCalcExpression, ...]

    def describe(self) -> str:
        return f"{self.name}({', '.join(argument.describe() for argument in self.arguments)})"


@dataclass(frozen=True)
class BCalcReturn(BCalcExpression):
    """`return value`."""
    value: BCalcExpression

    def describe(self) -> str:
        return f"return {self.value.describe()}"


@dataclass(frozen=True)
class BCalcIfBranch:
    """One guarded branch of a conditional: `(left == right) { body }`."""
    left: BCalcExpression
    right: BCalcExpression
    body: Tuple[BCalcExpression, ...]

    def describe(self) -> str:
        return f"if ({self.left.describe()} == {self.right.describe()}) {describe_block(self.body)}"


@dataclass(frozen=True)
class BCalcIf(BCalcExpression):
    """Conditional with one or more guarded branches and a mandatory else body."""
    branches: Tuple[BCalcIfBranch, ...]
    else_body: Tuple[BCalcExpression, ...]

    def describe(self) -> str:
        parts = [" else ".join(branch.describe() for branch in self.branches)]
        parts.append(f"else {describe_block(self.else_body)}")
        return " ".join(parts)
