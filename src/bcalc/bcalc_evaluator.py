"""Evaluator for BCalc expression trees with detailed error messages."""

from dataclasses import dataclass
from typing import Tuple

from bcalc.bcalc_ast import (
    BCalcExpression, BCalcNumber, BCalcVariable, BCalcOperator, BCalcBinaryOp, BCalcLet,
    BCalcDefine, BCalcCall, BCalcReturn, BCalcIf
)
from bcalc.bcalc_call_stack import BCalcCallStack
from bcalc.bcalc_environment import BCalcEnvironment
from bcalc.bcalc_error import (
    BCalcEvalError, BCalcUndefinedVariableError, BCalcUndefinedFunctionError,
    BCalcInvalidVariableReferenceError, BCalcInvalidFunctionReferenceError,
    BCalcInvalidArgumentsError, BCalcInvalidNativeArgumentsError, BCalcRecursionDepthError
)
from bcalc.bcalc_math import divide, power
from bcalc.bcalc_value import BCalcComputed, BCalcFunction, BCalcNativeFunction


@dataclass(frozen=True)
class BCalcBlockResult:
    """Value of a statement sequence and whether it ended with a `return`."""
    value: float
    returned: bool


class BCalcEvaluator:
    """Evaluates BCalc expression trees against a mutable environment."""

    def __init__(self, max_depth: int = 100):
        """
        Initialize evaluator.

        Args:
            max_depth: Maximum number of nested user function calls
        """
        self.max_depth = max_depth
        self.call_stack = BCalcCallStack()

    def evaluate(self, expr: BCalcExpression, env: BCalcEnvironment, depth: int = 0) -> float:
        """
        Evaluate an expression, mutating env for `let` and `define`.

        Args:
            expr: Expression to evaluate
            env: Environment for lookups and bindings
            depth: Number of user function calls already active

        Returns:
            The numeric result

        Raises:
            BCalcEvalError: If evaluation fails
        """
        try:
            return self._evaluate_expression(expr, env, depth)

        except BCalcEvalError:
            raise

        except RecursionError as e:
            # Unwinding at the interpreter limit can skip pops, so start clean
            stack_trace = self.call_stack.format_stack_trace()
            self.call_stack = BCalcCallStack()
            raise BCalcRecursionDepthError(self.max_depth, context=f"Call stack:\n{stack_trace}") from e

        except Exception as e:
            stack_trace = self.call_stack.format_stack_trace()
            raise BCalcEvalError(
                message=f"Unexpected error during evaluation: {e}",
                context=f"Call stack:\n{stack_trace}",
                suggestion="This is an internal error - please report this issue"
            ) from e

    def _evaluate_expression(self, expr: BCalcExpression, env: BCalcEnvironment, depth: int) -> float:
        """Internal expression evaluation with type dispatch."""
        if isinstance(expr, BCalcNumber):
            return expr.value

        if isinstance(expr, BCalcBinaryOp):
            return self._evaluate_binary_op(expr, env, depth)

        if isinstance(expr, BCalcVariable):
            return self._lookup_variable(expr.name, env)

        if isinstance(expr, BCalcLet):
            value = self._evaluate_expression(expr.value, env, depth)
            env.bind(expr.name, BCalcComputed(value))
            return value

        if isinstance(expr, BCalcDefine):
            env.bind(expr.name, BCalcFunction(expr.parameters, expr.body))
            return 0.0

        if isinstance(expr, BCalcCall):
            return self._evaluate_call(expr, env, depth)

        if isinstance(expr, BCalcReturn):
            return self._evaluate_expression(expr.value, env, depth)

        if isinstance(expr, BCalcIf):
            return self._evaluate_if(expr, env, depth).value

        raise BCalcEvalError(
            message=f"Cannot evaluate expression of type {type(expr).__name__}",
            suggestion="This is an internal error - please report this issue"
        )

    def _evaluate_binary_op(self, expr: BCalcBinaryOp, env: BCalcEnvironment, depth: int) -> float:
        """
        Evaluate a binary operation.

        Left-associative chains such as `1 + 2 + ... + n` nest down their left
        operand, so the left spine is walked in a loop and only right operands
        recurse.
        """
        spine = []
        node: BCalcExpression = expr
        while isinstance(node, BCalcBinaryOp):
            spine.append(node)
            node = node.left

        result = self._evaluate_expression(node, env, depth)
        for op in reversed(spine):
            right = self._evaluate_expression(op.right, env, depth)
            result = self._apply_operator(op.operator, result, right)

        return result

    def _apply_operator(self, operator: BCalcOperator, left: float, right: float) -> float:
        """Apply a binary operator with IEEE floating-point semantics."""
        if operator == BCalcOperator.ADD:
            return left + right

        if operator == BCalcOperator.SUBTRACT:
            return left - right

        if operator == BCalcOperator.MULTIPLY:
            return left * right

        if operator == BCalcOperator.DIVIDE:
            return divide(left, right)

        return power(left, right)

    def _lookup_variable(self, name: str, env: BCalcEnvironment) -> float:
        """Read a number bound to name."""
        bound = env.get(name)

        if bound is None:
            available = [n for n, v in env.bindings.items() if isinstance(v, BCalcComputed)]
            raise BCalcUndefinedVariableError(name, available)

        if isinstance(bound, BCalcComputed):
            return bound.value

        raise BCalcInvalidVariableReferenceError(name, bound.type_name())

    def _evaluate_call(self, call: BCalcCall, env: BCalcEnvironment, depth: int) -> float:
        """
        Evaluate a function call.

        Arguments are always evaluated in the caller's environment.  User
        functions then run in a fork of that environment with their
        parameters bound, so nothing the body binds reaches the caller.
        """
        bound = env.get(call.name)

        if bound is None:
            available = [n for n, v in env.bindings.items() if not isinstance(v, BCalcComputed)]
            raise BCalcUndefinedFunctionError(call.name, available)

        if isinstance(bound, BCalcFunction):
            if len(call.arguments) != bound.arity:
                raise BCalcInvalidArgumentsError(call.name, bound.arity, len(call.arguments))

            arg_values = [self._evaluate_expression(arg, env, depth) for arg in call.arguments]

            if depth >= self.max_depth:
                raise BCalcRecursionDepthError(
                    self.max_depth,
                    context=f"Call stack:\n{self.call_stack.format_stack_trace()}"
                )

            frame_env = env.fork(name=f"{call.name}-call")
            for param, arg_value in zip(bound.parameters, arg_values):
                frame_env.bind(param, BCalcComputed(arg_value))

            self.call_stack.push(call.name, dict(zip(bound.parameters, arg_values)))
            try:
                return self._evaluate_block(bound.body, frame_env, depth + 1).value

            finally:
                self.call_stack.pop()

        if isinstance(bound, BCalcNativeFunction):
            if len(call.arguments) != 1:
                raise BCalcInvalidNativeArgumentsError(call.name, len(call.arguments))

            arg_value = self._evaluate_expression(call.arguments[0], env, depth)
            return self._call_native_function(bound, arg_value)

        if isinstance(bound, BCalcComputed):
            raise BCalcInvalidFunctionReferenceError(call.name)

        raise BCalcEvalError(
            message=f"Cannot call '{call.name}': unsupported binding {bound.type_name()}",
            suggestion="This is an internal error - please report this issue"
        )

    def _call_native_function(self, func: BCalcNativeFunction, value: float) -> float:
        """Call a native function with its Python implementation."""
        try:
            return float(func(value))

        except BCalcEvalError:
            raise

        except Exception as e:
            raise BCalcEvalError(
                message=f"Error in native function '{func.name}'",
                context=str(e),
                suggestion="This is an internal error - please report this issue"
            ) from e

    def _evaluate_if(self, if_expr: BCalcIf, env: BCalcEnvironment, depth: int) -> BCalcBlockResult:
        """
        Evaluate a conditional.

        Every guard is evaluated, in order, before a body is chosen; the first
        guard whose two sides are exactly equal selects its body, otherwise the
        else body runs.  The chosen body runs in a fork of env.
        """
        matches = [
            self._evaluate_expression(branch.left, env, depth) == self._evaluate_expression(branch.right, env, depth)
            for branch in if_expr.branches
        ]

        for branch, matched in zip(if_expr.branches, matches):
            if matched:
                return self._evaluate_block(branch.body, env.fork(name=f"{env.name}-if"), depth)

        return self._evaluate_block(if_expr.else_body, env.fork(name=f"{env.name}-else"), depth)

    def _evaluate_block(
        self,
        body: Tuple[BCalcExpression, ...],
        env: BCalcEnvironment,
        depth: int
    ) -> BCalcBlockResult:
        """
        Evaluate a statement sequence, stopping at the first `return`.

        Returns:
            The returned value, else the last statement's value, else 0
        """
        result = BCalcBlockResult(0.0, False)
        for statement in body:
            result = self._evaluate_statement(statement, env, depth)
            if result.returned:
                return result

        return result

    def _evaluate_statement(self, statement: BCalcExpression, env: BCalcEnvironment, depth: int) -> BCalcBlockResult:
        """Evaluate one body statement, reporting whether it executed a `return`."""
        if isinstance(statement, BCalcReturn):
            return BCalcBlockResult(self._evaluate_expression(statement.value, env, depth), True)

        if isinstance(statement, BCalcIf):
            # A return inside a branch body also ends the enclosing body
            return self._evaluate_if(statement, env, depth)

        return BCalcBlockResult(self._evaluate_expression(statement, env, depth), False)
