"""Main BCalc class: a session that parses and evaluates BCalc source text."""

import logging
from typing import List

from bcalc.bcalc_ast import BCalcExpression, BCalcDefine, BCalcLet
from bcalc.bcalc_environment import BCalcEnvironment
from bcalc.bcalc_error import BCalcError, BCalcParseError
from bcalc.bcalc_evaluator import BCalcEvaluator
from bcalc.bcalc_math import format_number
from bcalc.bcalc_parser import BCalcParser, BCalcParseResult
from bcalc.bcalc_tokenizer import BCalcTokenizer


def _tokenize_and_parse(text: str) -> BCalcParser:
    tokens = BCalcTokenizer().tokenize(text)
    return BCalcParser(tokens, text)


def parse(text: str) -> BCalcParseResult:
    """
    Parse the first top-level construct in text.

    Args:
        text: BCalc source text

    Returns:
        The parsed expression and the unconsumed remainder of text

    Raises:
        BCalcIncompleteInputError: If text ends inside the construct
        BCalcParseError: If text does not match the grammar
    """
    try:
        return _tokenize_and_parse(text).parse_construct()

    except RecursionError as e:
        raise BCalcParseError(
            message="Expression too deeply nested to parse",
            suggestion="Reduce the nesting of parentheses or blocks"
        ) from e


def evaluate(environment: BCalcEnvironment, expression: BCalcExpression, max_depth: int = 100) -> float:
    """
    Evaluate a parsed expression against a caller-owned environment.

    Args:
        environment: Environment to read and mutate
        expression: Parsed expression
        max_depth: Maximum number of nested user function calls

    Returns:
        The numeric result

    Raises:
        BCalcEvalError: If evaluation fails
    """
    return BCalcEvaluator(max_depth=max_depth).evaluate(expression, environment)


class BCalc:
    """
    A BCalc session.

    The session owns one environment, created with the native functions
    pre-bound, and threads it through every evaluation so that `let` and
    `define` persist from one call to the next.  Independent sessions never
    share state.
    """

    def __init__(self, max_depth: int = 100, environment: BCalcEnvironment | None = None):
        """
        Initialize a session.

        Args:
            max_depth: Maximum number of nested user function calls
            environment: Environment to use instead of a fresh default one
        """
        self.max_depth = max_depth
        self.environment = environment if environment is not None else BCalcEnvironment.with_defaults()
        self._evaluator = BCalcEvaluator(max_depth=max_depth)
        self._logger = logging.getLogger("BCalc")

    def reset(self) -> None:
        """Discard every binding and start again from the defaults."""
        self.environment = BCalcEnvironment.with_defaults()
        self._logger.debug("Session environment reset")

    def parse(self, text: str) -> BCalcParseResult:
        """Parse the first top-level construct in text (see module-level `parse`)."""
        return parse(text)

    def parse_all(self, text: str) -> List[BCalcExpression]:
        """
        Parse every top-level construct in text.

        Raises:
            BCalcIncompleteInputError: If text is empty or ends inside a construct
            BCalcParseError: If text does not match the grammar
        """
        try:
            return _tokenize_and_parse(text).parse_all()

        except RecursionError as e:
            raise BCalcParseError(
                message="Expression too deeply nested to parse",
                suggestion="Reduce the nesting of parentheses or blocks"
            ) from e

    def evaluate_expression(self, expression: BCalcExpression) -> float:
        """
        Evaluate one parsed construct against the session environment.

        Raises:
            BCalcEvalError: If evaluation fails
        """
        try:
            result = self._evaluator.evaluate(expression, self.environment)

        except BCalcError as e:
            self._logger.debug("Evaluation failed: %s", e.message)
            raise

        if isinstance(expression, BCalcDefine):
            self._logger.debug("Defined function '%s' with %d parameters", expression.name, len(expression.parameters))

        elif isinstance(expression, BCalcLet):
            self._logger.debug("Bound '%s' = %s", expression.name, format_number(result))

        return result

    def evaluate(self, text: str) -> float:
        """
        Parse and evaluate every construct in text, in order.

        Args:
            text: BCalc source text

        Returns:
            The value of the last construct

        Raises:
            BCalcParseError: If parsing fails (nothing is evaluated)
            BCalcEvalError: If evaluation fails
        """
        result = 0.0
        for expression in self.parse_all(text):
            result = self.evaluate_expression(expression)

        return result

    def evaluate_and_format(self, text: str) -> str:
        """Parse and evaluate text, returning the result formatted for display."""
        return self.format_result(self.evaluate(text))

    def format_result(self, value: float) -> str:
        """Format a result for display."""
        return format_number(value)
