"""Exception classes for BCalc with detailed context."""

from typing import List, Optional
import difflib


class BCalcError(Exception):
    """
    Base exception for BCalc errors.

    Besides the one-line `message`, an error may say where it happened and
    what would have been accepted.  `str()` joins every field that is set into
    a multi-line report, one "Label: value" line per field.
    """

    # Report order of the optional fields
    DETAIL_FIELDS = (
        ("position", "Position"),
        ("received", "Received"),
        ("expected", "Expected"),
        ("context", "Context"),
        ("suggestion", "Suggestion"),
        ("example", "Example"),
    )

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        suggestion: Optional[str] = None,
        example: Optional[str] = None,
        position: Optional[int] = None
    ):
        """
        Args:
            message: What went wrong, in one line
            context: Surrounding source text or the active call stack
            expected: What the tokenizer, parser or evaluator would have accepted
            received: What it found instead
            suggestion: How to fix the problem
            example: A valid snippet
            position: Character offset into the source text
        """
        self.message = message
        self.context = context
        self.expected = expected
        self.received = received
        self.suggestion = suggestion
        self.example = example
        self.position = position

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        parts = [f"Error: {self.message}"]
        for attribute, label in self.DETAIL_FIELDS:
            value = getattr(self, attribute)
            # Position 0 is meaningful; empty strings are not
            if value is not None and value != "":
                parts.append(f"{label}: {value}")

        return "\n".join(parts)


class BCalcParseError(BCalcError):
    """Source text does not match the grammar."""


class BCalcTokenError(BCalcParseError):
    """Source text contains a character or literal that cannot be tokenized."""


class BCalcIncompleteInputError(BCalcParseError):
    """Source text ended in the middle of a construct; more input is needed."""


class BCalcEvalError(BCalcError):
    """Evaluation errors with detailed context."""


class BCalcUndefinedVariableError(BCalcEvalError):
    """A variable reference names nothing in the environment."""

    def __init__(self, name: str, available: List[str]):
        self.name = name
        similar = ErrorMessageBuilder.suggest_similar_names(name, available)
        super().__init__(
            message=f"Undefined variable: '{name}'",
            suggestion=f"Did you mean: {', '.join(similar)}?" if similar else f"Bind '{name}' with let first",
            example=f"let {name} = 1"
        )


class BCalcUndefinedFunctionError(BCalcEvalError):
    """A call names nothing in the environment."""

    def __init__(self, name: str, available: List[str]):
        self.name = name
        similar = ErrorMessageBuilder.suggest_similar_names(name, available)
        super().__init__(
            message=f"Undefined function: '{name}'",
            suggestion=f"Did you mean: {', '.join(similar)}?" if similar else f"Define '{name}' before calling it",
            example=f"define {name}(n) {{ return n; }}"
        )


class BCalcInvalidVariableReferenceError(BCalcEvalError):
    """A variable reference names a function."""

    def __init__(self, name: str, kind: str):
        self.name = name
        super().__init__(
            message=f"Invalid variable reference: '{name}' is a {kind}, not a number",
            received=f"'{name}' bound to a {kind}",
            expected="A name bound to a number",
            example=f"{name}(1)"
        )


class BCalcInvalidFunctionReferenceError(BCalcEvalError):
    """A call names a plain number."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            message=f"Invalid function reference: '{name}' is a number, not a function",
            received=f"'{name}' bound to a number",
            expected="A name bound to a function",
            suggestion=f"Use '{name}' without parentheses to read its value"
        )


class BCalcInvalidArgumentsError(BCalcEvalError):
    """A user function was called with the wrong number of arguments."""

    def __init__(self, name: str, expected_count: int, actual_count: int):
        self.name = name
        self.expected_count = expected_count
        self.actual_count = actual_count
        plural = "s" if expected_count != 1 else ""
        super().__init__(
            message=f"Invalid arguments: function '{name}' expects {expected_count} argument{plural}, "
                f"got {actual_count}",
            received=f"{actual_count} argument{'s' if actual_count != 1 else ''}",
            expected=f"{expected_count} argument{plural}",
            suggestion=f"Provide exactly {expected_count} argument{plural}"
        )


class BCalcInvalidNativeArgumentsError(BCalcEvalError):
    """A native function was called with anything other than one argument."""

    def __init__(self, name: str, actual_count: int):
        self.name = name
        self.actual_count = actual_count
        super().__init__(
            message=f"Invalid native function arguments: '{name}' takes exactly 1 argument, got {actual_count}",
            received=f"{actual_count} argument{'s' if actual_count != 1 else ''}",
            expected="Exactly 1 argument",
            example=f"{name}(9)"
        )


class BCalcRecursionDepthError(BCalcEvalError):
    """Evaluation nested deeper than the configured limit."""

    def __init__(self, max_depth: int, context: Optional[str] = None):
        self.max_depth = max_depth
        super().__init__(
            message=f"Expression too deeply nested (max depth: {max_depth})",
            context=context,
            suggestion="Check that recursive functions reach a base case, or raise max_depth"
        )


class ErrorMessageBuilder:
    """Helper class for building detailed error messages."""

    @staticmethod
    def suggest_similar_names(target: str, available_names: List[str], max_suggestions: int = 3) -> List[str]:
        """Suggest similar names using fuzzy matching."""
        if not target or not available_names:
            return []

        return difflib.get_close_matches(target, available_names, n=max_suggestions, cutoff=0.6)

    @staticmethod
    def describe_token(value: str | None) -> str:
        """Describe a token (or the end of input) for error messages."""
        if value is None:
            return "end of input"

        return f"'{value}'"
