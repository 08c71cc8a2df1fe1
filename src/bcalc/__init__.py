"""BCalc: a small calculator language with variables, functions and conditionals."""

# Main API
from bcalc.bcalc import BCalc, parse, evaluate

# Exceptions (for error handling)
from bcalc.bcalc_error import (
    BCalcError, BCalcParseError, BCalcTokenError, BCalcIncompleteInputError, BCalcEvalError,
    BCalcUndefinedVariableError, BCalcUndefinedFunctionError, BCalcInvalidVariableReferenceError,
    BCalcInvalidFunctionReferenceError, BCalcInvalidArgumentsError, BCalcInvalidNativeArgumentsError,
    BCalcRecursionDepthError
)

# Expression tree
from bcalc.bcalc_ast import (
    BCalcExpression, BCalcNumber, BCalcVariable, BCalcOperator, BCalcBinaryOp, BCalcLet,
    BCalcDefine, BCalcCall, BCalcReturn, BCalcIf, BCalcIfBranch
)

# Bound values and environment
from bcalc.bcalc_value import BCalcValue, BCalcComputed, BCalcFunction, BCalcNativeFunction
from bcalc.bcalc_environment import BCalcEnvironment

# Lower-level components (for advanced usage)
from bcalc.bcalc_token import BCalcToken, BCalcTokenType
from bcalc.bcalc_tokenizer import BCalcTokenizer
from bcalc.bcalc_parser import BCalcParser, BCalcParseResult
from bcalc.bcalc_evaluator import BCalcEvaluator

# Front ends
from bcalc.bcalc_config import BCalcConfig, BCalcConfigError
from bcalc.bcalc_file_reader import BCalcFileReader, run_file
from bcalc.bcalc_repl import BCalcRepl


__all__ = [
    # Main API
    "BCalc", "parse", "evaluate",

    # Exceptions
    "BCalcError", "BCalcParseError", "BCalcTokenError", "BCalcIncompleteInputError", "BCalcEvalError",
    "BCalcUndefinedVariableError", "BCalcUndefinedFunctionError", "BCalcInvalidVariableReferenceError",
    "BCalcInvalidFunctionReferenceError", "BCalcInvalidArgumentsError", "BCalcInvalidNativeArgumentsError",
    "BCalcRecursionDepthError",

    # Expression tree
    "BCalcExpression", "BCalcNumber", "BCalcVariable", "BCalcOperator", "BCalcBinaryOp", "BCalcLet",
    "BCalcDefine", "BCalcCall", "BCalcReturn", "BCalcIf", "BCalcIfBranch",

    # Bound values and environment
    "BCalcValue", "BCalcComputed", "BCalcFunction", "BCalcNativeFunction", "BCalcEnvironment",

    # Lower-level components
    "BCalcToken", "BCalcTokenType", "BCalcTokenizer", "BCalcParser", "BCalcParseResult", "BCalcEvaluator",

    # Front ends
    "BCalcConfig", "BCalcConfigError", "BCalcFileReader", "BCalcRepl", "run_file",
]
