"""Recursive-descent parser for BCalc with detailed error messages.

Precedence is layered from loosest to tightest binding:

    top level   define | nested
    nested      let | if | return | math
    math        term (('+' | '-') term)*          left-associative
    term        factor (('*' | '/') factor)*      left-associative
    factor      operand ('^' factor)?             right-associative
    operand     call | variable | number | '(' math ')'

Each layer only descends into tighter layers, so there is no left recursion;
`factor` recurses into itself on the right operand only, which is what makes
`^` right-associative.
"""

from dataclasses import dataclass
from typing import List, NoReturn

from bcalc.bcalc_ast import (
    BCalcExpression, BCalcNumber, BCalcVariable, BCalcOperator, BCalcBinaryOp, BCalcLet,
    BCalcDefine, BCalcCall, BCalcReturn, BCalcIf, BCalcIfBranch
)
from bcalc.bcalc_error import BCalcParseError, BCalcIncompleteInputError, ErrorMessageBuilder
from bcalc.bcalc_token import BCalcToken, BCalcTokenType


@dataclass(frozen=True)
class BCalcParseResult:
    """One parsed top-level construct and the source text that follows it."""
    expression: BCalcExpression
    remainder: str
    consumed: int
    at_end: bool


class BCalcParser:
    """Parses tokens into an expression tree with detailed error messages."""

    ADDITIVE = {
        BCalcTokenType.PLUS: BCalcOperator.ADD,
        BCalcTokenType.MINUS: BCalcOperator.SUBTRACT,
    }

    MULTIPLICATIVE = {
        BCalcTokenType.STAR: BCalcOperator.MULTIPLY,
        BCalcTokenType.SLASH: BCalcOperator.DIVIDE,
    }

    def __init__(self, tokens: List[BCalcToken], expression: str = ""):
        """
        Initialize parser with tokens and the source text they came from.

        Args:
            tokens: List of tokens to parse
            expression: Source text for remainders and error context
        """
        self.tokens = tokens
        self.pos = 0
        self.current_token: BCalcToken | None = tokens[0] if tokens else None
        self.expression = expression

    def at_end(self) -> bool:
        """Check if every token has been consumed."""
        return self.current_token is None

    def parse(self) -> BCalcExpression:
        """
        Parse exactly one top-level construct that spans the whole input.

        Returns:
            Parsed expression

        Raises:
            BCalcIncompleteInputError: If the input ends inside the construct
            BCalcParseError: If parsing fails or tokens follow the construct
        """
        result = self.parse_construct()

        if self.current_token is not None:
            raise BCalcParseError(
                message="Unexpected token after complete expression",
                position=self.current_token.position,
                received=f"Found: {self.current_token.value}",
                expected="End of input",
                example="Correct: let x = 1\nIncorrect: let x = 1 2",
                suggestion="Remove extra tokens or evaluate them separately"
            )

        return result.expression

    def parse_all(self) -> List[BCalcExpression]:
        """Parse every top-level construct in the input, in order."""
        if self.current_token is None:
            self._raise_empty()

        expressions = []
        while self.current_token is not None:
            expressions.append(self.parse_construct().expression)

        return expressions

    def parse_construct(self) -> BCalcParseResult:
        """
        Parse the next top-level construct, plus one optional trailing ';'.

        Returns:
            The expression and the unconsumed remainder of the source text

        Raises:
            BCalcIncompleteInputError: If the input ends inside the construct
            BCalcParseError: If the construct does not match the grammar
        """
        if self.current_token is None:
            self._raise_empty()

        expr = self._parse_top_level()

        if self._check(BCalcTokenType.SEMICOLON):
            self._advance()

        consumed = self.tokens[self.pos - 1].end
        return BCalcParseResult(
            expression=expr,
            remainder=self.expression[consumed:],
            consumed=consumed,
            at_end=self.current_token is None
        )

    def _raise_empty(self) -> NoReturn:
        raise BCalcIncompleteInputError(
            message="Empty expression",
            position=len(self.expression),
            expected="A definition, let binding, conditional, return or math expression",
            example="1 + 2 or let x = 5"
        )

    def _parse_top_level(self) -> BCalcExpression:
        """Parse a definition or a nested expression."""
        assert self.current_token is not None, "Current token must not be None here"
        if self.current_token.is_keyword("define"):
            return self._parse_define()

        return self._parse_nested()

    def _parse_nested(self) -> BCalcExpression:
        """Parse a let binding, conditional, return statement, or math expression."""
        token = self._require("an expression")

        if token.is_keyword("let"):
            return self._parse_let()

        if token.is_keyword("if"):
            return self._parse_if()

        if token.is_keyword("return"):
            return self._parse_return()

        return self._parse_math()

    def _parse_math(self) -> BCalcExpression:
        """Parse term (('+' | '-') term)*."""
        left = self._parse_term()

        while self.current_token is not None and self.current_token.type in self.ADDITIVE:
            operator = self.ADDITIVE[self.current_token.type]
            self._advance()
            right = self._parse_term()
            left = BCalcBinaryOp(operator, left, right, position=left.position)

        return left

    def _parse_term(self) -> BCalcExpression:
        """Parse factor (('*' | '/') factor)*."""
        left = self._parse_factor()

        while self.current_token is not None and self.current_token.type in self.MULTIPLICATIVE:
            operator = self.MULTIPLICATIVE[self.current_token.type]
            self._advance()
            right = self._parse_factor()
            left = BCalcBinaryOp(operator, left, right, position=left.position)

        return left

    def _parse_factor(self) -> BCalcExpression:
        """Parse operand ('^' factor)?."""
        base = self._parse_operand()

        if self._check(BCalcTokenType.CARET):
            self._advance()
            exponent = self._parse_factor()
            return BCalcBinaryOp(BCalcOperator.POWER, base, exponent, position=base.position)

        return base

    def _parse_operand(self) -> BCalcExpression:
        """Parse a call, variable reference, numeric literal, or parenthesised expression."""
        token = self._require("a number, name, or '('")

        if token.type == BCalcTokenType.NAME:
            if self._peek_type() == BCalcTokenType.LPAREN:
                return self._parse_call()

            self._advance()
            return BCalcVariable(token.value, position=token.position)

        if token.type == BCalcTokenType.NUMBER:
            self._advance()
            return BCalcNumber(token.value, position=token.position)

        if token.type in (BCalcTokenType.PLUS, BCalcTokenType.MINUS):
            return self._parse_signed_number()

        if token.type == BCalcTokenType.LPAREN:
            self._advance()
            inner = self._parse_math()
            self._expect(BCalcTokenType.RPAREN, "')' to close the parenthesised expression", example="(1 + 2) * 3")
            return inner

        if token.type == BCalcTokenType.KEYWORD:
            self._fail(
                token,
                message=f"Keyword '{token.value}' cannot be used as a value",
                expected="A number, name, or '('",
                suggestion=f"'{token.value}' is reserved; it can only start a {token.value} expression"
            )

        self._fail(
            token,
            message=f"Unexpected token: {token.value}",
            expected="A number, name, or '('",
            example="Valid operands: 42, x, sqrt(9), (1 + 2)"
        )

    def _parse_signed_number(self) -> BCalcNumber:
        """Parse a '+' or '-' sign directly followed by a numeric literal."""
        sign = self._require("a signed number")
        self._advance()

        number = self._require("a number after the sign")
        if number.type != BCalcTokenType.NUMBER:
            self._fail(
                number,
                message=f"Sign '{sign.value}' must be followed by a number",
                expected="A numeric literal",
                example="Correct: -2 or 3 * -1\nIncorrect: -x (write 0 - x)",
                suggestion="Signs only apply to numeric literals; use subtraction for other operands"
            )

        self._advance()
        value = -number.value if sign.type == BCalcTokenType.MINUS else number.value
        return BCalcNumber(value, position=sign.position)

    def _parse_call(self) -> BCalcCall:
        """Parse name '(' [math (',' math)*] ')'."""
        name = self._require("a function name")
        self._advance()
        self._expect(BCalcTokenType.LPAREN, "'(' to start the argument list")

        arguments = []
        if not self._check(BCalcTokenType.RPAREN):
            arguments.append(self._parse_math())
            while self._check(BCalcTokenType.COMMA):
                self._advance()
                arguments.append(self._parse_math())

        self._expect(
            BCalcTokenType.RPAREN,
            "',' or ')' in the argument list",
            example=f"{name.value}(1, 2)"
        )
        return BCalcCall(name.value, tuple(arguments), position=name.position)

    def _parse_let(self) -> BCalcLet:
        """Parse 'let' name '=' math."""
        keyword = self._require("'let'")
        self._advance()
        name = self._expect_name("variable name after 'let'", example="let x = 5")
        self._expect(BCalcTokenType.ASSIGN, "'=' after the variable name", example=f"let {name} = 5")
        value = self._parse_math()
        return BCalcLet(name, value, position=keyword.position)

    def _parse_return(self) -> BCalcReturn:
        """Parse 'return' math."""
        keyword = self._require("'return'")
        self._advance()
        value = self._parse_math()
        return BCalcReturn(value, position=keyword.position)

    def _parse_block(self) -> tuple[BCalcExpression, ...]:
        """Parse '{' (statement ';')* '}'."""
        self._expect(BCalcTokenType.LBRACE, "'{' to start a block", example="{ return 1; }")

        statements = []
        while not self._check(BCalcTokenType.RBRACE):
            self._require("a statement or '}'")
            statements.append(self._parse_top_level())
            self._expect(
                BCalcTokenType.SEMICOLON,
                "';' after the statement",
                example="{ let y = n * 2; return y; }",
                suggestion="Every statement in a block must end with ';'"
            )

        self._advance()
        return tuple(statements)

    def _parse_define(self) -> BCalcDefine:
        """Parse 'define' name '(' [name (',' name)*] ')' block."""
        keyword = self._require("'define'")
        self._advance()
        name = self._expect_name("function name after 'define'", example="define square(n) { return n * n; }")
        self._expect(BCalcTokenType.LPAREN, "'(' to start the parameter list", example=f"define {name}(n) {{ }}")

        parameters: List[str] = []
        if not self._check(BCalcTokenType.RPAREN):
            parameters.append(self._expect_name("parameter name"))
            while self._check(BCalcTokenType.COMMA):
                self._advance()
                parameters.append(self._expect_name("parameter name"))

        self._expect(BCalcTokenType.RPAREN, "',' or ')' in the parameter list", example=f"define {name}(a, b) {{ }}")
        body = self._parse_block()
        return BCalcDefine(name, tuple(parameters), body, position=keyword.position)

    def _parse_if(self) -> BCalcIf:
        """Parse 'if' branch ('else' 'if' branch)* 'else' block."""
        keyword = self._require("'if'")
        self._advance()
        branches = [self._parse_branch()]

        while True:
            token = self._require("'else' (a conditional must end with an else block)")
            if not token.is_keyword("else"):
                self._fail(
                    token,
                    message="Conditional is missing its else block",
                    expected="'else'",
                    example="if (n == 1) { return 1; } else { return 0; }",
                    suggestion="Every if must end with an else block"
                )

            self._advance()
            if self.current_token is not None and self.current_token.is_keyword("if"):
                self._advance()
                branches.append(self._parse_branch())
                continue

            else_body = self._parse_block()
            return BCalcIf(tuple(branches), else_body, position=keyword.position)

    def _parse_branch(self) -> BCalcIfBranch:
        """Parse '(' math '==' math ')' block."""
        self._expect(BCalcTokenType.LPAREN, "'(' to start the condition", example="if (n == 1) { ... }")
        left = self._parse_math()
        self._expect(
            BCalcTokenType.EQUAL,
            "'==' in the condition",
            example="if (n == 1) { ... }",
            suggestion="Conditions compare two expressions with '=='"
        )
        right = self._parse_math()
        self._expect(BCalcTokenType.RPAREN, "')' to close the condition")
        body = self._parse_block()
        return BCalcIfBranch(left, right, body)

    def _expect_name(self, what: str, example: str | None = None) -> str:
        """Consume a NAME token and return its text."""
        token = self._require(what)
        if token.type == BCalcTokenType.KEYWORD:
            self._fail(
                token,
                message=f"Keyword '{token.value}' cannot be used as a name",
                expected=what,
                example=example,
                suggestion="Choose a name that is not one of: let, define, return, if, else"
            )

        if token.type != BCalcTokenType.NAME:
            self._fail(token, message=f"Expected {what}", expected=what, example=example)

        self._advance()
        return token.value

    def _expect(
        self,
        token_type: BCalcTokenType,
        what: str,
        example: str | None = None,
        suggestion: str | None = None
    ) -> BCalcToken:
        """Consume a token of the given type or fail."""
        token = self._require(what, example)
        if token.type != token_type:
            self._fail(token, message=f"Expected {what}", expected=what, example=example, suggestion=suggestion)

        self._advance()
        return token

    def _require(self, what: str, example: str | None = None) -> BCalcToken:
        """Return the current token, signalling incomplete input if there is none."""
        if self.current_token is None:
            raise BCalcIncompleteInputError(
                message=f"Incomplete input: expected {what}",
                position=len(self.expression),
                received="End of input",
                expected=what,
                example=example,
                context=self._get_context_snippet()
            )

        return self.current_token

    def _fail(
        self,
        token: BCalcToken,
        message: str,
        expected: str | None = None,
        example: str | None = None,
        suggestion: str | None = None
    ) -> NoReturn:
        raise BCalcParseError(
            message=message,
            position=token.position,
            received=f"Found: {ErrorMessageBuilder.describe_token(self._token_text(token))}",
            expected=expected,
            example=example,
            suggestion=suggestion,
            context=self._get_context_snippet(token.position)
        )

    def _token_text(self, token: BCalcToken) -> str:
        """Return the source text of a token."""
        if self.expression:
            return self.expression[token.position:token.end]

        return str(token.value)

    def _get_context_snippet(self, position: int | None = None, length: int = 30) -> str | None:
        """
        Get a snippet of source text ending at position for error display.

        Args:
            position: End character position (defaults to end of input)
            length: Maximum length of snippet

        Returns:
            Formatted context snippet, or None if there is no source text
        """
        if not self.expression:
            return None

        end = len(self.expression) if position is None else min(position + 1, len(self.expression))
        start = max(0, end - length)
        snippet = ' '.join(self.expression[start:end].split())
        if start > 0:
            snippet = "..." + snippet

        return f"Near: {snippet}"

    def _check(self, token_type: BCalcTokenType) -> bool:
        """Check the type of the current token without consuming it."""
        return self.current_token is not None and self.current_token.type == token_type

    def _peek_type(self) -> BCalcTokenType | None:
        """Return the type of the token after the current one."""
        if self.pos + 1 < len(self.tokens):
            return self.tokens[self.pos + 1].type

        return None

    def _advance(self) -> None:
        """Move to the next token."""
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current_token = self.tokens[self.pos]

        else:
            self.current_token = None
