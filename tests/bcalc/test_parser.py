"""Tests for the BCalc parser: precedence, constructs, remainders and errors."""

import pytest

from bcalc import (
    parse, BCalcParseError, BCalcIncompleteInputError, BCalcNumber, BCalcVariable, BCalcOperator,
    BCalcBinaryOp, BCalcLet, BCalcDefine, BCalcCall, BCalcReturn, BCalcIf, BCalcIfBranch
)


def num(value):
    return BCalcNumber(float(value))


def var(name):
    return BCalcVariable(name)


def binop(operator, left, right):
    return BCalcBinaryOp(operator, left, right)


class TestPrecedence:
    """Test operator precedence and associativity."""

    def test_mixed_precedence(self, helpers):
        expected = binop(
            BCalcOperator.ADD,
            binop(BCalcOperator.MULTIPLY, num(1), num(2)),
            binop(BCalcOperator.DIVIDE, num(3), binop(BCalcOperator.POWER, num(4), num(6)))
        )
        assert helpers.parse("1 * 2 + 3 / 4 ^ 6") == expected

    def test_subtraction_is_left_associative(self, helpers):
        expected = binop(BCalcOperator.SUBTRACT, binop(BCalcOperator.SUBTRACT, num(1), num(2)), num(3))
        assert helpers.parse("1 - 2 - 3") == expected

    def test_division_is_left_associative(self, helpers):
        expected = binop(BCalcOperator.DIVIDE, binop(BCalcOperator.DIVIDE, num(8), num(4)), num(2))
        assert helpers.parse("8 / 4 / 2") == expected

    def test_power_is_right_associative(self, helpers):
        expected = binop(BCalcOperator.POWER, num(2), binop(BCalcOperator.POWER, num(3), num(2)))
        assert helpers.parse("2 ^ 3 ^ 2") == expected

    def test_parentheses_override_precedence(self, helpers):
        expected = binop(BCalcOperator.MULTIPLY, binop(BCalcOperator.ADD, num(1), num(2)), num(3))
        assert helpers.parse("(1 + 2) * 3") == expected

    def test_parentheses_are_not_kept_in_the_tree(self, helpers):
        assert helpers.parse("((x))") == var("x")

    def test_whitespace_is_insignificant(self, helpers):
        assert helpers.parse("1*2+3") == helpers.parse("  1 *\n 2 +\t3  ")


class TestOperands:
    """Test the operand forms."""

    def test_number(self, helpers):
        assert helpers.parse("42") == num(42)

    def test_variable(self, helpers):
        assert helpers.parse("abc") == var("abc")

    @pytest.mark.parametrize("source,value", [
        ("-2", -2.0),
        ("+2", 2.0),
        ("-.5", -0.5),
    ])
    def test_signed_literals(self, helpers, source, value):
        assert helpers.parse(source) == num(value)

    def test_signed_literal_after_operator(self, helpers):
        assert helpers.parse("3 * -1") == binop(BCalcOperator.MULTIPLY, num(3), num(-1))

    def test_sign_requires_a_number(self, helpers):
        with pytest.raises(BCalcParseError, match="must be followed by a number"):
            helpers.parse("-x")

    def test_call_without_arguments(self, helpers):
        assert helpers.parse("f()") == BCalcCall("f", ())

    def test_call_with_arguments(self, helpers):
        expected = BCalcCall("f", (num(1), binop(BCalcOperator.ADD, var("x"), num(2))))
        assert helpers.parse("f(1, x + 2)") == expected

    def test_call_in_expression(self, helpers):
        expected = binop(BCalcOperator.ADD, BCalcCall("sqrt", (num(9),)), num(1))
        assert helpers.parse("sqrt(9) + 1") == expected

    def test_name_followed_by_space_and_paren_is_a_call(self, helpers):
        assert helpers.parse("f (2)") == BCalcCall("f", (num(2),))

    def test_positions_are_recorded(self, helpers):
        expr = helpers.parse("  let x = 1")
        assert expr.position == 2


class TestStatements:
    """Test let, return, define and if."""

    def test_let(self, helpers):
        assert helpers.parse("let x = 5") == BCalcLet("x", num(5))

    def test_let_with_expression(self, helpers):
        assert helpers.parse("let y = x * 2") == BCalcLet("y", binop(BCalcOperator.MULTIPLY, var("x"), num(2)))

    def test_return(self, helpers):
        assert helpers.parse("return 1 + 1") == BCalcReturn(binop(BCalcOperator.ADD, num(1), num(1)))

    def test_define(self, helpers):
        expected = BCalcDefine(
            "f",
            ("n",),
            (
                BCalcLet("y", binop(BCalcOperator.MULTIPLY, var("n"), num(2))),
                BCalcReturn(var("y")),
            )
        )
        assert helpers.parse("define f(n) { let y = n * 2; return y; }") == expected

    def test_define_without_parameters_or_body(self, helpers):
        assert helpers.parse("define nothing() { }") == BCalcDefine("nothing", (), ())

    def test_define_with_several_parameters(self, helpers):
        expr = helpers.parse("define add(a, b, c) { return a + b + c; }")
        assert expr.parameters == ("a", "b", "c")

    def test_define_inside_a_body(self, helpers):
        expr = helpers.parse("define outer() { define inner() { return 1; }; return inner(); }")
        assert isinstance(expr.body[0], BCalcDefine)
        assert expr.body[0].name == "inner"

    def test_if_else(self, helpers):
        expected = BCalcIf(
            (BCalcIfBranch(var("n"), num(1), (BCalcReturn(num(1)),)),),
            (BCalcReturn(num(0)),)
        )
        assert helpers.parse("if (n == 1) { return 1; } else { return 0; }") == expected

    def test_if_else_if_chain(self, helpers):
        expr = helpers.parse("if (a == 1) { 1; } else if (a == 2) { 2; } else if (a == 3) { 3; } else { 4; }")
        assert isinstance(expr, BCalcIf)
        assert len(expr.branches) == 3
        assert expr.branches[2].right == num(3)
        assert expr.else_body == (num(4),)

    def test_nested_if_in_body(self, fibonacci_source, helpers):
        expr = helpers.parse(fibonacci_source)
        assert isinstance(expr, BCalcDefine)
        assert len(expr.body) == 1
        assert isinstance(expr.body[0], BCalcIf)
        assert len(expr.body[0].branches) == 2


class TestParseResult:
    """Test the result of parsing one construct from a longer text."""

    def test_remainder(self):
        result = parse("let x = 5; x + 1")
        assert result.expression == BCalcLet("x", num(5))
        assert result.remainder == " x + 1"
        assert result.at_end is False

    def test_trailing_semicolon_is_consumed(self):
        result = parse("1 + 2;")
        assert result.remainder == ""
        assert result.consumed == 6
        assert result.at_end is True

    def test_construct_without_separator(self):
        result = parse("1 2")
        assert result.expression == num(1)
        assert result.remainder == " 2"

    def test_remainder_parses_further(self):
        source = "define sq(n) { return n * n; } sq(3)"
        first = parse(source)
        second = parse(first.remainder)
        assert isinstance(first.expression, BCalcDefine)
        assert second.expression == BCalcCall("sq", (num(3),))
        assert second.at_end is True

    def test_comments_in_remainder(self):
        result = parse("1; # done")
        assert result.remainder == " # done"
        assert result.at_end is True


class TestIncompleteInput:
    """Input that ends inside a construct raises the incomplete-input error."""

    @pytest.mark.parametrize("source", [
        "",
        "   ",
        "# only a comment",
        "1 +",
        "(1 + 2",
        "let x =",
        "let",
        "f(1,",
        "define f(n) {",
        "define f(n) { return n",
        "define f(n) { return n;",
        "if (n == 1) { return 1; }",
        "if (n == 1) { return 1; } else",
        "if (n == 1) { return 1; } else if",
        "2 ^",
    ])
    def test_incomplete(self, source):
        with pytest.raises(BCalcIncompleteInputError):
            parse(source)

    def test_empty_message(self):
        with pytest.raises(BCalcIncompleteInputError, match="Empty expression"):
            parse("")

    def test_incomplete_message(self):
        with pytest.raises(BCalcIncompleteInputError, match="Incomplete input"):
            parse("1 +")


class TestParseErrors:
    """Input that can never become valid raises a plain parse error."""

    @pytest.mark.parametrize("source", [
        ")",
        "1 + * 2",
        "let 5 = 1",
        "let x 5",
        "define (n) { }",
        "define f(1) { }",
        "define f(n) return n;",
        "define f(n) { return n }",
        "if n == 1 { }",
        "if (n = 1) { 1; } else { 0; }",
        "f(1 2)",
        "{ 1; }",
    ])
    def test_invalid(self, source):
        with pytest.raises(BCalcParseError) as exc_info:
            parse(source)

        assert not isinstance(exc_info.value, BCalcIncompleteInputError)

    def test_missing_else(self):
        with pytest.raises(BCalcParseError, match="missing its else block") as exc_info:
            parse("if (n == 1) { return 1; } 2")

        assert not isinstance(exc_info.value, BCalcIncompleteInputError)

    @pytest.mark.parametrize("source", ["let if = 1", "define else() { }", "define f(let) { }"])
    def test_keyword_as_name(self, source):
        with pytest.raises(BCalcParseError, match="cannot be used as a name"):
            parse(source)

    def test_keyword_as_value(self):
        with pytest.raises(BCalcParseError, match="cannot be used as a value"):
            parse("1 + return")

    def test_let_is_not_an_operand(self):
        with pytest.raises(BCalcParseError):
            parse("1 + let x = 2")

    def test_error_position_and_context(self):
        with pytest.raises(BCalcParseError) as exc_info:
            parse("let x = 1 + )")

        error = exc_info.value
        assert error.position == 12
        assert error.received == "Found: ')'"
        assert error.context is not None
        assert "let x = 1 + )" in error.context

    def test_strict_parse_rejects_trailing_tokens(self, helpers):
        with pytest.raises(BCalcParseError, match="Unexpected token after complete expression"):
            helpers.parse("1 2")

    def test_deep_nesting_is_a_parse_error(self):
        with pytest.raises(BCalcParseError, match="too deeply nested"):
            parse("(" * 2000 + "1" + ")" * 2000)


class TestDescribe:
    """Rendered trees re-parse to the same tree."""

    @pytest.mark.parametrize("source", [
        "1 * 2 + 3 / 4 ^ 6",
        "(1 - 2) - (3 - 4)",
        "2 ^ 3 ^ 2",
        "-2.5 * x",
        "let x = sqrt(16) + 1",
        "define f(a, b) { let c = a * b; return c; }",
        "define g() { }",
        "if (a == 1) { 1; } else if (a == 2) { 2; } else { 3; }",
    ])
    def test_round_trip(self, helpers, source):
        expr = helpers.parse(source)
        assert helpers.parse(expr.describe()) == expr
