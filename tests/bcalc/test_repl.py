"""Tests for the read-eval-print loop."""

import io

import pytest

from bcalc import BCalc, BCalcRepl


def run_repl(text, calc=None, prompt="> "):
    output = io.StringIO()
    repl = BCalcRepl(calc, io.StringIO(text), output, prompt=prompt)
    error_count = repl.run()
    return output.getvalue(), error_count


class TestProcessLine:
    """Test evaluation of single lines."""

    @pytest.fixture
    def repl(self):
        return BCalcRepl(input_stream=io.StringIO(), output_stream=io.StringIO())

    def test_value(self, repl):
        assert repl.process_line("1 + 2") == "3"

    def test_blank_line(self, repl):
        assert repl.process_line("   \n") is None
        assert repl.error_count == 0

    def test_state_persists_between_lines(self, repl):
        repl.process_line("let x = 4")
        repl.process_line("define twice(n) { return n * 2; }")
        assert repl.process_line("twice(x)") == "8"

    def test_error_is_returned_as_text(self, repl):
        output = repl.process_line("missing + 1")
        assert output.startswith("Error: Undefined variable: 'missing'")
        assert repl.error_count == 1

    def test_session_continues_after_error(self, repl):
        repl.process_line("1 +")
        assert repl.process_line("2 * 2") == "4"
        assert repl.error_count == 1


class TestRun:
    """Test the interactive loop."""

    def test_prompts_and_results(self):
        output, error_count = run_repl("let x = 2\nx * 3\n")
        assert output == "> 2\n> 6\n> \n"
        assert error_count == 0

    def test_blank_lines_produce_no_output(self):
        output, _ = run_repl("\n\n1\n")
        assert output == "> > > 1\n> \n"

    @pytest.mark.parametrize("command", ["exit", "quit", "  quit  "])
    def test_exit_commands(self, command):
        output, _ = run_repl(f"1\n{command}\n2\n")
        assert output == "> 1\n> "

    def test_errors_are_reported_and_counted(self):
        output, error_count = run_repl("1 / 0\nbad(\n0 / 0\n")
        lines = output.split("\n")
        assert lines[0] == "> inf"
        assert lines[1].startswith("> Error: Incomplete input")
        assert "> nan" in lines
        assert error_count == 1

    def test_end_of_input_without_newline(self):
        output, _ = run_repl("7")
        assert output == "> 7\n> \n"

    def test_custom_prompt(self):
        output, _ = run_repl("1\n", prompt="bcalc> ")
        assert output == "bcalc> 1\nbcalc> \n"

    def test_uses_the_given_session(self):
        calc = BCalc()
        run_repl("let kept = 9\n", calc=calc)
        assert calc.evaluate("kept") == 9.0
