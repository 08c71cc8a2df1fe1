"""Line-oriented read-eval-print loop for BCalc."""

import logging
import sys
from typing import TextIO

from bcalc.bcalc import BCalc
from bcalc.bcalc_error import BCalcError


class BCalcRepl:
    """Reads one line at a time, evaluates it, and writes the value or the error."""

    EXIT_COMMANDS = frozenset({"exit", "quit"})

    def __init__(
        self,
        calc: BCalc | None = None,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
        prompt: str = "> "
    ):
        """
        Initialize the REPL.

        Args:
            calc: Session to evaluate in (a fresh one if omitted)
            input_stream: Where lines are read from (stdin by default)
            output_stream: Where prompts and results are written (stdout by default)
            prompt: Prompt written before each line
        """
        self.calc = calc if calc is not None else BCalc()
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output_stream = output_stream if output_stream is not None else sys.stdout
        self.prompt = prompt
        self.error_count = 0
        self._logger = logging.getLogger("BCalcRepl")

    def process_line(self, line: str) -> str | None:
        """
        Evaluate one line of input.

        Returns:
            The formatted value or error message, or None for a blank line
        """
        if not line.strip():
            return None

        try:
            return self.calc.evaluate_and_format(line)

        except BCalcError as e:
            self.error_count += 1
            self._logger.info("Error evaluating %r: %s", line.strip(), e.message)
            return str(e)

    def run(self) -> int:
        """
        Run until end of input or an exit command.

        Returns:
            Number of lines that produced an error
        """
        while True:
            self.output_stream.write(self.prompt)
            self.output_stream.flush()

            line = self.input_stream.readline()
            if line == "":
                self.output_stream.write("\n")
                break

            if line.strip() in self.EXIT_COMMANDS:
                break

            output = self.process_line(line)
            if output is None:
                continue

            self.output_stream.write(f"{output}\n")
            self.output_stream.flush()

        return self.error_count
