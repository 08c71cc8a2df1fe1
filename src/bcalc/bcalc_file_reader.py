"""Streaming reader that parses BCalc source files chunk by chunk."""

import logging
from typing import Iterator, TextIO, Tuple

from bcalc.bcalc import BCalc, parse
from bcalc.bcalc_ast import BCalcExpression
from bcalc.bcalc_error import BCalcIncompleteInputError
from bcalc.bcalc_tokenizer import BCalcTokenizer


class BCalcFileReader:
    """
    Iterates over the top-level constructs of a BCalc source file.

    The file is read `chunk_size` characters at a time.  Constructs are parsed
    from the front of a buffer, up to its last whitespace character: text after
    that might be the first half of a token that the next chunk completes.
    When the parser reports incomplete input, or when a construct reaches the
    last token parsed (it might continue in the next chunk), another chunk is
    appended and the parse is retried.  Once the file is exhausted, incomplete
    input is reported as a parse error.
    """

    def __init__(self, path: str, chunk_size: int = 5000):
        """
        Initialize the reader.

        Args:
            path: Path of the source file
            chunk_size: Number of characters to read per chunk
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")

        self.path = path
        self.chunk_size = chunk_size
        self._logger = logging.getLogger("BCalcFileReader")

    def __iter__(self) -> Iterator[BCalcExpression]:
        with open(self.path, 'r', encoding='utf-8') as stream:
            yield from self.read_stream(stream)

    def read_stream(self, stream: TextIO) -> Iterator[BCalcExpression]:
        """
        Yield each parsed construct from an open text stream.

        Raises:
            BCalcParseError: If the text does not match the grammar, or ends
                inside a construct
        """
        buffer = ""
        eof = False

        while True:
            text, held = self._split_partial_token(buffer, eof)
            try:
                result = parse(text)

            except BCalcIncompleteInputError:
                if eof:
                    if self._is_blank(buffer):
                        return

                    raise

                buffer, eof = self._read_chunk(stream, buffer)
                continue

            if result.at_end and not eof:
                buffer, eof = self._read_chunk(stream, buffer)
                continue

            yield result.expression
            buffer = result.remainder + held

    def _read_chunk(self, stream: TextIO, buffer: str) -> Tuple[str, bool]:
        """Append the next chunk to buffer, reporting end of file."""
        chunk = stream.read(self.chunk_size)
        if not chunk:
            self._logger.debug("Reached end of %s", self.path)
            return buffer, True

        self._logger.debug("Read %d characters from %s", len(chunk), self.path)
        return buffer + chunk, False

    def _is_blank(self, buffer: str) -> bool:
        """Check whether buffer holds only whitespace and comments."""
        return not BCalcTokenizer().tokenize(buffer)

    def _split_partial_token(self, buffer: str, eof: bool) -> Tuple[str, str]:
        """Split buffer after its last whitespace character, unless the file is exhausted."""
        if eof:
            return buffer, ""

        cut = len(buffer)
        while cut > 0 and not buffer[cut - 1].isspace():
            cut -= 1

        return buffer[:cut], buffer[cut:]


def run_file(path: str, calc: BCalc | None = None, chunk_size: int = 5000) -> float:
    """
    Evaluate every construct in a source file, in order.

    Args:
        path: Path of the source file
        calc: Session to evaluate in (a fresh one if omitted)
        chunk_size: Number of characters to read per chunk

    Returns:
        The value of the last construct, or 0 for an empty file

    Raises:
        BCalcParseError: If the file does not parse
        BCalcEvalError: If evaluation fails
    """
    session = calc if calc is not None else BCalc()
    result = 0.0
    for expression in BCalcFileReader(path, chunk_size):
        result = session.evaluate_expression(expression)

    return result
