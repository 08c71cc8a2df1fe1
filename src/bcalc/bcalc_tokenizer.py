"""Tokenizer for BCalc source text with detailed error messages."""

from typing import List

from bcalc.bcalc_error import BCalcTokenError
from bcalc.bcalc_token import BCalcToken, BCalcTokenType, KEYWORDS


class BCalcTokenizer:
    """Tokenizes BCalc source text into tokens with detailed error messages."""

    # Single-character punctuation and operators
    SIMPLE_TOKENS = {
        '+': BCalcTokenType.PLUS,
        '-': BCalcTokenType.MINUS,
        '*': BCalcTokenType.STAR,
        '/': BCalcTokenType.SLASH,
        '^': BCalcTokenType.CARET,
        '(': BCalcTokenType.LPAREN,
        ')': BCalcTokenType.RPAREN,
        '{': BCalcTokenType.LBRACE,
        '}': BCalcTokenType.RBRACE,
        ',': BCalcTokenType.COMMA,
        ';': BCalcTokenType.SEMICOLON,
    }

    # ASCII only, so other Unicode digits and letters are invalid characters
    DIGITS = "0123456789"
    LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

    def tokenize(self, expression: str) -> List[BCalcToken]:
        """
        Tokenize BCalc source text with detailed error reporting.

        Args:
            expression: The source text to tokenize

        Returns:
            List of tokens

        Raises:
            BCalcTokenError: If tokenization fails with detailed context
        """
        tokens = []
        i = 0

        while i < len(expression):
            char = expression[i]

            if char.isspace():
                i += 1
                continue

            # Comments - skip from '#' to end of line
            if char == '#':
                while i < len(expression) and expression[i] != '\n':
                    i += 1

                continue

            if char == '=':
                if i + 1 < len(expression) and expression[i + 1] == '=':
                    tokens.append(BCalcToken(BCalcTokenType.EQUAL, '==', i, 2))
                    i += 2
                    continue

                tokens.append(BCalcToken(BCalcTokenType.ASSIGN, '=', i))
                i += 1
                continue

            if char in self.SIMPLE_TOKENS:
                tokens.append(BCalcToken(self.SIMPLE_TOKENS[char], char, i))
                i += 1
                continue

            if self._is_number_start(expression, i):
                number, length = self._read_number(expression, i)
                tokens.append(BCalcToken(BCalcTokenType.NUMBER, number, i, length))
                i += length
                continue

            if char in self.LETTERS:
                name, length = self._read_name(expression, i)
                token_type = BCalcTokenType.KEYWORD if name in KEYWORDS else BCalcTokenType.NAME
                tokens.append(BCalcToken(token_type, name, i, length))
                i += length
                continue

            raise self._invalid_character_error(char, i)

        return tokens

    def _invalid_character_error(self, char: str, position: int) -> BCalcTokenError:
        """Build the error for a character that cannot start any token."""
        char_code = ord(char)

        if char_code < 32:
            char_display = f"\\u{char_code:04x}"
            return BCalcTokenError(
                message=f"Invalid control character in source code: {char_display}",
                position=position,
                received=f"Control character: {char_display} (code {char_code})",
                suggestion="Remove the control character"
            )

        suggestions = {
            '%': "There is no modulo operator; only + - * / ^ are supported",
            '!': "Conditions only support equality: if (a == b) { ... }",
            '<': "Conditions only support equality: if (a == b) { ... }",
            '>': "Conditions only support equality: if (a == b) { ... }",
            '[': "Use parentheses ( ) for grouping, not brackets [ ]",
            ']': "Use parentheses ( ) for grouping, not brackets [ ]",
            '_': "Names may only contain letters",
            '"': "There are no string values; only numbers are supported",
        }

        return BCalcTokenError(
            message=f"Invalid character: {char}",
            position=position,
            received=f"Character: {char} (code {char_code})",
            expected="Letters, digits, whitespace, or one of + - * / ^ = ( ) { } , ; #",
            suggestion=suggestions.get(char, f"'{char}' is not a valid character in BCalc"),
            example="let x = 2 * (3 + 4)"
        )

    def _is_number_start(self, expression: str, pos: int) -> bool:
        """Check if position starts a number literal."""
        char = expression[pos]

        if char in self.DIGITS:
            return True

        # Decimal numbers starting with a dot (like .5) - only if followed by digit
        return char == '.' and pos + 1 < len(expression) and expression[pos + 1] in self.DIGITS

    def _read_digits(self, expression: str, start: int) -> int:
        """Return the index just past a run of ASCII digits starting at start."""
        i = start
        while i < len(expression) and expression[i] in self.DIGITS:
            i += 1

        return i

    def _read_number(self, expression: str, start: int) -> tuple[float, int]:
        """
        Read a decimal number literal: digits, optional fraction, optional exponent.

        A literal must end at whitespace, an operator or punctuation other than
        '(', so `1.2.3`, `2x`, `2e` and `3(4)` are rejected rather than split
        into two constructs.

        Returns:
            Tuple of (number_value, length_consumed)

        Raises:
            BCalcTokenError: If the literal is malformed
        """
        i = self._read_digits(expression, start)

        if i < len(expression) and expression[i] == '.':
            i = self._read_digits(expression, i + 1)

        if i < len(expression) and expression[i] in 'eE':
            j = i + 1
            if j < len(expression) and expression[j] in '+-':
                j += 1

            exponent_end = self._read_digits(expression, j)
            if exponent_end > j:
                i = exponent_end

        if i < len(expression) and expression[i] in self.DIGITS + self.LETTERS + '.(':
            raise self._malformed_number_error(expression, start, i)

        literal = expression[start:i]
        try:
            return float(literal), i - start

        except ValueError as e:
            raise BCalcTokenError(
                message=f"Invalid number format: {literal}",
                position=start,
                received=f"Malformed number token: {literal}",
                expected="Valid number format",
                example="Valid: 1.23, .5, 42, 1e-10"
            ) from e

    def _malformed_number_error(self, expression: str, start: int, stop: int) -> BCalcTokenError:
        """Build the error for a number literal that runs into another character."""
        if expression[stop] == '(':
            return BCalcTokenError(
                message=f"Invalid number format: {expression[start:stop + 1]}",
                position=start,
                received=f"Number followed directly by '(': {expression[start:stop + 1]}",
                expected="An operator between a number and '('",
                suggestion="There is no implicit multiplication; write the '*' explicitly",
                example="3 * (4)"
            )

        end = stop
        while end < len(expression) and expression[end] in self.DIGITS + self.LETTERS + '.':
            end += 1

        literal = expression[start:end]
        return BCalcTokenError(
            message=f"Invalid number format: {literal}",
            position=start,
            received=f"Malformed number token: {literal}",
            expected="Valid number format",
            suggestion="Separate numbers from names with an operator, e.g. 2 * x",
            example="Valid: 1.23, .5, 42, 1e-10"
        )

    def _read_name(self, expression: str, start: int) -> tuple[str, int]:
        """Read a run of ASCII letters; a name running into a digit is rejected."""
        i = start
        while i < len(expression) and expression[i] in self.LETTERS:
            i += 1

        if i < len(expression) and expression[i] in self.DIGITS:
            end = self._read_digits(expression, i)
            bad_name = expression[start:end]
            raise BCalcTokenError(
                message=f"Invalid name: {bad_name}",
                position=start,
                received=f"Name containing digits: {bad_name}",
                expected="A name made of letters only",
                suggestion="Names may only contain letters",
                example="let total = 1"
            )

        return expression[start:i], i - start
