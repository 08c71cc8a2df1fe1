"""Token types and token representation for BCalc source text."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class BCalcTokenType(Enum):
    """Token types for BCalc source text."""
    NUMBER = "NUMBER"
    NAME = "NAME"
    KEYWORD = "KEYWORD"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    CARET = "^"
    ASSIGN = "="
    EQUAL = "=="
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    COMMA = ","
    SEMICOLON = ";"


KEYWORDS = frozenset({"let", "define", "return", "if", "else"})


@dataclass
class BCalcToken:
    """Represents a single token in BCalc source text."""
    type: BCalcTokenType
    value: Any
    position: int
    length: int = 1

    @property
    def end(self) -> int:
        """Character offset just past this token."""
        return self.position + self.length

    def is_keyword(self, keyword: str) -> bool:
        """Check if this token is the given reserved keyword."""
        return self.type == BCalcTokenType.KEYWORD and self.value == keyword

    def __repr__(self) -> str:
        return f"BCalcToken({self.type.name}, {self.value!r}, pos={self.position})"
