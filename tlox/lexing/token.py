from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from tlox.language.lox_types import LoxLiteral


class Tk(Enum):
    # single-char
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    SEMICOLON = ";"
    STAR = "*"
    # compoundable
    BANG = "!"
    EQUAL = "="
    GREATER = ">"
    LESS = "<"
    BANG_EQUAL = "!="
    EQUAL_EQUAL = "=="
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    SLASH = "/"  # Doubles as the start of a comment, scanned before the other symbols.
    # keywords
    AND = "@AND"
    CLASS = "@CLASS"
    ELSE = "@ELSE"
    FALSE = "@FALSE"
    FOR = "@FOR"
    FUN = "@FUN"
    IF = "@IF"
    NIL = "@NIL"
    OR = "@OR"
    PRINT = "@PRINT"
    RETURN = "@RETURN"
    SUPER = "@SUPER"
    THIS = "@THIS"
    TRUE = "@TRUE"
    VAR = "@VAR"
    WHILE = "@WHILE"
    # literals
    IDENTIFIER = "<identifier>"
    STRING = "<string>"
    NUMBER = "<number>"
    EOF = "<eof>"

    @property
    def is_keyword(self) -> bool:
        return self.value.startswith("@")


# Symbols have their own text as value. Keywords are prefixed by "@" and literals are
# spelled out in angle brackets, so neither can be mistaken for a symbol.
SINGLE_CHAR_TOKENS = tuple(
    variant.value for variant in Tk
    if len(variant.value) == 1
)
COMPOUND_TOKENS = tuple(
    variant.value for variant in Tk
    if len(variant.value) == 2 and not variant.is_keyword
)
KEYWORDS: Dict[str, Tk] = {variant.name.lower(): variant for variant in Tk if variant.is_keyword}


@dataclass(frozen=True)
class Token:
    """A representation of a token. `line` is the 1-based line the lexeme starts on and
    `offset` is the number of characters between the start of the source and the lexeme."""
    token_type: Tk
    lexeme: str
    literal: Optional[LoxLiteral]
    line: int
    offset: int = -1

    def __eq__(self, other: Any) -> bool:
        """Compare a `Tk` to a `Token`'s own type.

        i.e., a `Token` of type `FOO` is equal to `Tk.FOO`. This provides better
        ergonomics when used in a `StreamView`."""
        if isinstance(other, Tk):
            return self.token_type is other
        if isinstance(other, Token):
            return (self.token_type, self.lexeme, self.literal, self.line) == \
                (other.token_type, other.lexeme, other.literal, other.line)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.token_type, self.lexeme, self.line))

    def __str__(self) -> str:
        attributes = ", ".join(
            f"{name}={repr(getattr(self, name))}"
            for name in ("lexeme", "literal", "line")
        )
        return f"{self.token_type.name}: {attributes}"

    def to_string(self) -> str:
        """Replicate `toString()` output from JLox."""
        attributes = f"{self.lexeme} {str(self.literal).replace('None', 'null')}"
        return f"{self.token_type.name} {attributes}"
