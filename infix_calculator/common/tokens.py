"""Token value objects passed between the pipeline stages."""
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TokenKind(str, Enum):
    NUMBER = "number"
    VARIABLE = "variable"
    OPERATOR = "operator"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"


def kind_of(lexeme: str) -> TokenKind:
    """
    Classify a lexeme.

    :param str lexeme: Non-empty source text of one token

    :return: The token kind implied by the lexeme
    :rtype: TokenKind
    """
    first = lexeme[0]
    if first.isascii() and first.isdigit():
        return TokenKind.NUMBER
    if len(lexeme) == 1 and first.isascii() and first.isalpha():
        return TokenKind.VARIABLE
    if lexeme == "(":
        return TokenKind.LEFT_PAREN
    if lexeme == ")":
        return TokenKind.RIGHT_PAREN
    return TokenKind.OPERATOR


class Token(BaseModel):
    """
    A single lexical token.

    Tokens are immutable; the lexeme alone determines the kind.
    """

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="Token category")
    lexeme: str = Field(..., min_length=1, description="Exact source text")

    @model_validator(mode="after")
    def kind_matches_lexeme(self) -> "Token":
        """Reject a kind that disagrees with the lexeme."""
        expected = kind_of(self.lexeme)
        if self.kind is not expected:
            raise ValueError(f"Lexeme {self.lexeme!r} is a {expected.value}, not a {self.kind.value}")
        return self

    @classmethod
    def from_lexeme(cls, lexeme: str) -> "Token":
        return cls(kind=kind_of(lexeme), lexeme=lexeme)

    def __str__(self) -> str:
        return self.lexeme


def render(tokens: Iterable[Token]) -> str:
    """Join token lexemes with single spaces, e.g. ``"a b + c *"``."""
    return " ".join(token.lexeme for token in tokens)
