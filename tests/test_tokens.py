"""Test the Token model."""
from pydantic import ValidationError
import pytest

from infix_calculator.common.tokens import Token, TokenKind, render


@pytest.mark.parametrize("lexeme,kind", [
    ("42", TokenKind.NUMBER),
    ("0x1f", TokenKind.NUMBER),
    ("a", TokenKind.VARIABLE),
    ("Z", TokenKind.VARIABLE),
    ("(", TokenKind.LEFT_PAREN),
    (")", TokenKind.RIGHT_PAREN),
    ("<<", TokenKind.OPERATOR),
    ("%", TokenKind.OPERATOR),
])
def test_from_lexeme(lexeme, kind):
    """The lexeme alone determines the kind."""
    token = Token.from_lexeme(lexeme)
    assert token.kind is kind
    assert token.lexeme == lexeme


def test_kind_must_match_lexeme():
    with pytest.raises(ValidationError):
        Token(kind=TokenKind.NUMBER, lexeme="a")


def test_empty_lexeme_rejected():
    with pytest.raises(ValidationError):
        Token(kind=TokenKind.OPERATOR, lexeme="")


def test_tokens_are_immutable_values():
    token = Token.from_lexeme("+")
    with pytest.raises(ValidationError):
        token.lexeme = "-"
    assert token == Token(kind=TokenKind.OPERATOR, lexeme="+")


def test_render():
    tokens = [Token.from_lexeme(lexeme) for lexeme in ("a", "b", "+")]
    assert render(tokens) == "a b +"
    assert str(tokens[2]) == "+"
