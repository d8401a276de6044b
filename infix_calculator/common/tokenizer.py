"""Split raw expression text into tokens and parse numeric literals."""
import string
from typing import List, Optional

from infix_calculator.common.config import INT_BITS, MAX_TOKENS
from infix_calculator.common.errors import TokenOverflowError
from infix_calculator.common.logger import logger
from infix_calculator.common.tokens import Token, TokenKind

DIGITS = string.digits
OCT_DIGITS = string.octdigits
HEX_DIGITS = string.hexdigits
BIN_DIGITS = "01"
LETTERS = string.ascii_letters

# Operator characters that pair up into shift operators ("<<", ">>")
SHIFT_CHARS = "<>"

# Literals are reduced to the low INT_BITS bits while parsing
LITERAL_MASK = (1 << INT_BITS) - 1

# Base markers accepted after a leading "0", with the digits they allow
BASE_MARKERS: dict[str, str] = {"x": HEX_DIGITS, "b": BIN_DIGITS}


def _scan_number(text: str, start: int) -> int:
    """Return the index just past the numeric literal starting at ``start``."""
    end = start
    while end < len(text) and text[end] in DIGITS:
        end += 1
    # "0x1f" / "0b101": only when the marker is followed by a valid digit
    if end - start == 1 and text[start] == "0" and end + 1 < len(text):
        allowed = BASE_MARKERS.get(text[end].lower())
        if allowed is not None and text[end + 1] in allowed:
            end += 1
            while end < len(text) and text[end] in allowed:
                end += 1
    return end


def tokenize(text: str, max_tokens: Optional[int] = MAX_TOKENS) -> List[Token]:
    """
    Convert an expression into an ordered list of tokens.

    Rules:
        - Whitespace is skipped.
        - A run of digits (or a 0x / 0b prefixed literal) is one NUMBER.
        - A single letter is one VARIABLE; "ab" is two variables.
        - "<<" and ">>" are single operators; every other character is a
          one-character token. Unknown characters become OPERATOR tokens
          and are dealt with at evaluation time.

    :param str text: Raw expression text
    :param max_tokens: Maximum number of tokens accepted, None for no bound

    :return: List of tokens in source order
    :rtype: List[Token]
    :raises TokenOverflowError: If the input holds more than ``max_tokens`` tokens
    """
    tokens: List[Token] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char.isspace():
            i += 1
            continue

        if char in DIGITS:
            end = _scan_number(text, i)
            token = Token(kind=TokenKind.NUMBER, lexeme=text[i:end])
        elif char in LETTERS:
            end = i + 1
            token = Token(kind=TokenKind.VARIABLE, lexeme=char)
        else:
            end = i + 1
            if char in SHIFT_CHARS and end < len(text) and text[end] == char:
                end += 1
            token = Token.from_lexeme(text[i:end])

        if max_tokens is not None and len(tokens) >= max_tokens:
            raise TokenOverflowError(max_tokens)
        tokens.append(token)
        i = end

    logger.debug("Tokenized %r into %d tokens", text, len(tokens))
    return tokens


def parse_literal(lexeme: str) -> int:
    """
    Parse a numeric literal with automatic base detection.

    - "0x" / "0X" prefix: hexadecimal
    - "0b" / "0B" prefix: binary
    - leading "0" followed by more digits: octal
    - otherwise: decimal

    Like C's ``strtol``, parsing stops at the first digit invalid for the
    detected base, so "09" is 0 and "0178" is 15.

    Digits are folded in modulo 2**INT_BITS, so literals of any length
    parse to the same low bits as their exact value.

    :param str lexeme: NUMBER token lexeme

    :return: Parsed value, unsigned, below 2**INT_BITS
    :rtype: int
    """
    if len(lexeme) > 2 and lexeme[0] == "0" and lexeme[1].lower() in BASE_MARKERS:
        base = 16 if lexeme[1].lower() == "x" else 2
        digits, allowed = lexeme[2:], BASE_MARKERS[lexeme[1].lower()]
    elif len(lexeme) > 1 and lexeme[0] == "0":
        base, digits, allowed = 8, lexeme[1:], OCT_DIGITS
    else:
        base, digits, allowed = 10, lexeme, DIGITS

    value = 0
    for digit in digits:
        if digit not in allowed:
            break
        value = (value * base + int(digit, 16)) & LITERAL_MASK
    return value
