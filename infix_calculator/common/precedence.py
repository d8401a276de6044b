"""Operator precedence ranks used by the infix to postfix conversion."""

# Higher binds tighter
PRECEDENCE: dict[str, int] = {
    "~": 9,
    "*": 8,
    "/": 8,
    "+": 7,
    "-": 7,
    "<<": 6,
    ">>": 6,
    "<": 5,
    ">": 5,
    "&": 4,
    "|": 3,
    "^": 2,
    "=": 1,
}

# Rank of any lexeme missing from the table
UNKNOWN_PRECEDENCE = 0


def precedence(operator: str) -> int:
    """
    Return the binding rank of an operator lexeme.

    Unrecognized lexemes rank below every real operator instead of failing.

    :param str operator: Operator lexeme, e.g. "+" or "<<"

    :return: Precedence rank
    :rtype: int
    """
    return PRECEDENCE.get(operator, UNKNOWN_PRECEDENCE)
