"""Stack-based evaluation of postfix token sequences over 32-bit integers."""
from collections.abc import Callable as ABCCallable
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from infix_calculator.common.config import INT_BITS
from infix_calculator.common.environment import Environment, normalize_name
from infix_calculator.common.errors import (
    DivisionByZeroError,
    EmptyExpressionError,
    InvalidAssignmentTargetError,
    StackUnderflowError,
    UnbalancedParensError,
)
from infix_calculator.common.logger import logger
from infix_calculator.common.tokenizer import parse_literal
from infix_calculator.common.tokens import Token, TokenKind

INT_MIN = -(1 << (INT_BITS - 1))
INT_MASK = (1 << INT_BITS) - 1


def wrap(value: int) -> int:
    """Wrap an unbounded integer to signed two's complement of INT_BITS bits."""
    value &= INT_MASK
    return value - (1 << INT_BITS) if value >> (INT_BITS - 1) else value


def divide(a: int, b: int) -> int:
    """Integer division truncating toward zero, as C does."""
    if b == 0:
        raise DivisionByZeroError()
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def shift_left(a: int, b: int) -> int:
    """Shift left; negative counts shift right, counts past the width give 0."""
    if b < 0:
        return shift_right(a, -b)
    if b >= INT_BITS:
        return 0
    return a << b


def shift_right(a: int, b: int) -> int:
    """Arithmetic shift right; counts past the width leave only the sign."""
    if b < 0:
        return shift_left(a, -b)
    return a >> min(b, INT_BITS)


# Type alias for binary operator functions
OperatorFn: ABCCallable[[int, int], int] = Callable[[int, int], int]

# Binary operators; "~" and "=" are handled by the evaluator itself
OPERATORS: Dict[str, OperatorFn] = {
    "*": lambda a, b: a * b,
    "/": divide,
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "<<": shift_left,
    ">>": shift_right,
    "<": lambda a, b: int(a < b),
    ">": lambda a, b: int(a > b),
    "&": lambda a, b: a & b,
    "|": lambda a, b: a | b,
    "^": lambda a, b: a ^ b,
}

UNARY_NOT = "~"
ASSIGN = "="


class Operand(NamedTuple):
    """Evaluation stack entry; ``name`` is set only when pushed straight from a variable."""

    value: int
    name: Optional[str] = None


class PostfixEvaluator:
    """
    Evaluate postfix (RPN) token sequences against an :class:`Environment`.

    Assignments made while evaluating are staged and only written to the
    environment once the whole sequence has been evaluated successfully,
    so a failing line never leaves partial side effects behind.
    """

    def __init__(self, env: Environment):
        self.env = env
        self._stack: List[Operand] = []
        self._staged: Dict[str, int] = {}

    def _lookup(self, name: str) -> int:
        name = normalize_name(name)
        if name in self._staged:
            return self._staged[name]
        return self.env.get(name)

    def _pop(self, operator: str) -> Operand:
        if not self._stack:
            raise StackUnderflowError(operator)
        return self._stack.pop()

    def _apply(self, operator: str) -> None:
        if operator not in OPERATORS and operator not in (UNARY_NOT, ASSIGN):
            logger.warning(f"Ignoring unsupported operator {operator!r}")
            return

        right = self._pop(operator)
        if operator == UNARY_NOT:
            self._stack.append(Operand(wrap(~right.value)))
            return

        left = self._pop(operator)
        if operator == ASSIGN:
            if left.name is None:
                raise InvalidAssignmentTargetError()
            self._staged[normalize_name(left.name)] = right.value
            self._stack.append(Operand(right.value))
            return

        self._stack.append(Operand(wrap(OPERATORS[operator](left.value, right.value))))

    def evaluate(self, postfix: Sequence[Token]) -> int:
        """
        Evaluate a postfix sequence and commit its assignments.

        :param postfix: Tokens in postfix order, as produced by ``to_postfix``

        :return: Value left on top of the stack
        :rtype: int
        :raises EmptyExpressionError: If the sequence is empty
        :raises StackUnderflowError: If an operator lacks operands
        :raises DivisionByZeroError: On division by zero
        :raises InvalidAssignmentTargetError: If '=' has no variable on its left
        """
        if not postfix:
            raise EmptyExpressionError()

        self._stack = []
        self._staged = {}
        for token in postfix:
            if token.kind is TokenKind.NUMBER:
                self._stack.append(Operand(wrap(parse_literal(token.lexeme))))
            elif token.kind is TokenKind.VARIABLE:
                self._stack.append(Operand(self._lookup(token.lexeme), token.lexeme))
            elif token.kind is TokenKind.OPERATOR:
                self._apply(token.lexeme)
            else:
                # Parentheses never survive a balanced conversion
                raise UnbalancedParensError(f"Unexpected {token.lexeme!r} in postfix input")

        if not self._stack:
            # Only unsupported operators were present
            raise EmptyExpressionError()
        if len(self._stack) > 1:
            logger.warning(f"{len(self._stack)} values left on the stack, using the top one")

        self.env.update(self._staged)
        return self._stack[-1].value


def evaluate(postfix: Sequence[Token], env: Environment) -> int:
    """Evaluate ``postfix`` against ``env``; see :meth:`PostfixEvaluator.evaluate`."""
    return PostfixEvaluator(env).evaluate(postfix)
