"""Errors raised by the tokenize -> postfix -> evaluate pipeline."""


class EvalError(ValueError):
    """Base class for every recoverable, per-line evaluation failure."""


class TokenOverflowError(EvalError):
    """The input produced more tokens than the configured bound."""

    def __init__(self, max_tokens: int):
        self.max_tokens = max_tokens
        super().__init__(f"Too many tokens (limit is {max_tokens})")


class UnbalancedParensError(EvalError):
    """Mismatched parentheses found while converting to postfix."""


class DivisionByZeroError(EvalError):
    """Integer division by zero."""

    def __init__(self) -> None:
        super().__init__("Division by zero")


class StackUnderflowError(EvalError):
    """An operator needed more operands than the stack held."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Not enough operands for operator {operator!r}")


class EmptyExpressionError(EvalError):
    """Nothing to evaluate."""

    def __init__(self) -> None:
        super().__init__("Empty expression")


class InvalidAssignmentTargetError(EvalError):
    """The left operand of '=' was not a variable."""

    def __init__(self) -> None:
        super().__init__("Left side of '=' must be a variable")
