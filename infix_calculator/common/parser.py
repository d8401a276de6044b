"""Parse and evaluate integer infix expressions."""
from typing import List, Optional

from infix_calculator.common.config import MAX_TOKENS
from infix_calculator.common.environment import Environment
from infix_calculator.common.errors import UnbalancedParensError
from infix_calculator.common.evaluator import PostfixEvaluator
from infix_calculator.common.logger import logger
from infix_calculator.common.precedence import precedence
from infix_calculator.common.tokenizer import tokenize
from infix_calculator.common.tokens import Token, TokenKind, render


class ExpressionParser:
    """
    Parse and evaluate integer expressions with variables and assignment.

    Design constraints:
        - No eval(), no dynamic code execution
        - Integer-only, fixed-width (32-bit) arithmetic
        - Variables persist in an Environment owned by the caller

    Algorithm:
        1. Tokenize the raw text (numbers, single-letter variables, operators, parentheses)
        2. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        3. Evaluate RPN using a stack, binding variables on '='

    The Shunting-yard algorithm converts an infix expression into Reverse Polish Notation (RPN), allowing safe, stack-based evaluation without parentheses.
    It handles operator precedence by temporarily storing operators on a stack and outputting them in the correct order.
    Operators of equal precedence pop each other, so every binary operator groups left to right.

    Examples:
        - Infix expression (standard notation): a = (3 + 4) * 2
        - Corresponding Reverse Polish Notation (RPN): a 3 4 + 2 * =

    """

    @staticmethod
    def tokenize(expr: str, max_tokens: Optional[int] = MAX_TOKENS) -> List[Token]:
        """
        Split an expression into tokens.

        Whitespace is optional (e.g., "3+4*2" and "3 + 4 * 2" give the same tokens).

        :param str expr: Expression as a string
        :param max_tokens: Token bound, None for unbounded

        :return: List of tokens
        :rtype: List[Token]
        :raises TokenOverflowError: If the bound is exceeded
        """
        return tokenize(expr, max_tokens=max_tokens)

    @staticmethod
    def to_postfix(tokens: List[Token]) -> List[Token]:
        """
        Convert a list of tokens into postfix order using the Shunting-yard algorithm.

        :param List[Token] tokens: Tokens in infix order

        :return: List of tokens in RPN order
        :rtype: List[Token]
        :raises UnbalancedParensError: If parentheses do not match
        """
        output: List[Token] = []
        stack: List[Token] = []

        for token in tokens:
            if token.kind in (TokenKind.NUMBER, TokenKind.VARIABLE):
                # Operands are added directly to the output
                output.append(token)
            elif token.kind is TokenKind.OPERATOR:
                # Pop operators with higher or equal precedence, stopping at a parenthesis
                prec = precedence(token.lexeme)
                while (
                    stack
                    and stack[-1].kind is TokenKind.OPERATOR
                    and precedence(stack[-1].lexeme) >= prec
                ):
                    output.append(stack.pop())
                stack.append(token)
            elif token.kind is TokenKind.LEFT_PAREN:
                stack.append(token)
            else:
                while stack and stack[-1].kind is not TokenKind.LEFT_PAREN:
                    output.append(stack.pop())
                if not stack:
                    raise UnbalancedParensError("Unmatched ')'")
                # Discard the matching '('
                stack.pop()

        # Append remaining operators in reverse order (stack top first)
        while stack:
            token = stack.pop()
            if token.kind is TokenKind.LEFT_PAREN:
                raise UnbalancedParensError("Unmatched '('")
            output.append(token)

        logger.debug("Postfix: %s", render(output))
        return output

    @staticmethod
    def evaluate(postfix: List[Token], env: Environment) -> int:
        """
        Evaluate a postfix token sequence against an environment.

        :param List[Token] postfix: Tokens in RPN order
        :param Environment env: Variable bindings, updated on assignment

        :return: Computed result
        :rtype: int
        :raises EvalError: If the sequence cannot be evaluated
        """
        return PostfixEvaluator(env).evaluate(postfix)


def evaluate_expression(line: str, env: Environment, max_tokens: Optional[int] = MAX_TOKENS) -> int:
    """
    Tokenize, convert and evaluate one line of input.

    :param str line: Expression text
    :param Environment env: Session environment, left untouched on failure
    :param max_tokens: Token bound, None for unbounded

    :return: Integer value of the expression
    :rtype: int
    :raises EvalError: On any tokenize, conversion or evaluation failure
    """
    tokens = ExpressionParser.tokenize(line, max_tokens=max_tokens)
    postfix = ExpressionParser.to_postfix(tokens)
    return ExpressionParser.evaluate(postfix, env)
