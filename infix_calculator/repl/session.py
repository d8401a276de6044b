"""Interactive read-evaluate-print loop over one persistent environment."""
from typing import Optional, TextIO

from pydantic import BaseModel, Field

from infix_calculator.common.config import DEFAULT_PROMPT, MAX_TOKENS
from infix_calculator.common.environment import Environment
from infix_calculator.common.errors import EvalError
from infix_calculator.common.logger import logger
from infix_calculator.common.models import OperationResult
from infix_calculator.common.parser import evaluate_expression

PROMPT_COLOR = "\033[35m"
RESET_COLOR = "\033[0m"


class CalculatorRepl(BaseModel):
    """
    Read expressions line by line and print their values.

    Lifecycle:
        - One environment for the whole session; assignments carry over between lines
        - Errors are printed and the loop moves on to the next line
        - Ends at end of input with exit status 0
    """

    prompt: str = Field(default=DEFAULT_PROMPT, description="Prompt shown before each line")
    color: bool = Field(default=True, description="Render the prompt in magenta")
    max_tokens: Optional[int] = Field(default=MAX_TOKENS, ge=1, description="Token bound per line")
    env: Environment = Field(default_factory=Environment, description="Session variables")
    line_number: int = Field(default=0, ge=0, description="Lines evaluated so far")

    def _render_prompt(self) -> str:
        if self.color:
            return f"{PROMPT_COLOR}{self.prompt}{RESET_COLOR}"
        return self.prompt

    def evaluate_line(self, line: str) -> OperationResult:
        """
        Evaluate one line against the session environment.

        :param str line: Expression text, already stripped

        :return: Result or error for the line
        :rtype: OperationResult
        """
        self.line_number += 1
        try:
            value = evaluate_expression(line, self.env, max_tokens=self.max_tokens)
        except EvalError as exc:
            logger.info(f"Line {self.line_number} failed: {exc}")
            return OperationResult(line=self.line_number, expression=line, error=str(exc))
        return OperationResult(line=self.line_number, expression=line, result=value)

    def run(self, stdin: TextIO, stdout: TextIO) -> int:
        """
        Run the loop until ``stdin`` is exhausted.

        :param TextIO stdin: Input stream
        :param TextIO stdout: Output stream

        :return: Process exit status
        :rtype: int
        """
        while True:
            stdout.write(self._render_prompt())
            stdout.flush()
            raw = stdin.readline()
            if not raw:
                break
            line = raw.strip()
            if not line:
                continue

            outcome = self.evaluate_line(line)
            if outcome.ok:
                stdout.write(f"{outcome.result}\n")
            else:
                stdout.write(f"error: {outcome.error}\n")

        stdout.write("\n")
        stdout.flush()
        return 0
