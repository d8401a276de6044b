"""Worker process evaluating one session of expression lines."""
from multiprocessing.connection import Connection
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from infix_calculator.common.config import MAX_TOKENS
from infix_calculator.common.logger import logger
from infix_calculator.common.models import OperationRequest, OperationResult
from infix_calculator.repl.session import CalculatorRepl


class SessionWorker(BaseModel):
    """
    Worker process responsible for evaluating every request of one client session.

    Lifecycle:
        - Spawned by the parent server process, one per connection
        - Evaluates the requests in order against a fresh Environment, so
          assignments are visible to later lines of the same session only
        - Sends one result per request through a Pipe, then a None sentinel
        - Terminates immediately after the last request
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to server")
    requests: List[OperationRequest] = Field(..., description="Expression requests of the session, in order")
    max_tokens: Optional[int] = Field(default=MAX_TOKENS, ge=1, description="Token bound per line")

    def run(self) -> None:
        """
        Evaluate the session and send each result or error through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Session worker started with {len(self.requests)} requests")
        session = CalculatorRepl(max_tokens=self.max_tokens, color=False)
        failures = 0

        try:
            for request in self.requests:
                try:
                    outcome = session.evaluate_line(request.expression)
                except Exception as exc:
                    # Report unexpected failures per line instead of killing the session
                    logger.error(f"👷❌ Worker failed on line {session.line_number}: {exc}")
                    outcome = OperationResult(
                        line=session.line_number, expression=request.expression, error=str(exc)
                    )

                if not outcome.ok:
                    failures += 1
                self.conn.send(outcome.model_dump())

            # Signal the end of the session
            self.conn.send(None)

        finally:
            # Always close the connection
            self.conn.close()
            logger.info(
                f"👷✅ Session worker finished: {len(self.requests)} requests, {failures} errors, "
                f"variables {session.env.snapshot()}"
            )
