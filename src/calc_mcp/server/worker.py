"""Worker process for evaluating one expression of a batch."""
from multiprocessing.connection import Connection
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calc_mcp.common.logger import logger
from calc_mcp.common.operations import OperationRequest, OperationResult
from calc_mcp.server.service import CalculatorService


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch server
        - Receives one expression only
        - Sends a payload through a Pipe: the line number plus the dumped OperationResult
        - Terminates immediately after computation
    """

    # Immutable, and allows multiprocessing.Connection as a field type
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to server")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")
    service: CalculatorService = Field(default_factory=CalculatorService, description="Service evaluating the expression")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def _payload(self, result: OperationResult) -> Dict[str, Any]:
        return {"line": self.line_number, **result.model_dump()}

    def run(self) -> None:
        """
        Evaluate the expression and send the payload through the pipe.

        Unexpected exceptions are reported as error payloads, so the server never
        waits on a worker that died without answering.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        try:
            result = self.service.calculate(OperationRequest(expression=self.expression))
        except Exception as exc:
            logger.exception(f"👷💥 Worker crashed on line {self.line_number}: {exc}")
            result = OperationResult(expression=self.expression, error=f"Internal error: {exc}")

        try:
            self.conn.send(self._payload(result))
        finally:
            # Always close the connection
            self.conn.close()

        if result.ok:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {result.result}")
        else:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {result.error}\n"
                f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
            )
