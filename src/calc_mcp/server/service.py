"""The "calculate" operation shared by every transport."""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from calc_mcp.common.config import get_settings
from calc_mcp.common.errors import EvalError
from calc_mcp.common.logger import logger
from calc_mcp.common.operations import OperationRequest, OperationResult
from calc_mcp.common.parser import ExpressionParser


SERVER_NAME = "calc-mcp"
SERVER_VERSION = "0.1.0"
SERVER_INSTRUCTIONS = "Calculator server: send an arithmetic expression, get its computed result back."

TOOL_NAME = "calculate"
TOOL_DESCRIPTION = (
    "Evaluate an arithmetic expression and return the computed result. Supports the four basic "
    "operators, exponentiation (^), parentheses, and the functions sqrt, abs, sin, cos, tan and ln. "
    "Input is validated and protected against malicious expressions."
)


class ServerInfo(BaseModel):
    """Identity advertised to clients."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default=SERVER_NAME, description="Server name")
    version: str = Field(default=SERVER_VERSION, description="Server version")
    instructions: str = Field(default=SERVER_INSTRUCTIONS, description="Usage hint for clients")


class CalculatorService(BaseModel):
    """
    Evaluate calculation requests.

    The service is stateless: a failure in one call never affects the next one.
    Evaluation errors are returned as failed results, other exceptions propagate.
    """

    model_config = ConfigDict(frozen=True)

    parser: ExpressionParser = Field(
        default_factory=lambda: ExpressionParser.from_settings(get_settings()),
        description="Parser holding the evaluation limits",
    )

    def calculate(self, request: OperationRequest) -> OperationResult:
        """
        Evaluate the expression of a request.

        :param OperationRequest request: Calculation request

        :return: Result holding either the value or the error message
        :rtype: OperationResult
        """
        try:
            value = self.parser.evaluate(request.expression)
        except EvalError as exc:
            logger.warning(f"🧮❌ {type(exc).__name__}: {exc} (expression: {request.expression!r})")
            return OperationResult(expression=request.expression, error=str(exc))

        logger.debug(f"🧮✅ {request.expression!r} = {value!r}")
        return OperationResult(expression=request.expression, result=value)

    def server_info(self) -> ServerInfo:
        return ServerInfo()

    def tool_definition(self) -> Dict[str, Any]:
        """
        Describe the "calculate" operation for capability advertisement.

        :return: Tool name, description and JSON schema of its input
        :rtype: Dict[str, Any]
        """
        return {
            "name": TOOL_NAME,
            "description": TOOL_DESCRIPTION,
            "inputSchema": OperationRequest.model_json_schema(),
        }
