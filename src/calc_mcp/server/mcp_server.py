"""MCP server exposing the "calculate" tool over stdio."""
from typing import Annotated, Callable, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from calc_mcp.common.logger import logger
from calc_mcp.common.operations import EXPRESSION_DESCRIPTION, OperationRequest
from calc_mcp.server.service import TOOL_DESCRIPTION, TOOL_NAME, CalculatorService


def make_calculate_tool(service: CalculatorService) -> Callable[[str], str]:
    """
    Build the function registered as the "calculate" tool.

    A failed evaluation raises ToolError, so the MCP response is flagged as an
    error and carries the "Calculation error: ..." text.

    :param CalculatorService service: Service evaluating the expressions

    :return: Tool function taking the expression and returning the result text
    :rtype: Callable[[str], str]
    """

    def calculate(expression: Annotated[str, Field(description=EXPRESSION_DESCRIPTION)]) -> str:
        result = service.calculate(OperationRequest(expression=expression))
        if not result.ok:
            raise ToolError(result.text)
        return result.text

    return calculate


def build_server(service: Optional[CalculatorService] = None) -> FastMCP:
    """
    Create the MCP server with its single "calculate" tool.

    :param CalculatorService service: Service to use, a default one when omitted

    :return: Configured FastMCP server
    :rtype: FastMCP
    """
    service = service or CalculatorService()
    info = service.server_info()

    mcp = FastMCP(name=info.name, version=info.version, instructions=info.instructions)
    mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)(make_calculate_tool(service))
    return mcp


def run(service: Optional[CalculatorService] = None) -> None:
    """Serve the calculator over stdio until the client disconnects."""
    service = service or CalculatorService()
    info = service.server_info()
    logger.info(f"🔌 Starting MCP server {info.name} {info.version} on stdio")
    build_server(service).run(transport="stdio")
