"""Test class CalculatorService."""
import pytest

from calc_mcp.common.operations import OperationRequest
from calc_mcp.common.parser import ExpressionParser
from calc_mcp.server.service import CalculatorService


@pytest.mark.parametrize("expr,expected", [
    ("2 + 3", "Result: 5"),
    ("4 * 5", "Result: 20"),
    ("2 + 3 * 4", "Result: 14"),
    ("(2 + 3) * 4", "Result: 20"),
    ("sqrt(25)", "Result: 5"),
    ("abs(-10)", "Result: 10"),
    ("25^0.5", "Result: 5"),
    ("3.14 * 2", "Result: 6.28"),
    ("2^3", "Result: 8"),
])
def test_calculate_success(expr: str, expected: str) -> None:
    """Successful calculations render the result label and the number."""
    result = CalculatorService().calculate(OperationRequest(expression=expr))
    assert result.ok
    assert result.text == expected


@pytest.mark.parametrize("expr,fragment", [
    ("2 +", "Unexpected end of expression"),
    ("x + 1", "Unsupported function: x"),
    ("1 / 0", "Division by zero"),
    ("sqrt(-1)", "sqrt"),
    ("2 + 3; rm -rf /", "unsafe character"),
    ("1+" * 1000, "too long"),
])
def test_calculate_failure(expr: str, fragment: str) -> None:
    """Failures are returned as results carrying the error label and message."""
    result = CalculatorService().calculate(OperationRequest(expression=expr))
    assert not result.ok
    assert result.result is None
    assert result.text.startswith("Calculation error: ")
    assert fragment in result.text


def test_calculate_is_repeatable() -> None:
    """Repeated calls give byte-identical outputs, even after failures."""
    service = CalculatorService()
    first = service.calculate(OperationRequest(expression="sin(2) / 3")).text
    service.calculate(OperationRequest(expression="1 / 0"))
    assert service.calculate(OperationRequest(expression="sin(2) / 3")).text == first


def test_service_uses_given_parser() -> None:
    """The service applies the limits of its parser."""
    service = CalculatorService(parser=ExpressionParser(max_expression_length=3))
    assert not service.calculate(OperationRequest(expression="1 + 2")).ok


def test_server_info() -> None:
    """The server advertises its name, version and instructions."""
    info = CalculatorService().server_info()
    assert info.name == "calc-mcp"
    assert info.version == "0.1.0"
    assert "arithmetic expression" in info.instructions


def test_tool_definition() -> None:
    """The tool definition exposes the calculate operation and its input schema."""
    tool = CalculatorService().tool_definition()
    assert tool["name"] == "calculate"
    assert "sqrt" in tool["description"]
    assert tool["inputSchema"]["required"] == ["expression"]
    assert tool["inputSchema"]["properties"]["expression"]["type"] == "string"
