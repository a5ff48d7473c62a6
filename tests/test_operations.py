"""Test classes OperationRequest and OperationResult."""
import math

from pydantic import ValidationError
import pytest

from calc_mcp.common.operations import OperationRequest, OperationResult, format_number


def test_operation_request_valid() -> None:
    """Test that a valid OperationRequest can be created."""
    req = OperationRequest(expression="2 + 2 * 3")
    assert req.expression == "2 + 2 * 3"


def test_operation_request_invalid_type() -> None:
    """Test that non-string expressions raise a validation error."""
    with pytest.raises(ValidationError):
        OperationRequest(expression=123)


def test_operation_request_schema_describes_syntax() -> None:
    """The expression description lists the supported syntax."""
    description = OperationRequest.model_json_schema()["properties"]["expression"]["description"]
    for item in ["+", "-", "*", "/", "^", "sqrt", "abs", "sin", "cos", "tan", "ln"]:
        assert item in description


def test_operation_result_success() -> None:
    """A successful result renders with the result label."""
    res = OperationResult(expression="2 + 2 * 3", result=8.0)
    assert res.ok
    assert res.error is None
    assert res.text == "Result: 8"


def test_operation_result_failure() -> None:
    """A failed result renders with the error label and message."""
    res = OperationResult(expression="1 / 0", error="Division by zero")
    assert not res.ok
    assert res.text == "Calculation error: Division by zero"


@pytest.mark.parametrize("kwargs", [
    {"expression": "1"},
    {"expression": "1", "result": 1.0, "error": "boom"},
])
def test_operation_result_needs_exactly_one_outcome(kwargs: dict) -> None:
    """A result holds a value or an error, never both nor neither."""
    with pytest.raises(ValidationError):
        OperationResult(**kwargs)


@pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
def test_operation_result_must_be_finite(value: float) -> None:
    """NaN and infinity are never reported as results."""
    with pytest.raises(ValidationError):
        OperationResult(expression="x", result=value)


def test_operation_result_invalid_result_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(expression="2 + 2", result="not a float")


@pytest.mark.parametrize("value,expected", [
    (5.0, "5"),
    (14.0, "14"),
    (-3.0, "-3"),
    (6.28, "6.28"),
    (2.5, "2.5"),
    (0.1 + 0.2, "0.30000000000000004"),
    (1e20, "100000000000000000000"),
    (1e-7, "0.0000001"),
    (0.0, "0"),
    (-0.0, "-0"),
])
def test_format_number(value: float, expected: str) -> None:
    """Floats render in plain decimal notation without a trailing '.0'."""
    assert format_number(value) == expected
