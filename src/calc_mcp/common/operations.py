"""Pydantic models for calculation requests and results."""
from decimal import Decimal
import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


RESULT_LABEL = "Result"
ERROR_LABEL = "Calculation error"

EXPRESSION_DESCRIPTION = (
    "Arithmetic expression to evaluate (e.g., \"2 + 3 * 4\", \"sqrt(25)\", \"sin(1.57)\"). "
    "Supported: the four basic operators (+, -, *, /), ^ for exponentiation, parentheses, "
    "and the functions sqrt, abs, sin, cos, tan, ln."
)


def format_number(value: float) -> str:
    """
    Render a float in plain decimal notation, without exponent or trailing ".0".

    Examples:
        - 5.0 -> "5"
        - 6.28 -> "6.28"
        - 1e20 -> "100000000000000000000"
        - 1e-7 -> "0.0000001"

    :param float value: Finite float

    :return: Shortest decimal text that reads back as the same float
    :rtype: str
    """
    # repr() gives the shortest round-tripping digits, Decimal drops the exponent
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class OperationRequest(BaseModel):
    """Represents a single calculation request."""

    expression: str = Field(..., description=EXPRESSION_DESCRIPTION)


class OperationResult(BaseModel):
    """Represents the outcome of a calculation: a finite result or an error message."""

    expression: str = Field(..., description="Original arithmetic expression")
    result: Optional[float] = Field(default=None, description="Evaluated numeric result of the expression")
    error: Optional[str] = Field(default=None, description="Reason why the expression could not be evaluated")

    @field_validator("result")
    def result_must_be_finite(cls, v: Optional[float]) -> Optional[float]:
        """Ensure that NaN or infinity is never reported as a result."""
        if v is not None and not math.isfinite(v):
            raise ValueError("Result must be a finite number")
        return v

    @model_validator(mode="after")
    def exactly_one_outcome(self) -> "OperationResult":
        """Ensure that a result carries either a value or an error, never both."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of 'result' and 'error' must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        """Human-readable outcome, e.g. "Result: 14" or "Calculation error: Division by zero"."""
        if self.ok:
            return f"{RESULT_LABEL}: {format_number(self.result)}"
        return f"{ERROR_LABEL}: {self.error}"
