"""Pydantic models for the lexical tokens of an arithmetic expression."""
import math
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calc_mcp.common.functions import is_allowed


OperatorSymbol = Literal["+", "-", "*", "/", "^"]


class BaseToken(BaseModel):
    """Common fields of every token."""

    # Tokens are immutable once produced by the tokenizer
    model_config = ConfigDict(frozen=True)

    position: int = Field(default=0, ge=0, description="Offset of the token in the source expression")


class NumberToken(BaseToken):
    """A numeric literal."""

    value: float = Field(..., description="Parsed value of the literal")
    text: Optional[str] = Field(default=None, description="Literal as written in the source expression")

    @field_validator("value")
    def value_must_be_finite(cls, v: float) -> float:
        """Ensure that a literal never carries NaN or infinity."""
        if not math.isfinite(v):
            raise ValueError("Number literal must be finite")
        return v

    def __str__(self) -> str:
        return self.text if self.text is not None else repr(self.value)


class OperatorToken(BaseToken):
    """A binary operator, or a unary sign when found in factor position."""

    symbol: OperatorSymbol = Field(..., description="Operator character")

    def __str__(self) -> str:
        return self.symbol


class FunctionToken(BaseToken):
    """A call to a whitelisted function."""

    name: str = Field(..., description="Name of the whitelisted function")

    @field_validator("name")
    def name_must_be_whitelisted(cls, v: str) -> str:
        """Ensure that a function token only exists for whitelisted names."""
        if not is_allowed(v):
            raise ValueError(f"Function is not whitelisted: {v}")
        return v

    def __str__(self) -> str:
        return self.name


class LeftParenToken(BaseToken):
    def __str__(self) -> str:
        return "("


class RightParenToken(BaseToken):
    def __str__(self) -> str:
        return ")"


Token = Union[NumberToken, OperatorToken, FunctionToken, LeftParenToken, RightParenToken]

# Token sequences are tuples so evaluation can only read them
TokenSequence = Tuple[Token, ...]
