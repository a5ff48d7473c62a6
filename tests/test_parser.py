"""Test class ExpressionParser."""
from pydantic import ValidationError
import pytest

from calc_mcp.common.config import CalculatorSettings
from calc_mcp.common.errors import (
    DivisionByZeroError,
    EvalError,
    InputTooLongError,
    NestingTooDeepError,
    UnknownFunctionError,
    UnsafeCharacterError,
)
from calc_mcp.common.parser import ExpressionParser, evaluate
from calc_mcp.common.tokens import NumberToken


def test_tokenize_basic() -> None:
    """tokenize delegates to the tokenizer."""
    tokens = ExpressionParser().tokenize("3 + 4 * 2")
    assert [str(t) for t in tokens] == ["3", "+", "4", "*", "2"]


def test_evaluate_tokens() -> None:
    """evaluate_tokens accepts an already tokenized expression."""
    parser = ExpressionParser()
    assert parser.evaluate_tokens(parser.tokenize("(2 + 3) * 4")) == 20.0
    assert parser.evaluate_tokens((NumberToken(value=7.0),)) == 7.0


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", 7.0),
    ("10 - 2", 8.0),
    ("3 * 5", 15.0),
    ("8 / 2", 4.0),
    ("3 + 4 * 2", 11.0),
    ("7 + 3 * 2 - 4 / 2", 11.0),
    ("2^3^2", 64.0),
    ("sqrt(25)", 5.0),
])
def test_evaluate_valid(expr: str, expected: float) -> None:
    """Evaluate returns the correct result for valid expressions."""
    assert ExpressionParser().evaluate(expr) == expected
    assert evaluate(expr) == expected


@pytest.mark.parametrize("expr", [
    "3 +",        # Trailing operator
    "* 3 4",      # Leading binary operator
    "3 4 + 5",    # Extra operand remaining
    "",           # Empty expression
    "exec(1)",    # Function outside the whitelist
    "1 / 0",      # Division by zero
])
def test_evaluate_invalid_expression(expr: str) -> None:
    """Evaluate raises an EvalError, which is a ValueError, for malformed expressions."""
    with pytest.raises(EvalError):
        ExpressionParser().evaluate(expr)
    with pytest.raises(ValueError):
        ExpressionParser().evaluate(expr)


def test_unsafe_input_is_checked_before_anything_else() -> None:
    """Unsafe characters win over any other error in the expression."""
    with pytest.raises(UnsafeCharacterError):
        ExpressionParser().evaluate("exec(1) / 0; rm -rf /")


def test_custom_limits() -> None:
    """Limits given to the parser apply to tokenization and evaluation."""
    parser = ExpressionParser(max_expression_length=10, max_nesting_depth=2)
    with pytest.raises(InputTooLongError):
        parser.evaluate("1 + 2 + 3 + 4")
    with pytest.raises(NestingTooDeepError):
        parser.evaluate("(((1)))")
    assert parser.evaluate("((1))") == 1.0


def test_invalid_limits() -> None:
    """Limits must be positive, and the depth must fit on the interpreter stack."""
    with pytest.raises(ValidationError):
        ExpressionParser(max_expression_length=0)
    with pytest.raises(ValidationError):
        ExpressionParser(max_nesting_depth=0)
    with pytest.raises(ValidationError):
        ExpressionParser(max_nesting_depth=1000)


def test_highest_depth_limit_is_usable() -> None:
    """At the highest allowed depth, nested calls evaluate without exhausting the stack."""
    parser = ExpressionParser(max_nesting_depth=150)
    assert parser.evaluate("(" * 150 + "1" + ")" * 150) == 1.0
    assert parser.evaluate("abs(" * 75 + "-1" + ")" * 75) == 1.0
    with pytest.raises(NestingTooDeepError):
        parser.evaluate("(" * 151 + "1" + ")" * 151)


def test_from_settings() -> None:
    """from_settings copies the evaluator limits."""
    parser = ExpressionParser.from_settings(CalculatorSettings(max_expression_length=5, max_nesting_depth=3))
    assert parser.max_expression_length == 5
    assert parser.max_nesting_depth == 3


def test_failures_do_not_affect_later_calls() -> None:
    """A failed evaluation leaves the parser usable."""
    parser = ExpressionParser()
    with pytest.raises(DivisionByZeroError):
        parser.evaluate("1 / 0")
    with pytest.raises(UnknownFunctionError):
        parser.evaluate("exec(1)")
    assert parser.evaluate("2 + 3 * 4") == 14.0
