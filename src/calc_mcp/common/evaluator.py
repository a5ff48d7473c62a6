"""Evaluate a token sequence by recursive descent."""
import math
from typing import Tuple

from calc_mcp.common.errors import (
    DivisionByZeroError,
    EmptyExpressionError,
    InvalidArithmeticResultError,
    InvalidFunctionResultError,
    InvalidPowerResultError,
    MissingFunctionClosingParenthesisError,
    MissingFunctionParenthesisError,
    NestingTooDeepError,
    UnexpectedEndOfInputError,
    UnexpectedTokenError,
    UnmatchedParenthesisError,
)
from calc_mcp.common.functions import FUNCTIONS
from calc_mcp.common.tokens import (
    FunctionToken,
    LeftParenToken,
    NumberToken,
    OperatorToken,
    RightParenToken,
    TokenSequence,
)


MAX_NESTING_DEPTH: int = 100
# Highest configurable depth; a function call nests five frames per level
MAX_NESTING_DEPTH_LIMIT: int = 150

# (value, position of the next unread token)
Parsed = Tuple[float, int]


def _is_operator(tokens: TokenSequence, pos: int, symbol: str) -> bool:
    return pos < len(tokens) and isinstance(tokens[pos], OperatorToken) and tokens[pos].symbol == symbol


def _checked(value: float, symbol: str) -> float:
    if not math.isfinite(value):
        raise InvalidArithmeticResultError(symbol)
    return value


class Evaluator:
    """
    Evaluate arithmetic tokens with a recursive-descent parser.

    Grammar, by increasing precedence:

        expression := term (('+' | '-') term)*
        term       := power (('*' | '/') power)*
        power      := factor ('^' factor)*
        factor     := NUMBER | '-' factor | '+' factor
                    | '(' expression ')' | FUNCTION '(' expression ')'

    Every level returns its value together with the position of the next unread
    token, so no token is consumed twice. All binary operators are
    left-associative, including '^': 2^3^2 is (2^3)^2 = 64. Unary signs bind
    tighter than '^': -2^2 is (-2)^2 = 4.

    Every intermediate value is checked: a result that is NaN or infinite is
    raised as an error at the point where it is computed.
    """

    def __init__(self, max_depth: int = MAX_NESTING_DEPTH):
        self.max_depth = max_depth

    def evaluate(self, tokens: TokenSequence) -> float:
        """
        Evaluate a whole token sequence.

        :param TokenSequence tokens: Tokens produced by the tokenizer

        :return: Finite result of the expression
        :rtype: float
        :raises EvalError: If the expression is malformed or a computation is invalid
        """
        if not tokens:
            raise EmptyExpressionError()

        try:
            value, pos = self._expression(tokens, 0, 0)
        except RecursionError as exc:
            # A max_depth beyond what the interpreter stack can hold
            raise NestingTooDeepError(self.max_depth) from exc

        # Every token must belong to the expression
        if pos < len(tokens):
            raise UnexpectedTokenError(tokens[pos])

        return value

    def _expression(self, tokens: TokenSequence, pos: int, depth: int) -> Parsed:
        left, pos = self._term(tokens, pos, depth)

        while _is_operator(tokens, pos, "+") or _is_operator(tokens, pos, "-"):
            symbol = tokens[pos].symbol
            right, pos = self._term(tokens, pos + 1, depth)
            left = _checked(left + right if symbol == "+" else left - right, symbol)

        return left, pos

    def _term(self, tokens: TokenSequence, pos: int, depth: int) -> Parsed:
        left, pos = self._power(tokens, pos, depth)

        while _is_operator(tokens, pos, "*") or _is_operator(tokens, pos, "/"):
            symbol = tokens[pos].symbol
            right, pos = self._power(tokens, pos + 1, depth)
            if symbol == "*":
                left = _checked(left * right, symbol)
            else:
                # Checked before dividing; also catches -0.0
                if right == 0.0:
                    raise DivisionByZeroError()
                left = _checked(left / right, symbol)

        return left, pos

    def _power(self, tokens: TokenSequence, pos: int, depth: int) -> Parsed:
        left, pos = self._factor(tokens, pos, depth)

        while _is_operator(tokens, pos, "^"):
            right, pos = self._factor(tokens, pos + 1, depth)
            # math.pow stays in the reals: it raises instead of returning complex
            try:
                result = math.pow(left, right)
            except (ValueError, OverflowError) as exc:
                raise InvalidPowerResultError(left, right) from exc
            if not math.isfinite(result):
                raise InvalidPowerResultError(left, right)
            left = result

        return left, pos

    def _factor(self, tokens: TokenSequence, pos: int, depth: int) -> Parsed:
        """
        Evaluate the highest-precedence production.

        :param TokenSequence tokens: Token sequence
        :param int pos: Position of the factor's first token
        :param int depth: Current nesting depth (parentheses, calls and signs)

        :return: Tuple of (value, next position)
        :rtype: Parsed
        """
        if depth > self.max_depth:
            raise NestingTooDeepError(self.max_depth)

        if pos >= len(tokens):
            raise UnexpectedEndOfInputError()

        token = tokens[pos]

        if isinstance(token, NumberToken):
            return token.value, pos + 1

        if isinstance(token, OperatorToken) and token.symbol == "-":
            value, pos = self._factor(tokens, pos + 1, depth + 1)
            return -value, pos

        if isinstance(token, OperatorToken) and token.symbol == "+":
            return self._factor(tokens, pos + 1, depth + 1)

        if isinstance(token, LeftParenToken):
            value, pos = self._expression(tokens, pos + 1, depth + 1)
            if pos >= len(tokens) or not isinstance(tokens[pos], RightParenToken):
                raise UnmatchedParenthesisError()
            return value, pos + 1

        if isinstance(token, FunctionToken):
            return self._call(token, tokens, pos + 1, depth)

        raise UnexpectedTokenError(token)

    def _call(self, function: FunctionToken, tokens: TokenSequence, pos: int, depth: int) -> Parsed:
        """Evaluate ``function '(' expression ')'`` with pos just after the name."""
        if pos >= len(tokens) or not isinstance(tokens[pos], LeftParenToken):
            raise MissingFunctionParenthesisError(function.name)

        argument, pos = self._expression(tokens, pos + 1, depth + 1)
        if pos >= len(tokens) or not isinstance(tokens[pos], RightParenToken):
            raise MissingFunctionClosingParenthesisError(function.name)

        try:
            result = FUNCTIONS[function.name](argument)
        except (ValueError, OverflowError) as exc:
            raise InvalidFunctionResultError(function.name, argument) from exc
        if not math.isfinite(result):
            raise InvalidFunctionResultError(function.name, argument)

        return result, pos + 1
