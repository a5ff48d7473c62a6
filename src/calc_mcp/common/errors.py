"""Errors raised while tokenizing or evaluating an expression."""
from typing import Any


class EvalError(ValueError):
    """Base class of every evaluation failure reported to callers."""


class InputTooLongError(EvalError):
    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Expression too long: {length} characters (maximum {limit})")


class UnsafeCharacterError(EvalError):
    def __init__(self, char: str):
        self.char = char
        super().__init__(f"Expression contains an unsafe character: {char!r}")


class InvalidCharacterError(EvalError):
    def __init__(self, char: str, position: int):
        self.char = char
        self.position = position
        super().__init__(f"Invalid character {char!r} at position {position}")


class UnknownFunctionError(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unsupported function: {name}")


class NumberParseError(EvalError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Could not parse number: {text!r}")


class EmptyExpressionError(EvalError):
    def __init__(self):
        super().__init__("Empty expression")


class UnexpectedEndOfInputError(EvalError):
    def __init__(self):
        super().__init__("Unexpected end of expression")


class UnmatchedParenthesisError(EvalError):
    def __init__(self):
        super().__init__("Missing closing parenthesis")


class MissingFunctionParenthesisError(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function '{name}' must be followed by '('")


class MissingFunctionClosingParenthesisError(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing ')' after the argument of function '{name}'")


class UnexpectedTokenError(EvalError):
    def __init__(self, token: Any):
        self.token = token
        super().__init__(f"Unexpected token '{token}' at position {token.position}")


class DivisionByZeroError(EvalError):
    def __init__(self):
        super().__init__("Division by zero")


class InvalidPowerResultError(EvalError):
    def __init__(self, base: float, exponent: float):
        self.base = base
        self.exponent = exponent
        super().__init__(f"Invalid power result for {base!r} ^ {exponent!r} (NaN or infinity)")


class InvalidFunctionResultError(EvalError):
    def __init__(self, name: str, argument: float):
        self.name = name
        self.argument = argument
        super().__init__(f"Invalid result for {name}({argument!r}) (NaN or infinity)")


class InvalidArithmeticResultError(EvalError):
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Invalid result for operator '{symbol}' (NaN or infinity)")


class NestingTooDeepError(EvalError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Expression nested too deeply (maximum depth {limit})")
