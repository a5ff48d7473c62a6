"""Split an arithmetic expression into tokens."""
import math
import string
from typing import List, Tuple

from calc_mcp.common.errors import (
    InputTooLongError,
    InvalidCharacterError,
    NumberParseError,
    UnknownFunctionError,
    UnsafeCharacterError,
)
from calc_mcp.common.functions import is_allowed
from calc_mcp.common.tokens import (
    FunctionToken,
    LeftParenToken,
    NumberToken,
    OperatorToken,
    RightParenToken,
    Token,
    TokenSequence,
)


MAX_EXPRESSION_LENGTH: int = 1000

# Characters rejected before scanning, whatever surrounds them
UNSAFE_CHARACTERS: Tuple[str, ...] = (";", "|", "&")

OPERATOR_SYMBOLS: str = "+-*/^"


class Tokenizer:
    """
    Convert a raw expression into an immutable sequence of tokens.

    The scan is a single left-to-right pass: every character is either consumed
    by a token rule or rejected immediately. Nothing is skipped silently except
    whitespace.
    """

    def __init__(self, max_length: int = MAX_EXPRESSION_LENGTH):
        self.max_length = max_length

    def check_input(self, expression: str) -> None:
        """
        Reject oversized or unsafe input before any scanning happens.

        :param str expression: Raw expression

        :raises InputTooLongError: If the expression exceeds the length limit
        :raises UnsafeCharacterError: If the expression contains ';', '|' or '&'
        """
        if len(expression) > self.max_length:
            raise InputTooLongError(len(expression), self.max_length)

        for char in UNSAFE_CHARACTERS:
            if char in expression:
                raise UnsafeCharacterError(char)

    def tokenize(self, expression: str) -> TokenSequence:
        """
        Split an arithmetic expression into tokens.

        Whitespace is optional (e.g., "3+4*2" and "3 + 4 * 2" give the same tokens).

        :param str expression: Arithmetic expression as a string

        :return: Tuple of tokens, in input order
        :rtype: TokenSequence
        :raises EvalError: If the expression is unsafe or contains an invalid lexeme
        """
        self.check_input(expression)

        tokens: List[Token] = []
        pos = 0
        while pos < len(expression):
            char = expression[pos]

            if char.isspace():
                pos += 1
            elif char in string.digits or char == ".":
                token, pos = self._read_number(expression, pos)
                tokens.append(token)
            elif char in OPERATOR_SYMBOLS:
                tokens.append(OperatorToken(symbol=char, position=pos))
                pos += 1
            elif char == "(":
                tokens.append(LeftParenToken(position=pos))
                pos += 1
            elif char == ")":
                tokens.append(RightParenToken(position=pos))
                pos += 1
            elif char in string.ascii_letters:
                token, pos = self._read_function(expression, pos)
                tokens.append(token)
            else:
                raise InvalidCharacterError(char, pos)

        return tuple(tokens)

    @staticmethod
    def _read_number(expression: str, start: int) -> Tuple[NumberToken, int]:
        """
        Consume a maximal run of digits containing at most one decimal point.

        :param str expression: Source expression
        :param int start: Offset of the first digit or point

        :return: Tuple of (number token, offset after the literal)
        :rtype: Tuple[NumberToken, int]
        :raises NumberParseError: If the literal is not a finite float (e.g., ".")
        """
        pos = start
        has_dot = False
        while pos < len(expression):
            char = expression[pos]
            if char in string.digits:
                pos += 1
            elif char == "." and not has_dot:
                has_dot = True
                pos += 1
            else:
                break

        text = expression[start:pos]
        try:
            value = float(text)
        except ValueError as exc:
            raise NumberParseError(text) from exc

        # Very long literals overflow to infinity
        if not math.isfinite(value):
            raise NumberParseError(text)

        return NumberToken(value=value, text=text, position=start), pos

    @staticmethod
    def _read_function(expression: str, start: int) -> Tuple[FunctionToken, int]:
        """
        Consume a maximal run of letters and resolve it against the whitelist.

        :param str expression: Source expression
        :param int start: Offset of the first letter

        :return: Tuple of (function token, offset after the name)
        :rtype: Tuple[FunctionToken, int]
        :raises UnknownFunctionError: If the name is not whitelisted
        """
        pos = start
        while pos < len(expression) and expression[pos].isalpha():
            pos += 1

        name = expression[start:pos]
        if not is_allowed(name):
            raise UnknownFunctionError(name)

        return FunctionToken(name=name, position=start), pos
