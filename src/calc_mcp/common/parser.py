"""Parse and evaluate arithmetic expressions safely."""
from pydantic import BaseModel, ConfigDict, Field

from calc_mcp.common.config import CalculatorSettings
from calc_mcp.common.evaluator import MAX_NESTING_DEPTH, MAX_NESTING_DEPTH_LIMIT, Evaluator
from calc_mcp.common.logger import logger
from calc_mcp.common.tokenizer import MAX_EXPRESSION_LENGTH, Tokenizer
from calc_mcp.common.tokens import TokenSequence


class ExpressionParser(BaseModel):
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Only whitelisted functions can be called
        - Every intermediate result is finite, or the evaluation fails

    Algorithm:
        1. Reject oversized input and the characters ';', '|' and '&'
        2. Tokenize the expression in a single left-to-right pass
        3. Evaluate the tokens by recursive descent, one function per precedence level

    Examples:
        - "2 + 3 * 4" evaluates to 14
        - "2^3^2" evaluates to 64 ('^' is left-associative)
        - "sqrt(-1)" fails with InvalidFunctionResultError
    """

    # No per-call state: one parser can serve any number of evaluations
    model_config = ConfigDict(frozen=True)

    max_expression_length: int = Field(default=MAX_EXPRESSION_LENGTH, ge=1, description="Longest accepted expression")
    max_nesting_depth: int = Field(default=MAX_NESTING_DEPTH, ge=1, le=MAX_NESTING_DEPTH_LIMIT, description="Deepest accepted nesting")

    @classmethod
    def from_settings(cls, settings: CalculatorSettings) -> "ExpressionParser":
        """
        Build a parser with the limits found in the settings.

        :param CalculatorSettings settings: Runtime settings

        :return: Configured parser
        :rtype: ExpressionParser
        """
        return cls(
            max_expression_length=settings.max_expression_length,
            max_nesting_depth=settings.max_nesting_depth,
        )

    def tokenize(self, expr: str) -> TokenSequence:
        """
        Split an arithmetic expression into tokens.

        :param str expr: Arithmetic expression as a string

        :return: Tuple of tokens
        :rtype: TokenSequence
        :raises EvalError: If the expression is unsafe or contains an invalid lexeme
        """
        return Tokenizer(max_length=self.max_expression_length).tokenize(expr)

    def evaluate_tokens(self, tokens: TokenSequence) -> float:
        """
        Evaluate an already tokenized expression.

        :param TokenSequence tokens: Tuple of tokens

        :return: Computed result as float
        :rtype: float
        :raises EvalError: If the tokens do not form a valid expression
        """
        return Evaluator(max_depth=self.max_nesting_depth).evaluate(tokens)

    def evaluate(self, expr: str) -> float:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises EvalError: If expression is invalid, unsafe or its result is not finite
        """
        tokens = self.tokenize(expr)
        logger.debug(f"🧮 {len(tokens)} tokens read from {expr!r}")
        return self.evaluate_tokens(tokens)


_default_parser = ExpressionParser()


def evaluate(expr: str) -> float:
    """Evaluate ``expr`` with the default limits."""
    return _default_parser.evaluate(expr)
