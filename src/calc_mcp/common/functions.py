"""Whitelist of the functions an expression is allowed to call."""
import math
from types import MappingProxyType
from typing import Callable, Mapping


# Type alias for whitelisted functions (taking one float, returning a float)
UnaryFn = Callable[[float], float]

# Read-only mapping of function names to their implementation.
# math raises ValueError on domain errors and OverflowError on overflow;
# the evaluator turns both into InvalidFunctionResultError.
FUNCTIONS: Mapping[str, UnaryFn] = MappingProxyType(
    {
        "sqrt": math.sqrt,
        "abs": math.fabs,
        "sin": math.sin,
        "cos": math.cos,
        "tan": math.tan,
        "ln": math.log,
    }
)


def is_allowed(name: str) -> bool:
    """Return True if ``name`` is a whitelisted function."""
    return name in FUNCTIONS
