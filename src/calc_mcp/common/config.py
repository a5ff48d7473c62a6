"""Runtime settings, read from the environment (prefix CALC_MCP_) or a .env file."""
from pydantic import Field, IPvAnyAddress
from pydantic_settings import BaseSettings, SettingsConfigDict

from calc_mcp.common.evaluator import MAX_NESTING_DEPTH_LIMIT


class CalculatorSettings(BaseSettings):
    """
    Settings shared by the evaluator, the servers and the CLI.

    Examples:
        - CALC_MCP_MAX_EXPRESSION_LENGTH=500
        - CALC_MCP_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="CALC_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Evaluator limits
    max_expression_length: int = Field(default=1000, ge=1, description="Longest accepted expression, in characters")
    max_nesting_depth: int = Field(default=100, ge=1, le=MAX_NESTING_DEPTH_LIMIT, description="Deepest accepted nesting of parentheses, calls and signs")

    # Batch TCP server
    host: IPvAnyAddress = Field(default="127.0.0.1", description="Batch server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Batch server TCP port")

    log_level: str = Field(default="INFO", description="Name of the logging level")


def get_settings() -> CalculatorSettings:
    return CalculatorSettings()
