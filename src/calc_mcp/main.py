"""
Command-line entrypoint.

Subcommands:
- serve: run the MCP server on stdio
- eval: evaluate one expression and print the result
- batch: start the TCP server, send a file of expressions with the client,
  and write the results next to the input file
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import sys
import time
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError

from calc_mcp.client.client import CalculatorClient
from calc_mcp.common.config import CalculatorSettings, get_settings
from calc_mcp.common.logger import configure_logger
from calc_mcp.common.operations import OperationRequest
from calc_mcp.server import mcp_server
from calc_mcp.server.server import CalculatorServer
from calc_mcp.server.service import CalculatorService


class EvalArgs(BaseModel):
    """Validated arguments of the eval subcommand."""

    expression: str = Field(..., description="Expression to evaluate")


class BatchArgs(BaseModel):
    """
    Validated arguments of the batch subcommand.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing arithmetic expressions.
    """

    file_path: FilePath


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="calc-mcp", description="Secure arithmetic expression calculator")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the MCP server on stdio")

    eval_parser = subparsers.add_parser("eval", help="Evaluate one expression")
    eval_parser.add_argument("expression", help="Arithmetic expression, e.g. \"2 + 3 * 4\"")

    batch_parser = subparsers.add_parser("batch", help="Evaluate a file of expressions through the TCP server")
    batch_parser.add_argument("file_path", help="Path to a .txt file or a .zip, .tar.xz or .7z archive")

    return parser


def build_output_path(input_path: Path) -> Path:
    """
    Construct the output file path for a batch input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations_short.7z
    output: resources/operations_short_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def run_server(output_file: Path, settings: CalculatorSettings) -> None:
    """Run the batch server until its single client has been served."""
    server = CalculatorServer(host=settings.host, port=settings.port, output_file=output_file)
    server.start()


def run_eval(args: EvalArgs) -> int:
    result = CalculatorService().calculate(OperationRequest(expression=args.expression))
    print(result.text)
    return 0 if result.ok else 1


def run_batch(args: BatchArgs, settings: CalculatorSettings) -> int:
    """
    Start the server in its own process, send the input file, then stop the server.

    :param BatchArgs args: Validated batch arguments
    :param CalculatorSettings settings: Runtime settings

    :return: Exit code
    :rtype: int
    """
    input_path: Path = Path(args.file_path)
    output_path: Path = build_output_path(input_path)

    server_process = Process(target=run_server, args=(output_path, settings))
    server_process.start()

    # Give the server time to start listening
    time.sleep(1)

    try:
        client = CalculatorClient(host=settings.host, port=settings.port)
        client.send_file(input_path, output_path)
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()

    print(output_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function of the calc-mcp console script.

    :param list argv: Arguments, sys.argv[1:] when omitted
    :return: Exit code
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logger(settings.log_level)

    if args.command == "serve":
        mcp_server.run()
        return 0

    try:
        if args.command == "eval":
            return run_eval(EvalArgs(expression=args.expression))
        return run_batch(BatchArgs(file_path=args.file_path), settings)
    except ValidationError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
