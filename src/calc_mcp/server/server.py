"""TCP server that evaluates a batch of expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection
from pathlib import Path
import socket
from typing import Any, Dict, List, TextIO, Tuple

from pydantic import BaseModel, Field, IPvAnyAddress

from calc_mcp.common.logger import logger
from calc_mcp.common.operations import OperationResult, format_number
from calc_mcp.server.service import CalculatorService
from calc_mcp.server.worker import WorkerProcess


ActiveWorker = Tuple[Process, Connection]


def render_line(payload: Dict[str, Any]) -> str:
    """
    Format a worker payload as one line of the results file.

    Examples:
        - "2 + 3 * 4 = 14"
        - "1 / 0 -> ERROR: Division by zero"

    :param dict payload: Payload sent by a WorkerProcess

    :return: Result line, without trailing newline
    :rtype: str
    """
    result = OperationResult.model_validate(payload)
    if result.ok:
        return f"{result.expression} = {format_number(result.result)}"
    return f"{result.expression} -> ERROR: {result.error}"


class CalculatorServer(BaseModel):
    """
    TCP socket server evaluating a batch of expressions sent by one client.

    Features:
        - Spawns one worker process per expression.
        - Writes results immediately to disk as soon as a worker finishes.
        - Ensures each worker is destroyed immediately after finishing.
        - Handles multiple simultaneous workers up to CPU core count.
    """

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    output_file: Path = Field(..., description="Path to write computation results")
    service: CalculatorService = Field(default_factory=CalculatorService, description="Service shared by the workers")

    def _receive_data(self, conn: socket.socket) -> List[str]:
        """
        Receive all data from the client connection and return non-empty lines.

        :param socket.socket conn: Connected client socket

        :return: List of non-empty expression lines
        :rtype: List[str]
        """
        # Data may arrive in several chunks; the client shuts down its write side when done
        chunks: List[bytes] = []
        while True:
            chunk: bytes = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        lines: List[str] = b"".join(chunks).decode().splitlines()
        return [line.strip() for line in lines if line.strip()]

    def _spawn_worker(self, expr: str, line_number: int) -> ActiveWorker:
        """
        Spawn a WorkerProcess for the given expression and return process and pipe.

        :param str expr: Arithmetic expression
        :param int line_number: Line number of expression in input

        :return: Tuple of (Process, parent end of the pipe)
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe()
        worker = WorkerProcess(conn=child_conn, expression=expr, line_number=line_number, service=self.service)
        process = Process(target=worker.run)
        process.start()
        return process, parent_conn

    def _collect_finished_workers(self, active_workers: List[ActiveWorker], f_out: TextIO) -> None:
        """
        Write the results of all finished workers and remove them from active_workers.

        :param list active_workers: List of tuples (Process, Connection)
        :param TextIO f_out: Open file handle for writing results
        """
        # Reverse order so that pop() keeps the remaining indices valid
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            if proc.is_alive():
                continue

            payload: Dict[str, Any] = pipe_conn.recv()
            pipe_conn.close()
            proc.join()
            active_workers.pop(i)

            f_out.write(render_line(payload) + "\n")
            f_out.flush()

    def process(self, expressions: List[str], f_out: TextIO) -> None:
        """
        Evaluate expressions in worker processes, writing each result as soon as it is ready.

        :param list expressions: Non-empty expressions, in input order
        :param TextIO f_out: Open file handle for writing results
        """
        if not expressions:
            return

        # Limit number of active workers to CPU cores or number of expressions
        max_workers: int = min(cpu_count(), len(expressions))
        active_workers: List[ActiveWorker] = []

        for line_number, expr in enumerate(expressions, start=1):
            # Wait until a worker slot is available
            while len(active_workers) >= max_workers:
                self._collect_finished_workers(active_workers, f_out)

            active_workers.append(self._spawn_worker(expr, line_number))

        while active_workers:
            self._collect_finished_workers(active_workers, f_out)

    def start(self) -> None:
        """
        Start the TCP server, accept one client connection, and process its expressions.

        Steps:
            1. Bind and listen on the specified host and port.
            2. Accept a single client connection.
            3. Receive all expressions from the client.
            4. Evaluate them in worker processes, writing results as they finish.
            5. Send the final results back to the client.

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind((str(self.host), self.port))
            s.listen()
            logger.info("🖥️ Server listening")

            conn, _ = s.accept()
            with conn:
                with self.output_file.open("w", encoding="utf-8") as f_out:
                    expressions: List[str] = self._receive_data(conn)
                    logger.info(f"📥 Received {len(expressions)} expressions")
                    self.process(expressions, f_out)

                # Send results back to client
                try:
                    conn.sendall(self.output_file.read_bytes())
                    logger.info("✉️ Results sent to client")
                except OSError as exc:
                    logger.error(f"🔌❌ Client disconnected before receiving results: {exc}")
