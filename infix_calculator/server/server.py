"""TCP server that evaluates expression sessions in worker processes."""
from multiprocessing import Pipe, Process
from multiprocessing.connection import Connection
from pathlib import Path
import socket
from typing import List, Optional, TextIO, Tuple

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

from infix_calculator.common.config import DEFAULT_HOST, DEFAULT_PORT, MAX_TOKENS
from infix_calculator.common.logger import logger
from infix_calculator.common.models import OperationRequest, OperationResult
from infix_calculator.server.worker import SessionWorker


class CalculatorServer(BaseModel):
    """
    TCP socket server evaluating expression scripts sent by clients.

    Features:
        - Each connection is one session with its own Environment.
        - Spawns one worker process per session; lines of a session are
          evaluated in order since later lines may read earlier assignments.
        - Writes results to disk as soon as the worker reports them.
        - Sends the rendered results back to the client.
    """

    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: IPvAnyAddress = Field(default=DEFAULT_HOST, description="Server host address")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server TCP port")
    output_file: Path = Field(..., description="Path to write computation results")
    max_tokens: Optional[int] = Field(default=MAX_TOKENS, ge=1, description="Token bound per line")

    def _receive_data(self, conn: socket.socket) -> List[OperationRequest]:
        """
        Receive all data from the client connection and return one request per non-empty line.

        :param socket.socket conn: Connected client socket

        :return: Requests in line order
        :rtype: List[OperationRequest]
        """
        # Note: chunks are small pieces of data read from a TCP stream, as data may arrive in multiple packets
        chunks: List[bytes] = []
        while True:
            chunk: bytes = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        data: List[str] = b"".join(chunks).decode().splitlines()
        # Skip empty lines
        return [OperationRequest(expression=line) for line in data if line.strip()]

    def _spawn_worker(self, requests: List[OperationRequest]) -> Tuple[Process, Connection]:
        """
        Spawn a SessionWorker for the given requests and return process and pipe.

        :param List[OperationRequest] requests: Expression requests of one session

        :return: Tuple of (Process, parent_pipe)
        :rtype: Tuple[Process, Connection]
        """
        parent_conn, child_conn = Pipe()
        worker = SessionWorker(conn=child_conn, requests=requests, max_tokens=self.max_tokens)
        process = Process(target=worker.run)
        process.start()
        # The child owns its end now
        child_conn.close()
        return process, parent_conn

    def _collect_results(self, pipe_conn: Connection, f_out: TextIO) -> List[OperationResult]:
        """
        Read results from a session worker until its sentinel and write them to the output file.

        :param Connection pipe_conn: Parent end of the worker pipe
        :param TextIO f_out: Open file handle for writing results

        :return: Results in line order
        :rtype: List[OperationResult]
        """
        results: List[OperationResult] = []
        while True:
            try:
                payload = pipe_conn.recv()
            except EOFError:
                logger.error("👷❌ Session worker exited before finishing")
                break
            if payload is None:
                break

            result = OperationResult.model_validate(payload)
            results.append(result)
            # Write output immediately
            f_out.write(result.render() + "\n")
            f_out.flush()
        pipe_conn.close()
        return results

    def serve_connection(self, conn: socket.socket, f_out: TextIO) -> List[OperationResult]:
        """
        Run one session: receive the script, evaluate it in a worker and reply.

        :param socket.socket conn: Connected client socket
        :param TextIO f_out: Open file handle for writing results

        :return: Results of the session
        :rtype: List[OperationResult]
        """
        requests = self._receive_data(conn)
        results: List[OperationResult] = []
        if requests:
            proc, pipe_conn = self._spawn_worker(requests)
            try:
                results = self._collect_results(pipe_conn, f_out)
            finally:
                proc.join()

        payload = "".join(result.render() + "\n" for result in results)
        try:
            conn.sendall(payload.encode())
            logger.info("✉️ Results sent to client")
        except OSError as exc:
            logger.error(f"🔌❌ Client disconnected before receiving results: {exc}")
        return results

    def start(self, max_sessions: Optional[int] = None) -> None:
        """
        Start the TCP server, accept client connections, and evaluate their sessions.

        Steps:
            1. Bind and listen on the specified host and port.
            2. Accept a client connection.
            3. Receive all expression lines from the client.
            4. Evaluate them in a worker process with a fresh Environment.
            5. Write results to the output file as they arrive.
            6. Send the results back to the client, then wait for the next one.

        :param max_sessions: Stop after this many sessions, None to serve forever

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")
        served = 0
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s, \
                self.output_file.open("w", encoding="utf-8") as f_out:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind((str(self.host), self.port))
            s.listen()
            logger.info("🖥️ Server listening")

            while max_sessions is None or served < max_sessions:
                conn, address = s.accept()
                logger.info(f"🔌 Session {served + 1} from {address[0]}:{address[1]}")
                with conn:
                    self.serve_connection(conn, f_out)
                served += 1
