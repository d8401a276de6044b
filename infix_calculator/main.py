"""
Command line entry point.

Two modes:
- ``repl`` (default): read expressions from standard input until end of
  input, printing one integer (or error) per line.
- ``run FILE``: start a session server process, send FILE through the
  client and write ``<stem>_results.txt`` beside it, exercising the
  socket and multiprocessing path end to end.
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import sys
import time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, field_validator, model_validator

from infix_calculator.client.client import CalculatorClient
from infix_calculator.common.config import CalculatorSettings
from infix_calculator.common.logger import configure_logging, logger, normalize_level
from infix_calculator.repl.session import CalculatorRepl
from infix_calculator.server.server import CalculatorServer


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    command : str
        Either "repl" or "run".
    file_path : FilePath, optional
        Script to run, required by the "run" command.
    max_tokens : int, optional
        Token bound per line, overrides the configured one.
    log_level : str, optional
        Level of the package logger, overrides the configured one.
    color : bool
        Whether the prompt is colored.
    """

    command: Literal["repl", "run"] = "repl"
    file_path: Optional[FilePath] = None
    max_tokens: Optional[int] = Field(default=None, ge=1)
    log_level: Optional[str] = None
    color: bool = True

    @field_validator("log_level")
    def log_level_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        """Reject unknown level names before they reach the logger."""
        return None if v is None else normalize_level(v)

    @model_validator(mode="after")
    def run_needs_file(self) -> "CliArgs":
        """Ensure the "run" command has a script to send."""
        if self.command == "run" and self.file_path is None:
            raise ValueError("The run command needs a file path")
        return self


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Integer expression calculator with single-letter variables"
    )
    parser.add_argument("--max-tokens", type=int, default=None, help="Maximum tokens per line")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--no-color", dest="color", action="store_false", help="Plain prompt")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("repl", help="Interactive read-evaluate-print loop (default)")
    run_parser = subparsers.add_parser("run", help="Evaluate a script through the session server")
    run_parser.add_argument(
        "file_path",
        help="Path to a .txt script, or a .zip/.tar.xz/.7z archive whose .txt members each run as a session",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments without the program name, defaults to ``sys.argv[1:]``

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return CliArgs(
            command=args.command or "repl",
            file_path=getattr(args, "file_path", None),
            max_tokens=args.max_tokens,
            log_level=args.log_level,
            color=args.color,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: scripts/session.7z
    output: scripts/session_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: -len("".join(input_path.suffixes))] if input_path.suffixes else input_path.name
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    if input_path.suffixes == [".txt"]:
        suffix_safe = ""
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def run_server(output_file: Path, settings: CalculatorSettings, sessions: int = 1) -> None:
    """
    Start a session server handling a fixed number of sessions.

    The server runs in its own process and exits after the last session.
    """
    configure_logging(settings.log_level)
    server = CalculatorServer(
        host=settings.host,
        port=settings.port,
        output_file=output_file,
        max_tokens=settings.max_tokens,
    )
    server.start(max_sessions=sessions)


def run_script(input_path: Path, settings: CalculatorSettings) -> Path:
    """
    Evaluate a script through a freshly started server and client.

    :param Path input_path: Script or archive to evaluate
    :param CalculatorSettings settings: Effective settings

    :return: Path of the results file
    :rtype: Path
    """
    output_path = build_output_path(input_path)
    server_output = output_path.with_name(output_path.stem + "_server.txt")

    client = CalculatorClient(host=settings.host, port=settings.port)
    # Each .txt script (or archive member) is its own session
    scripts = client.load_scripts(input_path)

    server_process = Process(target=run_server, args=(server_output, settings, len(scripts)))
    server_process.start()

    # Give the server time to start listening
    time.sleep(1)

    try:
        client.send_scripts(scripts, output_path)
    finally:
        # Ensure the server is always stopped
        server_process.join(timeout=5)
        if server_process.is_alive():
            server_process.terminate()
            server_process.join()

    logger.info(f"📄 Results written to {output_path}")
    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function for the ``infix-calculator`` command.

    :return: Process exit status
    :rtype: int
    """
    cli_args = parse_args(argv)
    overrides = {"color": cli_args.color}
    if cli_args.max_tokens is not None:
        overrides["max_tokens"] = cli_args.max_tokens
    if cli_args.log_level is not None:
        overrides["log_level"] = cli_args.log_level
    try:
        settings = CalculatorSettings.from_env().with_overrides(**overrides)
    except ValidationError as exc:
        build_parser().error(str(exc))
    configure_logging(settings.log_level)

    if cli_args.command == "run":
        try:
            run_script(Path(cli_args.file_path), settings)
        except ValueError as exc:
            # Unsupported archive or no script inside it
            build_parser().error(str(exc))
        return 0

    repl = CalculatorRepl(prompt=settings.prompt, color=settings.color, max_tokens=settings.max_tokens)
    return repl.run(sys.stdin, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
