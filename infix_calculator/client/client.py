"""TCP client running expression scripts as sessions on the session server."""
from pathlib import Path
import socket
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress, field_validator

from infix_calculator.common.config import DEFAULT_HOST, DEFAULT_PORT
from infix_calculator.common.logger import logger

SCRIPT_SUFFIX = ".txt"


class SessionScript(BaseModel):
    """One script to run as a session; its variables are not shared with other scripts."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="File or archive member name")
    content: str = Field(..., description="Expression lines")

    @field_validator("name")
    def name_must_be_a_script(cls, v: str) -> str:
        if not v.endswith(SCRIPT_SUFFIX):
            raise ValueError(f"Script names must end with {SCRIPT_SUFFIX}: {v!r}")
        return v


class CalculatorClient(BaseModel):
    """
    TCP client running expression scripts on the session server.

    Every script is sent over its own connection, so the server evaluates it
    as a separate session with fresh variables:
    - a plain .txt file is one session
    - an archive (.zip, .tar.xz, .7z) runs each .txt member as its own
      session, in member-name order
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default=DEFAULT_HOST, description="Server host address")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server TCP port")

    def load_scripts(self, input_file: FilePath) -> List[SessionScript]:
        """
        Load the session scripts held by a .txt file or an archive.

        :param FilePath input_file: Script or archive path

        :return: Scripts in session order
        :rtype: List[SessionScript]
        :raises ValueError: If the archive format is unsupported or holds no .txt member
        """
        if input_file.suffix == SCRIPT_SUFFIX:
            return [SessionScript(name=input_file.name, content=input_file.read_text())]

        scripts = sorted(self._read_archive(input_file), key=lambda script: script.name)
        if not scripts:
            raise ValueError(f"📄❌ No {SCRIPT_SUFFIX} script found in {input_file.name}")
        return scripts

    def run_session(self, script: SessionScript) -> str:
        """
        Send one script over a new connection and return the server's rendered results.

        :param SessionScript script: Script to evaluate

        :return: One rendered result line per expression
        :rtype: str
        """
        logger.info(f"📄 Running {script.name} on {self.host}:{self.port}")
        chunks: List[bytes] = []
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.connect((str(self.host), self.port))
            s.sendall(script.content.encode())
            # The session starts once the server sees the end of the script
            s.shutdown(socket.SHUT_WR)
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks).decode()

    def send_scripts(self, scripts: List[SessionScript], output_file: Path) -> None:
        """
        Run each script as a session and append its results to the output file.

        With several scripts, each block of results is preceded by a
        ``# <name>`` header line.

        :param List[SessionScript] scripts: Scripts in session order
        :param Path output_file: Path where results will be written
        """
        with output_file.open("w", encoding="utf-8") as f_out:
            for script in scripts:
                results = self.run_session(script)
                if len(scripts) > 1:
                    f_out.write(f"# {script.name}\n")
                f_out.write(results)
                # Keep finished sessions on disk if a later one fails
                f_out.flush()

    def send_file(self, input_file: FilePath, output_file: Path) -> int:
        """
        Run every script held by ``input_file`` and write the results to ``output_file``.

        :param FilePath input_file: Path to the script or archive
        :param Path output_file: Path where results will be written

        :return: Number of sessions run
        :rtype: int
        :raises ValueError: If the archive format is unsupported or holds no .txt member
        """
        scripts = self.load_scripts(input_file)
        self.send_scripts(scripts, output_file)
        return len(scripts)

    def _read_archive(self, archive_path: FilePath) -> List[SessionScript]:
        """
        Read every .txt member of a .zip, .tar.xz or .7z archive.

        :param FilePath archive_path: Path to the archive file

        :return: One script per .txt member, in archive order
        :rtype: List[SessionScript]
        :raises ValueError: If the format is unsupported
        """
        if archive_path.suffix == ".zip":
            with zipfile.ZipFile(archive_path, "r") as zf:
                return [
                    SessionScript(name=name, content=zf.read(name).decode())
                    for name in zf.namelist()
                    if name.endswith(SCRIPT_SUFFIX)
                ]

        if archive_path.suffixes[-2:] == [".tar", ".xz"]:
            with tarfile.open(archive_path, "r:xz") as tf:
                return [
                    SessionScript(name=member.name, content=tf.extractfile(member).read().decode())
                    for member in tf.getmembers()
                    if member.isfile() and member.name.endswith(SCRIPT_SUFFIX)
                ]

        if archive_path.suffix == ".7z":
            with tempfile.TemporaryDirectory() as tmpdir, \
                    py7zr.SevenZipFile(archive_path, mode="r") as archive:
                names = [name for name in archive.getnames() if name.endswith(SCRIPT_SUFFIX)]
                if names:
                    archive.extract(path=tmpdir, targets=names)
                return [
                    SessionScript(name=name, content=(Path(tmpdir) / name).read_text())
                    for name in names
                ]

        raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")
