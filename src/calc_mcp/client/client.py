"""TCP client sending a batch of expressions to the calculator server."""
import codecs
from pathlib import Path
import socket
import tarfile
import tempfile
from typing import Callable, Dict, List
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress

from calc_mcp.common.logger import logger


def _first_txt(names: List[str], archive_kind: str) -> str:
    txt_files = [name for name in names if name.endswith(".txt")]
    if not txt_files:
        raise ValueError(f"📄❌ No .txt file found in {archive_kind} archive")
    return txt_files[0]


def _read_zip(archive_path: Path, tmpdir: Path) -> str:
    with zipfile.ZipFile(archive_path, "r") as zf:
        member = _first_txt(zf.namelist(), "zip")
        zf.extract(member, path=tmpdir)
    return (tmpdir / member).read_text()


def _read_tar_xz(archive_path: Path, tmpdir: Path) -> str:
    with tarfile.open(archive_path, "r:xz") as tf:
        member = _first_txt(tf.getnames(), "tar.xz")
        # The "data" filter refuses absolute paths and links escaping tmpdir
        tf.extract(member, path=tmpdir, filter="data")
    return (tmpdir / member).read_text()


def _read_7z(archive_path: Path, tmpdir: Path) -> str:
    with py7zr.SevenZipFile(archive_path, mode="r") as archive:
        member = _first_txt(archive.getnames(), "7z")
        archive.extract(path=tmpdir, targets=[member])
    return (tmpdir / member).read_text()


# Archive suffix -> reader extracting the first .txt member
ARCHIVE_READERS: Dict[str, Callable[[Path, Path], str]] = {
    ".zip": _read_zip,
    ".tar.xz": _read_tar_xz,
    ".7z": _read_7z,
}


def archive_kind(path: Path) -> str:
    """
    Return the archive suffix of ``path`` (e.g., ".tar.xz"), or "" when unsupported.

    :param Path path: Input file path

    :return: Key of ARCHIVE_READERS, or ""
    :rtype: str
    """
    if path.suffixes[-2:] == [".tar", ".xz"]:
        return ".tar.xz"
    return path.suffix if path.suffix in ARCHIVE_READERS else ""


class CalculatorClient(BaseModel):
    """
    TCP client sending arithmetic expressions to the batch server and receiving the results.

    The TCP client:
    - reads expressions, one per line, from a plain text file or from an archive
    - sends them to the server over a TCP socket
    - writes the results received from the server into an output file
    """

    # Immutable: the network configuration cannot change during a transfer
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")

    def load_expressions(self, input_file: FilePath) -> str:
        """
        Read the expressions of a .txt file, or of the first .txt member of an archive.

        Supported archives: .zip, .tar.xz, .7z

        :param FilePath input_file: Path to the input file or archive

        :return: Raw content, one expression per line
        :rtype: str
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if input_file.suffix == ".txt":
            return input_file.read_text()

        kind = archive_kind(input_file)
        if not kind:
            raise ValueError(f"📄❌ Unsupported archive format: {''.join(input_file.suffixes)}")

        # Extract into a temporary directory that is always removed
        with tempfile.TemporaryDirectory() as tmpdir:
            return ARCHIVE_READERS[kind](input_file, Path(tmpdir))

    def send_file(self, input_file: FilePath, output_file: Path) -> None:
        """
        Send the expressions of an input file to the server and write the results to an output file.

        :param FilePath input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: None
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        content = self.load_expressions(input_file)
        logger.info(f"📤 Sending {input_file} to {self.host}:{self.port}")

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.connect((str(self.host), self.port))
            s.sendall(content.encode())
            # Signal that no more data will be sent
            s.shutdown(socket.SHUT_WR)

            # A multi-byte character may be split across two chunks
            decoder = codecs.getincrementaldecoder("utf-8")()
            with output_file.open("w", encoding="utf-8") as f_out:
                # recv() returns b"" once the server has closed the connection
                while True:
                    chunk = s.recv(4096)
                    if not chunk:
                        f_out.write(decoder.decode(b"", final=True))
                        break
                    f_out.write(decoder.decode(chunk))
                    # Keep partial results on disk if the transfer is interrupted
                    f_out.flush()

        logger.info(f"📥 Results written to {output_file}")
