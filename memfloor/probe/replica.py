"""Rewindable snapshot of standard input."""

import io
import os
import tempfile
from pathlib import Path
from types import TracebackType

import structlog

from memfloor.errors import EnvironmentFault

logger = structlog.get_logger()

CHUNK_SIZE = io.DEFAULT_BUFFER_SIZE


class InputReplica:
    """Owned file descriptor holding a copy of the original stdin.

    The backing file has no directory entry, so it disappears with the
    descriptor even if the process is killed. Every probe rewinds the shared
    descriptor to offset 0 before the child inherits it.
    """

    def __init__(self, fd: int, size: int) -> None:
        """Initialize replica.

        Args:
            fd: Open read/write descriptor of the unlinked backing file.
            size: Number of captured bytes.
        """
        self._fd = fd
        self.size = size

    @property
    def fd(self) -> int:
        """Descriptor to hand to the child as stdin."""
        if self._fd < 0:
            raise ValueError("replica is closed")
        return self._fd

    def rewind(self) -> None:
        """Seek back to the start of the captured input.

        Raises:
            EnvironmentFault: If the seek fails.
        """
        try:
            os.lseek(self.fd, 0, os.SEEK_SET)
        except OSError as e:
            raise EnvironmentFault("captured stdin", e.strerror or str(e)) from e

    def read_all(self) -> bytes:
        """Rewind and return the full captured input."""
        self.rewind()
        chunks: list[bytes] = []
        while True:
            chunk = os.read(self.fd, CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def close(self) -> None:
        """Close the backing descriptor. Safe to call more than once."""
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1

    def __enter__(self) -> "InputReplica":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _write_all(fd: int, data: bytes, path: str) -> None:
    try:
        written = os.write(fd, data)
    except OSError as e:
        raise EnvironmentFault(path, e.strerror or str(e)) from e
    if written != len(data):
        raise EnvironmentFault(path, "short write")


def capture_stdin(source_fd: int = 0, tmpdir: str | Path | None = None) -> InputReplica:
    """Read source_fd to EOF into an unlinked temporary file.

    Args:
        source_fd: Descriptor to capture; standard input by default.
        tmpdir: Directory for the backing file; defaults to $TMPDIR or the
            platform temporary directory.

    Returns:
        InputReplica positioned at offset 0.

    Raises:
        EnvironmentFault: If the file cannot be created, stdin cannot be read,
            or a write is short.
    """
    directory = str(tmpdir) if tmpdir is not None else tempfile.gettempdir()
    template = os.path.join(directory, "memfloor.XXXXXX")

    try:
        fd, path = tempfile.mkstemp(prefix="memfloor.", dir=directory)
    except OSError as e:
        raise EnvironmentFault(template, e.strerror or str(e)) from e

    try:
        try:
            os.unlink(path)
        except OSError as e:
            raise EnvironmentFault(path, e.strerror or str(e)) from e

        size = 0
        while True:
            try:
                chunk = os.read(source_fd, CHUNK_SIZE)
            except OSError as e:
                raise EnvironmentFault("/dev/stdin", e.strerror or str(e)) from e
            if not chunk:
                break
            _write_all(fd, chunk, path)
            size += len(chunk)
    except BaseException:
        os.close(fd)
        raise

    replica = InputReplica(fd, size)
    replica.rewind()
    logger.debug("stdin_captured", bytes=size, directory=directory)
    return replica
