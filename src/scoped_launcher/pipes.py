"""
Pipes connecting the launcher to a child process's standard streams.
"""

import logging
import os
from dataclasses import dataclass
from typing import IO

from scoped_launcher.errors import IncompleteTransferError, StdinClosedError

logger = logging.getLogger(__name__)


def open_pipe() -> tuple[IO[bytes], IO[bytes]]:
    """Open an OS pipe as unbuffered binary (reader, writer) file objects"""
    read_fd, write_fd = os.pipe()
    return os.fdopen(read_fd, "rb", buffering=0), os.fdopen(write_fd, "wb", buffering=0)


@dataclass
class PipeSet:
    """
    Parent ends (stdin writer, stdout and stderr readers) are owned by the
    launcher and lent to callers. Child ends are handed to the spawn call and
    closed in the parent once the child holds its own copies.
    """

    stdin: IO[bytes]
    stdout: IO[bytes]
    stderr: IO[bytes]
    child_stdin: IO[bytes] | None = None
    child_stdout: IO[bytes] | None = None
    child_stderr: IO[bytes] | None = None

    @classmethod
    def create(cls) -> "PipeSet":
        opened: list[IO[bytes]] = []
        try:
            for _ in range(3):
                opened.extend(open_pipe())
        except OSError:
            for f in opened:
                f.close()
            raise

        stdin_r, stdin_w, stdout_r, stdout_w, stderr_r, stderr_w = opened
        return cls(
            stdin=stdin_w,
            stdout=stdout_r,
            stderr=stderr_r,
            child_stdin=stdin_r,
            child_stdout=stdout_w,
            child_stderr=stderr_w,
        )

    def child_ends(self) -> tuple[IO[bytes], IO[bytes], IO[bytes]]:
        if self.child_stdin is None or self.child_stdout is None or self.child_stderr is None:
            raise ValueError("child pipe ends have already been released")
        return self.child_stdin, self.child_stdout, self.child_stderr

    def release_child_ends(self) -> None:
        """Close the parent's copies of the child ends"""
        for f in (self.child_stdin, self.child_stdout, self.child_stderr):
            if f is not None:
                f.close()
        self.child_stdin = self.child_stdout = self.child_stderr = None

    def write_stdin(self, data: bytes) -> None:
        """
        Write the whole buffer to the child's stdin.

        A short write is an error even though the written prefix has already
        been delivered.
        """
        if self.stdin.closed:
            raise StdinClosedError()
        expected = len(data)
        written = self.stdin.write(data) or 0
        if written != expected:
            raise IncompleteTransferError(written=written, expected=expected)

    def close_stdin(self) -> None:
        if not self.stdin.closed:
            self.stdin.close()

    def close(self) -> None:
        """
        Release every endpoint. Only a failure to release the stdin writer is
        reported.
        """
        try:
            self.close_stdin()
        finally:
            endpoints = (
                self.child_stdin,
                self.child_stdout,
                self.child_stderr,
                self.stdout,
                self.stderr,
            )
            for f in endpoints:
                if f is not None:
                    _close_quietly(f)
            self.child_stdin = self.child_stdout = self.child_stderr = None


def _close_quietly(f: IO[bytes]) -> None:
    try:
        f.close()
    except OSError as e:
        logger.warning(f"Failed to close pipe endpoint: {e}")
