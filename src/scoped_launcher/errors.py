"""
Launcher exceptions.

Every class here is a stable identity: callers catch by type, never by message.
"""


class LauncherError(Exception):
    """Base exception for launcher errors."""

    pass


class MissingScopeError(LauncherError):
    """Raised when a launcher is created without a cancellation scope."""

    def __init__(self) -> None:
        super().__init__("a cancellation scope must be provided")


class ExecutableNotFoundError(LauncherError, FileNotFoundError):
    """Raised when an executable cannot be found on the search path."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"executable file not found in $PATH: {name!r}")


class CanceledError(LauncherError):
    """Raised when work is attempted on a scope that is already done."""

    def __init__(self, message: str = "scope canceled"):
        super().__init__(message)


class DeadlineExceededError(CanceledError):
    """Raised when work is attempted on a scope whose deadline has passed."""

    def __init__(self, message: str = "scope deadline exceeded"):
        super().__init__(message)


class IncompleteTransferError(LauncherError):
    """Raised when the process did not receive all bytes sent to stdin.

    The bytes that were written have already been delivered; the remainder
    is not retried.
    """

    def __init__(self, written: int, expected: int):
        self.written = written
        self.expected = expected
        super().__init__(
            f"command did not receive all bytes sent to stdin "
            f"({written} of {expected} written)"
        )


class AlreadyStartedError(LauncherError):
    """Raised when a launcher's process has already been spawned."""

    def __init__(self, pid: int):
        self.pid = pid
        super().__init__(f"process already started with PID {pid}")


class StdinClosedError(LauncherError):
    """Raised when writing to stdin after the launcher has been closed."""

    def __init__(self) -> None:
        super().__init__("stdin has already been closed")
