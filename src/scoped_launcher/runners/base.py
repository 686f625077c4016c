import subprocess
from abc import ABC, abstractmethod
from typing import IO


class ProcessRunner(ABC):
    @abstractmethod
    def spawn(
        self,
        argv: list[str],
        env: dict[str, str],
        stdin: IO[bytes] | int,
        stdout: IO[bytes] | int,
        stderr: IO[bytes] | int,
    ) -> subprocess.Popen:
        pass

    @abstractmethod
    def is_alive(self, process: subprocess.Popen) -> bool:
        """Check if the process has not exited, without reaping it"""
        pass

    @abstractmethod
    def terminate(self, process: subprocess.Popen, wait_time: float) -> None:
        """Forcibly stop the process and reap it"""
        pass
