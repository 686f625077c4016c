import logging
import subprocess
import threading
from typing import IO

import psutil

from scoped_launcher.runners.base import ProcessRunner

logger = logging.getLogger(__name__)

# Serialise spawns so that descriptors meant for one child are never
# inherited by another child spawned concurrently.
_popen_lock = threading.Lock()


class SubprocessRunner(ProcessRunner):
    def spawn(
        self,
        argv: list[str],
        env: dict[str, str],
        stdin: IO[bytes] | int,
        stdout: IO[bytes] | int,
        stderr: IO[bytes] | int,
    ) -> subprocess.Popen:
        """Start the process with its standard streams attached to the given pipe ends"""
        with _popen_lock:
            process = subprocess.Popen(
                argv,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                env=env,
                close_fds=True,
            )
        logger.debug(f"Spawned {argv[0]} with PID {process.pid}")
        return process

    def is_alive(self, process: subprocess.Popen) -> bool:
        """Check if PID is alive"""
        if process.returncode is not None:
            return False
        try:
            proc = psutil.Process(process.pid)
            # Exited but not yet reaped
            return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False

    def terminate(self, process: subprocess.Popen, wait_time: float = 5.0) -> None:
        """Kill process and reap it"""
        if process.returncode is not None:
            # Already reaped
            return

        try:
            process.kill()
        except ProcessLookupError:
            pass

        try:
            process.wait(timeout=wait_time)
        except subprocess.TimeoutExpired:
            logger.warning(
                f"Process {process.pid} did not exit within {wait_time}s of being killed"
            )
