import logging
import subprocess
import time
from types import TracebackType
from typing import IO, Self

import psutil

from scoped_launcher.config import LauncherConfig, get_config
from scoped_launcher.errors import (
    AlreadyStartedError,
    LauncherError,
    MissingScopeError,
    StdinClosedError,
)
from scoped_launcher.models import LauncherState, ProcessState
from scoped_launcher.pipes import PipeSet
from scoped_launcher.resolver import resolve_executable
from scoped_launcher.runners import ProcessRunner, get_runner
from scoped_launcher.scope import Scope, derive
from scoped_launcher.utils import build_env

logger = logging.getLogger(__name__)


class Launcher:
    """
    Launches a single child process bound to a cancellation scope.

    Construction resolves the executable and wires stdin/stdout/stderr, but
    does not spawn anything. The launcher derives its own scope from the one
    supplied; once that scope is done no process will be spawned, and a process
    that is already running is killed and reaped.

    Lifecycle operations are not synchronised against each other and should be
    called from a single owner. Queries only observe state.

    The stdout and stderr readers must be drained by the caller: a child whose
    output pipe is full blocks on its own writes.
    """

    def __init__(
        self,
        scope: Scope | None,
        file: str,
        env: list[str] | None = None,
        *args: str,
        inherit_env: bool = False,
        config: LauncherConfig | None = None,
        runner: ProcessRunner | None = None,
    ):
        if scope is None:
            raise MissingScopeError()

        self.config = config or get_config()
        self._scope, self._cancel = derive(scope)
        try:
            self._path = resolve_executable(file)
            self._scope.check()
            self._runner = runner or get_runner(self.config.runner_type)
            self._pipes = PipeSet.create()
        except BaseException:
            self._cancel()
            raise

        self._file = file
        self._args = list(args)
        self._env = list(env) if env is not None else []
        self._inherit_env = inherit_env
        self._process: subprocess.Popen | None = None
        self._process_state: ProcessState | None = None
        self._killed = False

    @property
    def file(self) -> str:
        """The requested file"""
        return self._file

    @property
    def path(self) -> str:
        """The path the file resolved to"""
        return self._path

    @property
    def args(self) -> list[str]:
        """Copy of the arguments, excluding the program name"""
        return list(self._args)

    @property
    def env(self) -> list[str]:
        """Copy of the KEY=VALUE environment entries"""
        return list(self._env)

    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def stdin(self) -> IO[bytes]:
        return self._pipes.stdin

    @property
    def stdout(self) -> IO[bytes]:
        return self._pipes.stdout

    @property
    def stderr(self) -> IO[bytes]:
        return self._pipes.stderr

    @property
    def pid(self) -> int | None:
        if self._process is None:
            return None
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        """Exit status once the process has been reaped"""
        if self._process is None:
            return None
        return self._process.returncode

    @property
    def process_state(self) -> ProcessState | None:
        if self._process_state is None:
            return None
        return self._process_state.model_copy()

    def is_started(self) -> bool:
        return self._process is not None

    def is_running(self) -> bool:
        """True while the process is alive and the scope is not done"""
        if self._scope.done():
            return False
        return self._process is not None and self._runner.is_alive(self._process)

    @property
    def state(self) -> LauncherState:
        if self._process is None:
            return LauncherState.INITIALIZED
        if self.is_running():
            return LauncherState.RUNNING
        return LauncherState.TERMINATED

    def start(self) -> None:
        """Spawn the process without waiting for it"""
        self._scope.check()
        if self._process is not None:
            raise AlreadyStartedError(self._process.pid)

        argv = [self._path, *self._args]
        child_stdin, child_stdout, child_stderr = self._pipes.child_ends()
        process = self._runner.spawn(
            argv,
            env=build_env(self._env, inherit=self._inherit_env),
            stdin=child_stdin,
            stdout=child_stdout,
            stderr=child_stderr,
        )
        self._pipes.release_child_ends()
        self._process = process
        self._save_process_state(process.pid)

        # Runs immediately if the scope was cancelled while spawning
        self._scope.add_done_callback(self._on_scope_done)

    def run(self, check: bool = True) -> int:
        """
        Spawn the process and block until it exits.

        With check, a non-zero exit status raises subprocess.CalledProcessError.
        """
        self.start()
        return self.wait(check=check)

    def wait(self, timeout: float | None = None, check: bool = False) -> int:
        """
        Block until the process exits and return its exit status.

        If the process was killed because the scope became done, the scope's
        reason is raised instead.
        """
        if self._process is None:
            raise LauncherError("process has not been started")

        returncode = self._process.wait(timeout=timeout)
        self._on_exit(returncode)

        if self._killed:
            self._scope.check()
        if check and returncode != 0:
            raise subprocess.CalledProcessError(returncode, self._process.args)
        return returncode

    def cancel(self) -> None:
        """End the scope, and with it the process. Safe to call in any state."""
        self._cancel()

    def close(self) -> None:
        """
        Cancel the scope and release the pipes. Safe to call more than once.

        Only a failure to release the stdin writer is reported.
        """
        self._cancel()
        self._pipes.close()

    def send_stdin(self, data: bytes) -> None:
        """
        Write all of data to the process's stdin.

        Raises StdinClosedError once the launcher has been closed, otherwise
        the scope's reason if it is done.
        """
        if self._pipes.stdin.closed:
            raise StdinClosedError()
        self._scope.check()
        self._pipes.write_stdin(data)

    def _save_process_state(self, pid: int) -> None:
        try:
            create_time = psutil.Process(pid).create_time()
        except psutil.Error:
            create_time = time.time()
        self._process_state = ProcessState(pid=pid, process_create_time=create_time)

    def _on_scope_done(self) -> None:
        process = self._process
        if process is None:
            return
        if process.poll() is None:
            self._killed = True
            logger.debug(f"Scope done, killing {self._file} (PID {process.pid})")
        self._runner.terminate(process, wait_time=self.config.reap_timeout)
        if process.returncode is not None:
            self._on_exit(process.returncode)

    def _on_exit(self, returncode: int) -> None:
        self._scope.remove_done_callback(self._on_scope_done)
        # Nothing is left to cancel; detach from the caller's scope
        self._cancel()
        if self._process_state is not None and self._process_state.returncode is None:
            self._process_state.returncode = returncode
            logger.debug(f"{self._file} (PID {self.pid}) exited with {returncode}")

    def info(self) -> dict:
        """Return launcher information as a dictionary"""
        return {
            "file": self.file,
            "path": self.path,
            "args": self.args,
            "state": self.state.value,
            "pid": self.pid,
            "returncode": self.returncode,
        }

    def __repr__(self) -> str:
        info = self.info()
        lines = [f"Launcher: {info['file']}"]

        for key, value in info.items():
            if key == "file":
                continue
            display_value = value if value is not None else "-"
            lines.append(f"  {key}: {display_value}")

        return "\n".join(lines)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
