from scoped_launcher.config import LauncherConfig  # noqa: F401
from scoped_launcher.errors import (  # noqa: F401
    AlreadyStartedError,
    CanceledError,
    DeadlineExceededError,
    ExecutableNotFoundError,
    IncompleteTransferError,
    LauncherError,
    MissingScopeError,
    StdinClosedError,
)
from scoped_launcher.launcher import Launcher  # noqa: F401
from scoped_launcher.models import LauncherState, ProcessState  # noqa: F401
from scoped_launcher.resolver import resolve_executable  # noqa: F401
from scoped_launcher.scope import (  # noqa: F401
    Scope,
    background,
    derive,
    derive_with_timeout,
)


def run(
    scope: Scope | None,
    file: str,
    *args: str,
    env: list[str] | None = None,
    inherit_env: bool = False,
    check: bool = True,
    config: LauncherConfig | None = None,
) -> int:
    """
    Run file to completion within scope and return its exit status.

    Output is not captured; a child that fills its stdout or stderr pipe
    will block until the scope is done.
    """
    with Launcher(
        scope, file, env, *args, inherit_env=inherit_env, config=config
    ) as launcher:
        return launcher.run(check=check)
