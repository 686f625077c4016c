import logging
import os
import shutil

from scoped_launcher.errors import ExecutableNotFoundError

logger = logging.getLogger(__name__)


def _has_separator(name: str) -> bool:
    return os.path.sep in name or (os.path.altsep is not None and os.path.altsep in name)


def resolve_executable(name: str, search_path: str | None = None) -> str:
    """
    Resolve name to an invocable path.

    A name containing a path separator is checked directly and never looked up
    on the search path. Otherwise the directories in search_path (default: $PATH)
    are searched in order.
    """
    if not name:
        raise ExecutableNotFoundError(name)

    if _has_separator(name):
        if os.path.isfile(name) and os.access(name, os.X_OK):
            return name
        raise ExecutableNotFoundError(name)

    path = shutil.which(name, path=search_path)
    if path is None:
        raise ExecutableNotFoundError(name)

    logger.debug(f"Resolved {name!r} to {path}")
    return path
