from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from scoped_launcher.utils import _utcnow


class LauncherState(str, Enum):
    INITIALIZED = "initialized"  # constructed, no process yet
    RUNNING = "running"  # process spawned, not exited, scope not done
    TERMINATED = "terminated"  # process exited or scope done


class ProcessState(BaseModel):
    """Runtime state of a spawned process"""

    pid: int
    process_create_time: float
    created_at: datetime = Field(default_factory=_utcnow)
    returncode: int | None = None
