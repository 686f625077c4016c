from functools import lru_cache

import pydantic_settings
from pydantic_settings import SettingsConfigDict


class LauncherConfig(pydantic_settings.BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCOPED_LAUNCHER_")

    runner_type: str = "subprocess"
    # Seconds to wait for a killed process to be reaped
    reap_timeout: float = 5.0


@lru_cache
def get_config() -> LauncherConfig:
    return LauncherConfig()
