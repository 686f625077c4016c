import os
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def env_list_to_dict(env: list[str]) -> dict[str, str]:
    """
    Convert KEY=VALUE entries to a mapping for the spawn call.

    Entries without "=" are ignored. A later entry for the same key wins.
    """
    result = {}
    for entry in env:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            continue
        result[key] = value
    return result


def build_env(env: list[str], inherit: bool = False) -> dict[str, str]:
    if inherit:
        return {**os.environ, **env_list_to_dict(env)}
    return env_list_to_dict(env)
