"""Configuration helpers.

Prefer environment variables for secrets and tokens.
"""

from __future__ import annotations

import os


def env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def max_repos() -> int:
    return max(1, env_int("DEVREP_MAX_REPOS", 100))


def http_cache_enabled() -> bool:
    return env_bool("DEVREP_HTTP_CACHE", True)
