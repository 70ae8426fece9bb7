"""Environment-driven settings for the feed client and resolver."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from .errors import ConfigError

DEFAULT_API_BASE = "https://www.badatime.com/DIVE"
DEFAULT_OPEN_METEO_BASE = "https://api.open-meteo.com/v1/forecast"
DEFAULT_TIMEZONE = "Asia/Seoul"
DEFAULT_CONNECT_TIMEOUT_S = 3.0
DEFAULT_READ_TIMEOUT_S = 4.0
MIN_IO_WORKERS = 4
USER_AGENT = "seacontext/0.1.0"


def _env_float(env: Mapping[str, str], var: str, default: float) -> float:
    value = env.get(var)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid float value for {var}: {value}") from exc


def _env_int(env: Mapping[str, str], var: str, default: int) -> int:
    value = env.get(var)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid int value for {var}: {value}") from exc


class Cfg:
    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        env = os.environ if env is None else env
        self.API_BASE = env.get("BADA_API_BASE", DEFAULT_API_BASE).rstrip("/")
        # opaque credential, passed through as the `key` query parameter
        self.API_KEY = env.get("BADA_API_KEY", "")
        self.TIMEZONE = env.get("BADA_TIMEZONE", DEFAULT_TIMEZONE)
        self.CONNECT_TIMEOUT_S = _env_float(env, "BADA_CONNECT_TIMEOUT_S", DEFAULT_CONNECT_TIMEOUT_S)
        self.READ_TIMEOUT_S = _env_float(env, "BADA_READ_TIMEOUT_S", DEFAULT_READ_TIMEOUT_S)
        workers = _env_int(env, "BADA_IO_WORKERS", os.cpu_count() or MIN_IO_WORKERS)
        self.IO_WORKERS = max(MIN_IO_WORKERS, workers)
        self.OPEN_METEO_BASE = env.get("OPEN_METEO_BASE", DEFAULT_OPEN_METEO_BASE)
