"""
Configuration loader for workboard.

Reads workboard.env (KEY=value). Every key is optional; bad values are
reported and replaced by their defaults so the board still comes up.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import envparse
from workboard.schedule.clock import WorkdayClock, parse_hhmm

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WORKBOARD_CONFIG"
DEFAULT_CONFIG_FILE = "workboard.env"

DEFAULT_API_URL = "http://localhost:5000/api"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class ClientConfig:
    """Client-side settings from workboard.env"""
    api_url: str = DEFAULT_API_URL
    api_token: Optional[str] = None
    poll_interval_seconds: int = 60
    request_timeout_seconds: int = 30
    ticket_limit: int = 500  # Server default page is 100; the board wants everything
    default_day_start: str = "08:00"
    lunch_start: str = "13:00"
    lunch_end: str = "14:00"
    log_level: str = "WARNING"
    desktop_notifications: bool = False

    def workday_clock(self) -> WorkdayClock:
        return WorkdayClock(
            lunch_start=self.lunch_start,
            lunch_end=self.lunch_end,
            default_day_start=self.default_day_start,
        )


def _int_setting(env: dict, key: str, default: int, minimum: int = 1) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"[CONFIG] Invalid {key} '{raw}', using default {default}")
        return default
    if value < minimum:
        logger.warning(f"[CONFIG] {key}={value} below minimum {minimum}, using default {default}")
        return default
    return value


def _time_setting(env: dict, key: str, default: str) -> str:
    raw = env.get(key)
    if not raw:
        return default
    try:
        parse_hhmm(raw, fallback=None)
    except ValueError:
        logger.warning(f"[CONFIG] Invalid {key} '{raw}', using default {default}")
        return default
    return raw.strip()


def config_from_env(env: dict) -> ClientConfig:
    """Build a ClientConfig from parsed env values."""
    defaults = ClientConfig()

    log_level = env.get("LOG_LEVEL", defaults.log_level).upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"[CONFIG] Unknown LOG_LEVEL '{log_level}', using {defaults.log_level}")
        log_level = defaults.log_level

    return ClientConfig(
        api_url=(env.get("API_URL") or defaults.api_url).rstrip("/"),
        api_token=env.get("API_TOKEN") or None,
        poll_interval_seconds=_int_setting(env, "POLL_INTERVAL_SECONDS", defaults.poll_interval_seconds),
        request_timeout_seconds=_int_setting(env, "REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds),
        ticket_limit=_int_setting(env, "TICKET_LIMIT", defaults.ticket_limit),
        default_day_start=_time_setting(env, "DEFAULT_DAY_START", defaults.default_day_start),
        lunch_start=_time_setting(env, "LUNCH_START", defaults.lunch_start),
        lunch_end=_time_setting(env, "LUNCH_END", defaults.lunch_end),
        log_level=log_level,
        desktop_notifications=env.get("DESKTOP_NOTIFICATIONS", "false").lower() == "true",
    )


def resolve_config_path(explicit: Optional[str] = None) -> Path:
    """--config wins, then $WORKBOARD_CONFIG, then ./workboard.env"""
    if explicit:
        return Path(explicit)
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return Path(DEFAULT_CONFIG_FILE)


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """Load workboard.env, falling back to defaults when it doesn't exist."""
    path = path or resolve_config_path()
    try:
        env = envparse.load_env(str(path))
    except FileNotFoundError:
        logger.debug(f"[CONFIG] {path} not found, using defaults")
        env = {}
    return config_from_env(env)
