"""
Centralized configuration with environment variable overrides.

Resource defaults, policy fallbacks, and engine limits are configurable
here. Nothing is hardcoded in resolver, generator, or committer logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var (true/false, yes/no, 1/0, on/off)."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class ResourceDefaults:
    """Fallbacks for resources whose listing omits them."""

    timezone: str = os.getenv("DEFAULT_TIMEZONE", "Europe/London")
    currency: str = os.getenv("DEFAULT_CURRENCY", "GBP")


@dataclass(frozen=True)
class PolicyDefaults:
    """Service policy values used when a resource has no policy row."""

    slot_duration_minutes: int = _safe_int("DEFAULT_SLOT_DURATION_MINUTES", "60")
    buffer_minutes: int = _safe_int("DEFAULT_BUFFER_MINUTES", "15")
    advance_booking_days: int = _safe_int("DEFAULT_ADVANCE_BOOKING_DAYS", "30")
    same_day_booking: bool = _safe_bool("DEFAULT_SAME_DAY_BOOKING", "true")
    cancellation_hours: int = _safe_int("DEFAULT_CANCELLATION_HOURS", "24")


@dataclass(frozen=True)
class EngineConfig:
    """Limits for the read and write paths."""

    external_busy_max_age_minutes: int = _safe_int("EXTERNAL_BUSY_MAX_AGE_MINUTES", "60")
    commit_timeout_sec: float = _safe_float("COMMIT_TIMEOUT_SECONDS", "5.0")
    max_calendar_days: int = _safe_int("MAX_CALENDAR_DAYS", "31")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    resources: ResourceDefaults = field(default_factory=ResourceDefaults)
    policy: PolicyDefaults = field(default_factory=PolicyDefaults)
    engine: EngineConfig = field(default_factory=EngineConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "slot-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        ZoneInfo(config.resources.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"DEFAULT_TIMEZONE is not a known IANA zone: {config.resources.timezone!r}"
        ) from None

    if len(config.resources.currency) != 3:
        raise ValueError(
            f"DEFAULT_CURRENCY must be a 3-letter code, got {config.resources.currency!r}"
        )
    if config.policy.slot_duration_minutes < 1:
        raise ValueError(
            "DEFAULT_SLOT_DURATION_MINUTES must be >= 1, "
            f"got {config.policy.slot_duration_minutes}"
        )
    if config.policy.buffer_minutes < 0:
        raise ValueError(
            f"DEFAULT_BUFFER_MINUTES must be >= 0, got {config.policy.buffer_minutes}"
        )
    if config.policy.advance_booking_days < 0:
        raise ValueError(
            "DEFAULT_ADVANCE_BOOKING_DAYS must be >= 0, "
            f"got {config.policy.advance_booking_days}"
        )
    if config.policy.cancellation_hours < 0:
        raise ValueError(
            f"DEFAULT_CANCELLATION_HOURS must be >= 0, got {config.policy.cancellation_hours}"
        )
    if config.engine.external_busy_max_age_minutes < 1:
        raise ValueError(
            "EXTERNAL_BUSY_MAX_AGE_MINUTES must be >= 1, "
            f"got {config.engine.external_busy_max_age_minutes}"
        )
    if config.engine.commit_timeout_sec <= 0:
        raise ValueError(
            f"COMMIT_TIMEOUT_SECONDS must be > 0, got {config.engine.commit_timeout_sec}"
        )
    if config.engine.max_calendar_days < 1:
        raise ValueError(
            f"MAX_CALENDAR_DAYS must be >= 1, got {config.engine.max_calendar_days}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
