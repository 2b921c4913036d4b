"""Environment-driven configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .models import ConfigError

DEFAULT_BASE_URL = "https://secure.hosting.de/api/"


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    api_key: str
    base_url: str
    limit: int
    timeout: float
    verify_tls: bool
    default_record_ttl: int
    max_workers: int
    log_level: str

    def provider_settings(self) -> dict[str, str]:
        """Return the settings mapping handed to provider factories."""
        return {
            "apikey": self.api_key,
            "baseurl": self.base_url,
            "limit": str(self.limit),
            "timeout": str(self.timeout),
            "verify_tls": "true" if self.verify_tls else "false",
        }


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Return a boolean parsed from a string."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_int(name: str, default: str, minimum: int = 0) -> int:
    """Read an integer setting, rejecting garbage and values below ``minimum``."""
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < minimum:
        raise ConfigError(f"{name} must be at least {minimum}.")
    return value


def load_config() -> AppConfig:
    """Load configuration values from the environment (and .env)."""
    load_dotenv()
    api_key = os.getenv("HOSTINGDE_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("HOSTINGDE_API_KEY is required.")

    base_url = os.getenv("HOSTINGDE_BASE_URL") or DEFAULT_BASE_URL
    if not base_url.endswith("/"):
        base_url = f"{base_url}/"

    raw_timeout = os.getenv("HOSTINGDE_TIMEOUT", "30")
    try:
        timeout = float(raw_timeout)
    except ValueError as exc:
        raise ConfigError(f"HOSTINGDE_TIMEOUT must be a number, got {raw_timeout!r}.") from exc

    return AppConfig(
        api_key=api_key,
        base_url=base_url,
        limit=_parse_int("HOSTINGDE_LIMIT", "10", minimum=1),
        timeout=timeout,
        verify_tls=_parse_bool(os.getenv("HOSTINGDE_VERIFY_TLS"), default=True),
        default_record_ttl=_parse_int("DEFAULT_RECORD_TTL", "3600"),
        max_workers=_parse_int("MAX_WORKERS", "4", minimum=1),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
