# config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping
from zoneinfo import ZoneInfo

from domain import DEFAULT_TIMEZONE
from errors import ConfigurationError

PLACEHOLDER_URL = "PASTE_YOUR_APPS_SCRIPT_URL_HERE"
MODE_ACTIONS = "actions"
MODE_LEGACY = "legacy"

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class AppConfig:
    """Settings injected at startup. Built once by :func:`load_config`."""
    api_url: str = PLACEHOLDER_URL
    mode: str = MODE_ACTIONS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    timeout_s: float = DEFAULT_TIMEOUT_S
    timezone: str = DEFAULT_TIMEZONE
    pdf_enabled: bool = True
    log_level: str = "INFO"

    @property
    def is_placeholder(self) -> bool:
        url = self.api_url.strip()
        return not url or url == PLACEHOLDER_URL

    def require_endpoint(self) -> str:
        """Returns the endpoint URL, or raises before any network call is made."""
        if self.is_placeholder:
            raise ConfigurationError(
                "API Error: set SHIFTS_API_URL to your Google Apps Script web app URL."
            )
        return self.api_url.strip()

    def today(self) -> date:
        return datetime.now(ZoneInfo(self.timezone)).date()


def _int(value: str | None, default: int) -> int:
    try:
        parsed = int(value) if value is not None else default
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def _float(value: str | None, default: float) -> float:
    try:
        parsed = float(value) if value is not None else default
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if environ is None else environ
    mode = env.get("SHIFTS_API_MODE", MODE_ACTIONS).strip().lower()
    if mode not in (MODE_ACTIONS, MODE_LEGACY):
        mode = MODE_ACTIONS
    return AppConfig(
        api_url=env.get("SHIFTS_API_URL", PLACEHOLDER_URL),
        mode=mode,
        max_attempts=_int(env.get("SHIFTS_API_MAX_ATTEMPTS"), DEFAULT_MAX_ATTEMPTS),
        timeout_s=_float(env.get("SHIFTS_API_TIMEOUT"), DEFAULT_TIMEOUT_S),
        timezone=env.get("APP_TIMEZONE", DEFAULT_TIMEZONE),
        pdf_enabled=_bool(env.get("INVOICE_PDF_ENABLED"), True),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )


__all__ = ["AppConfig", "load_config", "PLACEHOLDER_URL", "MODE_ACTIONS", "MODE_LEGACY"]
