# errors.py
from __future__ import annotations


class ShiftsError(Exception):
    """Base class for failures that are reported to the user, never fatal."""


class ConfigurationError(ShiftsError):
    """The shift store endpoint was never configured."""


class TransportError(ShiftsError):
    """Connection failure or non-2xx status after all retry attempts."""

    def __init__(self, message: str, *, method: str, endpoint: str, attempts: int):
        super().__init__(message)
        self.method = method
        self.endpoint = endpoint
        self.attempts = attempts


class ApplicationError(ShiftsError):
    """Well-formed response whose envelope status is not ``success``."""


class UnsupportedActionError(ApplicationError):
    """The configured endpoint variant does not offer this action."""


__all__ = [
    "ShiftsError",
    "ConfigurationError",
    "TransportError",
    "ApplicationError",
    "UnsupportedActionError",
]
