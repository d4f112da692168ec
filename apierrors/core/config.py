"""Error rendering configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_EXPOSE_DETAILS = True
DEFAULT_EXPOSE_INTERNAL_MESSAGES = False
DEFAULT_STATUS_CODE = 500

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


@dataclass(frozen=True)
class ErrorSettings:
    """Runtime settings for rendering structured errors over HTTP."""

    expose_details: bool
    expose_internal_messages: bool
    default_status_code: int

    def safe_for_logging(self) -> dict[str, bool | int]:
        """Return error settings safe for logs."""
        return {
            "expose_details": self.expose_details,
            "expose_internal_messages": self.expose_internal_messages,
            "default_status_code": self.default_status_code,
        }


@lru_cache(maxsize=1)
def get_error_settings() -> ErrorSettings:
    """Load error rendering settings from the environment."""
    default_status_code = _get_int_env("APIERRORS_DEFAULT_STATUS_CODE", DEFAULT_STATUS_CODE)
    if not 400 <= default_status_code <= 599:
        raise ValueError("APIERRORS_DEFAULT_STATUS_CODE must be an HTTP error status (400-599)")

    return ErrorSettings(
        expose_details=_get_bool_env("APIERRORS_EXPOSE_DETAILS", DEFAULT_EXPOSE_DETAILS),
        expose_internal_messages=_get_bool_env(
            "APIERRORS_EXPOSE_INTERNAL_MESSAGES", DEFAULT_EXPOSE_INTERNAL_MESSAGES
        ),
        default_status_code=default_status_code,
    )
