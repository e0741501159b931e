"""
Configuration for the LiveKit healthcheck.

Loaded from environment variables or .env file; CLI flags are passed to
``load_settings`` and take precedence over both.
"""

import re
from typing import Any, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

DEFAULT_TIMEOUT = "5s"

# Go-style duration units, in seconds
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Any) -> float:
    """
    Convert a duration into seconds.

    Accepts numbers (seconds) and Go-style strings such as ``5s``, ``250ms``
    or ``1m30s``.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("invalid duration: empty string")
        try:
            seconds = float(text)
        except ValueError:
            seconds = 0.0
            pos = 0
            for match in _DURATION_PART.finditer(text):
                if match.start() != pos:
                    break
                seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
                pos = match.end()
            if pos != len(text):
                raise ValueError(f"invalid duration: {text!r}")

    if seconds <= 0:
        raise ValueError(f"timeout must be positive, got {value!r}")
    return seconds


class HealthcheckSettings(BaseSettings):
    """Run configuration. Immutable once loaded."""

    # ============================================
    # LIVEKIT SERVER
    # ============================================
    host: Optional[str] = Field(
        default=None,
        validation_alias="LIVEKIT_HOST",
    )
    keys: Optional[str] = Field(
        default=None,
        validation_alias="LIVEKIT_KEYS",
    )

    # ============================================
    # PROBE
    # ============================================
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        validation_alias="LIVEKIT_HEALTHCHECK_TIMEOUT",
        validate_default=True,
    )
    strict_keys: bool = Field(
        default=False,
        validation_alias="LIVEKIT_HEALTHCHECK_STRICT_KEYS",
    )
    debug: bool = Field(
        default=False,
        validation_alias="DEBUG",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("timeout", mode="before")
    @classmethod
    def validate_timeout(cls, v):
        return parse_duration(v)

    @field_validator("debug", mode="before")
    @classmethod
    def validate_debug(cls, v):
        # Any non-empty DEBUG turns it on, like os.getenv("DEBUG")
        if isinstance(v, str):
            return bool(v.strip())
        return bool(v)

    @field_validator("host", "keys", mode="before")
    @classmethod
    def blank_as_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def require(self) -> None:
        """Raise ConfigError when host or keys are not set."""
        if self.host is None:
            raise ConfigError("error: host value not set")
        if self.keys is None:
            raise ConfigError("error: keys not set")


def load_settings(**values: Any) -> HealthcheckSettings:
    """
    Build settings from the environment plus explicit values.

    Explicit values (CLI flags) win over the environment; None means unset.
    """
    fields = HealthcheckSettings.model_fields
    aliases = {name: field.validation_alias or name for name, field in fields.items()}
    names = {alias: name for name, alias in aliases.items()}

    # Explicit values go in under the env alias so they override the environment
    explicit = {aliases.get(k, k): v for k, v in values.items() if v is not None}
    try:
        return HealthcheckSettings(**explicit)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(names.get(str(p), str(p)) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"error: invalid configuration; {errors}") from e
