"""
Errors raised by the LiveKit healthcheck.

Every failure of a run maps to exactly one of these classes; ``main()``
prints the message and exits with status 1.
"""


class HealthcheckError(Exception):
    """Base class for healthcheck failures."""

    reason = "unknown"


class ConfigError(HealthcheckError):
    """Required configuration (host, keys) missing or invalid."""

    reason = "missing-config"


class KeyParseError(HealthcheckError):
    """Credential text could not be parsed."""

    reason = "parse-error"


class TransportError(HealthcheckError):
    """The LiveKit client failed to connect."""

    reason = "transport"


class IdentityMismatchError(HealthcheckError):
    """Connected, but as a different participant than requested."""

    reason = "identity-mismatch"


class HealthcheckTimeoutError(HealthcheckError):
    """No outcome before the configured timeout."""

    reason = "timeout"
