"""Infrastructure configuration (vote cache, ledger gateway, runtime).

Environment Variables:
- REDIS_URL: Vote cache URL; empty selects in-memory stubs (development)
- VOTE_TTL_SECONDS: Vote set expiry in seconds (default: 7 days)
- VOTE_KEY_PREFIX: Key prefix for vote sets (default: "votes")
- LEDGER_GATEWAY_URL: Ledger gateway base URL; empty selects the in-memory ledger
- LEDGER_PROGRAM_ID: Program id used to derive market addresses
- LEDGER_GATEWAY_TIMEOUT: HTTP timeout in seconds (default: 30)
- ENVIRONMENT: "production" selects JSON logs (default: "development")
- LOG_LEVEL: Root log level (default: "INFO")
- VOTE_RATE_LIMIT_PER_MINUTE: Vote intake requests per client IP (default: 100)
- TRUST_FORWARDED_FOR: Key the rate limit on X-Forwarded-For (default: false)
"""

from __future__ import annotations

from dataclasses import dataclass

from vote_aggregator.config._env import (
    _get_bool_env,
    _get_float_env,
    _get_int_env,
    _get_str_env,
)
from vote_aggregator.domain.errors import ConfigurationError

SEVEN_DAYS_SECONDS = 7 * 24 * 60 * 60

# Program id of the markets program when none is configured.
DEFAULT_PROGRAM_ID = "7h3gXfBfYFueFVLYyfL5Qo1QGsf4GQUfW96FKVgnUsJS"


@dataclass(frozen=True)
class RedisConfig:
    """Vote cache configuration.

    Attributes:
        url: Redis URL. Empty means run on in-memory stubs.
        vote_ttl_seconds: Expiry applied to a vote set on every write.
        key_prefix: Prefix for vote-set and pending-index keys.
    """

    url: str = ""
    vote_ttl_seconds: int = SEVEN_DAYS_SECONDS
    key_prefix: str = "votes"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.vote_ttl_seconds < 1:
            raise ConfigurationError(
                f"vote_ttl_seconds must be positive, got {self.vote_ttl_seconds}"
            )
        if not self.key_prefix or ":" in self.key_prefix:
            raise ConfigurationError(
                f"key_prefix must be non-empty and contain no ':', got {self.key_prefix!r}"
            )

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @classmethod
    def from_environment(cls) -> "RedisConfig":
        """Create config from environment variables with defaults."""
        return cls(
            url=_get_str_env("REDIS_URL"),
            vote_ttl_seconds=_get_int_env("VOTE_TTL_SECONDS", SEVEN_DAYS_SECONDS),
            key_prefix=_get_str_env("VOTE_KEY_PREFIX", "votes") or "votes",
        )


@dataclass(frozen=True)
class LedgerGatewayConfig:
    """Ledger gateway configuration.

    Attributes:
        gateway_url: Base URL of the signing gateway. Empty means use the
                     in-memory ledger (development only).
        program_id: Markets program id, used for address derivation.
        timeout_seconds: HTTP timeout for gateway calls.
    """

    gateway_url: str = ""
    program_id: str = DEFAULT_PROGRAM_ID
    timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.program_id:
            raise ConfigurationError("program_id must not be empty")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )

    @property
    def enabled(self) -> bool:
        return bool(self.gateway_url)

    @classmethod
    def from_environment(cls) -> "LedgerGatewayConfig":
        """Create config from environment variables with defaults."""
        return cls(
            gateway_url=_get_str_env("LEDGER_GATEWAY_URL"),
            program_id=_get_str_env("LEDGER_PROGRAM_ID", DEFAULT_PROGRAM_ID)
            or DEFAULT_PROGRAM_ID,
            timeout_seconds=_get_float_env("LEDGER_GATEWAY_TIMEOUT", 30.0),
        )


@dataclass(frozen=True)
class RuntimeConfig:
    """Process-level settings.

    Attributes:
        environment: "production" selects JSON logs, anything else console.
        log_level: Root log level name.
        vote_rate_limit_per_minute: Vote intake requests per client IP.
        trust_forwarded_for: Honour X-Forwarded-For; enable only behind a
            proxy that overwrites the header.
    """

    environment: str = "development"
    log_level: str = "INFO"
    vote_rate_limit_per_minute: int = 100
    trust_forwarded_for: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.vote_rate_limit_per_minute < 1:
            raise ConfigurationError(
                "vote_rate_limit_per_minute must be positive, "
                f"got {self.vote_rate_limit_per_minute}"
            )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_environment(cls) -> "RuntimeConfig":
        """Create config from environment variables with defaults."""
        return cls(
            environment=_get_str_env("ENVIRONMENT", "development") or "development",
            log_level=(_get_str_env("LOG_LEVEL", "INFO") or "INFO").upper(),
            vote_rate_limit_per_minute=_get_int_env("VOTE_RATE_LIMIT_PER_MINUTE", 100),
            trust_forwarded_for=_get_bool_env("TRUST_FORWARDED_FOR", False),
        )
