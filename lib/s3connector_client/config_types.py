from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ConfigurationError

DEFAULT_BASE_URL = "http://localhost:8000/api"
MIN_API_KEY_LENGTH = 10


@dataclass(frozen=True)
class RetryConfig:
    # Not consulted by the request executor.
    enabled: bool = True
    max_attempts: int = 3
    delay_ms: int = 1000


@dataclass(frozen=True)
class CacheConfig:
    # Not consulted by the request executor.
    enabled: bool = False
    ttl_s: int = 300


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_s: int = 30
    logging_enabled: bool = True
    default_visibility: str = "private"
    presigned_expiration_s: int = 3600
    retry: RetryConfig = field(default_factory=RetryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def validate(self) -> "ClientConfig":
        if not self.api_key:
            raise ConfigurationError(
                "S3 Connector API key is required. Set S3_CONNECTOR_API_KEY or api_key in config.toml."
            )
        if len(self.api_key) < MIN_API_KEY_LENGTH:
            raise ConfigurationError(
                f"S3 Connector API key must be at least {MIN_API_KEY_LENGTH} characters long."
            )
        if not (self.base_url or "").strip():
            raise ConfigurationError("S3 Connector base URL cannot be empty.")
        if isinstance(self.timeout_s, bool) or not isinstance(self.timeout_s, int) or self.timeout_s <= 0:
            raise ConfigurationError(f"Timeout must be a positive number of seconds, got {self.timeout_s!r}.")
        return self


def api_key_preview(api_key: str) -> str:
    return f"{api_key[:MIN_API_KEY_LENGTH]}..."
