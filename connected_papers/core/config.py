"""Client configuration loaded from explicit arguments or the environment.

``ClientConfig.from_env()`` reads the service address and API key from
``CONNECTED_PAPERS_REST_API`` and ``CONNECTED_PAPERS_API_KEY``, falling
back to the public address and a placeholder token.

Fail-fast validation:
    Every ``ClientConfig`` is validated on construction and raises
    ``ConfigValidationError`` if a value is out of its valid range, so a
    bad configuration surfaces before the first request is sent.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from connected_papers.core.constants import (
    API_KEY_ENV,
    BASE_URL_ENV,
    DEFAULT_API_KEY,
    DEFAULT_BASE_URL,
    DEFAULT_ERROR_BACKOFF_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RETRY_BUDGET,
)
from connected_papers.core.exceptions import ValidationError


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable client configuration.

    Read-only after construction, so one instance can be shared by any
    number of concurrent poll sequences.

    Attributes:
        base_url: Service address, used as the prefix of every API path.
        api_key: Token sent in the ``X-Api-Key`` header.
        retry_budget: Transport/decode failures tolerated per poll sequence.
        poll_interval_seconds: Wait between routine polls.
        error_backoff_seconds: Wait before retrying after a failure.
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str = DEFAULT_API_KEY
    retry_budget: int = DEFAULT_RETRY_BUDGET
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS

    def __post_init__(self) -> None:
        _validate(self)

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Load configuration from environment variables.

        Unset (or empty) variables fall back to the defaults.

        Raises:
            ConfigValidationError: If the resulting configuration is invalid.
        """
        return cls(
            base_url=os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL,
            api_key=os.getenv(API_KEY_ENV) or DEFAULT_API_KEY,
        )


def _validate(config: ClientConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.base_url:
        raise ConfigValidationError("base_url", config.base_url, "must not be empty")

    if not config.base_url.startswith(("http://", "https://")):
        raise ConfigValidationError(
            "base_url",
            config.base_url,
            "must start with http:// or https://",
        )

    if not config.api_key:
        raise ConfigValidationError("api_key", config.api_key, "must not be empty")

    if config.retry_budget < 1:
        raise ConfigValidationError(
            "retry_budget",
            config.retry_budget,
            "must be >= 1 (attempts)",
        )

    if config.poll_interval_seconds < 0:
        raise ConfigValidationError(
            "poll_interval_seconds",
            config.poll_interval_seconds,
            "must be >= 0 (seconds)",
        )

    if config.error_backoff_seconds < 0:
        raise ConfigValidationError(
            "error_backoff_seconds",
            config.error_backoff_seconds,
            "must be >= 0 (seconds)",
        )
