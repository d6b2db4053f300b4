"""
Configuration lookup for provider adapters.

Resolution order for every key:
    1. Explicit connection options (passed at connect time)
    2. Environment variable
    3. Documented default (optional lookups only)

A missing required key raises ProviderError(UNAUTHORIZED) naming the
expected environment variable.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .errors import ErrorKind, ProviderError

logger = logging.getLogger(__name__)

Options = Mapping[str, Any]


def _lookup(key: str, options: Options | None, env: str | None) -> str | None:
    if options:
        value = options.get(key)
        if value is None and env is not None:
            value = options.get(env)
        if value is not None:
            return str(value)
    env_value = os.environ.get(env or key)
    if env_value is not None:
        return env_value
    return None


def resolve_config(
    key: str,
    options: Options | None = None,
    env: str | None = None,
    *,
    error_cls: type[ProviderError] = ProviderError,
) -> str:
    """
    Resolve a required configuration value.

    Args:
        key: Option key (also used as the env var name unless env is given)
        options: Explicit connection options
        env: Environment variable to fall back to
        error_cls: Domain error type raised when missing

    Returns:
        The configured value

    Raises:
        ProviderError: kind UNAUTHORIZED when neither source provides the key
    """
    value = _lookup(key, options, env)
    if value is None:
        raise error_cls(ErrorKind.UNAUTHORIZED, f"Missing config key: {env or key}")
    return value


def optional_config(key: str, options: Options | None = None, env: str | None = None) -> str | None:
    """Resolve an optional configuration value. Never fails."""
    return _lookup(key, options, env)


def config_with_default(
    key: str,
    default: str,
    options: Options | None = None,
    env: str | None = None,
) -> str:
    value = _lookup(key, options, env)
    return default if value is None else value


def provider_config(provider: str, options: Options | None = None) -> dict[str, str]:
    """
    Collect the conventional settings for a provider.

    Looks up <PROVIDER>_API_KEY, <PROVIDER>_ENDPOINT and <PROVIDER>_REGION.
    """
    prefix = provider.upper()
    config: dict[str, str] = {}
    for field_name in ("api_key", "endpoint", "region"):
        value = optional_config(f"{prefix}_{field_name.upper()}", options)
        if value is not None:
            config[field_name] = value
    return config


class RetrySettings(BaseModel):
    """
    Retry, backoff and timeout settings for an adapter.

    The core never retries on its own; adapters opting in read these.
    """

    max_retries: int = Field(3, ge=0)
    initial_delay: float = Field(1.0, ge=0)
    max_delay: float = Field(60.0, ge=0)
    multiplier: float = Field(2.0, ge=1)
    timeout: float = Field(30.0, gt=0)

    @classmethod
    def from_config(cls, prefix: str, options: Options | None = None) -> RetrySettings:
        """
        Read settings from <PREFIX>_MAX_RETRIES, <PREFIX>_INITIAL_DELAY,
        <PREFIX>_MAX_DELAY, <PREFIX>_MULTIPLIER and <PREFIX>_TIMEOUT.

        Unparsable or out-of-range values fall back to the default.
        """
        prefix = prefix.upper()
        values: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = f"{prefix}_{name.upper()}"
            raw = optional_config(key, options)
            if raw is None:
                continue
            caster = int if field.annotation in (int, "int") else float
            try:
                value = caster(raw)
                cls.model_validate({name: value})
            except (ValueError, ValidationError):
                logger.warning(f"Ignoring invalid value for {key}: {raw!r}")
                continue
            values[name] = value
        return cls(**values)


__all__ = [
    "Options",
    "RetrySettings",
    "config_with_default",
    "optional_config",
    "provider_config",
    "resolve_config",
]
