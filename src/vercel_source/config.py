"""
Runtime settings for vercel-source-downloader.

Settings are read once at startup, from the process environment (optionally
seeded from a `.env` file by the CLI), and handed to the API client. Nothing
below the CLI reads the environment directly.
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from vercel_source.constants import (
    DEFAULT_MAX_CONCURRENT,
    MAX_CONCURRENT_ENV_VAR,
    TEAM_ENV_VAR,
    TOKEN_ENV_VAR,
    VERCEL_API_BASE,
)
from vercel_source.exceptions import ConfigError
from vercel_source.log_utils import logger


@dataclass(frozen=True)
class Settings:
    """Immutable configuration shared by every component that talks to the API."""

    token: str
    """Vercel API bearer token"""

    team_id: Optional[str] = None
    """Team scope appended as `teamId` to file endpoints"""

    api_base_url: str = VERCEL_API_BASE
    """Root URL of the Vercel REST API"""

    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    """Upper bound on simultaneous file downloads"""

    request_timeout: Optional[float] = None
    """Total per-request timeout in seconds; None disables it"""

    def __repr__(self) -> str:
        return (
            f"Settings(token='***', team_id={self.team_id!r}, "
            f"api_base_url={self.api_base_url!r}, "
            f"max_concurrent={self.max_concurrent!r}, "
            f"request_timeout={self.request_timeout!r})"
        )


def _clamp_positive(name: str, value: Any, default: int) -> int:
    """
    Normalize a value to a positive integer, falling back to a default on parse errors.

    Parameters:
        name (str): Identifier used in warning messages.
        value (Any): Value to coerce to an integer.
        default (int): Returned when `value` cannot be parsed as an int.

    Returns:
        int: The parsed integer if >= 1; `default` if parsing fails; 1 if the parsed value is less than 1.
    """
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid %s value %r; using default of %d",
            name,
            value,
            default,
        )
        return default
    if parsed <= 0:
        logger.warning("%s must be >= 1; clamping %d to 1", name, parsed)
        return 1
    return parsed


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    max_concurrent: Optional[int] = None,
) -> Settings:
    """
    Build Settings from environment variables.

    Parameters:
        environ (Optional[Mapping[str, str]]): Variables to read; defaults to `os.environ`.
        max_concurrent (Optional[int]): Explicit download concurrency, overriding the environment.

    Returns:
        Settings: The resolved configuration.

    Raises:
        ConfigError: If the API token is missing or blank.
    """
    env = os.environ if environ is None else environ

    token = (env.get(TOKEN_ENV_VAR) or "").strip()
    if not token:
        raise ConfigError(
            f"Missing {TOKEN_ENV_VAR} in environment or .env file.",
            details="Create a token at https://vercel.com/account/tokens",
        )

    team_id = (env.get(TEAM_ENV_VAR) or "").strip() or None

    if max_concurrent is not None:
        raw_concurrency: Any = max_concurrent
    else:
        raw_concurrency = env.get(MAX_CONCURRENT_ENV_VAR, DEFAULT_MAX_CONCURRENT)

    return Settings(
        token=token,
        team_id=team_id,
        max_concurrent=_clamp_positive(
            "max_concurrent", raw_concurrency, DEFAULT_MAX_CONCURRENT
        ),
    )
