"""
Environment configuration with validation.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

ACCOUNT_ID_VAR = "CLOUDFLARE_ACCOUNT_ID"
API_TOKEN_VAR = "CLOUDFLARE_API_TOKEN"
REQUEST_DELAY_VAR = "CWC_REQUEST_DELAY_MS"
RETRY_AFTER_VAR = "CWC_DEFAULT_RETRY_AFTER"

DEFAULT_REQUEST_DELAY = 0.2  # seconds between requests
DEFAULT_RETRY_AFTER = 60  # seconds to wait on a 429 without Retry-After


class ConfigError(Exception):
    """Raised when required settings are missing or invalid."""


class Credentials(BaseModel):
    """Validated account/token pair. Immutable once built."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    account_id: str = Field(min_length=1)
    api_token: str = Field(min_length=1, repr=False)


@dataclass(frozen=True)
class Settings:
    """Tunables for the batch deletion engine."""
    request_delay: float = DEFAULT_REQUEST_DELAY
    default_retry_after: int = DEFAULT_RETRY_AFTER


_FIELD_VARS = {"account_id": ACCOUNT_ID_VAR, "api_token": API_TOKEN_VAR}


def load_credentials(env: Optional[Mapping[str, str]] = None) -> Credentials:
    """
    Validate and return the Cloudflare credentials.

    Args:
        env: Mapping to read from. Defaults to os.environ after loading a
            .env file from the working directory.

    Raises:
        ConfigError: if a required variable is missing or empty
    """
    if env is None:
        load_dotenv(override=False)
        env = os.environ

    try:
        return Credentials(
            account_id=env.get(ACCOUNT_ID_VAR, ""),
            api_token=env.get(API_TOKEN_VAR, ""),
        )
    except ValidationError as e:
        problems = []
        for err in e.errors():
            name = _FIELD_VARS.get(str(err["loc"][0]), str(err["loc"][0]))
            problems.append(f"  - {name}: {name} is required")
        raise ConfigError(
            "Environment validation failed:\n"
            + "\n".join(problems)
            + "\n\nPlease set the required environment variables or create a .env file."
        ) from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read optional engine tunables; invalid values fall back to defaults."""
    env = os.environ if env is None else env

    request_delay = DEFAULT_REQUEST_DELAY
    raw = env.get(REQUEST_DELAY_VAR)
    if raw:
        try:
            request_delay = max(int(raw), 0) / 1000
        except ValueError:
            logger.warning(f"Ignoring invalid {REQUEST_DELAY_VAR}={raw!r}")

    retry_after = DEFAULT_RETRY_AFTER
    raw = env.get(RETRY_AFTER_VAR)
    if raw:
        try:
            retry_after = max(int(raw), 1)
        except ValueError:
            logger.warning(f"Ignoring invalid {RETRY_AFTER_VAR}={raw!r}")

    return Settings(request_delay=request_delay, default_retry_after=retry_after)
