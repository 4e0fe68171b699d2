"""Environment settings and API key resolution."""

import logging
import os
from typing import Optional

API_KEY_ENV = "MOONRAKER_APIKEY"
AUTH_SCHEME = "APIKEY"


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value
        """
        return os.getenv(key, default) or ""

    # Convenience accessors
    MOONRAKER_APIKEY = property(lambda self: Settings.get(API_KEY_ENV))
    LOG_LEVEL = property(lambda self: Settings.get("LOG_LEVEL"))


def resolve_api_key(
    authorization: Optional[str],
    configured_key: str,
    logger: Optional[logging.Logger] = None
) -> str:
    """
    Pick the Moonraker API key for a probe.

    Precedence: "Authorization: APIKEY <token>" request header, then the
    configured key (command line or config file), then the
    MOONRAKER_APIKEY environment variable.

    Args:
        authorization: Raw Authorization header of the probe request, if any
        configured_key: Key from the exporter configuration
        logger: Optional logger instance

    Returns:
        str: API key, empty if none is available
    """
    logger = logger or logging.getLogger(__name__)

    if authorization and authorization.startswith(AUTH_SCHEME):
        logger.debug("Using API key from probe Authorization header")
        return authorization.replace(f"{AUTH_SCHEME} ", "", 1)

    if configured_key:
        logger.debug("Using API key from exporter configuration")
        return configured_key

    api_key = Settings().MOONRAKER_APIKEY
    if api_key:
        logger.debug(f"Using API key from {API_KEY_ENV} environment variable")
    else:
        logger.debug("API key not set")
    return api_key
