"""
Configuration management for StewardBot.

Provides StewardConfig dataclass for managing all bot configuration from
environment variables.
"""

import os
import sys
from dataclasses import dataclass


TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return (os.environ.get(name) or "").strip().lower() in TRUE_VALUES


@dataclass
class StewardConfig:
    """
    Bot configuration loaded from environment variables.

    All settings are loaded via from_environment() classmethod.
    Required fields (username, password) must be set.
    Optional fields have sensible defaults.

    Attributes:
        username: BotPassword username (STEWARDBOT_USERNAME)
        password: BotPassword password (STEWARDBOT_PASSWORD)
        api_host: Wiki host holding the steward special pages (default: "meta.wikimedia.org")
        api_path: Wiki script path (default: "/w/")
        scheme: URL scheme (default: "https")
        user_agent: HTTP User-Agent string
        log_level: Logging level (default: "INFO", "DEBUG" when debug is set)
        debug: Log every retrieved URL and submitted form
        strict_addresses: Refuse to submit malformed IP addresses
        timeout: Per-request timeout in seconds
    """
    # Required fields
    username: str
    password: str

    # Optional fields with defaults
    api_host: str = "meta.wikimedia.org"
    api_path: str = "/w/"
    scheme: str = "https"
    user_agent: str = "StewardBot/0.1 (https://meta.wikimedia.org/wiki/Stewards)"
    log_level: str = "INFO"
    debug: bool = False
    strict_addresses: bool = False
    timeout: float = 30.0

    def __post_init__(self):
        """Debug output needs DEBUG level logging."""
        if self.debug:
            self.log_level = "DEBUG"

    @classmethod
    def from_environment(cls) -> "StewardConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            STEWARDBOT_USERNAME (required)
            STEWARDBOT_PASSWORD (required)
            STEWARDBOT_API_HOST (optional, default: "meta.wikimedia.org")
            STEWARDBOT_API_PATH (optional, default: "/w/")
            STEWARDBOT_SCHEME (optional, default: "https")
            STEWARDBOT_USER_AGENT (optional)
            STEWARDBOT_LOG_LEVEL (optional, default: "INFO")
            STEWARDBOT_DEBUG (optional flag)
            STEWARDBOT_STRICT_ADDRESSES (optional flag)
            STEWARDBOT_TIMEOUT (optional, default: 30)

        Returns:
            StewardConfig instance

        Raises:
            SystemExit: If required environment variables are missing or the
                        timeout is not a number
        """
        username = os.environ.get("STEWARDBOT_USERNAME")
        password = os.environ.get("STEWARDBOT_PASSWORD")

        # Validate required fields before creating config
        if not username or not password:
            # Print to stderr since logging may not be configured yet
            print(
                "ERROR: Missing required environment variables. "
                "Set STEWARDBOT_USERNAME and STEWARDBOT_PASSWORD.",
                file=sys.stderr
            )
            sys.exit(2)

        timeout_raw = os.environ.get("STEWARDBOT_TIMEOUT", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            print(f"ERROR: STEWARDBOT_TIMEOUT must be a number, got {timeout_raw!r}", file=sys.stderr)
            sys.exit(2)

        return cls(
            username=username,
            password=password,
            api_host=os.environ.get("STEWARDBOT_API_HOST", "meta.wikimedia.org"),
            api_path=os.environ.get("STEWARDBOT_API_PATH", "/w/"),
            scheme=os.environ.get("STEWARDBOT_SCHEME", "https"),
            user_agent=os.environ.get(
                "STEWARDBOT_USER_AGENT",
                "StewardBot/0.1 (https://meta.wikimedia.org/wiki/Stewards)"
            ),
            log_level=os.environ.get("STEWARDBOT_LOG_LEVEL", "INFO").upper(),
            debug=_env_flag("STEWARDBOT_DEBUG"),
            strict_addresses=_env_flag("STEWARDBOT_STRICT_ADDRESSES"),
            timeout=timeout,
        )


__all__ = ['StewardConfig']
