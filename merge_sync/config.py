"""Configuration for the Jira merge sync."""

import os
from typing import Optional

DEFAULT_TIMEOUT = 30.0


class ConfigurationError(ValueError):
    """Raised when tracker settings are missing or malformed."""


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in ("false", "0", "no", "off")


def _parse_timeout(value: Optional[str]) -> float:
    if value is None or value.strip() == "":
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(
            f"JIRA_TIMEOUT must be a number of seconds, got {value!r}"
        ) from None
    if not timeout > 0:
        raise ConfigurationError(
            f"JIRA_TIMEOUT must be greater than zero, got {value!r}"
        )
    return timeout


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class SyncConfig:
    """Configuration for Jira and GitHub access.

    Built once at startup and handed to every component that talks to
    the tracker or the hosting platform.
    """

    def __init__(
        self,
        jira_base_url: Optional[str] = None,
        jira_token: Optional[str] = None,
        github_token: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize configuration with explicit values."""
        base_url = _clean(jira_base_url)
        self.jira_base_url: Optional[str] = base_url.rstrip("/") if base_url else None
        self.jira_token: Optional[str] = _clean(jira_token)
        self.github_token: Optional[str] = _clean(github_token)
        self.verify_ssl = verify_ssl
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Initialize configuration from environment variables.

        Raises:
            ConfigurationError: If JIRA_TIMEOUT is not a positive number
        """
        return cls(
            jira_base_url=os.getenv("JIRA_DOMAIN"),
            jira_token=os.getenv("JIRA_TOKEN"),
            github_token=os.getenv("GITHUB_TOKEN"),
            verify_ssl=_parse_bool(os.getenv("JIRA_VERIFY_SSL"), True),
            timeout=_parse_timeout(os.getenv("JIRA_TIMEOUT")),
        )

    def is_configured(self) -> bool:
        """Check if Jira access is properly configured."""
        return self.jira_token is not None and self.jira_base_url is not None

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        missing = []
        if not self.jira_token:
            missing.append("JIRA_TOKEN")
        if not self.jira_base_url:
            missing.append("JIRA_DOMAIN")

        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

    def auth_headers(self) -> dict[str, str]:
        """Headers for authenticated Jira REST calls."""
        return {
            "Authorization": f"Bearer {self.jira_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def __repr__(self) -> str:
        return (
            f"SyncConfig(jira_base_url={self.jira_base_url!r}, "
            f"jira_token={'***' if self.jira_token else None}, "
            f"github_token={'***' if self.github_token else None}, "
            f"verify_ssl={self.verify_ssl}, timeout={self.timeout})"
        )
