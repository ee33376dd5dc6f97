"""Centralized configuration for issuedesk.

Loads environment variables and provides a unified configuration interface.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import urlparse, urlunparse

from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_COPILOT_LOGIN = "copilot-swe-agent"


def derive_graphql_url(api_url: str) -> str:
    """Derive the GraphQL endpoint from a REST base URL.

    GitHub.com serves REST at https://api.github.com and GraphQL at
    https://api.github.com/graphql. Enterprise servers expose REST under
    /api/v3 and GraphQL under /api/graphql.
    """
    parsed = urlparse(api_url)
    path = parsed.path.rstrip("/")

    if path.endswith("/api/v3"):
        path = path[: -len("/v3")]
    path = path + "/graphql"

    return urlunparse(parsed._replace(path=path))


@dataclass
class IssueDeskConfig:
    """Configuration for issuedesk."""

    # GitHub
    github_token: str = ""
    github_api_url: str = DEFAULT_API_URL
    github_graphql_url: str = ""
    github_timeout: float = 30.0

    # Coding agent
    copilot_login: str = DEFAULT_COPILOT_LOGIN

    # Logging
    log_level: str = "INFO"

    # HTTP surface
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Singleton instance
    _instance: ClassVar["IssueDeskConfig | None"] = None

    def __post_init__(self) -> None:
        self.github_api_url = self.github_api_url.rstrip("/")
        if not self.github_graphql_url:
            self.github_graphql_url = derive_graphql_url(self.github_api_url)

    @classmethod
    def get_instance(cls) -> "IssueDeskConfig":
        """Get the singleton configuration instance."""
        if cls._instance is None:
            cls._instance = cls._load_from_env()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next access reloads the environment."""
        cls._instance = None

    @classmethod
    def _load_from_env(cls) -> "IssueDeskConfig":
        """Load configuration from environment variables."""
        load_dotenv()

        return cls(
            # GitHub
            github_token=os.getenv("GITHUB_TOKEN", ""),
            github_api_url=os.getenv("GITHUB_API_URL", DEFAULT_API_URL),
            github_graphql_url=os.getenv("GITHUB_GRAPHQL_URL", ""),
            github_timeout=float(os.getenv("GITHUB_TIMEOUT", "30.0")),
            # Coding agent
            copilot_login=os.getenv("COPILOT_LOGIN", DEFAULT_COPILOT_LOGIN),
            # Logging
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            # HTTP surface
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
        )


def get_config() -> IssueDeskConfig:
    """Get the current configuration."""
    return IssueDeskConfig.get_instance()
