"""Runtime configuration, read once from the environment."""

import os

from .errors import ConfigError

GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
GITHUB_API_BASE_URL = os.getenv("GITHUB_API_BASE_URL", "https://api.github.com").rstrip("/")
GITHUB_GRAPHQL_URL = os.getenv("GITHUB_GRAPHQL_URL", f"{GITHUB_API_BASE_URL}/graphql")

GITHUB_ORG = os.getenv("GITHUB_ORG", "giantswarm")
ROADMAP_PROJECT_TITLE = os.getenv("ROADMAP_PROJECT_TITLE", "Roadmap")

REQUEST_TIMEOUT = float(os.getenv("GITHUB_REQUEST_TIMEOUT", "30"))
# Pause between single-item mutations during a bulk status update
STATUS_UPDATE_DELAY = float(os.getenv("STATUS_UPDATE_DELAY", "0.1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def require_token() -> str:
    """Return the configured GitHub token or raise ConfigError."""
    if not GITHUB_TOKEN:
        raise ConfigError(
            "GITHUB_TOKEN environment variable is required to talk to the GitHub API"
        )
    return GITHUB_TOKEN
