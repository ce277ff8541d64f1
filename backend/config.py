"""Centralized configuration — all env vars in one place."""

import os

from dotenv import find_dotenv, load_dotenv

DEFAULT_PATCHES_URL = "https://api.github.com/repos/xenia-canary/game-patches/contents/patches"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3000"))
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Gate secret and upstream credential
        self.api_key: str | None = os.getenv("API_KEY") or None
        self.github_token: str | None = os.getenv("GITHUB_TOKEN") or None

        # Upstream + disk cache
        self.patches_url: str = os.getenv("PATCHES_URL", DEFAULT_PATCHES_URL)
        self.cache_path: str = os.getenv("PATCHES_CACHE_PATH", "patches.json")
        self.cache_enabled: bool = os.getenv("PATCHES_CACHE_ENABLED", "true").strip().lower() in _TRUTHY
        self.refresh_cron: str = os.getenv("REFRESH_CRON", "0 0 * * *")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars."""
        required = ["API_KEY", "GITHUB_TOKEN"]
        return [var for var in required if not getattr(self, _attr_for(var))]


def load_settings(env_file: str | None = None) -> Settings:
    """Load .env (if present) without overriding the process environment, then build Settings."""
    load_dotenv(env_file or find_dotenv(usecwd=True))
    return Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "API_KEY": "api_key",
        "GITHUB_TOKEN": "github_token",
    }
    return mapping.get(env_var, env_var.lower())
