"""Shared test fixtures for the patches proxy.

Settings are built from a monkeypatched environment and the GitHub call is
replaced by an in-process fake, so no test touches the network or the
working directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings

API_KEY = "abc123"
GITHUB_TOKEN = "ghp_test"

SAMPLE_PAYLOAD = [
    {
        "name": "4D5307E6 - Halo 3.patch.toml",
        "path": "patches/4D5307E6 - Halo 3.patch.toml",
        "sha": "0a1b2c3d",
        "size": 2048,
        "type": "file",
    },
    {
        "name": "545107D1 - Gears of War.patch.toml",
        "path": "patches/545107D1 - Gears of War.patch.toml",
        "sha": "4e5f6a7b",
        "size": 1024,
        "type": "file",
    },
]


class FakeUpstream:
    """Stands in for services.github_client.fetch_patches."""

    def __init__(self, payload: Any = None, error: Exception | None = None):
        self.payload = SAMPLE_PAYLOAD if payload is None else payload
        self.error = error
        self.calls: list[str | None] = []

    async def __call__(self, token: str | None) -> Any:
        self.calls.append(token)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture()
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "patches.json"


@pytest.fixture()
def settings(monkeypatch, cache_path: Path) -> Settings:
    monkeypatch.setenv("API_KEY", API_KEY)
    monkeypatch.setenv("GITHUB_TOKEN", GITHUB_TOKEN)
    monkeypatch.setenv("PATCHES_CACHE_PATH", str(cache_path))
    monkeypatch.delenv("PATCHES_CACHE_ENABLED", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    return Settings()


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def client(settings: Settings, upstream: FakeUpstream) -> TestClient:
    """TestClient without lifespan (no scheduler), gate header not set."""
    return TestClient(create_app(settings, fetcher=upstream), raise_server_exceptions=False)
