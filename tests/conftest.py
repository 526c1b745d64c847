"""
Pytest configuration and shared fixtures.

- Isolates every test from the developer's real config (`.env` files and
  HYDRUS_GETFILES_* variables).
- Provides settings and a mock Hydrus transport.
"""

import os
from typing import Callable

import httpx
import pytest

from core.config import AppSettings


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Points the user config dir and cwd at tmp_path and disables `.env` loading."""

    for key in list(os.environ):
        if key.upper().startswith("HYDRUS_GETFILES_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "config"))
    monkeypatch.setitem(AppSettings.model_config, "env_file", None)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        api_url="http://hydrus.test:45869",
        access_key="secret-key",
    )


@pytest.fixture
def make_client(settings: AppSettings) -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    from adapters.http_client import build_async_client

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return build_async_client(settings, transport=httpx.MockTransport(handler))

    return _make
