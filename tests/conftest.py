"""Shared pytest fixtures for the shapeguard test-suite."""
from __future__ import annotations

import pytest

from shapeguard.config import reset_config


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts (and ends) with the default global configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def write_file(tmp_path):
    """Write *text* to ``tmp_path / name`` and return the path."""

    def _write(name: str, text: str):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
