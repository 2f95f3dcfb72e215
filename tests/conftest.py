"""Shared test fixtures and configuration for preheat tests."""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from preheat.core.logging import setup_logging


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    config.option.asyncio_mode = "auto"

    # Same structlog pipeline as the application, at DEBUG so every
    # processor runs during the tests.
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture
def body_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write a body file and return its path."""

    def _write(content: str, name: str = "body.json") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep stray config files and PREHEAT_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.upper().startswith("PREHEAT_"):
            monkeypatch.delenv(key, raising=False)
