"""Shared fixtures."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from aioresponses import aioresponses as aioresponses_cls


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Intercept all aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a function that writes a config.toml into a temp dir."""

    def _write(content: str) -> Path:
        config_path = tmp_path / "config.toml"
        config_path.write_text(content, encoding="utf-8")
        return config_path

    return _write
