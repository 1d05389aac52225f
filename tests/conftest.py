from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

_ENV_PREFIXES = ("SIPTRACK_", "OPENAI_", "GITHUB_")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every variable that feeds configuration."""

    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES) and name != "SIPTRACK_DATA_DIR":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def isolated_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    data_dir = tmp_path / "siptrack-data"
    monkeypatch.setenv("SIPTRACK_DATA_DIR", str(data_dir))
    return data_dir
