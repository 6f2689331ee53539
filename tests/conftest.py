from __future__ import annotations

import pytest

from phaseflow.config import default_config
from phaseflow.library import default_library


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep user config files and cached process-wide state out of every test."""
    monkeypatch.delenv("PHASEFLOW_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    default_config.cache_clear()
    default_library.cache_clear()
    yield
    default_config.cache_clear()
    default_library.cache_clear()
