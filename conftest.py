"""
Root conftest.py — isolates the config directory and provides shared fixtures.

Every test runs with TEXFLOW_HOME pointing at its own temporary directory,
so nothing touches ~/.texflow.
"""
from __future__ import annotations

from pathlib import Path

import pytest


class FakeClock:
    """Manually advanced monotonic clock for history coalescing tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def texflow_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "texflow-home"
    monkeypatch.setenv("TEXFLOW_HOME", str(home))
    return home


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
