"""Pytest configuration for the terrain tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# //1.- Ensure the repository root is on the Python path for the flat modules.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class ScriptedRange:
    """Random source that replays fixed draws and checks each requested range."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, lo, hi):
        value = self.values.pop(0)
        self.calls.append((lo, hi))
        assert lo <= value <= hi, f"{value} outside [{lo}, {hi}]"
        return value


@pytest.fixture
def scripted():
    return ScriptedRange
