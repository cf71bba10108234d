"""Shared fixtures for the meeting cost tracker tests."""

import sys
from pathlib import Path

import pytest

# Modules live at the repository root.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from models import SalaryCategory  # noqa: E402


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, now=0.0):
        self.now = now

    def advance(self, seconds):
        self.now += seconds

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engineer():
    return SalaryCategory.create("Engineer", 120_000)


@pytest.fixture
def manager():
    return SalaryCategory.create("Manager", 156_000)
