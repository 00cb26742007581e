"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings  # noqa: E402
from src.tutor.controller import TutorController  # noqa: E402
from src.tutor.curriculum import CurriculumClassifier  # noqa: E402
from src.tutor.models import Equation, StudentAttempt  # noqa: E402
from src.tutor.persistence import InMemoryDocumentStore  # noqa: E402
from src.tutor.student_model import StudentProfileTracker  # noqa: E402

FIXED_NOW = datetime(2024, 3, 1, 9, 30, 0)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


class TickingClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(minutes=1)
        return current


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def rng():
    """Seeded random source for reproducible generation."""
    return random.Random(1234)


@pytest.fixture
def classifier(rng):
    return CurriculumClassifier(rng=rng)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def tracker(store, clock):
    return StudentProfileTracker(store, clock=clock)


@pytest.fixture
def controller(tracker, classifier, clock):
    return TutorController(tracker, classifier=classifier, clock=clock)


@pytest.fixture
def make_attempt():
    """Factory for StudentAttempt with sensible defaults."""

    def _make(
        a: float = 1,
        b: float = -3,
        c: float = 2,
        user_answer: str = "1, 2",
        is_correct: bool = True,
        time_spent: float = 10.0,
        timestamp: datetime = FIXED_NOW,
    ) -> StudentAttempt:
        return StudentAttempt(
            equation=Equation(a, b, c),
            user_answer=user_answer,
            is_correct=is_correct,
            time_spent=time_spent,
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def tutor_env(tmp_path, monkeypatch):
    """Point settings at a temporary data directory."""
    monkeypatch.setenv("TUTOR_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
