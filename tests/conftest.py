"""
StreakMind Test Configuration

Shared fixtures and configuration for pytest.
"""

import os
from datetime import date
from unittest.mock import Mock

import pytest

# Keep test runs from writing log files into the working tree
os.environ.setdefault("STREAKMIND_LOG_TO_FILE", "false")

from streakmind.services.habit_state import HabitState  # noqa: E402
from streakmind.services.storage import InMemoryStore  # noqa: E402
from streakmind.services.streaks import StreakEngine  # noqa: E402
from streakmind.services.tracker import HabitTracker  # noqa: E402
from streakmind.services.user_settings import AppSettings  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: fast tests with no external dependencies"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def today() -> date:
    """A fixed calendar day so date resolution is deterministic."""
    return date(2024, 3, 10)


@pytest.fixture
def state() -> HabitState:
    """Empty habit state."""
    return HabitState()


@pytest.fixture
def engine() -> StreakEngine:
    """Streak engine with the default policy."""
    return StreakEngine()


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_generator():
    """Reply generator that always answers."""
    generator = Mock()
    generator.call = Mock(return_value="Generated reply")
    generator.health_check = Mock(return_value="healthy")
    return generator


@pytest.fixture
def failing_generator():
    """Reply generator that always fails."""
    from streakmind.services.llm import GenerationError

    generator = Mock()
    generator.call = Mock(side_effect=GenerationError("timed out"))
    return generator


@pytest.fixture
def tracker(mock_generator) -> HabitTracker:
    """Tracker backed by in-memory documents."""
    return HabitTracker(
        state_store=InMemoryStore(HabitState),
        transcript_store=InMemoryStore(list),
        settings_store=InMemoryStore(AppSettings),
        generator=mock_generator,
        streak_engine=StreakEngine(),
    )
