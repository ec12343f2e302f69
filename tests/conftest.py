"""Shared pytest fixtures for YS Story tests."""
import os
import random
import sys
from pathlib import Path

# Add project root to path BEFORE any other imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from content import ContentProvider, TimelineEntry
from timers import Scheduler


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def content():
    return ContentProvider.from_data(
        timeline=[
            TimelineEntry("First", "Where it began."),
            TimelineEntry("Second", "What came next."),
            TimelineEntry("Third", "Where we are now."),
        ],
        messages=["alpha", "beta", "gamma", "delta"],
        recipient="Tester",
    )
