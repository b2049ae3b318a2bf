"""
Pytest Configuration and Fixtures for TomeLoot Tests
====================================================

Purpose
-------
Centralized fixtures for the TomeLoot test suite: random sources, the
consumable catalog, config manager lifecycle and domain model factories.

Responsibilities
----------------
- Test environment variables
- Scripted and seeded random sources
- ConfigManager isolation between tests
- Entity / progress factories and a ready SessionRewardService

Architecture Notes
------------------
- `SequenceRng` fails loudly when a code path draws more often than the
  test scripted, so draw counts are asserted implicitly
- `ConstantRng` suits whole-session tests where the draw count varies
"""

from __future__ import annotations

import os
import random
from datetime import datetime, timezone
from itertools import count
from pathlib import Path
from typing import Iterable, List

import pytest

from tomeloot.core.config.config import Config
from tomeloot.core.config.manager import ConfigManager
from tomeloot.core.logging.logger import clear_log_context, get_logger
from tomeloot.domain.models import Progression, TrackedEntity, UserProgress
from tomeloot.modules.consumables.catalog import ConsumableCatalog
from tomeloot.modules.rewards.service import SessionRewardService

PROJECT_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ["ENVIRONMENT"] = "testing"
    os.environ["LOG_LEVEL"] = "DEBUG"
    os.environ["LOG_TO_FILE"] = "false"
    Config.reload()


# ============================================================================
# RANDOM SOURCES
# ============================================================================


class SequenceRng:
    """Returns scripted draws in order; running out is a test failure."""

    def __init__(self, values: Iterable[float]) -> None:
        self.values: List[float] = list(values)
        self.calls = 0

    def random(self) -> float:
        if self.calls >= len(self.values):
            raise AssertionError(f"SequenceRng exhausted after {self.calls} draws")
        value = self.values[self.calls]
        self.calls += 1
        return value


class ConstantRng:
    """Returns the same draw forever."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def sequence_rng():
    """Factory: `sequence_rng(0.5, 0.1)`."""

    def _make(*values: float) -> SequenceRng:
        return SequenceRng(values)

    return _make


@pytest.fixture
def constant_rng():
    """Factory: `constant_rng(0.99)`."""
    return ConstantRng


# ============================================================================
# CONFIG & CATALOG
# ============================================================================


@pytest.fixture(autouse=True)
def config_manager():
    """Fresh ConfigManager loaded from the project config/ directory."""
    ConfigManager.reset()
    ConfigManager.initialize(PROJECT_CONFIG_DIR)
    yield ConfigManager
    ConfigManager.reset()
    clear_log_context()


@pytest.fixture
def catalog() -> ConsumableCatalog:
    return ConsumableCatalog.default()


# ============================================================================
# DOMAIN FACTORIES
# ============================================================================


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_entity():
    """Factory for tracked entities with sensible defaults."""

    def _make(
        total_seconds: int = 0,
        level: int = None,
        size: int = None,
        categories=("fantasy", "mystery", "history"),
        collectible_pool=(),
    ) -> TrackedEntity:
        if level is None:
            level = total_seconds // 3600
        return TrackedEntity(
            id="book-1",
            progression=Progression(level=level, total_seconds=total_seconds),
            size=size,
            categories=tuple(categories),
            collectible_pool=tuple(collectible_pool),
        )

    return _make


@pytest.fixture
def progress() -> UserProgress:
    return UserProgress()


@pytest.fixture
def make_service(config_manager, catalog):
    """Factory for a SessionRewardService with a given random source."""

    def _make(rng) -> SessionRewardService:
        ids = count(1)
        return SessionRewardService(
            config_manager,
            get_logger("tests.rewards"),
            rng=rng,
            catalog=catalog,
            id_factory=lambda: f"box-{next(ids)}",
            clock=lambda: FIXED_NOW,
        )

    return _make
