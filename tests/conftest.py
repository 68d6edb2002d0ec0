#!/usr/bin/env python3
"""
Shared test fixtures for sleep architecture analysis.
Provides stage sequence builders and common hypnograms.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sleep_architecture.core.algorithms.hypnogram import DEFAULT_HYPNOGRAM_CONFIG, EpochThresholds
from sleep_architecture.core.constants import SleepStage


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def build_stages(*runs: tuple[str, int]) -> list[SleepStage]:
    """Expand (label, count) runs into a stage list, e.g. ("W", 4), ("N2", 40)."""
    stages: list[SleepStage] = []
    for label, count in runs:
        stages.extend([SleepStage.from_label(label)] * count)
    return stages


@pytest.fixture
def make_stages() -> Callable[..., list[SleepStage]]:
    """Factory fixture wrapping build_stages."""
    return build_stages


@pytest.fixture
def default_thresholds() -> EpochThresholds:
    """Default thresholds for 30-second epochs."""
    return DEFAULT_HYPNOGRAM_CONFIG.to_epochs(30.0)


@pytest.fixture
def single_cycle_night() -> list[SleepStage]:
    """4 W, 40 N2, 10 R, 4 W: one complete NREM/REM cycle at 30-second epochs."""
    return build_stages(("W", 4), ("N2", 40), ("R", 10), ("W", 4))


@pytest.fixture
def all_wake_night() -> list[SleepStage]:
    """20 wake epochs, no sleep at all."""
    return build_stages(("W", 20))


@pytest.fixture
def two_cycle_night() -> list[SleepStage]:
    """Lights-on edges around two NREM/REM cycles with mid-night wake."""
    return build_stages(
        ("L", 2),
        ("W", 6),
        ("N1", 2),
        ("N2", 30),
        ("N3", 20),
        ("N2", 10),
        ("R", 12),
        ("W", 2),
        ("N1", 2),
        ("N2", 40),
        ("R", 20),
        ("W", 6),
        ("L", 2),
    )
