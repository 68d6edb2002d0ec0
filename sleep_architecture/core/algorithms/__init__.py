"""
Sleep architecture algorithms package - framework-agnostic implementations.

Package Structure:
    hypnogram/  - Stage classification, boundaries, cycle segmentation,
                  transitions, N2 depth trajectory and the per-night analyzer

Example Usage:
    ```python
    from sleep_architecture.core.algorithms import HypnogramAnalyzer, HypnogramConfig

    analyzer = HypnogramAnalyzer(HypnogramConfig(min_nrem_minutes=10))
    result = analyzer.analyze(["W", "N1", "N2", ...], epoch_seconds=30.0)
    ```
"""

from __future__ import annotations

from .hypnogram import (
    DEFAULT_HYPNOGRAM_CONFIG,
    FULL_STAGE_HYPNOGRAM_CONFIG,
    EpochThresholds,
    HypnogramAnalyzer,
    HypnogramConfig,
    analyze_hypnogram,
)

__all__ = [
    "DEFAULT_HYPNOGRAM_CONFIG",
    "FULL_STAGE_HYPNOGRAM_CONFIG",
    "EpochThresholds",
    "HypnogramAnalyzer",
    "HypnogramConfig",
    "analyze_hypnogram",
]
