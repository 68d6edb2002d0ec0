"""
Hypnogram analyzer - runs the full per-night analysis.

The analyzer takes one night of per-epoch stage labels and produces every
derived structure in a single HypnogramResult: recording boundaries and
summary statistics, cycle segmentation, transition and flanking measures,
the N2 depth trajectory, elapsed stage minutes and clock-time landmarks.

Example usage:
    ```python
    from sleep_architecture.core.algorithms.hypnogram import HypnogramAnalyzer

    analyzer = HypnogramAnalyzer()
    result = analyzer.analyze(stages, epoch_seconds=30.0, start_time="22:30:00")
    print(result.summary.total_sleep_time, result.cycles.count)
    epochs = result.epochs_dataframe()
    ```
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from sleep_architecture.core.dataclasses_hypnogram import HypnogramResult
from sleep_architecture.core.exceptions import ErrorCodes, LengthMismatchError, ValidationError

from .boundaries import locate_boundaries, recode_edges, summarize, validate_lights_structure, waso_flags
from .clock import compute_clock_times
from .config import HypnogramConfig
from .cycles import persistent_sleep_flags, segment_cycles
from .depth import depth_trajectory
from .elapsed import elapsed_stage_minutes
from .stages import normalize_stages
from .transitions import analyze_transitions

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime, time

    from sleep_architecture.core.constants import SleepStage

logger = logging.getLogger(__name__)


class HypnogramAnalyzer:
    """
    Per-night hypnogram analysis.

    The analyzer holds only its configuration; every call to analyze() is
    independent and returns a new immutable result.
    """

    def __init__(self, config: HypnogramConfig | None = None) -> None:
        self.config = config or HypnogramConfig()

    @property
    def name(self) -> str:
        return "Hypnogram (modified Feinberg & Floyd)"

    def get_parameters(self) -> dict[str, Any]:
        """Get current analysis parameters."""
        return self.config.get_parameters()

    def set_parameters(self, **kwargs: Any) -> None:
        """
        Update analysis parameters.

        Raises:
            ConfigurationError: If a parameter name or value is invalid

        """
        self.config = self.config.with_parameters(**kwargs)

    def analyze(
        self,
        stages: Sequence[str | SleepStage],
        epoch_seconds: float = 30.0,
        start_time: datetime | time | str | None = None,
        expected_epochs: int | None = None,
    ) -> HypnogramResult:
        """
        Analyze one night of staged epochs.

        Args:
            stages: One stage label per epoch (W, N1, N2, N3, N4, R, L, ? or aliases)
            epoch_seconds: Epoch duration in seconds
            start_time: Recording start, used for clock-time landmarks only
            expected_epochs: Number of epochs in the recording, if known

        Returns:
            HypnogramResult

        Raises:
            ValidationError: If the stage sequence is empty or holds non-string labels
            LengthMismatchError: If the stage count differs from expected_epochs
            StructuralViolationError: If lights-on epochs occur mid-recording
            ConfigurationError: If epoch_seconds is not positive

        """
        labels = list(stages)
        if not labels:
            msg = "Stage sequence is empty"
            raise ValidationError(msg, ErrorCodes.MISSING_REQUIRED)
        if expected_epochs is not None and expected_epochs != len(labels):
            raise LengthMismatchError(expected_epochs, len(labels))

        config = self.config
        thresholds = config.to_epochs(epoch_seconds)

        normalized = normalize_stages(labels, collapse_deep_nrem=config.collapse_deep_nrem)
        recoded = recode_edges(normalized)
        validate_lights_structure(recoded)

        boundaries = locate_boundaries(recoded, thresholds)
        persistent_sleep = persistent_sleep_flags(recoded, thresholds.persistent_sleep_epochs)
        summary = summarize(recoded, boundaries, thresholds, persistent_sleep)

        segmentation = segment_cycles(recoded, thresholds, persistent_sleep)
        transitions = analyze_transitions(
            recoded,
            thresholds,
            three_class_mode=config.flanking_use_three_class,
            collapse_deep_nrem=config.collapse_deep_nrem,
        )
        depth = depth_trajectory(recoded, window_epochs=thresholds.depth_window_epochs)
        waso = waso_flags(recoded, boundaries)
        elapsed = elapsed_stage_minutes(recoded, waso, thresholds.epoch_minutes)
        clock = compute_clock_times(start_time, boundaries, epoch_seconds)

        logger.info(
            "Analyzed %d epochs: TST=%.1f min, SE=%.1f%%, %d cycle(s)",
            len(recoded),
            summary.total_sleep_time,
            summary.sleep_efficiency,
            segmentation.cycles.count,
        )

        return HypnogramResult(
            stages=tuple(recoded),
            epoch_seconds=float(epoch_seconds),
            config=config,
            thresholds=thresholds,
            boundaries=boundaries,
            summary=summary,
            segmentation=segmentation,
            transitions=transitions,
            depth_trajectory=np.asarray(depth, dtype=float),
            waso=waso,
            elapsed=elapsed,
            clock=clock,
        )


def analyze_hypnogram(
    stages: Sequence[str | SleepStage],
    epoch_seconds: float = 30.0,
    config: HypnogramConfig | None = None,
    **kwargs: Any,
) -> HypnogramResult:
    """Convenience wrapper: HypnogramAnalyzer(config).analyze(stages, epoch_seconds, ...)."""
    return HypnogramAnalyzer(config).analyze(stages, epoch_seconds, **kwargs)
