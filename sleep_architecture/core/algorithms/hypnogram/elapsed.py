"""Elapsed stage minutes before each epoch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from sleep_architecture.core.constants import SleepStage
from sleep_architecture.core.dataclasses_hypnogram import ElapsedStageMinutes

from .stages import is_deep_nrem, is_sleep

if TYPE_CHECKING:
    from collections.abc import Sequence


def _proportion(elapsed: np.ndarray, total: float) -> np.ndarray:
    if total > 0:
        return elapsed / total
    return np.zeros_like(elapsed)


def elapsed_stage_minutes(
    stages: Sequence[SleepStage],
    waso: Sequence[bool],
    epoch_minutes: float,
) -> ElapsedStageMinutes:
    """
    Minutes of each stage accumulated strictly before every epoch.

    Args:
        stages: Stage sequence
        waso: Per-epoch WASO flags
        epoch_minutes: Epoch duration in minutes

    Returns:
        ElapsedStageMinutes

    """
    stage_array = np.array([str(stage) for stage in stages], dtype=object)

    def before(mask: np.ndarray) -> np.ndarray:
        # exclusive cumulative sum: value at e counts epochs 0..e-1
        minutes = np.cumsum(mask.astype(float)) * epoch_minutes
        return minutes - mask.astype(float) * epoch_minutes

    wake = before(stage_array == str(SleepStage.WAKE))
    waso_minutes = before(np.asarray(waso, dtype=bool))
    sleep = before(np.array([is_sleep(stage) for stage in stages], dtype=bool))
    n1 = before(stage_array == str(SleepStage.NREM1))
    n2 = before(stage_array == str(SleepStage.NREM2))
    n3 = before(np.array([is_deep_nrem(stage) for stage in stages], dtype=bool))
    rem = before(stage_array == str(SleepStage.REM))

    def total(stage_test) -> float:
        return sum(1 for stage in stages if stage_test(stage)) * epoch_minutes

    return ElapsedStageMinutes(
        wake=wake,
        waso=waso_minutes,
        sleep=sleep,
        n1=n1,
        n2=n2,
        n3=n3,
        rem=rem,
        pct_sleep=_proportion(sleep, total(is_sleep)),
        pct_n1=_proportion(n1, total(lambda s: s == SleepStage.NREM1)),
        pct_n2=_proportion(n2, total(lambda s: s == SleepStage.NREM2)),
        pct_n3=_proportion(n3, total(is_deep_nrem)),
        pct_rem=_proportion(rem, total(lambda s: s == SleepStage.REM)),
    )
