"""
N2 depth trajectory - ascending vs descending light sleep.

Each N2 epoch gets a score describing where it sits between deep sleep and
lighter states in its neighbourhood. Looking left, deep epochs (N3/N4) add +1
and light epochs (N1/REM/W) add -1; looking right the signs are inverted.
Each side stops after ``window_epochs`` such epochs (epochs of the
intermediate stage, lights-on and unscored epochs are skipped without
counting) and is averaged over the
epochs it counted. The score is the mean of the two side averages:

    +1  ascending: deep sleep behind, light sleep ahead
    -1  descending: light sleep behind, deep sleep ahead

Extreme epochs (e.g. > +0.5 or < -0.5) can be selected as descending or
ascending N2.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from sleep_architecture.core.constants import SleepStage

from .stages import is_deep_nrem, is_light_or_wake

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_DEPTH_WINDOW_EPOCHS: int = 10


def _side_average(
    stages: Sequence[SleepStage],
    indices: range,
    deep_weight: float,
    window_epochs: int,
    intermediate: SleepStage,
) -> float:
    weight = 0.0
    counted = 0
    for k in indices:
        if stages[k] == intermediate:
            continue
        if is_deep_nrem(stages[k]):
            weight += deep_weight
            counted += 1
        elif is_light_or_wake(stages[k]):
            weight -= deep_weight
            counted += 1
        if counted == window_epochs:
            break
    return weight / counted if counted else 0.0


def depth_trajectory(
    stages: Sequence[SleepStage],
    window_epochs: int = DEFAULT_DEPTH_WINDOW_EPOCHS,
    intermediate: SleepStage = SleepStage.NREM2,
) -> np.ndarray:
    """
    Score every intermediate-stage epoch; NaN elsewhere.

    Args:
        stages: Stage sequence
        window_epochs: Deep/light epochs to count on each side
        intermediate: Stage that receives a score

    Returns:
        Array of scores in [-1, 1], NaN for other stages

    """
    scores = np.full(len(stages), np.nan)

    for e, stage in enumerate(stages):
        if stage != intermediate:
            continue
        left = _side_average(stages, range(e - 1, -1, -1), 1.0, window_epochs, intermediate)
        right = _side_average(stages, range(e + 1, len(stages)), -1.0, window_epochs, intermediate)
        scores[e] = (left + right) / 2.0

    return scores
