"""
Flanking runs and stage transitions.

Per-epoch measures of how an epoch sits among its neighbours:

    - flanking_min: largest j such that the j epochs on BOTH sides share the
      epoch's class (stops at the recording edges)
    - flanking_all: length of the run of same-class epochs containing the epoch
    - nearest_wake: distance to the closest wake epoch on either side
    - directional transition distances: from an epoch of a source class,
      epochs until the source run gives way to a stable destination run
    - running totals of those distances

and the consecutive-epoch transition matrix with joint and conditional
probabilities.

Class comparisons use the NREM/REM/W collapse when flanking_use_three_class
is set, otherwise exact stage labels. Directional transitions are always
NREM/REM/W; only the stability of the destination run (flanking_all)
depends on the setting.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from sleep_architecture.core.constants import (
    FULL_TRANSITION_STAGES,
    THREE_CLASS_TRANSITION_STAGES,
    SleepStage,
    TransitionDirection,
)
from sleep_architecture.core.dataclasses_hypnogram import TransitionAnalysis, TransitionMatrix

from .stages import is_nrem, is_rem, is_wake, same_three_class, three_class
from .windows import run_length_backward, run_length_forward

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .config import EpochThresholds

logger = logging.getLogger(__name__)

# Source and destination class tests for each direction
_DIRECTIONS: dict[TransitionDirection, tuple[Callable[[SleepStage], bool], Callable[[SleepStage], bool]]] = {
    TransitionDirection.NREM_TO_REM: (is_nrem, is_rem),
    TransitionDirection.NREM_TO_WAKE: (is_nrem, is_wake),
    TransitionDirection.REM_TO_NREM: (is_rem, is_nrem),
    TransitionDirection.REM_TO_WAKE: (is_rem, is_wake),
    TransitionDirection.WAKE_TO_NREM: (is_wake, is_nrem),
    TransitionDirection.WAKE_TO_REM: (is_wake, is_rem),
}


def _same_class(three_class_mode: bool) -> Callable[[SleepStage, SleepStage], bool]:
    if three_class_mode:
        return same_three_class
    return lambda a, b: a == b


def flanking_min(stages: Sequence[SleepStage], three_class_mode: bool = True) -> np.ndarray:
    same = _same_class(three_class_mode)
    n_epochs = len(stages)
    result = np.zeros(n_epochs, dtype=int)

    for e in range(n_epochs):
        j = 1
        while e - j >= 0 and e + j < n_epochs:
            if not (same(stages[e - j], stages[e]) and same(stages[e + j], stages[e])):
                break
            j += 1
        result[e] = j - 1

    return result


def flanking_all(stages: Sequence[SleepStage], three_class_mode: bool = True) -> np.ndarray:
    same = _same_class(three_class_mode)
    result = np.zeros(len(stages), dtype=int)

    for e, stage in enumerate(stages):
        def matches(other: SleepStage, stage: SleepStage = stage) -> bool:
            return same(other, stage)

        # the epoch itself is counted by both scans
        result[e] = run_length_forward(stages, matches, e) + run_length_backward(stages, matches, e) - 1

    return result


def nearest_wake(stages: Sequence[SleepStage]) -> np.ndarray:
    """
    Smallest j with a wake epoch at e-j or e+j.

    0 for wake epochs, and 0 when no wake epoch lies within reach before
    either recording edge is hit.
    """
    n_epochs = len(stages)
    result = np.zeros(n_epochs, dtype=int)

    for e in range(n_epochs):
        if is_wake(stages[e]):
            continue
        j = 1
        while e - j >= 0 and e + j < n_epochs:
            if is_wake(stages[e - j]) or is_wake(stages[e + j]):
                result[e] = j
                break
            j += 1

    return result


def transition_distance(
    stages: Sequence[SleepStage],
    run_lengths: Sequence[int],
    e: int,
    source: Callable[[SleepStage], bool],
    destination: Callable[[SleepStage], bool],
    required_epochs: int,
) -> int:
    """
    Epochs from ``e`` to a stable destination run, or 0.

    Starting at a source-class epoch, skip forward over the remaining source
    run. The first other epoch must be of the destination class and belong
    to a run of at least ``required_epochs``; anything else (a third class,
    a short run, the recording end) gives 0.
    """
    if not source(stages[e]):
        return 0

    offset = 1
    while e + offset < len(stages):
        stage = stages[e + offset]
        if source(stage):
            offset += 1
            continue
        if destination(stage) and run_lengths[e + offset] >= required_epochs:
            return offset
        return 0

    return 0


def running_maximum(distances: np.ndarray) -> np.ndarray:
    """Carry the largest distance forward; reset wherever the distance is 0."""
    totals = np.zeros_like(distances)
    current = 0
    for e, distance in enumerate(distances):
        if distance == 0:
            current = 0
        elif distance > current:
            current = int(distance)
        totals[e] = current
    return totals


def transition_matrix(
    stages: Sequence[SleepStage],
    three_class_mode: bool = True,
    collapse_deep_nrem: bool = True,
) -> TransitionMatrix:
    """
    Tally (stage at e-1, stage at e) pairs.

    Three-class mode reports NR/R/W; otherwise N1..N3 (N4 unless collapsed),
    R and W. Pairs touching lights-on or unscored epochs are skipped.
    """
    if three_class_mode:
        classes = tuple(str(c) for c in THREE_CLASS_TRANSITION_STAGES)

        def label(stage: SleepStage) -> str | None:
            collapsed = three_class(stage)
            return str(collapsed) if collapsed is not None else None

    else:
        reported = [s for s in FULL_TRANSITION_STAGES if not (collapse_deep_nrem and s == SleepStage.NREM4)]
        classes = tuple(str(s) for s in reported)

        def label(stage: SleepStage) -> str | None:
            return str(stage) if str(stage) in classes else None

    index = {name: i for i, name in enumerate(classes)}
    counts = np.zeros((len(classes), len(classes)), dtype=int)

    for e in range(1, len(stages)):
        pre = label(stages[e - 1])
        post = label(stages[e])
        if pre is None or post is None:
            continue
        counts[index[pre], index[post]] += 1

    return TransitionMatrix(classes=classes, counts=counts)


def analyze_transitions(
    stages: Sequence[SleepStage],
    thresholds: EpochThresholds,
    three_class_mode: bool = True,
    collapse_deep_nrem: bool = True,
) -> TransitionAnalysis:
    """
    Compute every flanking and transition measure for a stage sequence.

    Args:
        stages: Edge-recoded stage sequence
        thresholds: Resolved epoch thresholds (required_transition_epochs)
        three_class_mode: Compare stages as NREM/REM/W
        collapse_deep_nrem: Drop N4 from the full-resolution matrix

    Returns:
        TransitionAnalysis

    """
    runs_min = flanking_min(stages, three_class_mode)
    runs_all = flanking_all(stages, three_class_mode)
    wake_distance = nearest_wake(stages)

    distances: dict[TransitionDirection, np.ndarray] = {}
    running_totals: dict[TransitionDirection, np.ndarray] = {}
    for direction, (source, destination) in _DIRECTIONS.items():
        distances[direction] = np.array(
            [
                transition_distance(stages, runs_all, e, source, destination, thresholds.required_transition_epochs)
                for e in range(len(stages))
            ],
            dtype=int,
        )
        running_totals[direction] = running_maximum(distances[direction])

    matrix = transition_matrix(stages, three_class_mode, collapse_deep_nrem)
    logger.debug("Tallied %d stage transitions over %s classes", matrix.total, "/".join(matrix.classes))

    return TransitionAnalysis(
        flanking_min=runs_min,
        flanking_all=runs_all,
        nearest_wake=wake_distance,
        distances=distances,
        running_totals=running_totals,
        matrix=matrix,
    )
