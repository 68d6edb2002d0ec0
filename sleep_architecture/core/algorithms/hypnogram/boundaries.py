"""
Recording boundaries and night-level summary statistics.

This module locates the landmarks of a staged night (lights out/on, first
and last sleep, first REM, persistent sleep onset, final wake bout) and
derives the standard clinical summary from them.

Terminology:
    - Recording window: [lights_out_epoch, lights_on_epoch), i.e. every
      epoch that is not part of a leading or trailing lights-on block
    - TIB: time in bed, all epochs
    - TRT: total recording time, the recording window
    - TST: total sleep time, TRT minus wake and unscored minutes
    - SPT: sleep period time, TRT minus sleep latency
    - WASO: wake between the first and last sleep epochs
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from sleep_architecture.core.constants import SleepStage
from sleep_architecture.core.dataclasses_hypnogram import RecordingBoundaries, SummaryStatistics
from sleep_architecture.core.exceptions import ErrorCodes, StructuralViolationError

from .stages import is_rem, is_sleep
from .windows import all_within_bounds

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .config import EpochThresholds

logger = logging.getLogger(__name__)


def recode_edges(stages: Sequence[SleepStage]) -> list[SleepStage]:
    """
    Treat leading and trailing unscored epochs as lights on.

    Scanning inwards from each end, ABSENT epochs become LIGHTS_ON until the
    first epoch that is neither ABSENT nor LIGHTS_ON.
    """
    recoded = list(stages)

    for e in range(len(recoded)):
        if recoded[e] == SleepStage.ABSENT:
            recoded[e] = SleepStage.LIGHTS_ON
        elif recoded[e] != SleepStage.LIGHTS_ON:
            break

    for e in range(len(recoded) - 1, -1, -1):
        if recoded[e] == SleepStage.ABSENT:
            recoded[e] = SleepStage.LIGHTS_ON
        elif recoded[e] != SleepStage.LIGHTS_ON:
            break

    return recoded


def validate_lights_structure(stages: Sequence[SleepStage]) -> None:
    """
    Check that lights-on epochs only form blocks at the recording edges.

    Once lights have gone off and come back on, they may not go off again.

    Raises:
        StructuralViolationError: If a lights-on block is followed by more recording

    """
    lights_back_on = False
    for e in range(1, len(stages) - 1):
        if stages[e - 1] != SleepStage.LIGHTS_ON and stages[e] == SleepStage.LIGHTS_ON:
            lights_back_on = True

        if lights_back_on and stages[e] == SleepStage.LIGHTS_ON and stages[e + 1] != SleepStage.LIGHTS_ON:
            msg = f"LIGHTS_ON periods can only be at start and end of recording (epoch {e})"
            raise StructuralViolationError(msg, ErrorCodes.LIGHTS_ON_STRUCTURE, {"epoch": e})


def starts_persistent_sleep(stages: Sequence[SleepStage], start: int, persistent_sleep_epochs: int) -> bool:
    """True if ``persistent_sleep_epochs`` sleep epochs run unbroken from ``start``."""
    return all_within_bounds(stages, is_sleep, start, persistent_sleep_epochs)


def locate_boundaries(stages: Sequence[SleepStage], thresholds: EpochThresholds) -> RecordingBoundaries:
    """
    Find the landmark epochs of an edge-recoded, validated stage sequence.

    Args:
        stages: Stage sequence after recode_edges/validate_lights_structure
        thresholds: Resolved epoch thresholds

    Returns:
        RecordingBoundaries for the sequence

    """
    n_epochs = len(stages)
    recorded = [e for e, stage in enumerate(stages) if stage != SleepStage.LIGHTS_ON]

    if recorded:
        lights_out_epoch = recorded[0]
        lights_on_epoch = recorded[-1] + 1
    else:
        lights_out_epoch = lights_on_epoch = 0

    final_wake_epoch = lights_on_epoch
    while final_wake_epoch > lights_out_epoch and stages[final_wake_epoch - 1] == SleepStage.WAKE:
        final_wake_epoch -= 1

    sleep_epochs = [e for e, stage in enumerate(stages) if is_sleep(stage)]
    first_rem_epoch = next((e for e, stage in enumerate(stages) if is_rem(stage)), None)
    first_persistent_sleep_epoch = next(
        (e for e in sleep_epochs if starts_persistent_sleep(stages, e, thresholds.persistent_sleep_epochs)),
        None,
    )

    return RecordingBoundaries(
        n_epochs=n_epochs,
        lights_out_epoch=lights_out_epoch,
        lights_on_epoch=lights_on_epoch,
        final_wake_epoch=final_wake_epoch,
        first_sleep_epoch=sleep_epochs[0] if sleep_epochs else None,
        last_sleep_epoch=sleep_epochs[-1] if sleep_epochs else None,
        first_rem_epoch=first_rem_epoch,
        first_persistent_sleep_epoch=first_persistent_sleep_epoch,
    )


def summarize(
    stages: Sequence[SleepStage],
    boundaries: RecordingBoundaries,
    thresholds: EpochThresholds,
    persistent_sleep: Sequence[bool],
) -> SummaryStatistics:
    """
    Derive the night-level summary statistics.

    Args:
        stages: Edge-recoded stage sequence
        boundaries: Landmarks from locate_boundaries
        thresholds: Resolved epoch thresholds
        persistent_sleep: Per-epoch persistent sleep flags

    Returns:
        SummaryStatistics; sleep-dependent fields are 0/None without sleep

    """
    epoch_mins = thresholds.epoch_minutes

    counts = {stage: 0 for stage in SleepStage}
    for stage in stages:
        counts[stage] += 1

    mins_wake = counts[SleepStage.WAKE] * epoch_mins
    mins_n1 = counts[SleepStage.NREM1] * epoch_mins
    mins_n2 = counts[SleepStage.NREM2] * epoch_mins
    mins_n3 = counts[SleepStage.NREM3] * epoch_mins
    mins_n4 = counts[SleepStage.NREM4] * epoch_mins
    mins_rem = counts[SleepStage.REM] * epoch_mins
    # lights-on only ever sits outside the recording window
    mins_other = counts[SleepStage.ABSENT] * epoch_mins

    any_sleep = (mins_n1 + mins_n2 + mins_n3 + mins_n4 + mins_rem) > 0

    time_in_bed = boundaries.n_epochs * epoch_mins
    total_recording_time = boundaries.recording_epochs * epoch_mins
    total_wake_time = mins_wake
    final_wake_time = (boundaries.lights_on_epoch - boundaries.final_wake_epoch) * epoch_mins
    total_sleep_time = total_recording_time - total_wake_time - mins_other
    total_persistent_sleep_time = int(np.count_nonzero(persistent_sleep)) * epoch_mins

    if not any_sleep:
        logger.warning("No sleep epochs found in %d epochs; sleep-dependent metrics are disabled", boundaries.n_epochs)
        return SummaryStatistics(
            any_sleep=False,
            time_in_bed=time_in_bed,
            total_recording_time=total_recording_time,
            total_wake_time=total_wake_time,
            final_wake_time=final_wake_time,
            total_sleep_time=total_sleep_time,
            total_persistent_sleep_time=total_persistent_sleep_time,
            minutes_other=mins_other,
            sleep_period_time=0.0,
            waso=0.0,
            sleep_latency=None,
            persistent_sleep_latency=None,
            rem_latency=None,
            sleep_efficiency=0.0,
            sleep_maintenance_efficiency=0.0,
            sleep_efficiency_alt=0.0,
            minutes_n1=mins_n1,
            minutes_n2=mins_n2,
            minutes_n3=mins_n3,
            minutes_n4=mins_n4,
            minutes_rem=mins_rem,
            pct_n1=0.0,
            pct_n2=0.0,
            pct_n3=0.0,
            pct_n4=0.0,
            pct_rem=0.0,
        )

    first_sleep = boundaries.first_sleep_epoch
    last_sleep = boundaries.last_sleep_epoch

    sleep_latency = (first_sleep - boundaries.lights_out_epoch) * epoch_mins

    persistent_sleep_latency = None
    if boundaries.first_persistent_sleep_epoch is not None:
        persistent_sleep_latency = (boundaries.first_persistent_sleep_epoch - boundaries.lights_out_epoch) * epoch_mins

    rem_latency = None
    if boundaries.first_rem_epoch is not None:
        rem_latency = (boundaries.first_rem_epoch - first_sleep) * epoch_mins

    sleep_period_time = total_recording_time - sleep_latency

    # counted directly so unscored epochs inside the night are not taken as wake
    waso = sum(1 for e in range(first_sleep, last_sleep + 1) if stages[e] == SleepStage.WAKE) * epoch_mins

    sleep_efficiency = (total_sleep_time / total_recording_time * 100) if total_recording_time > 0 else 0.0
    sleep_maintenance_efficiency = (total_sleep_time / sleep_period_time * 100) if sleep_period_time > 0 else 0.0
    sleep_span = (last_sleep - first_sleep + 1) * epoch_mins
    sleep_efficiency_alt = total_sleep_time / sleep_span * 100

    def proportion(minutes: float) -> float:
        return minutes / total_sleep_time if total_sleep_time > 0 else 0.0

    return SummaryStatistics(
        any_sleep=True,
        time_in_bed=time_in_bed,
        total_recording_time=total_recording_time,
        total_wake_time=total_wake_time,
        final_wake_time=final_wake_time,
        total_sleep_time=total_sleep_time,
        total_persistent_sleep_time=total_persistent_sleep_time,
        minutes_other=mins_other,
        sleep_period_time=sleep_period_time,
        waso=waso,
        sleep_latency=sleep_latency,
        persistent_sleep_latency=persistent_sleep_latency,
        rem_latency=rem_latency,
        sleep_efficiency=sleep_efficiency,
        sleep_maintenance_efficiency=sleep_maintenance_efficiency,
        sleep_efficiency_alt=sleep_efficiency_alt,
        minutes_n1=mins_n1,
        minutes_n2=mins_n2,
        minutes_n3=mins_n3,
        minutes_n4=mins_n4,
        minutes_rem=mins_rem,
        pct_n1=proportion(mins_n1),
        pct_n2=proportion(mins_n2),
        pct_n3=proportion(mins_n3),
        pct_n4=proportion(mins_n4),
        pct_rem=proportion(mins_rem),
    )


def waso_flags(stages: Sequence[SleepStage], boundaries: RecordingBoundaries) -> np.ndarray:
    """Wake epochs after the first sleep epoch and before the final wake bout."""
    flags = np.zeros(len(stages), dtype=bool)
    if boundaries.first_sleep_epoch is None:
        return flags
    for e in range(boundaries.first_sleep_epoch + 1, boundaries.final_wake_epoch):
        flags[e] = stages[e] == SleepStage.WAKE
    return flags
