"""
Sleep cycle segmentation - modified Feinberg & Floyd rules.

This module splits a staged night into numbered NREM/REM cycles. The work is
done in layered passes, each a pure function of the stage sequence and the
arrays produced by earlier passes:

    1. persistent_sleep_flags   - sleep preceded by unbroken sleep
    2. sleep_onset_mask         - first to last sleep epoch
    3. cumulative_sleep_count   - running count of persistent sleep epochs
    4. sleep_states             - Prior / LPS / LPO / SPT / After labels
    5. classify_periods         - NREM/REM periods and cycle-ending WASO
    6. assign_sleep_codes       - 0 (excluded), 1 (NREM period), 5 (REM period)
    7. number_cycles            - cycle number per epoch
    8. aggregate_cycles         - per-cycle durations
    9. cycle_positions          - position of each epoch within its cycle

Cycle definitions:
    - A cycle is a NREM period of at least min_nrem_epochs, terminated by the
      end of a REM period or, if REM is skipped, by a bout of W/N1 lasting
      terminating_waso_epochs.
    - A REM period may contain NREM or wake as long as another REM epoch
      follows within rem_interruption_epochs.
    - Wake between cycles is cycle 0; wake within a cycle stays in the cycle.

Reference:
    Feinberg I, Floyd TC (1979). Systematic trends across the night in human
    sleep cycles. Psychophysiology, 16(3):283-291.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from sleep_architecture.core.constants import PeriodType, SleepCode, SleepStage, SleepState
from sleep_architecture.core.dataclasses_hypnogram import CycleEntry, CycleSegmentation, SleepCycles

from .boundaries import starts_persistent_sleep
from .stages import is_nrem, is_nrem1, is_nrem234, is_rem, is_sleep, is_wake, is_wake_or_lights
from .windows import any_within_window, count_within_window, first_match_within_window

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .config import EpochThresholds

logger = logging.getLogger(__name__)


def persistent_sleep_flags(stages: Sequence[SleepStage], persistent_sleep_epochs: int) -> np.ndarray:
    """
    Flag sleep epochs preceded by ``persistent_sleep_epochs`` epochs of sleep.

    The look-back excludes the epoch itself and fails if it would run off
    the start of the recording.
    """
    return np.array(
        [
            is_sleep(stage) and starts_persistent_sleep(stages, e - persistent_sleep_epochs, persistent_sleep_epochs)
            for e, stage in enumerate(stages)
        ],
        dtype=bool,
    )


def sleep_onset_mask(stages: Sequence[SleepStage]) -> np.ndarray:
    """True from the first to the last sleep epoch, inclusive."""
    mask = np.zeros(len(stages), dtype=bool)
    sleep_epochs = [e for e, stage in enumerate(stages) if is_sleep(stage)]
    if sleep_epochs:
        mask[sleep_epochs[0] : sleep_epochs[-1] + 1] = True
    return mask


def cumulative_sleep_count(stages: Sequence[SleepStage], persistent_sleep: Sequence[bool]) -> np.ndarray:
    """Running count of persistent sleep epochs; -1 for lights on after sleep."""
    counts = np.zeros(len(stages), dtype=int)
    total = 0
    for e, stage in enumerate(stages):
        if persistent_sleep[e]:
            total += 1
        counts[e] = -1 if stage == SleepStage.LIGHTS_ON and total > 0 else total
    return counts


def sleep_states(stages: Sequence[SleepStage], sleep_count: Sequence[int]) -> list[SleepState]:
    states = []
    for stage, count in zip(stages, sleep_count):
        if stage == SleepStage.LIGHTS_ON and count == 0:
            states.append(SleepState.PRIOR)
        elif count == 0:
            states.append(SleepState.LPS)
        elif count == 1:
            states.append(SleepState.LPO)
        elif count > 1:
            states.append(SleepState.SPT)
        else:
            states.append(SleepState.AFTER)
    return states


def final_wake_flags(stages: Sequence[SleepStage]) -> np.ndarray:
    """Wake or lights-on epochs after the last sleep epoch."""
    flags = np.zeros(len(stages), dtype=bool)
    for e in range(len(stages) - 1, -1, -1):
        if is_sleep(stages[e]):
            break
        flags[e] = is_wake_or_lights(stages[e])
    return flags


def classify_periods(
    stages: Sequence[SleepStage],
    sleep_onset: Sequence[bool],
    thresholds: EpochThresholds,
) -> tuple[list[PeriodType], np.ndarray]:
    """
    Assign each epoch to a NREM period, a REM period, or neither.

    Evaluated left to right; epoch e only depends on the period of e-1 and
    bounded look-ahead windows starting at e.

    Rules, in order:
        - REM directly after any defined period continues into a REM period.
        - Any epoch after a REM period stays REM while another REM epoch
          follows within rem_interruption_epochs (this epoch included).
        - W/N1 after a REM period or a cycle-ending WASO is a gap.
        - From a gap, W/N1 or REM within min_nrem_epochs keeps the gap;
          otherwise (or when already in NREM) the epoch is NREM.

    A NREM epoch followed by terminating_waso_epochs with no N2-N4/REM ends
    its cycle; the cycle-ending flag then carries through contiguous wake.

    Returns:
        Tuple of (period per epoch, cycle-ending WASO flags)

    """
    n_epochs = len(stages)
    periods = [PeriodType.NONE] * n_epochs
    cycle_ending_waso = np.zeros(n_epochs, dtype=bool)

    for e in range(n_epochs):
        if not sleep_onset[e]:
            continue

        stage = stages[e]
        previous = periods[e - 1] if e > 0 else PeriodType.NONE
        previous_cycle_end = bool(cycle_ending_waso[e - 1]) if e > 0 else False

        if is_rem(stage) and previous != PeriodType.NONE:
            periods[e] = PeriodType.REM
        elif previous == PeriodType.REM and any_within_window(stages, is_rem, e, thresholds.rem_interruption_epochs):
            periods[e] = PeriodType.REM
        elif (previous == PeriodType.REM or previous_cycle_end) and (is_wake(stage) or is_nrem1(stage)):
            periods[e] = PeriodType.NONE
        else:
            rem_ahead = any_within_window(stages, is_rem, e, thresholds.min_nrem_epochs)
            if previous == PeriodType.NONE and (is_wake(stage) or is_nrem1(stage) or rem_ahead):
                periods[e] = PeriodType.NONE
            else:
                periods[e] = PeriodType.NREM

        near_sleep = any_within_window(
            stages,
            lambda s: is_nrem234(s) or is_rem(s),
            e,
            thresholds.terminating_waso_epochs,
        )
        if periods[e] == PeriodType.NREM and not near_sleep:
            cycle_ending_waso[e] = True
        elif previous_cycle_end and is_wake(stage):
            cycle_ending_waso[e] = True

    return periods, cycle_ending_waso


def assign_sleep_codes(
    periods: Sequence[PeriodType],
    cycle_ending_waso: Sequence[bool],
    final_wake: Sequence[bool],
    thresholds: EpochThresholds,
) -> np.ndarray:
    """
    Code each epoch 0 (excluded), 1 (NREM period) or 5 (REM period).

    The first REM period of the night, if it comes before any cycle-ending
    WASO, always counts as REM. Later REM periods need min_rem_epochs of
    REM-period epochs from their first epoch, else they are coded as NREM.
    """
    n_epochs = len(periods)
    codes = np.zeros(n_epochs, dtype=int)

    first_rem_period = first_match_within_window(periods, lambda p: p == PeriodType.REM, 0, n_epochs)
    first_cycle_end = first_match_within_window(cycle_ending_waso, bool, 0, n_epochs)

    for e in range(n_epochs):
        if cycle_ending_waso[e]:
            continue

        period = periods[e]
        previous = periods[e - 1] if e > 0 else PeriodType.NONE
        previous_code = codes[e - 1] if e > 0 else SleepCode.EXCLUDED

        if period == PeriodType.NREM:
            codes[e] = SleepCode.NREM
        elif period == PeriodType.REM:
            if previous == PeriodType.NREM:
                first_cycle_rem = (first_rem_period is None or e <= first_rem_period) and (
                    first_cycle_end is None or e <= first_cycle_end
                )
                if first_cycle_rem:
                    codes[e] = SleepCode.REM
                else:
                    rem_epochs = count_within_window(periods, lambda p: p == PeriodType.REM, e, thresholds.min_rem_epochs)
                    codes[e] = SleepCode.REM if rem_epochs >= thresholds.min_rem_epochs else SleepCode.NREM
            elif previous == PeriodType.REM and previous_code == SleepCode.REM:
                codes[e] = SleepCode.REM
            else:
                codes[e] = SleepCode.NREM
        elif previous == PeriodType.REM and previous_code == SleepCode.NREM:
            codes[e] = SleepCode.NREM
        elif final_wake[e]:
            codes[e] = SleepCode.EXCLUDED
        elif previous_code == SleepCode.NREM:
            codes[e] = SleepCode.NREM
        else:
            codes[e] = SleepCode.EXCLUDED

    return codes


def number_cycles(stages: Sequence[SleepStage], sleep_codes: Sequence[int], min_nrem_epochs: int) -> np.ndarray:
    """
    Number cycles from 1; 0 marks epochs outside any cycle.

    A cycle starts where the code steps 0 -> 1 or 5 -> 1 and at least
    min_nrem_epochs NREM epochs lie between that epoch and the next 0/5
    coded epoch (inclusive). Otherwise the previous epoch's number carries.
    """
    n_epochs = len(sleep_codes)
    numbers = np.zeros(n_epochs, dtype=int)
    cycle = 0

    for e in range(n_epochs):
        code = sleep_codes[e]
        if code == SleepCode.EXCLUDED:
            continue

        previous_code = sleep_codes[e - 1] if e > 0 else SleepCode.EXCLUDED
        nrem_onset = code == SleepCode.NREM and previous_code in (SleepCode.EXCLUDED, SleepCode.REM)

        if nrem_onset:
            end = first_match_within_window(sleep_codes, lambda c: c in (SleepCode.EXCLUDED, SleepCode.REM), e, n_epochs)
            if end is None:
                end = n_epochs - 1
            nrem_epochs = count_within_window(stages, is_nrem, e, end - e + 1)
            if nrem_epochs >= min_nrem_epochs:
                cycle += 1
                numbers[e] = cycle
                continue

        numbers[e] = numbers[e - 1] if e > 0 else 0

    return numbers


def aggregate_cycles(stages: Sequence[SleepStage], cycle_numbers: Sequence[int], epoch_minutes: float) -> SleepCycles:
    """Collect start/end epochs and stage durations for every numbered cycle."""
    first: dict[int, int] = {}
    last: dict[int, int] = {}
    rem: dict[int, int] = {}
    nrem: dict[int, int] = {}
    other: dict[int, int] = {}

    for e, number in enumerate(cycle_numbers):
        number = int(number)
        if number == 0:
            continue
        first.setdefault(number, e)
        last[number] = e
        if is_rem(stages[e]):
            rem[number] = rem.get(number, 0) + 1
        elif is_nrem(stages[e]):
            nrem[number] = nrem.get(number, 0) + 1
        else:
            other[number] = other.get(number, 0) + 1

    entries = {}
    for number in sorted(first):
        n_rem = rem.get(number, 0)
        n_nrem = nrem.get(number, 0)
        n_other = other.get(number, 0)
        n_total = n_rem + n_nrem + n_other
        entries[number] = CycleEntry(
            cycle=number,
            start_epoch=first[number],
            end_epoch=last[number],
            minutes=n_total * epoch_minutes,
            nrem_minutes=n_nrem * epoch_minutes,
            rem_minutes=n_rem * epoch_minutes,
            other_minutes=n_other * epoch_minutes,
            epochs=n_total,
        )

    return SleepCycles(entries=entries)


def cycle_positions(cycle_numbers: Sequence[int], cycles: SleepCycles, epoch_minutes: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Absolute (minutes from cycle start) and relative (0-1) position per epoch.

    Returns:
        Tuple of (absolute, relative) arrays, NaN outside cycles

    """
    absolute = np.full(len(cycle_numbers), np.nan)
    relative = np.full(len(cycle_numbers), np.nan)

    for e, number in enumerate(cycle_numbers):
        if number == 0:
            continue
        entry = cycles[int(number)]
        absolute[e] = (e - entry.start_epoch) * epoch_minutes
        relative[e] = absolute[e] / entry.minutes

    return absolute, relative


def segment_cycles(
    stages: Sequence[SleepStage],
    thresholds: EpochThresholds,
    persistent_sleep: np.ndarray | None = None,
) -> CycleSegmentation:
    """
    Run every segmentation pass over an edge-recoded stage sequence.

    Args:
        stages: Validated, edge-recoded stage sequence
        thresholds: Resolved epoch thresholds
        persistent_sleep: Flags from persistent_sleep_flags, computed if None

    Returns:
        CycleSegmentation with all per-epoch layers and the cycle table

    """
    if persistent_sleep is None:
        persistent_sleep = persistent_sleep_flags(stages, thresholds.persistent_sleep_epochs)

    onset = sleep_onset_mask(stages)
    sleep_count = cumulative_sleep_count(stages, persistent_sleep)
    states = sleep_states(stages, sleep_count)
    final_wake = final_wake_flags(stages)

    periods, cycle_ending_waso = classify_periods(stages, onset, thresholds)
    logger.debug(
        "Periods: %d NREM, %d REM, %d cycle-ending WASO epochs",
        periods.count(PeriodType.NREM),
        periods.count(PeriodType.REM),
        int(cycle_ending_waso.sum()),
    )

    codes = assign_sleep_codes(periods, cycle_ending_waso, final_wake, thresholds)
    numbers = number_cycles(stages, codes, thresholds.min_nrem_epochs)
    cycles = aggregate_cycles(stages, numbers, thresholds.epoch_minutes)
    absolute, relative = cycle_positions(numbers, cycles, thresholds.epoch_minutes)

    logger.debug("Found %d sleep cycle(s), mean duration %.1f minutes", cycles.count, cycles.mean_minutes)

    return CycleSegmentation(
        persistent_sleep=persistent_sleep,
        sleep_onset=onset,
        sleep_count=sleep_count,
        sleep_state=states,
        final_wake=final_wake,
        period=periods,
        cycle_ending_waso=cycle_ending_waso,
        sleep_code=codes,
        cycle_number=numbers,
        cycle_pos_abs=absolute,
        cycle_pos_rel=relative,
        cycles=cycles,
    )
