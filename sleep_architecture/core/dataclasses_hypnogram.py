#!/usr/bin/env python3
"""Hypnogram analysis result dataclasses."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from sleep_architecture.core.constants import (
    STAGE_NUMERIC_CODES,
    CycleColumn,
    EpochColumn,
    PeriodType,
    SleepCode,
    SleepStage,
    SleepState,
    TransitionColumn,
    TransitionDirection,
)

if TYPE_CHECKING:
    from sleep_architecture.core.algorithms.hypnogram.config import EpochThresholds, HypnogramConfig


# Transition distance and running-total columns per direction
_TRANSITION_COLUMNS: dict[TransitionDirection, tuple[EpochColumn, EpochColumn]] = {
    TransitionDirection.NREM_TO_REM: (EpochColumn.TR_NR2R, EpochColumn.TOT_NR2R),
    TransitionDirection.NREM_TO_WAKE: (EpochColumn.TR_NR2W, EpochColumn.TOT_NR2W),
    TransitionDirection.REM_TO_NREM: (EpochColumn.TR_R2NR, EpochColumn.TOT_R2NR),
    TransitionDirection.REM_TO_WAKE: (EpochColumn.TR_R2W, EpochColumn.TOT_R2W),
    TransitionDirection.WAKE_TO_NREM: (EpochColumn.TR_W2NR, EpochColumn.TOT_W2NR),
    TransitionDirection.WAKE_TO_REM: (EpochColumn.TR_W2R, EpochColumn.TOT_W2R),
}


def _read_only(*arrays: np.ndarray) -> None:
    """Lock per-epoch arrays once they are stored on a result."""
    for array in arrays:
        array.flags.writeable = False


@dataclass(frozen=True)
class RecordingBoundaries:
    """
    Key epoch indices of one recording (0-based).

    lights_on_epoch and final_wake_epoch are exclusive/one-past style
    boundaries: the recording window is [lights_out_epoch, lights_on_epoch)
    and the final wake bout is [final_wake_epoch, lights_on_epoch).
    Sleep-dependent indices are None when no sleep was scored.
    """

    n_epochs: int
    lights_out_epoch: int
    lights_on_epoch: int
    final_wake_epoch: int
    first_sleep_epoch: int | None = None
    last_sleep_epoch: int | None = None
    first_rem_epoch: int | None = None
    first_persistent_sleep_epoch: int | None = None

    @property
    def any_sleep(self) -> bool:
        return self.first_sleep_epoch is not None

    @property
    def recording_epochs(self) -> int:
        """Number of epochs between lights out and lights on."""
        return self.lights_on_epoch - self.lights_out_epoch


@dataclass(frozen=True)
class SummaryStatistics:
    """
    Night-level sleep architecture statistics.

    All durations are in minutes. Efficiencies are percentages; the pct_*
    stage fields are proportions of total sleep time (0-1). Latencies are
    None when the event they measure to never occurs.

    Attributes:
        any_sleep: True if any N1-N4/REM epoch was scored
        time_in_bed: All epochs, including lights-on edges (TIB)
        total_recording_time: Lights out to lights on (TRT)
        total_wake_time: Wake within the recording window (TWT)
        final_wake_time: Final wake bout before lights on (FWT)
        total_sleep_time: TRT - TWT - minutes_other (TST)
        total_persistent_sleep_time: Minutes flagged as persistent sleep (TpST)
        minutes_other: Unscored/movement/artifact minutes in the recording window
        sleep_period_time: TRT - sleep latency (SPT)
        waso: Wake between first and last sleep epochs
        sleep_latency: Lights out to first sleep epoch
        persistent_sleep_latency: Lights out to first persistent sleep run
        rem_latency: First sleep epoch to first REM epoch
        sleep_efficiency: TST / TRT * 100
        sleep_maintenance_efficiency: TST / SPT * 100
        sleep_efficiency_alt: TST / (first to last sleep epoch) * 100

    """

    any_sleep: bool
    time_in_bed: float
    total_recording_time: float
    total_wake_time: float
    final_wake_time: float
    total_sleep_time: float
    total_persistent_sleep_time: float
    minutes_other: float
    sleep_period_time: float
    waso: float
    sleep_latency: float | None
    persistent_sleep_latency: float | None
    rem_latency: float | None
    sleep_efficiency: float
    sleep_maintenance_efficiency: float
    sleep_efficiency_alt: float

    # Stage minutes
    minutes_n1: float
    minutes_n2: float
    minutes_n3: float
    minutes_n4: float
    minutes_rem: float

    # Stage proportions of TST
    pct_n1: float
    pct_n2: float
    pct_n3: float
    pct_n4: float
    pct_rem: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for export."""
        return asdict(self)


@dataclass(frozen=True)
class CycleEntry:
    """One NREM/REM sleep cycle; epochs are 0-based and inclusive."""

    cycle: int
    start_epoch: int
    end_epoch: int
    minutes: float
    nrem_minutes: float
    rem_minutes: float
    other_minutes: float
    epochs: int


@dataclass(frozen=True)
class SleepCycles:
    """Table of sleep cycles keyed by 1-based cycle number."""

    entries: dict[int, CycleEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, cycle: int) -> CycleEntry:
        return self.entries[cycle]

    def __iter__(self):
        return iter(self.entries.values())

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def mean_minutes(self) -> float:
        """Mean cycle duration, 0 when there are no cycles."""
        if not self.entries:
            return 0.0
        return sum(entry.minutes for entry in self.entries.values()) / len(self.entries)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per cycle."""
        rows = [
            {
                CycleColumn.CYCLE: entry.cycle,
                CycleColumn.START_EPOCH: entry.start_epoch,
                CycleColumn.END_EPOCH: entry.end_epoch,
                CycleColumn.MINUTES: entry.minutes,
                CycleColumn.NREM_MINUTES: entry.nrem_minutes,
                CycleColumn.REM_MINUTES: entry.rem_minutes,
                CycleColumn.OTHER_MINUTES: entry.other_minutes,
                CycleColumn.EPOCHS: entry.epochs,
            }
            for entry in self.entries.values()
        ]
        return pd.DataFrame(rows, columns=[str(column) for column in CycleColumn])


@dataclass(frozen=True)
class CycleSegmentation:
    """
    Per-epoch output of the cycle segmentation passes.

    Every array has one value per epoch. Cycle positions are NaN outside
    a cycle; cycle number 0 means the epoch is not part of any cycle.
    """

    persistent_sleep: np.ndarray
    sleep_onset: np.ndarray
    sleep_count: np.ndarray
    sleep_state: list[SleepState]
    final_wake: np.ndarray
    period: list[PeriodType]
    cycle_ending_waso: np.ndarray
    sleep_code: np.ndarray
    cycle_number: np.ndarray
    cycle_pos_abs: np.ndarray
    cycle_pos_rel: np.ndarray
    cycles: SleepCycles

    def __post_init__(self) -> None:
        _read_only(
            self.persistent_sleep,
            self.sleep_onset,
            self.sleep_count,
            self.final_wake,
            self.cycle_ending_waso,
            self.sleep_code,
            self.cycle_number,
            self.cycle_pos_abs,
            self.cycle_pos_rel,
        )


@dataclass(frozen=True)
class TransitionMatrix:
    """
    Counts of consecutive-epoch stage pairs.

    counts[i, j] is the number of epochs of class ``classes[j]`` directly
    preceded by an epoch of class ``classes[i]``. Pairs involving lights-on
    or unscored epochs are not tallied.
    """

    classes: tuple[str, ...]
    counts: np.ndarray

    def __post_init__(self) -> None:
        _read_only(self.counts)

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    @property
    def row_totals(self) -> np.ndarray:
        """Transitions out of each preceding class."""
        return self.counts.sum(axis=1)

    @property
    def column_totals(self) -> np.ndarray:
        """Transitions into each following class."""
        return self.counts.sum(axis=0)

    def count(self, pre: str, post: str) -> int:
        return int(self.counts[self._index(pre), self._index(post)])

    def probability(self, pre: str, post: str) -> float | None:
        """Joint probability of the pair, None when nothing was tallied."""
        if self.total == 0:
            return None
        return self.count(pre, post) / self.total

    def probability_post_given_pre(self, pre: str, post: str) -> float | None:
        marginal = int(self.row_totals[self._index(pre)])
        if marginal == 0:
            return None
        return self.count(pre, post) / marginal

    def probability_pre_given_post(self, pre: str, post: str) -> float | None:
        marginal = int(self.column_totals[self._index(post)])
        if marginal == 0:
            return None
        return self.count(pre, post) / marginal

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format table, one row per (pre, post) pair."""
        rows = [
            {
                TransitionColumn.PRE: pre,
                TransitionColumn.POST: post,
                TransitionColumn.COUNT: self.count(pre, post),
                TransitionColumn.PROBABILITY: self.probability(pre, post),
                TransitionColumn.P_POST_GIVEN_PRE: self.probability_post_given_pre(pre, post),
                TransitionColumn.P_PRE_GIVEN_POST: self.probability_pre_given_post(pre, post),
            }
            for pre in self.classes
            for post in self.classes
        ]
        return pd.DataFrame(rows, columns=[str(column) for column in TransitionColumn])

    def _index(self, label: str) -> int:
        try:
            return self.classes.index(str(label))
        except ValueError:
            msg = f"'{label}' is not a transition class; expected one of {self.classes}"
            raise KeyError(msg) from None


@dataclass(frozen=True)
class TransitionAnalysis:
    """Per-epoch flanking and transition measures, plus the transition matrix."""

    flanking_min: np.ndarray
    flanking_all: np.ndarray
    nearest_wake: np.ndarray
    distances: dict[TransitionDirection, np.ndarray]
    running_totals: dict[TransitionDirection, np.ndarray]
    matrix: TransitionMatrix

    def __post_init__(self) -> None:
        _read_only(self.flanking_min, self.flanking_all, self.nearest_wake)
        _read_only(*self.distances.values(), *self.running_totals.values())


@dataclass(frozen=True)
class ElapsedStageMinutes:
    """
    Minutes accumulated strictly before each epoch.

    The pct_* arrays divide by the night total of the same stage (0 when
    that stage never occurs).
    """

    wake: np.ndarray
    waso: np.ndarray
    sleep: np.ndarray
    n1: np.ndarray
    n2: np.ndarray
    n3: np.ndarray
    rem: np.ndarray
    pct_sleep: np.ndarray
    pct_n1: np.ndarray
    pct_n2: np.ndarray
    pct_n3: np.ndarray
    pct_rem: np.ndarray

    def __post_init__(self) -> None:
        _read_only(
            self.wake,
            self.waso,
            self.sleep,
            self.n1,
            self.n2,
            self.n3,
            self.rem,
            self.pct_sleep,
            self.pct_n1,
            self.pct_n2,
            self.pct_n3,
            self.pct_rem,
        )


@dataclass(frozen=True)
class ClockTimes:
    """
    Wall-clock landmarks of the night.

    When the recording start time is missing or invalid, valid is False and
    every landmark is None. Sleep-dependent landmarks are None without sleep.
    """

    valid: bool = False
    start: datetime | None = None
    lights_out: datetime | None = None
    sleep_onset: datetime | None = None
    sleep_midpoint: datetime | None = None
    final_wake: datetime | None = None
    lights_on: datetime | None = None

    def as_hours(self) -> dict[str, float | None]:
        """Landmarks as decimal clock hours (e.g. 22:30 -> 22.5)."""
        landmarks = {
            "lights_out": self.lights_out,
            "sleep_onset": self.sleep_onset,
            "sleep_midpoint": self.sleep_midpoint,
            "final_wake": self.final_wake,
            "lights_on": self.lights_on,
        }
        return {name: clock_hours(value) if value is not None else None for name, value in landmarks.items()}


def clock_hours(value: datetime) -> float:
    """Decimal hours since midnight."""
    return value.hour + value.minute / 60.0 + (value.second + value.microsecond / 1e6) / 3600.0


@dataclass(frozen=True)
class HypnogramResult:
    """
    Complete output of one hypnogram analysis run.

    Holds the (edge-recoded) stage sequence together with every derived
    structure. Nothing here is mutated after the analyzer returns it.
    """

    stages: tuple[SleepStage, ...]
    epoch_seconds: float
    config: HypnogramConfig
    thresholds: EpochThresholds
    boundaries: RecordingBoundaries
    summary: SummaryStatistics
    segmentation: CycleSegmentation
    transitions: TransitionAnalysis
    depth_trajectory: np.ndarray
    waso: np.ndarray
    elapsed: ElapsedStageMinutes
    clock: ClockTimes

    def __post_init__(self) -> None:
        _read_only(self.depth_trajectory, self.waso)

    @property
    def n_epochs(self) -> int:
        return len(self.stages)

    @property
    def any_sleep(self) -> bool:
        return self.summary.any_sleep

    @property
    def cycles(self) -> SleepCycles:
        return self.segmentation.cycles

    def epochs_dataframe(self) -> pd.DataFrame:
        """
        One row per epoch with every per-epoch annotation.

        Epochs are numbered from 1 in the ``epoch`` column to match
        conventional hypnogram listings.
        """
        epoch_minutes = self.epoch_seconds / 60.0
        seg = self.segmentation
        trans = self.transitions
        elapsed = self.elapsed

        columns: dict[str, Any] = {
            EpochColumn.EPOCH: np.arange(1, self.n_epochs + 1),
        }
        if self.clock.valid and self.clock.start is not None:
            start = self.clock.start
            columns[EpochColumn.CLOCK_TIME] = [start + timedelta(seconds=self.epoch_seconds * e) for e in range(self.n_epochs)]

        columns.update(
            {
                EpochColumn.MINUTES: np.arange(self.n_epochs) * epoch_minutes,
                EpochColumn.STAGE: [str(stage) for stage in self.stages],
                EpochColumn.STAGE_NUMERIC: self._stage_numeric_codes(),
                EpochColumn.PERSISTENT_SLEEP: seg.persistent_sleep,
                EpochColumn.SLEEP_STATE: [str(state) for state in seg.sleep_state],
                EpochColumn.PERIOD: [SleepCode(int(code)).period_label if cycle else "." for code, cycle in zip(seg.sleep_code, seg.cycle_number)],
                EpochColumn.SLEEP_CODE: seg.sleep_code,
                EpochColumn.CYCLE: seg.cycle_number,
                EpochColumn.CYCLE_POS_REL: seg.cycle_pos_rel,
                EpochColumn.CYCLE_POS_ABS: seg.cycle_pos_abs,
                EpochColumn.CYCLE_ENDING_WASO: seg.cycle_ending_waso,
                EpochColumn.FINAL_WAKE: seg.final_wake,
                EpochColumn.WASO: self.waso,
                EpochColumn.FLANKING_MIN: trans.flanking_min,
                EpochColumn.FLANKING_ALL: trans.flanking_all,
                EpochColumn.NEAREST_WAKE: trans.nearest_wake,
            }
        )
        for direction, (distance_column, total_column) in _TRANSITION_COLUMNS.items():
            columns[distance_column] = trans.distances[direction]
            columns[total_column] = trans.running_totals[direction]

        columns.update(
            {
                EpochColumn.DEPTH_TRAJECTORY: self.depth_trajectory,
                EpochColumn.E_WAKE: elapsed.wake,
                EpochColumn.E_WASO: elapsed.waso,
                EpochColumn.E_SLEEP: elapsed.sleep,
                EpochColumn.E_N1: elapsed.n1,
                EpochColumn.E_N2: elapsed.n2,
                EpochColumn.E_N3: elapsed.n3,
                EpochColumn.E_REM: elapsed.rem,
                EpochColumn.PCT_E_SLEEP: elapsed.pct_sleep,
                EpochColumn.PCT_E_N1: elapsed.pct_n1,
                EpochColumn.PCT_E_N2: elapsed.pct_n2,
                EpochColumn.PCT_E_N3: elapsed.pct_n3,
                EpochColumn.PCT_E_REM: elapsed.pct_rem,
            }
        )
        return pd.DataFrame({str(name): values for name, values in columns.items()})

    def cycles_dataframe(self) -> pd.DataFrame:
        return self.cycles.to_dataframe()

    def _stage_numeric_codes(self) -> np.ndarray:
        codes = dict(STAGE_NUMERIC_CODES)
        if self.config.collapse_deep_nrem:
            codes[SleepStage.NREM4] = codes[SleepStage.NREM3]
        return np.array([codes[stage] for stage in self.stages], dtype=int)
