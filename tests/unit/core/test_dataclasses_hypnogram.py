"""
Tests for hypnogram result dataclasses.

Tests immutability, derived properties and the tabular views.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from sleep_architecture.core.algorithms.hypnogram import HypnogramAnalyzer
from sleep_architecture.core.constants import CycleColumn, EpochColumn, TransitionDirection
from sleep_architecture.core.dataclasses_hypnogram import (
    ClockTimes,
    CycleEntry,
    HypnogramResult,
    RecordingBoundaries,
    SleepCycles,
    TransitionMatrix,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def result() -> HypnogramResult:
    """Analysis of the single-cycle night with a start time."""
    labels = ["W"] * 4 + ["N2"] * 40 + ["R"] * 10 + ["W"] * 4
    return HypnogramAnalyzer().analyze(labels, start_time="22:00:00")


# ============================================================================
# Test Simple Dataclasses
# ============================================================================


class TestRecordingBoundaries:
    """Tests for RecordingBoundaries."""

    def test_properties(self) -> None:
        """any_sleep follows first_sleep_epoch; recording_epochs spans the lights window."""
        boundaries = RecordingBoundaries(n_epochs=10, lights_out_epoch=1, lights_on_epoch=9, final_wake_epoch=9)

        assert not boundaries.any_sleep
        assert boundaries.recording_epochs == 8

    def test_is_frozen(self) -> None:
        """Dataclass is frozen (immutable)."""
        boundaries = RecordingBoundaries(n_epochs=1, lights_out_epoch=0, lights_on_epoch=1, final_wake_epoch=0)

        with pytest.raises(FrozenInstanceError):
            boundaries.n_epochs = 2  # type: ignore[misc]


class TestSleepCycles:
    """Tests for SleepCycles."""

    def test_table(self) -> None:
        """Indexing, iteration, mean and the DataFrame view."""
        cycles = SleepCycles(
            entries={
                1: CycleEntry(1, 0, 9, 5.0, 4.0, 1.0, 0.0, 10),
                2: CycleEntry(2, 12, 31, 10.0, 6.0, 3.0, 1.0, 20),
            }
        )

        assert len(cycles) == 2
        assert cycles[2].start_epoch == 12
        assert [entry.cycle for entry in cycles] == [1, 2]
        assert cycles.mean_minutes == 7.5

        df = cycles.to_dataframe()
        assert list(df.columns) == [str(column) for column in CycleColumn]
        assert df["epochs"].tolist() == [10, 20]

    def test_empty_dataframe_keeps_columns(self) -> None:
        """An empty table still has every column."""
        df = SleepCycles().to_dataframe()

        assert df.empty
        assert "nrem_minutes" in df.columns


class TestTransitionMatrixDataclass:
    """Tests for TransitionMatrix built directly from counts."""

    def test_marginals(self) -> None:
        """Row and column totals."""
        matrix = TransitionMatrix(classes=("NR", "R", "W"), counts=np.array([[5, 1, 1], [0, 3, 1], [2, 0, 4]]))

        assert matrix.total == 17
        assert matrix.row_totals.tolist() == [7, 4, 6]
        assert matrix.column_totals.tolist() == [7, 4, 6]
        assert matrix.probability_post_given_pre("W", "NR") == pytest.approx(2 / 6)

    def test_counts_are_read_only(self) -> None:
        """Stored counts cannot be changed in place."""
        matrix = TransitionMatrix(classes=("NR", "W"), counts=np.array([[1, 0], [0, 1]]))

        with pytest.raises(ValueError, match="read-only"):
            matrix.counts[0, 0] = 5


class TestClockTimes:
    """Tests for ClockTimes."""

    def test_default_is_invalid(self) -> None:
        """The default instance is flagged invalid with no landmarks."""
        clock = ClockTimes()

        assert not clock.valid
        assert all(value is None for value in clock.as_hours().values())


# ============================================================================
# Test HypnogramResult Views
# ============================================================================


class TestEpochsDataframe:
    """Tests for HypnogramResult.epochs_dataframe."""

    def test_one_row_per_epoch(self, result: HypnogramResult) -> None:
        """Epochs are numbered from 1."""
        df = result.epochs_dataframe()

        assert len(df) == 58
        assert df[str(EpochColumn.EPOCH)].iloc[0] == 1
        assert df[str(EpochColumn.MINUTES)].iloc[2] == 1.0

    def test_columns(self, result: HypnogramResult) -> None:
        """Every column name comes from EpochColumn, in declaration order."""
        df = result.epochs_dataframe()

        assert df.columns.tolist() == [str(column) for column in EpochColumn]
        assert "tr_nr2r" in df.columns
        assert "tot_w2r" in df.columns

    def test_directional_columns_hold_distances(self, result: HypnogramResult) -> None:
        """Distance and running-total columns carry the per-direction arrays."""
        df = result.epochs_dataframe()
        distances = result.transitions.distances[TransitionDirection.NREM_TO_REM]
        totals = result.transitions.running_totals[TransitionDirection.NREM_TO_REM]

        assert df[str(EpochColumn.TR_NR2R)].tolist() == distances.tolist()
        assert df[str(EpochColumn.TOT_NR2R)].tolist() == totals.tolist()

    def test_no_clock_column_without_start(self) -> None:
        """The clock time column is omitted when the start time is unknown."""
        df = HypnogramAnalyzer().analyze(["W", "N2", "W"]).epochs_dataframe()

        assert str(EpochColumn.CLOCK_TIME) not in df.columns

    def test_stage_and_period_columns(self, result: HypnogramResult) -> None:
        """Numeric codes and period labels per epoch."""
        df = result.epochs_dataframe()

        assert df["stage_n"].iloc[0] == 1
        assert df["stage_n"].iloc[4] == -2
        assert df["stage_n"].iloc[44] == 0
        assert df["period"].iloc[4] == "NREMP"
        assert df["period"].iloc[44] == "REMP"
        assert df["period"].iloc[0] == "."
        assert df["cycle"].tolist() == [0] * 4 + [1] * 50 + [0] * 4

    def test_depth_column_only_for_n2(self, result: HypnogramResult) -> None:
        """The depth score is missing for non-N2 epochs."""
        depth = result.epochs_dataframe()["n2_wgt"]

        assert depth.iloc[:4].isna().all()
        assert depth.iloc[4:44].notna().all()

    def test_cycles_dataframe(self, result: HypnogramResult) -> None:
        """One row per cycle."""
        df = result.cycles_dataframe()

        assert len(df) == 1
        assert df["nrem_minutes"].iloc[0] == 20.0
        assert df["rem_minutes"].iloc[0] == 5.0


class TestResultArraysReadOnly:
    """Per-epoch arrays on a finished result cannot be modified."""

    def test_segmentation_arrays(self, result: HypnogramResult) -> None:
        """Cycle numbers stay consistent with the cycle table."""
        with pytest.raises(ValueError, match="read-only"):
            result.segmentation.cycle_number[:] = 7

        assert set(result.segmentation.cycle_number.tolist()) == {0, 1}

    def test_transition_arrays(self, result: HypnogramResult) -> None:
        """Flanking runs and directional distances are locked."""
        with pytest.raises(ValueError, match="read-only"):
            result.transitions.flanking_all[0] = 99
        with pytest.raises(ValueError, match="read-only"):
            result.transitions.distances[TransitionDirection.WAKE_TO_NREM][0] = 99

    def test_top_level_arrays(self, result: HypnogramResult) -> None:
        """Depth, WASO and elapsed minutes are locked."""
        for array in (result.depth_trajectory, result.waso, result.elapsed.sleep, result.elapsed.pct_rem):
            assert not array.flags.writeable

    def test_epochs_dataframe_is_editable(self, result: HypnogramResult) -> None:
        """The tabular view is a copy the caller may change."""
        df = result.epochs_dataframe()
        df.loc[0, str(EpochColumn.CYCLE)] = 7

        assert result.segmentation.cycle_number[0] == 0
