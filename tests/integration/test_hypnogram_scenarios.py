"""
End-to-end scenarios for hypnogram analysis.

Runs the full analyzer on complete nights and checks the night-level
invariants that tie the summary, cycle table and per-epoch arrays together.
"""

from __future__ import annotations

import numpy as np
import pytest

from sleep_architecture.core.algorithms.hypnogram import HypnogramAnalyzer, analyze_hypnogram
from sleep_architecture.core.constants import SleepStage
from sleep_architecture.core.exceptions import StructuralViolationError

pytestmark = pytest.mark.integration


def check_night_invariants(result) -> None:
    summary = result.summary
    segmentation = result.segmentation

    assert summary.total_sleep_time + summary.total_wake_time + summary.minutes_other == pytest.approx(
        summary.total_recording_time
    )
    assert summary.total_recording_time <= summary.time_in_bed

    numbers = segmentation.cycle_number
    nonzero = numbers[numbers > 0]
    assert np.all(np.diff(nonzero) >= 0)
    if nonzero.size:
        assert nonzero[0] == 1
        assert set(np.unique(nonzero)) == set(range(1, int(nonzero.max()) + 1))

    for entry in result.cycles:
        assert entry.epochs == int(np.count_nonzero(numbers == entry.cycle))
        assert entry.nrem_minutes + entry.rem_minutes <= entry.minutes

    assert np.all(result.transitions.flanking_min <= result.transitions.flanking_all)

    depth = result.depth_trajectory
    is_n2 = np.array([stage == SleepStage.NREM2 for stage in result.stages])
    assert np.all(np.isnan(depth[~is_n2]))
    assert not np.any(np.isnan(depth[is_n2]))


# ============================================================================
# Test Reference Scenarios
# ============================================================================


class TestReferenceScenarios:
    """Scenarios with hand-derived results."""

    def test_all_wake(self, all_wake_night: list[SleepStage]) -> None:
        """20 wake epochs: no sleep, 10 minutes of wake, no cycles."""
        result = analyze_hypnogram(all_wake_night)

        assert not result.any_sleep
        assert result.summary.total_sleep_time == 0.0
        assert result.summary.total_wake_time == 10.0
        assert result.summary.waso == 0.0
        assert result.summary.sleep_efficiency == 0.0
        assert result.cycles.count == 0
        assert not result.segmentation.cycle_number.any()
        check_night_invariants(result)

    def test_single_cycle(self, single_cycle_night: list[SleepStage]) -> None:
        """4 W, 40 N2, 10 R, 4 W: exactly one 20/5 minute cycle."""
        result = analyze_hypnogram(single_cycle_night)
        cycle = result.cycles[1]

        assert result.cycles.count == 1
        assert cycle.nrem_minutes == 20.0
        assert cycle.rem_minutes == 5.0
        assert result.segmentation.cycle_number.tolist() == [0] * 4 + [1] * 40 + [1] * 10 + [0] * 4
        check_night_invariants(result)

    def test_single_cycle_summary(self, single_cycle_night: list[SleepStage]) -> None:
        """Summary statistics of the single-cycle night."""
        summary = analyze_hypnogram(single_cycle_night).summary

        assert summary.total_recording_time == 29.0
        assert summary.total_sleep_time == 25.0
        assert summary.total_wake_time == 4.0
        assert summary.final_wake_time == 2.0
        assert summary.sleep_latency == 2.0
        assert summary.rem_latency == 20.0
        assert summary.total_persistent_sleep_time == 15.0
        assert summary.sleep_efficiency == pytest.approx(25 / 29 * 100)

    def test_lights_on_mid_recording(self, make_stages) -> None:
        """Lights on at epochs 0, 5 and 50 is a structural violation."""
        stages = make_stages(("W", 60))
        for epoch in (0, 5, 50):
            stages[epoch] = SleepStage.LIGHTS_ON

        with pytest.raises(StructuralViolationError):
            analyze_hypnogram(stages)


# ============================================================================
# Test Two-Cycle Night
# ============================================================================


class TestTwoCycleNight:
    """A night with lights-on edges, mid-night wake and two cycles."""

    def test_cycles(self, two_cycle_night: list[SleepStage]) -> None:
        """Both cycles with their NREM and REM components."""
        result = analyze_hypnogram(two_cycle_night)
        first, second = result.cycles[1], result.cycles[2]

        assert result.cycles.count == 2
        assert (first.start_epoch, first.end_epoch) == (10, 81)
        assert (first.nrem_minutes, first.rem_minutes) == (30.0, 6.0)
        assert (second.start_epoch, second.end_epoch) == (86, 145)
        assert (second.nrem_minutes, second.rem_minutes) == (20.0, 10.0)
        assert result.cycles.mean_minutes == pytest.approx(33.0)
        check_night_invariants(result)

    def test_summary(self, two_cycle_night: list[SleepStage]) -> None:
        """Landmark-based statistics."""
        summary = analyze_hypnogram(two_cycle_night).summary

        assert summary.time_in_bed == 77.0
        assert summary.total_recording_time == 75.0
        assert summary.total_sleep_time == 68.0
        assert summary.total_wake_time == 7.0
        assert summary.final_wake_time == 3.0
        assert summary.waso == 1.0
        assert summary.sleep_latency == 3.0
        assert summary.persistent_sleep_latency == 3.0
        assert summary.rem_latency == 31.0
        assert summary.sleep_period_time == 72.0
        assert summary.total_persistent_sleep_time == 48.0
        assert summary.pct_n2 == pytest.approx(40 / 68)

    def test_waso_and_states(self, two_cycle_night: list[SleepStage]) -> None:
        """Mid-night wake is WASO; lights-on edges are Prior and After."""
        result = analyze_hypnogram(two_cycle_night)

        assert np.flatnonzero(result.waso).tolist() == [82, 83]
        assert str(result.segmentation.sleep_state[0]) == "Prior"
        assert str(result.segmentation.sleep_state[-1]) == "After"

    def test_transition_matrix(self, two_cycle_night: list[SleepStage]) -> None:
        """Three-class counts skip pairs touching lights on."""
        matrix = analyze_hypnogram(two_cycle_night).transitions.matrix

        assert matrix.total == 149
        assert matrix.count("W", "W") == 11
        assert matrix.count("W", "NR") == 2
        assert matrix.count("NR", "NR") == 102
        assert matrix.count("NR", "R") == 2
        assert matrix.count("R", "R") == 30
        assert matrix.count("R", "W") == 2
        assert matrix.probability_post_given_pre("NR", "R") == pytest.approx(2 / 104)


# ============================================================================
# Test Whole-Night Properties
# ============================================================================


class TestNightProperties:
    """Invariants over varied nights."""

    @pytest.mark.parametrize(
        "runs",
        [
            (("W", 10), ("N1", 4), ("N2", 50), ("N3", 30), ("R", 6), ("N2", 40), ("R", 25), ("W", 10)),
            (("?", 3), ("W", 20), ("N2", 35), ("?", 2), ("N2", 10), ("W", 40), ("N2", 60), ("R", 15), ("?", 3)),
            (("L", 5), ("N1", 2), ("N2", 3), ("W", 3), ("N2", 80), ("R", 2), ("N2", 45), ("R", 30), ("L", 1)),
            (("N2", 200),),
        ],
    )
    def test_invariants_hold(self, make_stages, runs) -> None:
        """Summary, cycle and per-epoch invariants hold."""
        check_night_invariants(analyze_hypnogram(make_stages(*runs)))

    def test_deterministic(self, two_cycle_night: list[SleepStage]) -> None:
        """Two runs on the same input give identical results."""
        analyzer = HypnogramAnalyzer()
        first = analyzer.analyze(two_cycle_night).epochs_dataframe()
        second = analyzer.analyze(two_cycle_night).epochs_dataframe()

        assert first.equals(second)
