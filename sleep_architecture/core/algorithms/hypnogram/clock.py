"""
Clock-time landmarks of a night.

Converts epoch landmarks into wall-clock times using the recording start
time. A missing or unparsable start time is not an error: the landmarks are
flagged invalid instead.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING

from sleep_architecture.core.dataclasses_hypnogram import ClockTimes

if TYPE_CHECKING:
    from sleep_architecture.core.dataclasses_hypnogram import RecordingBoundaries

logger = logging.getLogger(__name__)

# Time-only starts are anchored to this date so arithmetic can cross midnight
REFERENCE_DATE = date(1900, 1, 1)

# EDF headers write hh.mm.ss
_TIME_FORMATS = ("%H:%M:%S", "%H.%M.%S", "%H:%M")


def parse_start_time(value: datetime | time | str | None) -> datetime | None:
    """
    Interpret a recording start time.

    Args:
        value: datetime, time of day, ISO-8601 string or HH:MM[:SS] / hh.mm.ss string

    Returns:
        datetime, or None if value is missing or cannot be parsed

    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, time):
        return datetime.combine(REFERENCE_DATE, value)
    if not isinstance(value, str) or not value.strip():
        logger.warning("Ignoring invalid recording start time: %r", value)
        return None

    text = value.strip()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.combine(REFERENCE_DATE, datetime.strptime(text, fmt).time())
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Ignoring invalid recording start time: %r", value)
        return None


def compute_clock_times(
    start_time: datetime | time | str | None,
    boundaries: RecordingBoundaries,
    epoch_seconds: float,
) -> ClockTimes:
    """
    Place lights out/on, sleep onset, final wake and sleep midpoint on the clock.

    Each landmark is the start time advanced by its epoch index times the
    epoch duration. The sleep midpoint is halfway between sleep onset and
    final wake.
    """
    start = parse_start_time(start_time)
    if start is None:
        return ClockTimes(valid=False)

    def at_epoch(epoch: int) -> datetime:
        return start + timedelta(seconds=epoch * epoch_seconds)

    sleep_onset = final_wake = sleep_midpoint = None
    if boundaries.any_sleep:
        sleep_onset = at_epoch(boundaries.first_sleep_epoch)
        final_wake = at_epoch(boundaries.final_wake_epoch)
        sleep_midpoint = sleep_onset + (final_wake - sleep_onset) / 2

    return ClockTimes(
        valid=True,
        start=start,
        lights_out=at_epoch(boundaries.lights_out_epoch),
        sleep_onset=sleep_onset,
        sleep_midpoint=sleep_midpoint,
        final_wake=final_wake,
        lights_on=at_epoch(boundaries.lights_on_epoch),
    )
