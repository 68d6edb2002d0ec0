"""
Stage classification predicates.

Pure functions that place a SleepStage into the coarse categories used by
every pass of the hypnogram analysis, plus label normalization.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sleep_architecture.core.constants import SleepStage, StageClass
from sleep_architecture.core.exceptions import ErrorCodes, ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_NREM = frozenset({SleepStage.NREM1, SleepStage.NREM2, SleepStage.NREM3, SleepStage.NREM4})
_NREM234 = frozenset({SleepStage.NREM2, SleepStage.NREM3, SleepStage.NREM4})
_DEEP_NREM = frozenset({SleepStage.NREM3, SleepStage.NREM4})
_LIGHT = frozenset({SleepStage.NREM1, SleepStage.REM, SleepStage.WAKE})


def is_sleep(stage: SleepStage) -> bool:
    return stage in _NREM or stage == SleepStage.REM


def is_wake(stage: SleepStage) -> bool:
    return stage == SleepStage.WAKE


def is_wake_or_lights(stage: SleepStage) -> bool:
    return stage in (SleepStage.WAKE, SleepStage.LIGHTS_ON)


def is_rem(stage: SleepStage) -> bool:
    return stage == SleepStage.REM


def is_nrem(stage: SleepStage) -> bool:
    return stage in _NREM


def is_nrem1(stage: SleepStage) -> bool:
    return stage == SleepStage.NREM1


def is_nrem234(stage: SleepStage) -> bool:
    return stage in _NREM234


def is_deep_nrem(stage: SleepStage) -> bool:
    return stage in _DEEP_NREM


def is_light_or_wake(stage: SleepStage) -> bool:
    """N1, REM or wake: the shallow side of the N2 depth score."""
    return stage in _LIGHT


def is_absent(stage: SleepStage) -> bool:
    """No usable stage: unknown/unscored/movement/artifact, or lights on."""
    return stage in (SleepStage.ABSENT, SleepStage.LIGHTS_ON)


def three_class(stage: SleepStage) -> StageClass | None:
    """Collapse a stage to NREM/REM/W, or None for lights-on and absent epochs."""
    if stage in _NREM:
        return StageClass.NREM
    if stage == SleepStage.REM:
        return StageClass.REM
    if stage == SleepStage.WAKE:
        return StageClass.WAKE
    return None


def same_three_class(a: SleepStage, b: SleepStage) -> bool:
    """True if both stages are identical or both are NREM of any depth."""
    if a == b:
        return True
    return a in _NREM and b in _NREM


def normalize_stages(labels: Iterable[str | SleepStage], collapse_deep_nrem: bool = True) -> list[SleepStage]:
    """
    Convert annotation labels to a list of SleepStage values.

    Args:
        labels: Stage labels (canonical, aliases, or SleepStage members)
        collapse_deep_nrem: Merge N4 into N3

    Returns:
        List of SleepStage, one per epoch

    Raises:
        ValidationError: If a label is neither a string nor a SleepStage

    """
    stages: list[SleepStage] = []
    unrecognized = 0

    for index, label in enumerate(labels):
        if not isinstance(label, str):
            msg = f"stage label at epoch {index} must be a string, got {type(label).__name__}"
            raise ValidationError(msg, ErrorCodes.INVALID_INPUT, {"epoch": index})

        stage = SleepStage.from_label(label)
        if stage == SleepStage.ABSENT and label.strip().lower() not in _ABSENT_LABELS:
            unrecognized += 1
        if collapse_deep_nrem and stage == SleepStage.NREM4:
            stage = SleepStage.NREM3
        stages.append(stage)

    if unrecognized:
        logger.warning("%d epoch(s) had unrecognized stage labels and were treated as unscored", unrecognized)

    return stages


_ABSENT_LABELS = frozenset({"?", "u", "unknown", "unscored", "m", "movement", "a", "artifact"})
