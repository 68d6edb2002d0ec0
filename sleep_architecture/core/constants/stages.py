"""
Sleep stage constants for hypnogram analysis.

Contains the stage label enum, the three-class collapse used by the
flanking/transition analysis, label aliases accepted from upstream
annotation readers, and the numeric stage coding used for plotting.
"""

from enum import StrEnum


class SleepStage(StrEnum):
    """
    Per-epoch sleep stage label.

    Values are the canonical short labels written by staging tools.
    ABSENT covers every epoch without a usable stage (unknown, unscored,
    movement, artifact); the analysis treats all of these identically.
    """

    WAKE = "W"
    NREM1 = "N1"
    NREM2 = "N2"
    NREM3 = "N3"
    NREM4 = "N4"
    REM = "R"
    LIGHTS_ON = "L"
    ABSENT = "?"

    @classmethod
    def from_label(cls, label: "str | SleepStage") -> "SleepStage":
        """
        Map an annotation label to a stage.

        Canonical labels and the aliases in STAGE_LABEL_ALIASES are matched
        case-insensitively; anything else is ABSENT.
        """
        if isinstance(label, SleepStage):
            return label
        key = str(label).strip().lower()
        return STAGE_LABEL_ALIASES.get(key, cls.ABSENT)


class StageClass(StrEnum):
    """Three-class collapse: all NREM depths merged into one class."""

    NREM = "NR"
    REM = "R"
    WAKE = "W"


# Lower-cased label -> stage
STAGE_LABEL_ALIASES: dict[str, SleepStage] = {
    "w": SleepStage.WAKE,
    "wake": SleepStage.WAKE,
    "n1": SleepStage.NREM1,
    "nrem1": SleepStage.NREM1,
    "s1": SleepStage.NREM1,
    "n2": SleepStage.NREM2,
    "nrem2": SleepStage.NREM2,
    "s2": SleepStage.NREM2,
    "n3": SleepStage.NREM3,
    "nrem3": SleepStage.NREM3,
    "s3": SleepStage.NREM3,
    "n4": SleepStage.NREM4,
    "nrem4": SleepStage.NREM4,
    "s4": SleepStage.NREM4,
    "r": SleepStage.REM,
    "rem": SleepStage.REM,
    "l": SleepStage.LIGHTS_ON,
    "lights": SleepStage.LIGHTS_ON,
    "lights_on": SleepStage.LIGHTS_ON,
    "?": SleepStage.ABSENT,
    "u": SleepStage.ABSENT,
    "unknown": SleepStage.ABSENT,
    "unscored": SleepStage.ABSENT,
    "m": SleepStage.ABSENT,
    "movement": SleepStage.ABSENT,
    "a": SleepStage.ABSENT,
    "artifact": SleepStage.ABSENT,
}

# Numeric coding for hypnogram plots (wake on top, deepest NREM at the bottom)
STAGE_NUMERIC_CODES: dict[SleepStage, int] = {
    SleepStage.WAKE: 1,
    SleepStage.REM: 0,
    SleepStage.NREM1: -1,
    SleepStage.NREM2: -2,
    SleepStage.NREM3: -3,
    SleepStage.NREM4: -4,
    SleepStage.LIGHTS_ON: 2,
    SleepStage.ABSENT: 2,
}

# Stages reported in the full-resolution transition matrix, in output order
FULL_TRANSITION_STAGES: tuple[SleepStage, ...] = (
    SleepStage.NREM1,
    SleepStage.NREM2,
    SleepStage.NREM3,
    SleepStage.NREM4,
    SleepStage.REM,
    SleepStage.WAKE,
)

THREE_CLASS_TRANSITION_STAGES: tuple[StageClass, ...] = (
    StageClass.NREM,
    StageClass.REM,
    StageClass.WAKE,
)
