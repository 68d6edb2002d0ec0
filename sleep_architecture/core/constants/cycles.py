"""
Sleep cycle and transition constants.

Labels produced by the cycle segmentation passes and the directional
transition analysis.
"""

from enum import IntEnum, StrEnum


class SleepState(StrEnum):
    """Position of an epoch relative to persistent sleep."""

    PRIOR = "Prior"  # Lights on before any persistent sleep
    LPS = "LPS"  # Latency to persistent sleep
    LPO = "LPO"  # Onset epoch of persistent sleep
    SPT = "SPT"  # Sleep period time
    AFTER = "After"  # Lights on after sleep


class PeriodType(StrEnum):
    """NREM/REM period an epoch belongs to, before cycle rules are applied."""

    NONE = ""
    NREM = "NREM"
    REM = "REM"


class SleepCode(IntEnum):
    """Per-epoch sleep code used for cycle numbering."""

    EXCLUDED = 0
    NREM = 1
    REM = 5

    @property
    def period_label(self) -> str:
        """Label used in epoch-level output."""
        labels = {SleepCode.NREM: "NREMP", SleepCode.REM: "REMP"}
        return labels.get(self, ".")


class TransitionDirection(StrEnum):
    """Ordered pair of three-class states for directional transition distances."""

    NREM_TO_REM = "NR2R"
    NREM_TO_WAKE = "NR2W"
    REM_TO_NREM = "R2NR"
    REM_TO_WAKE = "R2W"
    WAKE_TO_NREM = "W2NR"
    WAKE_TO_REM = "W2R"
