"""
Constants for sleep architecture analysis.

The constants are organized into domain-specific modules:
- stages: Stage labels, three-class collapse, label aliases, numeric codes
- cycles: Sleep state, period, sleep code and transition direction labels
- columns: Column names for the tabular result views

All constants are re-exported from this __init__.py:

    from sleep_architecture.core.constants import SleepStage, EpochColumn
"""

from .columns import CycleColumn, EpochColumn, TransitionColumn
from .cycles import PeriodType, SleepCode, SleepState, TransitionDirection
from .stages import (
    FULL_TRANSITION_STAGES,
    STAGE_LABEL_ALIASES,
    STAGE_NUMERIC_CODES,
    THREE_CLASS_TRANSITION_STAGES,
    SleepStage,
    StageClass,
)

__all__ = [
    "FULL_TRANSITION_STAGES",
    "STAGE_LABEL_ALIASES",
    "STAGE_NUMERIC_CODES",
    "THREE_CLASS_TRANSITION_STAGES",
    "CycleColumn",
    "EpochColumn",
    "PeriodType",
    "SleepCode",
    "SleepStage",
    "SleepState",
    "StageClass",
    "TransitionColumn",
    "TransitionDirection",
]
