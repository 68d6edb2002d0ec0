"""
Configuration dataclasses for hypnogram analysis.

This module provides immutable configuration objects for the sleep cycle
and transition analysis. Thresholds are stated in minutes and converted
once per run to whole epochs for the recording's epoch duration.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from sleep_architecture.core.exceptions import ConfigurationError, ErrorCodes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EpochThresholds:
    """
    Minute thresholds resolved to whole epochs for one recording.

    Attributes:
        epoch_minutes: Duration of one epoch in minutes
        min_nrem_epochs: Minimum NREM epochs needed to open a cycle
        min_rem_epochs: Minimum REM epochs for a REM period after the first
        rem_interruption_epochs: Look-ahead for another REM epoch that keeps a REM period open
        terminating_waso_epochs: Look-ahead of W/N1 only that ends a cycle without REM
        persistent_sleep_epochs: Unbroken prior sleep needed for persistent sleep
        required_transition_epochs: Destination run length for a stable transition
        depth_window_epochs: Qualifying epochs counted per side by the depth score

    """

    epoch_minutes: float
    min_nrem_epochs: int
    min_rem_epochs: int
    rem_interruption_epochs: int
    terminating_waso_epochs: int
    persistent_sleep_epochs: int
    required_transition_epochs: int
    depth_window_epochs: int


@dataclass(frozen=True)
class HypnogramConfig:
    """
    Configuration for sleep cycle segmentation and epoch-level annotations.

    Cycle rules follow a modified Feinberg & Floyd (1979) definition: a cycle
    is a NREM period of at least min_nrem_minutes, ended either by the end of
    a REM period or by a bout of W/N1 lasting terminating_waso_minutes.

    Attributes:
        min_nrem_minutes: Minimum duration of a NREM period (default: 15)
        min_rem_minutes: Minimum REM period duration, cycle 2 onwards (default: 5)
        rem_interruption_minutes: Maximum NREM/W allowed inside one REM period (default: 15)
        terminating_waso_minutes: W/N1 bout that terminates a NREM period when REM is skipped (default: 15)
        persistent_sleep_minutes: Prior unbroken sleep that defines persistent sleep (default: 10)
        required_transition_epochs: Epochs the destination stage must hold for a transition (default: 4)
        collapse_deep_nrem: Merge N4 into N3 (default: True)
        flanking_use_three_class: Compare stages as NREM/REM/W for flanking and transitions (default: True)
        depth_window_epochs: Non-N2 epochs counted on each side by the N2 depth score (default: 10)

    """

    min_nrem_minutes: float = 15.0
    min_rem_minutes: float = 5.0
    rem_interruption_minutes: float = 15.0
    terminating_waso_minutes: float = 15.0
    persistent_sleep_minutes: float = 10.0
    required_transition_epochs: int = 4
    collapse_deep_nrem: bool = True
    flanking_use_three_class: bool = True
    depth_window_epochs: int = 10

    def __post_init__(self) -> None:
        for name in _MINUTE_FIELDS:
            value = getattr(self, name)
            if value < 0:
                msg = f"{name} must be non-negative, got {value}"
                raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID, {name: value})
        if self.required_transition_epochs < 1:
            msg = f"required_transition_epochs must be at least 1, got {self.required_transition_epochs}"
            raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID)
        if self.depth_window_epochs < 1:
            msg = f"depth_window_epochs must be at least 1, got {self.depth_window_epochs}"
            raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID)

    def to_epochs(self, epoch_seconds: float) -> EpochThresholds:
        """
        Resolve minute thresholds to whole epochs.

        Args:
            epoch_seconds: Epoch duration in seconds

        Returns:
            EpochThresholds with each threshold truncated to whole epochs

        Raises:
            ConfigurationError: If epoch_seconds is not positive

        """
        if epoch_seconds <= 0:
            msg = f"epoch duration must be positive, got {epoch_seconds} seconds"
            raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID)

        epoch_minutes = epoch_seconds / 60.0
        resolved = {name: int(getattr(self, name) / epoch_minutes) for name in _MINUTE_FIELDS}

        for name, epochs in resolved.items():
            if epochs == 0 and getattr(self, name) > 0:
                logger.warning(
                    "%s=%.2f is shorter than one %.0f-second epoch; the rule will use 0 epochs",
                    name,
                    getattr(self, name),
                    epoch_seconds,
                )

        return EpochThresholds(
            epoch_minutes=epoch_minutes,
            min_nrem_epochs=resolved["min_nrem_minutes"],
            min_rem_epochs=resolved["min_rem_minutes"],
            rem_interruption_epochs=resolved["rem_interruption_minutes"],
            terminating_waso_epochs=resolved["terminating_waso_minutes"],
            persistent_sleep_epochs=resolved["persistent_sleep_minutes"],
            required_transition_epochs=self.required_transition_epochs,
            depth_window_epochs=self.depth_window_epochs,
        )

    def get_parameters(self) -> dict[str, Any]:
        """Get current parameters as a plain dictionary."""
        return asdict(self)

    def with_parameters(self, **kwargs: Any) -> HypnogramConfig:
        """
        Return a copy with some parameters changed.

        Raises:
            ConfigurationError: If a parameter name is invalid

        """
        invalid_params = set(kwargs) - _FIELD_NAMES
        if invalid_params:
            msg = f"Invalid parameters: {sorted(invalid_params)}. Valid: {sorted(_FIELD_NAMES)}"
            raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID)
        return replace(self, **kwargs)

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> HypnogramConfig:
        """Build a config from a parameter dictionary, defaults filling the gaps."""
        return DEFAULT_HYPNOGRAM_CONFIG.with_parameters(**params)


_MINUTE_FIELDS = (
    "min_nrem_minutes",
    "min_rem_minutes",
    "rem_interruption_minutes",
    "terminating_waso_minutes",
    "persistent_sleep_minutes",
)

_FIELD_NAMES = frozenset(f.name for f in fields(HypnogramConfig))


# Preset configs
DEFAULT_HYPNOGRAM_CONFIG = HypnogramConfig()

FULL_STAGE_HYPNOGRAM_CONFIG = HypnogramConfig(
    collapse_deep_nrem=False,
    flanking_use_three_class=False,
)
