#!/usr/bin/env python3
"""
Custom Exception Classes for Sleep Architecture Analysis
Provides structured error handling with specific exception types.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class SleepArchitectureError(Exception):
    """Base exception for all sleep architecture errors."""

    def __init__(self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ValidationError(SleepArchitectureError):
    """Raised when input validation fails."""


class ConfigurationError(SleepArchitectureError):
    """Raised when configuration is invalid."""


class HypnogramError(SleepArchitectureError):
    """Base class for fatal errors raised while analyzing a hypnogram."""


class StructuralViolationError(HypnogramError):
    """
    Raised when lights-on epochs are not confined to the recording edges.

    A hypnogram may carry at most one contiguous lights-on block at the
    start and one at the end. The offending epoch index is available as
    ``context["epoch"]``.
    """


class LengthMismatchError(HypnogramError):
    """Raised when the stage sequence length differs from the expected epoch count."""

    def __init__(self, expected: int, actual: int) -> None:
        msg = f"bad number of stages, {actual} but expecting {expected}"
        super().__init__(msg, ErrorCodes.STAGE_COUNT_MISMATCH, {"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual


# Error codes for specific error types
class ErrorCodes(StrEnum):
    """Standardized error codes."""

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    MISSING_REQUIRED = "MISSING_REQUIRED"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"

    # Hypnogram structure errors
    LIGHTS_ON_STRUCTURE = "LIGHTS_ON_STRUCTURE"
    STAGE_COUNT_MISMATCH = "STAGE_COUNT_MISMATCH"
