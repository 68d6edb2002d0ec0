"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from sleep_architecture.core.exceptions import (
    ConfigurationError,
    ErrorCodes,
    HypnogramError,
    LengthMismatchError,
    SleepArchitectureError,
    StructuralViolationError,
    ValidationError,
)


class TestSleepArchitectureError:
    """Tests for the base exception."""

    def test_str_includes_error_code(self) -> None:
        """Error code is shown in brackets before the message."""
        error = SleepArchitectureError("bad input", ErrorCodes.INVALID_INPUT)

        assert str(error) == "[INVALID_INPUT] bad input"

    def test_str_without_error_code(self) -> None:
        """Message alone when no error code is given."""
        assert str(SleepArchitectureError("bad input")) == "bad input"

    def test_context_defaults_to_empty(self) -> None:
        """Context is an empty dict when omitted."""
        assert SleepArchitectureError("x").context == {}

    @pytest.mark.parametrize(
        "error_class",
        [ValidationError, ConfigurationError, HypnogramError, StructuralViolationError],
    )
    def test_subclasses(self, error_class: type[SleepArchitectureError]) -> None:
        """Every error derives from SleepArchitectureError."""
        assert issubclass(error_class, SleepArchitectureError)

    def test_structural_violation_is_hypnogram_error(self) -> None:
        """Structural violations are fatal hypnogram errors."""
        assert issubclass(StructuralViolationError, HypnogramError)


class TestLengthMismatchError:
    """Tests for LengthMismatchError."""

    def test_message_and_attributes(self) -> None:
        """Reports both counts."""
        error = LengthMismatchError(expected=960, actual=958)

        assert error.expected == 960
        assert error.actual == 958
        assert error.error_code == ErrorCodes.STAGE_COUNT_MISMATCH
        assert error.context == {"expected": 960, "actual": 958}
        assert "958 but expecting 960" in str(error)

    def test_is_hypnogram_error(self) -> None:
        """Can be caught as a HypnogramError."""
        with pytest.raises(HypnogramError):
            raise LengthMismatchError(10, 9)
