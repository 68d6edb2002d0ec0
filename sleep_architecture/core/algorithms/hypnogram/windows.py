"""
Bounded look-ahead and look-behind helpers shared by the analysis passes.

Every window is clipped to the sequence: a window starting at ``start``
with ``length`` epochs covers ``[start, min(start + length, n))``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

T = TypeVar("T")


def first_match_within_window(
    values: Sequence[T],
    predicate: Callable[[T], bool],
    start: int,
    length: int,
) -> int | None:
    """
    Find the first index in a clipped forward window whose value matches.

    Args:
        values: Per-epoch values
        predicate: Test applied to each value
        start: First index of the window
        length: Number of epochs in the window before clipping

    Returns:
        Index of the first match, or None

    """
    stop = min(start + length, len(values))
    for index in range(max(start, 0), stop):
        if predicate(values[index]):
            return index
    return None


def any_within_window(values: Sequence[T], predicate: Callable[[T], bool], start: int, length: int) -> bool:
    return first_match_within_window(values, predicate, start, length) is not None


def count_within_window(values: Sequence[T], predicate: Callable[[T], bool], start: int, length: int) -> int:
    stop = min(start + length, len(values))
    return sum(1 for index in range(max(start, 0), stop) if predicate(values[index]))


def all_within_bounds(values: Sequence[T], predicate: Callable[[T], bool], start: int, length: int) -> bool:
    """
    True if every epoch of ``[start, start + length)`` exists and matches.

    Unlike the clipped helpers, a window that runs off either end of the
    sequence fails.
    """
    if start < 0 or start + length > len(values):
        return False
    return all(predicate(values[index]) for index in range(start, start + length))


def run_length_forward(values: Sequence[T], predicate: Callable[[T], bool], start: int) -> int:
    """Number of consecutive matching epochs beginning at ``start``."""
    count = 0
    for index in range(start, len(values)):
        if not predicate(values[index]):
            break
        count += 1
    return count


def run_length_backward(values: Sequence[T], predicate: Callable[[T], bool], start: int) -> int:
    """Number of consecutive matching epochs ending at ``start``, scanning backwards."""
    count = 0
    for index in range(start, -1, -1):
        if not predicate(values[index]):
            break
        count += 1
    return count
