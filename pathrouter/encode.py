"""Match types and the priority encoding used to order path patterns."""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Protocol

MAX_PATH_SEGMENTS = 19

_UINT64_MASK = (1 << 64) - 1


class MatchType(IntEnum):
    """How a pattern segment matches a URL path segment; lower sorts first."""

    UNKNOWN = 0
    LITERAL = 1
    CONSTRAINT_CAPTURE_VAR = 2
    CAPTURE_VAR = 3
    REGEX = 4
    SINGLE_SEGMENT = 5
    MULTIPLE_SEGMENTS = 6


class _HasMatchType(Protocol):
    match_type: MatchType


def decimal_divider(zero_count: int) -> int:
    """Return 10 ** zero_count for 1..18 and 1 for anything else."""
    if 1 <= zero_count <= 18:
        return 10**zero_count
    return 1


def _split_index(number: int, divider_digits: int) -> int:
    split = 0
    divider = decimal_divider(divider_digits)
    while number > 0:
        if number % 10 == MatchType.MULTIPLE_SEGMENTS:
            break
        split += 1
        number //= divider
    return split + divider_digits


def _trunc_divmod(dividend: int, divisor: int) -> tuple[int, int]:
    quotient = abs(dividend) // divisor
    if dividend < 0:
        quotient = -quotient
    return quotient, dividend - quotient * divisor


def compute_priority(segments: Iterable[_HasMatchType]) -> int:
    """Encode the segment match types as a 19-digit number; smaller wins.

    Each segment contributes one decimal digit. Patterns shorter than the
    maximum are padded with zeros, or, if they hold ``**`` segments, the
    padding is spread over those segments as extra ``6`` digits.
    """
    match_types = [MatchType(segment.match_type) for segment in segments]
    priority = 0
    for match_type in match_types:
        priority = (priority * 10 + int(match_type)) & _UINT64_MASK
    greedy_count = match_types.count(MatchType.MULTIPLE_SEGMENTS)
    remaining = MAX_PATH_SEGMENTS - len(match_types)

    if greedy_count == 0:
        return (priority * decimal_divider(remaining)) & _UINT64_MASK

    per_segment, reminder = _trunc_divmod(remaining, greedy_count)
    divider_digits = 1
    for greedy_number in range(greedy_count):
        split = _split_index(priority, divider_digits)
        divider = decimal_divider(split)
        head, tail = divmod(priority, divider)
        digits_to_add = per_segment
        if greedy_number == greedy_count - 1:
            digits_to_add += reminder
        for _ in range(digits_to_add):
            head = head * 10 + int(MatchType.MULTIPLE_SEGMENTS)
        priority = (head * divider + tail) & _UINT64_MASK
        divider_digits = split + digits_to_add
    return priority