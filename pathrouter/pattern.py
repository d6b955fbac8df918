"""Path pattern parsing and matching of single URL path segments."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .encode import MatchType, compute_priority
from .matching_context import UrlSegment

GREEDY_PATTERN_MAX_MATCHABLE_SEGMENTS = 255


class PatternError(ValueError):
    """Raised when a path pattern or one of its segments is invalid."""


@dataclass
class Segment:
    """One segment of a path pattern."""

    val: str
    match_type: MatchType
    capture_var_name: str = ""
    capture_var_pattern: re.Pattern[str] | None = None

    def match_url_path_segment(
        self, url_path: str, url_segment: UrlSegment, case_insensitive: bool
    ) -> MatchType:
        """Return how this segment matches the URL segment, or UNKNOWN."""
        match_type = self.match_type
        if match_type in (
            MatchType.SINGLE_SEGMENT,
            MatchType.CAPTURE_VAR,
            MatchType.MULTIPLE_SEGMENTS,
        ):
            return match_type

        value = url_path[url_segment.start_index : url_segment.end_index]
        if match_type == MatchType.LITERAL:
            if len(value) != len(self.val):
                return MatchType.UNKNOWN
            if case_insensitive:
                matched = value.casefold() == self.val.casefold()
            else:
                matched = value == self.val
            return MatchType.LITERAL if matched else MatchType.UNKNOWN
        if match_type == MatchType.CONSTRAINT_CAPTURE_VAR:
            if self.capture_var_pattern is not None and self.capture_var_pattern.search(value):
                return MatchType.CONSTRAINT_CAPTURE_VAR
            return MatchType.UNKNOWN
        if match_type == MatchType.REGEX:
            if regex_segment_match(value, self.val, case_insensitive):
                return MatchType.REGEX
            return MatchType.UNKNOWN
        return MatchType.UNKNOWN

    def __str__(self) -> str:
        return self.val


@dataclass(eq=False)
class Pattern:
    """A parsed path pattern with its priority and an optional attachment."""

    raw_value: str
    case_insensitive: bool = False
    capture_vars_len: int = 0
    max_matchable_segments: int = 0
    priority: int = 0
    segments: list[Segment] = field(default_factory=list)
    attachment: Any = None

    def high_priority_than(self, other: Pattern) -> bool:
        """Return True if this pattern should be tried before ``other``."""
        if self.priority == other.priority:
            return self.raw_value < other.raw_value
        return self.priority < other.priority

    def is_greedy(self) -> bool:
        """Return True if the pattern holds a ``**`` segment."""
        return self.max_matchable_segments == GREEDY_PATTERN_MAX_MATCHABLE_SEGMENTS

    def __str__(self) -> str:
        return self.raw_value


def _split_pattern(path_pattern: str) -> list[str]:
    parts = path_pattern[1:].split("/")
    if path_pattern.endswith("/"):
        parts.pop()
    return parts


def _build_segment(
    path_pattern: str, segment_val: str, match_type: MatchType, case_insensitive: bool
) -> Segment:
    segment = Segment(val=segment_val, match_type=match_type)
    if match_type == MatchType.CAPTURE_VAR:
        segment.capture_var_name = segment_val[1:-1]
    elif match_type == MatchType.CONSTRAINT_CAPTURE_VAR:
        colon = segment_val.index(":")
        regex_pattern = segment_val[colon + 1 : -1]
        if case_insensitive:
            regex_pattern = "(?i)" + regex_pattern
        try:
            compiled = re.compile(regex_pattern)
        except re.error as err:
            raise PatternError(
                f"invalid path pattern: [{path_pattern}], "
                f"failed to compile regex: [{regex_pattern}], err: {err}"
            ) from err
        segment.capture_var_name = segment_val[1:colon]
        segment.capture_var_pattern = compiled
    return segment


def parse_pattern(path_pattern: str, case_insensitive: bool = False) -> Pattern:
    """Parse a path pattern such as ``/users/{id:[0-9]+}/**``."""
    if not path_pattern.startswith("/"):
        raise PatternError("the path pattern should start with /")
    if path_pattern == "/":
        return Pattern(raw_value="/", case_insensitive=case_insensitive)

    segments: list[Segment] = []
    capture_vars_len = 0
    last_match_type = MatchType.UNKNOWN
    max_match_type = MatchType.UNKNOWN
    for segment_val in _split_pattern(path_pattern):
        try:
            validate_path_segment(segment_val)
        except PatternError as err:
            raise PatternError(
                f"invalid path pattern: [{path_pattern}], "
                f"failed path segment validation: [{segment_val}], err: {err}"
            ) from err

        match_type = determine_match_type_for_segment(segment_val)
        if (
            last_match_type == MatchType.MULTIPLE_SEGMENTS
            and match_type == MatchType.MULTIPLE_SEGMENTS
        ):
            raise PatternError(
                f"invalid path pattern: [{path_pattern}], "
                f"not allowed to have consecutive path segments with **: [{segment_val}]"
            )
        last_match_type = match_type
        max_match_type = max(max_match_type, match_type)
        if match_type in (MatchType.CAPTURE_VAR, MatchType.CONSTRAINT_CAPTURE_VAR):
            capture_vars_len += 1
        segments.append(_build_segment(path_pattern, segment_val, match_type, case_insensitive))

    if max_match_type == MatchType.MULTIPLE_SEGMENTS:
        max_matchable = GREEDY_PATTERN_MAX_MATCHABLE_SEGMENTS
    else:
        max_matchable = len(segments)
    return Pattern(
        raw_value=path_pattern,
        case_insensitive=case_insensitive,
        capture_vars_len=capture_vars_len,
        max_matchable_segments=max_matchable,
        priority=compute_priority(segments),
        segments=segments,
    )


def regex_segment_match(
    url_path_segment: str, pattern_segment: str, case_insensitive: bool
) -> bool:
    """Match a URL segment against a wildcard segment using ``?`` and ``*``."""
    url_len = len(url_path_segment)
    pattern_len = len(pattern_segment)
    if "*" not in pattern_segment and url_len != pattern_len:
        return False

    def chars_match(uc: str, pc: str) -> bool:
        if pc == "?":
            return True
        if case_insensitive:
            return uc.upper() == pc.upper()
        return uc == pc

    p_index = u_index = 0
    p_checkpoint = u_checkpoint = -1
    restore = False
    while True:
        if p_index == pattern_len and u_index == url_len:
            return True
        if p_index == pattern_len or u_index == url_len:
            restore = True
        if restore:
            if p_checkpoint == -1 or u_checkpoint == -1:
                return False
            p_index = p_checkpoint
            u_index = u_checkpoint + 1
            if u_index >= url_len:
                return False
        restore = False

        uc = url_path_segment[u_index]
        pc = pattern_segment[p_index]
        if pc == "?":
            p_index += 1
            u_index += 1
        elif pc == "*":
            # collapse a run of stars onto its last one
            next_non_star = next(
                (i for i in range(p_index + 1, pattern_len) if pattern_segment[i] != "*"),
                None,
            )
            if next_non_star is not None:
                p_index = next_non_star - 1
            if p_index == pattern_len - 1:
                return True
            p_checkpoint = u_checkpoint = -1
            pc = pattern_segment[p_index + 1]
            while u_index < url_len:
                if chars_match(url_path_segment[u_index], pc):
                    p_checkpoint, u_checkpoint = p_index, u_index
                    p_index += 1
                    break
                u_index += 1
        elif chars_match(uc, pc):
            p_index += 1
            u_index += 1
        else:
            restore = True


def determine_match_type_for_segment(path_segment: str) -> MatchType:
    """Classify a pattern segment by its syntax."""
    if path_segment == "*":
        return MatchType.SINGLE_SEGMENT
    if path_segment == "**":
        return MatchType.MULTIPLE_SEGMENTS
    if path_segment.startswith("{") and path_segment.endswith("}"):
        if ":" in path_segment:
            return MatchType.CONSTRAINT_CAPTURE_VAR
        return MatchType.CAPTURE_VAR
    if "?" in path_segment or "*" in path_segment:
        return MatchType.REGEX
    return MatchType.LITERAL


def validate_path_segment(path_segment: str) -> None:
    """Raise PatternError if the pattern segment is malformed."""
    if not path_segment:
        raise PatternError("empty path segment")
    opens = path_segment.startswith("{")
    closes = path_segment.endswith("}")
    if opens and not closes:
        raise PatternError("opened bracket without being closed")
    if closes and not opens:
        raise PatternError("closed bracket without being opened")
    if opens and closes:
        if len(path_segment) == 2:
            raise PatternError("empty capture variable name")
        last_inner = len(path_segment) - 2
        for pos, ch in enumerate(path_segment[1:-1], start=1):
            if ch != ":":
                continue
            if pos == 1:
                raise PatternError("empty capture variable name")
            if pos == last_inner:
                raise PatternError("empty capture regex constraint")

    if path_segment in ("*", "**"):
        return
    if "**" in path_segment:
        raise PatternError(
            "not allowed two or more consecutive asterix together with other characters"
        )