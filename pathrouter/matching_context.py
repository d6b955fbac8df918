"""URL path segmentation and the per-request matching context."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from itertools import islice
from typing import Any

from .encode import MAX_PATH_SEGMENTS, MatchType

_CAPTURE_TYPES = (MatchType.CAPTURE_VAR, MatchType.CONSTRAINT_CAPTURE_VAR)
_SEGMENT_RUN = re.compile(r"[^/]+")


@dataclass
class CaptureVar:
    """A named path variable and its captured value."""

    name: str
    value: str

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


@dataclass
class UrlSegment:
    """One URL path segment, as a slice of the path, and how it was matched."""

    start_index: int = 0
    end_index: int = 0
    match_type: MatchType = MatchType.UNKNOWN

    def reset(self) -> None:
        """Clear the slice bounds and the match type."""
        self.start_index = 0
        self.end_index = 0
        self.match_type = MatchType.UNKNOWN


@dataclass
class MatchingContext:
    """The request path, its segments and the pattern that matched them."""

    path: str = ""
    path_segments: list[UrlSegment] = field(default_factory=list)
    request: Any = None
    matched_pattern: Any = None

    def clone(self) -> MatchingContext:
        """Return a copy whose segments can be changed independently."""
        return dataclasses.replace(
            self,
            path_segments=[dataclasses.replace(s) for s in self.path_segments],
        )

    def path_var(self, name: str) -> str:
        """Return the value captured for ``name``, or "" if there is none."""
        pattern = self.matched_pattern
        if pattern is None or not pattern.capture_vars_len:
            return ""

        capture_index = 0
        for pattern_segment in pattern.segments:
            if pattern_segment.match_type in _CAPTURE_TYPES:
                if pattern_segment.capture_var_name == name:
                    break
                capture_index += 1
        else:
            return ""

        captured = (s for s in self.path_segments if s.match_type in _CAPTURE_TYPES)
        url_segment = next(islice(captured, capture_index, None), None)
        if url_segment is None:
            return ""
        return self.path[url_segment.start_index : url_segment.end_index]


def parse_url_path(url_path: str) -> list[UrlSegment]:
    """Split a decoded URL path into segments.

    Empty segments are skipped, ``..`` drops the previous segment, and a path
    with more than the maximum number of segments yields no segments at all.
    """
    if not url_path or url_path == "/":
        return []

    segments: list[UrlSegment] = []
    for run in _SEGMENT_RUN.finditer(url_path):
        if run.start() == 0:
            # text before the first slash is not a segment
            continue
        if run.group() == "..":
            if segments:
                segments.pop()
            continue
        if len(segments) >= MAX_PATH_SEGMENTS:
            return []
        segments.append(UrlSegment(run.start(), run.end()))
    return segments