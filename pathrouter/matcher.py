"""A trie of path patterns and the backtracking search that matches URLs."""

from __future__ import annotations

from dataclasses import dataclass, field

from .encode import MAX_PATH_SEGMENTS, MatchType
from .matching_context import MatchingContext
from .pattern import GREEDY_PATTERN_MAX_MATCHABLE_SEGMENTS, Pattern, PatternError, Segment

_ANY_VALUE_TYPES = (
    MatchType.CAPTURE_VAR,
    MatchType.SINGLE_SEGMENT,
    MatchType.MULTIPLE_SEGMENTS,
)


class DuplicatePatternError(PatternError):
    """Raised when a pattern that is already registered is added again."""


@dataclass(eq=False)
class _Node:
    segment: Segment | None = None
    parent: _Node | None = None
    priority: int = 0
    max_matchable_segments: int = 0
    pattern: Pattern | None = None
    children: list[_Node] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.pattern is not None

    def can_match_path_with_length(self, url_path_len: int) -> bool:
        return url_path_len <= self.max_matchable_segments

    def __str__(self) -> str:
        return "/" if self.segment is None else self.segment.val


def _sorts_before(left: _Node, right: _Node) -> bool:
    if left.priority == right.priority:
        return left.segment.val <= right.segment.val
    return left.priority < right.priority


def _insertion_sort(children: list[_Node]) -> None:
    for i in range(1, len(children)):
        j = i
        while j > 0 and _sorts_before(children[j], children[j - 1]):
            children[j], children[j - 1] = children[j - 1], children[j]
            j -= 1


class Matcher:
    """Holds the patterns registered for one HTTP method and matches URLs."""

    def __init__(self, case_insensitive: bool = False) -> None:
        self.case_insensitive = case_insensitive
        self.root_pattern: Pattern | None = None
        self.trie_root = _Node()

    def _same_value(self, child: Segment, segment: Segment) -> bool:
        if child.match_type in _ANY_VALUE_TYPES:
            return True
        if child.match_type == MatchType.CONSTRAINT_CAPTURE_VAR:
            regex = segment.capture_var_pattern
            return regex is not None and regex.pattern == child.val
        if self.case_insensitive:
            return segment.val.casefold() == child.val.casefold()
        return segment.val == child.val

    def add_pattern(self, pattern: Pattern) -> None:
        """Register a pattern; raise DuplicatePatternError if it is already there."""
        if not pattern.segments:
            if self.root_pattern is not None:
                raise DuplicatePatternError("duplicated pattern detected: '/'")
            self.root_pattern = pattern
            return

        inserted = False
        current = self.trie_root
        last_index = len(pattern.segments) - 1
        for segment_index, segment in enumerate(pattern.segments):
            if pattern.is_greedy():
                max_matchable = GREEDY_PATTERN_MAX_MATCHABLE_SEGMENTS
            else:
                max_matchable = pattern.max_matchable_segments - segment_index

            found = next(
                (
                    child
                    for child in current.children
                    if child.segment.match_type == segment.match_type
                    and self._same_value(child.segment, segment)
                ),
                None,
            )

            if found is None:
                new_node = _Node(
                    segment=segment,
                    parent=current,
                    priority=pattern.priority,
                    max_matchable_segments=max_matchable,
                )
                if segment_index == last_index:
                    new_node.pattern = pattern
                current.children.append(new_node)
                _insertion_sort(current.children)
                current = new_node
                inserted = True
            else:
                found.max_matchable_segments = max(found.max_matchable_segments, max_matchable)
                current = found
                if segment_index == last_index:
                    if current.is_leaf:
                        raise DuplicatePatternError(
                            f"duplicated pattern detected: '{pattern}'"
                        )
                    current.pattern = pattern
                    inserted = True

        if not inserted and current.is_leaf:
            raise DuplicatePatternError(f"duplicated pattern detected: '{pattern}'")

    def match(self, url_path: str, mc: MatchingContext) -> Pattern | None:
        """Find the pattern for the segments in ``mc``; record match types there."""
        segments = mc.path_segments
        url_len = len(segments)
        if url_len > MAX_PATH_SEGMENTS:
            return None
        if url_len == 0 and self.root_pattern is not None:
            return self.root_pattern

        depth = 0
        # depth -> (first child to try, URL segment index to resume from)
        node_stack: dict[int, tuple[int, int]] = {}
        type_stack = [MatchType.UNKNOWN] * MAX_PATH_SEGMENTS
        current = self.trie_root
        index = 0
        while index < url_len:
            matched = False
            url_segment = segments[index]
            if type_stack[index]:
                url_segment.match_type = type_stack[index]

            start = node_stack.get(depth, (0, 0))[0]
            for ci, child in enumerate(current.children[start:], start):
                if not child.can_match_path_with_length(url_len - index):
                    continue
                match_type = child.segment.match_url_path_segment(
                    url_path, url_segment, self.case_insensitive
                )
                if match_type == MatchType.MULTIPLE_SEGMENTS:
                    greedy_children = child.children
                    if not greedy_children and child.is_leaf:
                        for rest in segments[index:]:
                            rest.match_type = MatchType.MULTIPLE_SEGMENTS
                        mc.matched_pattern = child.pattern
                        return child.pattern
                    while index < url_len:
                        greedy_segment = segments[index]
                        greedy_segment.match_type = MatchType.MULTIPLE_SEGMENTS
                        if any(
                            g.segment.match_url_path_segment(
                                url_path, greedy_segment, self.case_insensitive
                            )
                            != MatchType.UNKNOWN
                            for g in greedy_children
                        ):
                            node_stack[depth] = (ci, index + 1)
                            type_stack[index] = MatchType.MULTIPLE_SEGMENTS
                            matched = True
                            depth += 1
                            # stay on this URL segment: it is advanced below
                            index -= 1
                            current = child
                            break
                        index += 1
                    else:
                        return None
                    break
                if match_type != MatchType.UNKNOWN:
                    url_segment.match_type = match_type
                    if index == url_len - 1:
                        if child.is_leaf:
                            mc.matched_pattern = child.pattern
                            return child.pattern
                        break
                    matched = True
                    node_stack[depth] = (ci + 1, index)
                    depth += 1
                    current = child
                    break

            if matched:
                if index == url_len - 1 and current.is_leaf:
                    mc.matched_pattern = current.pattern
                    return current.pattern
                index += 1
            elif current.parent is not None:
                type_stack[index] = MatchType.UNKNOWN
                node_stack.pop(depth, None)
                depth -= 1
                index = node_stack.get(depth, (0, 0))[1]
                current = current.parent
            else:
                break
        return None