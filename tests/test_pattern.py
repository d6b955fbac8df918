import re

import pytest

from pathrouter.encode import MatchType
from pathrouter.matching_context import UrlSegment
from pathrouter.pattern import (
    Pattern,
    PatternError,
    Segment,
    determine_match_type_for_segment,
    parse_pattern,
    regex_segment_match,
    validate_path_segment,
)


def _segments(pattern):
    return [(s.val, int(s.match_type), s.capture_var_name) for s in pattern.segments]


@pytest.mark.parametrize(
    "path_pattern",
    ["/**/**", "/**/a/**/**/b", "abc/", "//", "/abc///cde////", ""],
)
def test_parse_pattern_errors(path_pattern):
    with pytest.raises(PatternError):
        parse_pattern(path_pattern, False)


@pytest.mark.parametrize(
    "path_pattern, capture_len, max_matchable, priority, segments",
    [
        (
            "/abc/{id}",
            1,
            2,
            1300000000000000000,
            [("abc", 1, ""), ("{id}", 3, "id")],
        ),
        (
            "/abc/{id:\\d}",
            1,
            2,
            1200000000000000000,
            [("abc", 1, ""), ("{id:\\d}", 2, "id")],
        ),
        ("/", 0, 0, 0, []),
        ("/a/*", 0, 2, 1500000000000000000, [("a", 1, ""), ("*", 5, "")]),
        (
            "/a/*/b/{q}/{y:[a-z]+}/?as*/d/e/f/g/{t}/i/j/k/l/m/n/o/{w:[a-z]+}",
            4,
            19,
            1513241111311111112,
            [
                ("a", 1, ""),
                ("*", 5, ""),
                ("b", 1, ""),
                ("{q}", 3, "q"),
                ("{y:[a-z]+}", 2, "y"),
                ("?as*", 4, ""),
                ("d", 1, ""),
                ("e", 1, ""),
                ("f", 1, ""),
                ("g", 1, ""),
                ("{t}", 3, "t"),
                ("i", 1, ""),
                ("j", 1, ""),
                ("k", 1, ""),
                ("l", 1, ""),
                ("m", 1, ""),
                ("n", 1, ""),
                ("o", 1, ""),
                ("{w:[a-z]+}", 2, "w"),
            ],
        ),
        ("/**/a", 0, 255, 6666666666666666661, [("**", 6, ""), ("a", 1, "")]),
        ("/a/**", 0, 255, 1666666666666666666, [("a", 1, ""), ("**", 6, "")]),
        (
            "/a/**/b",
            0,
            255,
            1666666666666666661,
            [("a", 1, ""), ("**", 6, ""), ("b", 1, "")],
        ),
        (
            "/a/**/b/**/c/**/d/**/e/**/f/g/h",
            0,
            255,
            1666166166166166111,
            [
                ("a", 1, ""),
                ("**", 6, ""),
                ("b", 1, ""),
                ("**", 6, ""),
                ("c", 1, ""),
                ("**", 6, ""),
                ("d", 1, ""),
                ("**", 6, ""),
                ("e", 1, ""),
                ("**", 6, ""),
                ("f", 1, ""),
                ("g", 1, ""),
                ("h", 1, ""),
            ],
        ),
    ],
)
def test_parse_pattern(path_pattern, capture_len, max_matchable, priority, segments):
    p = parse_pattern(path_pattern, False)
    assert p.raw_value == path_pattern
    assert p.case_insensitive is False
    assert p.capture_vars_len == capture_len
    assert p.max_matchable_segments == max_matchable
    assert p.priority == priority
    assert _segments(p) == segments


def test_parse_pattern_trailing_slash_is_ignored():
    p = parse_pattern("/a/b/c/", False)
    assert _segments(p) == [("a", 1, ""), ("b", 1, ""), ("c", 1, "")]
    assert p.max_matchable_segments == 3


def test_parse_pattern_invalid_regex():
    with pytest.raises(PatternError):
        parse_pattern("/a/{id:[a-}", False)


def test_parse_pattern_case_insensitive_constraint():
    p = parse_pattern("/a/{id:[a-z]+}", True)
    assert p.case_insensitive is True
    seg = p.segments[1]
    path = "/a/ABC"
    assert seg.match_url_path_segment(path, UrlSegment(3, 6), True) == MatchType.CONSTRAINT_CAPTURE_VAR


def test_pattern_greedy_and_str():
    assert parse_pattern("/a/**", False).is_greedy() is True
    assert parse_pattern("/a/*", False).is_greedy() is False
    assert str(parse_pattern("/x/{y}", False)) == "/x/{y}"


def test_high_priority_than():
    literal = parse_pattern("/a/b", False)
    capture = parse_pattern("/a/{b}", False)
    assert literal.high_priority_than(capture) is True
    assert capture.high_priority_than(literal) is False
    first = parse_pattern("/a/b", False)
    second = parse_pattern("/a/c", False)
    assert first.high_priority_than(second) is True
    assert second.high_priority_than(first) is False


@pytest.mark.parametrize(
    "segment, want_err",
    [
        ("", True),
        ("a", False),
        ("a}", True),
        ("{c", True),
        ("{}", True),
        ("{:[a-z]+}", True),
        ("{a:}", True),
        ("{:}", True),
        ("***", True),
        ("**abc", True),
        ("abc**def", True),
        ("bla**", True),
        ("{abc}", False),
        ("{abc:[a-z]+}", False),
        ("{abc:[a-z]{3}}", False),
        ("?asd", False),
        ("*asd", False),
        ("a*sd", False),
        ("asd*", False),
        ("*", False),
        ("**", False),
    ],
)
def test_validate_path_segment(segment, want_err):
    if want_err:
        with pytest.raises(PatternError):
            validate_path_segment(segment)
    else:
        assert validate_path_segment(segment) is None


@pytest.mark.parametrize(
    "segment, want",
    [
        ("*", MatchType.SINGLE_SEGMENT),
        ("**", MatchType.MULTIPLE_SEGMENTS),
        ("{abc:[a-z]+}", MatchType.CONSTRAINT_CAPTURE_VAR),
        ("{abc}", MatchType.CAPTURE_VAR),
        ("abc?asd", MatchType.REGEX),
        ("abc*asd", MatchType.REGEX),
        ("abcasd", MatchType.LITERAL),
    ],
)
def test_determine_match_type_for_segment(segment, want):
    assert determine_match_type_for_segment(segment) == want


_CONSTRAINT = re.compile("[a-c]{4}")


@pytest.mark.parametrize(
    "val, match_type, pattern, url_path, start, end, case_insensitive, want",
    [
        ("a", MatchType.LITERAL, None, "/a/b/c", 1, 2, False, MatchType.LITERAL),
        ("A", MatchType.LITERAL, None, "/a/b/c", 1, 2, False, MatchType.UNKNOWN),
        ("A", MatchType.LITERAL, None, "/a/b/c", 1, 2, True, MatchType.LITERAL),
        ("", MatchType.SINGLE_SEGMENT, None, "", 0, 0, False, MatchType.SINGLE_SEGMENT),
        ("", MatchType.CAPTURE_VAR, None, "", 0, 0, False, MatchType.CAPTURE_VAR),
        ("", MatchType.MULTIPLE_SEGMENTS, None, "", 0, 0, False, MatchType.MULTIPLE_SEGMENTS),
        (
            "a",
            MatchType.CONSTRAINT_CAPTURE_VAR,
            _CONSTRAINT,
            "abcca/b/c",
            1,
            5,
            False,
            MatchType.CONSTRAINT_CAPTURE_VAR,
        ),
        ("a?c*fg", MatchType.REGEX, None, "/abcdefg/b", 1, 8, False, MatchType.REGEX),
        ("a?c*fG", MatchType.REGEX, None, "/abcdefg/b", 1, 8, False, MatchType.UNKNOWN),
        ("a?c*fG", MatchType.REGEX, None, "/abcdefg/b", 1, 8, True, MatchType.REGEX),
    ],
)
def test_match_url_path_segment(
    val, match_type, pattern, url_path, start, end, case_insensitive, want
):
    seg = Segment(val=val, match_type=match_type, capture_var_pattern=pattern)
    got = seg.match_url_path_segment(url_path, UrlSegment(start, end), case_insensitive)
    assert got == want


@pytest.mark.parametrize(
    "url_segment, pattern_segment, want",
    [
        ("aabdd", "a?b*d", True),
        ("aabddcddce", "a?b*ddce", True),
        ("aabddcddce", "a?b*****ddce", True),
        ("aabwwqq", "a?b*w*q", True),
        ("aabwwqq", "a?b*", True),
        ("awwq", "*w?q", True),
        ("aabddcddc", "a?b*ddce", False),
        ("aabddcddc", "a??d?cdd?", True),
        ("aabddcdcc", "a??d?dd?", False),
        ("aabddcdc", "a??d?dd?", False),
    ],
)
def test_regex_segment_match(url_segment, pattern_segment, want):
    assert regex_segment_match(url_segment, pattern_segment, False) is want


def test_regex_segment_match_exhausted_url_is_no_match():
    assert regex_segment_match("abb", "a*bc", False) is False


def test_pattern_attachment_default():
    p = Pattern(raw_value="/x")
    assert p.attachment is None
    assert p.segments == []
    assert p.is_greedy() is False