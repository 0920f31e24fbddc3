import pytest

from app.services.differ import compute_line_diff, diff_stats


def _assert_covers(previous: str, current: str, segments) -> None:
    prev_count = len(previous.split("\n")) if previous else 0
    cur_count = len(current.split("\n")) if current else 0

    prev_seen = [s.previous_line_number for s in segments if s.type in ("removed", "unchanged")]
    cur_seen = [s.current_line_number for s in segments if s.type in ("added", "unchanged")]

    assert sorted(prev_seen) == list(range(1, prev_count + 1))
    assert sorted(cur_seen) == list(range(1, cur_count + 1))
    for s in segments:
        if s.type == "added":
            assert s.previous_line_number is None
        if s.type == "removed":
            assert s.current_line_number is None


def _shape(segments):
    return [(s.type, s.content) for s in segments]


def test_both_empty() -> None:
    assert compute_line_diff("", "") == []


def test_previous_empty_marks_everything_added() -> None:
    segments = compute_line_diff("", "b\nc")
    assert _shape(segments) == [("added", "b"), ("added", "c")]
    assert [s.current_line_number for s in segments] == [1, 2]


def test_current_empty_marks_everything_removed() -> None:
    segments = compute_line_diff("a\nb", "")
    assert _shape(segments) == [("removed", "a"), ("removed", "b")]
    assert [s.previous_line_number for s in segments] == [1, 2]


@pytest.mark.parametrize("text", ["one line", "a\nb\nc", "a\n\n\nb\n", "dup\ndup\ndup"])
def test_identical_texts_are_unchanged(text: str) -> None:
    segments = compute_line_diff(text, text)
    assert len(segments) == len(text.split("\n"))
    assert all(s.type == "unchanged" for s in segments)
    assert all(s.current_line_number == s.previous_line_number for s in segments)


def test_insertion_inside_window() -> None:
    segments = compute_line_diff(previous="a\nb", current="a\nx\nb")
    assert _shape(segments) == [("unchanged", "a"), ("added", "x"), ("unchanged", "b")]
    assert segments[2].previous_line_number == 2
    assert segments[2].current_line_number == 3


def test_deletion_inside_window() -> None:
    segments = compute_line_diff(previous="a\nx\nb", current="a\nb")
    assert _shape(segments) == [("unchanged", "a"), ("removed", "x"), ("unchanged", "b")]
    assert segments[1].previous_line_number == 2


def test_three_line_insertion_resyncs() -> None:
    segments = compute_line_diff("a\nb", "a\n1\n2\n3\nb")
    assert _shape(segments) == [
        ("unchanged", "a"),
        ("added", "1"),
        ("added", "2"),
        ("added", "3"),
        ("unchanged", "b"),
    ]


def test_four_line_insertion_falls_back_to_replacement() -> None:
    previous, current = "a\nb", "a\n1\n2\n3\n4\nb"
    segments = compute_line_diff(previous, current)
    _assert_covers(previous, current, segments)
    # past the window "b" is never matched again
    assert ("unchanged", "b") not in _shape(segments)


def test_replacement_beyond_window() -> None:
    previous, current = "a\nb\nc\nd\ne", "a\nZ"
    segments = compute_line_diff(previous, current)
    _assert_covers(previous, current, segments)
    assert _shape(segments) == [
        ("unchanged", "a"),
        ("removed", "b"),
        ("added", "Z"),
        ("removed", "c"),
        ("removed", "d"),
        ("removed", "e"),
    ]


def test_deletion_is_preferred_over_insertion() -> None:
    segments = compute_line_diff("x\na", "a\nx")
    assert _shape(segments) == [("removed", "x"), ("unchanged", "a"), ("added", "x")]
    unchanged = segments[1]
    assert (unchanged.previous_line_number, unchanged.current_line_number) == (2, 1)


def test_comparison_is_exact() -> None:
    segments = compute_line_diff("Hello\nworld", "hello\nworld ")
    assert _shape(segments) == [
        ("removed", "Hello"),
        ("added", "hello"),
        ("removed", "world"),
        ("added", "world "),
    ]


@pytest.mark.parametrize(
    "previous,current",
    [
        ("a\nb\nc", "c\nb\na"),
        ("1\n2\n3\n4\n5\n6", "6\n5\n4\n3\n2\n1"),
        ("x\ny\nx\ny", "y\nx\ny\nx\nz"),
        ("title\n\n- one\n- two", "title\n- one\n\n- three\n- two\n"),
        ("only", "different\nlines\nhere"),
    ],
)
def test_every_line_is_covered_once(previous: str, current: str) -> None:
    _assert_covers(previous, current, compute_line_diff(previous, current))


def test_deterministic() -> None:
    previous = "# Notes\n- a\n- b\n- c\nend"
    current = "# Notes\n- b\n- c\n- d\nend\nextra"
    first = compute_line_diff(previous, current)
    assert compute_line_diff(previous, current) == first


def test_diff_stats() -> None:
    stats = diff_stats(compute_line_diff("a\nx\nb", "a\nb\nc"))
    assert (stats.added, stats.removed, stats.unchanged) == (1, 1, 2)
