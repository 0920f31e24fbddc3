# app/services/differ.py
"""
Line-level diff between two versions of a summary.

Greedy alignment with a small look-ahead window: cheap and predictable for
interactive use, but not a minimal edit script. Long-range moves show up as
a removal plus an addition.
"""
from __future__ import annotations

from typing import Literal, Optional
from pydantic import BaseModel

LOOKAHEAD = 3

SegmentType = Literal["added", "removed", "unchanged"]


class DiffSegment(BaseModel):
    type: SegmentType
    content: str
    current_line_number: Optional[int] = None   # 1-indexed
    previous_line_number: Optional[int] = None  # 1-indexed


class DiffStats(BaseModel):
    added: int = 0
    removed: int = 0
    unchanged: int = 0


def _added(lines: list[str], idx: int) -> DiffSegment:
    return DiffSegment(type="added", content=lines[idx], current_line_number=idx + 1)

def _removed(lines: list[str], idx: int) -> DiffSegment:
    return DiffSegment(type="removed", content=lines[idx], previous_line_number=idx + 1)


def compute_line_diff(previous: str, current: str) -> list[DiffSegment]:
    """
    Diff `previous` against `current` line by line.

    Every line of both inputs appears exactly once in the result: previous
    lines as `removed` or the previous side of `unchanged`, current lines as
    `added` or the current side of `unchanged`.
    """
    if not previous and not current:
        return []
    if not previous:
        new_lines = current.split("\n")
        return [_added(new_lines, i) for i in range(len(new_lines))]
    if not current:
        old_lines = previous.split("\n")
        return [_removed(old_lines, i) for i in range(len(old_lines))]

    old_lines = previous.split("\n")
    new_lines = current.split("\n")
    n_old, n_new = len(old_lines), len(new_lines)
    out: list[DiffSegment] = []
    old = new = 0

    while old < n_old or new < n_new:
        if old < n_old and new < n_new and old_lines[old] == new_lines[new]:
            out.append(DiffSegment(
                type="unchanged",
                content=old_lines[old],
                current_line_number=new + 1,
                previous_line_number=old + 1,
            ))
            old += 1
            new += 1
            continue

        # lines deleted from previous?
        skip = _resync(old_lines, old, new_lines, new)
        if skip:
            out.extend(_removed(old_lines, old + j) for j in range(skip))
            old += skip
            continue

        # lines inserted into current?
        skip = _resync(new_lines, new, old_lines, old)
        if skip:
            out.extend(_added(new_lines, new + j) for j in range(skip))
            new += skip
            continue

        # one-line replacement
        if old < n_old:
            out.append(_removed(old_lines, old))
            old += 1
        if new < n_new:
            out.append(_added(new_lines, new))
            new += 1

    return out


def _resync(scan: list[str], pos: int, other: list[str], other_pos: int) -> int:
    """Offset (1..LOOKAHEAD) at which `scan` meets `other[other_pos]` again, or 0."""
    if other_pos >= len(other):
        return 0
    target = other[other_pos]
    for i in range(1, LOOKAHEAD + 1):
        if pos + i >= len(scan):
            break
        if scan[pos + i] == target:
            return i
    return 0


def diff_stats(segments: list[DiffSegment]) -> DiffStats:
    stats = DiffStats()
    for seg in segments:
        setattr(stats, seg.type, getattr(stats, seg.type) + 1)
    return stats
