"""Divider segments: the parts of each internal grid line not hidden by a merge."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..config import SEGMENT_TOLERANCE
from .parsing import parse_cell_id
from .types import GridConfig

Segment = Tuple[float, float]


def complement_segments(gaps: Sequence[Segment], minimum: float = 0.0, maximum: float = 100.0,
                        tolerance: float = SEGMENT_TOLERANCE) -> List[Segment]:
    """Return the parts of ``[minimum, maximum]`` not covered by ``gaps``.

    Overlapping or touching gaps are joined first; pieces no longer than
    ``tolerance`` are dropped.
    """
    if not gaps:
        return [(minimum, maximum)]

    ordered = sorted(gaps)
    joined: List[Segment] = []
    start, end = ordered[0]
    for gap_start, gap_end in ordered[1:]:
        if gap_start <= end:
            end = max(end, gap_end)
        else:
            joined.append((start, end))
            start, end = gap_start, gap_end
    joined.append((start, end))

    segments: List[Segment] = []
    position = minimum
    for gap_start, gap_end in joined:
        if position < gap_start - tolerance:
            segments.append((position, min(gap_start, maximum)))
        position = max(position, gap_end)
    if position < maximum - tolerance:
        segments.append((position, maximum))
    return segments


def covered_intervals(grid: GridConfig, axis: str, line: int) -> List[Segment]:
    """Intervals of internal line ``line`` hidden by merges straddling it.

    ``axis`` is ``"row"`` for the horizontal line below row band ``line`` or
    ``"col"`` for the vertical line right of column band ``line``.
    """
    intervals: List[Segment] = []
    for merge in grid.merged_cells:
        origin = parse_cell_id(merge.primary_id)
        if axis == "row":
            last_row = origin.row + merge.row_span - 1
            if origin.row <= line and line + 1 <= last_row:
                intervals.append((grid.cols[origin.col - 1], grid.cols[origin.col - 1 + merge.col_span]))
        else:
            last_col = origin.col + merge.col_span - 1
            if origin.col <= line and line + 1 <= last_col:
                intervals.append((grid.rows[origin.row - 1], grid.rows[origin.row - 1 + merge.row_span]))
    return intervals


def row_line_segments(grid: GridConfig, tolerance: float = SEGMENT_TOLERANCE) -> List[List[Segment]]:
    """Horizontal segments ``(left, right)`` for each line between row bands."""
    return [
        complement_segments(covered_intervals(grid, "row", line), tolerance=tolerance)
        for line in range(1, grid.row_count)
    ]


def col_line_segments(grid: GridConfig, tolerance: float = SEGMENT_TOLERANCE) -> List[List[Segment]]:
    """Vertical segments ``(top, bottom)`` for each line between column bands."""
    return [
        complement_segments(covered_intervals(grid, "col", line), tolerance=tolerance)
        for line in range(1, grid.col_count)
    ]
