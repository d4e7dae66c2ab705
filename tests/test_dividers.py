"""Tests for divider segment computation."""

import pytest

from edm_slicer.core.dividers import (
    col_line_segments,
    complement_segments,
    covered_intervals,
    row_line_segments,
)
from edm_slicer.core.merging import merge_cells
from edm_slicer.core.types import GridConfig, MergedCell


class TestComplementSegments:
    """Tests for complement_segments."""

    def test_no_gaps(self):
        """Without gaps the whole line is one segment."""
        assert complement_segments([]) == [(0.0, 100.0)]

    def test_gap_in_middle(self):
        """A middle gap leaves two segments."""
        assert complement_segments([(20.0, 40.0)]) == [(0.0, 20.0), (40.0, 100.0)]

    def test_overlapping_and_touching_gaps_join(self):
        """Overlapping or touching gaps behave as one."""
        gaps = [(50.0, 70.0), (10.0, 30.0), (25.0, 50.0)]

        assert complement_segments(gaps) == [(0.0, 10.0), (70.0, 100.0)]

    def test_full_cover(self):
        """A gap across the whole line leaves nothing."""
        assert complement_segments([(0.0, 100.0)]) == []

    def test_tiny_pieces_dropped(self):
        """Floating-point slivers below the tolerance are not segments."""
        assert complement_segments([(0.005, 99.995)]) == []
        assert complement_segments([(0.0, 99.0)], tolerance=2.0) == []


class TestLineSegments:
    """Tests for row_line_segments and col_line_segments."""

    def test_unmerged_grid(self, grid):
        """Every internal line is fully draggable."""
        assert row_line_segments(grid) == [[(0.0, 100.0)], [(0.0, 100.0)]]
        assert col_line_segments(grid) == [[(0.0, 100.0)], [(0.0, 100.0)]]

    def test_block_merge_hides_lines(self, grid):
        """A 2x2 merge hides the inner parts of both crossing lines."""
        merged = merge_cells(grid, "1-1", 2, 2)

        assert row_line_segments(merged) == [[(66.66, 100.0)], [(0.0, 100.0)]]
        assert col_line_segments(merged) == [[(66.66, 100.0)], [(0.0, 100.0)]]

    def test_horizontal_merge_only_hides_vertical_line(self, grid):
        """A 1x2 merge does not straddle any row line."""
        merged = merge_cells(grid, "2-2", 1, 2)

        assert row_line_segments(merged) == [[(0.0, 100.0)], [(0.0, 100.0)]]
        assert col_line_segments(merged) == [[(0.0, 100.0)], [(0.0, 33.33), (66.66, 100.0)]]

    def test_covered_intervals(self):
        """Covered intervals come from the merge's breakpoints."""
        grid = GridConfig(
            rows=(0.0, 20.0, 60.0, 100.0),
            cols=(0.0, 10.0, 90.0, 100.0),
            merged_cells=(MergedCell("1-2", 3, 2),),
        )

        assert covered_intervals(grid, "row", 1) == [(10.0, 100.0)]
        assert covered_intervals(grid, "row", 2) == [(10.0, 100.0)]
        assert covered_intervals(grid, "col", 2) == [(0.0, 100.0)]
        assert covered_intervals(grid, "col", 1) == []
        assert col_line_segments(grid) == [[(0.0, 100.0)], []]

    def test_segments_and_merges_cover_each_line_once(self, random_grids):
        """Segments plus merge-covered intervals tile [0, 100] exactly once."""
        for grid in random_grids:
            lines = [("row", line, segs) for line, segs in enumerate(row_line_segments(grid), start=1)]
            lines += [("col", line, segs) for line, segs in enumerate(col_line_segments(grid), start=1)]

            for axis, line, segments in lines:
                pieces = sorted(segments + covered_intervals(grid, axis, line))
                position = 0.0
                for start, end in pieces:
                    assert start == pytest.approx(position)
                    assert end > start
                    position = end
                assert position == pytest.approx(100.0)
