"""Geometric utilities for eDM grid layouts."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Set

from .parsing import format_cell_id, merge_footprint, parse_cell_id
from .types import BandCoord, CellInfo, GridConfig, MergedCell, PercentRect, PixelRect


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp a value to an inclusive range."""
    return max(minimum, min(value, maximum))


def swallowed_bands(merges: Sequence[MergedCell]) -> Set[BandCoord]:
    """Bands covered by a merge other than its primary band."""
    swallowed: Set[BandCoord] = set()
    for merge in merges:
        swallowed.update(merge_footprint(merge)[1:])
    return swallowed


def resolve_cells(grid: GridConfig) -> List[CellInfo]:
    """Expand a grid into its visible cells in row-major order.

    Bands swallowed by a merge are skipped; a primary band takes the span of
    its merge record (1x1 when it has none). The result tiles the 0-100
    square exactly.
    """
    swallowed = swallowed_bands(grid.merged_cells)
    spans: Dict[BandCoord, MergedCell] = {
        parse_cell_id(merge.primary_id): merge for merge in grid.merged_cells
    }

    cells: List[CellInfo] = []
    for row in range(1, grid.row_count + 1):
        for col in range(1, grid.col_count + 1):
            band = BandCoord(row, col)
            if band in swallowed:
                continue

            merge = spans.get(band)
            row_span = merge.row_span if merge else 1
            col_span = merge.col_span if merge else 1

            left = grid.cols[col - 1]
            top = grid.rows[row - 1]
            right = grid.cols[col - 1 + col_span]
            bottom = grid.rows[row - 1 + row_span]

            cells.append(CellInfo(
                id=format_cell_id(row, col),
                row=row,
                col=col,
                row_span=row_span,
                col_span=col_span,
                left=left,
                top=top,
                width=right - left,
                height=bottom - top,
                right=right,
                bottom=bottom,
            ))
    return cells


def find_cell(cells: Sequence[CellInfo], cell_id: str) -> Optional[CellInfo]:
    """Look up a resolved cell by id."""
    for cell in cells:
        if cell.id == cell_id:
            return cell
    return None


def cell_footprint(cell: CellInfo) -> List[BandCoord]:
    """Every band a resolved cell occupies."""
    return [
        BandCoord(cell.row + r, cell.col + c)
        for r in range(cell.row_span)
        for c in range(cell.col_span)
    ]


def percent_to_pixels(percent: float, size: int) -> int:
    """Map a percentage coordinate to pixels, rounding halves up."""
    return int(math.floor(percent / 100.0 * size + 0.5))


def to_pixel_rect(rect: PercentRect, width: int, height: int) -> PixelRect:
    """Convert a percentage rectangle to pixels for a ``width`` x ``height`` image.

    Edges are rounded individually and sizes are edge differences, so two
    cells sharing a breakpoint share the same pixel edge.
    """
    left = percent_to_pixels(rect.left, width)
    top = percent_to_pixels(rect.top, height)
    right = percent_to_pixels(rect.right, width)
    bottom = percent_to_pixels(rect.bottom, height)
    return PixelRect(left=left, top=top, width=right - left, height=bottom - top)
