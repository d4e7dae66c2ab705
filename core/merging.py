"""Cell merge validation and merge record updates."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Set

from .geometry import cell_footprint, resolve_cells
from .parsing import format_cell_id, parse_cell_id
from .types import BandCoord, CellInfo, GridConfig, MergeCheck, MergedCell

INVALID = MergeCheck(valid=False)


def can_merge(grid: GridConfig, selected_ids: Iterable[str]) -> MergeCheck:
    """Check whether the selected cells form one solid rectangle of bands.

    Stale ids, overlaps, holes and fewer than two cells give an invalid
    result rather than an exception.
    """
    selected: List[str] = list(selected_ids)
    if len(selected) < 2:
        return INVALID

    cells: Dict[str, CellInfo] = {cell.id: cell for cell in resolve_cells(grid)}

    footprint: Set[BandCoord] = set()
    for cell_id in selected:
        cell = cells.get(cell_id)
        if cell is None:
            return INVALID
        for band in cell_footprint(cell):
            if band in footprint:
                return INVALID
            footprint.add(band)

    min_row = min(band.row for band in footprint)
    max_row = max(band.row for band in footprint)
    min_col = min(band.col for band in footprint)
    max_col = max(band.col for band in footprint)

    row_span = max_row - min_row + 1
    col_span = max_col - min_col + 1
    if len(footprint) != row_span * col_span:
        return INVALID

    for row in range(min_row, max_row + 1):
        for col in range(min_col, max_col + 1):
            if BandCoord(row, col) not in footprint:
                return INVALID

    return MergeCheck(
        valid=True,
        primary_id=format_cell_id(min_row, min_col),
        row_span=row_span,
        col_span=col_span,
    )


def _intersects(merge: MergedCell, row: int, col: int, row_span: int, col_span: int) -> bool:
    origin = parse_cell_id(merge.primary_id)
    end_row = origin.row + merge.row_span - 1
    end_col = origin.col + merge.col_span - 1
    return not (
        origin.row >= row + row_span
        or end_row < row
        or origin.col >= col + col_span
        or end_col < col
    )


def merge_cells(grid: GridConfig, primary_id: str, row_span: int, col_span: int) -> GridConfig:
    """Record a merge, replacing every existing merge it intersects.

    Call only with a rectangle accepted by ``can_merge``; nothing is
    re-validated here.
    """
    origin = parse_cell_id(primary_id)
    merges = [
        merge for merge in grid.merged_cells
        if not _intersects(merge, origin.row, origin.col, row_span, col_span)
    ]
    merges.append(MergedCell(primary_id, row_span, col_span))
    return replace(grid, merged_cells=tuple(merges))


def unmerge_cell(grid: GridConfig, primary_id: str) -> GridConfig:
    """Drop the merge whose primary band is ``primary_id``, if any."""
    merges = tuple(merge for merge in grid.merged_cells if merge.primary_id != primary_id)
    if len(merges) == len(grid.merged_cells):
        return grid
    return replace(grid, merged_cells=merges)
