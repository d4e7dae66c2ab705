"""Grid model operations: breakpoint insertion, removal and dragging.

Every function takes a GridConfig and returns a new one. Band indices are
1-based (matching cell ids); breakpoint indices are 0-based positions in
``rows``/``cols``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Set, Tuple

from ..config import DEFAULT_BREAKPOINTS, MIN_BREAKPOINTS, MIN_DIVIDER_GAP
from .geometry import clamp
from .parsing import format_cell_id, merge_footprint, parse_cell_id
from .types import BandCoord, GridConfig, MergedCell

logger = logging.getLogger(__name__)

AXES = ("row", "col")

BandMap = Callable[[int], int]


def default_grid() -> GridConfig:
    """The uniform 3x3 grid new documents start with."""
    return GridConfig(rows=DEFAULT_BREAKPOINTS, cols=DEFAULT_BREAKPOINTS, merged_cells=())


def reset_grid(grid: GridConfig) -> GridConfig:
    """Discard all edits and return the default grid."""
    return default_grid()


def _check_axis(axis: str) -> None:
    if axis not in AXES:
        raise ValueError(f"Unknown axis {axis!r}; expected 'row' or 'col'.")


def _breakpoints(grid: GridConfig, axis: str) -> Tuple[float, ...]:
    _check_axis(axis)
    return grid.rows if axis == "row" else grid.cols


def _with_breakpoints(grid: GridConfig, axis: str, breakpoints: List[float],
                      merges: Tuple[MergedCell, ...]) -> GridConfig:
    if axis == "row":
        return replace(grid, rows=tuple(breakpoints), merged_cells=merges)
    return replace(grid, cols=tuple(breakpoints), merged_cells=merges)


def band_map_after_insert(after_index: int) -> BandMap:
    """Where each old band lands once band ``after_index + 1`` is split in two.

    The split band keeps its index (its top/left half keeps the old id).
    """
    split = after_index + 1
    return lambda band: band if band <= split else band + 1


def band_map_after_remove(index: int) -> BandMap:
    """Where each old band lands once breakpoint ``index`` joins bands index and index+1."""
    return lambda band: band if band <= index else band - 1


def _remap_merges(merges: Tuple[MergedCell, ...], axis: str,
                  map_start: BandMap, map_end: BandMap) -> Tuple[MergedCell, ...]:
    """Move merge records onto a changed band grid.

    Merges shrinking to a single band are dropped, as is any merge that
    would overlap one kept before it.
    """
    kept: List[MergedCell] = []
    covered: Set[BandCoord] = set()

    for merge in merges:
        origin = parse_cell_id(merge.primary_id)
        row, col = origin.row, origin.col
        row_span, col_span = merge.row_span, merge.col_span

        if axis == "row":
            start, end = map_start(row), map_end(row + row_span - 1)
            row, row_span = start, end - start + 1
        else:
            start, end = map_start(col), map_end(col + col_span - 1)
            col, col_span = start, end - start + 1

        if row_span == 1 and col_span == 1:
            logger.debug("Dropping merge %s: collapsed to a single band", merge.primary_id)
            continue

        candidate = MergedCell(format_cell_id(row, col), row_span, col_span)
        footprint = set(merge_footprint(candidate))
        if footprint & covered:
            logger.debug("Dropping merge %s: overlaps after remap", merge.primary_id)
            continue

        covered.update(footprint)
        kept.append(candidate)

    return tuple(kept)


def insert_breakpoint(grid: GridConfig, axis: str, after_index: int) -> GridConfig:
    """Split the band after breakpoint ``after_index`` at its midpoint."""
    breakpoints = list(_breakpoints(grid, axis))
    if not 0 <= after_index < len(breakpoints) - 1:
        raise IndexError(f"No {axis} band after breakpoint {after_index}.")

    midpoint = (breakpoints[after_index] + breakpoints[after_index + 1]) / 2
    breakpoints.insert(after_index + 1, midpoint)

    split = after_index + 1
    merges = _remap_merges(
        grid.merged_cells,
        axis,
        band_map_after_insert(after_index),
        lambda band: band if band < split else band + 1,
    )
    return _with_breakpoints(grid, axis, breakpoints, merges)


def remove_breakpoint(grid: GridConfig, axis: str, index: int) -> GridConfig:
    """Remove internal breakpoint ``index``, joining the two bands it separates.

    Leaves the grid untouched when only one band remains or when ``index``
    names the fixed 0/100 edge.
    """
    breakpoints = list(_breakpoints(grid, axis))
    if not 0 <= index < len(breakpoints):
        raise IndexError(f"No {axis} breakpoint at index {index}.")
    if len(breakpoints) <= MIN_BREAKPOINTS or index in (0, len(breakpoints) - 1):
        return grid

    del breakpoints[index]
    band_map = band_map_after_remove(index)
    merges = _remap_merges(grid.merged_cells, axis, band_map, band_map)
    return _with_breakpoints(grid, axis, breakpoints, merges)


def insert_row(grid: GridConfig, after_index: int) -> GridConfig:
    return insert_breakpoint(grid, "row", after_index)


def insert_col(grid: GridConfig, after_index: int) -> GridConfig:
    return insert_breakpoint(grid, "col", after_index)


def remove_row(grid: GridConfig, index: int) -> GridConfig:
    return remove_breakpoint(grid, "row", index)


def remove_col(grid: GridConfig, index: int) -> GridConfig:
    return remove_breakpoint(grid, "col", index)


def middle_breakpoint_index(grid: GridConfig, axis: str) -> int:
    """Index the editor's add/remove buttons act on: the middle of the axis."""
    return len(_breakpoints(grid, axis)) // 2


def drag_divider(grid: GridConfig, axis: str, index: int, position: float,
                 min_gap: float = MIN_DIVIDER_GAP) -> GridConfig:
    """Move internal breakpoint ``index`` towards ``position``.

    The new value stays at least ``min_gap`` from both neighbours; when the
    neighbours are closer than ``2 * min_gap`` it sits at their midpoint.
    Edge breakpoints never move.
    """
    breakpoints = list(_breakpoints(grid, axis))
    if not 0 <= index < len(breakpoints):
        raise IndexError(f"No {axis} breakpoint at index {index}.")
    if index in (0, len(breakpoints) - 1):
        return grid

    previous, following = breakpoints[index - 1], breakpoints[index + 1]
    if following - previous < 2 * min_gap:
        value = (previous + following) / 2
    else:
        value = clamp(float(position), previous + min_gap, following - min_gap)

    breakpoints[index] = value
    return _with_breakpoints(grid, axis, breakpoints, grid.merged_cells)
