"""Parsing helpers for cell ids and persisted grid JSON."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from .types import BandCoord, GridConfig, MergedCell

_CELL_ID = re.compile(r"([0-9]+)-([0-9]+)")
_FILENAME = re.compile(r"[a-zA-Z0-9_-]+")
_EXTENSION = re.compile(r"\.[^/.]+$")


def format_cell_id(row: int, col: int) -> str:
    """Build the ``"row-col"`` id for 1-based band coordinates."""
    return f"{row}-{col}"


def parse_cell_id(cell_id: str) -> BandCoord:
    """Parse a ``"row-col"`` id, raising ValueError for anything else."""
    match = _CELL_ID.fullmatch(cell_id) if isinstance(cell_id, str) else None
    if match is None:
        raise ValueError(f"Invalid cell id {cell_id!r}; expected 'row-col'.")
    row, col = int(match.group(1)), int(match.group(2))
    if row < 1 or col < 1:
        raise ValueError(f"Invalid cell id {cell_id!r}; rows and columns start at 1.")
    return BandCoord(row, col)


def merge_footprint(merge: MergedCell) -> List[BandCoord]:
    """Every band covered by a merge, primary band first."""
    origin = parse_cell_id(merge.primary_id)
    return [
        BandCoord(origin.row + r, origin.col + c)
        for r in range(merge.row_span)
        for c in range(merge.col_span)
    ]


def _parse_breakpoints(values: Any, name: str) -> Tuple[float, ...]:
    if not isinstance(values, (list, tuple)) or len(values) < 2:
        raise ValueError(f"'{name}' must be a list of at least two breakpoints.")

    breakpoints: List[float] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{name}' contains a non-numeric breakpoint: {value!r}.")
        if not math.isfinite(value):
            raise ValueError(f"'{name}' contains a non-finite breakpoint: {value!r}.")
        breakpoints.append(float(value))

    if breakpoints[0] != 0.0 or breakpoints[-1] != 100.0:
        raise ValueError(f"'{name}' must start at 0 and end at 100.")
    for previous, current in zip(breakpoints, breakpoints[1:]):
        if current <= previous:
            raise ValueError(f"'{name}' must be strictly increasing.")
    return tuple(breakpoints)


def _parse_span(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"'{name}' must be a positive integer, got {value!r}.")
    return value


def validate_merges(merges: Tuple[MergedCell, ...], row_count: int, col_count: int) -> None:
    """Raise ValueError if merges leave the band grid or overlap each other."""
    covered: Set[BandCoord] = set()
    for merge in merges:
        for band in merge_footprint(merge):
            if band.row > row_count or band.col > col_count:
                raise ValueError(f"Merge at {merge.primary_id} extends outside the grid.")
            if band in covered:
                raise ValueError(f"Merge at {merge.primary_id} overlaps another merge.")
            covered.add(band)


def grid_from_dict(data: Mapping[str, Any]) -> GridConfig:
    """Build a validated GridConfig from its persisted JSON object."""
    if not isinstance(data, Mapping):
        raise ValueError("Grid config must be a JSON object.")

    rows = _parse_breakpoints(data.get("rows"), "rows")
    cols = _parse_breakpoints(data.get("cols"), "cols")

    raw_merges = data.get("mergedCells") or []
    if not isinstance(raw_merges, list):
        raise ValueError("'mergedCells' must be a list.")

    merges: List[MergedCell] = []
    for raw in raw_merges:
        if not isinstance(raw, Mapping):
            raise ValueError("Each 'mergedCells' entry must be an object.")
        primary_id = raw.get("primaryId")
        parse_cell_id(primary_id)
        merges.append(MergedCell(
            primary_id=primary_id,
            row_span=_parse_span(raw.get("rowSpan", 1), "rowSpan"),
            col_span=_parse_span(raw.get("colSpan", 1), "colSpan"),
        ))

    validate_merges(tuple(merges), len(rows) - 1, len(cols) - 1)
    return GridConfig(rows=rows, cols=cols, merged_cells=tuple(merges))


def grid_to_dict(grid: GridConfig) -> Dict[str, Any]:
    """Serialise a GridConfig to its persisted JSON object."""
    return {
        "rows": list(grid.rows),
        "cols": list(grid.cols),
        "mergedCells": [
            {"primaryId": merge.primary_id, "rowSpan": merge.row_span, "colSpan": merge.col_span}
            for merge in grid.merged_cells
        ],
    }


def load_grid_json(text: str) -> GridConfig:
    """Parse a grid config JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Grid config is not valid JSON: {exc}") from exc
    return grid_from_dict(data)


def dump_grid_json(grid: GridConfig) -> str:
    """Serialise a grid config to a compact JSON string."""
    return json.dumps(grid_to_dict(grid))


def parse_cell_map(text: Optional[str], name: str = "cell map") -> Dict[str, str]:
    """Parse a JSON object of cell id -> string, e.g. links or image references."""
    if text is None or not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{name} is not valid JSON: {exc}") from exc
    return cell_map_from_dict(data, name)


def cell_map_from_dict(data: Any, name: str = "cell map") -> Dict[str, str]:
    """Validate a decoded cell id -> string mapping."""
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{name} must be a JSON object keyed by cell id.")

    result: Dict[str, str] = {}
    for key, value in data.items():
        parse_cell_id(key)
        if not isinstance(value, str):
            raise ValueError(f"{name} value for {key} must be a string.")
        if value:
            result[key] = value
    return result


def is_valid_link(url: str) -> bool:
    """Only absolute http(s) links are accepted for cells."""
    return isinstance(url, str) and (url.startswith("http://") or url.startswith("https://"))


def parse_cell_links(text: Optional[str]) -> Dict[str, str]:
    """Parse and validate a CellLinks JSON string."""
    links = parse_cell_map(text, "cell links")
    for cell_id, url in links.items():
        if not is_valid_link(url):
            raise ValueError(f"Link for cell {cell_id} must start with http:// or https://.")
    return links


def validate_filename(name: str) -> bool:
    """Check an upload filename: letters, digits, '_' and '-' only (extension ignored)."""
    base_name = _EXTENSION.sub("", name)
    return bool(_FILENAME.fullmatch(base_name))


def parse_selection(text: str) -> List[str]:
    """Split a comma or whitespace separated list of cell ids."""
    return [part for part in re.split(r"[\s,]+", text or "") if part]
