"""Editor document: the mutable state an eDM editor owns.

The core modules are pure; ``EdmDocument`` holds the current grid together
with the cell links, cell images and export settings, applies grid edits,
and keeps the cell-keyed maps in step with the cell ids that exist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from PIL import Image

from ..config import ALIGNMENTS, MAX_BREAKPOINTS
from . import grid as grid_ops
from .geometry import resolve_cells
from .imaging import Loader, SliceResult, load_image, reconstruct_image, slice_image
from .markup import encode_html
from .merging import can_merge, merge_cells, unmerge_cell
from .parsing import (
    cell_map_from_dict,
    format_cell_id,
    grid_from_dict,
    grid_to_dict,
    is_valid_link,
    parse_cell_id,
)
from .types import CellInfo, GridConfig, MergeCheck

logger = logging.getLogger(__name__)


def _rekey(cells: Dict[str, str], axis: str, band_map: grid_ops.BandMap) -> Dict[str, str]:
    """Move cell-keyed entries onto new band indices; the top/left entry wins a collision."""
    rekeyed: Dict[str, str] = {}
    ordered = sorted(cells.items(), key=lambda item: (parse_cell_id(item[0]).row, parse_cell_id(item[0]).col))
    for cell_id, value in ordered:
        band = parse_cell_id(cell_id)
        if axis == "row":
            new_id = format_cell_id(band_map(band.row), band.col)
        else:
            new_id = format_cell_id(band.row, band_map(band.col))
        rekeyed.setdefault(new_id, value)
    return rekeyed


@dataclass
class EdmDocument:
    grid: GridConfig = field(default_factory=grid_ops.default_grid)
    cell_links: Dict[str, str] = field(default_factory=dict)
    cell_images: Dict[str, str] = field(default_factory=dict)
    alignment: str = "left"
    image_width: int = 1920
    image_height: int = 1080
    max_breakpoints: int = MAX_BREAKPOINTS

    def cells(self) -> List[CellInfo]:
        return resolve_cells(self.grid)

    def cell_ids(self) -> List[str]:
        return [cell.id for cell in self.cells()]

    def _set_grid(self, grid: GridConfig) -> None:
        self.grid = grid
        self.prune()

    def prune(self) -> None:
        """Drop links and images whose cell id is no longer visible."""
        visible = set(self.cell_ids())
        stale = [cell_id for cell_id in list(self.cell_links) + list(self.cell_images) if cell_id not in visible]
        if stale:
            logger.debug("Pruning entries for vanished cells: %s", sorted(set(stale)))
        self.cell_links = {k: v for k, v in self.cell_links.items() if k in visible}
        self.cell_images = {k: v for k, v in self.cell_images.items() if k in visible}

    # Grid edits

    def can_insert(self, axis: str) -> bool:
        breakpoints = self.grid.rows if axis == "row" else self.grid.cols
        return len(breakpoints) < self.max_breakpoints

    def insert(self, axis: str, after_index: Optional[int] = None) -> bool:
        """Split a band on ``axis``; refuses once the breakpoint limit is reached."""
        if not self.can_insert(axis):
            return False
        if after_index is None:
            after_index = grid_ops.middle_breakpoint_index(self.grid, axis) - 1

        new_grid = grid_ops.insert_breakpoint(self.grid, axis, after_index)
        band_map = grid_ops.band_map_after_insert(after_index)
        self.cell_links = _rekey(self.cell_links, axis, band_map)
        self.cell_images = _rekey(self.cell_images, axis, band_map)
        self._set_grid(new_grid)
        return True

    def remove(self, axis: str, index: Optional[int] = None) -> bool:
        """Remove an internal breakpoint on ``axis``; False when nothing changed."""
        if index is None:
            index = grid_ops.middle_breakpoint_index(self.grid, axis)

        new_grid = grid_ops.remove_breakpoint(self.grid, axis, index)
        if new_grid is self.grid:
            return False

        band_map = grid_ops.band_map_after_remove(index)
        self.cell_links = _rekey(self.cell_links, axis, band_map)
        self.cell_images = _rekey(self.cell_images, axis, band_map)
        self._set_grid(new_grid)
        return True

    def drag_divider(self, axis: str, index: int, position: float) -> float:
        """Move a divider and return where it actually landed."""
        self.grid = grid_ops.drag_divider(self.grid, axis, index, position)
        breakpoints = self.grid.rows if axis == "row" else self.grid.cols
        return breakpoints[index]

    def merge(self, selected_ids: Iterable[str]) -> MergeCheck:
        """Merge the selection if it is a solid rectangle of cells."""
        check = can_merge(self.grid, selected_ids)
        if check.valid:
            self._set_grid(merge_cells(self.grid, check.primary_id, check.row_span, check.col_span))
        return check

    def unmerge(self, primary_id: str) -> bool:
        new_grid = unmerge_cell(self.grid, primary_id)
        if new_grid is self.grid:
            return False
        self._set_grid(new_grid)
        return True

    def reset(self) -> None:
        self._set_grid(grid_ops.reset_grid(self.grid))

    # Links and export settings

    def set_link(self, cell_id: str, url: str) -> None:
        url = url.strip()
        if not is_valid_link(url):
            raise ValueError("Links must start with http:// or https://.")
        if cell_id not in self.cell_ids():
            raise ValueError(f"Cell {cell_id} does not exist in the current grid.")
        self.cell_links[cell_id] = url

    def remove_link(self, cell_id: str) -> None:
        self.cell_links.pop(cell_id, None)

    def set_alignment(self, alignment: str) -> None:
        if alignment not in ALIGNMENTS:
            raise ValueError(f"Unknown alignment {alignment!r}.")
        self.alignment = alignment

    # Images and markup

    def slice_source(self, source: bytes, width: int, height: int, **kwargs: Any) -> SliceResult:
        """Slice a new source image; the cell images are replaced by whatever succeeded."""
        self.image_width, self.image_height = width, height
        result = slice_image(source, width, height, self.grid, **kwargs)
        self.cell_images = dict(result.images)
        return result

    def reconstruct(self, loader: Loader = load_image) -> Image.Image:
        return reconstruct_image(self.cell_images, self.image_width, self.image_height, self.grid, loader=loader)

    def to_html(self, use_placeholders: bool = False) -> str:
        return encode_html(
            self.grid,
            self.cell_images,
            self.cell_links,
            self.alignment,
            self.image_width,
            use_placeholders=use_placeholders,
        )

    # Persistence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gridConfig": grid_to_dict(self.grid),
            "cellLinks": dict(self.cell_links),
            "cellImages": dict(self.cell_images),
            "alignment": self.alignment,
            "imageWidth": self.image_width,
            "imageHeight": self.image_height,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EdmDocument":
        grid_data = data.get("gridConfig")
        document = cls(
            grid=grid_ops.default_grid() if grid_data is None else grid_from_dict(grid_data),
            cell_links=cell_map_from_dict(data.get("cellLinks"), "cellLinks"),
            cell_images=cell_map_from_dict(data.get("cellImages"), "cellImages"),
            image_width=int(data.get("imageWidth", 1920)),
            image_height=int(data.get("imageHeight", 1080)),
        )
        document.set_alignment(data.get("alignment") or "left")
        for cell_id, url in document.cell_links.items():
            if not is_valid_link(url):
                raise ValueError(f"Link for cell {cell_id} must start with http:// or https://.")
        document.prune()
        return document
