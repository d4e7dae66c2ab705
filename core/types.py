"""Common data structures for the eDM grid slicer."""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class BandCoord:
    """1-based band coordinates parsed from a ``"row-col"`` cell id."""
    row: int
    col: int


@dataclass(frozen=True)
class MergedCell:
    """A rectangular block of bands rendered as one cell."""
    primary_id: str
    row_span: int = 1
    col_span: int = 1


@dataclass(frozen=True)
class GridConfig:
    """Row/column breakpoints (percent) plus merge records."""
    rows: Tuple[float, ...]
    cols: Tuple[float, ...]
    merged_cells: Tuple[MergedCell, ...] = field(default_factory=tuple)

    @property
    def row_count(self) -> int:
        return len(self.rows) - 1

    @property
    def col_count(self) -> int:
        return len(self.cols) - 1


@dataclass(frozen=True)
class PercentRect:
    """Rectangle edges as percentages of the full image."""
    left: float
    top: float
    right: float
    bottom: float


@dataclass(frozen=True)
class PixelRect:
    """Rectangle in absolute pixels."""
    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """PIL crop box: left/top inclusive, right/bottom exclusive."""
        return self.left, self.top, self.left + self.width, self.top + self.height


@dataclass(frozen=True)
class CellInfo:
    """One visible cell after merges are applied."""
    id: str
    row: int
    col: int
    row_span: int
    col_span: int
    left: float    # Percent of image width
    top: float     # Percent of image height
    width: float
    height: float
    right: float   # Breakpoint values, not left + width
    bottom: float

    @property
    def rect(self) -> PercentRect:
        return PercentRect(self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class MergeCheck:
    """Outcome of a merge validation."""
    valid: bool
    primary_id: Optional[str] = None
    row_span: Optional[int] = None
    col_span: Optional[int] = None
