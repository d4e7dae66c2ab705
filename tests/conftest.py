"""Shared fixtures for the eDM slicer tests."""

import random
from typing import Callable, List, Set, Tuple

import numpy as np
import pytest
from PIL import Image

from edm_slicer.core.grid import default_grid
from edm_slicer.core.parsing import format_cell_id
from edm_slicer.core.types import GridConfig, MergedCell


def _breakpoints(rng: random.Random, bands: int) -> Tuple[float, ...]:
    # Even interior values keep neighbouring breakpoints at least 2 apart.
    interior = sorted(rng.sample(range(1, 50), bands - 1))
    return (0.0, *[float(2 * value) for value in interior], 100.0)


def make_random_grid(rng: random.Random, max_bands: int = 6, max_merges: int = 4) -> GridConfig:
    """Build a valid grid with random breakpoints and non-overlapping merges."""
    rows = _breakpoints(rng, rng.randint(1, max_bands))
    cols = _breakpoints(rng, rng.randint(1, max_bands))
    row_count, col_count = len(rows) - 1, len(cols) - 1

    merges: List[MergedCell] = []
    covered: Set[Tuple[int, int]] = set()
    for _ in range(rng.randint(0, max_merges)):
        row = rng.randint(1, row_count)
        col = rng.randint(1, col_count)
        row_span = rng.randint(1, row_count - row + 1)
        col_span = rng.randint(1, col_count - col + 1)
        if row_span * col_span == 1:
            continue
        footprint = {(row + r, col + c) for r in range(row_span) for c in range(col_span)}
        if footprint & covered:
            continue
        covered |= footprint
        merges.append(MergedCell(format_cell_id(row, col), row_span, col_span))

    return GridConfig(rows=rows, cols=cols, merged_cells=tuple(merges))


@pytest.fixture
def grid():
    """The default 3x3 grid."""
    return default_grid()


@pytest.fixture
def one_by_two():
    """One row split into two equal columns."""
    return GridConfig(rows=(0.0, 100.0), cols=(0.0, 50.0, 100.0), merged_cells=())


@pytest.fixture
def random_grids() -> List[GridConfig]:
    """A reproducible batch of random grids."""
    rng = random.Random(20240611)
    return [make_random_grid(rng) for _ in range(200)]


@pytest.fixture
def random_grid_factory() -> Callable[[random.Random], GridConfig]:
    return make_random_grid


@pytest.fixture
def gradient_image() -> Image.Image:
    """A 300x240 RGB image where nearly every pixel differs from its neighbours."""
    height, width = 240, 300
    ys, xs = np.mgrid[0:height, 0:width]
    array = np.stack([xs % 256, ys % 256, (xs * 7 + ys * 3) % 256], axis=-1).astype(np.uint8)
    return Image.fromarray(array, "RGB")
