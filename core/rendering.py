"""Rendering helpers for eDM grid previews."""

from __future__ import annotations

from typing import List, Tuple

from PIL import Image, ImageDraw

from .dividers import col_line_segments, row_line_segments
from .geometry import percent_to_pixels, resolve_cells, to_pixel_rect
from .types import GridConfig

Line = Tuple[Tuple[int, int], Tuple[int, int]]


def divider_lines(grid: GridConfig, width: int, height: int) -> List[Line]:
    """Pixel endpoints of every visible divider segment."""
    lines: List[Line] = []
    for index, segments in enumerate(row_line_segments(grid), start=1):
        y = percent_to_pixels(grid.rows[index], height)
        for start, end in segments:
            lines.append(((percent_to_pixels(start, width), y), (percent_to_pixels(end, width), y)))
    for index, segments in enumerate(col_line_segments(grid), start=1):
        x = percent_to_pixels(grid.cols[index], width)
        for start, end in segments:
            lines.append(((x, percent_to_pixels(start, height)), (x, percent_to_pixels(end, height))))
    return lines


def draw_grid_overlay(
    page: Image.Image,
    grid: GridConfig,
    line_thickness: int,
    line_color: Tuple[int, int, int],
) -> Image.Image:
    """Draw the grid's divider segments over a copy of ``page`` with antialiasing.

    Lines hidden inside merged cells are not drawn.
    """
    preview = page.convert("RGB")
    lines = divider_lines(grid, preview.width, preview.height)
    if line_thickness <= 0 or not lines:
        return preview

    scale_factor = 4
    scaled_size = (preview.width * scale_factor, preview.height * scale_factor)
    temp_image = Image.new("RGBA", scaled_size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(temp_image)
    scaled_width = max(line_thickness, 1) * scale_factor
    rgba_color = (*line_color, 255)

    for (sx, sy), (ex, ey) in lines:
        draw.line(
            [(sx * scale_factor, sy * scale_factor), (ex * scale_factor, ey * scale_factor)],
            fill=rgba_color,
            width=scaled_width,
        )

    antialiased = temp_image.resize(preview.size, Image.Resampling.LANCZOS)
    preview.paste(antialiased, (0, 0), antialiased)
    return preview


def draw_cell_labels(page: Image.Image, grid: GridConfig, color: Tuple[int, int, int]) -> Image.Image:
    """Write each cell id in the top-left corner of its cell."""
    preview = page.convert("RGB")
    draw = ImageDraw.Draw(preview)
    for cell in resolve_cells(grid):
        rect = to_pixel_rect(cell.rect, preview.width, preview.height)
        draw.text((rect.left + 4, rect.top + 4), cell.id, fill=color)
    return preview
