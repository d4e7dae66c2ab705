"""Email-safe HTML table export for sliced eDM grids."""

from __future__ import annotations

from html import escape
from typing import Dict, List, Mapping, Set

from ..config import ALIGNMENT_MARGINS
from .geometry import cell_footprint, resolve_cells
from .imaging import is_data_reference
from .parsing import format_cell_id
from .types import BandCoord, CellInfo, GridConfig

PLACEHOLDER_COMMENT = (
    "<!-- Image paths: replaced with stored image URLs on save. "
    "Preview placeholders use cell_row-col.png -->"
)

TD_STYLE = "padding: 0; vertical-align: top; border: none"
IMG_STYLE = "display: block; width: 100%; max-width: 100%; height: auto; border: none"


def format_percent(value: float) -> str:
    """Render a percentage with at most four decimals and no trailing zeros."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def table_style(alignment: str, image_width: int) -> str:
    if alignment not in ALIGNMENT_MARGINS:
        raise ValueError(f"Unknown alignment {alignment!r}; expected left, center or right.")
    parts = [
        "width: 100%",
        f"max-width: {int(image_width)}px",
        "min-width: 320px",
        "border-collapse: collapse",
        "border-spacing: 0",
        "padding: 0",
        "table-layout: fixed",
        ALIGNMENT_MARGINS[alignment],
    ]
    return "; ".join(part for part in parts if part)


def image_reference(reference: str, cell_id: str, use_placeholders: bool) -> str:
    """The src to emit for a cell, swapping inline data for a placeholder name when asked."""
    if use_placeholders and is_data_reference(reference):
        return f"cell_{cell_id}.png"
    return reference


def render_cell(cell: CellInfo, reference: str, link: str) -> str:
    """One ``<td>`` with its span attributes and optional linked image."""
    attributes = ""
    if cell.row_span > 1:
        attributes += f' rowspan="{cell.row_span}"'
    if cell.col_span > 1:
        attributes += f' colspan="{cell.col_span}"'

    content = ""
    if reference:
        content = (
            f'<img src="{escape(reference)}" alt="Cell {cell.id}" style="{IMG_STYLE}" />'
        )
        if link:
            content = f'<a href="{escape(link)}" target="_blank" style="display:block;">{content}</a>'

    return f'<td{attributes} style="{TD_STYLE}">{content}</td>'


def encode_html(
    grid: GridConfig,
    cell_images: Mapping[str, str],
    cell_links: Mapping[str, str],
    alignment: str,
    image_width: int,
    use_placeholders: bool = False,
) -> str:
    """Encode a grid with its cell images and links as a single ``<table>``.

    Merged cells become one ``<td>`` with ``rowspan``/``colspan``; columns
    get proportional widths through ``<colgroup>``. The output depends only
    on the arguments, so identical input gives identical markup.
    """
    cells: Dict[BandCoord, CellInfo] = {
        BandCoord(cell.row, cell.col): cell for cell in resolve_cells(grid)
    }

    lines: List[str] = [
        f'<table border="0" cellpadding="0" cellspacing="0" width="100%" '
        f'style="{table_style(alignment, image_width)}">',
        "  <colgroup>",
    ]
    for left, right in zip(grid.cols, grid.cols[1:]):
        lines.append(f'    <col style="width: {format_percent(right - left)}%;" />')
    lines.append("  </colgroup>")

    rendered: Set[BandCoord] = set()
    for row in range(1, grid.row_count + 1):
        lines.append("  <tr>")
        for col in range(1, grid.col_count + 1):
            band = BandCoord(row, col)
            if band in rendered:
                continue
            cell = cells.get(band)
            if cell is None:
                continue
            rendered.update(cell_footprint(cell))

            cell_id = format_cell_id(row, col)
            reference = image_reference(cell_images.get(cell_id, ""), cell_id, use_placeholders)
            lines.append("    " + render_cell(cell, reference, cell_links.get(cell_id, "")))
        lines.append("  </tr>")
    lines.append("</table>")

    html = "\n".join(lines)
    if use_placeholders:
        return f"{PLACEHOLDER_COMMENT}\n{html}"
    return html
