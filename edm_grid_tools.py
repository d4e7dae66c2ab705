"""Grid editing and reconstruction nodes for eDM layouts."""

from __future__ import annotations

import json
from typing import List

from .categories import icons
from .config import MAX_BREAKPOINTS
from .core.document import EdmDocument
from .core.imaging import pil2tensor
from .core.parsing import dump_grid_json, load_grid_json, parse_cell_links, parse_cell_map, parse_selection

OPERATIONS = [
    "none",
    "insert row",
    "remove row",
    "insert column",
    "remove column",
    "drag row divider",
    "drag column divider",
    "merge cells",
    "unmerge cell",
    "reset",
]


def _describe_cells(document: EdmDocument) -> str:
    lines: List[str] = []
    for cell in document.cells():
        span = f" span {cell.row_span}x{cell.col_span}" if cell.row_span > 1 or cell.col_span > 1 else ""
        link = document.cell_links.get(cell.id)
        suffix = f" -> {link}" if link else ""
        lines.append(
            f"{cell.id}{span}: left {cell.left:.2f}% top {cell.top:.2f}% "
            f"width {cell.width:.2f}% height {cell.height:.2f}%{suffix}"
        )
    return "\n".join(lines)


class EDM_GridEditor:
    """Apply one edit to an eDM grid config and report the resulting cells."""

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "required": {
                "grid_config": ("STRING", {"multiline": True, "forceInput": True}),
                "operation": (OPERATIONS,),
                "index": ("INT", {"default": -1, "min": -1, "max": MAX_BREAKPOINTS - 1}),
                "position": ("FLOAT", {"default": 50.0, "min": 0.0, "max": 100.0, "step": 0.01}),
                "selection": ("STRING", {"default": ""}),
            },
            "optional": {
                "cell_links": ("STRING", {"multiline": True, "default": "{}"}),
            },
        }

    RETURN_TYPES = ("STRING", "STRING", "STRING", "STRING")
    RETURN_NAMES = ("grid_config", "cell_links", "cells", "show_help")
    FUNCTION = "edit"
    CATEGORY = icons.get("EdmSlicer/Grid")

    def edit(self, grid_config, operation, index, position, selection, cell_links="{}"):
        document = EdmDocument(grid=load_grid_json(grid_config), cell_links=parse_cell_links(cell_links))
        document.prune()
        target = None if index < 0 else index
        selected = parse_selection(selection)

        if operation in ("insert row", "insert column"):
            axis = "row" if operation == "insert row" else "col"
            if not document.insert(axis, target):
                raise ValueError(f"A grid holds at most {MAX_BREAKPOINTS} breakpoints per axis.")
        elif operation in ("remove row", "remove column"):
            document.remove("row" if operation == "remove row" else "col", target)
        elif operation in ("drag row divider", "drag column divider"):
            if target is None:
                raise ValueError("Dragging a divider needs a breakpoint index.")
            document.drag_divider("row" if operation == "drag row divider" else "col", target, position)
        elif operation == "merge cells":
            check = document.merge(selected)
            if not check.valid:
                raise ValueError(f"Cells {', '.join(selected) or '(none)'} do not form a solid rectangle.")
        elif operation == "unmerge cell":
            for cell_id in selected:
                document.unmerge(cell_id)
        elif operation == "reset":
            document.reset()

        show_help = (
            "EdmGridEditor: index is a 0-based breakpoint index (-1 acts on the middle of the axis); "
            "insert splits the band after it, remove joins the two bands around it. "
            "Drag positions are percentages and stay 2 units away from neighbouring dividers. "
            "selection lists cell ids like '1-1, 1-2' for merge/unmerge."
        )
        return (
            dump_grid_json(document.grid),
            json.dumps(document.cell_links),
            _describe_cells(document),
            show_help,
        )


class EDM_ReconstructImage:
    """Rebuild a single preview image from previously sliced cell images."""

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "required": {
                "cell_images": ("STRING", {"multiline": True, "forceInput": True}),
                "grid_config": ("STRING", {"multiline": True, "forceInput": True}),
                "image_width": ("INT", {"default": 1920, "min": 8, "max": 8192}),
                "image_height": ("INT", {"default": 1080, "min": 8, "max": 8192}),
            },
        }

    RETURN_TYPES = ("IMAGE", "STRING")
    RETURN_NAMES = ("image", "show_help")
    FUNCTION = "reconstruct"
    CATEGORY = icons.get("EdmSlicer/Preview")

    def reconstruct(self, cell_images, grid_config, image_width, image_height):
        document = EdmDocument(
            grid=load_grid_json(grid_config),
            cell_images=parse_cell_map(cell_images, "cell images"),
            image_width=image_width,
            image_height=image_height,
        )
        image = document.reconstruct()
        show_help = "Cells without an image are left white; images are loaded from data URLs or local paths."
        return pil2tensor(image), show_help


NODE_CLASS_MAPPINGS = {
    "EDM_GridEditor": EDM_GridEditor,
    "EDM_ReconstructImage": EDM_ReconstructImage,
}

NODE_DISPLAY_NAME_MAPPINGS = {
    "EDM_GridEditor": "eDM Grid Editor",
    "EDM_ReconstructImage": "eDM Reconstruct Image",
}
