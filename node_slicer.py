"""Node definitions for the eDM grid slicer."""

from __future__ import annotations

import json
from typing import Optional

import torch

from .categories import icons
from .config import ALIGNMENTS, COLORS, color_mapping
from .core.colors import get_color_values
from .core.grid import default_grid
from .core.imaging import encode_png, pil2tensor, slice_image, tensor2pil
from .core.markup import encode_html
from .core.parsing import dump_grid_json, load_grid_json, parse_cell_links
from .core.rendering import draw_cell_labels, draw_grid_overlay


class EDM_GridSlicer:
    """Slice an image along an eDM grid and export email-safe HTML."""

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "required": {
                "image": ("IMAGE",),
                "grid_config": ("STRING", {"multiline": True, "default": dump_grid_json(default_grid())}),
                "cell_links": ("STRING", {"multiline": True, "default": "{}"}),
                "alignment": (ALIGNMENTS,),
                "use_placeholders": ("BOOLEAN", {"default": True}),
                "overlay_thickness": ("INT", {"default": 2, "min": 0, "max": 64}),
                "overlay_color": (COLORS,),
                "show_cell_ids": ("BOOLEAN", {"default": True}),
            },
            "optional": {
                "overlay_color_hex": ("STRING", {"default": "#FF0000"}),
                "max_workers": ("INT", {"default": 1, "min": 1, "max": 32}),
            },
        }

    RETURN_TYPES = ("IMAGE", "STRING", "STRING", "STRING")
    RETURN_NAMES = ("preview", "html", "cell_images", "show_help")
    FUNCTION = "slice"
    CATEGORY = icons.get("EdmSlicer/Slicing")

    def slice(
        self,
        image: torch.Tensor,
        grid_config: str,
        cell_links: str,
        alignment: str,
        use_placeholders: bool,
        overlay_thickness: int,
        overlay_color: str,
        show_cell_ids: bool,
        overlay_color_hex: Optional[str] = None,
        max_workers: Optional[int] = None,
    ):
        grid = load_grid_json(grid_config)
        links = parse_cell_links(cell_links)

        source = tensor2pil(image[0])
        width, height = source.size

        result = slice_image(
            encode_png(source),
            width,
            height,
            grid,
            max_workers=max(max_workers or 1, 1),
        )
        result.raise_for_failures()

        html = encode_html(grid, result.images, links, alignment, width, use_placeholders=use_placeholders)

        line_rgb = get_color_values(overlay_color, color_mapping, overlay_color_hex or "#FF0000")
        preview = draw_grid_overlay(source, grid, overlay_thickness, line_rgb)
        if show_cell_ids:
            preview = draw_cell_labels(preview, grid, line_rgb)

        show_help = (
            "EdmSlicer: grid_config is the persisted grid JSON (rows/cols breakpoints 0-100 plus mergedCells). "
            "cell_links maps cell ids such as '1-2' to http(s) URLs. "
            "With use_placeholders the HTML names inline images cell_<row>-<col>.png until real URLs exist. "
            f"Sliced {len(result.images)} cells from a {width}x{height} image."
        )

        return (pil2tensor(preview), html, json.dumps(result.images), show_help)
