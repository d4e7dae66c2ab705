"""Colour helpers for eDM grid previews."""

from __future__ import annotations

from typing import Dict, Tuple


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Translate a ``#rrggbb`` string into an RGB tuple."""
    value = hex_color.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb colour, got {hex_color!r}.")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def get_color_values(color: str, mapping: Dict[str, Tuple[int, int, int]], color_hex: str = "#000000") -> Tuple[int, int, int]:
    """Resolve a colour preset name, or the manual hex value for ``custom``."""
    if color == "custom":
        return hex_to_rgb(color_hex)
    return mapping.get(color, (0, 0, 0))
