"""Shared constants for the eDM slicer nodes."""

from typing import Dict, List, Tuple

DEFAULT_BREAKPOINTS: Tuple[float, ...] = (0.0, 33.33, 66.66, 100.0)

# Editors refuse to add breakpoints past this count (9 bands per axis).
MAX_BREAKPOINTS = 10
MIN_BREAKPOINTS = 2

MIN_DIVIDER_GAP = 2.0
SEGMENT_TOLERANCE = 0.01

ALIGNMENTS: List[str] = ["left", "center", "right"]

ALIGNMENT_MARGINS: Dict[str, str] = {
    "left": "",
    "center": "margin: 0 auto",
    "right": "margin-left: auto",
}

COLORS: List[str] = [
    "custom",
    "white",
    "black",
    "red",
    "green",
    "blue",
    "yellow",
    "cyan",
    "magenta",
    "orange",
    "gray",
]

color_mapping: Dict[str, Tuple[int, int, int]] = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "cyan": (0, 255, 255),
    "magenta": (255, 0, 255),
    "orange": (255, 165, 0),
    "gray": (128, 128, 128),
}
