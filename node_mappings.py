"""Node registration for the eDM grid slicer."""

from .node_slicer import EDM_GridSlicer
from .edm_grid_tools import NODE_CLASS_MAPPINGS as GRID_TOOL_CLASSES
from .edm_grid_tools import NODE_DISPLAY_NAME_MAPPINGS as GRID_TOOL_DISPLAY_NAMES

NODE_CLASS_MAPPINGS = {
    "EDM_GridSlicer": EDM_GridSlicer,
    **GRID_TOOL_CLASSES,
}

NODE_DISPLAY_NAME_MAPPINGS = {
    "EDM_GridSlicer": "eDM Grid Slicer",
    **GRID_TOOL_DISPLAY_NAMES,
}
