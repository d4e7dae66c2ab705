"""eDM grid slicer custom node package."""

"""
@title: EdmSlicer
@nickname: EdmSlicer
@description: Slice an image into a mergeable grid and export email-safe HTML tables.
"""

from .node_mappings import NODE_CLASS_MAPPINGS, NODE_DISPLAY_NAME_MAPPINGS

print("-------------------------------")
print("\033[34mEdmSlicer\033[0m : \033[92m3 nodes loaded\033[0m")
print("-------------------------------")

__all__ = ["NODE_CLASS_MAPPINGS", "NODE_DISPLAY_NAME_MAPPINGS"]
