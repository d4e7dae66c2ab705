"""Menu categories for the eDM slicer nodes."""

icons = {
    "EdmSlicer/Slicing": "🧩 EdmSlicer/Slicing",
    "EdmSlicer/Grid": "🧩 EdmSlicer/Grid",
    "EdmSlicer/Preview": "🧩 EdmSlicer/Preview",
}
