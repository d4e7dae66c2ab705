from edm_slicer.core.document import EdmDocument
from edm_slicer.core.imaging import encode_png, pil2tensor
from edm_slicer.node_slicer import EDM_GridSlicer
from PIL import Image

image = Image.new("RGB", (600, 400), (200, 40, 40))

document = EdmDocument()
document.merge(["1-1", "1-2"])
document.set_link("3-3", "https://example.com")
result = document.slice_source(encode_png(image), image.width, image.height)
print(result.complete, sorted(result.images))
print(document.to_html(use_placeholders=True))

node = EDM_GridSlicer()
preview, html, cell_images, help_text = node.slice(
    image=pil2tensor(image),
    grid_config='{"rows": [0, 50, 100], "cols": [0, 50, 100], "mergedCells": []}',
    cell_links='{"1-2": "https://example.com"}',
    alignment="center",
    use_placeholders=True,
    overlay_thickness=2,
    overlay_color="red",
    show_cell_ids=True,
)
print(preview.shape)
print(html)
