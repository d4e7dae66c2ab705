"""Image slicing and reconstruction for eDM grids."""

from __future__ import annotations

import base64
import io
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Tuple

import numpy as np
import torch
from PIL import Image

from .geometry import resolve_cells, to_pixel_rect
from .types import GridConfig, PixelRect

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"

Cropper = Callable[[bytes, int, int, int, int], bytes]
Store = Callable[[str, bytes], str]
Loader = Callable[[str], Image.Image]


def tensor2pil(image: torch.Tensor) -> Image.Image:
    """Convert a ComfyUI tensor into a PIL image."""
    array = np.clip(255.0 * image.cpu().numpy().squeeze(), 0, 255).astype(np.uint8)
    return Image.fromarray(array)


def pil2tensor(image: Image.Image) -> torch.Tensor:
    """Convert a PIL image into a ComfyUI tensor."""
    array = np.array(image.convert("RGB")).astype(np.float32) / 255.0
    return torch.from_numpy(array).unsqueeze(0)


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url(data: bytes) -> str:
    """Wrap PNG bytes in an inline ``data:`` reference."""
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def is_data_reference(reference: str) -> bool:
    return reference.startswith(DATA_URL_PREFIX)


def decode_data_url(reference: str) -> bytes:
    """Extract the payload of a base64 ``data:`` URL."""
    header, _, payload = reference.partition(",")
    if not header.startswith(DATA_URL_PREFIX) or not header.endswith(";base64") or not payload:
        raise ValueError("Only base64 data URLs are supported.")
    return base64.b64decode(payload)


def crop_png(source: bytes, left: int, top: int, width: int, height: int) -> bytes:
    """Crop a rectangle out of encoded image bytes and return it as PNG."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot crop an empty {width}x{height} region.")
    with Image.open(io.BytesIO(source)) as image:
        region = image.crop((left, top, left + width, top + height))
        return encode_png(region)


def store_as_data_url(cell_id: str, data: bytes) -> str:
    """Default store: keep each cell inline as a data URL."""
    return png_data_url(data)


class SliceError(RuntimeError):
    """One or more cells failed to crop."""

    def __init__(self, failures: Mapping[str, Exception]):
        self.failures = dict(failures)
        ids = ", ".join(self.failures)
        super().__init__(f"Failed to slice {len(self.failures)} cell(s): {ids}")


@dataclass
class SliceResult:
    """Per-cell image references plus any per-cell failures."""
    images: Dict[str, str] = field(default_factory=dict)
    rects: Dict[str, PixelRect] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise SliceError(self.failures)


def cell_pixel_rects(grid: GridConfig, width: int, height: int) -> Dict[str, PixelRect]:
    """Pixel rectangle of every visible cell, in row-major order."""
    return {
        cell.id: to_pixel_rect(cell.rect, width, height)
        for cell in resolve_cells(grid)
    }


def slice_image(
    source: bytes,
    width: int,
    height: int,
    grid: GridConfig,
    cropper: Cropper = crop_png,
    store: Store = store_as_data_url,
    max_workers: int = 1,
) -> SliceResult:
    """Crop ``source`` into one image per visible cell.

    With ``max_workers > 1`` crops run on a thread pool; either way every
    cell finishes before this returns. A failing cell is recorded in
    ``failures`` and does not stop the others.
    """
    rects = cell_pixel_rects(grid, width, height)
    result = SliceResult(rects=rects)

    def crop_cell(cell_id: str, rect: PixelRect) -> str:
        data = cropper(source, rect.left, rect.top, rect.width, rect.height)
        return store(cell_id, data)

    references: Dict[str, str] = {}

    def record_failure(cell_id: str, exc: Exception) -> None:
        logger.warning("Failed to slice cell %s (%s): %s", cell_id, rects[cell_id], exc)
        result.failures[cell_id] = exc

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {
                pool.submit(crop_cell, cell_id, rect): cell_id
                for cell_id, rect in rects.items()
            }
            for future in as_completed(futures):
                cell_id = futures[future]
                try:
                    references[cell_id] = future.result()
                except Exception as exc:
                    record_failure(cell_id, exc)
    else:
        for cell_id, rect in rects.items():
            try:
                references[cell_id] = crop_cell(cell_id, rect)
            except Exception as exc:
                record_failure(cell_id, exc)

    result.failures = {cell_id: result.failures[cell_id] for cell_id in rects if cell_id in result.failures}
    result.images = {cell_id: references[cell_id] for cell_id in rects if cell_id in references}

    logger.debug("Sliced %d/%d cells from %dx%d source", len(result.images), len(rects), width, height)
    return result


def load_image(reference: str) -> Image.Image:
    """Load a cell image from a data URL or a local file path."""
    if is_data_reference(reference):
        image = Image.open(io.BytesIO(decode_data_url(reference)))
    elif os.path.isfile(reference):
        image = Image.open(reference)
    else:
        raise ValueError(f"Cannot load image reference {reference[:64]!r}; pass a loader for remote URLs.")
    image.load()
    return image


def reconstruct_image(
    cell_images: Mapping[str, str],
    width: int,
    height: int,
    grid: GridConfig,
    loader: Loader = load_image,
    background: Tuple[int, int, int] = (255, 255, 255),
) -> Image.Image:
    """Composite per-cell images back into one ``width`` x ``height`` image.

    Cells without an image are left as background.
    """
    canvas = Image.new("RGB", (width, height), background)
    for cell_id, rect in cell_pixel_rects(grid, width, height).items():
        reference = cell_images.get(cell_id)
        if not reference or rect.width <= 0 or rect.height <= 0:
            continue

        tile = loader(reference).convert("RGB")
        if tile.size != (rect.width, rect.height):
            tile = tile.resize((rect.width, rect.height), Image.Resampling.LANCZOS)
        canvas.paste(tile, (rect.left, rect.top))
    return canvas
