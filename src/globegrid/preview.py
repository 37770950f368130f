"""Equirectangular PNG preview of a country grid for visual QA."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from PIL import Image, ImageColor

from .grid import GRID_HEIGHT, GRID_WIDTH, CountryGrid

_LOGGER = logging.getLogger("globegrid.preview")


def identifier_color(identifier: str) -> tuple[int, int, int]:
    """Stable, reasonably bright colour derived from the identifier."""
    digest = hashlib.sha256(identifier.encode("utf-8")).digest()
    red, green, blue = digest[:3]
    return (64 + red % 192, 64 + green % 192, 64 + blue % 192)


def render_grid_preview(
    grid: CountryGrid,
    output_path: Path,
    *,
    scale: int = 4,
    ocean_color: str = "#10202c",
) -> Path:
    if scale < 1:
        raise ValueError("scale must be >= 1")
    background = ImageColor.getrgb(ocean_color)[:3]
    image = Image.new("RGB", (GRID_WIDTH, GRID_HEIGHT), background)
    pixels = image.load()
    for x, column in enumerate(grid.cells):
        for y, identifier in enumerate(column):
            if identifier is not None:
                pixels[x, y] = identifier_color(identifier)
    if scale > 1:
        image = image.resize((GRID_WIDTH * scale, GRID_HEIGHT * scale), Image.Resampling.NEAREST)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format="PNG")
    _LOGGER.info("Grid preview written to %s (%dx%d)", output_path, image.width, image.height)
    return output_path
