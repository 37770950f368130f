from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from factories import polygon_feature, square
from globegrid.grid import build_country_grid
from globegrid.preview import identifier_color, render_grid_preview


def test_identifier_color_is_stable() -> None:
    assert identifier_color("Testland") == identifier_color("Testland")
    assert all(64 <= channel < 256 for channel in identifier_color("Testland"))


def test_render_grid_preview(tmp_path: Path) -> None:
    grid = build_country_grid([polygon_feature("Testland", square(0, 0, 2, 2))])
    out = render_grid_preview(grid, tmp_path / "qa" / "preview.png", scale=2, ocean_color="#000000")
    with Image.open(out) as image:
        assert image.size == (720, 360)
        assert image.getpixel((0, 0)) == (0, 0, 0)
        # cell (180, 88) scaled by 2
        assert image.getpixel((361, 177)) == identifier_color("Testland")


def test_render_grid_preview_rejects_bad_scale(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        render_grid_preview(build_country_grid([]), tmp_path / "p.png", scale=0)
