"""Globe label projection and per-frame screen-space hit testing."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence

import yaml

from .globe import Camera, angle_between
from .models import Label, LabelHit, ScreenRect

_LOGGER = logging.getLogger("globegrid.labels")

# Font metric fallbacks as a share of the font size.
_ASCENT_RATIO = 0.8
_DESCENT_RATIO = 0.2


@dataclass(frozen=True, slots=True)
class TextMetrics:
    width: float
    ascent: float | None = None
    descent: float | None = None


class TextMeasurer(Protocol):
    def measure(self, text: str, font_size: int) -> TextMetrics: ...


class PilTextMeasurer:
    """Measures label text with a Pillow font.

    Ascent and descent are reported as `None` when the font cannot be
    measured against its baseline (bitmap fonts), so the caller falls back
    to size-derived constants.
    """

    def __init__(self, font_path: Path | None = None) -> None:
        self.font_path = font_path
        self._fonts: dict[int, Any] = {}

    def _font(self, font_size: int) -> Any:
        font = self._fonts.get(font_size)
        if font is None:
            from PIL import ImageFont

            if self.font_path is not None:
                font = ImageFont.truetype(str(self.font_path), font_size)
            else:
                font = ImageFont.load_default(size=font_size)
            self._fonts[font_size] = font
        return font

    def measure(self, text: str, font_size: int) -> TextMetrics:
        from PIL import ImageFont

        font = self._font(font_size)
        width = float(font.getlength(text))
        # Bitmap fonts ignore `anchor` and would report a zero ascent.
        if not isinstance(font, ImageFont.FreeTypeFont):
            return TextMetrics(width=width)
        try:
            _, top, _, bottom = font.getbbox(text, anchor="ls")
        except (TypeError, ValueError):
            return TextMetrics(width=width)
        return TextMetrics(width=width, ascent=float(-top), descent=float(bottom))


@dataclass(frozen=True, slots=True)
class LabelStyle:
    font_size: int = 14
    pad_x: float = 3.0
    pad_top: float = 5.0
    pad_bottom: float = 4.0

    def box_size(self, metrics: TextMetrics) -> tuple[float, float]:
        ascent = metrics.ascent
        if ascent is None:
            ascent = math.ceil(self.font_size * _ASCENT_RATIO)
        descent = metrics.descent
        if descent is None:
            descent = math.ceil(self.font_size * _DESCENT_RATIO)
        width = metrics.width + self.pad_x * 2
        height = ascent + descent + self.pad_top + self.pad_bottom
        return width, height


def parse_labels(raw: Iterable[Any]) -> list[Label]:
    """Build labels, skipping entries without a name or usable coordinates."""
    labels: list[Label] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            _LOGGER.warning("Label #%d is not a mapping, skipping.", idx)
            continue
        if not isinstance(item.get("name"), str) or not item["name"].strip():
            _LOGGER.warning(
                "Label for lat/lon %s/%s has no name, skipping.", item.get("lat"), item.get("lon")
            )
            continue
        try:
            labels.append(Label.from_mapping(item))
        except ValueError as exc:
            _LOGGER.warning("Label '%s' skipped: %s", item["name"], exc)
    return labels


def load_labels(path: Path) -> list[Label]:
    """Load labels from a JSON or YAML list."""
    if not path.exists():
        raise FileNotFoundError(f"Labels file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            raw = yaml.safe_load(fh)
        else:
            raw = json.load(fh)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Expected list of labels in {path}")
    labels = parse_labels(raw)
    _LOGGER.info("Loaded %d labels from %s", len(labels), path)
    return labels


class LabelLayer:
    """Projects labels to screen rectangles and answers hover hit tests.

    `rebuild` replaces the whole rectangle list; hit tests always run
    against the most recent frame.
    """

    def __init__(
        self,
        labels: Sequence[Label],
        measurer: TextMeasurer,
        style: LabelStyle | None = None,
    ) -> None:
        self.labels = tuple(labels)
        self.measurer = measurer
        self.style = style or LabelStyle()
        self._hits: list[LabelHit] = []

    @property
    def hits(self) -> tuple[LabelHit, ...]:
        return tuple(self._hits)

    def rebuild(self, camera: Camera, width: float, height: float) -> list[LabelHit]:
        hits: list[LabelHit] = []
        for label in self.labels:
            # Far side of the globe, valid for a camera outside the sphere.
            if angle_between(label.position, camera.position) > math.pi / 2:
                continue
            ndc_x, ndc_y, ndc_z = camera.project(label.position)
            if ndc_z > 1:
                continue

            px = (ndc_x + 1) / 2 * width
            py = (1 - ndc_y) / 2 * height
            box_w, box_h = self.style.box_size(self.measurer.measure(label.name, self.style.font_size))
            rect = ScreenRect(x=px - box_w / 2, y=py - box_h, width=box_w, height=box_h)
            hits.append(
                LabelHit(
                    lat=label.lat,
                    lon=label.lon,
                    name=label.name,
                    description=label.description,
                    rect=rect,
                )
            )
        self._hits = hits
        _LOGGER.debug("Label frame rebuilt: %d of %d labels visible", len(hits), len(self.labels))
        return list(hits)

    def hit(self, px: float, py: float) -> LabelHit | None:
        """Topmost (last drawn) label whose rectangle contains the point."""
        for label_hit in reversed(self._hits):
            if label_hit.rect.contains(px, py):
                return label_hit
        return None

    def query_label_at(self, px: float, py: float) -> dict[str, Any] | None:
        label_hit = self.hit(px, py)
        return label_hit.to_dict() if label_hit is not None else None
