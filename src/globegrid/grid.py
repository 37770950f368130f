"""One-degree country lookup grid: offline builder and O(1) query."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

from .containment import point_in_feature
from .models import Feature, Geometry

GRID_WIDTH = 360
GRID_HEIGHT = 180

_LOGGER = logging.getLogger("globegrid.grid")


class GridFormatError(ValueError):
    """Raised when a serialized grid does not have the 360x180 layout."""


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _floor_index(offset: float, size: int) -> int:
    # Pin infinite offsets inside [-1, size] so floor() always has an int to return.
    return _clamp(math.floor(max(-1.0, min(float(size), offset))), 0, size - 1)


def lon_to_index(lon: float) -> int:
    return _floor_index(lon + 180, GRID_WIDTH)


def lat_to_index(lat: float) -> int:
    return _floor_index(90 - lat, GRID_HEIGHT)


def cell_center(x: int, y: int) -> tuple[float, float]:
    """Return (lon, lat) of the centre of cell (x, y)."""
    return (x + 0.5 - 180, 90 - (y + 0.5))


def _coordinate(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"non-numeric coordinate {value!r}")
    return float(value)


def normalize_lon(lon: float) -> float:
    """Apply one +/-360 correction; far out-of-range values are left to clamping."""
    if lon < -180:
        return lon + 360
    if lon > 180:
        return lon - 360
    return lon


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @classmethod
    def of_geometry(cls, geometry: Geometry) -> BoundingBox | None:
        """Scan every vertex of every ring; `None` if there are no vertices."""
        min_lon, min_lat, max_lon, max_lat = math.inf, math.inf, -math.inf, -math.inf
        for ring in geometry.rings():
            for vertex in ring:
                x, y = _coordinate(vertex[0]), _coordinate(vertex[1])
                min_lon = min(min_lon, x)
                min_lat = min(min_lat, y)
                max_lon = max(max_lon, x)
                max_lat = max(max_lat, y)
        if min_lon > max_lon:
            return None
        return cls(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)

    def cell_range(self) -> tuple[range, range]:
        """Inclusive grid index ranges covered by this box, clamped to the grid."""
        grid_min_x = lon_to_index(self.min_lon)
        grid_max_x = lon_to_index(self.max_lon)
        grid_min_y = lat_to_index(self.max_lat)
        grid_max_y = lat_to_index(self.min_lat)
        return range(grid_min_x, grid_max_x + 1), range(grid_min_y, grid_max_y + 1)


class CountryGrid:
    """Immutable `cells[lon_index][lat_index]` lookup table.

    Column 0 is longitude -180 and row 0 is the band just below the north
    pole. Cells hold a feature identifier or `None`.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Sequence[Sequence[str | None]]) -> None:
        self._cells = _validated_cells(cells)

    @property
    def cells(self) -> tuple[tuple[str | None, ...], ...]:
        return self._cells

    def cell(self, x: int, y: int) -> str | None:
        return self._cells[x][y]

    def query(self, lat: float, lon: float) -> str | None:
        x = lon_to_index(normalize_lon(lon))
        y = lat_to_index(lat)
        return self._cells[x][y]

    @property
    def assigned_cells(self) -> int:
        return sum(1 for column in self._cells for value in column if value is not None)

    def identifiers(self) -> set[str]:
        return {value for column in self._cells for value in column if value is not None}

    def to_payload(self) -> list[list[str | None]]:
        return [list(column) for column in self._cells]

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(self.to_payload(), fh, ensure_ascii=False, separators=(",", ":"))
            fh.write("\n")

    @classmethod
    def load(cls, path: Path) -> CountryGrid:
        if not path.exists():
            raise FileNotFoundError(f"Grid artifact not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            try:
                raw = json.load(fh)
            except json.JSONDecodeError as exc:
                raise GridFormatError(f"Grid artifact is not valid JSON: {path}: {exc}") from exc
        return cls(raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CountryGrid):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(self._cells)


def _validated_cells(raw: Any) -> tuple[tuple[str | None, ...], ...]:
    if not isinstance(raw, (list, tuple)) or len(raw) != GRID_WIDTH:
        raise GridFormatError(f"Expected {GRID_WIDTH} grid columns")
    columns: list[tuple[str | None, ...]] = []
    for x, column in enumerate(raw):
        if not isinstance(column, (list, tuple)) or len(column) != GRID_HEIGHT:
            raise GridFormatError(f"Expected {GRID_HEIGHT} cells in grid column {x}")
        for y, value in enumerate(column):
            if value is not None and not (isinstance(value, str) and value):
                raise GridFormatError(f"Invalid cell value at ({x}, {y}): {value!r}")
        columns.append(tuple(column))
    return tuple(columns)


@dataclass(frozen=True, slots=True)
class GridBuildResult:
    grid: CountryGrid
    indexed: int
    skipped: int


def build_country_grid(features: Iterable[Feature]) -> CountryGrid:
    """Rasterize features into a grid; the first feature to claim a cell keeps it."""
    return rasterize_features(features).grid


def rasterize_features(features: Iterable[Feature]) -> GridBuildResult:
    """Like `build_country_grid`, also reporting how many features were indexed or skipped."""
    cells: list[list[str | None]] = [[None] * GRID_HEIGHT for _ in range(GRID_WIDTH)]
    indexed = 0
    skipped = 0
    for feature in features:
        if not feature.geometry.supported:
            _LOGGER.debug(
                "Skipping '%s': unsupported geometry type %s",
                feature.identifier,
                feature.geometry.type,
            )
            skipped += 1
            continue
        try:
            claimed = _rasterize_feature(cells, feature)
        except (TypeError, ValueError, IndexError, OverflowError) as exc:
            _LOGGER.warning("Skipping '%s': malformed geometry (%s)", feature.identifier, exc)
            skipped += 1
            continue
        indexed += 1
        _LOGGER.debug("Feature '%s' claimed %d cells", feature.identifier, claimed)

    grid = CountryGrid(cells)
    _LOGGER.info(
        "Grid built: %d features indexed, %d skipped, %d cells assigned.",
        indexed,
        skipped,
        grid.assigned_cells,
    )
    return GridBuildResult(grid=grid, indexed=indexed, skipped=skipped)


def _rasterize_feature(cells: list[list[str | None]], feature: Feature) -> int:
    bbox = BoundingBox.of_geometry(feature.geometry)
    if bbox is None:
        return 0
    xs, ys = bbox.cell_range()
    claimed = 0
    for x in xs:
        column = cells[x]
        for y in ys:
            if column[y] is not None:
                continue
            lon, lat = cell_center(x, y)
            if point_in_feature(lon, lat, feature.geometry):
                column[y] = feature.identifier
                claimed += 1
    return claimed
