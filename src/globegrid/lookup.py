"""Runtime country lookup: grid queries plus lazily cached outlines."""

from __future__ import annotations

import logging
import math
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Sequence

from .globe import Vec3, lat_lon_to_vector3, length, vector3_to_lat_lon
from .grid import CountryGrid
from .io_geo import FeatureCollectionRepository
from .models import Feature

OUTLINE_RADIUS = 1.001

Outline = tuple[tuple[Vec3, ...], ...]

_LOGGER = logging.getLogger("globegrid.lookup")


class CountryLookup:
    """Owns the loaded grid and feature geometry for one session.

    The grid and the geometry load independently, each gating its own
    query path through a readiness flag. Queries before readiness return
    `None` instead of raising.
    """

    def __init__(self, grid_path: Path, repository: FeatureCollectionRepository | None = None) -> None:
        self.grid_path = grid_path
        self.repository = repository
        self.grid_ready = False
        self.geometry_ready = False
        self._grid: CountryGrid | None = None
        self._features: dict[str, Feature] = {}
        self._outlines: dict[str, Outline] = {}

    @classmethod
    def from_grid(cls, grid: CountryGrid, features: Sequence[Feature] = ()) -> CountryLookup:
        """Build a ready lookup from in-memory data."""
        lookup = cls(Path("<memory>"))
        lookup._grid = grid
        lookup.grid_ready = True
        if features:
            lookup._features = _index_features(features)
            lookup.geometry_ready = True
        return lookup

    def load_grid(self) -> bool:
        try:
            grid = CountryGrid.load(self.grid_path)
        except (OSError, ValueError) as exc:
            _LOGGER.error("Failed to load country grid from %s: %s", self.grid_path, exc)
            return False
        self._grid = grid
        self.grid_ready = True
        _LOGGER.info("Country grid loaded and ready for interaction.")
        return True

    def load_geometry(self) -> bool:
        if self.repository is None:
            _LOGGER.warning("No feature collection configured; outlines unavailable.")
            return False
        try:
            features = self.repository.load_features()
        except (OSError, ValueError, RuntimeError) as exc:
            _LOGGER.error("Failed to load feature geometry from %s: %s", self.repository.path, exc)
            return False
        self._features = _index_features(features)
        self.geometry_ready = True
        _LOGGER.info("Feature geometry for outlines loaded and ready.")
        return True

    def load_async(self, executor: Executor | None = None) -> tuple[Future[bool], Future[bool]]:
        """Start the grid and geometry loads as two independent tasks."""
        pool = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="globegrid-load")
        futures = (pool.submit(self.load_grid), pool.submit(self.load_geometry))
        if executor is None:
            pool.shutdown(wait=False)
        return futures

    def query_country(self, lat: float, lon: float) -> str | None:
        if not self.grid_ready or self._grid is None:
            _LOGGER.warning("Country grid not ready")
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None
        return self._grid.query(lat, lon)

    def query_point(self, point: Vec3) -> str | None:
        """Country under a point on the globe surface, e.g. a raycast hit."""
        radius = length(point)
        if radius == 0.0 or not math.isfinite(radius):
            return None
        lat, lon = vector3_to_lat_lon(point, radius)
        return self.query_country(lat, lon)

    def feature(self, identifier: str) -> Feature | None:
        return self._features.get(identifier)

    def outline(self, identifier: str) -> Outline | None:
        """Rings of the feature lifted just above the unit sphere, cached per identifier."""
        if not self.geometry_ready:
            _LOGGER.warning("Geometry not ready for drawing outlines.")
            return None
        cached = self._outlines.get(identifier)
        if cached is not None:
            return cached
        feature = self._features.get(identifier)
        if feature is None:
            return None
        outline = tuple(
            tuple(lat_lon_to_vector3(vertex[1], vertex[0], OUTLINE_RADIUS) for vertex in ring)
            for ring in feature.geometry.rings()
        )
        self._outlines[identifier] = outline
        return outline


def _index_features(features: Sequence[Feature]) -> dict[str, Feature]:
    # Dataset order decides duplicates, matching grid claim order.
    index: dict[str, Feature] = {}
    for feature in features:
        index.setdefault(feature.identifier, feature)
    return index
