"""Domain models shared across index and label modules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .globe import Vec3, lat_lon_to_vector3

Ring = Sequence[Sequence[float]]
Polygon = Sequence[Ring]

POLYGON = "Polygon"
MULTI_POLYGON = "MultiPolygon"
SUPPORTED_GEOMETRY_TYPES = (POLYGON, MULTI_POLYGON)


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected numeric value for '{field_name}'")
    return float(value)


@dataclass(frozen=True, slots=True)
class Geometry:
    """GeoJSON-style geometry: `Polygon` rings or `MultiPolygon` polygons."""

    type: str
    coordinates: Any

    @property
    def supported(self) -> bool:
        return self.type in SUPPORTED_GEOMETRY_TYPES

    def polygons(self) -> list[Polygon]:
        """Constituent polygons; empty for unsupported types."""
        if self.type == POLYGON:
            return [self.coordinates or []]
        if self.type == MULTI_POLYGON:
            return list(self.coordinates or [])
        return []

    def rings(self) -> list[Ring]:
        return [ring for polygon in self.polygons() for ring in polygon]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> Geometry:
        if data is None:
            return cls(type="None", coordinates=None)
        geom_type = data.get("type")
        return cls(
            type=str(geom_type) if geom_type is not None else "None",
            coordinates=data.get("coordinates"),
        )


@dataclass(frozen=True, slots=True)
class Feature:
    """One named country/region from a feature collection."""

    identifier: str
    geometry: Geometry
    properties: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Label:
    """Geographic point of interest with a cached unit-sphere position."""

    name: str
    lat: float
    lon: float
    description: str | None = None
    position: Vec3 = (0.0, 0.0, 0.0)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Label:
        name = _require_str(data.get("name"), "name")
        lat = _require_number(data.get("lat"), "lat")
        lon = _require_number(data.get("lon"), "lon")
        description_raw = data.get("description")
        description = str(description_raw) if description_raw is not None else None
        return cls(
            name=name,
            lat=lat,
            lon=lon,
            description=description,
            position=lat_lon_to_vector3(lat, lon),
        )


@dataclass(frozen=True, slots=True)
class ScreenRect:
    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass(frozen=True, slots=True)
class LabelHit:
    """Per-frame hit region pointing back at its source label."""

    lat: float
    lon: float
    name: str
    description: str | None
    rect: ScreenRect

    def to_dict(self) -> dict[str, Any]:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "name": self.name,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class GridManifest:
    """Build metadata written next to a grid artifact."""

    generated_at_utc: str
    source_sha256: str
    git_commit: str | None
    feature_count: int
    skipped_count: int
    assigned_cells: int

    @classmethod
    def create(
        cls,
        *,
        source_sha256: str,
        git_commit: str | None,
        feature_count: int,
        skipped_count: int,
        assigned_cells: int,
    ) -> GridManifest:
        now = datetime.now(timezone.utc).isoformat()
        return cls(
            generated_at_utc=now,
            source_sha256=source_sha256,
            git_commit=git_commit,
            feature_count=feature_count,
            skipped_count=skipped_count,
            assigned_cells=assigned_cells,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at_utc": self.generated_at_utc,
            "source_sha256": self.source_sha256,
            "git_commit": self.git_commit,
            "feature_count": self.feature_count,
            "skipped_count": self.skipped_count,
            "assigned_cells": self.assigned_cells,
        }
