from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from globegrid.models import Feature, Geometry


def square(min_lon: float, min_lat: float, max_lon: float, max_lat: float) -> list[list[float]]:
    return [
        [min_lon, min_lat],
        [max_lon, min_lat],
        [max_lon, max_lat],
        [min_lon, max_lat],
        [min_lon, min_lat],
    ]


def polygon_feature(name: str, *rings: list[list[float]]) -> Feature:
    return Feature(
        identifier=name,
        geometry=Geometry(type="Polygon", coordinates=[list(r) for r in rings]),
        properties={"admin": name},
    )


def multipolygon_feature(name: str, *polygons: list[list[list[float]]]) -> Feature:
    return Feature(
        identifier=name,
        geometry=Geometry(type="MultiPolygon", coordinates=[list(p) for p in polygons]),
        properties={"admin": name},
    )


def raw_feature(properties: dict[str, Any], geometry: dict[str, Any] | None) -> dict[str, Any]:
    return {"type": "Feature", "properties": properties, "geometry": geometry}


def write_collection(path: Path, features: list[dict[str, Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"type": "FeatureCollection", "features": features}),
        encoding="utf-8",
    )
    return path


def write_testland(path: Path) -> Path:
    return write_collection(
        path,
        [
            raw_feature(
                {"admin": "Testland"},
                {"type": "Polygon", "coordinates": [square(0, 0, 2, 2)]},
            )
        ],
    )
