"""Feature collection loading and per-feature export."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .models import Feature, Geometry
from .util import write_json

_LOGGER = logging.getLogger("globegrid.io_geo")

DEFAULT_NAME_FIELDS = ("admin", "ADMIN", "name", "NAME")
GEOJSON_SUFFIXES = {".json", ".geojson"}


def _existing_fields(fields: Iterable[str], candidates: Sequence[str]) -> Iterator[str]:
    """Property keys matching the candidates (case-insensitively), in candidate order."""
    existing = {str(key).lower(): str(key) for key in fields}
    seen: set[str] = set()
    for candidate in candidates:
        match = existing.get(candidate.lower())
        if match and match not in seen:
            seen.add(match)
            yield match


def sanitize_identifier(identifier: str) -> str:
    """Filesystem-safe token: every non-alphanumeric character becomes `_`."""
    return re.sub(r"[^A-Za-z0-9]", "_", identifier)


class FeatureCollectionRepository:
    """Reads a country boundary dataset into typed `Feature` records.

    GeoJSON is parsed directly; other vector formats go through GeoPandas.
    """

    def __init__(self, path: Path, name_fields: Sequence[str] = DEFAULT_NAME_FIELDS) -> None:
        self.path = path
        self.name_fields = tuple(name_fields)

    def load_raw(self) -> list[dict[str, Any]]:
        """Return the raw GeoJSON-like feature mappings in dataset order."""
        if not self.path.exists():
            raise FileNotFoundError(f"Feature collection not found: {self.path}")
        if self.path.suffix.lower() in GEOJSON_SUFFIXES:
            with self.path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
        else:
            gpd = self._require_geopandas()
            raw = gpd.read_file(self.path).__geo_interface__
        return _feature_list(raw, self.path)

    def load_features(self) -> list[Feature]:
        """Parse features, dropping (with a warning) any without an identifier."""
        features: list[Feature] = []
        for idx, raw in enumerate(self.load_raw()):
            feature = self.to_feature(raw)
            if feature is None:
                _LOGGER.warning("Feature #%d has no name in %s, skipping.", idx, list(self.name_fields))
                continue
            features.append(feature)
        _LOGGER.info("Loaded %d named features from %s", len(features), self.path)
        return features

    def identifier_of(self, raw: Mapping[str, Any]) -> str | None:
        properties = raw.get("properties") or {}
        if not isinstance(properties, Mapping):
            return None
        for field in _existing_fields(properties.keys(), self.name_fields):
            value = properties.get(field)
            if value is None:
                continue
            name = str(value).strip()
            if name:
                return name
        return None

    def to_feature(self, raw: Mapping[str, Any]) -> Feature | None:
        identifier = self.identifier_of(raw)
        if identifier is None:
            return None
        geometry_raw = raw.get("geometry")
        geometry = Geometry.from_mapping(geometry_raw if isinstance(geometry_raw, Mapping) else None)
        properties = raw.get("properties") or {}
        return Feature(identifier=identifier, geometry=geometry, properties=dict(properties))

    @staticmethod
    def _require_geopandas() -> Any:
        try:
            import geopandas as gpd
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError("geopandas is required for non-GeoJSON feature collections") from exc
        return gpd


def _feature_list(raw: Any, path: Path) -> list[dict[str, Any]]:
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected a FeatureCollection mapping in {path}")
    features = raw.get("features")
    if not isinstance(features, list):
        raise ValueError(f"Expected 'features' list in {path}")
    out: list[dict[str, Any]] = []
    for idx, item in enumerate(features):
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected feature mapping at index {idx} in {path}")
        out.append(dict(item))
    return out


def split_features(repo: FeatureCollectionRepository, output_dir: Path) -> list[Path]:
    """Write each named feature to `<output_dir>/<sanitized name>.json`."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for raw in repo.load_raw():
        identifier = repo.identifier_of(raw)
        if identifier is None:
            _LOGGER.warning("Feature found without a country name, skipping.")
            continue
        out_path = output_dir / f"{sanitize_identifier(identifier)}.json"
        write_json(out_path, raw, indent=None)
        written.append(out_path)
    _LOGGER.info("Wrote %d feature files to %s", len(written), output_dir)
    return written
