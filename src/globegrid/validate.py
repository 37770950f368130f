"""Validation layer for config, feature collection and grid artifact."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .config import AppConfig
from .grid import CountryGrid
from .io_geo import FeatureCollectionRepository
from .labels import load_labels
from .models import Feature


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks inputs and the generated grid before they are served."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        features = self._validate_features(report)
        self._validate_labels(report)
        self._validate_grid(report, features=features)
        return report

    def _validate_features(self, report: ValidationReport) -> list[Feature] | None:
        repo = FeatureCollectionRepository(self.cfg.paths.features, self.cfg.grid.name_fields)
        try:
            raw_features = repo.load_raw()
        except Exception as exc:
            report.add_error(f"Failed loading feature collection '{repo.path}': {exc}")
            return None
        report.add_info(f"Loaded {len(raw_features)} raw features from {repo.path}")

        features: list[Feature] = []
        unnamed = 0
        for raw in raw_features:
            feature = repo.to_feature(raw)
            if feature is None:
                unnamed += 1
                continue
            features.append(feature)
        if unnamed:
            report.add_warning(f"{unnamed} features have no name in {list(repo.name_fields)} and will be skipped")

        unsupported = sorted({f.identifier for f in features if not f.geometry.supported})
        if unsupported:
            report.add_warning(
                f"Unsupported geometry (never indexed): {_format_list(unsupported)}"
            )

        out_of_range = sorted(
            {f.identifier for f in features if f.geometry.supported and _has_out_of_range(f)}
        )
        if out_of_range:
            report.add_warning(
                f"Coordinates outside [-180,180]x[-90,90] (clamped): {_format_list(out_of_range)}"
            )

        seen: set[str] = set()
        duplicates: set[str] = set()
        for feature in features:
            if feature.identifier in seen:
                duplicates.add(feature.identifier)
            seen.add(feature.identifier)
        if duplicates:
            report.add_warning(
                f"Duplicate feature names (first in dataset order wins): {_format_list(sorted(duplicates))}"
            )
        return features

    def _validate_labels(self, report: ValidationReport) -> None:
        path = self.cfg.paths.labels
        if path is None:
            return
        if not path.exists():
            report.add_warning(f"Labels file missing: {path}")
            return
        try:
            labels = load_labels(path)
        except Exception as exc:
            report.add_error(f"Failed parsing labels file '{path}': {exc}")
            return
        report.add_info(f"Loaded {len(labels)} labels from {path}")

    def _validate_grid(self, report: ValidationReport, *, features: list[Feature] | None) -> None:
        path = self.cfg.paths.grid
        if not path.exists():
            report.add_info(f"Grid artifact not built yet: {path}")
            return
        try:
            grid = CountryGrid.load(path)
        except Exception as exc:
            report.add_error(f"Grid artifact unreadable '{path}': {exc}")
            return
        report.add_info(f"Grid artifact has {grid.assigned_cells} assigned cells")
        if features is None:
            return
        known = {feature.identifier for feature in features}
        stale = sorted(grid.identifiers() - known)
        if stale:
            report.add_error(
                f"Grid names features missing from the collection (rebuild needed): {_format_list(stale)}"
            )


def _has_out_of_range(feature: Feature) -> bool:
    for ring in feature.geometry.rings():
        for vertex in ring:
            try:
                lon, lat = float(vertex[0]), float(vertex[1])
            except (TypeError, ValueError, IndexError):
                continue
            if not (-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0):
                return True
    return False


def _format_list(values: list[Any], limit: int = 12) -> str:
    shown = ", ".join(str(v) for v in values[:limit])
    if len(values) > limit:
        shown += f", ... (+{len(values) - limit} more)"
    return shown


def format_report_lines(report: ValidationReport) -> Iterable[str]:
    for info in report.infos:
        yield f"[INFO] {info}"
    for warning in report.warnings:
        yield f"[WARN] {warning}"
    for error in report.errors:
        yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Validation completed with no errors."
