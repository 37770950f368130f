"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .io_geo import DEFAULT_NAME_FIELDS


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected bool for '{field_name}'")
    return value


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


def _optional_path(value: Any, field_name: str, root_dir: Path) -> Path | None:
    if value is None:
        return None
    return _path_from_cfg(value, field_name, root_dir)


@dataclass(frozen=True, slots=True)
class PathsConfig:
    features: Path
    grid: Path
    labels: Path | None
    countries_dir: Path
    preview_png: Path
    manifests_dir: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (
            self.grid.parent,
            self.countries_dir,
            self.preview_png.parent,
            self.manifests_dir,
            self.logs_dir,
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            features=_path_from_cfg(raw.get("features"), "paths.features", root_dir),
            grid=_path_from_cfg(raw.get("grid"), "paths.grid", root_dir),
            labels=_optional_path(raw.get("labels"), "paths.labels", root_dir),
            countries_dir=_path_from_cfg(raw.get("countries_dir"), "paths.countries_dir", root_dir),
            preview_png=_path_from_cfg(raw.get("preview_png"), "paths.preview_png", root_dir),
            manifests_dir=_path_from_cfg(raw.get("manifests_dir"), "paths.manifests_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class GridConfig:
    name_fields: tuple[str, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> GridConfig:
        name_fields_raw = raw.get("name_fields")
        if name_fields_raw is None:
            return cls(name_fields=DEFAULT_NAME_FIELDS)
        name_fields = _str_list(name_fields_raw, "grid.name_fields")
        if not name_fields:
            raise ValueError("grid.name_fields must not be empty")
        return cls(name_fields=name_fields)


@dataclass(frozen=True, slots=True)
class LabelsConfig:
    font_size: int
    pad_x: float
    pad_top: float
    pad_bottom: float
    font_path: Path | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> LabelsConfig:
        font_size = _int(raw.get("font_size", 14), "labels.font_size")
        if font_size <= 0:
            raise ValueError("labels.font_size must be > 0")
        return cls(
            font_size=font_size,
            pad_x=_float(raw.get("pad_x", 3), "labels.pad_x"),
            pad_top=_float(raw.get("pad_top", 5), "labels.pad_top"),
            pad_bottom=_float(raw.get("pad_bottom", 4), "labels.pad_bottom"),
            font_path=_optional_path(raw.get("font_path"), "labels.font_path", root_dir),
        )


@dataclass(frozen=True, slots=True)
class PreviewConfig:
    scale: int
    ocean_color: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> PreviewConfig:
        scale = _int(raw.get("scale", 4), "preview.scale")
        if scale < 1:
            raise ValueError("preview.scale must be >= 1")
        return cls(
            scale=scale,
            ocean_color=_str(raw.get("ocean_color", "#10202c"), "preview.ocean_color"),
        )


@dataclass(frozen=True, slots=True)
class BuildConfig:
    write_manifest: bool

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> BuildConfig:
        return cls(write_manifest=_bool(raw.get("write_manifest", True), "build.write_manifest"))


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    paths: PathsConfig
    grid: GridConfig
    labels: LabelsConfig
    preview: PreviewConfig
    build: BuildConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            grid=GridConfig.from_mapping(_mapping(raw.get("grid", {}), "grid")),
            labels=LabelsConfig.from_mapping(_mapping(raw.get("labels", {}), "labels"), root_dir),
            preview=PreviewConfig.from_mapping(_mapping(raw.get("preview", {}), "preview")),
            build=BuildConfig.from_mapping(_mapping(raw.get("build", {}), "build")),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
