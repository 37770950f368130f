"""CLI entrypoint for the globegrid country index."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Sequence

from .config import AppConfig, load_config
from .globe import PerspectiveCamera, lat_lon_to_vector3
from .grid import CountryGrid, rasterize_features
from .io_geo import FeatureCollectionRepository, split_features
from .labels import LabelLayer, LabelStyle, PilTextMeasurer, load_labels
from .lookup import CountryLookup
from .models import GridManifest
from .preview import render_grid_preview
from .util import detect_git_commit, ensure_directories, setup_logging, sha256_file, write_json
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("globegrid.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="globegrid",
        description="Precomputed one-degree country lookup grid.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    build_p = subparsers.add_parser("build-grid", help="Rasterize the feature collection into the grid artifact.")
    add_common(build_p)

    split_p = subparsers.add_parser("split-features", help="Write one GeoJSON file per named feature.")
    add_common(split_p)

    query_p = subparsers.add_parser("query", help="Look up the country at a latitude/longitude.")
    add_common(query_p)
    query_p.add_argument("--lat", type=float, required=True, help="Latitude in degrees.")
    query_p.add_argument("--lon", type=float, required=True, help="Longitude in degrees.")

    label_p = subparsers.add_parser(
        "label-at",
        help="Project labels for a camera looking at the globe and hit-test a pixel.",
    )
    add_common(label_p)
    label_p.add_argument("--camera-lat", type=float, default=0.0, help="Camera latitude.")
    label_p.add_argument("--camera-lon", type=float, default=0.0, help="Camera longitude.")
    label_p.add_argument("--distance", type=float, default=3.0, help="Camera distance from globe centre.")
    label_p.add_argument("--width", type=int, default=1280, help="Canvas width in pixels.")
    label_p.add_argument("--height", type=int, default=720, help="Canvas height in pixels.")
    label_p.add_argument("--x", type=float, required=True, help="Pixel x to test.")
    label_p.add_argument("--y", type=float, required=True, help="Pixel y to test.")

    validate_p = subparsers.add_parser("validate", help="Validate inputs and the grid artifact.")
    add_common(validate_p)

    preview_p = subparsers.add_parser("preview", help="Render the grid artifact as a PNG.")
    add_common(preview_p)
    preview_p.add_argument("--scale", type=int, default=None, help="Pixels per grid cell.")

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "globegrid.log", verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _repository(cfg: AppConfig) -> FeatureCollectionRepository:
    return FeatureCollectionRepository(cfg.paths.features, cfg.grid.name_fields)


def _run_build_grid(cfg: AppConfig) -> int:
    LOGGER.info("Starting grid generation from %s", cfg.paths.features)
    repo = _repository(cfg)
    features = repo.load_features()
    result = rasterize_features(features)
    result.grid.save(cfg.paths.grid)
    LOGGER.info("Grid saved to %s", cfg.paths.grid)

    if cfg.build.write_manifest:
        manifest = GridManifest.create(
            source_sha256=sha256_file(cfg.paths.features),
            git_commit=detect_git_commit(cfg.source_path.parent),
            feature_count=result.indexed,
            skipped_count=result.skipped,
            assigned_cells=result.grid.assigned_cells,
        )
        manifest_path = cfg.paths.manifests_dir / "grid_manifest.json"
        write_json(manifest_path, manifest.to_dict())
        LOGGER.info("Grid manifest written to %s", manifest_path)
    return 0


def _run_split_features(cfg: AppConfig) -> int:
    written = split_features(_repository(cfg), cfg.paths.countries_dir)
    LOGGER.info("Split %s into %d feature files.", cfg.paths.features, len(written))
    return 0


def _run_query(cfg: AppConfig, *, lat: float, lon: float) -> int:
    lookup = CountryLookup(cfg.paths.grid)
    if not lookup.load_grid():
        return 1
    country = lookup.query_country(lat, lon)
    print(country if country is not None else "none")
    return 0


def _run_label_at(cfg: AppConfig, args: argparse.Namespace) -> int:
    if cfg.paths.labels is None:
        LOGGER.error("paths.labels is not configured.")
        return 1
    labels = load_labels(cfg.paths.labels)
    style = LabelStyle(
        font_size=cfg.labels.font_size,
        pad_x=cfg.labels.pad_x,
        pad_top=cfg.labels.pad_top,
        pad_bottom=cfg.labels.pad_bottom,
    )
    layer = LabelLayer(labels, PilTextMeasurer(cfg.labels.font_path), style)
    camera = PerspectiveCamera(
        position=lat_lon_to_vector3(args.camera_lat, args.camera_lon, args.distance),
        aspect=args.width / args.height,
    )
    visible = layer.rebuild(camera, args.width, args.height)
    LOGGER.info("%d of %d labels visible from the camera.", len(visible), len(labels))
    hit = layer.query_label_at(args.x, args.y)
    print(json.dumps(hit, ensure_ascii=False))
    return 0


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_preview(cfg: AppConfig, *, scale: int | None) -> int:
    grid = CountryGrid.load(cfg.paths.grid)
    render_grid_preview(
        grid,
        cfg.paths.preview_png,
        scale=scale if scale is not None else cfg.preview.scale,
        ocean_color=cfg.preview.ocean_color,
    )
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    try:
        if command == "build-grid":
            return _run_build_grid(cfg)
        if command == "split-features":
            return _run_split_features(cfg)
        if command == "query":
            return _run_query(cfg, lat=float(args.lat), lon=float(args.lon))
        if command == "label-at":
            return _run_label_at(cfg, args)
        if command == "validate":
            return _run_validate(cfg)
        if command == "preview":
            return _run_preview(cfg, scale=args.scale)
    except (OSError, ValueError, RuntimeError) as exc:
        LOGGER.error("%s failed: %s", command, exc)
        return 1
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
