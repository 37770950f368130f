from __future__ import annotations

from pathlib import Path

from factories import polygon_feature, raw_feature, square, write_collection
from globegrid.config import load_config
from globegrid.grid import build_country_grid
from globegrid.validate import Validator, format_report_lines


def test_clean_project_validates(project_dir: Path) -> None:
    report = Validator(load_config(project_dir / "config.yaml")).run()
    assert report.ok
    assert not report.warnings
    lines = list(format_report_lines(report))
    assert lines[-1] == "[OK] Validation completed with no errors."
    assert any("not built yet" in info for info in report.infos)


def test_data_quality_warnings(project_dir: Path) -> None:
    write_collection(
        project_dir / "data" / "worldgeo.json",
        [
            raw_feature({"admin": "Testland"}, {"type": "Polygon", "coordinates": [square(0, 0, 2, 2)]}),
            raw_feature({"admin": "Testland"}, {"type": "Polygon", "coordinates": [square(3, 3, 4, 4)]}),
            raw_feature({}, {"type": "Polygon", "coordinates": [square(5, 5, 6, 6)]}),
            raw_feature({"admin": "Pin"}, {"type": "Point", "coordinates": [1, 1]}),
            raw_feature({"admin": "Far"}, {"type": "Polygon", "coordinates": [square(170, 0, 190, 5)]}),
        ],
    )
    report = Validator(load_config(project_dir / "config.yaml")).run()
    assert report.ok
    joined = "\n".join(report.warnings)
    assert "1 features have no name" in joined
    assert "Unsupported geometry (never indexed): Pin" in joined
    assert "(clamped): Far" in joined
    assert "Duplicate feature names (first in dataset order wins): Testland" in joined


def test_stale_grid_is_an_error(project_dir: Path) -> None:
    cfg = load_config(project_dir / "config.yaml")
    build_country_grid([polygon_feature("Atlantis", square(-30, 30, -20, 40))]).save(cfg.paths.grid)
    report = Validator(cfg).run()
    assert not report.ok
    assert any("Atlantis" in error for error in report.errors)


def test_unreadable_inputs_are_errors(project_dir: Path) -> None:
    cfg = load_config(project_dir / "config.yaml")
    cfg.paths.features.write_text("{", encoding="utf-8")
    cfg.paths.grid.parent.mkdir(parents=True, exist_ok=True)
    cfg.paths.grid.write_text("[]", encoding="utf-8")
    report = Validator(cfg).run()
    assert len(report.errors) == 2
    assert "[ERROR]" in "\n".join(format_report_lines(report))
