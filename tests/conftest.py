from __future__ import annotations

from pathlib import Path

import pytest

from factories import write_testland

CONFIG_TEMPLATE = """
paths:
  features: data/worldgeo.json
  grid: build/country-grid.json
  labels: data/labels.yaml
  countries_dir: build/countries
  preview_png: build/qa/grid_preview.png
  manifests_dir: build/manifests
  logs_dir: build/logs
preview:
  scale: 2
"""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A config.yaml plus the Testland collection and one label."""
    (tmp_path / "config.yaml").write_text(CONFIG_TEMPLATE, encoding="utf-8")
    write_testland(tmp_path / "data" / "worldgeo.json")
    (tmp_path / "data" / "labels.yaml").write_text(
        "- name: Null Island\n  description: Origin\n  lat: 0\n  lon: 0\n",
        encoding="utf-8",
    )
    return tmp_path
