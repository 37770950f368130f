from __future__ import annotations

import json
from pathlib import Path

import pytest

from factories import raw_feature, square, write_collection
from globegrid.io_geo import FeatureCollectionRepository, sanitize_identifier, split_features


def _collection(tmp_path: Path) -> Path:
    return write_collection(
        tmp_path / "worldgeo.json",
        [
            raw_feature({"admin": "Testland"}, {"type": "Polygon", "coordinates": [square(0, 0, 2, 2)]}),
            raw_feature({"admin": None}, {"type": "Polygon", "coordinates": [square(5, 5, 6, 6)]}),
            raw_feature({"admin": "  "}, {"type": "Polygon", "coordinates": [square(5, 5, 6, 6)]}),
            raw_feature({"ADMIN": "Côte d'Ivoire"}, {"type": "Point", "coordinates": [1, 1]}),
            raw_feature({"admin": "Nowhere"}, None),
        ],
    )


def test_load_features_drops_unnamed(tmp_path: Path, caplog) -> None:
    repo = FeatureCollectionRepository(_collection(tmp_path))
    features = repo.load_features()
    assert [f.identifier for f in features] == ["Testland", "Côte d'Ivoire", "Nowhere"]
    assert features[0].geometry.type == "Polygon"
    assert not features[1].geometry.supported
    assert features[2].geometry.type == "None"
    assert caplog.text.count("has no name") == 2


def test_name_fields_match_case_insensitively(tmp_path: Path) -> None:
    path = write_collection(
        tmp_path / "geo.json",
        [raw_feature({"Country": "Testland"}, {"type": "Polygon", "coordinates": [square(0, 0, 2, 2)]})],
    )
    repo = FeatureCollectionRepository(path, name_fields=("country",))
    assert [f.identifier for f in repo.load_features()] == ["Testland"]


def test_rejects_non_feature_collection(tmp_path: Path) -> None:
    path = tmp_path / "geo.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError):
        FeatureCollectionRepository(path).load_features()
    with pytest.raises(FileNotFoundError):
        FeatureCollectionRepository(tmp_path / "missing.geojson").load_features()


@pytest.mark.parametrize(
    "identifier,expected",
    [
        ("France", "France"),
        ("Côte d'Ivoire", "C_te_d_Ivoire"),
        ("Bosnia and Herzegovina", "Bosnia_and_Herzegovina"),
        ("St. Kitts & Nevis", "St__Kitts___Nevis"),
    ],
)
def test_sanitize_identifier(identifier: str, expected: str) -> None:
    assert sanitize_identifier(identifier) == expected


def test_split_features_writes_one_file_per_named_feature(tmp_path: Path) -> None:
    repo = FeatureCollectionRepository(_collection(tmp_path))
    out_dir = tmp_path / "countries"
    written = split_features(repo, out_dir)
    assert sorted(p.name for p in written) == ["C_te_d_Ivoire.json", "Nowhere.json", "Testland.json"]

    feature = json.loads((out_dir / "Testland.json").read_text(encoding="utf-8"))
    assert feature["properties"]["admin"] == "Testland"
    assert feature["geometry"]["type"] == "Polygon"


def test_identifier_falls_through_empty_name_fields() -> None:
    repo = FeatureCollectionRepository(Path("unused.json"))
    assert repo.identifier_of({"properties": {"admin": None, "name": "Fallbackland"}}) == "Fallbackland"
    assert repo.identifier_of({"properties": {"ADMIN": "  ", "NAME": "Spaceland"}}) == "Spaceland"
    assert repo.identifier_of({"properties": {"admin": "Firstland", "name": "Secondland"}}) == "Firstland"
    assert repo.identifier_of({"properties": {"admin": None, "name": ""}}) is None
