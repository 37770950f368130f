from __future__ import annotations

import math

import pytest

from globegrid.globe import (
    PerspectiveCamera,
    angle_between,
    lat_lon_to_vector3,
    vector3_to_lat_lon,
)


def _close(a, b) -> bool:
    return all(math.isclose(x, y, abs_tol=1e-9) for x, y in zip(a, b))


def test_lat_lon_to_vector3_axes() -> None:
    assert _close(lat_lon_to_vector3(90, 0), (0.0, 1.0, 0.0))
    assert _close(lat_lon_to_vector3(0, -90), (0.0, 0.0, 1.0))
    assert _close(lat_lon_to_vector3(0, 0), (1.0, 0.0, 0.0))
    assert _close(lat_lon_to_vector3(0, 0, 2.0), (2.0, 0.0, 0.0))


@pytest.mark.parametrize("lat,lon", [(10.0, 20.0), (-45.0, -170.0), (0.0, 180.0), (60.0, -1.0)])
def test_vector3_to_lat_lon_inverts(lat: float, lon: float) -> None:
    back_lat, back_lon = vector3_to_lat_lon(lat_lon_to_vector3(lat, lon))
    assert math.isclose(back_lat, lat, abs_tol=1e-9)
    assert math.isclose(back_lon, lon, abs_tol=1e-9)


def test_angle_between() -> None:
    assert math.isclose(angle_between((1, 0, 0), (0, 1, 0)), math.pi / 2)
    assert math.isclose(angle_between((1, 0, 0), (-2, 0, 0)), math.pi)
    assert angle_between((0, 0, 0), (1, 0, 0)) == math.pi / 2


def test_camera_projects_target_to_centre() -> None:
    camera = PerspectiveCamera(position=(0.0, 0.0, 3.0))
    x, y, z = camera.project((0.0, 0.0, 1.0))
    assert math.isclose(x, 0.0, abs_tol=1e-12)
    assert math.isclose(y, 0.0, abs_tol=1e-12)
    assert -1 < z < 1


def test_camera_axes_orientation() -> None:
    camera = PerspectiveCamera(position=(0.0, 0.0, 3.0))
    right_x, _, _ = camera.project((0.5, 0.0, 0.0))
    _, up_y, _ = camera.project((0.0, 0.5, 0.0))
    assert right_x > 0
    assert up_y > 0


def test_camera_marks_points_behind_it() -> None:
    camera = PerspectiveCamera(position=(0.0, 0.0, 3.0))
    assert camera.project((0.0, 0.0, 5.0))[2] > 1
    assert camera.project((0.0, 0.0, 3.0))[2] > 1


def test_camera_rejects_bad_planes() -> None:
    with pytest.raises(ValueError):
        PerspectiveCamera(position=(0.0, 0.0, 3.0), near=0.0)
    with pytest.raises(ValueError):
        PerspectiveCamera(position=(0.0, 0.0, 3.0), fov_deg=180.0)


@pytest.mark.parametrize("pole_lat", [90.0, -90.0])
def test_camera_over_a_pole_projects(pole_lat: float) -> None:
    camera = PerspectiveCamera(position=lat_lon_to_vector3(pole_lat, 0, 3.0))
    x, y, z = camera.project(lat_lon_to_vector3(pole_lat, 0))
    assert math.isclose(x, 0.0, abs_tol=1e-12)
    assert math.isclose(y, 0.0, abs_tol=1e-12)
    assert -1 < z < 1
    assert all(math.isfinite(v) for v in camera.project(lat_lon_to_vector3(0, 0)))
