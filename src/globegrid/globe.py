"""Unit-sphere coordinate helpers and a minimal perspective camera."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, Sequence

Vec3 = tuple[float, float, float]

_POLAR_UP: Vec3 = (0.0, 0.0, -1.0)
_FALLBACK_UP: Vec3 = (1.0, 0.0, 0.0)
_PARALLEL_EPSILON = 1e-9


def lat_lon_to_vector3(lat: float, lon: float, radius: float = 1.0) -> Vec3:
    """Map geographic degrees onto a y-up sphere (north pole at +y)."""
    phi = math.radians(90.0 - lat)
    theta = math.radians(lon + 180.0)
    return (
        -radius * math.sin(phi) * math.cos(theta),
        radius * math.cos(phi),
        radius * math.sin(phi) * math.sin(theta),
    )


def vector3_to_lat_lon(vector: Sequence[float], radius: float = 1.0) -> tuple[float, float]:
    """Inverse of `lat_lon_to_vector3`; longitude lands in (-180, 180]."""
    x, y, z = vector
    ratio = max(-1.0, min(1.0, y / radius))
    lat = 90.0 - math.degrees(math.acos(ratio))
    lon = math.degrees(math.atan2(z, -x)) - 180.0
    if lon <= -180.0:
        lon += 360.0
    return lat, lon


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def sub(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def length(v: Sequence[float]) -> float:
    return math.sqrt(dot(v, v))


def normalize(v: Sequence[float]) -> Vec3:
    n = length(v)
    if n == 0.0:
        raise ValueError("Cannot normalize a zero-length vector")
    return (v[0] / n, v[1] / n, v[2] / n)


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """Angle in radians; a zero vector counts as perpendicular."""
    denominator = length(a) * length(b)
    if denominator == 0.0:
        return math.pi / 2
    cosine = max(-1.0, min(1.0, dot(a, b) / denominator))
    return math.acos(cosine)


class Camera(Protocol):
    """What the label projector needs from the rendering camera."""

    @property
    def position(self) -> Vec3: ...

    def project(self, point: Vec3) -> Vec3: ...


@dataclass(frozen=True, slots=True)
class PerspectiveCamera:
    """Look-at camera with an OpenGL-style perspective projection.

    `project` returns normalized device coordinates; visible points fall in
    [-1, 1] on every axis and points behind the camera get `z > 1`.
    """

    position: Vec3
    target: Vec3 = (0.0, 0.0, 0.0)
    up: Vec3 = (0.0, 1.0, 0.0)
    fov_deg: float = 45.0
    aspect: float = 1.0
    near: float = 0.1
    far: float = 1000.0

    def __post_init__(self) -> None:
        if self.near <= 0 or self.far <= self.near:
            raise ValueError("Camera requires 0 < near < far")
        if not 0 < self.fov_deg < 180:
            raise ValueError("Camera fov_deg must be between 0 and 180")
        if self.aspect <= 0:
            raise ValueError("Camera aspect must be > 0")

    def _basis(self) -> tuple[Vec3, Vec3, Vec3]:
        forward = normalize(sub(self.target, self.position))
        # Looking along `up` (e.g. straight down at a pole) leaves no side
        # axis; borrow another world axis for the roll.
        for up_hint in (self.up, _POLAR_UP, _FALLBACK_UP):
            side = cross(forward, up_hint)
            if length(side) > _PARALLEL_EPSILON:
                break
        side = normalize(side)
        up = cross(side, forward)
        return side, up, forward

    def project(self, point: Vec3) -> Vec3:
        side, up, forward = self._basis()
        rel = sub(point, self.position)
        xc = dot(side, rel)
        yc = dot(up, rel)
        zc = -dot(forward, rel)

        focal = 1.0 / math.tan(math.radians(self.fov_deg) / 2.0)
        depth_a = (self.far + self.near) / (self.near - self.far)
        depth_b = 2.0 * self.far * self.near / (self.near - self.far)
        w = -zc
        if w == 0.0:
            return (0.0, 0.0, math.inf)
        return (
            focal / self.aspect * xc / w,
            focal * yc / w,
            (depth_a * zc + depth_b) / w,
        )
