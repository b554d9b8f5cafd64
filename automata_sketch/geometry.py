"""Point and polyline helpers used while interpreting sketched shapes.

Points are plain ``(x, y)`` tuples of floats.  Polyline computations go through
numpy so that strokes with a few hundred control points stay cheap; scalar
vector helpers stay in pure Python.  Routines that cannot produce a meaningful
answer for degenerate input (an empty polyline, a zero-length direction)
return ``None`` instead of raising.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]
Vector = Tuple[float, float]
BBox = Tuple[float, float, float, float]

_EPS = 1e-12


def as_point(pt: Sequence[float]) -> Point:
    return (float(pt[0]), float(pt[1]))


def _as_array(points: Iterable[Sequence[float]]) -> np.ndarray:
    arr = np.asarray([as_point(p) for p in points], dtype=float)
    return arr.reshape(-1, 2)


def sub(a: Sequence[float], b: Sequence[float]) -> Vector:
    return (float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def add(a: Sequence[float], b: Sequence[float]) -> Point:
    return (float(a[0]) + float(b[0]), float(a[1]) + float(b[1]))


def scale(vec: Sequence[float], factor: float) -> Vector:
    return (float(vec[0]) * factor, float(vec[1]) * factor)


def norm(vec: Sequence[float]) -> float:
    return math.hypot(float(vec[0]), float(vec[1]))


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return norm(sub(a, b))


def distance_sq(a: Sequence[float], b: Sequence[float]) -> float:
    dx, dy = sub(a, b)
    return dx * dx + dy * dy


def midpoint(a: Sequence[float], b: Sequence[float]) -> Point:
    return ((float(a[0]) + float(b[0])) * 0.5, (float(a[1]) + float(b[1])) * 0.5)


def unit(vec: Sequence[float]) -> Optional[Vector]:
    length = norm(vec)
    if length <= _EPS:
        return None
    return (float(vec[0]) / length, float(vec[1]) / length)


def rotate(vec: Sequence[float], radians: float) -> Vector:
    cs = math.cos(radians)
    sn = math.sin(radians)
    x, y = float(vec[0]), float(vec[1])
    return (x * cs - y * sn, x * sn + y * cs)


def point_along(origin: Sequence[float], direction: Sequence[float], dist: float) -> Point:
    """Move ``dist`` from ``origin`` along ``direction``.

    A zero-length direction leaves the origin unchanged.
    """

    direction_unit = unit(direction)
    if direction_unit is None:
        return as_point(origin)
    return add(origin, scale(direction_unit, dist))


def centroid(points: Sequence[Sequence[float]]) -> Optional[Point]:
    """Arithmetic mean of ``points``."""

    arr = _as_array(points)
    if arr.shape[0] == 0:
        return None
    mean = arr.mean(axis=0)
    return (float(mean[0]), float(mean[1]))


def l1_radius(points: Sequence[Sequence[float]], center: Sequence[float]) -> float:
    """Mean of ``|dx| + |dy|`` from ``center`` to each control point.

    This is a cheap stand-in for a circle fit and intentionally overestimates
    the euclidean radius of a round stroke by roughly ``4/pi``.
    """

    arr = _as_array(points)
    if arr.shape[0] == 0:
        return 0.0
    offsets = np.abs(arr - np.asarray(as_point(center)))
    return float(offsets.sum(axis=1).mean())


def bounding_box(points: Sequence[Sequence[float]]) -> Optional[BBox]:
    arr = _as_array(points)
    if arr.shape[0] == 0:
        return None
    mins = arr.min(axis=0)
    maxs = arr.max(axis=0)
    return (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


def bbox_contains(bbox: BBox, point: Sequence[float]) -> bool:
    x, y = as_point(point)
    min_x, min_y, max_x, max_y = bbox
    return min_x <= x <= max_x and min_y <= y <= max_y


def nearest_point_on_polyline(
    point: Sequence[float], polyline: Sequence[Sequence[float]]
) -> Optional[Tuple[Point, float]]:
    """Return the closest point on ``polyline`` and its squared distance.

    Every segment is projected onto, so the answer can fall between control
    points.  A single-point polyline degenerates to that point.
    """

    arr = _as_array(polyline)
    if arr.shape[0] == 0:
        return None
    p = np.asarray(as_point(point))
    if arr.shape[0] == 1:
        closest = arr[0]
        return (float(closest[0]), float(closest[1])), float(((closest - p) ** 2).sum())

    starts = arr[:-1]
    seg = arr[1:] - starts
    seg_len_sq = (seg ** 2).sum(axis=1)
    safe_len = np.where(seg_len_sq > _EPS, seg_len_sq, 1.0)
    t = ((p - starts) * seg).sum(axis=1) / safe_len
    t = np.where(seg_len_sq > _EPS, np.clip(t, 0.0, 1.0), 0.0)
    projections = starts + seg * t[:, None]
    dist_sq = ((projections - p) ** 2).sum(axis=1)
    idx = int(np.argmin(dist_sq))
    closest = projections[idx]
    return (float(closest[0]), float(closest[1])), float(dist_sq[idx])


def furthest_point(origin: Sequence[float], points: Sequence[Sequence[float]]) -> Optional[Point]:
    """Control point of ``points`` farthest from ``origin`` (first one on ties)."""

    arr = _as_array(points)
    if arr.shape[0] == 0:
        return None
    dist_sq = ((arr - np.asarray(as_point(origin))) ** 2).sum(axis=1)
    far = arr[int(np.argmax(dist_sq))]
    return (float(far[0]), float(far[1]))


def circle_points(center: Sequence[float], radius: float, step_degrees: float = 2.0) -> Tuple[Point, ...]:
    """Sample a circle outline from 0 to 360 degrees inclusive."""

    cx, cy = as_point(center)
    degrees = np.arange(0.0, 360.0 + step_degrees / 2.0, step_degrees)
    radians = np.deg2rad(degrees)
    xs = cx + radius * np.cos(radians)
    ys = cy + radius * np.sin(radians)
    return tuple((float(x), float(y)) for x, y in zip(xs, ys))


def boundary_point_towards(
    center: Sequence[float], radius: float, target: Sequence[float]
) -> Point:
    """Point on the circle ``(center, radius)`` closest to ``target``.

    When ``target`` coincides with the center the top of the circle is used.
    """

    direction = unit(sub(target, center))
    if direction is None:
        direction = (0.0, -1.0)
    return add(center, scale(direction, radius))
