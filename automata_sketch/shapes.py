"""Classified shapes produced by the external stroke classifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple, Union

from .errors import ClassificationFailed
from .geometry import Point, as_point


@dataclass(frozen=True)
class StateShape:
    """Closed loop approximating a state circle."""

    control_points: Tuple[Point, ...]


@dataclass(frozen=True)
class TransitionShape:
    """Open stroke running from a start region to an arrow tip."""

    control_points: Tuple[Point, ...]


@dataclass(frozen=True)
class CycleShape:
    """Self-loop drawn next to a state."""

    control_points: Tuple[Point, ...]


ClassifiedShape = Union[StateShape, TransitionShape, CycleShape]

SHAPE_KINDS = {
    "state": StateShape,
    "transition": TransitionShape,
    "transitionCycle": CycleShape,
    "cycle": CycleShape,
}


def shape_kind(shape: ClassifiedShape) -> str:
    if isinstance(shape, StateShape):
        return "state"
    if isinstance(shape, TransitionShape):
        return "transition"
    return "transitionCycle"


def make_shape(kind: str, control_points: Sequence[Sequence[float]]) -> ClassifiedShape:
    """Build a shape from a classifier label and its control points.

    Raises :class:`ClassificationFailed` for unknown labels, empty strokes and
    points that are not 2D numeric pairs.
    """

    shape_cls = SHAPE_KINDS.get(kind)
    if shape_cls is None:
        raise ClassificationFailed(f"unrecognised shape category {kind!r}")
    try:
        if any(len(p) != 2 for p in control_points):
            raise ClassificationFailed("control points must be (x, y) pairs")
        points = tuple(as_point(p) for p in control_points)
    except (TypeError, ValueError, IndexError) as exc:
        raise ClassificationFailed(f"malformed control points: {exc}") from exc
    if not points:
        raise ClassificationFailed(f"{kind} shape has no control points")
    return shape_cls(points)


def shape_from_payload(payload: Mapping[str, Any]) -> ClassifiedShape:
    """Decode ``{"kind": ..., "controlPoints": [[x, y], ...]}``."""

    if not isinstance(payload, Mapping):
        raise ClassificationFailed(f"classifier payload must be a mapping, got {type(payload).__name__}")
    kind = payload.get("kind")
    points = payload.get("controlPoints", payload.get("control_points"))
    if not isinstance(kind, str) or points is None:
        raise ClassificationFailed("classifier payload needs 'kind' and 'controlPoints'")
    return make_shape(kind, points)


def shape_to_payload(shape: ClassifiedShape) -> dict:
    return {"kind": shape_kind(shape), "controlPoints": [list(p) for p in shape.control_points]}


__all__ = [
    "StateShape",
    "TransitionShape",
    "CycleShape",
    "ClassifiedShape",
    "SHAPE_KINDS",
    "shape_kind",
    "make_shape",
    "shape_from_payload",
    "shape_to_payload",
]
