"""Stroke polylines and label anchors derived from a graph snapshot.

Nothing here is stored: the drawing surface can ask for a fresh feed after
every edit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import InterpretationConfig, get_interpretation_config
from .geometry import Point, add, circle_points, distance, point_along, rotate, scale, sub, unit
from .model import AutomatonState, AutomatonTransition, CycleGeometry, Graph, RegularGeometry

Polyline = Tuple[Point, ...]


@dataclass(frozen=True)
class StateStrokes:
    state_id: str
    outline: Polyline
    final_ring: Optional[Polyline]
    label_anchor: Point


@dataclass(frozen=True)
class TransitionStrokes:
    transition_id: str
    polyline: Polyline
    label_anchor: Point


@dataclass
class RenderFeed:
    states: List[StateStrokes] = field(default_factory=list)
    transitions: List[TransitionStrokes] = field(default_factory=list)

    def strokes(self) -> List[Polyline]:
        out: List[Polyline] = []
        for item in self.states:
            out.append(item.outline)
            if item.final_ring is not None:
                out.append(item.final_ring)
        out.extend(item.polyline for item in self.transitions)
        return out

    def label_anchors(self) -> List[Point]:
        return [s.label_anchor for s in self.states] + [t.label_anchor for t in self.transitions]


def arrow_head(direction_from: Point, tip: Point, config: InterpretationConfig) -> Polyline:
    """Open arrowhead at ``tip`` for a stroke arriving from ``direction_from``.

    The barbs sit ``arrow_head_length`` behind the tip and
    ``arrow_head_half_width`` to each side.
    """

    heading = sub(tip, direction_from)
    if unit(heading) is None:
        heading = (1.0, 0.0)
    base = point_along(tip, heading, -config.arrow_head_length)
    across = rotate(heading, np.pi / 2)
    top = point_along(base, across, -config.arrow_head_half_width)
    bottom = point_along(base, across, config.arrow_head_half_width)
    to_top = sub(top, tip)
    to_bottom = sub(bottom, tip)
    return (
        tip,
        point_along(tip, to_top, 0.1),
        point_along(tip, to_top, 1.0),
        top,
        top,
        tip,
        point_along(tip, to_bottom, 0.1),
        point_along(tip, to_bottom, 1.0),
        bottom,
    )


def curve_through(start: Point, flex: Point, tip: Point, samples: int) -> Polyline:
    """Quadratic curve from ``start`` to ``tip`` passing through ``flex`` halfway."""

    control = sub(scale(flex, 2.0), scale(add(start, tip), 0.5))
    t = np.linspace(0.0, 1.0, max(samples, 2))[:, None]
    p0 = np.asarray(start)
    p1 = np.asarray(control)
    p2 = np.asarray(tip)
    pts = (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2
    return tuple((float(x), float(y)) for x, y in pts)


def state_strokes(state: AutomatonState, config: InterpretationConfig) -> StateStrokes:
    ring = None
    if state.is_final:
        ring = circle_points(state.center, state.radius * config.final_ring_scale, config.circle_step_degrees)
    return StateStrokes(
        state_id=state.id,
        outline=circle_points(state.center, state.radius, config.circle_step_degrees),
        final_ring=ring,
        label_anchor=state.scribble_position,
    )


def _regular_strokes(
    transition: AutomatonTransition, geometry: RegularGeometry, config: InterpretationConfig
) -> TransitionStrokes:
    curve = curve_through(geometry.start_point, geometry.flex_point, geometry.tip_point, config.curve_samples)
    head = arrow_head(curve[-2], geometry.tip_point, config)
    anchor = (geometry.flex_point[0], geometry.flex_point[1] - config.transition_label_offset)
    return TransitionStrokes(transition.id, curve + head[1:], anchor)


def _cycle_strokes(
    transition: AutomatonTransition, geometry: CycleGeometry, config: InterpretationConfig
) -> TransitionStrokes:
    loop_radius = distance(geometry.center, geometry.anchor_point)
    start_angle = np.arctan2(
        geometry.anchor_point[1] - geometry.center[1], geometry.anchor_point[0] - geometry.center[0]
    )
    step = np.deg2rad(config.circle_step_degrees)
    angles = start_angle + np.arange(0.0, 2 * np.pi + step / 2, step)
    loop = tuple(
        (float(geometry.center[0] + loop_radius * np.cos(a)), float(geometry.center[1] + loop_radius * np.sin(a)))
        for a in angles
    )
    head = arrow_head(loop[-2], geometry.anchor_point, config) if len(loop) > 1 else ()
    outward = sub(geometry.center, geometry.anchor_point)
    anchor = point_along(geometry.center, outward, loop_radius + config.arrow_head_length)
    return TransitionStrokes(transition.id, loop + tuple(head[1:]), anchor)


def transition_strokes(transition: AutomatonTransition, config: InterpretationConfig) -> TransitionStrokes:
    if isinstance(transition.geometry, CycleGeometry):
        return _cycle_strokes(transition, transition.geometry, config)
    return _regular_strokes(transition, transition.geometry, config)


def build_render_feed(graph: Graph, *, config: Optional[InterpretationConfig] = None) -> RenderFeed:
    cfg = config or get_interpretation_config()
    return RenderFeed(
        states=[state_strokes(s, cfg) for s in graph.states],
        transitions=[transition_strokes(t, cfg) for t in graph.transitions],
    )
