"""Turn classified shapes into graph edits.

The interpreter looks at one shape and the current snapshot and decides what
the user meant:

* a circle either marks an existing state final, grows a state at the loose
  end of a dangling arrow, or creates a free-standing state;
* an arrow attaches to the states nearest to its tail and its tip, leaving a
  side dangling when nothing is close enough;
* a loop becomes a self-transition of the nearest state.

Decisions are deterministic: candidates are ranked by distance and ties go to
the element that was created first.  Rejections are reported through
:class:`~automata_sketch.model.GraphEdit` rather than raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .config import InterpretationConfig, get_interpretation_config
from .errors import AmbiguousCycleTarget, ClassificationFailed, DuplicateFinalMarking
from .geometry import (
    Point,
    bbox_contains,
    bounding_box,
    centroid,
    circle_points,
    distance_sq,
    furthest_point,
    l1_radius,
    midpoint,
    nearest_point_on_polyline,
    point_along,
    sub,
)
from .logging_utils import apply_debug_logging
from .model import (
    DANGLING,
    Attached,
    AutomatonState,
    AutomatonTransition,
    Dangling,
    Endpoint,
    Graph,
    GraphEdit,
    RegularGeometry,
)
from .shapes import ClassifiedShape, CycleShape, StateShape, TransitionShape
from . import store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Attachment:
    state: AutomatonState
    point: Point
    distance_sq: float


def interpret(
    shape: ClassifiedShape,
    graph: Graph,
    *,
    config: Optional[InterpretationConfig] = None,
) -> GraphEdit:
    """Apply ``shape`` to ``graph`` and describe what happened."""

    cfg = config or get_interpretation_config()
    if isinstance(shape, StateShape):
        return interpret_state(shape, graph, cfg)
    if isinstance(shape, TransitionShape):
        return interpret_transition(shape, graph, cfg)
    if isinstance(shape, CycleShape):
        return interpret_cycle(shape, graph, cfg)
    return _reject(graph, ClassificationFailed(f"unsupported shape {type(shape).__name__}"))


def interpret_state(shape: StateShape, graph: Graph, config: InterpretationConfig) -> GraphEdit:
    center = centroid(shape.control_points)
    bbox = bounding_box(shape.control_points)
    if center is None or bbox is None:
        return _reject(graph, ClassificationFailed("state shape has no control points"))
    radius = l1_radius(shape.control_points, center)

    enclosed = [s for s in graph.states if bbox_contains(bbox, s.center)]
    if enclosed:
        target = min(enclosed, key=lambda s: distance_sq(s.center, center))
        if target.is_final:
            logger.info("Circle around final state %s rejected", target.id)
            return _reject(graph, DuplicateFinalMarking(target.id))
        logger.info("Circle marks state %s as final", target.id)
        return GraphEdit(store.set_final(graph, target.id), "state_marked_final", target.id)

    if radius <= 0.0:
        return _reject(graph, ClassificationFailed("state shape is degenerate"))

    tip_match = _nearest_loose_end(graph, shape, "end", config)
    if tip_match is not None:
        transition = tip_match
        geometry = transition.geometry
        new_center = point_along(geometry.tip_point, sub(geometry.tip_point, geometry.start_point), radius)
        graph, state = store.add_state(graph, new_center, radius)
        graph = store.replace_transition(graph, replace(transition, end=Attached(state.id)))
        logger.info("Circle closes dangling end of %s with new state %s", transition.id, state.id)
        return GraphEdit(graph, "state_created_at_tip", state.id, notes=(transition.id,))

    tail_match = _nearest_loose_end(graph, shape, "start", config)
    if tail_match is not None:
        transition = tail_match
        geometry = transition.geometry
        new_center = point_along(geometry.start_point, sub(geometry.start_point, geometry.tip_point), radius)
        graph, state = store.add_state(graph, new_center, radius)
        graph = store.replace_transition(graph, replace(transition, start=Attached(state.id)))
        logger.info("Circle closes dangling start of %s with new state %s", transition.id, state.id)
        return GraphEdit(graph, "state_created_at_tail", state.id, notes=(transition.id,))

    graph, state = store.add_state(graph, center, radius)
    logger.info("Circle creates state %s", state.id)
    return GraphEdit(graph, "state_created", state.id)


def interpret_transition(shape: TransitionShape, graph: Graph, config: InterpretationConfig) -> GraphEdit:
    if not shape.control_points:
        return _reject(graph, ClassificationFailed("transition shape has no control points"))
    stroke_start = shape.control_points[0]
    start_candidate = _nearest_state_boundary(graph, stroke_start, config)
    limit_sq = config.attachment_threshold ** 2

    origin = stroke_start
    if start_candidate is not None and start_candidate.distance_sq <= limit_sq:
        origin = start_candidate.point
    far_point = furthest_point(origin, shape.control_points)
    if far_point is None or len(set(shape.control_points)) < 2:
        return _reject(graph, ClassificationFailed("transition shape is degenerate"))
    end_candidate = _nearest_state_boundary(graph, far_point, config)

    start_attach: Optional[_Attachment] = None
    end_attach: Optional[_Attachment] = None
    if (
        start_candidate is not None
        and end_candidate is not None
        and start_candidate.state.id == end_candidate.state.id
    ):
        # one state cannot own both ends of a drawn arrow
        if start_candidate.distance_sq <= end_candidate.distance_sq:
            start_attach = start_candidate if start_candidate.distance_sq <= limit_sq else None
        else:
            end_attach = end_candidate if end_candidate.distance_sq <= limit_sq else None
    else:
        if start_candidate is not None and start_candidate.distance_sq <= limit_sq:
            start_attach = start_candidate
        if end_candidate is not None and end_candidate.distance_sq <= limit_sq:
            end_attach = end_candidate

    start_point = start_attach.point if start_attach is not None else stroke_start
    tip_point = end_attach.point if end_attach is not None else far_point
    flex = midpoint(start_point, tip_point)
    geometry = RegularGeometry(
        start_point=start_point,
        tip_point=tip_point,
        flex_point=flex,
        current_flex_point=flex,
    )
    graph, transition = store.add_transition(
        graph,
        _endpoint_for(start_attach),
        _endpoint_for(end_attach),
        geometry,
    )
    logger.info(
        "Arrow creates transition %s (%s -> %s)",
        transition.id,
        transition.start_state or "<dangling>",
        transition.end_state or "<dangling>",
    )
    return GraphEdit(graph, "transition_created", transition.id)


def interpret_cycle(shape: CycleShape, graph: Graph, config: InterpretationConfig) -> GraphEdit:
    if not shape.control_points:
        return _reject(graph, ClassificationFailed("loop shape has no control points"))
    first = shape.control_points[0]
    candidate = _nearest_state_boundary(graph, first, config)
    if candidate is None or candidate.distance_sq > config.attachment_threshold ** 2:
        logger.info("Loop stroke has no state within reach")
        return _reject(graph, AmbiguousCycleTarget("no state near the loop stroke"))
    towards = centroid(shape.control_points) or first
    if distance_sq(towards, candidate.state.center) <= 0.0:
        towards = candidate.point
    graph, transition = store.add_cycle(graph, candidate.state.id, towards=towards, config=config)
    logger.info("Loop creates cycle %s on state %s", transition.id, candidate.state.id)
    return GraphEdit(graph, "cycle_created", transition.id)


def _reject(graph: Graph, error: Exception) -> GraphEdit:
    return GraphEdit(graph, "rejected", rejection=error)


def _endpoint_for(attachment: Optional[_Attachment]) -> Endpoint:
    return DANGLING if attachment is None else Attached(attachment.state.id)


def _nearest_state_boundary(
    graph: Graph, point: Point, config: InterpretationConfig
) -> Optional[_Attachment]:
    best: Optional[_Attachment] = None
    for state in graph.states:
        outline = circle_points(state.center, state.radius, config.circle_step_degrees)
        found = nearest_point_on_polyline(point, outline)
        if found is None:
            continue
        closest, dist_sq = found
        if best is None or dist_sq < best.distance_sq:
            best = _Attachment(state, closest, dist_sq)
    return best


def _nearest_loose_end(
    graph: Graph,
    shape: StateShape,
    side: str,
    config: InterpretationConfig,
) -> Optional[AutomatonTransition]:
    """Dangling transition whose open ``side`` lies within reach of ``shape``."""

    limit_sq = config.attachment_threshold ** 2
    matches: List[Tuple[float, AutomatonTransition]] = []
    for transition in graph.transitions:
        if not isinstance(transition.geometry, RegularGeometry):
            continue
        if not isinstance(getattr(transition, side), Dangling):
            continue
        loose = transition.geometry.tip_point if side == "end" else transition.geometry.start_point
        found = nearest_point_on_polyline(loose, shape.control_points)
        if found is None:
            continue
        _, dist_sq = found
        if dist_sq <= limit_sq:
            matches.append((dist_sq, transition))
    if not matches:
        return None
    return min(matches, key=lambda item: item[0])[1]


apply_debug_logging(globals(), logger=logger)
