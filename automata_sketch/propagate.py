"""Keep transition geometry glued to states while things are dragged.

The flex point of a regular transition is the coordinate the user controls;
the start and tip points of an attached arrow are always re-derived from it
and the current circle of the state on that side.  Self-loops travel with
their state, keeping the anchor at the same angle on the circle.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .geometry import Point, add, as_point, boundary_point_towards, sub
from .logging_utils import apply_debug_logging
from .model import (
    AutomatonTransition,
    CycleGeometry,
    Graph,
    RegularGeometry,
    StateId,
    TransitionId,
)
from . import store

logger = logging.getLogger(__name__)


def rederive_endpoints(graph: Graph, transition: AutomatonTransition) -> AutomatonTransition:
    """Recompute the attached ends of a regular transition from its flex point."""

    geometry = transition.geometry
    if not isinstance(geometry, RegularGeometry):
        return transition
    start_point = geometry.start_point
    tip_point = geometry.tip_point
    if transition.start_state is not None:
        start = graph.state(transition.start_state)
        start_point = boundary_point_towards(start.center, start.radius, geometry.flex_point)
    if transition.end_state is not None:
        end = graph.state(transition.end_state)
        tip_point = boundary_point_towards(end.center, end.radius, geometry.flex_point)
    if start_point == geometry.start_point and tip_point == geometry.tip_point:
        return transition
    return replace(transition, geometry=replace(geometry, start_point=start_point, tip_point=tip_point))


def move_state(graph: Graph, state_id: StateId, center: Point) -> Graph:
    """Move a state and re-derive every transition that touches it."""

    state = graph.state(state_id)
    new_center = as_point(center)
    delta = sub(new_center, state.center)
    graph = store.replace_state(graph, state.moved_to(new_center))

    for transition in list(graph.transitions_touching(state_id)):
        geometry = transition.geometry
        if isinstance(geometry, CycleGeometry):
            updated = replace(
                transition,
                geometry=CycleGeometry(
                    anchor_point=add(geometry.anchor_point, delta),
                    center=add(geometry.center, delta),
                ),
            )
        else:
            updated = rederive_endpoints(graph, transition)
        if updated is not transition:
            graph = store.replace_transition(graph, updated)
    return graph


def state_dragged(graph: Graph, state_id: StateId, drag_point: Point) -> Graph:
    """Live drag: the handle sits one radius above the center."""

    state = graph.state(state_id)
    x, y = as_point(drag_point)
    return move_state(graph, state_id, (x, y + state.radius))


def state_drag_finished(graph: Graph, state_id: StateId, drag_point: Point) -> Graph:
    graph = state_dragged(graph, state_id, drag_point)
    state = graph.state(state_id)
    logger.info("State %s dropped at (%.2f, %.2f)", state_id, state.center[0], state.center[1])
    return store.replace_state(graph, replace(state, current_drag_point=as_point(drag_point)))


def flex_dragged(
    graph: Graph,
    transition_id: TransitionId,
    flex_point: Point,
    *,
    commit: bool = False,
) -> Graph:
    transition = graph.transition(transition_id)
    geometry = transition.geometry
    if not isinstance(geometry, RegularGeometry):
        logger.debug("Ignoring flex drag on cycle %s", transition_id)
        return graph
    point = as_point(flex_point)
    current: Optional[Point] = point if commit else geometry.current_flex_point
    transition = replace(transition, geometry=replace(geometry, flex_point=point, current_flex_point=current))
    return store.replace_transition(graph, rederive_endpoints(graph, transition))


def flex_drag_finished(graph: Graph, transition_id: TransitionId, flex_point: Point) -> Graph:
    return flex_dragged(graph, transition_id, flex_point, commit=True)


apply_debug_logging(globals(), logger=logger)
