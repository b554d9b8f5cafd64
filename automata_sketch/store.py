"""Mutation primitives for :class:`~automata_sketch.model.Graph` snapshots.

Every function takes a graph and returns a new one; the input snapshot is
never modified.  Ids come from a monotonically increasing counter per element
kind, so an id is never reused within one graph lineage even after deletions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from .config import InterpretationConfig, get_interpretation_config
from .errors import GraphIntegrityError
from .geometry import Point, as_point, boundary_point_towards, midpoint, point_along, sub
from .model import (
    DANGLING,
    Attached,
    AutomatonState,
    AutomatonTransition,
    CycleGeometry,
    Endpoint,
    Graph,
    RegularGeometry,
    StateId,
    TransitionGeometry,
    TransitionId,
)

logger = logging.getLogger(__name__)


def issue_state_id(graph: Graph) -> Tuple[StateId, Graph]:
    return f"q{graph.next_state_index}", replace(graph, next_state_index=graph.next_state_index + 1)


def issue_transition_id(graph: Graph) -> Tuple[TransitionId, Graph]:
    return (
        f"t{graph.next_transition_index}",
        replace(graph, next_transition_index=graph.next_transition_index + 1),
    )


def add_state(
    graph: Graph,
    center: Point,
    radius: float,
    *,
    name: str = "",
    is_final: bool = False,
) -> Tuple[Graph, AutomatonState]:
    if radius <= 0:
        raise ValueError(f"state radius must be positive, got {radius!r}")
    state_id, graph = issue_state_id(graph)
    state = AutomatonState(id=state_id, center=as_point(center), radius=float(radius), name=name, is_final=is_final)
    logger.debug("add_state %s at (%.2f, %.2f) r=%.2f", state_id, state.center[0], state.center[1], radius)
    return replace(graph, states=graph.states + (state,)), state


def add_transition(
    graph: Graph,
    start: Endpoint,
    end: Endpoint,
    geometry: TransitionGeometry,
    *,
    symbols: Iterable[str] = (),
) -> Tuple[Graph, AutomatonTransition]:
    for side in (start, end):
        if isinstance(side, Attached) and not graph.has_state(side.state_id):
            raise GraphIntegrityError(f"transition endpoint references unknown state {side.state_id!r}")
    transition_id, graph = issue_transition_id(graph)
    transition = AutomatonTransition(
        id=transition_id,
        start=start,
        end=end,
        geometry=geometry,
        symbols=_dedupe(symbols),
    )
    logger.debug(
        "add_transition %s %s -> %s", transition_id, transition.start_state, transition.end_state
    )
    return replace(graph, transitions=graph.transitions + (transition,)), transition


def replace_state(graph: Graph, state: AutomatonState) -> Graph:
    graph.state(state.id)
    return replace(graph, states=tuple(state if s.id == state.id else s for s in graph.states))


def replace_transition(graph: Graph, transition: AutomatonTransition) -> Graph:
    graph.transition(transition.id)
    for side in (transition.start, transition.end):
        if isinstance(side, Attached) and not graph.has_state(side.state_id):
            raise GraphIntegrityError(f"transition endpoint references unknown state {side.state_id!r}")
    return replace(
        graph,
        transitions=tuple(transition if t.id == transition.id else t for t in graph.transitions),
    )


def remove_transition(graph: Graph, transition_id: TransitionId) -> Graph:
    graph.transition(transition_id)
    return replace(graph, transitions=tuple(t for t in graph.transitions if t.id != transition_id))


def remove_state(graph: Graph, state_id: StateId) -> Graph:
    """Delete a state; arrows that pointed at it become dangling on that side.

    Self-loops anchored on the state have nothing left to hang on and are
    removed together with it, and so are arrows that this deletion leaves with
    no state at either end.  Arrows that were already free-floating stay.
    """

    graph.state(state_id)
    transitions: List[AutomatonTransition] = []
    touched: List[TransitionId] = []
    for transition in graph.transitions:
        if transition.is_cycle and transition.references(state_id):
            continue
        if transition.references(state_id):
            touched.append(transition.id)
        if transition.start_state == state_id:
            transition = replace(transition, start=DANGLING)
        if transition.end_state == state_id:
            transition = replace(transition, end=DANGLING)
        transitions.append(transition)
    logger.debug("remove_state %s", state_id)
    graph = replace(
        graph,
        states=tuple(s for s in graph.states if s.id != state_id),
        transitions=tuple(transitions),
    )
    return discard_unanchored(graph, among=touched)


def rename_state(graph: Graph, state_id: StateId, name: str) -> Graph:
    return replace_state(graph, replace(graph.state(state_id), name=name))


def set_final(graph: Graph, state_id: StateId, is_final: bool = True) -> Graph:
    return replace_state(graph, replace(graph.state(state_id), is_final=is_final))


def toggle_final(graph: Graph, state_id: StateId) -> Graph:
    return set_final(graph, state_id, not graph.state(state_id).is_final)


def set_symbol_draft(graph: Graph, transition_id: TransitionId, draft: str) -> Graph:
    return replace_transition(graph, replace(graph.transition(transition_id), current_symbol_draft=draft))


def add_symbol(graph: Graph, transition_id: TransitionId, symbol: Optional[str] = None) -> Graph:
    """Add ``symbol`` (or the pending draft) to a transition's symbol set.

    Empty symbols are ignored and a symbol already present keeps its original
    position.  The draft buffer is cleared either way.
    """

    transition = graph.transition(transition_id)
    value = transition.current_symbol_draft if symbol is None else symbol
    symbols = transition.symbols
    if value and value not in symbols:
        symbols = symbols + (value,)
    return replace_transition(graph, replace(transition, symbols=symbols, current_symbol_draft=""))


def remove_symbol(graph: Graph, transition_id: TransitionId, symbol: str) -> Graph:
    transition = graph.transition(transition_id)
    return replace_transition(
        graph, replace(transition, symbols=tuple(s for s in transition.symbols if s != symbol))
    )


def toggle_epsilon(graph: Graph, transition_id: TransitionId) -> Graph:
    transition = graph.transition(transition_id)
    return replace_transition(graph, replace(transition, includes_epsilon=not transition.includes_epsilon))


def add_state_at(
    graph: Graph,
    center: Point,
    *,
    config: Optional[InterpretationConfig] = None,
) -> Tuple[Graph, AutomatonState]:
    cfg = config or get_interpretation_config()
    return add_state(graph, center, cfg.default_state_radius)


def connect_states(
    graph: Graph,
    start_id: StateId,
    end_id: StateId,
    *,
    config: Optional[InterpretationConfig] = None,
) -> Tuple[Graph, AutomatonTransition]:
    """Create an arrow between two chosen states, boundary to boundary.

    Choosing the same state twice produces a self-loop.
    """

    if start_id == end_id:
        return add_cycle(graph, start_id, config=config)
    start = graph.state(start_id)
    end = graph.state(end_id)
    start_point = boundary_point_towards(start.center, start.radius, end.center)
    tip_point = boundary_point_towards(end.center, end.radius, start.center)
    flex = midpoint(start_point, tip_point)
    geometry = RegularGeometry(start_point, tip_point, flex, flex)
    return add_transition(graph, Attached(start_id), Attached(end_id), geometry)


def cycle_geometry_for(
    state: AutomatonState,
    towards: Point,
    config: Optional[InterpretationConfig] = None,
) -> CycleGeometry:
    """Loop geometry hanging off ``state`` on the side facing ``towards``."""

    cfg = config or get_interpretation_config()
    anchor = boundary_point_towards(state.center, state.radius, towards)
    direction = sub(anchor, state.center)
    loop_radius = state.radius * cfg.cycle_loop_scale
    loop_center = point_along(state.center, direction, state.radius + loop_radius)
    return CycleGeometry(anchor_point=anchor, center=loop_center)


def add_cycle(
    graph: Graph,
    state_id: StateId,
    *,
    towards: Optional[Point] = None,
    config: Optional[InterpretationConfig] = None,
) -> Tuple[Graph, AutomatonTransition]:
    state = graph.state(state_id)
    if towards is None:
        towards = state.drag_point
    geometry = cycle_geometry_for(state, towards, config)
    return add_transition(graph, Attached(state_id), Attached(state_id), geometry)


def discard_unanchored(graph: Graph, among: Optional[Iterable[TransitionId]] = None) -> Graph:
    """Drop transitions that have lost both endpoints.

    With ``among`` only those transitions are considered.
    """

    candidates = None if among is None else set(among)
    kept = tuple(
        t for t in graph.transitions
        if not (t.is_unanchored and (candidates is None or t.id in candidates))
    )
    if len(kept) == len(graph.transitions):
        return graph
    return replace(graph, transitions=kept)


def clear(graph: Graph) -> Graph:
    """Empty the graph but keep the id counters running."""

    return replace(graph, states=(), transitions=())


def check_integrity(graph: Graph) -> None:
    """Raise :class:`GraphIntegrityError` for duplicate ids, dangling references or stale id counters."""

    if len(graph.states) != len({s.id for s in graph.states}):
        raise GraphIntegrityError("duplicate state ids")
    if len(graph.transitions) != len({t.id for t in graph.transitions}):
        raise GraphIntegrityError("duplicate transition ids")
    for state in graph.states:
        if state.radius <= 0:
            raise GraphIntegrityError(f"state {state.id} has non-positive radius")
    for transition in graph.transitions:
        for side in (transition.start_state, transition.end_state):
            if side is not None and not graph.has_state(side):
                raise GraphIntegrityError(
                    f"transition {transition.id} references unknown state {side!r}"
                )
        if transition.is_cycle and (
            transition.start_state is None or transition.start_state != transition.end_state
        ):
            raise GraphIntegrityError(f"cycle {transition.id} must start and end on one state")
    for prefix, counter, ids in (
        ("q", graph.next_state_index, graph.state_ids()),
        ("t", graph.next_transition_index, [t.id for t in graph.transitions]),
    ):
        for ident in ids:
            m = re.fullmatch(rf"{prefix}(\d+)", ident)
            if m and int(m.group(1)) >= counter:
                raise GraphIntegrityError(f"id {ident} is not below the id counter {counter}")


def _dedupe(symbols: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(s for s in symbols if s))


__all__ = [
    "issue_state_id",
    "issue_transition_id",
    "add_state",
    "add_transition",
    "replace_state",
    "replace_transition",
    "remove_transition",
    "remove_state",
    "rename_state",
    "set_final",
    "toggle_final",
    "set_symbol_draft",
    "add_symbol",
    "remove_symbol",
    "toggle_epsilon",
    "add_state_at",
    "connect_states",
    "cycle_geometry_for",
    "add_cycle",
    "discard_unanchored",
    "clear",
    "check_integrity",
]
