"""Immutable data model for sketched automata.

A :class:`Graph` is a value: every edit produces a new snapshot, so the
interpreter, the propagator and the simulator can all be written as pure
functions.  Transitions reference states by id only; there are no object links
between states and the transitions that touch them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .errors import GraphIntegrityError, StrokeRejected
from .geometry import Point

StateId = str
TransitionId = str


@dataclass(frozen=True)
class Dangling:
    """Endpoint not yet attached to a state."""

    @property
    def state_id(self) -> None:
        return None


@dataclass(frozen=True)
class Attached:
    state_id: StateId


Endpoint = Union[Dangling, Attached]

DANGLING = Dangling()


def endpoint(state_id: Optional[StateId]) -> Endpoint:
    return DANGLING if state_id is None else Attached(state_id)


@dataclass(frozen=True)
class AutomatonState:
    id: StateId
    center: Point
    radius: float
    name: str = ""
    is_final: bool = False
    # committed drag handle; only updated when a drag finishes
    current_drag_point: Optional[Point] = None

    def __post_init__(self) -> None:
        if self.current_drag_point is None:
            object.__setattr__(self, "current_drag_point", self.drag_point)

    @property
    def drag_point(self) -> Point:
        """Handle drawn at the top of the state circle."""
        return (self.center[0], self.center[1] - self.radius)

    @property
    def scribble_position(self) -> Point:
        return self.center

    def moved_to(self, center: Point) -> "AutomatonState":
        return replace(self, center=(float(center[0]), float(center[1])))


@dataclass(frozen=True)
class RegularGeometry:
    start_point: Point
    tip_point: Point
    flex_point: Point
    current_flex_point: Point


@dataclass(frozen=True)
class CycleGeometry:
    anchor_point: Point
    center: Point


TransitionGeometry = Union[RegularGeometry, CycleGeometry]


@dataclass(frozen=True)
class AutomatonTransition:
    id: TransitionId
    start: Endpoint
    end: Endpoint
    geometry: TransitionGeometry
    symbols: Tuple[str, ...] = ()
    includes_epsilon: bool = False
    current_symbol_draft: str = ""

    @property
    def start_state(self) -> Optional[StateId]:
        return self.start.state_id

    @property
    def end_state(self) -> Optional[StateId]:
        return self.end.state_id

    @property
    def is_cycle(self) -> bool:
        return isinstance(self.geometry, CycleGeometry)

    @property
    def is_epsilon(self) -> bool:
        """Traversable without consuming input."""
        return not self.symbols or self.includes_epsilon

    @property
    def is_unanchored(self) -> bool:
        return isinstance(self.start, Dangling) and isinstance(self.end, Dangling)

    def references(self, state_id: StateId) -> bool:
        return self.start_state == state_id or self.end_state == state_id


@dataclass(frozen=True)
class Graph:
    states: Tuple[AutomatonState, ...] = ()
    transitions: Tuple[AutomatonTransition, ...] = ()
    next_state_index: int = 0
    next_transition_index: int = 0
    _state_index: Dict[StateId, int] = field(init=False, repr=False, compare=False, default_factory=dict)
    _transition_index: Dict[TransitionId, int] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "transitions", tuple(self.transitions))
        object.__setattr__(self, "_state_index", {s.id: i for i, s in enumerate(self.states)})
        object.__setattr__(
            self, "_transition_index", {t.id: i for i, t in enumerate(self.transitions)}
        )

    def has_state(self, state_id: Optional[StateId]) -> bool:
        return state_id in self._state_index

    def has_transition(self, transition_id: TransitionId) -> bool:
        return transition_id in self._transition_index

    def state(self, state_id: StateId) -> AutomatonState:
        try:
            return self.states[self._state_index[state_id]]
        except KeyError:
            raise GraphIntegrityError(f"unknown state {state_id!r}") from None

    def transition(self, transition_id: TransitionId) -> AutomatonTransition:
        try:
            return self.transitions[self._transition_index[transition_id]]
        except KeyError:
            raise GraphIntegrityError(f"unknown transition {transition_id!r}") from None

    def state_ids(self) -> List[StateId]:
        return [s.id for s in self.states]

    def transitions_touching(self, state_id: StateId) -> Iterator[AutomatonTransition]:
        for transition in self.transitions:
            if transition.references(state_id):
                yield transition

    def initial_state_ids(self) -> List[StateId]:
        """States entered by an arrow drawn from nowhere, in transition order."""

        found: List[StateId] = []
        for transition in self.transitions:
            if transition.is_cycle:
                continue
            if isinstance(transition.start, Dangling) and isinstance(transition.end, Attached):
                if transition.end_state not in found and self.has_state(transition.end_state):
                    found.append(transition.end_state)
        return found

    def final_state_ids(self) -> List[StateId]:
        return [s.id for s in self.states if s.is_final]


@dataclass(frozen=True)
class GraphEdit:
    """Outcome of applying one command or shape to a graph snapshot.

    A rejected edit carries the untouched input graph and the reason; the
    stroke that triggered it should be removed from the drawing surface.
    """

    graph: Graph
    action: str
    element_id: Optional[str] = None
    rejection: Optional[StrokeRejected] = None
    notes: Tuple[str, ...] = ()

    @property
    def applied(self) -> bool:
        return self.rejection is None

    @property
    def delete_last_stroke(self) -> bool:
        return self.rejection is not None


__all__ = [
    "StateId",
    "TransitionId",
    "Dangling",
    "Attached",
    "Endpoint",
    "DANGLING",
    "endpoint",
    "AutomatonState",
    "RegularGeometry",
    "CycleGeometry",
    "TransitionGeometry",
    "AutomatonTransition",
    "Graph",
    "GraphEdit",
]
