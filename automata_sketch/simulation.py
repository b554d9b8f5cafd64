"""Epsilon-NFA acceptance over a graph snapshot.

Geometry plays no role here: only endpoints, symbol sets and final flags are
read.  Transitions with an open side cannot be followed and are skipped; the
one exception is an arrow from nowhere into a state, which marks that state
as initial.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .errors import NoInitialState
from .model import AutomatonTransition, Graph, StateId

logger = logging.getLogger(__name__)

InputWord = Union[str, Sequence[str]]

ACCEPTED = "accepted"
REJECTED_FINAL = "not-final"
REJECTED_NO_MATCH = "symbol-not-matched"


@dataclass(frozen=True)
class SimulationResult:
    accepted: bool
    reason: str
    consumed: int
    final_set: FrozenSet[StateId]

    def __bool__(self) -> bool:
        return self.accepted


def tokenize(word: InputWord) -> Tuple[str, ...]:
    """Split the input into symbols; plain strings are read one character at a time."""

    if isinstance(word, str):
        return tuple(word)
    return tuple(str(symbol) for symbol in word)


def _followable(transitions: Iterable[AutomatonTransition]) -> List[AutomatonTransition]:
    return [t for t in transitions if t.start_state is not None and t.end_state is not None]


def _epsilon_edges(transitions: Iterable[AutomatonTransition]) -> Dict[StateId, Set[StateId]]:
    edges: Dict[StateId, Set[StateId]] = {}
    for transition in _followable(transitions):
        if transition.is_epsilon:
            edges.setdefault(transition.start_state, set()).add(transition.end_state)
    return edges


def epsilon_closure(
    states: Iterable[StateId],
    transitions: Iterable[AutomatonTransition],
) -> FrozenSet[StateId]:
    """All states reachable from ``states`` through epsilon transitions alone."""

    edges = _epsilon_edges(transitions)
    closure: Set[StateId] = set(states)
    frontier = list(closure)
    while frontier:
        current = frontier.pop()
        for target in edges.get(current, ()):
            if target not in closure:
                closure.add(target)
                frontier.append(target)
    return frozenset(closure)


def step(
    current: Iterable[StateId],
    symbol: str,
    transitions: Sequence[AutomatonTransition],
) -> FrozenSet[StateId]:
    """States reached from ``current`` by reading ``symbol``, closed under epsilon."""

    current_set = set(current)
    targets = {
        t.end_state
        for t in _followable(transitions)
        if t.start_state in current_set and symbol in t.symbols
    }
    return epsilon_closure(targets, transitions)


def simulate(
    word: InputWord,
    states: Iterable[StateId],
    initial_states: Iterable[StateId],
    final_states: Iterable[StateId],
    alphabet: Iterable[str],
    transitions: Sequence[AutomatonTransition],
) -> SimulationResult:
    """Decide acceptance of ``word``.

    ``alphabet`` is advisory: symbols outside it are still matched against
    transition labels.  Transitions into or out of states not listed in
    ``states`` are ignored.
    """

    known = set(states)
    initial = [s for s in initial_states if s in known]
    if not initial:
        raise NoInitialState("automaton has no initial state")
    finals = frozenset(final_states) & known
    usable = [t for t in _followable(transitions) if t.start_state in known and t.end_state in known]
    advisory = set(alphabet)

    symbols = tokenize(word)
    current = epsilon_closure(initial, usable)
    for index, symbol in enumerate(symbols):
        if advisory and symbol not in advisory:
            logger.debug("Input symbol %r is not in the alphabet", symbol)
        current = step(current, symbol, usable)
        if not current:
            logger.debug("No transition on %r after %d symbol(s)", symbol, index)
            return SimulationResult(False, REJECTED_NO_MATCH, index, frozenset())

    accepted = bool(current & finals)
    return SimulationResult(accepted, ACCEPTED if accepted else REJECTED_FINAL, len(symbols), current)


def simulate_graph(
    word: InputWord,
    graph: Graph,
    alphabet: Iterable[str] = (),
    *,
    initial_state: Optional[StateId] = None,
) -> SimulationResult:
    """Run :func:`simulate` with the initial and final sets derived from ``graph``.

    Every state entered by an arrow from nowhere starts the run unless
    ``initial_state`` pins a single one.
    """

    if initial_state is not None:
        graph.state(initial_state)
        initial = [initial_state]
    else:
        initial = graph.initial_state_ids()
    result = simulate(
        word,
        graph.state_ids(),
        initial,
        graph.final_state_ids(),
        alphabet,
        graph.transitions,
    )
    logger.info(
        "Simulated %r from %s: %s (%s)",
        word,
        ", ".join(initial),
        "accept" if result.accepted else "reject",
        result.reason,
    )
    return result
