from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from .model import Graph


@dataclass
class ConsistencyWarning:
    kind: str
    message: str
    ids: List[str] = field(default_factory=list)

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return self.message


def _reachable(graph: Graph, initial: Iterable[str]) -> Set[str]:
    edges: Dict[str, Set[str]] = {}
    for t in graph.transitions:
        if t.start_state is not None and t.end_state is not None:
            edges.setdefault(t.start_state, set()).add(t.end_state)
    seen = set(initial)
    queue = deque(seen)
    while queue:
        current = queue.popleft()
        for nxt in edges.get(current, ()):
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return seen


def check_consistency(graph: Graph, alphabet: Iterable[str] = ()) -> List[ConsistencyWarning]:
    """Report drawing issues that do not block simulation."""

    warnings: List[ConsistencyWarning] = []
    declared = list(dict.fromkeys(alphabet))

    for t in graph.transitions:
        if t.is_unanchored:
            warnings.append(
                ConsistencyWarning('unanchored_transition', f'transition {t.id} is not attached to any state', [t.id])
            )
            continue
        if t.end_state is None:
            warnings.append(
                ConsistencyWarning('dangling_transition', f'transition {t.id} has no end state', [t.id])
            )
        if declared:
            unknown = [s for s in t.symbols if s not in declared]
            if unknown:
                warnings.append(
                    ConsistencyWarning(
                        'symbol_not_in_alphabet',
                        f"transition {t.id} uses symbols outside the alphabet: {', '.join(unknown)}",
                        [t.id],
                    )
                )

    initial = graph.initial_state_ids()
    if graph.states and not initial:
        warnings.append(ConsistencyWarning('no_initial_state', 'no state is marked initial'))
    elif len(initial) > 1:
        warnings.append(
            ConsistencyWarning(
                'multiple_initial_states',
                f"several initial states ({', '.join(initial)}); runs start from all of them",
                list(initial),
            )
        )
    if graph.states and not graph.final_state_ids():
        warnings.append(ConsistencyWarning('no_final_state', 'no state is marked final'))

    if initial:
        reachable = _reachable(graph, initial)
        unreachable = [s for s in graph.state_ids() if s not in reachable]
        if unreachable:
            warnings.append(
                ConsistencyWarning(
                    'unreachable_states',
                    f"states unreachable from the initial state(s): {', '.join(unreachable)}",
                    unreachable,
                )
            )
    return warnings
