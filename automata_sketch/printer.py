from typing import Iterable, List, Tuple

from .model import AutomatonState, AutomatonTransition, CycleGeometry, Graph

EPSILON = "ε"


def point_str(point: Tuple[float, float]) -> str:
    return f"({point[0]:.2f}, {point[1]:.2f})"


def state_str(state: AutomatonState, *, initial: bool = False) -> str:
    flags = []
    if initial:
        flags.append("initial")
    if state.is_final:
        flags.append("final")
    label = f' "{state.name}"' if state.name else ""
    suffix = f" [{' '.join(flags)}]" if flags else ""
    return f"state {state.id}{label} at {point_str(state.center)} r={state.radius:.2f}{suffix}"


def symbols_str(transition: AutomatonTransition) -> str:
    symbols = list(transition.symbols)
    if transition.is_epsilon:
        symbols.append(EPSILON)
    return ", ".join(symbols)


def transition_str(transition: AutomatonTransition) -> str:
    start = transition.start_state or "?"
    end = transition.end_state or "?"
    kind = "cycle" if isinstance(transition.geometry, CycleGeometry) else "transition"
    return f"{kind} {transition.id} {start} -> {end} on {{{symbols_str(transition)}}}"


def print_graph(graph: Graph) -> str:
    initial = set(graph.initial_state_ids())
    lines: List[str] = [state_str(s, initial=s.id in initial) for s in graph.states]
    lines.extend(transition_str(t) for t in graph.transitions)
    return "\n".join(lines)


def print_alphabet(alphabet: Iterable[str]) -> str:
    return "{" + ", ".join(alphabet) + "}"
