import pytest

from automata_sketch import store
from automata_sketch.model import DANGLING, Attached, Graph, RegularGeometry


def entry_arrow(graph: Graph, state_id: str) -> Graph:
    """Arrow drawn from empty space into ``state_id``, making it initial."""
    state = graph.state(state_id)
    tip = (state.center[0] - state.radius, state.center[1])
    start = (tip[0] - 50.0, tip[1])
    flex = ((start[0] + tip[0]) / 2, tip[1])
    graph, _ = store.add_transition(
        graph, DANGLING, Attached(state_id), RegularGeometry(start, tip, flex, flex)
    )
    return graph


@pytest.fixture
def two_state_graph() -> Graph:
    # q0 --a--> q1, q0 initial, q1 final
    graph = Graph()
    graph, a = store.add_state(graph, (0.0, 0.0), 10.0)
    graph, b = store.add_state(graph, (100.0, 0.0), 10.0, is_final=True)
    graph = entry_arrow(graph, a.id)
    graph, t = store.connect_states(graph, a.id, b.id)
    return store.add_symbol(graph, t.id, "a")


@pytest.fixture
def add_entry_arrow():
    return entry_arrow
