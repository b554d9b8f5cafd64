from automata_sketch import store
from automata_sketch.printer import print_alphabet, print_graph


def test_print_graph_lists_states_then_transitions(two_state_graph):
    graph = store.rename_state(two_state_graph, "q0", "start")
    graph, _ = store.add_cycle(graph, "q1")

    assert print_graph(graph).splitlines() == [
        'state q0 "start" at (0.00, 0.00) r=10.00 [initial]',
        'state q1 at (100.00, 0.00) r=10.00 [final]',
        'transition t0 ? -> q0 on {ε}',
        'transition t1 q0 -> q1 on {a}',
        'cycle t2 q1 -> q1 on {ε}',
    ]


def test_print_graph_shows_epsilon_next_to_symbols(two_state_graph):
    graph = store.toggle_epsilon(two_state_graph, "t1")

    assert 'transition t1 q0 -> q1 on {a, ε}' in print_graph(graph)


def test_print_alphabet():
    assert print_alphabet(["a", "b"]) == '{a, b}'
    assert print_alphabet([]) == '{}'
