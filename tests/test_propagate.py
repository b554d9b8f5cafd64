import pytest

from automata_sketch import store
from automata_sketch.geometry import distance
from automata_sketch.model import Graph
from automata_sketch.propagate import (
    flex_drag_finished,
    flex_dragged,
    move_state,
    state_drag_finished,
    state_dragged,
)


@pytest.fixture
def connected():
    graph = Graph()
    graph, a = store.add_state(graph, (0.0, 0.0), 10.0)
    graph, b = store.add_state(graph, (100.0, 0.0), 10.0)
    graph, _ = store.connect_states(graph, a.id, b.id)
    return graph


def _assert_glued(graph, transition_id):
    transition = graph.transition(transition_id)
    start = graph.state(transition.start_state)
    end = graph.state(transition.end_state)
    assert distance(transition.geometry.start_point, start.center) == pytest.approx(start.radius)
    assert distance(transition.geometry.tip_point, end.center) == pytest.approx(end.radius)


def test_state_drag_keeps_endpoints_on_the_circle(connected):
    graph = state_dragged(connected, "q0", (0.0, -60.0))

    assert graph.state("q0").center == pytest.approx((0.0, -50.0))
    # live drags leave the committed handle alone
    assert graph.state("q0").current_drag_point == pytest.approx((0.0, -10.0))
    _assert_glued(graph, "t0")
    assert graph.transition("t0").geometry.tip_point == pytest.approx((90.0, 0.0))


def test_state_drag_finished_commits_the_handle(connected):
    graph = state_drag_finished(connected, "q1", (150.0, 30.0))

    state = graph.state("q1")
    assert state.center == pytest.approx((150.0, 40.0))
    assert state.current_drag_point == (150.0, 30.0)
    _assert_glued(graph, "t0")


def test_flex_drag_bends_the_arrow(connected):
    graph = flex_dragged(connected, "t0", (50.0, 40.0))

    geometry = graph.transition("t0").geometry
    assert geometry.flex_point == (50.0, 40.0)
    assert geometry.current_flex_point == pytest.approx((50.0, 0.0))
    _assert_glued(graph, "t0")
    assert geometry.start_point[1] > 0

    graph = flex_drag_finished(graph, "t0", (50.0, 40.0))
    assert graph.transition("t0").geometry.current_flex_point == (50.0, 40.0)


def test_loop_travels_with_its_state():
    graph, a = store.add_state(Graph(), (0.0, 0.0), 10.0)
    graph, loop = store.add_cycle(graph, a.id)

    moved = move_state(graph, a.id, (20.0, 0.0))

    geometry = moved.transition(loop.id).geometry
    assert geometry.anchor_point == pytest.approx((20.0, -10.0))
    assert geometry.center == pytest.approx((20.0, -15.0))
    assert flex_dragged(moved, loop.id, (0.0, 0.0)) is moved


def test_dangling_side_is_not_rederived():
    graph, a = store.add_state(Graph(), (0.0, 0.0), 10.0)
    graph, b = store.add_state(graph, (100.0, 0.0), 10.0)
    graph, t = store.connect_states(graph, a.id, b.id)
    graph = store.remove_state(graph, b.id)

    graph = state_dragged(graph, a.id, (0.0, 90.0))

    geometry = graph.transition(t.id).geometry
    assert geometry.tip_point == pytest.approx((90.0, 0.0))
    assert distance(geometry.start_point, (0.0, 100.0)) == pytest.approx(10.0)
