import pytest

from automata_sketch import store
from automata_sketch.errors import AmbiguousCycleTarget, ClassificationFailed, DuplicateFinalMarking
from automata_sketch.interpreter import interpret
from automata_sketch.model import Attached, Dangling, Graph
from automata_sketch.shapes import CycleShape, StateShape, TransitionShape


def diamond(cx, cy, r):
    return StateShape(((cx + r, cy), (cx, cy + r), (cx - r, cy), (cx, cy - r)))


def _graph_with(*states):
    graph = Graph()
    for center, radius in states:
        graph, _ = store.add_state(graph, center, radius)
    return graph


def test_circle_on_empty_canvas_creates_state():
    edit = interpret(diamond(0.0, 0.0, 10.0), Graph())

    assert edit.applied
    assert edit.action == "state_created"
    state = edit.graph.state(edit.element_id)
    assert state.center == pytest.approx((0.0, 0.0))
    assert state.radius == pytest.approx(10.0)
    assert not state.is_final


def test_second_circle_marks_final_and_third_is_rejected():
    graph = interpret(diamond(0.0, 0.0, 10.0), Graph()).graph

    marked = interpret(diamond(1.0, 0.0, 14.0), graph)
    assert marked.action == "state_marked_final"
    assert marked.graph.state("q0").is_final
    assert len(marked.graph.states) == 1

    again = interpret(diamond(0.0, 0.0, 12.0), marked.graph)
    assert isinstance(again.rejection, DuplicateFinalMarking)
    assert again.delete_last_stroke
    assert again.graph is marked.graph


def test_circle_marks_the_enclosed_state_nearest_its_center():
    graph = _graph_with(((0.0, 0.0), 10.0), ((30.0, 0.0), 10.0))

    edit = interpret(diamond(25.0, 0.0, 40.0), graph)

    assert edit.element_id == "q1"
    assert edit.graph.final_state_ids() == ["q1"]


def _dangling_arrow():
    return interpret(TransitionShape(((0.0, 0.0), (50.0, 0.0), (100.0, 0.0))), Graph()).graph


def test_circle_at_loose_tip_closes_the_arrow():
    graph = _dangling_arrow()
    square = StateShape(((140.0, 0.0), (140.0, -20.0), (180.0, -20.0), (180.0, 20.0), (140.0, 20.0)))

    edit = interpret(square, graph)

    assert edit.action == "state_created_at_tip"
    assert edit.notes == ("t0",)
    state = edit.graph.state(edit.element_id)
    assert state.radius == pytest.approx(35.2)
    # new circle touches the tip on the far side of the arrow
    assert state.center == pytest.approx((135.2, 0.0))
    assert edit.graph.transition("t0").end == Attached(state.id)


def test_circle_just_beyond_threshold_stays_free():
    graph = _dangling_arrow()
    square = StateShape(((140.5, 0.0), (140.5, -20.0), (180.5, -20.0), (180.5, 20.0), (140.5, 20.0)))

    edit = interpret(square, graph)

    assert edit.action == "state_created"
    assert edit.graph.transition("t0").is_unanchored


def test_circle_at_loose_tail_becomes_the_source():
    graph = _dangling_arrow()

    edit = interpret(diamond(-30.0, 0.0, 10.0), graph)

    assert edit.action == "state_created_at_tail"
    state = edit.graph.state(edit.element_id)
    assert state.center == pytest.approx((-10.0, 0.0))
    assert edit.graph.transition("t0").start == Attached(state.id)


def test_arrow_between_two_states_attaches_both_ends():
    graph = _graph_with(((0.0, 0.0), 20.0), ((100.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((22.0, 0.0), (40.0, 2.0), (60.0, 2.0), (78.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert (transition.start_state, transition.end_state) == ("q0", "q1")
    assert transition.geometry.start_point == pytest.approx((20.0, 0.0))
    assert transition.geometry.tip_point == pytest.approx((80.0, 0.0), abs=1e-6)
    assert transition.geometry.flex_point == pytest.approx((50.0, 0.0), abs=1e-6)
    assert transition.geometry.current_flex_point == transition.geometry.flex_point


def test_arrow_from_empty_space_marks_target_initial():
    graph = _graph_with(((100.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((0.0, 0.0), (40.0, 0.0), (78.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert isinstance(transition.start, Dangling)
    assert transition.end == Attached("q0")
    assert transition.geometry.start_point == (0.0, 0.0)
    assert edit.graph.initial_state_ids() == ["q0"]


def test_arrow_into_empty_space_dangles_at_the_tip():
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((22.0, 0.0), (60.0, 0.0), (100.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert transition.start == Attached("q0")
    assert isinstance(transition.end, Dangling)
    assert transition.geometry.tip_point == (100.0, 0.0)


def test_arrow_leaving_a_state_keeps_the_start_when_both_ends_pick_it():
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((22.0, 0.0), (50.0, 0.0), (90.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert transition.start == Attached("q0")
    assert isinstance(transition.end, Dangling)
    assert transition.geometry.start_point == pytest.approx((20.0, 0.0))
    assert transition.geometry.tip_point == (90.0, 0.0)


def test_arrow_drawn_into_a_state_keeps_the_end_when_both_ends_pick_it():
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((100.0, 0.0), (60.0, 0.0), (22.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert isinstance(transition.start, Dangling)
    assert transition.end == Attached("q0")
    assert transition.geometry.start_point == (100.0, 0.0)
    assert transition.geometry.tip_point == pytest.approx((20.0, 0.0), abs=1e-9)
    assert edit.graph.initial_state_ids() == ["q0"]


def test_equally_close_ends_on_one_state_go_to_the_start():
    graph = _graph_with(((0.0, 0.0), 20.0))

    # both ends sit 5 away from the outline
    edit = interpret(TransitionShape(((25.0, 0.0), (10.0, 30.0), (-25.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert transition.start == Attached("q0")
    assert isinstance(transition.end, Dangling)
    assert transition.geometry.tip_point == (-25.0, 0.0)


def test_closer_end_beyond_threshold_leaves_both_ends_dangling():
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((100.0, 0.0), (150.0, 10.0), (200.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert transition.is_unanchored
    assert transition.geometry.start_point == (100.0, 0.0)
    assert transition.geometry.tip_point == (200.0, 0.0)


@pytest.mark.parametrize(
    "start_x, attached",
    [(-60.0, True), (-60.5, False)],
    ids=["at-threshold", "just-beyond"],
)
def test_arrow_start_attachment_threshold_is_inclusive(start_x, attached):
    graph = _graph_with(((0.0, 0.0), 20.0), ((200.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((start_x, 0.0), (80.0, 0.0), (180.0, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert transition.end == Attached("q1")
    if attached:
        assert transition.start == Attached("q0")
        assert transition.geometry.start_point == pytest.approx((-20.0, 0.0), abs=1e-9)
    else:
        assert isinstance(transition.start, Dangling)
        assert transition.geometry.start_point == (start_x, 0.0)


@pytest.mark.parametrize(
    "tip_x, attached",
    [(-60.0, True), (-60.5, False)],
    ids=["at-threshold", "just-beyond"],
)
def test_arrow_tip_attachment_threshold_is_inclusive(tip_x, attached):
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((-100.0, 0.0), (-80.0, 0.0), (tip_x, 0.0))), graph)

    transition = edit.graph.transition(edit.element_id)
    assert isinstance(transition.start, Dangling)
    if attached:
        assert transition.end == Attached("q0")
        assert transition.geometry.tip_point == pytest.approx((-20.0, 0.0), abs=1e-9)
    else:
        assert transition.is_unanchored
        assert transition.geometry.tip_point == (tip_x, 0.0)


@pytest.mark.parametrize("shape_type", [TransitionShape, CycleShape])
def test_shape_without_points_is_rejected(shape_type):
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(shape_type(()), graph)

    assert isinstance(edit.rejection, ClassificationFailed)
    assert "no control points" in str(edit.rejection)
    assert edit.graph is graph

def test_single_point_arrow_is_rejected():
    graph = _graph_with(((0.0, 0.0), 20.0))

    edit = interpret(TransitionShape(((25.0, 0.0), (25.0, 0.0))), graph)

    assert isinstance(edit.rejection, ClassificationFailed)
    assert edit.graph is graph


def test_loop_next_to_state_creates_cycle():
    graph = _graph_with(((0.0, 0.0), 20.0))
    loop = CycleShape(((0.0, -22.0), (10.0, -40.0), (0.0, -50.0), (-10.0, -40.0), (0.0, -22.0)))

    edit = interpret(loop, graph)

    assert edit.action == "cycle_created"
    transition = edit.graph.transition(edit.element_id)
    assert transition.is_cycle
    assert transition.start_state == transition.end_state == "q0"
    assert transition.geometry.anchor_point == pytest.approx((0.0, -20.0))
    assert transition.geometry.center == pytest.approx((0.0, -30.0))


@pytest.mark.parametrize(
    "graph",
    [Graph(), _graph_with(((0.0, 0.0), 20.0))],
    ids=["empty", "far-away"],
)
def test_loop_without_nearby_state_is_rejected(graph):
    loop = CycleShape(((0.0, -100.0), (10.0, -120.0), (-10.0, -120.0)))

    edit = interpret(loop, graph)

    assert isinstance(edit.rejection, AmbiguousCycleTarget)
    assert edit.graph is graph


@pytest.mark.parametrize(
    "offset, created",
    [(0.0, True), (0.5, False)],
    ids=["at-threshold", "just-beyond"],
)
def test_loop_reach_threshold_is_inclusive(offset, created):
    graph = _graph_with(((0.0, 0.0), 20.0))
    x = 60.0 + offset
    loop = CycleShape(((x, 0.0), (x + 15.0, 15.0), (x + 30.0, 0.0), (x + 15.0, -15.0)))

    edit = interpret(loop, graph)

    if created:
        assert edit.action == "cycle_created"
        assert edit.graph.transition(edit.element_id).geometry.anchor_point == pytest.approx((20.0, 0.0))
    else:
        assert isinstance(edit.rejection, AmbiguousCycleTarget)
        assert edit.graph is graph
