from concurrent.futures import Future
from typing import Dict, List, Tuple

import pytest

from automata_sketch.commands import Command
from automata_sketch.errors import ClassificationFailed
from automata_sketch.session import EditorSession
from automata_sketch.shapes import StateShape, TransitionShape


def diamond(cx, cy, r):
    return ((cx + r, cy), (cx, cy + r), (cx - r, cy), (cx, cy - r))


class LookupClassifier:
    """Recognises strokes it was told about; anything else is a scribble."""

    def __init__(self, shapes: Dict[Tuple, object]):
        self.shapes = shapes

    def classify(self, points):
        try:
            return self.shapes[tuple(points)]
        except KeyError:
            raise ClassificationFailed("scribble") from None


class ImmediateExecutor:
    def submit(self, fn, *args):
        future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as exc:
            future.set_exception(exc)
        return future


class ManualExecutor:
    """Holds submitted work until the test decides the completion order."""

    def __init__(self):
        self.pending: List[Tuple[Future, object, tuple]] = []

    def submit(self, fn, *args):
        future = Future()
        self.pending.append((future, fn, args))
        return future

    def run(self, index):
        future, fn, args = self.pending[index]
        future.set_result(fn(*args))


A = diamond(0.0, 0.0, 10.0)
B = diamond(100.0, 0.0, 10.0)
ARROW_IN = ((-80.0, 0.0), (-40.0, 0.0), (-12.0, 0.0))
ARROW_AB = ((12.0, 0.0), (50.0, 1.0), (88.0, 0.0))
SHAPES = {
    A: StateShape(A),
    B: StateShape(B),
    ARROW_IN: TransitionShape(ARROW_IN),
    ARROW_AB: TransitionShape(ARROW_AB),
}


def test_strokes_build_an_automaton_that_simulates():
    session = EditorSession(LookupClassifier(SHAPES), executor=ImmediateExecutor())

    for stroke_id, points in enumerate([A, B, ARROW_IN, ARROW_AB, B]):
        session.stroke_completed(stroke_id, points)
    session.dispatch(Command("add_symbol", 0, {"transition": "t1", "symbol": "a"}))

    assert session.element_for_stroke(3) == "t1"
    assert session.graph.final_state_ids() == ["q1"]
    session.set_input("a")
    assert session.simulate().accepted
    assert session.output == "accepted"
    session.set_input("ab")
    session.remove_last_input_symbol()
    session.set_input(session.input + "a")
    assert not session.simulate()
    assert session.output == "rejected"


def test_results_apply_in_completion_order():
    executor = ManualExecutor()
    session = EditorSession(LookupClassifier(SHAPES), executor=executor)
    session.stroke_completed("first", A)
    session.stroke_completed("second", B)

    executor.run(1)
    executor.run(0)

    assert session.element_for_stroke("second") == "q0"
    assert session.element_for_stroke("first") == "q1"
    assert session.graph.state("q0").center == pytest.approx((100.0, 0.0))


def test_erased_stroke_result_is_dropped():
    executor = ManualExecutor()
    session = EditorSession(LookupClassifier(SHAPES), executor=executor)
    session.stroke_completed("gone", A)
    session.stroke_erased("gone")

    executor.run(0)

    assert session.graph.states == ()
    assert session.element_for_stroke("gone") is None
    assert not session.is_live("gone")


def test_cancelled_classification_drops_the_stroke():
    executor = ManualExecutor()
    session = EditorSession(LookupClassifier(SHAPES), executor=executor)
    session.stroke_completed("cancelled", A)
    session.stroke_completed("kept", B)

    assert executor.pending[0][0].cancel()
    executor.run(1)

    assert not session.is_live("cancelled")
    assert session.element_for_stroke("cancelled") is None
    assert session.graph.state_ids() == ["q0"]
    assert session.element_for_stroke("kept") == "q0"
    assert not session.should_delete_last_stroke

def test_rejected_stroke_is_queued_for_deletion():
    session = EditorSession(LookupClassifier(SHAPES), executor=ImmediateExecutor())
    session.stroke_completed("ok", A)
    session.stroke_completed("scribble", ((0.0, 0.0), (1.0, 1.0)))
    session.stroke_completed("again", A)
    session.stroke_completed("twice", A)

    assert session.should_delete_last_stroke
    assert session.acknowledge_deleted_strokes() == ["scribble", "twice"]
    assert not session.should_delete_last_stroke
    assert session.graph.state("q0").is_final
    assert session.is_live("again")
    assert not session.is_live("twice")


def test_thread_pool_session_applies_results():
    with EditorSession(LookupClassifier(SHAPES)) as session:
        future = session.stroke_completed(1, A)
        assert future.result(timeout=5) == StateShape(A)

    assert session.graph.state_ids() == ["q0"]
    assert session.element_for_stroke(1) == "q0"


def test_session_without_classifier():
    session = EditorSession(alphabet=["a", "a", "b"])

    with pytest.raises(RuntimeError):
        session.stroke_completed(1, A)

    session.apply_shape(StateShape(A))
    assert session.simulate("") is None
    assert session.output == "no initial state"

    session.add_alphabet_symbol("c")
    session.add_alphabet_symbol("")
    session.remove_alphabet_symbol("a")
    assert session.alphabet == ("b", "c")


def test_session_snapshot_round_trip():
    source = EditorSession(alphabet=["a"])
    source.apply_shape(StateShape(A))
    source.apply_shape(TransitionShape(ARROW_IN))

    target = EditorSession()
    document = target.import_snapshot(source.export_snapshot())

    assert document.alphabet == ("a",)
    assert target.graph == source.graph
    assert target.alphabet == ("a",)
