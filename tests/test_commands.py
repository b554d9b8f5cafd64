import json

import pytest

from automata_sketch import parse_script, replay, simulate_graph, validate
from automata_sketch.commands import Command, apply_command
from automata_sketch.errors import ClassificationFailed, ValidationError
from automata_sketch.model import Graph


def diamond(cx, cy, r):
    return [[cx + r, cy], [cx, cy + r], [cx - r, cy], [cx, cy - r]]


SKETCH = {
    "alphabet": ["a"],
    "commands": [
        {"kind": "shape", "shape": "state", "controlPoints": diamond(0, 0, 10)},
        {"kind": "shape", "shape": "state", "controlPoints": diamond(100, 0, 10)},
        {"kind": "shape", "shape": "transition", "controlPoints": [[12, 0], [50, 1], [88, 0]]},
        {"kind": "shape", "shape": "transition", "controlPoints": [[-80, 0], [-40, 0], [-12, 0]]},
        {"kind": "symbol_draft", "transition": "t0", "text": "a"},
        {"kind": "add_symbol", "transition": "t0"},
        {"kind": "shape", "shape": "state", "controlPoints": diamond(100, 0, 10)},
        {"kind": "rename_state", "state": "q0", "name": "start"},
    ],
}


def test_replay_sketch_builds_simulatable_automaton():
    script = parse_script(json.dumps(SKETCH))
    validate(script)

    result = replay(script.commands)
    graph = result.graph

    assert script.alphabet == ["a"]
    assert [e.action for e in result.edits[:4]] == [
        "state_created",
        "state_created",
        "transition_created",
        "transition_created",
    ]
    assert result.edits[6].action == "state_marked_final"
    assert not result.rejected
    assert graph.initial_state_ids() == ["q0"]
    assert graph.state("q0").name == "start"
    assert graph.transition("t0").symbols == ("a",)
    assert simulate_graph("a", graph).accepted
    assert not simulate_graph("aa", graph).accepted


def test_unknown_shape_category_is_a_rejected_stroke():
    command = Command("shape", 0, {"shape": "scribble", "controlPoints": [[0, 0], [1, 1]]})
    graph = Graph()

    edit = apply_command(graph, command)

    assert isinstance(edit.rejection, ClassificationFailed)
    assert edit.graph is graph


def test_editor_commands_without_strokes():
    commands = parse_script(
        json.dumps(
            [
                {"kind": "add_state", "point": [0, 0]},
                {"kind": "add_state", "point": [200, 0]},
                {"kind": "connect_states", "from": "q0", "to": "q1"},
                {"kind": "add_cycle", "state": "q1"},
                {"kind": "toggle_final", "state": "q1"},
                {"kind": "remove_transition", "transition": "t1"},
                {"kind": "state_drag_finished", "state": "q1", "point": [200, 60]},
            ]
        )
    ).commands

    graph = replay(commands).graph

    assert graph.state("q0").radius == 40.0
    assert graph.state("q1").center == (200.0, 100.0)
    assert graph.final_state_ids() == ["q1"]
    assert [t.id for t in graph.transitions] == ["t0"]


def test_replay_reports_unknown_ids_with_command_index():
    commands = parse_script('[{"kind": "clear"}, {"kind": "toggle_final", "state": "q4"}]').commands

    with pytest.raises(ValidationError, match=r"\[command 1\] unknown state 'q4'"):
        replay(commands)


@pytest.mark.parametrize(
    "text, message",
    [
        ('[{"kind": "clear"', r"\[line 1, col \d+\] invalid JSON"),
        ('"clear"', "list of commands"),
        ('[42]', r"\[command 0\] expected an object"),
        ('[{"state": "q0"}]', "missing 'kind'"),
        ('{"commands": [], "alphabet": "ab"}', "alphabet must be a list"),
    ],
)
def test_parse_script_errors(text, message):
    with pytest.raises(ValidationError, match=message):
        parse_script(text)


@pytest.mark.parametrize(
    "command, message",
    [
        ({"kind": "teleport"}, 'unknown command kind "teleport"'),
        ({"kind": "shape", "shape": 3, "controlPoints": [[0, 0]]}, 'string field "shape"'),
        ({"kind": "shape", "shape": "state", "controlPoints": []}, "non-empty controlPoints"),
        ({"kind": "shape", "shape": "state", "controlPoints": [[0, True]]}, r"controlPoints\[0\]"),
        ({"kind": "rename_state", "state": "q0"}, 'string field "name"'),
        ({"kind": "state_dragged", "state": "q0", "point": [1, 2, 3]}, '"point" as'),
        ({"kind": "connect_states", "from": "q0"}, 'string field "to"'),
    ],
)
def test_validate_rejects_malformed_commands(command, message):
    script = parse_script(json.dumps([command]))

    with pytest.raises(ValidationError, match=message):
        validate(script)


def test_validate_rejects_empty_alphabet_symbol():
    script = parse_script('{"commands": [], "alphabet": ["a", ""]}')

    with pytest.raises(ValidationError, match="non-empty"):
        validate(script)


def test_remove_state_command_discards_arrows_left_unattached():
    commands = parse_script(json.dumps(SKETCH)).commands
    stray = Command("shape", 8, {"shape": "transition", "controlPoints": [[300, 300], [350, 300], [400, 300]]})
    graph = replay(commands + [stray]).graph
    assert graph.transition("t2").is_unanchored

    edit = apply_command(graph, Command("remove_state", 9, {"state": "q0"}))

    # the entry arrow only touched q0; the a-arrow still ends in q1
    assert [t.id for t in edit.graph.transitions] == ["t0", "t2"]
    assert edit.graph.transition("t0").start_state is None
    assert edit.graph.transition("t0").end_state == "q1"
