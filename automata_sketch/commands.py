"""Editor commands and their replay against graph snapshots.

A command script is a JSON document: either a list of command objects or an
object with ``commands`` and an optional ``alphabet``.  Each command object
names its ``kind`` and carries the payload for that kind, e.g.::

    {"kind": "shape", "shape": "state", "controlPoints": [[0, 10], [10, 0], ...]}
    {"kind": "state_drag_finished", "state": "q0", "point": [120, 40]}
    {"kind": "add_symbol", "transition": "t1", "symbol": "a"}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .config import InterpretationConfig, get_interpretation_config
from .errors import ClassificationFailed, GraphIntegrityError, ValidationError
from .geometry import as_point
from .interpreter import interpret
from .model import Graph, GraphEdit
from . import propagate, store
from .shapes import make_shape

logger = logging.getLogger(__name__)

COMMAND_KINDS = (
    "shape",
    "state_dragged",
    "state_drag_finished",
    "flex_dragged",
    "flex_drag_finished",
    "rename_state",
    "add_symbol",
    "remove_symbol",
    "symbol_draft",
    "toggle_epsilon",
    "remove_state",
    "remove_transition",
    "toggle_final",
    "add_state",
    "connect_states",
    "add_cycle",
    "clear",
)


@dataclass
class Command:
    kind: str
    seq: int
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Script:
    commands: List[Command] = field(default_factory=list)
    alphabet: List[str] = field(default_factory=list)


@dataclass
class ReplayResult:
    graph: Graph
    edits: List[GraphEdit] = field(default_factory=list)

    @property
    def rejected(self) -> List[GraphEdit]:
        return [edit for edit in self.edits if not edit.applied]


def parse_script(text: str) -> Script:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"[line {exc.lineno}, col {exc.colno}] invalid JSON: {exc.msg}") from exc

    alphabet: List[str] = []
    if isinstance(payload, dict):
        raw_alphabet = payload.get("alphabet", [])
        if not isinstance(raw_alphabet, list) or not all(isinstance(s, str) for s in raw_alphabet):
            raise ValidationError("script alphabet must be a list of strings")
        alphabet = list(dict.fromkeys(raw_alphabet))
        payload = payload.get("commands")
    if not isinstance(payload, list):
        raise ValidationError("script must be a list of commands or an object with 'commands'")

    commands: List[Command] = []
    for seq, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise ValidationError(f"[command {seq}] expected an object, got {type(entry).__name__}")
        kind = entry.get("kind")
        if not isinstance(kind, str):
            raise ValidationError(f"[command {seq}] missing 'kind'")
        data = {k: v for k, v in entry.items() if k != "kind"}
        commands.append(Command(kind, seq, data))
    return Script(commands, alphabet)


def _shape_edit(graph: Graph, command: Command, config: InterpretationConfig) -> GraphEdit:
    try:
        shape = make_shape(command.data.get("shape", ""), command.data.get("controlPoints", []))
    except ClassificationFailed as exc:
        return GraphEdit(graph, "rejected", rejection=exc)
    return interpret(shape, graph, config=config)


def apply_command(
    graph: Graph,
    command: Command,
    *,
    config: Optional[InterpretationConfig] = None,
) -> GraphEdit:
    """Apply one command and report the resulting edit.

    Stroke-level problems come back as rejected edits; references to ids that
    do not exist raise :class:`GraphIntegrityError`.
    """

    cfg = config or get_interpretation_config()
    k = command.kind
    d = command.data
    if k == "shape":
        return _shape_edit(graph, command, cfg)
    if k == "state_dragged":
        return GraphEdit(propagate.state_dragged(graph, d["state"], as_point(d["point"])), k, d["state"])
    if k == "state_drag_finished":
        return GraphEdit(propagate.state_drag_finished(graph, d["state"], as_point(d["point"])), k, d["state"])
    if k == "flex_dragged":
        return GraphEdit(propagate.flex_dragged(graph, d["transition"], as_point(d["point"])), k, d["transition"])
    if k == "flex_drag_finished":
        return GraphEdit(
            propagate.flex_drag_finished(graph, d["transition"], as_point(d["point"])), k, d["transition"]
        )
    if k == "rename_state":
        return GraphEdit(store.rename_state(graph, d["state"], d["name"]), k, d["state"])
    if k == "add_symbol":
        return GraphEdit(store.add_symbol(graph, d["transition"], d.get("symbol")), k, d["transition"])
    if k == "remove_symbol":
        return GraphEdit(store.remove_symbol(graph, d["transition"], d["symbol"]), k, d["transition"])
    if k == "symbol_draft":
        return GraphEdit(store.set_symbol_draft(graph, d["transition"], d["text"]), k, d["transition"])
    if k == "toggle_epsilon":
        return GraphEdit(store.toggle_epsilon(graph, d["transition"]), k, d["transition"])
    if k == "remove_state":
        return GraphEdit(store.remove_state(graph, d["state"]), k, d["state"])
    if k == "remove_transition":
        return GraphEdit(store.remove_transition(graph, d["transition"]), k, d["transition"])
    if k == "toggle_final":
        return GraphEdit(store.toggle_final(graph, d["state"]), k, d["state"])
    if k == "add_state":
        graph, state = store.add_state_at(graph, as_point(d["point"]), config=cfg)
        return GraphEdit(graph, k, state.id)
    if k == "connect_states":
        graph, transition = store.connect_states(graph, d["from"], d["to"], config=cfg)
        return GraphEdit(graph, k, transition.id)
    if k == "add_cycle":
        graph, transition = store.add_cycle(graph, d["state"], config=cfg)
        return GraphEdit(graph, k, transition.id)
    if k == "clear":
        return GraphEdit(store.clear(graph), k)
    raise ValidationError(f"[command {command.seq}] unknown command kind {k!r}")


def replay(
    commands: Iterable[Command],
    graph: Optional[Graph] = None,
    *,
    config: Optional[InterpretationConfig] = None,
) -> ReplayResult:
    """Fold ``commands`` over ``graph`` (an empty graph by default)."""

    result = ReplayResult(graph if graph is not None else Graph())
    for command in commands:
        try:
            edit = apply_command(result.graph, command, config=config)
        except GraphIntegrityError as exc:
            raise ValidationError(f"[command {command.seq}] {exc}") from exc
        if edit.rejection is not None:
            logger.warning("Command %d (%s) rejected: %s", command.seq, command.kind, edit.rejection)
        result.edits.append(edit)
        result.graph = edit.graph
    logger.info(
        "Replayed %d command(s): %d state(s), %d transition(s), %d rejection(s)",
        len(result.edits),
        len(result.graph.states),
        len(result.graph.transitions),
        len(result.rejected),
    )
    return result
