"""Snapshot export/import and the local ``.automaton`` document store."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import DocumentError, GraphIntegrityError
from .geometry import Point
from .model import (
    AutomatonState,
    AutomatonTransition,
    CycleGeometry,
    Graph,
    RegularGeometry,
    endpoint,
)
from .store import check_integrity

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
DOCUMENT_SUFFIX = ".automaton"
DEFAULT_DOCUMENT_NAME = "Automaton"


@dataclass(frozen=True)
class AutomatonDocument:
    graph: Graph = field(default_factory=Graph)
    alphabet: Tuple[str, ...] = ()


def _point_out(point: Point) -> List[float]:
    return [float(point[0]), float(point[1])]


def _point_in(value: Any, where: str) -> Point:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise DocumentError(f"{where}: expected [x, y], got {value!r}")
    try:
        return (float(value[0]), float(value[1]))
    except (TypeError, ValueError) as exc:
        raise DocumentError(f"{where}: non-numeric coordinate in {value!r}") from exc


def _state_out(state: AutomatonState) -> Dict[str, Any]:
    return {
        "id": state.id,
        "center": _point_out(state.center),
        "radius": state.radius,
        "name": state.name,
        "isFinalState": state.is_final,
        "currentDragPoint": _point_out(state.current_drag_point),
    }


def _transition_out(transition: AutomatonTransition) -> Dict[str, Any]:
    geometry = transition.geometry
    if isinstance(geometry, CycleGeometry):
        geometry_out: Dict[str, Any] = {
            "type": "cycle",
            "anchorPoint": _point_out(geometry.anchor_point),
            "center": _point_out(geometry.center),
        }
    else:
        geometry_out = {
            "type": "regular",
            "startPoint": _point_out(geometry.start_point),
            "tipPoint": _point_out(geometry.tip_point),
            "flexPoint": _point_out(geometry.flex_point),
            "currentFlexPoint": _point_out(geometry.current_flex_point),
        }
    return {
        "id": transition.id,
        "startState": transition.start_state,
        "endState": transition.end_state,
        "symbols": list(transition.symbols),
        "includesEpsilon": transition.includes_epsilon,
        "currentSymbolDraft": transition.current_symbol_draft,
        "geometry": geometry_out,
    }


def export_snapshot(graph: Graph, alphabet: Iterable[str] = ()) -> Dict[str, Any]:
    """Return a JSON-compatible mapping describing ``graph`` exactly."""

    return {
        "version": FORMAT_VERSION,
        "nextStateIndex": graph.next_state_index,
        "nextTransitionIndex": graph.next_transition_index,
        "alphabet": list(dict.fromkeys(alphabet)),
        "states": [_state_out(s) for s in graph.states],
        "transitions": [_transition_out(t) for t in graph.transitions],
    }


def _require(mapping: Mapping[str, Any], key: str, kind: type, where: str) -> Any:
    if key not in mapping:
        raise DocumentError(f"{where}: missing {key!r}")
    value = mapping[key]
    if kind is float and isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DocumentError(f"{where}: {key!r} must be {kind.__name__}, got {value!r}")
    return value


def _optional_id(mapping: Mapping[str, Any], key: str, where: str) -> Optional[str]:
    value = mapping.get(key)
    if value is not None and not isinstance(value, str):
        raise DocumentError(f"{where}: {key!r} must be a state id or null")
    return value


def _state_in(data: Mapping[str, Any], index: int) -> AutomatonState:
    where = f"states[{index}]"
    if not isinstance(data, Mapping):
        raise DocumentError(f"{where}: expected an object")
    drag = data.get("currentDragPoint")
    return AutomatonState(
        id=_require(data, "id", str, where),
        center=_point_in(data.get("center"), f"{where}.center"),
        radius=_require(data, "radius", float, where),
        name=data.get("name", "") or "",
        is_final=bool(data.get("isFinalState", False)),
        current_drag_point=None if drag is None else _point_in(drag, f"{where}.currentDragPoint"),
    )


def _transition_in(data: Mapping[str, Any], index: int) -> AutomatonTransition:
    where = f"transitions[{index}]"
    if not isinstance(data, Mapping):
        raise DocumentError(f"{where}: expected an object")
    geometry_data = data.get("geometry")
    if not isinstance(geometry_data, Mapping):
        raise DocumentError(f"{where}: missing geometry")
    kind = geometry_data.get("type")
    if kind == "cycle":
        geometry = CycleGeometry(
            anchor_point=_point_in(geometry_data.get("anchorPoint"), f"{where}.anchorPoint"),
            center=_point_in(geometry_data.get("center"), f"{where}.center"),
        )
    elif kind == "regular":
        flex = _point_in(geometry_data.get("flexPoint"), f"{where}.flexPoint")
        current = geometry_data.get("currentFlexPoint")
        geometry = RegularGeometry(
            start_point=_point_in(geometry_data.get("startPoint"), f"{where}.startPoint"),
            tip_point=_point_in(geometry_data.get("tipPoint"), f"{where}.tipPoint"),
            flex_point=flex,
            current_flex_point=flex if current is None else _point_in(current, f"{where}.currentFlexPoint"),
        )
    else:
        raise DocumentError(f"{where}: unknown geometry type {kind!r}")
    symbols = data.get("symbols", [])
    if not isinstance(symbols, list) or not all(isinstance(s, str) for s in symbols):
        raise DocumentError(f"{where}: symbols must be a list of strings")
    return AutomatonTransition(
        id=_require(data, "id", str, where),
        start=endpoint(_optional_id(data, "startState", where)),
        end=endpoint(_optional_id(data, "endState", where)),
        geometry=geometry,
        symbols=tuple(dict.fromkeys(symbols)),
        includes_epsilon=bool(data.get("includesEpsilon", False)),
        current_symbol_draft=data.get("currentSymbolDraft", "") or "",
    )


def _next_free_index(declared: Any, ids: Iterable[str], prefix: str) -> int:
    """Counter value that cannot reissue any of ``ids``, whatever the snapshot declared."""

    if declared is None:
        declared = 0
    elif not isinstance(declared, int) or isinstance(declared, bool) or declared < 0:
        raise DocumentError(f"id counter must be a non-negative integer, got {declared!r}")
    used = [int(m.group(1)) for m in (re.fullmatch(rf"{prefix}(\d+)", i) for i in ids) if m]
    return max([declared] + [n + 1 for n in used])


def import_snapshot(data: Mapping[str, Any]) -> AutomatonDocument:
    """Rebuild the graph and alphabet written by :func:`export_snapshot`."""

    if not isinstance(data, Mapping):
        raise DocumentError("snapshot must be a JSON object")
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise DocumentError(f"unsupported snapshot version {version!r}")
    raw_states = data.get("states", [])
    raw_transitions = data.get("transitions", [])
    if not isinstance(raw_states, list) or not isinstance(raw_transitions, list):
        raise DocumentError("'states' and 'transitions' must be lists")
    states = tuple(_state_in(item, i) for i, item in enumerate(raw_states))
    transitions = tuple(_transition_in(item, i) for i, item in enumerate(raw_transitions))
    graph = Graph(
        states=states,
        transitions=transitions,
        next_state_index=_next_free_index(
            data.get("nextStateIndex"), (s.id for s in states), "q"
        ),
        next_transition_index=_next_free_index(
            data.get("nextTransitionIndex"), (t.id for t in transitions), "t"
        ),
    )
    try:
        check_integrity(graph)
    except GraphIntegrityError as exc:
        raise DocumentError(f"inconsistent snapshot: {exc}") from exc
    alphabet = data.get("alphabet", [])
    if not isinstance(alphabet, list) or not all(isinstance(s, str) for s in alphabet):
        raise DocumentError("alphabet must be a list of strings")
    return AutomatonDocument(graph=graph, alphabet=tuple(dict.fromkeys(alphabet)))


def save_document(path: Path, document: AutomatonDocument) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = export_snapshot(document.graph, document.alphabet)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info("Saved automaton with %d state(s) to %s", len(document.graph.states), path)
    return path


def load_document(path: Path) -> AutomatonDocument:
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocumentError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    logger.info("Loading automaton from %s", path)
    return import_snapshot(payload)


def create_document(directory: Path, name: str = DEFAULT_DOCUMENT_NAME) -> Path:
    """Write an empty document, appending a counter if the name is taken."""

    directory = Path(directory)
    candidate = directory / f"{name}{DOCUMENT_SUFFIX}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{name} {counter}{DOCUMENT_SUFFIX}"
        counter += 1
    return save_document(candidate, AutomatonDocument())


def list_documents(directory: Path) -> List[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix == DOCUMENT_SUFFIX)
