"""Single-writer editor session tying strokes, commands and simulation together.

Strokes are classified off the calling thread.  Results are applied one at a
time under the session lock in the order they complete; a result whose stroke
was erased in the meantime is dropped.  Readers take the current immutable
snapshot and never block a writer for longer than a reference copy.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Dict, Hashable, Iterable, List, Optional, Protocol, Sequence, Tuple

from .commands import Command, apply_command
from .config import InterpretationConfig, get_interpretation_config
from .document import AutomatonDocument, export_snapshot, import_snapshot
from .errors import ClassificationFailed, NoInitialState, StrokeRejected
from .geometry import Point
from .interpreter import interpret
from .model import Graph, GraphEdit
from .shapes import ClassifiedShape
from .simulation import SimulationResult, simulate_graph

logger = logging.getLogger(__name__)

OUTPUT_ACCEPTED = "accepted"
OUTPUT_REJECTED = "rejected"
OUTPUT_NO_INITIAL_STATE = "no initial state"

StrokeId = Hashable


class Classifier(Protocol):
    def classify(self, points: Sequence[Point]) -> ClassifiedShape:
        """Return the shape drawn by ``points`` or raise ClassificationFailed."""
        ...


class EditorSession:
    def __init__(
        self,
        classifier: Optional[Classifier] = None,
        *,
        executor: Optional[Executor] = None,
        config: Optional[InterpretationConfig] = None,
        graph: Optional[Graph] = None,
        alphabet: Iterable[str] = (),
    ) -> None:
        self._classifier = classifier
        self._owns_executor = executor is None and classifier is not None
        self._executor = executor or (ThreadPoolExecutor(max_workers=2) if classifier is not None else None)
        self._config = config or get_interpretation_config()
        self._lock = threading.RLock()
        self._graph = graph if graph is not None else Graph()
        self._alphabet: List[str] = list(dict.fromkeys(alphabet))
        self._live_strokes: Dict[StrokeId, Tuple[Point, ...]] = {}
        self._stroke_elements: Dict[StrokeId, Optional[str]] = {}
        self.strokes_to_delete: List[StrokeId] = []
        self.should_delete_last_stroke = False
        self.input = ""
        self.output = ""

    def __enter__(self) -> "EditorSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True)

    @property
    def graph(self) -> Graph:
        with self._lock:
            return self._graph

    @property
    def alphabet(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._alphabet)

    def is_live(self, stroke_id: StrokeId) -> bool:
        with self._lock:
            return stroke_id in self._live_strokes

    def element_for_stroke(self, stroke_id: StrokeId) -> Optional[str]:
        """Id of the state or transition a classified stroke turned into."""
        with self._lock:
            return self._stroke_elements.get(stroke_id)

    # -- strokes ---------------------------------------------------------

    def stroke_completed(self, stroke_id: StrokeId, points: Sequence[Point]) -> "Future[ClassifiedShape]":
        """Register a finished stroke and request its classification."""

        if self._classifier is None or self._executor is None:
            raise RuntimeError("session has no classifier")
        with self._lock:
            self._live_strokes[stroke_id] = tuple(points)
        future = self._executor.submit(self._classifier.classify, tuple(points))
        future.add_done_callback(lambda done: self._classification_finished(stroke_id, done))
        return future

    def stroke_erased(self, stroke_id: StrokeId) -> None:
        with self._lock:
            self._live_strokes.pop(stroke_id, None)

    def _classification_finished(self, stroke_id: StrokeId, future: "Future[ClassifiedShape]") -> None:
        if future.cancelled():
            logger.info("Classification of stroke %r was cancelled", stroke_id)
            self.stroke_erased(stroke_id)
            return
        error = future.exception()
        if error is None:
            self.classification_completed(stroke_id, future.result())
            return
        if not isinstance(error, ClassificationFailed):
            logger.error("Classifier failed for stroke %r: %r", stroke_id, error)
            error = ClassificationFailed(str(error))
        self.classification_completed(stroke_id, error)

    def classification_completed(self, stroke_id: StrokeId, outcome) -> Optional[GraphEdit]:
        """Apply a classifier outcome (a shape or ClassificationFailed) for a stroke.

        Returns ``None`` when the stroke is no longer on the canvas.
        """

        with self._lock:
            if stroke_id not in self._live_strokes:
                logger.info("Dropping classification for erased stroke %r", stroke_id)
                return None
            if isinstance(outcome, Exception):
                edit = GraphEdit(self._graph, "rejected", rejection=outcome)
            else:
                edit = interpret(outcome, self._graph, config=self._config)
            self._commit(edit, stroke_id)
            return edit

    def apply_shape(self, shape: ClassifiedShape) -> GraphEdit:
        """Interpret an already classified shape synchronously."""

        with self._lock:
            edit = interpret(shape, self._graph, config=self._config)
            self._commit(edit, None)
            return edit

    def _commit(self, edit: GraphEdit, stroke_id: Optional[StrokeId]) -> None:
        self._graph = edit.graph
        if isinstance(edit.rejection, StrokeRejected):
            logger.info("Stroke %r rejected: %s", stroke_id, edit.rejection)
            self.should_delete_last_stroke = True
            if stroke_id is not None:
                self._live_strokes.pop(stroke_id, None)
                self.strokes_to_delete.append(stroke_id)
        elif stroke_id is not None:
            self._stroke_elements[stroke_id] = edit.element_id

    def acknowledge_deleted_strokes(self) -> List[StrokeId]:
        """Hand the pending deletions to the drawing surface and reset the flag."""

        with self._lock:
            pending = list(self.strokes_to_delete)
            self.strokes_to_delete.clear()
            self.should_delete_last_stroke = False
            return pending

    # -- commands --------------------------------------------------------

    def dispatch(self, command: Command) -> GraphEdit:
        with self._lock:
            edit = apply_command(self._graph, command, config=self._config)
            self._commit(edit, None)
            return edit

    # -- alphabet and input ------------------------------------------------

    def add_alphabet_symbol(self, symbol: str) -> None:
        with self._lock:
            if symbol and symbol not in self._alphabet:
                self._alphabet.append(symbol)

    def remove_alphabet_symbol(self, symbol: str) -> None:
        with self._lock:
            self._alphabet = [s for s in self._alphabet if s != symbol]

    def set_input(self, text: str) -> None:
        self.input = text

    def remove_last_input_symbol(self) -> None:
        self.input = self.input[:-1]

    def simulate(self, word: Optional[str] = None) -> Optional[SimulationResult]:
        """Run the current input against the current snapshot.

        Sets :attr:`output`; returns ``None`` when no state is initial.
        """

        with self._lock:
            graph = self._graph
            alphabet = tuple(self._alphabet)
        text = self.input if word is None else word
        try:
            result = simulate_graph(text, graph, alphabet)
        except NoInitialState:
            logger.warning("Cannot simulate %r: no initial state", text)
            self.output = OUTPUT_NO_INITIAL_STATE
            return None
        self.output = OUTPUT_ACCEPTED if result.accepted else OUTPUT_REJECTED
        return result

    # -- persistence -------------------------------------------------------

    def export_snapshot(self) -> dict:
        with self._lock:
            return export_snapshot(self._graph, self._alphabet)

    def import_snapshot(self, data) -> AutomatonDocument:
        document = import_snapshot(data)
        with self._lock:
            self._graph = document.graph
            self._alphabet = list(document.alphabet)
            self._live_strokes.clear()
            self._stroke_elements.clear()
        return document
