"""Exception types raised or reported by the sketch pipeline."""

from __future__ import annotations


class SketchError(Exception):
    pass


class StrokeRejected(SketchError):
    """A stroke that must be removed from the drawing surface.

    The graph is left untouched; the caller is expected to delete the most
    recent stroke.
    """

    reason = "rejected"


class ClassificationFailed(StrokeRejected):
    reason = "classification-failed"


class DuplicateFinalMarking(StrokeRejected):
    reason = "duplicate-final-marking"

    def __init__(self, state_id: str):
        super().__init__(f"state {state_id} is already final")
        self.state_id = state_id


class AmbiguousCycleTarget(StrokeRejected):
    reason = "ambiguous-cycle-target"


class NoInitialState(SketchError):
    pass


class GraphIntegrityError(SketchError, KeyError):
    """Unknown id passed to a store primitive or a broken reference."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class ValidationError(SketchError):
    pass


class DocumentError(SketchError, ValueError):
    pass


__all__ = [
    "SketchError",
    "StrokeRejected",
    "ClassificationFailed",
    "DuplicateFinalMarking",
    "AmbiguousCycleTarget",
    "NoInitialState",
    "GraphIntegrityError",
    "ValidationError",
    "DocumentError",
]
