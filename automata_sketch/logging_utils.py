"""DEBUG-level call tracing for the interpretation and propagation passes.

Arguments and results are summarised before they are logged: a graph is
reported by its element counts and a stroke by its first and last point, so
a trace of a long editing session stays readable.
"""

from __future__ import annotations

import functools
import inspect
import logging
import reprlib
from typing import Any, Callable, Iterable, Mapping, MutableMapping, Optional, Sequence, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_TRACED_MARKER = "_automata_sketch_traced"

_short = reprlib.Repr()
_short.maxlist = _short.maxtuple = _short.maxdict = _short.maxset = 8
_short.maxother = 160


def _summarize_graph(value: Any) -> Optional[str]:
    states = getattr(value, "states", None)
    transitions = getattr(value, "transitions", None)
    if not isinstance(states, tuple) or not isinstance(transitions, tuple):
        return None
    dangling = sum(
        1 for t in transitions if getattr(t, "start_state", 0) is None or getattr(t, "end_state", 0) is None
    )
    return f"Graph(states={len(states)}, transitions={len(transitions)}, dangling={dangling})"


def _summarize_points(value: Any) -> Optional[str]:
    points = getattr(value, "control_points", None)
    if not isinstance(points, tuple):
        return None
    kind = type(value).__name__
    if not points:
        return f"{kind}(0 points)"
    (x0, y0), (x1, y1) = points[0], points[-1]
    return f"{kind}({len(points)} points, first=({x0:.1f}, {y0:.1f}), last=({x1:.1f}, {y1:.1f}))"


def _summarize_array(value: np.ndarray) -> str:
    shape = tuple(value.shape)
    if value.size == 0:
        return f"ndarray(shape={shape})"
    return f"ndarray(shape={shape}, dtype={value.dtype}, min={float(value.min()):.4g}, max={float(value.max()):.4g})"


def _safe_repr(value: Any, *, max_items: int = 5, max_length: int = 300) -> str:
    """Compact, never-failing description of ``value`` for trace lines."""

    if isinstance(value, np.ndarray):
        return _summarize_array(value)
    summary = _summarize_graph(value) or _summarize_points(value)
    if summary is not None:
        return summary
    if isinstance(value, (list, tuple)) and len(value) > max_items:
        shown = ", ".join(_safe_repr(item) for item in value[:max_items])
        return f"[{shown}, ... ({len(value)} items)]"
    try:
        text = _short.repr(value)
    except Exception as exc:  # pragma: no cover - broken __repr__
        return f"<unrepresentable {type(value).__name__}: {exc!r}>"
    return text if len(text) <= max_length else text[:max_length] + "... (truncated)"


def _describe_call(args: Sequence[Any], kwargs: Mapping[str, Any]) -> str:
    pieces = [_safe_repr(arg) for arg in args]
    pieces.extend(f"{key}={_safe_repr(val)}" for key, val in kwargs.items())
    return ", ".join(pieces)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorator logging entry, exit and exceptions of a call at DEBUG level."""

    def decorate(func: F) -> F:
        if getattr(func, _TRACED_MARKER, False):
            return func
        label = name or getattr(func, "__qualname__", None) or getattr(func, "__name__", "<callable>")

        @functools.wraps(func)
        def traced(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s(%s)", label, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", label)
                raise
            if log_result:
                logger.debug("Exiting %s -> %s", label, _safe_repr(result))
            else:
                logger.debug("Exiting %s", label)
            return result

        setattr(traced, _TRACED_MARKER, True)
        return cast(F, traced)

    return decorate


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    public_only: bool = True,
) -> None:
    """Trace every function defined in the module owning ``namespace``.

    Imported functions are left alone, and so are ``_private`` helpers unless
    ``public_only`` is false.
    """

    owner = namespace.get("__name__")
    log = logger or logging.getLogger(owner if isinstance(owner, str) else __name__)
    excluded = frozenset(skip or ())
    for attr, value in list(namespace.items()):
        if attr in excluded or (public_only and attr.startswith("_")):
            continue
        if not inspect.isfunction(value) or value.__module__ != owner:
            continue
        namespace[attr] = debug_log_call(log, name=attr)(value)
