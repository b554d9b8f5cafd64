"""TikZ renderer for sketched automata.

Sketch coordinates grow downwards, TikZ coordinates grow upwards; points are
flipped and scaled by ``PX_PER_CM`` on the way out.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Tuple

from .utils import latex_escape_keep_math, math_subscript_label
from ..geometry import Point, add, scale, sub
from ..model import AutomatonState, AutomatonTransition, CycleGeometry, Graph, RegularGeometry

PX_PER_CM = 50.0
EPSILON_LABEL = r"$\varepsilon$"

LOOP_DIRECTIONS: Dict[str, Tuple[float, float]] = {
    "above": (0.0, 1.0),
    "right": (1.0, 0.0),
    "below": (0.0, -1.0),
    "left": (-1.0, 0.0),
}

standalone_tpl = r"""\documentclass[border=4pt]{standalone}
\usepackage[utf8]{inputenc}
\usepackage{tikz}
\usetikzlibrary{automata,arrows.meta,positioning}
\tikzset{
  sk/state/.style={state,minimum size=0pt,inner sep=2pt},
  sk/edge/.style={-{Stealth[length=5pt]},line width=0.6pt},
  sk/label/.style={font=\footnotesize,inner sep=1pt},
}
\begin{document}
%s
%s
\end{document}
"""


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Cannot format non-finite float for TikZ output")
    formatted = f"{value:.4f}".rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        return "0"
    return formatted


def _to_tikz(point: Point) -> Tuple[float, float]:
    return (point[0] / PX_PER_CM, -point[1] / PX_PER_CM)


def _coord(point: Point) -> str:
    x, y = _to_tikz(point)
    return f"({_format_float(x)},{_format_float(y)})"


def state_label(state: AutomatonState) -> str:
    if state.name:
        return latex_escape_keep_math(state.name)
    return math_subscript_label(state.id)


def edge_label(transition: AutomatonTransition) -> str:
    parts = [latex_escape_keep_math(s) for s in transition.symbols]
    if transition.is_epsilon:
        parts.append(EPSILON_LABEL)
    return ", ".join(parts)


def _loop_direction(state: AutomatonState, geometry: CycleGeometry) -> str:
    dx, dy = sub(geometry.anchor_point, state.center)
    heading = (dx, -dy)
    return max(
        LOOP_DIRECTIONS,
        key=lambda name: heading[0] * LOOP_DIRECTIONS[name][0] + heading[1] * LOOP_DIRECTIONS[name][1],
    )


def _emit_states(graph: Graph) -> List[str]:
    initial = set(graph.initial_state_ids())
    lines: List[str] = []
    for state in graph.states:
        styles = ["sk/state"]
        if state.id in initial:
            styles.append("initial")
        if state.is_final:
            styles.append("accepting")
        lines.append(
            f"  \\node[{','.join(styles)}] ({state.id}) at {_coord(state.center)} {{{state_label(state)}}};"
        )
    return lines


def _endpoint_ref(state_id: Optional[str], point: Point) -> str:
    return f"({state_id})" if state_id is not None else _coord(point)


def _emit_transition(graph: Graph, transition: AutomatonTransition) -> Optional[str]:
    if transition.is_unanchored:
        return None
    label = edge_label(transition)
    geometry = transition.geometry
    if isinstance(geometry, RegularGeometry):
        if transition.start_state is None:
            # an arrow from nowhere is drawn by the `initial` node style
            return None
        control = sub(scale(geometry.flex_point, 2.0), scale(add(geometry.start_point, geometry.tip_point), 0.5))
        start = _endpoint_ref(transition.start_state, geometry.start_point)
        end = _endpoint_ref(transition.end_state, geometry.tip_point)
        return (
            f"  \\draw[sk/edge] {start} .. controls {_coord(control)} .. {end}"
            f" node[sk/label,midway,above] {{{label}}};"
        )
    state = graph.state(transition.start_state)
    direction = _loop_direction(state, geometry)
    return f"  \\path[sk/edge] ({state.id}) edge[loop {direction}] node[sk/label] {{{label}}} ();"


def generate_tikz_code(graph: Graph) -> str:
    """Return a ``tikzpicture`` environment drawing ``graph``."""

    if not isinstance(graph, Graph):
        raise TypeError("graph must be an instance of Graph")
    lines = ["\\begin{tikzpicture}[>=Stealth]"]
    lines.extend(_emit_states(graph))
    for transition in graph.transitions:
        emitted = _emit_transition(graph, transition)
        if emitted is not None:
            lines.append(emitted)
    lines.append("\\end{tikzpicture}")
    return "\n".join(lines)


def generate_tikz_document(
    graph: Graph,
    *,
    title: Optional[str] = None,
    alphabet: Iterable[str] = (),
) -> str:
    """Render a standalone document around :func:`generate_tikz_code`."""

    header_parts: List[str] = []
    if title:
        header_parts.append("\\textbf{" + latex_escape_keep_math(title.strip()) + "}")
    symbols = list(alphabet)
    if symbols:
        rendered = ", ".join(latex_escape_keep_math(s) for s in symbols)
        header_parts.append(f"$\\Sigma = \\{{$ {rendered} $\\}}$")
    header = ""
    if header_parts:
        header = "\\begin{tabular}{c}" + " \\\\ ".join(header_parts) + "\\\\[4pt]\\end{tabular}\n"
    return standalone_tpl % (header, generate_tikz_code(graph))
