"""Example session: feed pre-classified strokes, label arrows and run words."""

import logging
from concurrent.futures import ThreadPoolExecutor

from automata_sketch import (
    Command,
    EditorSession,
    build_render_feed,
    check_consistency,
    generate_tikz_code,
    print_graph,
    shape_from_payload,
)

# a real classifier would look at the raw points; this one already knows the answers
STROKES = [
    {"kind": "state", "controlPoints": [[30, 0], [0, 30], [-30, 0], [0, -30]]},
    {"kind": "state", "controlPoints": [[230, 0], [200, 30], [170, 0], [200, -30]]},
    {"kind": "transition", "controlPoints": [[-140, 0], [-90, 0], [-33, 0]]},
    {"kind": "transition", "controlPoints": [[33, 0], [100, 5], [167, 0]]},
    {"kind": "transitionCycle", "controlPoints": [[200, -32], [215, -60], [200, -75], [185, -60]]},
    {"kind": "state", "controlPoints": [[235, 0], [200, 35], [165, 0], [200, -35]]},
]


class PayloadClassifier:
    def __init__(self, payloads):
        self._by_points = {tuple(map(tuple, p["controlPoints"])): p for p in payloads}

    def classify(self, points):
        return shape_from_payload(self._by_points[tuple(map(tuple, points))])


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    # one worker keeps results in drawing order
    with ThreadPoolExecutor(max_workers=1) as executor:
        session = EditorSession(PayloadClassifier(STROKES), executor=executor, alphabet=["a", "b"])
        for stroke_id, payload in enumerate(STROKES):
            session.stroke_completed(stroke_id, [tuple(p) for p in payload["controlPoints"]])

    session.dispatch(Command("add_symbol", 0, {"transition": "t1", "symbol": "a"}))
    session.dispatch(Command("add_symbol", 1, {"transition": "t2", "symbol": "b"}))

    print(f"Graph:\n{print_graph(session.graph)}")
    print("Warnings:")
    for warning in check_consistency(session.graph, session.alphabet) or ["(none)"]:
        print(f"  - {warning}")

    for word in ["a", "abbb", "b", ""]:
        session.set_input(word)
        session.simulate()
        print(f"{word!r}: {session.output}")

    feed = build_render_feed(session.graph)
    print(f"{len(feed.strokes())} polylines to draw")
    print(generate_tikz_code(session.graph))


if __name__ == "__main__":
    main()
