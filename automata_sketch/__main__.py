import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from automata_sketch import (
    check_consistency,
    ConsistencyWarning,
    export_snapshot,
    generate_tikz_document,
    parse_script,
    print_graph,
    replay,
    simulate_graph,
    validate,
    NoInitialState,
    SketchError,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_alphabet(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Replay a sketched automaton and simulate inputs")
    parser.add_argument("path", help="Path to the JSON command script")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--input",
        dest="inputs",
        action="append",
        default=[],
        help="Input word to simulate; may be given several times",
    )
    parser.add_argument(
        "--alphabet",
        help="Comma-separated alphabet, overrides the script's alphabet",
    )
    parser.add_argument(
        "--export",
        help="Write the resulting snapshot JSON to the given path",
    )
    parser.add_argument(
        "--tikz-output-path",
        help="Write a standalone TikZ document of the automaton to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path, encoding="utf-8") as fin:
        text = fin.read()

    logger.info("Parsing command script from %s", args.path)
    try:
        script = parse_script(text)
        validate(script)
        result = replay(script.commands)
    except SketchError as exc:
        logger.error("%s", exc)
        raise SystemExit(1)
    logger.info("Validation succeeded")

    alphabet = _parse_alphabet(args.alphabet) or script.alphabet
    graph = result.graph

    print("Graph:")
    print(print_graph(graph) or "  (empty)")
    if result.rejected:
        print("Rejected strokes:")
        for edit in result.rejected:
            print(f"  - {edit.rejection.reason}: {edit.rejection}")

    warnings: List[ConsistencyWarning] = check_consistency(graph, alphabet)
    print("Warnings:")
    if warnings:
        for warning in warnings:
            logger.warning("Consistency warning: %s", warning)
            print(f"  - {warning}")
    else:
        print("  (none)")

    for word in args.inputs:
        try:
            outcome = simulate_graph(word, graph, alphabet)
        except NoInitialState:
            print(f"{word!r}: no initial state")
            continue
        verdict = "ACCEPT" if outcome.accepted else "REJECT"
        print(f"{word!r}: {verdict}")

    if args.export:
        export_path = Path(args.export)
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(export_snapshot(graph, alphabet), indent=2), encoding="utf-8")
        print(f"Snapshot written to {export_path}")

    if args.tikz_output_path:
        output_path = Path(args.tikz_output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing TikZ document to %s", output_path)
        output_path.write_text(generate_tikz_document(graph, alphabet=alphabet), encoding="utf-8")
        print(f"TikZ document written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
