"""CLI utility for explaining a single move.

Usage:
    python -m explainer.cli <fen> <move> [--eval E] [--eval-before E]
        [--second-eval E] [--pv LINE ...] [--forced] [--no-see]

Prints the explanation as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from explainer.config import Settings
from explainer.explain import MoveExplainer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Explain why a move is good",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("fen", help="Position FEN (quote the full string)")
    parser.add_argument("move", help="Move in coordinate notation, e.g. e2e4 or e7e8q")
    parser.add_argument(
        "--eval", dest="evaluation", metavar="E",
        help='Engine evaluation after the move, e.g. "+1.50" or "Mate in 3"',
    )
    parser.add_argument(
        "--eval-before", metavar="E",
        help="Engine evaluation before the move (enables move-quality verdict)",
    )
    parser.add_argument(
        "--second-eval", metavar="E",
        help="Evaluation of the runner-up line (enables the singular-move signal)",
    )
    parser.add_argument(
        "--pv", action="append", default=[], metavar="LINE",
        help='Principal variation, e.g. "Qh5+ Kg8 Qf7+ Kh8 (+0.00)"; may repeat',
    )
    parser.add_argument(
        "--forced", action="store_true",
        help="The move is the only legal move",
    )
    parser.add_argument(
        "--no-see", action="store_true",
        help="Omit SEE values from capture reasons",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log detector warnings to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = Settings(show_see_values=not args.no_see)
    explanation = MoveExplainer(settings).explain(
        args.fen,
        args.move,
        args.evaluation,
        args.pv,
        eval_before=args.eval_before,
        second_evaluation=args.second_eval,
        forced=args.forced,
    )
    json.dump(explanation.to_dict(), sys.stdout, indent=2)
    print()
    return 0 if explanation.reasons else 1


if __name__ == "__main__":
    sys.exit(main())
