#!/usr/bin/env python3
"""Analyze chess positions from the command line.

Usage:
    python scripts/analyze.py "FEN"                       # Depth from config (3)
    python scripts/analyze.py "FEN" "FEN" --depth 4       # Several positions in order
    python scripts/analyze.py --file positions.txt --board
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chessassist.engine.analyzer import ChessEngine, EvaluationTracker
from chessassist.engine.config import EngineConfig, load_config
from chessassist.game.board import render_board
from chessassist.game.notation import parse_fen, to_fen
from chessassist.game.rules import apply_move
from chessassist.game.state import Color

logger = logging.getLogger("chessassist.analyze")


def read_positions(args) -> list[str]:
    """Positions from the command line, then from --file (one FEN per line)."""
    positions = list(args.fen)
    if args.file:
        with open(args.file) as f:
            positions.extend(line.strip() for line in f
                             if line.strip() and not line.startswith("#"))
    return positions


def main() -> int:
    parser = argparse.ArgumentParser(description="Find the best move for chess positions")
    parser.add_argument("fen", nargs="*", help="Positions in FEN (quote each one)")
    parser.add_argument("--file", default=None, help="File with one FEN per line")
    parser.add_argument("--depth", type=int, default=None, help="Search depth (default from config)")
    parser.add_argument("--config", default=None,
                        help="Path to engine config YAML (e.g. configs/engine.yaml)")
    parser.add_argument("--board", action="store_true", help="Print each board before its result")
    parser.add_argument("--swing", type=float, default=1.5,
                        help="Evaluation swing (pawns) reported as a blunder (default: 1.5)")
    parser.add_argument("--verbose", action="store_true", help="Log search statistics")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else EngineConfig()
    except (OSError, ValueError) as e:
        logger.error(f"Could not load config: {e}")
        return 2

    positions = read_positions(args)
    if not positions:
        parser.error("no positions given")

    engine = ChessEngine(config)
    tracker = EvaluationTracker(threshold=args.swing)

    for fen in positions:
        try:
            position = parse_fen(fen)
            if args.board:
                print(render_board(position.to_display_board(),
                                   side_to_move="w" if position.side_to_move == Color.WHITE else "b",
                                   fullmove=position.fullmove_number))
            result = engine.analyze_board(position, args.depth)
        except ValueError as e:
            logger.error(f"{fen!r}: {e}")
            return 2

        print(f"{fen}")
        print(f"  Best move:  {result.best_move or 'none'}")
        if result.mate_in == 0:
            print("  Evaluation: checkmate")
        elif result.mate_in is not None:
            winner = "White" if result.mate_in > 0 else "Black"
            print(f"  Evaluation: {winner} mates in {abs(result.mate_in)}")
        else:
            print(f"  Evaluation: {result.evaluation:+.2f}")
        print(f"  Depth:      {result.depth}")
        if args.board and result.move is not None:
            after = position.clone()
            apply_move(after, result.move)
            print(f"  After:      {to_fen(after)}")
        if tracker.update(result.evaluation):
            print("  Blunder risk: evaluation swung by more than "
                  f"{args.swing:.2f} pawns since the previous position")
        print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
