#!/usr/bin/env python3
"""Count legal move tree leaves to validate move generation.

Usage:
    python scripts/perft.py --depth 3                   # Starting position
    python scripts/perft.py "FEN" --depth 2 --divide    # Per-move breakdown
"""

import argparse
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chessassist.game.board import STARTING_FEN
from chessassist.game.notation import move_to_coordinate, parse_fen
from chessassist.game.rules import perft, perft_divide


def main() -> int:
    parser = argparse.ArgumentParser(description="Perft move generation counter")
    parser.add_argument("fen", nargs="?", default=STARTING_FEN, help="Position in FEN")
    parser.add_argument("--depth", type=int, default=3)
    parser.add_argument("--divide", action="store_true", help="Print counts per root move")
    args = parser.parse_args()

    try:
        position = parse_fen(args.fen)
    except ValueError as e:
        print(f"Invalid position: {e}", file=sys.stderr)
        return 2

    start = time.perf_counter()
    if args.divide:
        results = perft_divide(position, args.depth)
        for move, count in results:
            print(f"  {move_to_coordinate(move)}: {count}")
        total = sum(count for _, count in results)
    else:
        total = perft(position, args.depth)
    elapsed = time.perf_counter() - start

    print(f"perft({args.depth}) = {total}  ({elapsed:.2f}s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
