"""Fixed-depth minimax search with alpha-beta pruning.

White maximizes and Black minimizes the White-relative evaluation. Moves are
searched in generation order with no reordering, so among equally scored
moves the first generated one wins.

Mate scores: a side with no legal moves while in check is mated. The score is
MATE_SCORE - ply in favour of the mating side, where ply is the distance from
the search root, so a mate found closer to the root always outranks a slower
one, and any mate outranks any material balance (the largest reachable
material swing stays far below MATE_SCORE - max depth).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from chessassist.engine.evaluator import Evaluator
from chessassist.game.rules import applied, generate_legal_moves, is_in_check
from chessassist.game.state import Color, Move, Position

logger = logging.getLogger("chessassist.engine")

MATE_SCORE = 100_000
INF = 1_000_000_000


@dataclass
class SearchResult:
    """Outcome of one search call."""
    score: int  # Centipawns, White-relative
    best_move: Optional[Move] = None  # None at depth 0 or without legal moves
    nodes: int = 0


def is_mate_score(score: int) -> bool:
    return abs(score) > MATE_SCORE - 1000


def mate_in_moves(score: int) -> Optional[int]:
    """Full moves until mate for a mate score, None for any other score.

    Positive when White mates, negative when Black mates, 0 when the side to
    move is already mated.
    """
    if not is_mate_score(score):
        return None
    moves = (MATE_SCORE - abs(score) + 1) // 2
    return moves if score > 0 else -moves


class SearchEngine:
    """Depth-limited minimax over a single position mutated in place.

    The position passed to ``search`` is applied to and reverted move by
    move; it is back in its original state when ``search`` returns or
    raises. Callers that share a position must clone it first.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None):
        self.evaluator = evaluator or Evaluator()
        self.nodes = 0

    def search(self, position: Position, depth: int,
               alpha: int = -INF, beta: int = INF) -> SearchResult:
        """Search the position to a fixed depth and return score and best move."""
        if depth < 0:
            raise ValueError(f"Search depth must be >= 0, got {depth}")

        self.nodes = 0
        start_time = time.perf_counter()
        score, best_move = self._minimax(position, depth, alpha, beta, 0)
        elapsed = time.perf_counter() - start_time

        logger.debug(
            f"depth {depth} score {score} nodes {self.nodes} "
            f"time {elapsed:.3f}s nps {int(self.nodes / elapsed) if elapsed > 0 else 0}"
        )
        return SearchResult(score=score, best_move=best_move, nodes=self.nodes)

    def _minimax(self, position: Position, depth: int, alpha: int, beta: int,
                 ply: int) -> tuple[int, Optional[Move]]:
        self.nodes += 1

        if depth == 0:
            return self.evaluator.evaluate(position), None

        moves = generate_legal_moves(position)
        white = position.side_to_move == Color.WHITE

        if not moves:
            if is_in_check(position, position.side_to_move):
                # Checkmate: the side to move loses
                mate = MATE_SCORE - ply
                return (-mate if white else mate), None
            return 0, None  # Stalemate

        best_move = None
        if white:
            best_score = -INF
            for move in moves:
                with applied(position, move):
                    score, _ = self._minimax(position, depth - 1, alpha, beta, ply + 1)
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, score)
                if beta <= alpha:
                    break
        else:
            best_score = INF
            for move in moves:
                with applied(position, move):
                    score, _ = self._minimax(position, depth - 1, alpha, beta, ply + 1)
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, score)
                if beta <= alpha:
                    break

        return best_score, best_move
