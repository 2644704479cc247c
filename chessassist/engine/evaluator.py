"""Static evaluation: material plus a small positional term.

Scores are integers in centipawns, signed from White's perspective.
"""

from __future__ import annotations

from typing import Optional

from chessassist.game.board import square_file, square_rank
from chessassist.game.state import Color, Piece, PieceType, Position

PIECE_VALUES = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20000,
}


def positional_bonus(piece: Piece, square: int) -> int:
    """Pawn advancement and centre files, central knights, dark-square bishops."""
    file, rank = square_file(square), square_rank(square)
    piece_type = piece.piece_type

    if piece_type == PieceType.PAWN:
        advanced = rank if piece.color == Color.WHITE else 7 - rank
        bonus = advanced * 2
        if file in (3, 4):  # d and e files
            bonus += 2
        return bonus
    if piece_type == PieceType.KNIGHT:
        return 10 if 2 <= file <= 5 and 2 <= rank <= 5 else 0
    if piece_type == PieceType.BISHOP:
        return 1 if (file + rank) % 2 == 0 else 0
    return 0


class Evaluator:
    """Material + positional evaluator."""

    def __init__(self, piece_values: Optional[dict[PieceType, int]] = None):
        self.piece_values = dict(PIECE_VALUES)
        if piece_values:
            self.piece_values.update(piece_values)

    def evaluate(self, position: Position) -> int:
        """Score a position; positive favours White. Pure and deterministic."""
        score = 0
        for square, piece in position.pieces():
            value = self.piece_values[piece.piece_type] + positional_bonus(piece, square)
            score += value if piece.color == Color.WHITE else -value
        return score


def evaluate(position: Position) -> int:
    """Evaluate with the default piece values."""
    return Evaluator().evaluate(position)
