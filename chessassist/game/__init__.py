"""Chess rules: position state, board geometry, move generation, FEN codec."""

from chessassist.game.state import (
    Castle, CastleSide, CastlingRights, Color, DoublePush, EnPassant, Move,
    Piece, PieceType, Position, Promotion, Undo,
)
from chessassist.game.rules import (
    applied, apply_move, generate_legal_moves, generate_pseudo_legal_moves,
    is_in_check, is_square_attacked, perft, revert_move,
)
from chessassist.game.board import STARTING_FEN, render_board
from chessassist.game.notation import (
    IllegalMoveError, PositionFormatError, coordinate_to_move, move_to_coordinate,
    parse_fen, to_fen,
)

__all__ = [
    "Castle", "CastleSide", "CastlingRights", "Color", "DoublePush", "EnPassant",
    "Move", "Piece", "PieceType", "Position", "Promotion", "Undo",
    "applied", "apply_move", "generate_legal_moves", "generate_pseudo_legal_moves",
    "is_in_check", "is_square_attacked", "perft", "revert_move",
    "STARTING_FEN", "render_board",
    "IllegalMoveError", "PositionFormatError", "coordinate_to_move",
    "move_to_coordinate", "parse_fen", "to_fen",
]
