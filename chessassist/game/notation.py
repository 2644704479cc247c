"""FEN position codec and coordinate move notation.

Position format (six space-separated fields):
  rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1
  placement  side  castling  en-passant  halfmove  fullmove

Move format:
  e2e4       Move from e2 to e4 (captures and castling look the same)
  e7e8=Q     Promotion; the piece letter is always upper case on output
"""

from __future__ import annotations

import re

from chessassist.game.board import (
    BOARD_SIZE, RANK_LABELS, parse_square, square_index, square_name,
)
from chessassist.game.state import (
    CASTLING_CHARS, CastlingRights, Color, Move, PIECE_CHARS, PIECE_NAMES,
    Piece, Position, Promotion,
)
from chessassist.game.rules import generate_legal_moves


class PositionFormatError(ValueError):
    """Malformed position text."""


class IllegalMoveError(ValueError):
    """Move text that is malformed or matches no legal move."""


def parse_fen(text: str) -> Position:
    """Parse FEN text into a Position.

    Raises:
        PositionFormatError: If any of the six fields is malformed.
    """
    fields = text.split()
    if len(fields) != 6:
        raise PositionFormatError(f"Expected 6 fields, got {len(fields)}: {text!r}")
    placement, side, castling, en_passant, halfmove, fullmove = fields

    position = Position.empty()
    position.board = _parse_placement(placement)

    if side == "w":
        position.side_to_move = Color.WHITE
    elif side == "b":
        position.side_to_move = Color.BLACK
    else:
        raise PositionFormatError(f"Invalid side to move: {side!r}")

    position.castling = _parse_castling(castling)

    if en_passant == "-":
        position.en_passant = None
    else:
        try:
            square = parse_square(en_passant)
        except ValueError:
            raise PositionFormatError(f"Invalid en-passant square: {en_passant!r}") from None
        # White to move captures onto rank 6, Black onto rank 3
        expected_rank = "6" if position.side_to_move == Color.WHITE else "3"
        if en_passant[1] != expected_rank:
            raise PositionFormatError(
                f"En-passant square {en_passant!r} does not match side to move {side!r}"
            )
        position.en_passant = square

    position.halfmove_clock = _parse_counter(halfmove, "halfmove clock", minimum=0)
    position.fullmove_number = _parse_counter(fullmove, "fullmove number", minimum=1)
    return position


def _parse_placement(placement: str) -> list:
    ranks = placement.split("/")
    if len(ranks) != BOARD_SIZE:
        raise PositionFormatError(f"Expected 8 ranks, got {len(ranks)}: {placement!r}")

    board = [None] * (BOARD_SIZE * BOARD_SIZE)
    # FEN lists rank 8 first
    for i, rank_text in enumerate(ranks):
        rank = BOARD_SIZE - 1 - i
        file = 0
        for char in rank_text:
            if char in "12345678":
                file += int(char)
            elif char.upper() in PIECE_CHARS:
                if file < BOARD_SIZE:
                    board[square_index(file, rank)] = Piece.from_char(char)
                file += 1
            else:
                raise PositionFormatError(f"Unknown piece letter {char!r} in rank {RANK_LABELS[rank]}")
        if file != BOARD_SIZE:
            raise PositionFormatError(
                f"Rank {RANK_LABELS[rank]} describes {file} squares instead of 8: {rank_text!r}"
            )
    return board


def _parse_castling(token: str) -> CastlingRights:
    if token == "-":
        return CastlingRights.NONE
    rights = CastlingRights.NONE
    for char in token:
        right = CASTLING_CHARS.get(char)
        if right is None or rights & right:
            raise PositionFormatError(f"Invalid castling field: {token!r}")
        rights |= right
    return rights


def _parse_counter(token: str, name: str, minimum: int) -> int:
    if not token.isdigit():
        raise PositionFormatError(f"Invalid {name}: {token!r}")
    value = int(token)
    if value < minimum:
        raise PositionFormatError(f"Invalid {name}: {token!r}")
    return value


def to_fen(position: Position) -> str:
    """Serialize a Position to FEN text (exact inverse of parse_fen)."""
    rows = []
    for rank in range(BOARD_SIZE - 1, -1, -1):
        row = ""
        empty = 0
        for file in range(BOARD_SIZE):
            piece = position.board[square_index(file, rank)]
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += piece.char
        if empty:
            row += str(empty)
        rows.append(row)

    side = "w" if position.side_to_move == Color.WHITE else "b"
    castling = "".join(c for c, right in CASTLING_CHARS.items() if position.castling & right) or "-"
    en_passant = "-" if position.en_passant is None else square_name(position.en_passant)
    return (f"{'/'.join(rows)} {side} {castling} {en_passant} "
            f"{position.halfmove_clock} {position.fullmove_number}")


def move_to_coordinate(move: Move) -> str:
    """Convert a move to coordinate notation like 'e2e4' or 'e7e8=Q'."""
    text = square_name(move.from_sq) + square_name(move.to_sq)
    if isinstance(move, Promotion):
        text += "=" + PIECE_NAMES[move.promotion]
    return text


_COORDINATE_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])(?:=?([QRBNqrbn]))?$")


def coordinate_to_move(position: Position, text: str) -> Move:
    """Resolve coordinate notation against the legal moves of a position.

    Args:
        position: The position the move is played in.
        text: Move like 'e2e4', 'e7e8=Q' or 'e7e8q'.

    Raises:
        IllegalMoveError: If the text is malformed or no legal move matches.
    """
    m = _COORDINATE_RE.match(text.strip())
    if not m:
        raise IllegalMoveError(f"Invalid move notation: {text!r}")
    from_sq = parse_square(m.group(1))
    to_sq = parse_square(m.group(2))
    promotion = PIECE_CHARS[m.group(3).upper()] if m.group(3) else None

    for move in generate_legal_moves(position):
        if move.from_sq != from_sq or move.to_sq != to_sq:
            continue
        if isinstance(move, Promotion):
            if move.promotion == promotion:
                return move
        elif promotion is None:
            return move

    raise IllegalMoveError(f"Illegal move in this position: {text!r}")
