"""Rebuild position text from scanned piece markers and a move list.

When a page does not expose its position directly, all that is known is
which piece stands on which square and how many moves have been played. The
remaining FEN fields are inferred heuristically:

  side to move   parity of the move list
  castling       king and rook still on their home squares
  en passant     last move text is a bare two-square pawn push ("e4", "d5")
  clocks         halfmove 0, fullmove from the move count

None of this is rules-critical: the result is parsed and validated by
``parse_fen`` before the engine sees it.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional

from chessassist.game.board import (
    BOARD_SIZE, FILE_LABELS, NUM_SQUARES, parse_square, square_index,
)

# Color + type marker inside a class list, e.g. "piece wk square-51"
_PIECE_CODE_RE = re.compile(r"\b([wb])([prnbqk])\b")
_SQUARE_MARKER_RE = re.compile(r"\bsquare-([1-8])([1-8])\b")
_SQUARE_NAME_RE = re.compile(r"^[a-h][1-8]$")
_PAWN_PUSH_RE = re.compile(r"^([a-h])([45])$")

# (king square, rook square, king letter, rook letter, castling letter)
_CASTLING_HOMES = [
    ("e1", "h1", "K", "R", "K"),
    ("e1", "a1", "K", "R", "Q"),
    ("e8", "h8", "k", "r", "k"),
    ("e8", "a8", "k", "r", "q"),
]


def parse_piece_code(code: str) -> str:
    """Normalize a piece code to its FEN letter.

    Accepts a FEN letter ("K", "p") or a color + type code ("wk", "bP").

    Raises:
        ValueError: If the code names no piece.
    """
    if len(code) == 1 and code.upper() in "PNBRQK":
        return code
    if len(code) == 2 and code[0] in "wb" and code[1].lower() in "pnbrqk":
        letter = code[1].lower()
        return letter.upper() if code[0] == "w" else letter
    raise ValueError(f"Unknown piece code: {code!r}")


def parse_square_marker(text: str) -> Optional[str]:
    """Extract a square name from 'e4' or a 'square-XY' marker (file X, rank Y)."""
    text = text.strip()
    if _SQUARE_NAME_RE.match(text):
        return text
    m = _SQUARE_MARKER_RE.search(text)
    if not m:
        return None
    return FILE_LABELS[int(m.group(1)) - 1] + m.group(2)


def parse_piece_marker(class_string: str) -> Optional[tuple[str, str]]:
    """Extract (square, FEN letter) from a marker class string.

    Returns None when either the piece code or the square is missing.
    """
    piece = _PIECE_CODE_RE.search(class_string)
    square = parse_square_marker(class_string)
    if piece is None or square is None:
        return None
    return square, parse_piece_code(piece.group(1) + piece.group(2))


def _build_grid(pieces: Mapping[str, str]) -> list[Optional[str]]:
    grid: list[Optional[str]] = [None] * NUM_SQUARES
    for square, code in pieces.items():
        grid[parse_square(square)] = parse_piece_code(code)
    return grid


def infer_side_to_move(move_count: int) -> str:
    """White moves after an even number of half-moves."""
    return "w" if move_count % 2 == 0 else "b"


def infer_castling(grid: list[Optional[str]]) -> str:
    """Grant each right whose king and rook still stand on their home squares."""
    rights = ""
    for king_sq, rook_sq, king, rook, letter in _CASTLING_HOMES:
        if grid[parse_square(king_sq)] == king and grid[parse_square(rook_sq)] == rook:
            rights += letter
    return rights or "-"


def infer_en_passant(grid: list[Optional[str]], last_move: Optional[str]) -> str:
    """Target square after a bare two-square pawn push, else '-'.

    A white pawn landing on rank 4 leaves its target on rank 3; a black pawn
    landing on rank 5 leaves it on rank 6.
    """
    if not last_move:
        return "-"
    m = _PAWN_PUSH_RE.match(last_move.strip())
    if not m:
        return "-"
    file = FILE_LABELS.index(m.group(1))
    if m.group(2) == "4" and grid[square_index(file, 3)] == "P":
        return f"{m.group(1)}3"
    if m.group(2) == "5" and grid[square_index(file, 4)] == "p":
        return f"{m.group(1)}6"
    return "-"


def build_position_text(pieces: Mapping[str, str], moves: Iterable[str] = (),
                        exposed_fen: Optional[str] = None) -> str:
    """Assemble FEN text from a square -> piece code mapping and the move list.

    Args:
        pieces: Mapping like {"e1": "K", "e8": "bk"}.
        moves: Move texts played so far, oldest first.
        exposed_fen: Position text published by the page, used as-is when it
            looks like a full FEN (contains a space).
    """
    if exposed_fen and " " in exposed_fen.strip():
        return exposed_fen.strip()

    moves = list(moves)
    grid = _build_grid(pieces)

    rows = []
    for rank in range(BOARD_SIZE - 1, -1, -1):
        row = ""
        empty = 0
        for file in range(BOARD_SIZE):
            letter = grid[square_index(file, rank)]
            if letter is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += letter
        if empty:
            row += str(empty)
        rows.append(row)

    side = infer_side_to_move(len(moves))
    castling = infer_castling(grid)
    en_passant = infer_en_passant(grid, moves[-1] if moves else None)
    if en_passant[-1] != ("6" if side == "w" else "3"):
        en_passant = "-"  # Push by the side now to move, so no capture is possible
    fullmove = len(moves) // 2 + 1
    return f"{'/'.join(rows)} {side} {castling} {en_passant} 0 {fullmove}"
