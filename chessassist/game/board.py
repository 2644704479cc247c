"""Board geometry, precomputed attack tables, and text-based rendering.

Squares are indexed 0..63 with ``index = rank * 8 + file``: a1 = 0, h1 = 7,
a8 = 56, h8 = 63. Every jump and ray table below is built from file/rank
coordinates, so no entry ever wraps around a board edge.
"""

from __future__ import annotations

BOARD_SIZE = 8
NUM_SQUARES = BOARD_SIZE * BOARD_SIZE

# Column labels for notation
FILE_LABELS = "abcdefgh"
# Row labels for notation (rank index 0 = "1", rank index 7 = "8")
RANK_LABELS = "12345678"

# (file delta, rank delta) offsets, in generation order
KNIGHT_OFFSETS = [(-1, -2), (1, -2), (-2, -1), (2, -1), (-2, 1), (2, 1), (-1, 2), (1, 2)]
BISHOP_DIRS = [(-1, -1), (1, -1), (-1, 1), (1, 1)]
ROOK_DIRS = [(0, -1), (-1, 0), (1, 0), (0, 1)]
QUEEN_DIRS = BISHOP_DIRS + ROOK_DIRS
KING_OFFSETS = [(df, dr) for dr in (-1, 0, 1) for df in (-1, 0, 1) if (df, dr) != (0, 0)]


def square_index(file: int, rank: int) -> int:
    return rank * BOARD_SIZE + file


def square_file(square: int) -> int:
    return square % BOARD_SIZE


def square_rank(square: int) -> int:
    return square // BOARD_SIZE


def in_bounds(file: int, rank: int) -> bool:
    return 0 <= file < BOARD_SIZE and 0 <= rank < BOARD_SIZE


def square_name(square: int) -> str:
    """Convert a square index to algebraic notation like 'e4'."""
    return FILE_LABELS[square_file(square)] + RANK_LABELS[square_rank(square)]


def parse_square(name: str) -> int:
    """Convert algebraic notation like 'e4' to a square index.

    Raises:
        ValueError: If the name is not a square on the board.
    """
    if len(name) != 2 or name[0] not in FILE_LABELS or name[1] not in RANK_LABELS:
        raise ValueError(f"Invalid square: {name!r}")
    return square_index(FILE_LABELS.index(name[0]), RANK_LABELS.index(name[1]))


def _jump_table(offsets: list[tuple[int, int]]) -> list[list[int]]:
    table = []
    for square in range(NUM_SQUARES):
        f, r = square_file(square), square_rank(square)
        table.append([square_index(f + df, r + dr) for df, dr in offsets
                      if in_bounds(f + df, r + dr)])
    return table


def _ray_table(directions: list[tuple[int, int]]) -> list[list[list[int]]]:
    """For every square, one list of squares per direction, nearest first."""
    table = []
    for square in range(NUM_SQUARES):
        rays = []
        for df, dr in directions:
            ray = []
            f, r = square_file(square) + df, square_rank(square) + dr
            while in_bounds(f, r):
                ray.append(square_index(f, r))
                f += df
                r += dr
            rays.append(ray)
        table.append(rays)
    return table


KNIGHT_TARGETS = _jump_table(KNIGHT_OFFSETS)
KING_TARGETS = _jump_table(KING_OFFSETS)
BISHOP_RAYS = _ray_table(BISHOP_DIRS)
ROOK_RAYS = _ray_table(ROOK_DIRS)
QUEEN_RAYS = _ray_table(QUEEN_DIRS)

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def render_board(board: list, side_to_move: str | None = None,
                 fullmove: int | None = None) -> str:
    """Render the board as a text string.

    Args:
        board: 64-entry list, each entry None or a FEN piece letter.
        side_to_move: Optional "w" or "b".
        fullmove: Optional fullmove number.
    """
    lines = []

    if side_to_move is not None:
        player_name = "White" if side_to_move == "w" else "Black"
        header = f"{player_name} to move"
        if fullmove is not None:
            header = f"Move {fullmove} - {header}"
        lines.append(header)
        lines.append("")

    lines.append("    a   b   c   d   e   f   g   h")
    lines.append("  +---+---+---+---+---+---+---+---+")

    for rank in range(BOARD_SIZE - 1, -1, -1):
        row_str = f"{rank + 1} |"
        for file in range(BOARD_SIZE):
            letter = board[square_index(file, rank)]
            row_str += f" {letter} |" if letter is not None else "   |"
        row_str += f" {rank + 1}"
        lines.append(row_str)
        lines.append("  +---+---+---+---+---+---+---+---+")

    lines.append("    a   b   c   d   e   f   g   h")

    return "\n".join(lines)
