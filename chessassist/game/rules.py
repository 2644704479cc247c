"""Attack detection, legal move generation, and make/unmake.

Standard chess rules: pawn pushes, captures, promotion and en passant;
castling with full legality checks; check detection. Moves are generated by
scanning squares a1..h8 and, per piece, in a fixed offset order, so the
resulting move list order is deterministic.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from chessassist.game.board import (
    BISHOP_RAYS, BOARD_SIZE, KING_TARGETS, KNIGHT_TARGETS, QUEEN_RAYS, ROOK_RAYS,
    parse_square, square_file, square_index, square_rank,
)
from chessassist.game.state import (
    Castle, CastleSide, CastlingRights, Color, DoublePush, EnPassant, Move,
    Piece, PieceType, Position, Promotion, PROMOTION_TYPES, Undo,
)


@dataclass(frozen=True)
class CastleGeometry:
    right: CastlingRights
    king_from: int
    king_to: int
    rook_from: int
    rook_to: int
    must_be_empty: tuple[int, ...]  # Every square between king and rook
    must_be_safe: tuple[int, ...]   # King start square plus the squares it crosses


def _geometry(right, king_from, king_to, rook_from, rook_to, empty, safe) -> CastleGeometry:
    return CastleGeometry(
        right, parse_square(king_from), parse_square(king_to),
        parse_square(rook_from), parse_square(rook_to),
        tuple(parse_square(s) for s in empty), tuple(parse_square(s) for s in safe),
    )


CASTLE_GEOMETRY = {
    (Color.WHITE, CastleSide.KINGSIDE): _geometry(
        CastlingRights.WHITE_KINGSIDE, "e1", "g1", "h1", "f1", ("f1", "g1"), ("e1", "f1", "g1")),
    (Color.WHITE, CastleSide.QUEENSIDE): _geometry(
        CastlingRights.WHITE_QUEENSIDE, "e1", "c1", "a1", "d1", ("d1", "c1", "b1"), ("e1", "d1", "c1")),
    (Color.BLACK, CastleSide.KINGSIDE): _geometry(
        CastlingRights.BLACK_KINGSIDE, "e8", "g8", "h8", "f8", ("f8", "g8"), ("e8", "f8", "g8")),
    (Color.BLACK, CastleSide.QUEENSIDE): _geometry(
        CastlingRights.BLACK_QUEENSIDE, "e8", "c8", "a8", "d8", ("d8", "c8", "b8"), ("e8", "d8", "c8")),
}

# Rights lost when a king moves
KING_RIGHTS = {
    Color.WHITE: CastlingRights.WHITE_KINGSIDE | CastlingRights.WHITE_QUEENSIDE,
    Color.BLACK: CastlingRights.BLACK_KINGSIDE | CastlingRights.BLACK_QUEENSIDE,
}
# Rights lost when a rook home square is vacated or captured into
ROOK_HOME_RIGHTS = {
    geometry.rook_from: geometry.right for geometry in CASTLE_GEOMETRY.values()
}

_SLIDER_RAYS = {
    PieceType.BISHOP: BISHOP_RAYS,
    PieceType.ROOK: ROOK_RAYS,
    PieceType.QUEEN: QUEEN_RAYS,
}


def is_square_attacked(position: Position, square: int, by_color: Color) -> bool:
    """Check if any piece of by_color attacks the square.

    Checks outward from the target square along every attack pattern.
    """
    board = position.board
    file, rank = square_file(square), square_rank(square)

    # Pawns: an attacking pawn stands one rank behind the target, from its own side
    pawn_rank = rank - 1 if by_color == Color.WHITE else rank + 1
    if 0 <= pawn_rank < BOARD_SIZE:
        pawn = Piece(PieceType.PAWN, by_color)
        for df in (-1, 1):
            if 0 <= file + df < BOARD_SIZE and board[square_index(file + df, pawn_rank)] == pawn:
                return True

    knight = Piece(PieceType.KNIGHT, by_color)
    for target in KNIGHT_TARGETS[square]:
        if board[target] == knight:
            return True

    for rays, sliders in ((BISHOP_RAYS, (PieceType.BISHOP, PieceType.QUEEN)),
                          (ROOK_RAYS, (PieceType.ROOK, PieceType.QUEEN))):
        for ray in rays[square]:
            for target in ray:
                occupant = board[target]
                if occupant is None:
                    continue
                if occupant.color == by_color and occupant.piece_type in sliders:
                    return True
                break

    king = Piece(PieceType.KING, by_color)
    for target in KING_TARGETS[square]:
        if board[target] == king:
            return True

    return False


def is_in_check(position: Position, color: Color) -> bool:
    """Check if the given color's king is under attack."""
    king_sq = position.king_square(color)
    if king_sq is None:
        raise AssertionError(f"No {color.name.lower()} king on the board")
    return is_square_attacked(position, king_sq, color.opponent)


def generate_pseudo_legal_moves(position: Position) -> list[Move]:
    """Generate all pseudo-legal moves (own king safety not checked).

    Castling is the exception: its squares-not-attacked conditions are
    already enforced here.
    """
    color = position.side_to_move
    moves: list[Move] = []

    for square, piece in enumerate(position.board):
        if piece is None or piece.color != color:
            continue

        piece_type = piece.piece_type
        if piece_type == PieceType.PAWN:
            _gen_pawn_moves(position, square, piece, moves)
        elif piece_type == PieceType.KNIGHT:
            _gen_jump_moves(position, square, piece, KNIGHT_TARGETS[square], moves)
        elif piece_type == PieceType.KING:
            _gen_jump_moves(position, square, piece, KING_TARGETS[square], moves)
            _gen_castling_moves(position, square, piece, moves)
        else:
            _gen_slide_moves(position, square, piece, _SLIDER_RAYS[piece_type][square], moves)

    return moves


def generate_legal_moves(position: Position) -> list[Move]:
    """Generate all legal moves for the side to move.

    Filters out moves that leave the mover's own king attacked, using
    make/unmake on the position itself.
    """
    color = position.side_to_move
    opponent = color.opponent
    king_sq = position.king_square(color)
    if king_sq is None:
        raise AssertionError(f"No {color.name.lower()} king on the board")

    legal = []
    for move in generate_pseudo_legal_moves(position):
        target = move.to_sq if move.piece.piece_type == PieceType.KING else king_sq
        with applied(position, move):
            if not is_square_attacked(position, target, opponent):
                legal.append(move)
    return legal


def _gen_pawn_moves(position: Position, square: int, piece: Piece, moves: list[Move]):
    """Pawn: single and double push, diagonal captures, en passant, promotion."""
    board = position.board
    white = piece.color == Color.WHITE
    forward = 1 if white else -1
    start_rank = 1 if white else 6
    last_rank = 7 if white else 0

    file, rank = square_file(square), square_rank(square)
    next_rank = rank + forward
    if not 0 <= next_rank < BOARD_SIZE:
        return
    promotes = next_rank == last_rank

    # Pushes (non-capture only)
    one = square_index(file, next_rank)
    if board[one] is None:
        _add_pawn_move(square, one, piece, None, promotes, moves)
        if rank == start_rank:
            two = square_index(file, next_rank + forward)
            if board[two] is None:
                moves.append(DoublePush(square, two, piece))

    # Diagonal captures, then en passant onto the same square
    for df in (-1, 1):
        target_file = file + df
        if not 0 <= target_file < BOARD_SIZE:
            continue
        target = square_index(target_file, next_rank)
        occupant = board[target]
        if occupant is not None:
            if occupant.color != piece.color:
                _add_pawn_move(square, target, piece, occupant, promotes, moves)
        elif target == position.en_passant:
            victim = board[square_index(target_file, rank)]
            if victim == Piece(PieceType.PAWN, piece.color.opponent):
                moves.append(EnPassant(square, target, piece, victim))


def _add_pawn_move(from_sq: int, to_sq: int, piece: Piece, captured, promotes: bool,
                   moves: list[Move]):
    if promotes:
        for promotion in PROMOTION_TYPES:
            moves.append(Promotion(from_sq, to_sq, piece, captured, promotion=promotion))
    else:
        moves.append(Move(from_sq, to_sq, piece, captured))


def _gen_jump_moves(position: Position, square: int, piece: Piece, targets: list[int],
                    moves: list[Move]):
    """Knight and king steps: land on any empty or enemy-held target."""
    board = position.board
    for target in targets:
        occupant = board[target]
        if occupant is None:
            moves.append(Move(square, target, piece))
        elif occupant.color != piece.color:
            moves.append(Move(square, target, piece, occupant))


def _gen_slide_moves(position: Position, square: int, piece: Piece, rays: list[list[int]],
                     moves: list[Move]):
    """Bishop, rook, queen: slide along each ray until blocked, capture included."""
    board = position.board
    for ray in rays:
        for target in ray:
            occupant = board[target]
            if occupant is None:
                moves.append(Move(square, target, piece))
                continue
            if occupant.color != piece.color:
                moves.append(Move(square, target, piece, occupant))
            break  # Blocked


def _gen_castling_moves(position: Position, square: int, piece: Piece, moves: list[Move]):
    """Castling: right held, path empty, king start and transit squares unattacked."""
    board = position.board
    color = piece.color
    opponent = color.opponent
    rook = Piece(PieceType.ROOK, color)

    for side in (CastleSide.KINGSIDE, CastleSide.QUEENSIDE):
        geometry = CASTLE_GEOMETRY[(color, side)]
        if not position.castling & geometry.right:
            continue
        if square != geometry.king_from or board[geometry.rook_from] != rook:
            continue
        if any(board[s] is not None for s in geometry.must_be_empty):
            continue
        if any(is_square_attacked(position, s, opponent) for s in geometry.must_be_safe):
            continue
        moves.append(Castle(square, geometry.king_to, piece, side=side))


def _without(rights: CastlingRights, lost: int) -> CastlingRights:
    return CastlingRights(int(rights) & ~int(lost))


def apply_move(position: Position, move: Move) -> Undo:
    """Apply a move in place and return the record needed to take it back.

    The move is trusted: legality is the move generator's job.
    """
    board = position.board
    color = move.piece.color
    undo = Undo(move, move.captured, position.castling, position.en_passant,
                position.halfmove_clock)

    position.en_passant = None
    position.halfmove_clock += 1

    board[move.from_sq] = None
    if isinstance(move, EnPassant):
        board[move.capture_square] = None
    if isinstance(move, Promotion):
        board[move.to_sq] = Piece(move.promotion, color)
    else:
        board[move.to_sq] = move.piece

    if move.piece.piece_type == PieceType.PAWN or move.captured is not None:
        position.halfmove_clock = 0
    if isinstance(move, DoublePush):
        position.en_passant = (move.from_sq + move.to_sq) // 2

    lost = ROOK_HOME_RIGHTS.get(move.from_sq, 0) | ROOK_HOME_RIGHTS.get(move.to_sq, 0)
    if move.piece.piece_type == PieceType.KING:
        lost |= KING_RIGHTS[color]
    if lost:
        position.castling = _without(position.castling, lost)

    if isinstance(move, Castle):
        geometry = CASTLE_GEOMETRY[(color, move.side)]
        board[geometry.rook_to] = board[geometry.rook_from]
        board[geometry.rook_from] = None

    position.side_to_move = color.opponent
    if color == Color.BLACK:
        position.fullmove_number += 1

    return undo


def revert_move(position: Position, undo: Undo) -> None:
    """Exactly invert the apply_move call that produced ``undo``."""
    move = undo.move
    board = position.board
    color = move.piece.color

    position.side_to_move = color
    if color == Color.BLACK:
        position.fullmove_number -= 1
    position.castling = undo.castling
    position.en_passant = undo.en_passant
    position.halfmove_clock = undo.halfmove_clock

    board[move.from_sq] = move.piece
    if isinstance(move, EnPassant):
        board[move.to_sq] = None
        board[move.capture_square] = undo.captured
    else:
        board[move.to_sq] = undo.captured

    if isinstance(move, Castle):
        geometry = CASTLE_GEOMETRY[(color, move.side)]
        board[geometry.rook_from] = board[geometry.rook_to]
        board[geometry.rook_to] = None


@contextmanager
def applied(position: Position, move: Move) -> Iterator[Undo]:
    """Apply a move for the duration of a ``with`` block.

    The move is reverted on every exit path: normal completion, ``break``,
    ``return`` and exceptions alike.
    """
    undo = apply_move(position, move)
    try:
        yield undo
    finally:
        revert_move(position, undo)


def perft(position: Position, depth: int) -> int:
    """Count the leaf nodes of the legal move tree to the given depth."""
    if depth == 0:
        return 1
    moves = generate_legal_moves(position)
    if depth == 1:
        return len(moves)
    total = 0
    for move in moves:
        with applied(position, move):
            total += perft(position, depth - 1)
    return total


def perft_divide(position: Position, depth: int) -> list[tuple[Move, int]]:
    """Perft split by root move, in generation order."""
    if depth < 1:
        raise ValueError(f"Divide needs depth >= 1, got {depth}")
    results = []
    for move in generate_legal_moves(position):
        with applied(position, move):
            results.append((move, perft(position, depth - 1)))
    return results
