"""Position representation: pieces, castling rights, moves and undo records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, IntFlag
from typing import Iterator, Optional

from chessassist.game.board import NUM_SQUARES, square_file, square_index, square_rank


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> Color:
        return Color(1 - self)


class PieceType(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5


# Map FEN letters (white, upper case) to PieceType
PIECE_CHARS = {
    "P": PieceType.PAWN,
    "N": PieceType.KNIGHT,
    "B": PieceType.BISHOP,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "K": PieceType.KING,
}
PIECE_NAMES = {v: k for k, v in PIECE_CHARS.items()}

# Promotion choices, in generation order
PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


class CastlingRights(IntFlag):
    NONE = 0
    WHITE_KINGSIDE = 1
    WHITE_QUEENSIDE = 2
    BLACK_KINGSIDE = 4
    BLACK_QUEENSIDE = 8
    ALL = 15


# FEN castling letters, in canonical output order
CASTLING_CHARS = {
    "K": CastlingRights.WHITE_KINGSIDE,
    "Q": CastlingRights.WHITE_QUEENSIDE,
    "k": CastlingRights.BLACK_KINGSIDE,
    "q": CastlingRights.BLACK_QUEENSIDE,
}


class CastleSide(Enum):
    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"


@dataclass(frozen=True)
class Piece:
    piece_type: PieceType
    color: Color

    @property
    def char(self) -> str:
        """FEN letter: upper case for White, lower case for Black."""
        letter = PIECE_NAMES[self.piece_type]
        return letter if self.color == Color.WHITE else letter.lower()

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Build a piece from its FEN letter.

        Raises:
            ValueError: If the letter is not a piece.
        """
        piece_type = PIECE_CHARS.get(char.upper())
        if piece_type is None or len(char) != 1:
            raise ValueError(f"Unknown piece letter: {char!r}")
        return cls(piece_type, Color.WHITE if char.isupper() else Color.BLACK)


# Move types
@dataclass(frozen=True)
class Move:
    """Move a piece from one square to another, capturing whatever stood there."""
    from_sq: int
    to_sq: int
    piece: Piece
    captured: Optional[Piece] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None


@dataclass(frozen=True)
class DoublePush(Move):
    """Pawn advance of two squares from its start rank."""


@dataclass(frozen=True)
class EnPassant(Move):
    """Pawn capture onto the en-passant target square."""

    @property
    def capture_square(self) -> int:
        """Square of the captured pawn: destination file, origin rank."""
        return square_index(square_file(self.to_sq), square_rank(self.from_sq))


@dataclass(frozen=True)
class Castle(Move):
    """King move of two squares; the rook is relocated alongside."""
    side: CastleSide = field(kw_only=True)


@dataclass(frozen=True)
class Promotion(Move):
    """Pawn push or capture onto the last rank, replaced by ``promotion``."""
    promotion: PieceType = field(kw_only=True)


@dataclass(frozen=True)
class Undo:
    """Everything needed to take back ``move`` exactly."""
    move: Move
    captured: Optional[Piece]
    castling: CastlingRights
    en_passant: Optional[int]
    halfmove_clock: int


_BACK_RANK = [
    PieceType.ROOK, PieceType.KNIGHT, PieceType.BISHOP, PieceType.QUEEN,
    PieceType.KING, PieceType.BISHOP, PieceType.KNIGHT, PieceType.ROOK,
]


class Position:
    """Complete chess position.

    During search a single instance is mutated in place by ``apply_move`` and
    restored by ``revert_move``; everywhere else treat it as a value and
    ``clone()`` before handing it to code that mutates.
    """

    def __init__(self):
        self.board: list[Optional[Piece]] = [None] * NUM_SQUARES
        self.side_to_move: Color = Color.WHITE
        self.castling: CastlingRights = CastlingRights.ALL
        self.en_passant: Optional[int] = None
        self.halfmove_clock: int = 0
        self.fullmove_number: int = 1
        self._setup_starting_position()

    def _setup_starting_position(self):
        """Place pieces in their starting squares."""
        for file, piece_type in enumerate(_BACK_RANK):
            self.board[square_index(file, 0)] = Piece(piece_type, Color.WHITE)
            self.board[square_index(file, 1)] = Piece(PieceType.PAWN, Color.WHITE)
            self.board[square_index(file, 6)] = Piece(PieceType.PAWN, Color.BLACK)
            self.board[square_index(file, 7)] = Piece(piece_type, Color.BLACK)

    @classmethod
    def empty(cls) -> Position:
        """Position with no pieces, White to move and no castling rights."""
        position = cls.__new__(cls)
        position.board = [None] * NUM_SQUARES
        position.side_to_move = Color.WHITE
        position.castling = CastlingRights.NONE
        position.en_passant = None
        position.halfmove_clock = 0
        position.fullmove_number = 1
        return position

    def clone(self) -> Position:
        """Return an independent copy of this position."""
        new = Position.__new__(Position)
        new.board = self.board.copy()  # Pieces are immutable
        new.side_to_move = self.side_to_move
        new.castling = self.castling
        new.en_passant = self.en_passant
        new.halfmove_clock = self.halfmove_clock
        new.fullmove_number = self.fullmove_number
        return new

    def piece_at(self, square: int) -> Optional[Piece]:
        return self.board[square]

    def pieces(self, color: Optional[Color] = None) -> Iterator[tuple[int, Piece]]:
        """Yield (square, piece) pairs in square order, optionally for one color."""
        for square, piece in enumerate(self.board):
            if piece is not None and (color is None or piece.color == color):
                yield square, piece

    def king_square(self, color: Color) -> Optional[int]:
        """Find the king's square for a color, or None if it is missing."""
        king = Piece(PieceType.KING, color)
        for square, piece in enumerate(self.board):
            if piece == king:
                return square
        return None

    def key(self) -> tuple:
        """Hashable snapshot of every field; equal keys mean equal positions."""
        return (tuple(self.board), self.side_to_move, self.castling,
                self.en_passant, self.halfmove_clock, self.fullmove_number)

    def __eq__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        return self.key() == other.key()

    __hash__ = None

    def to_display_board(self) -> list[Optional[str]]:
        """Convert to the letter list expected by render_board."""
        return [None if piece is None else piece.char for piece in self.board]
