"""Engine entry point: position text in, best move and evaluation out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from chessassist.engine.config import DEFAULT_DEPTH, EngineConfig
from chessassist.engine.evaluator import Evaluator
from chessassist.engine.search import SearchEngine, mate_in_moves
from chessassist.game.notation import PositionFormatError, move_to_coordinate, parse_fen, to_fen
from chessassist.game.rules import is_in_check
from chessassist.game.state import Color, Move, PieceType, Piece, Position

logger = logging.getLogger("chessassist.engine")


@dataclass
class AnalysisResult:
    """Best move and evaluation for one position."""
    best_move: Optional[str]  # Coordinate notation, None when no legal move exists
    evaluation: float  # Pawn units, positive = White better
    depth: int
    move: Optional[Move] = None
    mate_in: Optional[int] = None  # Signed moves to mate, see search.mate_in_moves

    def to_dict(self) -> dict:
        return {
            "best_move": self.best_move,
            "evaluation": self.evaluation,
            "depth": self.depth,
        }


def validate_position(position: Position) -> None:
    """Reject positions the search cannot handle.

    Raises:
        PositionFormatError: Unless each color has exactly one king and the
            side not to move is out of check.
    """
    for color in Color:
        king = Piece(PieceType.KING, color)
        count = sum(1 for piece in position.board if piece == king)
        if count != 1:
            raise PositionFormatError(
                f"Expected exactly one {color.name.lower()} king, found {count}"
            )
    waiting = position.side_to_move.opponent
    if is_in_check(position, waiting):
        raise PositionFormatError(f"{waiting.name.capitalize()} is in check but not to move")


class ChessEngine:
    """Analyzes positions with a fixed-depth alpha-beta search.

    Holds configuration only; every analysis runs on a private clone of the
    position, so one engine can serve any number of callers.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.evaluator = Evaluator(self.config.piece_type_values())

    def _resolve_depth(self, depth: Optional[int]) -> int:
        if depth is None:
            return self.config.depth
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
            raise ValueError(f"Depth must be a positive integer, got {depth!r}")
        if depth > self.config.max_depth:
            raise ValueError(f"Depth {depth} exceeds the configured maximum {self.config.max_depth}")
        return depth

    def analyze(self, position_text: str, depth: Optional[int] = None) -> AnalysisResult:
        """Parse FEN text and analyze it.

        Raises:
            PositionFormatError: If the text is malformed.
            ValueError: If the depth is not a positive integer within max_depth.
        """
        return self.analyze_board(parse_fen(position_text), depth)

    def analyze_board(self, position: Position, depth: Optional[int] = None) -> AnalysisResult:
        """Analyze a parsed position; the caller's position is never mutated."""
        depth = self._resolve_depth(depth)
        validate_position(position)

        # Search gets its own copy
        search_position = position.clone()
        result = SearchEngine(self.evaluator).search(search_position, depth)

        best = move_to_coordinate(result.best_move) if result.best_move else None
        analysis = AnalysisResult(
            best_move=best,
            evaluation=result.score / 100,
            depth=depth,
            move=result.best_move,
            mate_in=mate_in_moves(result.score),
        )
        logger.info(
            f"Analyzed {to_fen(position)} at depth {depth}: "
            f"best {best or 'none'} eval {analysis.evaluation:+.2f} ({result.nodes} nodes)"
        )
        return analysis


def analyze_position(position_text: str, depth: int = DEFAULT_DEPTH) -> AnalysisResult:
    """One-shot analysis with a fresh default engine.

    The default max_depth still applies; deeper requests raise ValueError.
    """
    return ChessEngine(EngineConfig(depth=depth)).analyze(position_text)


class EvaluationTracker:
    """Flags large evaluation swings between successive analyses.

    A swing above ``threshold`` pawns signals that the last move was likely
    a blunder by one side.
    """

    def __init__(self, threshold: float = 1.5):
        self.threshold = threshold
        self.last_evaluation: Optional[float] = None

    def update(self, evaluation: float) -> bool:
        """Record an evaluation; return True when it swung past the threshold."""
        swung = (self.last_evaluation is not None
                 and abs(evaluation - self.last_evaluation) > self.threshold)
        self.last_evaluation = evaluation
        return swung

    def reset(self):
        self.last_evaluation = None
