"""Tests for evaluation, alpha-beta search, the analyzer and engine configuration."""

import logging

import pytest

from chessassist.engine.analyzer import (
    ChessEngine, EvaluationTracker, analyze_position, validate_position,
)
from chessassist.engine.config import EngineConfig, load_config
from chessassist.engine.evaluator import Evaluator, evaluate, positional_bonus
from chessassist.engine.search import (
    INF, MATE_SCORE, SearchEngine, is_mate_score, mate_in_moves,
)
from chessassist.game.board import STARTING_FEN, parse_square
from chessassist.game.notation import PositionFormatError, move_to_coordinate, parse_fen, to_fen
from chessassist.game.rules import applied, apply_move, generate_legal_moves, is_in_check
from chessassist.game.state import Color, Piece, PieceType

STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
MATED_FEN = "R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1"
MATE_IN_ONE_FEN = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
BLACK_MATE_IN_ONE_FEN = "r5k1/8/8/8/8/8/5PPP/6K1 b - - 0 1"
MATE_IN_TWO_FEN = "7k/8/8/8/8/8/R7/1R4K1 w - - 0 1"
FAST_AND_SLOW_MATE_FEN = "6k1/5ppp/8/8/8/8/1R6/R5K1 w - - 0 1"
PROMOTION_FEN = "8/P7/8/8/8/8/8/k1K5 w - - 0 1"


def plain_minimax(position, depth, ply=0):
    """Unpruned reference search with the same scoring rules."""
    if depth == 0:
        return evaluate(position)
    moves = generate_legal_moves(position)
    white = position.side_to_move == Color.WHITE
    if not moves:
        if is_in_check(position, position.side_to_move):
            mate = MATE_SCORE - ply
            return -mate if white else mate
        return 0
    scores = []
    for move in moves:
        with applied(position, move):
            scores.append(plain_minimax(position, depth - 1, ply + 1))
    return max(scores) if white else min(scores)


class ExplodingEvaluator(Evaluator):
    """Evaluator that fails after a fixed number of calls."""

    def __init__(self, limit):
        super().__init__()
        self.limit = limit
        self.calls = 0

    def evaluate(self, position):
        self.calls += 1
        if self.calls > self.limit:
            raise RuntimeError("evaluation failed")
        return super().evaluate(position)


class TestEvaluator:
    def test_start_is_balanced(self, start_position):
        assert evaluate(start_position) == 0

    def test_pawn_advance(self, start_position):
        apply_move(start_position, next(
            m for m in generate_legal_moves(start_position) if move_to_coordinate(m) == "e2e4"
        ))
        assert evaluate(start_position) == 4

    def test_central_knight(self):
        assert evaluate(parse_fen("4k3/8/8/8/4N3/8/8/4K3 w - - 0 1")) == 330

    def test_bishop_square_colour(self):
        assert evaluate(parse_fen("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1")) == 331
        assert evaluate(parse_fen("4k3/8/8/8/8/8/8/3BK3 w - - 0 1")) == 330

    def test_black_pawn_is_negative(self):
        assert evaluate(parse_fen("4k3/8/8/4p3/8/8/8/4K3 w - - 0 1")) == -108

    def test_positional_bonus(self):
        white_pawn = Piece(PieceType.PAWN, Color.WHITE)
        black_pawn = Piece(PieceType.PAWN, Color.BLACK)
        assert positional_bonus(white_pawn, parse_square("a7")) == 12
        assert positional_bonus(black_pawn, parse_square("d2")) == 14
        assert positional_bonus(Piece(PieceType.KNIGHT, Color.BLACK), parse_square("b5")) == 0
        assert positional_bonus(Piece(PieceType.ROOK, Color.WHITE), parse_square("e4")) == 0

    def test_piece_value_overrides(self):
        evaluator = Evaluator({PieceType.KNIGHT: 300})
        assert evaluator.evaluate(parse_fen("4k3/8/8/8/4N3/8/8/4K3 w - - 0 1")) == 310

    def test_evaluate_is_pure(self, kiwipete):
        before = kiwipete.clone()
        assert evaluate(kiwipete) == evaluate(kiwipete)
        assert kiwipete == before


class TestSearch:
    def test_depth_zero_is_static(self, kiwipete):
        result = SearchEngine().search(kiwipete, 0)
        assert result.score == evaluate(kiwipete)
        assert result.best_move is None
        assert result.nodes == 1

    def test_depth_one_start(self, start_position):
        result = SearchEngine().search(start_position, 1)
        assert move_to_coordinate(result.best_move) == "b1c3"
        assert result.score == 10
        assert result.nodes == 21

    def test_negative_depth(self, start_position):
        with pytest.raises(ValueError):
            SearchEngine().search(start_position, -1)

    @pytest.mark.parametrize("depth", [1, 2, 3])
    def test_stalemate_scores_zero(self, depth):
        result = SearchEngine().search(parse_fen(STALEMATE_FEN), depth)
        assert result.score == 0
        assert result.best_move is None

    @pytest.mark.parametrize("depth", [1, 2])
    def test_already_mated(self, depth):
        result = SearchEngine().search(parse_fen(MATED_FEN), depth)
        assert result.score == MATE_SCORE
        assert result.best_move is None

    @pytest.mark.parametrize("depth", [2, 3])
    def test_white_mate_in_one(self, depth):
        result = SearchEngine().search(parse_fen(MATE_IN_ONE_FEN), depth)
        assert move_to_coordinate(result.best_move) == "a1a8"
        assert result.score == MATE_SCORE - 1
        assert is_mate_score(result.score)

    @pytest.mark.parametrize("depth", [2, 3])
    def test_black_mate_in_one(self, depth):
        result = SearchEngine().search(parse_fen(BLACK_MATE_IN_ONE_FEN), depth)
        assert move_to_coordinate(result.best_move) == "a8a1"
        assert result.score == -(MATE_SCORE - 1)

    def test_mate_outranks_material(self):
        """White can win a knight or mate; the mate wins."""
        position = parse_fen("6k1/5ppp/8/8/8/2n5/8/R3B1K1 w - - 0 1")
        result = SearchEngine().search(position, 2)
        assert move_to_coordinate(result.best_move) == "a1a8"

    def test_mate_in_two_score(self):
        """Rook ladder: two moves to mate, scored by distance from the root."""
        result = SearchEngine().search(parse_fen(MATE_IN_TWO_FEN), 4)
        assert result.score == MATE_SCORE - 3
        assert mate_in_moves(result.score) == 2

    @pytest.mark.parametrize("depth", [3, 4])
    def test_faster_mate_preferred(self, depth):
        """Both a mate in one and slower mates exist; the mate in one is played."""
        position = parse_fen(FAST_AND_SLOW_MATE_FEN)
        result = SearchEngine().search(position, depth)
        assert result.score == MATE_SCORE - 1
        assert move_to_coordinate(result.best_move) in {"a1a8", "b2b8"}
        with applied(position, result.best_move):
            assert generate_legal_moves(position) == []
            assert is_in_check(position, Color.BLACK)

    def test_mate_in_moves(self):
        assert mate_in_moves(MATE_SCORE) == 0
        assert mate_in_moves(MATE_SCORE - 1) == 1
        assert mate_in_moves(-(MATE_SCORE - 3)) == -2
        assert mate_in_moves(150) is None

    def test_position_restored(self, kiwipete):
        before = kiwipete.clone()
        SearchEngine().search(kiwipete, 2)
        assert kiwipete == before

    def test_position_restored_after_error(self, kiwipete):
        before = kiwipete.clone()
        with pytest.raises(RuntimeError):
            SearchEngine(ExplodingEvaluator(limit=50)).search(kiwipete, 3)
        assert kiwipete == before

    @pytest.mark.parametrize("fen, depth", [
        (STARTING_FEN, 3),
        ("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", 3),
        ("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1", 2),
        (MATE_IN_ONE_FEN, 3),
        (BLACK_MATE_IN_ONE_FEN, 3),
    ])
    def test_pruning_matches_plain_minimax(self, fen, depth):
        position = parse_fen(fen)
        expected = plain_minimax(position.clone(), depth)
        assert SearchEngine().search(position, depth).score == expected

    def test_full_window_is_default(self, start_position):
        explicit = SearchEngine().search(start_position, 1, alpha=-INF, beta=INF)
        assert explicit.score == SearchEngine().search(start_position, 1).score


class TestAnalyzer:
    def test_start_position(self):
        result = analyze_position(STARTING_FEN, depth=1)
        assert result.best_move == "b1c3"
        assert result.evaluation == 0.1
        assert result.depth == 1
        assert result.to_dict() == {"best_move": "b1c3", "evaluation": 0.1, "depth": 1}

    def test_promotion(self):
        result = ChessEngine().analyze(PROMOTION_FEN, depth=1)
        assert result.best_move == "a7a8=Q"
        assert result.evaluation == 9.0

    def test_mate_in_one(self):
        result = ChessEngine().analyze(MATE_IN_ONE_FEN, depth=2)
        assert result.best_move == "a1a8"
        assert result.evaluation == (MATE_SCORE - 1) / 100

    def test_no_legal_moves(self):
        result = ChessEngine().analyze(STALEMATE_FEN, depth=2)
        assert result.best_move is None
        assert result.evaluation == 0
        assert result.mate_in is None

    @pytest.mark.parametrize("fen, depth, mate_in", [
        (MATE_IN_ONE_FEN, 2, 1),
        (BLACK_MATE_IN_ONE_FEN, 2, -1),
        (MATE_IN_TWO_FEN, 4, 2),
        (MATED_FEN, 1, 0),
        (STARTING_FEN, 1, None),
    ])
    def test_mate_distance(self, fen, depth, mate_in):
        assert ChessEngine().analyze(fen, depth=depth).mate_in == mate_in

    def test_analyze_position_keeps_depth_cap(self):
        with pytest.raises(ValueError):
            analyze_position(STARTING_FEN, depth=7)

    def test_uses_configured_depth(self):
        engine = ChessEngine(EngineConfig(depth=1))
        assert engine.analyze(STARTING_FEN).depth == 1

    def test_input_not_mutated(self, kiwipete):
        before = kiwipete.clone()
        ChessEngine().analyze_board(kiwipete, depth=2)
        assert kiwipete == before
        assert to_fen(kiwipete) == to_fen(before)

    @pytest.mark.parametrize("depth", [0, -1, 7, True, 2.5])
    def test_invalid_depth(self, depth):
        with pytest.raises(ValueError):
            ChessEngine().analyze(STARTING_FEN, depth=depth)

    def test_malformed_position(self):
        with pytest.raises(PositionFormatError):
            ChessEngine().analyze("rnbqkbnr/pppppppp/8/8 w KQkq - 0 1", depth=1)

    def test_missing_king(self):
        with pytest.raises(PositionFormatError):
            ChessEngine().analyze("8/8/8/8/8/8/8/4K3 w - - 0 1", depth=1)

    def test_two_kings(self):
        with pytest.raises(PositionFormatError):
            validate_position(parse_fen("4k3/8/8/8/8/8/8/K3K3 w - - 0 1"))

    def test_side_not_to_move_in_check(self):
        with pytest.raises(PositionFormatError):
            validate_position(parse_fen("4k3/8/8/8/8/8/8/r3K3 b - - 0 1"))

    def test_logs_result(self, caplog):
        with caplog.at_level(logging.INFO, logger="chessassist.engine"):
            analyze_position(STARTING_FEN, depth=1)
        assert "b1c3" in caplog.text


class TestEvaluationTracker:
    def test_first_update_never_swings(self):
        tracker = EvaluationTracker()
        assert tracker.update(5.0) is False

    def test_swing_detection(self):
        tracker = EvaluationTracker(threshold=1.5)
        tracker.update(0.2)
        assert tracker.update(2.0) is True
        assert tracker.update(2.5) is False
        assert tracker.update(-0.5) is True

    def test_reset(self):
        tracker = EvaluationTracker()
        tracker.update(0.0)
        tracker.reset()
        assert tracker.last_evaluation is None
        assert tracker.update(10.0) is False


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.depth == 3
        assert config.max_depth == 6
        assert config.piece_values == {}

    def test_from_dict(self):
        config = EngineConfig.from_dict({"depth": 2, "piece_values": {"N": 300}})
        assert config.depth == 2
        assert config.max_depth == 6
        assert config.piece_type_values() == {PieceType.KNIGHT: 300}

    def test_from_none(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    @pytest.mark.parametrize("data", [
        {"depth": 0},
        {"depth": 7},
        {"depth": 2, "max_depth": 1},
        {"max_depth": "deep"},
        {"piece_values": {"X": 100}},
        {"piece_values": {"N": "many"}},
        {"width": 3},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            EngineConfig.from_dict(data)

    def test_engine_uses_piece_values(self):
        engine = ChessEngine(EngineConfig(piece_values={"N": 300}))
        assert engine.evaluator.evaluate(parse_fen("4k3/8/8/8/4N3/8/8/4K3 w - - 0 1")) == 310

    def test_load_sectioned_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("engine:\n  depth: 2\n  max_depth: 4\n  piece_values:\n    N: 300\n")
        config = load_config(str(path))
        assert config.depth == 2
        assert config.max_depth == 4
        assert config.piece_values == {"N": 300}

    def test_load_flat_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("depth: 1\n")
        assert load_config(str(path)).depth == 1

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("")
        assert load_config(str(path)) == EngineConfig()
