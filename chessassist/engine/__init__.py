"""Evaluation, alpha-beta search, and the analysis entry point."""

from chessassist.engine.analyzer import (
    AnalysisResult, ChessEngine, EvaluationTracker, analyze_position,
)
from chessassist.engine.config import EngineConfig, load_config
from chessassist.engine.evaluator import Evaluator, evaluate
from chessassist.engine.search import MATE_SCORE, SearchEngine, SearchResult, mate_in_moves

__all__ = [
    "AnalysisResult", "ChessEngine", "EvaluationTracker", "analyze_position",
    "EngineConfig", "load_config",
    "Evaluator", "evaluate",
    "MATE_SCORE", "SearchEngine", "SearchResult", "mate_in_moves",
]
