"""chessassist: chess rules, FEN codec, and a fixed-depth alpha-beta engine."""

__version__ = "0.1.0"
