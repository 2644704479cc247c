"""Engine configuration, loaded from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field

import yaml

from chessassist.game.state import PIECE_CHARS, PieceType

DEFAULT_DEPTH = 3


@dataclass
class EngineConfig:
    """Search and evaluation settings."""
    depth: int = DEFAULT_DEPTH
    max_depth: int = 6  # Upper bound on requested depths; depth is the only latency control
    piece_values: dict[str, int] = field(default_factory=dict)  # Overrides keyed by "P", "N", ...

    def __post_init__(self):
        for name in ("depth", "max_depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.depth > self.max_depth:
            raise ValueError(f"depth {self.depth} exceeds max_depth {self.max_depth}")
        for letter, value in self.piece_values.items():
            if letter not in PIECE_CHARS:
                raise ValueError(f"Unknown piece letter in piece_values: {letter!r}")
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Piece value for {letter} must be an integer, got {value!r}")

    def piece_type_values(self) -> dict[PieceType, int]:
        """Overrides keyed by PieceType, for the evaluator."""
        return {PIECE_CHARS[letter]: value for letter, value in self.piece_values.items()}

    @classmethod
    def from_dict(cls, data: dict | None) -> EngineConfig:
        """Build from a config mapping; missing keys keep their defaults."""
        data = data or {}
        known = {"depth", "max_depth", "piece_values"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown engine config keys: {sorted(unknown)}")
        return cls(**data)


def load_config(path: str) -> EngineConfig:
    """Load an EngineConfig from a YAML file.

    The file may hold the settings under a top-level ``engine:`` key
    (shared with server settings) or as a flat mapping.
    """
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if "engine" in raw:
        raw = raw["engine"] or {}
    return EngineConfig.from_dict(raw)
