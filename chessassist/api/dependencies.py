"""FastAPI dependency setup."""

from __future__ import annotations

import logging

from chessassist.engine.analyzer import ChessEngine
from chessassist.engine.config import EngineConfig

logger = logging.getLogger("chessassist.api")


def init_app(app, config: dict) -> None:
    """Initialize the FastAPI app from a config mapping.

    Stores the EngineConfig on app.state; each request builds its own
    ChessEngine from it, so no search state is shared between requests.

    Args:
        app: FastAPI application instance.
        config: Configuration dict with an optional ``engine`` section
            (depth, max_depth, piece_values).
    """
    engine_config = EngineConfig.from_dict(config.get("engine"))
    app.state.engine_config = engine_config
    logger.info(
        f"Engine API initialized (default depth {engine_config.depth}, "
        f"max depth {engine_config.max_depth})"
    )


def get_engine(app) -> ChessEngine:
    """Build a fresh engine from the app's stored config."""
    config = getattr(app.state, "engine_config", None) or EngineConfig()
    return ChessEngine(config)
