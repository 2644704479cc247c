"""REST API: position analysis, legal moves, and move application over HTTP."""

from chessassist.api.dependencies import init_app
from chessassist.api.server import app

__all__ = [
    "app",
    "init_app",
]
