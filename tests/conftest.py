"""Shared test fixtures."""

import pytest

from chessassist.game.board import STARTING_FEN
from chessassist.game.notation import parse_fen


@pytest.fixture
def start_position():
    """Fresh standard starting position."""
    return parse_fen(STARTING_FEN)


@pytest.fixture
def kiwipete():
    """Move-generator torture position with castling, pins and en-passant chances."""
    return parse_fen("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")
