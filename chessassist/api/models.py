"""Pydantic models for engine API request/response schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    """Analyze a position given as FEN or as scanned piece markers."""
    fen: Optional[str] = Field(None, description="Position in FEN")
    pieces: Optional[dict[str, str]] = Field(
        None, description="Square -> piece code, e.g. {\"e1\": \"K\", \"e8\": \"bk\"}",
    )
    moves: list[str] = Field(default_factory=list, description="Moves played so far, oldest first")
    depth: Optional[int] = Field(None, ge=1, description="Search depth (default from config)")


class PositionRequest(BaseModel):
    """A position in FEN."""
    fen: str = Field(..., min_length=1)


class ApplyMoveRequest(BaseModel):
    """Play a coordinate move in a position."""
    fen: str = Field(..., min_length=1)
    move: str = Field(..., min_length=4, description="Coordinate move, e.g. e2e4 or e7e8=Q")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class AnalyzeResponse(BaseModel):
    best_move: Optional[str]
    evaluation: float = Field(..., description="Pawn units, positive = White better")
    depth: int
    fen: str


class LegalMovesResponse(BaseModel):
    fen: str
    moves: list[str]
    in_check: bool


class ApplyMoveResponse(BaseModel):
    fen: str
    move: str
