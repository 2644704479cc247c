"""FastAPI server for the analysis engine."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request

from chessassist.api.dependencies import get_engine
from chessassist.api.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ApplyMoveRequest,
    ApplyMoveResponse,
    LegalMovesResponse,
    PositionRequest,
)
from chessassist.engine.analyzer import validate_position
from chessassist.game.notation import (
    coordinate_to_move, move_to_coordinate, parse_fen, to_fen,
)
from chessassist.game.reconstruct import build_position_text
from chessassist.game.rules import apply_move, generate_legal_moves, is_in_check

app = FastAPI(
    title="chessassist API",
    description="Best-move analysis for chess positions",
    version="0.1.0",
)


def _parse(fen: str):
    """Parse and validate FEN or raise 400."""
    try:
        position = parse_fen(fen)
        validate_position(position)
        return position
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(body: AnalyzeRequest, request: Request):
    """Find the best move for a position."""
    if body.fen is None and body.pieces is None:
        raise HTTPException(status_code=422, detail="Either 'fen' or 'pieces' is required")

    if body.pieces is not None:
        try:
            fen = build_position_text(body.pieces, body.moves, exposed_fen=body.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    else:
        fen = body.fen

    position = _parse(fen)
    engine = get_engine(request.app)
    try:
        result = engine.analyze_board(position, body.depth)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AnalyzeResponse(
        best_move=result.best_move,
        evaluation=result.evaluation,
        depth=result.depth,
        fen=to_fen(position),
    )


@app.post("/legal-moves", response_model=LegalMovesResponse)
def legal_moves(body: PositionRequest):
    """List the legal moves of a position in coordinate notation."""
    position = _parse(body.fen)
    moves = generate_legal_moves(position)
    in_check = is_in_check(position, position.side_to_move)

    return LegalMovesResponse(
        fen=to_fen(position),
        moves=[move_to_coordinate(m) for m in moves],
        in_check=in_check,
    )


@app.post("/apply", response_model=ApplyMoveResponse)
def apply(body: ApplyMoveRequest):
    """Play a move and return the resulting position."""
    position = _parse(body.fen)
    try:
        move = coordinate_to_move(position, body.move)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    apply_move(position, move)
    return ApplyMoveResponse(fen=to_fen(position), move=move_to_coordinate(move))
