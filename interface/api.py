"""FastAPI REST interface for the engine."""

import threading

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

from pusher_engine.config import CONFIG
from pusher_engine.core.board import Side
from pusher_engine.core.movegen import generate
from pusher_engine.core.notation import format_board, format_move, parse_move
from pusher_engine.main import Engine

app = FastAPI(title=CONFIG.ui.engine_name, version="1.0.0")

# Shared game across requests.
engine = Engine()
board = engine.board
_board_lock = threading.Lock()


class PositionRequest(BaseModel):
    board: str
    side_to_move: str = "red"


class MoveRequest(BaseModel):
    move: str  # e.g. "D2-D3" or "D2D3"


class SearchRequest(BaseModel):
    time_limit_ms: Optional[int] = None
    max_depth: Optional[int] = None


def _state():
    winner = board.winner()
    return {
        "board": format_board(board),
        "side_to_move": board.side_to_move.value,
        "legal_moves": [format_move(m) for m in generate(board.side_to_move, board)],
        "is_game_over": board.is_terminal(),
        "winner": winner.value if winner else None,
    }


@app.get("/board")
def get_board():
    with _board_lock:
        return _state()


@app.post("/position")
def set_position(req: PositionRequest):
    side = Side.parse(req.side_to_move)
    if side is None:
        raise HTTPException(status_code=400, detail=f"Unknown side: {req.side_to_move}")
    with _board_lock:
        engine.load_board(req.board, side)
        return _state()


@app.post("/move")
def make_move(req: MoveRequest):
    move = parse_move(req.move)
    if move is None:
        raise HTTPException(status_code=400, detail=f"Malformed move: {req.move}")
    with _board_lock:
        if not board.is_legal(move):
            raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
        board.apply(move)
        return {"board": format_board(board), "move": format_move(move)}


@app.post("/search")
def search_move(req: SearchRequest = SearchRequest()):
    with _board_lock:
        if board.is_terminal():
            raise HTTPException(status_code=400, detail="Game is already over")
        search_board = board.clone()

    side = search_board.side_to_move
    result = engine.search.search(search_board, side,
                                  time_limit_ms=req.time_limit_ms, max_depth=req.max_depth)
    return {
        "best_move": format_move(result.best_move) if result.best_move else None,
        "side": side.value,
        "score": result.score,
        "depth": result.depth,
        "nodes": result.nodes,
        "fast_path": result.fast_path,
        "timed_out": result.timed_out,
    }


@app.post("/reset")
def reset_board():
    with _board_lock:
        board.initialize()
        return {"board": format_board(board)}
