"""Text formats exchanged with the match server: move strings and board snapshots."""

from typing import Optional

import chess

from pusher_engine.core.board import BOARD_SIZE, Board, Move


def parse_square(text: str) -> Optional[tuple]:
    """'D6' -> (2, 3). Returns None for anything that is not a square name."""
    if len(text) != 2:
        return None
    try:
        square = chess.parse_square(text.lower())
    except ValueError:
        return None
    return BOARD_SIZE - 1 - chess.square_rank(square), chess.square_file(square)


def parse_move(text: str) -> Optional[Move]:
    """Parse 'D6-D5' or 'D6D5'. Malformed text yields None."""
    if not text or not text.strip():
        return None
    text = text.strip()
    if "-" in text:
        parts = text.split("-")
        if len(parts) != 2:
            return None
        origin, target = parts[0].strip(), parts[1].strip()
    elif len(text) == 4:
        origin, target = text[:2], text[2:]
    else:
        return None

    start = parse_square(origin)
    end = parse_square(target)
    if start is None or end is None:
        return None
    return Move(start[0], start[1], end[0], end[1])


def format_move(move: Move, compact: bool = False) -> str:
    return move.compact() if compact else str(move)


def parse_board(text: str, board: Optional[Board] = None) -> Board:
    """Load a whitespace-separated snapshot of up to 64 tags into ``board``.

    Cells beyond the end of the snapshot keep their previous values.
    """
    board = board if board is not None else Board()
    board.load_from_flat_list((text or "").split())
    return board


def format_board(board: Board) -> str:
    return " ".join(str(tag) for tag in board.to_flat_list())
