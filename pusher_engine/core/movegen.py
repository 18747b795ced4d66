"""Legal move generation for one side of a pusher position."""

from typing import List, Set, Tuple

from pusher_engine.core.board import Board, Move, Piece, Side


def generate(side: Side, board: Board) -> List[Move]:
    """Every legal move for ``side``, whatever ``board.side_to_move`` says.

    Pushers step forward onto an empty square or diagonally onto an empty or
    enemy square. A pushed piece moves along a vector only when a friendly
    pusher stands right behind it on that same vector.
    """
    moves = []
    for row, col, piece in board.cells():
        if piece.side is not side:
            continue
        for dr, dc in side.directions:
            if board.can_step(row, col, dr, dc):
                moves.append(Move(row, col, row + dr, col + dc))
    return moves


def is_capture(board: Board, move: Move) -> bool:
    target = board.piece_at(move.to_row, move.to_col)
    return target is not None and target is not Piece.EMPTY


def threatened_squares(side: Side, board: Board) -> Set[Tuple[int, int]]:
    """Enemy-held squares that ``side`` could capture on its next move."""
    return {
        (move.to_row, move.to_col)
        for move in generate(side, board)
        if is_capture(board, move)
    }


def winning_moves(side: Side, board: Board) -> List[Move]:
    """Moves that end the game in ``side``'s favour immediately."""
    winners = []
    for move in generate(side, board):
        child = board.clone()
        child.side_to_move = side
        if child.apply(move) and child.winner() is side:
            winners.append(move)
    return winners
