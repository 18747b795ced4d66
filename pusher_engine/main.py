from dataclasses import replace
from typing import Optional

from pusher_engine.config import CONFIG
from pusher_engine.core.board import Board, Side
from pusher_engine.core.evaluator import Evaluator
from pusher_engine.core.movegen import generate
from pusher_engine.core.notation import format_board, format_move, parse_board, parse_move
from pusher_engine.core.search import SearchEngine


class Engine:
    """One game: the board the engine tracks plus the search that plays on it."""

    def __init__(self, time_limit_ms: Optional[int] = None, max_depth: Optional[int] = None):
        self.board = Board()
        config = replace(CONFIG.search)
        if time_limit_ms is not None:
            config.time_limit_ms = time_limit_ms
        if max_depth is not None:
            config.max_depth = max_depth
        self.search = SearchEngine(Evaluator(), config)

    def reset(self):
        self.board.initialize()

    def load_board(self, snapshot: str, side_to_move: Optional[Side] = None):
        parse_board(snapshot, self.board)
        if side_to_move is not None:
            self.board.side_to_move = side_to_move

    def get_board(self) -> str:
        return format_board(self.board)

    def get_best_move(self, side: Optional[Side] = None) -> Optional[str]:
        """Searched move for ``side`` (default: side to move); None when it has no legal move."""
        side = side or self.board.side_to_move
        move = self.search.find_best_move(self.board, side)
        return format_move(move) if move is not None else None

    def make_move(self, move_str: str, side: Optional[Side] = None) -> bool:
        """Apply a move given as text. Returns False if malformed or illegal."""
        move = parse_move(move_str)
        if move is None:
            return False
        previous = self.board.side_to_move
        if side is not None:
            self.board.side_to_move = side
        if not self.board.is_legal(move):
            self.board.side_to_move = previous
            return False
        return self.board.apply(move)

    def legal_moves(self, side: Optional[Side] = None):
        return [format_move(m) for m in generate(side or self.board.side_to_move, self.board)]

    def is_game_over(self) -> bool:
        return self.board.is_terminal()

    def print_board(self):
        print(self.board.render())
