"""Static evaluator for pusher positions, tunable through EvalConfig."""

from typing import Optional

from pusher_engine.config import CONFIG, EvalConfig
from pusher_engine.core.board import BOARD_SIZE, Board, Piece, Side
from pusher_engine.core.movegen import threatened_squares


class Evaluator:
    def __init__(self, config: Optional[EvalConfig] = None):
        self.cfg = config or CONFIG.eval

    def evaluate(self, board: Board, side: Side) -> int:
        """Return a score >= 1; higher is better for ``side``."""
        cfg = self.cfg
        if board.is_empty():
            return cfg.neutral_score

        winner = board.winner()
        if winner is side.opponent:
            return cfg.loss_score

        enemy = side.opponent
        score = cfg.base_score

        # Material and placement.
        for row, col, piece in board.cells():
            value = cfg.pusher_value if piece.is_pusher else cfg.pushed_value
            positional = self._place_value(row, col, piece.side) + self._advancement(row, piece.side)
            if piece.side is side:
                score += value + positional + cfg.center_file_bonus[col]
            else:
                score -= value + positional

        # Count advantages.
        my_pushers, en_pushers = board.pusher_count(side), board.pusher_count(enemy)
        my_total = my_pushers + board.pushed_count(side)
        en_total = en_pushers + board.pushed_count(enemy)
        score += (my_pushers - en_pushers) * cfg.pusher_advantage_bonus
        score += (my_total - en_total) * cfg.material_advantage_bonus

        score += self._eval_shields(board, side)
        score -= self._eval_exposure(board, side)

        score = max(1, score)
        if winner is side:
            return cfg.win_score + score
        return score

    def _place_value(self, row: int, col: int, side: Side) -> int:
        """Tables are written from RED's side; BLACK reads them flipped."""
        table_row = row if side is Side.RED else BOARD_SIZE - 1 - row
        return self.cfg.place_values[table_row][col]

    def _advancement(self, row: int, side: Side) -> int:
        advanced = row if side is Side.BLACK else BOARD_SIZE - 1 - row
        return advanced * self.cfg.advancement_bonus

    def _eval_shields(self, board: Board, side: Side) -> int:
        """Reward pushed pieces backed by a pusher with an open square ahead."""
        score = 0
        pusher = Piece.pusher_of(side)
        for row, col, piece in board.cells():
            if piece is not Piece.pushed_of(side):
                continue
            for dr, dc in side.directions:
                if board.piece_at(row - dr, col - dc) is not pusher:
                    continue
                if board.piece_at(row + dr, col + dc) is Piece.EMPTY:
                    score += self.cfg.shield_bonus
        return score

    def _eval_exposure(self, board: Board, side: Side) -> int:
        """Penalty for own pieces the opponent could capture next move."""
        penalty = 0
        for row, col in threatened_squares(side.opponent, board):
            piece = board.grid[row][col]
            if piece.is_pusher:
                penalty += self.cfg.exposed_pusher_penalty
            else:
                penalty += self.cfg.exposed_pushed_penalty
        return penalty
