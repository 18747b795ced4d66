import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pusher_engine.config import CONFIG, SearchConfig
from pusher_engine.core.board import BOARD_SIZE, Board, Move, Side
from pusher_engine.core.evaluator import Evaluator
from pusher_engine.core.movegen import generate, is_capture, threatened_squares, winning_moves
from pusher_engine.core.utils import format_info

logger = logging.getLogger(__name__)

INF = 1_000_000_000
# Returned up the tree once the clock runs out; never trusted.
TIMEOUT_SCORE = 0


@dataclass
class SearchContext:
    """Mutable state of one search invocation."""
    side: Side
    deadline: float
    nodes: int = 0
    timed_out: bool = False

    def out_of_time(self) -> bool:
        if not self.timed_out and time.perf_counter() >= self.deadline:
            self.timed_out = True
        return self.timed_out


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int = 0
    depth: int = 0
    nodes: int = 0
    elapsed_ms: float = 0.0
    fast_path: bool = False
    timed_out: bool = False


class SearchEngine:
    """Iterative-deepening minimax with alpha-beta pruning under a wall-clock budget."""

    def __init__(self, evaluator: Optional[Evaluator] = None, config: Optional[SearchConfig] = None,
                 rng: Optional[random.Random] = None):
        self.evaluator = evaluator or Evaluator()
        self.config = config or CONFIG.search
        self.rng = rng or random.Random()

    def find_best_move(self, board: Board, side: Side) -> Optional[Move]:
        """Best move for ``side``; None only when ``side`` has no legal move."""
        return self.search(board, side).best_move

    def search(self, board: Board, side: Side, time_limit_ms: Optional[int] = None,
               max_depth: Optional[int] = None) -> SearchResult:
        start = time.perf_counter()
        limit_ms = self.config.time_limit_ms if time_limit_ms is None else time_limit_ms
        depth_limit = max_depth or self.config.max_depth
        ctx = SearchContext(side=side, deadline=start + limit_ms / 1000.0)

        # The caller's board is only read.
        root = board.clone()
        root.side_to_move = side

        moves = generate(side, root)
        if not moves:
            return SearchResult(None, elapsed_ms=self._elapsed_ms(start))
        if len(moves) == 1:
            return SearchResult(moves[0], elapsed_ms=self._elapsed_ms(start))

        moves = self.order_moves(root, moves)

        if self.config.use_fast_path:
            quick = self._fast_path(root, side, moves)
            if quick is not None:
                logger.debug("fast path: %s", quick)
                return SearchResult(quick, fast_path=True, elapsed_ms=self._elapsed_ms(start))

        best_move: Optional[Move] = None
        best_score = 0
        completed = 0

        # Iterative deepening
        for depth in range(1, depth_limit + 1):
            scored = self._search_root(root, moves, depth, ctx)
            if ctx.timed_out or not scored:
                break

            scored.sort(key=lambda item: item[1], reverse=True)
            best_move, best_score = scored[0]
            completed = depth
            # Next iteration tries the strongest moves first.
            moves = [m for m, _ in scored]

            elapsed = self._elapsed_ms(start)
            logger.debug(format_info(depth, best_score, ctx.nodes, elapsed, best_move,
                                     self.evaluator.cfg.win_score))
            if best_score >= self.evaluator.cfg.win_score:
                break

        if ctx.timed_out:
            logger.debug("search timed out after depth %d", completed)
        if best_move is None:
            best_move = moves[0]

        return SearchResult(
            best_move,
            score=best_score,
            depth=completed,
            nodes=ctx.nodes,
            elapsed_ms=self._elapsed_ms(start),
            timed_out=ctx.timed_out,
        )

    def _search_root(self, root: Board, moves: List[Move], depth: int,
                     ctx: SearchContext) -> List[Tuple[Move, int]]:
        scored = []
        jitter = self.config.randomize_ties
        best = -INF
        for move in moves:
            if ctx.out_of_time():
                return []
            child = root.clone()
            child.apply(move)
            # A move failing low here cannot beat ``best`` even with maximal jitter.
            alpha = best - jitter - 1 if best > -INF else -INF
            score = self._minimax(child, depth - 1, alpha, INF, False, ctx)
            if ctx.timed_out:
                return []
            if jitter:
                score += self.rng.randint(-jitter, jitter)
            best = max(best, score)
            scored.append((move, score))
        return scored

    def _minimax(self, board: Board, depth: int, alpha: int, beta: int, maximizing: bool,
                 ctx: SearchContext) -> int:
        ctx.nodes += 1
        if ctx.out_of_time():
            return TIMEOUT_SCORE

        if board.is_terminal():
            score = self.evaluator.evaluate(board, ctx.side)
            if board.winner() is ctx.side:
                # Sooner wins are worth more.
                score += depth
            return score
        if depth <= 0:
            return self.evaluator.evaluate(board, ctx.side)

        moves = generate(board.side_to_move, board)
        if not moves:
            return self.evaluator.evaluate(board, ctx.side)
        moves = self.order_moves(board, moves)

        if maximizing:
            value = -INF
            for move in moves:
                child = board.clone()
                child.apply(move)
                score = self._minimax(child, depth - 1, alpha, beta, False, ctx)
                if ctx.timed_out:
                    return TIMEOUT_SCORE
                value = max(value, score)
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return value
        else:
            value = INF
            for move in moves:
                child = board.clone()
                child.apply(move)
                score = self._minimax(child, depth - 1, alpha, beta, True, ctx)
                if ctx.timed_out:
                    return TIMEOUT_SCORE
                value = min(value, score)
                beta = min(beta, value)
                if beta <= alpha:
                    break
            return value

    def _fast_path(self, board: Board, side: Side, moves: List[Move]) -> Optional[Move]:
        """An immediate win, or a capture the opponent cannot punish next move."""
        wins = winning_moves(side, board)
        if wins:
            return wins[0]

        for move in moves:
            if not is_capture(board, move):
                continue
            child = board.clone()
            child.apply(move)
            if (move.to_row, move.to_col) in threatened_squares(side.opponent, child):
                continue
            if winning_moves(side.opponent, child):
                continue
            return move
        return None

    def order_moves(self, board: Board, moves: List[Move]) -> List[Move]:
        scores = [self._score_move(board, move) for move in moves]
        return [m for _, m in sorted(zip(scores, moves), key=lambda x: x[0], reverse=True)]

    def _score_move(self, board: Board, move: Move) -> int:
        piece = board.grid[move.from_row][move.from_col]
        side = piece.side
        score = 0

        if piece.is_pusher:
            score += 100

        # Advancing: straight steps first, then by closeness to the goal row.
        if side is not None:
            score += 50
            if not move.is_diagonal:
                score += 10
            score += (BOARD_SIZE - 1 - abs(side.goal_row - move.to_row)) * 5

        target = board.grid[move.to_row][move.to_col]
        if is_capture(board, move):
            score += 30
            if target.is_pusher:
                score += 50

        if 2 <= move.to_col <= 5:
            score += 10

        return score

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000.0
