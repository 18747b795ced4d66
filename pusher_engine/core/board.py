"""Board and rules for the pusher variant: pieces, moves, push side effects and win detection."""

from enum import Enum, IntEnum
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple

import chess

from pusher_engine.config import CONFIG, RulesConfig

BOARD_SIZE = 8


class Side(Enum):
    BLACK = "black"
    RED = "red"

    @property
    def opponent(self) -> "Side":
        return Side.RED if self is Side.BLACK else Side.BLACK

    @property
    def forward(self) -> int:
        """Row delta of every move made by this side."""
        return 1 if self is Side.BLACK else -1

    @property
    def goal_row(self) -> int:
        """The opponent's home rank."""
        return BOARD_SIZE - 1 if self is Side.BLACK else 0

    @property
    def directions(self) -> Tuple[Tuple[int, int], ...]:
        """Straight, diagonal-left and diagonal-right vectors."""
        dr = self.forward
        return ((dr, 0), (dr, -1), (dr, 1))

    @staticmethod
    def parse(text: str) -> Optional["Side"]:
        if text is None:
            return None
        value = text.strip().lower()
        if value in ("red", "r"):
            return Side.RED
        if value in ("black", "b"):
            return Side.BLACK
        return None


class Piece(IntEnum):
    EMPTY = 0
    BLACK_PUSHED = 1
    BLACK_PUSHER = 2
    RED_PUSHED = 3
    RED_PUSHER = 4

    @property
    def side(self) -> Optional[Side]:
        if self in (Piece.BLACK_PUSHED, Piece.BLACK_PUSHER):
            return Side.BLACK
        if self in (Piece.RED_PUSHED, Piece.RED_PUSHER):
            return Side.RED
        return None

    @property
    def is_pusher(self) -> bool:
        return self in (Piece.BLACK_PUSHER, Piece.RED_PUSHER)

    @property
    def is_pushed(self) -> bool:
        return self in (Piece.BLACK_PUSHED, Piece.RED_PUSHED)

    @staticmethod
    def pusher_of(side: Side) -> "Piece":
        return Piece.BLACK_PUSHER if side is Side.BLACK else Piece.RED_PUSHER

    @staticmethod
    def pushed_of(side: Side) -> "Piece":
        return Piece.BLACK_PUSHED if side is Side.BLACK else Piece.RED_PUSHED


_SYMBOLS = {
    Piece.EMPTY: ".",
    Piece.BLACK_PUSHED: "p",
    Piece.BLACK_PUSHER: "P",
    Piece.RED_PUSHED: "r",
    Piece.RED_PUSHER: "R",
}


def on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def square_name(row: int, col: int) -> str:
    """Row 0 is rank 8, column 0 is file A."""
    return chess.square_name(chess.square(col, BOARD_SIZE - 1 - row)).upper()


class Move(NamedTuple):
    from_row: int
    from_col: int
    to_row: int
    to_col: int

    @property
    def direction(self) -> Tuple[int, int]:
        return self.to_row - self.from_row, self.to_col - self.from_col

    @property
    def is_diagonal(self) -> bool:
        return self.to_col != self.from_col

    def compact(self) -> str:
        return str(self).replace("-", "")

    def __str__(self) -> str:
        return f"{square_name(self.from_row, self.from_col)}-{square_name(self.to_row, self.to_col)}"


class Board:
    def __init__(self, rules: Optional[RulesConfig] = None):
        """Create a board in the standard starting layout."""
        self.rules = rules or CONFIG.rules
        self.grid: List[List[Piece]] = [[Piece.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self.side_to_move = Side.RED
        self._counts = {p: 0 for p in Piece if p is not Piece.EMPTY}
        self.initialize()

    @classmethod
    def empty(cls, rules: Optional[RulesConfig] = None, side_to_move: Side = Side.RED) -> "Board":
        board = cls(rules)
        board.clear()
        board.side_to_move = side_to_move
        return board

    def clear(self):
        for row in self.grid:
            row[:] = [Piece.EMPTY] * BOARD_SIZE
        self._recount()

    def initialize(self):
        """Reset to the standard two-rank-per-side layout, RED to move."""
        self.clear()
        for col in range(BOARD_SIZE):
            self.grid[0][col] = Piece.BLACK_PUSHER
            self.grid[1][col] = Piece.BLACK_PUSHED
            self.grid[6][col] = Piece.RED_PUSHED
            self.grid[7][col] = Piece.RED_PUSHER
        self.side_to_move = Side.RED
        self._recount()

    def load_from_flat_list(self, values: Iterable) -> int:
        """Overwrite cells row-major from ``values``; return how many cells were set.

        Tokens that are not valid tags are skipped and leave their cell as it was.
        A short sequence leaves the remaining cells untouched.
        """
        loaded = 0
        for index, token in enumerate(values):
            if index >= BOARD_SIZE * BOARD_SIZE:
                break
            try:
                piece = Piece(int(token))
            except (TypeError, ValueError):
                continue
            self.grid[index // BOARD_SIZE][index % BOARD_SIZE] = piece
            loaded += 1
        self._recount()
        return loaded

    def to_flat_list(self) -> List[int]:
        return [int(piece) for row in self.grid for piece in row]

    def clone(self) -> "Board":
        copy = Board.__new__(Board)
        copy.rules = self.rules
        copy.grid = [row[:] for row in self.grid]
        copy.side_to_move = self.side_to_move
        copy._counts = dict(self._counts)
        return copy

    # ── cell access ──────────────────────────────────────────────────────

    def piece_at(self, row: int, col: int) -> Optional[Piece]:
        if on_board(row, col):
            return self.grid[row][col]
        return None

    def set_piece(self, row: int, col: int, piece: Piece):
        if not on_board(row, col):
            return
        piece = Piece(piece)
        old = self.grid[row][col]
        if old is not Piece.EMPTY:
            self._counts[old] -= 1
        self.grid[row][col] = piece
        if piece is not Piece.EMPTY:
            self._counts[piece] += 1

    def cells(self) -> Iterator[Tuple[int, int, Piece]]:
        """Yield (row, col, piece) for every occupied cell."""
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                piece = self.grid[row][col]
                if piece is not Piece.EMPTY:
                    yield row, col, piece

    def count(self, piece: Piece) -> int:
        return self._counts[piece]

    def pusher_count(self, side: Side) -> int:
        return self._counts[Piece.pusher_of(side)]

    def pushed_count(self, side: Side) -> int:
        return self._counts[Piece.pushed_of(side)]

    def is_empty(self) -> bool:
        return not any(self._counts.values())

    def _recount(self):
        for piece in self._counts:
            self._counts[piece] = 0
        for _, _, piece in self.cells():
            self._counts[piece] += 1

    # ── rules ────────────────────────────────────────────────────────────

    def can_step(self, row: int, col: int, dr: int, dc: int) -> bool:
        """True if the piece on (row, col) may move one step along (dr, dc)."""
        piece = self.piece_at(row, col)
        side = piece.side if piece is not None else None
        if side is None or dr != side.forward or dc not in (-1, 0, 1):
            return False
        to_row, to_col = row + dr, col + dc
        if not on_board(to_row, to_col):
            return False
        if piece.is_pushed and self.piece_at(row - dr, col - dc) is not Piece.pusher_of(side):
            return False
        target = self.grid[to_row][to_col]
        if target is Piece.EMPTY:
            return True
        if target.side is side:
            return False
        if dc == 0:
            return piece.is_pushed and self.rules.pushed_straight_capture
        return True

    def is_legal(self, move: Move) -> bool:
        if not (on_board(move.from_row, move.from_col) and on_board(move.to_row, move.to_col)):
            return False
        piece = self.grid[move.from_row][move.from_col]
        if piece.side is not self.side_to_move:
            return False
        dr, dc = move.direction
        return self.can_step(move.from_row, move.from_col, dr, dc)

    def apply(self, move: Move) -> bool:
        """Play ``move`` with its push side effect and hand the turn over.

        Returns False and leaves the board untouched when the move is illegal.
        """
        if not self.is_legal(move):
            return False
        dr, dc = move.direction
        piece = self.grid[move.from_row][move.from_col]
        behind_row, behind_col = move.from_row - dr, move.from_col - dc

        self._relocate(move.from_row, move.from_col, move.to_row, move.to_col)
        if piece.is_pusher:
            if self.piece_at(behind_row, behind_col) is Piece.pushed_of(piece.side):
                self._relocate(behind_row, behind_col, move.from_row, move.from_col)
        else:
            # the enabling pusher follows into the vacated square
            self._relocate(behind_row, behind_col, move.from_row, move.from_col)

        self.side_to_move = self.side_to_move.opponent
        return True

    def _relocate(self, from_row: int, from_col: int, to_row: int, to_col: int):
        captured = self.grid[to_row][to_col]
        if captured is not Piece.EMPTY:
            self._counts[captured] -= 1
        self.grid[to_row][to_col] = self.grid[from_row][from_col]
        self.grid[from_row][from_col] = Piece.EMPTY

    def _reached_goal(self, side: Side) -> bool:
        return any(piece.side is side for piece in self.grid[side.goal_row])

    def is_terminal(self) -> bool:
        return (
            self._reached_goal(Side.RED)
            or self._reached_goal(Side.BLACK)
            or self.pusher_count(Side.RED) == 0
            or self.pusher_count(Side.BLACK) == 0
        )

    def winner(self) -> Optional[Side]:
        """Positional wins take precedence over wins by eliminating pushers."""
        if self._reached_goal(Side.RED):
            return Side.RED
        if self._reached_goal(Side.BLACK):
            return Side.BLACK
        if self.pusher_count(Side.RED) == 0:
            return Side.BLACK
        if self.pusher_count(Side.BLACK) == 0:
            return Side.RED
        return None

    # ── display ──────────────────────────────────────────────────────────

    def render(self) -> str:
        """ASCII diagram with piece counts."""
        lines = ["   A B C D E F G H"]
        for row in range(BOARD_SIZE):
            symbols = " ".join(_SYMBOLS[p] for p in self.grid[row])
            lines.append(f"{BOARD_SIZE - row}  {symbols}")
        lines.append(f"Red: {self.pusher_count(Side.RED)} pushers, {self.pushed_count(Side.RED)} pushed")
        lines.append(f"Black: {self.pusher_count(Side.BLACK)} pushers, {self.pushed_count(Side.BLACK)} pushed")
        return "\n".join(lines)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid == other.grid and self.side_to_move is other.side_to_move

    __hash__ = None

    def __repr__(self) -> str:
        return f"Board(side_to_move={self.side_to_move.value}, pieces={sum(self._counts.values())})"
