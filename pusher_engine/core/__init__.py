"""Core engine components: board, move generator, evaluator, and search."""

from .board import Board, Move, Piece, Side
from .evaluator import Evaluator
from .movegen import generate
from .search import SearchEngine
