"""
Integration test suite for the pusher engine.

Tests components working together end-to-end:
- Full game simulations (engine vs engine)
- Engine wrapper (text moves and snapshots)
- Match-server client protocol
- Console play
- FastAPI REST API
"""

import pytest
from unittest.mock import MagicMock

from pusher_engine.config import EvalConfig, SearchConfig
from pusher_engine.core.board import Board, Piece, Side
from pusher_engine.core.evaluator import Evaluator
from pusher_engine.core.movegen import generate
from pusher_engine.core.notation import format_board, parse_move
from pusher_engine.core.search import SearchEngine
from pusher_engine.main import Engine


def fast_engine():
    return Engine(time_limit_ms=40, max_depth=2)


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE VS ENGINE — FULL GAME SIMULATIONS
# ════════════════════════════════════════════════════════════════════════════


class TestFullGame:
    """The engine can play complete games without crashing."""

    def test_engine_vs_engine_completes(self):
        search = SearchEngine(Evaluator(EvalConfig()),
                              SearchConfig(max_depth=2, time_limit_ms=40))
        board = Board()
        plies = 0
        # every move advances at least one piece a row, so games are bounded
        while not board.is_terminal() and plies < 300:
            side = board.side_to_move
            move = search.find_best_move(board, side)
            if move is None:
                assert generate(side, board) == []
                break
            assert board.is_legal(move), f"Illegal move {move} at ply {plies}"
            assert board.apply(move)
            plies += 1

        assert plies > 5
        assert board.is_terminal() or generate(board.side_to_move, board) == []
        if board.is_terminal():
            assert board.winner() is not None

    def test_counts_stay_consistent_during_game(self):
        engine = fast_engine()
        for _ in range(12):
            if engine.is_game_over():
                break
            move = engine.get_best_move()
            assert move is not None
            assert engine.make_move(move)
            board = engine.board
            for piece in Piece:
                if piece is Piece.EMPTY:
                    continue
                live = sum(1 for row in board.grid for p in row if p is piece)
                assert board.count(piece) == live


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE WRAPPER INTEGRATION
# ════════════════════════════════════════════════════════════════════════════


class TestEngineWrapper:
    def test_make_move_text(self):
        eng = fast_engine()
        assert eng.make_move("C2-C3") is True
        assert eng.board.grid[5][2] is Piece.RED_PUSHED
        assert eng.board.grid[6][2] is Piece.RED_PUSHER
        assert eng.board.grid[7][2] is Piece.EMPTY
        assert eng.board.side_to_move is Side.BLACK

    def test_make_move_compact(self):
        eng = fast_engine()
        assert eng.make_move("C2C3") is True

    def test_rejects_bad_moves(self):
        eng = fast_engine()
        before = eng.get_board()
        assert eng.make_move("C2-C4") is False
        assert eng.make_move("zz") is False
        assert eng.make_move("C7-C6") is False  # BLACK piece, RED to move
        assert eng.get_board() == before

    def test_rejected_move_keeps_side_to_move(self):
        eng = fast_engine()
        before = eng.board.clone()
        assert eng.make_move("A1-A2", Side.BLACK) is False
        assert eng.board == before
        assert eng.board.side_to_move is Side.RED
        # the next search still plays for RED
        assert eng.get_best_move() in eng.legal_moves(Side.RED)

    def test_make_move_for_explicit_side(self):
        eng = fast_engine()
        assert eng.make_move("C7-C6", Side.BLACK) is True
        assert eng.board.grid[2][2] is Piece.BLACK_PUSHED

    def test_best_move_is_legal(self):
        eng = fast_engine()
        move = eng.get_best_move()
        assert move in eng.legal_moves()
        assert eng.make_move(move)

    def test_load_board_snapshot(self):
        eng = fast_engine()
        board = Board.empty()
        board.set_piece(4, 4, Piece.RED_PUSHER)
        board.set_piece(0, 0, Piece.BLACK_PUSHER)
        eng.load_board(format_board(board), Side.RED)
        assert eng.get_board() == format_board(board)
        assert set(eng.legal_moves()) == {"E4-E5", "E4-D5", "E4-F5"}

    def test_reset(self):
        eng = fast_engine()
        eng.make_move("C2-C3")
        eng.reset()
        assert eng.board == Board()

    def test_no_move_when_blocked(self):
        eng = fast_engine()
        board = Board.empty()
        board.set_piece(7, 0, Piece.RED_PUSHER)
        board.set_piece(6, 0, Piece.RED_PUSHED)
        board.set_piece(5, 0, Piece.BLACK_PUSHED)
        board.set_piece(6, 1, Piece.RED_PUSHED)
        board.set_piece(5, 2, Piece.RED_PUSHED)
        board.set_piece(0, 7, Piece.BLACK_PUSHER)
        eng.load_board(format_board(board), Side.RED)
        assert eng.get_best_move() is None


# ════════════════════════════════════════════════════════════════════════════
#  MATCH-SERVER CLIENT
# ════════════════════════════════════════════════════════════════════════════


class TestMatchClient:
    def _make_client(self, console=None):
        from interface.client import MatchClient

        client = MatchClient(engine=fast_engine(), read_console=console or (lambda: ""))
        client.sock = MagicMock()
        return client

    def test_new_game_as_red_moves_first(self):
        client = self._make_client()
        sent = client.handle("1", format_board(Board()))
        assert client.side is Side.RED
        assert sent is not None and len(sent) == 4 and "-" not in sent
        client.sock.sendall.assert_called_once_with(sent.encode("ascii"))
        # our move was applied locally
        assert client.engine.board.side_to_move is Side.BLACK
        assert client.engine.board != Board()

    def test_new_game_as_black_waits(self):
        client = self._make_client()
        assert client.handle("2", format_board(Board())) is None
        assert client.side is Side.BLACK
        client.sock.sendall.assert_not_called()

    def test_black_replies_to_red_move(self):
        client = self._make_client()
        client.handle("2", format_board(Board()))
        sent = client.handle("3", "C2C3")
        assert client.engine.board.grid[5][2] is Piece.RED_PUSHED
        move = parse_move(sent)
        assert move is not None
        assert move.from_row < move.to_row  # BLACK moves down the board
        assert client.engine.board.side_to_move is Side.RED

    def test_command_four_behaves_like_three(self):
        client = self._make_client()
        client.handle("2", format_board(Board()))
        assert client.handle("4", "D2-D3") is not None

    def test_bad_opponent_move_still_replies(self):
        client = self._make_client()
        client.handle("2", format_board(Board()))
        sent = client.handle("3", "Z9Z9")
        assert sent is not None
        assert parse_move(sent) in generate(Side.BLACK, Board())

    def test_move_before_game_start(self):
        client = self._make_client()
        assert client.handle("3", "C2C3") is None
        client.sock.sendall.assert_not_called()

    def test_manual_move(self):
        client = self._make_client(console=lambda: " D7D6\n")
        assert client.handle("5", "") == "D7D6"
        client.sock.sendall.assert_called_once_with(b"D7D6")

    def test_unknown_command(self):
        client = self._make_client()
        assert client.handle("9", "") is None

    def test_run_loop_until_close(self):
        client = self._make_client()
        client.sock.recv.side_effect = [b"2", format_board(Board()).encode("ascii"), b""]
        client.run()
        assert client.side is Side.BLACK
        client.sock.close.assert_called_once()

    def test_run_loop_socket_error(self):
        client = self._make_client()
        client.sock.recv.side_effect = ConnectionResetError("reset")
        client.run()
        client.sock.close.assert_called_once()


# ════════════════════════════════════════════════════════════════════════════
#  CONSOLE PLAY
# ════════════════════════════════════════════════════════════════════════════


class TestConsolePlay:
    def test_quit_immediately(self, capsys):
        from interface.cli import play

        assert play(human=Side.RED, engine=fast_engine(), read=lambda prompt: "quit") is None
        assert "A B C D E F G H" in capsys.readouterr().out

    def test_illegal_then_legal_then_engine_reply(self, capsys):
        from interface.cli import play

        inputs = iter(["C2-C5", "C2-C3", "quit"])
        engine = fast_engine()
        play(human=Side.RED, engine=engine, read=lambda prompt: next(inputs))
        out = capsys.readouterr().out
        assert "Illegal move, try again." in out
        assert "Engine plays:" in out
        assert engine.board.side_to_move is Side.RED

    def test_finished_game_reports_winner(self, capsys):
        from interface.cli import play

        engine = fast_engine()
        board = Board.empty()
        board.set_piece(0, 3, Piece.RED_PUSHER)
        board.set_piece(0, 0, Piece.BLACK_PUSHER)
        engine.load_board(format_board(board), Side.BLACK)
        assert play(human=Side.BLACK, engine=engine, read=lambda prompt: "quit") is Side.RED
        assert "Winner: red" in capsys.readouterr().out


# ════════════════════════════════════════════════════════════════════════════
#  FASTAPI REST API
# ════════════════════════════════════════════════════════════════════════════


class TestAPIIntegration:
    @pytest.fixture(autouse=True)
    def setup_client(self):
        from fastapi.testclient import TestClient
        from interface.api import app, board

        self.client = TestClient(app)
        board.initialize()

    def test_get_board_initial(self):
        response = self.client.get("/board")
        assert response.status_code == 200
        data = response.json()
        assert data["board"] == format_board(Board())
        assert data["side_to_move"] == "red"
        assert data["is_game_over"] is False
        assert data["winner"] is None
        assert len(data["legal_moves"]) == 20

    def test_post_move_valid(self):
        response = self.client.post("/move", json={"move": "C2C3"})
        assert response.status_code == 200
        assert response.json()["move"] == "C2-C3"
        assert self.client.get("/board").json()["side_to_move"] == "black"

    def test_post_move_illegal(self):
        response = self.client.post("/move", json={"move": "C2-C4"})
        assert response.status_code == 400

    def test_post_move_malformed(self):
        response = self.client.post("/move", json={"move": "zzzz"})
        assert response.status_code == 400

    def test_set_position(self):
        board = Board.empty()
        board.set_piece(4, 4, Piece.BLACK_PUSHER)
        board.set_piece(7, 7, Piece.RED_PUSHER)
        response = self.client.post("/position", json={"board": format_board(board),
                                                       "side_to_move": "black"})
        assert response.status_code == 200
        data = response.json()
        assert data["side_to_move"] == "black"
        assert sorted(data["legal_moves"]) == ["E4-D3", "E4-E3", "E4-F3"]

    def test_set_position_unknown_side(self):
        response = self.client.post("/position", json={"board": "", "side_to_move": "green"})
        assert response.status_code == 400

    def test_search_returns_legal_move(self):
        response = self.client.post("/search", json={"time_limit_ms": 150})
        assert response.status_code == 200
        data = response.json()
        assert data["side"] == "red"
        move = parse_move(data["best_move"])
        assert move in generate(Side.RED, Board())

    def test_search_game_over_returns_400(self):
        board = Board.empty()
        board.set_piece(0, 3, Piece.RED_PUSHER)
        board.set_piece(0, 0, Piece.BLACK_PUSHER)
        self.client.post("/position", json={"board": format_board(board), "side_to_move": "black"})
        assert self.client.get("/board").json()["winner"] == "red"
        response = self.client.post("/search", json={"time_limit_ms": 50})
        assert response.status_code == 400

    def test_reset_board(self):
        self.client.post("/move", json={"move": "C2-C3"})
        response = self.client.post("/reset")
        assert response.status_code == 200
        assert response.json()["board"] == format_board(Board())

    def test_full_api_game_flow(self):
        assert self.client.get("/board").json()["side_to_move"] == "red"
        self.client.post("/move", json={"move": "D2-D3"})
        r = self.client.post("/search", json={"time_limit_ms": 100, "max_depth": 2})
        best = r.json()["best_move"]
        assert r.json()["side"] == "black"
        assert self.client.post("/move", json={"move": best}).status_code == 200
        assert self.client.get("/board").json()["side_to_move"] == "red"
