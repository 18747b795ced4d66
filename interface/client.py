"""TCP client for the match server.

The server sends a one-byte command followed by a payload:

    1  new game as RED, payload is the board snapshot; we move first
    2  new game as BLACK, payload is the board snapshot; wait for RED
    3  payload is the opponent's move; reply with ours
    4  same as 3
    5  manual turn: read a move from the console and send it
"""

import logging
import random
import socket
import time
from typing import Callable, Optional

from pusher_engine.config import CONFIG
from pusher_engine.core.board import Side
from pusher_engine.main import Engine

logger = logging.getLogger(__name__)


class MatchClient:
    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 engine: Optional[Engine] = None, read_console: Callable[[], str] = input):
        self.host = host or CONFIG.ui.server_host
        self.port = port or CONFIG.ui.server_port
        self.engine = engine or Engine()
        self.read_console = read_console
        self.side: Optional[Side] = None
        self.sock: Optional[socket.socket] = None

    def connect(self):
        self.sock = socket.create_connection((self.host, self.port))
        logger.info("Connected to %s:%d. Waiting for commands...", self.host, self.port)

    def run(self):
        if self.sock is None:
            self.connect()
        try:
            while True:
                cmd = self.sock.recv(1)
                if not cmd:
                    logger.info("Server closed the connection")
                    break
                # Give the server time to send the whole payload.
                time.sleep(0.05)
                self.handle(cmd.decode("ascii", errors="replace"), self._read_payload())
        except OSError as e:
            logger.error("Connection error: %s", e)
        finally:
            self.sock.close()

    def _read_payload(self) -> str:
        self.sock.settimeout(0.05)
        try:
            data = self.sock.recv(1024)
        except socket.timeout:
            data = b""
        finally:
            self.sock.settimeout(None)
        return data.decode("ascii", errors="replace").strip()

    def handle(self, cmd: str, payload: str) -> Optional[str]:
        """Process one server command. Returns the move sent, if any."""
        logger.info("Received command: %s", cmd)
        if cmd == "1":
            self.side = Side.RED
            self._load_board(payload)
            return self._play()
        if cmd == "2":
            self.side = Side.BLACK
            self._load_board(payload)
            logger.info("Playing as BLACK - waiting for RED to move first")
            return None
        if cmd in ("3", "4"):
            self._apply_opponent_move(payload)
            if self.side is None:
                logger.error("Move requested before a game was started")
                return None
            return self._play()
        if cmd == "5":
            move = self.read_console().strip()
            self._send(move)
            return move
        logger.warning("Unknown command %r", cmd)
        return None

    def _load_board(self, payload: str):
        logger.info("Playing as %s", self.side.value.upper())
        if payload:
            self.engine.load_board(payload, Side.RED)
        else:
            self.engine.reset()

    def _apply_opponent_move(self, payload: str):
        if not payload:
            logger.warning("Received empty opponent move")
            return
        logger.info("Opponent's move received: %r", payload)
        if self.side is None or not self.engine.make_move(payload, self.side.opponent):
            logger.warning("Failed to apply opponent move: %s", payload)

    def _play(self) -> Optional[str]:
        logger.info("Finding best move for %s...", self.side.value.upper())
        move = self.engine.get_best_move(self.side)
        if move is None:
            legal = self.engine.legal_moves(self.side)
            if not legal:
                logger.error("No moves available")
                return None
            move = random.choice(legal)
            logger.info("Random move selected: %s", move)
        self.engine.make_move(move, self.side)
        compact = move.replace("-", "")
        self._send(compact)
        logger.info("Move sent: %s", compact)
        return compact

    def _send(self, text: str):
        if self.sock is not None:
            self.sock.sendall(text.encode("ascii"))


def main():
    logging.basicConfig(level=CONFIG.log_level,
                        format="%(asctime)s - %(levelname)s - %(message)s")
    MatchClient().run()


if __name__ == "__main__":
    main()
