import logging

from pusher_engine.config import CONFIG
from pusher_engine.core.board import Side
from pusher_engine.main import Engine


def play(human: Side = Side.RED, engine: Engine = None, read=input, max_turns: int = 200):
    """Human vs engine on the console. Returns the winner, or None if unfinished."""
    engine = engine or Engine()
    turns = 0

    while not engine.is_game_over() and turns < max_turns:
        engine.print_board()
        print("----------------------------")
        side = engine.board.side_to_move
        if not engine.legal_moves(side):
            print(f"{side.value} has no legal move.")
            break

        if side is human:
            user_move = read(f"Enter your move as {side.value} (e.g. D2-D3): ")
            if user_move.strip().lower() in ("quit", "exit"):
                return None
            if not engine.make_move(user_move, side):
                print("Illegal move, try again.")
                continue
        else:
            move = engine.get_best_move(side)
            engine.make_move(move, side)
            print(f"Engine plays: {move}")
        turns += 1

    engine.print_board()
    winner = engine.board.winner()
    print("Game Over")
    print(f"Winner: {winner.value if winner else 'none'}")
    return winner


def main():
    logging.basicConfig(level=CONFIG.log_level)
    choice = Side.parse(input("Play as red or black? ")) or Side.RED
    play(human=choice)


if __name__ == "__main__":
    main()
