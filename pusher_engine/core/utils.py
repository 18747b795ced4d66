from typing import Optional

from pusher_engine.core.board import Move


def format_info(d, score, nodes, elapsed_ms, best_move: Optional[Move], win_score) -> str:
    move_str = str(best_move) if best_move else "-"
    nps = int(nodes * 1000 / elapsed_ms) if elapsed_ms > 0 else 0

    if score >= win_score:
        score_str = "win"
    else:
        score_str = f"value {score}"

    return f"info depth {d} score {score_str} nodes {nodes} nps {nps} time {int(elapsed_ms)} move {move_str}"
