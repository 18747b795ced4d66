# pusher_engine/config.py
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple
import os
import tomllib  # python >=3.11

# Positional value grids, indexed [row][col] from RED's point of view.
# BLACK uses the same grid flipped top-to-bottom.
PLACE_VALUES: Tuple[Tuple[int, ...], ...] = (
    (100, 100, 100, 100, 100, 100, 100, 100),
    (100, 100, 100, 100, 100, 100, 100, 100),
    (12, 12, 15, 15, 15, 15, 12, 12),
    (4, 4, 6, 6, 6, 6, 4, 4),
    (2, 2, 4, 4, 4, 4, 2, 2),
    (2, 2, 4, 4, 4, 4, 2, 2),
    (0, 0, 0, 0, 0, 0, 0, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

# Centre-file bonus per column (D/E full, C/F half).
CENTER_FILE_BONUS: Tuple[int, ...] = (0, 0, 5, 10, 10, 5, 0, 0)


@dataclass
class SearchConfig:
    max_depth: int = 8
    time_limit_ms: int = 3000
    randomize_ties: int = 1  # root scores get a jitter in [-n, n]
    use_fast_path: bool = True


@dataclass(frozen=True)
class EvalConfig:
    pusher_value: int = 100
    pushed_value: int = 50
    place_values: Tuple[Tuple[int, ...], ...] = PLACE_VALUES
    center_file_bonus: Tuple[int, ...] = CENTER_FILE_BONUS
    advancement_bonus: int = 5
    pusher_advantage_bonus: int = 150
    material_advantage_bonus: int = 75
    shield_bonus: int = 20
    exposed_pusher_penalty: int = 60
    exposed_pushed_penalty: int = 30
    # Offset keeping every non-terminal score positive.
    base_score: int = 100_000
    neutral_score: int = 100_000
    win_score: int = 50_000_000
    loss_score: int = 1

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "EvalConfig":
        known = {f.name for f in fields(EvalConfig)}
        updates = {}
        for k, v in raw.items():
            if k not in known:
                continue
            if k == "place_values":
                v = tuple(tuple(int(x) for x in row) for row in v)
            elif k == "center_file_bonus":
                v = tuple(int(x) for x in v)
            updates[k] = v
        return replace(EvalConfig(), **updates)


@dataclass
class RulesConfig:
    # Allow a pushed piece shoved straight ahead to capture.
    pushed_straight_capture: bool = False


@dataclass
class UIConfig:
    engine_name: str = "PusherEngine"
    server_host: str = "localhost"
    server_port: int = 8888


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        if "search" in raw:
            for k, v in raw["search"].items():
                if hasattr(cfg.search, k):
                    setattr(cfg.search, k, v)
        if "eval" in raw:
            cfg.eval = EvalConfig.from_dict(raw["eval"])
        if "rules" in raw:
            for k, v in raw["rules"].items():
                if hasattr(cfg.rules, k):
                    setattr(cfg.rules, k, v)
        if "ui" in raw:
            for k, v in raw["ui"].items():
                if hasattr(cfg.ui, k):
                    setattr(cfg.ui, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("PUSHER_CONFIG_TOML", "config.toml"))
# allow env override of search limits for quick debugging
_depth = _env_int("PUSHER_SEARCH_DEPTH")
if _depth:
    CONFIG.search.max_depth = _depth
_time_ms = _env_int("PUSHER_SEARCH_TIME_MS")
if _time_ms:
    CONFIG.search.time_limit_ms = _time_ms
