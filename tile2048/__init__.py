# 2048 move engine and autoplay strategies
from .grid import Direction, DIRECTIONS, Grid, NoSpaceError, Tile
from .game import GameRules, GameState, MoveResult
from .strategies import (
    DEFAULT_MOVE,
    GameStrategy,
    GreedyStrategy,
    HeuristicStrategy,
    ExpectimaxStrategy,
    AlphaBetaStrategy,
    TopRowStrategy,
)
from .weights import HeuristicConfig, ExpectimaxConfig, AlphaBetaConfig, TopRowConfig
from .registry import StrategyTag, DEFAULT_STRATEGY, create_strategy, register_strategy, next_strategy_tag
from .storage import StorageBackend, MemoryStorageBackend, LocalStorageBackend
from .autoplay import AutoplayDriver
from .manager import GameManager

__all__ = [
    "Direction",
    "DIRECTIONS",
    "Grid",
    "NoSpaceError",
    "Tile",

    "GameRules",
    "GameState",
    "MoveResult",

    "DEFAULT_MOVE",
    "GameStrategy",
    "GreedyStrategy",
    "HeuristicStrategy",
    "ExpectimaxStrategy",
    "AlphaBetaStrategy",
    "TopRowStrategy",

    "HeuristicConfig",
    "ExpectimaxConfig",
    "AlphaBetaConfig",
    "TopRowConfig",

    "StrategyTag",
    "DEFAULT_STRATEGY",
    "create_strategy",
    "register_strategy",
    "next_strategy_tag",

    "StorageBackend",
    "MemoryStorageBackend",
    "LocalStorageBackend",

    "AutoplayDriver",
    "GameManager",
]
