"""Per-strategy evaluation weights and search parameters.

Each strategy owns one frozen config type. Defaults are the tuned values the
strategies were developed with; tests and benchmarks substitute alternative
sets with ``dataclasses.replace``.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

WeightTable = Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True)
class HeuristicConfig:
    tile_sum: float = 1.0
    empty: float = 10000.0
    smoothness: float = 40.0
    monotonicity: float = 50.0
    corner: float = 20000.0


@dataclass(frozen=True)
class ExpectimaxConfig:
    # Plies below the root move
    depth: int = 3
    empty: float = 12000.0
    monotonicity: float = 80.0
    smoothness: float = 60.0
    corner: float = 25000.0
    snake: float = 100.0
    snake_factor: float = 1.5
    corner_penalty: float = 1000.0


# Row-major ([y][x]) positional weights for a 4x4 board
EARLY_GAME_WEIGHTS: WeightTable = (
    (2048, 128, 64, 32),
    (1024, 256, 128, 64),
    (512, 384, 256, 128),
    (256, 512, 384, 256),
)

LATE_GAME_WEIGHTS: WeightTable = (
    (65536, 32768, 16384, 8192),
    (32768, 16384, 8192, 4096),
    (16384, 8192, 4096, 2048),
    (8192, 4096, 2048, 1024),
)


@dataclass(frozen=True)
class AlphaBetaConfig:
    depth: int = 4
    sample_size: int = 3
    late_game_threshold: int = 1024
    corner: float = 30000.0
    chain: float = 15000.0
    empty: float = 10000.0
    edge: float = 2000.0
    early_game_weights: WeightTable = field(default=EARLY_GAME_WEIGHTS)
    late_game_weights: WeightTable = field(default=LATE_GAME_WEIGHTS)


@dataclass(frozen=True)
class TopRowConfig:
    down_penalty: float = 10000.0
    empty: float = 100.0
    top_row: float = 2.0
    bottom_row_penalty: float = 500.0


def scale_weight_table(table: WeightTable, size: int) -> WeightTable:
    """Nearest-neighbour resample of a square table to ``size`` x ``size``; corners map to corners."""
    source = len(table)
    if size == source:
        return table
    if size == 1:
        index = [0]
    else:
        index = [round(i * (source - 1) / (size - 1)) for i in range(size)]
    return tuple(tuple(table[row][col] for col in index) for row in index)


def config_to_dict(config: Any) -> Dict[str, Any]:
    return asdict(config)
