import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from tile2048.grid import DIRECTIONS, Direction, Grid, Position, Tile

logger = logging.getLogger(__name__)

# --- Constants for Logic (can be overridden) ---
DEFAULT_BOARD_SIZE = 4
DEFAULT_SPAWN_RATES = {2: 0.9, 4: 0.1}
WIN_TILE = 2048
START_TILES = 2


class MoveResult(NamedTuple):
    grid: Grid
    score_delta: int
    moved: bool
    won: bool


def build_traversals(size: int, vector: Position) -> Tuple[List[int], List[int]]:
    """Cell visiting order for a move: always start from the farthest cell in the travel direction."""
    xs = list(range(size))
    ys = list(range(size))
    if vector[0] == 1:
        xs.reverse()
    if vector[1] == 1:
        ys.reverse()
    return xs, ys


def find_farthest_position(grid: Grid, cell: Position, vector: Position) -> Tuple[Position, Position]:
    """Walk from ``cell`` along ``vector`` until an obstacle. Returns (farthest empty cell, next cell)."""
    dx, dy = vector
    previous = cell
    nxt = (cell[0] + dx, cell[1] + dy)
    while grid.within_bounds(nxt) and grid.cell_available(nxt):
        previous = nxt
        nxt = (nxt[0] + dx, nxt[1] + dy)
    return previous, nxt


class GameRules:
    """
    Move resolution and legality for a square 2048 board.

    ``resolve`` mutates the grid it is given; lookahead code goes through
    ``simulate_move`` / ``try_move`` on detached copies.
    """

    DIRECTIONS: List[Direction] = DIRECTIONS
    DEFAULT_SPAWN_RATES: Dict[int, float] = DEFAULT_SPAWN_RATES

    size: int
    win_tile: int
    start_tiles: int
    spawn_rates: Dict[int, float]

    def __init__(self,
                 size: int = DEFAULT_BOARD_SIZE,
                 spawn_rates: Optional[Dict[int, float]] = None,
                 win_tile: int = WIN_TILE,
                 start_tiles: int = START_TILES):
        if spawn_rates is None:
            spawn_rates = self.DEFAULT_SPAWN_RATES
        assert size > 0, "Board size must be positive."
        assert 0 <= start_tiles <= size * size
        assert isinstance(spawn_rates, dict), "`spawn_rates` must be a dictionary."
        assert all(isinstance(k, int) and k > 0 for k in spawn_rates.keys())
        assert np.isclose(sum(spawn_rates.values()), 1.0), "Spawn probabilities must sum to 1."

        self.size = size
        self.win_tile = win_tile
        self.start_tiles = start_tiles
        self.spawn_rates = spawn_rates.copy()
        self._spawn_values: List[int] = list(self.spawn_rates.keys())
        self._spawn_weights: List[float] = list(self.spawn_rates.values())

    # ------------------------------------------------------------------ #
    #                           RESOLUTION                               #
    # ------------------------------------------------------------------ #
    def prepare_tiles(self, grid: Grid) -> None:
        """Save tile positions and drop merge info from the previous move."""
        for _, _, tile in grid.each_cell():
            if tile:
                tile.merged_from = None
                tile.save_position()

    @staticmethod
    def move_tile(grid: Grid, tile: Tile, cell: Position) -> None:
        grid.cells[tile.x][tile.y] = None
        grid.cells[cell[0]][cell[1]] = tile
        tile.update_position(cell)

    def resolve(self, grid: Grid, direction: int) -> MoveResult:
        """Slide and merge every tile of ``grid`` (in place) towards ``direction``."""
        vector = Direction(direction).vector
        xs, ys = build_traversals(grid.size, vector)
        moved = False
        won = False
        score_delta = 0

        self.prepare_tiles(grid)

        for x in xs:
            for y in ys:
                tile = grid.cell_content((x, y))
                if tile is None:
                    continue

                farthest, nxt = find_farthest_position(grid, (x, y), vector)
                other = grid.cell_content(nxt)

                # A tile produced by a merge this move cannot merge again
                if other is not None and other.value == tile.value and other.merged_from is None:
                    merged = Tile(nxt, tile.value * 2)
                    merged.merged_from = (tile, other)

                    grid.insert_tile(merged)
                    grid.remove_tile(tile)
                    tile.update_position(nxt)

                    score_delta += merged.value
                    if merged.value == self.win_tile:
                        won = True
                else:
                    self.move_tile(grid, tile, farthest)

                if tile.position != (x, y):
                    moved = True

        return MoveResult(grid, score_delta, moved, won)

    def simulate_move(self, grid: Grid, direction: int) -> MoveResult:
        """Resolve ``direction`` on a copy of ``grid``; the input is left untouched."""
        return self.resolve(grid.copy(), direction)

    def try_move(self, direction: int, grid: Grid) -> bool:
        """Resolve ``direction`` on ``grid`` (a detached copy) and report whether anything changed."""
        return self.resolve(grid, direction).moved

    def get_valid_moves(self, grid: Grid) -> List[Direction]:
        return [d for d in self.DIRECTIONS if self.simulate_move(grid, d).moved]

    # ------------------------------------------------------------------ #
    #                            LEGALITY                                #
    # ------------------------------------------------------------------ #
    def moves_available(self, grid: Grid) -> bool:
        return grid.cells_available() or self.tile_matches_available(grid)

    def tile_matches_available(self, grid: Grid) -> bool:
        for x, y, tile in grid.each_cell():
            if tile is None:
                continue
            for direction in self.DIRECTIONS:
                dx, dy = direction.vector
                other = grid.cell_content((x + dx, y + dy))
                if other is not None and other.value == tile.value:
                    return True
        return False

    def is_terminal(self, grid: Grid) -> bool:
        return not self.moves_available(grid)

    # ------------------------------------------------------------------ #
    #                            SPAWNING                                #
    # ------------------------------------------------------------------ #
    def spawn_value(self, rng: Optional[random.Random] = None) -> int:
        return (rng or random).choices(self._spawn_values, weights=self._spawn_weights, k=1)[0]

    def add_random_tile(self, grid: Grid, rng: Optional[random.Random] = None) -> Optional[Tile]:
        """Place one spawn tile on a random empty cell. Returns None when the grid is full."""
        if not grid.cells_available():
            return None
        tile = Tile(grid.random_available_cell(rng), self.spawn_value(rng))
        grid.insert_tile(tile)
        return tile

    def new_grid(self, rng: Optional[random.Random] = None) -> Grid:
        grid = Grid(self.size)
        for _ in range(self.start_tiles):
            self.add_random_tile(grid, rng)
        return grid


@dataclass
class GameState:
    grid: Grid
    score: int = 0
    over: bool = False
    won: bool = False
    keep_playing: bool = False

    def is_terminated(self) -> bool:
        """True if the game is lost, or won and the player hasn't chosen to keep playing."""
        return self.over or (self.won and not self.keep_playing)

    def serialize(self) -> Dict[str, Any]:
        return {
            "grid": self.grid.serialize(),
            "score": self.score,
            "over": self.over,
            "won": self.won,
            "keep_playing": self.keep_playing,
        }

    @classmethod
    def from_serialized(cls, data: Dict[str, Any], size: Optional[int] = None) -> "GameState":
        """Restore a snapshot. Raises ``ValueError`` on missing fields or a grid of the wrong size."""
        if not isinstance(data, dict):
            raise ValueError(f"Game state must be a mapping, got {type(data).__name__}")
        missing = [k for k in ("grid", "score", "over", "won", "keep_playing") if k not in data]
        if missing:
            raise ValueError(f"Game state is missing fields: {', '.join(missing)}")

        grid = Grid.from_serialized(data["grid"])
        if size is not None and grid.size != size:
            raise ValueError(f"Saved grid is {grid.size}x{grid.size}, expected {size}x{size}")

        score = data["score"]
        if not isinstance(score, int) or isinstance(score, bool) or score < 0:
            raise ValueError(f"Invalid score: {score!r}")
        flags = {k: data[k] for k in ("over", "won", "keep_playing")}
        for name, value in flags.items():
            if not isinstance(value, bool):
                raise ValueError(f"Field {name!r} must be a boolean, got {value!r}")

        return cls(grid=grid, score=score, **flags)
