from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from tile2048.game import GameRules
from tile2048.grid import DIRECTIONS, BoardType, Direction, Grid, Position, Tile
from tile2048.heuristics import (
    chain_score,
    corner_holds_max,
    edge_sum,
    empty_cells,
    horizontal_move_possible,
    is_late_game,
    max_tile_in_corner,
    monotonicity,
    positional_score,
    smoothness,
    snake_pattern_score,
    tile_sum,
    top_row_merge_possible,
)
from tile2048.weights import (
    AlphaBetaConfig,
    ExpectimaxConfig,
    HeuristicConfig,
    TopRowConfig,
    WeightTable,
    scale_weight_table,
)

__all__ = [
    "DEFAULT_MOVE",
    "NodeKind",
    "SearchNode",
    "GameStrategy",
    "GreedyStrategy",
    "HeuristicStrategy",
    "ExpectimaxStrategy",
    "AlphaBetaStrategy",
    "TopRowStrategy",
]

logger = logging.getLogger(__name__)

# Returned when no direction changes the board
DEFAULT_MOVE = Direction.UP


class NodeKind(IntEnum):
    PLAYER = 0
    CHANCE = 1


class SearchNode(NamedTuple):
    grid: Grid
    depth: int
    kind: NodeKind


class GameStrategy(ABC):
    """Base class for move-selection strategies.

    Strategies only ever look at detached copies of the grid they are given;
    ``select_move`` must leave its argument untouched.

    Usage:
        strategy = HeuristicStrategy(GameRules())
        direction = strategy.select_move(grid)
    """

    name: str = "base"
    config_type: Optional[type] = None

    def __init__(self, rules: Optional[GameRules] = None, config: Any = None,
                 rng: Optional[random.Random] = None):
        self.rules = rules or GameRules()
        if config is None and self.config_type is not None:
            config = self.config_type()
        self.config = config
        self.rng = rng or random.Random()

    def candidate_moves(self, grid: Grid) -> Iterator[Tuple[Direction, Grid]]:
        """Yield (direction, moved copy) for every legal direction."""
        for direction in DIRECTIONS:
            grid_copy = grid.copy()
            if self.rules.try_move(direction, grid_copy):
                yield direction, grid_copy

    def select_move(self, grid: Grid) -> Direction:
        """One-ply search: the legal move whose resulting grid scores best."""
        best_score = -math.inf
        best_move = None
        for direction, moved in self.candidate_moves(grid):
            score = self.score_move(direction, moved)
            if score > best_score:
                best_score = score
                best_move = direction
        return self._finish(best_move, best_score, grid)

    def score_move(self, direction: Direction, moved: Grid) -> float:
        return self.evaluate_position(moved)

    def evaluate_position(self, grid: Grid) -> float:
        return self.evaluate_board(grid.to_numpy())

    @abstractmethod
    def evaluate_board(self, board: BoardType) -> float:
        """Score a board snapshot; higher is better."""

    def _finish(self, best_move: Optional[Direction], best_score: float, grid: Grid) -> Direction:
        if best_move is None:
            logger.warning("%s found no legal move on a %dx%d grid, defaulting to %s",
                           self.name, grid.size, grid.size, DEFAULT_MOVE.label)
            return DEFAULT_MOVE
        logger.debug("%s chose %s (score %.1f)", self.name, best_move.label, best_score)
        return best_move

    @staticmethod
    def spawn_child(grid: Grid, cell: Position, value: int) -> Grid:
        child = grid.copy()
        child.insert_tile(Tile(cell, value))
        return child

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"


class GreedyStrategy(GameStrategy):
    """Pick the first move with the highest resulting tile sum."""

    name = "greedy"

    def evaluate_board(self, board: BoardType) -> float:
        return float(tile_sum(board))


class HeuristicStrategy(GameStrategy):
    name = "heuristic"
    config_type = HeuristicConfig

    def evaluate_board(self, board: BoardType) -> float:
        c: HeuristicConfig = self.config
        score = tile_sum(board) * c.tile_sum
        score += empty_cells(board) * c.empty
        score += smoothness(board) * c.smoothness
        score += monotonicity(board) * c.monotonicity
        score += c.corner if max_tile_in_corner(board) else 0.0
        return float(score)


class ExpectimaxStrategy(GameStrategy):
    """Fixed-depth expectimax over player moves and every possible tile spawn."""

    name = "expectimax"
    config_type = ExpectimaxConfig

    def select_move(self, grid: Grid) -> Direction:
        best_score = -math.inf
        best_move = None
        for direction, moved in self.candidate_moves(grid):
            score = self.expectimax(moved, self.config.depth, NodeKind.CHANCE)
            if score > best_score:
                best_score = score
                best_move = direction
        return self._finish(best_move, best_score, grid)

    def expectimax(self, grid: Grid, depth: int, kind: NodeKind) -> float:
        return self._search(SearchNode(grid, depth, kind))

    def _search(self, node: SearchNode) -> float:
        if node.depth == 0:
            return self.evaluate_position(node.grid)
        if node.kind == NodeKind.PLAYER:
            return self._max_value(node)
        return self._chance_value(node)

    def _max_value(self, node: SearchNode) -> float:
        best = -math.inf
        for _, moved in self.candidate_moves(node.grid):
            best = max(best, self._search(SearchNode(moved, node.depth - 1, NodeKind.CHANCE)))
        # No legal move: treat as a leaf
        return self.evaluate_position(node.grid) if best == -math.inf else best

    def _chance_value(self, node: SearchNode) -> float:
        cells = node.grid.available_cells()
        if not cells:
            return self.evaluate_position(node.grid)

        total = 0.0
        for cell in cells:
            for value, probability in self.rules.spawn_rates.items():
                child = self.spawn_child(node.grid, cell, value)
                total += probability * self._search(SearchNode(child, node.depth - 1, NodeKind.PLAYER))
        return total / len(cells)

    def evaluate_board(self, board: BoardType) -> float:
        c: ExpectimaxConfig = self.config
        cornered = corner_holds_max(board)
        score = empty_cells(board) * c.empty
        score += smoothness(board) * c.smoothness
        score += monotonicity(board, magnitude=True) * c.monotonicity
        score += c.corner if cornered else 0.0
        score += snake_pattern_score(board, c.snake_factor) * c.snake

        max_value = int(np.max(board, initial=0))
        if not cornered and max_value > 0:
            score -= math.log2(max_value) * c.corner_penalty
        return float(score)


class AlphaBetaStrategy(GameStrategy):
    """
    Fixed-depth alpha-beta search with a sampled chance layer.

    The chance layer is adversarial over spawn positions: it takes the
    minimum, across up to ``sample_size`` randomly chosen empty cells, of each
    cell's spawn-weighted expected value. Within a cell, the last spawn value
    is searched with the window left over once the earlier terms are known:
    ``((alpha - partial) / p, (beta - partial) / p)``. Move nodes below it
    prune against that window; a fail-low clamps the cell to ``alpha`` and a
    fail-high to ``beta``.
    """

    name = "alpha_beta"
    config_type = AlphaBetaConfig

    def __init__(self, rules: Optional[GameRules] = None, config: Any = None,
                 rng: Optional[random.Random] = None):
        super().__init__(rules, config, rng)
        self.nodes_searched = 0
        self.move_cutoffs = 0
        self.chance_cutoffs = 0
        self._weight_tables: Dict[Tuple[int, bool], WeightTable] = {}

    @property
    def cutoffs(self) -> int:
        return self.move_cutoffs + self.chance_cutoffs

    def select_move(self, grid: Grid) -> Direction:
        c: AlphaBetaConfig = self.config
        late_game = is_late_game(grid.to_numpy(), c.late_game_threshold)
        self.nodes_searched = 0
        self.move_cutoffs = 0
        self.chance_cutoffs = 0

        best_score = -math.inf
        best_move = None
        for direction, moved in self.candidate_moves(grid):
            score = self.alpha_beta(moved, c.depth, best_score, math.inf, NodeKind.CHANCE, late_game)
            if score > best_score:
                best_score = score
                best_move = direction

        logger.debug("alpha-beta searched %d nodes, %d move / %d chance cutoffs (late game: %s)",
                     self.nodes_searched, self.move_cutoffs, self.chance_cutoffs, late_game)
        return self._finish(best_move, best_score, grid)

    def alpha_beta(self, grid: Grid, depth: int, alpha: float, beta: float,
                   kind: NodeKind, late_game: bool) -> float:
        return self._search(SearchNode(grid, depth, kind), alpha, beta, late_game)

    def _search(self, node: SearchNode, alpha: float, beta: float, late_game: bool) -> float:
        self.nodes_searched += 1
        if node.depth == 0:
            return self.evaluate_board(node.grid.to_numpy(), late_game)

        if node.kind == NodeKind.PLAYER:
            value = -math.inf
            for _, moved in self.candidate_moves(node.grid):
                child = SearchNode(moved, node.depth - 1, NodeKind.CHANCE)
                value = max(value, self._search(child, alpha, beta, late_game))
                alpha = max(alpha, value)
                if beta <= alpha:
                    self.move_cutoffs += 1
                    break
            if value == -math.inf:
                return self.evaluate_board(node.grid.to_numpy(), late_game)
            return value

        cells = node.grid.available_cells()
        if not cells:
            return self.evaluate_board(node.grid.to_numpy(), late_game)

        spawns = [(spawn, p) for spawn, p in self.rules.spawn_rates.items() if p > 0]
        value = math.inf
        for cell in self.sample_cells(cells):
            expected = 0.0
            for index, (spawn, probability) in enumerate(spawns):
                child = SearchNode(self.spawn_child(node.grid, cell, spawn), node.depth - 1, NodeKind.PLAYER)
                if index < len(spawns) - 1:
                    expected += probability * self._search(child, -math.inf, math.inf, late_game)
                    continue

                child_alpha = (alpha - expected) / probability
                child_beta = (beta - expected) / probability
                child_value = self._search(child, child_alpha, child_beta, late_game)
                expected += probability * child_value
                if child_value <= child_alpha:
                    expected = min(expected, alpha)
                elif child_value >= child_beta:
                    expected = max(expected, beta)

            value = min(value, expected)
            beta = min(beta, value)
            if beta <= alpha:
                self.chance_cutoffs += 1
                break
        return value

    def sample_cells(self, cells: List[Position]) -> List[Position]:
        return self.rng.sample(cells, min(self.config.sample_size, len(cells)))

    def evaluate_position(self, grid: Grid, late_game: Optional[bool] = None) -> float:
        board = grid.to_numpy()
        if late_game is None:
            late_game = is_late_game(board, self.config.late_game_threshold)
        return self.evaluate_board(board, late_game)

    def evaluate_board(self, board: BoardType, late_game: bool = False) -> float:
        c: AlphaBetaConfig = self.config
        weights = self.weight_table(board.shape[0], late_game)
        max_value = int(np.max(board, initial=0))
        corner_score = 2 * max_value if max_tile_in_corner(board) else 0

        score = positional_score(board, weights)
        score += empty_cells(board) * c.empty
        score += chain_score(board) * c.chain
        score += corner_score * c.corner
        score += edge_sum(board) * c.edge

        if late_game and corner_score == 0:
            score -= max_value * c.corner
        return float(score)

    def weight_table(self, size: int, late_game: bool) -> WeightTable:
        """Positional weights for a ``size`` x ``size`` board, rescaled from the configured tables."""
        key = (size, late_game)
        if key not in self._weight_tables:
            table = self.config.late_game_weights if late_game else self.config.early_game_weights
            self._weight_tables[key] = scale_weight_table(table, size)
        return self._weight_tables[key]


class TopRowStrategy(GameStrategy):
    """
    Keep big tiles in the top row: go UP whenever the top row can merge and a
    horizontal move is still possible afterwards, otherwise run a one-ply
    evaluation that penalises DOWN.
    """

    name = "top_row"
    config_type = TopRowConfig

    def select_move(self, grid: Grid) -> Direction:
        if top_row_merge_possible(grid.to_numpy()):
            up = grid.copy()
            if self.rules.try_move(Direction.UP, up) and horizontal_move_possible(up.to_numpy()):
                logger.debug("top_row chose up (top row merge)")
                return Direction.UP
        return super().select_move(grid)

    def score_move(self, direction: Direction, moved: Grid) -> float:
        c: TopRowConfig = self.config
        board = moved.to_numpy()
        score = self.evaluate_board(board)
        if direction == Direction.DOWN:
            score -= c.down_penalty
        if direction == Direction.UP and not horizontal_move_possible(board):
            score -= c.down_penalty
        return score

    def evaluate_board(self, board: BoardType) -> float:
        c: TopRowConfig = self.config
        score = empty_cells(board) * c.empty
        score += int(np.sum(board[0])) * c.top_row
        score -= int(np.count_nonzero(board[-1])) * c.bottom_row_penalty
        return float(score)
