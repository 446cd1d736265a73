"""
grid.py

Board model for the 2048 engine: tiles, the square grid that owns them and
the four move directions.

Coordinates are ``(x, y)`` with ``x`` the column and ``y`` the row, ``y``
growing downward. ``to_numpy()`` produces the usual ``[row, col]`` board
(``board[y, x]``) used by the heuristics.
"""

from __future__ import annotations

import random
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

Position = Tuple[int, int]
BoardType = np.ndarray


class NoSpaceError(Exception):
    """Raised when a random empty cell is requested on a full grid."""


class Direction(IntEnum):
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def vector(self) -> Position:
        return _VECTORS[self]

    @property
    def label(self) -> str:
        return self.name.lower()


_VECTORS: Dict[Direction, Position] = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}

DIRECTIONS: List[Direction] = list(Direction)


class Tile:
    def __init__(self, position: Position, value: int):
        self.x, self.y = position
        self.value = value
        self.previous_position: Optional[Position] = None
        self.merged_from: Optional[Tuple["Tile", "Tile"]] = None

    @property
    def position(self) -> Position:
        return self.x, self.y

    def save_position(self) -> None:
        self.previous_position = (self.x, self.y)

    def update_position(self, position: Position) -> None:
        self.x, self.y = position

    def __repr__(self) -> str:
        return f"Tile(({self.x}, {self.y}), {self.value})"


class Grid:
    """
    Square board of ``size`` x ``size`` cells, stored as ``cells[x][y]``.

    Each cell holds at most one ``Tile``; a tile is referenced by exactly one
    cell. Lookahead code never shares tiles with the live grid: it works on
    ``copy()`` / ``from_serialized()`` snapshots.
    """

    def __init__(self, size: int):
        assert size > 0, "Grid size must be positive."
        self.size = size
        self.cells: List[List[Optional[Tile]]] = self.empty()

    def empty(self) -> List[List[Optional[Tile]]]:
        return [[None for _ in range(self.size)] for _ in range(self.size)]

    # ------------------------------------------------------------------ #
    #                            SNAPSHOTS                               #
    # ------------------------------------------------------------------ #
    def serialize(self) -> Dict[str, Any]:
        """Value snapshot: size plus row-major cell values (0 = empty)."""
        rows = []
        for y in range(self.size):
            row = []
            for x in range(self.size):
                tile = self.cells[x][y]
                row.append(tile.value if tile else 0)
            rows.append(row)
        return {"size": self.size, "cells": rows}

    @classmethod
    def from_serialized(cls, data: Dict[str, Any]) -> "Grid":
        """Rebuild a grid from ``serialize()`` output. Raises ``ValueError`` if malformed."""
        try:
            size = data["size"]
            rows = data["cells"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed grid snapshot: {e!r}") from e

        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError(f"Invalid grid size: {size!r}")
        if not isinstance(rows, list) or len(rows) != size:
            raise ValueError(f"Expected {size} rows in grid snapshot")

        grid = cls(size)
        for y, row in enumerate(rows):
            if not isinstance(row, list) or len(row) != size:
                raise ValueError(f"Row {y} does not have {size} cells")
            for x, value in enumerate(row):
                if value is None or value == 0:
                    continue
                if not _is_tile_value(value):
                    raise ValueError(f"Invalid tile value {value!r} at ({x}, {y})")
                grid.cells[x][y] = Tile((x, y), int(value))
        return grid

    def copy(self) -> "Grid":
        return Grid.from_serialized(self.serialize())

    def to_numpy(self) -> BoardType:
        board = np.zeros((self.size, self.size), dtype=np.int64)
        for x, y, tile in self.each_cell():
            if tile:
                board[y, x] = tile.value
        return board

    @classmethod
    def from_numpy(cls, board: BoardType) -> "Grid":
        height, width = board.shape
        assert height == width, "Only square boards are supported."
        return cls.from_serialized({"size": int(height), "cells": board.astype(int).tolist()})

    # ------------------------------------------------------------------ #
    #                          SPATIAL QUERIES                           #
    # ------------------------------------------------------------------ #
    def random_available_cell(self, rng: Optional[random.Random] = None) -> Position:
        cells = self.available_cells()
        if not cells:
            raise NoSpaceError("No empty cell left on the grid")
        return (rng or random).choice(cells)

    def available_cells(self) -> List[Position]:
        return [(x, y) for x, y, tile in self.each_cell() if tile is None]

    def each_cell(self) -> Iterator[Tuple[int, int, Optional[Tile]]]:
        for x in range(self.size):
            for y in range(self.size):
                yield x, y, self.cells[x][y]

    def tiles(self) -> List[Tile]:
        return [tile for _, _, tile in self.each_cell() if tile]

    def cells_available(self) -> bool:
        return any(tile is None for _, _, tile in self.each_cell())

    def cell_available(self, cell: Position) -> bool:
        return not self.cell_occupied(cell)

    def cell_occupied(self, cell: Position) -> bool:
        return self.cell_content(cell) is not None

    def cell_content(self, cell: Position) -> Optional[Tile]:
        if self.within_bounds(cell):
            x, y = cell
            return self.cells[x][y]
        return None

    def insert_tile(self, tile: Tile) -> None:
        self.cells[tile.x][tile.y] = tile

    def remove_tile(self, tile: Tile) -> None:
        self.cells[tile.x][tile.y] = None

    def within_bounds(self, cell: Position) -> bool:
        x, y = cell
        return 0 <= x < self.size and 0 <= y < self.size

    def max_tile(self) -> int:
        return max((tile.value for tile in self.tiles()), default=0)

    def render_ascii(self, cell_width: int = 6) -> str:
        """Return an ASCII art string visualizing the board."""
        sep = "+" + ("-" * cell_width + "+") * self.size
        out_lines: List[str] = [sep]
        for y in range(self.size):
            row_parts = ["|"]
            for x in range(self.size):
                tile = self.cells[x][y]
                cell = str(tile.value) if tile else "."
                row_parts.append(cell.center(cell_width))
                row_parts.append("|")
            out_lines.append("".join(row_parts))
            out_lines.append(sep)
        return "\n".join(out_lines)


def _is_tile_value(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        return False
    value = int(value)
    return value >= 2 and value & (value - 1) == 0
