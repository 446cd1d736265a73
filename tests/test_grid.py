import random

import numpy as np
import pytest

from conftest import tile_map
from tile2048.grid import DIRECTIONS, Direction, Grid, NoSpaceError, Tile


def test_direction_vectors():
    """Directions are UP, RIGHT, DOWN, LEFT with y growing downward."""
    assert [int(d) for d in DIRECTIONS] == [0, 1, 2, 3], "Direction order changed"
    assert Direction.UP.vector == (0, -1), "UP should move towards row 0"
    assert Direction.RIGHT.vector == (1, 0)
    assert Direction.DOWN.vector == (0, 1)
    assert Direction.LEFT.vector == (-1, 0)
    assert Direction.LEFT.label == "left"


def test_empty_grid():
    grid = Grid(4)
    assert grid.cells_available(), "Empty grid should have free cells"
    assert len(grid.available_cells()) == 16, "Empty 4x4 grid should have 16 free cells"
    assert grid.tiles() == [], "Empty grid should have no tiles"
    assert grid.max_tile() == 0


def test_insert_and_remove_tile():
    grid = Grid(4)
    tile = Tile((1, 2), 8)
    grid.insert_tile(tile)
    assert grid.cell_occupied((1, 2)), "Inserted cell should be occupied"
    assert grid.cell_content((1, 2)) is tile
    assert not grid.cell_available((1, 2))

    grid.remove_tile(tile)
    assert grid.cell_available((1, 2)), "Removed cell should be free"
    assert grid.cell_content((1, 2)) is None


def test_out_of_bounds_queries():
    """Out-of-bounds cells are empty and unavailable, never an error."""
    grid = Grid(4)
    for cell in [(-1, 0), (0, -1), (4, 0), (0, 4)]:
        assert not grid.within_bounds(cell), f"{cell} should be out of bounds"
        assert grid.cell_content(cell) is None, f"{cell} should have no content"
        assert not grid.cell_occupied(cell)


def test_each_cell_order_and_restart(make_grid):
    """each_cell walks x-major and can be iterated again."""
    grid = make_grid({(0, 1): 2})
    coords = [(x, y) for x, y, _ in grid.each_cell()]
    assert coords[:5] == [(0, 0), (0, 1), (0, 2), (0, 3), (1, 0)], "Iteration should be x-major"
    assert len(coords) == 16
    assert [(x, y) for x, y, _ in grid.each_cell()] == coords, "Second iteration should match"


def test_random_available_cell(make_grid):
    grid = make_grid({(0, 0): 2, (1, 0): 4})
    rng = random.Random(0)
    for _ in range(20):
        cell = grid.random_available_cell(rng)
        assert cell not in [(0, 0), (1, 0)], "Chosen cell must be empty"


def test_random_available_cell_full_grid(grid_from_rows):
    grid = grid_from_rows([[2, 4], [4, 2]])
    assert not grid.cells_available()
    with pytest.raises(NoSpaceError):
        grid.random_available_cell(random.Random(0))


def test_serialize_round_trip(make_grid):
    grid = make_grid({(0, 0): 2, (3, 1): 1024, (2, 3): 8})
    data = grid.serialize()
    assert data["size"] == 4
    assert data["cells"][1][3] == 1024, "cells should be row-major"

    restored = Grid.from_serialized(data)
    assert tile_map(restored) == tile_map(grid), "Round trip should preserve tiles"


def test_copy_shares_no_tiles(make_grid):
    grid = make_grid({(0, 0): 2})
    clone = grid.copy()
    clone.cell_content((0, 0)).value = 64
    clone.insert_tile(Tile((3, 3), 4))
    assert tile_map(grid) == {(0, 0): 2}, "Mutating the copy must not touch the original"


@pytest.mark.parametrize("data", [
    {"size": 4},
    {"cells": []},
    {"size": 0, "cells": []},
    {"size": 2, "cells": [[2, 0]]},
    {"size": 2, "cells": [[2, 0], [0]]},
    {"size": 2, "cells": [[3, 0], [0, 0]]},
    {"size": 2, "cells": [[1, 0], [0, 0]]},
    {"size": 2, "cells": [["2", 0], [0, 0]]},
    None,
])
def test_from_serialized_rejects_malformed(data):
    with pytest.raises(ValueError):
        Grid.from_serialized(data)


def test_numpy_layout(make_grid):
    """to_numpy is indexed [y, x]."""
    grid = make_grid({(3, 0): 16, (0, 2): 4})
    board = grid.to_numpy()
    assert board.shape == (4, 4)
    assert board[0, 3] == 16, "Tile at x=3, y=0 should be board[0, 3]"
    assert board[2, 0] == 4
    assert np.count_nonzero(board) == 2

    back = Grid.from_numpy(board)
    assert tile_map(back) == tile_map(grid)


def test_max_tile_and_render(make_grid):
    grid = make_grid({(0, 0): 2, (1, 1): 256})
    assert grid.max_tile() == 256
    text = grid.render_ascii()
    assert "256" in text, "Render should show tile values"
    assert text.count("\n") == 8, "4 rows plus 5 separators"
