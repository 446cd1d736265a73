"""Shared test fixtures and helpers."""

import random

import pytest

from tile2048.game import GameRules
from tile2048.grid import Grid
from tile2048.storage import MemoryStorageBackend


# --- Fixtures ---


@pytest.fixture
def rules():
    """Standard 4x4 rules (spawn 2 @ 0.9, 4 @ 0.1, win at 2048)."""
    return GameRules()


@pytest.fixture
def rng():
    """Deterministic RNG seeded at 42."""
    return random.Random(42)


@pytest.fixture
def make_grid():
    """Build a grid from a {(x, y): value} mapping."""

    def _make(tiles=None, size=4):
        rows = [[0] * size for _ in range(size)]
        for (x, y), value in (tiles or {}).items():
            rows[y][x] = value
        return Grid.from_serialized({"size": size, "cells": rows})

    return _make


@pytest.fixture
def grid_from_rows():
    """Build a grid from row-major values (0 = empty)."""

    def _make(rows):
        return Grid.from_serialized({"size": len(rows), "cells": [list(row) for row in rows]})

    return _make


@pytest.fixture
def storage():
    return MemoryStorageBackend()


class RecordingActuator:
    """Listener that records every manager notification."""

    def __init__(self):
        self.updates = []
        self.continued = 0
        self.autoplay_stops = 0

    def actuate(self, grid, metadata):
        self.updates.append((grid.serialize(), dict(metadata)))

    def continue_game(self):
        self.continued += 1

    def autoplay_stopped(self):
        self.autoplay_stops += 1


@pytest.fixture
def actuator():
    return RecordingActuator()


def tile_map(grid):
    """{(x, y): value} for every occupied cell."""
    return {(x, y): tile.value for x, y, tile in grid.each_cell() if tile}
