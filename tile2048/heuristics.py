"""Board features used by the strategy evaluation functions.

Every function takes a numpy board indexed ``[y, x]`` (0 = empty cell) and is
pure. "Adjacent pairs" always means left/right and upper/lower neighbours
where both cells hold a tile.
"""

from typing import Iterator, List, Sequence, Tuple

import numpy as np

from tile2048.grid import BoardType, Position


def log_board(board: BoardType) -> np.ndarray:
    """Binary logarithm of every tile, 0 for empty cells."""
    out = np.zeros(board.shape, dtype=np.float64)
    np.log2(board, out=out, where=board > 0)
    return out


def _adjacent_pairs(board: BoardType) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
    """Yield (first, second) slices for horizontal then vertical neighbours."""
    yield board[:, :-1], board[:, 1:]
    yield board[:-1, :], board[1:, :]


def tile_sum(board: BoardType) -> int:
    return int(np.sum(board))


def empty_cells(board: BoardType) -> int:
    return int(np.count_nonzero(board == 0))


def monotonicity(board: BoardType, magnitude: bool = False) -> float:
    """
    Reward sorted rows/columns: for every adjacent pair where the left/upper
    tile outranks the right/lower one, count 1 (or add the log2 difference
    when ``magnitude`` is set).
    """
    logs = log_board(board)
    total = 0.0
    for (a, b), (la, lb) in zip(_adjacent_pairs(board), _adjacent_pairs(logs)):
        decreasing = (a > 0) & (b > 0) & (la > lb)
        total += float(np.sum((la - lb)[decreasing])) if magnitude else int(np.count_nonzero(decreasing))
    return total


def smoothness(board: BoardType) -> float:
    """Negative sum of log2 differences between neighbouring tiles."""
    logs = log_board(board)
    total = 0.0
    for (a, b), (la, lb) in zip(_adjacent_pairs(board), _adjacent_pairs(logs)):
        both = (a > 0) & (b > 0)
        total -= float(np.sum(np.abs(la - lb)[both]))
    return total


def corner_positions(size: int) -> List[Position]:
    last = size - 1
    return [(0, 0), (0, last), (last, 0), (last, last)]


def max_tile_position(board: BoardType) -> Position:
    """(x, y) of the first maximum tile, scanning column by column."""
    size = board.shape[0]
    x, y = divmod(int(np.argmax(board.T)), size)
    return x, y


def max_tile_in_corner(board: BoardType) -> bool:
    """True when the first maximum tile (column-major scan) sits in a corner."""
    if not np.any(board):
        return False
    return max_tile_position(board) in corner_positions(board.shape[0])


def corner_holds_max(board: BoardType) -> bool:
    """True when any corner holds a tile equal to the maximum value."""
    max_value = np.max(board)
    if max_value == 0:
        return False
    return any(board[y, x] == max_value for x, y in corner_positions(board.shape[0]))


def snake_path(size: int) -> List[Position]:
    """Boustrophedon walk: first row left to right, second right to left, and so on."""
    path = []
    for y in range(size):
        xs = range(size) if y % 2 == 0 else range(size - 1, -1, -1)
        path.extend((x, y) for x in xs)
    return path


def snake_pattern_score(board: BoardType, factor: float = 1.5) -> float:
    """Sum of ``log2(v) * factor`` for tiles that do not exceed their predecessor along the snake path."""
    score = 0.0
    last = float("inf")
    for x, y in snake_path(board.shape[0]):
        value = int(board[y, x])
        if value == 0:
            continue
        if value <= last:
            score += np.log2(value) * factor
        last = value
    return float(score)


def positional_score(board: BoardType, weights: Sequence[Sequence[float]]) -> float:
    weights = np.asarray(weights, dtype=np.float64)
    if weights.shape != board.shape:
        raise ValueError(f"Positional weights are {weights.shape}, board is {board.shape}")
    return float(np.sum(board * weights))


def chain_score(board: BoardType) -> float:
    """Sum of log2(left/upper tile) over neighbour pairs where one value is exactly double the other."""
    logs = log_board(board)
    total = 0.0
    for (a, b), (la, _) in zip(_adjacent_pairs(board), _adjacent_pairs(logs)):
        chained = (a > 0) & (b > 0) & ((a == 2 * b) | (b == 2 * a))
        total += float(np.sum(la[chained]))
    return total


def edge_sum(board: BoardType) -> int:
    edge = np.ones(board.shape, dtype=bool)
    edge[1:-1, 1:-1] = False
    return int(np.sum(board[edge]))


def is_late_game(board: BoardType, threshold: int = 1024) -> bool:
    return int(np.max(board, initial=0)) >= threshold


def horizontal_move_possible(board: BoardType) -> bool:
    """True if some row has a gap next to a tile or two equal neighbours."""
    a, b = board[:, :-1], board[:, 1:]
    slide = (a == 0) != (b == 0)
    merge = (a > 0) & (a == b)
    return bool(np.any(slide | merge))


def top_row_merge_possible(board: BoardType) -> bool:
    """The smallest top-row value appears twice in that row, or again in the second row."""
    top = board[0][board[0] > 0]
    if top.size == 0:
        return False
    lowest = top.min()
    if np.count_nonzero(top == lowest) > 1:
        return True
    return board.shape[0] > 1 and bool(np.any(board[1] == lowest))
