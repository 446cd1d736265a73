#!/usr/bin/env python3
"""
2048 terminal autoplay script

Example usage:
    python play.py --strategy expectimax --delay 0.05 --seed 7
    python play.py --storage-dir saves          # resume the saved game
"""
import logging
import random
import time

from tile2048.config import parse_args, setup_logging, strategy_overrides
from tile2048.game import GameRules
from tile2048.manager import GameManager
from tile2048.registry import StrategyTag
from tile2048.storage import LocalStorageBackend, MemoryStorageBackend

logger = logging.getLogger(__name__)


class TerminalActuator:
    """Prints the board after every accepted move."""

    def __init__(self, quiet=False):
        self.quiet = quiet
        self.updates = 0

    def actuate(self, grid, metadata):
        self.updates += 1
        if self.quiet and not metadata["terminated"]:
            return
        status = ""
        if metadata["over"]:
            status = " [GAME OVER]"
        elif metadata["won"] and metadata["terminated"]:
            status = " [YOU WIN]"
        print(f"\nScore: {metadata['score']}  Best: {metadata['best_score']}{status}")
        print(grid.render_ascii())

    def continue_game(self):
        print("\nContinuing...")


def main():
    config = parse_args()
    setup_logging(config["log_level"], config["log_file"])

    game = config["game"]
    rules = GameRules(size=game["size"], win_tile=game["win_tile"])
    storage = LocalStorageBackend(config["storage_dir"]) if config["storage_dir"] else MemoryStorageBackend()
    actuator = TerminalActuator(quiet=config["quiet"])

    manager = GameManager(
        rules=rules,
        storage=storage,
        strategy_tag=StrategyTag(config["strategy"]["tag"]),
        strategy_configs=strategy_overrides(config),
        autoplay_interval=config["delay"],
        rng=random.Random(game["seed"]),
        listeners=[actuator],
    )
    if config["restart"]:
        manager.restart()

    print("\n====== 2048 Autoplay ======")
    print(f"Strategy: {manager.strategy_tag.value} (Ctrl-C to stop)")

    start = time.time()
    moves = 0
    try:
        while True:
            manager.auto_solve()
            while manager.autoplay.running:
                manager.autoplay.join(0.5)
            moves += manager.autoplay.steps_taken

            state = manager.state
            if config["keep_playing"] and state.won and not state.over and not state.keep_playing:
                manager.keep_playing()
                continue
            break
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping autoplay")
        manager.autoplay.stop()
        moves += manager.autoplay.steps_taken

    elapsed = time.time() - start
    print(f"\n====== {'Game Over' if manager.state.over else 'Stopped'} ======")
    print(f"Final score: {manager.score}")
    print(f"Max tile: {manager.grid.max_tile()}")
    print(f"Moves played: {moves} in {elapsed:.1f}s")


if __name__ == "__main__":
    main()
