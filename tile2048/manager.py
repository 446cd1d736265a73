import logging
import random
import threading
from typing import Any, Dict, List, Optional

from tile2048.autoplay import DEFAULT_INTERVAL, AutoplayDriver
from tile2048.game import DEFAULT_BOARD_SIZE, GameRules, GameState
from tile2048.grid import Direction, Grid, Tile
from tile2048.registry import DEFAULT_STRATEGY, StrategyTag, create_strategy, next_strategy_tag
from tile2048.storage import MemoryStorageBackend, StorageBackend
from tile2048.strategies import GameStrategy

logger = logging.getLogger(__name__)


class GameManager:
    """
    Owns the live game: applies moves, spawns tiles, persists state and
    notifies listeners (actuators).

    Listeners are plain objects; any of ``actuate(grid, metadata)`` and
    ``continue_game()`` they define gets called.
    """

    def __init__(self,
                 size: int = DEFAULT_BOARD_SIZE,
                 storage: Optional[StorageBackend] = None,
                 rules: Optional[GameRules] = None,
                 strategy_tag: StrategyTag = DEFAULT_STRATEGY,
                 strategy_configs: Optional[Dict[StrategyTag, Any]] = None,
                 autoplay_interval: float = DEFAULT_INTERVAL,
                 rng: Optional[random.Random] = None,
                 listeners: Optional[List[Any]] = None):
        self.rules = rules or GameRules(size=size)
        self.size = self.rules.size
        self.storage = storage if storage is not None else MemoryStorageBackend()
        self.rng = rng or random.Random()
        self.listeners: List[Any] = list(listeners or [])
        self.lock = threading.RLock()

        self.strategy_configs: Dict[StrategyTag, Any] = dict(strategy_configs or {})
        self.strategy_tag = StrategyTag(strategy_tag)
        self.strategy: GameStrategy = self._build_strategy(self.strategy_tag)

        self.autoplay = AutoplayDriver(self._autoplay_step, interval=autoplay_interval,
                                       on_stop=self._on_autoplay_stopped)

        self.state: Optional[GameState] = None
        self.setup()

    # ------------------------------------------------------------------ #
    #                            LISTENERS                               #
    # ------------------------------------------------------------------ #
    def add_listener(self, listener) -> None:
        if listener not in self.listeners:
            self.listeners.append(listener)

    def remove_listener(self, listener) -> None:
        self.listeners.remove(listener)

    def _notify(self, event_name, *args, **kwargs) -> None:
        for listener in self.listeners:
            if hasattr(listener, event_name):
                getattr(listener, event_name)(*args, **kwargs)

    def bind_input(self, input_manager) -> None:
        """Subscribe to an input source exposing ``on(event, callback)``."""
        input_manager.on("move", self.move)
        input_manager.on("restart", self.restart)
        input_manager.on("keep_playing", self.keep_playing)
        input_manager.on("toggle_strategy", self.toggle_strategy)
        input_manager.on("auto_solve", self.auto_solve)

    # ------------------------------------------------------------------ #
    #                            LIFECYCLE                               #
    # ------------------------------------------------------------------ #
    @property
    def grid(self) -> Grid:
        return self.state.grid

    @property
    def score(self) -> int:
        return self.state.score

    def setup(self) -> None:
        """Resume the saved game if there is a valid one, else start fresh."""
        with self.lock:
            previous = self.storage.get_game_state()
            restored = None
            if previous is not None:
                try:
                    restored = GameState.from_serialized(previous, size=self.size)
                except ValueError as e:
                    logger.warning(f"Discarding saved game: {e}")

            if restored is not None:
                self.state = restored
                logger.info(f"Resumed saved game (score {restored.score})")
            else:
                self.state = GameState(grid=Grid(self.size))
                self.add_start_tiles()
            self.actuate()

    def restart(self) -> None:
        with self.lock:
            self.storage.clear_game_state()
            self._notify("continue_game")
            self.setup()

    def keep_playing(self) -> None:
        """Continue past the winning tile."""
        with self.lock:
            self.state.keep_playing = True
            self._notify("continue_game")

    def is_game_terminated(self) -> bool:
        return self.state.is_terminated()

    def add_start_tiles(self) -> None:
        for _ in range(self.rules.start_tiles):
            self.add_random_tile()

    def add_random_tile(self) -> Optional[Tile]:
        return self.rules.add_random_tile(self.state.grid, self.rng)

    def serialize(self) -> Dict[str, Any]:
        return self.state.serialize()

    def actuate(self) -> None:
        """Persist the game and push it to listeners."""
        if self.storage.get_best_score() < self.state.score:
            self.storage.set_best_score(self.state.score)

        # A lost game is not resumable; a won one is
        if self.state.over:
            self.storage.clear_game_state()
        else:
            self.storage.set_game_state(self.serialize())

        self._notify("actuate", self.state.grid, {
            "score": self.state.score,
            "over": self.state.over,
            "won": self.state.won,
            "best_score": self.storage.get_best_score(),
            "terminated": self.is_game_terminated(),
        })

    # ------------------------------------------------------------------ #
    #                              MOVES                                 #
    # ------------------------------------------------------------------ #
    def move(self, direction: int) -> bool:
        """
        Apply a move to the live game.

        Returns True if the move was accepted (something slid or merged);
        no-op moves and moves on a terminated game change nothing.
        """
        with self.lock:
            if self.is_game_terminated():
                return False

            result = self.rules.resolve(self.state.grid, Direction(direction))
            if not result.moved:
                return False

            self.state.score += result.score_delta
            if result.won and not self.state.won:
                self.state.won = True
                logger.info(f"Reached {self.rules.win_tile} (score {self.state.score})")

            self.add_random_tile()
            if not self.rules.moves_available(self.state.grid):
                self.state.over = True
                logger.info(f"Game over (score {self.state.score}, max tile {self.state.grid.max_tile()})")

            self.actuate()
            return True

    def next_move(self) -> Direction:
        """Ask the active strategy for a move on a snapshot of the live grid."""
        with self.lock:
            snapshot = self.state.grid.copy()
            strategy = self.strategy
        return strategy.select_move(snapshot)

    # ------------------------------------------------------------------ #
    #                       STRATEGY & AUTOPLAY                          #
    # ------------------------------------------------------------------ #
    def _build_strategy(self, tag: StrategyTag) -> GameStrategy:
        rng = random.Random(self.rng.getrandbits(32))
        return create_strategy(tag, self.rules, config=self.strategy_configs.get(tag), rng=rng)

    def set_strategy(self, tag: StrategyTag) -> GameStrategy:
        with self.lock:
            self.strategy_tag = StrategyTag(tag)
            self.strategy = self._build_strategy(self.strategy_tag)
            logger.info(f"Strategy: {self.strategy_tag.value}")
            return self.strategy

    def toggle_strategy(self) -> StrategyTag:
        self.set_strategy(next_strategy_tag(self.strategy_tag))
        return self.strategy_tag

    def auto_solve(self) -> bool:
        """Start autoplay, or stop it if it is running. Returns the new running state."""
        return self.autoplay.toggle()

    def _autoplay_step(self) -> bool:
        if self.is_game_terminated():
            return False
        direction = self.next_move()
        if not self.move(direction):
            return not self.is_game_terminated() and bool(self.rules.get_valid_moves(self.grid))
        return not self.is_game_terminated()

    def _on_autoplay_stopped(self) -> None:
        self._notify("autoplay_stopped")
