import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Abstract storage backend for the saved game and the best score"""

    @abstractmethod
    def get_game_state(self) -> Optional[Dict[str, Any]]:
        """Return the saved game snapshot, or None if there is none"""
        pass

    @abstractmethod
    def set_game_state(self, state: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def clear_game_state(self) -> None:
        pass

    @abstractmethod
    def get_best_score(self) -> int:
        pass

    @abstractmethod
    def set_best_score(self, score: int) -> None:
        pass


class MemoryStorageBackend(StorageBackend):
    """Keep everything in process memory (headless play, tests)"""

    def __init__(self):
        self._game_state: Optional[str] = None
        self._best_score = 0

    def get_game_state(self) -> Optional[Dict[str, Any]]:
        return json.loads(self._game_state) if self._game_state is not None else None

    def set_game_state(self, state: Dict[str, Any]) -> None:
        self._game_state = json.dumps(state)

    def clear_game_state(self) -> None:
        self._game_state = None

    def get_best_score(self) -> int:
        return self._best_score

    def set_best_score(self, score: int) -> None:
        self._best_score = int(score)


class LocalStorageBackend(StorageBackend):
    """Store the game and best score as JSON files in a local directory"""

    GAME_STATE_FILE = "game_state.json"
    BEST_SCORE_FILE = "best_score.json"

    def __init__(self, storage_dir: str = "saves"):
        self.storage_dir = storage_dir
        os.makedirs(storage_dir, exist_ok=True)

    @property
    def game_state_path(self) -> str:
        return os.path.join(self.storage_dir, self.GAME_STATE_FILE)

    @property
    def best_score_path(self) -> str:
        return os.path.join(self.storage_dir, self.BEST_SCORE_FILE)

    def _read_json(self, path: str) -> Any:
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable file {path}: {e}")
            return None

    def _write_json(self, path: str, payload: Any) -> None:
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f)
        os.replace(tmp_path, path)

    def get_game_state(self) -> Optional[Dict[str, Any]]:
        return self._read_json(self.game_state_path)

    def set_game_state(self, state: Dict[str, Any]) -> None:
        self._write_json(self.game_state_path, state)

    def clear_game_state(self) -> None:
        try:
            os.remove(self.game_state_path)
        except FileNotFoundError:
            pass

    def get_best_score(self) -> int:
        data = self._read_json(self.best_score_path)
        if isinstance(data, dict) and isinstance(data.get("best_score"), int):
            return data["best_score"]
        return 0

    def set_best_score(self, score: int) -> None:
        self._write_json(self.best_score_path, {"best_score": int(score)})
