import os

import pytest

from tile2048.storage import LocalStorageBackend, MemoryStorageBackend

STATE = {
    "grid": {"size": 4, "cells": [[2, 0, 0, 0], [0, 0, 0, 0], [0, 0, 4, 0], [0, 0, 0, 0]]},
    "score": 12,
    "over": False,
    "won": False,
    "keep_playing": False,
}


@pytest.fixture(params=["memory", "local"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryStorageBackend()
    return LocalStorageBackend(str(tmp_path / "saves"))


def test_empty_backend(backend):
    assert backend.get_game_state() is None, "No saved game yet"
    assert backend.get_best_score() == 0, "Best score starts at 0"


def test_game_state_round_trip(backend):
    backend.set_game_state(STATE)
    assert backend.get_game_state() == STATE

    backend.clear_game_state()
    assert backend.get_game_state() is None, "Cleared state should be gone"
    backend.clear_game_state()


def test_saved_state_is_a_copy(backend):
    state = {**STATE, "score": 1}
    backend.set_game_state(state)
    state["score"] = 999
    loaded = backend.get_game_state()
    assert loaded["score"] == 1, "Mutating the caller's dict must not touch the save"
    loaded["score"] = 500
    assert backend.get_game_state()["score"] == 1


def test_best_score(backend):
    backend.set_best_score(2048)
    assert backend.get_best_score() == 2048


def test_local_files_persist(tmp_path):
    first = LocalStorageBackend(str(tmp_path))
    first.set_game_state(STATE)
    first.set_best_score(64)

    second = LocalStorageBackend(str(tmp_path))
    assert second.get_game_state() == STATE, "A new backend should see the saved game"
    assert second.get_best_score() == 64
    assert not os.path.exists(second.game_state_path + ".tmp"), "Temp file should be replaced"


def test_local_corrupt_files(tmp_path):
    backend = LocalStorageBackend(str(tmp_path))
    with open(backend.game_state_path, "w") as f:
        f.write("{not json")
    with open(backend.best_score_path, "w") as f:
        f.write('{"best_score": "high"}')

    assert backend.get_game_state() is None, "Unreadable save should read as absent"
    assert backend.get_best_score() == 0, "Invalid best score should read as 0"


def test_local_binary_files(tmp_path, caplog):
    backend = LocalStorageBackend(str(tmp_path))
    for path in (backend.game_state_path, backend.best_score_path):
        with open(path, "wb") as f:
            f.write(b"\xff\xfe\x00garbage")

    with caplog.at_level("WARNING"):
        assert backend.get_game_state() is None, "Undecodable save should read as absent"
        assert backend.get_best_score() == 0
    assert "Ignoring unreadable file" in caplog.text


def test_local_files_are_utf8(tmp_path):
    backend = LocalStorageBackend(str(tmp_path))
    with open(backend.game_state_path, "wb") as f:
        f.write('{"score": 8, "player": "Zoë ☃"}'.encode("utf-8"))
    assert backend.get_game_state() == {"score": 8, "player": "Zoë ☃"}

    backend.set_game_state({"score": 16, "player": "Zoë"})
    assert LocalStorageBackend(str(tmp_path)).get_game_state() == {"score": 16, "player": "Zoë"}
