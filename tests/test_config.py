import logging

from tile2048.config import LOG_FORMAT, parse_args, setup_logging, strategy_overrides
from tile2048.registry import StrategyTag
from tile2048.weights import AlphaBetaConfig, ExpectimaxConfig


def test_defaults():
    config = parse_args([])
    assert config["game"] == {"size": 4, "win_tile": 2048, "seed": None}
    assert config["strategy"]["tag"] == "heuristic", "Heuristic is the default strategy"
    assert config["strategy"]["expectimax_depth"] == ExpectimaxConfig.depth
    assert config["delay"] == 0.2
    assert config["storage_dir"] is None
    assert config["log_level"] == "INFO"


def test_overrides():
    config = parse_args([
        "--size", "5", "--seed", "9", "--strategy", "alpha_beta",
        "--expectimax-depth", "2", "--alpha-beta-depth", "3", "--sample-size", "6",
        "--delay", "0", "--storage-dir", "saves", "--keep-playing",
    ])
    assert config["game"]["size"] == 5
    assert config["game"]["seed"] == 9
    assert config["strategy"]["tag"] == "alpha_beta"
    assert config["delay"] == 0.0
    assert config["storage_dir"] == "saves"
    assert config["keep_playing"]

    configs = strategy_overrides(config)
    assert configs[StrategyTag.EXPECTIMAX] == ExpectimaxConfig(depth=2)
    assert configs[StrategyTag.ALPHA_BETA] == AlphaBetaConfig(depth=3, sample_size=6)


def test_strategy_overrides_without_strategy_section():
    configs = strategy_overrides({})
    assert configs[StrategyTag.EXPECTIMAX] == ExpectimaxConfig(), "Missing section keeps the defaults"
    assert configs[StrategyTag.ALPHA_BETA] == AlphaBetaConfig()


def test_setup_logging(tmp_path):
    log_file = tmp_path / "play.log"
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging("debug", str(log_file))
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers), "File handler expected"
        assert all(h.formatter._fmt == LOG_FORMAT for h in root.handlers if h.formatter)

        logging.getLogger("tile2048.test").info("hello")
        for handler in root.handlers:
            handler.flush()
        assert "tile2048.test - INFO - hello" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
