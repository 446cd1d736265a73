import argparse
import dataclasses
import logging
from typing import Any, Dict, List, Optional

from tile2048.autoplay import DEFAULT_INTERVAL
from tile2048.game import DEFAULT_BOARD_SIZE, WIN_TILE
from tile2048.registry import DEFAULT_STRATEGY, StrategyTag
from tile2048.weights import AlphaBetaConfig, ExpectimaxConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def add_game_args(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    # Game settings
    parser.add_argument("--size", type=int, default=DEFAULT_BOARD_SIZE, help="Board size (N for an NxN grid)")
    parser.add_argument("--win-tile", type=int, default=WIN_TILE, help="Tile value that wins the game")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for spawns and sampling")

    # Strategy settings
    parser.add_argument("--expectimax-depth", type=int, default=ExpectimaxConfig.depth,
                        help="Search depth for the expectimax strategy")
    parser.add_argument("--alpha-beta-depth", type=int, default=AlphaBetaConfig.depth,
                        help="Search depth for the alpha-beta strategy")
    parser.add_argument("--sample-size", type=int, default=AlphaBetaConfig.sample_size,
                        help="Spawn cells sampled per chance node (alpha-beta)")

    # Logging settings
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    parser = argparse.ArgumentParser(description="2048 autoplay")
    add_game_args(parser)
    parser.add_argument("--strategy", type=str, default=DEFAULT_STRATEGY.value,
                        choices=[tag.value for tag in StrategyTag], help="Strategy used for autoplay")

    # Autoplay / storage settings
    parser.add_argument("--delay", type=float, default=DEFAULT_INTERVAL, help="Seconds between autoplay moves")
    parser.add_argument("--storage-dir", type=str, default=None,
                        help="Directory for the saved game and best score (in-memory if omitted)")
    parser.add_argument("--restart", action="store_true", help="Ignore any saved game")
    parser.add_argument("--keep-playing", action="store_true", help="Continue after reaching the win tile")
    parser.add_argument("--quiet", action="store_true", help="Only print the final board")

    args = parser.parse_args(argv)
    config = config_from_args(args)
    config.update({
        "delay": args.delay,
        "storage_dir": args.storage_dir,
        "restart": args.restart,
        "keep_playing": args.keep_playing,
        "quiet": args.quiet,
    })
    return config


def config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        # Game config
        "game": {
            "size": args.size,
            "win_tile": args.win_tile,
            "seed": args.seed,
        },

        # Strategy config
        "strategy": {
            "tag": getattr(args, "strategy", DEFAULT_STRATEGY.value),
            "expectimax_depth": args.expectimax_depth,
            "alpha_beta_depth": args.alpha_beta_depth,
            "sample_size": args.sample_size,
        },

        # Logging config
        "log_level": args.log_level,
        "log_file": args.log_file,
    }


def strategy_overrides(config: Dict[str, Any]) -> Dict[StrategyTag, Any]:
    """Per-strategy config objects reflecting the command-line overrides."""
    strategy = config.get("strategy", {})
    expectimax = ExpectimaxConfig()
    alpha_beta = AlphaBetaConfig()
    if strategy.get("expectimax_depth") is not None:
        expectimax = dataclasses.replace(expectimax, depth=strategy["expectimax_depth"])
    if strategy.get("alpha_beta_depth") is not None:
        alpha_beta = dataclasses.replace(alpha_beta, depth=strategy["alpha_beta_depth"])
    if strategy.get("sample_size") is not None:
        alpha_beta = dataclasses.replace(alpha_beta, sample_size=strategy["sample_size"])
    return {
        StrategyTag.EXPECTIMAX: expectimax,
        StrategyTag.ALPHA_BETA: alpha_beta,
    }


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT, handlers=handlers, force=True)
