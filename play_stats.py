#!/usr/bin/env python3
"""
Play multiple headless 2048 games per strategy and generate statistics.
This script plays a number of games with each selected strategy and reports
max tiles achieved, win rates, average scores and turns, plus a side-by-side
comparison of the strategies.

Example usage:
    python play_stats.py --strategies greedy heuristic --games 50 --seed 1 --save-stats
"""

import argparse
import json
import logging
import os
import random
from datetime import datetime

import numpy as np
from tabulate import tabulate
from tqdm import tqdm

from tile2048.config import add_game_args, config_from_args, setup_logging, strategy_overrides
from tile2048.game import GameRules
from tile2048.manager import GameManager
from tile2048.registry import StrategyTag, create_strategy
from tile2048.storage import MemoryStorageBackend
from tile2048.weights import config_to_dict

logger = logging.getLogger(__name__)


def play_game(tag, rules, seed=None, strategy_configs=None, keep_playing=True, max_turns=None, render=False):
    """Play a single game synchronously and return statistics"""
    manager = GameManager(
        rules=rules,
        storage=MemoryStorageBackend(),
        strategy_tag=tag,
        strategy_configs=strategy_configs,
        rng=random.Random(seed),
    )

    turn_count = 0
    while not manager.is_game_terminated():
        if max_turns is not None and turn_count >= max_turns:
            break
        if render:
            print(f"\nTurn {turn_count + 1}")
            print(manager.grid.render_ascii())

        direction = manager.next_move()
        if not manager.move(direction):
            logger.warning(f"{tag.value} proposed a no-op move ({direction.label}), ending game")
            break
        turn_count += 1

        if render:
            print(f"Action: {direction.label}")
            print(f"Score: {manager.score}, Max Tile: {manager.grid.max_tile()}")

        if manager.state.won and not manager.state.keep_playing and keep_playing:
            manager.keep_playing()

    if render:
        print("\nGame over!")
        print(manager.grid.render_ascii())
        print(f"Final score: {manager.score}")
        print(f"Turns: {turn_count}")

    return {
        'strategy': tag.value,
        'max_tile': manager.grid.max_tile(),
        'score': manager.score,
        'turns': turn_count,
        'won': manager.state.won,
    }


def play_games(tag, rules, num_games=10, seed=None, strategy_configs=None, max_turns=None):
    """Play multiple games with one strategy and collect statistics"""
    results = []
    for i in tqdm(range(num_games), desc=tag.value):
        game_seed = None if seed is None else seed + i
        results.append(play_game(tag, rules, seed=game_seed, strategy_configs=strategy_configs,
                                 max_turns=max_turns))
    return results


def analyze_results(results, win_threshold=2048):
    """Analyze game results and create statistics"""
    assert results, "No games to analyze"
    max_tiles = [result['max_tile'] for result in results]

    # Start from 2^2 (4) up to 2^11 (2048) or higher if needed
    tile_stats = {}
    max_power = max(11, int(np.ceil(np.log2(max(max_tiles + [win_threshold])))))
    for power in range(2, max_power + 1):
        tile_value = 2 ** power
        count = sum(1 for tile in max_tiles if tile >= tile_value)
        tile_stats[tile_value] = (count, count / len(results) * 100)

    wins = sum(1 for tile in max_tiles if tile >= win_threshold)
    return {
        'tile_stats': tile_stats,
        'avg_score': sum(result['score'] for result in results) / len(results),
        'avg_turns': sum(result['turns'] for result in results) / len(results),
        'best_tile': max(max_tiles),
        'best_score': max(result['score'] for result in results),
        'num_games': len(results),
        'win_rate': wins / len(results) * 100,
        'win_threshold': win_threshold,
    }


def print_statistics(stats, title=None):
    """Print statistics in a nice format"""
    print(f"\nStatistics for {stats['num_games']} games" + (f" ({title})" if title else "") + ":")
    print(f"Average score: {stats['avg_score']:.1f}")
    print(f"Average turns: {stats['avg_turns']:.1f}")
    print(f"Win rate (>={stats['win_threshold']} tile): {stats['win_rate']:.1f}%")

    table_data = []
    for tile_value, (count, percentage) in sorted(stats['tile_stats'].items()):
        if count == 0:
            continue
        table_data.append([f"{tile_value}", f"{count}/{stats['num_games']}", f"{percentage:.1f}%"])

    print("\nMax Tile Achievement Rates:")
    print(tabulate(table_data, headers=["Tile", "Count", "Percentage"], tablefmt="grid"))


def print_comparison(all_stats):
    """One row per strategy"""
    table_data = []
    for name, stats in all_stats.items():
        table_data.append([
            name,
            stats['num_games'],
            f"{stats['avg_score']:.1f}",
            stats['best_score'],
            f"{stats['avg_turns']:.1f}",
            stats['best_tile'],
            f"{stats['win_rate']:.1f}%",
        ])
    print("\nStrategy Comparison:")
    print(tabulate(table_data,
                   headers=["Strategy", "Games", "Avg Score", "Best Score", "Avg Turns", "Best Tile", "Win Rate"],
                   tablefmt="grid"))


def stats_to_json(stats):
    json_stats = {k: v for k, v in stats.items() if k != 'tile_stats'}
    json_stats['tile_stats'] = {
        str(tile_value): {'count': count, 'percentage': percentage}
        for tile_value, (count, percentage) in stats['tile_stats'].items()
    }
    return json_stats


def save_statistics(all_stats, args, strategy_configs, rules):
    """Save statistics to a JSON file"""
    os.makedirs(args.output_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"stats_{'-'.join(all_stats)}_{args.games}games_{timestamp}.json"
    filepath = os.path.join(args.output_dir, filename)

    report = {'strategies': {}}
    for name, stats in all_stats.items():
        strategy = create_strategy(StrategyTag(name), rules, config=strategy_configs.get(StrategyTag(name)))
        report['strategies'][name] = stats_to_json(stats)
        report['strategies'][name]['config'] = config_to_dict(strategy.config) if strategy.config else None

    report['run'] = {
        'games': args.games,
        'size': args.size,
        'win_tile': args.win_tile,
        'seed': args.seed,
        'max_turns': args.max_turns,
        'date': timestamp,
    }

    with open(filepath, 'w') as f:
        json.dump(report, f, indent=2)

    print(f"\nStatistics saved to {filepath}")
    return filepath


def main():
    parser = argparse.ArgumentParser(description='Play multiple 2048 games per strategy and analyze max tile statistics')
    add_game_args(parser)
    parser.add_argument('--strategies', type=str, nargs='+', default=[tag.value for tag in StrategyTag],
                        choices=[tag.value for tag in StrategyTag], help='Strategies to benchmark')
    parser.add_argument('--games', type=int, default=10, help='Number of games per strategy')
    parser.add_argument('--max-turns', type=int, default=None, help='Stop each game after this many moves')
    parser.add_argument('--win-threshold', type=int, default=None, help='Tile value considered a win (default: win tile)')
    parser.add_argument('--save-stats', action='store_true', help='Save statistics to a JSON file')
    parser.add_argument('--output-dir', type=str, default='stats', help='Directory to save statistics')
    parser.add_argument('--render', action='store_true', help='Render the first game of the first strategy')
    args = parser.parse_args()

    config = config_from_args(args)
    setup_logging(config['log_level'], config['log_file'])

    rules = GameRules(size=args.size, win_tile=args.win_tile)
    strategy_configs = strategy_overrides(config)
    win_threshold = args.win_threshold or args.win_tile
    tags = [StrategyTag(name) for name in args.strategies]

    if args.render:
        print(f"Playing a sample game with {tags[0].value} and rendering...")
        play_game(tags[0], rules, seed=args.seed, strategy_configs=strategy_configs,
                  max_turns=args.max_turns, render=True)

    all_stats = {}
    for tag in tags:
        results = play_games(tag, rules, num_games=args.games, seed=args.seed,
                             strategy_configs=strategy_configs, max_turns=args.max_turns)
        all_stats[tag.value] = analyze_results(results, win_threshold=win_threshold)
        print_statistics(all_stats[tag.value], title=tag.value)

    if len(all_stats) > 1:
        print_comparison(all_stats)

    if args.save_stats:
        save_statistics(all_stats, args, strategy_configs, rules)


if __name__ == "__main__":
    main()
