import argparse
import json

from tile2048.game import GameRules
from tile2048.registry import StrategyTag
from tile2048.weights import ExpectimaxConfig

from play_stats import analyze_results, play_game, play_games, print_comparison, print_statistics, save_statistics


def test_play_game_small_board():
    rules = GameRules(size=3)
    result = play_game(StrategyTag.GREEDY, rules, seed=0)
    assert set(result) == {"strategy", "max_tile", "score", "turns", "won"}
    assert result["strategy"] == "greedy"
    assert result["turns"] > 0, "Game should last at least one move"
    assert result["max_tile"] >= 4
    assert result["score"] > 0


def test_play_game_is_reproducible():
    rules = GameRules(size=3)
    first = play_game(StrategyTag.HEURISTIC, rules, seed=5)
    second = play_game(StrategyTag.HEURISTIC, rules, seed=5)
    assert first == second, "Same seed, same game"


def test_play_game_max_turns():
    result = play_game(StrategyTag.GREEDY, GameRules(), seed=1, max_turns=5)
    assert result["turns"] == 5


def test_play_games_with_configs():
    configs = {StrategyTag.EXPECTIMAX: ExpectimaxConfig(depth=1)}
    results = play_games(StrategyTag.EXPECTIMAX, GameRules(), num_games=2, seed=3,
                         strategy_configs=configs, max_turns=3)
    assert len(results) == 2
    assert all(r["turns"] == 3 for r in results)


def sample_results():
    return [
        {"strategy": "greedy", "max_tile": 128, "score": 1000, "turns": 100, "won": False},
        {"strategy": "greedy", "max_tile": 256, "score": 3000, "turns": 200, "won": False},
        {"strategy": "greedy", "max_tile": 2048, "score": 20000, "turns": 900, "won": True},
        {"strategy": "greedy", "max_tile": 64, "score": 600, "turns": 60, "won": False},
    ]


def test_analyze_results():
    stats = analyze_results(sample_results(), win_threshold=2048)
    assert stats["num_games"] == 4
    assert stats["avg_score"] == 6150
    assert stats["avg_turns"] == 315
    assert stats["win_rate"] == 25.0
    assert stats["best_tile"] == 2048
    assert stats["tile_stats"][128] == (3, 75.0), "Three games reached 128"
    assert stats["tile_stats"][4] == (4, 100.0)
    assert max(stats["tile_stats"]) == 2048


def test_print_statistics(capsys):
    stats = analyze_results(sample_results())
    print_statistics(stats, title="greedy")
    print_comparison({"greedy": stats})
    out = capsys.readouterr().out
    assert "Statistics for 4 games (greedy)" in out
    assert "Max Tile Achievement Rates" in out
    assert "Strategy Comparison" in out


def test_save_statistics(tmp_path):
    stats = analyze_results(sample_results())
    args = argparse.Namespace(output_dir=str(tmp_path), games=4, size=4, win_tile=2048, seed=1, max_turns=None)
    configs = {StrategyTag.EXPECTIMAX: ExpectimaxConfig(depth=2)}
    path = save_statistics({"greedy": stats, "expectimax": stats}, args, configs, GameRules())

    with open(path) as f:
        report = json.load(f)
    assert report["strategies"]["greedy"]["config"] is None, "Greedy has no weights"
    assert report["strategies"]["expectimax"]["config"]["depth"] == 2
    assert report["strategies"]["greedy"]["tile_stats"]["128"] == {"count": 3, "percentage": 75.0}
    assert report["run"]["games"] == 4
