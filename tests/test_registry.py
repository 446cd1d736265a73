import pytest

from tile2048.registry import (
    DEFAULT_STRATEGY,
    NEXT_STRATEGY,
    STRATEGY_REGISTRY,
    StrategyTag,
    create_strategy,
    next_strategy_tag,
    register_strategy,
)
from tile2048.strategies import (
    AlphaBetaStrategy,
    ExpectimaxStrategy,
    GreedyStrategy,
    HeuristicStrategy,
    TopRowStrategy,
)
from tile2048.weights import ExpectimaxConfig


def test_every_tag_registered():
    assert set(STRATEGY_REGISTRY) == set(StrategyTag), "Each tag needs a factory"
    assert DEFAULT_STRATEGY == StrategyTag.HEURISTIC


@pytest.mark.parametrize("tag, cls", [
    (StrategyTag.GREEDY, GreedyStrategy),
    (StrategyTag.HEURISTIC, HeuristicStrategy),
    (StrategyTag.EXPECTIMAX, ExpectimaxStrategy),
    (StrategyTag.ALPHA_BETA, AlphaBetaStrategy),
    (StrategyTag.TOP_ROW, TopRowStrategy),
])
def test_create_strategy(rules, tag, cls):
    strategy = create_strategy(tag, rules)
    assert isinstance(strategy, cls), f"{tag.value} should build {cls.__name__}"
    assert strategy.name == tag.value, "Strategy name matches its tag"
    assert strategy.rules is rules


def test_create_strategy_from_string(rules):
    assert isinstance(create_strategy("expectimax", rules), ExpectimaxStrategy)
    with pytest.raises(ValueError):
        create_strategy("sudoku", rules)


def test_create_strategy_with_config(rules):
    strategy = create_strategy(StrategyTag.EXPECTIMAX, rules, config=ExpectimaxConfig(depth=1))
    assert strategy.config.depth == 1


def test_cycle_visits_every_tag_once():
    tag = StrategyTag.ALPHA_BETA
    seen = []
    for _ in range(len(StrategyTag)):
        tag = next_strategy_tag(tag)
        seen.append(tag)
    assert seen == [
        StrategyTag.GREEDY,
        StrategyTag.HEURISTIC,
        StrategyTag.EXPECTIMAX,
        StrategyTag.TOP_ROW,
        StrategyTag.ALPHA_BETA,
    ], "Unexpected strategy cycle"
    assert set(NEXT_STRATEGY.values()) == set(StrategyTag)


def test_register_strategy_replaces_factory(rules, monkeypatch):
    monkeypatch.setitem(STRATEGY_REGISTRY, StrategyTag.GREEDY, STRATEGY_REGISTRY[StrategyTag.GREEDY])

    class FancyGreedy(GreedyStrategy):
        pass

    register_strategy(StrategyTag.GREEDY, FancyGreedy)
    assert isinstance(create_strategy(StrategyTag.GREEDY, rules), FancyGreedy)
