"""Strategy registry.

Strategies are addressed by an explicit ``StrategyTag``. The registry maps a
tag to a factory, and ``NEXT_STRATEGY`` is the fixed cycle used when the
player toggles strategies.

Usage:
    strategy = create_strategy(StrategyTag.EXPECTIMAX, rules)
    tag = next_strategy_tag(StrategyTag.EXPECTIMAX)   # StrategyTag.TOP_ROW

    # Register a custom implementation under an existing tag
    register_strategy(StrategyTag.GREEDY, MyGreedy)
"""

import logging
import random
from enum import Enum
from typing import Any, Callable, Dict, Optional

from tile2048.game import GameRules
from tile2048.strategies import (
    AlphaBetaStrategy,
    ExpectimaxStrategy,
    GameStrategy,
    GreedyStrategy,
    HeuristicStrategy,
    TopRowStrategy,
)

logger = logging.getLogger(__name__)

StrategyFactory = Callable[..., GameStrategy]


class StrategyTag(str, Enum):
    GREEDY = "greedy"
    HEURISTIC = "heuristic"
    EXPECTIMAX = "expectimax"
    ALPHA_BETA = "alpha_beta"
    TOP_ROW = "top_row"


DEFAULT_STRATEGY = StrategyTag.HEURISTIC

STRATEGY_REGISTRY: Dict[StrategyTag, StrategyFactory] = {
    StrategyTag.GREEDY: GreedyStrategy,
    StrategyTag.HEURISTIC: HeuristicStrategy,
    StrategyTag.EXPECTIMAX: ExpectimaxStrategy,
    StrategyTag.ALPHA_BETA: AlphaBetaStrategy,
    StrategyTag.TOP_ROW: TopRowStrategy,
}

NEXT_STRATEGY: Dict[StrategyTag, StrategyTag] = {
    StrategyTag.ALPHA_BETA: StrategyTag.GREEDY,
    StrategyTag.GREEDY: StrategyTag.HEURISTIC,
    StrategyTag.HEURISTIC: StrategyTag.EXPECTIMAX,
    StrategyTag.EXPECTIMAX: StrategyTag.TOP_ROW,
    StrategyTag.TOP_ROW: StrategyTag.ALPHA_BETA,
}


def register_strategy(tag: StrategyTag, factory: StrategyFactory) -> None:
    if tag in STRATEGY_REGISTRY:
        logger.info(f"Replacing strategy factory for {tag.value}")
    STRATEGY_REGISTRY[tag] = factory


def create_strategy(tag: StrategyTag,
                    rules: Optional[GameRules] = None,
                    config: Any = None,
                    rng: Optional[random.Random] = None) -> GameStrategy:
    tag = StrategyTag(tag)
    try:
        factory = STRATEGY_REGISTRY[tag]
    except KeyError:
        raise ValueError(f"No strategy registered for {tag.value!r}") from None
    return factory(rules=rules, config=config, rng=rng)


def next_strategy_tag(tag: StrategyTag) -> StrategyTag:
    return NEXT_STRATEGY[StrategyTag(tag)]
