"""Assignee selection strategies."""

from enum import Enum
from typing import Callable, Dict

from autoassigner.core.strategies.base import SelectionStrategy
from autoassigner.core.strategies.round_robin import RoundRobinStrategy
from autoassigner.core.strategies.random_strategy import RandomStrategy
from autoassigner.core.strategies.least_assigned import LeastAssignedStrategy


class StrategyName(str, Enum):
    """Strategy identifiers accepted in group configuration files."""

    ROUND_ROBIN = "round_robin"
    RANDOM = "random"
    LEAST_ASSIGNED = "least_assigned"


STRATEGIES: Dict[StrategyName, Callable[[], SelectionStrategy]] = {
    StrategyName.ROUND_ROBIN: RoundRobinStrategy,
    StrategyName.RANDOM: RandomStrategy,
    StrategyName.LEAST_ASSIGNED: LeastAssignedStrategy,
}


def create_strategy(name: str) -> SelectionStrategy:
    """Build the strategy registered under ``name``.

    Raises:
        ValueError: If ``name`` is not a known strategy
    """
    try:
        key = StrategyName(name)
    except ValueError:
        raise ValueError(f"unknown strategy: {name}") from None
    return STRATEGIES[key]()


__all__ = [
    "SelectionStrategy",
    "RoundRobinStrategy",
    "RandomStrategy",
    "LeastAssignedStrategy",
    "StrategyName",
    "STRATEGIES",
    "create_strategy",
]
