"""Global aggregation operations.

An aggregation operation extracts one value per agent and folds the
values with an associative, commutative operator, so the substrate may
reduce them in any order or in parallel.
"""

from __future__ import annotations

from functools import reduce as _fold
from typing import Any, Generic, Iterable, Tuple, TypeVar

from agents.base_agent import BaseAgent

T = TypeVar("T")


class AggregationOperation(Generic[T]):
    """Extract / aggregate pair with a neutral element."""

    neutral_element: T

    def extract(self, agent: Any) -> T:
        raise NotImplementedError

    def aggregate(self, a: T, b: T) -> T:
        raise NotImplementedError

    def reduce(self, elements: Iterable[T]) -> T:
        return _fold(self.aggregate, elements, self.neutral_element)

    def __call__(self, agents: Iterable[Any]) -> T:
        return self.reduce(self.extract(a) for a in agents)


class GlobalUtility(AggregationOperation[Tuple[int, float]]):
    """Sums ``(number of incident constraints, achieved utility)`` over agents.

    Every constraint is counted once per participating agent on both
    sides, so the gap between the two sums is zero exactly when every
    agent reports all of its constraints satisfied.
    """

    neutral_element = (0, 0.0)

    def extract(self, agent: Any) -> Tuple[int, float]:
        if not isinstance(agent, BaseAgent):
            raise TypeError(f"cannot extract a utility from {type(agent).__name__}")
        return (len(agent.constraints), agent.utility)

    def aggregate(self, a: Tuple[int, float], b: Tuple[int, float]) -> Tuple[int, float]:
        return (a[0] + b[0], a[1] + b[1])


class NashEquilibrium(AggregationOperation[bool]):
    """True when no agent knows of a strictly better value for itself."""

    neutral_element = True

    def extract(self, agent: Any) -> bool:
        if not isinstance(agent, BaseAgent):
            raise TypeError(f"cannot extract a Nash flag from {type(agent).__name__}")
        return not agent.exists_better_state_utility

    def aggregate(self, a: bool, b: bool) -> bool:
        return a and b
