"""Global termination conditions.

A termination condition pairs an aggregation operation with a predicate
on its result.  The substrate evaluates it every
``aggregation_interval`` steps rather than every round, so the cost of
a global reduction is amortised.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, List, Tuple

from .aggregation import AggregationOperation, GlobalUtility, NashEquilibrium


class GlobalTerminationCondition:
    """Base class for conditions polled by the substrate.

    Parameters
    ----------
    aggregation_operation : AggregationOperation
        Reduction applied to the agent population.
    aggregation_interval : int, default 5
        Number of synchronous steps (or asynchronous collect
        operations) between two evaluations.
    """

    def __init__(self, aggregation_operation: AggregationOperation, aggregation_interval: int = 5) -> None:
        if aggregation_interval < 1:
            raise ValueError("aggregation_interval must be at least 1")
        self.aggregation_operation = aggregation_operation
        self.aggregation_interval = aggregation_interval
        self.started_at = time.perf_counter()

    def start(self) -> None:
        """Reset per-run state.  Called by the substrate before the first step."""
        self.started_at = time.perf_counter()

    def should_terminate(self, aggregate: Any) -> bool:
        raise NotImplementedError

    def check(self, agents: Iterable[Any]) -> bool:
        return self.should_terminate(self.aggregation_operation(agents))


class UtilityGapTermination(GlobalTerminationCondition):
    """Stop once the summed utility is within ``epsilon`` of the constraint count.

    Every non-terminating evaluation appends ``(gap, elapsed_seconds)``
    to :attr:`trajectory`, which runners can write out or plot.
    """

    def __init__(self, epsilon: float = 0.001, aggregation_interval: int = 5) -> None:
        super().__init__(GlobalUtility(), aggregation_interval)
        self.epsilon = epsilon
        self.trajectory: List[Tuple[float, float]] = []

    def start(self) -> None:
        super().start()
        self.trajectory = []

    def should_terminate(self, aggregate: Tuple[int, float]) -> bool:
        gap = aggregate[0] - aggregate[1]
        if gap < self.epsilon:
            return True
        self.trajectory.append((gap, time.perf_counter() - self.started_at))
        return False


class NashEquilibriumTermination(GlobalTerminationCondition):
    """Stop once no agent reports a strictly improving unilateral move."""

    def __init__(self, aggregation_interval: int = 5) -> None:
        super().__init__(NashEquilibrium(), aggregation_interval)

    def should_terminate(self, aggregate: bool) -> bool:
        return bool(aggregate)
