"""Distributed Simulated Annealing.

Implements DSAN from Arshad and Silaghi (2003, "Distributed Simulated
Annealing and comparison to DSA").  Each round the agent proposes a
uniformly random value; improving proposals are always taken, the rest
are taken with an exploration probability that decays with time.

The exploration probability is injected as a function
``(time, delta) -> probability``; a few schedules are provided below.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Optional

from problems.constraints import Constraint
from .base_agent import BaseAgent

ExplorationSchedule = Callable[[int, float], float]

# exploration probability below which an agent counts as frozen
FROZEN_THRESHOLD = 0.000001


def exponential_schedule(constant: float = 1000.0) -> ExplorationSchedule:
    """``exp(delta * time**2 / constant)``, i.e. temperature ``constant / time**2``."""

    def schedule(time: int, delta: float) -> float:
        return min(1.0, math.exp(delta * time * time / constant))

    return schedule


def constant_schedule(probability: float) -> ExplorationSchedule:
    """Explore with a fixed probability regardless of time.  Never freezes."""

    def schedule(time: int, delta: float) -> float:
        return probability

    return schedule


def thresholded_schedule(
    threshold: float = 0.01, floor: float = 0.001, constant: float = 1000.0
) -> ExplorationSchedule:
    """Constant ``floor`` for deltas up to ``threshold``, exponential decay above."""

    def schedule(time: int, delta: float) -> float:
        if delta <= threshold:
            return floor
        return min(1.0, math.exp(delta * time * time / constant))

    return schedule


class DSANAgent(BaseAgent):
    """A variable agent running Distributed Simulated Annealing.

    Parameters
    ----------
    exploration_probability : callable, optional
        ``(time, delta) -> float`` giving the probability of accepting
        a non-improving proposal.  Should decrease with ``time``.
        Defaults to :func:`exponential_schedule` with constant 1000.
    """

    def __init__(
        self,
        name: Any,
        constraints: Iterable[Constraint],
        domain: Iterable[Any],
        exploration_probability: Optional[ExplorationSchedule] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, constraints, domain, **kwargs)
        self.exploration_probability = exploration_probability or exponential_schedule()
        self.time = 0
        # worst possible delta, used to decide whether the schedule has frozen
        self.max_negative_delta = -float(len(self.constraints))

    def better_state_exists(self, current_value: Any, current_utility: float) -> bool:
        for candidate in self.domain:
            if candidate != current_value and self.compute_utility(candidate) > current_utility:
                return True
        return False

    def collect(self) -> Any:
        self.refresh_configuration()
        self.time += 1
        self.utility = self.compute_utility(self.value)

        candidate = self.domain[self.rng.randrange(len(self.domain))]
        candidate_utility = self.compute_utility(candidate)
        delta = candidate_utility - self.utility

        if delta > 0:
            adopt = True
        else:
            adopt = self.rng.random() < self.exploration_probability(self.time, delta)
        new_value = self.value
        if adopt:
            new_value = candidate
            self.utility = candidate_utility
        self.exists_better_state_utility = self.better_state_exists(new_value, self.utility)
        return new_value

    def is_frozen(self) -> bool:
        return self.exploration_probability(self.time, self.max_negative_delta) < FROZEN_THRESHOLD

    def can_stop_signalling(self) -> bool:
        if self.all_constraints_satisfied():
            return True
        return self.is_frozen() and not self.exists_better_state_utility
