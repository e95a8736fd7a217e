"""Weighted Regret Monitoring with Inertia.

Implements the WRMI learning rule of Arslan, Marden and Shamma (2007,
"Autonomous vehicle-target assignment: a game theoretical
formulation").  Each agent keeps an exponentially fading average of
the regret it would have had for every alternative value, samples a
candidate proportionally to the positive part of those averages, and
adopts it unless inertia holds it back.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from problems.constraints import ConfigurationError, Constraint
from .base_agent import BaseAgent


class WRMIAgent(BaseAgent):
    """A variable agent running Weighted Regret Monitoring with Inertia.

    On each invocation the agent:

    1. Computes the utility of its current value.
    2. For every domain value ``i`` updates
       ``weighted_avg_diff[i] = rho * regret_i + (1 - rho) * weighted_avg_diff[i]``
       and clips it into ``state_regret[i]`` (values not above ``eps``
       become zero).  ``norm_factor`` is the sum of ``state_regret``.
    3. If ``norm_factor < eps`` the candidate is the current value,
       otherwise it is drawn by inverse-CDF sampling over ``state_regret``.
    4. Adopts the candidate iff a uniform draw exceeds ``inertia`` and
       the candidate differs from the current value.
    5. Records whether some value would beat the one finally held.

    Parameters
    ----------
    fading_memory : float, default 0.03
        Weight ``rho`` of the newest regret, in ``(0, 1]``.  A value of
        1 ignores history entirely.
    inertia : float, default 0.5
        Probability of keeping the current value, in ``[0, 1]``.
    eps : float, default 0.0001
        Threshold below which averaged regret counts as zero.
    """

    def __init__(
        self,
        name: Any,
        constraints: Iterable[Constraint],
        domain: Iterable[Any],
        fading_memory: float = 0.03,
        inertia: float = 0.5,
        eps: float = 0.0001,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, constraints, domain, **kwargs)
        if not 0.0 < fading_memory <= 1.0:
            raise ConfigurationError("fading_memory must lie in (0, 1]")
        if not 0.0 <= inertia <= 1.0:
            raise ConfigurationError("inertia must lie in [0, 1]")
        self.fading_memory = fading_memory
        self.inertia = inertia
        self.eps = eps
        size = len(self.domain)
        self.weighted_avg_diff: List[float] = [0.0] * size
        self.state_regret: List[float] = [0.0] * size
        self.norm_factor: float = 0.0

    def pick_candidate(self) -> Any:
        """Sample a value proportionally to ``state_regret``.

        Falls back to the current value when the distribution is
        degenerate (``norm_factor < eps``).
        """
        if self.norm_factor < self.eps:
            return self.value
        threshold = self.rng.random() * self.norm_factor
        partial_sum = 0.0
        last_positive = None
        for i, weight in enumerate(self.state_regret):
            if weight <= 0.0:
                continue
            partial_sum += weight
            last_positive = i
            if threshold <= partial_sum:
                return self.domain[i]
        # rounding left the threshold just above the total
        return self.domain[last_positive]

    def collect(self) -> Any:
        self.refresh_configuration()
        utilities = self.compute_domain_utilities()
        self.utility = self.compute_utility(self.value)
        rho = self.fading_memory
        self.norm_factor = 0.0
        for i, candidate_utility in enumerate(utilities):
            regret = candidate_utility - self.utility
            self.weighted_avg_diff[i] = rho * regret + (1 - rho) * self.weighted_avg_diff[i]
            self.state_regret[i] = self.weighted_avg_diff[i] if self.weighted_avg_diff[i] > self.eps else 0.0
            self.norm_factor += self.state_regret[i]

        candidate = self.pick_candidate()
        max_utility = max(utilities)
        acceptance_probability = self.rng.random()
        new_value = self.value
        if acceptance_probability > self.inertia and candidate != self.value:
            new_value = candidate
            self.utility = utilities[self.domain.index(candidate)]
        # only used by the Nash-equilibrium aggregator
        self.exists_better_state_utility = max_utility > self.utility
        return new_value

    def can_stop_signalling(self) -> bool:
        return self.all_constraints_satisfied() or self.norm_factor < self.eps
