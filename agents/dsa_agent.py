"""Distributed Stochastic Algorithm, variants A to E.

Implements DSA from Zhang, Wang and Wittenburg (2002, "Distributed
stochastic search for constraint satisfaction and optimization:
Parallelism, phase transitions and performance") with the variant
classification of Arshad and Silaghi (2003, "Distributed Simulated
Annealing and comparison to DSA"):

* **A** moves stochastically whenever the value can be improved.
* **B** as A, and also moves stochastically when it knows of violated
  constraints and the move does not make things worse.
* **C** as B, and also moves stochastically when nothing is violated
  and the move introduces no violation.
* **D** as B, but improving moves happen with probability 1.
* **E** as C, but improving moves happen with probability 1.

D and E can cycle forever on symmetric instances because neighbours
make the same improving move simultaneously.  That is part of the
published algorithm and is reproduced as is.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Union

from problems.constraints import ConfigurationError, Constraint
from .base_agent import BaseAgent


class DSAVariant(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @classmethod
    def parse(cls, value: Union[str, "DSAVariant"]) -> "DSAVariant":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ConfigurationError(f"unknown DSA variant {value!r}") from None


class DSAAgent(BaseAgent):
    """A variable agent running one of the DSA variants.

    Each invocation finds the best value other than the current one
    (first in domain order on ties), computes ``max_delta`` (its utility
    minus the current utility) and draws one uniform ``probability``.
    The best alternative is adopted when the variant's condition holds:

    ====  =====================================================================
    A     ``max_delta > 0 and p > inertia``
    B     ``(max_delta > 0 or (max_delta == 0 and not satisfied)) and p > inertia``
    C     ``max_delta >= 0 and p > inertia``
    D     ``max_delta > 0 or (max_delta == 0 and not satisfied and p > inertia)``
    E     ``max_delta > 0 or (max_delta == 0 and p > inertia)``
    ====  =====================================================================

    Parameters
    ----------
    variant : DSAVariant or str
        Which acceptance rule to apply.
    inertia : float, default 0.5
        Probability of keeping the current value instead of moving.
    """

    def __init__(
        self,
        name: Any,
        constraints: Iterable[Constraint],
        domain: Iterable[Any],
        variant: Union[DSAVariant, str] = DSAVariant.A,
        inertia: float = 0.5,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, constraints, domain, **kwargs)
        if not 0.0 <= inertia <= 1.0:
            raise ConfigurationError("inertia must lie in [0, 1]")
        self.variant = DSAVariant.parse(variant)
        self.inertia = inertia
        self.max_delta: float = 0.0

    def accepts(self, max_delta: float, probability: float, satisfied: bool) -> bool:
        """Apply the variant's acceptance rule."""
        passes_inertia = probability > self.inertia
        variant = self.variant
        if variant is DSAVariant.A:
            return max_delta > 0 and passes_inertia
        if variant is DSAVariant.B:
            return (max_delta > 0 or (max_delta == 0 and not satisfied)) and passes_inertia
        if variant is DSAVariant.C:
            return max_delta >= 0 and passes_inertia
        if variant is DSAVariant.D:
            return max_delta > 0 or (max_delta == 0 and not satisfied and passes_inertia)
        return max_delta > 0 or (max_delta == 0 and passes_inertia)

    def collect(self) -> Any:
        self.refresh_configuration()
        utilities = self.compute_domain_utilities()
        current_index = self.domain.index(self.value)
        self.utility = utilities[current_index]

        best_index = None
        for i, u in enumerate(utilities):
            if i == current_index:
                continue
            if best_index is None or u > utilities[best_index]:
                best_index = i

        probability = self.rng.random()
        new_value = self.value
        if best_index is None:
            # single-value domain: nothing to move to
            self.max_delta = 0.0
        else:
            self.max_delta = utilities[best_index] - self.utility
            satisfied = self.all_constraints_satisfied(self.utility)
            if self.accepts(self.max_delta, probability, satisfied):
                new_value = self.domain[best_index]
                self.utility = utilities[best_index]
        self.exists_better_state_utility = max(utilities) > self.utility
        return new_value

    def can_stop_signalling(self) -> bool:
        return self.max_delta <= 0
