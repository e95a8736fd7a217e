"""Agent builders.

A builder captures one algorithm together with its parameters and turns
``(id, constraints, domain)`` triples into ready-to-run agents with a
uniformly random initial value.  The substrate calls
:meth:`AgentBuilder.build` once per variable when it constructs the
agent graph.

The set of algorithms is closed: WRMI, DSA (variants A–E) and DSAN.
:func:`create_builder` maps an algorithm name such as ``"wrmi"``,
``"dsa-b"`` or ``"dsan"`` to the matching builder.
"""

from __future__ import annotations

import random
from typing import Any, Iterable, Optional

from problems.constraints import ConfigurationError, Constraint
from .base_agent import BaseAgent
from .dsa_agent import DSAAgent, DSAVariant
from .dsan_agent import DSANAgent, ExplorationSchedule, exponential_schedule
from .wrmi_agent import WRMIAgent

ALGORITHMS = ["wrmi", "dsa-a", "dsa-b", "dsa-c", "dsa-d", "dsa-e", "dsan"]


class AgentBuilder:
    """Base builder.

    Parameters
    ----------
    description : str
        Free-text label appended to the algorithm name in reports.
    seed : optional
        When given, agents receive generators seeded from a stream
        derived from it, in build order, so whole runs are reproducible.
        Otherwise every agent is seeded from system entropy.
    verbose : bool
        Passed through to every agent.
    """

    name = "agent"

    def __init__(self, description: str = "", seed: Optional[Any] = None, verbose: bool = False) -> None:
        self.description = description
        self.verbose = verbose
        self._seeds = random.Random(seed) if seed is not None else None

    def _new_rng(self) -> random.Random:
        if self._seeds is None:
            return random.Random()
        return random.Random(self._seeds.getrandbits(64))

    def build(
        self,
        agent_id: Any,
        constraints: Iterable[Constraint],
        domain: Iterable[Any],
        initial_value: Optional[Any] = None,
    ) -> BaseAgent:
        return self.create(
            agent_id,
            list(constraints),
            list(domain),
            initial_value=initial_value,
            rng=self._new_rng(),
            verbose=self.verbose,
        )

    __call__ = build

    def create(self, agent_id, constraints, domain, **kwargs) -> BaseAgent:
        raise NotImplementedError

    def __str__(self) -> str:
        if self.description:
            return f"{self.name} - {self.description}"
        return self.name


class WRMIBuilder(AgentBuilder):
    name = "WRMI"

    def __init__(self, description: str = "", fading_memory: float = 0.03, inertia: float = 0.5, **kwargs: Any) -> None:
        super().__init__(description, **kwargs)
        self.fading_memory = fading_memory
        self.inertia = inertia

    def create(self, agent_id, constraints, domain, **kwargs) -> BaseAgent:
        return WRMIAgent(
            agent_id, constraints, domain,
            fading_memory=self.fading_memory, inertia=self.inertia, **kwargs
        )


class DSABuilder(AgentBuilder):
    def __init__(self, description: str = "", variant: Any = DSAVariant.A, inertia: float = 0.5, **kwargs: Any) -> None:
        super().__init__(description, **kwargs)
        self.variant = DSAVariant.parse(variant)
        self.inertia = inertia

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"DSA-{self.variant.value}"

    def create(self, agent_id, constraints, domain, **kwargs) -> BaseAgent:
        return DSAAgent(agent_id, constraints, domain, variant=self.variant, inertia=self.inertia, **kwargs)


class DSANBuilder(AgentBuilder):
    name = "DSAN"

    def __init__(
        self,
        description: str = "",
        exploration_probability: Optional[ExplorationSchedule] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(description, **kwargs)
        self.exploration_probability = exploration_probability or exponential_schedule()

    def create(self, agent_id, constraints, domain, **kwargs) -> BaseAgent:
        return DSANAgent(
            agent_id, constraints, domain,
            exploration_probability=self.exploration_probability, **kwargs
        )


def create_builder(algorithm: str, **params: Any) -> AgentBuilder:
    """Factory for the builder of a named algorithm.

    Parameters
    ----------
    algorithm : str
        One of :data:`ALGORITHMS` (case-insensitive).  ``"dsa"`` alone
        means DSA-A.
    **params
        Forwarded to the builder (``inertia``, ``fading_memory``,
        ``exploration_probability``, ``seed``, ``description``...).
    """
    key = algorithm.lower().replace("_", "-")
    if key == "wrmi":
        return WRMIBuilder(**params)
    if key == "dsa":
        return DSABuilder(**params)
    if key.startswith("dsa-"):
        return DSABuilder(variant=key[4:], **params)
    if key == "dsan":
        return DSANBuilder(**params)
    raise ConfigurationError(f"Unknown algorithm {algorithm}")


def build_agent(
    algorithm: str,
    agent_id: Any,
    constraints: Iterable[Constraint],
    domain: Iterable[Any],
    initial_value: Optional[Any] = None,
    **params: Any,
) -> BaseAgent:
    """Create a single agent running ``algorithm``."""
    return create_builder(algorithm, **params).build(agent_id, constraints, domain, initial_value)
