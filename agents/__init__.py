"""Agent definitions.

The agents package contains the vertex-centric decision policies that
participate in distributed constraint optimisation problems (DCOPs).
Each agent owns exactly one variable, keeps the latest value received
from each constraint neighbour, and on every invocation computes a new
value from those values and its own bookkeeping.

The policy families are:

1. **WRMI** – Weighted Regret Monitoring with Inertia: fading regret
   averages, regret-proportional sampling, inertia damping.
2. **DSA** – Distributed Stochastic Algorithm, variants A to E, which
   differ only in when the best alternative is adopted.
3. **DSAN** – Distributed Simulated Annealing with an injected
   exploration schedule.

The base ``BaseAgent`` class defines the interface used by the
substrate: ``receive``, ``step``, ``score_signal`` and ``signal``.
"""

from .base_agent import BaseAgent, Message
from .wrmi_agent import WRMIAgent
from .dsa_agent import DSAAgent, DSAVariant
from .dsan_agent import (
    DSANAgent,
    constant_schedule,
    exponential_schedule,
    thresholded_schedule,
)
from .builders import (
    ALGORITHMS,
    AgentBuilder,
    DSABuilder,
    DSANBuilder,
    WRMIBuilder,
    build_agent,
    create_builder,
)

__all__ = [
    "BaseAgent",
    "Message",
    "WRMIAgent",
    "DSAAgent",
    "DSAVariant",
    "DSANAgent",
    "constant_schedule",
    "exponential_schedule",
    "thresholded_schedule",
    "ALGORITHMS",
    "AgentBuilder",
    "DSABuilder",
    "DSANBuilder",
    "WRMIBuilder",
    "build_agent",
    "create_builder",
]
