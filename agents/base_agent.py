"""Base class for DCOP agents.

This module defines the :class:`BaseAgent`, which provides the state
shared by every decision policy: the agent's identity, its domain and
current value, its incident constraints, the most recent value received
from each neighbour, and the bookkeeping consumed by the local
convergence signal and the global aggregators.

Subclasses implement :meth:`BaseAgent.collect` (one decision step,
returning the new value) and :meth:`BaseAgent.can_stop_signalling`
(the algorithm-specific half of the local convergence rule).

Agents never touch each other.  The substrate writes into
``neighbour_values`` through :meth:`BaseAgent.receive` and invokes
:meth:`BaseAgent.step`; everything else is owned by the agent.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from problems.constraints import ConfigurationError, Constraint


@dataclass
class Message:
    """Value update travelling along one edge of the agent graph.

    Attributes
    ----------
    sender : Any
        Identifier of the sending agent.
    recipient : Any
        Identifier of the receiving agent.
    content : Any
        The sender's current value.
    """

    sender: Any
    recipient: Any
    content: Any


class BaseAgent:
    """Abstract base class for DCOP agents.

    Parameters
    ----------
    name : hashable
        Unique identifier for the agent.  Corresponds to a variable in
        the problem.
    constraints : iterable of Constraint
        Constraints the agent participates in.  Each one must name the
        agent among its variables.
    domain : iterable
        Admissible values, in the order used for tie-breaking and for
        indexing per-value bookkeeping arrays.
    initial_value : optional
        Initial value.  If None, one is drawn uniformly from the domain
        using the agent's own generator.
    rng : random.Random, optional
        Generator owned by this agent.  When omitted a new one seeded
        with ``seed`` is created.
    seed : optional
        Seed for the private generator (ignored when ``rng`` is given).
    verbose : bool, default False
        Echo log lines to stdout as they are recorded.
    """

    def __init__(
        self,
        name: Any,
        constraints: Iterable[Constraint],
        domain: Iterable[Any],
        initial_value: Optional[Any] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[Any] = None,
        verbose: bool = False,
    ) -> None:
        self.name = name
        self.constraints: List[Constraint] = list(constraints)
        self.domain: List[Any] = list(domain)
        if not self.domain:
            raise ConfigurationError(f"agent {name!r} has an empty domain")
        if len(set(self.domain)) != len(self.domain):
            raise ConfigurationError(f"agent {name!r} has duplicate domain values")
        self.neighbours: List[Any] = []
        for constraint in self.constraints:
            if not constraint.involves(name):
                raise ConfigurationError(
                    f"constraint {constraint!r} does not involve agent {name!r}"
                )
            for variable in constraint.variables:
                if variable != name and variable not in self.neighbours:
                    self.neighbours.append(variable)
        self._neighbour_set = frozenset(self.neighbours)
        self.rng = rng if rng is not None else random.Random(seed)
        self.verbose = verbose
        # most recent value received from each neighbour; written by the substrate
        self.neighbour_values: Dict[Any, Any] = {}
        # per-invocation snapshot the constraints are evaluated against
        self._config: Dict[Any, Any] = {}
        self.utility: float = 0.0
        self.max_local_utility: float = sum(c.max_utility for c in self.constraints)
        self.exists_better_state_utility: bool = False
        self.last_signal_value: Optional[Any] = None
        self.has_signalled = False
        self.logs: List[str] = []
        if initial_value is None:
            self.value = self.rng.choice(self.domain)
        else:
            if initial_value not in self.domain:
                raise ConfigurationError(
                    f"initial value {initial_value!r} is not in the domain of agent {name!r}"
                )
            self.value = initial_value

    def log(self, message: str) -> None:
        """Append a line to the agent's internal log."""
        self.logs.append(message)
        if self.verbose:
            print(f"[agent {self.name}] {message}")

    def get_logs(self) -> List[str]:
        """Return the accumulated log lines for this agent."""
        return list(self.logs)

    # ------------------------------------------------------------------
    # substrate boundary
    # ------------------------------------------------------------------

    def receive(self, message: Message) -> None:
        """Store the value carried by ``message`` as the sender's latest value."""
        if message.sender not in self._neighbour_set:
            raise ConfigurationError(
                f"agent {self.name!r} received a value from non-neighbour {message.sender!r}"
            )
        self.neighbour_values[message.sender] = message.content

    def signal(self) -> List[Message]:
        """Record the current value as signalled and address it to every neighbour."""
        self.last_signal_value = self.value
        self.has_signalled = True
        return [Message(sender=self.name, recipient=n, content=self.value) for n in self.neighbours]

    def step(self) -> Any:
        """Run one decision step and adopt its result.

        Returns the new value, which may equal the old one.
        """
        new_value = self.collect()
        if new_value != self.value:
            self.log(f"Changing value from {self.value} to {new_value} (utility {self.utility})")
            self.value = new_value
        return self.value

    def score_signal(self) -> float:
        """Return 1.0 if the agent should broadcast its value, 0.0 otherwise.

        A value that differs from the last signalled one (or an agent
        that has never signalled) always signals.
        """
        if not self.has_signalled or self.value != self.last_signal_value:
            return 1.0
        return 0.0 if self.can_stop_signalling() else 1.0

    # ------------------------------------------------------------------
    # algorithm hooks
    # ------------------------------------------------------------------

    def collect(self) -> Any:
        """Compute the value the agent wants to hold after this round.

        Must be implemented by subclasses.  Implementations read only
        their own state and ``neighbour_values`` (through
        :meth:`refresh_configuration`) and never mutate the latter.
        """
        raise NotImplementedError

    def can_stop_signalling(self) -> bool:
        """Algorithm-specific part of the local convergence rule.

        Only consulted when the value is unchanged since the last signal.
        """
        raise NotImplementedError

    # ------------------------------------------------------------------
    # utility evaluation
    # ------------------------------------------------------------------

    def refresh_configuration(self) -> None:
        """Snapshot ``neighbour_values`` for this invocation."""
        if len(self.neighbour_values) != len(self.neighbours):
            missing = [n for n in self.neighbours if n not in self.neighbour_values]
            raise ConfigurationError(
                f"agent {self.name!r} has no value for neighbours {missing}"
            )
        self._config.clear()
        self._config.update(self.neighbour_values)

    def compute_utility(self, own_value: Any) -> float:
        """Sum of incident constraint utilities with this agent set to ``own_value``."""
        config = self._config
        config[self.name] = own_value
        total = 0.0
        for constraint in self.constraints:
            total += constraint.utility(config)
        return total

    def compute_domain_utilities(self) -> List[float]:
        """Utility of every domain value, in domain order."""
        return [self.compute_utility(v) for v in self.domain]

    def all_constraints_satisfied(self, utility: Optional[float] = None) -> bool:
        """True when ``utility`` (default: the current one) reaches the local maximum."""
        if utility is None:
            utility = self.utility
        return utility >= self.max_local_utility

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, value={self.value!r}, utility={self.utility})"
