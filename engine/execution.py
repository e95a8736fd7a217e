"""Reference execution substrate.

:class:`ComputationGraph` instantiates one agent per variable, wires a
message edge between every pair of agents that share a constraint, and
drives them under one of two disciplines:

Synchronous
    Each step is a signal phase followed by a collect phase.  Every
    agent whose ``score_signal()`` exceeds the threshold sends its value
    to all neighbours; then every agent that signalled or received a
    value updates exactly once.  Values written in step *n* are only
    observed in step *n + 1*.

Asynchronous
    After an initial exchange of starting values, agents are picked one
    at a time in random order from a pending set.  A picked agent
    updates and, if its score exceeds the threshold, immediately sends
    its value, which puts the recipients back into the pending set.
    There is no round boundary; a neighbour's value is whatever was
    delivered last.

Both loops stop when no agent wants to signal (convergence), when a
global termination condition holds (in synchronous mode it is only
polled after a round in which no value changed), or when a step or
time limit is reached.  Agents are never told that the run has stopped.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from agents.base_agent import BaseAgent, Message
from agents.builders import AgentBuilder
from problems.constraints import ConfigurationError
from problems.dcop import ConstraintProblem
from .aggregation import AggregationOperation
from .termination import GlobalTerminationCondition


class ExecutionMode(str, Enum):
    SYNCHRONOUS = "synchronous"
    ASYNCHRONOUS = "asynchronous"


class TerminationReason(str, Enum):
    CONVERGED = "converged"
    GLOBAL_CONDITION = "global_condition"
    STEPS_LIMIT = "steps_limit"
    TIME_LIMIT = "time_limit"


@dataclass
class ExecutionConfiguration:
    """How the substrate should run the agents.

    Attributes
    ----------
    execution_mode : ExecutionMode
        Synchronous round barrier or asynchronous free-running.
    signal_threshold : float
        Agents signal when their score is strictly above this value.
    steps_limit : int, optional
        Maximum number of synchronous steps, or of collect operations
        in asynchronous mode.
    time_limit : float, optional
        Wall-clock budget in seconds.
    global_termination_condition : GlobalTerminationCondition, optional
        Polled every ``aggregation_interval`` steps.  In synchronous mode a
        due poll waits for the first step in which no agent changed value.
    record_history : bool
        Keep a copy of the full assignment after every step (synchronous)
        or collect operation (asynchronous).
    """

    execution_mode: ExecutionMode = ExecutionMode.SYNCHRONOUS
    signal_threshold: float = 0.01
    steps_limit: Optional[int] = None
    time_limit: Optional[float] = None
    global_termination_condition: Optional[GlobalTerminationCondition] = None
    record_history: bool = False

    def __post_init__(self) -> None:
        self.execution_mode = ExecutionMode(self.execution_mode)
        if self.steps_limit is not None and self.steps_limit < 0:
            raise ConfigurationError("steps_limit must not be negative")
        if self.time_limit is not None and self.time_limit < 0:
            raise ConfigurationError("time_limit must not be negative")


@dataclass
class ExecutionStatistics:
    execution_mode: ExecutionMode
    termination_reason: TerminationReason
    steps: int = 0
    collect_operations: int = 0
    signal_operations: int = 0
    computation_time: float = 0.0
    final_assignment: Dict[Any, Any] = field(default_factory=dict)
    assignment_history: List[Dict[Any, Any]] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"{self.execution_mode.value} run: {self.termination_reason.value} after "
            f"{self.steps} steps ({self.collect_operations} collects, "
            f"{self.signal_operations} signals, {self.computation_time:.3f}s)"
        )


class ComputationGraph:
    """Agent graph plus the execution loops that drive it.

    Parameters
    ----------
    seed : optional
        Seed of the scheduler's own generator, used only to order
        asynchronous updates.
    """

    def __init__(self, seed: Optional[Any] = None) -> None:
        self.agents: Dict[Any, BaseAgent] = {}
        self.rng = random.Random(seed)

    @classmethod
    def from_problem(
        cls,
        problem: ConstraintProblem,
        builder: AgentBuilder,
        initial_values: Optional[Dict[Any, Any]] = None,
        seed: Optional[Any] = None,
    ) -> "ComputationGraph":
        """Build one agent per problem variable with ``builder``."""
        graph = cls(seed=seed)
        initial_values = initial_values or {}
        for node in problem.nodes:
            graph.add_agent(
                builder.build(
                    node,
                    problem.constraints_for(node),
                    problem.domain_of(node),
                    initial_values.get(node),
                )
            )
        graph.validate()
        return graph

    def add_agent(self, agent: BaseAgent) -> None:
        if agent.name in self.agents:
            raise ConfigurationError(f"duplicate agent {agent.name!r}")
        self.agents[agent.name] = agent

    def add_agents(self, agents: Iterable[BaseAgent]) -> None:
        for agent in agents:
            self.add_agent(agent)

    def validate(self) -> None:
        """Reject constraints that name agents missing from the graph."""
        for agent in self.agents.values():
            for neighbour in agent.neighbours:
                if neighbour not in self.agents:
                    raise ConfigurationError(
                        f"agent {agent.name!r} is constrained with unknown agent {neighbour!r}"
                    )

    def assignment(self) -> Dict[Any, Any]:
        return {name: agent.value for name, agent in self.agents.items()}

    def aggregate(self, operation: AggregationOperation) -> Any:
        return operation(self.agents.values())

    def _deliver(self, messages: List[Message]) -> None:
        for message in messages:
            self.agents[message.recipient].receive(message)

    # ------------------------------------------------------------------

    def execute(self, config: Optional[ExecutionConfiguration] = None) -> ExecutionStatistics:
        """Run the agents until convergence, a global condition or a limit."""
        config = config or ExecutionConfiguration()
        self.validate()
        condition = config.global_termination_condition
        if condition is not None:
            condition.start()
        started = time.perf_counter()
        if config.execution_mode is ExecutionMode.SYNCHRONOUS:
            stats = self._execute_synchronous(config, started)
        else:
            stats = self._execute_asynchronous(config, started)
        stats.computation_time = time.perf_counter() - started
        stats.final_assignment = self.assignment()
        return stats

    def _limit_reached(self, config: ExecutionConfiguration, count: int, started: float) -> Optional[TerminationReason]:
        if config.steps_limit is not None and count >= config.steps_limit:
            return TerminationReason.STEPS_LIMIT
        if config.time_limit is not None and time.perf_counter() - started >= config.time_limit:
            return TerminationReason.TIME_LIMIT
        return None

    def _condition_met(self, config: ExecutionConfiguration, count: int) -> bool:
        condition = config.global_termination_condition
        if condition is None or count % condition.aggregation_interval != 0:
            return False
        return condition.check(self.agents.values())

    def _execute_synchronous(self, config: ExecutionConfiguration, started: float) -> ExecutionStatistics:
        stats = ExecutionStatistics(config.execution_mode, TerminationReason.CONVERGED)
        threshold = config.signal_threshold
        # set when a poll falls due; cleared once the condition is checked
        poll_due = False
        while True:
            reason = self._limit_reached(config, stats.steps, started)
            if reason is not None:
                stats.termination_reason = reason
                break
            # signal phase: nobody collects until every value is delivered
            active = set()
            for agent in self.agents.values():
                if agent.score_signal() > threshold:
                    messages = agent.signal()
                    self._deliver(messages)
                    stats.signal_operations += len(messages)
                    active.add(agent.name)
                    active.update(m.recipient for m in messages)
            if not active:
                stats.termination_reason = TerminationReason.CONVERGED
                break
            # collect phase
            changed = False
            for name, agent in self.agents.items():
                if name in active:
                    old_value = agent.value
                    if agent.step() != old_value:
                        changed = True
                    stats.collect_operations += 1
            stats.steps += 1
            if config.record_history:
                stats.assignment_history.append(self.assignment())
            condition = config.global_termination_condition
            if condition is not None and stats.steps % condition.aggregation_interval == 0:
                poll_due = True
            # utilities were computed against values delivered before this
            # round, so they only match the assignment after a quiet round
            if poll_due and not changed:
                poll_due = False
                if condition.check(self.agents.values()):
                    stats.termination_reason = TerminationReason.GLOBAL_CONDITION
                    break
        return stats

    def _execute_asynchronous(self, config: ExecutionConfiguration, started: float) -> ExecutionStatistics:
        stats = ExecutionStatistics(config.execution_mode, TerminationReason.CONVERGED)
        threshold = config.signal_threshold
        for agent in self.agents.values():
            messages = agent.signal()
            self._deliver(messages)
            stats.signal_operations += len(messages)
        pending = list(self.agents)
        is_pending = set(pending)
        while pending:
            reason = self._limit_reached(config, stats.collect_operations, started)
            if reason is not None:
                stats.termination_reason = reason
                break
            index = self.rng.randrange(len(pending))
            pending[index], pending[-1] = pending[-1], pending[index]
            name = pending.pop()
            is_pending.discard(name)
            agent = self.agents[name]
            agent.step()
            stats.collect_operations += 1
            stats.steps = stats.collect_operations
            if agent.score_signal() > threshold:
                messages = agent.signal()
                self._deliver(messages)
                stats.signal_operations += len(messages)
                for target in [name] + [m.recipient for m in messages]:
                    if target not in is_pending:
                        is_pending.add(target)
                        pending.append(target)
            if config.record_history:
                stats.assignment_history.append(self.assignment())
            if self._condition_met(config, stats.collect_operations):
                stats.termination_reason = TerminationReason.GLOBAL_CONDITION
                break
        return stats
