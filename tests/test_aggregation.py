"""
Tests for the global aggregation operations and termination conditions.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agents.dsa_agent import DSAAgent
from engine.aggregation import GlobalUtility, NashEquilibrium
from engine.termination import (
    GlobalTerminationCondition,
    NashEquilibriumTermination,
    UtilityGapTermination,
)
from problems.constraints import NotEqualConstraint


def make_population(utilities, better_flags):
    agents = []
    for i, (utility, better) in enumerate(zip(utilities, better_flags)):
        constraints = [NotEqualConstraint(i, f"n{i}{j}") for j in range(2)]
        agent = DSAAgent(i, constraints, [0, 1], initial_value=0, seed=i)
        agent.utility = utility
        agent.exists_better_state_utility = better
        agents.append(agent)
    return agents


def test_utility_aggregate_is_stable_for_frozen_population():
    agents = make_population([2.0, 1.0, 1.5], [False, True, False])
    op = GlobalUtility()
    first = op(agents)
    assert first == (6, 4.5)
    assert op(agents) == first
    assert op(reversed(agents)) == first


def test_utility_aggregate_is_associative():
    op = GlobalUtility()
    a, b, c = (2, 1.0), (3, 2.5), (1, 0.0)
    assert op.aggregate(op.aggregate(a, b), c) == op.aggregate(a, op.aggregate(b, c))
    assert op.reduce([]) == (0, 0.0)
    with pytest.raises(TypeError):
        op.extract(object())


def test_nash_aggregate():
    op = NashEquilibrium()
    assert op(make_population([2.0, 2.0], [False, False])) is True
    assert op(make_population([2.0, 1.0], [False, True])) is False
    assert op([]) is True
    with pytest.raises(TypeError):
        op.extract(object())


def test_utility_gap_termination_records_trajectory():
    condition = UtilityGapTermination(epsilon=0.001, aggregation_interval=1)
    condition.start()
    assert not condition.check(make_population([1.0, 2.0], [True, False]))
    assert condition.trajectory[0][0] == pytest.approx(1.0)
    assert condition.check(make_population([2.0, 2.0], [False, False]))
    assert len(condition.trajectory) == 1
    condition.start()
    assert condition.trajectory == []


def test_nash_termination():
    condition = NashEquilibriumTermination()
    assert condition.aggregation_interval == 5
    assert condition.check(make_population([1.0], [False]))
    assert not condition.check(make_population([1.0], [True]))


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        GlobalTerminationCondition(GlobalUtility(), aggregation_interval=0)
