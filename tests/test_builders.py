"""
Tests for the agent builders and the algorithm factory.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agents import (
    ALGORITHMS,
    DSAAgent,
    DSANAgent,
    DSAVariant,
    WRMIAgent,
    build_agent,
    constant_schedule,
    create_builder,
)
from problems import ConfigurationError, NotEqualConstraint


CONSTRAINTS = [NotEqualConstraint("x", "y"), NotEqualConstraint("x", "z")]


def test_builder_names():
    assert str(create_builder("wrmi")) == "WRMI"
    assert str(create_builder("dsa-c", description="fast")) == "DSA-C - fast"
    assert str(create_builder("dsa")) == "DSA-A"
    assert str(create_builder("DSAN")) == "DSAN"


def test_every_algorithm_has_a_builder():
    for algorithm in ALGORITHMS:
        agent = create_builder(algorithm, seed=0).build("x", CONSTRAINTS, [0, 1, 2])
        assert agent.value in [0, 1, 2]
        assert agent.neighbours == ["y", "z"]


def test_unknown_algorithm():
    with pytest.raises(ConfigurationError):
        create_builder("mgm")
    with pytest.raises(ConfigurationError):
        create_builder("dsa-z")


def test_build_agent_types():
    assert isinstance(build_agent("wrmi", "x", CONSTRAINTS, [0, 1]), WRMIAgent)
    dsa = build_agent("dsa-e", "x", CONSTRAINTS, [0, 1], inertia=0.2)
    assert isinstance(dsa, DSAAgent)
    assert dsa.variant is DSAVariant.E
    assert dsa.inertia == 0.2
    dsan = build_agent("dsan", "x", CONSTRAINTS, [0, 1], exploration_probability=constant_schedule(0.3))
    assert isinstance(dsan, DSANAgent)
    assert dsan.exploration_probability(1, -1.0) == 0.3
    assert dsan.max_negative_delta == -2


def test_seeded_builders_are_reproducible():
    def initial_values(seed):
        builder = create_builder("dsa-a", seed=seed)
        return [builder(n, [], list(range(10))).value for n in range(20)]

    assert initial_values(4) == initial_values(4)
    assert initial_values(4) != initial_values(5)


def test_initial_value_respected_and_checked():
    builder = create_builder("wrmi", seed=1)
    assert builder.build("x", CONSTRAINTS, [0, 1, 2], initial_value=2).value == 2
    with pytest.raises(ConfigurationError):
        builder.build("x", CONSTRAINTS, [0, 1, 2], initial_value=7)


def test_bad_agent_inputs():
    with pytest.raises(ConfigurationError):
        build_agent("dsa-a", "w", CONSTRAINTS, [0, 1])
    with pytest.raises(ConfigurationError):
        build_agent("dsa-a", "x", CONSTRAINTS, [])
    with pytest.raises(ConfigurationError):
        build_agent("dsa-a", "x", CONSTRAINTS, [0, 0, 1])
