"""Execution substrate for agent graphs.

The engine package wires agents into a graph, delivers their value
messages, drives synchronous or asynchronous execution, and evaluates
global aggregates (total utility, Nash equilibrium) to decide when a
run may stop.  The agents themselves know nothing about it beyond the
``receive`` / ``step`` / ``score_signal`` / ``signal`` interface.
"""

from .aggregation import AggregationOperation, GlobalUtility, NashEquilibrium
from .termination import (
    GlobalTerminationCondition,
    NashEquilibriumTermination,
    UtilityGapTermination,
)
from .execution import (
    ComputationGraph,
    ExecutionConfiguration,
    ExecutionMode,
    ExecutionStatistics,
    TerminationReason,
)

__all__ = [
    "AggregationOperation",
    "GlobalUtility",
    "NashEquilibrium",
    "GlobalTerminationCondition",
    "NashEquilibriumTermination",
    "UtilityGapTermination",
    "ComputationGraph",
    "ExecutionConfiguration",
    "ExecutionMode",
    "ExecutionStatistics",
    "TerminationReason",
]
