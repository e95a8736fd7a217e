"""DCOP problem definitions.

This package contains the constraint abstraction and the problems built
from it.  Each problem defines a set of variables (one per agent), the
domain of possible values for each variable, and the constraints that
couple neighbouring variables.

The framework ships the ``GraphColoring`` problem together with a few
instance generators, but any set of :class:`Constraint` objects can be
wrapped in a :class:`ConstraintProblem` and solved the same way.
"""

from .constraints import (
    ConfigurationError,
    Constraint,
    EqualConstraint,
    NotEqualConstraint,
    TableConstraint,
)
from .dcop import ConstraintProblem
from .graph_coloring import (
    GraphColoring,
    create_example_graph,
    create_grid_graph,
    create_random_graph,
)

__all__ = [
    "ConfigurationError",
    "Constraint",
    "EqualConstraint",
    "NotEqualConstraint",
    "TableConstraint",
    "ConstraintProblem",
    "GraphColoring",
    "create_example_graph",
    "create_grid_graph",
    "create_random_graph",
]
