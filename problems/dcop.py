"""Generic DCOP problem container.

A :class:`ConstraintProblem` stores the variables (one per agent),
their domains and the shared list of constraints.  It does not hold
any agent state; it merely answers structural questions (which
constraints touch a variable, who are its neighbours) and evaluates
complete assignments.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .constraints import ConfigurationError, Constraint


class ConstraintProblem:
    """A distributed constraint optimisation problem.

    Parameters
    ----------
    nodes : iterable of hashable
        Variable (agent) identifiers.
    constraints : iterable of Constraint
        Constraints over those variables.  Every variable a constraint
        names must appear in ``nodes``.
    domain : iterable
        Default domain shared by every variable.
    domains : dict, optional
        Per-variable domains overriding ``domain``.
    """

    def __init__(
        self,
        nodes: Iterable[Any],
        constraints: Iterable[Constraint],
        domain: Iterable[Any],
        domains: Optional[Dict[Any, Iterable[Any]]] = None,
    ) -> None:
        self.nodes: List[Any] = list(nodes)
        if len(set(self.nodes)) != len(self.nodes):
            raise ConfigurationError("duplicate node identifiers")
        self.domain: List[Any] = list(domain)
        self.domains: Dict[Any, List[Any]] = {
            node: list(domains[node]) if domains and node in domains else list(self.domain)
            for node in self.nodes
        }
        for node, values in self.domains.items():
            if not values:
                raise ConfigurationError(f"empty domain for variable {node}")
        self.constraints: List[Constraint] = list(constraints)
        known = set(self.nodes)
        # variable -> incident constraints, built once
        self._incident: Dict[Any, List[Constraint]] = {node: [] for node in self.nodes}
        for constraint in self.constraints:
            for variable in constraint.variables:
                if variable not in known:
                    raise ConfigurationError(
                        f"constraint {constraint!r} references unknown variable {variable!r}"
                    )
                self._incident[variable].append(constraint)

    def domain_of(self, node: Any) -> List[Any]:
        return list(self.domains[node])

    def constraints_for(self, node: Any) -> List[Constraint]:
        """Return the constraints in which ``node`` participates."""
        return list(self._incident[node])

    def get_neighbors(self, node: Any) -> List[Any]:
        """Return the nodes sharing at least one constraint with ``node``."""
        neighbours: List[Any] = []
        for constraint in self._incident[node]:
            for variable in constraint.variables:
                if variable != node and variable not in neighbours:
                    neighbours.append(variable)
        return neighbours

    def total_utility(self, assignment: Mapping[Any, Any]) -> float:
        """Sum of all constraint utilities for a complete assignment."""
        return sum(c.utility(assignment) for c in self.constraints)

    def max_total_utility(self) -> float:
        return sum(c.max_utility for c in self.constraints)

    def unsatisfied_constraints(self, assignment: Mapping[Any, Any]) -> List[Constraint]:
        return [c for c in self.constraints if not c.is_satisfied(assignment)]

    def is_valid(self, assignment: Mapping[Any, Any]) -> bool:
        """Return True if every constraint is satisfied."""
        return all(c.is_satisfied(assignment) for c in self.constraints)
