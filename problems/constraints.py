"""Constraint definitions.

A constraint couples an ordered list of variables (agent identifiers)
and maps an assignment of those variables to a real-valued utility.
Hard constraints score 1.0 when satisfied and 0.0 otherwise, but the
abstraction supports arbitrary utilities through
:class:`TableConstraint`.

Constraints are immutable once constructed and are shared read-only by
every agent that participates in them, so :meth:`Constraint.utility`
must never modify its argument or the constraint itself.

Example usage:

>>> c = NotEqualConstraint(1, 2)
>>> c.utility({1: 0, 2: 1})
1.0
>>> c.utility({1: 0, 2: 0})
0.0
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Tuple


class ConfigurationError(ValueError):
    """Raised when a problem or agent graph is wired inconsistently.

    Covers constraints that reference unknown agents, agents attached
    to constraints they do not participate in, empty domains and
    out-of-range algorithm parameters.  These are caller mistakes and
    are always raised before the first round is executed.
    """


class Constraint:
    """Abstract constraint over an ordered tuple of variables.

    Parameters
    ----------
    variables : iterable of hashable
        Identifiers of the participating agents, in the order expected
        by the utility function.  Identifiers must be distinct.
    max_utility : float, default 1.0
        Best utility this constraint can contribute.  An assignment is
        considered to *satisfy* the constraint when it reaches this
        value.
    """

    def __init__(self, variables: Iterable[Any], max_utility: float = 1.0) -> None:
        variables = tuple(variables)
        if not variables:
            raise ConfigurationError("a constraint needs at least one variable")
        if len(set(variables)) != len(variables):
            raise ConfigurationError(f"duplicate variables in constraint: {variables}")
        self._variables = variables
        self._max_utility = float(max_utility)

    @property
    def variables(self) -> Tuple[Any, ...]:
        """Participating variable identifiers."""
        return self._variables

    @property
    def max_utility(self) -> float:
        return self._max_utility

    def involves(self, variable: Any) -> bool:
        return variable in self._variables

    def utility(self, assignment: Mapping[Any, Any]) -> float:
        """Return the utility of ``assignment`` restricted to this constraint.

        ``assignment`` must contain every variable of the constraint;
        a missing identifier raises ``KeyError``.
        """
        raise NotImplementedError

    def is_satisfied(self, assignment: Mapping[Any, Any]) -> bool:
        return self.utility(assignment) >= self._max_utility

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self._variables}"


class NotEqualConstraint(Constraint):
    """Binary constraint that is satisfied when both variables differ.

    This is the graph colouring edge constraint, written
    ``Variable(a) != Variable(b)`` in the classic DCOP notation.
    """

    def __init__(self, first: Any, second: Any, reward: float = 1.0) -> None:
        super().__init__((first, second), max_utility=reward)
        self.reward = float(reward)

    def utility(self, assignment: Mapping[Any, Any]) -> float:
        first, second = self._variables
        return self.reward if assignment[first] != assignment[second] else 0.0


class EqualConstraint(Constraint):
    """Binary constraint that is satisfied when both variables agree."""

    def __init__(self, first: Any, second: Any, reward: float = 1.0) -> None:
        super().__init__((first, second), max_utility=reward)
        self.reward = float(reward)

    def utility(self, assignment: Mapping[Any, Any]) -> float:
        first, second = self._variables
        return self.reward if assignment[first] == assignment[second] else 0.0


class TableConstraint(Constraint):
    """Constraint whose utility is looked up in an explicit table.

    Parameters
    ----------
    variables : iterable of hashable
        Participating variables.
    table : dict
        Mapping from a tuple of values (one per variable, in the order
        of ``variables``) to a utility.  Combinations that are absent
        score ``default``.
    default : float, default 0.0
        Utility of combinations not listed in ``table``.

    Examples
    --------
    >>> prefer_low = TableConstraint(["x"], {(0,): 2.0, (1,): 0.5})
    >>> prefer_low.utility({"x": 0})
    2.0
    """

    def __init__(
        self,
        variables: Iterable[Any],
        table: Dict[Tuple[Any, ...], float],
        default: float = 0.0,
    ) -> None:
        variables = tuple(variables)
        self._table = {tuple(k): float(v) for k, v in table.items()}
        for key in self._table:
            if len(key) != len(variables):
                raise ConfigurationError(
                    f"table entry {key} does not match variables {variables}"
                )
        self._default = float(default)
        best = max(self._table.values(), default=self._default)
        super().__init__(variables, max_utility=max(best, self._default))

    def utility(self, assignment: Mapping[Any, Any]) -> float:
        key = tuple(assignment[v] for v in self._variables)
        return self._table.get(key, self._default)
