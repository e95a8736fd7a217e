"""Graph colouring DCOP implementation.

This module defines the classic distributed graph colouring problem:
each agent controls a node in an undirected graph and must assign a
colour to its node such that no two adjacent nodes share the same
colour.  Every edge becomes a :class:`~problems.constraints.NotEqualConstraint`
worth 1.0 when the endpoints differ, so the optimum total utility
equals the number of edges.

The problem object itself does not maintain any agent state; it merely
stores the structure and evaluates assignments.

Example usage, with one clash on edge (2, 3):

>>> problem = GraphColoring([1, 2, 3], [(1, 2), (2, 3)], [0, 1])
>>> problem.evaluate_assignment({1: 0, 2: 1, 3: 1})
1.0

Generators for the instances used by the runners and tests are
provided: :func:`create_example_graph` (the six-node instance used
throughout the DSA/DSAN/WRMI literature demos), :func:`create_grid_graph`
and :func:`create_random_graph` (both built with ``networkx``).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

import networkx as nx

from .constraints import NotEqualConstraint
from .dcop import ConstraintProblem


class GraphColoring(ConstraintProblem):
    """A distributed graph colouring problem.

    Parameters
    ----------
    nodes : list of node identifiers
        Each node corresponds to an agent.
    edges : list of (node, node) tuples
        Undirected edges connecting nodes that must not share the same
        colour.  Self loops and duplicate edges (in either orientation)
        are ignored.
    domain : iterable of hashable values
        The colours available to every node.
    """

    def __init__(
        self,
        nodes: Iterable[Any],
        edges: Iterable[Tuple[Any, Any]],
        domain: Iterable[Any],
    ) -> None:
        nodes = list(nodes)
        self.edges: List[Tuple[Any, Any]] = []
        seen = set()
        for u, v in edges:
            if u == v or (u, v) in seen or (v, u) in seen:
                continue
            seen.add((u, v))
            self.edges.append((u, v))
        constraints = [NotEqualConstraint(u, v) for u, v in self.edges]
        super().__init__(nodes, constraints, domain)

    @classmethod
    def from_networkx(cls, graph: nx.Graph, domain: Iterable[Any]) -> "GraphColoring":
        return cls(list(graph.nodes), list(graph.edges), domain)

    def to_networkx(self) -> nx.Graph:
        graph = nx.Graph()
        graph.add_nodes_from(self.nodes)
        graph.add_edges_from(self.edges)
        return graph

    def evaluate_assignment(self, assignment: Dict[Any, Any]) -> float:
        """Return the number of colour clashes in ``assignment``.

        Nodes missing from the assignment are treated as uncoloured and
        never clash.  Lower is better; a proper colouring scores zero.
        """
        penalty = 0.0
        for u, v in self.edges:
            c_u = assignment.get(u)
            c_v = assignment.get(v)
            if c_u is None or c_v is None:
                continue
            if c_u == c_v:
                penalty += 1.0
        return penalty

    def conflicts(self, assignment: Dict[Any, Any]) -> List[Tuple[Any, Any]]:
        """Return the edges whose endpoints are both coloured and equal."""
        clashes = []
        for u, v in self.edges:
            c_u = assignment.get(u)
            if c_u is not None and c_u == assignment.get(v):
                clashes.append((u, v))
        return clashes


def create_example_graph() -> GraphColoring:
    """Return the six-agent, three-colour demo instance.

    Constraints: 1≠2, 1≠3, 3≠2, 3≠4, 5≠4, 5≠3, 5≠6, 6≠2 over the
    domain {0, 1, 2}.  A proper 3-colouring exists.
    """
    edges = [(1, 2), (1, 3), (3, 2), (3, 4), (5, 4), (5, 3), (5, 6), (6, 2)]
    return GraphColoring(range(1, 7), edges, [0, 1, 2])


def create_grid_graph(width: int, height: Optional[int] = None, number_of_colors: int = 4) -> GraphColoring:
    """Generate a grid colouring problem.

    Nodes are numbered row by row (``row * width + column``) and each
    node is connected to its horizontal and vertical neighbours.

    Parameters
    ----------
    width : int
        Number of columns.
    height : int, optional
        Number of rows; defaults to ``width``.
    number_of_colors : int
        Size of the shared colour domain ``{0, ..., number_of_colors - 1}``.
    """
    if height is None:
        height = width
    if width < 1 or height < 1:
        raise ValueError("grid dimensions must be positive")
    if number_of_colors < 1:
        raise ValueError("number_of_colors must be positive")
    grid = nx.grid_2d_graph(height, width)
    mapping = {(row, col): row * width + col for row, col in grid.nodes}
    grid = nx.relabel_nodes(grid, mapping)
    nodes = sorted(grid.nodes)
    edges = sorted(tuple(sorted(e)) for e in grid.edges)
    return GraphColoring(nodes, edges, range(number_of_colors))


def create_random_graph(
    num_nodes: int,
    edge_probability: float,
    number_of_colors: int = 3,
    seed: Optional[int] = None,
) -> GraphColoring:
    """Generate an Erdős–Rényi colouring problem with ``networkx``."""
    if not 0.0 <= edge_probability <= 1.0:
        raise ValueError("edge_probability must lie in [0, 1]")
    graph = nx.gnp_random_graph(num_nodes, edge_probability, seed=seed)
    return GraphColoring(sorted(graph.nodes), sorted(graph.edges), range(number_of_colors))
