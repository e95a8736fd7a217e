"""Simple command-line simulation for the DCOP local-search agents.

This script builds a colouring problem, instantiates one agent per node
with the chosen algorithm, and runs the agent graph synchronously or
asynchronously until it converges, a global termination condition
holds, or a limit is reached.

Usage examples
--------------

Run WRMI on the six-node demo graph with synchronous rounds:

    python run_simulation.py --algorithm wrmi --steps 1000

Run DSA-B asynchronously on a 20x20 grid with 4 colours and stop as
soon as every constraint is satisfied:

    python run_simulation.py --problem grid --size 20 --colors 4 \\
        --algorithm dsa-b --mode asynchronous --terminate-on utility

Run DSAN with a slower annealing schedule:

    python run_simulation.py --algorithm dsan --temperature-constant 5000
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, Optional

from agents import ALGORITHMS, create_builder, exponential_schedule
from engine import (
    ComputationGraph,
    ExecutionConfiguration,
    ExecutionMode,
    ExecutionStatistics,
    GlobalUtility,
    NashEquilibrium,
    NashEquilibriumTermination,
    UtilityGapTermination,
)
from problems import (
    GraphColoring,
    create_example_graph,
    create_grid_graph,
    create_random_graph,
)


def build_problem(
    kind: str,
    size: int = 10,
    colors: int = 3,
    edge_probability: float = 0.1,
    seed: Optional[int] = None,
) -> GraphColoring:
    """Factory for the supported problem instances ("example", "grid", "random")."""
    kind = kind.lower()
    if kind == "example":
        return create_example_graph()
    if kind == "grid":
        return create_grid_graph(size, size, number_of_colors=colors)
    if kind == "random":
        return create_random_graph(size, edge_probability, number_of_colors=colors, seed=seed)
    raise ValueError(f"Unknown problem {kind}")


def build_termination(kind: str, interval: int):
    kind = kind.lower()
    if kind == "none":
        return None
    if kind == "utility":
        return UtilityGapTermination(aggregation_interval=interval)
    if kind == "nash":
        return NashEquilibriumTermination(aggregation_interval=interval)
    raise ValueError(f"Unknown termination condition {kind}")


def run_simulation(
    problem: GraphColoring,
    algorithm: str,
    mode: str = "synchronous",
    steps: Optional[int] = 1000,
    time_limit: Optional[float] = None,
    terminate_on: str = "none",
    aggregation_interval: int = 5,
    seed: Optional[int] = None,
    verbose: bool = False,
    **params: Any,
) -> Dict[str, Any]:
    """Run one algorithm on ``problem`` and report the outcome.

    Returns a dictionary with the execution statistics, the final
    assignment, the number of clashes and the Nash-equilibrium flag.
    """
    builder = create_builder(algorithm, seed=seed, **params)
    graph = ComputationGraph.from_problem(problem, builder, seed=seed)
    config = ExecutionConfiguration(
        execution_mode=ExecutionMode(mode),
        steps_limit=steps,
        time_limit=time_limit,
        global_termination_condition=build_termination(terminate_on, aggregation_interval),
        record_history=verbose,
    )
    stats: ExecutionStatistics = graph.execute(config)
    if verbose:
        for step, assignments in enumerate(stats.assignment_history, start=1):
            print(f"\n=== Iteration {step} ===")
            print(f"Assignments: {assignments}")
            print(f"Global penalty: {problem.evaluate_assignment(assignments)}")
    count, utility = graph.aggregate(GlobalUtility())
    return {
        "algorithm": str(builder),
        "statistics": stats,
        "assignment": stats.final_assignment,
        "penalty": problem.evaluate_assignment(stats.final_assignment),
        "utility_gap": count - utility,
        "nash_equilibrium": graph.aggregate(NashEquilibrium()),
        "termination": config.global_termination_condition,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--problem", default="example", choices=["example", "grid", "random"])
    parser.add_argument("--size", type=int, default=10, help="Grid side length or random graph node count")
    parser.add_argument("--colors", type=int, default=3, help="Number of colours")
    parser.add_argument("--edge-probability", type=float, default=0.1, help="Random graph edge probability")
    parser.add_argument("--algorithm", default="wrmi", choices=ALGORITHMS)
    parser.add_argument("--mode", default="synchronous", choices=[m.value for m in ExecutionMode])
    parser.add_argument("--steps", type=int, default=1000, help="Step limit (collect operations when asynchronous)")
    parser.add_argument("--time-limit", type=float, default=None, help="Time limit in seconds")
    parser.add_argument("--terminate-on", default="none", choices=["none", "utility", "nash"])
    parser.add_argument("--interval", type=int, default=5, help="Aggregation interval")
    parser.add_argument("--inertia", type=float, default=0.5, help="Inertia for WRMI and DSA")
    parser.add_argument("--fading-memory", type=float, default=0.03, help="WRMI fading memory")
    parser.add_argument("--temperature-constant", type=float, default=1000.0, help="DSAN schedule constant")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true", help="Print every iteration")
    args = parser.parse_args()

    params: Dict[str, Any] = {}
    if args.algorithm == "wrmi":
        params.update(inertia=args.inertia, fading_memory=args.fading_memory)
    elif args.algorithm.startswith("dsa-"):
        params.update(inertia=args.inertia)
    else:
        params.update(exploration_probability=exponential_schedule(args.temperature_constant))

    problem = build_problem(args.problem, args.size, args.colors, args.edge_probability, args.seed)
    print(f"[run_simulation] {len(problem.nodes)} agents, {len(problem.edges)} constraints")
    result = run_simulation(
        problem,
        args.algorithm,
        mode=args.mode,
        steps=args.steps,
        time_limit=args.time_limit,
        terminate_on=args.terminate_on,
        aggregation_interval=args.interval,
        seed=args.seed,
        verbose=args.verbose,
        **params,
    )
    print(f"[run_simulation] {result['algorithm']}: {result['statistics']}")
    print(f"Final assignment: {result['assignment']}")
    print(f"Global penalty: {result['penalty']}")
    print(f"Nash equilibrium: {result['nash_equilibrium']}")


if __name__ == "__main__":  # pragma: no cover
    main()
