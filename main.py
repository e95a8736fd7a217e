"""
Simple PyCharm-friendly entry point for comparing DCOP algorithms.

You can tweak the CONFIG dict below instead of passing terminal args.

Every configured algorithm is run on the same grid colouring problem
under each configured execution mode with a utility-gap termination
condition.  The gap trajectory of every run, a summary and the agent
logs are written to ``output_dir`` together with a convergence plot.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List

from agents import create_builder, thresholded_schedule
from engine import (
    ComputationGraph,
    ExecutionConfiguration,
    ExecutionMode,
    NashEquilibrium,
    TerminationReason,
    UtilityGapTermination,
)
from run_simulation import build_problem


CONFIG: Dict[str, Any] = {
    "problem": "grid",
    "size": 10,
    "colors": 4,
    "algorithms": ["wrmi", "dsa-a", "dsa-b", "dsan"],
    "modes": ["synchronous", "asynchronous"],
    "inertia": 0.5,
    "steps_limit": {"synchronous": 1000, "asynchronous": 100000},
    "time_limit": 60.0,
    "aggregation_interval": 5,
    "repetitions": 1,
    "seed": 0,
    "output_dir": "./outputs",
}


def algorithm_params(algorithm: str, config: Dict[str, Any]) -> Dict[str, Any]:
    if algorithm == "dsan":
        return {"exploration_probability": thresholded_schedule(), "description": "thresholded"}
    return {"inertia": config["inertia"]}


def run_comparison(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Run every (algorithm, mode, repetition) combination in ``config``.

    Returns one result row per run.  Files written to
    ``config["output_dir"]``:

    - ``iteration_summary.txt``: one line per run.
    - ``<algorithm>_<mode>_<rep>_trajectory.txt``: utility gap and
      elapsed time at every aggregation poll.
    - ``<algorithm>_<mode>_<rep>_agents.txt``: value-change logs.
    - ``convergence.png``: gap over aggregation polls for every run.
    """
    output_dir = config["output_dir"]
    os.makedirs(output_dir, exist_ok=True)
    problem = build_problem(config["problem"], config["size"], config["colors"], seed=config["seed"])
    print(
        f"[main] {config['problem']} problem with {len(problem.nodes)} agents, "
        f"{len(problem.edges)} constraints, {config['colors']} colours"
    )

    summary_path = os.path.join(output_dir, "iteration_summary.txt")
    with open(summary_path, "w", encoding="utf-8") as f:
        f.write("")

    results: List[Dict[str, Any]] = []
    for rep in range(config["repetitions"]):
        for mode in config["modes"]:
            for algorithm in config["algorithms"]:
                seed = config["seed"] + rep
                builder = create_builder(algorithm, seed=seed, **algorithm_params(algorithm, config))
                graph = ComputationGraph.from_problem(problem, builder, seed=seed)
                termination = UtilityGapTermination(aggregation_interval=config["aggregation_interval"])
                stats = graph.execute(
                    ExecutionConfiguration(
                        execution_mode=ExecutionMode(mode),
                        steps_limit=config["steps_limit"][mode],
                        time_limit=config["time_limit"],
                        global_termination_condition=termination,
                    )
                )
                run_name = f"{algorithm}_{mode}_{rep}"
                row = {
                    "run": run_name,
                    "algorithm": str(builder),
                    "mode": mode,
                    "statistics": stats,
                    "penalty": problem.evaluate_assignment(stats.final_assignment),
                    "nash_equilibrium": graph.aggregate(NashEquilibrium()),
                    "trajectory": list(termination.trajectory),
                }
                results.append(row)
                print(f"[main] {row['algorithm']} ({mode}): {stats}; penalty {row['penalty']}")

                with open(os.path.join(output_dir, f"{run_name}_trajectory.txt"), "w", encoding="utf-8") as f:
                    for gap, elapsed in termination.trajectory:
                        f.write(f"{gap} {elapsed:.6f}\n")
                with open(os.path.join(output_dir, f"{run_name}_agents.txt"), "w", encoding="utf-8") as f:
                    for name, agent in graph.agents.items():
                        for line in agent.get_logs():
                            f.write(f"{name}: {line}\n")
                with open(summary_path, "a", encoding="utf-8") as f:
                    f.write(
                        f"{run_name}: {stats.termination_reason.value} after {stats.steps} steps, "
                        f"{stats.collect_operations} collects, penalty {row['penalty']}, "
                        f"nash {row['nash_equilibrium']}, {stats.computation_time:.3f}s\n"
                    )

    # convergence plot
    try:
        import matplotlib.pyplot as plt

        plt.figure(figsize=(8, 5))
        for row in results:
            gaps = [gap for gap, _ in row["trajectory"]]
            if row["statistics"].termination_reason is TerminationReason.GLOBAL_CONDITION:
                gaps.append(0.0)
            plt.plot(range(len(gaps)), gaps, label=row["run"])
        plt.xlabel(f"Aggregation poll (every {config['aggregation_interval']} steps)")
        plt.ylabel("Utility gap")
        plt.yscale("symlog")
        plt.legend(fontsize=7)
        plt.title("Convergence")
        plt.savefig(os.path.join(output_dir, "convergence.png"), bbox_inches="tight")
        plt.close()
    except Exception as exc:
        print(f"[main] Could not save convergence plot: {exc}")

    print(f"[main] Outputs saved in {output_dir}")
    return results


if __name__ == "__main__":
    run_comparison(CONFIG)
