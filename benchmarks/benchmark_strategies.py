"""
Benchmark suite for the detective strategies.

Runs every strategy on the same set of generated worlds and measures:
- Solve rate and fall rate
- Steps walked and routes planned per case
- Search cost (cells visited, time per search)

The riskiest strategy walks straight into suspected danger, so comparing it
against the distracted and median detectives shows what the risk model buys.
"""

import time
from typing import Dict, List

import numpy as np

from sleuth import AgentConfig, AgentStatus, DetectiveAgent, generate_world

STRATEGIES = ["riskiest", "random", "distracted", "median", "cautious", "centre",
              "nearest"]


def run_benchmark(strategy: str, seeds: List[int], rows: int = 10, cols: int = 10,
                  precipices: int = 3, max_steps: int = 2000) -> Dict:
    """Run one strategy over a list of seeded worlds."""
    steps, routes, visited, search_ms = [], [], [], []
    solved = fallen = 0
    start = time.time()

    for seed in seeds:
        grid = generate_world(rows, cols, seed=seed, precipices=precipices)
        agent = DetectiveAgent(grid, grid.home, AgentConfig(
            strategy=strategy, seed=seed, max_steps=max_steps,
        ))
        result = agent.run()
        solved += result.solved
        fallen += result.status == AgentStatus.FALLEN
        steps.append(result.steps)
        routes.append(result.routes)
        visited.extend(d.cells_visited for d in result.diagnostics)
        search_ms.extend(d.elapsed_ms for d in result.diagnostics)

    return {
        "strategy": strategy,
        "cases": len(seeds),
        "solved": solved,
        "fallen": fallen,
        "mean_steps": float(np.mean(steps)),
        "mean_routes": float(np.mean(routes)),
        "mean_visited": float(np.mean(visited)) if visited else 0.0,
        "mean_search_ms": float(np.mean(search_ms)) if search_ms else 0.0,
        "time_sec": time.time() - start,
    }


def run_all_benchmarks(n_cases: int = 50, rows: int = 10, cols: int = 10,
                       verbose: bool = True):
    """Run all strategies and print a summary table."""
    print("=" * 90)
    print("  Sleuth — Strategy Benchmark")
    print(f"  {n_cases} generated {rows}x{cols} cases")
    print("=" * 90)
    print()

    seeds = list(range(n_cases))
    results = []
    for strategy in STRATEGIES:
        r = run_benchmark(strategy, seeds, rows=rows, cols=cols)
        results.append(r)
        if verbose:
            print(f"  {strategy:11s} solved={r['solved']:3d}/{r['cases']}  "
                  f"fallen={r['fallen']:3d}  "
                  f"steps={r['mean_steps']:6.1f}  "
                  f"routes={r['mean_routes']:5.1f}  "
                  f"visited={r['mean_visited']:5.1f}  "
                  f"search={r['mean_search_ms']:.3f}ms  "
                  f"time={r['time_sec']:.1f}s")

    best = max(results, key=lambda r: (r["solved"], -r["mean_steps"]))
    print()
    print("=" * 90)
    print(f"  Best: {best['strategy']} ({best['solved']}/{best['cases']} solved)")
    print("=" * 90)

    return results


if __name__ == "__main__":
    run_all_benchmarks()
