#!/usr/bin/env python3
"""
Benchmark simulation ticks on seeded random graphs.

Usage:
    python scripts/benchmark_simulation.py [--nodes N,...] [--ticks T] [--theta THETA]

Examples:
    python scripts/benchmark_simulation.py
    python scripts/benchmark_simulation.py --nodes 50,200,500 --ticks 60
    python scripts/benchmark_simulation.py --theta 0.7 --output results.json
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import time
from pathlib import Path
from typing import Any, Optional

from graph_physics import (
    RepulsionConfig,
    Simulation,
    SimulationConfig,
    Viewport,
    setup_logging,
)

logger = logging.getLogger("graph_physics.benchmark")


def create_graph(n_nodes: int, n_links: int, seed: int = 42) -> tuple[list[dict], list[dict]]:
    """Create a random graph with n nodes and approximately n_links links."""
    rng = random.Random(seed)
    nodes = [{"id": i, "x": rng.uniform(-1, 1), "y": rng.uniform(-1, 1)} for i in range(n_nodes)]

    links = []
    for _ in range(n_links):
        source = rng.randrange(n_nodes)
        target = rng.randrange(n_nodes)
        if source != target:
            links.append(
                {"source": source, "target": target, "target_distance": rng.uniform(50, 150)}
            )

    return nodes, links


def benchmark(
    n_nodes: int,
    ticks: int,
    theta: Optional[float],
    seed: int = 42,
) -> dict[str, Any]:
    """
    Time a number of 60 fps ticks for one graph size.

    Returns:
        Dict with timing and result info
    """
    nodes, links = create_graph(n_nodes, int(n_nodes * 1.2), seed=seed)
    config = SimulationConfig(repulsion=RepulsionConfig(theta=theta))
    sim = Simulation(
        nodes=nodes,
        links=links,
        config=config,
        viewport=Viewport(0, 0, 1600, 900),
        random_seed=seed,
    )

    start = time.perf_counter()
    sim.run([1 / 60] * ticks)
    elapsed = time.perf_counter() - start

    return {
        "num_nodes": n_nodes,
        "num_links": len(sim.links),
        "ticks": ticks,
        "theta": theta,
        "time_seconds": elapsed,
        "ms_per_tick": 1000 * elapsed / ticks,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark graph-physics ticks")
    parser.add_argument("--nodes", default="50,100,200", help="Comma-separated node counts")
    parser.add_argument("--ticks", type=int, default=120, help="Ticks per run")
    parser.add_argument(
        "--theta",
        type=float,
        default=0.5,
        help="Barnes-Hut theta for the approximate runs",
    )
    parser.add_argument("--output", type=Path, help="Write results as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    results = []
    for n in (int(v) for v in args.nodes.split(",")):
        for theta in (None, args.theta):
            result = benchmark(n, args.ticks, theta)
            label = "exact" if theta is None else f"theta={theta}"
            logger.info(
                "%5d nodes %-12s %8.2f ms/tick", n, label, result["ms_per_tick"]
            )
            results.append(result)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        logger.info("Results written to %s", args.output)


if __name__ == "__main__":
    main()
