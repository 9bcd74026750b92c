"""
Repulsion force.

Every pair of nodes pushes apart with an inverse-square law:

    magnitude = strength * dt^2 / max(distance, min_distance)^2

The exact pass visits all n(n-1)/2 pairs in order and moves nodes as it goes,
so later pairs see the displacements of earlier ones. For larger graphs a
Barnes-Hut approximation computes every node's displacement from a quadtree
snapshot of the positions instead.
"""

from __future__ import annotations

import itertools
import math
import random
from typing import Sequence

from ..config import RepulsionConfig
from ..numeric import FLOAT_MAX, clamp_range, divide, finite_or_random_direction, normalize
from ..spatial.quadtree import Body, QuadTree
from ..timestep import TimeStepTracker
from ..types import Node


def apply_repulsion(
    nodes: Sequence[Node],
    config: RepulsionConfig,
    tracker: TimeStepTracker,
    rng: random.Random,
) -> None:
    """
    Push every pair of nodes apart.

    Coincident nodes are separated along a random direction drawn from rng.
    Locked nodes still repel others but are not moved themselves.

    Args:
        nodes: Node table
        config: Strength, distance floor and Barnes-Hut settings
        tracker: Time steps (already updated for this tick)
        rng: Simulation-scoped generator for fallback directions
    """
    scale = clamp_range(tracker.delta_squared_effective() * config.strength)

    if config.theta is not None and len(nodes) > config.barnes_hut_threshold:
        _apply_barnes_hut(nodes, config, scale, rng)
        return

    for a, b in itertools.combinations(nodes, 2):
        dx = clamp_range(b.x - a.x)
        dy = clamp_range(b.y - a.y)

        # Floor also absorbs NaN/zero and bounds the force for close pairs
        distance = clamp_range(math.hypot(dx, dy), config.min_distance, FLOAT_MAX)
        ux, uy = finite_or_random_direction(normalize((dx, dy)), rng)

        magnitude = clamp_range(divide(scale, clamp_range(distance * distance)))
        fx = clamp_range(magnitude * ux)
        fy = clamp_range(magnitude * uy)

        if not a.locked:
            a.x = clamp_range(a.x - fx)
            a.y = clamp_range(a.y - fy)
        if not b.locked:
            b.x = clamp_range(b.x + fx)
            b.y = clamp_range(b.y + fy)


def _apply_barnes_hut(
    nodes: Sequence[Node],
    config: RepulsionConfig,
    scale: float,
    rng: random.Random,
) -> None:
    """Approximate repulsion with a quadtree built from current positions."""
    assert config.theta is not None
    tree = QuadTree.from_nodes(nodes, padding=config.min_distance, theta=config.theta)

    displacements = [
        tree.displacement(Body(node.x, node.y, index=i), scale, config.min_distance, rng)
        for i, node in enumerate(nodes)
    ]

    for node, (fx, fy) in zip(nodes, displacements):
        if node.locked:
            continue
        node.x = clamp_range(node.x + fx)
        node.y = clamp_range(node.y + fy)


__all__ = ["apply_repulsion"]
