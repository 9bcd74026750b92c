"""Constant friction force."""

from __future__ import annotations

from typing import Sequence

from ..config import FrictionConfig
from ..numeric import clamp_range, finite_or, normalize
from ..timestep import TimeStepTracker
from ..types import Node


def apply_friction(nodes: Sequence[Node], config: FrictionConfig, tracker: TimeStepTracker) -> None:
    """
    Slow every moving free node by strength * dt^2 against its movement.

    Movement is approximated by position - previous_position; a node at rest
    is left alone.
    """
    drag = clamp_range(config.strength * tracker.delta_squared_effective())
    for node in nodes:
        if node.locked:
            continue
        movement = clamp_range((node.x - node.px, node.y - node.py))
        if movement == (0.0, 0.0):
            continue

        ux, uy = finite_or(normalize(movement), (0.0, 0.0))
        node.x = clamp_range(node.x - clamp_range(ux * drag))
        node.y = clamp_range(node.y - clamp_range(uy * drag))


__all__ = ["apply_friction"]
