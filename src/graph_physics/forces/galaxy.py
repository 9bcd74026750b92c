"""Galaxy (swirl) force."""

from __future__ import annotations

from typing import Sequence

from ..config import GalaxyConfig
from ..numeric import clamp_range, finite_or
from ..timestep import TimeStepTracker
from ..types import Node


def apply_galaxy(nodes: Sequence[Node], config: GalaxyConfig, tracker: TimeStepTracker) -> None:
    """
    Rotate free nodes counter-clockwise about the origin.

    Each node moves along its position vector turned by 90 degrees, scaled by
    strength * dt^2, which for small factors is a rotation by that many
    radians. A node on the origin gets a zero displacement.
    """
    scale = clamp_range(config.strength * tracker.delta_squared_effective())
    for node in nodes:
        if node.locked:
            continue
        dx, dy = finite_or(
            clamp_range((-node.y * scale, node.x * scale)),
            (0.0, 0.0),
        )
        node.x = clamp_range(node.x + dx)
        node.y = clamp_range(node.y + dy)


__all__ = ["apply_galaxy"]
