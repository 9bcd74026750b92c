"""One-time initial velocity nudge."""

from __future__ import annotations

from typing import Sequence

from ..config import InitialVelocityConfig
from ..numeric import clamp_range
from ..timestep import TimeStepTracker
from ..types import Node


def apply_initial_velocity(
    nodes: Sequence[Node],
    config: InitialVelocityConfig,
    tracker: TimeStepTracker,
    elapsed: float,
) -> None:
    """
    Give every free node a starting drift on the very first tick.

    Only the position moves, so the next Verlet step reads the nudge as a
    velocity of `velocity` units per second (downward).

    Args:
        nodes: Node table
        config: Nudge velocity
        tracker: Time steps (already updated for this tick)
        elapsed: Simulated seconds before this tick; the nudge fires at 0
    """
    if elapsed != 0.0:
        return

    nudge = clamp_range(config.velocity * tracker.delta())
    for node in nodes:
        if node.locked:
            continue
        node.y = clamp_range(node.y - nudge)


__all__ = ["apply_initial_velocity"]
