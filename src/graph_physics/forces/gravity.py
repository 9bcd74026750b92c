"""Constant gravity force."""

from __future__ import annotations

from typing import Sequence

from ..config import GravityConfig
from ..numeric import clamp_range
from ..timestep import TimeStepTracker
from ..types import Node


def apply_gravity(nodes: Sequence[Node], config: GravityConfig, tracker: TimeStepTracker) -> None:
    """Pull every free node down (negative y) by strength * dt^2."""
    pull = clamp_range(config.strength * tracker.delta_squared_effective())
    for node in nodes:
        if node.locked:
            continue
        node.y = clamp_range(node.y - pull)


__all__ = ["apply_gravity"]
