"""
Link (spring) force.

Each link pulls its endpoints together when stretched beyond its target
distance and pushes them apart when compressed:

    magnitude = strength * sign(extension) * min(|extension| / distance, strength_max)

The displacement is the unnormalized separation scaled by magnitude and
dt^2, so for an uncapped link it equals strength * extension * dt^2 along
the link. strength_max bounds the pull of a badly stretched link.
"""

from __future__ import annotations

import math
from typing import Hashable, Mapping, Sequence

from ..config import LinkConfig
from ..numeric import FLOAT_MAX, clamp_range, divide, finite_or
from ..timestep import TimeStepTracker
from ..types import Link, Node


def link_displacement(
    source: Node,
    target: Node,
    target_distance: float,
    config: LinkConfig,
    dt_squared: float,
) -> tuple[float, float]:
    """
    Compute the displacement added to the source (and subtracted from the target).

    Returns:
        (dx, dy) displacement, finite
    """
    dx = clamp_range(target.x - source.x)
    dy = clamp_range(target.y - source.y)
    distance = clamp_range(math.hypot(dx, dy), config.min_distance, FLOAT_MAX)

    extension = clamp_range(distance - target_distance)
    if extension == 0.0:
        return (0.0, 0.0)

    ratio = finite_or(clamp_range(divide(abs(extension), distance)), config.strength_max)
    magnitude = clamp_range(
        config.strength * math.copysign(1.0, extension) * min(ratio, config.strength_max)
    )

    force = clamp_range((dx * magnitude, dy * magnitude))
    return clamp_range((force[0] * dt_squared, force[1] * dt_squared))


def apply_links(
    nodes_by_id: Mapping[Hashable, Node],
    links: Sequence[Link],
    config: LinkConfig,
    tracker: TimeStepTracker,
) -> None:
    """
    Apply spring displacements for every link, in order.

    The source moves by +displacement and the target by -displacement;
    a locked endpoint keeps its position while the other one still moves.
    """
    dt_squared = tracker.delta_squared_effective()
    for link in links:
        source = nodes_by_id[link.source]
        target = nodes_by_id[link.target]
        ddx, ddy = link_displacement(source, target, link.target_distance, config, dt_squared)

        if not source.locked:
            source.x = clamp_range(source.x + ddx)
            source.y = clamp_range(source.y + ddy)
        if not target.locked:
            target.x = clamp_range(target.x - ddx)
            target.y = clamp_range(target.y - ddy)


__all__ = ["apply_links", "link_displacement"]
