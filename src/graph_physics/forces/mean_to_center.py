"""
Mean-to-center correction.

Not a force in the physical sense: it translates the free nodes so that the
mean of all node positions lands on the configured center. Locked nodes count
toward the mean but are not moved, so with a node held in place the cloud
converges over several ticks instead of jumping.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ..config import MeanToCenterConfig
from ..numeric import clamp_range, finite_or
from ..types import Node

logger = logging.getLogger(__name__)


def apply_mean_to_center(nodes: Sequence[Node], config: MeanToCenterConfig) -> None:
    """
    Shift free nodes by center - mean(all positions).

    An empty node table has no mean and is left untouched.
    """
    if not nodes:
        logger.debug("mean-to-center skipped: no nodes")
        return

    positions = np.array([(node.x, node.y) for node in nodes], dtype=np.float64)
    mean_x, mean_y = (float(v) for v in positions.mean(axis=0))
    cx, cy = config.center
    correction_x, correction_y = finite_or(
        clamp_range((cx - mean_x, cy - mean_y)),
        (0.0, 0.0),
    )

    for node in nodes:
        if node.locked:
            continue
        node.x = clamp_range(node.x + correction_x)
        node.y = clamp_range(node.y + correction_y)


__all__ = ["apply_mean_to_center"]
