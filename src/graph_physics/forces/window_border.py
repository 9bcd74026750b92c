"""
Window border containment.

Not a force in the physical sense: nodes that reach the visible area's edge
are projected back onto it, and their previous position is rewritten so the
Verlet step sees a reflected (and damped) velocity on that axis.
"""

from __future__ import annotations

from typing import Sequence

from ..config import WindowBorderConfig
from ..numeric import clamp_range
from ..types import Node, Viewport


def _reflect_axis(
    position: float,
    previous: float,
    low: float,
    high: float,
    bounce: float,
) -> tuple[float, float]:
    """Return (position, previous) for one axis after wall contact."""
    if low < position < high:
        return position, previous

    incoming = clamp_range(position - previous)
    wall = min(max(position, low), high)
    return wall, clamp_range(wall + clamp_range(incoming * bounce))


def apply_window_border(
    nodes: Sequence[Node],
    config: WindowBorderConfig,
    viewport: Viewport,
) -> None:
    """
    Keep free nodes inside the viewport shrunk by the configured margin.

    Each axis is handled on its own: a node past the right wall keeps its
    vertical motion. With bounce 0 the velocity into the wall is absorbed,
    with bounce 1 it is reflected in full.
    """
    x_min, x_max, y_min, y_max = (clamp_range(v) for v in viewport.bounds(config.margin))

    for node in nodes:
        if node.locked:
            continue
        node.x, node.px = _reflect_axis(node.x, node.px, x_min, x_max, config.bounce)
        node.y, node.py = _reflect_axis(node.y, node.py, y_min, y_max, config.bounce)


__all__ = ["apply_window_border"]
