"""
Verlet integration and the node lock state machine.

Forces in this package move positions directly instead of accumulating an
acceleration, so the integrator only carries momentum over: the velocity is
the difference between the current and the previous position.

Lock states:
- Free: moved by forces and integration
- Locked(velocity): held by the caller (dragging); the integrator keeps a
  moving-average velocity estimate that is handed back on release
"""

from __future__ import annotations

from typing import Sequence

from .numeric import clamp_range
from .timestep import TimeStepTracker
from .types import FREE, Locked, Node


# Weight of the newest sample in a locked node's velocity estimate. Pointer
# events arrive irregularly, so a single frame is a poor velocity sample.
LOCK_VELOCITY_SMOOTHING = 0.1


def acquire_lock(node: Node) -> None:
    """Free -> Locked with a zero velocity estimate; no-op if already locked."""
    if node.locked:
        return
    node.lock = Locked()


def release_lock(node: Node) -> None:
    """
    Locked -> Free, handing the velocity estimate back to the node.

    While locked the previous position tracks the position, so shifting it
    back by the estimate makes the next Verlet step continue the drag motion.
    No-op if the node is already free.
    """
    lock = node.lock
    if not isinstance(lock, Locked):
        return
    vx, vy = lock.velocity
    node.px = clamp_range(node.px - vx)
    node.py = clamp_range(node.py - vy)
    node.lock = FREE


def verlet_step(nodes: Sequence[Node], tracker: TimeStepTracker, velocity_decay: float) -> None:
    """
    Advance all nodes by one Verlet step.

    next = position + (position - previous) * velocity_scale * velocity_decay

    Free nodes move to next. Locked nodes stay put and fold next - position
    into their velocity estimate. Every node's previous position becomes its
    pre-step position.

    Args:
        nodes: Node table
        tracker: Time steps (already updated for this tick)
        velocity_decay: Fraction of velocity kept, in [0, 1]
    """
    factor = clamp_range(tracker.velocity_scale() * velocity_decay)
    keep = 1.0 - LOCK_VELOCITY_SMOOTHING

    for node in nodes:
        x, y = node.x, node.y
        step_x = clamp_range(clamp_range(x - node.px) * factor)
        step_y = clamp_range(clamp_range(y - node.py) * factor)
        next_x = clamp_range(x + step_x)
        next_y = clamp_range(y + step_y)

        lock = node.lock
        if isinstance(lock, Locked):
            vx, vy = lock.velocity
            node.lock = Locked(
                velocity=(
                    clamp_range(keep * vx + LOCK_VELOCITY_SMOOTHING * clamp_range(next_x - x)),
                    clamp_range(keep * vy + LOCK_VELOCITY_SMOOTHING * clamp_range(next_y - y)),
                )
            )
        else:
            node.x = next_x
            node.y = next_y

        node.px = x
        node.py = y


__all__ = [
    "LOCK_VELOCITY_SMOOTHING",
    "acquire_lock",
    "release_lock",
    "verlet_step",
]
