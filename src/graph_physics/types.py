"""
Common types for the graph simulation.

This module provides the fundamental types shared by forces, the integrator
and the orchestrator:
- Node: Simulated point with current and previous position
- Link: Spring connecting two nodes by id
- Free / Locked: Per-node lock state (tagged variant)
- Viewport: Externally supplied visible rectangle
- LockAction / LockEvent: Queued drag interaction events
- EventType / Event: Simulation lifecycle events
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Hashable, Optional, Sequence, TypedDict, Union

from .numeric import Vec2
from .validation import (
    validate_link_endpoints,
    validate_viewport_center,
    validate_viewport_size,
)


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: A run() has begun
    - tick: Fired once per tick (for rendering)
    - end: A run() has finished
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    tick: int
    elapsed: float
    delta: Optional[float]


@dataclass(frozen=True)
class Free:
    """Lock state of a node moved by forces and integration."""


@dataclass(frozen=True)
class Locked:
    """
    Lock state of a node whose position is controlled externally.

    Attributes:
        velocity: Moving-average estimate of the node's velocity (per tick),
            handed back to the node when the lock is released.
    """

    velocity: Vec2 = (0.0, 0.0)


FREE = Free()

LockState = Union[Free, Locked]


class Node:
    """
    Simulated graph node.

    Velocity is not stored; Verlet integration infers it from the difference
    between the current and previous position.

    Attributes:
        id: Opaque hashable node id (set by the simulation if omitted)
        x: X coordinate
        y: Y coordinate
        px: Previous x coordinate
        py: Previous y coordinate
        lock: Free or Locked
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize node; previous position defaults to the position (at rest)."""
        self.id: Optional[Hashable] = kwargs.get("id")
        self.x: float = float(kwargs.get("x", 0.0))
        self.y: float = float(kwargs.get("y", 0.0))
        px = kwargs.get("px")
        py = kwargs.get("py")
        self.px: float = self.x if px is None else float(px)
        self.py: float = self.y if py is None else float(py)
        self.lock: LockState = kwargs.get("lock", FREE)

        # Copy any additional custom properties (labels, colours, ...)
        for key, value in kwargs.items():
            if not hasattr(self, key):
                setattr(self, key, value)

    @property
    def position(self) -> Vec2:
        return (self.x, self.y)

    @property
    def previous_position(self) -> Vec2:
        return (self.px, self.py)

    @property
    def locked(self) -> bool:
        """True while the node is externally controlled."""
        return isinstance(self.lock, Locked)

    def __repr__(self) -> str:
        state = "locked" if self.locked else "free"
        return f"Node(id={self.id!r}, x={self.x:.2f}, y={self.y:.2f}, {state})"


class Link:
    """
    Spring between two nodes.

    Attributes:
        source: Source node id
        target: Target node id
        target_distance: Rest length of the spring
    """

    __slots__ = ("_source", "_target", "_target_distance")

    def __init__(self, source: Hashable, target: Hashable, target_distance: float = 100.0) -> None:
        """
        Initialize link between two nodes.

        Raises:
            InvalidLinkError: If source == target or target_distance is not
                a positive finite number
        """
        target_distance = float(target_distance)
        validate_link_endpoints(source, target, target_distance)
        self._source = source
        self._target = target
        self._target_distance = target_distance

    @property
    def source(self) -> Hashable:
        return self._source

    @property
    def target(self) -> Hashable:
        return self._target

    @property
    def target_distance(self) -> float:
        return self._target_distance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Link):
            return NotImplemented
        return (self._source, self._target, self._target_distance) == (
            other._source,
            other._target,
            other._target_distance,
        )

    def __hash__(self) -> int:
        return hash((self._source, self._target, self._target_distance))

    def __repr__(self) -> str:
        return f"Link({self._source!r} -> {self._target!r}, {self._target_distance:g})"


@dataclass(frozen=True)
class Viewport:
    """
    Visible world-space rectangle, derived by the caller from its camera.

    Attributes:
        center_x, center_y: Rectangle center
        width, height: Rectangle size (positive)
    """

    center_x: float
    center_y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        validate_viewport_center(self.center_x, self.center_y)
        validate_viewport_size(self.width, self.height)

    def bounds(self, margin: float = 0.0) -> tuple[float, float, float, float]:
        """
        Return (x_min, x_max, y_min, y_max) shrunk by margin.

        The shrunk extent never drops below one unit.
        """
        half_width = max(self.width - margin, 1.0) / 2.0
        half_height = max(self.height - margin, 1.0) / 2.0
        return (
            self.center_x - half_width,
            self.center_x + half_width,
            self.center_y - half_height,
            self.center_y + half_height,
        )


class LockAction(Enum):
    """Drag interaction that changes or feeds a node's lock state."""

    acquire = "acquire"
    drag = "drag"
    release = "release"


@dataclass(frozen=True)
class LockEvent:
    """
    Queued lock event, applied at the next tick boundary.

    Attributes:
        node_id: Target node
        action: acquire, drag or release
        position: World-space position for drag events
    """

    node_id: Hashable
    action: LockAction
    position: Optional[Vec2] = None


# Type aliases for Pythonic API
NodeLike = Union[Node, dict[str, Any]]
"""Input type for nodes: Node objects or dicts of Node keyword arguments."""

LinkLike = Union[Link, dict[str, Any], Sequence[Any]]
"""Input type for links: Link objects, dicts, or (source, target[, distance]) tuples."""

EventCallback = Callable[[Optional[Event]], None]


__all__ = [
    "EventType",
    "Event",
    "Free",
    "Locked",
    "FREE",
    "LockState",
    "Node",
    "Link",
    "Viewport",
    "LockAction",
    "LockEvent",
    "NodeLike",
    "LinkLike",
    "EventCallback",
]
