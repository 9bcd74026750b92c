"""
Tick orchestration for the force-directed simulation.

Simulation owns the node table, the link table, the time step history, the
queue of pending lock events and the random generator, and sequences one
tick as:

1. apply queued lock events (acquire / drag / release)
2. record the frame delta
3. run forces in a fixed order: mean-to-center, link, repulsion, gravity,
   galaxy, friction, window border, initial velocity
4. Verlet integration

Forces read the state left by earlier forces in the same tick; there is no
double buffering, so the order above is part of the behaviour.
"""

from __future__ import annotations

import logging
import random
import warnings
from collections import deque
from typing import TYPE_CHECKING, Any, Hashable, Iterable, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from .config import SimulationConfig
from .forces import (
    apply_friction,
    apply_galaxy,
    apply_gravity,
    apply_initial_velocity,
    apply_links,
    apply_mean_to_center,
    apply_repulsion,
    apply_window_border,
)
from .integrator import acquire_lock, release_lock, verlet_step
from .numeric import Vec2, clamp_range, finite_or
from .timestep import TimeStepTracker
from .types import (
    Event,
    EventCallback,
    EventType,
    Link,
    LinkLike,
    LockAction,
    LockEvent,
    Node,
    NodeLike,
    Viewport,
)
from .validation import (
    InvalidLinkError,
    InvalidNodeError,
    validate_link_references,
    validate_node_ids,
)

logger = logging.getLogger(__name__)


class Simulation:
    """
    Interactive force-directed graph simulation.

    The caller drives it with one tick per rendered frame, passing the
    elapsed wall-clock time, and reads node positions back afterwards.

    Example:
        sim = Simulation(
            nodes=[{"id": "a", "x": 0, "y": 0}, {"id": "b", "x": 5, "y": 1}],
            links=[{"source": "a", "target": "b", "target_distance": 80}],
            viewport=Viewport(0, 0, 800, 600),
            random_seed=0,
        )
        sim.tick(1 / 60)

        # Dragging a node
        sim.acquire_lock("a")
        sim.drag("a", (120.0, 40.0))
        sim.tick(1 / 60)
        sim.release_lock("a")

        positions = sim.positions()  # numpy array, one row per node
    """

    def __init__(
        self,
        *,
        nodes: Optional[Sequence[NodeLike]] = None,
        links: Optional[Sequence[LinkLike]] = None,
        config: Optional[SimulationConfig] = None,
        viewport: Optional[Viewport] = None,
        random_seed: Optional[int] = None,
        strict: bool = True,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize the simulation.

        Args:
            nodes: Nodes (Node objects or dicts); ids default to the list index
            links: Links (Link objects, dicts, or (source, target[, distance]) tuples)
            config: Force and integrator configuration
            viewport: Visible area for the window border force
            random_seed: Seed for the fallback-direction generator
            strict: Raise on invalid links; if False, drop them with a warning
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event

        Raises:
            InvalidNodeError: On duplicate ids or non-finite coordinates
            InvalidLinkError: (strict) On self-links, bad distances or unknown ids
        """
        self._config = config if config is not None else SimulationConfig()
        self._viewport = viewport
        self._random_seed = random_seed
        self._rng = random.Random(random_seed)
        self._tracker = TimeStepTracker(self._config.fallback_delta)
        self._pending: deque[LockEvent] = deque()
        self._events: dict[EventType, EventCallback] = {}
        self._elapsed = 0.0
        self._tick_count = 0
        self._viewport_warned = False

        self._nodes = self._normalize_nodes(nodes or [])
        self._nodes_by_id: dict[Hashable, Node] = {node.id: node for node in self._nodes}
        self._links = self._normalize_links(links or [], strict)

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

        logger.debug(
            "Simulation created with %d nodes and %d links", len(self._nodes), len(self._links)
        )

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _normalize_nodes(value: Sequence[NodeLike]) -> list[Node]:
        nodes: list[Node] = []
        for i, node_data in enumerate(value):
            if isinstance(node_data, Node):
                node = node_data
            elif isinstance(node_data, dict):
                node = Node(**node_data)
            else:
                raise InvalidNodeError(f"Node {i}: expected Node or dict, got {type(node_data)!r}")
            if node.id is None:
                node.id = i
            nodes.append(node)
        validate_node_ids(nodes)
        return nodes

    @staticmethod
    def _coerce_link(link_data: LinkLike) -> Link:
        if isinstance(link_data, Link):
            return link_data
        try:
            if isinstance(link_data, dict):
                return Link(**link_data)
            return Link(*link_data)
        except InvalidLinkError:
            raise
        except (TypeError, ValueError) as exc:
            raise InvalidLinkError(f"Malformed link {link_data!r}: {exc}") from exc

    def _normalize_links(self, value: Sequence[LinkLike], strict: bool) -> list[Link]:
        dropped: list[str] = []
        origins: list[int] = []
        links: list[Link] = []
        for i, link_data in enumerate(value):
            try:
                links.append(self._coerce_link(link_data))
            except InvalidLinkError as exc:
                if strict:
                    raise
                dropped.append(f"input link {i}: {exc}")
                continue
            origins.append(i)

        issues = validate_link_references(links, self._nodes_by_id, strict=strict)
        if issues:
            bad = {index for index, _ in issues}
            dropped.extend(
                f"input link {origins[k]}: {links[k]!r} has an unknown endpoint" for k in sorted(bad)
            )
            links = [link for k, link in enumerate(links) if k not in bad]

        if dropped:
            warnings.warn(
                f"Dropping {len(dropped)} invalid link(s):\n" + "\n".join(dropped),
                stacklevel=3,
            )
        return links

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> list[Node]:
        """Get the node table (in construction order)."""
        return self._nodes

    @property
    def links(self) -> list[Link]:
        """Get the link table."""
        return self._links

    @property
    def config(self) -> SimulationConfig:
        """Get the simulation configuration."""
        return self._config

    @property
    def viewport(self) -> Optional[Viewport]:
        """Get the viewport used by the window border force."""
        return self._viewport

    @viewport.setter
    def viewport(self, value: Optional[Viewport]) -> None:
        """Set the viewport (e.g. after the camera moved or the window resized)."""
        self._viewport = value

    @property
    def tracker(self) -> TimeStepTracker:
        """Get the time step history."""
        return self._tracker

    @property
    def random_seed(self) -> Optional[int]:
        """Get the seed of the fallback-direction generator."""
        return self._random_seed

    @property
    def elapsed(self) -> float:
        """Simulated seconds over all completed ticks."""
        return self._elapsed

    @property
    def tick_count(self) -> int:
        """Number of completed ticks."""
        return self._tick_count

    @property
    def pending_events(self) -> tuple[LockEvent, ...]:
        """Lock events waiting for the next tick."""
        return tuple(self._pending)

    def node(self, node_id: Hashable) -> Node:
        """
        Look up a node by id.

        Raises:
            InvalidNodeError: If no node has this id
        """
        try:
            return self._nodes_by_id[node_id]
        except KeyError:
            raise InvalidNodeError(f"Unknown node id {node_id!r}") from None

    def position_of(self, node_id: Hashable) -> Vec2:
        """Current position of a node."""
        return self.node(node_id).position

    def positions(self) -> np.ndarray:
        """Current positions as an (n, 2) float array in node order."""
        if not self._nodes:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([(node.x, node.y) for node in self._nodes], dtype=np.float64)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: EventCallback) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lock events (queued until the next tick)
    # -------------------------------------------------------------------------

    def _enqueue(self, node_id: Hashable, action: LockAction, position: Optional[Vec2] = None) -> Self:
        self.node(node_id)  # fail fast on unknown ids
        self._pending.append(LockEvent(node_id, action, position))
        return self

    def acquire_lock(self, node_id: Hashable) -> Self:
        """Queue a lock acquisition (drag start) for node_id."""
        return self._enqueue(node_id, LockAction.acquire)

    def drag(self, node_id: Hashable, position: Vec2) -> Self:
        """Queue a move of a locked node to a world-space position."""
        x, y = float(position[0]), float(position[1])
        return self._enqueue(node_id, LockAction.drag, (x, y))

    def release_lock(self, node_id: Hashable) -> Self:
        """Queue a lock release (drag end) for node_id."""
        return self._enqueue(node_id, LockAction.release)

    def _apply_lock_events(self) -> None:
        while self._pending:
            event = self._pending.popleft()
            node = self._nodes_by_id[event.node_id]

            if event.action is LockAction.acquire:
                acquire_lock(node)
            elif event.action is LockAction.release:
                release_lock(node)
            elif event.action is LockAction.drag:
                if not node.locked:
                    logger.warning("Ignoring drag of unlocked node %r", event.node_id)
                    continue
                assert event.position is not None
                node.x, node.y = clamp_range(finite_or(event.position, node.position))

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def _apply_forces(self, viewport: Optional[Viewport]) -> None:
        config = self._config
        nodes = self._nodes
        tracker = self._tracker

        if config.mean_to_center is not None:
            apply_mean_to_center(nodes, config.mean_to_center)
        if config.link is not None:
            apply_links(self._nodes_by_id, self._links, config.link, tracker)
        if config.repulsion is not None:
            apply_repulsion(nodes, config.repulsion, tracker, self._rng)
        if config.gravity is not None:
            apply_gravity(nodes, config.gravity, tracker)
        if config.galaxy is not None:
            apply_galaxy(nodes, config.galaxy, tracker)
        if config.friction is not None:
            apply_friction(nodes, config.friction, tracker)
        if config.window_border is not None:
            if viewport is not None:
                apply_window_border(nodes, config.window_border, viewport)
            elif not self._viewport_warned:
                logger.warning("Window border force enabled but no viewport set; skipping")
                self._viewport_warned = True
        if config.initial_velocity is not None:
            apply_initial_velocity(nodes, config.initial_velocity, tracker, self._elapsed)

    def tick(self, delta: float, viewport: Optional[Viewport] = None) -> None:
        """
        Advance the simulation by one frame.

        Args:
            delta: Wall-clock seconds since the previous frame; zero or
                negative values are replaced by the configured fallback
            viewport: Visible area for this tick; also stored for later ticks
        """
        if viewport is not None:
            self._viewport = viewport

        self._apply_lock_events()
        self._tracker.update(delta)
        self._apply_forces(self._viewport)
        verlet_step(self._nodes, self._tracker, self._config.velocity_decay)

        self._elapsed += self._tracker.delta()
        self._tick_count += 1

        self.trigger(
            {
                "type": EventType.tick,
                "tick": self._tick_count,
                "elapsed": self._elapsed,
                "delta": self._tracker.delta(),
            }
        )

    def run(self, deltas: Iterable[float], **kwargs: Any) -> Self:
        """
        Tick once per delta, firing start and end events around the run.

        Keyword Args:
            viewport: Visible area, passed to every tick

        Returns:
            self (for chaining)
        """
        viewport = kwargs.get("viewport")
        self.trigger(
            {"type": EventType.start, "tick": self._tick_count, "elapsed": self._elapsed}
        )
        for delta in deltas:
            self.tick(delta, viewport)
        self.trigger({"type": EventType.end, "tick": self._tick_count, "elapsed": self._elapsed})
        return self

    def reset_time(self) -> None:
        """Forget the time step history and elapsed time (re-arms the initial nudge)."""
        self._tracker.reset()
        self._elapsed = 0.0
        self._tick_count = 0


__all__ = ["Simulation"]
