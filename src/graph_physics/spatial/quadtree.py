"""
Quadtree implementation for Barnes-Hut repulsion approximation.

The quadtree recursively subdivides 2D space into quadrants, so the
repulsion on a node from a distant cluster can be taken from the cluster's
center of mass instead of from every member.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..numeric import FLOAT_MAX, clamp_range, divide, finite_or_random_direction, length, normalize
from ..types import Node


@dataclass
class Body:
    """A point mass for force calculations."""

    x: float
    y: float
    mass: float = 1.0
    index: int = -1  # Position in the node table


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    Attributes:
        x, y: Center of this region
        half_size: Half the width/height of this region
        depth: Distance from the root
        center_of_mass_x/y: Center of mass of bodies in this subtree
        total_mass: Total mass of bodies in this subtree
        bodies: Bodies held by a leaf (several only at the depth limit)
        children: Four child quadrants [NW, NE, SW, SE] if internal
    """

    x: float
    y: float
    half_size: float
    depth: int = 0

    # Aggregated properties
    center_of_mass_x: float = 0.0
    center_of_mass_y: float = 0.0
    total_mass: float = 0.0

    # Content
    bodies: List[Body] = field(default_factory=list)
    children: Optional[List[Optional[QuadTreeNode]]] = None

    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.children is None

    def is_empty(self) -> bool:
        """True if this node contains no bodies."""
        return not self.bodies and self.children is None

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) is within this node's region."""
        return abs(x - self.x) <= self.half_size and abs(y - self.y) <= self.half_size

    def get_quadrant(self, x: float, y: float) -> int:
        """
        Get quadrant index for a point.

        Returns:
            0=NW, 1=NE, 2=SW, 3=SE
        """
        east = x >= self.x
        south = y >= self.y
        return (2 if south else 0) + (1 if east else 0)


class QuadTree:
    """
    Barnes-Hut quadtree for approximate inverse-square repulsion.

    Usage:
        tree = QuadTree.from_nodes(nodes, theta=0.5)
        dx, dy = tree.displacement(Body(x, y, index=i), scale, min_distance, rng)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.5: Good balance (recommended)
    - theta = 1.0+: Fast but less accurate

    Subdivision stops at max_depth; bodies that still share a cell (for
    example exactly coincident nodes) are kept together in one leaf.
    """

    def __init__(
        self,
        bounds: Tuple[float, float, float, float],
        theta: float = 0.5,
        max_depth: int = 32,
    ):
        """
        Initialize quadtree.

        Args:
            bounds: (min_x, min_y, max_x, max_y) bounding box
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
            max_depth: Maximum subdivision depth
        """
        min_x, min_y, max_x, max_y = bounds
        center_x = clamp_range((min_x + max_x) / 2)
        center_y = clamp_range((min_y + max_y) / 2)
        # Use max dimension to ensure square region
        half_size = clamp_range(max(max_x - min_x, max_y - min_y) / 2, 1.0, FLOAT_MAX)

        self.root = QuadTreeNode(center_x, center_y, half_size)
        self.theta = theta
        self.max_depth = max_depth
        self.body_count = 0

    def insert(self, body: Body) -> None:
        """Insert a body into the quadtree."""
        self._insert_into(self.root, body)
        self.body_count += 1

    def _insert_into(self, node: QuadTreeNode, body: Body) -> None:
        """Recursively insert body into subtree rooted at node."""
        if node.is_empty() or (node.is_leaf() and node.depth >= self.max_depth):
            node.bodies.append(body)
            return

        if node.is_leaf():
            # Leaf with existing bodies - must subdivide
            existing = node.bodies
            node.bodies = []
            node.children = [None, None, None, None]
            for other in existing:
                self._insert_into_child(node, other)

        self._insert_into_child(node, body)

    def _insert_into_child(self, node: QuadTreeNode, body: Body) -> None:
        """Insert body into the appropriate child of node."""
        assert node.children is not None
        quadrant = node.get_quadrant(body.x, body.y)

        child = node.children[quadrant]
        if child is None:
            hs = node.half_size / 2
            cx = node.x + hs * (1 if quadrant & 1 else -1)
            cy = node.y + hs * (1 if quadrant & 2 else -1)
            child = QuadTreeNode(cx, cy, hs, depth=node.depth + 1)
            node.children[quadrant] = child

        self._insert_into(child, body)

    def compute_mass_distribution(self) -> None:
        """Compute center of mass for all nodes (post-order traversal)."""
        self._compute_mass(self.root)

    def _compute_mass(self, node: QuadTreeNode) -> None:
        """Recursively compute mass distribution."""
        total_mass = 0.0
        weighted_x = 0.0
        weighted_y = 0.0

        if node.is_leaf():
            for body in node.bodies:
                total_mass += body.mass
                weighted_x += body.x * body.mass
                weighted_y += body.y * body.mass
        elif node.children:
            for child in node.children:
                if child is not None:
                    self._compute_mass(child)
                    total_mass += child.total_mass
                    weighted_x += child.center_of_mass_x * child.total_mass
                    weighted_y += child.center_of_mass_y * child.total_mass

        node.total_mass = total_mass
        if total_mass > 0:
            node.center_of_mass_x = clamp_range(weighted_x / total_mass)
            node.center_of_mass_y = clamp_range(weighted_y / total_mass)

    def displacement(
        self,
        body: Body,
        scale: float,
        min_distance: float,
        rng: random.Random,
    ) -> Tuple[float, float]:
        """
        Calculate the approximate repulsive displacement of a body.

        A cluster that does not contain the body and is small relative to its
        distance (size / distance < theta) acts as a single mass at its
        center of mass. Each contribution is scale * mass / d^2 along the
        unit vector pointing away from the source, with d floored at
        min_distance.

        Args:
            body: The body to push
            scale: strength * dt^2
            min_distance: Distance floor
            rng: Source of fallback directions for coincident bodies

        Returns:
            (dx, dy) displacement
        """
        return self._displacement(self.root, body, scale, min_distance, rng)

    @staticmethod
    def _push(
        dx: float,
        dy: float,
        mass: float,
        scale: float,
        min_distance: float,
        rng: random.Random,
    ) -> Tuple[float, float]:
        """Displacement away from a source at offset (dx, dy) from the body."""
        distance = clamp_range(length((dx, dy)), min_distance, FLOAT_MAX)
        ux, uy = finite_or_random_direction(normalize((dx, dy)), rng)
        magnitude = clamp_range(divide(clamp_range(scale * mass), clamp_range(distance * distance)))
        return clamp_range(ux * magnitude), clamp_range(uy * magnitude)

    def _displacement(
        self,
        node: QuadTreeNode,
        body: Body,
        scale: float,
        min_distance: float,
        rng: random.Random,
    ) -> Tuple[float, float]:
        """Recursively sum displacement contributions from node."""
        if node.is_empty():
            return 0.0, 0.0

        if node.is_leaf():
            fx, fy = 0.0, 0.0
            for other in node.bodies:
                # Skip self-interaction
                if other.index == body.index:
                    continue
                px, py = self._push(
                    clamp_range(body.x - other.x),
                    clamp_range(body.y - other.y),
                    other.mass,
                    scale,
                    min_distance,
                    rng,
                )
                fx += px
                fy += py
            return clamp_range(fx), clamp_range(fy)

        dx = clamp_range(body.x - node.center_of_mass_x)
        dy = clamp_range(body.y - node.center_of_mass_y)
        dist = length((dx, dy))

        # Barnes-Hut criterion: s/d < theta
        # s = node size (2 * half_size), d = distance
        if (
            dist > 0
            and not node.contains(body.x, body.y)
            and (node.half_size * 2 / dist) < self.theta
        ):
            return self._push(dx, dy, node.total_mass, scale, min_distance, rng)

        # Node is too close - recurse into children
        fx, fy = 0.0, 0.0
        if node.children:
            for child in node.children:
                if child is not None:
                    cfx, cfy = self._displacement(child, body, scale, min_distance, rng)
                    fx += cfx
                    fy += cfy

        return clamp_range(fx), clamp_range(fy)

    @classmethod
    def from_nodes(
        cls,
        nodes: Sequence[Node],
        padding: float = 10.0,
        theta: float = 0.5,
    ) -> QuadTree:
        """
        Build quadtree from a list of Node objects.

        Bodies are indexed by position in the sequence.

        Args:
            nodes: List of Node objects with x, y attributes
            padding: Padding around bounding box
            theta: Barnes-Hut threshold

        Returns:
            QuadTree with all nodes inserted and mass computed
        """
        if not nodes:
            return cls((0, 0, 100, 100), theta=theta)

        min_x = min(n.x for n in nodes) - padding
        min_y = min(n.y for n in nodes) - padding
        max_x = max(n.x for n in nodes) + padding
        max_y = max(n.y for n in nodes) + padding

        tree = cls((min_x, min_y, max_x, max_y), theta=theta)

        for i, node in enumerate(nodes):
            tree.insert(Body(node.x, node.y, mass=1.0, index=i))

        tree.compute_mass_distribution()
        return tree


__all__ = ["Body", "QuadTree", "QuadTreeNode"]
