"""
Input validation utilities for the simulation.

Provides centralized validation functions for nodes, links and the viewport,
and the exception hierarchy raised for invalid input and sequencing errors.
"""

from __future__ import annotations

import math
from typing import Any, Hashable, Iterable, Sequence


class ValidationError(ValueError):
    """Base exception for simulation validation errors."""

    pass


class InvalidViewportError(ValidationError):
    """Raised when viewport dimensions are invalid."""

    pass


class InvalidNodeError(ValidationError):
    """Raised when a node is malformed or an id is unknown."""

    pass


class InvalidLinkError(ValidationError):
    """Raised when a link is a self-link or references missing nodes."""

    pass


class UninitializedTimeStepError(RuntimeError):
    """Raised when time step state is read before the first update."""

    pass


def validate_viewport_size(width: float, height: float) -> tuple[float, float]:
    """
    Validate viewport dimensions.

    Args:
        width: Viewport width in world units
        height: Viewport height in world units

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidViewportError: If dimensions are not positive and finite
    """
    width, height = float(width), float(height)

    if not math.isfinite(width) or width <= 0:
        raise InvalidViewportError(f"Viewport width must be positive, got {width}")
    if not math.isfinite(height) or height <= 0:
        raise InvalidViewportError(f"Viewport height must be positive, got {height}")

    return width, height


def validate_viewport_center(center_x: float, center_y: float) -> tuple[float, float]:
    """
    Validate viewport center coordinates.

    Raises:
        InvalidViewportError: If either coordinate is not finite
    """
    center_x, center_y = float(center_x), float(center_y)

    if not (math.isfinite(center_x) and math.isfinite(center_y)):
        raise InvalidViewportError(
            f"Viewport center must be finite, got ({center_x}, {center_y})"
        )

    return center_x, center_y


def validate_link_endpoints(source: Hashable, target: Hashable, target_distance: float) -> None:
    """
    Validate a single link's own fields.

    Raises:
        InvalidLinkError: If source equals target or target_distance is not a
            positive finite number
    """
    if source == target:
        raise InvalidLinkError(f"Link source and target must differ, got {source!r} twice")
    if not math.isfinite(target_distance) or target_distance <= 0:
        raise InvalidLinkError(f"Link target_distance must be positive, got {target_distance}")


def validate_node_ids(nodes: Sequence[Any]) -> None:
    """
    Validate node ids are unique and coordinates are finite.

    Raises:
        InvalidNodeError: On a duplicate id or a non-finite coordinate
    """
    seen: set[Hashable] = set()
    for node in nodes:
        if node.id in seen:
            raise InvalidNodeError(f"Duplicate node id {node.id!r}")
        seen.add(node.id)
        for value in (node.x, node.y, node.px, node.py):
            if not math.isfinite(value):
                raise InvalidNodeError(f"Node {node.id!r}: coordinates must be finite")


def validate_link_references(
    links: Sequence[Any],
    node_ids: Iterable[Hashable],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate that all link source/target ids exist.

    Args:
        links: Sequence of Link objects
        node_ids: Ids of the nodes in the simulation
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (link_index, issue_description) tuples

    Raises:
        InvalidLinkError: If strict=True and invalid links found
    """
    known = set(node_ids)
    issues: list[tuple[int, str]] = []

    for i, link in enumerate(links):
        if link.source not in known:
            issues.append((i, f"Link {i}: source {link.source!r} is not a node id"))
        if link.target not in known:
            issues.append((i, f"Link {i}: target {link.target!r} is not a node id"))

    if strict and issues:
        msg = "Invalid link references:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidLinkError(msg)

    return issues


__all__ = [
    "ValidationError",
    "InvalidViewportError",
    "InvalidNodeError",
    "InvalidLinkError",
    "UninitializedTimeStepError",
    "validate_viewport_size",
    "validate_viewport_center",
    "validate_link_endpoints",
    "validate_node_ids",
    "validate_link_references",
]
