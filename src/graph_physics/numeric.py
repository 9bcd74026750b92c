"""
Numeric safety primitives for the simulation.

Every force and the integrator route intermediate quantities through these
helpers so that a degenerate value (zero distance, zero time step, overflow)
is resolved where it appears instead of propagating into node positions:

- finite_or: replace non-finite values with a fallback
- finite_or_random_direction: replace a non-finite direction with a random unit vector
- clamp_range: clamp into the safe operating range
- divide / normalize / length: never-raising arithmetic building blocks
"""

from __future__ import annotations

import math
import random
from typing import Sequence, TypeVar, Union, overload

import numpy as np

# Positions live in float32 range; float64 arithmetic leaves headroom for
# intermediate products such as distance squared.
FLOAT_MAX: float = float(np.finfo(np.float32).max)
FLOAT_MIN: float = -FLOAT_MAX

# Substituted for a zero, negative or non-finite frame delta (seconds).
FALLBACK_DELTA: float = 0.01

Vec2 = tuple[float, float]
Value = Union[float, Vec2]
T = TypeVar("T", float, Vec2)


def is_finite(value: Union[float, Sequence[float]]) -> bool:
    """True if every component of a scalar or vector is finite."""
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return all(math.isfinite(component) for component in value)


def finite_or(value: T, fallback: T) -> T:
    """
    Return value if every component is finite, else fallback.

    Args:
        value: Scalar or 2D vector
        fallback: Returned when value contains NaN or infinity

    Returns:
        value or fallback
    """
    if is_finite(value):
        return value
    return fallback


def random_direction(rng: random.Random) -> Vec2:
    """Unit vector at an angle drawn uniformly from [0, 2*pi)."""
    angle = rng.uniform(0.0, math.tau)
    return (math.cos(angle), math.sin(angle))


def finite_or_random_direction(vector: Vec2, rng: random.Random) -> Vec2:
    """
    Return vector if finite, else a random unit vector.

    Used after normalizing a separation vector: a zero-length separation
    normalizes to NaN, and coincident nodes still need a direction to escape
    along. The generator is passed in so seeded runs stay reproducible.
    """
    if is_finite(vector):
        return vector
    return random_direction(rng)


def _clamp_scalar(value: float, low: float, high: float) -> float:
    if value != value:  # NaN
        return 0.0
    return max(low, min(high, value))


@overload
def clamp_range(value: float, low: float = ..., high: float = ...) -> float: ...


@overload
def clamp_range(value: Vec2, low: float = ..., high: float = ...) -> Vec2: ...


def clamp_range(value: Value, low: float = FLOAT_MIN, high: float = FLOAT_MAX) -> Value:
    """
    Clamp a scalar or each component of a vector into [low, high].

    NaN components map to 0.0.
    """
    if isinstance(value, (int, float)):
        return _clamp_scalar(float(value), low, high)
    return (_clamp_scalar(value[0], low, high), _clamp_scalar(value[1], low, high))


def divide(numerator: float, denominator: float) -> float:
    """
    Divide with IEEE semantics instead of raising ZeroDivisionError.

    x / 0 gives a signed infinity and 0 / 0 gives NaN, so the result can be
    handed to finite_or.
    """
    if denominator == 0.0:
        if numerator == 0.0 or numerator != numerator:
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def length(vector: Vec2) -> float:
    """Euclidean norm, clamped into the safe range."""
    return clamp_range(math.hypot(vector[0], vector[1]))


def normalize(vector: Vec2) -> Vec2:
    """Unit vector in the direction of vector; non-finite for a zero vector."""
    norm = math.hypot(vector[0], vector[1])
    return (divide(vector[0], norm), divide(vector[1], norm))


__all__ = [
    "FLOAT_MAX",
    "FLOAT_MIN",
    "FALLBACK_DELTA",
    "Vec2",
    "is_finite",
    "finite_or",
    "random_direction",
    "finite_or_random_direction",
    "clamp_range",
    "divide",
    "length",
    "normalize",
]
