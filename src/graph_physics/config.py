"""
Configuration for forces and the integrator.

Each force takes its tunables from a small dataclass built once at setup and
passed by reference on every tick. SimulationConfig bundles them; a force
whose config is None is disabled.

Example:
    config = SimulationConfig(
        repulsion=RepulsionConfig(strength=2_000_000),
        link=LinkConfig(strength=20.0, strength_max=10.0),
        gravity=None,
    )

    # or from plain data (e.g. loaded from JSON)
    config = SimulationConfig.from_dict({"repulsion": {"strength": 1e6}, "galaxy": None})
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from .numeric import FALLBACK_DELTA, Vec2
from .validation import ValidationError


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _non_negative(name: str, value: float) -> float:
    value = float(value)
    if value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}")
    return value


def _positive(name: str, value: float) -> float:
    value = float(value)
    if not value > 0:
        raise ValidationError(f"{name} must be > 0, got {value}")
    return value


@dataclass
class RepulsionConfig:
    """
    Inverse-square repulsion between every pair of nodes.

    Attributes:
        strength: Displacement numerator; a pair at distance d is pushed apart
            by strength * dt^2 / d^2 each tick
        min_distance: Distance floor; closer pairs are treated as this far
            apart, which bounds the force
        theta: Barnes-Hut accuracy; None for the exact all-pairs pass
        barnes_hut_threshold: Node count above which theta takes effect
    """

    strength: float = 1_000_000.0
    min_distance: float = 10.0
    theta: Optional[float] = None
    barnes_hut_threshold: int = 50

    def __post_init__(self) -> None:
        self.strength = float(self.strength)
        self.min_distance = _positive("min_distance", self.min_distance)
        if self.theta is not None:
            self.theta = max(0.0, float(self.theta))
        self.barnes_hut_threshold = max(0, int(self.barnes_hut_threshold))


@dataclass
class LinkConfig:
    """
    Hookean spring along every link.

    Attributes:
        strength: Spring constant
        strength_max: Cap on |extension| / distance, bounding the pull of a
            badly stretched link
        min_distance: Distance floor used when dividing by the link length
    """

    strength: float = 20.0
    strength_max: float = 10.0
    min_distance: float = 0.01

    def __post_init__(self) -> None:
        self.strength = float(self.strength)
        self.strength_max = _non_negative("strength_max", self.strength_max)
        self.min_distance = _positive("min_distance", self.min_distance)


@dataclass
class GravityConfig:
    """Constant downward pull of strength * dt^2 per tick."""

    strength: float = 100.0

    def __post_init__(self) -> None:
        self.strength = float(self.strength)


@dataclass
class GalaxyConfig:
    """Counter-clockwise swirl about the origin, scaled by strength * dt^2."""

    strength: float = 1.0

    def __post_init__(self) -> None:
        self.strength = float(self.strength)


@dataclass
class InitialVelocityConfig:
    """One-time downward nudge of velocity * dt applied on the first tick."""

    velocity: float = 50.0

    def __post_init__(self) -> None:
        self.velocity = float(self.velocity)


@dataclass
class FrictionConfig:
    """Constant-magnitude drag of strength * dt^2 against the movement."""

    strength: float = 10.0

    def __post_init__(self) -> None:
        self.strength = _non_negative("strength", self.strength)


@dataclass
class MeanToCenterConfig:
    """Shift free nodes so the mean of all nodes sits on center."""

    center: Vec2 = (0.0, 0.0)

    def __post_init__(self) -> None:
        self.center = (float(self.center[0]), float(self.center[1]))


@dataclass
class WindowBorderConfig:
    """
    Keep nodes inside the viewport.

    Attributes:
        bounce: Fraction of velocity reflected off a wall, in [0, 1]
            (0 absorbs, 1 reflects fully)
        margin: Amount the viewport is shrunk by (total over both sides)
    """

    bounce: float = 0.5
    margin: float = 30.0

    def __post_init__(self) -> None:
        self.bounce = _clamp_unit(self.bounce)
        self.margin = float(self.margin)


_FORCE_CONFIGS: dict[str, type] = {
    "mean_to_center": MeanToCenterConfig,
    "link": LinkConfig,
    "repulsion": RepulsionConfig,
    "gravity": GravityConfig,
    "galaxy": GalaxyConfig,
    "friction": FrictionConfig,
    "window_border": WindowBorderConfig,
    "initial_velocity": InitialVelocityConfig,
}


@dataclass
class SimulationConfig:
    """
    Complete simulation configuration.

    Forces default to the set a typical interactive graph view runs with;
    gravity, galaxy, friction and the initial nudge are opt-in.

    Attributes:
        velocity_decay: Fraction of the inferred velocity carried into the
            next tick, in [0, 1]
        fallback_delta: Delta (seconds) used in place of a degenerate one
    """

    mean_to_center: Optional[MeanToCenterConfig] = field(default_factory=MeanToCenterConfig)
    link: Optional[LinkConfig] = field(default_factory=LinkConfig)
    repulsion: Optional[RepulsionConfig] = field(default_factory=RepulsionConfig)
    gravity: Optional[GravityConfig] = None
    galaxy: Optional[GalaxyConfig] = None
    friction: Optional[FrictionConfig] = None
    window_border: Optional[WindowBorderConfig] = field(default_factory=WindowBorderConfig)
    initial_velocity: Optional[InitialVelocityConfig] = None
    velocity_decay: float = 0.95
    fallback_delta: float = FALLBACK_DELTA

    def __post_init__(self) -> None:
        self.velocity_decay = _clamp_unit(self.velocity_decay)
        self.fallback_delta = float(self.fallback_delta)
        if not self.fallback_delta > 0:
            raise ValidationError(f"fallback_delta must be > 0, got {self.fallback_delta}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """
        Build a config from plain data.

        Force keys map to a dict of that force's fields (or None to disable
        it); omitted keys keep their defaults.

        Raises:
            ValidationError: On an unknown key
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(f"Unknown simulation config keys: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            config_type = _FORCE_CONFIGS.get(key)
            if config_type is None or value is None or isinstance(value, config_type):
                kwargs[key] = value
            else:
                kwargs[key] = config_type(**value)
        return cls(**kwargs)


__all__ = [
    "RepulsionConfig",
    "LinkConfig",
    "GravityConfig",
    "GalaxyConfig",
    "InitialVelocityConfig",
    "FrictionConfig",
    "MeanToCenterConfig",
    "WindowBorderConfig",
    "SimulationConfig",
]
