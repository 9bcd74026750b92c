"""
graph-physics: Verlet-integrated force-directed graph layout.

This package computes 2D node positions for interactive graph views by
running a small physics simulation once per rendered frame.

Components:
- numeric: Finite-fallback and clamping primitives used everywhere
- timestep: Variable time step history for Verlet integration
- forces: Repulsion, link, gravity, galaxy, friction, mean-to-center,
  window border and initial-velocity forces
- integrator: Verlet step and the Free/Locked drag state machine
- simulation: Tick orchestration, lock event queue and event callbacks
"""

__version__ = "0.1.0"

# Configuration
from .config import (
    FrictionConfig,
    GalaxyConfig,
    GravityConfig,
    InitialVelocityConfig,
    LinkConfig,
    MeanToCenterConfig,
    RepulsionConfig,
    SimulationConfig,
    WindowBorderConfig,
)

# Force functions
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

# Integration and lock state machine
from .integrator import acquire_lock, release_lock, verlet_step
from .logging_config import setup_logging

# Numeric safety layer
from .numeric import (
    FALLBACK_DELTA,
    FLOAT_MAX,
    FLOAT_MIN,
    clamp_range,
    divide,
    finite_or,
    finite_or_random_direction,
    normalize,
)

# Orchestration
from .simulation import Simulation

# Spatial data structures
from .spatial import Body, QuadTree, QuadTreeNode
from .timestep import TimeStepTracker
from .types import (
    FREE,
    Event,
    EventType,
    Free,
    Link,
    LinkLike,
    Locked,
    LockAction,
    LockEvent,
    Node,
    NodeLike,
    Viewport,
)

# Validation utilities
from .validation import (
    InvalidLinkError,
    InvalidNodeError,
    InvalidViewportError,
    UninitializedTimeStepError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Node",
    "Link",
    "Free",
    "Locked",
    "FREE",
    "Viewport",
    "LockAction",
    "LockEvent",
    "EventType",
    "Event",
    "NodeLike",
    "LinkLike",
    # Configuration
    "SimulationConfig",
    "RepulsionConfig",
    "LinkConfig",
    "GravityConfig",
    "GalaxyConfig",
    "InitialVelocityConfig",
    "FrictionConfig",
    "MeanToCenterConfig",
    "WindowBorderConfig",
    # Numeric safety layer
    "FLOAT_MAX",
    "FLOAT_MIN",
    "FALLBACK_DELTA",
    "finite_or",
    "finite_or_random_direction",
    "clamp_range",
    "divide",
    "normalize",
    # Time steps
    "TimeStepTracker",
    # Forces
    "apply_mean_to_center",
    "apply_links",
    "apply_repulsion",
    "apply_gravity",
    "apply_galaxy",
    "apply_friction",
    "apply_window_border",
    "apply_initial_velocity",
    # Integration
    "verlet_step",
    "acquire_lock",
    "release_lock",
    # Orchestration
    "Simulation",
    # Spatial data structures
    "Body",
    "QuadTree",
    "QuadTreeNode",
    # Validation
    "ValidationError",
    "InvalidViewportError",
    "InvalidNodeError",
    "InvalidLinkError",
    "UninitializedTimeStepError",
    # Logging
    "setup_logging",
]
