"""
Force functions.

Each force is a stateless function that displaces node positions for one
tick, reading its tunables from a config dataclass:
- apply_mean_to_center: Recenter the node cloud on a fixed point
- apply_links: Hookean springs along links
- apply_repulsion: Inverse-square repulsion between all pairs
- apply_gravity: Constant downward pull
- apply_galaxy: Swirl about the origin
- apply_friction: Constant drag against movement
- apply_window_border: Keep nodes inside the viewport, with bounce
- apply_initial_velocity: One-time nudge on the first tick

Locked nodes are never moved by a force.
"""

from .friction import apply_friction
from .galaxy import apply_galaxy
from .gravity import apply_gravity
from .initial_velocity import apply_initial_velocity
from .link import apply_links
from .mean_to_center import apply_mean_to_center
from .repulsion import apply_repulsion
from .window_border import apply_window_border

__all__ = [
    "apply_mean_to_center",
    "apply_links",
    "apply_repulsion",
    "apply_gravity",
    "apply_galaxy",
    "apply_friction",
    "apply_window_border",
    "apply_initial_velocity",
]
