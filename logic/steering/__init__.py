"""logic/steering — Reynolds steering.

Modules
-------
forces      — stateless force library (seek, flee, pursue, evade,
              obstacle avoidance, wander, alignment, cohesion, separation)
strategies  — per-agent behaviours that combine forces into one
              clamped, horizontal force per tick
registry    — strategy name → factory lookup used by scenario files
"""

from logic.steering.registry import (                              # noqa: F401
    register_strategy, get_strategy, registered_names, build_strategy,
)
from logic.steering.strategies import (                            # noqa: F401, E402
    SteeringStrategy, finalize, PathFollowing, SeekPoint, FleePoint,
    Pursuit, Evasion, Wandering, Flocking,
)
