"""
Force Simulation
================
Integrates node positions under repulsion, centring, edge springs and
anti-overlap until the layout cools down.

Why is this file needed?
------------------------
1. State: It owns the NodeArena and the decaying alpha ("temperature").
2. Control: Strength changes, resizes and drags reheat the layout without
   rebuilding the graph.
3. Stability: Positions are always finite, whatever the input.

The class knows nothing about timers. Something else (the controller) calls
`step()` once per frame.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from bordergraph.model import forces
from bordergraph.model.arena import NodeArena, phyllotaxis

if TYPE_CHECKING:
    import numpy.typing as npt
    from bordergraph.model.graph import BorderGraph

logger = logging.getLogger(__name__)

MIN_STRENGTH = 10.0
MAX_STRENGTH = 300.0
MIN_DIMENSION = 100.0


@dataclass(frozen=True)
class SimulationConfig:
    strength: float = 120.0          # repulsion magnitude
    link_distance: float = 80.0      # spring rest length
    collide_radius: float = 40.0     # anti-overlap radius per node
    collide_strength: float = 1.0
    center_strength: float = 1.0
    min_distance: float = 1.0        # softening floor for repulsion
    alpha_decay: float = 0.01
    alpha_min: float = 0.001
    velocity_decay: float = 0.4
    reheat_alpha: float = 0.3


def clamp_strength(value: float) -> float:
    """Clamp a repulsion strength into the supported range."""
    if not math.isfinite(value):
        logger.warning(f"Ignoring non-finite strength {value!r}, using {MIN_STRENGTH}.")
        return MIN_STRENGTH
    clamped = min(max(float(value), MIN_STRENGTH), MAX_STRENGTH)
    if clamped != value:
        logger.warning(f"Strength {value} out of range, clamped to {clamped}.")
    return clamped


def clamp_dimensions(width: float, height: float) -> Tuple[float, float]:
    """Keep the container at a usable minimum size."""
    def _clamp(v: float) -> float:
        if not math.isfinite(v) or v < MIN_DIMENSION:
            return MIN_DIMENSION
        return float(v)
    return _clamp(width), _clamp(height)


class ForceSimulation:
    def __init__(
        self,
        graph: BorderGraph,
        width: float,
        height: float,
        config: Optional[SimulationConfig] = None
    ) -> None:
        self.graph = graph
        self.config = config or SimulationConfig()
        self.width, self.height = clamp_dimensions(width, height)
        self.strength: float = clamp_strength(self.config.strength)

        self._alpha: float = 1.0
        self._alpha_target: float = 0.0
        self.tick_count: int = 0

        self._links: List[forces.Link] = forces.build_links(graph)
        start = phyllotaxis(len(graph), *self.center, order=graph.degree_order())
        self.arena = NodeArena(start)

    # ------------------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------------------

    @property
    def alpha(self) -> float:
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        self._alpha = min(max(float(value), 0.0), 1.0)

    @property
    def alpha_target(self) -> float:
        return self._alpha_target

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    @property
    def settled(self) -> bool:
        """True once alpha dropped below the stop threshold and nothing holds it up."""
        return self._alpha < self.config.alpha_min and self._alpha_target < self.config.alpha_min

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def step(self) -> float:
        """
        Run one tick: accumulate forces, integrate, decay alpha.

        Returns:
            The alpha value after the decay.
        """
        arena = self.arena
        previous = arena.positions()
        cx, cy = self.center

        forces.apply_repulsion(arena, -self.strength, self._alpha, self.config.min_distance)
        forces.apply_centering(arena, cx, cy, self.config.center_strength)
        forces.apply_links(arena, self._links, self.config.link_distance, self._alpha)
        forces.apply_collision(arena, self.config.collide_radius, self.config.collide_strength)

        arena.integrate(self.config.velocity_decay, previous=previous)

        self.alpha = self._alpha + (self._alpha_target - self._alpha) * self.config.alpha_decay
        self.tick_count += 1
        return self._alpha

    def tick(self, iterations: int = 1) -> float:
        """Run several ticks back to back (no rendering in between)."""
        for _ in range(max(0, iterations)):
            self.step()
        return self._alpha

    def reheat(self, alpha: Optional[float] = None) -> None:
        """Raise alpha to at least `alpha` (default: the configured reheat value)."""
        floor = self.config.reheat_alpha if alpha is None else alpha
        if floor > self._alpha:
            self.alpha = floor
        logger.debug(f"Simulation reheated, alpha={self._alpha:.3f}")

    def set_alpha_target(self, target: float) -> None:
        """Alpha converges toward this value instead of zero. Used while dragging."""
        self._alpha_target = min(max(float(target), 0.0), 1.0)
        if self._alpha_target > self._alpha:
            self.alpha = self._alpha_target

    def set_strength(self, value: float) -> None:
        """Replace only the repulsion magnitude and reheat."""
        self.strength = clamp_strength(value)
        logger.debug(f"Repulsion strength set to {self.strength}")
        self.reheat()

    def resize(self, width: float, height: float) -> None:
        """Move the centring target to the new container centre and reheat."""
        self.width, self.height = clamp_dimensions(width, height)
        logger.debug(f"Simulation centre moved to {self.center}")
        self.reheat()

    # ---- pins ----

    def pin(self, node_id: str, x: float, y: float) -> None:
        self.arena.pin(self.graph.index_of(node_id), x, y)

    def unpin(self, node_id: str) -> None:
        self.arena.unpin(self.graph.index_of(node_id))

    def pinned(self) -> List[str]:
        return [self.graph.nodes[i].id for i in self.arena.pinned_indices()]

    # ---- positions ----

    def position(self, node_id: str) -> Tuple[float, float]:
        i = self.graph.index_of(node_id)
        return float(self.arena.x[i]), float(self.arena.y[i])

    def positions(self) -> npt.NDArray[np.float64]:
        """(n, 2) copy of the current node positions."""
        return self.arena.positions()
