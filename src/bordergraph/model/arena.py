"""
Node Arena
Index-stable storage for the mutable physical state of every node.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def phyllotaxis(
    n: int,
    cx: float = 0.0,
    cy: float = 0.0,
    radius: float = INITIAL_RADIUS,
    order: Optional[Sequence[int]] = None
) -> npt.NDArray[np.float64]:
    """
    Deterministic sunflower-spiral placement around (cx, cy).

    Args:
        n: Number of points.
        cx, cy: Spiral centre.
        radius: Radius scale of the spiral.
        order: Optional placement order; order[k] gets the k-th spiral slot.

    Returns:
        (n, 2) array of positions indexed by node index.
    """
    k = np.arange(n, dtype=np.float64)
    r = radius * np.sqrt(0.5 + k)
    angle = k * INITIAL_ANGLE
    slots = np.c_[cx + r * np.cos(angle), cy + r * np.sin(angle)]

    if order is None:
        return slots

    out = np.empty((n, 2), dtype=np.float64)
    out[np.asarray(order, dtype=np.int_)] = slots
    return out


class NodeArena:
    """
    Holds x, y, vx, vy, fx, fy for all nodes as numpy arrays.
    A NaN in fx/fy means the node is free.
    """
    def __init__(self, positions: npt.NDArray[np.float64]) -> None:
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        n = positions.shape[0]
        self.x = positions[:, 0].copy()
        self.y = positions[:, 1].copy()
        self.vx = np.zeros(n, dtype=np.float64)
        self.vy = np.zeros(n, dtype=np.float64)
        self.fx = np.full(n, np.nan, dtype=np.float64)
        self.fy = np.full(n, np.nan, dtype=np.float64)

    @property
    def size(self) -> int:
        return self.x.shape[0]

    def positions(self) -> npt.NDArray[np.float64]:
        return np.c_[self.x, self.y]

    # ---- pins ----

    def pin(self, index: int, x: float, y: float) -> None:
        self.fx[index] = x
        self.fy[index] = y

    def unpin(self, index: int) -> None:
        self.fx[index] = np.nan
        self.fy[index] = np.nan

    def is_pinned(self, index: int) -> bool:
        return not np.isnan(self.fx[index])

    def pinned_indices(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(~np.isnan(self.fx))]

    # ---- integration ----

    def integrate(self, velocity_decay: float, previous: Optional[npt.NDArray[np.float64]] = None) -> None:
        """
        Apply velocity to free nodes, snap pinned nodes to their pin.

        Args:
            velocity_decay: Fraction of velocity lost per tick (friction).
            previous: (n, 2) positions to fall back to if a value became non-finite.
        """
        keep = 1.0 - velocity_decay
        self.vx *= keep
        self.vy *= keep

        free = np.isnan(self.fx)
        self.x[free] += self.vx[free]
        self.y[free] += self.vy[free]

        pinned = ~free
        self.x[pinned] = self.fx[pinned]
        self.y[pinned] = self.fy[pinned]
        self.vx[pinned] = 0.0
        self.vy[pinned] = 0.0

        bad = ~(np.isfinite(self.x) & np.isfinite(self.y))
        if bad.any():
            if previous is not None:
                self.x[bad] = previous[bad, 0]
                self.y[bad] = previous[bad, 1]
            else:
                self.x[bad] = 0.0
                self.y[bad] = 0.0
            self.vx[bad] = 0.0
            self.vy[bad] = 0.0
