"""
Layout Forces
=============
The four forces composed by the simulation each tick.

All functions mutate a NodeArena in place. Repulsion and springs accumulate
velocity scaled by alpha; centring shifts positions directly; collision
accumulates velocity independent of alpha so glyphs never overlap.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

import numpy as np

from bordergraph.model.arena import NodeArena

if TYPE_CHECKING:
    import numpy.typing as npt
    from bordergraph.model.graph import BorderGraph

JIGGLE = 1e-6


@dataclass(frozen=True)
class Link:
    """A spring between two node indices."""
    source: int
    target: int
    strength: float
    bias: float


def _pairwise_offsets(
    x: npt.NDArray[np.float64],
    y: npt.NDArray[np.float64]
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Offsets d[i, j] = p[j] - p[i]. Coincident off-diagonal pairs are separated
    by a tiny anti-symmetric x offset so every direction is defined.
    """
    dx = x[np.newaxis, :] - x[:, np.newaxis]
    dy = y[np.newaxis, :] - y[:, np.newaxis]

    coincident = (dx == 0.0) & (dy == 0.0)
    np.fill_diagonal(coincident, False)
    if coincident.any():
        idx = np.arange(x.shape[0])
        direction = np.sign(idx[np.newaxis, :] - idx[:, np.newaxis]).astype(np.float64)
        dx = np.where(coincident, direction * JIGGLE, dx)

    return dx, dy


def apply_repulsion(arena: NodeArena, strength: float, alpha: float, min_distance: float = 1.0) -> None:
    """
    Many-body force, exact O(n^2).

    Args:
        arena: Node state.
        strength: Negative values repel, positive attract.
        alpha: Current simulation temperature.
        min_distance: Distances below this are softened to avoid blow-up.
    """
    if arena.size < 2 or strength == 0.0 or alpha <= 0.0:
        return

    dx, dy = _pairwise_offsets(arena.x, arena.y)
    l2 = dx * dx + dy * dy
    floor2 = min_distance * min_distance
    l2 = np.where(l2 < floor2, np.sqrt(floor2 * l2), l2)
    np.fill_diagonal(l2, np.inf)

    w = strength * alpha / l2
    arena.vx += (dx * w).sum(axis=1)
    arena.vy += (dy * w).sum(axis=1)


def apply_centering(arena: NodeArena, cx: float, cy: float, strength: float = 1.0) -> None:
    """Translate all nodes so their centroid moves toward (cx, cy)."""
    if arena.size == 0:
        return
    sx = (float(arena.x.mean()) - cx) * strength
    sy = (float(arena.y.mean()) - cy) * strength
    arena.x -= sx
    arena.y -= sy


def build_links(graph: BorderGraph) -> List[Link]:
    """
    One spring per edge. Strength is 1 / min(count) so hubs are not pulled
    harder than leaves; bias moves the lighter endpoint more.
    Self-pairs carry no spring.
    """
    count = [0] * len(graph.nodes)
    for edge in graph.edges:
        count[edge.source_index] += 1
        count[edge.target_index] += 1

    links: List[Link] = []
    for edge in graph.edges:
        s, t = edge.source_index, edge.target_index
        if s == t:
            continue
        links.append(Link(
            source=s,
            target=t,
            strength=1.0 / min(count[s], count[t]),
            bias=count[s] / (count[s] + count[t]),
        ))
    return links


def apply_links(arena: NodeArena, links: List[Link], distance: float, alpha: float) -> None:
    """Pull each linked pair toward `distance`. Links are resolved one after another."""
    if alpha <= 0.0:
        return

    x, y, vx, vy = arena.x, arena.y, arena.vx, arena.vy
    for link in links:
        s, t = link.source, link.target
        dx = x[t] + vx[t] - x[s] - vx[s]
        dy = y[t] + vy[t] - y[s] - vy[s]
        length = math.hypot(dx, dy)
        if length < JIGGLE:
            dx = JIGGLE if t > s else -JIGGLE
            length = JIGGLE
        scale = (length - distance) / length * alpha * link.strength
        dx *= scale
        dy *= scale
        vx[t] -= dx * link.bias
        vy[t] -= dy * link.bias
        vx[s] += dx * (1.0 - link.bias)
        vy[s] += dy * (1.0 - link.bias)


def apply_collision(arena: NodeArena, radius: float, strength: float = 1.0) -> None:
    """
    Push apart any two nodes whose predicted centres are closer than 2 * radius.
    Each pair shares the correction equally.
    """
    if arena.size < 2 or radius <= 0.0:
        return

    px = arena.x + arena.vx
    py = arena.y + arena.vy
    # offsets point from j to i here
    dx, dy = _pairwise_offsets(px, py)
    dx, dy = -dx, -dy

    reach = 2.0 * radius
    l2 = dx * dx + dy * dy
    overlap = l2 < reach * reach
    np.fill_diagonal(overlap, False)
    if not overlap.any():
        return

    distance = np.sqrt(np.where(overlap, l2, 1.0))
    k = np.where(overlap, (reach - distance) / distance * strength * 0.5, 0.0)
    arena.vx += (dx * k).sum(axis=1)
    arena.vy += (dy * k).sum(axis=1)
