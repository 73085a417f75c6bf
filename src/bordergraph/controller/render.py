"""
Render Synchronizer
Copies simulation state into rendered geometry once per tick and applies
derived styling when neighbor counts, highlight or theme change.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, List, Optional, Protocol

from bordergraph.model.styling import (
    EdgeEmphasis, EdgeStyle, NodeStyle, Theme, edge_style, node_style, tokens
)

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from bordergraph.model.graph import BorderGraph
    from bordergraph.model.viewport import ViewportTransform

logger = logging.getLogger(__name__)


class RenderSurface(Protocol):
    """What the synchronizer needs from a drawing backend."""
    def clear(self) -> None: ...
    def create_items(self, graph: BorderGraph) -> None: ...
    def set_node_position(self, index: int, x: float, y: float) -> None: ...
    def set_edge_line(self, index: int, x1: float, y1: float, x2: float, y2: float) -> None: ...
    def set_node_style(self, index: int, style: NodeStyle) -> None: ...
    def set_edge_style(self, index: int, style: EdgeStyle) -> None: ...
    def set_transform(self, transform: ViewportTransform) -> None: ...
    def set_background(self, color: str) -> None: ...


class RenderSynchronizer:
    def __init__(self, graph: BorderGraph, surface: RenderSurface, theme: Theme = Theme.LIGHT) -> None:
        self.graph = graph
        self.surface = surface
        self.theme = Theme(theme)
        self.hovered: Optional[str] = None

        self._last_transform: Optional[ViewportTransform] = None
        self._base_styles: List[NodeStyle] = []
        self._derive_styles()

    def populate(self) -> None:
        """Create one item per node and edge, styled in their resting state."""
        self.surface.clear()
        self.surface.create_items(self.graph)
        self._last_transform = None
        self.restyle(self.hovered)

    def sync(self, positions: npt.NDArray[np.float64], transform: Optional[ViewportTransform] = None) -> None:
        """
        Push the current coordinates to the surface.

        Args:
            positions: (n, 2) node positions in simulation space.
            transform: Active viewport transform; pushed only when it changed.
        """
        for node in self.graph.nodes:
            x, y = positions[node.index]
            if math.isfinite(x) and math.isfinite(y):
                self.surface.set_node_position(node.index, float(x), float(y))

        for i, edge in enumerate(self.graph.edges):
            x1, y1 = positions[edge.source_index]
            x2, y2 = positions[edge.target_index]
            if all(math.isfinite(v) for v in (x1, y1, x2, y2)):
                self.surface.set_edge_line(i, float(x1), float(y1), float(x2), float(y2))

        if transform is not None:
            self.apply_transform(transform)

    def apply_transform(self, transform: ViewportTransform) -> None:
        if transform != self._last_transform:
            self.surface.set_transform(transform)
            self._last_transform = transform

    def restyle(self, hovered: Optional[str] = None) -> None:
        """
        Apply resting styles, or highlight `hovered` and its incident edges
        while dimming the rest.
        """
        self.hovered = hovered
        self.surface.set_background(tokens(self.theme).background)

        for node in self.graph.nodes:
            if node.id == hovered:
                style = node_style(node.degree, self.theme, hovered=True)
            else:
                style = self._base_styles[node.index]
            self.surface.set_node_style(node.index, style)

        normal = edge_style(self.theme, EdgeEmphasis.NORMAL)
        highlighted = edge_style(self.theme, EdgeEmphasis.HIGHLIGHTED)
        dimmed = edge_style(self.theme, EdgeEmphasis.DIMMED)
        for i, edge in enumerate(self.graph.edges):
            if hovered is None:
                style = normal
            elif edge.touches(hovered):
                style = highlighted
            else:
                style = dimmed
            self.surface.set_edge_style(i, style)

    def set_theme(self, theme: Theme) -> None:
        """Re-derive all theme-dependent colours. Positions are untouched."""
        self.theme = Theme(theme)
        self._derive_styles()
        self.restyle(self.hovered)
        logger.debug(f"Render styles re-derived for theme '{self.theme}'.")

    def _derive_styles(self) -> None:
        self._base_styles = [node_style(node.degree, self.theme) for node in self.graph.nodes]
