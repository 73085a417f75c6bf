from __future__ import annotations

import os
from typing import List, Optional, Tuple

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from bordergraph.model.graph import BorderGraph, build_graph
from bordergraph.model.styling import EdgeStyle, NodeStyle
from bordergraph.model.viewport import ViewportTransform


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def abc_pairs() -> List[Tuple[str, str]]:
    return [("A", "B"), ("B", "C")]


@pytest.fixture
def abc_graph(abc_pairs) -> BorderGraph:
    return build_graph(abc_pairs)


class FakeSurface:
    """Records what a render surface was asked to draw."""

    def __init__(self) -> None:
        self.cleared = 0
        self.graph: Optional[BorderGraph] = None
        self.node_positions: dict = {}
        self.edge_lines: dict = {}
        self.node_styles: dict = {}
        self.edge_styles: dict = {}
        self.transforms: List[ViewportTransform] = []
        self.background: Optional[str] = None

    def clear(self) -> None:
        self.cleared += 1
        self.graph = None
        self.node_positions.clear()
        self.edge_lines.clear()
        self.node_styles.clear()
        self.edge_styles.clear()

    def create_items(self, graph: BorderGraph) -> None:
        self.graph = graph

    def set_node_position(self, index: int, x: float, y: float) -> None:
        self.node_positions[index] = (x, y)

    def set_edge_line(self, index: int, x1: float, y1: float, x2: float, y2: float) -> None:
        self.edge_lines[index] = (x1, y1, x2, y2)

    def set_node_style(self, index: int, style: NodeStyle) -> None:
        self.node_styles[index] = style

    def set_edge_style(self, index: int, style: EdgeStyle) -> None:
        self.edge_styles[index] = style

    def set_transform(self, transform: ViewportTransform) -> None:
        self.transforms.append(transform)

    def set_background(self, color: str) -> None:
        self.background = color


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()
