"""
Graph View (Render Surface)
===========================
QGraphicsView that draws the border graph and feeds pointer, wheel, keyboard
and resize events into a GraphSession.

Why is this file needed?
------------------------
1. Drawing: One circle + label per country and one line per border, all
   parented to a root item that carries the viewport transform (the same
   role the transformed <g> group plays in an SVG scene).
2. Input: Translates Qt events into drags, hover highlights, clicks and
   pan/zoom gestures.
3. Lifecycle: `attach` acquires every listener, `detach` releases them all.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple, TYPE_CHECKING

from PySide6.QtCore import Qt, QRectF, Signal
from PySide6.QtGui import (
    QBrush, QColor, QContextMenuEvent, QFont, QGuiApplication, QKeyEvent, QMouseEvent,
    QPainter, QPen, QResizeEvent, QTransform, QWheelEvent
)
from PySide6.QtWidgets import (
    QGraphicsEllipseItem, QGraphicsItem, QGraphicsLineItem, QGraphicsRectItem,
    QGraphicsScene, QGraphicsSimpleTextItem, QGraphicsView, QWidget
)

from bordergraph.model.styling import EdgeStyle, NodeStyle, Theme
from bordergraph.model.viewport import WHEEL_NOTCH_EXPONENT, GestureDelta, ViewportTransform

if TYPE_CHECKING:
    from bordergraph.controller.session import GraphSession
    from bordergraph.model.graph import BorderGraph

logger = logging.getLogger(__name__)

KEY_PAN_STEP = 40.0


# -------------------------------------------------------------------------------
# Scene items
# -------------------------------------------------------------------------------

class NodeItem(QGraphicsEllipseItem):
    """Country glyph with an always-visible label."""
    def __init__(self, node_id: str, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self.node_id = node_id
        self.setZValue(1.0)

        self.label = QGraphicsSimpleTextItem(node_id, self)
        self.label.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.label.setAcceptHoverEvents(False)

    def apply_style(self, style: NodeStyle) -> None:
        r = style.radius
        self.setRect(QRectF(-r, -r, 2.0 * r, 2.0 * r))
        self.setBrush(QBrush(QColor(style.fill)))
        self.setPen(QPen(QColor(style.stroke), style.stroke_width))

        font = QFont()
        font.setPixelSize(max(1, round(style.font_size)))
        self.label.setFont(font)
        self.label.setBrush(QBrush(QColor(style.label_color)))
        # label_dy is a baseline offset; the item is positioned by its top-left corner
        self.label.setPos(style.label_dx, style.label_dy - style.font_size)


class EdgeItem(QGraphicsLineItem):
    def __init__(self, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self.setZValue(0.0)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)

    def apply_style(self, style: EdgeStyle) -> None:
        color = QColor(style.color)
        color.setAlphaF(style.opacity)
        pen = QPen(color, style.width)
        pen.setCosmetic(False)
        self.setPen(pen)


# -------------------------------------------------------------------------------
# View
# -------------------------------------------------------------------------------

class GraphView(QGraphicsView):
    # Keyboard shortcut for "reset view"; the host decides what else happens
    reset_requested = Signal()
    # System colour scheme changed
    theme_changed = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._scene = QGraphicsScene(self)
        self._scene.setItemIndexMethod(QGraphicsScene.ItemIndexMethod.NoIndex)
        self.setScene(self._scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.SmartViewportUpdate)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        # Root group carrying the viewport transform
        self._root = QGraphicsRectItem()
        self._root.setPen(QPen(Qt.PenStyle.NoPen))
        self._scene.addItem(self._root)

        self._nodes: List[NodeItem] = []
        self._edges: List[EdgeItem] = []

        self._session: Optional[GraphSession] = None
        self._pan_origin: Optional[Tuple[float, float]] = None
        self._scheme_connected = False

    # ------------------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------------------

    @property
    def session(self) -> Optional[GraphSession]:
        return self._session

    def attach(self, session: GraphSession) -> None:
        """Mount on `session` and start listening to system theme changes."""
        if self._session is not None:
            self.detach()
        self._session = session
        w, h = self._container_size()
        self._scene.setSceneRect(0.0, 0.0, w, h)
        session.mount(self, w, h)

        hints = QGuiApplication.styleHints()
        if hints is not None and hasattr(hints, "colorSchemeChanged"):
            hints.colorSchemeChanged.connect(self._on_color_scheme_changed)
            self._scheme_connected = True

    def detach(self) -> None:
        """Release every listener and tear the session down."""
        if self._scheme_connected:
            QGuiApplication.styleHints().colorSchemeChanged.disconnect(self._on_color_scheme_changed)
            self._scheme_connected = False
        self._pan_origin = None
        session, self._session = self._session, None
        if session is not None:
            session.teardown()

    # ------------------------------------------------------------------------------
    # RenderSurface
    # ------------------------------------------------------------------------------

    def clear(self) -> None:
        for item in self._nodes + self._edges:
            self._scene.removeItem(item)
        self._nodes.clear()
        self._edges.clear()

    def create_items(self, graph: BorderGraph) -> None:
        self._edges = [EdgeItem(self._root) for _ in graph.edges]
        self._nodes = [NodeItem(node.id, self._root) for node in graph.nodes]

    def set_node_position(self, index: int, x: float, y: float) -> None:
        self._nodes[index].setPos(x, y)

    def set_edge_line(self, index: int, x1: float, y1: float, x2: float, y2: float) -> None:
        self._edges[index].setLine(x1, y1, x2, y2)

    def set_node_style(self, index: int, style: NodeStyle) -> None:
        self._nodes[index].apply_style(style)

    def set_edge_style(self, index: int, style: EdgeStyle) -> None:
        self._edges[index].apply_style(style)

    def set_transform(self, transform: ViewportTransform) -> None:
        self._root.setTransform(QTransform(transform.k, 0.0, 0.0, transform.k, transform.x, transform.y))

    def set_background(self, color: str) -> None:
        self.setBackgroundBrush(QBrush(QColor(color)))

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        interaction = self._interaction()
        if interaction is None:
            return super().mousePressEvent(event)

        event.accept()
        if event.button() != Qt.MouseButton.LeftButton:
            return

        point = self._scene_point(event)
        node = self._node_at(event)
        if node is not None:
            interaction.pointer_down(node.node_id, point)
        else:
            self._pan_origin = point

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        interaction = self._interaction()
        if interaction is None:
            return super().mouseMoveEvent(event)

        event.accept()
        point = self._scene_point(event)
        if interaction.dragging is not None:
            interaction.pointer_move(point)
        elif self._pan_origin is not None:
            dx = point[0] - self._pan_origin[0]
            dy = point[1] - self._pan_origin[1]
            self._pan_origin = point
            self._session.apply_gesture(GestureDelta(dx=dx, dy=dy))
            return

        node = self._node_at(event)
        if node is None:
            interaction.hover_leave()
        else:
            interaction.hover_enter(node.node_id)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        interaction = self._interaction()
        if interaction is None:
            return super().mouseReleaseEvent(event)

        # A node click/drag is consumed here and never reaches panning
        event.accept()
        if event.button() != Qt.MouseButton.LeftButton:
            return
        if interaction.dragging is not None:
            interaction.pointer_up()
        self._pan_origin = None

    def leaveEvent(self, event) -> None:
        interaction = self._interaction()
        if interaction is not None and interaction.dragging is None:
            interaction.hover_leave()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        if self._session is None:
            return super().wheelEvent(event)
        event.accept()
        notches = event.angleDelta().y() / 120.0
        if notches == 0.0:
            return
        pos = self.mapToScene(event.position().toPoint())
        self._session.apply_gesture(GestureDelta(
            scale=2.0 ** (notches * WHEEL_NOTCH_EXPONENT),
            anchor=(pos.x(), pos.y()),
        ))

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if self._session is None:
            return super().keyPressEvent(event)

        key = event.key()
        if key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
            self._session.apply_gesture(GestureDelta(scale=2.0 ** WHEEL_NOTCH_EXPONENT))
        elif key == Qt.Key.Key_Minus:
            self._session.apply_gesture(GestureDelta(scale=2.0 ** -WHEEL_NOTCH_EXPONENT))
        elif key == Qt.Key.Key_Left:
            self._session.apply_gesture(GestureDelta(dx=KEY_PAN_STEP))
        elif key == Qt.Key.Key_Right:
            self._session.apply_gesture(GestureDelta(dx=-KEY_PAN_STEP))
        elif key == Qt.Key.Key_Up:
            self._session.apply_gesture(GestureDelta(dy=KEY_PAN_STEP))
        elif key == Qt.Key.Key_Down:
            self._session.apply_gesture(GestureDelta(dy=-KEY_PAN_STEP))
        elif key in (Qt.Key.Key_Home, Qt.Key.Key_0):
            self.reset_requested.emit()
        else:
            return super().keyPressEvent(event)
        event.accept()

    def contextMenuEvent(self, event: QContextMenuEvent) -> None:
        # no context menu on the graph
        event.accept()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        w, h = self._container_size()
        self._scene.setSceneRect(0.0, 0.0, w, h)
        if self._session is not None:
            self._session.resize(w, h)

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _interaction(self):
        if self._session is None:
            return None
        return self._session.interaction

    def _container_size(self) -> Tuple[float, float]:
        vp = self.viewport()
        return float(max(1, vp.width())), float(max(1, vp.height()))

    def _scene_point(self, event: QMouseEvent) -> Tuple[float, float]:
        pos = self.mapToScene(event.position().toPoint())
        return pos.x(), pos.y()

    def _node_at(self, event: QMouseEvent) -> Optional[NodeItem]:
        # Labels are not hit targets; only the circle itself is
        for item in self.items(event.position().toPoint()):
            if isinstance(item, NodeItem):
                return item
        return None

    def _on_color_scheme_changed(self, scheme: Qt.ColorScheme) -> None:
        theme = Theme.DARK if scheme == Qt.ColorScheme.Dark else Theme.LIGHT
        if self._session is not None:
            self._session.set_theme(theme)
        self.theme_changed.emit(theme)
