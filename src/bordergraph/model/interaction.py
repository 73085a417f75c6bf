"""
Interaction Layer
=================
Turns pointer events into drags, hover highlights and click inspections.

Why is this file needed?
------------------------
1. Single pointer: At most one node is pinned by a drag at any time.
2. Coordinates: Raw pointer positions are screen space; pins are set in
   simulation space through the viewport inverse.
3. Decoupling: The controller injects callbacks for restarting the tick loop,
   restyling and notifications, so this module stays Qt-free.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from bordergraph.model.notifications import NodeInspection, Notification

if TYPE_CHECKING:
    from bordergraph.model.graph import BorderGraph
    from bordergraph.model.simulation import ForceSimulation
    from bordergraph.model.viewport import ViewportManager

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]


@dataclass
class DragState:
    node_id: str
    press_point: Point2D
    moved: bool = False


class InteractionController:
    def __init__(
        self,
        graph: BorderGraph,
        simulation: ForceSimulation,
        viewport: ViewportManager,
        on_restart: Optional[Callable[[], None]] = None,
        on_highlight: Optional[Callable[[Optional[str]], None]] = None,
        notify: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        self.graph = graph
        self.simulation = simulation
        self.viewport = viewport
        self._on_restart = on_restart
        self._on_highlight = on_highlight
        self._notify = notify

        self._drag: Optional[DragState] = None
        self._hovered: Optional[str] = None

    # ------------------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------------------

    @property
    def dragging(self) -> Optional[str]:
        return self._drag.node_id if self._drag else None

    @property
    def hovered(self) -> Optional[str]:
        return self._hovered

    # ------------------------------------------------------------------------------
    # Drag
    # ------------------------------------------------------------------------------

    def pointer_down(self, node_id: str, screen_point: Point2D) -> bool:
        """
        Idle -> Dragging. Pins the node where it currently is and reheats.

        Returns:
            False if another drag is already active (single pointer model).
        """
        if self._drag is not None:
            logger.debug(f"Ignoring pointer down on '{node_id}', already dragging '{self._drag.node_id}'.")
            return False

        x, y = self.simulation.position(node_id)
        self.simulation.pin(node_id, x, y)
        self.simulation.set_alpha_target(self.simulation.config.reheat_alpha)
        self._drag = DragState(node_id=node_id, press_point=(float(screen_point[0]), float(screen_point[1])))
        self._restart()
        logger.debug(f"Drag started on '{node_id}'.")
        return True

    def pointer_move(self, screen_point: Point2D) -> None:
        """Dragging -> Dragging. Moves the pin under the pointer."""
        if self._drag is None:
            return
        if (screen_point[0], screen_point[1]) != self._drag.press_point:
            self._drag.moved = True
        sx, sy = self.viewport.transform.invert(screen_point)
        self.simulation.pin(self._drag.node_id, sx, sy)

    def pointer_up(self) -> Optional[str]:
        """
        Dragging -> Idle. Releases the pin; alpha decays normally afterwards.
        A press and release without movement counts as a click.

        Returns:
            The released node id, or None if nothing was being dragged.
        """
        if self._drag is None:
            return None
        drag, self._drag = self._drag, None
        self.simulation.unpin(drag.node_id)
        self.simulation.set_alpha_target(0.0)
        logger.debug(f"Drag released on '{drag.node_id}'.")
        if not drag.moved:
            self.click(drag.node_id)
        return drag.node_id

    # ------------------------------------------------------------------------------
    # Hover / click
    # ------------------------------------------------------------------------------

    def hover_enter(self, node_id: str) -> None:
        self.graph.index_of(node_id)
        if self._hovered == node_id:
            return
        self._hovered = node_id
        self._highlight()

    def hover_leave(self, node_id: Optional[str] = None) -> None:
        if self._hovered is None:
            return
        if node_id is not None and node_id != self._hovered:
            return
        self._hovered = None
        self._highlight()

    def click(self, node_id: str) -> NodeInspection:
        """Emit the neighbor summary for `node_id`."""
        inspection = NodeInspection.for_node(self.graph, node_id)
        logger.info(inspection.title)
        if self._notify is not None:
            self._notify(inspection.to_notification())
        return inspection

    # ------------------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------------------

    def cancel(self) -> None:
        """Drop any active drag and highlight without emitting a click."""
        if self._drag is not None:
            self.simulation.unpin(self._drag.node_id)
            self.simulation.set_alpha_target(0.0)
            self._drag = None
        self._hovered = None

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _restart(self) -> None:
        if self._on_restart is not None:
            self._on_restart()

    def _highlight(self) -> None:
        if self._on_highlight is not None:
            self._on_highlight(self._hovered)
