"""
Graph Session (Lifecycle Controller)
====================================
Wires the graph builder, simulation, viewport, interaction layer and render
synchronizer together for one mounted render surface.

Why is this file needed?
------------------------
1. Lifecycle: Everything recurring (tick loop, "loaded" timer, reset
   animation) is acquired on build and released on teardown, including
   teardown in the middle of a drag or highlight.
2. Host interface: The window talks to a single object for strength, resize,
   theme, reset and notifications.
3. Robustness: A build requested before a surface is mounted is deferred and
   retried on mount.

Classes:
    GraphSession: QObject emitting `notified(Notification)`.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from PySide6.QtCore import QEasingCurve, QObject, QTimeLine, QTimer, Signal

from bordergraph.controller.driver import FRAME_INTERVAL_MS, SimulationDriver
from bordergraph.controller.render import RenderSynchronizer
from bordergraph.model import notifications
from bordergraph.model.graph import BorderGraph, build_graph, normalize_pairs
from bordergraph.model.interaction import InteractionController
from bordergraph.model.notifications import Notification
from bordergraph.model.simulation import ForceSimulation, SimulationConfig, clamp_strength
from bordergraph.model.styling import Theme
from bordergraph.model.viewport import RESET_DURATION_MS, GestureDelta, ResetAnimation, ViewportManager

if TYPE_CHECKING:
    from bordergraph.controller.render import RenderSurface

logger = logging.getLogger(__name__)

LOADED_DELAY_MS = 1500


class GraphSession(QObject):
    notified = Signal(object)

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        theme: Theme = Theme.LIGHT,
        parent: Optional[QObject] = None
    ) -> None:
        super().__init__(parent)
        self.config = config or SimulationConfig()
        self.theme = Theme(theme)
        self.strength = clamp_strength(self.config.strength)

        self.viewport = ViewportManager()
        self.graph: Optional[BorderGraph] = None
        self.simulation: Optional[ForceSimulation] = None
        self.synchronizer: Optional[RenderSynchronizer] = None
        self.interaction: Optional[InteractionController] = None

        self._surface: Optional[RenderSurface] = None
        self._size: Tuple[float, float] = (1.0, 1.0)
        self._pairs: Optional[List[Tuple[str, str]]] = None
        self._loading = False

        self.driver = SimulationDriver(self)
        self.driver.ticked.connect(self._on_tick)

        self._loaded_timer = QTimer(self)
        self._loaded_timer.setSingleShot(True)
        self._loaded_timer.setInterval(LOADED_DELAY_MS)
        self._loaded_timer.timeout.connect(self._on_loaded)

        self._reset_timeline: Optional[QTimeLine] = None
        self._reset_animation: Optional[ResetAnimation] = None

    # ------------------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------------------

    @property
    def is_mounted(self) -> bool:
        return self._surface is not None

    @property
    def is_resetting(self) -> bool:
        return self._reset_timeline is not None

    # ------------------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------------------

    def mount(self, surface: RenderSurface, width: float, height: float) -> None:
        """Attach a render surface. Builds immediately if data is waiting."""
        self._surface = surface
        self._size = (float(width), float(height))
        self.viewport.resize(width, height)
        logger.debug(f"Render surface mounted ({width}x{height}).")
        if self._pairs is not None and self.graph is None:
            self.build(self._pairs)

    def build(self, pairs: Sequence[Sequence[str]]) -> None:
        """
        (Re)build the visualization from raw border pairs.
        Without a mounted surface the build is deferred until `mount`.

        Raises:
            ValueError: If an entry is not a (source, target) pair. Nothing
                        is stored or torn down in that case.
        """
        self._pairs = normalize_pairs(pairs)
        if self._surface is None:
            logger.debug("No render surface mounted yet, deferring build.")
            return

        self._release()
        self._loading = True
        self._emit(notifications.building())

        graph = build_graph(self._pairs)
        config = dataclasses.replace(self.config, strength=self.strength)
        simulation = ForceSimulation(graph, *self._size, config=config)

        synchronizer = RenderSynchronizer(graph, self._surface, self.theme)
        synchronizer.populate()
        synchronizer.sync(simulation.positions(), self.viewport.transform)

        self.graph = graph
        self.simulation = simulation
        self.synchronizer = synchronizer
        self.interaction = InteractionController(
            graph,
            simulation,
            self.viewport,
            on_restart=self.driver.restart,
            on_highlight=synchronizer.restyle,
            notify=self._emit,
        )

        self.driver.attach(simulation)
        self.driver.restart()
        self._loaded_timer.start()
        logger.info(f"Building graph: {len(graph.nodes)} countries, {len(graph.edges)} borders.")

    def teardown(self) -> None:
        """Stop every recurring callback and detach from the surface."""
        self._release()
        if self._loading:
            self._emit(notifications.dismiss(notifications.BUILD_KEY))
            self._loading = False
        if self._surface is not None:
            self._surface.clear()
        self._surface = None
        logger.info("Graph session torn down.")

    # ------------------------------------------------------------------------------
    # Host controls
    # ------------------------------------------------------------------------------

    def set_strength(self, value: float) -> None:
        """Change only the repulsion magnitude; the graph is not rebuilt."""
        self.strength = clamp_strength(value)
        if self.simulation is not None:
            self.simulation.set_strength(self.strength)
            self.driver.restart()

    def resize(self, width: float, height: float) -> None:
        self._size = (float(width), float(height))
        self.viewport.resize(width, height)
        if self.simulation is not None:
            self.simulation.resize(width, height)
            self.driver.restart()

    def set_theme(self, theme: Theme) -> None:
        self.theme = Theme(theme)
        if self.synchronizer is not None:
            self.synchronizer.set_theme(self.theme)

    def apply_gesture(self, delta: GestureDelta) -> None:
        """Pan/zoom from the pointer. Interrupts a running reset animation."""
        self._stop_reset_animation()
        self.viewport.apply_gesture(delta)
        self._push_transform()

    def reset_view(self, animate: bool = True) -> None:
        """Return the viewport to identity, optionally as a smooth un-zoom."""
        self._stop_reset_animation()
        if not animate or self._surface is None:
            self.viewport.reset()
            self._push_transform()
            return

        self._reset_animation = self.viewport.begin_reset()
        timeline = QTimeLine(RESET_DURATION_MS, self)
        timeline.setUpdateInterval(FRAME_INTERVAL_MS)
        timeline.setEasingCurve(QEasingCurve(QEasingCurve.Type.Linear))
        timeline.valueChanged.connect(self._on_reset_frame)
        timeline.finished.connect(self._on_reset_finished)
        self._reset_timeline = timeline
        timeline.start()
        logger.info("Resetting view.")

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def _on_tick(self, _alpha: float) -> None:
        if self.synchronizer is None or self.simulation is None:
            return
        self.synchronizer.sync(self.simulation.positions(), self.viewport.transform)

    def _on_loaded(self) -> None:
        if self.graph is None:
            return
        self._loading = False
        self._emit(notifications.dismiss(notifications.BUILD_KEY))
        self._emit(notifications.loaded(len(self.graph.nodes), len(self.graph.edges)))
        logger.info(f"Loaded {len(self.graph.nodes)} countries with {len(self.graph.edges)} borders")

    def _on_reset_frame(self, t: float) -> None:
        if self._reset_animation is None:
            return
        self.viewport.advance(self._reset_animation, t)
        self._push_transform()

    def _on_reset_finished(self) -> None:
        self._on_reset_frame(1.0)
        self._stop_reset_animation()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _emit(self, notification: Notification) -> None:
        self.notified.emit(notification)

    def _push_transform(self) -> None:
        if self.synchronizer is not None:
            self.synchronizer.apply_transform(self.viewport.transform)
        elif self._surface is not None:
            self._surface.set_transform(self.viewport.transform)

    def _stop_reset_animation(self) -> None:
        timeline, self._reset_timeline = self._reset_timeline, None
        self._reset_animation = None
        if timeline is not None:
            timeline.stop()
            timeline.deleteLater()

    def _release(self) -> None:
        """Stop recurring work and drop the current graph state."""
        self.driver.attach(None)
        self._loaded_timer.stop()
        self._stop_reset_animation()
        if self.interaction is not None:
            self.interaction.cancel()
        self.graph = None
        self.simulation = None
        self.synchronizer = None
        self.interaction = None
