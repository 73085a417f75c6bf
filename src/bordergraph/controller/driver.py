"""
Simulation Driver (Cooperative Tick Loop)
=========================================
Runs the force simulation one tick per frame on the Qt event loop.

Why is this file needed?
------------------------
1. Responsiveness: A blocking `while` loop would freeze pointer and resize
   handling. A QTimer runs exactly one `step()` per timeout and then yields
   back to the event loop.
2. Lifecycle: The loop stops by itself once the layout has settled, can be
   restarted by a reheat, and is stopped unconditionally on teardown.

Classes:
    SimulationDriver: QObject wrapping the frame timer.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer, Signal

if TYPE_CHECKING:
    from bordergraph.model.simulation import ForceSimulation

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16  # ~60 FPS


class SimulationDriver(QObject):
    # Emitted after every tick with the new alpha
    ticked = Signal(float)
    # Emitted once when the loop pauses because the layout cooled down
    settled = Signal()

    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = FRAME_INTERVAL_MS) -> None:
        super().__init__(parent)
        self._simulation: Optional[ForceSimulation] = None

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def simulation(self) -> Optional[ForceSimulation]:
        return self._simulation

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def attach(self, simulation: Optional[ForceSimulation]) -> None:
        """Swap the driven simulation. The loop is stopped first."""
        self.stop()
        self._simulation = simulation

    def restart(self) -> None:
        """Resume ticking (no-op if already running or nothing is attached)."""
        if self._simulation is None or self._timer.isActive():
            return
        self._timer.start()
        logger.debug("Tick loop started.")

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("Tick loop stopped.")

    def step_once(self) -> None:
        """Run exactly one tick, as the timer would."""
        self._on_timeout()

    def _on_timeout(self) -> None:
        sim = self._simulation
        if sim is None:
            self.stop()
            return

        alpha = sim.step()
        self.ticked.emit(alpha)

        if sim.settled:
            self.stop()
            logger.debug(f"Layout settled after {sim.tick_count} ticks.")
            self.settled.emit()
