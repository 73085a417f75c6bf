"""
Graph Controls Panel
"""
from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QSlider, QWidget

from bordergraph.model.simulation import MAX_STRENGTH, MIN_STRENGTH

STRENGTH_STEP = 10


class GraphControls(QWidget):
    strength_changed = Signal(int)
    reset_requested = Signal()

    def __init__(self, strength: int = 120, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)

        layout.addWidget(QLabel("Force Strength:"))

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(int(MIN_STRENGTH), int(MAX_STRENGTH))
        self.slider.setSingleStep(STRENGTH_STEP)
        self.slider.setPageStep(STRENGTH_STEP)
        self.slider.setTickInterval(STRENGTH_STEP)
        self.slider.setMaximumWidth(200)
        self.slider.setValue(int(strength))
        self.slider.valueChanged.connect(self._on_slider_changed)
        layout.addWidget(self.slider)

        self.lbl_value = QLabel(str(int(strength)))
        self.lbl_value.setMinimumWidth(30)
        layout.addWidget(self.lbl_value)

        layout.addStretch()

        self.btn_reset = QPushButton("Reset View")
        self.btn_reset.clicked.connect(self.reset_requested.emit)
        layout.addWidget(self.btn_reset)

    @property
    def strength(self) -> int:
        return self.slider.value()

    def _on_slider_changed(self, value: int) -> None:
        # Snap to the step grid (dragging the handle is not stepped)
        snapped = int(round(value / STRENGTH_STEP) * STRENGTH_STEP)
        if snapped != value:
            self.slider.setValue(snapped)
            return
        self.lbl_value.setText(str(value))
        self.strength_changed.emit(value)
