"""
Viewport Transform Manager
==========================
Owns the pan/zoom transform that maps simulation space to screen space:

    screen = sim * k + (x, y)

Gestures compose onto the current transform; the scale always stays inside
the configured extent. `reset` returns to identity, optionally through a
smooth un-zoom animation.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]

SCALE_EXTENT: Tuple[float, float] = (0.1, 4.0)
RESET_DURATION_MS = 750
WHEEL_NOTCH_EXPONENT = 0.2  # one wheel notch zooms by 2 ** 0.2


@dataclass(frozen=True)
class ViewportTransform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, point: Point2D) -> Point2D:
        """Simulation space -> screen space."""
        return point[0] * self.k + self.x, point[1] * self.k + self.y

    def invert(self, point: Point2D) -> Point2D:
        """Screen space -> simulation space."""
        return (point[0] - self.x) / self.k, (point[1] - self.y) / self.k

    def is_close(self, other: ViewportTransform, tol: float = 1e-9) -> bool:
        return (
            math.isclose(self.k, other.k, abs_tol=tol)
            and math.isclose(self.x, other.x, abs_tol=tol)
            and math.isclose(self.y, other.y, abs_tol=tol)
        )


IDENTITY = ViewportTransform()


@dataclass(frozen=True)
class GestureDelta:
    """
    One pointer gesture.

    Attributes:
        dx, dy: Pan offset in screen pixels.
        scale: Multiplicative zoom factor (1.0 = no zoom).
        anchor: Screen point that stays fixed while zooming. Defaults to the
                viewport centre.
    """
    dx: float = 0.0
    dy: float = 0.0
    scale: float = 1.0
    anchor: Optional[Point2D] = None


def ease_cubic_in_out(t: float) -> float:
    t = min(max(t, 0.0), 1.0) * 2.0
    if t <= 1.0:
        return t * t * t / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0


@dataclass(frozen=True)
class ResetAnimation:
    """
    Interpolates between two transforms around a fixed anchor point.

    The view is described by the simulation point under the anchor and the
    visible width; width is interpolated geometrically so the zoom feels
    uniform.
    """
    start: ViewportTransform
    end: ViewportTransform
    anchor: Point2D
    width: float

    def at(self, t: float) -> ViewportTransform:
        if t >= 1.0:
            return self.end
        if t <= 0.0:
            return self.start

        e = ease_cubic_in_out(t)
        c0 = self.start.invert(self.anchor)
        c1 = self.end.invert(self.anchor)
        w0 = self.width / self.start.k
        w1 = self.width / self.end.k

        cx = c0[0] + (c1[0] - c0[0]) * e
        cy = c0[1] + (c1[1] - c0[1]) * e
        w = w0 * (w1 / w0) ** e
        k = self.width / w
        return ViewportTransform(k=k, x=self.anchor[0] - cx * k, y=self.anchor[1] - cy * k)


def _finite(value: float, default: float) -> float:
    return float(value) if math.isfinite(value) else default


class ViewportManager:
    """The single owner of the viewport transform."""

    def __init__(
        self,
        width: float = 1.0,
        height: float = 1.0,
        scale_extent: Tuple[float, float] = SCALE_EXTENT
    ) -> None:
        lo, hi = scale_extent
        if not (0.0 < lo <= hi):
            raise ValueError(f"Invalid scale extent {scale_extent}.")
        self.scale_extent = (float(lo), float(hi))
        self.width = max(1.0, float(width))
        self.height = max(1.0, float(height))
        self._transform = IDENTITY

    @property
    def transform(self) -> ViewportTransform:
        return self._transform

    @property
    def midpoint(self) -> Point2D:
        return self.width / 2.0, self.height / 2.0

    def resize(self, width: float, height: float) -> None:
        self.width = max(1.0, _finite(width, 1.0))
        self.height = max(1.0, _finite(height, 1.0))

    def clamp_scale(self, k: float) -> float:
        lo, hi = self.scale_extent
        return min(max(k, lo), hi)

    # ------------------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------------------

    def apply_gesture(self, delta: GestureDelta) -> ViewportTransform:
        """
        Compose a gesture onto the current transform.
        Out-of-range inputs are clamped, never rejected.
        """
        t = self._transform
        factor = _finite(delta.scale, 1.0)
        if factor <= 0.0:
            factor = 1.0
        anchor = delta.anchor if delta.anchor is not None else self.midpoint
        ax, ay = _finite(anchor[0], self.midpoint[0]), _finite(anchor[1], self.midpoint[1])

        k = self.clamp_scale(t.k * factor)
        # keep the simulation point under the anchor fixed
        sx, sy = t.invert((ax, ay))
        x = ax - sx * k + _finite(delta.dx, 0.0)
        y = ay - sy * k + _finite(delta.dy, 0.0)

        self._transform = ViewportTransform(k=k, x=x, y=y)
        return self._transform

    def pan_by(self, dx: float, dy: float) -> ViewportTransform:
        return self.apply_gesture(GestureDelta(dx=dx, dy=dy))

    def zoom_by(self, factor: float, anchor: Optional[Point2D] = None) -> ViewportTransform:
        return self.apply_gesture(GestureDelta(scale=factor, anchor=anchor))

    def zoom_wheel(self, notches: float, anchor: Optional[Point2D] = None) -> ViewportTransform:
        """Zoom by wheel notches (positive = in)."""
        return self.zoom_by(2.0 ** (_finite(notches, 0.0) * WHEEL_NOTCH_EXPONENT), anchor)

    # ------------------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------------------

    def reset(self) -> ViewportTransform:
        """Jump straight to identity."""
        self._transform = IDENTITY
        logger.debug("Viewport reset to identity.")
        return self._transform

    def begin_reset(self) -> ResetAnimation:
        """
        Prepare a smooth un-zoom to identity. The animation anchor is the
        current transform inverted at the container midpoint.
        """
        anchor = self._transform.invert(self.midpoint)
        return ResetAnimation(
            start=self._transform,
            end=IDENTITY,
            anchor=anchor,
            width=max(self.width, self.height),
        )

    def advance(self, animation: ResetAnimation, t: float) -> ViewportTransform:
        """Set the transform to the animation's value at progress `t` in [0, 1]."""
        result = animation.at(t)
        self._transform = ViewportTransform(k=self.clamp_scale(result.k), x=result.x, y=result.y)
        return self._transform
