"""
Derived Presentation
Theme tokens and neighbor-count driven sizes and colours.

Everything here is a pure function of (neighbor count, theme, emphasis), so
styling can be recomputed on theme change without touching positions.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from typing import Tuple

import numpy as np
from matplotlib.colors import to_hex, to_rgb

# Saturation thresholds (neighbor counts)
RADIUS_SATURATION = 10
FONT_SATURATION = 20
COLOR_SATURATION = 40
COLOR_MIDPOINT = 20


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class EdgeEmphasis(StrEnum):
    NORMAL = "normal"
    HIGHLIGHTED = "highlighted"
    DIMMED = "dimmed"


@dataclass(frozen=True)
class ThemeTokens:
    node_stops: Tuple[str, str, str]
    text: str
    link: str
    accent: str
    node_stroke: str
    background: str


THEMES = {
    Theme.LIGHT: ThemeTokens(
        node_stops=("#67B7D1", "#3E5C76", "#0A2463"),
        text="#333333",
        link="#999999",
        accent="#FF6B6B",
        node_stroke="#FFFFFF",
        background="#F8FAFC",
    ),
    Theme.DARK: ThemeTokens(
        node_stops=("#60A5FA", "#3B82F6", "#2563EB"),
        text="#E5E7EB",
        link="#4B5563",
        accent="#F87171",
        node_stroke="#374151",
        background="#111827",
    ),
}


def tokens(theme: Theme) -> ThemeTokens:
    return THEMES[Theme(theme)]


@dataclass(frozen=True)
class NodeStyle:
    radius: float
    fill: str
    stroke: str
    stroke_width: float
    label_color: str
    font_size: float
    label_dx: float
    label_dy: float


@dataclass(frozen=True)
class EdgeStyle:
    color: str
    opacity: float
    width: float


# ------------------------------------------------------------------------------
# Sizes
# ------------------------------------------------------------------------------

def _bonus(count: int, divisor: float, cap: float) -> float:
    return min(max(count, 0) / divisor, cap)


def node_radius(count: int) -> float:
    return 4.0 + _bonus(count, 2.0, 5.0)


def hover_radius(count: int) -> float:
    return 8.0 + _bonus(count, 2.0, 5.0)


def label_font_size(count: int) -> float:
    return 10.0 + _bonus(count, 10.0, 2.0)


def label_offset(count: int) -> Tuple[float, float]:
    return 8.0 + _bonus(count, 2.0, 5.0), 4.0


# ------------------------------------------------------------------------------
# Colours
# ------------------------------------------------------------------------------

# CIELAB with the D50 white point and Bradford-adapted sRGB matrices
_LAB_WHITE = np.array([0.96422, 1.0, 0.82521])
_RGB_TO_XYZ = np.array([
    [0.4360747, 0.3850649, 0.1430804],
    [0.2225045, 0.7168786, 0.0606169],
    [0.0139322, 0.0971045, 0.7141733],
])
_XYZ_TO_RGB = np.array([
    [3.1338561, -1.6168667, -0.4906146],
    [-0.9787684, 1.9161415, 0.0334540],
    [0.0719453, -0.2289914, 1.4052427],
])
_T0 = 4.0 / 29.0
_T1 = 6.0 / 29.0
_T2 = 3.0 * _T1 * _T1
_T3 = _T1 ** 3


def to_hcl(color: str) -> Tuple[float, float, float]:
    """
    Convert a colour to (hue in degrees, chroma, lightness).
    Hue is NaN for achromatic colours.
    """
    rgb = np.asarray(to_rgb(color), dtype=np.float64)
    linear = np.where(rgb <= 0.04045, rgb / 12.92, ((rgb + 0.055) / 1.055) ** 2.4)
    xyz = (_RGB_TO_XYZ @ linear) / _LAB_WHITE
    f = np.where(xyz > _T3, np.cbrt(xyz), xyz / _T2 + _T0)

    lightness = 116.0 * f[1] - 16.0
    a = 500.0 * (f[0] - f[1])
    b = 200.0 * (f[1] - f[2])
    chroma = math.hypot(a, b)
    hue = math.degrees(math.atan2(b, a)) % 360.0 if chroma > 1e-9 else math.nan
    return hue, chroma, float(lightness)


def from_hcl(hue: float, chroma: float, lightness: float) -> str:
    """Inverse of `to_hcl`; out-of-gamut channels are clipped."""
    if math.isnan(hue):
        hue, chroma = 0.0, 0.0
    a = chroma * math.cos(math.radians(hue))
    b = chroma * math.sin(math.radians(hue))

    fy = (lightness + 16.0) / 116.0
    f = np.array([fy + a / 500.0, fy, fy - b / 200.0])
    xyz = np.where(f > _T1, f ** 3, _T2 * (f - _T0)) * _LAB_WHITE
    linear = _XYZ_TO_RGB @ xyz
    rgb = np.where(
        linear <= 0.0031308,
        12.92 * linear,
        1.055 * np.maximum(linear, 0.0) ** (1.0 / 2.4) - 0.055,
    )
    return to_hex(np.clip(rgb, 0.0, 1.0))


def interpolate_hcl(start: str, end: str, t: float) -> str:
    """Blend two colours in HCL, taking the shorter way around the hue circle."""
    h0, c0, l0 = to_hcl(start)
    h1, c1, l1 = to_hcl(end)

    if math.isnan(h0) or math.isnan(h1):
        hue = h1 if math.isnan(h0) else h0
    else:
        d = h1 - h0
        if d > 180.0 or d < -180.0:
            d -= 360.0 * round(d / 360.0)
        hue = h0 + d * t

    return from_hcl(hue, c0 + (c1 - c0) * t, l0 + (l1 - l0) * t)


@lru_cache(maxsize=None)
def node_fill(count: int, theme: Theme = Theme.LIGHT) -> str:
    """Three-stop HCL ramp over [0, 20, 40] neighbors, saturating at 40."""
    low, mid, high = tokens(theme).node_stops
    value = min(max(count, 0), COLOR_SATURATION)
    if value <= COLOR_MIDPOINT:
        return interpolate_hcl(low, mid, value / COLOR_MIDPOINT)
    return interpolate_hcl(mid, high, (value - COLOR_MIDPOINT) / (COLOR_SATURATION - COLOR_MIDPOINT))


def node_style(count: int, theme: Theme = Theme.LIGHT, hovered: bool = False) -> NodeStyle:
    t = tokens(theme)
    dx, dy = label_offset(count)
    return NodeStyle(
        radius=hover_radius(count) if hovered else node_radius(count),
        fill=t.accent if hovered else node_fill(count, theme),
        stroke=t.node_stroke,
        stroke_width=1.5,
        label_color=t.text,
        font_size=label_font_size(count),
        label_dx=dx,
        label_dy=dy,
    )


def edge_style(theme: Theme = Theme.LIGHT, emphasis: EdgeEmphasis = EdgeEmphasis.NORMAL) -> EdgeStyle:
    t = tokens(theme)
    match emphasis:
        case EdgeEmphasis.HIGHLIGHTED:
            return EdgeStyle(color=t.accent, opacity=0.8, width=2.0)
        case EdgeEmphasis.DIMMED:
            return EdgeStyle(color=t.link, opacity=0.1, width=0.8)
        case _:
            return EdgeStyle(color=t.link, opacity=0.4, width=0.8)
