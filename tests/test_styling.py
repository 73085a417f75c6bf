from __future__ import annotations

import math

import pytest
from matplotlib.colors import to_rgb

from bordergraph.model.styling import (
    EdgeEmphasis, Theme, edge_style, from_hcl, hover_radius, interpolate_hcl, label_font_size, label_offset,
    node_fill, node_radius, node_style, to_hcl, tokens
)


@pytest.mark.parametrize(("count", "radius"), [(0, 4.0), (1, 4.5), (4, 6.0), (10, 9.0), (50, 9.0)])
def test_node_radius_saturates(count, radius) -> None:
    assert node_radius(count) == radius


def test_hover_radius_is_larger() -> None:
    assert hover_radius(0) == 8.0
    assert hover_radius(30) == 13.0
    assert all(hover_radius(n) > node_radius(n) for n in range(30))


def test_label_font_and_offset() -> None:
    assert label_font_size(0) == 10.0
    assert label_font_size(15) == 11.5
    assert label_font_size(100) == 12.0
    assert label_offset(2) == (9.0, 4.0)


@pytest.mark.parametrize("theme", list(Theme))
def test_fill_ramp_hits_stops(theme) -> None:
    low, mid, high = tokens(theme).node_stops

    assert to_rgb(node_fill(0, theme)) == pytest.approx(to_rgb(low), abs=1 / 255)
    assert to_rgb(node_fill(20, theme)) == pytest.approx(to_rgb(mid), abs=1 / 255)
    assert to_rgb(node_fill(40, theme)) == pytest.approx(to_rgb(high), abs=1 / 255)
    assert node_fill(80, theme) == node_fill(40, theme)


def test_hovered_node_uses_accent() -> None:
    style = node_style(3, Theme.DARK, hovered=True)

    assert style.fill == tokens(Theme.DARK).accent
    assert style.radius == hover_radius(3)
    assert style.label_color == tokens(Theme.DARK).text


def test_edge_emphasis() -> None:
    normal = edge_style(Theme.LIGHT)
    highlighted = edge_style(Theme.LIGHT, EdgeEmphasis.HIGHLIGHTED)
    dimmed = edge_style(Theme.LIGHT, EdgeEmphasis.DIMMED)

    assert (normal.opacity, normal.width) == (0.4, 0.8)
    assert (highlighted.color, highlighted.opacity, highlighted.width) == ("#FF6B6B", 0.8, 2.0)
    assert dimmed.opacity < normal.opacity


def test_themes_differ() -> None:
    assert tokens(Theme.LIGHT).background != tokens(Theme.DARK).background
    assert node_fill(5, Theme.LIGHT) != node_fill(5, Theme.DARK)
    assert Theme("dark") is Theme.DARK


def test_hcl_round_trip() -> None:
    for color in ("#67b7d1", "#0a2463", "#ff6b6b", "#111827"):
        assert from_hcl(*to_hcl(color)) == color


def test_white_is_achromatic() -> None:
    hue, chroma, lightness = to_hcl("#ffffff")

    assert math.isnan(hue)
    assert chroma == pytest.approx(0.0, abs=1e-6)
    assert lightness == pytest.approx(100.0, abs=1e-3)


@pytest.mark.parametrize("theme", list(Theme))
def test_ramp_is_interpolated_in_hcl(theme) -> None:
    low, mid, _ = tokens(theme).node_stops
    h0, c0, l0 = to_hcl(low)
    h1, c1, l1 = to_hcl(mid)

    hue, chroma, lightness = to_hcl(node_fill(10, theme))

    # lightness and chroma move linearly; 8-bit rounding costs under one unit
    assert lightness == pytest.approx((l0 + l1) / 2.0, abs=1.0)
    assert chroma == pytest.approx((c0 + c1) / 2.0, abs=1.5)
    assert min(h0, h1) - 2.0 <= hue <= max(h0, h1) + 2.0


def test_hue_takes_the_short_way_round() -> None:
    # a dusty red and a dusty purple sit either side of 0 degrees
    hue, _, _ = to_hcl(interpolate_hcl("#a08080", "#a080a0", 0.5))

    assert not 90.0 < hue < 270.0
