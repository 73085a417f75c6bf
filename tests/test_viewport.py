from __future__ import annotations

import math

import pytest

from bordergraph.model.viewport import (
    IDENTITY, GestureDelta, ResetAnimation, ViewportManager, ViewportTransform, ease_cubic_in_out
)


@pytest.fixture
def viewport() -> ViewportManager:
    return ViewportManager(800.0, 600.0)


def test_transform_apply_and_invert() -> None:
    t = ViewportTransform(k=2.0, x=10.0, y=-5.0)

    assert t.apply((3.0, 4.0)) == (16.0, 3.0)
    assert t.invert(t.apply((3.0, 4.0))) == pytest.approx((3.0, 4.0))


def test_starts_at_identity(viewport) -> None:
    assert viewport.transform == IDENTITY
    assert viewport.midpoint == (400.0, 300.0)


def test_pan_adds_offset(viewport) -> None:
    viewport.pan_by(25.0, -10.0)

    assert viewport.transform == ViewportTransform(k=1.0, x=25.0, y=-10.0)


def test_zoom_keeps_anchor_fixed(viewport) -> None:
    anchor = (200.0, 150.0)
    before = viewport.transform.invert(anchor)

    viewport.zoom_by(2.0, anchor)

    assert viewport.transform.k == pytest.approx(2.0)
    assert viewport.transform.invert(anchor) == pytest.approx(before)


def test_wheel_notch_factor(viewport) -> None:
    viewport.zoom_wheel(1.0)

    assert viewport.transform.k == pytest.approx(2.0 ** 0.2)


@pytest.mark.parametrize(("factor", "expected"), [(100.0, 4.0), (0.001, 0.1)])
def test_scale_is_clamped(viewport, factor, expected) -> None:
    for _ in range(5):
        viewport.zoom_by(factor)

    assert viewport.transform.k == pytest.approx(expected)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), -2.0, 0.0])
def test_invalid_zoom_factor_is_ignored(viewport, bad) -> None:
    viewport.apply_gesture(GestureDelta(scale=bad, dx=float("nan")))

    assert viewport.transform == IDENTITY


def test_invalid_scale_extent_raises() -> None:
    with pytest.raises(ValueError):
        ViewportManager(scale_extent=(2.0, 1.0))


def test_easing_endpoints() -> None:
    assert ease_cubic_in_out(0.0) == 0.0
    assert ease_cubic_in_out(0.5) == pytest.approx(0.5)
    assert ease_cubic_in_out(1.0) == 1.0


def test_reset_is_immediate(viewport) -> None:
    viewport.zoom_by(3.0, (10.0, 10.0))
    viewport.pan_by(40.0, 40.0)

    viewport.reset()

    assert viewport.transform == IDENTITY


def test_reset_animation_ends_exactly_at_identity(viewport) -> None:
    viewport.zoom_by(3.0, (100.0, 80.0))
    viewport.pan_by(-60.0, 35.0)
    start = viewport.transform
    animation = viewport.begin_reset()

    assert animation.anchor == start.invert(viewport.midpoint)
    assert animation.width == 800.0
    assert viewport.advance(animation, 0.0) == start

    for step in range(1, 47):
        t = viewport.advance(animation, step / 47)
        assert 0.1 <= t.k <= 4.0
        assert all(math.isfinite(v) for v in (t.k, t.x, t.y))

    assert viewport.advance(animation, 1.0) == IDENTITY


def test_reset_animation_zoom_is_monotonic() -> None:
    animation = ResetAnimation(
        start=ViewportTransform(k=4.0, x=-300.0, y=-200.0),
        end=IDENTITY,
        anchor=(400.0, 300.0),
        width=800.0,
    )

    scales = [animation.at(i / 20).k for i in range(21)]

    assert scales == sorted(scales, reverse=True)
    assert scales[0] == 4.0
    assert scales[-1] == 1.0
