from __future__ import annotations

import logging

import numpy as np
import pytest

from bordergraph.model.graph import build_graph
from bordergraph.model.simulation import (
    MAX_STRENGTH, MIN_DIMENSION, MIN_STRENGTH, ForceSimulation, SimulationConfig, clamp_dimensions, clamp_strength
)


@pytest.fixture
def sim(abc_graph) -> ForceSimulation:
    return ForceSimulation(abc_graph, 800.0, 600.0)


def test_defaults() -> None:
    config = SimulationConfig()

    assert config.strength == 120.0
    assert config.link_distance == 80.0
    assert config.collide_radius == 40.0
    assert config.alpha_min == 0.001


def test_initial_state(sim) -> None:
    assert sim.alpha == 1.0
    assert sim.alpha_target == 0.0
    assert sim.center == (400.0, 300.0)
    assert sim.positions().shape == (3, 2)
    assert np.all(np.isfinite(sim.positions()))


def test_alpha_decays_monotonically_until_settled(sim) -> None:
    previous = sim.alpha
    while not sim.settled:
        alpha = sim.step()
        assert alpha <= previous
        previous = alpha
        assert sim.tick_count < 2000

    assert sim.alpha < sim.config.alpha_min
    assert np.all(np.isfinite(sim.positions()))


def test_layout_separates_neighbours(sim) -> None:
    sim.tick(300)

    a = np.array(sim.position("A"))
    b = np.array(sim.position("B"))
    c = np.array(sim.position("C"))
    # collision keeps glyph centres at least roughly two radii apart
    assert np.linalg.norm(a - b) > 40.0
    assert np.linalg.norm(b - c) > 40.0
    # centring keeps the centroid on the container centre
    assert np.allclose(sim.positions().mean(axis=0), sim.center, atol=2.0)


def test_reheat_raises_alpha(sim) -> None:
    sim.tick(700)
    assert sim.alpha < 0.3

    sim.reheat()

    assert sim.alpha >= 0.3


def test_reheat_never_lowers_alpha(sim) -> None:
    sim.reheat()

    assert sim.alpha == 1.0


def test_alpha_target_holds_alpha_up(sim) -> None:
    sim.tick(700)
    sim.set_alpha_target(0.3)
    sim.tick(500)

    assert sim.alpha == pytest.approx(0.3)
    assert not sim.settled


def test_set_strength_clamps_and_reheats(sim, caplog) -> None:
    sim.tick(700)
    with caplog.at_level(logging.WARNING, logger="bordergraph"):
        sim.set_strength(1000.0)

    assert sim.strength == MAX_STRENGTH
    assert sim.alpha >= sim.config.reheat_alpha
    assert "clamped" in caplog.text


def test_strength_change_keeps_positions(sim) -> None:
    sim.tick(50)
    before = sim.positions()

    sim.set_strength(200.0)

    assert np.array_equal(before, sim.positions())


def test_resize_moves_centre_and_reheats(sim) -> None:
    sim.tick(700)
    sim.resize(1000.0, 1000.0)

    assert sim.center == (500.0, 500.0)
    assert sim.alpha >= 0.3
    sim.tick(5)
    assert np.allclose(sim.positions().mean(axis=0), (500.0, 500.0), atol=1.0)


def test_pin_is_exact(sim) -> None:
    sim.pin("A", 50.0, 50.0)
    sim.tick(10)

    assert sim.position("A") == (50.0, 50.0)
    assert sim.pinned() == ["A"]

    sim.unpin("A")
    assert sim.pinned() == []


def test_unknown_pin_raises(sim) -> None:
    with pytest.raises(ValueError):
        sim.pin("Z", 0.0, 0.0)


def test_empty_graph_settles_without_error() -> None:
    sim = ForceSimulation(build_graph([]), 800.0, 600.0)

    sim.tick(1000)

    assert sim.settled
    assert sim.positions().shape == (0, 2)


def test_many_nodes_stay_finite() -> None:
    pairs = [(f"N{i}", f"N{(i * 7 + 3) % 40}") for i in range(40)]
    sim = ForceSimulation(build_graph(pairs), 800.0, 600.0, SimulationConfig(strength=300.0))

    sim.tick(200)

    assert np.all(np.isfinite(sim.positions()))


@pytest.mark.parametrize(
    ("value", "expected"),
    [(5.0, MIN_STRENGTH), (120.0, 120.0), (500.0, MAX_STRENGTH), (float("nan"), MIN_STRENGTH)],
)
def test_clamp_strength(value, expected) -> None:
    assert clamp_strength(value) == expected


def test_clamp_dimensions() -> None:
    assert clamp_dimensions(0.0, float("inf")) == (MIN_DIMENSION, MIN_DIMENSION)
    assert clamp_dimensions(640.0, 480.0) == (640.0, 480.0)
