"""
Tests for the Simulation orchestrator.
"""

import logging
import math

import numpy as np
import pytest

from graph_physics import (
    EventType,
    FrictionConfig,
    GalaxyConfig,
    GravityConfig,
    InitialVelocityConfig,
    InvalidLinkError,
    InvalidNodeError,
    Link,
    LinkConfig,
    LockAction,
    Locked,
    MeanToCenterConfig,
    Node,
    RepulsionConfig,
    Simulation,
    SimulationConfig,
    Viewport,
    WindowBorderConfig,
)

# =============================================================================
# Test Fixtures
# =============================================================================


def integrator_only():
    """Config with every force disabled."""
    return SimulationConfig(
        mean_to_center=None,
        link=None,
        repulsion=None,
        window_border=None,
    )


def all_forces():
    """Config with every force enabled."""
    return SimulationConfig(
        mean_to_center=MeanToCenterConfig(),
        link=LinkConfig(),
        repulsion=RepulsionConfig(),
        gravity=GravityConfig(),
        galaxy=GalaxyConfig(),
        friction=FrictionConfig(),
        window_border=WindowBorderConfig(),
        initial_velocity=InitialVelocityConfig(),
    )


@pytest.fixture
def triangle():
    """Three linked nodes in a viewport."""
    return Simulation(
        nodes=[
            {"id": "a", "x": 0, "y": 0},
            {"id": "b", "x": 30, "y": 5},
            {"id": "c", "x": -10, "y": 25},
        ],
        links=[("a", "b"), ("b", "c", 50), {"source": "c", "target": "a"}],
        viewport=Viewport(0, 0, 800, 600),
        random_seed=7,
    )


def assert_all_finite(sim):
    for node in sim.nodes:
        for value in (node.x, node.y, node.px, node.py):
            assert math.isfinite(value), node


# =============================================================================
# Construction
# =============================================================================


class TestConstruction:
    """Tests for building a simulation from plain data."""

    def test_from_dicts_and_tuples(self, triangle):
        """Nodes and links accept dicts and tuples."""
        assert [node.id for node in triangle.nodes] == ["a", "b", "c"]
        assert triangle.links == [Link("a", "b"), Link("b", "c", 50), Link("c", "a")]

    def test_default_ids(self):
        """Nodes without an id get their list index."""
        sim = Simulation(nodes=[{"x": 1}, {"x": 2}], links=[(0, 1)])
        assert [node.id for node in sim.nodes] == [0, 1]
        assert sim.position_of(1) == (2.0, 0.0)

    def test_node_objects_kept(self):
        """Node instances are used as given."""
        node = Node(id="n", x=4, y=5)
        sim = Simulation(nodes=[node])
        assert sim.node("n") is node

    def test_empty_simulation(self):
        """A simulation without nodes ticks without error."""
        sim = Simulation(viewport=Viewport(0, 0, 100, 100))
        sim.tick(1 / 60)
        assert sim.positions().shape == (0, 2)
        assert sim.tick_count == 1

    def test_duplicate_ids_rejected(self):
        """Two nodes with one id is an error."""
        with pytest.raises(InvalidNodeError, match="Duplicate"):
            Simulation(nodes=[{"id": 1}, {"id": 1}])

    def test_non_finite_node_rejected(self):
        """Non-finite starting coordinates are rejected."""
        with pytest.raises(InvalidNodeError, match="finite"):
            Simulation(nodes=[{"id": 1, "x": float("nan")}])

    def test_strict_self_link(self):
        """Self-links raise in strict mode."""
        with pytest.raises(InvalidLinkError, match="must differ"):
            Simulation(nodes=[{"id": "a"}], links=[("a", "a")])

    def test_strict_unknown_endpoint(self):
        """Links to missing nodes raise in strict mode."""
        with pytest.raises(InvalidLinkError, match="zzz"):
            Simulation(nodes=[{"id": "a"}], links=[("a", "zzz")])

    def test_non_strict_drops_with_warning(self):
        """strict=False drops invalid links and warns once."""
        with pytest.warns(UserWarning, match="Dropping 2 invalid link") as record:
            sim = Simulation(
                nodes=[{"id": "a"}, {"id": "b", "x": 10}],
                links=[("a", "a"), ("a", "zzz"), ("a", "b")],
                strict=False,
            )
        assert sim.links == [Link("a", "b")]
        message = str(record[0].message)
        assert "input link 0" in message
        assert "input link 1" in message

    @pytest.mark.parametrize(
        "bad_link",
        [("a",), {"source": "a"}, ("a", "b", "far"), 5],
    )
    def test_strict_malformed_link(self, bad_link):
        """Malformed link data raises InvalidLinkError in strict mode."""
        with pytest.raises(InvalidLinkError, match="Malformed link"):
            Simulation(nodes=[{"id": "a"}, {"id": "b"}], links=[bad_link])

    def test_non_strict_drops_malformed_link(self):
        """strict=False drops malformed link data instead of crashing."""
        with pytest.warns(UserWarning, match="Dropping 1 invalid link"):
            sim = Simulation(
                nodes=[{"id": "a"}, {"id": "b", "x": 10}],
                links=[("a",), ("a", "b")],
                strict=False,
            )
        assert sim.links == [Link("a", "b")]

    def test_default_config(self):
        """Defaults enable the interactive force set."""
        config = Simulation().config
        assert config.repulsion is not None
        assert config.link is not None
        assert config.gravity is None
        assert config.velocity_decay == 0.95


# =============================================================================
# Ticking
# =============================================================================


class TestTick:
    """Tests for tick sequencing."""

    def test_tick_updates_time(self, triangle):
        """elapsed and tick_count advance per tick."""
        triangle.tick(0.5)
        triangle.tick(0.25)
        assert triangle.elapsed == pytest.approx(0.75)
        assert triangle.tick_count == 2
        assert triangle.tracker.delta() == 0.25

    def test_zero_delta_uses_fallback(self, triangle):
        """A zero delta advances by the configured fallback."""
        triangle.tick(0.0)
        assert triangle.elapsed == pytest.approx(triangle.config.fallback_delta)

    def test_force_order(self, monkeypatch):
        """Forces run in their fixed order, before integration."""
        import graph_physics.simulation as simulation_module

        calls = []
        for name in (
            "apply_mean_to_center",
            "apply_links",
            "apply_repulsion",
            "apply_gravity",
            "apply_galaxy",
            "apply_friction",
            "apply_window_border",
            "apply_initial_velocity",
            "verlet_step",
        ):
            monkeypatch.setattr(
                simulation_module, name, lambda *args, _name=name, **kwargs: calls.append(_name)
            )

        sim = Simulation(
            nodes=[{"id": 0}, {"id": 1, "x": 5}],
            links=[(0, 1)],
            config=all_forces(),
            viewport=Viewport(0, 0, 100, 100),
        )
        sim.tick(1 / 60)
        assert calls == [
            "apply_mean_to_center",
            "apply_links",
            "apply_repulsion",
            "apply_gravity",
            "apply_galaxy",
            "apply_friction",
            "apply_window_border",
            "apply_initial_velocity",
            "verlet_step",
        ]

    def test_disabled_forces_skipped(self, monkeypatch):
        """A force with no config is not called."""
        import graph_physics.simulation as simulation_module

        calls = []
        monkeypatch.setattr(simulation_module, "apply_gravity", lambda *a: calls.append("gravity"))
        Simulation(nodes=[{"id": 0}], config=integrator_only()).tick(1 / 60)
        assert calls == []

    def test_repulsion_spreads_nodes(self):
        """Two nearby nodes drift apart over a few ticks."""
        sim = Simulation(
            nodes=[{"id": 0, "x": -1}, {"id": 1, "x": 1}],
            config=SimulationConfig(link=None, window_border=None),
            random_seed=0,
        )
        sim.run([1 / 60] * 10)
        a, b = sim.positions()
        assert b[0] - a[0] > 2.0

    def test_link_settles_toward_target_distance(self):
        """A stretched link contracts."""
        sim = Simulation(
            nodes=[{"id": 0, "x": -200}, {"id": 1, "x": 200}],
            links=[(0, 1, 100)],
            config=SimulationConfig(repulsion=None, window_border=None),
        )
        sim.run([1 / 60] * 30)
        a, b = sim.positions()
        assert abs(b[0] - a[0]) < 400.0

    def test_window_border_contains_nodes(self):
        """A node far outside the viewport is brought back to the shrunk edge."""
        viewport = Viewport(0, 0, 200, 200)
        sim = Simulation(
            nodes=[{"id": 0, "x": 1000, "y": -1000}],
            config=SimulationConfig(
                mean_to_center=None,
                link=None,
                repulsion=None,
                velocity_decay=0.0,
            ),
            viewport=viewport,
        )
        sim.tick(1 / 60)
        # (200 - 30) / 2
        assert sim.position_of(0) == (85.0, -85.0)

    def test_missing_viewport_warns_once(self, caplog):
        """Window border without a viewport logs a single warning."""
        sim = Simulation(nodes=[{"id": 0}])
        with caplog.at_level(logging.WARNING, logger="graph_physics"):
            sim.tick(1 / 60)
            sim.tick(1 / 60)
        messages = [r.getMessage() for r in caplog.records if "no viewport" in r.getMessage()]
        assert len(messages) == 1

    def test_tick_viewport_is_stored(self):
        """A viewport passed to tick is kept for later ticks."""
        sim = Simulation(nodes=[{"id": 0}])
        viewport = Viewport(0, 0, 100, 100)
        sim.tick(1 / 60, viewport=viewport)
        assert sim.viewport is viewport

    def test_initial_velocity_only_first_tick(self):
        """The initial nudge happens once and again after reset_time."""
        sim = Simulation(
            nodes=[{"id": 0}],
            config=SimulationConfig(
                mean_to_center=None,
                link=None,
                repulsion=None,
                window_border=None,
                initial_velocity=InitialVelocityConfig(velocity=60),
                velocity_decay=0.0,
            ),
        )
        sim.tick(0.1)
        assert sim.node(0).y == pytest.approx(-6.0)
        sim.tick(0.1)
        assert sim.node(0).y == pytest.approx(-6.0)
        sim.reset_time()
        assert sim.elapsed == 0.0
        sim.tick(0.1)
        assert sim.node(0).y == pytest.approx(-12.0)


# =============================================================================
# Events
# =============================================================================


class TestEvents:
    """Tests for lifecycle callbacks."""

    def test_constructor_callbacks(self):
        """Callbacks passed at construction fire around a run."""
        seen = []
        sim = Simulation(
            nodes=[{"id": 0}],
            on_start=lambda e: seen.append(("start", e["tick"])),
            on_tick=lambda e: seen.append(("tick", e["tick"])),
            on_end=lambda e: seen.append(("end", e["tick"])),
        )
        sim.run([0.1, 0.1])
        assert seen == [("start", 0), ("tick", 1), ("tick", 2), ("end", 2)]

    def test_on_with_string(self):
        """on() accepts event names and chains."""
        ticks = []
        sim = Simulation(nodes=[{"id": 0}])
        assert sim.on("tick", lambda e: ticks.append(e["delta"])) is sim
        sim.tick(0.2)
        assert ticks == [0.2]

    def test_on_with_enum(self):
        """on() accepts EventType values."""
        ends = []
        sim = Simulation().on(EventType.end, lambda e: ends.append(e["elapsed"]))
        sim.run([0.5])
        assert ends == [pytest.approx(0.5)]


# =============================================================================
# Lock events
# =============================================================================


class TestLockEvents:
    """Tests for the queued drag interaction."""

    def setup_method(self):
        self.sim = Simulation(nodes=[{"id": "a"}, {"id": "b", "x": 50}], config=integrator_only())

    def test_events_are_queued(self):
        """Lock requests apply at the next tick, in order."""
        self.sim.acquire_lock("a").drag("a", (10, 0))
        assert [e.action for e in self.sim.pending_events] == [LockAction.acquire, LockAction.drag]
        assert not self.sim.node("a").locked

        self.sim.tick(1.0)
        assert self.sim.pending_events == ()
        assert self.sim.node("a").locked
        assert self.sim.position_of("a") == (10.0, 0.0)

    def test_drag_without_lock_ignored(self, caplog):
        """Dragging a free node is ignored with a warning."""
        self.sim.drag("a", (10, 0))
        with caplog.at_level(logging.WARNING, logger="graph_physics"):
            self.sim.tick(1.0)
        assert self.sim.position_of("a") == (0.0, 0.0)
        assert "Ignoring drag" in caplog.text

    def test_unknown_id_rejected(self):
        """Lock requests for unknown ids fail immediately."""
        with pytest.raises(InvalidNodeError):
            self.sim.acquire_lock("missing")
        with pytest.raises(InvalidNodeError):
            self.sim.node("missing")

    def test_non_finite_drag_keeps_position(self):
        """A NaN drag target leaves the node where it was."""
        self.sim.acquire_lock("b").drag("b", (float("nan"), 3.0))
        self.sim.tick(1.0)
        assert self.sim.position_of("b") == (50.0, 0.0)

    def test_locked_node_not_moved_by_forces(self):
        """Forces leave a locked node where it is held."""
        sim = Simulation(
            nodes=[{"id": "a"}, {"id": "b", "x": 5}],
            config=all_forces(),
            viewport=Viewport(0, 0, 400, 400),
            random_seed=0,
        )
        sim.acquire_lock("a").drag("a", (40, 40))
        sim.run([1 / 60] * 5)
        assert sim.position_of("a") == (40.0, 40.0)

    def test_release_hands_back_drag_velocity(self):
        """A released node keeps moving in the drag direction."""
        sim = self.sim
        sim.acquire_lock("a").drag("a", (10, 0))
        sim.tick(1.0)
        sim.drag("a", (20, 0))
        sim.tick(1.0)

        lock = sim.node("a").lock
        assert isinstance(lock, Locked)
        assert lock.velocity[0] == pytest.approx(1.805)

        sim.release_lock("a")
        sim.tick(1.0)
        assert not sim.node("a").locked
        assert sim.position_of("a")[0] == pytest.approx(20.0 + 1.805 * 0.95)


# =============================================================================
# Determinism and stability
# =============================================================================


class TestDeterminism:
    """Tests for reproducible runs."""

    @staticmethod
    def _run(seed):
        sim = Simulation(
            nodes=[{"id": i} for i in range(4)],
            links=[(0, 1), (1, 2)],
            viewport=Viewport(0, 0, 500, 500),
            random_seed=seed,
        )
        sim.run([1 / 60] * 20)
        return sim.positions()

    def test_same_seed_same_positions(self):
        """Identical inputs and seed give bit-identical positions."""
        assert np.array_equal(self._run(3), self._run(3))

    def test_different_seed_diverges(self):
        """Coincident nodes separate along seed-dependent directions."""
        assert not np.array_equal(self._run(3), self._run(4))


class TestStability:
    """Adversarial inputs never produce NaN or infinity."""

    def test_degenerate_deltas(self):
        """Zero, negative, non-finite and extreme deltas."""
        sim = Simulation(
            nodes=[{"id": i, "x": i % 2, "y": 0} for i in range(6)],
            links=[(0, 1), (2, 3, 1e-6), (4, 5, 1e9)],
            config=all_forces(),
            viewport=Viewport(0, 0, 300, 300),
            random_seed=0,
        )
        sim.run([0.0, -1.0, float("nan"), float("inf"), 1e-12, 1 / 60, 10.0, 1e6])
        assert_all_finite(sim)

    def test_coincident_nodes_separate(self):
        """Coincident nodes are pulled apart within one tick."""
        sim = Simulation(
            nodes=[{"id": 0}, {"id": 1}],
            links=[(0, 1)],
            config=all_forces(),
            random_seed=0,
        )
        sim.tick(1 / 60)
        assert_all_finite(sim)
        assert not np.array_equal(sim.positions()[0], sim.positions()[1])

    def test_huge_coordinates(self):
        """Coordinates near the float32 limit stay finite."""
        sim = Simulation(
            nodes=[
                {"id": 0},
                {"id": 1},
                {"id": 2, "x": 3e38, "y": -3e38},
                {"id": 3, "x": -3e38, "y": 3e38, "px": 3e38, "py": -3e38},
            ],
            links=[(0, 1), (2, 3)],
            config=all_forces(),
            random_seed=0,
        )
        for _ in range(20):
            sim.tick(1 / 60)
            assert_all_finite(sim)

    def test_long_run_with_drag(self):
        """A long interactive session stays finite."""
        sim = Simulation(
            nodes=[{"id": i, "x": i, "y": -i} for i in range(12)],
            links=[(i, i + 1) for i in range(11)],
            config=all_forces(),
            viewport=Viewport(0, 0, 640, 480),
            random_seed=5,
        )
        sim.acquire_lock(0)
        for step in range(200):
            sim.drag(0, (math.cos(step / 10) * 100, math.sin(step / 10) * 100))
            sim.tick(1 / 60 if step % 7 else 0.0)
        sim.release_lock(0)
        sim.run([1 / 30] * 50)
        assert_all_finite(sim)
