"""Tests for SimulationState, the Euler integrator and the SimulationDriver."""

import logging

import numpy as np
import pytest


def _make_state(a, b, params):
    from turinglab.simulation.state import create_state

    return create_state(a, b, params)


class TestSimulationState:
    """Tests for state construction."""

    def test_create_state_copies_inputs(self, reference_params):
        a = np.ones((4, 5))
        b = np.full((4, 5), 2.0)
        state = _make_state(a, b, reference_params)

        assert state.shape == (4, 5)
        assert state.iteration == 0
        assert state.a.dtype == np.float64
        assert not np.shares_memory(state.a, a)
        assert not np.shares_memory(state.b, b)

    def test_create_state_converts_dtype(self, reference_params):
        state = _make_state(np.ones((2, 2), dtype=np.float32), [[1, 2], [3, 4]], reference_params)
        assert state.a.dtype == np.float64
        assert state.b.dtype == np.float64
        assert state.b[1, 0] == 3.0

    def test_shape_mismatch_rejected(self, reference_params):
        with pytest.raises(ValueError, match="differ"):
            _make_state(np.ones((3, 3)), np.ones((3, 4)), reference_params)

    def test_empty_grid_rejected(self, reference_params):
        with pytest.raises(ValueError):
            _make_state(np.ones((0, 3)), np.ones((0, 3)), reference_params)

    def test_direct_construction_validates(self, reference_params):
        from turinglab.simulation.state import SimulationState

        with pytest.raises(ValueError):
            SimulationState(a=np.ones((2, 2)), b=np.ones((2, 3)), params=reference_params)


class TestEulerStep:
    """Tests for the forward-Euler integrator."""

    def test_uniform_scenario(self, reference_params):
        from turinglab.models.activator_substrate import ActivatorSubstrateModel
        from turinglab.simulation.integrator import euler_step

        state = _make_state(np.ones((3, 3)), np.ones((3, 3)), reference_params)
        euler_step(state, ActivatorSubstrateModel(reference_params))

        np.testing.assert_allclose(state.a, 0.998, rtol=0, atol=1e-12)
        np.testing.assert_allclose(state.b, 1.0, rtol=0, atol=1e-12)
        assert state.iteration == 1

    def test_steady_zero(self, reference_params):
        from turinglab.models.activator_substrate import ActivatorSubstrateModel
        from turinglab.simulation.integrator import euler_step

        state = _make_state(np.zeros((4, 6)), np.zeros((4, 6)), reference_params)
        euler_step(state, ActivatorSubstrateModel(reference_params))

        np.testing.assert_array_equal(state.a, 0.0)
        np.testing.assert_array_equal(state.b, 0.0)

    def test_mutates_in_place(self, reference_params):
        from turinglab.models.activator_substrate import ActivatorSubstrateModel
        from turinglab.simulation.integrator import euler_step

        state = _make_state(np.ones((3, 3)), np.ones((3, 3)), reference_params)
        a_buffer, b_buffer = state.a, state.b
        euler_step(state, ActivatorSubstrateModel(reference_params))

        assert state.a is a_buffer
        assert state.b is b_buffer

    def test_rates_use_pre_step_snapshot(self, reference_params):
        from turinglab.models.base import ReactionModel
        from turinglab.simulation.integrator import euler_step

        seen = []

        class Recording(ReactionModel):
            def evaluate(self, a, b):
                seen.append((a.copy(), b.copy()))
                # db depends on a: must see the old a, not the updated one.
                return np.ones_like(a), a.copy()

        state = _make_state(np.full((2, 2), 3.0), np.zeros((2, 2)), reference_params)
        euler_step(state, Recording())

        np.testing.assert_array_equal(seen[0][0], 3.0)
        np.testing.assert_array_equal(state.a, 4.0)
        np.testing.assert_array_equal(state.b, 3.0)

    def test_matches_explicit_formula(self, reference_params):
        from turinglab.models.activator_substrate import ActivatorSubstrateModel
        from turinglab.simulation.integrator import DT, euler_step

        rng = np.random.default_rng(11)
        a0 = rng.random((8, 8))
        b0 = rng.random((8, 8)) + 0.5
        model = ActivatorSubstrateModel(reference_params)
        da, db = model.evaluate(a0, b0)

        state = _make_state(a0, b0, reference_params)
        euler_step(state, model)

        assert DT == 1.0
        np.testing.assert_array_equal(state.a, a0 + da)
        np.testing.assert_array_equal(state.b, b0 + db)


class TestSimulationDriver:
    """Tests for the step loop and frame consumer protocol."""

    def _driver(self, params, a=None, b=None, **kwargs):
        from turinglab.models.activator_substrate import ActivatorSubstrateModel
        from turinglab.simulation.driver import SimulationDriver

        rng = np.random.default_rng(5)
        if a is None:
            a = rng.random((10, 12))
        if b is None:
            b = rng.random((10, 12)) + 0.5
        state = _make_state(a, b, params)
        return SimulationDriver(state, ActivatorSubstrateModel(params), **kwargs)

    def test_run_zero_leaves_fields_identical(self, reference_params):
        rng = np.random.default_rng(9)
        a = rng.random((6, 6))
        b = rng.random((6, 6)) + 0.5
        frames = []
        driver = self._driver(reference_params, a=a, b=b,
                              consumer=lambda f, i: frames.append(i))

        assert driver.run(0) == 0
        assert driver.state.a.tobytes() == a.tobytes()
        assert driver.state.b.tobytes() == b.tobytes()
        assert driver.state.iteration == 0
        assert frames == []

    def test_run_counts_steps_and_frames(self, reference_params):
        frames = []
        driver = self._driver(reference_params, consumer=lambda f, i: frames.append(i))

        assert driver.run(5) == 5
        assert driver.state.iteration == 5
        assert frames == [1, 2, 3, 4, 5]

        assert driver.run(2) == 2
        assert frames[-2:] == [6, 7]

    def test_deterministic(self, reference_params):
        d1 = self._driver(reference_params)
        d2 = self._driver(reference_params)
        d1.run(20)
        d2.run(20)
        assert d1.state.a.tobytes() == d2.state.a.tobytes()
        assert d1.state.b.tobytes() == d2.state.b.tobytes()

    def test_consumer_sees_updated_read_only_field(self, reference_params):
        received = []

        def consumer(field, iteration):
            received.append(field.copy())
            with pytest.raises(ValueError):
                field[0, 0] = 123.0

        driver = self._driver(reference_params, a=np.ones((3, 3)), b=np.ones((3, 3)),
                              consumer=consumer)
        driver.run(1)

        np.testing.assert_allclose(received[0], 0.998, atol=1e-12)
        np.testing.assert_array_equal(received[0], driver.state.a)

    def test_consumer_can_stop(self, reference_params):
        calls = []

        def consumer(field, iteration):
            calls.append(iteration)
            return iteration < 3

        driver = self._driver(reference_params, consumer=consumer)
        assert driver.run(10) == 3
        assert driver.state.iteration == 3
        assert calls == [1, 2, 3]

    def test_consumer_returning_none_continues(self, reference_params):
        driver = self._driver(reference_params, consumer=lambda f, i: None)
        assert driver.run(4) == 4

    def test_consumer_errors_propagate(self, reference_params):
        def consumer(field, iteration):
            raise RuntimeError("window closed badly")

        driver = self._driver(reference_params, consumer=consumer)
        with pytest.raises(RuntimeError, match="window closed"):
            driver.run(3)
        # The step completed before the consumer was called.
        assert driver.state.iteration == 1

    def test_headless_run(self, reference_params):
        driver = self._driver(reference_params)
        assert driver.run(3) == 3

    @pytest.mark.parametrize("bad", [-1, 2.5, "3", True])
    def test_invalid_iterations(self, reference_params, bad):
        driver = self._driver(reference_params)
        with pytest.raises(ValueError):
            driver.run(bad)
        assert driver.state.iteration == 0

    def test_invalid_log_interval(self, reference_params):
        with pytest.raises(ValueError):
            self._driver(reference_params, log_interval=0)

    def test_metrics_hook(self, reference_params):
        calls = []
        driver = self._driver(reference_params,
                              on_metrics=lambda m, i: calls.append((i, m)),
                              log_interval=2)
        driver.run(5)

        assert [i for i, _ in calls] == [2, 4]
        metrics = calls[0][1]
        assert {"a/mean", "a/std", "a/min", "a/max", "a/finite_fraction",
                "b/mean", "b/finite_fraction"}.issubset(metrics)
        assert {"a/entropy", "a/structure", "b/entropy", "b/structure"}.issubset(metrics)

    def test_metrics_include_entropy_and_structure(self, reference_params):
        from turinglab.analysis.field_metrics import field_entropy, field_structure

        driver = self._driver(reference_params)
        driver.run(1)
        metrics = driver.metrics()

        assert metrics["a/entropy"] == pytest.approx(field_entropy(driver.state.a))
        assert metrics["b/structure"] == pytest.approx(field_structure(driver.state.b))
        assert 0.0 <= metrics["a/entropy"] <= np.log(driver.state.a.size) + 1e-12

    def test_metrics_with_non_finite_field(self, reference_params):
        a = np.ones((4, 4))
        a[1, 1] = np.inf
        driver = self._driver(reference_params, a=a)
        metrics = driver.metrics()

        assert metrics["a/finite_fraction"] == pytest.approx(15 / 16)
        assert np.isnan(metrics["a/structure"])
        assert np.isfinite(metrics["b/entropy"])

    def test_rejects_model_with_other_parameters(self, reference_params):
        import dataclasses

        from turinglab.models.activator_substrate import ActivatorSubstrateModel
        from turinglab.simulation.driver import SimulationDriver

        state = _make_state(np.ones((3, 3)), np.ones((3, 3)), reference_params)
        other = ActivatorSubstrateModel(dataclasses.replace(reference_params, d_a=0.5))
        with pytest.raises(ValueError, match="do not match"):
            SimulationDriver(state, other)

    def test_accepts_model_without_parameters(self, reference_params):
        from turinglab.models.base import ReactionModel
        from turinglab.simulation.driver import SimulationDriver

        class Frozen(ReactionModel):
            def evaluate(self, a, b):
                return np.zeros_like(a), np.zeros_like(b)

        state = _make_state(np.ones((3, 3)), np.ones((3, 3)), reference_params)
        assert SimulationDriver(state, Frozen()).run(2) == 2
        np.testing.assert_array_equal(state.a, np.ones((3, 3)))

    def test_non_finite_values_propagate_and_are_logged_once(self, reference_params, caplog):
        b = np.ones((4, 4))
        b[2, 2] = 0.0
        driver = self._driver(reference_params, a=np.ones((4, 4)), b=b)

        with caplog.at_level(logging.WARNING, logger="turinglab.simulation.driver"):
            driver.run(3)

        assert not np.isfinite(driver.state.a).all()
        warnings = [r for r in caplog.records if "Non-finite" in r.getMessage()]
        assert len(warnings) == 1

    def test_check_finite_disabled(self, reference_params, caplog):
        b = np.ones((4, 4))
        b[0, 0] = 0.0
        driver = self._driver(reference_params, a=np.ones((4, 4)), b=b, check_finite=False)

        with caplog.at_level(logging.WARNING, logger="turinglab.simulation.driver"):
            driver.run(2)

        assert not any("Non-finite" in r.getMessage() for r in caplog.records)
