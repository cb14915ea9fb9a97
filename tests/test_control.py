"""
Control System Tests

Tests for:
- Proportional-integral controller
- Flight control system pass-through, trim bias and SAS
- Least-squares trimmer on analytic residuals
- Scoped attribute override
"""

import pytest
import numpy as np
import os
import sys

# Add package to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from heliforce.control.pi_controller import PIController
from heliforce.control.fcs import FlightControlSystem
from heliforce.control.trim import JacobianTrimmer, TrimResult, TrimError, override_attributes


class TestPIController:
    """Test proportional-integral controller."""

    def test_proportional(self):
        controller = PIController(Kp=2.0)
        assert np.isclose(controller.update(1.5, 0.01), 3.0)

    def test_integral_accumulates(self):
        controller = PIController(Kp=0.0, Ki=1.0)
        for _ in range(100):
            output = controller.update(1.0, 0.01)
        assert np.isclose(output, 1.0)

    def test_integral_limits(self):
        controller = PIController(Kp=0.0, Ki=1.0, integral_limits=(-0.5, 0.5))
        for _ in range(100):
            output = controller.update(1.0, 0.01)
        assert np.isclose(output, 0.5)

    def test_reset(self):
        controller = PIController(Kp=0.0, Ki=1.0)
        controller.update(1.0, 1.0)
        controller.reset()
        assert controller.error_integral == 0.0
        assert controller.update(0.0, 0.1) == 0.0


class TestFlightControlSystem:
    """Test FCS command mixing."""

    def test_disabled_passes_commands(self):
        fcs = FlightControlSystem()
        fcs.enabled = False
        fcs.collective_command = 0.3
        fcs.long_command = -0.2
        fcs.lat_command = 0.1
        fcs.pedal_command = -0.4
        fcs.angular_velocity = np.array([0.5, 0.5, 0.5])
        fcs.update(0.01)

        assert (fcs.collective, fcs.long_cyclic, fcs.lat_cyclic, fcs.pedal) == (0.3, -0.2, 0.1, -0.4)

    def test_disabled_does_not_clip(self):
        fcs = FlightControlSystem()
        fcs.enabled = False
        fcs.collective_command = 1.7
        fcs.update(0.01)
        assert fcs.collective == 1.7

    def test_enabled_filters_towards_command(self):
        fcs = FlightControlSystem(filter_time_constant=0.1)
        fcs.collective_command = 0.5
        fcs.update(0.01)
        assert 0.0 < fcs.collective < 0.5

        for _ in range(500):
            fcs.update(0.01)
        assert np.isclose(fcs.collective, 0.5)

    def test_trim_control_adds_reference(self):
        fcs = FlightControlSystem(filter_time_constant=0.0)
        fcs.trim_control = True
        fcs.trim_collective = 0.2
        fcs.trim_pedal = -0.1
        fcs.collective_command = 0.1
        fcs.update(0.01)

        assert np.isclose(fcs.collective, 0.3)
        assert np.isclose(fcs.pedal, -0.1)

    def test_trim_reference_ignored_without_trim_control(self):
        fcs = FlightControlSystem(filter_time_constant=0.0)
        fcs.trim_collective = 0.2
        fcs.update(0.01)
        assert fcs.collective == 0.0

    def test_rate_damping(self):
        fcs = FlightControlSystem(filter_time_constant=0.0)
        fcs.angular_velocity = np.array([0.1, 0.1, 0.1])
        fcs.update(0.01)

        # Nose-up rate -> forward stick, right roll -> left stick, right yaw -> left pedal
        assert fcs.long_cyclic > 0.0
        assert fcs.lat_cyclic < 0.0
        assert fcs.pedal < 0.0

    def test_outputs_clipped(self):
        fcs = FlightControlSystem(filter_time_constant=0.0)
        fcs.long_command = 1.0
        fcs.angular_velocity = np.array([0.0, 10.0, 0.0])
        fcs.update(0.01)
        assert fcs.long_cyclic == 1.0

    def test_reset_snaps_outputs(self):
        fcs = FlightControlSystem()
        fcs.lat_command = 0.4
        fcs.reset()
        assert fcs.lat_cyclic == 0.4


class TestJacobianTrimmer:
    """Test least-squares root finding on analytic functions."""

    def test_linear_system(self):
        A = np.array([[3.0, 1.0], [1.0, 2.0]])
        b = np.array([9.0, 8.0])
        x = np.zeros(2)

        converged, residual, iterations = JacobianTrimmer().trim(
            x, np.full(2, 1e-9), lambda x: A @ x - b)

        assert converged
        assert np.allclose(x, [2.0, 3.0])
        assert np.all(np.abs(residual) < 1e-9)
        assert iterations >= 1

    def test_nonlinear_system(self):
        def f(x):
            return np.array([x[0]**2 + x[1]**2 - 4.0, x[0] - x[1]])

        x = np.array([1.0, 0.5])
        converged, _, _ = JacobianTrimmer().trim(x, np.full(2, 1e-10), f)

        assert converged
        assert np.allclose(x, [np.sqrt(2.0), np.sqrt(2.0)])

    def test_absolute_tolerance_on_large_residuals(self):
        """Force-sized residuals are driven below an absolute threshold."""
        def f(x):
            return np.array([2.4e4 * (x[0] - 0.3) + 50.0 * x[1],
                             8.0e3 * np.sin(x[1] + 0.05)])

        x = np.array([0.5, 0.0])
        converged, residual, _ = JacobianTrimmer().trim(x, np.full(2, 1e-3), f)

        assert converged
        assert np.all(np.abs(residual) < 1e-3)
        assert np.isclose(x[1], -0.05)

    def test_last_evaluation_at_result(self):
        evaluated = []

        def f(x):
            evaluated.append(x.copy())
            return np.array([np.tanh(x[0]) - 0.5])

        x = np.array([0.0])
        converged, residual, _ = JacobianTrimmer().trim(x, np.full(1, 1e-10), f)

        assert converged
        assert np.array_equal(evaluated[-1], x)
        assert np.isclose(x[0], np.arctanh(0.5))

    def test_not_converged(self):
        x = np.zeros(1)
        converged, residual, iterations = JacobianTrimmer(max_iterations=1).trim(
            x, np.full(1, 1e-6), lambda x: x - 5.0)

        assert not converged
        assert iterations == 1
        assert x[0] == 0.0
        assert np.isclose(residual[0], -5.0)

    def test_singular_jacobian(self):
        """Rank-deficient residual still reaches a root."""
        x = np.array([1.0, 1.0])
        converged, _, _ = JacobianTrimmer().trim(
            x, np.full(2, 1e-8), lambda x: np.array([x[0] + x[1] - 1.0, 2.0 * (x[0] + x[1] - 1.0)]))

        assert converged
        assert np.isclose(x[0] + x[1], 1.0)


class TestTrimResult:
    """Test trim result and error types."""

    def test_error_carries_result(self):
        result = TrimResult(controls=np.zeros(4), attitude=np.zeros(2),
                            residual=np.array([1.0, 0, 0, 0, 0, 0]), iterations=5, converged=False)
        error = TrimError(result)

        assert error.result is result
        assert "5 iterations" in str(error)
        assert isinstance(error, RuntimeError)


class Flags:
    def __init__(self):
        self.a = 1
        self.b = True


class TestOverrideAttributes:
    """Test scoped attribute override."""

    def test_override_and_restore(self):
        obj = Flags()
        with override_attributes((obj, 'a', 5), (obj, 'b', False)):
            assert obj.a == 5
            assert obj.b is False
        assert obj.a == 1
        assert obj.b is True

    def test_restore_on_exception(self):
        obj = Flags()
        with pytest.raises(ZeroDivisionError):
            with override_attributes((obj, 'a', 0)):
                1 / obj.a
        assert obj.a == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
