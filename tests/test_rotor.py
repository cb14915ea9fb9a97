"""
Sub-model Tests

Tests for:
- Rotor control mapping, thrust, torque, flapping and wake
- Stabilizer lift and drag
- Fuselage drag
"""

import pytest
import numpy as np
import os
import sys

# Add package to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from heliforce.core.rotor import Rotor
from heliforce.core.stabilizer import Stabilizer
from heliforce.core.fuselage import Fuselage


def hover_rotor(collective=0.2):
    rotor = Rotor()
    rotor.use_dynamic_inflow = False
    rotor.collective = collective
    rotor.CT = 0.005
    return rotor


class TestRotorControls:
    """Test normalized <-> physical control angles."""

    def test_collective_range_endpoints(self):
        rotor = Rotor()
        rotor.collective = -1.0
        assert np.isclose(rotor.get_control_angles()[0], rotor.collective_range[0])
        rotor.collective = 1.0
        assert np.isclose(rotor.get_control_angles()[0], rotor.collective_range[1])

    def test_cyclic_limits(self):
        rotor = Rotor()
        rotor.long_cyclic = 1.0
        rotor.lat_cyclic = -1.0
        _, theta_sin, theta_cos = rotor.get_control_angles()

        assert np.isclose(theta_sin, rotor.cyclic_limits[0])
        assert np.isclose(theta_cos, -rotor.cyclic_limits[1])

    def test_normalization_inverse(self):
        rotor = Rotor()
        rotor.collective, rotor.long_cyclic, rotor.lat_cyclic = 0.3, -0.4, 0.25
        angles = rotor.get_control_angles()

        normalized = rotor.get_normalized_control_angles(*angles)

        assert np.allclose(normalized, [0.3, -0.4, 0.25])

    def test_no_cyclic(self):
        """Rotor without cyclic normalizes any cyclic angle to zero."""
        rotor = Rotor(cyclic_limits=(0.0, 0.0))
        _, long_cyclic, lat_cyclic = rotor.get_normalized_control_angles(0.1, 0.05, 0.05)

        assert long_cyclic == 0.0
        assert lat_cyclic == 0.0


class TestRotorAerodynamics:
    """Test rotor force and torque outputs."""

    def test_hover_thrust_up(self):
        rotor = hover_rotor()
        rotor.update(0.01)

        assert rotor.force[2] < 0.0
        assert np.allclose(rotor.force[:2], 0.0, atol=1e-9)
        assert rotor.CT > 0.0

    def test_momentum_balance(self):
        """Static inflow satisfies the momentum equation."""
        rotor = hover_rotor()
        rotor.update(0.01)

        ge = rotor._ground_effect()
        lam = rotor.inflow
        assert np.isclose(lam, ge * rotor.CT / (2.0 * np.sqrt(lam**2 + 1e-8)), rtol=1e-8)

    def test_thrust_increases_with_collective(self):
        low = hover_rotor(0.0)
        high = hover_rotor(0.5)
        low.update(0.01)
        high.update(0.01)

        assert -high.force[2] > -low.force[2]

    def test_ground_effect_increases_thrust(self):
        free = hover_rotor()
        near_ground = hover_rotor()
        near_ground.height_above_ground = 3.0
        free.update(0.01)
        near_ground.update(0.01)

        assert -near_ground.force[2] > -free.force[2]

    def test_shaft_torque(self):
        rotor = hover_rotor()
        rotor.update(0.01)

        assert rotor.shaft_torque > 0.0
        assert np.isclose(rotor.torque[2], rotor.shaft_torque)

        clockwise = hover_rotor()
        clockwise.rotation_direction = -1
        clockwise.update(0.01)
        assert np.isclose(clockwise.torque[2], -clockwise.shaft_torque)

    def test_forward_cyclic_tilts_thrust_forward(self):
        rotor = hover_rotor()
        rotor.long_cyclic = 0.5
        rotor.update(0.01)

        assert rotor.beta_cos < 0.0
        assert rotor.force[0] > 0.0
        # Hub moment pitches nose down
        assert rotor.torque[1] < 0.0

    def test_right_cyclic_tilts_thrust_right(self):
        rotor = hover_rotor()
        rotor.lat_cyclic = 0.5
        rotor.update(0.01)

        assert rotor.beta_sin > 0.0
        assert rotor.force[1] > 0.0
        assert rotor.torque[0] > 0.0

    def test_stopped_rotor(self):
        rotor = hover_rotor()
        rotor.rot_speed = 0.0
        rotor.update(0.01)

        assert np.allclose(rotor.force, 0.0)
        assert np.allclose(rotor.torque, 0.0)
        assert rotor.shaft_torque == 0.0

    def test_dynamic_inflow_lags(self):
        static = hover_rotor()
        static.update(0.01)

        dynamic = hover_rotor()
        dynamic.use_dynamic_inflow = True
        dynamic.inflow = 0.0
        dynamic.update(0.01)

        assert 0.0 < dynamic.inflow < static.inflow
        # Converges with repeated steps
        for _ in range(200):
            dynamic.update(0.01)
        assert np.isclose(dynamic.inflow, static.inflow, rtol=1e-4)


class TestRotorWake:
    """Test downwash velocity and radius."""

    def test_wake_at_disc(self):
        rotor = Rotor()
        rotor.inflow = 0.05
        vi = rotor.inflow * rotor.rot_speed * rotor.radius

        assert np.allclose(rotor.get_downwash_velocity(0.0), [0.0, 0.0, -vi])
        assert np.isclose(rotor.get_downwash_radius(0.0), rotor.radius)

    def test_far_wake(self):
        """Fully developed wake: twice the disc velocity, radius / sqrt(2)."""
        rotor = Rotor()
        rotor.inflow = 0.05
        vi = rotor.inflow * rotor.rot_speed * rotor.radius

        assert np.isclose(rotor.get_downwash_velocity(1e6)[2], -2.0 * vi, rtol=1e-6)
        assert np.isclose(rotor.get_downwash_radius(1e6), rotor.radius / np.sqrt(2.0), rtol=1e-6)

    def test_wake_contracts_monotonically(self):
        rotor = Rotor()
        radii = [rotor.get_downwash_radius(d) for d in np.linspace(0.0, 30.0, 31)]
        assert np.all(np.diff(radii) < 0.0)


class TestStabilizer:
    """Test flat surface lift and drag."""

    def test_no_flow(self):
        stab = Stabilizer()
        stab.update(0.01)
        assert np.allclose(stab.force, 0.0)

    def test_zero_angle_of_attack_drag_only(self):
        stab = Stabilizer()
        stab.velocity = np.array([50.0, 0.0, 0.0])
        stab.update(0.01)

        assert stab.force[0] < 0.0
        assert np.isclose(stab.force[2], 0.0)

    def test_positive_angle_of_attack_lifts_up(self):
        stab = Stabilizer()
        stab.velocity = np.array([50.0, 0.0, 5.0])
        stab.update(0.01)

        assert stab.force[2] < 0.0

    def test_lift_formula(self):
        stab = Stabilizer(area=1.0, lift_slope=3.0, drag_coefficient=0.0, induced_drag_factor=0.0)
        u, w = 40.0, 3.0
        stab.velocity = np.array([u, 0.0, w])
        stab.update(0.01)

        V = np.hypot(u, w)
        lift = 0.5 * stab.density * 3.0 * u * w / V * np.array([w, 0.0, -u])
        assert np.allclose(stab.force, lift)

    def test_pure_sideslip_along_span(self):
        """Flow along the span only produces no lift."""
        stab = Stabilizer()
        stab.velocity = np.array([0.0, 10.0, 0.0])
        stab.update(0.01)
        assert np.allclose(stab.force, 0.0)


class TestFuselage:
    """Test fuselage drag and moments."""

    def test_drag_opposes_motion(self):
        fus = Fuselage()
        fus.velocity = np.array([30.0, -5.0, 2.0])
        fus.update(0.01)

        assert np.all(fus.force * fus.velocity < 0.0)

    def test_axial_drag(self):
        fus = Fuselage(drag_areas=(1.3, 8.0, 10.0))
        fus.velocity = np.array([40.0, 0.0, 0.0])
        fus.update(0.01)

        assert np.isclose(fus.force[0], -0.5 * fus.density * 40.0 * 1.3 * 40.0)
        assert np.allclose(fus.torque, 0.0)

    def test_pitch_moment_sign(self):
        """Positive angle of attack gives a nose-up (unstable) moment."""
        fus = Fuselage()
        fus.velocity = np.array([40.0, 0.0, 4.0])
        fus.update(0.01)
        assert fus.torque[1] > 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
