"""
Rotor model for main and tail rotors.

Uniform-inflow momentum theory combined with closed-form blade element
results for thrust, torque and quasi-steady tip-path-plane flapping.

Rotor frame: x forward, y right, z down along the shaft. Thrust acts along
the tip-path-plane normal (mostly -z). Rotation direction +1 means
counter-clockwise seen from above (angular velocity along -z).

Flapping convention:
- beta_0   : coning angle (rad)
- beta_cos : longitudinal tip-path-plane tilt, positive aft (rad)
- beta_sin : lateral tip-path-plane tilt, positive to the right (rad)
"""

import numpy as np
from typing import Tuple

from .force_model import ForceModel, Pose


RHO_REF = 1.225  # kg/m^3, density at which the Lock number is specified


class Rotor(ForceModel):
    """
    Rigid-blade rotor with centre-spring flapping.

    Parameters:
    -----------
    number_of_blades : int
        Blade count
    radius : float
        Rotor radius (m)
    chord : float
        Blade chord (m)
    lift_slope : float
        Blade section lift curve slope (1/rad)
    twist : float
        Linear blade twist, tip minus root (rad)
    profile_drag : float
        Mean blade profile drag coefficient
    lock_number : float
        Blade Lock number at sea level density
    flap_frequency : float
        Non-dimensional flap frequency squared (1.0 = articulated)
    design_omega : float
        Design rotational speed (rad/s)
    inertia : float
        Rotational inertia about the shaft (kg*m^2)
    rotation_direction : int
        +1 counter-clockwise from above, -1 clockwise
    collective_range : tuple of float
        Root collective pitch at normalized collective -1 and +1 (rad)
    cyclic_limits : tuple of float
        Longitudinal and lateral cyclic pitch at normalized +1 (rad)
    inflow_time_constant : float
        Time constant of the dynamic inflow lag (s)
    pose : Pose, optional
        Hub placement relative to the aggregate origin
    """

    def __init__(self,
                 number_of_blades: int = 4,
                 radius: float = 4.91,
                 chord: float = 0.27,
                 lift_slope: float = 5.73,
                 twist: float = np.radians(-8.0),
                 profile_drag: float = 0.01,
                 lock_number: float = 5.0,
                 flap_frequency: float = 1.12,
                 design_omega: float = 44.4,
                 inertia: float = 4000.0,
                 rotation_direction: int = 1,
                 collective_range: Tuple[float, float] = (np.radians(2.0), np.radians(24.0)),
                 cyclic_limits: Tuple[float, float] = (np.radians(10.0), np.radians(8.0)),
                 inflow_time_constant: float = 0.1,
                 pose: Pose = None):
        super().__init__(pose)
        self.number_of_blades = number_of_blades
        self.radius = radius
        self.chord = chord
        self.lift_slope = lift_slope
        self.twist = twist
        self.profile_drag = profile_drag
        self.lock_number = lock_number
        self.flap_frequency = flap_frequency
        self.design_omega = design_omega
        self.inertia = inertia
        self.rotation_direction = rotation_direction
        self.collective_range = tuple(collective_range)
        self.cyclic_limits = tuple(cyclic_limits)
        self.inflow_time_constant = inflow_time_constant

        self.use_dynamic_inflow = True
        self.height_above_ground = 1000.0

        # Normalized control inputs
        self.collective = 0.0
        self.long_cyclic = 0.0  # positive forward
        self.lat_cyclic = 0.0  # positive right

        # Rotor state
        self.rot_speed = design_omega
        self.inflow = 0.0  # induced inflow ratio (positive down)
        self.CT = 0.0
        self.beta_0 = 0.0
        self.beta_cos = 0.0
        self.beta_sin = 0.0
        self.shaft_torque = 0.0

    # ------------------------------------------------------------------
    # Geometry

    @property
    def area(self) -> float:
        """Disc area (m^2)."""
        return np.pi * self.radius**2

    @property
    def solidity(self) -> float:
        """Blade area over disc area."""
        return self.number_of_blades * self.chord / (np.pi * self.radius)

    @property
    def RhoAOR2(self) -> float:
        """Thrust normalization rho*A*(Omega*R)^2 at the current speed (N)."""
        return self.density * self.area * (self.rot_speed * self.radius)**2

    @property
    def hub_stiffness(self) -> float:
        """Hub moment per radian of tip-path-plane tilt (N*m/rad)."""
        blade_inertia = RHO_REF * self.lift_slope * self.chord * self.radius**4 / self.lock_number
        spring = (self.flap_frequency - 1.0) * blade_inertia * self.rot_speed**2
        return 0.5 * self.number_of_blades * spring

    # ------------------------------------------------------------------
    # Control mapping

    def get_control_angles(self) -> Tuple[float, float, float]:
        """
        Physical blade pitch angles for the current normalized inputs.

        Returns:
        --------
        theta_0, theta_sin, theta_cos : float
            Root collective, longitudinal and lateral cyclic pitch (rad)
        """
        lo, hi = self.collective_range
        theta_0 = lo + 0.5 * (self.collective + 1.0) * (hi - lo)
        theta_sin = self.long_cyclic * self.cyclic_limits[0]
        theta_cos = self.lat_cyclic * self.cyclic_limits[1]
        return theta_0, theta_sin, theta_cos

    def get_normalized_control_angles(self, theta_0: float, theta_sin: float,
                                      theta_cos: float) -> Tuple[float, float, float]:
        """Inverse of get_control_angles() for arbitrary pitch angles."""
        lo, hi = self.collective_range
        collective = 2.0 * (theta_0 - lo) / (hi - lo) - 1.0
        # Rotors without cyclic (tail rotors) have zero limits
        long_cyclic = theta_sin / self.cyclic_limits[0] if self.cyclic_limits[0] else 0.0
        lat_cyclic = theta_cos / self.cyclic_limits[1] if self.cyclic_limits[1] else 0.0
        return collective, long_cyclic, lat_cyclic

    # ------------------------------------------------------------------
    # Wake

    def _wake_factor(self, distance: float) -> float:
        """Wake velocity over disc induced velocity, 1 at the disc, 2 far downstream."""
        return 1.0 + distance / np.sqrt(self.radius**2 + distance**2)

    def get_downwash_velocity(self, distance: float) -> np.ndarray:
        """
        Wake velocity at a distance from the hub, in the rotor frame.

        Expressed as the velocity a body in the wake has relative to the
        wake air, so a downward wake gives a negative z component.
        """
        vi = self.inflow * self.rot_speed * self.radius
        return np.array([0.0, 0.0, -self._wake_factor(distance) * vi])

    def get_downwash_radius(self, distance: float) -> float:
        """Wake radius from continuity of the contracting wake (m)."""
        return self.radius / np.sqrt(self._wake_factor(distance))

    # ------------------------------------------------------------------
    # Aerodynamics

    def _ground_effect(self) -> float:
        """Induced velocity factor from Cheeseman-Bennett ground effect."""
        h = max(self.height_above_ground, 0.5 * self.radius)
        return 1.0 - (self.radius / (4.0 * h))**2

    def _flapping(self, theta_0, theta_sin, theta_cos, mu_x, mu_y, lam, omega):
        """Quasi-steady tip-path-plane flapping angles."""
        gamma = self.lock_number * self.density / RHO_REF
        mu2 = mu_x**2 + mu_y**2
        p, q = self.angular_velocity[0], self.angular_velocity[1]

        beta_0 = gamma / (8.0 * self.flap_frequency) * (
            theta_0 * (1.0 + mu2) + 0.8 * self.twist * (1.0 + 5.0 / 6.0 * mu2) - 4.0 / 3.0 * lam)
        blowback = 2.0 * (4.0 / 3.0 * theta_0 + self.twist - lam) / (1.0 + 0.5 * mu2)
        rate_lag = 16.0 / (gamma * omega)

        beta_cos = -theta_sin + blowback * mu_x - rate_lag * q
        beta_sin = (theta_cos - blowback * mu_y - rate_lag * p
                    + self.rotation_direction * 4.0 / 3.0 * mu_x * beta_0)
        return beta_0, beta_cos, beta_sin

    def _thrust_coefficient(self, theta_0, mu2, lam):
        return 0.5 * self.lift_slope * self.solidity * (
            theta_0 * (1.0 / 3.0 + 0.5 * mu2) + 0.25 * self.twist * (1.0 + mu2) - 0.5 * lam)

    def _disc_normal(self):
        """Unit tip-path-plane normal pointing along the thrust."""
        a1, b1 = self.beta_cos, self.beta_sin
        return np.array([-np.sin(a1) * np.cos(b1), np.sin(b1), -np.cos(a1) * np.cos(b1)])

    def update(self, dt: float):
        """Compute flapping, inflow, force and torque for the current inputs."""
        omega = self.rot_speed
        if omega < 1e-3:
            # Stopped rotor
            self.force = np.zeros(3)
            self.torque = np.zeros(3)
            self.shaft_torque = 0.0
            return

        tip_speed = omega * self.radius
        u, v, w = self.velocity
        mu_x, mu_y = u / tip_speed, v / tip_speed
        mu2 = mu_x**2 + mu_y**2
        theta_0, theta_sin, theta_cos = self.get_control_angles()
        ge = self._ground_effect()

        def solve_disc(inflow):
            # Total inflow through the tip-path plane, positive down
            normal = self._disc_normal()
            lam = inflow + (normal @ self.velocity) / tip_speed
            CT = self._thrust_coefficient(theta_0, mu2, lam)
            self.beta_0, self.beta_cos, self.beta_sin = self._flapping(
                theta_0, theta_sin, theta_cos, mu_x, mu_y, lam, omega)
            return lam, CT

        # Newton iteration on the momentum equation, seeded from the last thrust
        inflow = np.sign(self.CT) * np.sqrt(abs(self.CT) / 2.0) * ge
        k = 0.25 * self.lift_slope * self.solidity
        for _ in range(50):
            lam, CT = solve_disc(inflow)
            s = np.sqrt(mu2 + lam**2 + 1e-8)
            residual = inflow - ge * CT / (2.0 * s)
            slope = 1.0 + ge * 0.5 * k / s + ge * CT * lam / (2.0 * s**3)
            inflow -= residual / slope
            if abs(residual) < 1e-13:
                break

        if self.use_dynamic_inflow:
            # First-order lag towards the momentum solution
            self.inflow += (inflow - self.inflow) * min(dt / self.inflow_time_constant, 1.0)
        else:
            self.inflow = inflow
        lam, CT = solve_disc(self.inflow)

        self.CT = CT
        rho_a = self.density * self.area
        thrust = CT * rho_a * tip_speed**2

        # Profile drag H-force opposes in-plane motion
        h_force = 0.25 * self.solidity * self.profile_drag * rho_a * tip_speed
        self.force = thrust * self._disc_normal() - h_force * np.array([u, v, 0.0])

        CQ = CT * lam + 0.125 * self.solidity * self.profile_drag * (1.0 + 3.0 * mu2)
        self.shaft_torque = CQ * rho_a * tip_speed**2 * self.radius

        k_hub = self.hub_stiffness
        self.torque = np.array([
            k_hub * self.beta_sin,
            k_hub * self.beta_cos,
            self.rotation_direction * self.shaft_torque
        ])
