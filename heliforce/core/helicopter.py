"""
Force system model of a single main rotor helicopter.

A force assembly of main rotor, tail rotor, stabilizers, fuselage and
gravity, extended with:
- attitude bookkeeping (rotation matrix <-> Euler angles, gravity frame)
- main rotor downwash on the other sub-models
- engine/gearbox/rotor drivetrain coupling
- trim to a force and torque balanced condition

Attitude and velocity come from an external rigid body simulation; this
model only produces the net force and torque in body axes.
"""

import logging
import warnings
from typing import Optional, Tuple

import numpy as np

from .downwash import DownwashInterference
from .drivetrain import Engine, EnginePhase, GearBox
from .force_model import ForceAssembly, ForceModel, StaticForce
from .frames import euler_angles, euler_rotation, wrap_angle
from .fuselage import Fuselage
from .rotor import Rotor
from .stabilizer import Stabilizer
from ..control.fcs import FlightControlSystem
from ..control.trim import JacobianTrimmer, TrimError, TrimResult, override_attributes
from ..environment.atmosphere import StandardAtmosphere

logger = logging.getLogger(__name__)


GRAVITY = 9.81

# Power lost to gearbox friction when no drivetrain is simulated, friction
# coefficient times design engine speed squared. Approximation, kept as is.
IDLE_POWER_LOSS = 0.1 * 628 * 628

TRIM_TOLERANCE = 1e-3
TRIM_SUBSTEPS = 10
TRIM_DT = 0.01


class SingleMainRotorHelicopter(ForceAssembly):
    """
    Single main rotor helicopter force model.

    Body axes: x forward, y right, z down, origin at the reference point
    the sub-model poses are given from (normally the centre of gravity).

    Attributes
    ----------
    main_rotor, tail_rotor : Rotor
        Rotor sub-models
    horizontal_stabilizer, vertical_stabilizer : Stabilizer or None
        Tail surfaces
    fuselage : Fuselage or None
        Fuselage drag model
    gravity : StaticForce
        Weight, rotated so it always points to world down
    fcs : FlightControlSystem
        Maps pilot commands to rotor controls
    engine, gearbox : Engine, GearBox
        Drivetrain, used when use_engine_model is True
    wind : np.ndarray, shape (3,)
        Wind velocity in world (NED) axes (m/s)
    power_required : float
        Shaft power required at the last update (W)
    """

    def __init__(self):
        super().__init__()
        self.main_rotor: Rotor = Rotor()
        self.tail_rotor: Rotor = Rotor()
        self.horizontal_stabilizer: Optional[Stabilizer] = None
        self.vertical_stabilizer: Optional[Stabilizer] = None
        self.fuselage: Optional[Fuselage] = None
        self.gravity = StaticForce(np.zeros(3))

        self.atmosphere = StandardAtmosphere()
        self.fcs = FlightControlSystem()
        self.engine = Engine()
        self.gearbox = GearBox()
        self.use_engine_model = False

        self.wind = np.zeros(3)
        self.inertia = np.eye(3)
        self.power_required = 0.0
        self._mass = 0.0

        self.local_velocity = DownwashInterference(self)
        self.set_attitude(0.0, 0.0, 0.0)

    def load_default(self) -> 'SingleMainRotorHelicopter':
        """Configure a 2.45 t light twin helicopter."""
        from ..io.config import HelicopterConfig, create_default_config
        HelicopterConfig(create_default_config()).apply(self)
        return self

    @property
    def models(self) -> Tuple[ForceModel, ...]:
        slots = (self.main_rotor, self.tail_rotor, self.horizontal_stabilizer,
                 self.vertical_stabilizer, self.fuselage, self.gravity)
        return tuple(model for model in slots if model is not None)

    # ------------------------------------------------------------------
    # Control inputs (pilot commands, normalized)

    @property
    def collective(self) -> float:  # positive up
        return self.fcs.collective_command

    @collective.setter
    def collective(self, value: float):
        self.fcs.collective_command = value

    @property
    def long_cyclic(self) -> float:  # positive forward
        return self.fcs.long_command

    @long_cyclic.setter
    def long_cyclic(self, value: float):
        self.fcs.long_command = value

    @property
    def lat_cyclic(self) -> float:  # positive right
        return self.fcs.lat_command

    @lat_cyclic.setter
    def lat_cyclic(self, value: float):
        self.fcs.lat_command = value

    @property
    def pedal(self) -> float:  # positive right
        return self.fcs.pedal_command

    @pedal.setter
    def pedal(self, value: float):
        self.fcs.pedal_command = value

    # ------------------------------------------------------------------
    # Attitude and frames

    def set_attitude(self, roll: float, pitch: float, heading: float):
        """
        Set Euler angles and the dependent rotations.

        Roll and pitch are wrapped into (-pi, pi]; heading is kept as given.

        Parameters
        ----------
        roll : float
            Roll angle (rad), positive right
        pitch : float
            Pitch angle (rad), positive nose up
        heading : float
            Heading (rad), positive right
        """
        self._attitude = np.array([wrap_angle(roll), wrap_angle(pitch), heading], dtype=float)
        self._rotation = euler_rotation(*self._attitude)
        self.gravity.set_pose(np.zeros(3), self._rotation.T)

    def set_rotation(self, R: np.ndarray):
        """Set the body-to-world rotation and recompute the Euler angles from it."""
        R = np.array(R, dtype=float)
        phi, theta, psi = euler_angles(R)
        self._rotation = R
        self._attitude = np.array([wrap_angle(phi), wrap_angle(theta), psi])
        self.gravity.set_pose(np.zeros(3), R.T)

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation.copy()

    @rotation.setter
    def rotation(self, R: np.ndarray):
        self.set_rotation(R)

    @property
    def attitude(self) -> np.ndarray:
        """Roll, pitch and heading (rad)."""
        return self._attitude.copy()

    @attitude.setter
    def attitude(self, value):
        self.set_attitude(*value)

    @property
    def roll_angle(self) -> float:
        return self._attitude[0]

    @roll_angle.setter
    def roll_angle(self, value: float):
        self.set_attitude(value, self._attitude[1], self._attitude[2])

    @property
    def pitch_angle(self) -> float:
        return self._attitude[1]

    @pitch_angle.setter
    def pitch_angle(self, value: float):
        self.set_attitude(self._attitude[0], value, self._attitude[2])

    @property
    def heading(self) -> float:
        return self._attitude[2]

    @heading.setter
    def heading(self, value: float):
        self.set_attitude(self._attitude[0], self._attitude[1], value)

    @property
    def ground_velocity(self) -> np.ndarray:
        """Velocity over ground in body axes (m/s)."""
        return self.velocity + self._rotation.T @ self.wind

    @ground_velocity.setter
    def ground_velocity(self, value: np.ndarray):
        self.velocity = np.asarray(value, dtype=float) - self._rotation.T @ self.wind

    @property
    def absolute_velocity(self) -> np.ndarray:
        """Velocity over ground in world axes (m/s)."""
        return self._rotation @ self.ground_velocity

    @absolute_velocity.setter
    def absolute_velocity(self, value: np.ndarray):
        self.ground_velocity = self.gravity.rotation @ np.asarray(value, dtype=float)

    @property
    def height(self) -> float:
        """Height of the body origin above ground (m)."""
        return self.main_rotor.height_above_ground + self.main_rotor.translation[2]

    @height.setter
    def height(self, value: float):
        self.main_rotor.height_above_ground = value - self.main_rotor.translation[2]

    @property
    def mass(self) -> float:
        return self._mass

    @mass.setter
    def mass(self, value: float):
        self._mass = value
        self.gravity.force = np.array([0.0, 0.0, value * GRAVITY])

    # ------------------------------------------------------------------
    # Drivetrain

    def init_engine(self, running: bool):
        """
        Switch to the engine/gearbox drivetrain.

        Parameters
        ----------
        running : bool
            Start with the engine governed at design speed, otherwise stopped
        """
        self.use_engine_model = True
        self.gearbox.main_rotor_ratio = self.engine.omega0 / self.main_rotor.design_omega
        self.gearbox.tail_rotor_ratio = self.engine.omega0 / self.tail_rotor.design_omega
        if running:
            self.main_rotor.rot_speed = self.main_rotor.design_omega
            self.tail_rotor.rot_speed = self.tail_rotor.design_omega
            self.engine.init(self.engine.omega0)
            self.gearbox.init(self.engine.omega0)
        else:
            self.engine.init_stopped()
            self.gearbox.init(0.0)
            self.main_rotor.rot_speed = 0.0
            self.tail_rotor.rot_speed = 0.0

    def _update_drivetrain(self, dt: float):
        """Propagate shaft loads to the engine and engine speed back to the rotors."""
        if (self.engine.phase == EnginePhase.START
                and self.gearbox.auto_brake_omega > 1e-5
                and self.engine.rotspeed > self.gearbox.auto_brake_omega
                and self.gearbox.brake_enabled):
            self.gearbox.brake_enabled = False
            logger.info("Rotor brake released at %.1f rad/s", self.engine.rotspeed)

        self.gearbox.main_rotor_load = self.main_rotor.shaft_torque
        self.gearbox.tail_rotor_load = self.tail_rotor.shaft_torque
        self.gearbox.main_rotor_inertia = self.main_rotor.inertia
        self.gearbox.tail_rotor_inertia = self.tail_rotor.inertia
        self.gearbox.update(dt)

        self.engine.load = self.gearbox.load
        self.engine.inertia = self.gearbox.inertia
        self.engine.update(dt)

        self.gearbox.rotspeed_drive = self.engine.rotspeed
        self.main_rotor.rot_speed = self.gearbox.main_rotor_speed
        self.tail_rotor.rot_speed = self.gearbox.tail_rotor_speed

    def _compute_power_required(self) -> float:
        if self.use_engine_model:
            return self.gearbox.load * self.gearbox.rotspeed_drive
        return (self.main_rotor.shaft_torque * self.main_rotor.rot_speed
                + self.tail_rotor.shaft_torque * self.tail_rotor.rot_speed
                + IDLE_POWER_LOSS)

    def _apply_drivetrain_torque(self):
        """Add the tail rotor drive reaction, or remove main rotor torque when the clutch is open."""
        if self.use_engine_model and not self.gearbox.engaged:
            self.torque[2] -= self.main_rotor.torque[2]
        elif self.tail_rotor.rot_speed > 0.1:
            self.torque[2] += (self.tail_rotor.torque[2] * self.main_rotor.rot_speed
                               / self.tail_rotor.rot_speed)

    # ------------------------------------------------------------------
    # Simulation

    def update(self, dt: float):
        """
        Advance sub-models one time step and compute the net force and torque.

        Parameters
        ----------
        dt : float
            Time step (s)
        """
        self.atmosphere.position = self.translation
        self.atmosphere.update(dt)
        for model in self.models:
            model.density = self.atmosphere.density

        self.fcs.velocity = self.velocity
        self.fcs.angular_velocity = self.angular_velocity
        self.fcs.attitude = self.attitude
        self.fcs.update(dt)
        self.main_rotor.collective = self.fcs.collective
        self.main_rotor.long_cyclic = self.fcs.long_cyclic
        self.main_rotor.lat_cyclic = self.fcs.lat_cyclic
        self.tail_rotor.collective = -self.fcs.pedal  # pedal right = less tail collective

        if self.use_engine_model:
            self._update_drivetrain(dt)

        super().update(dt)

        self.power_required = self._compute_power_required()
        self._apply_drivetrain_torque()

    # ------------------------------------------------------------------
    # Control angles

    def get_control_angles(self) -> Tuple[float, float, float, float]:
        """
        Blade pitch angles currently applied to the rotors.

        Returns
        -------
        theta_0, theta_sin, theta_cos : float
            Main rotor collective, longitudinal and lateral cyclic (rad)
        theta_p : float
            Tail rotor collective (rad)
        """
        theta_0, theta_sin, theta_cos = self.main_rotor.get_control_angles()
        theta_p, _, _ = self.tail_rotor.get_control_angles()
        return theta_0, theta_sin, theta_cos, theta_p

    def set_control_angles(self, theta_0: float, theta_sin: float, theta_cos: float, theta_p: float):
        """Set pilot commands and rotor inputs from blade pitch angles (rad)."""
        ntheta_0, ntheta_sin, ntheta_cos = self.main_rotor.get_normalized_control_angles(
            theta_0, theta_sin, theta_cos)
        ntheta_p, _, _ = self.tail_rotor.get_normalized_control_angles(theta_p, 0.0, 0.0)

        self.collective = ntheta_0
        self.long_cyclic = ntheta_sin
        self.lat_cyclic = ntheta_cos
        self.pedal = -ntheta_p

        self.main_rotor.collective = ntheta_0
        self.main_rotor.long_cyclic = ntheta_sin
        self.main_rotor.lat_cyclic = ntheta_cos
        self.tail_rotor.collective = ntheta_p

    # ------------------------------------------------------------------
    # Trim

    def trim_init(self):
        """Seed rotor states and controls with a plausible starting point for trim."""
        for rotor in (self.main_rotor, self.tail_rotor):
            rotor.beta_0 = np.radians(3.0)
            rotor.beta_cos = 0.0
            rotor.beta_sin = 0.0
            rotor.rot_speed = rotor.design_omega

        # Thrust coefficient from disc loading
        CT_guess = self.mass * GRAVITY / self.main_rotor.RhoAOR2
        self.main_rotor.CT = CT_guess
        self.tail_rotor.CT = CT_guess

        self.collective = 0.5
        self.long_cyclic = 0.0
        self.lat_cyclic = 0.0
        self.pedal = -0.5

    def trim(self, strict: bool = False, trimmer: JacobianTrimmer = None) -> TrimResult:
        """
        Find controls, roll and pitch that zero the net force and torque.

        Runs quasi-statically: FCS, dynamic inflow and the engine model are
        switched off and gravity on for the duration, then restored. Heading,
        velocity and angular velocity are held.

        Parameters
        ----------
        strict : bool, optional
            Raise TrimError instead of warning when trim does not converge
        trimmer : JacobianTrimmer, optional
            Root finder, default JacobianTrimmer()

        Returns
        -------
        TrimResult
            Trimmed controls and attitude with convergence information
        """
        if trimmer is None:
            trimmer = JacobianTrimmer()
        heading = self.heading

        x = np.array([self.collective, self.long_cyclic, self.lat_cyclic, self.pedal,
                      self.roll_angle, self.pitch_angle], dtype=float)
        tolerance = np.full(6, TRIM_TOLERANCE)

        def residual(x):
            # x = (collective, long cyclic, lat cyclic, pedal, roll, pitch)
            self.collective, self.long_cyclic, self.lat_cyclic, self.pedal = x[:4]
            self.set_attitude(x[4], x[5], heading)
            for _ in range(TRIM_SUBSTEPS):
                self.update(TRIM_DT)
            return np.concatenate([self.force, self.torque])

        with override_attributes((self.fcs, 'enabled', False),
                                 (self.main_rotor, 'use_dynamic_inflow', False),
                                 (self.tail_rotor, 'use_dynamic_inflow', False),
                                 (self, 'use_engine_model', False),
                                 (self.gravity, 'enabled', True)):
            converged, final_residual, iterations = trimmer.trim(x, tolerance, residual)

        result = TrimResult(controls=x[:4].copy(),
                            attitude=self._attitude[:2].copy(),
                            residual=final_residual,
                            iterations=iterations,
                            converged=converged)

        if not converged:
            logger.warning("Trim did not converge, residual %s", final_residual)
            if strict:
                raise TrimError(result)
            warnings.warn("Trim did not converge; aircraft left at the last evaluated state",
                          RuntimeWarning)
            return result

        logger.info("Trimmed in %d evaluations: controls %s, roll %.2f deg, pitch %.2f deg",
                    iterations, np.round(result.controls, 4),
                    np.degrees(result.attitude[0]), np.degrees(result.attitude[1]))

        self.fcs.trim_collective = self.collective
        self.fcs.trim_long_cyclic = self.long_cyclic
        self.fcs.trim_lat_cyclic = self.lat_cyclic
        self.fcs.trim_pedal = self.pedal
        self.fcs.trim_attitude = self.attitude
        if self.fcs.trim_control:
            self.collective = 0.0
            self.long_cyclic = 0.0
            self.lat_cyclic = 0.0
            self.pedal = 0.0
        return result
