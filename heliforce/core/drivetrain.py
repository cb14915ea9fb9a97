"""
Engine and gearbox models for the rotor drivetrain.

Provides:
- Turboshaft engine with starter, light-off, start schedule and speed governor
- Main gearbox with freewheel clutch, friction and rotor brake

Speeds are in rad/s, torques in N*m. Gearbox loads and inertias are
referred to the engine (drive) shaft.
"""

import logging
from enum import Enum, auto

import numpy as np

from ..control.pi_controller import PIController

logger = logging.getLogger(__name__)


class EnginePhase(Enum):
    STOP = auto()
    START = auto()
    RUN = auto()


class Engine:
    """
    Turboshaft engine driving the gearbox.

    The starter cranks the engine up to light-off. From there fuel is lit
    and the engine accelerates on a fixed schedule, whatever the rotor load,
    until it reaches idle and the governor takes over to hold the design
    speed within the power limit.

    Parameters:
    -----------
    omega0 : float
        Design (governed) output speed (rad/s)
    max_power : float
        Maximum shaft power (W)
    own_inertia : float
        Engine rotating inertia at the output shaft (kg*m^2)
    starter_torque : float
        Starter motor torque (N*m)
    light_off_fraction : float
        Speed fraction of omega0 at which fuel is lit
    start_acceleration : float
        Scheduled acceleration between light-off and idle (rad/s^2)
    idle_fraction : float
        Speed fraction of omega0 at which the start sequence completes
    """

    def __init__(self,
                 omega0: float = 628.0,
                 max_power: float = 620e3,
                 own_inertia: float = 0.5,
                 starter_torque: float = 60.0,
                 light_off_fraction: float = 0.25,
                 start_acceleration: float = 20.0,
                 idle_fraction: float = 0.6):
        self.omega0 = omega0
        self.max_power = max_power
        self.own_inertia = own_inertia
        self.starter_torque = starter_torque
        self.light_off_fraction = light_off_fraction
        self.start_acceleration = start_acceleration
        self.idle_fraction = idle_fraction

        self.governor = PIController(Kp=40.0, Ki=20.0, integral_limits=(-50.0, 50.0))

        self.phase = EnginePhase.STOP
        self.rotspeed = 0.0
        self.torque = 0.0
        self.load = 0.0  # torque demanded by the gearbox
        self.inertia = 0.0  # inertia reflected by the gearbox

    @property
    def lit(self) -> bool:
        """True once the engine burns fuel."""
        if self.phase == EnginePhase.RUN:
            return True
        return (self.phase == EnginePhase.START
                and self.rotspeed >= self.light_off_fraction * self.omega0)

    def init(self, rotspeed: float):
        """Start the simulation with the engine running at a given speed."""
        self.phase = EnginePhase.RUN
        self.rotspeed = rotspeed
        self.governor.reset()

    def init_stopped(self):
        """Start the simulation with the engine stopped."""
        self.phase = EnginePhase.STOP
        self.rotspeed = 0.0
        self.torque = 0.0
        self.governor.reset()

    def start(self):
        """Engage the starter."""
        if self.phase == EnginePhase.STOP:
            self.phase = EnginePhase.START
            logger.info("Engine start sequence engaged")

    def update(self, dt: float):
        """Advance engine speed by one time step."""
        total_inertia = self.inertia + self.own_inertia
        available = self.max_power / max(self.rotspeed, 1.0)

        if self.phase == EnginePhase.RUN:
            demand = self.load + self.governor.update(self.omega0 - self.rotspeed, dt)
            self.torque = float(np.clip(demand, 0.0, available))
        elif self.phase == EnginePhase.START:
            if self.lit:
                scheduled = self.load + total_inertia * self.start_acceleration
                self.torque = min(max(scheduled, self.starter_torque), available)
            else:
                self.torque = self.starter_torque
            if self.rotspeed >= self.idle_fraction * self.omega0:
                self.phase = EnginePhase.RUN
                self.governor.reset()
                logger.info("Engine running at %.1f rad/s", self.rotspeed)
        else:
            self.torque = 0.0

        self.rotspeed = max(0.0, self.rotspeed + (self.torque - self.load) / total_inertia * dt)


class GearBox:
    """
    Main gearbox with freewheel clutch.

    The clutch is engaged while the drive shaft turns at least as fast as
    the rotor side (both referred to the drive shaft). When disengaged the
    rotors spin down under their own load and the engine sees only the
    gearbox friction.

    Parameters:
    -----------
    main_rotor_ratio : float
        Drive speed over main rotor speed
    tail_rotor_ratio : float
        Drive speed over tail rotor speed
    friction : float
        Friction torque per unit drive speed (N*m*s/rad)
    brake_torque : float
        Rotor brake torque at the drive shaft (N*m)
    auto_brake_omega : float
        Engine speed above which a start sequence releases the brake (rad/s),
        zero disables the automatic release
    """

    def __init__(self,
                 main_rotor_ratio: float = 14.14,
                 tail_rotor_ratio: float = 2.7,
                 friction: float = 0.1,
                 brake_torque: float = 500.0,
                 auto_brake_omega: float = 0.0):
        self.main_rotor_ratio = main_rotor_ratio
        self.tail_rotor_ratio = tail_rotor_ratio
        self.friction = friction
        self.brake_torque = brake_torque
        self.auto_brake_omega = auto_brake_omega

        self.brake_enabled = False
        self.engaged = True

        # Inputs
        self.main_rotor_load = 0.0
        self.tail_rotor_load = 0.0
        self.main_rotor_inertia = 0.0
        self.tail_rotor_inertia = 0.0
        self.rotspeed_drive = 0.0

        # Outputs
        self.rotor_side_speed = 0.0  # rotor side speed referred to the drive shaft
        self.load = 0.0
        self.inertia = 0.0

    @property
    def main_rotor_speed(self) -> float:
        speed = self.rotspeed_drive if self.engaged else self.rotor_side_speed
        return speed / self.main_rotor_ratio

    @property
    def tail_rotor_speed(self) -> float:
        speed = self.rotspeed_drive if self.engaged else self.rotor_side_speed
        return speed / self.tail_rotor_ratio

    def init(self, rotspeed_drive: float):
        """Set drive and rotor side to the same speed with the clutch engaged."""
        self.rotspeed_drive = rotspeed_drive
        self.rotor_side_speed = rotspeed_drive
        self.engaged = True

    def update(self, dt: float):
        """Refer rotor loads to the drive shaft and resolve the clutch state."""
        rotor_load = (self.main_rotor_load / self.main_rotor_ratio
                      + self.tail_rotor_load / self.tail_rotor_ratio)
        rotor_inertia = (self.main_rotor_inertia / self.main_rotor_ratio**2
                         + self.tail_rotor_inertia / self.tail_rotor_ratio**2)
        friction_load = self.friction * self.rotspeed_drive

        if self.brake_enabled:
            # Brake holds the rotor side, engine runs free
            self.engaged = False
            decel = (rotor_load + self.brake_torque) / max(rotor_inertia, 1e-6) * dt
            self.rotor_side_speed = max(0.0, self.rotor_side_speed - decel)
            self.load = friction_load
            self.inertia = 0.0
            return

        # Rotor side speed if it were left to spin on its own
        free_speed = max(0.0, self.rotor_side_speed
                         - rotor_load / max(rotor_inertia, 1e-6) * dt)

        was_engaged = self.engaged
        self.engaged = self.rotspeed_drive >= free_speed
        if self.engaged != was_engaged:
            logger.debug("Clutch %s", "engaged" if self.engaged else "disengaged")

        if self.engaged:
            self.rotor_side_speed = self.rotspeed_drive
            self.load = rotor_load + friction_load
            self.inertia = rotor_inertia
        else:
            self.rotor_side_speed = free_speed
            self.load = friction_load
            self.inertia = 0.0
