"""
Flight Control System

Maps pilot commands to normalized rotor control inputs:
- Trim reference bias (optional)
- Rate damping stability augmentation (SAS)
- First-order actuator filter
"""

import numpy as np

from .pi_controller import PIController


class FlightControlSystem:
    """
    Stability augmentation and command mixing.

    When disabled the outputs equal the raw commands. When enabled the
    outputs are command + trim reference (if trim_control) + SAS feedback,
    passed through a first-order filter and limited to [-1, 1].

    Parameters
    ----------
    pitch_damping : float
        Longitudinal cyclic per unit pitch rate (1/(rad/s))
    roll_damping : float
        Lateral cyclic per unit roll rate (1/(rad/s))
    yaw_damping : float
        Pedal per unit yaw rate (1/(rad/s))
    filter_time_constant : float
        Output filter time constant (s)

    Attributes
    ----------
    collective_command, long_command, lat_command, pedal_command : float
        Pilot commands (normalized)
    collective, long_cyclic, lat_cyclic, pedal : float
        Outputs to the rotors (normalized)
    """

    def __init__(self,
                 pitch_damping: float = 0.2,
                 roll_damping: float = 0.1,
                 yaw_damping: float = 0.3,
                 filter_time_constant: float = 0.05):
        self.enabled = True
        self.trim_control = False
        self.filter_time_constant = filter_time_constant

        self.pitch_sas = PIController(Kp=pitch_damping)
        self.roll_sas = PIController(Kp=roll_damping)
        self.yaw_sas = PIController(Kp=yaw_damping)

        # Pilot commands
        self.collective_command = 0.0
        self.long_command = 0.0  # positive forward
        self.lat_command = 0.0  # positive right
        self.pedal_command = 0.0  # positive right

        # Trim reference
        self.trim_collective = 0.0
        self.trim_long_cyclic = 0.0
        self.trim_lat_cyclic = 0.0
        self.trim_pedal = 0.0
        self.trim_attitude = np.zeros(3)

        # Sensors
        self.velocity = np.zeros(3)
        self.angular_velocity = np.zeros(3)
        self.attitude = np.zeros(3)

        # Outputs
        self.collective = 0.0
        self.long_cyclic = 0.0
        self.lat_cyclic = 0.0
        self.pedal = 0.0

    def update(self, dt: float):
        """
        Compute control outputs for one time step.

        Parameters
        ----------
        dt : float
            Time step (seconds)
        """
        commands = np.array([self.collective_command, self.long_command,
                             self.lat_command, self.pedal_command])
        if not self.enabled:
            self.collective, self.long_cyclic, self.lat_cyclic, self.pedal = (float(x) for x in commands)
            return

        if self.trim_control:
            commands = commands + np.array([self.trim_collective, self.trim_long_cyclic,
                                            self.trim_lat_cyclic, self.trim_pedal])

        p, q, r = self.angular_velocity
        # Nose-up rate is damped with forward stick, roll and yaw rates with opposite inputs
        commands[1] += self.pitch_sas.update(q, dt)
        commands[2] -= self.roll_sas.update(p, dt)
        commands[3] -= self.yaw_sas.update(r, dt)
        target = np.clip(commands, -1.0, 1.0)

        outputs = np.array([self.collective, self.long_cyclic, self.lat_cyclic, self.pedal])
        alpha = min(dt / self.filter_time_constant, 1.0) if self.filter_time_constant > 0 else 1.0
        outputs += alpha * (target - outputs)
        self.collective, self.long_cyclic, self.lat_cyclic, self.pedal = (float(x) for x in outputs)

    def reset(self):
        """Snap outputs to the current commands and clear SAS state."""
        for sas in (self.pitch_sas, self.roll_sas, self.yaw_sas):
            sas.reset()
        self.collective = self.collective_command
        self.long_cyclic = self.long_command
        self.lat_cyclic = self.lat_command
        self.pedal = self.pedal_command
