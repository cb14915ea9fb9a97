"""
Proportional-integral controller shared by the flight control system and the
engine governor.
"""

import numpy as np
from typing import Optional


class PIController:
    """
    Proportional-integral controller with integral anti-windup.

    Parameters
    ----------
    Kp : float
        Proportional gain
    Ki : float
        Integral gain
    integral_limits : tuple of float, optional
        (min, max) bounds on the accumulated error

    Attributes
    ----------
    error_integral : float
        Accumulated integral error
    """

    def __init__(self,
                 Kp: float,
                 Ki: float = 0.0,
                 integral_limits: Optional[tuple] = None):
        self.Kp = Kp
        self.Ki = Ki
        self.integral_limits = integral_limits

        self.error_integral = 0.0

    def update(self, error: float, dt: float) -> float:
        """
        Compute control output for given error.

        Parameters
        ----------
        error : float
            Control error (setpoint - measured)
        dt : float
            Time step (seconds)

        Returns
        -------
        float
            Control output
        """
        self.error_integral += error * dt
        if self.integral_limits is not None:
            self.error_integral = float(np.clip(self.error_integral,
                                                self.integral_limits[0],
                                                self.integral_limits[1]))

        return float(self.Kp * error + self.Ki * self.error_integral)

    def reset(self):
        """Reset controller state."""
        self.error_integral = 0.0
