"""
Fuselage drag and moment model.
"""

import numpy as np
from typing import Sequence

from .force_model import ForceModel, Pose


class Fuselage(ForceModel):
    """
    Equivalent flat-plate drag areas along each body axis.

    Force: F_i = -0.5 * rho * V * f_i * v_i
    Moments: unstable pitch and yaw moments proportional to the
    flow angle, M = 0.5 * rho * volume * (u*w, -u*v) (Munk-type).

    Parameters:
    -----------
    drag_areas : sequence of float
        Drag areas (m^2) for flow along x, y and z
    pitch_volume : float
        Pitching moment volume (m^3)
    yaw_volume : float
        Yawing moment volume (m^3)
    pose : Pose, optional
        Reference point placement relative to the aggregate origin
    """

    def __init__(self,
                 drag_areas: Sequence[float] = (1.3, 8.0, 10.0),
                 pitch_volume: float = 4.0,
                 yaw_volume: float = 6.0,
                 pose: Pose = None):
        super().__init__(pose)
        self.drag_areas = np.asarray(drag_areas, dtype=float)
        self.pitch_volume = pitch_volume
        self.yaw_volume = yaw_volume

    def update(self, dt: float):
        """Compute drag and moments from the local velocity."""
        u, v, w = self.velocity
        V = np.linalg.norm(self.velocity)
        half_rho = 0.5 * self.density

        self.force = -half_rho * V * self.drag_areas * self.velocity
        self.torque = half_rho * np.array([
            0.0,
            self.pitch_volume * u * w,
            -self.yaw_volume * u * v
        ])
