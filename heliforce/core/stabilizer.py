"""
Stabilizer (tail surface) model.

Surface frame: x along the chord (forward), y along the span, z normal to
the surface (down for a horizontal stabilizer). Lift acts in the x-z plane.
"""

import numpy as np

from .force_model import ForceModel, Pose


class Stabilizer(ForceModel):
    """
    Flat lifting surface with a sin*cos lift curve.

    Lift coefficient CL = a * sin(alpha) * cos(alpha) stays bounded through
    large angles of attack, which keeps the model usable in hover and
    sideward flight where the local flow is mostly normal to the surface.

    Parameters:
    -----------
    area : float
        Planform area (m^2)
    lift_slope : float
        Lift curve slope (1/rad)
    drag_coefficient : float
        Zero-lift drag coefficient
    induced_drag_factor : float
        K in CD = CD0 + K * CL^2
    pose : Pose, optional
        Placement relative to the aggregate origin
    """

    def __init__(self,
                 area: float = 0.8,
                 lift_slope: float = 3.5,
                 drag_coefficient: float = 0.01,
                 induced_drag_factor: float = 0.1,
                 pose: Pose = None):
        super().__init__(pose)
        self.area = area
        self.lift_slope = lift_slope
        self.drag_coefficient = drag_coefficient
        self.induced_drag_factor = induced_drag_factor

    def update(self, dt: float):
        """Compute lift and drag from the local velocity."""
        u, v, w = self.velocity
        V = np.linalg.norm(self.velocity)
        V_xz = np.hypot(u, w)
        if V < 1e-6 or V_xz < 1e-6:
            self.force = np.zeros(3)
            self.torque = np.zeros(3)
            return

        half_rho_S = 0.5 * self.density * self.area
        CL = self.lift_slope * u * w / V_xz**2

        # Lift perpendicular to the in-plane flow, drag against the full flow
        lift = half_rho_S * self.lift_slope * (u * w / V_xz) * np.array([w, 0.0, -u])
        CD = self.drag_coefficient + self.induced_drag_factor * CL**2
        drag = -half_rho_S * CD * V * self.velocity

        self.force = lift + drag
        self.torque = np.zeros(3)
