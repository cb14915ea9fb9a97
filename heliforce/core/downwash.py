"""
Main rotor downwash interference.

Local-velocity strategy that superimposes the main rotor wake on the
velocity seen by every other sub-model of the aggregate.
"""

import numpy as np
from typing import Tuple

from .force_model import ForceModel, RigidBodyVelocity
from .frames import rotation_y


# Wake velocities below this magnitude are treated as no wake (m/s)
NEGLIGIBLE_WASH = 0.01

# Normalized distance from the wake centerline where the ramp starts and ends
RAMP_START = 0.9
RAMP_END = 1.1


def wake_ramp(ndwc: float) -> float:
    """
    Wake strength factor versus normalized distance from the wake centerline.

    Full strength up to RAMP_START, linear falloff to zero at RAMP_END.
    """
    if ndwc > RAMP_END:
        return 0.0
    if ndwc > RAMP_START:
        return 1.0 - (ndwc - RAMP_START) / (RAMP_END - RAMP_START)
    return 1.0


class DownwashInterference(RigidBodyVelocity):
    """
    Local-velocity strategy including the main rotor wake.

    Parameters:
    -----------
    assembly : ForceAssembly
        Aggregate providing velocity, angular velocity and the main rotor
    rotor_slot : str
        Attribute name of the main rotor on the assembly
    """

    def __init__(self, assembly, rotor_slot: str = 'main_rotor'):
        super().__init__(assembly)
        self.rotor_slot = rotor_slot

    @property
    def rotor(self):
        return getattr(self.assembly, self.rotor_slot)

    def wash_velocity(self, model: ForceModel) -> np.ndarray:
        """
        Wake velocity at a sub-model position in body axes.

        Returns None when the wake is negligible at that distance.
        """
        rotor = self.rotor
        d_mr = np.linalg.norm(model.translation - rotor.translation)
        washvel = rotor.rotation @ rotor.get_downwash_velocity(d_mr)
        wash = np.linalg.norm(washvel)
        if wash <= NEGLIGIBLE_WASH:
            return None

        # Ramp to zero across the wake boundary to avoid abrupt changes
        d_wash_center = np.linalg.norm(np.cross(washvel, rotor.translation - model.translation)) / wash
        ndwc = d_wash_center / rotor.get_downwash_radius(d_mr)
        washvel = washvel * wake_ramp(ndwc)

        # Wake acceleration: rotate the wash about y by skew * w_w0, kept as given.
        # Improvised correction after Dreier fig. 12.7.
        w_w0 = np.linalg.norm(washvel) / np.linalg.norm(rotor.get_downwash_velocity(0.0)) - 1.0
        skew = np.arctan2(washvel[0], -washvel[2])
        return rotation_y(skew * w_w0) @ washvel

    def __call__(self, model: ForceModel) -> Tuple[np.ndarray, np.ndarray]:
        if model is self.rotor:
            return super().__call__(model)

        washvel = self.wash_velocity(model)
        if washvel is None:
            return super().__call__(model)

        omega = self.assembly.angular_velocity
        velocity = self.assembly.velocity + washvel - np.cross(model.translation, omega)
        return model.inv_rotation @ velocity, model.inv_rotation @ omega
