"""
Rotation matrices and Euler angles for body/sub-model frames.

Convention: body axes x forward, y right, z down.
            R = Rz(psi) * Ry(theta) * Rx(phi) maps body vectors into the
            world (NED) frame; R.T maps world vectors into the body frame.
"""

import numpy as np
from typing import Tuple


def wrap_angle(angle: float) -> float:
    """Wrap an angle into the half-open interval (-pi, pi]."""
    return angle - 2.0 * np.pi * np.ceil((angle - np.pi) / (2.0 * np.pi))


def rotation_x(angle: float) -> np.ndarray:
    """Elementary rotation about the x axis."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, -s],
        [0.0, s, c]
    ])


def rotation_y(angle: float) -> np.ndarray:
    """Elementary rotation about the y axis."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, 0.0, s],
        [0.0, 1.0, 0.0],
        [-s, 0.0, c]
    ])


def rotation_z(angle: float) -> np.ndarray:
    """Elementary rotation about the z axis."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, -s, 0.0],
        [s, c, 0.0],
        [0.0, 0.0, 1.0]
    ])


AXIS_ROTATIONS = {
    'x': rotation_x,
    'y': rotation_y,
    'z': rotation_z,
}


def euler_rotation(phi: float, theta: float, psi: float) -> np.ndarray:
    """
    Build the body-to-world rotation matrix from Euler angles.

    Parameters:
    -----------
    phi : float
        Roll angle (rad), positive right wing down
    theta : float
        Pitch angle (rad), positive nose up
    psi : float
        Heading (rad), positive nose right

    Returns:
    --------
    R : np.ndarray, shape (3, 3)
        Rotation matrix Rz(psi) * Ry(theta) * Rx(phi)
    """
    return rotation_z(psi) @ rotation_y(theta) @ rotation_x(phi)


def euler_angles(R: np.ndarray) -> Tuple[float, float, float]:
    """
    Decompose a body-to-world rotation matrix into Euler angles.

    Inverse of euler_rotation() for pitch in [-pi/2, pi/2].

    Parameters:
    -----------
    R : np.ndarray, shape (3, 3)
        Rotation matrix

    Returns:
    --------
    phi, theta, psi : float
        Roll, pitch and heading (rad)
    """
    # Clamp to avoid numerical issues with arcsin
    sin_theta = np.clip(-R[2, 0], -1.0, 1.0)
    theta = np.arcsin(sin_theta)

    if abs(sin_theta) > 1.0 - 1e-12:
        # Gimbal lock: roll and heading are coupled, put it all in heading
        phi = 0.0
        psi = np.arctan2(-R[0, 1], R[1, 1])
    else:
        phi = np.arctan2(R[2, 1], R[2, 2])
        psi = np.arctan2(R[1, 0], R[0, 0])

    return float(phi), float(theta), float(psi)


def compose_rotations(steps) -> np.ndarray:
    """
    Compose elementary rotations given as (axis, angle) pairs.

    The product is taken left to right, e.g. [('x', a), ('y', b)]
    gives rotation_x(a) @ rotation_y(b). Angles are in radians.
    """
    R = np.eye(3)
    for axis, angle in steps:
        try:
            R = R @ AXIS_ROTATIONS[axis.lower()](angle)
        except KeyError:
            raise ValueError(f"Unknown rotation axis: {axis}. Must be 'x', 'y' or 'z'")
    return R
