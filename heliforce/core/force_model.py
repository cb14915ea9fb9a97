"""
Force models and force aggregation.

Provides:
- Pose snapshot (translation + rotation of a sub-model)
- Base force model interface
- Static force model (gravity)
- Generic aggregation of sub-model forces and torques into a body frame
"""

import numpy as np
from typing import Callable, Iterable, Tuple
from abc import ABC, abstractmethod

from archimedes import struct, field


@struct(frozen=True)
class Pose:
    """
    Placement of a sub-model relative to the aggregate origin.

    translation is the sub-model origin in body axes (m); rotation maps
    vectors from the sub-model frame into body axes.
    """

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))

    @property
    def inv_rotation(self) -> np.ndarray:
        """Body-to-local rotation."""
        return self.rotation.T


class ForceModel(ABC):
    """
    Base class for sub-models producing a force and torque.

    The aggregate writes velocity, angular_velocity and density in the
    sub-model's own frame, calls update() and reads force and torque back
    in the same frame.
    """

    def __init__(self, pose: Pose = None):
        self.pose = pose if pose is not None else Pose()
        self.enabled = True
        self.density = 1.225
        self.velocity = np.zeros(3)
        self.angular_velocity = np.zeros(3)
        self.force = np.zeros(3)
        self.torque = np.zeros(3)

    @property
    def translation(self) -> np.ndarray:
        return self.pose.translation

    @property
    def rotation(self) -> np.ndarray:
        return self.pose.rotation

    @property
    def inv_rotation(self) -> np.ndarray:
        return self.pose.inv_rotation

    def set_pose(self, translation: np.ndarray, rotation: np.ndarray = None):
        """Replace the pose with a new snapshot."""
        if rotation is None:
            rotation = np.eye(3)
        self.pose = Pose(np.asarray(translation, dtype=float),
                         np.asarray(rotation, dtype=float))

    @abstractmethod
    def update(self, dt: float):
        """
        Recompute force and torque from the current local inputs.

        Parameters:
        -----------
        dt : float
            Time step (s), used by sub-models with internal dynamics
        """
        pass


class StaticForce(ForceModel):
    """
    Constant force in the sub-model frame.

    Used for gravity: force is (0, 0, m*g) and the pose rotation maps
    world axes into body axes.
    """

    def __init__(self, force: np.ndarray = None, pose: Pose = None):
        super().__init__(pose)
        if force is not None:
            self.force = np.asarray(force, dtype=float)

    def update(self, dt: float):
        """Nothing to compute."""
        pass


LocalVelocity = Callable[[ForceModel], Tuple[np.ndarray, np.ndarray]]


class RigidBodyVelocity:
    """
    Default local-velocity strategy.

    Transfers the aggregate velocity to the sub-model position and
    expresses it in the sub-model frame.
    """

    def __init__(self, assembly: 'ForceAssembly'):
        self.assembly = assembly

    def __call__(self, model: ForceModel) -> Tuple[np.ndarray, np.ndarray]:
        omega = self.assembly.angular_velocity
        velocity = self.assembly.velocity - np.cross(model.translation, omega)
        return model.inv_rotation @ velocity, model.inv_rotation @ omega


def aggregate_forces(models: Iterable[ForceModel],
                     local_velocity: LocalVelocity,
                     dt: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Update sub-models and sum their forces and torques in body axes.

    Parameters:
    -----------
    models : iterable of ForceModel
        Sub-models to aggregate
    local_velocity : callable
        Strategy returning (velocity, angular_velocity) in the sub-model frame
    dt : float
        Time step (s)

    Returns:
    --------
    force : np.ndarray, shape (3,)
        Net force in body axes (N)
    torque : np.ndarray, shape (3,)
        Net torque about the body origin (N*m)
    """
    force = np.zeros(3)
    torque = np.zeros(3)
    for model in models:
        model.velocity, model.angular_velocity = local_velocity(model)
        model.update(dt)
        if not model.enabled:
            continue
        f = model.rotation @ model.force
        force += f
        torque += model.rotation @ model.torque + np.cross(model.translation, f)
    return force, torque


class ForceAssembly:
    """
    Rigid collection of force models.

    Holds the aggregate kinematic state (set by an external rigid body
    simulation) and the net force/torque in body axes.
    """

    def __init__(self):
        self.translation = np.zeros(3)  # NED position (m)
        self.velocity = np.zeros(3)  # body axes, relative to air (m/s)
        self.angular_velocity = np.zeros(3)  # body axes (rad/s)
        self.force = np.zeros(3)
        self.torque = np.zeros(3)
        self.local_velocity: LocalVelocity = RigidBodyVelocity(self)

    @property
    def models(self) -> Tuple[ForceModel, ...]:
        """Sub-models in aggregation order."""
        return ()

    def update(self, dt: float):
        """Update all sub-models and aggregate their loads."""
        self.force, self.torque = aggregate_forces(self.models, self.local_velocity, dt)
