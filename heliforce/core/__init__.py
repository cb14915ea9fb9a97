"""
Core helicopter force model components.

This module provides the sub-models and the force aggregation used to build
a single main rotor helicopter.
"""

from .frames import (
    wrap_angle,
    euler_rotation,
    euler_angles,
    compose_rotations
)
from .force_model import Pose, ForceModel, StaticForce, ForceAssembly, RigidBodyVelocity, aggregate_forces
from .rotor import Rotor
from .stabilizer import Stabilizer
from .fuselage import Fuselage
from .downwash import DownwashInterference
from .drivetrain import Engine, EnginePhase, GearBox
from .helicopter import SingleMainRotorHelicopter

__all__ = [
    'wrap_angle',
    'euler_rotation',
    'euler_angles',
    'compose_rotations',
    'Pose',
    'ForceModel',
    'StaticForce',
    'ForceAssembly',
    'RigidBodyVelocity',
    'aggregate_forces',
    'Rotor',
    'Stabilizer',
    'Fuselage',
    'DownwashInterference',
    'Engine',
    'EnginePhase',
    'GearBox',
    'SingleMainRotorHelicopter'
]
