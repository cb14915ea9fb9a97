"""
Control systems for the helicopter model.

This module provides the flight control system and the trim solver.
"""

from .pi_controller import PIController
from .fcs import FlightControlSystem
from .trim import JacobianTrimmer, TrimResult, TrimError, override_attributes

__all__ = [
    'PIController',
    'FlightControlSystem',
    'JacobianTrimmer',
    'TrimResult',
    'TrimError',
    'override_attributes'
]
