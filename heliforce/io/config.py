"""
Helicopter Configuration System

Provides YAML-based configuration loading for helicopter mass properties,
sub-model parameters and placements, flight control system and drivetrain.

Sub-model placements are given as a translation in body axes (m) and an
ordered list of elementary rotations in degrees, e.g.

    rotation: [[x, 90.0], [y, 5.0]]

which is Rx(90 deg) * Ry(5 deg).
"""

import logging
from typing import Any, Dict

import numpy as np
import yaml

from ..control.fcs import FlightControlSystem
from ..core.drivetrain import Engine, GearBox
from ..core.force_model import Pose
from ..core.frames import compose_rotations
from ..core.fuselage import Fuselage
from ..core.helicopter import SingleMainRotorHelicopter
from ..core.rotor import Rotor
from ..core.stabilizer import Stabilizer

logger = logging.getLogger(__name__)


# Parameters given in degrees in configuration files
ANGLE_PARAMETERS = ('twist', 'collective_range', 'cyclic_limits')

SUBMODEL_TYPES = {
    'main_rotor': Rotor,
    'tail_rotor': Rotor,
    'horizontal_stabilizer': Stabilizer,
    'vertical_stabilizer': Stabilizer,
    'fuselage': Fuselage,
}

REQUIRED_SECTIONS = ('main_rotor', 'tail_rotor')


def parse_pose(section: Dict[str, Any]) -> Pose:
    """
    Build a Pose from a configuration section.

    Parameters
    ----------
    section : dict
        Section with optional 'translation' [x, y, z] and 'rotation'
        [[axis, degrees], ...]

    Returns
    -------
    Pose
        Placement of the sub-model
    """
    translation = np.array(section.get('translation', [0.0, 0.0, 0.0]), dtype=float)
    if translation.shape != (3,):
        raise ValueError(f"Translation must have three components, got {section.get('translation')}")
    steps = [(axis, np.radians(angle)) for axis, angle in section.get('rotation', [])]
    return Pose(translation, compose_rotations(steps))


def _parameters_to_si(parameters: Dict[str, Any]) -> Dict[str, Any]:
    """Convert degree-valued parameters to radians."""
    converted = dict(parameters)
    for name in ANGLE_PARAMETERS:
        if name in converted:
            converted[name] = np.radians(converted[name])
            if np.ndim(converted[name]) > 0:
                converted[name] = tuple(float(a) for a in converted[name])
            else:
                converted[name] = float(converted[name])
    return converted


class HelicopterConfig:
    """
    Helicopter configuration loaded from YAML file.

    Attributes
    ----------
    name : str
        Helicopter name
    mass : float
        Mass (kg)
    inertia : ndarray
        Inertia tensor (3x3) about the body origin (kg*m^2)
    submodels : dict
        Sub-model sections keyed by slot name
    fcs : dict
        Flight control system parameters
    engine : dict
        Engine parameters
    gearbox : dict
        Gearbox parameters
    initial_state : dict
        Initial attitude (deg), height (m) and velocity (m/s)
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Initialize helicopter configuration from dictionary.

        Parameters
        ----------
        config_dict : dict
            Configuration dictionary (typically from YAML)
        """
        self.raw_config = config_dict
        self._parse_config()

    def _parse_config(self):
        """Parse configuration dictionary."""
        if 'helicopter' not in self.raw_config:
            raise ValueError("Configuration has no 'helicopter' section")
        helicopter = self.raw_config['helicopter']

        self.name = helicopter.get('name', 'Unnamed Helicopter')
        self.mass = float(helicopter.get('mass', 2000.0))

        inertia_dict = helicopter.get('inertia', {})
        self.inertia = np.array([
            [inertia_dict.get('Ixx', 1000.0), 0, inertia_dict.get('Ixz', 0.0)],
            [0, inertia_dict.get('Iyy', 1000.0), 0],
            [inertia_dict.get('Ixz', 0.0), 0, inertia_dict.get('Izz', 1000.0)]
        ], dtype=float)

        for name in REQUIRED_SECTIONS:
            if name not in helicopter:
                raise ValueError(f"Configuration is missing the '{name}' section")
        self.submodels = {name: helicopter[name] for name in SUBMODEL_TYPES if name in helicopter}

        self.fcs = helicopter.get('fcs', {})
        self.engine = helicopter.get('engine', {})
        self.gearbox = helicopter.get('gearbox', {})
        self.initial_state = helicopter.get('initial_state', {})

    def create_submodel(self, slot: str):
        """
        Create the sub-model for a slot from its section.

        Returns None for optional slots absent from the configuration.
        """
        section = self.submodels.get(slot)
        if section is None:
            return None
        parameters = _parameters_to_si(section.get('parameters', {}))
        try:
            return SUBMODEL_TYPES[slot](pose=parse_pose(section), **parameters)
        except TypeError as e:
            raise ValueError(f"Invalid parameters for '{slot}': {e}") from e

    def apply(self, helicopter: SingleMainRotorHelicopter) -> SingleMainRotorHelicopter:
        """
        Configure an existing helicopter in place.

        Parameters
        ----------
        helicopter : SingleMainRotorHelicopter
            Helicopter to configure

        Returns
        -------
        SingleMainRotorHelicopter
            The same helicopter
        """
        helicopter.mass = self.mass
        helicopter.inertia = self.inertia.copy()
        for slot in SUBMODEL_TYPES:
            setattr(helicopter, slot, self.create_submodel(slot))

        fcs_parameters = dict(self.fcs)
        enabled = fcs_parameters.pop('enabled', True)
        trim_control = fcs_parameters.pop('trim_control', False)
        helicopter.fcs = FlightControlSystem(**fcs_parameters)
        helicopter.fcs.enabled = enabled
        helicopter.fcs.trim_control = trim_control

        gearbox_parameters = dict(self.gearbox)
        brake_enabled = gearbox_parameters.pop('brake_enabled', False)
        helicopter.engine = Engine(**self.engine)
        helicopter.gearbox = GearBox(**gearbox_parameters)
        helicopter.gearbox.brake_enabled = brake_enabled

        state = self.initial_state
        helicopter.set_attitude(np.radians(state.get('roll', 0.0)),
                                np.radians(state.get('pitch', 0.0)),
                                np.radians(state.get('heading', 0.0)))
        if 'height' in state:
            helicopter.height = state['height']
        helicopter.ground_velocity = np.array(state.get('velocity', [0.0, 0.0, 0.0]), dtype=float)

        logger.debug("Applied configuration '%s' (mass %.1f kg)", self.name, self.mass)
        return helicopter

    def create_helicopter(self) -> SingleMainRotorHelicopter:
        """
        Create SingleMainRotorHelicopter object from configuration.

        Returns
        -------
        SingleMainRotorHelicopter
            Configured helicopter
        """
        return self.apply(SingleMainRotorHelicopter())

    def __repr__(self):
        """String representation."""
        return (f"HelicopterConfig(name='{self.name}', "
                f"mass={self.mass}, "
                f"submodels={list(self.submodels)})")


def load_helicopter_config(yaml_file: str) -> HelicopterConfig:
    """
    Load helicopter configuration from YAML file.

    Parameters
    ----------
    yaml_file : str
        Path to YAML configuration file

    Returns
    -------
    HelicopterConfig
        Loaded helicopter configuration

    Examples
    --------
    >>> config = load_helicopter_config('helicopters/bo105.yaml')
    >>> heli = config.create_helicopter()
    >>> heli.trim_init()
    >>> result = heli.trim()
    """
    with open(yaml_file, 'r') as f:
        config_dict = yaml.safe_load(f)

    return HelicopterConfig(config_dict)


def save_helicopter_config(config: HelicopterConfig, yaml_file: str):
    """
    Save helicopter configuration to YAML file.

    Parameters
    ----------
    config : HelicopterConfig
        Helicopter configuration to save
    yaml_file : str
        Output YAML file path
    """
    with open(yaml_file, 'w') as f:
        yaml.dump(config.raw_config, f, default_flow_style=False, sort_keys=False)

    logger.info("Configuration saved to: %s", yaml_file)


def create_default_config() -> Dict[str, Any]:
    """
    Create default helicopter configuration dictionary.

    A 2.45 t light twin with a hingeless four-blade main rotor.

    Returns
    -------
    dict
        Default configuration
    """
    config = {
        'helicopter': {
            'name': 'Bo 105',
            'mass': 2450.0,  # kg
            'inertia': {
                'Ixx': 1762.0,  # kg*m^2
                'Iyy': 9167.0,
                'Izz': 8687.0,
                'Ixz': 1085.0
            },
            'main_rotor': {
                'translation': [0.0071, 0.0, -1.5164],  # m from CG
                'rotation': [['y', -6.3]],  # shaft tilted forward, deg
                'parameters': {
                    'number_of_blades': 4,
                    'radius': 4.91,
                    'chord': 0.27,
                    'lift_slope': 5.73,
                    'twist': -8.0,  # deg
                    'profile_drag': 0.01,
                    'lock_number': 5.0,
                    'flap_frequency': 1.12,
                    'design_omega': 44.4,  # rad/s
                    'inertia': 4000.0,
                    'rotation_direction': 1,
                    'collective_range': [2.0, 24.0],  # deg
                    'cyclic_limits': [10.0, 8.0],  # deg
                    'inflow_time_constant': 0.1
                }
            },
            'tail_rotor': {
                'translation': [-7.5, 0.0, -0.8001],
                'rotation': [['x', 90.0]],  # thrust to the right
                'parameters': {
                    'number_of_blades': 2,
                    'radius': 0.95,
                    'chord': 0.18,
                    'lift_slope': 5.73,
                    'twist': 0.0,
                    'profile_drag': 0.01,
                    'lock_number': 3.0,
                    'flap_frequency': 1.0,
                    'design_omega': 233.0,
                    'inertia': 10.0,
                    'rotation_direction': 1,
                    'collective_range': [-8.0, 20.0],
                    'cyclic_limits': [0.0, 0.0],
                    'inflow_time_constant': 0.05
                }
            },
            'horizontal_stabilizer': {
                'translation': [-5.8, 0.0, -0.5],
                'rotation': [['y', 5.0]],
                'parameters': {
                    'area': 0.803,
                    'lift_slope': 3.5,
                    'drag_coefficient': 0.01,
                    'induced_drag_factor': 0.1
                }
            },
            'vertical_stabilizer': {
                'translation': [-7.3, 0.0, -1.5],
                'rotation': [['x', 90.0], ['y', 5.0]],
                'parameters': {
                    'area': 0.805,
                    'lift_slope': 3.0,
                    'drag_coefficient': 0.01,
                    'induced_drag_factor': 0.1
                }
            },
            'fuselage': {
                'translation': [0.0178, 0.0, 0.0127],
                'parameters': {
                    'drag_areas': [1.3, 8.0, 10.0],  # m^2
                    'pitch_volume': 4.0,  # m^3
                    'yaw_volume': 6.0
                }
            },
            'fcs': {
                'enabled': True,
                'trim_control': False,
                'pitch_damping': 0.2,
                'roll_damping': 0.1,
                'yaw_damping': 0.3,
                'filter_time_constant': 0.05
            },
            'engine': {
                'omega0': 628.0,  # rad/s
                'max_power': 620e3,  # W
                'own_inertia': 0.5,
                'starter_torque': 60.0,
                'light_off_fraction': 0.25,
                'start_acceleration': 20.0,  # rad/s^2
                'idle_fraction': 0.6
            },
            'gearbox': {
                'main_rotor_ratio': 14.14,
                'tail_rotor_ratio': 2.7,
                'friction': 0.1,
                'brake_torque': 500.0,
                'auto_brake_omega': 0.0,
                'brake_enabled': False
            },
            'initial_state': {
                'height': 1000.0,  # m above ground
                'roll': 0.0,  # deg
                'pitch': 0.0,
                'heading': 0.0,
                'velocity': [0.0, 0.0, 0.0]  # m/s, body axes
            }
        }
    }

    return config
