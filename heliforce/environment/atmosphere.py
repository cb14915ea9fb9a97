"""
International Standard Atmosphere (ISA 1976)

Provides atmospheric properties as a function of altitude:
- Temperature
- Pressure
- Density

Units: SI (meters, kg, Pa, Kelvin)
"""

import numpy as np


class StandardAtmosphere:
    """
    ISA 1976 model for the troposphere and lower stratosphere.

    The aggregate feeds its NED position; altitude is -position[2].

    Parameters
    ----------
    altitude : float
        Geometric altitude in meters above MSL

    Attributes
    ----------
    temperature : float
        Static temperature (K)
    pressure : float
        Static pressure (Pa)
    density : float
        Air density (kg/m³)

    Notes
    -----
    Model covers two atmospheric layers:
    - Troposphere: 0 - 11,000 m (temperature decreases linearly)
    - Lower Stratosphere: 11,000 - 20,000 m (isothermal)

    Reference: U.S. Standard Atmosphere, 1976, NOAA/NASA/USAF
    """

    # Sea level conditions
    T0 = 288.15  # K
    P0 = 101325.0  # Pa

    # Gas constant for air
    R = 287.053  # J/(kg·K)

    g = 9.80665  # m/s²

    # Layer boundary (geometric altitude, m)
    h_trop = 11000.0

    # Temperature lapse rate (K/m)
    lapse_trop = -0.0065

    def __init__(self, altitude: float = 0.0):
        """
        Initialize atmosphere at specified altitude.

        Parameters
        ----------
        altitude : float, optional
            Geometric altitude in meters (default: 0.0, sea level)
        """
        self.position = np.array([0.0, 0.0, -altitude])
        self.altitude = altitude
        self._compute_properties()

    def _compute_properties(self):
        """Compute all atmospheric properties at current altitude."""
        h = min(self.altitude, 20000.0)

        if h <= self.h_trop:
            # Troposphere
            self.temperature = self.T0 + self.lapse_trop * h
            theta = self.temperature / self.T0
            exponent = -self.g / (self.lapse_trop * self.R)
            self.pressure = self.P0 * theta**exponent
        else:
            # Lower stratosphere (isothermal)
            self.temperature = self.T0 + self.lapse_trop * self.h_trop
            theta_trop = self.temperature / self.T0
            P_trop = self.P0 * theta_trop**(-self.g / (self.lapse_trop * self.R))
            exponent = -self.g * (h - self.h_trop) / (self.R * self.temperature)
            self.pressure = P_trop * np.exp(exponent)

        # Density from ideal gas law
        self.density = self.pressure / (self.R * self.temperature)

    def update(self, dt: float):
        """
        Update atmospheric properties for the current position.

        Parameters
        ----------
        dt : float
            Time step (seconds), unused by the static model
        """
        self.altitude = -float(self.position[2])
        self._compute_properties()

    def __repr__(self):
        """String representation."""
        return (f"StandardAtmosphere(altitude={self.altitude:.0f} m, "
                f"T={self.temperature - 273.15:.1f}°C, "
                f"P={self.pressure:.0f} Pa, "
                f"rho={self.density:.4f} kg/m³)")
