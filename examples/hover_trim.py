"""
Hover and Forward Flight Trim Demonstration

Demonstrates trimming the default helicopter:
- Load the helicopter configuration from YAML
- Trim in hover and at several forward speeds
- Show controls, attitude and power required
- Run a few seconds with the flight control system engaged
"""

import logging
import numpy as np
import sys
import os

# Add package to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from heliforce.io.config import load_helicopter_config, create_default_config, HelicopterConfig


def print_trim(heli, result):
    controls = result.controls
    theta_0, theta_sin, theta_cos, theta_p = np.degrees(heli.get_control_angles())
    print(f"   Converged: {result.converged} ({result.iterations} evaluations)")
    print(f"   Collective: {controls[0]:+.4f}  ({theta_0:.2f} deg)")
    print(f"   Long cyclic: {controls[1]:+.4f}  ({theta_sin:.2f} deg)")
    print(f"   Lat cyclic: {controls[2]:+.4f}  ({theta_cos:.2f} deg)")
    print(f"   Pedal: {controls[3]:+.4f}  (tail {theta_p:.2f} deg)")
    print(f"   Roll: {np.degrees(result.attitude[0]):+.2f} deg, "
          f"Pitch: {np.degrees(result.attitude[1]):+.2f} deg")
    print(f"   Power required: {heli.power_required / 1000:.1f} kW")


def main():
    """Run trim demonstration."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("Single Main Rotor Helicopter Trim")
    print("=" * 70)
    print()

    # 1. Load configuration
    print("1. Loading helicopter configuration...")
    config_path = os.path.join(os.path.dirname(__file__), '..', 'config', 'bo105.yaml')
    try:
        config = load_helicopter_config(config_path)
    except FileNotFoundError:
        print("   Warning: Config file not found, using default config...")
        config = HelicopterConfig(create_default_config())
    heli = config.create_helicopter()
    print(f"   Loaded: {config.name}")
    print(f"   Mass: {heli.mass:.0f} kg")
    print(f"   Main rotor: R = {heli.main_rotor.radius:.2f} m, "
          f"{heli.main_rotor.number_of_blades} blades")
    heli.update(0.01)
    print(f"   Atmosphere: {heli.atmosphere}")
    print()

    # 2. Hover trim
    print("2. Hover trim...")
    heli.trim_init()
    result = heli.trim()
    print_trim(heli, result)
    print()

    # 3. Forward flight sweep
    print("3. Forward flight trim...")
    print(f"   {'V (m/s)':>8} {'coll':>8} {'long':>8} {'lat':>8} {'pedal':>8} "
          f"{'pitch':>8} {'P (kW)':>8}")
    for speed in [10.0, 20.0, 30.0, 40.0, 50.0]:
        heli.absolute_velocity = np.array([speed, 0.0, 0.0])
        result = heli.trim()
        c = result.controls
        flag = "" if result.converged else "  (not converged)"
        print(f"   {speed:8.1f} {c[0]:8.4f} {c[1]:8.4f} {c[2]:8.4f} {c[3]:8.4f} "
              f"{np.degrees(result.attitude[1]):8.2f} {heli.power_required / 1000:8.1f}{flag}")
    print()

    # 4. Fly with the FCS holding the trim reference
    print("4. Flying 5 s at 50 m/s with the FCS engaged...")
    heli.fcs.reset()
    dt = 0.01
    for _ in range(500):
        heli.update(dt)
    print(f"   Net force: {np.array2string(heli.force, precision=1)} N")
    print(f"   Net torque: {np.array2string(heli.torque, precision=1)} N*m")
    print()

    print("=" * 70)
    print("Demonstration complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
