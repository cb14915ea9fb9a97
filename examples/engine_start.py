"""
Engine Start Demonstration

Runs the drivetrain through a start sequence on the ground:
- Engine stopped, rotor brake on
- Starter cranks the engine to light-off, then fuel accelerates it to idle
- Brake released automatically above a threshold speed
- Governor takes over and brings the rotors to design speed
"""

import logging
import sys
import os

# Add package to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from heliforce.core.helicopter import SingleMainRotorHelicopter


def main():
    """Run engine start demonstration."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("Engine Start Sequence")
    print("=" * 70)
    print()

    heli = SingleMainRotorHelicopter().load_default()
    heli.height = 0.0
    heli.collective = -1.0  # flat pitch on the ground
    heli.init_engine(running=False)
    heli.gearbox.brake_enabled = True
    heli.gearbox.auto_brake_omega = 200.0
    heli.engine.start()

    dt = 0.01
    print(f"   {'t (s)':>6} {'phase':>6} {'engine':>8} {'MR':>8} {'TR':>8} {'brake':>6} {'P (kW)':>8}")
    for step in range(6001):
        heli.update(dt)
        if step % 500 == 0:
            print(f"   {step * dt:6.1f} {heli.engine.phase.name:>6} "
                  f"{heli.engine.rotspeed:8.1f} {heli.main_rotor.rot_speed:8.2f} "
                  f"{heli.tail_rotor.rot_speed:8.2f} {str(heli.gearbox.brake_enabled):>6} "
                  f"{heli.power_required / 1000:8.1f}")
    print()

    print(f"Main rotor at {100 * heli.main_rotor.rot_speed / heli.main_rotor.design_omega:.1f}% "
          f"of design speed")
    print(f"Yaw torque: {heli.torque[2]:.1f} N*m")
    print()


if __name__ == "__main__":
    main()
