"""Protocol-faithful fake backend for the owner REST and streaming API."""

from pyfla.simulator.engine import SimulationState, VehicleEngine
from pyfla.simulator.registry import VehicleSimulator
from pyfla.simulator.server import create_app

__all__ = [
    "SimulationState",
    "VehicleEngine",
    "VehicleSimulator",
    "create_app",
]
