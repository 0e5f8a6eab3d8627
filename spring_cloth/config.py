"""
Configuration dataclass for cloth simulation parameters.
"""

from dataclasses import dataclass
from typing import Optional

import warp as wp

BACKENDS = ("sequential", "threaded", "warp")


@dataclass
class ClothConfig:
    """Configuration for the cloth simulation.

    Attributes:
        rest_length: Rest length shared by every structural spring.
        spring_coeff: Elastic coefficient of every spring.
        damp_coeff: Damping coefficient of every spring.
        g: Gravitational acceleration magnitude (m/s^2).
        mass: Mass of each point in kg.
        g_on: Whether gravity is applied.
        floor_y: Height of the floor plane points cannot fall below.
        dt: Time step for simulation (seconds per step).
        steps: Total number of simulation steps for a run.
        substeps: Steps advanced per rendered frame.
        seed: Seed of the excitation random source (None = entropy).
        backend: Step driver to use ('sequential', 'threaded' or 'warp').
        workers: Thread-pool size for the threaded backend.
        device: Warp device to use ('cpu' or 'cuda:0', etc.).
        force_magnitude: Excitation magnitude injected by interaction.
    """

    rest_length: float = 1.0
    spring_coeff: float = 10.0
    damp_coeff: float = 0.03
    g: float = 9.81
    mass: float = 0.01
    g_on: bool = True
    floor_y: float = -32.0
    dt: float = 0.01
    steps: int = 600
    substeps: int = 10
    seed: Optional[int] = None
    backend: str = "sequential"
    workers: Optional[int] = None
    device: Optional[str] = None
    force_magnitude: float = 10.0

    def __post_init__(self):
        """Validate parameters and resolve the warp device when needed."""
        if self.backend not in BACKENDS:
            raise ValueError(
                f"unknown backend {self.backend!r}, expected one of {BACKENDS}"
            )
        if self.mass <= 0.0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.dt <= 0.0:
            raise ValueError(f"dt must be positive, got {self.dt}")

        if self.backend == "warp" and self.device is None:
            wp.init()
            self.device = str(wp.get_device())

    @property
    def wp_device(self):
        """Get the warp device object."""
        wp.init()
        return wp.get_device(self.device)
