"""
Cloth simulator class for running forward simulations.
"""

from typing import Optional

import numpy as np

from .config import ClothConfig
from .cloth import Cloth
from .interaction import InteractionController


class ClothSimulator:
    """Simulation context owned by a run loop.

    Owns the cloth, its step driver and the interaction channels, and is
    what a renderer or input handler gets handed instead of reaching for a
    global cloth.

    Attributes:
        config: Simulation configuration.
        cloth: The simulated cloth.
        interaction: Input channels acting on the cloth.
    """

    def __init__(
        self,
        config: ClothConfig,
        rows: int = 20,
        cols: int = 40,
        top: Optional[float] = None,
    ):
        """Initialize the cloth simulator.

        Args:
            config: Simulation configuration.
            rows: Number of grid rows.
            cols: Number of grid columns.
            top: If given, centre the cloth with its top row at this height.
        """
        self.config = config
        self.rows = rows
        self.cols = cols
        self.top = top
        self.cloth = self._make_cloth()
        self.interaction = InteractionController(
            self.cloth, config.force_magnitude, config.seed
        )
        self.frames = 0

    def _make_cloth(self) -> Cloth:
        cloth = Cloth(self.rows, self.cols, self.config)
        if self.top is not None:
            cloth.center(self.top)
        return cloth

    def reset(self):
        """Rebuild the cloth in its initial state (the step driver is recreated)."""
        self.close()
        self.cloth = self._make_cloth()
        self.interaction = InteractionController(
            self.cloth, self.config.force_magnitude, self.config.seed
        )
        self.frames = 0

    def step(self):
        """Advance one frame: ``config.substeps`` steps of ``config.dt``."""
        self.cloth.advance(self.config.substeps, self.config.dt)
        self.frames += 1

    def run(self, steps: Optional[int] = None, record: bool = True) -> Optional[np.ndarray]:
        """Run the simulation for multiple steps.

        Args:
            steps: Number of steps to run. If None, uses config.steps.
            record: Whether to record the trajectory.

        Returns:
            If record=True, returns a trajectory of shape (steps, rows * cols, 2).
            Otherwise returns None.
        """
        if steps is None:
            steps = self.config.steps

        if not record:
            self.cloth.advance(steps, self.config.dt)
            return None

        trajectory = []
        for _ in range(steps):
            self.cloth.simulate(self.config.dt)
            trajectory.append(self.cloth.vertices())
        return np.array(trajectory)

    def get_positions(self) -> np.ndarray:
        """Get current positions as a flat (rows * cols, 2) array."""
        return self.cloth.vertices()

    def get_free_mask(self) -> np.ndarray:
        """Get mask for free (non-fixed) points.

        Returns:
            Array of shape (rows * cols,) with 1.0 for free, 0.0 for fixed.
        """
        return (~self.cloth.points.fixed.reshape(-1)).astype(np.float32)

    def close(self):
        self.cloth.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
