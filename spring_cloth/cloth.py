"""
The cloth aggregate: point grid, spring topology and global physics scalars.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .config import ClothConfig
from .driver import Stepper, make_stepper
from .geometry import build, center_points, make_adjacency
from .state import Point, PointArrays, Spring, flatten_points

logger = logging.getLogger(__name__)


class Cloth:
    """A rows x cols mass-spring cloth.

    Points are stored row-major; springs refer to them by (row, col) only.
    Point (row, col) has flat index ``row * cols + col`` in every flat
    buffer and in the render line list.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        points: Point arrays of grid shape (rows, cols).
        springs: Spring topology.
        adjacency: Springs incident on each point.
        g: Gravitational acceleration magnitude.
        mass: Mass of every point.
        g_on: Whether gravity is applied.
        floor_y: Floor height.
        rng: Excitation random source.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        config: Optional[ClothConfig] = None,
        stepper: Optional[Stepper] = None,
    ):
        if config is None:
            config = ClothConfig()
        self.config = config
        self.rows = rows
        self.cols = cols

        self.points, self.springs = build(rows, cols, config)
        self.adjacency = make_adjacency(self.springs, rows, cols)

        self.g = config.g
        self.mass = config.mass
        self.g_on = config.g_on
        self.floor_y = config.floor_y

        self.rng = np.random.default_rng(config.seed)
        self.stepper = stepper if stepper is not None else make_stepper(config)

    def __len__(self) -> int:
        return self.rows * self.cols

    @property
    def gravity_force(self) -> float:
        return -self.g * self.mass if self.g_on else 0.0

    # ------------------------------------------------------------------
    # stepping

    def simulate(self, dt: float):
        """Advance every non-fixed point by one time step ``dt`` (seconds)."""
        self.advance(1, dt)

    def advance(self, steps: int, dt: float):
        """Advance ``steps`` time steps of ``dt`` seconds each."""
        if not dt > 0.0:
            raise ValueError(f"dt must be positive, got {dt}")
        self.stepper.advance(self, steps, dt)

    def snapshot(self) -> PointArrays:
        """Flat contiguous copy of the point state."""
        return flatten_points(self.points)

    def commit(self, pos: np.ndarray, vel: np.ndarray, acc: np.ndarray):
        """Write flat step results back into the grid."""
        shape = (self.rows, self.cols, 2)
        self.points.pos[...] = np.asarray(pos, dtype=np.float32).reshape(shape)
        self.points.vel[...] = np.asarray(vel, dtype=np.float32).reshape(shape)
        self.points.acc[...] = np.asarray(acc, dtype=np.float32).reshape(shape)

    def close(self):
        self.stepper.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ------------------------------------------------------------------
    # interaction

    def _check(self, row: int, col: int) -> Tuple[int, int]:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"point ({row}, {col}) outside {self.rows}x{self.cols} grid"
            )
        return row, col

    def point(self, row: int, col: int) -> Point:
        """Read-only record of point (row, col)."""
        idx = self._check(row, col)
        p = self.points
        return Point(
            x=float(p.pos[idx][0]),
            y=float(p.pos[idx][1]),
            vx=float(p.vel[idx][0]),
            vy=float(p.vel[idx][1]),
            ax=float(p.acc[idx][0]),
            ay=float(p.acc[idx][1]),
            fixed=bool(p.fixed[idx]),
            static=bool(p.static[idx]),
            ext_m=float(p.ext_m[idx]),
        )

    def spring(self, index: int) -> Spring:
        if not 0 <= index < len(self.springs):
            raise IndexError(f"spring {index} out of range")
        return self.springs.record(index)

    def pin(self, row: int, col: int):
        """Exclude a point from integration until released."""
        self.points.fixed[self._check(row, col)] = True

    def release(self, row: int, col: int) -> bool:
        """Clear a point's fixed flag.

        Returns:
            False if the point is a static anchor, which stays fixed.
        """
        idx = self._check(row, col)
        if self.points.static[idx]:
            logger.debug("refusing to release static point %s", idx)
            return False
        self.points.fixed[idx] = False
        return True

    def set_fixed(self, row: int, col: int, fixed: bool) -> bool:
        if fixed:
            self.pin(row, col)
            return True
        return self.release(row, col)

    def move_point(self, row: int, col: int, x: float, y: float):
        """Place a fixed point at (x, y)."""
        idx = self._check(row, col)
        if not self.points.fixed[idx]:
            raise ValueError(f"point {idx} must be fixed before it can be moved")
        self.points.pos[idx] = (x, y)

    def set_force(self, row: int, col: int, magnitude: float):
        self.points.ext_m[self._check(row, col)] = magnitude

    def add_force(self, row: int, col: int, magnitude: float):
        self.points.ext_m[self._check(row, col)] += magnitude

    def clear_force(self, row: int, col: int):
        self.set_force(row, col, 0.0)

    def toggle_gravity(self) -> bool:
        self.g_on = not self.g_on
        logger.info("gravity %s", "on" if self.g_on else "off")
        return self.g_on

    def closest_point(self, x: float, y: float) -> Tuple[int, int]:
        """Grid coordinate of the point nearest to (x, y)."""
        d = self.points.pos - np.array([x, y], dtype=np.float32)
        dist2 = (d * d).sum(axis=-1)
        row, col = np.unravel_index(int(np.argmin(dist2)), dist2.shape)
        return int(row), int(col)

    def center(self, top: float):
        """Centre the cloth on x=0 with its top row at y=top."""
        center_points(self.points, top)

    # ------------------------------------------------------------------
    # rendering

    def positions(self) -> np.ndarray:
        """Copy of the positions, shape (rows, cols, 2)."""
        return self.points.pos.copy()

    def vertices(self) -> np.ndarray:
        """Flat float32 vertex buffer, shape (rows * cols, 2)."""
        return self.points.pos.reshape(-1, 2).copy()

    def line_indices(self) -> np.ndarray:
        """Spring endpoints as a uint32 line list."""
        return self.springs.line_indices(self.cols)
