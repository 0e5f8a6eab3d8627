"""
Point and spring storage for the cloth.

Point state lives in numpy arrays so the same data can be addressed as a
(rows, cols) grid or handed to a parallel step as one flat contiguous
buffer. Springs reference points by (row, col) only, which keeps the
topology valid across flatten/unflatten.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Point:
    """Read-only record of one cloth vertex."""

    x: float
    y: float
    vx: float
    vy: float
    ax: float
    ay: float
    fixed: bool
    static: bool
    ext_m: float


@dataclass(frozen=True)
class Spring:
    """Read-only record of one structural spring."""

    p1: Tuple[int, int]
    p2: Tuple[int, int]
    rest_length: float
    spring_coefficient: float
    damping_coefficient: float


@dataclass
class PointArrays:
    """Mutable point state.

    Attributes:
        pos: Positions, float32 of shape (..., 2).
        vel: Velocities, float32 of shape (..., 2).
        acc: Accelerations of the last integration, float32 of shape (..., 2).
        fixed: Points excluded from integration.
        static: Permanent anchors (always also fixed).
        ext_m: Magnitude of the random excitation per point.
    """

    pos: np.ndarray
    vel: np.ndarray
    acc: np.ndarray
    fixed: np.ndarray
    static: np.ndarray
    ext_m: np.ndarray

    @classmethod
    def zeros(cls, shape: Tuple[int, ...]) -> "PointArrays":
        return cls(
            pos=np.zeros(shape + (2,), dtype=np.float32),
            vel=np.zeros(shape + (2,), dtype=np.float32),
            acc=np.zeros(shape + (2,), dtype=np.float32),
            fixed=np.zeros(shape, dtype=bool),
            static=np.zeros(shape, dtype=bool),
            ext_m=np.zeros(shape, dtype=np.float32),
        )

    def __len__(self) -> int:
        return int(np.prod(self.fixed.shape))

    def copy(self) -> "PointArrays":
        """Snapshot of the current state."""
        return PointArrays(
            pos=self.pos.copy(),
            vel=self.vel.copy(),
            acc=self.acc.copy(),
            fixed=self.fixed.copy(),
            static=self.static.copy(),
            ext_m=self.ext_m.copy(),
        )


def flatten_points(grid: PointArrays) -> PointArrays:
    """Convert (rows, cols) point arrays into a flat row-major buffer.

    Point (row, col) ends up at index ``row * cols + col``. The result owns
    its memory, so later writes to ``grid`` do not reach it.
    """
    n = len(grid)
    return PointArrays(
        pos=grid.pos.reshape(n, 2).copy(),
        vel=grid.vel.reshape(n, 2).copy(),
        acc=grid.acc.reshape(n, 2).copy(),
        fixed=grid.fixed.reshape(n).copy(),
        static=grid.static.reshape(n).copy(),
        ext_m=grid.ext_m.reshape(n).copy(),
    )


def unflatten_points(flat: PointArrays, rows: int, cols: int) -> PointArrays:
    """Inverse of :func:`flatten_points`."""
    if len(flat) != rows * cols:
        raise ValueError(
            f"cannot unflatten {len(flat)} points into a {rows}x{cols} grid"
        )
    return PointArrays(
        pos=flat.pos.reshape(rows, cols, 2).copy(),
        vel=flat.vel.reshape(rows, cols, 2).copy(),
        acc=flat.acc.reshape(rows, cols, 2).copy(),
        fixed=flat.fixed.reshape(rows, cols).copy(),
        static=flat.static.reshape(rows, cols).copy(),
        ext_m=flat.ext_m.reshape(rows, cols).copy(),
    )


@dataclass
class SpringArrays:
    """Immutable spring topology.

    Attributes:
        p1: First endpoints as (row, col), int32 of shape (S, 2).
        p2: Second endpoints as (row, col), int32 of shape (S, 2).
        rest_length: Rest lengths, float32 of shape (S,).
        spring_coeff: Elastic coefficients, float32 of shape (S,).
        damp_coeff: Damping coefficients, float32 of shape (S,).
    """

    p1: np.ndarray
    p2: np.ndarray
    rest_length: np.ndarray
    spring_coeff: np.ndarray
    damp_coeff: np.ndarray

    def __len__(self) -> int:
        return self.p1.shape[0]

    def endpoint_indices(self, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        """Flat indices of both endpoints of every spring."""
        i = (self.p1[:, 0] * cols + self.p1[:, 1]).astype(np.int32)
        j = (self.p2[:, 0] * cols + self.p2[:, 1]).astype(np.int32)
        return i, j

    def line_indices(self, cols: int) -> np.ndarray:
        """Line-list indices (p1, p2, p1, p2, ...) for drawing the mesh."""
        i, j = self.endpoint_indices(cols)
        return np.stack([i, j], axis=1).reshape(-1).astype(np.uint32)

    def record(self, index: int) -> Spring:
        return Spring(
            p1=(int(self.p1[index, 0]), int(self.p1[index, 1])),
            p2=(int(self.p2[index, 0]), int(self.p2[index, 1])),
            rest_length=float(self.rest_length[index]),
            spring_coefficient=float(self.spring_coeff[index]),
            damping_coefficient=float(self.damp_coeff[index]),
        )


@dataclass
class Adjacency:
    """Springs incident on every point, indexed by flat point index.

    Rows are padded with -1. Slots appear in spring-index order, which is
    the order a full scan over the spring list would visit them.

    Attributes:
        springs: Incident spring indices, int32 of shape (N, D).
        first: True where the point is the spring's first endpoint.
    """

    springs: np.ndarray
    first: np.ndarray

    @property
    def degree(self) -> int:
        return self.springs.shape[1]

    def csr(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Compressed form (offsets, spring indices, first-endpoint flags)."""
        valid = self.springs >= 0
        counts = valid.sum(axis=1)
        offsets = np.zeros(self.springs.shape[0] + 1, dtype=np.int32)
        np.cumsum(counts, out=offsets[1:])
        return (
            offsets,
            self.springs[valid].astype(np.int32),
            self.first[valid].astype(np.int32),
        )
