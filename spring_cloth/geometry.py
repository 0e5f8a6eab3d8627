"""
Cloth geometry creation functions.

These functions create the point lattice, the structural springs, the
anchored corners and the per-point spring incidence table.
"""

from typing import Tuple

import numpy as np

from .config import ClothConfig
from .state import Adjacency, PointArrays, SpringArrays


def make_grid_points(rows: int, cols: int) -> PointArrays:
    """Create the point lattice.

    Point (row, col) starts at (col, row) at rest, unfixed and with no
    injected force.

    Args:
        rows: Number of rows.
        cols: Number of columns.

    Returns:
        Point arrays of grid shape (rows, cols).
    """
    if rows < 1 or cols < 1:
        raise ValueError(f"grid must be at least 1x1, got {rows}x{cols}")

    points = PointArrays.zeros((rows, cols))
    row_idx, col_idx = np.meshgrid(
        np.arange(rows, dtype=np.float32),
        np.arange(cols, dtype=np.float32),
        indexing="ij",
    )
    points.pos[..., 0] = col_idx
    points.pos[..., 1] = row_idx
    return points


def make_anchors(points: PointArrays) -> None:
    """Mark the two top corners as fixed and static.

    The top row is the last one, so the anchors are (rows-1, 0) and
    (rows-1, cols-1).
    """
    rows, cols = points.fixed.shape
    for col in (0, cols - 1):
        points.fixed[rows - 1, col] = True
        points.static[rows - 1, col] = True


def make_springs(rows: int, cols: int, config: ClothConfig) -> SpringArrays:
    """Create structural springs between lattice neighbors.

    One vertical spring (i, j)-(i+1, j) and one horizontal spring
    (i, j)-(i, j+1) per adjacent pair, generated in row-major order with
    the vertical one first. All springs share the configured material.

    Args:
        rows: Number of rows.
        cols: Number of columns.
        config: Simulation configuration.

    Returns:
        Spring arrays with rows*(cols-1) + (rows-1)*cols entries.
    """
    p1 = []
    p2 = []
    for i in range(rows):
        for j in range(cols):
            # Vertical edge (row above)
            if i < rows - 1:
                p1.append((i, j))
                p2.append((i + 1, j))
            # Horizontal edge (right neighbor)
            if j < cols - 1:
                p1.append((i, j))
                p2.append((i, j + 1))

    n = len(p1)
    return SpringArrays(
        p1=np.array(p1, dtype=np.int32).reshape(n, 2),
        p2=np.array(p2, dtype=np.int32).reshape(n, 2),
        rest_length=np.full(n, config.rest_length, dtype=np.float32),
        spring_coeff=np.full(n, config.spring_coeff, dtype=np.float32),
        damp_coeff=np.full(n, config.damp_coeff, dtype=np.float32),
    )


def make_adjacency(springs: SpringArrays, rows: int, cols: int) -> Adjacency:
    """Index the springs incident on every point.

    Args:
        springs: Spring topology.
        rows: Number of rows.
        cols: Number of columns.

    Returns:
        Incidence table keyed by flat point index.
    """
    n = rows * cols
    incident = [[] for _ in range(n)]
    i_idx, j_idx = springs.endpoint_indices(cols)
    for s, (i, j) in enumerate(zip(i_idx.tolist(), j_idx.tolist())):
        incident[i].append((s, True))
        incident[j].append((s, False))

    degree = max((len(entry) for entry in incident), default=0)
    table = np.full((n, degree), -1, dtype=np.int32)
    first = np.zeros((n, degree), dtype=bool)
    for p, entry in enumerate(incident):
        for slot, (s, is_first) in enumerate(entry):
            table[p, slot] = s
            first[p, slot] = is_first

    return Adjacency(springs=table, first=first)


def build(
    rows: int, cols: int, config: ClothConfig
) -> Tuple[PointArrays, SpringArrays]:
    """Build the full lattice: points with anchors, and springs."""
    points = make_grid_points(rows, cols)
    make_anchors(points)
    springs = make_springs(rows, cols, config)
    return points, springs


def center_points(points: PointArrays, top: float) -> None:
    """Shift the lattice so it is centred on x=0 with its top row at y=top.

    Args:
        points: Grid point arrays (modified in place).
        top: Target height of the highest point.
    """
    cols = points.pos.shape[1]
    max_y = points.pos[..., 1].max()
    points.pos[..., 0] -= np.float32(cols / 2.0)
    points.pos[..., 1] += np.float32(top - max_y)
