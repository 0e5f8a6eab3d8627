"""
Per-point force accumulation.

Every function here is a pure function of a frozen point snapshot and
returns float32 forces of shape (len(index), 2). Passing ``index`` limits
the work to a subset of flat point indices so a step can be split across
independent workers; results for a point do not depend on the split.
"""

from typing import Optional, Tuple

import numpy as np

from .state import Adjacency, PointArrays, SpringArrays


_ZERO = np.float32(0.0)


def spring_terms(
    points: PointArrays,
    springs: SpringArrays,
    endpoints: Tuple[np.ndarray, np.ndarray],
    s: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Elastic and damping terms of the springs ``s``.

    The elastic term points from the first endpoint toward the second and
    is zero for a zero-length spring. The damping term always comes from
    the first endpoint's velocity.

    Returns:
        Tuple of (elastic, damping), each float32 of shape (len(s), 2).
    """
    a = endpoints[0][s]
    b = endpoints[1][s]
    d = points.pos[b] - points.pos[a]
    dx = d[:, 0]
    dy = d[:, 1]
    dist = np.sqrt(dx * dx + dy * dy)
    magnitude = springs.spring_coeff[s] * (dist - springs.rest_length[s])

    nonzero = (dist != 0.0)[:, None]
    with np.errstate(divide="ignore", invalid="ignore"):
        elastic = np.where(nonzero, (magnitude[:, None] * d) / dist[:, None], _ZERO)
    damping = -points.vel[a] * springs.damp_coeff[s][:, None]
    return elastic, damping


def spring_forces(
    points: PointArrays,
    springs: SpringArrays,
    adjacency: Adjacency,
    cols: int,
    index: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Sum of spring forces using the incidence table.

    A first endpoint receives ``elastic + damping``, a second endpoint
    receives ``-(elastic - damping)``. Slots are visited in spring order.
    """
    if index is None:
        index = np.arange(len(points))
    endpoints = springs.endpoint_indices(cols)
    table = adjacency.springs[index]
    first = adjacency.first[index]

    total = np.zeros((len(index), 2), dtype=np.float32)
    for slot in range(adjacency.degree):
        rows = np.nonzero(table[:, slot] >= 0)[0]
        if rows.size == 0:
            continue
        elastic, damping = spring_terms(points, springs, endpoints, table[rows, slot])
        is_first = first[rows, slot][:, None]
        total[rows] = np.where(
            is_first,
            total[rows] + (elastic + damping),
            total[rows] - (elastic - damping),
        )
    return total


def scan_spring_forces(
    points: PointArrays, springs: SpringArrays, cols: int
) -> np.ndarray:
    """Sum of spring forces by scanning every spring for every point.

    Incidence is decided by comparing point coordinates with each spring
    endpoint's coordinates. This is O(points x springs) and only meant as
    a reference for small grids.
    """
    endpoints = springs.endpoint_indices(cols)
    pos = points.pos
    total = np.zeros((len(points), 2), dtype=np.float32)
    for s in range(len(springs)):
        elastic, damping = spring_terms(points, springs, endpoints, np.array([s]))
        p1 = pos[endpoints[0][s]]
        p2 = pos[endpoints[1][s]]
        at_p1 = (pos[:, 0] == p1[0]) & (pos[:, 1] == p1[1])
        at_p2 = ~at_p1 & (pos[:, 0] == p2[0]) & (pos[:, 1] == p2[1])
        total[at_p1] = total[at_p1] + (elastic + damping)
        total[at_p2] = total[at_p2] - (elastic - damping)
    return total


def excitation(ext_m: np.ndarray, draws: np.ndarray) -> np.ndarray:
    """Random external force: uniform draws in [-1, 1) scaled by ext_m."""
    return draws * ext_m[:, None]


def sample_draws(rng: np.random.Generator, n: int) -> np.ndarray:
    """Draw one step's worth of excitation samples, one (x, y) pair per point."""
    return rng.uniform(-1.0, 1.0, size=(n, 2)).astype(np.float32)


def compute_forces(
    points: PointArrays,
    springs: SpringArrays,
    adjacency: Adjacency,
    cols: int,
    gravity_force: float,
    draws: np.ndarray,
    index: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Net force on every point (or on the points in ``index``).

    Args:
        points: Frozen flat point snapshot.
        springs: Spring topology.
        adjacency: Springs incident on every point.
        cols: Grid width, used to flatten spring endpoints.
        gravity_force: Vertical gravity force (0 when gravity is off).
        draws: Excitation samples of shape (N, 2) for the whole grid.
        index: Flat indices to evaluate. Defaults to every point.

    Returns:
        Float32 forces of shape (len(index), 2).
    """
    if index is None:
        index = np.arange(len(points))
    total = spring_forces(points, springs, adjacency, cols, index)

    external = excitation(points.ext_m[index], draws[index])
    gravity = np.array([0.0, gravity_force], dtype=np.float32)
    return total + (gravity + external)
