"""
Position/velocity update for one time step.
"""

from typing import Optional, Tuple

import numpy as np

from .state import PointArrays


def integrate(
    points: PointArrays,
    forces: np.ndarray,
    mass: float,
    dt: float,
    floor_y: float,
    index: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Advance the points in ``index`` by one step.

    Position follows x + v*dt + 0.5*a*dt^2 and the new velocity is the
    displacement divided by dt. A point that ends below the floor is put
    back on it. Points resting exactly on the floor get both velocity
    components set to the negated vertical velocity.

    Fixed points are returned unchanged, including their stored
    acceleration.

    Args:
        points: Frozen flat point snapshot.
        forces: Net forces for the points in ``index``, shape (K, 2).
        mass: Point mass.
        dt: Time step, must be positive.
        floor_y: Floor height.
        index: Flat indices to integrate. Defaults to every point.

    Returns:
        Tuple of (pos, vel, acc) for the points in ``index``.
    """
    if index is None:
        index = np.arange(len(points))

    prev = points.pos[index]
    vel = points.vel[index]
    fixed = points.fixed[index][:, None]

    acc = forces / np.float32(mass)
    pos = prev + (vel * np.float32(dt) + np.float32(0.5) * acc * np.float32(dt) * np.float32(dt))

    floor = np.float32(floor_y)
    below = pos[:, 1] < floor
    pos[below, 1] = floor

    new_vel = (pos - prev) / np.float32(dt)
    on_floor = pos[:, 1] == floor
    new_vel[on_floor, 0] = -new_vel[on_floor, 1]
    new_vel[on_floor, 1] = -new_vel[on_floor, 1]

    return (
        np.where(fixed, prev, pos),
        np.where(fixed, vel, new_vel),
        np.where(fixed, points.acc[index], acc),
    )
