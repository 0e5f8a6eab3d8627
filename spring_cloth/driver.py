"""
Step drivers.

Every driver runs the same two-phase step: compute all forces from a
frozen snapshot, then integrate every point from the same snapshot. They
differ only in how the per-point work of each phase is dispatched.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
import warp as wp

from .config import ClothConfig
from .forces import compute_forces, sample_draws
from .integrator import integrate
from .state import PointArrays
from . import kernels

if TYPE_CHECKING:
    from .cloth import Cloth

logger = logging.getLogger(__name__)

StepResult = Tuple[np.ndarray, np.ndarray, np.ndarray]


class Stepper:
    """Base class: advances a cloth one snapshot at a time on the host."""

    def advance(self, cloth: "Cloth", steps: int, dt: float):
        for _ in range(steps):
            snapshot = cloth.snapshot()
            draws = sample_draws(cloth.rng, len(snapshot))
            pos, vel, acc = self.step(cloth, snapshot, draws, dt)
            cloth.commit(pos, vel, acc)

    def step(
        self, cloth: "Cloth", snapshot: PointArrays, draws: np.ndarray, dt: float
    ) -> StepResult:
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class SequentialStepper(Stepper):
    """Reference driver: each phase runs over the whole flat buffer."""

    def step(self, cloth, snapshot, draws, dt):
        forces = compute_forces(
            snapshot,
            cloth.springs,
            cloth.adjacency,
            cloth.cols,
            cloth.gravity_force,
            draws,
        )
        return integrate(snapshot, forces, cloth.mass, dt, cloth.floor_y)


class ThreadedStepper(Stepper):
    """Dispatches each phase as independent chunks of points to a thread pool.

    Workers read the shared snapshot and write only their own slots of the
    output arrays. All force futures complete before any integration
    starts.
    """

    def __init__(self, workers: Optional[int] = None):
        self.workers = workers or os.cpu_count() or 1
        self._executor = ThreadPoolExecutor(max_workers=self.workers)

    def _chunks(self, n: int):
        return [c for c in np.array_split(np.arange(n), self.workers) if c.size]

    def step(self, cloth, snapshot, draws, dt):
        n = len(snapshot)
        chunks = self._chunks(n)
        forces = np.empty((n, 2), dtype=np.float32)

        def force_worker(index):
            forces[index] = compute_forces(
                snapshot,
                cloth.springs,
                cloth.adjacency,
                cloth.cols,
                cloth.gravity_force,
                draws,
                index,
            )

        self._run(force_worker, chunks)

        pos = np.empty((n, 2), dtype=np.float32)
        vel = np.empty((n, 2), dtype=np.float32)
        acc = np.empty((n, 2), dtype=np.float32)

        def integrate_worker(index):
            pos[index], vel[index], acc[index] = integrate(
                snapshot, forces[index], cloth.mass, dt, cloth.floor_y, index
            )

        self._run(integrate_worker, chunks)
        return pos, vel, acc

    def _run(self, fn, chunks):
        futures = [self._executor.submit(fn, index) for index in chunks]
        wait(futures)
        for future in futures:
            future.result()

    def close(self):
        self._executor.shutdown(wait=True)


class WarpStepper(Stepper):
    """Runs both phases as Warp kernels with one thread per point.

    Topology is uploaded once. Point state is uploaded at the start of
    :meth:`advance` and downloaded at the end, so a batch of steps stays on
    the device.
    """

    def __init__(self, device=None):
        wp.init()
        self._device = wp.get_device(device)
        self._topology = None
        self._owner = None

    def _upload_topology(self, cloth: "Cloth"):
        device = self._device
        springs = cloth.springs
        spring_i, spring_j = springs.endpoint_indices(cloth.cols)
        offsets, adj_springs, adj_first = cloth.adjacency.csr()
        self._topology = [
            wp.array(offsets, dtype=wp.int32, device=device),
            wp.array(adj_springs, dtype=wp.int32, device=device),
            wp.array(adj_first, dtype=wp.int32, device=device),
            wp.array(spring_i, dtype=wp.int32, device=device),
            wp.array(spring_j, dtype=wp.int32, device=device),
            wp.array(springs.rest_length, dtype=wp.float32, device=device),
            wp.array(springs.spring_coeff, dtype=wp.float32, device=device),
            wp.array(springs.damp_coeff, dtype=wp.float32, device=device),
        ]

    def advance(self, cloth, steps, dt):
        if self._owner is not cloth:
            self._upload_topology(cloth)
            self._owner = cloth

        device = self._device
        flat = cloth.snapshot()
        n = len(flat)

        pos = wp.array(flat.pos, dtype=wp.vec2, device=device)
        vel = wp.array(flat.vel, dtype=wp.vec2, device=device)
        acc = wp.array(flat.acc, dtype=wp.vec2, device=device)
        ext_m = wp.array(flat.ext_m, dtype=wp.float32, device=device)
        fixed = wp.array(flat.fixed.astype(np.int32), dtype=wp.int32, device=device)
        forces = wp.zeros(n, dtype=wp.vec2, device=device)
        pos_out = wp.zeros_like(pos)
        vel_out = wp.zeros_like(vel)
        acc_out = wp.zeros_like(acc)

        for _ in range(steps):
            seed = int(cloth.rng.integers(0, 2**31 - 1))
            wp.launch(
                kernels.accumulate_forces,
                dim=n,
                inputs=[pos, vel, ext_m, *self._topology, cloth.gravity_force, seed, forces],
                device=device,
            )
            wp.launch(
                kernels.integrate_points,
                dim=n,
                inputs=[
                    pos,
                    vel,
                    acc,
                    forces,
                    fixed,
                    cloth.mass,
                    dt,
                    cloth.floor_y,
                    pos_out,
                    vel_out,
                    acc_out,
                ],
                device=device,
            )
            pos, pos_out = pos_out, pos
            vel, vel_out = vel_out, vel
            acc, acc_out = acc_out, acc

        cloth.commit(pos.numpy(), vel.numpy(), acc.numpy())


def make_stepper(config: ClothConfig) -> Stepper:
    """Create the step driver selected by ``config.backend``."""
    if config.backend == "threaded":
        stepper = ThreadedStepper(config.workers)
    elif config.backend == "warp":
        stepper = WarpStepper(config.wp_device)
    else:
        stepper = SequentialStepper()
    logger.debug("using %s", type(stepper).__name__)
    return stepper
