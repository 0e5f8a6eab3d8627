"""
Warp kernels for the cloth step.

A step is two launches with one thread per point: ``accumulate_forces``
reads the frozen positions/velocities and writes only its own force slot,
then ``integrate_points`` reads those forces plus the same frozen state and
writes only its own slot of the output buffers. The launch boundary is the
barrier between the two phases.

Note: Kernels must be defined at module level (not inside classes) per Warp requirements.
"""

import warp as wp


@wp.kernel
def accumulate_forces(
    pos: wp.array(dtype=wp.vec2),
    vel: wp.array(dtype=wp.vec2),
    ext_m: wp.array(dtype=wp.float32),
    adj_offsets: wp.array(dtype=wp.int32),
    adj_springs: wp.array(dtype=wp.int32),
    adj_first: wp.array(dtype=wp.int32),
    spring_i: wp.array(dtype=wp.int32),
    spring_j: wp.array(dtype=wp.int32),
    rest: wp.array(dtype=wp.float32),
    ke: wp.array(dtype=wp.float32),
    kd: wp.array(dtype=wp.float32),
    gravity_force: float,
    seed: int,
    f: wp.array(dtype=wp.vec2),
):
    """Compute the net force on one point.

    Args:
        pos: Frozen point positions.
        vel: Frozen point velocities.
        ext_m: Excitation magnitude per point.
        adj_offsets: CSR offsets into adj_springs (length N + 1).
        adj_springs: Incident spring indices, in spring order per point.
        adj_first: 1 where the point is the spring's first endpoint.
        spring_i: First endpoint of each spring (flat index).
        spring_j: Second endpoint of each spring (flat index).
        rest: Rest length of each spring.
        ke: Elastic coefficient of each spring.
        kd: Damping coefficient of each spring.
        gravity_force: Vertical gravity force (0 when disabled).
        seed: Per-step seed of the excitation streams.
        f: Output forces.
    """
    tid = wp.tid()

    total = wp.vec2(0.0, 0.0)
    for k in range(adj_offsets[tid], adj_offsets[tid + 1]):
        s = adj_springs[k]
        a = spring_i[s]
        b = spring_j[s]

        d = pos[b] - pos[a]
        dist = wp.sqrt(d[0] * d[0] + d[1] * d[1])
        magnitude = ke[s] * (dist - rest[s])

        elastic = wp.vec2(0.0, 0.0)
        if dist != 0.0:
            elastic = wp.vec2(magnitude * d[0] / dist, magnitude * d[1] / dist)

        # damping always comes from the first endpoint
        damping = -vel[a] * kd[s]

        if adj_first[k] == 1:
            total = total + (elastic + damping)
        else:
            total = total - (elastic - damping)

    # one independent stream per point per step
    state = wp.rand_init(seed, tid)
    ext_x = wp.randf(state, -1.0, 1.0) * ext_m[tid]
    ext_y = wp.randf(state, -1.0, 1.0) * ext_m[tid]

    f[tid] = total + wp.vec2(0.0 + ext_x, gravity_force + ext_y)


@wp.kernel
def integrate_points(
    pos: wp.array(dtype=wp.vec2),
    vel: wp.array(dtype=wp.vec2),
    acc: wp.array(dtype=wp.vec2),
    f: wp.array(dtype=wp.vec2),
    fixed: wp.array(dtype=wp.int32),
    mass: float,
    dt: float,
    floor_y: float,
    pos_out: wp.array(dtype=wp.vec2),
    vel_out: wp.array(dtype=wp.vec2),
    acc_out: wp.array(dtype=wp.vec2),
):
    """Advance one point by a time step.

    Args:
        pos: Frozen point positions.
        vel: Frozen point velocities.
        acc: Accelerations of the previous step.
        f: Net forces from accumulate_forces.
        fixed: Fixed mask (1 = skip).
        mass: Point mass.
        dt: Time step.
        floor_y: Floor height.
        pos_out: New positions.
        vel_out: New velocities.
        acc_out: New accelerations.
    """
    tid = wp.tid()

    x = pos[tid]
    v = vel[tid]

    # Fixed points don't move
    if fixed[tid] != 0:
        pos_out[tid] = x
        vel_out[tid] = v
        acc_out[tid] = acc[tid]
        return

    ax = f[tid][0] / mass
    ay = f[tid][1] / mass

    px = x[0] + (v[0] * dt + 0.5 * ax * dt * dt)
    py = x[1] + (v[1] * dt + 0.5 * ay * dt * dt)

    if py < floor_y:
        py = floor_y

    vx = (px - x[0]) / dt
    vy = (py - x[1]) / dt

    if py == floor_y:
        vx = -vy
        vy = -vy

    pos_out[tid] = wp.vec2(px, py)
    vel_out[tid] = wp.vec2(vx, vy)
    acc_out[tid] = wp.vec2(ax, ay)
