import numpy as np

from spring_cloth.integrator import integrate
from spring_cloth.state import PointArrays

G = 9.81
MASS = 0.01
DT = 0.01
FLOOR = -32.0


def single(y=0.0, vel=(0.0, 0.0), fixed=False):
    points = PointArrays.zeros((1,))
    points.pos[0] = (0.0, y)
    points.vel[0] = vel
    points.fixed[0] = fixed
    return points


def test_free_fall_from_rest():
    points = single()
    forces = np.array([[0.0, -G * MASS]], dtype=np.float32)
    pos, vel, acc = integrate(points, forces, MASS, DT, FLOOR)

    np.testing.assert_allclose(acc[0], [0.0, -G], rtol=1e-6)
    np.testing.assert_allclose(pos[0], [0.0, -0.5 * G * DT * DT], rtol=1e-5)
    # velocity is the displacement over dt, i.e. half of a*dt
    np.testing.assert_allclose(vel[0], [0.0, -0.5 * G * DT], rtol=1e-5)
    assert pos[0, 1] > FLOOR


def test_velocity_carries_into_position():
    points = single(vel=(2.0, 1.0))
    forces = np.zeros((1, 2), dtype=np.float32)
    pos, vel, _ = integrate(points, forces, MASS, DT, FLOOR)
    np.testing.assert_allclose(pos[0], [0.02, 0.01], rtol=1e-6)
    np.testing.assert_allclose(vel[0], [2.0, 1.0], rtol=1e-4)


def test_fixed_point_is_untouched():
    points = single(y=3.0, vel=(1.0, -1.0), fixed=True)
    points.acc[0] = (7.0, 8.0)
    forces = np.array([[1e6, -1e6]], dtype=np.float32)
    pos, vel, acc = integrate(points, forces, MASS, DT, FLOOR)
    np.testing.assert_array_equal(pos, points.pos)
    np.testing.assert_array_equal(vel, points.vel)
    np.testing.assert_array_equal(acc, points.acc)


def test_floor_clamp_couples_velocity_to_vertical_displacement():
    points = single(y=-31.99, vel=(1.0, -10.0))
    forces = np.zeros((1, 2), dtype=np.float32)
    pos, vel, _ = integrate(points, forces, MASS, DT, FLOOR)

    assert pos[0, 1] == np.float32(FLOOR)
    vy = (np.float32(FLOOR) - np.float32(-31.99)) / np.float32(DT)
    # both components come from the (clamped) vertical displacement
    assert vel[0, 0] == -vy
    assert vel[0, 1] == -vy
    assert vel[0, 1] > 0.0


def test_resting_on_floor_stays_there():
    points = single(y=FLOOR)
    forces = np.zeros((1, 2), dtype=np.float32)
    pos, vel, _ = integrate(points, forces, MASS, DT, FLOOR)
    assert pos[0, 1] == np.float32(FLOOR)
    np.testing.assert_array_equal(vel, 0.0)


def test_never_below_floor():
    rng = np.random.default_rng(0)
    points = PointArrays.zeros((200,))
    points.pos[:] = rng.uniform(-33.0, -30.0, size=(200, 2))
    points.vel[:] = rng.uniform(-50.0, 50.0, size=(200, 2))
    forces = rng.uniform(-5.0, 5.0, size=(200, 2)).astype(np.float32)
    pos, _, _ = integrate(points, forces, MASS, DT, FLOOR)
    assert (pos[:, 1] >= FLOOR).all()


def test_subset_matches_full_integration():
    rng = np.random.default_rng(1)
    points = PointArrays.zeros((10,))
    points.pos[:] = rng.uniform(-1.0, 1.0, size=(10, 2))
    points.vel[:] = rng.uniform(-1.0, 1.0, size=(10, 2))
    points.fixed[[2, 7]] = True
    forces = rng.uniform(-1.0, 1.0, size=(10, 2)).astype(np.float32)

    full = integrate(points, forces, MASS, DT, FLOOR)
    index = np.array([1, 2, 8])
    part = integrate(points, forces[index], MASS, DT, FLOOR, index)
    for a, b in zip(part, full):
        np.testing.assert_array_equal(a, b[index])
