import numpy as np

from spring_cloth import Cloth, InteractionController, NoSelection, Selected
from spring_cloth.interaction import NOTHING, DragChannel, ForceChannel, KeyForceChannel


def test_selection_sum_type():
    assert NoSelection() == NOTHING
    assert Selected(1, 2) == Selected(1, 2)
    assert Selected(1, 2) != NOTHING


def test_drag_pins_moves_and_releases():
    cloth = Cloth(4, 4)
    drag = DragChannel(cloth)

    assert drag.press(1.1, 0.9) == Selected(1, 1)
    assert cloth.point(1, 1).fixed

    drag.move(7.0, -3.0)
    cloth.simulate(0.01)
    p = cloth.point(1, 1)
    assert (p.x, p.y) == (7.0, -3.0)

    drag.release()
    assert drag.selection == NOTHING
    assert not cloth.point(1, 1).fixed


def test_drag_never_releases_static_anchor():
    cloth = Cloth(3, 3)
    drag = DragChannel(cloth)
    assert drag.press(0.0, 2.0) == Selected(2, 0)
    drag.move(-1.0, 3.0)
    drag.release()
    p = cloth.point(2, 0)
    assert p.fixed and p.static
    assert (p.x, p.y) == (-1.0, 3.0)


def test_move_without_selection_is_ignored():
    cloth = Cloth(2, 2)
    drag = DragChannel(cloth)
    drag.move(5.0, 5.0)
    np.testing.assert_array_equal(cloth.positions(), Cloth(2, 2).positions())


def test_force_channel():
    cloth = Cloth(3, 3)
    force = ForceChannel(cloth, 10.0)
    assert force.press(2.0, 0.0) == Selected(0, 2)
    assert cloth.point(0, 2).ext_m == 10.0
    force.release()
    assert cloth.point(0, 2).ext_m == 0.0
    assert force.selection == NOTHING


def test_key_force_channel_ignores_repeat_presses():
    cloth = Cloth(5, 5)
    key = KeyForceChannel(cloth, 10.0, np.random.default_rng(0))
    first = key.press()
    assert isinstance(first, Selected)
    assert key.press() == first
    assert cloth.points.ext_m.sum() == 10.0

    key.release()
    assert cloth.points.ext_m.sum() == 0.0
    assert key.selection == NOTHING
    key.release()


def test_controller():
    cloth = Cloth(3, 3)
    controller = InteractionController(cloth, magnitude=4.0, seed=1)
    controller.force.press(1.0, 1.0)
    controller.key_force.press()
    controller.drag.press(0.0, 0.0)
    assert cloth.points.ext_m.sum() >= 4.0

    assert controller.toggle_gravity() is False
    controller.release_all()
    assert cloth.points.ext_m.sum() == 0.0
    assert not cloth.point(0, 0).fixed
