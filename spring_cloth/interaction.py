"""
Input-driven interaction with a cloth.

Each channel is a small press/release state machine holding at most one
selected point. Channels only touch the cloth through its interaction
methods (pin/release, move, force injection), never the physics.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .cloth import Cloth

logger = logging.getLogger(__name__)


class NoSelection:
    """No point is selected."""

    def __repr__(self):
        return "NoSelection()"

    def __eq__(self, other):
        return isinstance(other, NoSelection)

    def __hash__(self):
        return hash(NoSelection)


@dataclass(frozen=True)
class Selected:
    """A selected grid point."""

    row: int
    col: int


Selection = Union[NoSelection, Selected]

NOTHING = NoSelection()


class DragChannel:
    """Press grabs the nearest point and pins it, motion drags it, release lets go.

    Static anchors can be dragged but are never released.
    """

    def __init__(self, cloth: Cloth):
        self.cloth = cloth
        self.selection: Selection = NOTHING

    def press(self, x: float, y: float) -> Selection:
        row, col = self.cloth.closest_point(x, y)
        self.cloth.pin(row, col)
        self.selection = Selected(row, col)
        logger.debug("drag %s", self.selection)
        return self.selection

    def move(self, x: float, y: float):
        if isinstance(self.selection, Selected):
            self.cloth.move_point(self.selection.row, self.selection.col, x, y)

    def release(self):
        if isinstance(self.selection, Selected):
            self.cloth.release(self.selection.row, self.selection.col)
        self.selection = NOTHING


class ForceChannel:
    """Press injects excitation at the nearest point, release clears it."""

    def __init__(self, cloth: Cloth, magnitude: float):
        self.cloth = cloth
        self.magnitude = magnitude
        self.selection: Selection = NOTHING

    def press(self, x: float, y: float) -> Selection:
        row, col = self.cloth.closest_point(x, y)
        self.cloth.add_force(row, col, self.magnitude)
        self.selection = Selected(row, col)
        logger.debug("force at %s", self.selection)
        return self.selection

    def release(self):
        if isinstance(self.selection, Selected):
            self.cloth.clear_force(self.selection.row, self.selection.col)
        self.selection = NOTHING


class KeyForceChannel:
    """Key press injects excitation at a random point, key release clears it.

    Repeated presses (key auto-repeat) while a point is selected are ignored.
    """

    def __init__(
        self,
        cloth: Cloth,
        magnitude: float,
        rng: Optional[np.random.Generator] = None,
    ):
        self.cloth = cloth
        self.magnitude = magnitude
        self.rng = rng if rng is not None else np.random.default_rng()
        self.selection: Selection = NOTHING

    def press(self) -> Selection:
        if isinstance(self.selection, Selected):
            return self.selection
        row = int(self.rng.integers(self.cloth.rows))
        col = int(self.rng.integers(self.cloth.cols))
        self.cloth.add_force(row, col, self.magnitude)
        self.selection = Selected(row, col)
        logger.debug("key force at %s", self.selection)
        return self.selection

    def release(self):
        if isinstance(self.selection, Selected):
            self.cloth.clear_force(self.selection.row, self.selection.col)
        self.selection = NOTHING


class InteractionController:
    """All input channels of one cloth, plus the gravity toggle."""

    def __init__(self, cloth: Cloth, magnitude: float = 10.0, seed: Optional[int] = None):
        self.cloth = cloth
        self.drag = DragChannel(cloth)
        self.force = ForceChannel(cloth, magnitude)
        self.key_force = KeyForceChannel(cloth, magnitude, np.random.default_rng(seed))

    def toggle_gravity(self) -> bool:
        return self.cloth.toggle_gravity()

    def release_all(self):
        self.drag.release()
        self.force.release()
        self.key_force.release()
