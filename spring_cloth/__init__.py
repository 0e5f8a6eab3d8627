"""
Cloth Simulation Package

A 2D mass-spring cloth with gravity, damping, a floor and random external
excitation, stepped on the host with numpy (sequentially or from a thread
pool) or on a device with NVIDIA Warp.
"""

from .config import ClothConfig
from .state import Point, Spring, PointArrays, SpringArrays, flatten_points, unflatten_points
from .geometry import make_grid_points, make_springs, make_anchors, make_adjacency
from .cloth import Cloth
from .driver import SequentialStepper, ThreadedStepper, WarpStepper, make_stepper
from .simulation import ClothSimulator
from .interaction import InteractionController, NoSelection, Selected
from .visualization import animate_cloth, plot_trajectories

__all__ = [
    "ClothConfig",
    "Point",
    "Spring",
    "PointArrays",
    "SpringArrays",
    "flatten_points",
    "unflatten_points",
    "make_grid_points",
    "make_springs",
    "make_anchors",
    "make_adjacency",
    "Cloth",
    "SequentialStepper",
    "ThreadedStepper",
    "WarpStepper",
    "make_stepper",
    "ClothSimulator",
    "InteractionController",
    "NoSelection",
    "Selected",
    "animate_cloth",
    "plot_trajectories",
]
