"""
Visualization utilities for cloth simulation.
"""

from typing import List, Optional

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.collections import LineCollection


def mesh_segments(vertices: np.ndarray, line_indices: np.ndarray) -> np.ndarray:
    """Turn a vertex buffer and a line list into (num_lines, 2, 2) segments."""
    return vertices[line_indices.astype(np.int64)].reshape(-1, 2, 2)


def draw_mesh(ax, vertices: np.ndarray, line_indices: np.ndarray, floor_y: Optional[float] = None):
    """Draw the cloth wireframe on an axes.

    Args:
        ax: Matplotlib axes.
        vertices: Point positions of shape (num_points, 2).
        line_indices: Spring endpoints as a flat line list.
        floor_y: If given, draw the floor line.

    Returns:
        The LineCollection added to the axes.
    """
    lines = LineCollection(mesh_segments(vertices, line_indices), colors="k", linewidths=0.8)
    ax.add_collection(lines)
    if floor_y is not None:
        ax.axhline(floor_y, color="tab:brown", linewidth=1.0)
    ax.set_aspect("equal")
    ax.autoscale_view()
    return lines


def animate_cloth(
    trajectory: np.ndarray,
    line_indices: np.ndarray,
    floor_y: Optional[float] = None,
    save_path: Optional[str] = None,
    interval: int = 20,
):
    """Create an animated wireframe of the cloth.

    Args:
        trajectory: Array of shape (frames, num_points, 2).
        line_indices: Spring endpoints as a flat line list.
        floor_y: If given, draw the floor line.
        save_path: If given, save the animation there (writer picked from the suffix).
        interval: Delay between frames in milliseconds.

    Returns:
        The FuncAnimation.
    """
    fig, ax = plt.subplots(figsize=(10, 8))
    lines = draw_mesh(ax, trajectory[0], line_indices, floor_y)

    low = trajectory.min(axis=(0, 1)) - 1.0
    high = trajectory.max(axis=(0, 1)) + 1.0
    if floor_y is not None:
        low[1] = min(low[1], floor_y - 1.0)
    ax.set_xlim(low[0], high[0])
    ax.set_ylim(low[1], high[1])
    ax.set_xlabel("X Position")
    ax.set_ylabel("Y Position")

    def animate(frame):
        lines.set_segments(mesh_segments(trajectory[frame], line_indices))
        ax.set_title(f"Cloth Simulation - Frame {frame}/{len(trajectory)}")
        return (lines,)

    anim = animation.FuncAnimation(
        fig, animate, frames=len(trajectory), interval=interval, repeat=True
    )

    if save_path:
        anim.save(save_path)

    return anim


def plot_trajectories(
    trajectory: np.ndarray,
    point_indices: Optional[List[int]] = None,
    figsize: tuple = (12, 8),
) -> plt.Figure:
    """Plot 3D trajectories of selected points over time.

    Args:
        trajectory: Array of shape (frames, num_points, 2) containing positions.
        point_indices: Flat indices of points to plot. If None, plots a sample.
        figsize: Figure size.

    Returns:
        The matplotlib figure.
    """
    if point_indices is None:
        # Sample some points across the cloth
        num_points = trajectory.shape[1]
        point_indices = list(range(0, num_points, max(1, num_points // 10)))

    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection="3d")

    frames = np.arange(len(trajectory))

    for idx in point_indices:
        x = trajectory[:, idx, 0]
        y = trajectory[:, idx, 1]
        ax.plot(x, y, frames, label=f"Point {idx}", alpha=0.7)

    ax.set_xlabel("X Position")
    ax.set_ylabel("Y Position")
    ax.set_zlabel("Time (frame)")
    ax.set_title("Point Trajectories Over Time")
    ax.legend(loc="upper left", fontsize="small")

    return fig
