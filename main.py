#!/usr/bin/env python3
"""
Main entry point for cloth simulation.

Usage:
    python main.py simulate --rows 20 --cols 40 --backend threaded --animate
    python main.py simulate --force-at 5 10 --seed 1 --plot
    python main.py compare --backend warp --steps 200
"""

import argparse
import logging
import sys

import numpy as np

from spring_cloth import ClothConfig, ClothSimulator, animate_cloth, plot_trajectories


def add_common_arguments(parser):
    # Grid parameters
    parser.add_argument("--rows", type=int, default=20, help="Grid rows")
    parser.add_argument("--cols", type=int, default=40, help="Grid columns")
    parser.add_argument(
        "--top", type=float, default=15.0, help="Initial height of the top row"
    )

    # Physics parameters
    parser.add_argument("--rest-length", type=float, default=1.0, help="Spring rest length")
    parser.add_argument("--k", type=float, default=10.0, help="Spring coefficient")
    parser.add_argument("--c", type=float, default=0.03, help="Damping coefficient")
    parser.add_argument("--mass", type=float, default=0.01, help="Point mass")
    parser.add_argument("--g", type=float, default=9.81, help="Gravity")
    parser.add_argument("--no-gravity", action="store_true", help="Disable gravity")
    parser.add_argument("--floor", type=float, default=-32.0, help="Floor height")

    # Simulation parameters
    parser.add_argument("--dt", type=float, default=0.01, help="Time step")
    parser.add_argument("--steps", type=int, default=600, help="Number of steps")
    parser.add_argument("--seed", type=int, default=None, help="Excitation seed")
    parser.add_argument("--workers", type=int, default=None, help="Thread-pool size")
    parser.add_argument("--device", type=str, default=None, help="Warp device")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def make_config(args, backend):
    return ClothConfig(
        rest_length=args.rest_length,
        spring_coeff=args.k,
        damp_coeff=args.c,
        g=args.g,
        mass=args.mass,
        g_on=not args.no_gravity,
        floor_y=args.floor,
        dt=args.dt,
        steps=args.steps,
        seed=args.seed,
        backend=backend,
        workers=args.workers,
        device=args.device,
    )


def run_simulate(args):
    """Run forward simulation."""
    print("=== Cloth Simulation ===")

    config = make_config(args, args.backend)
    print(f"Config: {args.rows}x{args.cols} grid, k={config.spring_coeff}, c={config.damp_coeff}")
    print(f"Steps: {config.steps}, dt={config.dt:.4f}, backend={config.backend}")

    with ClothSimulator(config, args.rows, args.cols, top=args.top) as simulator:
        if args.force_at:
            row, col = args.force_at
            simulator.cloth.set_force(row, col, args.force)
            print(f"Excitation {args.force} at ({row}, {col})")

        print("Running simulation...")
        trajectory = simulator.run(record=True)
        print(f"Trajectory shape: {trajectory.shape}")
        print(f"Lowest point: {trajectory[-1, :, 1].min():.3f}")

        line_indices = simulator.cloth.line_indices()

    if args.animate:
        print("Creating animation...")
        animate_cloth(trajectory, line_indices, floor_y=config.floor_y, save_path=args.animation_path)
        print(f"Animation saved to {args.animation_path}")

    if args.plot:
        import matplotlib.pyplot as plt

        plot_trajectories(trajectory)
        plt.savefig(args.plot_path)
        print(f"Trajectory plot saved to {args.plot_path}")

    print("Done!")
    return trajectory


def run_compare(args):
    """Run the same deterministic scenario on two backends."""
    print("=== Backend Comparison ===")

    results = {}
    for backend in (args.reference, args.backend):
        config = make_config(args, backend)
        with ClothSimulator(config, args.rows, args.cols, top=args.top) as simulator:
            simulator.run(record=False)
            results[backend] = simulator.get_positions()
        print(f"{backend}: done")

    diff = np.abs(results[args.reference] - results[args.backend]).max()
    print(f"Max position difference ({args.reference} vs {args.backend}): {diff:.3e}")
    return diff


def main():
    parser = argparse.ArgumentParser(description="2D mass-spring cloth simulation")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- Forward simulation ---
    sim_parser = subparsers.add_parser("simulate", help="Run a simulation")
    add_common_arguments(sim_parser)
    sim_parser.add_argument(
        "--backend",
        choices=("sequential", "threaded", "warp"),
        default="sequential",
        help="Step driver",
    )
    sim_parser.add_argument(
        "--force-at", type=int, nargs=2, metavar=("ROW", "COL"), help="Excite one point"
    )
    sim_parser.add_argument("--force", type=float, default=10.0, help="Excitation magnitude")
    sim_parser.add_argument("--animate", action="store_true", help="Create animation")
    sim_parser.add_argument(
        "--animation-path", type=str, default="cloth_animation.gif", help="Animation output path"
    )
    sim_parser.add_argument("--plot", action="store_true", help="Plot point trajectories")
    sim_parser.add_argument(
        "--plot-path", type=str, default="trajectories.png", help="Plot output path"
    )

    # --- Backend comparison ---
    cmp_parser = subparsers.add_parser("compare", help="Compare two step drivers")
    add_common_arguments(cmp_parser)
    cmp_parser.add_argument(
        "--reference", choices=("sequential", "threaded", "warp"), default="sequential"
    )
    cmp_parser.add_argument(
        "--backend", choices=("sequential", "threaded", "warp"), default="threaded"
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        run_simulate(args)
    elif args.command == "compare":
        run_compare(args)


if __name__ == "__main__":
    main()
