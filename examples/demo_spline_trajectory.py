#!/usr/bin/env python3
"""Follow a Hermite spline with the right hand and export the spline as text.

Usage:
    python examples/demo_spline_trajectory.py --waypoints 20 --out spline.txt
"""

from __future__ import annotations

import argparse
import logging

from rich.console import Console
from rich.table import Table

from armature.kinematics import articulated_human
from armature.trajectory import HermiteSpline, follow_spline


def build_spline() -> HermiteSpline:
    """An arc in front of the rig's right shoulder."""
    spline = HermiteSpline()
    spline.add_point((4.8, 7.0, 1.0), (0.0, 1.0, -1.0))
    spline.add_point((4.0, 8.2, 0.0), (-1.0, 0.0, -1.0))
    spline.add_point((3.0, 7.0, -1.5), (0.0, -1.0, -0.5))
    return spline


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--waypoints", type=int, default=20)
    parser.add_argument("--out", type=str, default=None, help="Write the spline to this file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    console = Console()

    chain = articulated_human()
    chain.apply([0.0, 0.0, 0.0, 0.0, 0.3, 0.0, 0.0])
    spline = build_spline()
    console.print(f"Spline arc length: {spline.arc_length():.4f}")

    waypoints = follow_spline(chain, spline, args.waypoints)

    table = Table(title="Trajectory")
    table.add_column("t", style="cyan", no_wrap=True)
    table.add_column("Target", style="magenta")
    table.add_column("Iterations")
    table.add_column("Position Error")
    for wp in waypoints:
        table.add_row(
            f"{wp.t:.3f}",
            " ".join(f"{v:+.3f}" for v in wp.target),
            str(wp.result.iterations),
            f"{wp.result.position_error:.5f}",
        )
    console.print(table)

    if args.out:
        spline.save(args.out)


if __name__ == "__main__":
    main()
