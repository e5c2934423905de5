#!/usr/bin/env python3
"""Drive the right hand of the reference rig to a target with damped least squares.

Usage:
    python examples/demo_reach.py 4.5 7.5 -1.0
"""

from __future__ import annotations

import argparse
import logging

from rich.console import Console

from armature.kinematics import IKConfig, articulated_human
from armature.utils import print_chain_summary, print_ik_summary


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("target", nargs=3, type=float, help="Target x y z")
    parser.add_argument("--max-iterations", type=int, default=100)
    parser.add_argument("--tolerance", type=float, default=0.01)
    parser.add_argument("--analytic", action="store_true", help="Use the analytic Jacobian")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    console = Console()

    chain = articulated_human()
    config = IKConfig(
        max_iterations=args.max_iterations,
        tolerance=args.tolerance,
        jacobian_method="analytic" if args.analytic else "numeric",
    )
    result = chain.solve_ik(args.target, config=config)

    print_chain_summary(chain, console)
    print_ik_summary([result], console)
    console.print(f"Hand at {chain.end_effector_position(result.end_effector)}")


if __name__ == "__main__":
    main()
