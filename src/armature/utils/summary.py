"""Console summaries of chains and IK results, rendered with rich."""

from typing import Sequence

import numpy as np
from rich.console import Console
from rich.table import Table

from ..kinematics.chain import KinematicChain
from ..kinematics.ik_solver import IKResult


def chain_table(chain: KinematicChain) -> Table:
    """One row per joint: body, axes, theta slice, current angles and end effector."""
    table = Table(title="Kinematic Chain")
    table.add_column("Joint", style="cyan", no_wrap=True)
    table.add_column("Body", style="magenta")
    table.add_column("Axes")
    table.add_column("Theta")
    table.add_column("Angles (rad)")
    table.add_column("End Effector", style="green")

    layout = chain.theta_layout
    for name in chain.joint_names:
        joint = chain.get_joint(name)
        span = layout[name]
        angles = chain.joint_angles(name)
        table.add_row(
            name,
            chain.body_names[joint.child_body],
            "".join(joint.axis_names) or "-",
            f"[{span.start}:{span.stop}]" if joint.dof else "-",
            np.array2string(angles, precision=3) if joint.dof else "-",
            joint.end_effector.name if joint.end_effector is not None else "",
        )
    return table


def ik_results_table(results: Sequence[IKResult], title: str = "IK Summary") -> Table:
    table = Table(title=title)
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("End Effector", style="magenta")
    table.add_column("Converged")
    table.add_column("Iterations")
    table.add_column("Position Error")

    for i, result in enumerate(results):
        table.add_row(
            str(i),
            result.end_effector,
            "[green]yes[/green]" if result.success else "[red]no[/red]",
            str(result.iterations),
            f"{result.position_error:.6f}",
        )
    return table


def print_chain_summary(chain: KinematicChain, console: Console | None = None) -> None:
    console = console or Console()
    console.print(chain_table(chain))


def print_ik_summary(results: Sequence[IKResult], console: Console | None = None) -> None:
    console = console or Console()
    console.print(ik_results_table(results))
