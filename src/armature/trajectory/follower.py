"""Drive an end effector along a spline by solving IK at sampled waypoints."""

from dataclasses import dataclass
from logging import getLogger
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray

from ..errors import DegenerateCurveError
from ..kinematics.chain import KinematicChain
from ..kinematics.ik_solver import IKConfig, IKResult, IKSolver
from ..kinematics.pose import PoseSnapshot
from .hermite import HermiteSpline

logger = getLogger(__name__)


@dataclass(frozen=True, eq=False)
class WaypointResult:
    """Outcome of one waypoint along a followed spline.

    Attributes:
        t: Spline parameter of the waypoint.
        target: (3,) waypoint position on the spline.
        result: IK result for this waypoint.
        snapshot: Chain pose reached at this waypoint.
    """

    t: float
    target: NDArray[np.float64]
    result: IKResult
    snapshot: PoseSnapshot


def follow_spline(
    chain: KinematicChain,
    spline: HermiteSpline,
    num_waypoints: int,
    end_effector: Optional[str] = None,
    config: IKConfig | None = None,
) -> List[WaypointResult]:
    """Solve IK for ``num_waypoints`` evenly spaced spline parameters.

    Each solve starts from the pose reached at the previous waypoint, so the
    chain moves continuously along the curve. The chain is left at the last
    waypoint's pose.

    Args:
        chain: Chain to drive.
        spline: Trajectory with at least two control points.
        num_waypoints: Number of waypoints, including both curve ends (>= 2).
        end_effector: End effector to drive; defaults to the chain's only one.
        config: IK solver configuration.

    Returns:
        One :class:`WaypointResult` per waypoint, in order.
    """
    if num_waypoints < 2:
        raise ValueError(f"num_waypoints must be >= 2, got {num_waypoints}")
    if spline.size < 2:
        raise DegenerateCurveError(
            f"A spline needs at least 2 control points, has {spline.size}"
        )

    solver = IKSolver(chain, config)
    name = chain.resolve_end_effector(end_effector)

    waypoints = []
    for t in np.linspace(0.0, 1.0, num_waypoints):
        target = spline.evaluate(float(t))
        result = solver.solve(target, name)
        if not result.success:
            logger.debug(
                "Waypoint t=%.3f not reached, position error %.6f", t, result.position_error
            )
        waypoints.append(
            WaypointResult(
                t=float(t),
                target=target,
                result=result,
                snapshot=chain.pose_snapshot(),
            )
        )
    return waypoints
