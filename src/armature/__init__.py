"""armature: articulated kinematic chains, damped least-squares IK and Hermite splines."""

from .errors import (
    DegenerateCurveError,
    DimensionMismatchError,
    IndexOutOfRangeError,
    NumericalInstabilityError,
    SplineFormatError,
    UnknownEndEffectorError,
)
from .kinematics import (
    EndEffector,
    IKConfig,
    IKResult,
    IKSolver,
    Joint,
    JointPose,
    KinematicChain,
    PoseSnapshot,
    RigidBody,
    articulated_human,
)
from .trajectory import HermiteSpline, WaypointResult, follow_spline

__all__ = [
    "DegenerateCurveError",
    "DimensionMismatchError",
    "EndEffector",
    "HermiteSpline",
    "IKConfig",
    "IKResult",
    "IKSolver",
    "IndexOutOfRangeError",
    "Joint",
    "JointPose",
    "KinematicChain",
    "NumericalInstabilityError",
    "PoseSnapshot",
    "RigidBody",
    "SplineFormatError",
    "UnknownEndEffectorError",
    "WaypointResult",
    "articulated_human",
    "follow_spline",
]
