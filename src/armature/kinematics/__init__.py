"""Kinematics module for armature: articulated trees, FK, Jacobians and IK."""

from .bodies import EndEffector, Joint, RigidBody
from .chain import KinematicChain
from .ik_solver import IKConfig, IKResult, IKSolver, damped_least_squares_step
from .models import articulated_human
from .pose import JointPose, PoseSnapshot

__all__ = [
    "EndEffector",
    "IKConfig",
    "IKResult",
    "IKSolver",
    "Joint",
    "JointPose",
    "KinematicChain",
    "PoseSnapshot",
    "RigidBody",
    "articulated_human",
    "damped_least_squares_step",
]
