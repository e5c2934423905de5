"""Immutable pose snapshots handed to an external renderer."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

import numpy as np
from numpy.typing import NDArray


def _frozen(array: NDArray[np.float64]) -> NDArray[np.float64]:
    out = np.array(array, dtype=np.float64)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class JointPose:
    """World-space pose of one joint and the body it carries.

    Attributes:
        joint: Joint name.
        body: Name of the joint's child body.
        shape_ref: The body's opaque shape handle.
        world_transform: 4x4 joint frame in world space
            (``parent_world @ placement @ articulation``).
        shape_transform: 4x4 transform to draw the body's shape with
            (``world_transform @ body.local_transform``).
    """

    joint: str
    body: str
    shape_ref: Any
    world_transform: NDArray[np.float64]
    shape_transform: NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "world_transform", _frozen(self.world_transform))
        object.__setattr__(self, "shape_transform", _frozen(self.shape_transform))

    @property
    def position(self) -> NDArray[np.float64]:
        """(3,) world position of the joint center."""
        return self.world_transform[:3, 3]


@dataclass(frozen=True, eq=False)
class PoseSnapshot:
    """Pose of a whole chain, in traversal order, safe to share with a renderer."""

    theta: NDArray[np.float64]
    joints: Tuple[JointPose, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "theta", _frozen(self.theta))
        object.__setattr__(self, "joints", tuple(self.joints))

    def __len__(self) -> int:
        return len(self.joints)

    def __iter__(self) -> Iterator[JointPose]:
        return iter(self.joints)

    def __getitem__(self, joint_name: str) -> JointPose:
        for pose in self.joints:
            if pose.joint == joint_name:
                return pose
        raise KeyError(f"Joint '{joint_name}' is not part of this snapshot")

    @property
    def world_transforms(self) -> NDArray[np.float64]:
        """(n_joints, 4, 4) stacked joint world transforms."""
        if not self.joints:
            return np.zeros((0, 4, 4))
        return np.stack([p.world_transform for p in self.joints])

    @property
    def shape_transforms(self) -> NDArray[np.float64]:
        """(n_joints, 4, 4) stacked shape transforms."""
        if not self.joints:
            return np.zeros((0, 4, 4))
        return np.stack([p.shape_transform for p in self.joints])

    def to_dict(self) -> Dict[str, NDArray[np.float64]]:
        """Map joint name to its world transform."""
        return {p.joint: p.world_transform for p in self.joints}
