"""Rigid bodies, rotational joints and end effectors of an articulated chain."""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .transforms import AXIS_ROTATIONS, as_transform, as_vector3

AXIS_NAMES = ("x", "y", "z")


@dataclass(frozen=True, eq=False)
class RigidBody:
    """A named rigid body.

    Attributes:
        name: Body name (e.g., "ru_arm").
        shape_ref: Opaque handle handed to the renderer (mesh name, asset id, ...).
        local_transform: 4x4 transform from the body frame to its drawn shape.
    """

    name: str
    shape_ref: Any
    local_transform: NDArray[np.float64]

    def __post_init__(self) -> None:
        T = as_transform(self.local_transform, f"local_transform of body '{self.name}'")
        T.setflags(write=False)
        object.__setattr__(self, "local_transform", T)


@dataclass(eq=False)
class EndEffector:
    """A point fixed in the child-body frame of its owning joint.

    Created through :meth:`KinematicChain.add_end_effector` only.

    Attributes:
        name: End-effector name (e.g., "right_hand").
        joint: Name of the owning joint.
        local_offset: (3,) point in the owning joint's child-body frame.
        global_position: (3,) world position, ``None`` until the first pose update.
    """

    name: str
    joint: str
    local_offset: NDArray[np.float64]
    global_position: Optional[NDArray[np.float64]] = None


@dataclass(eq=False)
class Joint:
    """A rotational joint connecting a parent body to a child body.

    Attributes:
        name: Joint name (e.g., "r_elbow").
        parent_body: Handle of the parent body, ``None`` for the root joint.
        child_body: Handle of the child body.
        placement: Fixed 4x4 transform from the parent frame to the joint center.
        enabled_axes: Rotation enablement about the parent-local (x, y, z) axes.
        articulation: 4x4 rotation derived from the joint's slice of ``theta``.
        end_effector: End effector attached to the child body, if any.
    """

    name: str
    parent_body: Optional[int]
    child_body: int
    placement: NDArray[np.float64]
    enabled_axes: Tuple[bool, bool, bool] = (False, False, False)
    articulation: NDArray[np.float64] = field(init=False, repr=False)
    end_effector: Optional[EndEffector] = None

    def __post_init__(self) -> None:
        self.placement = as_transform(self.placement, f"placement of joint '{self.name}'")
        self.placement.setflags(write=False)
        if len(self.enabled_axes) != 3:
            raise ValueError(
                f"enabled_axes must have 3 entries (x, y, z), got {len(self.enabled_axes)}"
            )
        self.enabled_axes = tuple(bool(a) for a in self.enabled_axes)
        self.articulation = np.eye(4)
        self.articulation.setflags(write=False)

    @property
    def dof(self) -> int:
        return sum(self.enabled_axes)

    @property
    def axis_names(self) -> Tuple[str, ...]:
        return tuple(n for n, on in zip(AXIS_NAMES, self.enabled_axes) if on)

    def _articulate(self, angles: NDArray[np.float64]) -> None:
        """Recompute the articulation matrix from this joint's angles.

        Rotations are taken about the fixed parent-local axes in x, y, z
        order, so the result is ``Rz @ Ry @ Rx`` over the enabled axes.
        Only :meth:`KinematicChain.apply` should call this.
        """
        A = np.eye(4)
        index = 0
        for rot_fn, enabled in zip(AXIS_ROTATIONS, self.enabled_axes):
            if enabled:
                A = rot_fn(float(angles[index])) @ A
                index += 1
        A.setflags(write=False)
        self.articulation = A

    def attach_end_effector(self, name: str, local_offset) -> EndEffector:
        if self.end_effector is not None:
            raise ValueError(
                f"Joint '{self.name}' already owns end effector '{self.end_effector.name}'"
            )
        self.end_effector = EndEffector(
            name=name,
            joint=self.name,
            local_offset=as_vector3(local_offset, f"local_offset of end effector '{name}'"),
        )
        return self.end_effector
