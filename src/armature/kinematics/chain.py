"""Articulated kinematic tree with forward kinematics and Jacobians."""

from dataclasses import replace
from logging import getLogger
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import DimensionMismatchError, UnknownEndEffectorError
from .bodies import EndEffector, Joint, RigidBody
from .ik_solver import IKConfig, IKResult, IKSolver
from .pose import JointPose, PoseSnapshot
from .transforms import AXIS_ROTATIONS, AXIS_VECTORS, transform_point

logger = getLogger(__name__)

_JointFrame = Tuple[int, NDArray[np.float64], NDArray[np.float64]]


class KinematicChain:
    """A single-rooted tree of rigid bodies connected by rotational joints.

    Bodies and joints live in flat arenas and refer to each other by integer
    handle; the tree is stored as a list of child joints per body. The chain
    is built top-down:

    * the first joint added is the root and has ``parent=None``;
    * every later joint hangs off a body already attached to the tree;
    * a body is the child of at most one joint.

    The joint-angle vector ``theta`` is the concatenation, in joint
    declaration order, of each joint's enabled-axis angles (x, y, z order).
    :attr:`theta_layout` exposes that layout by joint name.
    """

    def __init__(self) -> None:
        self._bodies: List[RigidBody] = []
        self._joints: List[Joint] = []
        self._body_index: Dict[str, int] = {}
        self._joint_index: Dict[str, int] = {}
        self._children: Dict[int, List[int]] = {}
        self._incoming: Dict[int, int] = {}  # body handle -> joint that carries it
        self._effectors: Dict[str, int] = {}  # end-effector name -> owning joint
        self._root: Optional[int] = None
        self._layout: Dict[str, slice] = {}
        self._theta = np.zeros(0)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_body(
        self,
        name: str,
        shape_ref: Any = None,
        local_transform: ArrayLike | None = None,
    ) -> int:
        """Register a rigid body and return its handle."""
        if name in self._body_index:
            raise ValueError(f"Body '{name}' already exists")
        body = RigidBody(
            name=name,
            shape_ref=shape_ref,
            local_transform=np.eye(4) if local_transform is None else local_transform,
        )
        handle = len(self._bodies)
        self._bodies.append(body)
        self._body_index[name] = handle
        self._children[handle] = []
        return handle

    def add_joint(
        self,
        name: str,
        parent: Optional[int],
        child: int,
        placement: ArrayLike | None = None,
        axes: Sequence[bool] = (False, False, False),
    ) -> int:
        """Connect ``parent`` to ``child`` with a rotational joint.

        Args:
            name: Joint name, unique within the chain.
            parent: Parent body handle, or ``None`` for the root joint.
            child: Child body handle.
            placement: Fixed 4x4 transform from the parent frame to the joint.
            axes: Enabled rotation axes (x, y, z). Fixed for the chain's lifetime.

        Returns:
            The joint handle.
        """
        if name in self._joint_index:
            raise ValueError(f"Joint '{name}' already exists")
        self._check_body(child)
        if child in self._incoming:
            other = self._joints[self._incoming[child]].name
            raise ValueError(
                f"Body '{self._bodies[child].name}' is already the child of joint '{other}'"
            )
        if parent is None:
            if self._root is not None:
                raise ValueError(
                    f"Chain already has root joint '{self._joints[self._root].name}'"
                )
        else:
            self._check_body(parent)
            if self._root is None:
                raise ValueError("The first joint must be the root joint (parent=None)")
            if parent not in self._incoming:
                raise ValueError(
                    f"Parent body '{self._bodies[parent].name}' is not attached to the tree"
                )

        joint = Joint(
            name=name,
            parent_body=parent,
            child_body=child,
            placement=np.eye(4) if placement is None else placement,
            enabled_axes=tuple(axes),
        )
        handle = len(self._joints)
        self._joints.append(joint)
        self._joint_index[name] = handle
        self._incoming[child] = handle
        if parent is None:
            self._root = handle
        else:
            self._children[parent].append(handle)

        start = len(self._theta)
        self._layout[name] = slice(start, start + joint.dof)
        self._theta = np.concatenate([self._theta, np.zeros(joint.dof)])
        joint._articulate(self._theta[self._layout[name]])

        logger.debug("Added joint '%s' (axes=%s, dof=%d)", name, joint.axis_names, joint.dof)
        return handle

    def add_end_effector(self, name: str, joint: str, local_offset: ArrayLike) -> EndEffector:
        """Attach a named end effector to ``joint``'s child-body frame."""
        if name in self._effectors:
            raise ValueError(f"End effector '{name}' already exists")
        owner = self._joint_handle(joint)
        effector = self._joints[owner].attach_end_effector(name, local_offset)
        self._effectors[name] = owner
        return effector

    def _check_body(self, handle: int) -> None:
        if not 0 <= handle < len(self._bodies):
            raise ValueError(f"Unknown body handle {handle}")

    def _joint_handle(self, name: str) -> int:
        try:
            return self._joint_index[name]
        except KeyError:
            raise KeyError(f"Unknown joint '{name}'") from None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dof(self) -> int:
        return len(self._theta)

    @property
    def theta(self) -> NDArray[np.float64]:
        """Copy of the current joint-angle vector."""
        return self._theta.copy()

    @property
    def joint_names(self) -> List[str]:
        return [j.name for j in self._joints]

    @property
    def body_names(self) -> List[str]:
        return [b.name for b in self._bodies]

    @property
    def end_effector_names(self) -> List[str]:
        return list(self._effectors)

    @property
    def theta_layout(self) -> Dict[str, slice]:
        """Joint name -> slice of ``theta`` holding that joint's angles."""
        return dict(self._layout)

    def get_joint(self, name: str) -> Joint:
        return self._joints[self._joint_handle(name)]

    def get_body(self, name: str) -> RigidBody:
        try:
            return self._bodies[self._body_index[name]]
        except KeyError:
            raise KeyError(f"Unknown body '{name}'") from None

    def get_end_effector(self, name: str) -> EndEffector:
        try:
            owner = self._effectors[name]
        except KeyError:
            raise UnknownEndEffectorError(f"Unknown end effector '{name}'") from None
        return self._joints[owner].end_effector

    def resolve_end_effector(self, name: Optional[str] = None) -> str:
        """Return ``name`` if it exists, or the only end effector when ``name`` is None."""
        if name is not None:
            self.get_end_effector(name)
            return name
        if not self._effectors:
            raise UnknownEndEffectorError("Chain has no end effector")
        if len(self._effectors) > 1:
            raise ValueError(
                f"Chain has {len(self._effectors)} end effectors "
                f"({', '.join(self._effectors)}); pass one by name"
            )
        return next(iter(self._effectors))

    def joint_angles(self, name: str) -> NDArray[np.float64]:
        """Copy of one joint's angles, in (x, y, z) order over its enabled axes."""
        self._joint_handle(name)
        return self._theta[self._layout[name]].copy()

    def set_joint_angles(self, name: str, angles: ArrayLike) -> None:
        """Replace one joint's angles and re-apply the whole vector."""
        self._joint_handle(name)
        span = self._layout[name]
        values = np.asarray(angles, dtype=np.float64).reshape(-1)
        expected = span.stop - span.start
        if len(values) != expected:
            raise DimensionMismatchError(
                f"Expected {expected} angles for joint '{name}', got {len(values)}"
            )
        theta = self.theta
        theta[span] = values
        self.apply(theta)

    # ------------------------------------------------------------------
    # Forward kinematics
    # ------------------------------------------------------------------

    def apply(self, theta: ArrayLike) -> None:
        """Set ``theta`` and recompute every joint's articulation matrix.

        This is the only way articulation matrices change.

        Args:
            theta: (dof,) joint angles in radians, laid out per :attr:`theta_layout`.

        Raises:
            DimensionMismatchError: If ``len(theta) != dof``.
        """
        values = np.array(theta, dtype=np.float64)
        if values.ndim != 1 or len(values) != self.dof:
            raise DimensionMismatchError(
                f"Expected {self.dof} joint angles, got shape {values.shape}"
            )
        self._theta = values
        for joint in self._joints:
            joint._articulate(values[self._layout[joint.name]])

    def _traverse(self) -> Iterator[_JointFrame]:
        """Yield ``(joint, pre_articulation, world)`` in pre-order.

        ``pre_articulation`` is ``parent_world @ placement`` and ``world`` is
        ``pre_articulation @ articulation``. Each stack entry carries its own
        parent transform, so siblings all start from the same matrix.
        """
        if self._root is None:
            return
        stack: List[Tuple[int, NDArray[np.float64]]] = [(self._root, np.eye(4))]
        while stack:
            handle, parent_world = stack.pop()
            joint = self._joints[handle]
            pre = parent_world @ joint.placement
            world = pre @ joint.articulation
            yield handle, pre, world
            for child in reversed(self._children[joint.child_body]):
                stack.append((child, world))

    def propagate_pose(self) -> None:
        """Update every end effector's ``global_position`` from the current angles."""
        for handle, _, world in self._traverse():
            effector = self._joints[handle].end_effector
            if effector is not None:
                effector.global_position = transform_point(world, effector.local_offset)

    def end_effector_position(self, name: str) -> NDArray[np.float64]:
        """Propagate the pose and return the named end effector's (3,) world position."""
        effector = self.get_end_effector(name)
        self.propagate_pose()
        return effector.global_position.copy()

    def pose_snapshot(self) -> PoseSnapshot:
        """Immutable per-joint world transforms and shape handles for a renderer."""
        poses = []
        for handle, _, world in self._traverse():
            joint = self._joints[handle]
            body = self._bodies[joint.child_body]
            poses.append(
                JointPose(
                    joint=joint.name,
                    body=body.name,
                    shape_ref=body.shape_ref,
                    world_transform=world,
                    shape_transform=world @ body.local_transform,
                )
            )
        return PoseSnapshot(theta=self._theta, joints=tuple(poses))

    # ------------------------------------------------------------------
    # Jacobian
    # ------------------------------------------------------------------

    def jacobian(
        self,
        end_effector: str,
        epsilon: float = 1e-3,
        method: str = "numeric",
    ) -> NDArray[np.float64]:
        """Position Jacobian of an end effector with respect to ``theta``.

        The numeric method costs one pose propagation per degree of freedom
        and leaves ``theta`` exactly as it found it. The analytic method
        assumes rigid placements (rotation plus translation, no scale).

        Args:
            end_effector: End-effector name.
            epsilon: Forward-difference step (numeric method only).
            method: "numeric" (forward differences) or "analytic".

        Returns:
            (3, dof) Jacobian matrix.
        """
        if method == "numeric":
            if not epsilon > 0:
                raise ValueError(f"epsilon must be positive, got {epsilon}")
            return self._numeric_jacobian(end_effector, epsilon)
        if method == "analytic":
            return self._analytic_jacobian(end_effector)
        raise ValueError(f"method must be 'numeric' or 'analytic', got '{method}'")

    def _numeric_jacobian(self, name: str, epsilon: float) -> NDArray[np.float64]:
        # Forward differences: one full propagation per column.
        original = self.theta
        base = self.end_effector_position(name)
        J = np.zeros((3, self.dof))
        try:
            for i in range(self.dof):
                perturbed = original.copy()
                perturbed[i] += epsilon
                self.apply(perturbed)
                J[:, i] = (self.end_effector_position(name) - base) / epsilon
        finally:
            self.apply(original)
            self.propagate_pose()
        return J

    def _analytic_jacobian(self, name: str) -> NDArray[np.float64]:
        effector = self.get_end_effector(name)
        owner = self._effectors[name]
        ancestors = set()
        handle: Optional[int] = owner
        while handle is not None:
            ancestors.add(handle)
            parent = self._joints[handle].parent_body
            handle = None if parent is None else self._incoming[parent]

        J = np.zeros((3, self.dof))
        frames = {h: pre for h, pre, _ in self._traverse() if h in ancestors}
        p = transform_point(frames[owner] @ self._joints[owner].articulation, effector.local_offset)

        for h in ancestors:
            joint = self._joints[h]
            span = self._layout[joint.name]
            angles = self._theta[span]
            pivot = frames[h][:3, 3]
            enabled = [axis for axis, on in enumerate(joint.enabled_axes) if on]
            # articulation = R_last ... R_first: the last enabled axis sees no
            # other rotation, each earlier one sees the rotations after it.
            M = frames[h]
            for k in reversed(range(len(enabled))):
                axis = enabled[k]
                direction = M[:3, :3] @ AXIS_VECTORS[axis]
                J[:, span.start + k] = np.cross(direction, p - pivot)
                M = M @ AXIS_ROTATIONS[axis](float(angles[k]))
        return J

    # ------------------------------------------------------------------
    # Inverse kinematics
    # ------------------------------------------------------------------

    def solve_ik(
        self,
        target: ArrayLike,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
        end_effector: Optional[str] = None,
        config: IKConfig | None = None,
    ) -> IKResult:
        """Drive an end effector toward ``target`` with damped least squares.

        ``max_iterations`` (default 100) and ``tolerance`` (default 0.01)
        override the matching fields of ``config`` when given. The chain is
        left at the reached pose; non-convergence is reported through
        :attr:`IKResult.success` and :attr:`IKResult.position_error`.
        """
        cfg = config or IKConfig()
        overrides = {}
        if max_iterations is not None:
            overrides["max_iterations"] = max_iterations
        if tolerance is not None:
            overrides["tolerance"] = tolerance
        if overrides:
            cfg = replace(cfg, **overrides)
        return IKSolver(self, cfg).solve(target, end_effector)
