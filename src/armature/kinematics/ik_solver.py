"""Damped least-squares inverse kinematics solver (numpy only)."""

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import NumericalInstabilityError
from .transforms import as_vector3

if TYPE_CHECKING:
    from .chain import KinematicChain

logger = getLogger(__name__)

_JACOBIAN_METHODS = ("numeric", "analytic")


@dataclass
class IKConfig:
    """Configuration for the IK solver.

    Attributes:
        max_iterations: Maximum solver iterations.
        tolerance: Convergence threshold for the end-effector position error,
            in the chain's length units.
        damping: Damping factor lambda added to the diagonal of J^T J.
            Must be strictly positive.
        epsilon: Perturbation used by the forward-difference Jacobian (radians).
        step_scale: Scale factor for each iteration step (0 < step_scale <= 1).
        jacobian_method: "numeric" (forward differences) or "analytic".
        max_condition: Largest accepted condition number of the damped system.
    """

    max_iterations: int = 100
    tolerance: float = 0.01
    damping: float = 1e-4
    epsilon: float = 1e-3
    step_scale: float = 1.0
    jacobian_method: str = "numeric"
    max_condition: float = 1e12

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.damping <= 0:
            raise ValueError(f"damping must be positive, got {self.damping}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if not 0 < self.step_scale <= 1:
            raise ValueError(f"step_scale must be in (0, 1], got {self.step_scale}")
        if self.jacobian_method not in _JACOBIAN_METHODS:
            raise ValueError(
                f"jacobian_method must be one of {_JACOBIAN_METHODS}, "
                f"got '{self.jacobian_method}'"
            )


@dataclass(eq=False)
class IKResult:
    """Result from the IK solver.

    Attributes:
        theta: (dof,) joint angles reached, in radians.
        success: Whether the solver converged within tolerance.
        iterations: Number of iterations used.
        position_error: Final Euclidean distance between end effector and target.
        end_effector: Name of the end effector that was driven.
    """

    theta: NDArray[np.float64]
    success: bool
    iterations: int
    position_error: float
    end_effector: str


def damped_least_squares_step(
    J: NDArray[np.float64],
    dx: NDArray[np.float64],
    damping: float,
    max_condition: float = 1e12,
) -> NDArray[np.float64]:
    """Solve ``dtheta = (J^T J + lambda I)^{-1} J^T dx``.

    ``J^T J`` is symmetric positive semi-definite, so adding ``lambda I`` with
    ``lambda > 0`` makes the system positive definite and invertible. When
    lambda is too small for the scale of ``J`` the system is still
    ill-conditioned in floating point; that case is reported instead of
    letting NaN or huge updates escape.

    Args:
        J: (3, dof) Jacobian.
        dx: (3,) task-space error.
        damping: lambda, strictly positive.
        max_condition: Largest accepted condition number of ``J^T J + lambda I``.

    Returns:
        (dof,) joint-angle update.

    Raises:
        NumericalInstabilityError: If the damped system cannot be solved to a
            finite update.
    """
    if damping <= 0:
        raise ValueError(f"damping must be positive, got {damping}")

    J = np.asarray(J, dtype=np.float64)
    dx = np.asarray(dx, dtype=np.float64).reshape(-1)
    dof = J.shape[1]
    if dof == 0:
        return np.zeros(0)

    JTJ = J.T @ J  # (dof, dof)
    damped = JTJ + damping * np.eye(dof)
    if not np.all(np.isfinite(damped)):
        raise NumericalInstabilityError("Damped normal matrix contains non-finite entries")

    cond = float(np.linalg.cond(damped))
    if not np.isfinite(cond) or cond > max_condition:
        raise NumericalInstabilityError(
            f"Damped normal matrix is ill-conditioned (cond={cond:.3e}, "
            f"damping={damping:.3e}); increase damping"
        )

    try:
        dtheta = np.linalg.solve(damped, J.T @ dx)
    except np.linalg.LinAlgError as e:
        raise NumericalInstabilityError(f"Damped solve failed: {e}") from e

    if not np.all(np.isfinite(dtheta)):
        raise NumericalInstabilityError("Damped solve produced a non-finite update")
    return dtheta


class IKSolver:
    """Damped Least-Squares (Levenberg-Marquardt style) IK solver.

    Uses the formulation::

        dtheta = (J^T J + lambda I)^{-1} J^T dx

    where *J* is the 3 x dof position Jacobian of one end effector and *dx*
    the position error. The dof x dof system is solved with
    ``np.linalg.solve``.

    The solver drives the chain in place: on return the chain holds the
    reached pose, whether or not it converged.
    """

    def __init__(self, chain: "KinematicChain", config: IKConfig | None = None) -> None:
        self._chain = chain
        self._config = config or IKConfig()

    @property
    def config(self) -> IKConfig:
        return self._config

    def solve(self, target: ArrayLike, end_effector: Optional[str] = None) -> IKResult:
        """Drive an end effector toward a target position.

        Args:
            target: (3,) target position in world space.
            end_effector: Name of the end effector to drive. Defaults to the
                chain's only end effector.

        Returns:
            IKResult with the reached angles and convergence information.
        """
        cfg = self._config
        chain = self._chain
        name = chain.resolve_end_effector(end_effector)
        target_pos = as_vector3(target, "target")

        for iteration in range(cfg.max_iterations):
            current = chain.end_effector_position(name)
            dx = target_pos - current
            err = float(np.linalg.norm(dx))

            if err < cfg.tolerance:
                return IKResult(
                    theta=chain.theta,
                    success=True,
                    iterations=iteration + 1,
                    position_error=err,
                    end_effector=name,
                )

            J = chain.jacobian(name, epsilon=cfg.epsilon, method=cfg.jacobian_method)
            dtheta = damped_least_squares_step(J, dx, cfg.damping, cfg.max_condition)
            chain.apply(chain.theta + cfg.step_scale * dtheta)

        err = float(np.linalg.norm(target_pos - chain.end_effector_position(name)))
        success = err < cfg.tolerance
        if not success:
            logger.debug(
                "IK did not converge after %d iterations. Position error: %.6f",
                cfg.max_iterations,
                err,
            )

        return IKResult(
            theta=chain.theta,
            success=success,
            iterations=cfg.max_iterations,
            position_error=err,
            end_effector=name,
        )
