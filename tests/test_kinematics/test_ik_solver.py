"""Tests for armature.kinematics.ik_solver."""

import logging

import numpy as np
import pytest

from armature.errors import NumericalInstabilityError, UnknownEndEffectorError
from armature.kinematics.chain import KinematicChain
from armature.kinematics.ik_solver import (
    IKConfig,
    IKResult,
    IKSolver,
    damped_least_squares_step,
)
from armature.kinematics.models import articulated_human
from armature.kinematics.transforms import translation


def _planar_2link_chain() -> KinematicChain:
    """Two z-axis joints, links of length 1, end effector at the tip."""
    chain = KinematicChain()
    upper = chain.add_body("upper")
    chain.add_joint("j0", None, upper, axes=(False, False, True))
    lower = chain.add_body("lower")
    chain.add_joint("j1", upper, lower, placement=translation(1.0, 0.0, 0.0), axes=(False, False, True))
    chain.add_end_effector("tip", "j1", (1.0, 0.0, 0.0))
    return chain


class TestDampedStep:
    def test_matches_normal_equations(self):
        rng = np.random.default_rng(0)
        J = rng.normal(size=(3, 7))
        dx = rng.normal(size=3)
        damping = 1e-4
        expected = np.linalg.solve(J.T @ J + damping * np.eye(7), J.T @ dx)
        np.testing.assert_allclose(damped_least_squares_step(J, dx, damping), expected)

    def test_square_full_rank_inverts_j(self):
        J = np.array([[2.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 3.0]])
        dx = np.array([0.1, -0.2, 0.3])
        dtheta = damped_least_squares_step(J, dx, 1e-10)
        np.testing.assert_allclose(J @ dtheta, dx, atol=1e-8)

    @pytest.mark.parametrize("dof", [1, 2, 3, 5, 7])
    def test_rank_deficient_system_is_solvable(self, dof):
        # More unknowns than equations: J^T J is singular, the damped system is not.
        J = np.zeros((3, dof))
        J[0, 0] = 1.0
        dtheta = damped_least_squares_step(J, np.array([0.5, 0.5, 0.5]), 1e-4)
        assert dtheta.shape == (dof,)
        assert np.all(np.isfinite(dtheta))

    def test_zero_jacobian_gives_zero_step(self):
        dtheta = damped_least_squares_step(np.zeros((3, 4)), np.ones(3), 1e-4)
        np.testing.assert_array_equal(dtheta, np.zeros(4))

    def test_zero_dof(self):
        assert damped_least_squares_step(np.zeros((3, 0)), np.ones(3), 1e-4).shape == (0,)

    @pytest.mark.parametrize("damping", [0.0, -1e-4])
    def test_damping_must_be_positive(self, damping):
        with pytest.raises(ValueError, match="damping"):
            damped_least_squares_step(np.eye(3), np.ones(3), damping)

    def test_damping_too_small_for_scale(self):
        J = np.array([[1.0, 0.0], [0.0, 0.0], [0.0, 0.0]])
        with pytest.raises(NumericalInstabilityError, match="ill-conditioned"):
            damped_least_squares_step(J, np.ones(3), 1e-30)

    def test_non_finite_system(self):
        J = np.full((3, 2), 1e200)
        with pytest.raises(NumericalInstabilityError, match="non-finite"):
            damped_least_squares_step(J, np.ones(3), 1e-4)

    def test_instability_is_arithmetic_error(self):
        with pytest.raises(ArithmeticError):
            damped_least_squares_step(np.array([[np.nan], [0.0], [0.0]]), np.ones(3), 1e-4)


class TestIKConfig:
    def test_defaults(self):
        cfg = IKConfig()
        assert cfg.max_iterations == 100
        assert cfg.tolerance == 0.01
        assert cfg.damping == 1e-4
        assert cfg.epsilon == 1e-3

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"damping": 0.0}, "damping"),
            ({"epsilon": -1.0}, "epsilon"),
            ({"tolerance": 0.0}, "tolerance"),
            ({"step_scale": 1.5}, "step_scale"),
            ({"max_iterations": -1}, "max_iterations"),
            ({"jacobian_method": "central"}, "jacobian_method"),
        ],
    )
    def test_invalid(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            IKConfig(**kwargs)


class TestIKSolverPlanar:
    def test_reachable_target(self):
        chain = _planar_2link_chain()
        chain.apply([0.3, 0.6])
        target = np.array([1.2, 0.9, 0.0])
        result = chain.solve_ik(target)
        assert result.success
        assert result.position_error < 0.01
        np.testing.assert_allclose(chain.end_effector_position("tip"), target, atol=0.01)

    def test_already_at_target(self):
        chain = _planar_2link_chain()
        result = chain.solve_ik([2.0, 0.0, 0.0])
        assert result.success
        assert result.iterations == 1
        assert result.position_error == 0.0

    def test_result_identity_equality(self):
        chain = _planar_2link_chain()
        result = chain.solve_ik([2.0, 0.0, 0.0])
        assert result == result
        assert result != chain.solve_ik([2.0, 0.0, 0.0])

    def test_unreachable_target(self):
        chain = _planar_2link_chain()
        chain.apply([0.2, 0.4])
        result = chain.solve_ik([10.0, 0.0, 0.0], max_iterations=25)
        assert isinstance(result, IKResult)
        assert not result.success
        assert result.iterations == 25
        assert result.position_error > 0.01
        assert np.all(np.isfinite(result.theta))

    def test_non_convergence_is_logged(self, caplog):
        chain = _planar_2link_chain()
        with caplog.at_level(logging.DEBUG, logger="armature.kinematics.ik_solver"):
            chain.solve_ik([10.0, 0.0, 0.0], max_iterations=3)
        assert "did not converge" in caplog.text


class TestIKSolverHuman:
    """IK tests on the 7-DOF right arm."""

    def test_roundtrip(self):
        """FK -> IK -> FK should recover the target position."""
        chain = articulated_human()
        solver = IKSolver(chain, IKConfig(max_iterations=200))
        rng = np.random.default_rng(42)

        for _ in range(5):
            q_target = rng.uniform(-0.8, 0.8, size=chain.dof)
            chain.apply(q_target)
            target = chain.end_effector_position("right_hand")
            chain.apply(q_target + rng.normal(0, 0.1, size=chain.dof))

            result = solver.solve(target)
            assert result.success
            np.testing.assert_allclose(
                chain.end_effector_position("right_hand"),
                target,
                atol=0.01,
                err_msg="Position mismatch in FK->IK->FK roundtrip",
            )

    def test_analytic_jacobian_roundtrip(self):
        chain = articulated_human()
        chain.apply([0.2, -0.3, 0.4, 0.1, 0.5, 0.2, -0.3])
        target = chain.end_effector_position("right_hand")
        chain.apply([0.25, -0.25, 0.3, 0.15, 0.45, 0.1, -0.2])
        result = chain.solve_ik(target, config=IKConfig(jacobian_method="analytic"))
        assert result.success
        assert result.position_error < 0.01

    def test_result_matches_chain_state(self):
        chain = articulated_human()
        chain.apply([0.1, 0.2, 0.1, 0.2, 0.3, 0.0, 0.0])
        result = chain.solve_ik([4.5, 7.5, -1.0])
        np.testing.assert_array_equal(result.theta, chain.theta)
        assert result.end_effector == "right_hand"

    def test_unreachable_target_terminates(self):
        chain = articulated_human()
        chain.apply([0.1, 0.2, 0.1, 0.2, 0.3, 0.1, 0.1])
        result = chain.solve_ik([100.0, 0.0, 0.0], max_iterations=20)
        assert not result.success
        assert result.iterations == 20
        assert result.position_error > 0.01

    def test_overrides_keep_config_fields(self):
        chain = articulated_human()
        cfg = IKConfig(max_iterations=7, tolerance=0.5)
        result = chain.solve_ik([100.0, 0.0, 0.0], config=cfg)
        assert result.iterations == 7
        result = chain.solve_ik([100.0, 0.0, 0.0], max_iterations=2, config=cfg)
        assert result.iterations == 2


class TestEndEffectorResolution:
    def test_no_end_effector(self):
        chain = KinematicChain()
        body = chain.add_body("b")
        chain.add_joint("root", None, body, axes=(True, False, False))
        with pytest.raises(UnknownEndEffectorError):
            chain.solve_ik([0.0, 0.0, 0.0])

    def test_ambiguous_end_effector(self):
        chain = _planar_2link_chain()
        chain.add_end_effector("elbow", "j0", (1.0, 0.0, 0.0))
        with pytest.raises(ValueError, match="pass one by name"):
            chain.solve_ik([1.0, 1.0, 0.0])
        result = chain.solve_ik([0.0, 1.0, 0.0], end_effector="elbow")
        assert result.end_effector == "elbow"
        assert result.success

    def test_unknown_name(self):
        with pytest.raises(UnknownEndEffectorError):
            articulated_human().solve_ik([0.0, 0.0, 0.0], end_effector="left_hand")
