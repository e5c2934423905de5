"""Tests for armature.kinematics.transforms."""

import numpy as np
import pytest

from armature.kinematics.transforms import (
    as_transform,
    as_vector3,
    rot_x,
    rot_y,
    rot_z,
    scale,
    transform_point,
    translation,
)


class TestRotationMatrices:
    """Basic properties of rotation matrices."""

    @pytest.mark.parametrize("rot_fn", [rot_x, rot_y, rot_z])
    def test_identity_at_zero(self, rot_fn):
        np.testing.assert_allclose(rot_fn(0.0), np.eye(4), atol=1e-15)

    @pytest.mark.parametrize("rot_fn", [rot_x, rot_y, rot_z])
    def test_orthonormal(self, rot_fn):
        R = rot_fn(0.7)[:3, :3]
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-14)
        assert abs(np.linalg.det(R) - 1.0) < 1e-14

    def test_rot_x_90(self):
        T = rot_x(np.pi / 2)
        np.testing.assert_allclose(T[:3, :3] @ [0, 1, 0], [0, 0, 1], atol=1e-14)

    def test_rot_y_90(self):
        T = rot_y(np.pi / 2)
        np.testing.assert_allclose(T[:3, :3] @ [1, 0, 0], [0, 0, -1], atol=1e-14)

    def test_rot_z_90(self):
        T = rot_z(np.pi / 2)
        np.testing.assert_allclose(T[:3, :3] @ [1, 0, 0], [0, 1, 0], atol=1e-14)


class TestTranslationAndScale:
    def test_translation(self):
        T = translation(1.0, 2.0, 3.0)
        np.testing.assert_allclose(T[:3, 3], [1.0, 2.0, 3.0])
        np.testing.assert_allclose(T[:3, :3], np.eye(3))

    def test_scale_then_translate(self):
        T = translation(1.0, 0.0, 0.0) @ scale(2.0, 3.0, 4.0)
        np.testing.assert_allclose(transform_point(T, np.array([1.0, 1.0, 1.0])), [3.0, 3.0, 4.0])

    def test_transform_point_rotation(self):
        T = translation(0.0, 0.0, 1.0) @ rot_z(np.pi / 2)
        np.testing.assert_allclose(
            transform_point(T, np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 1.0], atol=1e-14
        )


class TestShapeChecks:
    def test_as_transform_rejects_3x3(self):
        with pytest.raises(ValueError, match="4x4"):
            as_transform(np.eye(3))

    def test_as_transform_copies(self):
        src = np.eye(4)
        T = as_transform(src)
        T[0, 3] = 5.0
        assert src[0, 3] == 0.0

    def test_as_vector3_rejects_wrong_length(self):
        with pytest.raises(ValueError, match="3 components"):
            as_vector3([1.0, 2.0])
