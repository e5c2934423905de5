"""Homogeneous transformation utilities using only numpy."""

import numpy as np
from numpy.typing import ArrayLike, NDArray


def rot_x(theta: float) -> NDArray[np.float64]:
    """4x4 rotation matrix about X-axis. theta in radians."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, c, -s, 0.0],
        [0.0, s, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rot_y(theta: float) -> NDArray[np.float64]:
    """4x4 rotation matrix about Y-axis. theta in radians."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([
        [c, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rot_z(theta: float) -> NDArray[np.float64]:
    """4x4 rotation matrix about Z-axis. theta in radians."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


# Index order matches Joint.enabled_axes: (x, y, z).
AXIS_ROTATIONS = (rot_x, rot_y, rot_z)
AXIS_VECTORS = np.eye(3)


def translation(x: float, y: float, z: float) -> NDArray[np.float64]:
    """4x4 pure translation matrix."""
    T = np.eye(4)
    T[0, 3] = x
    T[1, 3] = y
    T[2, 3] = z
    return T


def scale(sx: float, sy: float, sz: float) -> NDArray[np.float64]:
    """4x4 axis-aligned scale matrix."""
    return np.diag([sx, sy, sz, 1.0])


def as_transform(matrix: ArrayLike, what: str = "transform") -> NDArray[np.float64]:
    """Copy ``matrix`` into a float64 4x4 array, rejecting any other shape."""
    T = np.array(matrix, dtype=np.float64)
    if T.shape != (4, 4):
        raise ValueError(f"{what} must be a 4x4 matrix, got shape {T.shape}")
    return T


def as_vector3(values: ArrayLike, what: str = "vector") -> NDArray[np.float64]:
    """Copy ``values`` into a float64 (3,) array, rejecting any other shape."""
    v = np.array(values, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"{what} must have 3 components, got shape {v.shape}")
    return v


def transform_point(T: NDArray[np.float64], point: NDArray[np.float64]) -> NDArray[np.float64]:
    """Apply a 4x4 homogeneous transform to a 3D point."""
    return T[:3, :3] @ point + T[:3, 3]
