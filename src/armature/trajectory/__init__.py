"""Trajectory module for armature: Hermite splines and spline following."""

from .follower import WaypointResult, follow_spline
from .hermite import HermiteSpline, hermite_basis

__all__ = [
    "HermiteSpline",
    "WaypointResult",
    "follow_spline",
    "hermite_basis",
]
