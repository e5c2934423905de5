"""Piecewise cubic Hermite spline through control points with explicit tangents."""

import os
from logging import getLogger
from typing import List

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import DegenerateCurveError, IndexOutOfRangeError, SplineFormatError
from ..kinematics.transforms import as_vector3

logger = getLogger(__name__)

_ARC_LENGTH_SAMPLES = 1000


def hermite_basis(t: float) -> NDArray[np.float64]:
    """Return the cubic Hermite basis ``(h00, h10, h01, h11)`` at ``t``."""
    t2 = t * t
    t3 = t2 * t
    return np.array([
        2.0 * t3 - 3.0 * t2 + 1.0,
        t3 - 2.0 * t2 + t,
        -2.0 * t3 + 3.0 * t2,
        t3 - t2,
    ])


class HermiteSpline:
    """A cubic Hermite spline over ``size`` control points.

    Segment ``i`` joins ``points[i]`` to ``points[i + 1]`` with end tangents
    ``tangents[i]`` and ``tangents[i + 1]``; the global parameter ``t`` in
    ``[0, 1]`` is split evenly across the ``size - 1`` segments. The curve is
    C1 at segment boundaries only when the caller picks consistent tangents.

    Control points can be appended or replaced in place, never removed.
    """

    def __init__(self) -> None:
        self._points: List[NDArray[np.float64]] = []
        self._tangents: List[NDArray[np.float64]] = []

    def __len__(self) -> int:
        return len(self._points)

    @property
    def size(self) -> int:
        return len(self._points)

    @property
    def points(self) -> NDArray[np.float64]:
        """(size, 3) copy of the control points."""
        return np.array(self._points).reshape(-1, 3)

    @property
    def tangents(self) -> NDArray[np.float64]:
        """(size, 3) copy of the tangents."""
        return np.array(self._tangents).reshape(-1, 3)

    def add_point(self, position: ArrayLike, tangent: ArrayLike) -> None:
        self._points.append(as_vector3(position, "position"))
        self._tangents.append(as_vector3(tangent, "tangent"))

    def set_point(self, index: int, position: ArrayLike) -> None:
        self._check_index(index)
        self._points[index] = as_vector3(position, "position")

    def set_tangent(self, index: int, tangent: ArrayLike) -> None:
        self._check_index(index)
        self._tangents[index] = as_vector3(tangent, "tangent")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise IndexOutOfRangeError(
                f"Control point index {index} out of range for spline of size {self.size}"
            )

    def evaluate(self, t: float, strict: bool = False) -> NDArray[np.float64]:
        """Position on the curve at global parameter ``t``.

        ``t`` is clipped to ``[0, 1]``; ``t = 0`` gives the first control
        point and ``t = 1`` the last. ``nan`` raises :class:`ValueError`.

        With fewer than two control points there is no curve: the origin is
        returned, or :class:`DegenerateCurveError` is raised when ``strict``.
        """
        t = float(t)
        if np.isnan(t):
            raise ValueError(f"t must be a number in [0, 1], got {t}")
        if self.size < 2:
            if strict:
                raise DegenerateCurveError(
                    f"A spline needs at least 2 control points, has {self.size}"
                )
            return np.zeros(3)

        t = min(max(t, 0.0), 1.0)
        u = (self.size - 1) * t
        a = min(max(int(np.floor(u)), 0), self.size - 2)
        b = a + 1
        local_t = u - a

        h00, h10, h01, h11 = hermite_basis(local_t)
        return (
            h00 * self._points[a]
            + h10 * self._tangents[a]
            + h01 * self._points[b]
            + h11 * self._tangents[b]
        )

    def sample(self, count: int) -> NDArray[np.float64]:
        """Evaluate the curve at ``t = i / count`` for ``i`` in ``0..count``.

        Returns:
            (count + 1, 3) array of positions, e.g. for drawing as a line strip.
        """
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        return np.array([self.evaluate(i / count) for i in range(count + 1)])

    def arc_length(self, samples: int = _ARC_LENGTH_SAMPLES) -> float:
        """Approximate curve length as the length of a ``samples``-step polyline."""
        positions = self.sample(samples)
        return float(np.linalg.norm(np.diff(positions, axis=0), axis=1).sum())

    def serialize(self) -> str:
        """Encode the spline as text.

        Format::

            <n>
            <px py pz tx ty tz>    (one line per control point, in order)

        Floats are written with ``repr`` so :meth:`parse` restores them exactly.
        """
        lines = [f"{self.size}"]
        for point, tangent in zip(self._points, self._tangents):
            lines.append(" ".join(repr(float(v)) for v in (*point, *tangent)))
        return "\n".join(lines) + "\n"

    @classmethod
    def parse(cls, text: str) -> "HermiteSpline":
        """Rebuild a spline from :meth:`serialize` output."""
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            raise SplineFormatError("Empty spline text")
        try:
            count = int(lines[0].strip())
        except ValueError:
            raise SplineFormatError(f"Invalid control point count: '{lines[0]}'") from None
        rows = lines[1:]
        if len(rows) != count:
            raise SplineFormatError(f"Header declares {count} control points, found {len(rows)}")

        spline = cls()
        for lineno, row in enumerate(rows, start=2):
            fields = row.split()
            if len(fields) != 6:
                raise SplineFormatError(f"Line {lineno}: expected 6 numbers, got {len(fields)}")
            try:
                values = [float(f) for f in fields]
            except ValueError:
                raise SplineFormatError(f"Line {lineno}: non-numeric value in '{row}'") from None
            spline.add_point(values[:3], values[3:])
        return spline

    def save(self, file_path: str) -> None:
        """Write :meth:`serialize` output to ``file_path``."""
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)
        with open(file_path, "w") as f:
            f.write(self.serialize())
        logger.info(f"Spline with {self.size} control points saved to {file_path}")

    @classmethod
    def load(cls, file_path: str) -> "HermiteSpline":
        """Read a spline written by :meth:`save`."""
        with open(file_path) as f:
            spline = cls.parse(f.read())
        logger.info(f"Spline with {spline.size} control points loaded from {file_path}")
        return spline
