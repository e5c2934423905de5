"""Exceptions raised by armature."""


class DimensionMismatchError(ValueError):
    """A joint-angle vector does not match the chain's degrees of freedom."""


class UnknownEndEffectorError(KeyError):
    """No joint in the chain owns an end effector with the requested name."""


class NumericalInstabilityError(ArithmeticError):
    """The damped IK system could not be solved to a finite update."""


class IndexOutOfRangeError(IndexError):
    """A spline control-point index is outside ``[0, size)``."""


class DegenerateCurveError(ValueError):
    """A spline has fewer than two control points and defines no curve."""


class SplineFormatError(ValueError):
    """Serialized spline text could not be parsed."""
