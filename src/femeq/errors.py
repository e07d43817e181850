"""Exceptions raised by the assembly routines.

All of them derive from ``ValueError`` so callers that only care about bad
input can catch that.
"""


class AssemblyError(ValueError):
    """Base class for every failure of an assembly call."""


class MeshError(AssemblyError):
    """Mesh arrays are inconsistent (bad shapes or node indices out of range)."""


class ShapeMismatchError(AssemblyError):
    """A coefficient does not provide one value per quadrature point."""


class DOFMapError(AssemblyError):
    """``node2DOF`` is not a valid renumbering onto ``1..nDOF``."""


class DegenerateElementError(AssemblyError):
    """An element has zero or negative area."""


class CoefficientError(AssemblyError):
    """A coefficient specification cannot be resolved."""
