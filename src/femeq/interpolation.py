import numpy as np

from .boundary import get_dirichlet_nodes
from .coefficients import evaluate_boundary
from .datastructures import INTERPOLATION, Mesh
from .errors import DOFMapError, ShapeMismatchError


def nodal_values(mesh: Mesh, u: np.ndarray, gD=0.0) -> np.ndarray:
    """
    Expand a solution on the free DOFs to all mesh nodes.

    Parameters
    ----------
    mesh : Mesh
        Mesh the system was assembled on.
    u : ndarray (nDOF,)
        Values of the free degrees of freedom.
    gD : float, array or callable
        Dirichlet data, evaluated at the Dirichlet nodes.

    Returns
    -------
    u_nodal : ndarray (nNodes,)
    """
    u = np.asarray(u, dtype=np.float64).ravel()
    if len(u) != mesh.nDOF:
        raise DOFMapError(f"Got {len(u)} values for {mesh.nDOF} DOFs")

    u_nodal = np.empty(mesh.nonodes, dtype=np.float64)
    free = mesh.node2DOF > 0
    u_nodal[free] = u[mesh.node2DOF[free] - 1]

    fixed = get_dirichlet_nodes(mesh)
    u_nodal[fixed] = evaluate_boundary(gD, mesh.nodes, fixed)
    return u_nodal


def gauss_point_values(mesh: Mesh, u_nodal: np.ndarray) -> np.ndarray:
    """Evaluate the P1 interpolant of nodal values at the quadrature points.

    The result has shape (3, noelms) and can be passed to ``assemble`` as a
    volume coefficient.
    """
    u_nodal = np.asarray(u_nodal, dtype=np.float64).ravel()
    if len(u_nodal) != mesh.nonodes:
        raise ShapeMismatchError(f"Got {len(u_nodal)} values for {mesh.nonodes} nodes")
    return INTERPOLATION @ u_nodal[mesh.elem].T
