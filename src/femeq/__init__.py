"""femeq: P1 finite element assembly for 2D elliptic boundary value problems.

This package sets up the linear system for

    -div(a*grad u) + b*u = f            in the domain
                       u = gD           on Dirichlet edges
                 a*du/dn = gN1 + gN2*u  on Robin/Neumann edges

on a triangulated domain, with Dirichlet nodes eliminated into the load vector.

Main components:
- Mesh: triangulation, quadrature points and DOF renumbering
- assemble: global sparse matrix and load vector
- Constant, Array, Evaluator: coefficient specifications
- nodal_values, gauss_point_values: map solutions back to the mesh
"""

from .datastructures import (
    Mesh,
    INTERIOR,
    DIRICHLET,
    NEUMANN,
    INTERPOLATION,
    is_robin_tag,
)
from .coefficients import (
    Constant,
    Array,
    Evaluator,
    as_coefficient,
    evaluate_volume,
    evaluate_boundary,
)
from .assembly import assemble, build_matrix, check_mesh, check_dof_map
from .boundary import (
    get_dirichlet_nodes,
    get_robin_edges,
    get_edge_gauss_points,
    get_edge_half_lengths,
)
from .interpolation import nodal_values, gauss_point_values
from .errors import (
    AssemblyError,
    MeshError,
    ShapeMismatchError,
    DOFMapError,
    DegenerateElementError,
    CoefficientError,
)

__all__ = [
    # Mesh
    "Mesh",
    "INTERIOR",
    "DIRICHLET",
    "NEUMANN",
    "INTERPOLATION",
    "is_robin_tag",
    # Coefficients
    "Constant",
    "Array",
    "Evaluator",
    "as_coefficient",
    "evaluate_volume",
    "evaluate_boundary",
    # Assembly
    "assemble",
    "build_matrix",
    "check_mesh",
    "check_dof_map",
    # Boundary
    "get_dirichlet_nodes",
    "get_robin_edges",
    "get_edge_gauss_points",
    "get_edge_half_lengths",
    # Solutions
    "nodal_values",
    "gauss_point_values",
    # Errors
    "AssemblyError",
    "MeshError",
    "ShapeMismatchError",
    "DOFMapError",
    "DegenerateElementError",
    "CoefficientError",
]
