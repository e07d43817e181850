"""Assembly of the P1 system for

    -div(a grad u) + b u = f      in the domain
                       u = gD     on Dirichlet edges
                 a du/dn = gN1 + gN2 u   on Robin/Neumann edges

Dirichlet nodes are eliminated while assembling, their values are moved to
the load vector. The assembled pair satisfies ``gMat @ u + gVec = 0`` for the
vector ``u`` of free nodal values.
"""

from __future__ import annotations

import logging

import numpy as np
from numba import njit
from numpy.typing import NDArray
from scipy.sparse import csr_matrix

from .boundary import (
    get_dirichlet_nodes,
    get_edge_gauss_points,
    get_edge_half_lengths,
    get_robin_edges,
)
from .coefficients import evaluate_boundary, evaluate_volume
from .datastructures import N_GAUSS_POINTS, Mesh
from .elements import edge_load, edge_matrix, element_load, element_matrix
from .errors import DegenerateElementError, DOFMapError, MeshError, ShapeMismatchError

log = logging.getLogger(__name__)


@njit
def _assemble_elements_core(nodes, elem, elem_area, node2dof, aV, bV, fV, gD_nodes, n_dof):
    """
    Element loop: local matrices scattered as (row, col, value) triplets.

    Rows of Dirichlet nodes are skipped, couplings to Dirichlet nodes go
    into the load vector. Triplet indices are 0-based DOFs.
    """
    n_elem = elem.shape[0]

    # At most a full 3x3 block per element
    rows = np.empty(9 * n_elem, dtype=np.int64)
    cols = np.empty(9 * n_elem, dtype=np.int64)
    vals = np.empty(9 * n_elem, dtype=np.float64)
    vec = np.zeros(n_dof)
    cor = np.empty((3, 2))

    ptr = 0
    for k in range(n_elem):
        for i in range(3):
            cor[i, 0] = nodes[elem[k, i], 0]
            cor[i, 1] = nodes[elem[k, i], 1]

        area = elem_area[k]
        mat = element_matrix(cor, area, aV[:, k], bV[:, k])
        load = element_load(area, fV[:, k])

        for k1 in range(3):
            d1 = node2dof[elem[k, k1]]
            if d1 <= 0:
                continue
            vec[d1 - 1] += load[k1]
            for k2 in range(3):
                d2 = node2dof[elem[k, k2]]
                if d2 > 0:
                    rows[ptr] = d1 - 1
                    cols[ptr] = d2 - 1
                    vals[ptr] = mat[k1, k2]
                    ptr += 1
                else:
                    vec[d1 - 1] += mat[k1, k2] * gD_nodes[elem[k, k2]]

    return rows[:ptr], cols[:ptr], vals[:ptr], vec


@njit
def _assemble_edges_core(edges, robin, half_lengths, node2dof, gN1V, gN2V, gD_nodes, vec):
    """
    Robin/Neumann edge loop.

    Updates ``vec`` in place and returns the edge matrix entries as extra
    triplets (already negated). Edges with two Dirichlet ends are skipped.
    """
    n_robin = robin.shape[0]

    rows = np.empty(4 * n_robin, dtype=np.int64)
    cols = np.empty(4 * n_robin, dtype=np.int64)
    vals = np.empty(4 * n_robin, dtype=np.float64)
    dofs = np.empty(2, dtype=np.int64)

    ptr = 0
    for i in range(n_robin):
        n1 = edges[robin[i], 0]
        n2 = edges[robin[i], 1]
        half_length = half_lengths[i]

        ev = edge_load(half_length, gN1V[i])
        B = edge_matrix(half_length, gN2V[i])

        dofs[0] = node2dof[n1]
        dofs[1] = node2dof[n2]
        if dofs[0] > 0 and dofs[1] > 0:
            for a in range(2):
                vec[dofs[a] - 1] -= ev[a]
                for c in range(2):
                    rows[ptr] = dofs[a] - 1
                    cols[ptr] = dofs[c] - 1
                    vals[ptr] = -B[a, c]
                    ptr += 1
        elif dofs[0] > 0:
            vec[dofs[0] - 1] -= ev[0] + B[0, 1] * gD_nodes[n2]
            rows[ptr] = dofs[0] - 1
            cols[ptr] = dofs[0] - 1
            vals[ptr] = -B[0, 0]
            ptr += 1
        elif dofs[1] > 0:
            vec[dofs[1] - 1] -= ev[1] + B[1, 0] * gD_nodes[n1]
            rows[ptr] = dofs[1] - 1
            cols[ptr] = dofs[1] - 1
            vals[ptr] = -B[1, 1]
            ptr += 1

    return rows[:ptr], cols[:ptr], vals[:ptr]


def build_matrix(
    rows: NDArray[np.int64],
    cols: NDArray[np.int64],
    vals: NDArray[np.float64],
    n_dof: int,
) -> csr_matrix:
    """Sum (row, col, value) triplets (0-based) into an n_dof x n_dof CSR matrix."""
    return csr_matrix((vals, (rows, cols)), shape=(n_dof, n_dof))


def check_mesh(mesh: Mesh) -> None:
    """Raise if the mesh cannot be assembled. Nothing is modified."""
    if len(mesh.elemArea) != mesh.noelms:
        raise MeshError(
            f"Got {len(mesh.elemArea)} element areas for {mesh.noelms} elements"
        )
    if len(mesh.edgesT) != mesh.noedges:
        raise MeshError(f"Got {len(mesh.edgesT)} edge tags for {mesh.noedges} edges")
    for name, idx in (("elem", mesh.elem), ("edges", mesh.edges)):
        if idx.size and (idx.min() < 0 or idx.max() >= mesh.nonodes):
            raise MeshError(
                f"{name} refers to nodes outside 0..{mesh.nonodes - 1}: "
                f"min={idx.min()}, max={idx.max()}"
            )

    bad = np.flatnonzero(~(mesh.elemArea > 0.0) | ~np.isfinite(mesh.elemArea))
    if len(bad):
        raise DegenerateElementError(
            f"{len(bad)} element(s) with non-positive area, first {bad[:5].tolist()}: "
            f"area={mesh.elemArea[bad[:5]].tolist()}"
        )

    check_dof_map(mesh.node2DOF, mesh.nDOF, mesh.nonodes)


def check_dof_map(node2DOF: NDArray[np.int64], nDOF: int, nonodes: int) -> None:
    """The positive entries of node2DOF must be exactly {1, ..., nDOF}."""
    if node2DOF.shape != (nonodes,):
        raise DOFMapError(
            f"node2DOF has shape {node2DOF.shape}, expected ({nonodes},)"
        )
    if nDOF < 0:
        raise DOFMapError(f"Negative number of DOFs: {nDOF}")

    free = np.unique(node2DOF[node2DOF > 0])
    if len(free) and free[-1] > nDOF:
        raise DOFMapError(f"node2DOF uses DOF {free[-1]} but nDOF={nDOF}")
    if len(free) != nDOF:
        missing = np.setdiff1d(np.arange(1, nDOF + 1), free)
        raise DOFMapError(
            f"DOFs {missing[:5].tolist()} are not used by any node ({len(missing)} unused)"
        )


def assemble(
    mesh: Mesh,
    a=1.0,
    b=0.0,
    f=0.0,
    gD=0.0,
    gN1=0.0,
    gN2=0.0,
) -> tuple[csr_matrix, NDArray[np.float64], NDArray[np.int64]]:
    """
    Assemble the linear system on the free degrees of freedom.

    Parameters
    ----------
    mesh : Mesh
        Triangulation with quadrature points and DOF map.
    a, b, f : float, array or callable
        Volume coefficients. Arrays hold one value per quadrature point,
        callables are called as ``func(mesh.GP, mesh.GPT)``.
    gD, gN1, gN2 : float, array or callable
        Boundary data. Callables are called as ``func(points)`` with
        points of shape (n, 2). A ``gD`` array holds one value per node,
        ``gN1``/``gN2`` arrays one value per Gauss point of every edge
        (two per edge, in edge order).

    Returns
    -------
    gMat : csr_matrix (nDOF, nDOF)
    gVec : ndarray (nDOF,)
        The discrete problem is ``gMat @ u + gVec = 0``.
    n2d : ndarray (nNodes,)
        The DOF map ``mesh.node2DOF``, 0 marks a Dirichlet node.
    """
    check_mesh(mesh)

    aV = evaluate_volume(a, mesh)
    bV = evaluate_volume(b, mesh)
    fV = evaluate_volume(f, mesh)
    if aV.shape[0] != N_GAUSS_POINTS:
        raise ShapeMismatchError(
            f"Elements need {N_GAUSS_POINTS} quadrature points, mesh has {aV.shape[0]}"
        )

    # Dirichlet data once for all fixed nodes
    fixed = get_dirichlet_nodes(mesh)
    gD_nodes = np.zeros(mesh.nonodes, dtype=np.float64)
    gD_nodes[fixed] = evaluate_boundary(gD, mesh.nodes, fixed)

    rows, cols, vals, gVec = _assemble_elements_core(
        mesh.nodes, mesh.elem, mesh.elemArea, mesh.node2DOF,
        aV, bV, fV, gD_nodes, mesh.nDOF,
    )
    log.debug(f"Element pass: {mesh.noelms} elements, {len(vals)} triplets")

    # Flux data once for all Gauss points of the Robin/Neumann edges
    robin = get_robin_edges(mesh)
    gauss_points = get_edge_gauss_points(mesh, np.arange(mesh.noedges))
    point_ids = np.column_stack([2 * robin, 2 * robin + 1]).ravel()
    gN1V = evaluate_boundary(gN1, gauss_points, point_ids).reshape(-1, 2)
    gN2V = evaluate_boundary(gN2, gauss_points, point_ids).reshape(-1, 2)

    e_rows, e_cols, e_vals = _assemble_edges_core(
        mesh.edges, robin, get_edge_half_lengths(mesh, robin), mesh.node2DOF,
        gN1V, gN2V, gD_nodes, gVec,
    )
    log.debug(f"Edge pass: {len(robin)} Robin/Neumann edges, {len(e_vals)} triplets")

    gMat = build_matrix(
        np.concatenate([rows, e_rows]),
        np.concatenate([cols, e_cols]),
        np.concatenate([vals, e_vals]),
        mesh.nDOF,
    )
    log.info(
        f"Assembled {mesh.nDOF}x{mesh.nDOF} system "
        f"({mesh.noelms} elements, {len(fixed)} Dirichlet nodes, nnz={gMat.nnz})"
    )
    return gMat, gVec, mesh.node2DOF
