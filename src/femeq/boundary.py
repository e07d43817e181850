from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .datastructures import Mesh, is_robin_tag


def get_dirichlet_nodes(mesh: Mesh) -> NDArray[np.int64]:
    """Get all Dirichlet node indices (0-based), i.e. nodes without a DOF."""
    return np.flatnonzero(mesh.node2DOF <= 0)


def get_robin_edges(mesh: Mesh) -> NDArray[np.int64]:
    """Get indices of the edges carrying Robin/Neumann data."""
    return np.flatnonzero(is_robin_tag(mesh.edgesT))


def _get_edge_coords(
    edge_ids: NDArray[np.int64],
    mesh: Mesh,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Get edge endpoint coordinates, each (n, 2)."""
    edge_ids = np.asarray(edge_ids, dtype=np.int64)
    i = mesh.edges[edge_ids, 0]
    j = mesh.edges[edge_ids, 1]
    return mesh.nodes[i], mesh.nodes[j]


def get_edge_half_lengths(
    mesh: Mesh,
    edge_ids: NDArray[np.int64],
) -> NDArray[np.float64]:
    """Half the length of each edge."""
    start, end = _get_edge_coords(edge_ids, mesh)
    return np.linalg.norm(end - start, axis=1) / 2


def get_edge_gauss_points(
    mesh: Mesh,
    edge_ids: NDArray[np.int64],
) -> NDArray[np.float64]:
    """2-point Gauss points of each edge, shape (2*n, 2) ordered p1, p2 per edge."""
    start, end = _get_edge_coords(edge_ids, mesh)
    if len(start) == 0:
        return np.empty((0, 2))

    mid = (start + end) / 2
    step = (end - start) / (2 * np.sqrt(3))

    # Pre-allocate result (faster than column_stack)
    points = np.empty((len(start), 2, 2), dtype=np.float64)
    points[:, 0] = mid - step
    points[:, 1] = mid + step
    return points.reshape(-1, 2)
