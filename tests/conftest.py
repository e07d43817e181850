"""Shared meshes for the assembly tests."""

import numpy as np
import pytest

from femeq import DIRICHLET, INTERIOR, NEUMANN, Mesh

# Side order used by unit_square_mesh
BOTTOM, RIGHT, TOP, LEFT = 0, 1, 2, 3


def unit_square_mesh(n: int, side_tags=(INTERIOR, INTERIOR, INTERIOR, INTERIOR)) -> Mesh:
    """n x n squares on [0, 1]^2, each split into two counter-clockwise triangles.

    side_tags gives the edge tag of the (bottom, right, top, left) sides.
    """
    xs = np.linspace(0.0, 1.0, n + 1)
    X, Y = np.meshgrid(xs, xs, indexing="ij")
    nodes = np.column_stack([X.ravel(), Y.ravel()])

    def idx(i, j):
        return i * (n + 1) + j

    elem = []
    for i in range(n):
        for j in range(n):
            sw, se, ne, nw = idx(i, j), idx(i + 1, j), idx(i + 1, j + 1), idx(i, j + 1)
            elem.append([sw, se, ne])
            elem.append([sw, ne, nw])

    edges, tags = [], []
    for i in range(n):
        edges.append([idx(i, 0), idx(i + 1, 0)])
        tags.append(side_tags[BOTTOM])
    for j in range(n):
        edges.append([idx(n, j), idx(n, j + 1)])
        tags.append(side_tags[RIGHT])
    for i in range(n):
        edges.append([idx(i + 1, n), idx(i, n)])
        tags.append(side_tags[TOP])
    for j in range(n):
        edges.append([idx(0, j + 1), idx(0, j)])
        tags.append(side_tags[LEFT])

    return Mesh.from_arrays(nodes, np.array(elem), np.array(edges), np.array(tags))


@pytest.fixture
def right_triangle():
    """Single element (0,0), (1,0), (0,1) with all nodes free."""
    nodes = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    return Mesh.from_arrays(nodes, np.array([[0, 1, 2]]))


@pytest.fixture
def square_dirichlet():
    """4x4 unit square, Dirichlet on all sides."""
    return unit_square_mesh(4, (DIRICHLET,) * 4)


@pytest.fixture
def square_mixed():
    """4x4 unit square, Dirichlet left, Robin right, natural top and bottom."""
    return unit_square_mesh(4, (INTERIOR, NEUMANN, INTERIOR, DIRICHLET))


@pytest.fixture
def square_robin():
    """4x4 unit square with Robin/Neumann edges everywhere."""
    return unit_square_mesh(4, (NEUMANN,) * 4)
