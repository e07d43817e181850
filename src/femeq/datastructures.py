from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    import meshio

# Edge tags
INTERIOR = 0
DIRICHLET = -1
NEUMANN = -2

# Element configuration (P1 triangles, 3-point rule)
N_LOCAL_NODES = 3
N_GAUSS_POINTS = 3

# Maps corner values to the values at the three quadrature points
INTERPOLATION = np.array([[4.0, 1.0, 1.0], [1.0, 4.0, 1.0], [1.0, 1.0, 4.0]]) / 6.0


def is_robin_tag(tag) -> NDArray[np.bool_]:
    """Edge tags below -1 mark a Robin/Neumann edge."""
    return np.asarray(tag) < DIRICHLET


@dataclass
class Mesh:
    """2D triangular mesh with the DOF renumbering used for assembly.

    Node, element and edge indices are 0-based. ``node2DOF`` is 1-based:
    ``node2DOF[i] = k > 0`` means node ``i`` carries unknown ``k``, any value
    ``<= 0`` marks a Dirichlet node.
    """

    nodes: NDArray[np.float64]
    elem: NDArray[np.int64]
    elemArea: NDArray[np.float64]
    edges: NDArray[np.int64]
    edgesT: NDArray[np.int64]
    GP: NDArray[np.float64]
    GPT: NDArray[np.int64]
    node2DOF: NDArray[np.int64]
    nDOF: int
    elemT: NDArray[np.int64] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.nodes = np.asarray(self.nodes, dtype=np.float64).reshape(-1, 2)
        self.elem = np.asarray(self.elem, dtype=np.int64).reshape(-1, N_LOCAL_NODES)
        self.elemArea = np.asarray(self.elemArea, dtype=np.float64).ravel()
        self.edges = np.asarray(self.edges, dtype=np.int64).reshape(-1, 2)
        self.edgesT = np.asarray(self.edgesT, dtype=np.int64).ravel()
        self.GP = np.asarray(self.GP, dtype=np.float64).reshape(-1, 2)
        self.GPT = np.asarray(self.GPT).ravel()
        self.node2DOF = np.asarray(self.node2DOF, dtype=np.int64).ravel()
        self.nDOF = int(self.nDOF)
        if self.elemT is None:
            self.elemT = np.zeros(len(self.elem), dtype=np.int64)

    @property
    def noelms(self) -> int:
        return len(self.elem)

    @property
    def nonodes(self) -> int:
        return len(self.nodes)

    @property
    def noedges(self) -> int:
        return len(self.edges)

    @property
    def points_per_element(self) -> int:
        if self.noelms == 0:
            return N_GAUSS_POINTS
        return len(self.GP) // self.noelms

    @property
    def element_coords(self) -> NDArray[np.float64]:
        """Corner coordinates of all elements, shape (noelms, 3, 2)."""
        return self.nodes[self.elem]

    @classmethod
    def from_arrays(
        cls,
        nodes: NDArray[np.float64],
        elem: NDArray[np.int64],
        edges: NDArray[np.int64] | None = None,
        edgesT: NDArray[np.int64] | None = None,
        elemT: NDArray[np.int64] | None = None,
    ) -> Mesh:
        """
        Build a mesh from nodes, triangles and tagged edges.

        Parameters
        ----------
        nodes : (nNodes, 2) array
            Vertex coordinates.
        elem : (nElem, 3) array
            Triangles as 0-based node indices.
        edges : (nEdges, 2) array, optional
            Boundary candidate edges as 0-based node indices.
        edgesT : (nEdges,) array, optional
            Edge tags, ``DIRICHLET`` edges fix their nodes, tags below -1
            are Robin/Neumann edges. Defaults to ``INTERIOR``.
        elemT : (nElem,) array, optional
            Element (region) tags passed on to coefficient functions.

        Returns
        -------
        Mesh
            Mesh with areas, quadrature points and DOF map computed.
        """
        nodes = np.asarray(nodes, dtype=np.float64).reshape(-1, 2)
        elem = np.asarray(elem, dtype=np.int64).reshape(-1, N_LOCAL_NODES)
        if edges is None:
            edges = np.empty((0, 2), dtype=np.int64)
        edges = np.asarray(edges, dtype=np.int64).reshape(-1, 2)
        if edgesT is None:
            edgesT = np.full(len(edges), INTERIOR, dtype=np.int64)
        edgesT = np.asarray(edgesT, dtype=np.int64).ravel()
        if len(edgesT) != len(edges):
            raise ValueError(
                f"Got {len(edgesT)} edge tags for {len(edges)} edges"
            )
        if elemT is None:
            elemT = np.zeros(len(elem), dtype=np.int64)
        elemT = np.asarray(elemT, dtype=np.int64).ravel()

        cor = nodes[elem]  # (nElem, 3, 2)
        x1, y1 = cor[:, 0, 0], cor[:, 0, 1]
        x2, y2 = cor[:, 1, 0], cor[:, 1, 1]
        x3, y3 = cor[:, 2, 0], cor[:, 2, 1]
        elemArea = 0.5 * np.abs((x2 - x1) * (y3 - y1) - (x3 - x1) * (y2 - y1))

        # Three points per element, grouped by element
        GP = np.einsum("ij,ejd->eid", INTERPOLATION, cor).reshape(-1, 2)
        GPT = np.repeat(elemT, N_GAUSS_POINTS)

        node2DOF, nDOF = _number_dofs(len(nodes), edges, edgesT)

        return cls(
            nodes=nodes,
            elem=elem,
            elemArea=elemArea,
            edges=edges,
            edgesT=edgesT,
            GP=GP,
            GPT=GPT,
            node2DOF=node2DOF,
            nDOF=nDOF,
            elemT=elemT,
        )

    @classmethod
    def from_meshio(
        cls,
        mesh: meshio.Mesh | str | Path,
        dirichlet: Iterable[int] = (),
        neumann: Iterable[int] = (),
    ) -> Mesh:
        """
        Create a Mesh from a meshio mesh or mesh file.

        Parameters
        ----------
        mesh : meshio.Mesh or str or Path
            Either a meshio Mesh object or path to a mesh file.
        dirichlet : iterable of int
            Physical tags of line cells carrying Dirichlet data.
        neumann : iterable of int
            Physical tags of line cells carrying Robin/Neumann data.

        Returns
        -------
        Mesh
            The mesh object with all computed properties.
        """
        import meshio as mio

        if isinstance(mesh, (str, Path)):
            mesh = mio.read(mesh)

        points = mesh.points[:, :2].astype(np.float64)

        # gmsh gives one triangle block per surface, keep all of them
        elem_list = []
        elemT_list = []
        for i, cell_block in enumerate(mesh.cells):
            if cell_block.type == "triangle":
                elem_list.append(cell_block.data.astype(np.int64))
                elemT_list.append(_physical_tags(mesh, i, len(cell_block.data)))

        if not elem_list:
            raise ValueError("No triangle cells found in mesh")
        elem = np.concatenate(elem_list)
        elemT = np.concatenate(elemT_list)

        edges_list = []
        tags_list = []
        dirichlet = set(int(t) for t in dirichlet)
        neumann = set(int(t) for t in neumann)
        for i, cell_block in enumerate(mesh.cells):
            if cell_block.type != "line":
                continue
            physical = _physical_tags(mesh, i, len(cell_block.data))
            edge_tags = np.full(len(physical), INTERIOR, dtype=np.int64)
            edge_tags[np.isin(physical, list(neumann))] = NEUMANN
            # Dirichlet wins if a tag is listed twice
            edge_tags[np.isin(physical, list(dirichlet))] = DIRICHLET
            edges_list.append(cell_block.data.astype(np.int64))
            tags_list.append(edge_tags)

        if edges_list:
            edges = np.concatenate(edges_list)
            edgesT = np.concatenate(tags_list)
        else:
            edges = np.empty((0, 2), dtype=np.int64)
            edgesT = np.empty(0, dtype=np.int64)

        return cls.from_arrays(points, elem, edges, edgesT, elemT)


def _number_dofs(
    nonodes: int,
    edges: NDArray[np.int64],
    edgesT: NDArray[np.int64],
) -> tuple[NDArray[np.int64], int]:
    """Nodes on Dirichlet edges get 0, the rest 1..nDOF in node order."""
    fixed = np.zeros(nonodes, dtype=bool)
    fixed[edges[edgesT == DIRICHLET].ravel()] = True

    node2DOF = np.zeros(nonodes, dtype=np.int64)
    nDOF = int(np.count_nonzero(~fixed))
    node2DOF[~fixed] = np.arange(1, nDOF + 1)
    return node2DOF, nDOF


def _physical_tags(mesh: meshio.Mesh, block: int, n: int) -> NDArray[np.int64]:
    """gmsh physical tags of one cell block, zeros if the file has none."""
    data = mesh.cell_data.get("gmsh:physical")
    if data is None:
        return np.zeros(n, dtype=np.int64)
    return np.asarray(data[block], dtype=np.int64).ravel()
