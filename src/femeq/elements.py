"""Local element and edge matrices for P1 triangles.

All kernels are compiled with numba so the assembly loops can call them,
and they stay callable from plain Python.
"""

import math

import numpy as np
from numba import njit

from .datastructures import INTERPOLATION

# Weight of the near node's basis function at a 2-point Gauss point
ALPHA = (1.0 - 1.0 / math.sqrt(3.0)) / 2.0


@njit
def element_gradients(cor):
    """
    Basis function gradients scaled by twice the element area.

    Parameters
    ----------
    cor : ndarray (3, 2)
        Corner coordinates.

    Returns
    -------
    G : ndarray (2, 3)
        Column i is 2*area*grad(phi_i).
    """
    G = np.empty((2, 3))
    G[0, 0] = cor[2, 1] - cor[1, 1]
    G[0, 1] = cor[0, 1] - cor[2, 1]
    G[0, 2] = cor[1, 1] - cor[0, 1]
    G[1, 0] = cor[1, 0] - cor[2, 0]
    G[1, 1] = cor[2, 0] - cor[0, 0]
    G[1, 2] = cor[0, 0] - cor[1, 0]
    return G


@njit
def element_matrix(cor, area, a_k, b_k):
    """
    Element matrix for -div(a grad u) + b u.

    mat = sum(a_k)/(12 area) G^T G + area/3 M diag(b_k) M

    Parameters
    ----------
    cor : ndarray (3, 2)
        Corner coordinates.
    area : float
        Element area.
    a_k, b_k : ndarray (3,)
        Coefficient values at the element's quadrature points.

    Returns
    -------
    mat : ndarray (3, 3)
    """
    G = element_gradients(cor)
    M = INTERPOLATION
    c_diff = np.sum(a_k) / (12.0 * area)
    c_mass = area / 3.0

    mat = np.empty((3, 3))
    for i in range(3):
        for j in range(3):
            diff = G[0, i] * G[0, j] + G[1, i] * G[1, j]
            mass = 0.0
            for q in range(3):
                mass += M[i, q] * b_k[q] * M[q, j]
            mat[i, j] = c_diff * diff + c_mass * mass
    return mat


@njit
def element_load(area, f_k):
    """Element load vector -area/3 M f_k."""
    M = INTERPOLATION
    vec = np.empty(3)
    for i in range(3):
        s = 0.0
        for q in range(3):
            s += M[i, q] * f_k[q]
        vec[i] = -area / 3.0 * s
    return vec


@njit
def edge_load(half_length, g):
    """Flux contribution L*W*g of an edge, g given at the two Gauss points."""
    vec = np.empty(2)
    vec[0] = half_length * ((1.0 - ALPHA) * g[0] + ALPHA * g[1])
    vec[1] = half_length * (ALPHA * g[0] + (1.0 - ALPHA) * g[1])
    return vec


@njit
def edge_matrix(half_length, g):
    """Robin block L*W*diag(g)*W with W = [[1-alpha, alpha], [alpha, 1-alpha]]."""
    W = np.empty((2, 2))
    W[0, 0] = 1.0 - ALPHA
    W[0, 1] = ALPHA
    W[1, 0] = ALPHA
    W[1, 1] = 1.0 - ALPHA

    B = np.empty((2, 2))
    for i in range(2):
        for j in range(2):
            B[i, j] = half_length * (W[i, 0] * g[0] * W[0, j] + W[i, 1] * g[1] * W[1, j])
    return B
