"""Coefficient specifications and their evaluation at quadrature points.

A coefficient is given as a number, an array of precomputed values, or a
function. Each is resolved once into one of the variants below before the
assembly loops start.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Number
from typing import Callable, Union

import numpy as np
from hydra.utils import get_method
from numpy.typing import ArrayLike, NDArray

from .datastructures import Mesh
from .errors import CoefficientError, ShapeMismatchError


@dataclass(frozen=True)
class Constant:
    value: float


@dataclass(frozen=True)
class Array:
    """Precomputed values, one per quadrature point."""

    values: NDArray[np.float64]


@dataclass(frozen=True)
class Evaluator:
    """Function of the points (and element tags for volume terms)."""

    func: Callable[..., ArrayLike]


Coefficient = Union[Constant, Array, Evaluator]


def as_coefficient(spec) -> Coefficient:
    """Resolve a number, array, callable or dotted function name."""
    if isinstance(spec, (Constant, Array, Evaluator)):
        return spec
    if isinstance(spec, Number):
        return Constant(float(spec))
    if isinstance(spec, str):
        try:
            return Evaluator(get_method(spec))
        except (ImportError, ValueError) as exc:
            raise CoefficientError(f"Cannot resolve coefficient function '{spec}'") from exc
    if callable(spec):
        return Evaluator(spec)

    values = np.asarray(spec, dtype=np.float64)
    if values.ndim == 0:
        return Constant(float(values))
    return Array(values)


def evaluate_volume(spec, mesh: Mesh) -> NDArray[np.float64]:
    """
    Values of a volume coefficient at every quadrature point.

    Returns
    -------
    values : ndarray (points_per_element, noelms)
        Column k holds the values at the points of element k.
    """
    coef = as_coefficient(spec)
    n_gp = len(mesh.GP)
    n_elem = mesh.noelms
    if n_elem == 0:
        shape = (mesh.points_per_element, 0)
    elif n_gp % n_elem != 0:
        raise ShapeMismatchError(
            f"{n_gp} quadrature points cannot be split evenly over {n_elem} elements"
        )
    else:
        shape = (n_gp // n_elem, n_elem)

    if isinstance(coef, Constant):
        return np.full(shape, coef.value, dtype=np.float64)
    if isinstance(coef, Evaluator):
        values = np.asarray(coef.func(mesh.GP, mesh.GPT), dtype=np.float64)
    else:
        values = coef.values
    return _reshape(values, shape)


def evaluate_boundary(
    spec,
    points: NDArray[np.float64],
    selected: NDArray[np.int64] | None = None,
) -> NDArray[np.float64]:
    """
    Values of a boundary coefficient at ``points[selected]``.

    Functions are only called at the selected points. An ``Array`` holds one
    value per row of ``points`` and is subset afterwards.
    """
    coef = as_coefficient(spec)
    if selected is None:
        selected = slice(None)
    if isinstance(coef, Array):
        return _reshape(coef.values, (len(points),))[selected]

    points = points[selected]
    n = len(points)
    if n == 0:
        return np.zeros(0, dtype=np.float64)
    if isinstance(coef, Constant):
        return np.full(n, coef.value, dtype=np.float64)
    values = np.asarray(coef.func(points), dtype=np.float64)
    return _reshape(values, (n,))


def _reshape(values: NDArray[np.float64], shape: tuple[int, ...]) -> NDArray[np.float64]:
    # Column-major, so a flat array lists the points of element 0 first
    try:
        out = np.reshape(values, shape, order="F")
    except ValueError as exc:
        raise ShapeMismatchError(
            f"Coefficient with {np.size(values)} values does not fit shape {shape}"
        ) from exc
    return np.ascontiguousarray(out, dtype=np.float64)
