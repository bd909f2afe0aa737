"""
Sparse linear solvers built on the cotangent Laplacian.

* ``implicit_smoothing``: one backward Euler step of Laplace-Beltrami
  diffusion, ``(M + dt L) X = M X0``.
* ``minimal_surface``: harmonic interpolation of the boundary, with boundary
  vertices pinned to their rest positions.

Numerical failure (non-finite coefficients, singular factorization, non-finite
solution) never raises: it is returned as a ``SolveReport`` and the mesh keeps
its previous positions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import splu

from .halfedge import HalfedgeMesh
from .weights import calc_weights, vertex_areas

logger = logging.getLogger(__name__)

# smallest pivot magnitude accepted, relative to the largest one
PIVOT_TOLERANCE = 1e-12


@dataclass(frozen=True)
class SolveReport:
    """Outcome of a sparse solve."""

    success: bool
    message: str = ""
    residual: float = float("nan")
    surface_area: Optional[float] = None

    def __bool__(self) -> bool:
        return self.success


def _assemble(n, rows, cols, data) -> sparse.csc_matrix:
    # duplicate (row, col) triplets are summed
    A = sparse.coo_matrix((data, (rows, cols)), shape=(n, n))
    return A.tocsc()


def _factorize_and_solve(A: sparse.csc_matrix, B: np.ndarray, symmetric: bool) -> Tuple[Optional[np.ndarray], str]:
    if not np.all(np.isfinite(A.data)) or not np.all(np.isfinite(B)):
        return None, "linear system has non-finite coefficients (degenerate triangles?)"

    try:
        if symmetric:
            lu = splu(A, permc_spec="MMD_AT_PLUS_A", diag_pivot_thresh=0.0,
                      options=dict(SymmetricMode=True))
        else:
            lu = splu(A)
    except RuntimeError as exc:
        return None, f"linear solver init failed: {exc}"

    # a singular system can factor without error and return a spurious solution
    pivots = np.abs(lu.U.diagonal())
    if pivots.size and pivots.min() <= PIVOT_TOLERANCE * pivots.max():
        return None, "linear solver init failed: matrix is numerically singular"

    if symmetric:
        X = lu.solve(B)
    else:
        X = np.column_stack([lu.solve(B[:, dim]) for dim in range(B.shape[1])])

    if not np.all(np.isfinite(X)):
        return None, "linear solver failed: solution is not finite"
    return X, "ok"


def _residual(A, X, B) -> float:
    if B.size == 0:
        return 0.0
    return float(np.max(np.abs(A @ X - B)))


def implicit_smoothing(mesh: HalfedgeMesh, timestep: float) -> SolveReport:
    """
    Backward Euler diffusion step with the cotangent Laplacian.

    Row ``i`` of the system reads::

        (1/vw_i + dt * sum_j w_ij) x_i - dt * sum_j w_ij x_j = x0_i / vw_i

    No boundary condition is imposed. Vertices without area (isolated
    vertices) get an identity row and keep their position.

    Args:
        mesh: halfedge mesh, modified in place on success
        timestep: diffusion time step (>= 0); 0 is the identity

    Returns:
        SolveReport
    """
    if timestep < 0:
        raise ValueError(f"timestep must be non-negative, got {timestep}")

    n = mesh.n_vertices
    weights = calc_weights(mesh)
    halfedge_weights = weights.edge[np.arange(mesh.n_halfedges) >> 1]
    origins = mesh.halfedge_origins

    has_mass = weights.vertex > 0
    mass = np.ones(n)
    mass[has_mass] = 1.0 / weights.vertex[has_mass]

    active = has_mass[origins]
    weight_sums = np.zeros(n)
    np.add.at(weight_sums, origins[active], halfedge_weights[active])

    diagonal = np.where(has_mass, mass + timestep * weight_sums, 1.0)
    rows = np.concatenate([origins[active], np.arange(n)])
    cols = np.concatenate([mesh.to_vertex[active], np.arange(n)])
    data = np.concatenate([-timestep * halfedge_weights[active], diagonal])
    A = _assemble(n, rows, cols, data)

    B = mesh.points * np.where(has_mass, mass, 1.0)[:, None]
    logger.debug("implicit smoothing: %d x %d system, %d non-zeros, dt=%g", n, n, A.nnz, timestep)

    X, message = _factorize_and_solve(A, B, symmetric=True)
    if X is None:
        logger.warning("implicit smoothing skipped: %s", message)
        return SolveReport(success=False, message=message)

    mesh.points[:] = X
    return SolveReport(success=True, message=message, residual=_residual(A, X, B))


def minimal_surface(mesh: HalfedgeMesh, rest: HalfedgeMesh) -> SolveReport:
    """
    Minimal surface spanned by the boundary of ``rest``.

    Boundary rows pin each boundary vertex to its position in ``rest``;
    interior rows are the un-normalized cotangent Laplacian with zero
    right-hand side. The system is not symmetric, so a general sparse LU is
    used, one solve per coordinate.

    A closed component has no pinned row and makes the system singular; the
    solve is then reported as failed and the mesh is left as it was.

    Args:
        mesh: halfedge mesh, modified in place on success
        rest: rest configuration with the same connectivity

    Returns:
        SolveReport carrying the surface area of ``mesh`` before the solve
    """
    n = mesh.n_vertices
    if rest.n_vertices != n:
        raise ValueError(
            f"rest mesh has {rest.n_vertices} vertices, expected {n}"
        )

    weights = calc_weights(mesh)
    area_sum = float(vertex_areas(mesh).sum())
    logger.info("Sum of area: %g", area_sum)

    boundary = mesh.boundary_vertex_mask()
    if not boundary.any():
        message = "no boundary vertices: Dirichlet system is singular"
        logger.warning("minimal surface skipped: %s", message)
        return SolveReport(success=False, message=message, surface_area=area_sum)

    halfedge_weights = weights.edge[np.arange(mesh.n_halfedges) >> 1]
    origins = mesh.halfedge_origins
    active = ~boundary[origins]

    weight_sums = np.zeros(n)
    np.add.at(weight_sums, origins[active], halfedge_weights[active])
    diagonal = np.where(boundary, 1.0, weight_sums)

    rows = np.concatenate([origins[active], np.arange(n)])
    cols = np.concatenate([mesh.to_vertex[active], np.arange(n)])
    data = np.concatenate([-halfedge_weights[active], diagonal])
    L = _assemble(n, rows, cols, data)

    rhs = np.zeros((n, 3))
    rhs[boundary] = rest.points[boundary]
    logger.debug("minimal surface: %d boundary / %d vertices", int(boundary.sum()), n)

    X, message = _factorize_and_solve(L, rhs, symmetric=False)
    if X is None:
        logger.warning("minimal surface skipped: %s", message)
        return SolveReport(success=False, message=message, surface_area=area_sum)

    mesh.points[:] = X
    return SolveReport(success=True, message=message, residual=_residual(L, X, rhs),
                       surface_area=area_sum)
