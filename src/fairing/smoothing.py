"""
Explicit Laplacian smoothing and feature enhancement.

Every iteration is a Jacobi update: new positions are computed from the
positions of the previous iteration only, and written back once the whole
vertex pass is done. Boundary vertices never move.
"""

from __future__ import annotations

import logging

import numpy as np

from .curvature import cotan_laplacian, uniform_laplacian
from .halfedge import HalfedgeMesh
from .weights import calc_edges_weights

logger = logging.getLogger(__name__)

DEFAULT_DAMPING = 0.5


def _check_iterations(iterations):
    if int(iterations) != iterations or iterations < 0:
        raise ValueError(f"iterations must be a non-negative integer, got {iterations!r}")
    return int(iterations)


def uniform_smooth(mesh: HalfedgeMesh, iterations: int, damping: float = DEFAULT_DAMPING) -> np.ndarray:
    """
    Uniform Laplacian smoothing.

    Args:
        mesh: halfedge mesh, modified in place
        iterations: number of smoothing passes
        damping: fraction of the umbrella vector applied per pass

    Returns:
        points: the (N, 3) position array of ``mesh``
    """
    iterations = _check_iterations(iterations)
    fixed = mesh.boundary_vertex_mask()

    for _ in range(iterations):
        laplace = uniform_laplacian(mesh) * damping
        laplace[fixed] = 0.0
        new_points = mesh.points + laplace
        mesh.points[:] = new_points

    logger.debug("uniform smoothing: %d iteration(s) on %d vertices", iterations, mesh.n_vertices)
    return mesh.points


def smooth(mesh: HalfedgeMesh, iterations: int, damping: float = DEFAULT_DAMPING) -> np.ndarray:
    """
    Cotangent-weighted Laplacian smoothing.

    Edge weights depend on the geometry and are recomputed every pass. The
    displacement of a vertex is ``sum w (p_j - p_i) / sum w``; a vertex whose
    weights sum to exactly zero stays in place.

    Args:
        mesh: halfedge mesh, modified in place
        iterations: number of smoothing passes
        damping: fraction of the normalized Laplacian applied per pass

    Returns:
        points: the (N, 3) position array of ``mesh``
    """
    iterations = _check_iterations(iterations)
    fixed = mesh.boundary_vertex_mask()
    halfedge_edges = np.arange(mesh.n_halfedges) >> 1

    for _ in range(iterations):
        edge_weights = calc_edges_weights(mesh)
        laplace = cotan_laplacian(mesh, edge_weights)

        weight_sums = np.zeros(mesh.n_vertices)
        np.add.at(weight_sums, mesh.halfedge_origins, edge_weights[halfedge_edges])

        movable = ~fixed & (weight_sums != 0)
        displacement = np.zeros_like(laplace)
        displacement[movable] = laplace[movable] / weight_sums[movable, None] * damping

        new_points = mesh.points + displacement
        mesh.points[:] = new_points

    logger.debug("cotangent smoothing: %d iteration(s) on %d vertices", iterations, mesh.n_vertices)
    return mesh.points


def _enhance(mesh, iterations, coefficient, smoother, damping):
    old_points = mesh.points.copy()
    smoother(mesh, iterations, damping=damping)
    mesh.points += coefficient * (old_points - mesh.points)
    return mesh.points


def uniform_laplacian_enhance_feature(mesh: HalfedgeMesh, iterations: int, coefficient: float,
                                      damping: float = DEFAULT_DAMPING) -> np.ndarray:
    """
    Amplify high-frequency detail using uniform smoothing as the low-pass base.

    The result is ``smoothed + coefficient * (original - smoothed)``:
    coefficient 0 gives the smoothed mesh, 1 restores the original and values
    above 1 sharpen.
    """
    return _enhance(mesh, iterations, coefficient, uniform_smooth, damping)


def laplace_beltrami_enhance_feature(mesh: HalfedgeMesh, iterations: int, coefficient: float,
                                     damping: float = DEFAULT_DAMPING) -> np.ndarray:
    """Same as :func:`uniform_laplacian_enhance_feature` with cotangent smoothing."""
    return _enhance(mesh, iterations, coefficient, smooth, damping)
