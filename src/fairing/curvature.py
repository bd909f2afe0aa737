"""
Per-vertex curvature estimators on halfedge meshes.

All estimators return one value per vertex and assign 0 to boundary vertices,
where the one-ring does not close.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .halfedge import HalfedgeMesh
from .weights import Weights, calc_weights


def _edge_vectors(mesh: HalfedgeMesh) -> np.ndarray:
    """(2E, 3) vector from the origin to the target of every halfedge."""
    pts = mesh.points
    return pts[mesh.to_vertex] - pts[mesh.halfedge_origins]


def uniform_laplacian(mesh: HalfedgeMesh) -> np.ndarray:
    """
    Umbrella operator: mean of ``p_j - p_i`` over the one-ring of each vertex.

    Isolated vertices get a zero vector.
    """
    lap = np.zeros((mesh.n_vertices, 3))
    np.add.at(lap, mesh.halfedge_origins, _edge_vectors(mesh))
    valence = calc_valence(mesh)
    has_ring = valence > 0
    lap[has_ring] /= valence[has_ring, None]
    return lap


def cotan_laplacian(mesh: HalfedgeMesh, edge_weights: np.ndarray) -> np.ndarray:
    """Un-normalized cotangent Laplacian ``sum w(e) (p_j - p_i)`` per vertex."""
    lap = np.zeros((mesh.n_vertices, 3))
    w = edge_weights[np.arange(mesh.n_halfedges) >> 1]
    np.add.at(lap, mesh.halfedge_origins, w[:, None] * _edge_vectors(mesh))
    return lap


def calc_valence(mesh: HalfedgeMesh) -> np.ndarray:
    """Number of one-ring neighbors of every vertex."""
    return np.bincount(mesh.halfedge_origins, minlength=mesh.n_vertices)


def calc_uniform_mean_curvature(mesh: HalfedgeMesh) -> np.ndarray:
    """
    Mean curvature from the uniform Laplacian.

    Args:
        mesh: halfedge mesh

    Returns:
        H: (N,) array, ``0.5 * |mean(p_j - p_i)|``, 0 on the boundary
    """
    curvature = 0.5 * np.linalg.norm(uniform_laplacian(mesh), axis=1)
    curvature[mesh.boundary_vertex_mask()] = 0.0
    return curvature


def calc_mean_curvature(mesh: HalfedgeMesh, weights: Optional[Weights] = None) -> np.ndarray:
    """
    Mean curvature from the cotangent Laplace-Beltrami operator.

    Args:
        mesh: halfedge mesh
        weights: precomputed weights for the current geometry; computed when
            omitted

    Returns:
        H: (N,) array, ``0.5 * |vertex_weight * sum w(e) (p_j - p_i)|``
    """
    if weights is None:
        weights = calc_weights(mesh)
    lap = cotan_laplacian(mesh, weights.edge) * weights.vertex[:, None]
    curvature = 0.5 * np.linalg.norm(lap, axis=1)
    curvature[mesh.boundary_vertex_mask()] = 0.0
    return curvature


def angle_sums(mesh: HalfedgeMesh) -> np.ndarray:
    """Sum of the angles between consecutive one-ring directions at each vertex."""
    pts = mesh.points
    origins = mesh.halfedge_origins
    rotated = mesh.prev ^ 1

    with np.errstate(divide="ignore", invalid="ignore"):
        d0 = pts[mesh.to_vertex] - pts[origins]
        d0 /= np.linalg.norm(d0, axis=1, keepdims=True)
        d1 = pts[mesh.to_vertex[rotated]] - pts[origins]
        d1 /= np.linalg.norm(d1, axis=1, keepdims=True)
    cos_angle = np.clip(np.sum(d0 * d1, axis=1), -1.0, 1.0)

    sums = np.zeros(mesh.n_vertices)
    np.add.at(sums, origins, np.arccos(cos_angle))
    return sums


def calc_gauss_curvature(mesh: HalfedgeMesh, weights: Optional[Weights] = None) -> np.ndarray:
    """
    Gaussian curvature from the angle defect.

    K = (2 pi - sum(theta)) * 2 * vertex_weight, i.e. the angle defect divided
    by the barycentric vertex area.
    """
    if weights is None:
        weights = calc_weights(mesh)
    curvature = (2.0 * np.pi - angle_sums(mesh)) * 2.0 * weights.vertex
    curvature[mesh.boundary_vertex_mask()] = 0.0
    return curvature
