"""
Discrete Laplace-Beltrami weights.

Edge weights are the classic cotangent weights ``cot(alpha) + cot(beta)`` of
the two angles opposite an edge; vertex weights are the inverse of twice the
barycentric vertex area, ``1 / (2 * A(v))``.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass

import numpy as np

from .halfedge import INVALID, HalfedgeMesh


@dataclass(frozen=True)
class Weights:
    edge: np.ndarray    # (E,) cotangent weight per edge
    vertex: np.ndarray  # (N,) inverse-area weight per vertex


def halfedge_cotangents(mesh: HalfedgeMesh) -> np.ndarray:
    """
    Cotangent of the angle opposite each halfedge inside its face.

    For a halfedge with endpoints p0, p1 and third face vertex p2 the value is
    ``dot(d0, d1) / |cross(d0, d1)|`` with ``d0 = p0 - p2``, ``d1 = p1 - p2``.
    Boundary halfedges get 0.

    Returns:
        cot: (2E,) array
    """
    cot = np.zeros(mesh.n_halfedges)
    inner = np.flatnonzero(mesh.face != INVALID)
    if inner.size == 0:
        return cot

    pts = mesh.points
    p0 = pts[mesh.to_vertex[inner]]
    p1 = pts[mesh.halfedge_origins[inner]]
    p2 = pts[mesh.to_vertex[mesh.next[inner]]]
    d0 = p0 - p2
    d1 = p1 - p2

    with np.errstate(divide="ignore", invalid="ignore"):
        cot[inner] = np.sum(d0 * d1, axis=1) / np.linalg.norm(np.cross(d0, d1), axis=1)
    return cot


def calc_edges_weights(mesh: HalfedgeMesh) -> np.ndarray:
    """
    Cotangent weight of every edge.

    Degenerate (zero area) triangles yield infinite or NaN weights. They are
    kept as-is so that downstream solvers can detect and report them.

    Args:
        mesh: halfedge mesh

    Returns:
        weights: (E,) array, ``cot(alpha) + cot(beta)``
    """
    cot = halfedge_cotangents(mesh)
    weights = cot[0::2] + cot[1::2]

    bad = ~np.isfinite(weights)
    if bad.any():
        warnings.warn(
            f"{int(bad.sum())} edge weight(s) are not finite; the mesh contains degenerate triangles",
            RuntimeWarning,
            stacklevel=2,
        )
    return weights


def vertex_areas(mesh: HalfedgeMesh) -> np.ndarray:
    """Barycentric vertex area: one third of each incident triangle area."""
    areas = np.zeros(mesh.n_vertices)
    third = mesh.face_areas() / 3.0
    for i in range(3):
        np.add.at(areas, mesh.faces[:, i], third)
    return areas


def calc_vertices_weights(mesh: HalfedgeMesh) -> np.ndarray:
    """
    Inverse-area weight ``0.5 / A(v)`` of every vertex.

    Vertices without incident faces (or with zero total area) keep the
    default weight 0.
    """
    areas = vertex_areas(mesh)
    weights = np.zeros(mesh.n_vertices)
    valid = areas > 0
    weights[valid] = 0.5 / areas[valid]
    return weights


def calc_weights(mesh: HalfedgeMesh) -> Weights:
    """Edge weights followed by vertex weights for the current geometry."""
    return Weights(edge=calc_edges_weights(mesh), vertex=calc_vertices_weights(mesh))
