"""
Procedural triangle meshes.

Small, well-conditioned surfaces used to exercise the operators: a closed
icosphere, a flat disk and grid with boundary, a cube and the two-triangle
unit quad. All builders return ``(verts, faces)`` arrays with consistently
oriented faces.
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np


def unit_quad() -> Tuple[np.ndarray, np.ndarray]:
    """Unit square in the xy-plane split along the (0,0)-(1,1) diagonal."""
    verts = np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
        ]
    )
    faces = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int64)
    return verts, faces


def cube() -> Tuple[np.ndarray, np.ndarray]:
    """Triangulated unit cube surface: 8 vertices, 12 outward-facing triangles."""
    verts = np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 1.0],
            [1.0, 1.0, 1.0],
            [0.0, 1.0, 1.0],
        ]
    )
    faces = np.array(
        [
            # bottom (z=0)
            [0, 2, 1],
            [0, 3, 2],
            # top (z=1)
            [4, 5, 6],
            [4, 6, 7],
            # front (y=0)
            [0, 1, 5],
            [0, 5, 4],
            # back (y=1)
            [3, 6, 2],
            [3, 7, 6],
            # left (x=0)
            [0, 7, 3],
            [0, 4, 7],
            # right (x=1)
            [1, 2, 6],
            [1, 6, 5],
        ],
        dtype=np.int64,
    )
    return verts, faces


def _icosahedron() -> Tuple[np.ndarray, np.ndarray]:
    t = (1.0 + np.sqrt(5.0)) / 2.0
    verts = np.array(
        [
            [-1, t, 0], [1, t, 0], [-1, -t, 0], [1, -t, 0],
            [0, -1, t], [0, 1, t], [0, -1, -t], [0, 1, -t],
            [t, 0, -1], [t, 0, 1], [-t, 0, -1], [-t, 0, 1],
        ],
        dtype=np.float64,
    )
    faces = np.array(
        [
            [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
            [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
            [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
            [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
        ],
        dtype=np.int64,
    )
    return verts / np.linalg.norm(verts, axis=1, keepdims=True), faces


def icosphere(subdivisions: int = 2, radius: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sphere made by subdividing an icosahedron and projecting onto the sphere.

    Each subdivision level quadruples the triangle count (20 * 4**subdivisions).

    Args:
        subdivisions: number of midpoint subdivision levels (>= 0)
        radius: sphere radius (> 0)
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    if subdivisions < 0:
        raise ValueError(f"subdivisions must be non-negative, got {subdivisions}")

    verts, faces = _icosahedron()
    points = list(verts)

    for _ in range(subdivisions):
        midpoint_cache: Dict[Tuple[int, int], int] = {}

        def midpoint(a: int, b: int) -> int:
            key = (a, b) if a < b else (b, a)
            idx = midpoint_cache.get(key)
            if idx is None:
                p = points[a] + points[b]
                points.append(p / np.linalg.norm(p))
                idx = len(points) - 1
                midpoint_cache[key] = idx
            return idx

        new_faces = []
        for a, b, c in faces.tolist():
            ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
            new_faces.extend([[a, ab, ca], [b, bc, ab], [c, ca, bc], [ab, bc, ca]])
        faces = np.array(new_faces, dtype=np.int64)

    return np.array(points) * radius, faces


def disk(radius: float = 1.0, n_radial: int = 6, n_angular: int = 24) -> Tuple[np.ndarray, np.ndarray]:
    """
    Flat disk in the xy-plane: a center vertex and ``n_radial`` rings.

    The outermost ring is the only boundary loop.
    """
    if n_radial < 1:
        raise ValueError(f"n_radial must be at least 1, got {n_radial}")
    if n_angular < 3:
        raise ValueError(f"n_angular must be at least 3, got {n_angular}")

    r = radius * np.arange(1, n_radial + 1) / n_radial
    theta = np.linspace(0.0, 2.0 * np.pi, n_angular, endpoint=False)
    R, THETA = np.meshgrid(r, theta, indexing="ij")
    ring_points = np.stack([R * np.cos(THETA), R * np.sin(THETA), np.zeros_like(R)], axis=-1).reshape(-1, 3)
    verts = np.vstack([np.zeros((1, 3)), ring_points])

    j = np.arange(n_angular)
    next_j = (j + 1) % n_angular
    parts = [np.stack([np.zeros(n_angular, dtype=np.int64), 1 + j, 1 + next_j], axis=1)]

    if n_radial > 1:
        ii, jj = np.meshgrid(np.arange(n_radial - 1), j, indexing="ij")
        ii = ii.ravel()
        jj = jj.ravel()
        inner = 1 + ii * n_angular + jj
        inner_next = 1 + ii * n_angular + (jj + 1) % n_angular
        outer = 1 + (ii + 1) * n_angular + jj
        outer_next = 1 + (ii + 1) * n_angular + (jj + 1) % n_angular
        parts.append(np.stack([inner, outer, inner_next], axis=1))
        parts.append(np.stack([inner_next, outer, outer_next], axis=1))

    return verts, np.concatenate(parts).astype(np.int64)


def grid(n: int = 4, size: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """Square ``n x n`` cell grid in the xy-plane, each cell split in two triangles."""
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")
    xs = np.linspace(0.0, size, n + 1)
    X, Y = np.meshgrid(xs, xs, indexing="xy")
    verts = np.stack([X.ravel(), Y.ravel(), np.zeros(X.size)], axis=1)

    row, col = np.meshgrid(np.arange(n), np.arange(n), indexing="ij")
    v00 = (row * (n + 1) + col).ravel()
    v10 = v00 + 1
    v01 = v00 + n + 1
    v11 = v01 + 1
    faces = np.concatenate([np.stack([v00, v10, v11], axis=1), np.stack([v00, v11, v01], axis=1)])
    return verts, faces.astype(np.int64)
