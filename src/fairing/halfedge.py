"""
Halfedge mesh topology for manifold triangle surfaces.

Every undirected edge ``e`` is stored as the two halfedges ``2e`` and
``2e + 1``, so the opposite of a halfedge is ``h ^ 1``. Halfedges without an
incident face (``face == -1``) are boundary halfedges; they are linked into
boundary loops so that rotating around a boundary vertex visits its whole
triangle fan.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Tuple

import numpy as np

INVALID = -1


class PropertyStore:
    """Typed per-element side tables keyed by the element index.

    Each property is a numpy array whose first axis runs over the elements
    (vertices, edges or faces). The dtype and trailing shape are fixed when
    the property is created, so two unrelated computations cannot silently
    reuse the same column with a different meaning.
    """

    def __init__(self, size: int):
        self._size = size
        self._columns: Dict[str, np.ndarray] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._columns

    def __len__(self) -> int:
        return len(self._columns)

    def names(self) -> List[str]:
        return list(self._columns)

    def add(self, name: str, default=0.0, shape: Tuple[int, ...] = (), dtype=np.float64) -> np.ndarray:
        """Create a property filled with ``default`` or return the existing one."""
        dtype = np.dtype(dtype)
        full_shape = (self._size,) + tuple(shape)
        existing = self._columns.get(name)
        if existing is not None:
            if existing.dtype != dtype or existing.shape != full_shape:
                raise TypeError(
                    f"property '{name}' already exists with dtype {existing.dtype} "
                    f"and shape {existing.shape}"
                )
            return existing
        column = np.empty(full_shape, dtype=dtype)
        column[...] = default
        self._columns[name] = column
        return column

    def get(self, name: str) -> np.ndarray:
        try:
            return self._columns[name]
        except KeyError:
            raise KeyError(f"no property named '{name}'") from None

    def remove(self, name: str) -> None:
        self._columns.pop(name, None)

    def clear(self) -> None:
        self._columns.clear()

    def copy(self) -> "PropertyStore":
        other = PropertyStore(self._size)
        other._columns = {k: v.copy() for k, v in self._columns.items()}
        return other


class HalfedgeMesh:
    """
    Manifold (possibly bounded) triangle mesh with halfedge connectivity.

    Args:
        points: (N, 3) vertex positions
        faces: (M, 3) vertex indices per triangle, consistently oriented

    Raises:
        ValueError: if the input is empty, not a triangle list, references
            missing vertices or is not an oriented 2-manifold with boundary.
    """

    def __init__(self, points, faces):
        points = np.array(points, dtype=np.float64)
        faces = np.asarray(faces)
        if faces.size == 0:
            faces = np.zeros((0, 3), dtype=np.int64)

        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError("points must be shaped (N, 3)")
        if points.shape[0] == 0:
            raise ValueError("mesh has no vertices")
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise ValueError("faces must be shaped (M, 3); only triangles are supported")
        faces = faces.astype(np.int64)
        if faces.size and (faces.min() < 0 or faces.max() >= points.shape[0]):
            raise ValueError("faces reference vertices outside of the point array")
        if np.any((faces[:, 0] == faces[:, 1]) | (faces[:, 1] == faces[:, 2]) | (faces[:, 2] == faces[:, 0])):
            raise ValueError("faces must reference three distinct vertices")

        self.points = points
        self.faces = faces
        self._build_connectivity()

        self.vertex_props = PropertyStore(self.n_vertices)
        self.edge_props = PropertyStore(self.n_edges)
        self.face_props = PropertyStore(self.n_faces)

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------

    def _build_connectivity(self) -> None:
        num_verts = self.points.shape[0]
        edge_index: Dict[Tuple[int, int], int] = {}
        to_vertex: List[int] = []
        face_of: List[int] = []
        face_halfedges = np.empty((self.faces.shape[0], 3), dtype=np.int64)

        for f, tri in enumerate(self.faces.tolist()):
            for k in range(3):
                u, v = tri[k], tri[(k + 1) % 3]
                key = (u, v) if u < v else (v, u)
                e = edge_index.get(key)
                if e is None:
                    e = len(to_vertex) // 2
                    edge_index[key] = e
                    # halfedge 2e runs u -> v, its opposite v -> u
                    to_vertex.extend((v, u))
                    face_of.extend((f, INVALID))
                    h = 2 * e
                else:
                    h = 2 * e + 1
                    if to_vertex[h] != v or face_of[h] != INVALID:
                        raise ValueError(
                            f"edge ({u}, {v}) is non-manifold or inconsistently oriented"
                        )
                    face_of[h] = f
                face_halfedges[f, k] = h

        self.to_vertex = np.asarray(to_vertex, dtype=np.int64)
        self.face = np.asarray(face_of, dtype=np.int64)
        n_half = self.to_vertex.shape[0]
        self.next = np.full(n_half, INVALID, dtype=np.int64)
        self.prev = np.full(n_half, INVALID, dtype=np.int64)

        for k in range(3):
            h = face_halfedges[:, k]
            h_next = face_halfedges[:, (k + 1) % 3]
            self.next[h] = h_next
            self.prev[h_next] = h
        self.face_halfedge = face_halfedges[:, 0].copy() if self.faces.shape[0] else np.zeros(0, dtype=np.int64)

        origins = self.to_vertex[np.arange(n_half) ^ 1] if n_half else np.zeros(0, dtype=np.int64)
        self.halfedge_origins = origins

        # link boundary halfedges into loops
        boundary = np.flatnonzero(self.face == INVALID)
        boundary_out = np.full(num_verts, INVALID, dtype=np.int64)
        for h in boundary.tolist():
            o = origins[h]
            if boundary_out[o] != INVALID:
                raise ValueError(f"vertex {o} is non-manifold (more than one boundary fan)")
            boundary_out[o] = h
        for h in boundary.tolist():
            h_next = boundary_out[self.to_vertex[h]]
            self.next[h] = h_next
            self.prev[h_next] = h

        # anchor halfedge: any outgoing one, the boundary one where it exists
        vertex_halfedge = np.full(num_verts, INVALID, dtype=np.int64)
        vertex_halfedge[origins[::-1]] = np.arange(n_half)[::-1]
        has_boundary = boundary_out != INVALID
        vertex_halfedge[has_boundary] = boundary_out[has_boundary]
        self.vertex_halfedge = vertex_halfedge

        # a vertex with several fans would be visited only partially
        degree = np.bincount(origins, minlength=num_verts) if n_half else np.zeros(num_verts, dtype=np.int64)
        fan = np.array([len(self.outgoing_halfedges(v)) for v in range(num_verts)], dtype=np.int64)
        bad = np.flatnonzero(fan != degree)
        if bad.size:
            raise ValueError(f"vertex {int(bad[0])} is non-manifold (disconnected triangle fans)")

    # ------------------------------------------------------------------
    # sizes
    # ------------------------------------------------------------------

    @property
    def n_vertices(self) -> int:
        return self.points.shape[0]

    @property
    def n_faces(self) -> int:
        return self.faces.shape[0]

    @property
    def n_edges(self) -> int:
        return self.to_vertex.shape[0] // 2

    @property
    def n_halfedges(self) -> int:
        return self.to_vertex.shape[0]

    # ------------------------------------------------------------------
    # elementary navigation
    # ------------------------------------------------------------------

    @staticmethod
    def opposite(h: int) -> int:
        return h ^ 1

    @staticmethod
    def edge(h: int) -> int:
        return h >> 1

    @staticmethod
    def edge_halfedge(e: int, i: int) -> int:
        return 2 * e + i

    def halfedge_origin(self, h: int) -> int:
        return int(self.halfedge_origins[h])

    def edge_vertices(self, e: int) -> Tuple[int, int]:
        return int(self.to_vertex[2 * e + 1]), int(self.to_vertex[2 * e])

    def ccw_rotated_halfedge(self, h: int) -> int:
        """Next outgoing halfedge around the origin of ``h``."""
        return int(self.prev[h]) ^ 1

    def find_edge(self, u: int, v: int) -> int:
        """Edge index joining ``u`` and ``v``, or -1."""
        for h in self.outgoing_halfedges(u):
            if self.to_vertex[h] == v:
                return h >> 1
        return INVALID

    # ------------------------------------------------------------------
    # circulation
    # ------------------------------------------------------------------

    def outgoing_halfedges(self, v: int) -> List[int]:
        """Outgoing halfedges of ``v`` in rotational order (empty if isolated)."""
        start = int(self.vertex_halfedge[v])
        if start == INVALID:
            return []
        ring = [start]
        h = self.ccw_rotated_halfedge(start)
        while h != start:
            ring.append(h)
            if len(ring) > self.n_halfedges:
                raise ValueError(f"halfedge cycle around vertex {v} does not close")
            h = self.ccw_rotated_halfedge(h)
        return ring

    def vertex_neighbors(self, v: int) -> List[int]:
        return [int(self.to_vertex[h]) for h in self.outgoing_halfedges(v)]

    def vertex_faces(self, v: int) -> List[int]:
        return [int(self.face[h]) for h in self.outgoing_halfedges(v) if self.face[h] != INVALID]

    def face_vertices(self, f: int) -> List[int]:
        return [int(i) for i in self.faces[f]]

    def valence(self, v: int) -> int:
        return len(self.outgoing_halfedges(v))

    # ------------------------------------------------------------------
    # boundary classification
    # ------------------------------------------------------------------

    def is_boundary_halfedge(self, h: int) -> bool:
        return bool(self.face[h] == INVALID)

    def is_boundary_edge(self, e: int) -> bool:
        return bool(self.face[2 * e] == INVALID or self.face[2 * e + 1] == INVALID)

    def is_boundary_vertex(self, v: int) -> bool:
        """Isolated vertices count as boundary: they have no incident face."""
        h = self.vertex_halfedge[v]
        return bool(h == INVALID or self.face[h] == INVALID)

    def is_isolated(self, v: int) -> bool:
        return bool(self.vertex_halfedge[v] == INVALID)

    def boundary_vertex_mask(self) -> np.ndarray:
        h = self.vertex_halfedge
        mask = h == INVALID
        valid = ~mask
        mask[valid] = self.face[h[valid]] == INVALID
        return mask

    def isolated_vertex_mask(self) -> np.ndarray:
        return self.vertex_halfedge == INVALID

    # ------------------------------------------------------------------
    # geometry helpers
    # ------------------------------------------------------------------

    def face_areas(self) -> np.ndarray:
        v0 = self.points[self.faces[:, 0]]
        v1 = self.points[self.faces[:, 1]]
        v2 = self.points[self.faces[:, 2]]
        return 0.5 * np.linalg.norm(np.cross(v1 - v0, v2 - v0), axis=1)

    def face_normals(self) -> np.ndarray:
        v0 = self.points[self.faces[:, 0]]
        v1 = self.points[self.faces[:, 1]]
        v2 = self.points[self.faces[:, 2]]
        normals = np.cross(v1 - v0, v2 - v0)
        norms = np.linalg.norm(normals, axis=1, keepdims=True)
        norms = np.where(norms < 1e-12, 1, norms)
        return normals / norms

    def vertex_normals(self) -> np.ndarray:
        """Average of the unit normals of the incident faces, normalized."""
        normals = np.zeros((self.n_vertices, 3))
        face_normals = self.face_normals()
        for i in range(3):
            np.add.at(normals, self.faces[:, i], face_normals)
        norms = np.linalg.norm(normals, axis=1, keepdims=True)
        norms = np.where(norms < 1e-12, 1, norms)
        return normals / norms

    def surface_area(self) -> float:
        return float(self.face_areas().sum())

    # ------------------------------------------------------------------
    # copies
    # ------------------------------------------------------------------

    def copy(self) -> "HalfedgeMesh":
        """Independent copy of positions, connectivity and property tables."""
        other = copy.copy(self)
        other.points = self.points.copy()
        other.faces = self.faces.copy()
        for name in ("to_vertex", "face", "next", "prev", "face_halfedge",
                     "halfedge_origins", "vertex_halfedge"):
            setattr(other, name, getattr(self, name).copy())
        other.vertex_props = self.vertex_props.copy()
        other.edge_props = self.edge_props.copy()
        other.face_props = self.face_props.copy()
        return other

    def __repr__(self) -> str:
        return (
            f"HalfedgeMesh(n_vertices={self.n_vertices}, n_edges={self.n_edges}, "
            f"n_faces={self.n_faces})"
        )


def edges_array(mesh: HalfedgeMesh) -> np.ndarray:
    """(E, 2) endpoint indices for every edge, in edge order."""
    return np.stack([mesh.to_vertex[1::2], mesh.to_vertex[0::2]], axis=1)


def boundary_loops(mesh: HalfedgeMesh) -> List[List[int]]:
    """Vertex sequences of the boundary loops, one list per loop."""
    visited = np.zeros(mesh.n_halfedges, dtype=bool)
    loops = []
    for h0 in np.flatnonzero(mesh.face == INVALID).tolist():
        if visited[h0]:
            continue
        loop = []
        h = h0
        while not visited[h]:
            visited[h] = True
            loop.append(mesh.halfedge_origin(h))
            h = int(mesh.next[h])
        loops.append(loop)
    return loops
