"""
Mesh processing engine.

``MeshProcessing`` owns two independent meshes: the working mesh that the
operators modify and a rest snapshot taken at construction. It keeps the
per-vertex fields (valence, curvatures, their colors, normals) up to date on
request and exposes them as flat column buffers for a renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from . import curvature, smoothing, solvers
from .color_coding import color_coding
from .config import DEFAULT_CONFIG, FairingConfig
from .halfedge import HalfedgeMesh
from .io import read_mesh
from .solvers import SolveReport
from .weights import calc_weights

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("v:valence", "v:unicurvature", "v:curvature", "v:gauss_curvature")
COLOR_FIELDS = ("v:color_valence", "v:color_unicurvature", "v:color_curvature", "v:color_gaussian_curv")


@dataclass
class RenderBuffers:
    """Per-vertex columns ready for upload: one column per vertex (or face)."""

    points: np.ndarray               # (3, N) float32
    normals: np.ndarray              # (3, N) float32
    indices: np.ndarray              # (3, M) uint32
    color_valence: np.ndarray        # (3, N) float32
    color_unicurvature: np.ndarray   # (3, N) float32
    color_curvature: np.ndarray      # (3, N) float32
    color_gaussian_curv: np.ndarray  # (3, N) float32


class MeshProcessing:
    """
    Curvature analysis and fairing of a triangle mesh.

    Args:
        mesh: working mesh (taken over, not copied)
        config: engine constants
    """

    def __init__(self, mesh: HalfedgeMesh, config: Optional[FairingConfig] = None):
        if mesh.n_vertices == 0:
            raise ValueError("mesh has no vertices")
        self.config = config or DEFAULT_CONFIG
        self.mesh = mesh

        self.mesh_center = mesh.points.mean(axis=0)
        self.dist_max = float(np.max(np.linalg.norm(mesh.points - self.mesh_center, axis=1)))
        logger.debug("mesh center %s, radius %g", np.round(self.mesh_center, 6), self.dist_max)

        self.buffers: Optional[RenderBuffers] = None
        self.compute_mesh_properties()

        # rest configuration for operations that need the original shape
        self.mesh_init = self.mesh.copy()

    @classmethod
    def from_file(cls, path, config: Optional[FairingConfig] = None) -> "MeshProcessing":
        return cls(read_mesh(path), config=config)

    @classmethod
    def from_arrays(cls, verts, faces, config: Optional[FairingConfig] = None) -> "MeshProcessing":
        return cls(HalfedgeMesh(verts, faces), config=config)

    # ------------------------------------------------------------------
    # fields
    # ------------------------------------------------------------------

    def calc_weights(self):
        return calc_weights(self.mesh)

    def calc_uniform_mean_curvature(self) -> np.ndarray:
        values = self.mesh.vertex_props.add("v:unicurvature", 0.0)
        values[:] = curvature.calc_uniform_mean_curvature(self.mesh)
        return values

    def calc_mean_curvature(self, weights=None) -> np.ndarray:
        values = self.mesh.vertex_props.add("v:curvature", 0.0)
        values[:] = curvature.calc_mean_curvature(self.mesh, weights)
        return values

    def calc_gauss_curvature(self, weights=None) -> np.ndarray:
        values = self.mesh.vertex_props.add("v:gauss_curvature", 0.0)
        values[:] = curvature.calc_gauss_curvature(self.mesh, weights)
        return values

    def compute_mesh_properties(self) -> RenderBuffers:
        """Recompute normals, valence, curvatures and colors for the current geometry."""
        props = self.mesh.vertex_props

        normals = props.add("v:normal", 0.0, shape=(3,))
        normals[:] = self.mesh.vertex_normals()

        valence = props.add("v:valence", 0.0)
        valence[:] = curvature.calc_valence(self.mesh)

        weights = calc_weights(self.mesh)
        self.calc_uniform_mean_curvature()
        self.calc_mean_curvature(weights)
        self.calc_gauss_curvature(weights)

        bounds = (
            self.config.valence_color_bound,
            self.config.curvature_color_bound,
            self.config.curvature_color_bound,
            self.config.curvature_color_bound,
        )
        for field, color_field, bound in zip(SCALAR_FIELDS, COLOR_FIELDS, bounds):
            colors = props.add(color_field, 1.0, shape=(3,))
            colors[:] = color_coding(props.get(field), bound=bound)

        self.buffers = self.export_buffers()
        return self.buffers

    def export_buffers(self) -> RenderBuffers:
        props = self.mesh.vertex_props

        def columns(name):
            return np.ascontiguousarray(props.get(name).T, dtype=np.float32)

        return RenderBuffers(
            points=np.ascontiguousarray(self.mesh.points.T, dtype=np.float32),
            normals=columns("v:normal"),
            indices=np.ascontiguousarray(self.mesh.faces.T, dtype=np.uint32),
            color_valence=columns("v:color_valence"),
            color_unicurvature=columns("v:color_unicurvature"),
            color_curvature=columns("v:color_curvature"),
            color_gaussian_curv=columns("v:color_gaussian_curv"),
        )

    # ------------------------------------------------------------------
    # operators
    # ------------------------------------------------------------------

    def uniform_smooth(self, iterations: int) -> np.ndarray:
        return smoothing.uniform_smooth(self.mesh, iterations, damping=self.config.damping)

    def smooth(self, iterations: int) -> np.ndarray:
        return smoothing.smooth(self.mesh, iterations, damping=self.config.damping)

    def uniform_laplacian_enhance_feature(self, iterations: int, coefficient: float) -> np.ndarray:
        return smoothing.uniform_laplacian_enhance_feature(
            self.mesh, iterations, coefficient, damping=self.config.damping
        )

    def laplace_beltrami_enhance_feature(self, iterations: int, coefficient: float) -> np.ndarray:
        return smoothing.laplace_beltrami_enhance_feature(
            self.mesh, iterations, coefficient, damping=self.config.damping
        )

    def implicit_smoothing(self, timestep: float) -> SolveReport:
        return solvers.implicit_smoothing(self.mesh, timestep)

    def minimal_surface(self) -> SolveReport:
        return solvers.minimal_surface(self.mesh, self.mesh_init)

    def reset(self) -> None:
        """Restore the rest configuration."""
        logger.info("Restoring the rest configuration")
        self.mesh = self.mesh_init.copy()
        self.compute_mesh_properties()

    def displacement_from_rest(self) -> np.ndarray:
        """Per-vertex distance between the current and the rest positions."""
        return np.linalg.norm(self.mesh.points - self.mesh_init.points, axis=1)

    # ------------------------------------------------------------------
    # picking
    # ------------------------------------------------------------------

    def get_closest_vertex(self, origin, direction) -> Tuple[int, np.ndarray]:
        return closest_vertex(self.mesh.points, origin, direction)


def closest_vertex(points: np.ndarray, origin, direction) -> Tuple[int, np.ndarray]:
    """
    Vertex closest to the line through ``origin`` along ``direction``.

    Returns:
        (index, position) of the vertex with the smallest perpendicular
        distance to the line
    """
    origin = np.asarray(origin, dtype=np.float64)
    direction = np.asarray(direction, dtype=np.float64)
    length = np.linalg.norm(direction)
    if length == 0:
        raise ValueError("direction must be non-zero")
    direction = direction / length

    offsets = points - origin
    projection = offsets @ direction
    distances = np.linalg.norm(offsets - projection[:, None] * direction, axis=1)
    index = int(np.argmin(distances))
    return index, points[index].copy()
