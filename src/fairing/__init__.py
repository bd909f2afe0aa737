"""
Discrete differential geometry on triangle meshes: curvature, smoothing and
implicit fairing.
"""

from .halfedge import HalfedgeMesh, PropertyStore, boundary_loops, edges_array
from .weights import (
    Weights,
    calc_edges_weights,
    calc_vertices_weights,
    calc_weights,
    vertex_areas,
)
from .curvature import (
    calc_valence,
    calc_uniform_mean_curvature,
    calc_mean_curvature,
    calc_gauss_curvature,
)
from .smoothing import (
    uniform_smooth,
    smooth,
    uniform_laplacian_enhance_feature,
    laplace_beltrami_enhance_feature,
)
from .solvers import SolveReport, implicit_smoothing, minimal_surface
from .color_coding import color_coding, value_to_color
from .config import FairingConfig
from .processing import MeshProcessing, RenderBuffers, closest_vertex

__all__ = [
    # Topology
    'HalfedgeMesh',
    'PropertyStore',
    'boundary_loops',
    'edges_array',
    # Weights
    'Weights',
    'calc_edges_weights',
    'calc_vertices_weights',
    'calc_weights',
    'vertex_areas',
    # Curvature
    'calc_valence',
    'calc_uniform_mean_curvature',
    'calc_mean_curvature',
    'calc_gauss_curvature',
    # Smoothing
    'uniform_smooth',
    'smooth',
    'uniform_laplacian_enhance_feature',
    'laplace_beltrami_enhance_feature',
    # Solvers
    'SolveReport',
    'implicit_smoothing',
    'minimal_surface',
    # Visualization interface
    'color_coding',
    'value_to_color',
    'MeshProcessing',
    'RenderBuffers',
    'closest_vertex',
    'FairingConfig',
]
