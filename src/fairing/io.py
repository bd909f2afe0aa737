"""Mesh file I/O through PyVista."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pyvista as pv

from .halfedge import HalfedgeMesh

logger = logging.getLogger(__name__)


def pad_faces(faces: np.ndarray) -> np.ndarray:
    """VTK cell array: every triangle prefixed with its vertex count."""
    return np.hstack([np.full((faces.shape[0], 1), 3, dtype=np.int64), faces]).astype(np.int64).ravel()


def to_polydata(mesh: HalfedgeMesh, with_properties: bool = True) -> pv.PolyData:
    """PyVista surface for ``mesh``; scalar and 3-vector vertex properties become point data."""
    poly = pv.PolyData(mesh.points.copy(), pad_faces(mesh.faces))
    if with_properties:
        for name in mesh.vertex_props.names():
            column = mesh.vertex_props.get(name)
            if column.ndim == 1 or (column.ndim == 2 and column.shape[1] == 3):
                poly.point_data[name.replace(":", "_")] = column
    return poly


def read_mesh(path) -> HalfedgeMesh:
    """
    Load a triangle surface mesh from any format PyVista can read.

    Polygons are triangulated. Coincident points are merged only when the
    file has any, so that formats storing one vertex triple per facet (STL)
    produce connected meshes; otherwise the vertex numbering of the file is
    kept as is, isolated vertices included.

    Raises:
        FileNotFoundError: if ``path`` does not exist
        ValueError: if the file cannot be parsed or holds no triangles
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Mesh not found: {path}")

    try:
        data = pv.read(str(path))
    except (OSError, ValueError) as exc:
        raise ValueError(f"could not read mesh {path}: {exc}") from exc

    if not isinstance(data, pv.PolyData):
        data = data.extract_surface()
    data = data.triangulate()
    if data.n_points and np.unique(np.asarray(data.points), axis=0).shape[0] < data.n_points:
        data = data.clean()

    faces = np.asarray(data.faces)
    if data.n_points == 0 or faces.size == 0:
        raise ValueError(f"{path} contains no triangles")

    faces = faces.reshape(-1, 4)[:, 1:]
    mesh = HalfedgeMesh(np.asarray(data.points, dtype=np.float64), faces)

    logger.info("Mesh %s loaded.", path)
    logger.info("# of vertices : %d", mesh.n_vertices)
    logger.info("# of faces : %d", mesh.n_faces)
    logger.info("# of edges : %d", mesh.n_edges)
    return mesh


def write_mesh(mesh: HalfedgeMesh, path) -> None:
    """Save ``mesh`` (and its vertex properties where the format allows)."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    to_polydata(mesh).save(str(path))
    logger.info("Mesh written to %s", path)
