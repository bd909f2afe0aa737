"""Shared fixtures for the fairing tests."""

from __future__ import annotations

import os
import sys

import numpy as np
import pytest

# Allow running the tests from a plain checkout
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from src.fairing import HalfedgeMesh  # noqa: E402
from src.fairing import primitives  # noqa: E402


@pytest.fixture
def quad_mesh() -> HalfedgeMesh:
    return HalfedgeMesh(*primitives.unit_quad())


@pytest.fixture
def cube_mesh() -> HalfedgeMesh:
    return HalfedgeMesh(*primitives.cube())


@pytest.fixture
def sphere_mesh() -> HalfedgeMesh:
    return HalfedgeMesh(*primitives.icosphere(subdivisions=3))


@pytest.fixture
def noisy_disk_mesh() -> HalfedgeMesh:
    """Flat disk whose interior vertices are pushed off the plane."""
    verts, faces = primitives.disk(n_radial=4, n_angular=12)
    mesh = HalfedgeMesh(verts, faces)
    rng = np.random.default_rng(7)
    interior = ~mesh.boundary_vertex_mask()
    mesh.points[interior, 2] += rng.uniform(-0.03, 0.03, size=int(interior.sum()))
    return mesh
