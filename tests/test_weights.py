import numpy as np
import pytest

from src.fairing import (
    HalfedgeMesh,
    calc_edges_weights,
    calc_vertices_weights,
    calc_weights,
    vertex_areas,
)
from src.fairing import primitives


def _single_triangle_weights(verts, tri):
    mesh = HalfedgeMesh(verts, [tri])
    return mesh, calc_edges_weights(mesh)


def test_right_angle_quad_weights(quad_mesh):
    weights = calc_edges_weights(quad_mesh)
    # the diagonal faces two right angles: cot(90) = 0
    assert weights[quad_mesh.find_edge(0, 2)] == pytest.approx(0.0, abs=1e-12)
    # each outer edge sees a single 45 degree angle
    for u, v in [(0, 1), (1, 2), (2, 3), (3, 0)]:
        assert weights[quad_mesh.find_edge(u, v)] == pytest.approx(1.0)


def test_shared_edge_weight_is_sum_of_triangle_contributions():
    verts = np.array(
        [
            [0.0, 0.0, 0.0],
            [2.0, 0.1, 0.0],
            [0.7, 1.3, 0.2],
            [1.1, -0.9, -0.3],
        ]
    )
    mesh = HalfedgeMesh(verts, [[0, 1, 2], [1, 0, 3]])
    weights = calc_edges_weights(mesh)

    upper, upper_weights = _single_triangle_weights(verts, [0, 1, 2])
    lower, lower_weights = _single_triangle_weights(verts, [1, 0, 3])

    shared = weights[mesh.find_edge(0, 1)]
    expected = upper_weights[upper.find_edge(0, 1)] + lower_weights[lower.find_edge(0, 1)]
    assert shared == pytest.approx(expected)

    # a boundary edge only sees its single face
    assert weights[mesh.find_edge(1, 2)] == pytest.approx(upper_weights[upper.find_edge(1, 2)])

    # explicit cotangent of the angle at vertex 2
    d0 = verts[0] - verts[2]
    d1 = verts[1] - verts[2]
    cos = d0 @ d1 / (np.linalg.norm(d0) * np.linalg.norm(d1))
    assert upper_weights[upper.find_edge(0, 1)] == pytest.approx(cos / np.sqrt(1 - cos ** 2))


def test_obtuse_angle_gives_negative_weight():
    verts = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [1.0, 0.2, 0.0]])
    mesh, weights = _single_triangle_weights(verts, [0, 1, 2])
    assert weights[mesh.find_edge(0, 1)] < 0


def test_vertex_weights_on_quad(quad_mesh):
    areas = vertex_areas(quad_mesh)
    # vertices 0 and 2 touch both triangles
    assert areas == pytest.approx([1 / 3, 1 / 6, 1 / 3, 1 / 6])
    assert calc_vertices_weights(quad_mesh) == pytest.approx(0.5 / areas)
    assert areas.sum() == pytest.approx(quad_mesh.surface_area())


def test_isolated_vertex_weight_defaults_to_zero():
    verts, faces = primitives.unit_quad()
    mesh = HalfedgeMesh(np.vstack([verts, [[3.0, 3.0, 3.0]]]), faces)
    weights = calc_weights(mesh)
    assert weights.vertex[4] == 0.0
    assert np.all(weights.vertex[:4] > 0)
    assert weights.edge.shape == (mesh.n_edges,)


def test_degenerate_triangle_warns():
    verts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    mesh = HalfedgeMesh(verts, [[0, 1, 2]])
    with pytest.warns(RuntimeWarning):
        weights = calc_edges_weights(mesh)
    assert not np.all(np.isfinite(weights))
    # zero-area vertices keep the default weight
    assert np.all(calc_vertices_weights(mesh) == 0.0)
