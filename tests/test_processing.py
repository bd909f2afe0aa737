import numpy as np
import pytest

from src.fairing import FairingConfig, MeshProcessing, closest_vertex, uniform_smooth
from src.fairing import primitives
from src.fairing.processing import COLOR_FIELDS, SCALAR_FIELDS


@pytest.fixture
def processor(noisy_disk_mesh):
    return MeshProcessing(noisy_disk_mesh)


def test_construction_computes_fields(processor):
    props = processor.mesh.vertex_props
    n = processor.mesh.n_vertices
    for name in SCALAR_FIELDS:
        assert props.get(name).shape == (n,)
    for name in COLOR_FIELDS + ("v:normal",):
        assert props.get(name).shape == (n, 3)
    assert props.get("v:valence")[0] == 12


def test_center_and_radius():
    processor = MeshProcessing.from_arrays(*primitives.cube())
    assert processor.mesh_center == pytest.approx([0.5, 0.5, 0.5])
    assert processor.dist_max == pytest.approx(np.sqrt(3) / 2)


def test_render_buffers(processor):
    buffers = processor.buffers
    n, m = processor.mesh.n_vertices, processor.mesh.n_faces
    for column in (buffers.points, buffers.normals, buffers.color_valence,
                   buffers.color_unicurvature, buffers.color_curvature,
                   buffers.color_gaussian_curv):
        assert column.shape == (3, n)
        assert column.dtype == np.float32
        assert column.flags["C_CONTIGUOUS"]
    assert buffers.indices.shape == (3, m)
    assert buffers.indices.dtype == np.uint32
    assert np.array_equal(buffers.indices.T, processor.mesh.faces)
    assert np.allclose(buffers.points.T, processor.mesh.points, atol=1e-6)


def test_buffers_follow_geometry(processor):
    processor.uniform_smooth(5)
    stale = processor.buffers.points.copy()
    processor.compute_mesh_properties()
    assert np.allclose(processor.buffers.points.T, processor.mesh.points, atol=1e-6)
    assert not np.allclose(stale, processor.buffers.points)


def test_rest_mesh_is_independent(processor):
    rest = processor.mesh_init.points.copy()
    processor.smooth(3)
    assert np.array_equal(processor.mesh_init.points, rest)
    assert processor.displacement_from_rest().max() > 0


def test_minimal_surface_uses_rest_boundary(processor):
    boundary = processor.mesh.boundary_vertex_mask()
    rest = processor.mesh_init.points.copy()
    processor.uniform_smooth(3)
    processor.mesh.points[boundary] += 0.1

    report = processor.minimal_surface()

    assert report.success
    assert np.allclose(processor.mesh.points[boundary], rest[boundary])
    assert np.allclose(processor.mesh.points[:, 2], 0.0, atol=1e-9)


def test_reset(processor):
    rest = processor.mesh_init.points.copy()
    processor.laplace_beltrami_enhance_feature(3, 2.0)
    processor.reset()
    assert np.array_equal(processor.mesh.points, rest)
    assert processor.mesh is not processor.mesh_init
    assert np.allclose(processor.buffers.points.T, rest, atol=1e-6)


def test_config_damping_reaches_smoothers(noisy_disk_mesh):
    engine = MeshProcessing(noisy_disk_mesh.copy(), config=FairingConfig(damping=0.25))
    engine.uniform_smooth(3)
    reference = noisy_disk_mesh.copy()
    uniform_smooth(reference, 3, damping=0.25)
    assert np.allclose(engine.mesh.points, reference.points)


def test_config_validation():
    with pytest.raises(ValueError):
        FairingConfig(damping=0.0)
    with pytest.raises(ValueError):
        FairingConfig(default_timestep=-1.0)
    config = FairingConfig().with_overrides(damping=None, default_iterations=3)
    assert config.damping == 0.5
    assert config.default_iterations == 3


def test_implicit_smoothing_through_engine(processor):
    report = processor.implicit_smoothing(1e-3 * processor.dist_max ** 2)
    assert report.success
    assert np.all(np.isfinite(processor.mesh.points))


def test_rejects_empty_mesh():
    with pytest.raises(ValueError):
        MeshProcessing.from_arrays(np.zeros((0, 3)), np.zeros((0, 3), dtype=int))


def test_closest_vertex_along_ray():
    points = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
    index, position = closest_vertex(points, [1.0, 0.1, 5.0], [0.0, 0.0, -3.0])
    assert index == 1
    assert position == pytest.approx([1.0, 0.0, 0.0])
    position[0] = 99.0
    assert points[1, 0] == 1.0


def test_closest_vertex_uses_the_whole_line():
    points = np.array([[0.0, 0.0, -5.0], [3.0, 0.0, 1.0]])
    # the first vertex lies behind the origin but on the line
    index, _ = closest_vertex(points, [0.0, 0.0, 0.0], [0.0, 0.0, 1.0])
    assert index == 0


def test_closest_vertex_rejects_zero_direction():
    with pytest.raises(ValueError):
        closest_vertex(np.zeros((2, 3)), [0.0, 0.0, 0.0], [0.0, 0.0, 0.0])


def test_get_closest_vertex(processor):
    target = processor.mesh.points[5]
    index, position = processor.get_closest_vertex(target + [0.0, 0.0, 3.0], [0.0, 0.0, -1.0])
    assert index == 5
    assert position == pytest.approx(target)
