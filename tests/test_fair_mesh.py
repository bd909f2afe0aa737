import argparse
import logging
import sys

import numpy as np
import pytest

from scripts import fair_mesh
from src.fairing import HalfedgeMesh, MeshProcessing, SolveReport
from src.fairing import primitives
from src.fairing.io import read_mesh, write_mesh
from src.fairing.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _run_main(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["fair_mesh.py", *map(str, argv)])
    fair_mesh.main()


@pytest.fixture
def disk_file(tmp_path):
    verts, faces = primitives.disk(n_radial=3, n_angular=12)
    interior = np.linalg.norm(verts[:, :2], axis=1) < 0.99
    verts[interior, 2] = 0.1 * np.cos(3.0 * verts[interior, 0])
    path = tmp_path / "disk.vtk"
    write_mesh(HalfedgeMesh(verts, faces), path)
    return path


def _args(operation, **overrides):
    values = dict(operation=operation, iterations=None, coefficient=None, timestep=None)
    values.update(overrides)
    return argparse.Namespace(**values)


def test_missing_input_exits_with_status_1(monkeypatch, tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_main(monkeypatch, tmp_path / "missing.off")
    assert excinfo.value.code == 1
    assert "Could not load mesh" in capsys.readouterr().out


def test_failed_solve_exits_with_status_1(monkeypatch, tmp_path):
    path = tmp_path / "cube.vtk"
    write_mesh(HalfedgeMesh(*primitives.cube()), path)
    output = tmp_path / "out.vtk"
    with pytest.raises(SystemExit) as excinfo:
        _run_main(monkeypatch, path, "--operation", "minimal", "--output", output)
    assert excinfo.value.code == 1
    assert not output.exists()


def test_invalid_iterations_exit_with_status_2(monkeypatch, disk_file):
    with pytest.raises(SystemExit) as excinfo:
        _run_main(monkeypatch, disk_file, "--operation", "smooth", "--iterations", -1)
    assert excinfo.value.code == 2


def test_invalid_damping_exits_with_status_2(monkeypatch, disk_file):
    with pytest.raises(SystemExit) as excinfo:
        _run_main(monkeypatch, disk_file, "--damping", 0)
    assert excinfo.value.code == 2


def test_output_is_written(monkeypatch, tmp_path, disk_file):
    output = tmp_path / "out" / "smoothed.vtk"
    _run_main(monkeypatch, disk_file, "--operation", "smooth", "--iterations", 5, "--output", output)

    smoothed = read_mesh(output)
    original = read_mesh(disk_file)
    assert smoothed.n_vertices == original.n_vertices
    assert np.abs(smoothed.points[:, 2]).max() < np.abs(original.points[:, 2]).max()


@pytest.mark.parametrize(
    "operation, method, call_args",
    [
        ("uniform-smooth", "uniform_smooth", (7,)),
        ("smooth", "smooth", (7,)),
        ("uniform-enhance", "uniform_laplacian_enhance_feature", (7, 1.5)),
        ("enhance", "laplace_beltrami_enhance_feature", (7, 1.5)),
        ("minimal", "minimal_surface", ()),
    ],
)
def test_operations_dispatch(operation, method, call_args, disk_file, monkeypatch):
    processor = MeshProcessing.from_file(disk_file)
    calls = []

    def record(*args):
        calls.append(args)
        return SolveReport(success=True, message="ok", residual=0.0, surface_area=1.0)

    monkeypatch.setattr(processor, method, record)
    assert fair_mesh.run(processor, _args(operation, iterations=7, coefficient=1.5))
    assert calls == [call_args]


def test_timestep_is_scaled_by_model_radius(disk_file, monkeypatch):
    processor = MeshProcessing.from_file(disk_file)
    timesteps = []

    def record(timestep):
        timesteps.append(timestep)
        return SolveReport(success=True, message="ok", residual=0.0)

    monkeypatch.setattr(processor, "implicit_smoothing", record)
    assert fair_mesh.run(processor, _args("implicit", timestep=1e-3))
    assert timesteps == [pytest.approx(1e-3 * processor.dist_max ** 2)]

    # the configured default is scaled the same way
    timesteps.clear()
    assert fair_mesh.run(processor, _args("implicit"))
    assert timesteps == [pytest.approx(processor.config.default_timestep * processor.dist_max ** 2)]


def test_curvature_only_leaves_mesh_untouched(disk_file):
    processor = MeshProcessing.from_file(disk_file)
    before = processor.mesh.points.copy()
    assert fair_mesh.run(processor, _args("curvature"))
    assert np.array_equal(processor.mesh.points, before)


def test_defaults_come_from_config(disk_file, monkeypatch):
    processor = MeshProcessing.from_file(disk_file)
    calls = []
    monkeypatch.setattr(processor, "laplace_beltrami_enhance_feature", lambda *args: calls.append(args))
    fair_mesh.run(processor, _args("enhance"))
    assert calls == [(processor.config.default_iterations, processor.config.default_coefficient)]
