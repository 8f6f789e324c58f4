"""Tests for capfit.configure_logging and the fit_capsule script."""

import json
import logging
import runpy
from pathlib import Path

import pytest
import pyvista as pv

import capfit

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "fit_capsule.py"


@pytest.fixture
def restore_capfit_logger():
    logger = logging.getLogger("capfit")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestConfigureLogging:
    def test_single_handler(self, restore_capfit_logger):
        capfit.configure_logging("DEBUG")
        capfit.configure_logging("WARNING")
        assert len(restore_capfit_logger.handlers) == 1
        assert restore_capfit_logger.level == logging.WARNING
        assert restore_capfit_logger.propagate is False

    def test_case_insensitive(self, restore_capfit_logger):
        capfit.configure_logging("info")
        assert restore_capfit_logger.level == logging.INFO

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            capfit.configure_logging("VERBOSE")

    def test_custom_format(self, restore_capfit_logger):
        capfit.configure_logging("INFO", "%(levelname)s|%(message)s")
        (handler,) = restore_capfit_logger.handlers
        assert handler.formatter._fmt == "%(levelname)s|%(message)s"


class TestFitCapsuleScript:
    @pytest.fixture
    def script(self):
        return runpy.run_path(str(SCRIPT), run_name="fit_capsule")

    @pytest.fixture
    def mesh_files(self, tmp_path):
        paths = []
        for i, offset in enumerate([0.0, 3.0]):
            path = tmp_path / f"link{i}.vtk"
            pv.Box(bounds=(offset, offset + 2.0, -0.5, 0.5, -0.5, 0.5)).save(str(path))
            paths.append(str(path))
        return paths

    @pytest.mark.parametrize("optimize", ["none", "slsqp", "lbfgs"])
    def test_writes_json(self, script, mesh_files, tmp_path, optimize, restore_capfit_logger):
        output = tmp_path / "capsule.json"
        mesh_out = tmp_path / "capsule.vtk"
        status = script["main"](
            mesh_files + ["--optimize", optimize, "--output", str(output),
                          "--save-mesh", str(mesh_out), "--log-level", "WARNING"]
        )
        assert status == 0
        data = json.loads(output.read_text())
        assert set(data) == {"p0", "p1", "radius", "volume"}
        assert data["radius"] > 0
        assert mesh_out.exists()
