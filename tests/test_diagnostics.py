"""
Tests for Diagnostics and Output

Validates:
- Macroscopic fields of an equilibrium state
- Tecplot result file layout
- Residual history CSV through the run() callback
- Field plot written to disk
"""

import csv

import pytest
import numpy as np
from ugksim import CavitySolver, SolverConfig, FlowField, GasModel, Mesh2D, newton_cotes_grid
from ugksim.diagnostics import RESULT_VARIABLES, macroscopic_fields, write_result, HistoryWriter, plot_field


def make_field(nx=4, ny=3, prim=(1.2, 0.1, -0.05, 0.8)):
    field = FlowField(Mesh2D(nx=nx, ny=ny), newton_cotes_grid((-8, 8), 81, (-8, 8), 81), GasModel())
    field.initialize(prim)
    return field


class TestMacroscopicFields:
    """Test derived output variables."""

    def test_equilibrium_values(self):
        field = make_field()
        data = macroscopic_fields(field)

        assert set(data) == set(RESULT_VARIABLES)
        for name in RESULT_VARIABLES:
            assert data[name].shape == (4, 3), f"{name} has wrong shape"

        np.testing.assert_allclose(data['RHO'], 1.2, rtol=1e-12)
        np.testing.assert_allclose(data['U'], 0.1, rtol=1e-12)
        np.testing.assert_allclose(data['V'], -0.05, rtol=1e-12)
        np.testing.assert_allclose(data['T'], 1.25, rtol=1e-12)
        np.testing.assert_allclose(data['P'], 0.75, rtol=1e-12)
        np.testing.assert_allclose(data['QX'], 0.0, atol=1e-8)
        np.testing.assert_allclose(data['QY'], 0.0, atol=1e-8)

    def test_coordinates(self):
        field = make_field()
        data = macroscopic_fields(field)

        np.testing.assert_allclose(data['X'][:, 0], [0.125, 0.375, 0.625, 0.875])
        np.testing.assert_allclose(data['Y'][0, :], [1 / 6, 0.5, 5 / 6])


class TestWriteResult:

    def test_tecplot_layout(self, tmp_path):
        field = make_field()
        filename = tmp_path / "cavity.dat"

        write_result(field, filename, title="cavity")

        lines = filename.read_text().splitlines()
        assert lines[0] == 'TITLE = "cavity"'
        assert lines[1].startswith('VARIABLES = "X", "Y", "RHO"')
        assert lines[2] == 'ZONE I = 4, J = 3, DATAPACKING = POINT'
        assert len(lines) == 3 + 4 * 3

        table = np.loadtxt(filename, skiprows=3)
        assert table.shape == (12, len(RESULT_VARIABLES))
        # i runs fastest
        np.testing.assert_allclose(table[:4, 0], [0.125, 0.375, 0.625, 0.875])
        np.testing.assert_allclose(table[:4, 1], 1 / 6)


class TestHistoryWriter:

    def test_history_from_run(self, tmp_path):
        mesh = Mesh2D(nx=3, ny=3)
        field = FlowField(mesh, newton_cotes_grid((-5, 5), 41, (-5, 5), 41), GasModel())
        solver = CavitySolver(field, SolverConfig(eps=1e-12))
        filename = tmp_path / "history.csv"

        with HistoryWriter(filename) as history:
            solver.run(max_iter=2, callback=history)

        with open(filename, newline='') as f:
            rows = list(csv.reader(f))

        assert rows[0] == HistoryWriter.FIELDS
        assert len(rows) == 3
        assert [int(r[0]) for r in rows[1:]] == [1, 2]
        assert float(rows[2][1]) > float(rows[1][1])

    def test_interval(self, tmp_path):
        class State:
            dt = 0.1
            sim_time = 0.0
            residual = np.zeros(4)

        filename = tmp_path / "history.csv"
        with HistoryWriter(filename, interval=2) as history:
            for it in range(1, 6):
                state = State()
                state.iteration = it
                history(state)

        rows = filename.read_text().splitlines()
        assert len(rows) == 1 + 2


class TestPlotField:

    def test_unknown_variable(self):
        with pytest.raises(ValueError, match="Unknown variable"):
            plot_field(make_field(), variable='MACH')

    def test_save_figure(self, tmp_path):
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")

        field = make_field()
        field.w[..., 1] = field.w[..., 0] * 0.1 * field.mesh.x
        filename = tmp_path / "u.png"
        plot_field(field, variable='U', filename=filename)

        assert filename.exists()
        assert filename.stat().st_size > 0
