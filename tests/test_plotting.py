import numpy as np
import pytest

from brusselator import BrusselatorParameters, BrusselatorProblem, Grid2D
from brusselator.plotting import plot_2d, plot_field_snapshots, plot_mean_time_series


def test_plot_2d_writes_png(tmp_path):
    grid = Grid2D(6)
    out = tmp_path / "nested" / "field.png"

    plot_2d(grid.X, grid.Y, np.sin(grid.X + grid.Y), title="field", savepath=out)

    assert out.is_file()
    assert out.stat().st_size > 0


def test_plot_2d_shape_mismatch():
    grid = Grid2D(4)
    with pytest.raises(ValueError):
        plot_2d(grid.X, grid.Y, np.zeros((3, 3)))


def test_plot_field_snapshots(tmp_path):
    grid = Grid2D(4)
    states = np.random.default_rng(0).uniform(size=(3, 4, 4, 2))

    paths = plot_field_snapshots(grid, states, [0.0, 0.5, 1.0], component=1, out_dir=tmp_path)

    assert [p.name for p in paths] == [
        "solution2d_V_t0000.png",
        "solution2d_V_t0001.png",
        "solution2d_V_t0002.png",
    ]
    assert all(p.is_file() for p in paths)


def test_plot_field_snapshots_rejects_bad_input(tmp_path):
    grid = Grid2D(4)
    states = np.zeros((2, 4, 4, 2))
    with pytest.raises(ValueError):
        plot_field_snapshots(grid, states, [0.0], out_dir=tmp_path)
    with pytest.raises(ValueError):
        plot_field_snapshots(grid, np.zeros((2, 3, 3, 2)), [0.0, 1.0], out_dir=tmp_path)
    with pytest.raises(ValueError):
        plot_field_snapshots(grid, states, [0.0, 1.0], component=2, out_dir=tmp_path)


def test_plot_mean_time_series(tmp_path):
    out = tmp_path / "means.png"
    plot_mean_time_series([0.0, 1.0], np.ones((2, 4, 4, 2)), title="means", savepath=out)
    assert out.is_file()

    with pytest.raises(ValueError):
        plot_mean_time_series([0.0], np.ones((2, 4, 4, 2)))


def test_problem_solve_writes_plots(tmp_path):
    grid = Grid2D(4)
    problem = BrusselatorProblem(grid, BrusselatorParameters.for_grid(grid, alpha=0.01))

    problem.solve((0.0, 0.1), t_eval=[0.0, 0.1], plot=True, plot_dir=str(tmp_path))

    for name in (
        "solution2d_initial.png",
        "solution2d_final.png",
        "solution2d_U_t0000.png",
        "solution2d_U_t0001.png",
    ):
        assert (tmp_path / name).is_file()
