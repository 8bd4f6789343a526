import numpy as np
import pytest

from brusselator import Grid2D, wrap_index


def test_grid2d_basic_coordinates():
    grid = Grid2D(4)

    assert grid.n == 4
    assert grid.spacing == 0.25
    assert np.array_equal(grid.x, [0.0, 0.25, 0.5, 0.75])
    assert np.array_equal(grid.y, grid.x)
    assert grid.shape == (4, 4)
    assert grid.size == 16
    assert grid.state_shape == (4, 4, 2)


def test_grid2d_coordinates_are_index_times_spacing():
    grid = Grid2D(10)
    expected = np.array([i * 0.1 for i in range(10)])

    assert np.array_equal(grid.x, expected)
    # The right edge is identified with the left edge and is not a grid point.
    assert grid.x[-1] < 1.0


def test_grid2d_mesh_uses_ij_indexing():
    grid = Grid2D(5)
    X, Y = grid.X, grid.Y

    assert X.shape == (5, 5)
    assert Y.shape == (5, 5)
    assert np.array_equal(X[:, 2], grid.x)
    assert np.array_equal(Y[3, :], grid.y)
    assert np.all(X[1, :] == grid.x[1])


def test_grid2d_custom_length():
    grid = Grid2D(5, length=2.0)

    assert np.isclose(grid.spacing, 0.4)
    assert np.isclose(grid.x[-1], 1.6)


@pytest.mark.parametrize("n", [0, 1, -3])
def test_grid2d_rejects_too_few_points(n):
    with pytest.raises(ValueError):
        Grid2D(n)


def test_grid2d_rejects_non_positive_length():
    with pytest.raises(ValueError):
        Grid2D(4, length=0.0)


def test_grid2d_flatten_unflatten_roundtrip():
    grid = Grid2D(6)
    field = np.sin(2 * np.pi * grid.X) * np.cos(2 * np.pi * grid.Y)

    flat = grid.flatten(field)
    assert flat.shape == (grid.size,)
    # Flat index is i*N + j.
    assert flat[2 * 6 + 5] == field[2, 5]

    back = grid.unflatten(flat)
    assert np.array_equal(back, field)


def test_grid2d_flatten_rejects_wrong_shape():
    grid = Grid2D(4)
    with pytest.raises(ValueError):
        grid.flatten(np.zeros((4, 5)))
    with pytest.raises(ValueError):
        grid.unflatten(np.zeros(15))


def test_grid2d_to_from_dict_roundtrip():
    grid = Grid2D(12, length=3.0)
    d = grid.to_dict()

    assert d == {"n": 12, "length": 3.0}
    grid2 = Grid2D.from_dict(d)
    assert grid2 == grid
    assert np.array_equal(grid2.x, grid.x)

    assert Grid2D.from_dict({"n": 7}).length == 1.0


def test_grid2d_coordinates_are_read_only():
    grid = Grid2D(4)
    with pytest.raises(ValueError):
        grid.x[0] = 1.0


@pytest.mark.parametrize("n", [2, 3, 4, 17])
def test_wrap_index_edges(n):
    assert wrap_index(-1, n) == n - 1
    assert wrap_index(n, n) == 0
    assert wrap_index(0, n) == 0
    assert wrap_index(n - 1, n) == n - 1


@pytest.mark.parametrize("n", [2, 5, 8])
def test_wrap_index_forward_and_backward_are_inverse(n):
    for i in range(n):
        forward = wrap_index(i + 1, n)
        backward = wrap_index(i - 1, n)
        assert 0 <= forward < n
        assert 0 <= backward < n
        assert wrap_index(forward - 1, n) == i
        assert wrap_index(backward + 1, n) == i
