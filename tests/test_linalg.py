import numpy as np
import pytest
import scipy.sparse as sparse

from brusselator import (
    BrusselatorParameters,
    Grid2D,
    LinearSolveError,
    assemble_jacobian,
    ilu_preconditioner,
    newton_matrix,
    reference_initial_state,
    solve_linear,
    thomas_solve,
)


def _tridiagonal_system(n, seed=0):
    rng = np.random.default_rng(seed)
    lower = rng.uniform(-1.0, 1.0, n - 1)
    upper = rng.uniform(-1.0, 1.0, n - 1)
    diag = 4.0 + rng.uniform(0.0, 1.0, n)
    rhs = rng.normal(size=n)
    A = np.diag(diag) + np.diag(lower, -1) + np.diag(upper, 1)
    return lower, diag, upper, rhs, A


def test_thomas_matches_dense_solve():
    lower, diag, upper, rhs, A = _tridiagonal_system(12)

    x = thomas_solve(lower, diag, upper, rhs)

    assert np.allclose(x, np.linalg.solve(A, rhs))


def test_thomas_single_equation():
    x = thomas_solve([], [4.0], [], [2.0])
    assert np.array_equal(x, [0.5])


def test_thomas_second_difference_system():
    # -u'' = 1 on (0, 1) with u(0) = u(1) = 0, exact for quadratics.
    n = 9
    h = 1.0 / (n + 1)
    x_nodes = h * np.arange(1, n + 1)

    u = thomas_solve(
        -np.ones(n - 1), 2.0 * np.ones(n), -np.ones(n - 1), h * h * np.ones(n)
    )

    assert np.allclose(u, 0.5 * x_nodes * (1.0 - x_nodes))


def test_thomas_rejects_inconsistent_lengths():
    with pytest.raises(ValueError):
        thomas_solve([1.0, 1.0], [2.0, 2.0], [1.0], [1.0, 1.0])
    with pytest.raises(ValueError):
        thomas_solve([1.0], [2.0, 2.0], [1.0], [1.0])


def test_thomas_zero_pivot():
    with pytest.raises(LinearSolveError):
        thomas_solve([1.0], [0.0, 1.0], [1.0], [1.0, 1.0])
    with pytest.raises(LinearSolveError):
        thomas_solve([1.0], [1.0, 1.0], [1.0], [1.0, 1.0])


def test_newton_matrix():
    J = sparse.csr_matrix(np.array([[1.0, 2.0], [3.0, 4.0]]))
    M = newton_matrix(J, 0.5)

    assert M.format == "csc"
    assert np.allclose(M.toarray(), [[0.5, -1.0], [-1.5, -1.0]])


def test_ilu_preconditioner_inverts_tridiagonal_matrix():
    lower, diag, upper, rhs, A = _tridiagonal_system(10, seed=1)
    M = ilu_preconditioner(sparse.csc_matrix(A), drop_tol=0.0)

    assert M.shape == (10, 10)
    assert np.allclose(M.matvec(A @ rhs), rhs)


def _newton_system(n=4, gamma=1e-3):
    grid = Grid2D(n)
    params = BrusselatorParameters.for_grid(grid)
    J = assemble_jacobian(reference_initial_state(grid), params, grid)
    A = newton_matrix(J, gamma)
    b = np.random.default_rng(2).normal(size=A.shape[0])
    return A, b


@pytest.mark.parametrize("precondition", [True, False])
def test_gmres_matches_direct_solve(precondition):
    A, b = _newton_system()

    x_direct = solve_linear(A, b, method="direct")
    x_gmres = solve_linear(A, b, method="gmres", precondition=precondition)

    assert np.allclose(A @ x_direct, b)
    assert np.allclose(x_gmres, x_direct, atol=1e-8)


def test_solve_linear_unknown_method():
    A, b = _newton_system()
    with pytest.raises(ValueError):
        solve_linear(A, b, method="cholesky")
