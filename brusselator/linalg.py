"""
Linear-algebra helpers around SciPy's sparse solvers.

- :func:`thomas_solve` solves tridiagonal systems in O(n).
- :func:`newton_matrix` builds ``I - gamma * J`` as it appears in implicit
  time steps and Newton iterations.
- :func:`ilu_preconditioner` wraps ``scipy.sparse.linalg.spilu`` as a
  ``LinearOperator``.
- :func:`solve_linear` dispatches to a sparse direct solve or GMRES.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import scipy.sparse as sparse
import scipy.sparse.linalg as spla

from .errors import LinearSolveError

Array = np.ndarray

logger = logging.getLogger(__name__)


def thomas_solve(lower: Array, diag: Array, upper: Array, rhs: Array) -> Array:
    """
    Solve a tridiagonal system with the Thomas algorithm.

    Parameters
    ----------
    lower:
        Sub-diagonal, length ``n - 1`` (``lower[k]`` is entry ``(k+1, k)``).
    diag:
        Main diagonal, length ``n``.
    upper:
        Super-diagonal, length ``n - 1`` (``upper[k]`` is entry ``(k, k+1)``).
    rhs:
        Right-hand side, length ``n``.

    No pivoting is done; the algorithm is stable for diagonally dominant
    matrices. A zero pivot raises :class:`LinearSolveError`.
    """
    a = np.asarray(lower, dtype=float)
    b = np.asarray(diag, dtype=float)
    c = np.asarray(upper, dtype=float)
    d = np.asarray(rhs, dtype=float)

    n = b.size
    if d.size != n or a.size != n - 1 or c.size != n - 1:
        raise ValueError(
            "Tridiagonal system needs len(diag) == len(rhs) == n and "
            f"len(lower) == len(upper) == n - 1; got {a.size}, {b.size}, {c.size}, {d.size}."
        )

    c_prime = np.empty(max(n - 1, 0), dtype=float)
    d_prime = np.empty(n, dtype=float)

    pivot = b[0]
    if pivot == 0.0:
        raise LinearSolveError("Zero pivot in row 0 of tridiagonal system.")
    if n > 1:
        c_prime[0] = c[0] / pivot
    d_prime[0] = d[0] / pivot

    for k in range(1, n):
        pivot = b[k] - a[k - 1] * c_prime[k - 1]
        if pivot == 0.0:
            raise LinearSolveError(f"Zero pivot in row {k} of tridiagonal system.")
        if k < n - 1:
            c_prime[k] = c[k] / pivot
        d_prime[k] = (d[k] - a[k - 1] * d_prime[k - 1]) / pivot

    x = np.empty(n, dtype=float)
    x[-1] = d_prime[-1]
    for k in range(n - 2, -1, -1):
        x[k] = d_prime[k] - c_prime[k] * x[k + 1]
    return x


def newton_matrix(jac, gamma: float) -> sparse.csc_matrix:
    """Return ``I - gamma * J`` in CSC format."""
    J = sparse.csc_matrix(jac)
    return (sparse.identity(J.shape[0], format="csc") - gamma * J).tocsc()


def ilu_preconditioner(
    matrix, drop_tol: float = 1e-4, fill_factor: float = 10.0
) -> spla.LinearOperator:
    """
    Incomplete-LU preconditioner ``M ~ A^{-1}`` as a ``LinearOperator``.

    SciPy raises ``RuntimeError`` if the factorisation hits an exactly
    singular pivot; that error is reported as :class:`LinearSolveError`.
    """
    A = sparse.csc_matrix(matrix)
    try:
        ilu = spla.spilu(A, drop_tol=drop_tol, fill_factor=fill_factor)
    except RuntimeError as exc:
        raise LinearSolveError(f"Incomplete LU factorisation failed: {exc}") from exc
    return spla.LinearOperator(A.shape, matvec=ilu.solve, dtype=float)


def solve_linear(
    matrix,
    rhs: Array,
    method: str = "gmres",
    precondition: bool = True,
    rtol: float = 1e-10,
    maxiter: Optional[int] = None,
) -> Array:
    """
    Solve the sparse system ``matrix @ x = rhs``.

    Parameters
    ----------
    method:
        ``"direct"`` for ``spsolve`` or ``"gmres"`` for a Krylov solve.
    precondition:
        Use an ILU preconditioner for GMRES.
    rtol:
        Relative residual tolerance for GMRES.
    maxiter:
        Maximum number of GMRES restarts.
    """
    A = sparse.csc_matrix(matrix)
    b = np.asarray(rhs, dtype=float)

    if method == "direct":
        return np.asarray(spla.spsolve(A, b), dtype=float)

    if method != "gmres":
        raise ValueError(f"Unknown linear solver {method!r}. Use 'direct' or 'gmres'.")

    M = ilu_preconditioner(A) if precondition else None
    x, info = spla.gmres(A, b, rtol=rtol, atol=0.0, M=M, maxiter=maxiter)
    if info != 0:
        raise LinearSolveError(f"GMRES did not converge (info={info}).")
    logger.debug("GMRES converged for system of size %d", A.shape[0])
    return x
