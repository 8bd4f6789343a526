from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from scipy.optimize import newton_krylov

from .linalg import ilu_preconditioner
from .problem import BrusselatorProblem

Array = np.ndarray

logger = logging.getLogger(__name__)


def find_steady_state(
    problem: BrusselatorProblem,
    guess: Optional[Array] = None,
    t: float = 0.0,
    precondition: bool = True,
    f_tol: float = 1e-8,
    maxiter: Optional[int] = None,
) -> Array:
    """
    Solve ``rhs(t, y) = 0`` with SciPy's Newton-Krylov solver.

    Parameters
    ----------
    problem:
        Problem providing the right-hand side and Jacobian.
    guess:
        Initial guess of shape ``(N, N, 2)``; defaults to the problem's
        initial state.
    t:
        Time at which the (possibly time-dependent) forcing is evaluated.
    precondition:
        If True, the inner Krylov iterations use an incomplete-LU
        factorisation of the exact Jacobian at the guess.

    Returns
    -------
    Array
        Steady state of shape ``(N, N, 2)``.

    Raises
    ------
    scipy.optimize.NoConvergence
        If Newton's method does not reach ``f_tol``.
    """
    if guess is None:
        guess = problem.initial_state()
    y0 = np.asarray(guess, dtype=float).reshape(-1)
    if y0.size != 2 * problem.grid.size:
        raise ValueError(
            f"Guess has {y0.size} entries, expected {2 * problem.grid.size}."
        )

    inner_M = None
    if precondition:
        inner_M = ilu_preconditioner(problem.jacobian(t, y0))

    def residual(y: Array) -> Array:
        return problem.rhs(t, y)

    logger.info(
        "Searching steady state on %dx%d grid (preconditioned=%s)",
        problem.grid.n,
        problem.grid.n,
        precondition,
    )
    y = newton_krylov(residual, y0, inner_M=inner_M, f_tol=f_tol, maxiter=maxiter)
    logger.info("Steady state found, max |rhs| = %.3e", np.max(np.abs(residual(y))))
    return problem.unflatten_state(y)

