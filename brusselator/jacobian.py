"""
Exact Jacobian of the semi-discretised Brusselator.

The reaction part is differentiated symbolically with sympy once and compiled
to NumPy functions with ``sympy.lambdify``. Diffusion contributes the scaled
periodic Laplacian on each component; the forcing does not depend on the
state and contributes nothing.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict, Sequence, Tuple, Union

import numpy as np
import sympy as sp
from scipy.sparse import bsr_matrix, csr_matrix, identity, kron

from .errors import ShapeMismatch
from .grid import Grid2D
from .parameters import BrusselatorParameters
from .sparse_ops import build_periodic_2d_laplacian

Array = np.ndarray


def reaction_terms() -> Tuple[sp.Expr, sp.Expr, Tuple[sp.Symbol, ...]]:
    """Symbolic reaction terms ``(f_U, f_V)`` and their symbols ``(U, V, A, B)``."""
    U, V, A, B = sp.symbols("U V A B")
    f_u = B + U**2 * V - (A + 1) * U
    f_v = A * U - U**2 * V
    return f_u, f_v, (U, V, A, B)


@lru_cache(maxsize=None)
def reaction_jacobian_functions() -> Dict[Tuple[int, int], Callable[..., Array]]:
    """
    Compiled partial derivatives of the reaction terms.

    Returns a mapping ``(row, col) -> f(U, V, A, B)`` where row/col ``0`` is
    ``U`` and ``1`` is ``V``.
    """
    f_u, f_v, symbols = reaction_terms()
    U, V = symbols[0], symbols[1]
    jac = sp.Matrix([f_u, f_v]).jacobian([U, V])

    funcs = {}
    for r in range(2):
        for c in range(2):
            funcs[(r, c)] = sp.lambdify(symbols, sp.simplify(jac[r, c]), modules=["numpy"])
    return funcs


def reaction_blocks(u: Array, parameters: BrusselatorParameters) -> Array:
    """
    Per-cell ``2 x 2`` reaction Jacobians, shape ``(N*N, 2, 2)``.
    """
    U = u[:, :, 0].reshape(-1)
    V = u[:, :, 1].reshape(-1)
    blocks = np.empty((U.size, 2, 2), dtype=float)
    for (r, c), func in reaction_jacobian_functions().items():
        val = func(U, V, parameters.A, parameters.B)
        # lambdify returns a plain scalar for entries that do not depend on U, V
        blocks[:, r, c] = np.broadcast_to(np.asarray(val, dtype=float), U.shape)
    return blocks


def assemble_jacobian(
    u: Array,
    parameters: Union[BrusselatorParameters, Sequence[float]],
    grid: Grid2D,
) -> csr_matrix:
    """
    Sparse Jacobian of the right-hand side at state ``u``.

    The matrix acts on the flat state with index ``(i*N + j)*2 + c``:

        J = alpha_eff * kron(L, I_2) + blockdiag(reaction blocks)
    """
    u = np.asarray(u, dtype=float)
    if u.shape != grid.state_shape:
        raise ShapeMismatch(f"State has shape {u.shape}, expected {grid.state_shape}.")
    p = BrusselatorParameters.coerce(parameters)
    p.validate()

    lap = build_periodic_2d_laplacian(grid)
    diffusion = kron(lap, identity(2), format="csr")
    diffusion.eliminate_zeros()
    diffusion = p.alpha_eff * diffusion

    nblocks = grid.size
    reaction = bsr_matrix(
        (reaction_blocks(u, p), np.arange(nblocks), np.arange(nblocks + 1)),
        shape=(2 * nblocks, 2 * nblocks),
    )
    return (diffusion + reaction).tocsr()
